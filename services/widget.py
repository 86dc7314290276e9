"""One-shot widget that loads the track currently playing on first interaction."""
from __future__ import annotations

import asyncio
import logging
import weakref
from enum import Enum
from typing import Optional, Protocol

from config import settings
from models import FetchResult, TrackPayload, WidgetError
from services.client import NowPlayingClient
from services.page import Event, PageElement
from services.template import compile_template, track_link

logger = logging.getLogger(__name__)


class TrackSource(Protocol):
    async def fetch(self, url: str) -> FetchResult: ...


class WidgetState(str, Enum):
    IDLE = "idle"
    ARMED = "armed"
    PENDING = "pending"
    RESOLVED = "resolved"
    FAILED = "failed"


class NowPlayingWidget:
    """Fetch the current track once and reveal it inside the page."""

    def __init__(
        self,
        trigger: PageElement,
        display: PageElement,
        wrapper: PageElement,
        endpoint_url: str,
        *,
        client: Optional[TrackSource] = None,
        placeholder: Optional[str] = None,
        hidden_class: Optional[str] = None,
        event: Optional[str] = None,
    ) -> None:
        self.trigger = trigger
        self.display = display
        self.wrapper = wrapper
        self.endpoint_url = endpoint_url
        self.client: TrackSource = client or NowPlayingClient()
        self.placeholder = placeholder or settings.PLACEHOLDER
        self.hidden_class = hidden_class or settings.HIDDEN_CLASS
        self.event = event or settings.TRIGGER_EVENT
        self.state = WidgetState.IDLE
        self.last_error: Optional[WidgetError] = None
        self._armed = False
        self._task: Optional[asyncio.Task[FetchResult]] = None

    @property
    def armed(self) -> bool:
        return self._armed

    def arm(self) -> "NowPlayingWidget":
        """Register the interaction handler; repeated calls are no-ops."""
        if self.state is not WidgetState.IDLE:
            return self
        self._armed = True
        self.state = WidgetState.ARMED
        self.trigger.add_event_listener(self.event, self._on_interaction)
        logger.debug("Armed now playing widget on %r", self.trigger)
        return self

    def _on_interaction(self, event: Event) -> None:
        if not self._armed:
            return
        loop = asyncio.get_running_loop()
        self._armed = False
        self.trigger.remove_event_listener(self.event, self._on_interaction)
        self.state = WidgetState.PENDING

        logger.info("Loading now playing from %s", self.endpoint_url)
        self._task = loop.create_task(self._load())

    async def _load(self) -> FetchResult:
        result = await self.client.fetch(self.endpoint_url)
        if result.payload is None:
            self.last_error = result.error
            self.state = WidgetState.FAILED
            logger.warning(
                "Now playing unavailable (%s): %s",
                type(result.error).__name__,
                result.error,
            )
            return result

        self.render(result.payload)
        self.state = WidgetState.RESOLVED
        return result

    def render(self, payload: TrackPayload) -> bool:
        """Substitute the track link and toggle the wrapper; return its visibility."""
        template = self.display.inner_html
        if self.placeholder not in template:
            logger.debug("Placeholder %r not found in %r", self.placeholder, self.display)
        self.display.inner_html = compile_template(template, track_link(payload), self.placeholder)

        hidden = self.wrapper.toggle_class(self.hidden_class)
        logger.info("Now playing: %s", payload.combined_truncated)
        return not hidden

    async def wait(self) -> Optional[FetchResult]:
        """Wait for the pending request, if one was triggered."""
        if self._task is None:
            return None
        return await self._task


_armed_widgets: "weakref.WeakKeyDictionary[PageElement, NowPlayingWidget]" = weakref.WeakKeyDictionary()


def arm(
    trigger: PageElement,
    display: PageElement,
    wrapper: PageElement,
    endpoint_url: str,
    **options,
) -> NowPlayingWidget:
    """Create and arm a widget, reusing the one already armed on ``trigger``."""
    existing = _armed_widgets.get(trigger)
    if existing is not None:
        if (existing.display, existing.wrapper, existing.endpoint_url) != (display, wrapper, endpoint_url):
            logger.warning("Trigger %r already carries a widget; ignoring new arguments", trigger)
        return existing

    widget = NowPlayingWidget(trigger, display, wrapper, endpoint_url, **options)
    _armed_widgets[trigger] = widget
    return widget.arm()


__all__ = ["NowPlayingWidget", "TrackSource", "WidgetState", "arm"]
