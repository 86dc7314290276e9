"""Outcome of a single now playing request."""
from __future__ import annotations

from dataclasses import dataclass

from .errors import WidgetError
from .track import TrackPayload


@dataclass(slots=True, frozen=True)
class FetchResult:
    """Either a decoded payload or the error that prevented one."""

    payload: TrackPayload | None = None
    error: WidgetError | None = None

    def __post_init__(self) -> None:
        if (self.payload is None) == (self.error is None):
            raise ValueError("FetchResult needs exactly one of payload or error")

    @classmethod
    def success(cls, payload: TrackPayload) -> "FetchResult":
        return cls(payload=payload)

    @classmethod
    def failure(cls, error: WidgetError) -> "FetchResult":
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None
