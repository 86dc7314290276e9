"""Headless page model: element lookup, markup, classes and events."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional

from bs4 import BeautifulSoup
from bs4.element import Tag

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class Event:
    """Interaction event passed to listeners."""

    type: str
    target: "PageElement"


EventHandler = Callable[[Event], None]


class PageElement:
    """Wrapper around a parsed tag that also carries event listeners."""

    def __init__(self, tag: Tag) -> None:
        self.tag = tag
        self._listeners: Dict[str, List[EventHandler]] = {}

    def __repr__(self) -> str:
        return f"<PageElement {self.tag.name}#{self.id}>"

    @property
    def id(self) -> Optional[str]:
        return self.tag.get("id")

    @property
    def inner_html(self) -> str:
        return self.tag.decode_contents()

    @inner_html.setter
    def inner_html(self, markup: str) -> None:
        fragment = BeautifulSoup(markup, "html.parser")
        self.tag.clear()
        for node in list(fragment.contents):
            self.tag.append(node.extract())

    @property
    def classes(self) -> List[str]:
        value = self.tag.get("class") or []
        if isinstance(value, str):
            value = value.split()
        return list(value)

    def has_class(self, name: str) -> bool:
        return name in self.classes

    def toggle_class(self, name: str) -> bool:
        """Add or remove ``name``; return whether it is present afterwards."""
        classes = self.classes
        if name in classes:
            classes = [value for value in classes if value != name]
            present = False
        else:
            classes.append(name)
            present = True

        if classes:
            self.tag["class"] = classes
        elif "class" in self.tag.attrs:
            del self.tag["class"]
        return present

    def add_event_listener(self, event: str, handler: EventHandler) -> bool:
        """Register ``handler``; a handler already registered for ``event`` is ignored."""
        handlers = self._listeners.setdefault(event, [])
        if handler in handlers:
            return False
        handlers.append(handler)
        return True

    def remove_event_listener(self, event: str, handler: EventHandler) -> bool:
        handlers = self._listeners.get(event)
        if not handlers or handler not in handlers:
            return False
        handlers.remove(handler)
        return True

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event, ()))

    def dispatch(self, event: str) -> int:
        """Run the listeners for ``event`` and return how many ran."""
        handlers = list(self._listeners.get(event, ()))
        for handler in handlers:
            handler(Event(type=event, target=self))
        return len(handlers)


class Page:
    """Parsed HTML document with stable element handles."""

    def __init__(self, soup: BeautifulSoup) -> None:
        self.soup = soup
        self._elements: Dict[str, PageElement] = {}

    @classmethod
    def from_html(cls, markup: str) -> "Page":
        return cls(BeautifulSoup(markup, "html.parser"))

    @classmethod
    def from_file(cls, path: Path | str) -> "Page":
        path = Path(path)
        logger.debug("Loading page %s", path)
        return cls.from_html(path.read_text(encoding="utf-8"))

    def get_element_by_id(self, element_id: str) -> PageElement:
        element = self._elements.get(element_id)
        if element is not None:
            return element

        tag = self.soup.find(id=element_id)
        if not isinstance(tag, Tag):
            raise LookupError(f"No element with id '{element_id}'")

        element = PageElement(tag)
        self._elements[element_id] = element
        return element

    def html(self) -> str:
        return str(self.soup)


__all__ = ["Event", "EventHandler", "Page", "PageElement"]
