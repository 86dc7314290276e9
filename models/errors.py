"""Error taxonomy for the now playing widget."""
from __future__ import annotations


class WidgetError(Exception):
    """Base class for recoverable widget failures."""


class FetchError(WidgetError):
    """Network or transport failure, including non-2xx responses."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class ParseError(WidgetError):
    """Response body is empty or is not valid JSON."""


class ValidationError(WidgetError):
    """Decoded payload is missing a required field."""

    def __init__(self, message: str, field_name: str | None = None) -> None:
        super().__init__(message)
        self.field_name = field_name


__all__ = ["WidgetError", "FetchError", "ParseError", "ValidationError"]
