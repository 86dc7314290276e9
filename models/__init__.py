"""Models package initialization"""
from .errors import FetchError, ParseError, ValidationError, WidgetError
from .result import FetchResult
from .track import TrackPayload

__all__ = [
    'FetchError',
    'FetchResult',
    'ParseError',
    'TrackPayload',
    'ValidationError',
    'WidgetError',
]
