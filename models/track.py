"""
Data models for the now playing payload
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from .errors import ValidationError

REQUIRED_FIELDS = (("url", "url"), ("combinedTruncated", "combined_truncated"))


@dataclass(slots=True, frozen=True)
class TrackPayload:
    """Track currently playing, as returned by the remote endpoint"""
    url: str
    combined_truncated: str

    @classmethod
    def from_payload(cls, data: Any) -> "TrackPayload":
        """Build a payload from decoded JSON, rejecting missing or blank fields."""
        if not isinstance(data, Mapping):
            raise ValidationError(
                f"Expected a JSON object, got {type(data).__name__}"
            )

        values: dict[str, str] = {}
        for key, attribute in REQUIRED_FIELDS:
            value = data.get(key)
            if not isinstance(value, str) or not value.strip():
                raise ValidationError(f"Missing required field '{key}'", field_name=key)
            values[attribute] = value.strip()

        return cls(**values)
