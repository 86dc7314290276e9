"""Rendering helpers for the now playing fragment."""
from __future__ import annotations

from html import escape

from models import TrackPayload

DEFAULT_PLACEHOLDER = "{{ placeholder }}"


def track_link(payload: TrackPayload) -> str:
    """Render the anchor pointing at the current track."""
    url = escape(payload.url, quote=True)
    text = escape(payload.combined_truncated, quote=False)
    return f"<a href=\"{url}\" target=\"_blank\">{text}</a>"


def compile_template(
    template: str,
    fragment: str,
    placeholder: str = DEFAULT_PLACEHOLDER,
) -> str:
    """Replace the first occurrence of ``placeholder`` with ``fragment``.

    Markup without the placeholder is returned unchanged.
    """
    return template.replace(placeholder, fragment, 1)


__all__ = ["DEFAULT_PLACEHOLDER", "compile_template", "track_link"]
