"""Configuration helpers for environment-driven settings."""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

if os.getenv("PYTEST_CURRENT_TEST") is None:
    load_dotenv()


def _resolve_path(value: str) -> Path:
    path = Path(value)
    if not path.is_absolute():
        path = Path.cwd() / path
    return path


def _required(name: str, default: str) -> str:
    value = os.getenv(name, default).strip()
    if not value:
        raise ValueError(f"{name} cannot be empty")
    return value


@dataclass(slots=True)
class Settings:
    """Runtime application settings sourced from environment variables."""

    NOW_PLAYING_URL: str = field(init=False)
    TRIGGER_ID: str = field(init=False)
    DISPLAY_ID: str = field(init=False)
    WRAPPER_ID: str = field(init=False)
    HIDDEN_CLASS: str = field(init=False)
    TRIGGER_EVENT: str = field(init=False)
    PLACEHOLDER: str = field(init=False)
    REQUEST_TIMEOUT: float = field(init=False)
    ASSET_ROOT: Path = field(init=False)
    CSS_SOURCES: str = field(init=False)
    JS_SOURCES: str = field(init=False)
    CSS_CONCAT_OUTPUT: str = field(init=False)
    CSS_OUTPUT: str = field(init=False)
    JS_OUTPUT_DIR: str = field(init=False)
    HOST: str = field(init=False)
    PORT: int = field(init=False)
    WATCH_INTERVAL_SECONDS: float = field(init=False)

    def __post_init__(self) -> None:
        self.reload()

    def reload(self) -> None:
        url = _required("NOW_PLAYING_URL", "http://info.aliou.me/jam")
        if not url.startswith(("http://", "https://")):
            raise ValueError("NOW_PLAYING_URL must be an http(s) URL")
        self.NOW_PLAYING_URL = url

        self.TRIGGER_ID = _required("TRIGGER_ID", "content")
        self.DISPLAY_ID = _required("DISPLAY_ID", "jam")
        self.WRAPPER_ID = _required("WRAPPER_ID", "music")
        self.HIDDEN_CLASS = _required("HIDDEN_CLASS", "hidden")
        self.TRIGGER_EVENT = _required("TRIGGER_EVENT", "mouseover")
        # not stripped: surrounding spaces are part of the token
        placeholder = os.getenv("PLACEHOLDER", "{{ placeholder }}")
        if not placeholder.strip():
            raise ValueError("PLACEHOLDER cannot be empty")
        self.PLACEHOLDER = placeholder

        try:
            timeout = float(os.getenv("REQUEST_TIMEOUT", "0"))
        except ValueError as exc:
            raise ValueError("REQUEST_TIMEOUT must be a number") from exc
        if timeout < 0:
            raise ValueError("REQUEST_TIMEOUT cannot be negative")
        self.REQUEST_TIMEOUT = timeout

        self.ASSET_ROOT = _resolve_path(os.getenv("ASSET_ROOT", ".").strip() or ".")
        self.CSS_SOURCES = _required("CSS_SOURCES", "css/*.css")
        self.JS_SOURCES = _required("JS_SOURCES", "js/*.js")
        # empty means the concatenated stylesheet is not kept
        self.CSS_CONCAT_OUTPUT = os.getenv("CSS_CONCAT_OUTPUT", "style.css").strip()
        self.CSS_OUTPUT = _required("CSS_OUTPUT", "style.min.css")
        self.JS_OUTPUT_DIR = os.getenv("JS_OUTPUT_DIR", ".").strip() or "."

        self.HOST = _required("HOST", "0.0.0.0")
        try:
            port = int(os.getenv("PORT", "8000"))
        except ValueError as exc:
            raise ValueError("PORT must be an integer") from exc
        if not 0 < port < 65536:
            raise ValueError("PORT must be between 1 and 65535")
        self.PORT = port

        try:
            interval = float(os.getenv("WATCH_INTERVAL_SECONDS", "1.0"))
        except ValueError as exc:
            raise ValueError("WATCH_INTERVAL_SECONDS must be a number") from exc
        if interval <= 0:
            raise ValueError("WATCH_INTERVAL_SECONDS must be positive")
        self.WATCH_INTERVAL_SECONDS = interval

    def validate(self) -> None:
        if self.CSS_CONCAT_OUTPUT and self.CSS_CONCAT_OUTPUT == self.CSS_OUTPUT:
            raise ValueError("CSS_CONCAT_OUTPUT and CSS_OUTPUT must differ; leave CSS_CONCAT_OUTPUT empty instead")

settings = Settings()
