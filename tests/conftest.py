"""Pytest configuration and fixtures."""
from __future__ import annotations

import pytest

from config import settings
from models import FetchResult, TrackPayload
from services.page import Page


@pytest.fixture(autouse=True)
def mock_env_vars(monkeypatch) -> None:
    """Set up test environment variables"""
    monkeypatch.setenv('NOW_PLAYING_URL', 'http://now-playing.test/jam')
    monkeypatch.setenv('REQUEST_TIMEOUT', '5')
    monkeypatch.setenv('WATCH_INTERVAL_SECONDS', '1')
    monkeypatch.delenv('PLACEHOLDER', raising=False)
    monkeypatch.delenv('CSS_CONCAT_OUTPUT', raising=False)
    monkeypatch.delenv('CSS_OUTPUT', raising=False)
    settings.reload()


@pytest.fixture
def sample_html() -> str:
    """Page with the trigger, display and hidden wrapper elements"""
    return """
    <html>
        <body>
            <div id="content">
                <h1>Hello</h1>
                <p id="music" class="small hidden"><span id="jam">Now playing: {{ placeholder }}</span></p>
            </div>
        </body>
    </html>
    """


@pytest.fixture
def page(sample_html) -> Page:
    return Page.from_html(sample_html)


@pytest.fixture
def track() -> TrackPayload:
    return TrackPayload(url="http://x/1", combined_truncated="Artist – Track")


class StubClient:
    """Track source that records calls and returns a fixed result."""

    def __init__(self, result: FetchResult) -> None:
        self.result = result
        self.calls: list[str] = []

    async def fetch(self, url: str) -> FetchResult:
        self.calls.append(url)
        return self.result


@pytest.fixture
def stub_client(track) -> StubClient:
    return StubClient(FetchResult.success(track))
