"""Services package initialization"""
from .client import NowPlayingClient
from .page import Page, PageElement
from .pipeline import AssetPipeline, BuildReport
from .watcher import AssetWatcher
from .widget import NowPlayingWidget, WidgetState, arm

__all__ = [
    "AssetPipeline",
    "AssetWatcher",
    "BuildReport",
    "NowPlayingClient",
    "NowPlayingWidget",
    "Page",
    "PageElement",
    "WidgetState",
    "arm",
]
