"""Source watcher that rebuilds assets when files change."""
from __future__ import annotations

import logging
import os
import threading
from pathlib import Path, PurePath
from typing import Dict, Iterable, List, Optional

from watchdog.events import (
    EVENT_TYPE_CREATED,
    EVENT_TYPE_DELETED,
    EVENT_TYPE_MODIFIED,
    EVENT_TYPE_MOVED,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer

from config import settings
from services.pipeline import AssetPipeline

logger = logging.getLogger(__name__)

WATCHED_EVENTS = (EVENT_TYPE_CREATED, EVENT_TYPE_DELETED, EVENT_TYPE_MODIFIED, EVENT_TYPE_MOVED)


def _mtime(path: Path) -> Optional[float]:
    try:
        return path.stat().st_mtime
    except OSError:
        return None


class AssetEventHandler(FileSystemEventHandler):
    """Forward file system events under the asset root to the watcher."""

    def __init__(self, watcher: "AssetWatcher") -> None:
        super().__init__()
        self.watcher = watcher

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.is_directory or event.event_type not in WATCHED_EVENTS:
            return
        paths = [event.src_path]
        dest_path = getattr(event, "dest_path", "")
        if dest_path:
            paths.append(dest_path)
        self.watcher.handle(Path(os.fsdecode(path)) for path in paths)


class AssetWatcher:
    """Rerun the css or js task when one of its sources changes."""

    def __init__(self, pipeline: AssetPipeline, interval: Optional[float] = None) -> None:
        self.pipeline = pipeline
        self.root = pipeline.root.resolve()
        self.patterns = {
            "css": pipeline.css_sources,
            "js": pipeline.js_sources,
        }
        self.interval = interval or settings.WATCH_INTERVAL_SECONDS
        self._observer: Optional[Observer] = None
        self._lock = threading.Lock()
        # outputs as written by the last build, so in-place outputs do not retrigger it
        self._written: Dict[Path, Optional[float]] = {}

    def task_for(self, path: Path) -> Optional[str]:
        try:
            relative = path.resolve().relative_to(self.root)
        except ValueError:
            return None
        for task, pattern in self.patterns.items():
            if len(relative.parts) == len(PurePath(pattern).parts) and relative.match(pattern):
                return task
        return None

    def handle(self, paths: Iterable[Path]) -> List[str]:
        """Rebuild the tasks matching ``paths``; return the tasks that succeeded."""
        tasks: List[str] = []
        for path in paths:
            task = self.task_for(path)
            if task is None:
                continue
            resolved = path.resolve()
            if resolved in self._written and self._written[resolved] == _mtime(resolved):
                continue
            logger.info('File "%s" was changed.', path)
            if task not in tasks:
                tasks.append(task)
        return [task for task in tasks if self.rebuild(task)]

    def rebuild(self, task: str) -> bool:
        with self._lock:
            try:
                report = self.pipeline.run(task)
            except (OSError, ValueError):
                logger.exception("Rebuilding %s failed", task)
                return False
            for output in report.outputs:
                resolved = output.resolve()
                self._written[resolved] = _mtime(resolved)
        return True

    def start(self) -> None:
        if self._observer is not None:
            return
        observer = Observer(timeout=self.interval)
        observer.schedule(AssetEventHandler(self), str(self.root), recursive=True)
        observer.start()
        self._observer = observer
        logger.info("Watching %s and %s under %s", *self.patterns.values(), self.root)

    def stop(self) -> None:
        if self._observer is None:
            return
        self._observer.stop()
        self._observer.join()
        self._observer = None
        logger.info("Watcher stopped")


__all__ = ["AssetEventHandler", "AssetWatcher"]
