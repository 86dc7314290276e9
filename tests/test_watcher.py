"""Tests for the source watcher."""
from __future__ import annotations

import logging
import os
import time

import pytest
from watchdog.events import DirModifiedEvent, FileDeletedEvent, FileModifiedEvent, FileMovedEvent

from services.pipeline import AssetPipeline
from services.watcher import AssetEventHandler, AssetWatcher


@pytest.fixture
def watched(tmp_path):
    (tmp_path / "css").mkdir()
    (tmp_path / "js").mkdir()
    (tmp_path / "css" / "a.css").write_text(".a{color:red}", encoding="utf-8")
    (tmp_path / "js" / "app.js").write_text("var a = 1;", encoding="utf-8")
    return tmp_path


def _touch(path, offset=10):
    stat = path.stat()
    os.utime(path, (stat.st_atime, stat.st_mtime + offset))


def test_task_for_matches_source_patterns(watched):
    watcher = AssetWatcher(AssetPipeline(watched))

    assert watcher.task_for(watched / "css" / "a.css") == "css"
    assert watcher.task_for(watched / "js" / "app.js") == "js"
    assert watcher.task_for(watched / "style.min.css") is None
    assert watcher.task_for(watched / "css" / "nested" / "b.css") is None
    assert watcher.task_for(watched.parent / "css" / "a.css") is None


def test_css_change_rebuilds_css_only(watched, caplog):
    handler = AssetEventHandler(AssetWatcher(AssetPipeline(watched)))
    source = watched / "css" / "a.css"

    with caplog.at_level(logging.INFO, logger="services.watcher"):
        handler.on_any_event(FileModifiedEvent(str(source)))

    assert (watched / "style.min.css").exists()
    assert not (watched / "app.js").exists()
    assert f'File "{source}" was changed.' in caplog.text


def test_unrelated_and_directory_events_are_ignored(watched):
    watcher = AssetWatcher(AssetPipeline(watched))
    handler = AssetEventHandler(watcher)

    handler.on_any_event(DirModifiedEvent(str(watched / "css")))
    handler.on_any_event(FileModifiedEvent(str(watched / "README.md")))

    assert not (watched / "style.min.css").exists()
    assert watcher.handle([watched / "notes.txt"]) == []


def test_new_and_removed_scripts_rebuild_js(watched):
    watcher = AssetWatcher(AssetPipeline(watched))
    extra = watched / "js" / "extra.js"

    extra.write_text("var b = 2;", encoding="utf-8")
    assert watcher.handle([extra]) == ["js"]
    assert (watched / "extra.js").exists()

    extra.unlink()
    assert watcher.handle([extra]) == ["js"]


def test_deleted_source_event_rebuilds(watched):
    AssetEventHandler(AssetWatcher(AssetPipeline(watched))).on_any_event(
        FileDeletedEvent(str(watched / "js" / "gone.js"))
    )

    assert (watched / "app.js").exists()


def test_moved_file_uses_destination(watched):
    watcher = AssetWatcher(AssetPipeline(watched))
    handler = AssetEventHandler(watcher)
    target = watched / "css" / "b.css"
    target.write_text(".b{color:blue}", encoding="utf-8")

    handler.on_any_event(FileMovedEvent(str(watched / "css" / ".b.css.swp"), str(target)))

    assert ".b{color:blue}" in (watched / "style.min.css").read_text(encoding="utf-8")


def test_in_place_output_does_not_retrigger(watched):
    watcher = AssetWatcher(AssetPipeline(watched, js_output_dir="js"))
    source = watched / "js" / "app.js"

    assert watcher.handle([source]) == ["js"]
    # the event produced by our own write
    assert watcher.handle([source]) == []

    _touch(source)
    assert watcher.handle([source]) == ["js"]


def test_failed_rebuild_does_not_block_other_tasks(watched, caplog):
    bad = watched / "css" / "a.css"
    bad.write_bytes(b".a{content:'\xff\xfe'}")
    script = watched / "js" / "app.js"
    watcher = AssetWatcher(AssetPipeline(watched))

    with caplog.at_level(logging.ERROR, logger="services.watcher"):
        assert watcher.handle([bad, script]) == ["js"]
        assert watcher.handle([bad]) == []

    assert "Rebuilding css failed" in caplog.text
    assert (watched / "app.js").exists()
    assert not (watched / "style.min.css").exists()

    bad.write_text(".a{color:red}", encoding="utf-8")
    assert watcher.handle([bad]) == ["css"]


def test_failed_rebuild_on_os_error(watched, caplog, monkeypatch):
    pipeline = AssetPipeline(watched)
    watcher = AssetWatcher(pipeline)

    def broken(task):
        raise PermissionError("read-only")

    monkeypatch.setattr(pipeline, "run", broken)

    with caplog.at_level(logging.ERROR, logger="services.watcher"):
        assert watcher.handle([watched / "css" / "a.css"]) == []

    assert "Rebuilding css failed" in caplog.text


def test_observer_rebuilds_on_change(watched):
    watcher = AssetWatcher(AssetPipeline(watched), interval=0.1)
    output = watched / "style.min.css"
    watcher.start()
    try:
        time.sleep(0.2)
        (watched / "css" / "a.css").write_text(".a { color: blue; }", encoding="utf-8")

        deadline = time.monotonic() + 5
        while time.monotonic() < deadline:
            if output.exists() and "blue" in output.read_text(encoding="utf-8"):
                break
            time.sleep(0.05)
    finally:
        watcher.stop()

    assert "color:blue" in output.read_text(encoding="utf-8")
