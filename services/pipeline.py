"""Asset pipeline: concatenate and minify stylesheets, minify scripts."""
from __future__ import annotations

import logging
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

import rcssmin
import rjsmin

from config import settings

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class BuildReport:
    """Summary of the tasks executed by a pipeline run."""

    tasks: List[str] = field(default_factory=list)
    sources: List[Path] = field(default_factory=list)
    outputs: List[Path] = field(default_factory=list)

    def merge(self, other: "BuildReport") -> "BuildReport":
        self.tasks.extend(other.tasks)
        self.sources.extend(other.sources)
        self.outputs.extend(other.outputs)
        return self


def write_atomic(path: Path, content: str) -> None:
    """Write ``content`` through a temporary file renamed into place."""
    path.parent.mkdir(parents=True, exist_ok=True)
    handle = tempfile.NamedTemporaryFile(
        "w",
        encoding="utf-8",
        dir=path.parent,
        prefix=f".{path.name}.",
        suffix=".tmp",
        delete=False,
    )
    try:
        with handle:
            handle.write(content)
        os.replace(handle.name, path)
    except BaseException:
        Path(handle.name).unlink(missing_ok=True)
        raise


class AssetPipeline:
    """Build the stylesheet and script artifacts served with the page."""

    def __init__(
        self,
        root: Optional[Path] = None,
        *,
        css_sources: Optional[str] = None,
        js_sources: Optional[str] = None,
        css_concat_output: Optional[str] = None,
        css_output: Optional[str] = None,
        js_output_dir: Optional[str] = None,
    ) -> None:
        self.root = Path(root) if root is not None else settings.ASSET_ROOT
        self.css_sources = css_sources or settings.CSS_SOURCES
        self.js_sources = js_sources or settings.JS_SOURCES
        self.css_concat_output = (
            settings.CSS_CONCAT_OUTPUT if css_concat_output is None else css_concat_output
        )
        self.css_output = css_output or settings.CSS_OUTPUT
        self.js_output_dir = js_output_dir or settings.JS_OUTPUT_DIR

    def collect(self, pattern: str) -> List[Path]:
        return sorted(path for path in self.root.glob(pattern) if path.is_file())

    def build_css(self) -> BuildReport:
        """Concatenate every stylesheet and write the minified result."""
        report = BuildReport(tasks=["css"])
        sources = self.collect(self.css_sources)
        if not sources:
            logger.warning("No stylesheets match %s in %s", self.css_sources, self.root)
            return report
        report.sources.extend(sources)

        combined = "\n".join(path.read_text(encoding="utf-8") for path in sources)

        if self.css_concat_output:
            concat_path = self.root / self.css_concat_output
            write_atomic(concat_path, combined)
            report.outputs.append(concat_path)

        minified = rcssmin.cssmin(combined)
        output_path = self.root / self.css_output
        write_atomic(output_path, minified)
        report.outputs.append(output_path)

        logger.info(
            "Built %s from %s stylesheets (%s -> %s bytes)",
            output_path.name,
            len(sources),
            len(combined),
            len(minified),
        )
        return report

    def build_js(self) -> BuildReport:
        """Minify each script into the output directory, keeping its name."""
        report = BuildReport(tasks=["js"])
        sources = self.collect(self.js_sources)
        if not sources:
            logger.warning("No scripts match %s in %s", self.js_sources, self.root)
            return report

        output_dir = self.root / self.js_output_dir
        for source in sources:
            minified = rjsmin.jsmin(source.read_text(encoding="utf-8"))
            target = output_dir / source.name
            write_atomic(target, minified)
            report.sources.append(source)
            report.outputs.append(target)
            logger.info("Minified %s -> %s", source.relative_to(self.root), target)

        return report

    def build(self) -> BuildReport:
        report = self.build_js()
        return report.merge(self.build_css())

    def run(self, task: str) -> BuildReport:
        tasks = {"css": self.build_css, "js": self.build_js, "build": self.build}
        try:
            runner = tasks[task]
        except KeyError as exc:
            raise ValueError(f"Unknown task '{task}'") from exc
        return runner()


__all__ = ["AssetPipeline", "BuildReport", "write_atomic"]
