import argparse
import asyncio
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from config import settings
from services import AssetPipeline, AssetWatcher, NowPlayingClient, Page, arm
from services.server import serve

# ensure logs are recorded both to stdout and to a rotating file
def configure_logging() -> None:
    log_dir = Path(os.getenv("LOG_DIR", "logs"))
    if not log_dir.is_absolute():
        log_dir = Path.cwd() / log_dir
    log_dir.mkdir(parents=True, exist_ok=True)

    log_file = log_dir / "nowplaying.log"

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
        handlers=[
            logging.StreamHandler(),
            RotatingFileHandler(
                log_file,
                maxBytes=5 * 1024 * 1024,
                backupCount=3,
                encoding="utf-8",
            ),
        ],
        force=True,
    )


logger = logging.getLogger("nowplaying")


async def run_server() -> None:
    await serve(settings.ASSET_ROOT, settings.HOST, settings.PORT)


async def run_watch() -> None:
    pipeline = AssetPipeline()
    pipeline.build()
    watcher = AssetWatcher(pipeline)
    watcher.start()
    try:
        await run_server()
    finally:
        watcher.stop()


async def run_preview(page_path: Path) -> int:
    """Load a page, trigger the widget once and print the resulting markup."""
    page = Page.from_file(page_path)
    client = NowPlayingClient()
    try:
        widget = arm(
            page.get_element_by_id(settings.TRIGGER_ID),
            page.get_element_by_id(settings.DISPLAY_ID),
            page.get_element_by_id(settings.WRAPPER_ID),
            settings.NOW_PLAYING_URL,
            client=client,
        )
        widget.trigger.dispatch(widget.event)
        result = await widget.wait()
    finally:
        await client.close()

    print(page.html())
    return 0 if result is not None and result.ok else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nowplaying",
        description="Build assets, serve them, or preview the now playing widget.",
    )
    parser.add_argument(
        "task",
        nargs="?",
        default="build",
        choices=("build", "css", "js", "server", "watch", "preview"),
    )
    parser.add_argument(
        "page",
        nargs="?",
        default="index.html",
        help="page used by the preview task",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging()
    settings.validate()

    if args.task in ("build", "css", "js"):
        report = AssetPipeline().run(args.task)
        logger.info("Finished %s: %s outputs", ", ".join(report.tasks), len(report.outputs))
        return 0
    if args.task == "server":
        asyncio.run(run_server())
        return 0
    if args.task == "watch":
        asyncio.run(run_watch())
        return 0
    return asyncio.run(run_preview(settings.ASSET_ROOT / args.page))


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        logger.info("Stopped by user")
    except Exception:
        logger.exception("Fatal error")
        sys.exit(1)
