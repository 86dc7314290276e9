"""Static file server for previewing the built page."""
from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from aiohttp import web

logger = logging.getLogger(__name__)

ROOT_KEY = web.AppKey("root", Path)


async def serve_index(request: web.Request) -> web.StreamResponse:
    index = request.app[ROOT_KEY] / "index.html"
    if index.is_file():
        return web.FileResponse(index)
    raise web.HTTPNotFound()


def create_app(root: Path) -> web.Application:
    app = web.Application()
    app[ROOT_KEY] = Path(root).resolve()
    app.router.add_get("/", serve_index)
    app.router.add_static("/", app[ROOT_KEY], show_index=True)
    return app


async def serve(root: Path, host: str, port: int) -> None:
    """Serve ``root`` until the task is cancelled."""
    runner = web.AppRunner(create_app(root))
    await runner.setup()
    site = web.TCPSite(runner, host, port)
    await site.start()
    logger.info("Serving %s on http://%s:%s", root, host, port)
    try:
        await asyncio.Event().wait()
    finally:
        await runner.cleanup()
        logger.info("Server stopped")


__all__ = ["ROOT_KEY", "create_app", "serve", "serve_index"]
