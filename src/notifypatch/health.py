"""
Liveness endpoint for external uptime monitors.

GET / answers with a static body as long as the process is running.
"""

import logging

from aiohttp import web

logger = logging.getLogger(__name__)

ALIVE_MESSAGE = "✅ Bot is alive!"


async def live_handler(request: web.Request) -> web.Response:
    """Handle / (always OK while the server is up)."""
    return web.Response(text=ALIVE_MESSAGE, status=200)


def create_health_app() -> web.Application:
    app = web.Application()
    app.router.add_get("/", live_handler)
    return app


async def start_health_server(port: int = 3000, host: str = "0.0.0.0") -> web.AppRunner:
    """Start the liveness server; the caller must `await runner.cleanup()`."""
    runner = web.AppRunner(create_health_app())
    await runner.setup()

    site = web.TCPSite(runner, host, port)
    await site.start()

    logger.info(f"Health server listening on http://{host}:{port}")
    return runner
