import asyncio
import logging
from typing import Optional

from aiohttp import web

import config
from api.handlers import routes
from services.credit_service import CreditTable, load_credit_table
from services.session_service import PortalSessionStore

logging.basicConfig(level=config.LOG_LEVEL)
logger = logging.getLogger(__name__)


def create_app(credits: Optional[CreditTable] = None,
               sessions: Optional[PortalSessionStore] = None) -> web.Application:
    app = web.Application()
    app["credits"] = credits if credits is not None else load_credit_table(config.CREDITS_CSV_PATH)
    app["sessions"] = sessions if sessions is not None else PortalSessionStore(ttl_seconds=config.SESSION_TTL_SECONDS)
    app.add_routes(routes)

    async def close_sessions(app: web.Application):
        app["sessions"].close_all()

    app.on_cleanup.append(close_sessions)
    return app


async def main():
    app = create_app()

    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, config.HOST, config.PORT)
    await site.start()

    logger.info(f"Server running on port {config.PORT}")
    logger.info(f"Demo mode available at: http://localhost:{config.PORT}/api/demo")
    try:
        await asyncio.Event().wait()
    finally:
        await runner.cleanup()


if __name__ == "__main__":
    asyncio.run(main())
