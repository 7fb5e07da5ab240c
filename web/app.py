"""aiohttp application factory and server entry point."""
import asyncio
import logging

from aiohttp import web

from core.config import settings
from core.logging_config import setup_logging
from database import close_db, create_engine, create_session_maker, init_db
from database.store import EntityStore
from services.analytics import ClientAnalyticsService
from services.booking import SchedulingEngine
from services.cash_ledger import CashLedger
from services.notifications import NotificationDispatcher
from web.api import setup_routes
from web.middlewares import auth_middleware, error_middleware

logger = logging.getLogger(__name__)


def build_app(store: EntityStore, config=None) -> web.Application:
    """Wire the engine components around one store and expose them over HTTP."""
    app = web.Application(middlewares=[error_middleware, auth_middleware])
    notifications = NotificationDispatcher(store)
    ledger = CashLedger(store)

    app["config"] = config or settings
    app["store"] = store
    app["notifications"] = notifications
    app["ledger"] = ledger
    app["engine"] = SchedulingEngine(store, notifications=notifications, ledger=ledger)
    app["analytics"] = ClientAnalyticsService(store)

    setup_routes(app)
    return app


async def main():
    setup_logging(settings)

    engine = create_engine()
    await init_db(engine)
    store = EntityStore(create_session_maker(engine))
    await store.seed_defaults()

    app = build_app(store)
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, settings.api_host, settings.api_port)
    await site.start()
    logger.info(f"API listening on {settings.api_host}:{settings.api_port}")

    try:
        await asyncio.Event().wait()
    finally:
        await runner.cleanup()
        await close_db(engine)


def run():
    asyncio.run(main())


if __name__ == "__main__":
    run()
