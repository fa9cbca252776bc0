from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from finance_tracker.api.routes import analytics, categories, transactions
from finance_tracker.core import settings
from finance_tracker.integration.supabase import SupabaseClient
from finance_tracker.logger import get_logger, setup_logging
from finance_tracker.services.entry import TransactionEntryService

logger = get_logger(__name__)


def create_app() -> FastAPI:
    setup_logging()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        logger.info("Initializing services...")
        settings.log_environment()

        store = SupabaseClient()
        if not store.is_configured:
            logger.warning(
                "SUPABASE_URL or SUPABASE_KEY not set. Parsing works against an empty category set; "
                "saving and listing transactions are disabled."
            )

        app.state.store = store
        app.state.entry_service = TransactionEntryService(store=store)

        logger.info("Services initialized.")
        yield
        await store.aclose()
        logger.info("Service shutting down.")

    app = FastAPI(title="Finance Tracker", lifespan=lifespan)

    app.include_router(transactions.router)
    app.include_router(categories.router)
    app.include_router(analytics.router)

    return app


app = create_app()
