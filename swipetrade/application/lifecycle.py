from contextlib import asynccontextmanager
import logging
from fastapi import FastAPI
from swipetrade.application.container import container
from swipetrade.commons.enums.trade_enums import StoreBackendEnum

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting application...")
    settings = container.config()
    uses_postgres = settings.store_backend == StoreBackendEnum.POSTGRES

    try:
        # 1) Database first, so the first swipe never waits on schema creation
        if uses_postgres:
            await container.db_client().init()
            logger.info("Database initialized successfully")
        else:
            logger.warning("Using in-memory record store; nothing will be persisted")

        yield

    except Exception as e:
        logger.error(f"Error during startup: {str(e)}")
        raise

    finally:
        logger.info("Shutting down application...")

        for name, provider in (("swap client", container.swap_client),
                               ("discovery client", container.discovery)):
            try:
                await provider().close()
            except Exception as e:
                logger.error(f"Error closing {name}: {e}")

        if uses_postgres:
            await container.db_client().close()
        logger.info("Application shut down successfully")
