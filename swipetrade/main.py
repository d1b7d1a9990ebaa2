"""Entry point for the swipetrade HTTP service."""
import logging
import logging.config

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from swipetrade.application.container import container
from swipetrade.application.lifecycle import lifespan
from swipetrade.application.module_registry import register_modules

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    settings = container.config()
    logging.config.dictConfig(settings.get_logging_config())

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    register_modules(app)
    logger.info(f"{settings.app_name} {settings.app_version} ({settings.environment.value}) ready")
    return app


def main() -> None:
    uvicorn.run("swipetrade.main:create_app", factory=True, host="0.0.0.0", port=8000)


if __name__ == "__main__":
    main()
