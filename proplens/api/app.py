"""FastAPI application for PropLens"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from ..config.settings import Settings, get_settings
from ..container import Container, build_container
from ..utils.logging import configure_logging, get_logger
from .routes import router

logger = get_logger(__name__)


def create_app(settings: Optional[Settings] = None, container: Optional[Container] = None) -> FastAPI:
    """
    Build the app. A prebuilt container is used as-is (already started);
    otherwise one is built from settings and started in the lifespan.
    """
    settings = settings or (container.settings if container else get_settings())
    configure_logging(json_logs=settings.LOG_JSON, debug=settings.DEBUG)
    owns_container = container is None

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if owns_container:
            app.state.container = build_container(settings)
            await app.state.container.start(create_tables=settings.ENVIRONMENT == "development")
        logger.info("api_started", environment=settings.ENVIRONMENT, version=__version__)
        yield
        if owns_container:
            await app.state.container.close()
        logger.info("api_stopped")

    app = FastAPI(
        title="PropLens API",
        description="Real estate market data, investment analytics and AI agents",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router, prefix="/api")
    if not owns_container:
        app.state.container = container
    return app
