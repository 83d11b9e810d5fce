"""FastAPI application entry point for WebAffe Console."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from webaffe_console import __version__
from webaffe_console.api.admin import router as admin_router
from webaffe_console.api.auth import get_listener
from webaffe_console.api.routes import router
from webaffe_console.config import get_settings

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    logger.info(f"Starting WebAffe Console v{__version__}")
    settings = get_settings()
    logger.info(f"Debug mode: {settings.debug}")
    if not settings.bootstrap_admin_email:
        logger.warning("BOOTSTRAP_ADMIN_EMAIL not set; no account will be auto-promoted")

    # Subscribes to identity changes and resolves the persisted session
    listener = get_listener()
    listener.start()

    yield

    # Shutdown
    await listener.wait_idle()
    logger.info("Shutting down WebAffe Console")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="WebAffe Console",
        description="Authentication gate and admin console",
        version=__version__,
        lifespan=lifespan,
        debug=settings.debug,
    )

    # Browser front-end
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.site_url],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router)
    app.include_router(admin_router)

    return app


# Create app instance for uvicorn
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "webaffe_console.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
