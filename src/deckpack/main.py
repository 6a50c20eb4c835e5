"""FastAPI application entry point."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .api import router
from .api.dependencies import get_asset_store
from .config import settings
from .utils.logging import get_logger, setup_logging

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan context manager."""
    setup_logging(level=settings.log_level, log_format=settings.log_format)
    store = get_asset_store()
    store.ensure_directories()
    logger.info("server_started", assets_dir=str(store.root))
    yield


app = FastAPI(
    title="deckpack API",
    description="Portable deck packages with content-addressed assets",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition", "ETag", "X-Asset-Count", "X-Conversion-Warnings"],
)

app.include_router(router)


@app.get("/health")
async def health_check() -> dict:
    """Health check endpoint."""
    return {"status": "healthy", "version": __version__}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "deckpack.main:app",
        host=settings.host,
        port=settings.port,
        reload=True,
    )
