"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import get_settings
from app.infrastructure.dependencies import get_client_store
from app.infrastructure.logging.log_config import setup_logging
from app.presentation.api.v1.router import router as v1_router

logger = logging.getLogger(__name__)


async def _prepare_storage() -> None:
    """Create what the configured storage backend needs before the first load.

    The file backend needs its directory; the database backend needs its
    tables (and, for SQLite, the directory holding the database file).
    """
    settings = get_settings()
    if settings.storage_backend == "file":
        Path(settings.storage_dir).mkdir(parents=True, exist_ok=True)
        return

    from app.infrastructure.database import Base, engine

    if settings.database_url.startswith("sqlite:///"):
        db_path = Path(settings.database_url.removeprefix("sqlite:///"))
        db_path.parent.mkdir(parents=True, exist_ok=True)

    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    except Exception as exc:
        # load() degrades to an empty collection when storage is unreachable
        logger.warning("Could not prepare database storage: %s", exc)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan — configure logging, prepare storage, load clients."""
    setup_logging()

    await _prepare_storage()

    store = get_client_store()
    await store.load()

    yield

    if get_settings().storage_backend == "database":
        from app.infrastructure.database import engine

        await engine.dispose()


def create_app() -> FastAPI:
    """Factory function that builds and configures the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_title,
        version=settings.app_version,
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Mount API routes
    app.include_router(v1_router, prefix="/api")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8020,
        reload=True,
    )
