import asyncio
import inspect
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from openai import AsyncOpenAI

from routes.item_route import router as item_router
from routes.match_route import router as match_router
from routes.session_route import router as session_router
from routes.storage_route import router as storage_router
from dal.item_dal import ItemDAL
from services.label_cache import CachingLabelDetector, LabelCache
from services.object_store import LocalObjectStore
from services.openai.label_detector import LabelDetector
from services.session_store import SessionStore
from utils.app_settings import AppSettings
from utils.database_init import AsyncDatabaseInitializer
from utils.storage_sweeper import StorageSweeper

LOGGER = logging.getLogger(__name__)


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def create_app(settings: Optional[AppSettings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application instance.

    Settings are read from the environment (and `.env`) at startup unless
    passed in explicitly.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Lifespan manager to initialize:
          - the item database at <DATABASE_DIR>/app.db
          - the local object store and the OpenAI label detector
          - the in-memory session store and the optional storage sweeper
        and attach them to `app.state`.
        """
        resolved = settings or AppSettings.from_env()
        _configure_logging(resolved.log_level)
        app.state.settings = resolved

        db_initializer = AsyncDatabaseInitializer(resolved.database_dir, table=resolved.item_table)
        await db_initializer.ensure_database()
        app.state.db_initializer = db_initializer

        try:
            openai_client = AsyncOpenAI()
        except Exception as exc:
            raise RuntimeError("Failed to initialize OpenAI Async client; is OPENAI_API_KEY set?") from exc
        app.state.openai_client = openai_client

        store = LocalObjectStore(resolved.storage_dir, resolved.storage_region, resolved.public_base_url)
        app.state.object_store = store

        detector = LabelDetector(openai_client, store, model=resolved.openai_model)
        if resolved.label_cache_enabled:
            app.state.label_cache = LabelCache()
            app.state.label_detector = CachingLabelDetector(detector, app.state.label_cache)
        else:
            app.state.label_cache = None
            app.state.label_detector = detector

        app.state.session_store = SessionStore(ttl_seconds=resolved.session_ttl_seconds)

        sweep_task = None
        if resolved.sweep_interval_seconds > 0:
            sweeper = StorageSweeper(
                store,
                ItemDAL(db_initializer),
                resolved.storage_bucket,
                retention_seconds=resolved.upload_retention_seconds,
            )
            sweep_task = asyncio.create_task(sweeper.run_periodic_cleanup(resolved.sweep_interval_seconds))

        LOGGER.info(
            "Serving bucket %r (region %r) with item table %r",
            resolved.storage_bucket, resolved.storage_region, resolved.item_table,
        )

        try:
            yield
        finally:
            if sweep_task is not None:
                sweep_task.cancel()
                await asyncio.gather(sweep_task, return_exceptions=True)

            # Gracefully close the OpenAI client if it exposes a close/aclose method.
            client = getattr(app.state, "openai_client", None)
            if client is not None:
                aclose = getattr(client, "aclose", None) or getattr(client, "close", None)
                if aclose is not None:
                    try:
                        result = aclose()
                        if inspect.isawaitable(result):
                            await result
                    except Exception:  # pylint: disable=broad-exception-caught
                        LOGGER.warning("Error while closing the OpenAI client", exc_info=True)

    app = FastAPI(title="Lost & Found Match API", lifespan=lifespan)

    @app.get("/health")
    async def health(request: Request):
        """
        Simple health check that verifies the database, storage and label detector are wired.
        """
        state = request.app.state
        return {
            "ok": True,
            "db_initialized": hasattr(state, "db_initializer"),
            "storage_available": getattr(state, "object_store", None) is not None,
            "labeling_available": getattr(state, "label_detector", None) is not None,
        }

    # Register application routers
    app.include_router(match_router)
    app.include_router(item_router)
    app.include_router(session_router)
    app.include_router(storage_router)

    return app


app = create_app()
