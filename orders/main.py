"""Orders service API built with FastAPI.

This module mounts the GraphQL orders API from ``gql`` under ``/graphql``
and exposes a health endpoint. Every GraphQL operation is delegated to
``api.OrderAPI``, which in turn calls the SQLAlchemy-backed
``repo.OrderRepo``.

The application owns its database engine: it is created on startup, the
service waits for the database to accept connections and ensures the schema,
and the engine is disposed on shutdown. Tests inject a ready-made store
through ``create_app(store=...)`` instead.

Run with the application factory::

    uvicorn orders.main:create_app --factory
"""

import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import JSONResponse

from .api import OrderAPI
from .config import AppConfig, load_env
from .domain import StorageFault
from .gql import graphql_router
from .logging_filters import configure_logging
from .middleware import add_request_id
from .repo import OrderRepo, make_engine

logger = logging.getLogger("orders")

router = APIRouter()


def _wait_for_db(store: OrderRepo, timeout: float) -> None:
    # active wait until the database accepts connections
    deadline = time.time() + timeout
    while True:
        try:
            store.ping()
            break
        except StorageFault:
            if time.time() > deadline:
                raise
            time.sleep(1)


@router.get("/health")
def health(request: Request):
    """Liveness/health endpoint.

    Returns:
        JSONResponse: ``ok`` plus per-component status; HTTP 503 when the
            database cannot be reached.
    """
    db_ok = True
    try:
        request.app.state.store.ping()
    except StorageFault:
        db_ok = False
    return JSONResponse(
        {"ok": db_ok, "components": {"db": {"ok": db_ok}}},
        status_code=200 if db_ok else 503,
    )


def create_app(store: Optional[OrderRepo] = None, config: Optional[AppConfig] = None) -> FastAPI:
    """Build the orders FastAPI application.

    Args:
        store: Optional pre-built store. When omitted, an engine is created
            from ``config.database_url`` on startup and disposed on shutdown.
        config: Optional configuration; read from the environment when
            omitted.

    Returns:
        FastAPI: The configured application.
    """
    config = config or load_env()
    configure_logging(config.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        engine = None
        repo = store
        if repo is None:
            engine = make_engine(config.database_url)
            repo = OrderRepo(engine)
            _wait_for_db(repo, config.db_startup_timeout)
        repo.ensure_schema()
        app.state.store = repo
        app.state.api = OrderAPI(repo)
        logger.info("orders service started")
        try:
            yield
        finally:
            if engine is not None:
                engine.dispose()
            logger.info("orders service stopped")

    app = FastAPI(title="Orders Service", lifespan=lifespan)
    app.include_router(router)
    app.include_router(graphql_router(), prefix="/graphql")
    app.middleware("http")(add_request_id)
    return app
