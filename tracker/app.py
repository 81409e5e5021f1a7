"""Project Tracker: FastAPI application.

Exposes the query/mutation schema over a single request/response endpoint.
Run with: uvicorn tracker.app:app --reload
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import FastAPI, HTTPException, Request
from pydantic import BaseModel, Field

from . import __version__
from .api import TrackerAPI
from .config import TrackerConfig, configure_logging, get_config
from .errors import PersistenceError, ValidationError
from .schema import schema
from .storage import create_store

logger = logging.getLogger(__name__)


class QueryRequest(BaseModel):
    """POST /query request body."""
    operation: str
    variables: dict[str, Any] = Field(default_factory=dict)
    fields: Optional[list[str]] = None


class QueryResponse(BaseModel):
    """POST /query response."""
    data: Any = None


def create_app(config: Optional[TrackerConfig] = None) -> FastAPI:
    """Build the application; the store is created on startup."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        cfg = config or get_config()
        configure_logging(cfg.logging)
        store = create_store(cfg.store)
        await store.init()
        app.state.api = TrackerAPI(store)
        logger.info(f"Project Tracker v{app.version} started")
        logger.info(f"Storage backend: {store.__class__.__name__}")
        yield
        await store.close()
        logger.info("Shutting down")

    app = FastAPI(
        title="Project Tracker",
        description="Clients, projects and to-dos behind a typed query/mutation API",
        version=__version__,
        lifespan=lifespan,
    )

    # ---------------------------------------------------------------------------
    # Health Check
    # ---------------------------------------------------------------------------

    @app.get("/health")
    async def health(request: Request):
        api = getattr(request.app.state, "api", None)
        return {
            "status": "healthy",
            "service": "project-tracker",
            "version": app.version,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "storage": api.store.__class__.__name__ if api else "not initialized",
        }

    # ---------------------------------------------------------------------------
    # Schema
    # ---------------------------------------------------------------------------

    @app.get("/schema")
    async def describe_schema():
        """Operations, argument lists, entity types and enums."""
        return schema.describe()

    # ---------------------------------------------------------------------------
    # Query / Mutation
    # ---------------------------------------------------------------------------

    @app.post("/query", response_model=QueryResponse)
    async def run_query(body: QueryRequest, request: Request):
        """Execute one query or mutation from the schema."""
        try:
            data = await schema.execute(
                request.app.state.api, body.operation, body.variables, body.fields
            )
            return QueryResponse(data=data)
        except ValidationError as e:
            logger.info(f"Rejected {body.operation}: {e}")
            raise HTTPException(status_code=400, detail=e.to_dict())
        except PersistenceError as e:
            logger.error(f"{body.operation} failed: {e}")
            raise HTTPException(status_code=503, detail=e.to_dict())

    return app


app = create_app()
