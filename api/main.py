#!/usr/bin/env python3
"""
Form Relay API - HTTP surface of the form relay engine.

Receives form submissions and hands them to the submission orchestrator,
which creates the campaign item, its child items and the capacity
reservations in the CRM.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from formrelay.integration.crm_client import CRMGraphQLClient
from formrelay.logging_config import configure_logging, get_logger

from .dependencies import app_state, authenticate_pb
from .settings import get_settings

# Configure unified logging format
# Format: 2026-01-06T14:05:52Z [api] LEVEL message
configure_logging(source="api")
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifecycle - startup and shutdown."""
    settings = get_settings()

    # Startup
    if not settings.skip_pb_auth:
        await authenticate_pb()
    else:
        logger.warning("Skipping PocketBase authentication (SKIP_PB_AUTH=true)")

    if settings.crm_api_token:
        app_state.crm = CRMGraphQLClient.from_settings(settings)
    else:
        logger.warning("CRM_API_TOKEN not set - submissions will be rejected")

    yield

    # Shutdown
    if app_state.crm is not None:
        await app_state.crm.close()
        app_state.crm = None


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(title="Form Relay API", description="Form submissions to CRM items", lifespan=lifespan)

    # Register routers
    from .routers import submissions

    app.include_router(submissions.router)

    # Core endpoints (not in a router)
    @app.get("/health")
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "healthy", "service": "formrelay-api"}

    return app


# Create app instance for uvicorn
app = create_app()
