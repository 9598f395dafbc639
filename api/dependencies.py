"""
Shared dependencies for the Form Relay API.

This module provides:
- PocketBase client management (global instance, admin authentication)
- The CRM client created on startup
- The orchestrator factory used by the submission endpoint
"""

from __future__ import annotations

import asyncio
import logging

from fastapi import HTTPException
from pocketbase import PocketBase

from formrelay.data.repositories import ReferenceRepository, ReservationRepository, SubscriberRepository
from formrelay.integration.audit import JsonAuditSink
from formrelay.integration.crm_client import CRMGraphQLClient
from formrelay.orchestrator import SubmissionOrchestrator

from .settings import get_settings

logger = logging.getLogger(__name__)

# ========================================
# PocketBase Client
# ========================================

# One admin-authenticated client shared by every request; the orchestrator
# only reads references and writes reservations through it.
_settings = get_settings()
pb_url = _settings.pocketbase_url
pb = PocketBase(pb_url)


class AppState:
    """Clients created during application startup."""

    crm: CRMGraphQLClient | None = None


app_state = AppState()


async def authenticate_pb() -> None:
    """Authenticate with PocketBase as admin."""
    settings = get_settings()
    try:
        await asyncio.to_thread(
            pb.collection("_superusers").auth_with_password,
            settings.pocketbase_admin_email,
            settings.pocketbase_admin_password,
        )
        logger.info("Successfully authenticated with PocketBase")
    except Exception as e:
        logger.error(f"Failed to authenticate with PocketBase: {e}")
        raise


# ========================================
# Orchestrator
# ========================================


def get_orchestrator() -> SubmissionOrchestrator:
    """FastAPI dependency building the orchestrator for one request."""
    if app_state.crm is None:
        raise HTTPException(status_code=503, detail="CRM client is not configured")
    settings = get_settings()
    return SubmissionOrchestrator(
        crm=app_state.crm,
        references=ReferenceRepository(pb),
        subscribers=SubscriberRepository(pb),
        reservations=ReservationRepository(pb),
        audit=JsonAuditSink(settings.audit_dir, enabled=settings.debug_mode),
        upload_dir=settings.upload_dir,
    )


__all__ = [
    "pb",
    "pb_url",
    "app_state",
    "authenticate_pb",
    "get_orchestrator",
]
