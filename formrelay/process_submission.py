#!/usr/bin/env python3
"""Process Submission - replays a saved form submission through the pipeline

Usage:
    python -m formrelay.process_submission submission.json
    python -m formrelay.process_submission submission.json --dry-run

The file holds the wire envelope: {"id", "timestamp", "formTitle", "data"}.
With --dry-run the computed columns and allocation plans are printed and
nothing is created or booked."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from pocketbase import PocketBase

from .config.settings import Settings, get_settings
from .core.errors import RemoteCreateError
from .core.models import AllocationPlan, Submission
from .data.repositories import ReferenceRepository, ReservationRepository, SubscriberRepository
from .integration.audit import JsonAuditSink
from .integration.crm_client import CRMGraphQLClient
from .logging_config import configure_logging, level_from_name
from .orchestrator import PreparedSubmission, SubmissionOrchestrator

logger = logging.getLogger(__name__)


def load_submission(path: Path) -> Submission:
    """Read a submission envelope from a JSON file.

    Raises:
        ValueError: if the file is not a JSON object or its data is malformed
    """
    payload = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(payload, dict):
        raise ValueError(f"{path} does not hold a JSON object")
    return Submission.from_dict(payload)


def connect_pocketbase(settings: Settings) -> PocketBase:
    """PocketBase client, authenticated as superuser unless SKIP_PB_AUTH is set"""
    pb = PocketBase(settings.pocketbase_url)
    if settings.skip_pb_auth:
        logger.warning("Skipping PocketBase authentication (SKIP_PB_AUTH=true)")
        return pb
    try:
        pb.collection("_superusers").auth_with_password(
            settings.pocketbase_admin_email, settings.pocketbase_admin_password
        )
        logger.info("Authenticated with PocketBase")
    except Exception as e:
        logger.error(f"Failed to authenticate with PocketBase: {e}")
        raise
    return pb


def describe_plans(plans: list[AllocationPlan]) -> list[dict[str, Any]]:
    """JSON-friendly view of allocation plans"""
    described = []
    for plan in plans:
        described.append(
            {
                "channel": plan.entry.channel_name,
                "origin": str(plan.entry.slot),
                "requested": plan.requested,
                "lines": [{"slot": str(line.slot), "quantity": line.quantity} for line in plan.lines],
                "missing": plan.shortfall,
            }
        )
    return described


def describe_prepared(prepared: PreparedSubmission) -> dict[str, Any]:
    return {
        "board_id": prepared.board_id,
        "group_id": prepared.group_id,
        "item_name": prepared.item_name,
        "columns": prepared.columns.base,
        "relations": prepared.relations,
        "requester": prepared.requester_id,
        "plans": describe_plans(prepared.plans),
        "skipped": [str(skip) for skip in prepared.skips],
    }


async def process_file(path: Path, dry_run: bool = False) -> dict[str, Any]:
    """Load a submission and run it; returns a printable summary"""
    settings = get_settings()
    submission = load_submission(path)
    pb = connect_pocketbase(settings)

    references = ReferenceRepository(pb)
    subscribers = SubscriberRepository(pb)
    reservations = ReservationRepository(pb)
    audit = JsonAuditSink(settings.audit_dir, enabled=settings.debug_mode)

    if dry_run:
        orchestrator = SubmissionOrchestrator(
            crm=None,
            references=references,
            subscribers=subscribers,
            reservations=reservations,
        )
        return {"dry_run": True, **describe_prepared(orchestrator.plan(submission))}

    async with CRMGraphQLClient.from_settings(settings) as crm:
        orchestrator = SubmissionOrchestrator(
            crm=crm,
            references=references,
            subscribers=subscribers,
            reservations=reservations,
            audit=audit,
            upload_dir=settings.upload_dir,
        )
        result = await orchestrator.run(submission)

    return {
        "dry_run": False,
        "item_id": result.item_id,
        "stage": result.stage.value,
        "child_item_ids": result.child_item_ids,
        "reservations_saved": result.reservations_saved,
        "plans": describe_plans(result.plans),
        "warnings": result.warnings,
    }


def main() -> None:
    """Main entry point"""
    parser = argparse.ArgumentParser(description="Replay a saved form submission into the CRM")
    parser.add_argument("file", type=Path, help="JSON file holding the submission envelope")
    parser.add_argument("--dry-run", action="store_true", help="Print columns and plans without remote calls")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    load_dotenv()
    configure_logging(source="cli", level=level_from_name(get_settings().log_level, args.debug))

    try:
        summary = asyncio.run(process_file(args.file, dry_run=args.dry_run))
    except RemoteCreateError as e:
        logger.error(f"Submission failed: {e}")
        sys.exit(2)
    except (OSError, ValueError) as e:
        logger.error(f"Cannot process {args.file}: {e}")
        sys.exit(1)

    print(json.dumps(summary, ensure_ascii=False, indent=2, default=str))


if __name__ == "__main__":
    main()
