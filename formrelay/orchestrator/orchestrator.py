"""Submission Orchestrator - drives one form submission into the CRM.

Stages, in order:
    Received -> ColumnsBuilt -> RelationsResolved -> CapacityAdjusted
    -> ParentCreated -> ChildrenCreated -> CrossReferenced
    -> ReservationsPersisted -> Done

Only the parent item creation is fatal. Every other failure is logged as a
warning, recorded on the SubmissionResult, and processing moves on.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any

from ..capacity.allocator import CapacityAllocator, ReservationsLookup
from ..config.relay_config import DEFAULT_RELAY_CONFIG, RelayConfig
from ..core.constants import (
    CAMPAIGN_DATE_TEXT_FIELD,
    DEMAND_COUNT_FIELD,
    DESCRIPTOR_FIELD,
    ITEM_NAME_FIELD,
    PEOPLE_SOURCE_FIELD,
    PEOPLE_TARGET_FIELD,
    REFERENCE_CATEGORIES,
    TEAM_PEOPLE_FIELD,
    TEAM_SOURCE_FIELD,
    UPLOAD_FIELD,
    USER_ID_FIELD,
)
from ..core.errors import (
    PersistenceError,
    RemoteChildCreateError,
    RemoteCreateError,
    ValidationSkip,
)
from ..core.interfaces import AuditSink, CRMClient, ReferenceLookup, ReservationStore, SubscriberDirectory
from ..core.models import (
    AllocationPlan,
    ColumnType,
    DemandEntry,
    FormMapping,
    ReferenceEntity,
    Reservation,
    ReservationKind,
    Submission,
    SubmissionResult,
    SubmissionStage,
)
from ..integration.audit import NullAuditSink
from ..mapping.column_builder import ColumnSet, build_columns
from ..mapping.field_mappings import apply_field_mappings, get_demand_records
from ..mapping.formatter import format_value
from ..mapping.payload import first_present, get_value_by_path, normalize_to_string_array, stringify
from ..resolution.descriptor import CategoryRef, build_descriptor, collect_category_refs
from ..resolution.resolver import RelationResolver
from ..utils.path_security import UnsafePathError, safe_join
from .child_payload import build_child_payload
from .demand import extract_demand_entries

logger = logging.getLogger(__name__)

DEFAULT_ITEM_NAME = "New Campaign"


@dataclass
class PreparedSubmission:
    """Everything computed before the first remote call

    Returned as-is by `SubmissionOrchestrator.plan` for dry runs.
    """

    submission: Submission
    item_name: str
    board_id: str
    group_id: str
    columns: ColumnSet
    relations: dict[str, Any] = field(default_factory=dict)
    team_people: dict[str, Any] | None = None
    refs: dict[str, CategoryRef] = field(default_factory=dict)
    channels: dict[str, ReferenceEntity] = field(default_factory=dict)
    plans: list[AllocationPlan] = field(default_factory=list)
    requester_id: str | None = None
    skips: list[ValidationSkip] = field(default_factory=list)

    @property
    def deficits(self) -> list[Any]:
        return [p.deficit for p in self.plans if p.deficit is not None]


class SubmissionOrchestrator:
    """Runs the submission pipeline against injected collaborators.

    Usage:
        orchestrator = SubmissionOrchestrator(crm, references, subscribers, reservations)
        item_id = await orchestrator.process_submission(submission)
    """

    def __init__(
        self,
        crm: CRMClient | None,
        references: ReferenceLookup,
        subscribers: SubscriberDirectory,
        reservations: ReservationStore,
        audit: AuditSink | None = None,
        config: RelayConfig = DEFAULT_RELAY_CONFIG,
        upload_dir: str | Path | None = None,
        clock: Callable[[], date] = date.today,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            crm: Remote CRM client; None restricts the orchestrator to `plan`
            references: Mirrored reference items (channels, clients, products...)
            subscribers: CRM user directory
            reservations: Durable capacity reservations
            audit: Sink for payload snapshots; nothing is dumped when omitted
            config: Default configuration, overridable per call
            upload_dir: Directory holding files named by the upload field
            clock: Today's date provider
        """
        self.crm = crm
        self.references = references
        self.subscribers = subscribers
        self.reservations = reservations
        self.audit = audit or NullAuditSink()
        self.config = config
        self.upload_dir = Path(upload_dir) if upload_dir else None
        self.clock = clock
        self.resolver = RelationResolver(references, subscribers)

    async def process_submission(
        self,
        submission: Submission,
        mapping: FormMapping | None = None,
        config: RelayConfig | None = None,
    ) -> str:
        """Process a submission and return the parent item id.

        Raises:
            RemoteCreateError: if the parent item could not be created
        """
        result = await self.run(submission, mapping, config)
        return str(result.item_id)

    async def run(
        self,
        submission: Submission,
        mapping: FormMapping | None = None,
        config: RelayConfig | None = None,
    ) -> SubmissionResult:
        """Process a submission and return the full outcome.

        Raises:
            RemoteCreateError: if the parent item could not be created
        """
        config = config or self.config
        result = SubmissionResult(submission_id=submission.id)
        logger.info(f"Processing submission {submission.id} ({submission.form_title or 'untitled form'})")

        # store lookups are blocking, keep them off the event loop
        prepared = await asyncio.to_thread(self.prepare, submission, mapping, config, result)
        for skip in prepared.skips:
            result.warn(str(skip))

        item_id = await self._create_parent(prepared, result)
        await self._upload_files(prepared, item_id, result)

        descriptor = build_descriptor(prepared.submission, prepared.refs, item_id)

        if config.create_children and prepared.plans:
            await self._create_children(prepared, item_id, descriptor, config, result)
            self._advance(result, SubmissionStage.CHILDREN_CREATED)

        await self._cross_reference(prepared, item_id, descriptor, result)
        self._advance(result, SubmissionStage.CROSS_REFERENCED)

        await asyncio.to_thread(self._persist_reservations, prepared, result)
        self._advance(result, SubmissionStage.RESERVATIONS_PERSISTED)

        self._advance(result, SubmissionStage.DONE)
        logger.info(
            f"Submission {submission.id} done: item {item_id}, {len(result.child_item_ids)} children, "
            f"{result.reservations_saved} reservations, {len(result.warnings)} warnings"
        )
        return result

    def plan(
        self,
        submission: Submission,
        mapping: FormMapping | None = None,
        config: RelayConfig | None = None,
    ) -> PreparedSubmission:
        """Compute columns, relations and allocation plans without any remote call or write"""
        return self.prepare(submission, mapping, config or self.config)

    def prepare(
        self,
        submission: Submission,
        mapping: FormMapping | None,
        config: RelayConfig,
        result: SubmissionResult | None = None,
    ) -> PreparedSubmission:
        """Run every read-only stage: columns, relations, references and capacity"""
        today = self.clock()
        data = apply_field_mappings(submission.data, config.field_mappings)
        augmented = submission.with_data(data)
        requester_id = self._requester_id(data, config)
        skips: list[ValidationSkip] = []

        columns = build_columns(augmented, mapping, config.excluded_fields, today)
        if columns.campaign_date_text and not data.get(CAMPAIGN_DATE_TEXT_FIELD):
            # the derived text column feeds the descriptor's date token
            data = {**data, CAMPAIGN_DATE_TEXT_FIELD: columns.campaign_date_text}
            augmented = submission.with_data(data)
        self._advance(result, SubmissionStage.COLUMNS_BUILT)

        relations = self.resolver.resolve_relation_columns(columns.relations, skips)
        people_raw = data.get(PEOPLE_SOURCE_FIELD) or data.get(PEOPLE_TARGET_FIELD)
        if people_raw:
            try:
                people = self.resolver.resolve_people(people_raw, skips)
            except Exception as e:
                self._lookup_failed(skips, PEOPLE_SOURCE_FIELD, "subscriber lookup", e)
                people = None
            if people is not None:
                columns.base[PEOPLE_TARGET_FIELD] = people
        try:
            team = self.resolver.resolve_team_people(data.get(TEAM_SOURCE_FIELD))
        except Exception as e:
            self._lookup_failed(skips, TEAM_SOURCE_FIELD, "team lookup", e)
            team = None
        refs = collect_category_refs(
            data,
            self.resolver,
            self._board_id(config.product_board_name),
            self._board_id(config.subproduct_board_name),
            REFERENCE_CATEGORIES,
        )
        self._advance(result, SubmissionStage.RELATIONS_RESOLVED)

        entries = extract_demand_entries(get_demand_records(data) or [], requester_id, skips)
        try:
            channels = self._resolve_channels(entries, skips)
        except Exception as e:
            self._lookup_failed(skips, "channels", "channel lookup", e)
            channels = {}
        plans: list[AllocationPlan] = []
        if entries:
            allocator = CapacityAllocator(
                get_ceiling=lambda channel_id: self._ceiling(channels.get(channel_id)),
                get_reservations=self._reservation_reader(skips),
                time_slots=self._time_slots(config),
                policy=config.slot_policy,
            )
            plans = allocator.allocate(entries)
            columns.base[DEMAND_COUNT_FIELD] = sum(len(p.lines) for p in plans)
            self._advance(result, SubmissionStage.CAPACITY_ADJUSTED)

        board_id = mapping.board_id if mapping is not None else config.parent.board_id
        group_id = mapping.group_id if mapping is not None else config.parent.group_id
        item_name = self._item_name(augmented, columns, refs, mapping)

        prepared = PreparedSubmission(
            submission=augmented,
            item_name=item_name,
            board_id=board_id,
            group_id=group_id,
            columns=columns,
            relations=relations,
            team_people=team,
            refs=refs,
            channels=channels,
            plans=plans,
            requester_id=requester_id,
            skips=skips,
        )
        if result is not None:
            result.plans = plans
            result.deficits = prepared.deficits
            for deficit in result.deficits:
                result.warn(f"Capacity deficit: {deficit}")
        return prepared

    # ========================================================================
    # Read-only helpers
    # ========================================================================

    @staticmethod
    def _advance(result: SubmissionResult | None, stage: SubmissionStage) -> None:
        if result is not None:
            result.stage = stage
            logger.debug(f"Submission {result.submission_id}: {stage.value}")

    @staticmethod
    def _requester_id(data: dict[str, Any], config: RelayConfig) -> str | None:
        values = normalize_to_string_array(first_present(data, config.requester_fields))
        requester = values[0].strip() if values else ""
        return requester or None

    def _board_id(self, board_name: str) -> str | None:
        try:
            return self.references.find_board_id(board_name)
        except Exception as e:
            logger.warning(f"Board lookup for '{board_name}' failed: {e}")
            return None

    def _time_slots(self, config: RelayConfig) -> list[str]:
        try:
            return list(self.references.list_time_slots(config.time_slot_board_id))
        except Exception as e:
            logger.warning(f"Could not load time slots, only requested slots will be used: {e}")
            return []

    @staticmethod
    def _ceiling(channel: ReferenceEntity | None) -> float | None:
        return channel.max_value if channel is not None else None

    @staticmethod
    def _lookup_failed(skips: list[ValidationSkip], field_name: str, what: str, error: Exception) -> None:
        skip = ValidationSkip(field_name, f"{what} failed: {error}")
        logger.warning(str(skip))
        skips.append(skip)

    def _reservation_reader(self, skips: list[ValidationSkip]) -> ReservationsLookup:
        """Reservation lookup that treats an unreadable store as holding no rows.

        Only the first failure is recorded; the ceiling and the reservations
        staged by this submission still apply.
        """
        failures: list[Exception] = []

        def read(channel_id: str, on: date) -> list[Reservation]:
            try:
                return list(self.reservations.list_reservations(channel_id, on))
            except Exception as e:
                if not failures:
                    self._lookup_failed(skips, channel_id, f"reservation lookup for {on.isoformat()}", e)
                failures.append(e)
                return []

        return read

    def _resolve_channels(
        self,
        entries: list[DemandEntry],
        skips: list[ValidationSkip],
    ) -> dict[str, ReferenceEntity]:
        """Attach canonical channel ids to entries; returns entities keyed by slot channel id"""
        channels: dict[str, ReferenceEntity] = {}
        for entry in entries:
            entity = self.resolver.find_entity(entry.channel_id or entry.channel_name)
            if entity is None and entry.channel_id and entry.channel_name != entry.channel_id:
                entity = self.resolver.find_entity(entry.channel_name)
            if entity is None:
                skip = ValidationSkip(entry.channel_name, "unknown channel, capacity is not limited")
                logger.warning(str(skip))
                skips.append(skip)
                continue
            if not entry.channel_id:
                entry.channel_id = entity.item_id
            channels[entry.slot.channel_id] = entity
        return channels

    @staticmethod
    def _item_name(
        submission: Submission,
        columns: ColumnSet,
        refs: dict[str, CategoryRef],
        mapping: FormMapping | None,
    ) -> str:
        name: Any = columns.base.pop(ITEM_NAME_FIELD, None)
        if mapping is not None and mapping.item_name_path:
            name = get_value_by_path(submission.to_dict(), mapping.item_name_path) or name
        text = stringify(name).strip() if name is not None else ""
        if text:
            return text
        return build_descriptor(submission, refs) or (mapping.default_item_name if mapping else DEFAULT_ITEM_NAME)

    # ========================================================================
    # Remote stages
    # ========================================================================

    @property
    def _client(self) -> CRMClient:
        if self.crm is None:
            raise RemoteCreateError("No CRM client configured")
        return self.crm

    async def _create_parent(self, prepared: PreparedSubmission, result: SubmissionResult) -> str:
        columns = prepared.columns.base
        self.audit.dump(
            {"board_id": prepared.board_id, "item_name": prepared.item_name, "columns": columns},
            f"parent_{prepared.submission.id}",
        )
        try:
            item_id = await self._client.create_item(prepared.board_id, prepared.group_id, prepared.item_name, columns)
        except RemoteCreateError:
            logger.error(f"Parent item creation failed for submission {prepared.submission.id}")
            raise
        except Exception as e:
            logger.error(f"Parent item creation failed for submission {prepared.submission.id}: {e}")
            raise RemoteCreateError(f"Could not create parent item: {e}") from e

        result.item_id = item_id
        self._advance(result, SubmissionStage.PARENT_CREATED)
        logger.info(f"Created parent item {item_id} on board {prepared.board_id}")
        return item_id

    async def _upload_files(self, prepared: PreparedSubmission, item_id: str, result: SubmissionResult) -> None:
        filenames = [n.strip() for n in normalize_to_string_array(prepared.submission.data.get(UPLOAD_FIELD))]
        filenames = [n for n in filenames if n]
        if not filenames:
            return
        if self.upload_dir is None:
            logger.debug("No upload directory configured, skipping file upload")
            return

        for filename in filenames:
            try:
                path = safe_join(self.upload_dir, filename)
            except UnsafePathError as e:
                result.warn(f"Rejected upload '{filename}': {e}")
                logger.warning(f"Rejected upload '{filename}': {e}")
                continue
            if not path.is_file():
                result.warn(f"Upload '{filename}' not found")
                logger.warning(f"Upload '{filename}' not found in {self.upload_dir}")
                continue
            try:
                await self._client.upload_file(item_id, UPLOAD_FIELD, str(path))
            except Exception as e:
                result.warn(f"Upload of '{filename}' failed: {e}")
                logger.warning(f"Upload of '{filename}' to item {item_id} failed: {e}")
                continue
            try:
                path.unlink()
            except OSError as e:
                logger.warning(f"Could not remove uploaded file {path}: {e}")

    async def _create_children(
        self,
        prepared: PreparedSubmission,
        item_id: str,
        descriptor: str,
        config: RelayConfig,
        result: SubmissionResult,
    ) -> None:
        today = self.clock()
        sequence = 0
        for plan in prepared.plans:
            channel = prepared.channels.get(plan.entry.slot.channel_id)
            for line in plan.lines:
                sequence += 1
                try:
                    payload = build_child_payload(
                        plan.entry,
                        line,
                        sequence,
                        submission_data=prepared.submission.data,
                        parent_columns=prepared.columns.base,
                        parent_item_id=item_id,
                        refs=prepared.refs,
                        channel=channel,
                        descriptor=descriptor,
                        config=config,
                        today=today,
                    )
                except Exception as e:
                    logger.warning(f"Could not build child {sequence} of item {item_id} ({line.slot}): {e}")
                    result.warn(f"Could not build child {sequence} of item {item_id}: {e}")
                    continue
                self.audit.dump(
                    {"board_id": config.child.board_id, "item_name": payload.item_name, "columns": payload.columns},
                    f"child_{item_id}_{sequence}",
                )
                try:
                    child_id = await self._client.create_item(
                        config.child.board_id, config.child.group_id, payload.item_name, payload.columns
                    )
                except Exception as e:
                    error = RemoteChildCreateError(f"Child {sequence} of item {item_id} ({line.slot}): {e}")
                    logger.warning(str(error))
                    result.warn(str(error))
                    continue
                result.child_item_ids.append(child_id)

                relations = {
                    column_id: format_value(value, ColumnType.BOARD_RELATION)
                    for column_id, value in payload.relations.items()
                }
                relations = {k: v for k, v in relations.items() if v is not None}
                if relations:
                    await self._update(child_id, config.child.board_id, relations, result)

        logger.info(f"Created {len(result.child_item_ids)} child items for item {item_id}")

    async def _cross_reference(
        self,
        prepared: PreparedSubmission,
        item_id: str,
        descriptor: str,
        result: SubmissionResult,
    ) -> None:
        patch: dict[str, Any] = dict(prepared.relations)
        if prepared.team_people:
            patch[TEAM_PEOPLE_FIELD] = prepared.team_people
        if descriptor:
            patch[DESCRIPTOR_FIELD] = descriptor
        if not patch:
            return
        self.audit.dump({"item_id": item_id, "columns": patch}, f"relations_{item_id}")
        await self._update(item_id, prepared.board_id, patch, result)

    async def _update(self, item_id: str, board_id: str, columns: dict[str, Any], result: SubmissionResult) -> None:
        try:
            await self._client.update_columns(item_id, board_id, columns)
        except Exception as e:
            logger.warning(f"Column update on item {item_id} failed: {e}")
            result.warn(f"Column update on item {item_id} failed: {e}")

    def _persist_reservations(self, prepared: PreparedSubmission, result: SubmissionResult) -> None:
        raw_user = prepared.submission.data.get(USER_ID_FIELD)
        user_id = stringify(raw_user).strip() if raw_user is not None else None
        user_id = user_id or None
        for plan in prepared.plans:
            entry = plan.entry
            if entry.has_existing_id:
                logger.info(f"Entry {entry.entry_id} already exists, not booking {entry.slot} again")
                continue
            for line in plan.lines:
                reservation = Reservation(
                    channel_id=line.slot.channel_id,
                    date=line.slot.date,
                    timeslot=line.slot.timeslot,
                    quantity=line.quantity,
                    kind=ReservationKind.SCHEDULED,
                    requester_id=entry.requester_id,
                    user_id=user_id,
                )
                try:
                    self.reservations.save(reservation)
                except PersistenceError as e:
                    logger.warning(str(e))
                    result.warn(str(e))
                    continue
                result.reservations_saved += 1
