# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Board service: the stateful side of the case lifecycle.

Holds the case read cache fed by the store subscription and the register of
moves waiting for transition data, and funnels every move through
``finalize_move``. All decisions are delegated to the pure functions in
``prevflow.domain``; this module only sequences them with persistence,
notifications and logging.
"""

import logging
import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

from ..errors import CaseStoreError, PrevflowError
from ..models.board import ActionZone, ColumnDefinition, TransitionRule, column_titles
from ..models.entities import Case, CaseHistoryItem, MandadoSeguranca, Notification, SystemLog, User
from ..models.enums import (
    LogCategory,
    MandadoReason,
    MandadoStatus,
    NotificationType,
    TransitionType,
)
from ..models.requests import TransitionFormData
from ..domain.automation import evaluate_workflow
from ..domain.board import (
    DropTarget,
    ZoneConfirmation,
    automatic_updates_for_column,
    build_writ_of_mandamus_case,
    find_zone,
    is_noop,
    resolve_drop_target,
    zone_confirmation,
    zone_seed_updates,
)
from ..domain.catalog import (
    ACTION_ZONES,
    SYNC_USER,
    SYSTEM_USER,
    TAG_HAS_WRIT,
    TAG_WRIT_FILED,
    TAG_WRIT_REQUESTED,
    TRANSITION_RULES,
    VIEW_COLUMNS,
)
from ..domain.moves import (
    append_history,
    apply_updates,
    history_entries,
    merge_updates,
    moved_case,
    remove_tags,
    union_tags,
)
from ..domain.transition_rules import match_transition
from ..domain.transitions import IncidentalFiling, execute_transition
from ..utils.dates import days_until, local_date_iso, to_iso, utc_now
from .amqp import AMQPService
from .case_store import CaseStore, Unsubscribe
from .settings import SettingsService

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

DIRECT_MOVE_LOG = "Movimentação padrão."
MOVE_NOTIFICATION_TITLE = "Movimentação"


class MoveStatus(str, Enum):
    """What a move request turned into."""
    NOOP = "NOOP"
    CLONED = "CLONED"
    PENDING = "PENDING"
    MOVED = "MOVED"
    BLOCKED = "BLOCKED"
    FAILED = "FAILED"
    IGNORED = "IGNORED"


@dataclass
class MoveResult:
    """Result of finalizing a move."""
    success: bool
    blocked: bool = False
    block_reason: Optional[str] = None
    error: Optional[str] = None
    case: Optional[Case] = None


@dataclass
class PendingMove:
    """Move waiting for the data its transition collects."""
    case_id: str
    source_column_id: str
    target_column_id: str
    target_view: str
    transition_type: TransitionType


@dataclass
class PreparedMove:
    """Moved case checked against automation and not yet persisted."""
    source: Case
    target_column_id: str
    candidate: Case
    user_name: str
    now: datetime
    logs: List[str] = field(default_factory=list)
    notifications: List[Notification] = field(default_factory=list)
    blocked: bool = False
    block_reason: Optional[str] = None


@dataclass
class MoveRequestOutcome:
    """Outbound signal describing the handling of a move request."""
    status: MoveStatus
    case_id: str
    target_column_id: Optional[str] = None
    transition_type: Optional[TransitionType] = None
    derived_case_ids: Optional[List[str]] = None
    result: Optional[MoveResult] = None

    @property
    def block_reason(self) -> Optional[str]:
        return self.result.block_reason if self.result else None


class BoardService:
    """
    Case lifecycle service.

    Args:
        store: Case persistence
        publisher: AMQP publisher for notifications; None keeps them local
        settings: Source of users and workflow rules
        zones: Action zone table
        transition_rules: Transition rule table, in match order
        columns: Per-view column table
        clock: Callable returning the current instant
        publish_executor: Executor running AMQP publishing off the request
            path; a single worker thread when omitted
    """

    def __init__(
        self,
        store: CaseStore,
        publisher: Optional[AMQPService] = None,
        settings: Optional[SettingsService] = None,
        zones: Optional[List[ActionZone]] = None,
        transition_rules: Optional[List[TransitionRule]] = None,
        columns: Optional[Dict[str, List[ColumnDefinition]]] = None,
        clock: Optional[Callable[[], datetime]] = None,
        publish_executor: Optional[Executor] = None
    ):
        self.store = store
        self.publisher = publisher
        self.settings = settings or SettingsService()
        self.zones = zones if zones is not None else ACTION_ZONES
        self.transition_rules = transition_rules if transition_rules is not None else TRANSITION_RULES
        self.columns = columns if columns is not None else VIEW_COLUMNS
        self.clock = clock or utc_now

        self._column_titles = column_titles(self.columns)
        self._lock = threading.RLock()
        self._cases: Dict[str, Case] = {}
        self._pending: Dict[str, PendingMove] = {}
        self._unsubscribe: Unsubscribe = store.subscribe_to_cases(self._refresh_cache)
        self._publish_executor = publish_executor
        if publisher is not None and publish_executor is None:
            self._publish_executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="prevflow-publish")

    # Read side

    def _refresh_cache(self, cases: List[Case]) -> None:
        with self._lock:
            self._cases = {case.id: case for case in cases}

    def close(self) -> None:
        """Stop following the store and wait for queued notifications to publish."""
        self._unsubscribe()
        if self._publish_executor is not None:
            self._publish_executor.shutdown(wait=True)

    def subscribe(self, callback: Callable[[List[Case]], None]) -> Unsubscribe:
        """Follow the case list; the callback fires immediately and on every change."""
        return self.store.subscribe_to_cases(callback)

    def get_case(self, case_id: str) -> Optional[Case]:
        """Case from the read cache, falling back to the store."""
        with self._lock:
            case = self._cases.get(case_id)
        if case is not None:
            return case.model_copy(deep=True)
        return self.store.get_case(case_id)

    def list_cases(self, view: Optional[str] = None) -> List[Case]:
        """Cached cases, optionally restricted to one board."""
        with self._lock:
            cases = list(self._cases.values())
        return [case.model_copy(deep=True) for case in cases if view is None or case.view == view]

    def columns_for_view(self, view: str) -> List[ColumnDefinition]:
        return list(self.columns.get(view, []))

    def column_title(self, column_id: str) -> str:
        return self._column_titles.get(column_id, column_id)

    def zone_confirmation(self, zone_id: str) -> Optional[ZoneConfirmation]:
        """Confirmation prompt for a zone, or None when ``zone_id`` is not a zone."""
        zone = find_zone(zone_id, self.zones)
        return zone_confirmation(zone) if zone else None

    def pending_move(self, case_id: str) -> Optional[PendingMove]:
        with self._lock:
            return self._pending.get(case_id)

    def cancel_pending_move(self, case_id: str) -> bool:
        """Drop a pending move. Returns False when nothing was pending."""
        with self._lock:
            pending = self._pending.pop(case_id, None)
        if pending is not None:
            logger.info(
                "Pending move cancelled",
                extra={"extra_fields": {
                    "case_id": case_id,
                    "target_column_id": pending.target_column_id,
                    "transition_type": pending.transition_type,
                }}
            )
        return pending is not None

    # Move pipeline

    def request_move(self, case_id: str, target_id: str, actor: Optional[User]) -> MoveRequestOutcome:
        """
        Handle a drop of a case onto a column or action zone.

        Args:
            case_id: Case being dropped
            target_id: Column id or action zone id
            actor: User performing the drop

        Returns:
            MoveRequestOutcome; PENDING outcomes carry the transition type the
            caller must collect data for
        """
        with tracer.start_as_current_span("board.request_move") as span:
            span.set_attributes({"case.id": case_id, "move.target_id": target_id})

            case = self.get_case(case_id)
            if case is None or actor is None:
                span.set_attribute("move.status", MoveStatus.IGNORED.value)
                return MoveRequestOutcome(status=MoveStatus.IGNORED, case_id=case_id)

            target = resolve_drop_target(case, target_id, self.zones, self.columns)
            if target is None:
                logger.warning(
                    "Drop target rejected",
                    extra={"extra_fields": {"case_id": case_id, "target_id": target_id, "view": case.view}}
                )
                span.set_attribute("move.status", MoveStatus.IGNORED.value)
                return MoveRequestOutcome(status=MoveStatus.IGNORED, case_id=case_id)

            if is_noop(case, target):
                span.set_attribute("move.status", MoveStatus.NOOP.value)
                return MoveRequestOutcome(
                    status=MoveStatus.NOOP, case_id=case_id, target_column_id=target.target_column_id
                )

            if target.is_clone:
                outcome = self._clone_for_writ(case, actor)
            elif target.zone is not None:
                outcome = self._zone_move(case, target, actor)
            else:
                outcome = self._column_move(case, target, actor)

            span.set_attribute("move.status", outcome.status.value)
            return outcome

    def _zone_move(self, case: Case, target: DropTarget, actor: User) -> MoveRequestOutcome:
        updates, log = zone_seed_updates(case, target.zone, self.settings.get_users())
        result = self.finalize_move(
            case, target.target_column_id, updates, log, actor, target_view=target.target_view
        )
        return self._finalized(case.id, target.target_column_id, result)

    def _column_move(self, case: Case, target: DropTarget, actor: User) -> MoveRequestOutcome:
        transition_type = match_transition(case.column_id, target.target_column_id, self.transition_rules)
        if transition_type is not None:
            pending = PendingMove(
                case_id=case.id,
                source_column_id=case.column_id,
                target_column_id=target.target_column_id,
                target_view=target.target_view,
                transition_type=TransitionType(transition_type),
            )
            with self._lock:
                self._pending[case.id] = pending
            logger.info(
                "Move waiting for transition data",
                extra={"extra_fields": {
                    "case_id": case.id,
                    "target_column_id": target.target_column_id,
                    "transition_type": pending.transition_type.value,
                }}
            )
            return MoveRequestOutcome(
                status=MoveStatus.PENDING,
                case_id=case.id,
                target_column_id=target.target_column_id,
                transition_type=pending.transition_type,
            )

        updates = automatic_updates_for_column(target.target_column_id, self.clock())
        result = self.finalize_move(
            case, target.target_column_id, updates, DIRECT_MOVE_LOG, actor, target_view=target.target_view
        )
        return self._finalized(case.id, target.target_column_id, result)

    @staticmethod
    def _finalized(case_id: str, target_column_id: str, result: MoveResult) -> MoveRequestOutcome:
        if result.blocked:
            status = MoveStatus.BLOCKED
        elif result.success:
            status = MoveStatus.MOVED
        else:
            status = MoveStatus.FAILED
        return MoveRequestOutcome(
            status=status, case_id=case_id, target_column_id=target_column_id, result=result
        )

    def _clone_for_writ(self, case: Case, actor: User) -> MoveRequestOutcome:
        built = build_writ_of_mandamus_case(case, actor.name, self.clock())
        derived = built.derived_case

        if not self._save_derived(derived, case.id):
            return MoveRequestOutcome(
                status=MoveStatus.FAILED,
                case_id=case.id,
                result=MoveResult(success=False, error=f"Failed to save derived case {derived.id}"),
            )
        if not self._save_parent(built.source_case, derived.id):
            return MoveRequestOutcome(
                status=MoveStatus.FAILED,
                case_id=case.id,
                derived_case_ids=[derived.id],
                result=MoveResult(success=False, error=f"Failed to save case {case.id}"),
            )

        self._emit([Notification(
            type=NotificationType.WARNING,
            title="Mandado de Segurança",
            description=f"Novo processo de MS criado para {case.client_name}.",
            timestamp=to_iso(self.clock()),
            case_id=derived.id,
        )])
        self._audit(actor.name, "MS Impetrado", f"{case.internal_id} -> {derived.internal_id}")
        return MoveRequestOutcome(
            status=MoveStatus.CLONED,
            case_id=case.id,
            target_column_id=derived.column_id,
            derived_case_ids=[derived.id],
            result=MoveResult(success=True, case=built.source_case),
        )

    def submit_transition(self, case_id: str, form: TransitionFormData, actor: Optional[User]) -> MoveRequestOutcome:
        """
        Complete a pending move with the data collected for its transition.

        The source move is checked against workflow automation before any
        write, so a veto leaves derived cases and parent cases untouched.
        Derived cases are then saved before the source case. Each save
        stands on its own: a failure is logged with both case ids and later
        writes still run.
        """
        with tracer.start_as_current_span("board.submit_transition") as span:
            span.set_attribute("case.id", case_id)
            with self._lock:
                pending = self._pending.get(case_id)
            case = self.get_case(case_id)
            if pending is None or case is None or actor is None:
                span.set_attribute("move.status", MoveStatus.IGNORED.value)
                return MoveRequestOutcome(status=MoveStatus.IGNORED, case_id=case_id)

            span.set_attribute("transition.type", pending.transition_type.value)
            outcome = execute_transition(
                case,
                pending.transition_type,
                pending.target_column_id,
                form,
                actor,
                users=self.settings.get_users(),
                cases=self._case_index(),
                now=self.clock(),
            )
            if outcome is None:
                return MoveRequestOutcome(status=MoveStatus.IGNORED, case_id=case_id)

            prepared = None
            if not outcome.terminated:
                prepared = self.prepare_move(
                    case,
                    outcome.target_column_id,
                    outcome.updates,
                    outcome.log,
                    actor,
                    target_view=outcome.target_view or pending.target_view,
                )
                if prepared.blocked:
                    span.set_attribute("move.status", MoveStatus.BLOCKED.value)
                    return MoveRequestOutcome(
                        status=MoveStatus.BLOCKED,
                        case_id=case_id,
                        target_column_id=outcome.target_column_id,
                        transition_type=pending.transition_type,
                        derived_case_ids=[],
                        result=MoveResult(success=False, blocked=True, block_reason=prepared.block_reason),
                    )

            derived_ids = []
            for derived in outcome.derived_cases:
                if self._save_derived(derived, case.id):
                    derived_ids.append(derived.id)
                    self._audit(actor.name, "Processo Derivado", f"{case.internal_id} -> {derived.internal_id}")

            if outcome.incidental_filing is not None:
                self.sync_incidental_filing(outcome.incidental_filing.parent_case_id, outcome.incidental_filing)

            if prepared is None:
                with self._lock:
                    self._pending.pop(case_id, None)
                status = MoveStatus.CLONED if derived_ids else MoveStatus.FAILED
                span.set_attribute("move.status", status.value)
                return MoveRequestOutcome(
                    status=status,
                    case_id=case_id,
                    target_column_id=outcome.target_column_id,
                    transition_type=pending.transition_type,
                    derived_case_ids=derived_ids,
                    result=MoveResult(success=bool(derived_ids), case=case),
                )

            moved = self._finalized(case_id, outcome.target_column_id, self.commit_move(prepared))
            moved.transition_type = pending.transition_type
            moved.derived_case_ids = derived_ids
            span.set_attribute("move.status", moved.status.value)
            return moved

    def finalize_move(
        self,
        case: Case,
        target_column_id: str,
        updates: Dict[str, Any],
        log: str,
        actor: Optional[User],
        target_view: Optional[str] = None
    ) -> MoveResult:
        """
        Apply a move, run column-entry automation and persist the result.

        Args:
            case: Case as it was before the move
            target_column_id: Destination column
            updates: Explicit field updates collected for the move
            log: History line describing the explicit part of the move
            actor: User performing the move; None records the system user
            target_view: Destination board when it differs from the case's

        Returns:
            MoveResult; a blocked result leaves every copy of the case
            untouched
        """
        with tracer.start_as_current_span("board.finalize_move") as span:
            span.set_attributes({
                "case.id": case.id,
                "move.source_column_id": case.column_id,
                "move.target_column_id": target_column_id,
            })
            prepared = self.prepare_move(case, target_column_id, updates, log, actor, target_view)
            if prepared.blocked:
                span.set_attribute("move.blocked", True)
                return MoveResult(success=False, blocked=True, block_reason=prepared.block_reason)
            return self.commit_move(prepared)

    def prepare_move(
        self,
        case: Case,
        target_column_id: str,
        updates: Dict[str, Any],
        log: str,
        actor: Optional[User],
        target_view: Optional[str] = None
    ) -> PreparedMove:
        """Build the moved case and run column-entry automation without writing it."""
        now = self.clock()
        user_name = actor.name if actor else SYSTEM_USER
        candidate = moved_case(case, target_column_id, updates, target_view)
        prepared = PreparedMove(
            source=case,
            target_column_id=target_column_id,
            candidate=candidate,
            user_name=user_name,
            now=now,
            logs=[log],
        )
        if target_column_id == case.column_id:
            return prepared

        automation = evaluate_workflow(
            candidate,
            self.settings.get_workflow_rules(),
            target_column_id,
            users=self.settings.get_users(),
            now=now,
        )
        if automation.blocked:
            self._audit(user_name, "Movimentação Bloqueada", automation.block_reason, LogCategory.WORKFLOW)
            prepared.blocked = True
            prepared.block_reason = automation.block_reason
            return prepared

        if automation.updates:
            prepared.candidate = moved_case(
                candidate, target_column_id, merge_updates(candidate, automation.updates)
            )
        prepared.logs.extend(automation.logs)
        prepared.notifications.extend(automation.notifications)
        return prepared

    def commit_move(self, prepared: PreparedMove) -> MoveResult:
        """Persist a prepared move, then notify and clear its pending entry."""
        case = prepared.source
        target_column_id = prepared.target_column_id
        with tracer.start_as_current_span("board.commit_move") as span:
            span.set_attributes({"case.id": case.id, "move.target_column_id": target_column_id})
            now = prepared.now
            final = append_history(prepared.candidate, history_entries(prepared.logs, prepared.user_name, now), now)

            try:
                self.store.save_case(final)
            except CaseStoreError as e:
                span.set_status(Status(StatusCode.ERROR, str(e)))
                span.record_exception(e)
                logger.error(
                    "Failed to persist move",
                    extra={"extra_fields": {
                        "case_id": case.id,
                        "target_column_id": target_column_id,
                        "error": str(e),
                    }}
                )
                return MoveResult(success=False, error=str(e))

            with self._lock:
                self._cases[final.id] = final
                self._pending.pop(final.id, None)

            notifications = [Notification(
                type=NotificationType.INFO,
                title=MOVE_NOTIFICATION_TITLE,
                description=f"{case.client_name} foi movido para: "
                            f"{self.column_title(target_column_id)} por {prepared.user_name}.",
                timestamp=to_iso(now),
                case_id=case.id,
            )] + prepared.notifications
            self._emit(notifications)

            span.set_status(Status(StatusCode.OK))
            logger.info(
                "Case moved",
                extra={"extra_fields": {
                    "case_id": case.id,
                    "from_column_id": case.column_id,
                    "to_column_id": target_column_id,
                    "view": final.view,
                    "user": prepared.user_name,
                }}
            )
            return MoveResult(success=True, case=final)

    def sync_incidental_filing(self, parent_id: str, filing: IncidentalFiling) -> bool:
        """
        Record on the parent case the writ of mandamus filed by its child.

        Persisted independently of the child's move. Returns False when the
        parent is unknown or could not be saved.
        """
        parent = self.get_case(parent_id)
        if parent is None:
            logger.warning(
                "Incidental filing parent not found",
                extra={"extra_fields": {"parent_case_id": parent_id, "npu": filing.npu}}
            )
            return False

        now = self.clock()
        writ = MandadoSeguranca(
            npu=filing.npu,
            filing_date=filing.filing_date,
            status=MandadoStatus.AGUARDANDO,
            reason=MandadoReason.DEMORA_ANALISE,
            notes="Sincronizado automaticamente a partir do processo judicial derivado.",
        )
        tags = union_tags(remove_tags(parent.tags, TAG_WRIT_REQUESTED), TAG_WRIT_FILED, TAG_HAS_WRIT)
        updated = apply_updates(parent, {
            "mandados_seguranca": list(parent.mandados_seguranca) + [writ],
            "tags": tags,
        })
        updated = append_history(updated, [CaseHistoryItem(
            date=to_iso(now),
            user=SYNC_USER,
            action="MS Protocolado Judicialmente",
            details=f"MS Protocolado Judicialmente. NPU: {filing.npu}",
        )], now)
        return self._save_parent(updated, None)

    # Case creation

    def generate_internal_id(self, now: Optional[datetime] = None) -> str:
        """Next ``YYYY.NNN`` identifier, numbered from the cached case count."""
        now = now or self.clock()
        with self._lock:
            count = len(self._cases) + 1
        return f"{now.year}.{count:03d}"

    def add_case(self, case: Case, actor: Optional[User]) -> MoveResult:
        """Create a case with a fresh history seed."""
        now = self.clock()
        user_name = actor.name if actor else SYSTEM_USER
        created = case.model_copy(update={
            "history": [CaseHistoryItem(
                date=to_iso(now),
                user=user_name,
                action="Criação",
                details="Ficha criada no sistema.",
            )],
            "last_update": to_iso(now),
        }, deep=True)

        try:
            self.store.save_case(created)
        except CaseStoreError as e:
            logger.error(
                "Failed to create case",
                extra={"extra_fields": {"case_id": case.id, "error": str(e)}}
            )
            return MoveResult(success=False, error=str(e))

        with self._lock:
            self._cases[created.id] = created
        self._emit([Notification(
            type=NotificationType.INFO,
            title="Novo Caso Criado",
            description=f"{created.client_name} foi adicionado por {user_name}.",
            timestamp=to_iso(now),
            case_id=created.id,
        )])
        self._audit(user_name, "Criação", created.internal_id)
        return MoveResult(success=True, case=created)

    def deadline_alerts(self, now: Optional[datetime] = None) -> List[Notification]:
        """One warning per case whose fatal deadline is today or tomorrow."""
        now = now or self.clock()
        today = now.date()
        alerts = []
        for case in self.list_cases():
            remaining = days_until(case.deadline_end, today)
            if remaining not in (0, 1):
                continue
            when = "HOJE" if remaining == 0 else "amanhã"
            alerts.append(Notification(
                type=NotificationType.WARNING,
                title="Prazo Vencendo!",
                description=f"O caso {case.client_name} tem um prazo fatal {when}.",
                timestamp=to_iso(now),
                case_id=case.id,
            ))
        if alerts:
            logger.info(
                "Deadline alerts raised",
                extra={"extra_fields": {"count": len(alerts), "date": local_date_iso(now)}}
            )
            self._emit(alerts)
        return alerts

    # Side effects

    def _case_index(self) -> Dict[str, Case]:
        with self._lock:
            return dict(self._cases)

    def _save_derived(self, derived: Case, source_id: str) -> bool:
        try:
            self.store.save_case(derived)
        except CaseStoreError as e:
            logger.error(
                "Derived case save failed",
                extra={"extra_fields": {
                    "derived_case_id": derived.id,
                    "source_case_id": source_id,
                    "error": str(e),
                }}
            )
            return False
        with self._lock:
            self._cases[derived.id] = derived
        logger.info(
            "Derived case saved",
            extra={"extra_fields": {"derived_case_id": derived.id, "source_case_id": source_id}}
        )
        return True

    def _save_parent(self, case: Case, derived_id: Optional[str]) -> bool:
        try:
            self.store.save_case(case)
        except CaseStoreError as e:
            logger.error(
                "Source case save failed after derived write",
                extra={"extra_fields": {
                    "case_id": case.id,
                    "derived_case_id": derived_id,
                    "error": str(e),
                }}
            )
            return False
        with self._lock:
            self._cases[case.id] = case
        return True

    def _emit(self, notifications: List[Notification]) -> None:
        if not notifications:
            return
        try:
            self.store.save_notifications(notifications)
        except CaseStoreError as e:
            logger.error(
                "Failed to store notifications",
                extra={"extra_fields": {"count": len(notifications), "error": str(e)}}
            )

        if self.publisher is None:
            return
        future = self._publish_executor.submit(self._publish, list(notifications))
        future.add_done_callback(self._publish_finished)

    def _publish(self, notifications: List[Notification]) -> None:
        """Publish notifications in order; runs on the publish executor."""
        for notification in notifications:
            try:
                result = self.publisher.publish_notification(notification)
            except PrevflowError as e:
                logger.error(
                    "Failed to publish notification",
                    extra={"extra_fields": {"notification_id": notification.id, "error": str(e)}}
                )
                continue
            if not result.success:
                logger.warning(
                    "Notification not published",
                    extra={"extra_fields": {"notification_id": notification.id, "error": result.error}}
                )

    @staticmethod
    def _publish_finished(future: Future) -> None:
        error = future.exception()
        if error is not None:
            logger.error(
                "Notification publishing crashed",
                extra={"extra_fields": {"error": str(error)}},
                exc_info=error
            )

    def _audit(
        self,
        user_name: str,
        action: str,
        details: Optional[str],
        category: LogCategory = LogCategory.CASE
    ) -> None:
        try:
            self.store.add_log(SystemLog(
                date=to_iso(self.clock()),
                user=user_name,
                action=action,
                details=details or "",
                category=category,
            ))
        except CaseStoreError as e:
            logger.error(
                "Failed to write system log",
                extra={"extra_fields": {"action": action, "error": str(e)}}
            )
