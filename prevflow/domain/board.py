# SPDX-License-Identifier: Apache-2.0

"""
Board topology: resolves drop targets (columns or action zones) into a
concrete view/column pair and builds the writ-of-mandamus derived case.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from ..models.board import ActionZone, ColumnDefinition
from ..models.entities import Case, CaseHistoryItem, User
from ..models.enums import UrgencyLevel, ViewType
from ..utils.dates import add_days, local_date_iso, to_iso, utc_now, APPEAL_WINDOW_DAYS
from .catalog import (
    ACTION_ZONES,
    VIEW_COLUMNS,
    JUDICIAL_START_TASKS,
    WRIT_DELAY_TASK,
    TAG_WRIT,
    TAG_URGENT,
    TAG_WRIT_REQUESTED,
    COL_JUD_TRIAGE,
    UNKNOWN_USER,
    users_by_id,
)
from .moves import apply_updates, clone_case, merge_tasks, new_tasks, union_tags

DENIED_COLUMN_MARKER = "indeferido"


@dataclass
class DropTarget:
    """Concrete destination of a drop."""
    target_column_id: str
    target_view: str
    is_clone: bool = False
    zone: Optional[ActionZone] = None


@dataclass
class ZoneConfirmation:
    """Prompt shown before a zone move is executed."""
    title: str
    description: str
    is_dangerous: bool = False


@dataclass
class WritCloneResult:
    """Derived writ-of-mandamus case plus the marked source case."""
    derived_case: Case
    source_case: Case


def column_belongs_to_view(
    column_id: str,
    view: str,
    columns: Optional[Dict[str, List[ColumnDefinition]]] = None
) -> bool:
    """Check whether ``column_id`` is declared by ``view``."""
    columns = columns if columns is not None else VIEW_COLUMNS
    return any(column.id == column_id for column in columns.get(view, []))


def owning_view(
    column_id: str,
    columns: Optional[Dict[str, List[ColumnDefinition]]] = None
) -> Optional[str]:
    """View declaring ``column_id``, or None when no view does."""
    columns = columns if columns is not None else VIEW_COLUMNS
    for view, definitions in columns.items():
        if any(column.id == column_id for column in definitions):
            return view
    return None


def find_zone(target_id: str, zones: Optional[List[ActionZone]] = None) -> Optional[ActionZone]:
    """Look up an action zone by id."""
    zones = zones if zones is not None else ACTION_ZONES
    for zone in zones:
        if zone.id == target_id:
            return zone
    return None


def resolve_drop_target(
    case: Case,
    target_id: str,
    zones: Optional[List[ActionZone]] = None,
    columns: Optional[Dict[str, List[ColumnDefinition]]] = None
) -> Optional[DropTarget]:
    """
    Resolve a drop target identifier for a case.

    Args:
        case: Case being dropped
        target_id: Column id or action zone id
        zones: Action zone table
        columns: Per-view column table

    Returns:
        DropTarget, or None when the target is not valid for the case
        (zone inactive on the case's board, or unknown column)
    """
    zone = find_zone(target_id, zones)
    if zone is not None:
        if not zone.is_active_in(case.view):
            return None
        return DropTarget(
            target_column_id=zone.target_column_id,
            target_view=zone.target_view,
            is_clone=zone.clones_case,
            zone=zone,
        )

    if column_belongs_to_view(target_id, case.view, columns):
        return DropTarget(target_column_id=target_id, target_view=case.view)

    view = owning_view(target_id, columns)
    if view is None:
        return None
    return DropTarget(target_column_id=target_id, target_view=view)


def is_noop(case: Case, target: DropTarget) -> bool:
    """A drop onto the case's current view/column changes nothing."""
    if target.is_clone:
        return False
    return target.target_view == case.view and target.target_column_id == case.column_id


def zone_confirmation(zone: ActionZone) -> ZoneConfirmation:
    """Confirmation prompt for a zone move."""
    return ZoneConfirmation(
        title=zone.confirmation_title,
        description=zone.confirmation_description,
        is_dangerous=zone.is_dangerous,
    )


def zone_seed_updates(
    case: Case,
    zone: ActionZone,
    users: Optional[List[User]] = None
) -> Tuple[Dict[str, Any], str]:
    """
    Updates and log line for a move through a zone.

    Args:
        case: Case being moved
        zone: Zone the case was dropped on
        users: Known users, for the seeded responsible's name

    Returns:
        Tuple of (updates, log)
    """
    updates: Dict[str, Any] = {}
    if zone.seed_judicial_tasks:
        updates["tasks"] = merge_tasks(case.tasks, new_tasks(JUDICIAL_START_TASKS))
    if zone.seed_urgency:
        updates["urgency"] = zone.seed_urgency
    if zone.seed_responsible_id:
        user = users_by_id(users or []).get(zone.seed_responsible_id)
        updates["responsible_id"] = zone.seed_responsible_id
        updates["responsible_name"] = user.name if user else UNKNOWN_USER
    return updates, f"{zone.label} via Zona de Ação."


def automatic_updates_for_column(column_id: str, now: Optional[datetime] = None) -> Dict[str, Any]:
    """Field updates implied by entering a column, regardless of transition."""
    updates: Dict[str, Any] = {}
    if DENIED_COLUMN_MARKER in column_id:
        today = local_date_iso(now)
        updates["deadline_start"] = today
        updates["deadline_end"] = add_days(today, APPEAL_WINDOW_DAYS)
    return updates


def build_writ_of_mandamus_case(source: Case, actor_name: str, now: Optional[datetime] = None) -> WritCloneResult:
    """
    Build the judicial copy created by the writ-of-mandamus zone.

    The source case stays on its column; it only gains the request tag and
    one history entry.
    """
    now = now or utc_now()
    stamp = to_iso(now)

    tasks = new_tasks(list(JUDICIAL_START_TASKS) + [WRIT_DELAY_TASK])
    derived = clone_case(
        source,
        overrides={
            "internal_id": f"{source.internal_id}-MS",
            "client_name": f"{source.client_name} (MS - Segurança)",
            "view": ViewType.JUDICIAL,
            "column_id": COL_JUD_TRIAGE,
            "urgency": UrgencyLevel.CRITICAL,
            "tags": [TAG_WRIT, TAG_URGENT],
            "tasks": tasks,
            "history": [CaseHistoryItem(
                date=stamp,
                user=actor_name,
                action="Criação Automática",
                details="Processo derivado de Mandado de Segurança.",
            )],
        },
        carry=("files",),
        now=now,
        id_prefix="c_ms_",
    )

    marked = apply_updates(source, {
        "tags": union_tags(source.tags, TAG_WRIT_REQUESTED),
        "history": list(source.history) + [CaseHistoryItem(
            date=stamp,
            user=actor_name,
            action="MS Impetrado",
            details="Gerada cópia paralela para Mandado de Segurança.",
        )],
        "last_update": stamp,
    })
    return WritCloneResult(derived_case=derived, source_case=marked)
