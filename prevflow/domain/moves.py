# SPDX-License-Identifier: Apache-2.0

"""
Pure helpers for building the next state of a case.

Every function returns new model instances; the input case is never
mutated, so a vetoed move leaves the caller's copy untouched.
"""

import copy
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from ..models.entities import Case, CaseHistoryItem, Task
from ..models.base import generate_object_id
from ..utils.dates import to_iso, utc_now

MOVE_ACTION = "Movimentação"

# Collections reset on a derived case unless explicitly carried over.
CASE_COLLECTIONS = ("history", "tasks", "files", "tags", "missing_docs", "mandados_seguranca")


def union_tags(existing: Iterable[str], *additions: str) -> List[str]:
    """Append tags that are not already present, keeping order."""
    tags = list(existing)
    for tag in additions:
        if tag not in tags:
            tags.append(tag)
    return tags


def remove_tags(existing: Iterable[str], *removals: str) -> List[str]:
    """Drop every occurrence of the given tags."""
    return [tag for tag in existing if tag not in removals]


def replace_tag(existing: Iterable[str], old: str, new: str) -> List[str]:
    """Swap ``old`` for ``new`` (added once, at the end)."""
    return union_tags(remove_tags(existing, old), new)


def merge_tasks(existing: Iterable[Task], additions: Iterable[Task]) -> List[Task]:
    """Append tasks whose text is not already on the list."""
    tasks = list(existing)
    texts = {task.text for task in tasks}
    for task in additions:
        if task.text not in texts:
            tasks.append(task)
            texts.add(task.text)
    return tasks


def new_tasks(texts: Iterable[str]) -> List[Task]:
    """Build open tasks from plain text."""
    return [Task(text=text) for text in texts]


def apply_updates(case: Case, updates: Dict[str, Any]) -> Case:
    """
    Return a validated copy of ``case`` with ``updates`` applied.

    Args:
        case: Current case
        updates: Field values keyed by attribute name

    Returns:
        New Case instance
    """
    if not updates:
        return case.model_copy(deep=True)
    data = case.model_dump()
    data.update(updates)
    return Case.model_validate(data)


def merge_updates(case: Case, updates: Dict[str, Any]) -> Dict[str, Any]:
    """
    Fold a second update payload onto a case.

    Scalar fields overwrite; tags and tasks are unioned with what the case
    already carries so that neither side loses entries.
    """
    merged = dict(updates)
    if "tags" in updates:
        merged["tags"] = union_tags(case.tags, *updates["tags"])
    if "tasks" in updates:
        merged["tasks"] = merge_tasks(case.tasks, updates["tasks"])
    return merged


def moved_case(
    case: Case,
    target_column_id: str,
    updates: Dict[str, Any],
    target_view: Optional[str] = None
) -> Case:
    """Apply explicit updates plus the new column (and view, when given)."""
    payload = dict(updates)
    payload["column_id"] = target_column_id
    if target_view and target_view != case.view:
        payload["view"] = target_view
    return apply_updates(case, payload)


def history_entries(
    logs: Iterable[str],
    user_name: str,
    now: Optional[datetime] = None,
    action: str = MOVE_ACTION
) -> List[CaseHistoryItem]:
    """One history entry per non-empty log line."""
    date = to_iso(now or utc_now())
    return [
        CaseHistoryItem(date=date, user=user_name, action=action, details=log)
        for log in logs
        if log
    ]


def append_history(case: Case, entries: List[CaseHistoryItem], now: Optional[datetime] = None) -> Case:
    """Append history entries and stamp ``last_update``."""
    return apply_updates(case, {
        "history": list(case.history) + entries,
        "last_update": to_iso(now or utc_now()),
    })


def clone_case(
    case: Case,
    overrides: Dict[str, Any],
    carry: Iterable[str] = (),
    now: Optional[datetime] = None,
    id_prefix: str = "c_"
) -> Case:
    """
    Build a derived case from ``case``.

    Scalar fields are copied from the source. Collections listed in
    ``carry`` are deep-copied; the others start empty. ``overrides`` is
    applied last and always wins. The derived case gets a fresh id,
    fresh timestamps and ``parent_case_id`` pointing at the source.

    Args:
        case: Source case
        overrides: Field values for the derived case
        carry: Collection attribute names to deep-copy from the source
        now: Creation instant
        id_prefix: Prefix for the generated identifier

    Returns:
        New Case instance
    """
    carried = set(carry)
    unknown = carried - set(CASE_COLLECTIONS)
    if unknown:
        raise ValueError(f"Cannot carry non-collection fields: {sorted(unknown)}")

    stamp = to_iso(now or utc_now())
    data = case.model_dump(exclude=set(CASE_COLLECTIONS))
    for name in CASE_COLLECTIONS:
        data[name] = copy.deepcopy(getattr(case, name)) if name in carried else []

    data.update({
        "id": generate_object_id(id_prefix),
        "parent_case_id": case.id,
        "created_at": stamp,
        "last_update": stamp,
    })
    data.update(overrides)
    return Case.model_validate(data)
