# SPDX-License-Identifier: Apache-2.0

"""
Workflow automation engine.

Evaluates user-configured rules when a case enters a column and returns the
resulting updates, log lines and notifications without touching storage.
Conditions and actions are dispatched through tables keyed by
``ConditionKind`` and ``ActionKind``; both tables are checked for
completeness at import time.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from jsonpath_ng import parse as jsonpath_parse
from jsonpath_ng.exceptions import JSONPathError
from jsonpath_ng.ext import parse as jsonpath_ext_parse

from ..models.entities import Case, Notification, Task, User
from ..models.enums import ActionKind, ConditionKind, NotificationType, WorkflowTrigger
from ..models.workflow import WorkflowRule
from ..utils.dates import to_iso, utc_now
from .catalog import UNKNOWN_USER
from .moves import union_tags

logger = logging.getLogger(__name__)

DEFAULT_BLOCK_REASON = "Movimentação bloqueada por regra de automação."


@dataclass
class AutomationResult:
    """Outcome of evaluating workflow rules for one column entry."""
    updates: Dict[str, Any] = field(default_factory=dict)
    logs: List[str] = field(default_factory=list)
    notifications: List[Notification] = field(default_factory=list)
    blocked: bool = False
    block_reason: Optional[str] = None


@dataclass
class _Evaluation:
    """Mutable state threaded through the actions of every matching rule."""
    case: Case
    users: Dict[str, User]
    now: datetime
    tags: List[str]
    tasks: List[Task]
    fields: Dict[str, Any] = field(default_factory=dict)
    logs: List[str] = field(default_factory=list)
    notifications: List[Notification] = field(default_factory=list)
    blocked: bool = False
    block_reason: Optional[str] = None

    def updates(self) -> Dict[str, Any]:
        updates = dict(self.fields)
        if self.tags != list(self.case.tags):
            updates["tags"] = self.tags
        if [task.text for task in self.tasks] != [task.text for task in self.case.tasks]:
            updates["tasks"] = self.tasks
        return updates


# Field resolution

def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, dict, set)):
        return len(value) == 0
    return False


def _attribute_name(name: str) -> Optional[str]:
    """Map a camelCase or snake_case field name onto a Case attribute."""
    if name in Case.model_fields:
        return name
    for attribute, info in Case.model_fields.items():
        if info.alias == name:
            return attribute
    return None


def resolve_field(case: Case, name: str) -> Any:
    """
    Read a case field named by attribute name, camelCase name or JSONPath.

    Unknown names and unparsable paths resolve to None.
    """
    name = name.strip()
    attribute = _attribute_name(name)
    if attribute is not None:
        return getattr(case, attribute)

    document = case.model_dump(by_alias=True, mode="json")
    path = name if name.startswith("$") else f"$.{name}"
    for parser in (jsonpath_ext_parse, jsonpath_parse):
        try:
            matches = parser(path).find(document)
        except (JSONPathError, TypeError) as e:
            logger.debug(
                "Field path could not be evaluated",
                extra={"extra_fields": {"path": path, "error": str(e)}}
            )
            continue
        if matches:
            return matches[0].value
    return None


# Conditions

def _tag_contains(case: Case, value: Any) -> bool:
    return value in case.tags


def _benefit_type(case: Case, value: Any) -> bool:
    return case.benefit_type == value


def _field_empty(case: Case, value: Any) -> bool:
    return _is_blank(resolve_field(case, value))


def _field_not_empty(case: Case, value: Any) -> bool:
    return not _is_blank(resolve_field(case, value))


def _urgency_is(case: Case, value: Any) -> bool:
    return case.urgency == value


CONDITION_HANDLERS: Dict[ConditionKind, Callable[[Case, Any], bool]] = {
    ConditionKind.TAG_CONTAINS: _tag_contains,
    ConditionKind.BENEFIT_TYPE: _benefit_type,
    ConditionKind.FIELD_EMPTY: _field_empty,
    ConditionKind.FIELD_NOT_EMPTY: _field_not_empty,
    ConditionKind.URGENCY_IS: _urgency_is,
}


# Actions

def _log_prefix(rule: WorkflowRule) -> str:
    return f"[Automação: {rule.name}]"


def _add_task(state: _Evaluation, rule: WorkflowRule, payload: Any) -> None:
    if any(task.text == payload for task in state.tasks):
        return
    state.tasks = state.tasks + [Task(text=payload)]
    state.logs.append(f"{_log_prefix(rule)} Tarefa criada: {payload}")


def _set_responsible(state: _Evaluation, rule: WorkflowRule, payload: Any) -> None:
    user = state.users.get(payload)
    name = user.name if user else UNKNOWN_USER
    state.fields["responsible_id"] = payload
    state.fields["responsible_name"] = name
    state.logs.append(f"{_log_prefix(rule)} Responsável definido: {name}")


def _block_move(state: _Evaluation, rule: WorkflowRule, payload: Any) -> None:
    state.blocked = True
    state.block_reason = payload or DEFAULT_BLOCK_REASON


def _set_urgency(state: _Evaluation, rule: WorkflowRule, payload: Any) -> None:
    state.fields["urgency"] = payload
    state.logs.append(f"{_log_prefix(rule)} Urgência alterada para: {payload}")


def _add_tag(state: _Evaluation, rule: WorkflowRule, payload: Any) -> None:
    if payload in state.tags:
        return
    state.tags = union_tags(state.tags, payload)
    state.logs.append(f"{_log_prefix(rule)} Etiqueta adicionada: {payload}")


def _send_notification(state: _Evaluation, rule: WorkflowRule, payload: Any) -> None:
    state.notifications.append(Notification(
        type=NotificationType.WARNING,
        title=f"Automação: {rule.name}",
        description=payload or "",
        timestamp=to_iso(state.now),
        case_id=state.case.id,
    ))
    state.logs.append(f"{_log_prefix(rule)} Notificação enviada: {payload}")


ACTION_HANDLERS: Dict[ActionKind, Callable[[_Evaluation, WorkflowRule, Any], None]] = {
    ActionKind.ADD_TASK: _add_task,
    ActionKind.SET_RESPONSIBLE: _set_responsible,
    ActionKind.BLOCK_MOVE: _block_move,
    ActionKind.SET_URGENCY: _set_urgency,
    ActionKind.ADD_TAG: _add_tag,
    ActionKind.SEND_NOTIFICATION: _send_notification,
}


def _check_dispatch_tables() -> None:
    missing_conditions = set(ConditionKind) - set(CONDITION_HANDLERS)
    missing_actions = set(ActionKind) - set(ACTION_HANDLERS)
    if missing_conditions or missing_actions:
        raise RuntimeError(
            f"Unhandled workflow kinds: conditions={sorted(k.value for k in missing_conditions)}, "
            f"actions={sorted(k.value for k in missing_actions)}"
        )


_check_dispatch_tables()


# Evaluation

def applicable_rules(rules: List[WorkflowRule], target_column_id: str) -> List[WorkflowRule]:
    """Active column-entry rules for the destination column, in order."""
    return [
        rule for rule in rules
        if rule.is_active
        and rule.trigger == WorkflowTrigger.COLUMN_ENTER
        and rule.target_column_id == target_column_id
    ]


def rule_matches(case: Case, rule: WorkflowRule) -> bool:
    """All conditions of ``rule`` hold for ``case``."""
    return all(
        CONDITION_HANDLERS[ConditionKind(condition.type)](case, condition.value)
        for condition in rule.conditions
    )


def evaluate_workflow(
    case: Case,
    rules: List[WorkflowRule],
    target_column_id: str,
    users: Optional[List[User]] = None,
    now: Optional[datetime] = None
) -> AutomationResult:
    """
    Evaluate workflow rules for a case entering ``target_column_id``.

    Args:
        case: Case with the move's explicit updates already applied
        rules: Configured workflow rules
        target_column_id: Destination column
        users: Known users, for responsible-name lookup
        now: Evaluation instant

    Returns:
        AutomationResult; a blocked result carries no updates, logs or
        notifications
    """
    state = _Evaluation(
        case=case,
        users={user.id: user for user in (users or [])},
        now=now or utc_now(),
        tags=list(case.tags),
        tasks=list(case.tasks),
    )

    for rule in applicable_rules(rules, target_column_id):
        if not rule_matches(case, rule):
            continue
        for action in rule.actions:
            ACTION_HANDLERS[ActionKind(action.type)](state, rule, action.payload)
            if state.blocked:
                logger.info(
                    "Move blocked by workflow rule",
                    extra={"extra_fields": {
                        "case_id": case.id,
                        "rule_id": rule.id,
                        "target_column_id": target_column_id,
                    }}
                )
                return AutomationResult(blocked=True, block_reason=state.block_reason)

    return AutomationResult(
        updates=state.updates(),
        logs=state.logs,
        notifications=state.notifications,
    )
