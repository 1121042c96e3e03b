# SPDX-License-Identifier: Apache-2.0

"""
Transition executor.

Turns the data collected for a typed transition into an update payload, a
history log line and any derived cases. Pure: persistence of the outcome is
the board service's job.
"""

import copy
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Mapping, Optional

from ..models.entities import Case, CaseHistoryItem, User
from ..models.enums import (
    AppealStatus,
    ConclusionOutcome,
    ReturnMode,
    TransitionType,
    UrgencyLevel,
    ViewType,
)
from ..models.requests import TransitionFormData
from ..utils.dates import appeal_deadline, format_date_br, to_iso, utc_now
from .catalog import (
    COL_ADMIN_PAYMENT,
    COL_ADMIN_TRIAGE,
    COL_APPEAL_BOARD,
    COL_APPEAL_CHAMBER,
    COL_APPEAL_TRIAGE,
    PARTIAL_APPEAL_TASK,
    PERICIA_COLUMNS,
    TAG_DENIED,
    TAG_GRANTED,
    TAG_MISSING_DOCS,
    TAG_PARTIAL_APPEAL,
    TAG_PARTIALLY_GRANTED,
    TAG_TO_RECEIVE,
    TAG_WRIT,
    TAG_WRIT_REQUESTED,
    UNKNOWN_USER,
)
from .moves import clone_case, new_tasks, replace_tag, union_tags

DEFAULT_LOG = "Movimentação realizada."
ADMIN_RETURN_LOG = "Processo retornado para fase Administrativa (Triagem)."
NO_PROTOCOL = "N/A"


@dataclass
class IncidentalFiling:
    """Writ of mandamus filing to record on the parent case."""
    parent_case_id: str
    npu: str
    filing_date: str


@dataclass
class TransitionOutcome:
    """Result of executing a transition for one pending move."""
    updates: Dict[str, Any]
    log: str
    target_column_id: str
    target_view: Optional[str] = None
    derived_cases: List[Case] = field(default_factory=list)
    incidental_filing: Optional[IncidentalFiling] = None
    terminated: bool = False


@dataclass
class _Transition:
    case: Case
    form: TransitionFormData
    actor: User
    now: datetime
    target_column_id: str
    target_view: Optional[str] = None
    updates: Dict[str, Any] = field(default_factory=dict)
    log: str = DEFAULT_LOG
    derived_cases: List[Case] = field(default_factory=list)
    terminated: bool = False


def derive_return_internal_id(internal_id: str) -> str:
    """Internal id for a new administrative request derived from a case."""
    if "-R" in internal_id:
        return f"{internal_id}2"
    return f"{internal_id}-R"


def _admin_return(t: _Transition) -> None:
    if t.form.return_mode == ReturnMode.CLONE:
        protocol = t.form.protocol_number
        stamp = to_iso(t.now)
        child = clone_case(
            t.case,
            overrides={
                "internal_id": derive_return_internal_id(t.case.internal_id),
                "view": ViewType.ADMIN,
                "column_id": COL_ADMIN_TRIAGE,
                "protocol_number": protocol,
                "protocol_date": t.form.protocol_date,
                "benefit_number": None,
                "benefit_date": None,
                "deadline_end": None,
                "appeal_ordinario_protocol": None,
                "appeal_especial_protocol": None,
                "history": [CaseHistoryItem(
                    date=stamp,
                    user=t.actor.name,
                    action="Novo Requerimento",
                    details=f"Processo derivado de {t.case.internal_id}. Protocolo: {protocol or NO_PROTOCOL}",
                )],
            },
            carry=("tasks", "files", "tags", "missing_docs", "mandados_seguranca"),
            now=t.now,
            id_prefix="c_new_",
        )
        t.derived_cases.append(child)
        t.terminated = True
        return

    t.target_column_id = COL_ADMIN_TRIAGE
    t.target_view = ViewType.ADMIN
    t.updates["view"] = ViewType.ADMIN
    t.log = ADMIN_RETURN_LOG


def _pendency(t: _Transition) -> None:
    missing = list(t.form.missing_docs or [])
    t.updates["missing_docs"] = missing
    t.log = f"Pendências atualizadas. Itens: {', '.join(missing) or 'Nenhum'}"
    if missing:
        t.updates["tags"] = union_tags(t.case.tags, TAG_MISSING_DOCS)


def _protocol_inss(t: _Transition) -> None:
    if t.target_column_id in PERICIA_COLUMNS:
        t.updates["pericia_date"] = t.form.pericia_date
        t.updates["pericia_location"] = t.form.pericia_location
        t.log = f"Perícia agendada para {format_date_br(t.form.pericia_date)}."
        return
    t.updates["protocol_number"] = t.form.protocol_number
    t.updates["protocol_date"] = t.form.protocol_date
    t.log = f"Protocolo registrado: {t.form.protocol_number}"


def _protocol_appeal(t: _Transition) -> None:
    if t.target_column_id == COL_APPEAL_BOARD:
        t.updates["appeal_ordinario_protocol"] = t.form.appeal_ordinario_protocol
        t.updates["appeal_ordinario_date"] = t.form.appeal_ordinario_date
        t.updates["appeal_ordinario_status"] = AppealStatus.AGUARDANDO
        t.log = "Recurso Ordinário interposto."
    elif t.target_column_id == COL_APPEAL_CHAMBER:
        t.updates["appeal_especial_protocol"] = t.form.appeal_especial_protocol
        t.updates["appeal_especial_date"] = t.form.appeal_especial_date
        t.updates["appeal_especial_status"] = AppealStatus.AGUARDANDO
        t.log = "Recurso Especial interposto."


def _appeal_return(t: _Transition) -> None:
    t.updates["appeal_decision_date"] = t.form.appeal_decision_date
    t.updates["appeal_outcome"] = t.form.appeal_outcome
    t.log = f"Retorno de Recurso. Resultado: {t.form.appeal_outcome}"


def _deadline(t: _Transition) -> None:
    t.updates["deadline_start"] = t.form.deadline_start
    t.updates["deadline_end"] = t.form.deadline_end
    t.updates["exigency_details"] = t.form.exigency_details
    t.log = f"Exigência aberta. Prazo fatal: {format_date_br(t.form.deadline_end)}"


def _split_partial(t: _Transition) -> Case:
    """Child case carrying the denied part of a partially granted decision."""
    stamp = to_iso(t.now)
    history = copy.deepcopy(list(t.case.history)) + [CaseHistoryItem(
        date=stamp,
        user=t.actor.name,
        action="Criação",
        details=f"Processo desmembrado de {t.case.internal_id} (decisão parcial).",
    )]
    return clone_case(
        t.case,
        overrides={
            "internal_id": f"{t.case.internal_id}R",
            "view": ViewType.RECURSO_ADM,
            "column_id": COL_APPEAL_TRIAGE,
            "deadline_start": t.form.benefit_date,
            "deadline_end": t.form.deadline_end,
            "tags": [TAG_PARTIAL_APPEAL, TAG_DENIED],
            "benefit_number": None,
            "tasks": new_tasks([PARTIAL_APPEAL_TASK]),
            "history": history,
        },
        carry=("files",),
        now=t.now,
        id_prefix="c_split_",
    )


def _conclusion(t: _Transition) -> None:
    t.updates["benefit_number"] = t.form.benefit_number
    t.updates["benefit_date"] = t.form.benefit_date
    outcome = t.form.outcome

    if outcome == ConclusionOutcome.PARTIAL:
        t.target_column_id = COL_ADMIN_PAYMENT
        t.target_view = ViewType.ADMIN
        t.updates["dcb_date"] = t.form.dcb_date
        t.updates["tags"] = union_tags(t.case.tags, TAG_PARTIALLY_GRANTED, TAG_TO_RECEIVE)
        t.updates["urgency"] = UrgencyLevel.HIGH
        t.log = f"Decisão INSS: PARCIALMENTE PROVIDO. NB: {t.form.benefit_number}."
        t.derived_cases.append(_split_partial(t))

    elif outcome == ConclusionOutcome.GRANTED:
        t.updates["dcb_date"] = t.form.dcb_date
        tags = replace_tag(t.case.tags, TAG_DENIED, TAG_GRANTED)
        if t.target_column_id == COL_ADMIN_PAYMENT:
            tags = union_tags(tags, TAG_TO_RECEIVE)
        t.updates["tags"] = tags
        t.log = f"Concessão Registrada. NB: {t.form.benefit_number}"

    elif outcome == ConclusionOutcome.DENIED:
        deadline_end = t.form.deadline_end or appeal_deadline(t.form.benefit_date)
        t.updates["deadline_end"] = deadline_end
        t.updates["tags"] = replace_tag(t.case.tags, TAG_GRANTED, TAG_DENIED)
        t.log = f"Indeferimento Registrado. Prazo Recursal: {format_date_br(deadline_end)}"


TRANSITION_HANDLERS: Dict[TransitionType, Callable[[_Transition], None]] = {
    TransitionType.ADMIN_RETURN: _admin_return,
    TransitionType.PENDENCY: _pendency,
    TransitionType.PROTOCOL_INSS: _protocol_inss,
    TransitionType.PROTOCOL_APPEAL: _protocol_appeal,
    TransitionType.APPEAL_RETURN: _appeal_return,
    TransitionType.DEADLINE: _deadline,
    TransitionType.CONCLUSION_NB: _conclusion,
}

_missing = set(TransitionType) - set(TRANSITION_HANDLERS)
if _missing:
    raise RuntimeError(f"Unhandled transition types: {sorted(k.value for k in _missing)}")


def _reassign(t: _Transition, users: Mapping[str, User]) -> None:
    new_id = t.form.new_responsible_id
    if not new_id or new_id == t.case.responsible_id:
        return
    user = users.get(new_id)
    name = user.name if user else UNKNOWN_USER
    t.updates["responsible_id"] = new_id
    t.updates["responsible_name"] = name
    t.log += f" | Responsável alterado para {name}"


def _incidental_filing(
    t: _Transition,
    transition_type: TransitionType,
    cases: Mapping[str, Case]
) -> Optional[IncidentalFiling]:
    if transition_type != TransitionType.PROTOCOL_INSS:
        return None
    if not (t.case.has_tag(TAG_WRIT) or t.case.has_tag(TAG_WRIT_REQUESTED)):
        return None
    if not t.case.parent_case_id or t.case.parent_case_id not in cases:
        return None
    return IncidentalFiling(
        parent_case_id=t.case.parent_case_id,
        npu=t.form.protocol_number or NO_PROTOCOL,
        filing_date=t.form.protocol_date or to_iso(t.now),
    )


def execute_transition(
    case: Optional[Case],
    transition_type: TransitionType,
    target_column_id: str,
    form: TransitionFormData,
    actor: Optional[User],
    users: Optional[List[User]] = None,
    cases: Optional[Mapping[str, Case]] = None,
    now: Optional[datetime] = None
) -> Optional[TransitionOutcome]:
    """
    Execute a transition for a pending move.

    Args:
        case: Case being moved
        transition_type: Transition selected by the rule matcher
        target_column_id: Resolved destination column
        form: Data collected for the transition
        actor: User submitting the form
        users: Known users, for responsible-name lookup
        cases: Known cases by id, for the writ-of-mandamus parent lookup
        now: Execution instant

    Returns:
        TransitionOutcome, or None when the case or actor is missing
    """
    if case is None or actor is None:
        return None

    transition_type = TransitionType(transition_type)
    t = _Transition(
        case=case,
        form=form,
        actor=actor,
        now=now or utc_now(),
        target_column_id=target_column_id,
    )

    TRANSITION_HANDLERS[transition_type](t)

    if t.terminated:
        return TransitionOutcome(
            updates={},
            log=t.log,
            target_column_id=case.column_id,
            target_view=case.view,
            derived_cases=t.derived_cases,
            terminated=True,
        )

    _reassign(t, {user.id: user for user in (users or [])})

    return TransitionOutcome(
        updates=t.updates,
        log=t.log,
        target_column_id=t.target_column_id,
        target_view=t.target_view,
        derived_cases=t.derived_cases,
        incidental_filing=_incidental_filing(t, transition_type, cases or {}),
    )
