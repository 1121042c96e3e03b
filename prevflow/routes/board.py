# SPDX-License-Identifier: Apache-2.0

"""
Board endpoints.

Exposes the board read model and the move pipeline: drop requests, the
transition form submission that completes a pending move, and cancellation
of a pending move. The acting user is identified by the ``X-User-Id``
header; authentication happens upstream.
"""

from flask import request, jsonify, current_app
from flask_openapi3 import APIBlueprint, Tag
from opentelemetry import trace
from pydantic import BaseModel, Field
from typing import Any, Dict
import logging

from ..models.entities import User
from ..models.enums import ViewType
from ..models.requests import MoveRequest, TransitionFormData
from ..services.board import BoardService, MoveRequestOutcome, MoveStatus
from ..middleware.error_handler import (
    ConflictException,
    NotFoundException,
    ServiceUnavailableException,
    ValidationException,
)

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

USER_HEADER = "X-User-Id"

board_tag = Tag(name="Board", description="Case boards and moves")
board_bp = APIBlueprint(
    'board',
    __name__,
    url_prefix='/api',
    abp_tags=[board_tag]
)


class ViewPath(BaseModel):
    view: ViewType = Field(..., description="Board identifier")


class CasePath(BaseModel):
    case_id: str = Field(..., description="Case identifier")


def _service() -> BoardService:
    return current_app.board_service


def _actor() -> User:
    """Resolve the acting user from the request header."""
    user_id = request.headers.get(USER_HEADER, "").strip()
    if not user_id:
        raise ValidationException(f"Missing {USER_HEADER} header")
    user = _service().settings.find_user(user_id)
    if user is None:
        raise ValidationException(f"Unknown user: {user_id}")
    return user


def _require_case(case_id: str) -> None:
    if _service().get_case(case_id) is None:
        raise NotFoundException(f"Case {case_id} not found")


def _outcome_body(outcome: MoveRequestOutcome) -> Dict[str, Any]:
    body: Dict[str, Any] = {
        "status": outcome.status.value,
        "caseId": outcome.case_id,
        "targetColumnId": outcome.target_column_id,
        "transitionType": outcome.transition_type.value if outcome.transition_type else None,
        "derivedCaseIds": outcome.derived_case_ids or [],
    }
    if outcome.result is not None and outcome.result.case is not None:
        body["case"] = outcome.result.case.to_document()
    return body


def _respond(outcome: MoveRequestOutcome):
    """Map a move outcome onto an HTTP response."""
    if outcome.status == MoveStatus.IGNORED:
        raise ValidationException(f"Invalid drop target for case {outcome.case_id}")
    if outcome.status == MoveStatus.BLOCKED:
        raise ConflictException(outcome.block_reason or "Move blocked")
    if outcome.status == MoveStatus.FAILED:
        error = outcome.result.error if outcome.result else None
        raise ServiceUnavailableException(error or "Failed to persist move")
    if outcome.status == MoveStatus.PENDING:
        return jsonify(_outcome_body(outcome)), 202
    if outcome.status == MoveStatus.CLONED:
        return jsonify(_outcome_body(outcome)), 201
    return jsonify(_outcome_body(outcome)), 200


@board_bp.get('/board/<view>')
def get_board(path: ViewPath):
    """
    Get a board: its columns with their cases, and the action zones shown on it.
    """
    service = _service()
    view = ViewType(path.view).value
    cases = service.list_cases(view)

    columns = []
    for column in service.columns_for_view(view):
        columns.append({
            "id": column.id,
            "title": column.title,
            "cases": [case.to_document() for case in cases if case.column_id == column.id],
        })

    zones = [zone.to_document() for zone in service.zones if zone.is_active_in(view)]
    return jsonify({"view": view, "columns": columns, "zones": zones}), 200


@board_bp.get('/cases/<case_id>')
def get_case(path: CasePath):
    """Get one case."""
    case = _service().get_case(path.case_id)
    if case is None:
        raise NotFoundException(f"Case {path.case_id} not found")
    return jsonify(case.to_document()), 200


@board_bp.post('/cases/<case_id>/move')
def move_case(path: CasePath, body: MoveRequest):
    """
    Drop a case onto a column or an action zone.

    Returns 202 with the transition type when the move waits for transition
    data, 201 when a derived case was created, 400 when the target is not a
    valid drop for the case's board, 409 when an automation rule blocked
    the move.
    """
    with tracer.start_as_current_span("route.move_case") as span:
        span.set_attributes({"case.id": path.case_id, "move.target_id": body.target_id})
        _require_case(path.case_id)
        actor = _actor()
        outcome = _service().request_move(path.case_id, body.target_id, actor)
        logger.info(
            "Move requested",
            extra={"extra_fields": {
                "case_id": path.case_id,
                "target_id": body.target_id,
                "user_id": actor.id,
                "status": outcome.status.value,
            }}
        )
        return _respond(outcome)


@board_bp.post('/cases/<case_id>/transition')
def submit_transition(path: CasePath, body: TransitionFormData):
    """Complete the pending move of a case with the collected transition data."""
    service = _service()
    _require_case(path.case_id)
    actor = _actor()
    if service.pending_move(path.case_id) is None:
        raise ConflictException(f"No pending move for case {path.case_id}")
    return _respond(service.submit_transition(path.case_id, body, actor))


@board_bp.get('/cases/<case_id>/pending-move')
def get_pending_move(path: CasePath):
    """Get the move waiting for transition data, if any."""
    pending = _service().pending_move(path.case_id)
    if pending is None:
        raise NotFoundException(f"No pending move for case {path.case_id}")
    return jsonify({
        "caseId": pending.case_id,
        "sourceColumnId": pending.source_column_id,
        "targetColumnId": pending.target_column_id,
        "targetView": pending.target_view,
        "transitionType": pending.transition_type.value,
    }), 200


@board_bp.delete('/cases/<case_id>/pending-move')
def cancel_pending_move(path: CasePath):
    """Cancel the pending move of a case without changing it."""
    if not _service().cancel_pending_move(path.case_id):
        raise NotFoundException(f"No pending move for case {path.case_id}")
    return "", 204


@board_bp.get('/notifications')
def list_notifications():
    """Most recent notifications, newest first."""
    notifications = _service().store.get_notifications()
    return jsonify({"items": [n.to_document() for n in notifications]}), 200
