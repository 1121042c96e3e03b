# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Enumeration types for the prevflow case tracker.
"""

from enum import Enum


class ViewType(str, Enum):
    """Top-level Kanban boards."""
    ADMIN = "ADMIN"
    AUX_DOENCA = "AUX_DOENCA"
    RECURSO_ADM = "RECURSO_ADM"
    JUDICIAL = "JUDICIAL"
    MESA_DECISAO = "MESA_DECISAO"
    ARCHIVED = "ARCHIVED"


class UrgencyLevel(str, Enum):
    """Case urgency levels."""
    NORMAL = "NORMAL"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class TransitionType(str, Enum):
    """Structured data collection flows that run before a move is finalized."""
    PROTOCOL_INSS = "PROTOCOL_INSS"
    PROTOCOL_APPEAL = "PROTOCOL_APPEAL"
    DEADLINE = "DEADLINE"
    CONCLUSION_NB = "CONCLUSION_NB"
    PENDENCY = "PENDENCY"
    APPEAL_RETURN = "APPEAL_RETURN"
    ADMIN_RETURN = "ADMIN_RETURN"


class ConclusionOutcome(str, Enum):
    """INSS decision outcome captured by the conclusion form."""
    GRANTED = "GRANTED"
    DENIED = "DENIED"
    PARTIAL = "PARTIAL"


class ReturnMode(str, Enum):
    """How a case returns to the administrative board."""
    CLONE = "CLONE"
    MOVE = "MOVE"


class AppealOutcome(str, Enum):
    """Outcome of an administrative appeal."""
    PROVIDO = "PROVIDO"
    IMPROVIDO = "IMPROVIDO"
    PARCIAL = "PARCIAL"


class AppealStatus(str, Enum):
    """Status of an ordinary or special appeal."""
    AGUARDANDO = "AGUARDANDO"
    PROVIDO = "PROVIDO"
    IMPROVIDO = "IMPROVIDO"
    EXIGENCIA = "EXIGENCIA"
    BAIXADO = "BAIXADO"


class MandadoStatus(str, Enum):
    """Writ of mandamus status."""
    AGUARDANDO = "AGUARDANDO"
    LIMINAR_DEFERIDA = "LIMINAR_DEFERIDA"
    LIMINAR_INDEFERIDA = "LIMINAR_INDEFERIDA"
    SENTENCA = "SENTENCA"


class MandadoReason(str, Enum):
    """Grounds for a writ of mandamus."""
    DEMORA_ANALISE = "DEMORA_ANALISE"
    DEMORA_RECURSO = "DEMORA_RECURSO"
    OUTROS = "OUTROS"


class UserRole(str, Enum):
    """Office roles."""
    ADMIN = "ADMIN"
    LAWYER = "LAWYER"
    SECRETARY = "SECRETARY"
    FINANCIAL = "FINANCIAL"


class NotificationType(str, Enum):
    """Notification kinds shown by the notification center."""
    INFO = "INFO"
    WARNING = "WARNING"
    SUCCESS = "SUCCESS"
    ALERT = "ALERT"


class LogCategory(str, Enum):
    """System log categories."""
    CASE = "CASE"
    SYSTEM = "SYSTEM"
    USER_MANAGEMENT = "USER_MANAGEMENT"
    TEMPLATE = "TEMPLATE"
    SECURITY = "SECURITY"
    WORKFLOW = "WORKFLOW"


class WorkflowTrigger(str, Enum):
    """Events that fire workflow rules."""
    COLUMN_ENTER = "COLUMN_ENTER"


class ConditionKind(str, Enum):
    """Workflow rule condition kinds."""
    TAG_CONTAINS = "TAG_CONTAINS"
    BENEFIT_TYPE = "BENEFIT_TYPE"
    FIELD_EMPTY = "FIELD_EMPTY"
    FIELD_NOT_EMPTY = "FIELD_NOT_EMPTY"
    URGENCY_IS = "URGENCY_IS"


class ActionKind(str, Enum):
    """Workflow rule action kinds."""
    ADD_TASK = "ADD_TASK"
    SET_RESPONSIBLE = "SET_RESPONSIBLE"
    BLOCK_MOVE = "BLOCK_MOVE"
    SET_URGENCY = "SET_URGENCY"
    ADD_TAG = "ADD_TAG"
    SEND_NOTIFICATION = "SEND_NOTIFICATION"
