# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Models package - Pydantic schemas and data models for prevflow.
"""

# Base models
from .base import CamelModel, BaseEntity, generate_object_id

# Enumerations
from .enums import (
    ViewType,
    UrgencyLevel,
    TransitionType,
    ConclusionOutcome,
    ReturnMode,
    AppealOutcome,
    AppealStatus,
    MandadoStatus,
    MandadoReason,
    UserRole,
    NotificationType,
    LogCategory,
    WorkflowTrigger,
    ConditionKind,
    ActionKind
)

# Core entities
from .entities import (
    Task,
    CaseFile,
    CaseHistoryItem,
    MandadoSeguranca,
    Case,
    User,
    Notification,
    SystemLog
)

# Board configuration
from .board import WILDCARD, ColumnDefinition, ActionZone, TransitionRule

# Workflow rules
from .workflow import (
    WorkflowRule,
    WorkflowCondition,
    WorkflowAction,
    TagContainsCondition,
    BenefitTypeCondition,
    FieldEmptyCondition,
    FieldNotEmptyCondition,
    UrgencyIsCondition,
    AddTaskAction,
    SetResponsibleAction,
    BlockMoveAction,
    SetUrgencyAction,
    AddTagAction,
    SendNotificationAction
)

# Office settings
from .settings import SystemTag, INSSAgency, DocumentTemplate

# Request models
from .requests import TransitionFormData, MoveRequest

__all__ = [
    # Base
    "CamelModel",
    "BaseEntity",
    "generate_object_id",

    # Enums
    "ViewType",
    "UrgencyLevel",
    "TransitionType",
    "ConclusionOutcome",
    "ReturnMode",
    "AppealOutcome",
    "AppealStatus",
    "MandadoStatus",
    "MandadoReason",
    "UserRole",
    "NotificationType",
    "LogCategory",
    "WorkflowTrigger",
    "ConditionKind",
    "ActionKind",

    # Entities
    "Task",
    "CaseFile",
    "CaseHistoryItem",
    "MandadoSeguranca",
    "Case",
    "User",
    "Notification",
    "SystemLog",

    # Board
    "WILDCARD",
    "ColumnDefinition",
    "ActionZone",
    "TransitionRule",

    # Workflow
    "WorkflowRule",
    "WorkflowCondition",
    "WorkflowAction",
    "TagContainsCondition",
    "BenefitTypeCondition",
    "FieldEmptyCondition",
    "FieldNotEmptyCondition",
    "UrgencyIsCondition",
    "AddTaskAction",
    "SetResponsibleAction",
    "BlockMoveAction",
    "SetUrgencyAction",
    "AddTagAction",
    "SendNotificationAction",

    # Settings
    "SystemTag",
    "INSSAgency",
    "DocumentTemplate",

    # Requests
    "TransitionFormData",
    "MoveRequest"
]
