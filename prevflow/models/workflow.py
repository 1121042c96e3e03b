# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Workflow automation rule models.

Conditions and actions are closed tagged unions discriminated by ``type``;
the automation engine dispatches on ``ConditionKind`` / ``ActionKind``.
"""

from typing import Annotated, List, Literal, Optional, Union
from pydantic import Field, field_validator
from .base import CamelModel, generate_object_id
from .enums import UrgencyLevel, WorkflowTrigger


def _condition_id() -> str:
    return generate_object_id("wc_")


def _action_id() -> str:
    return generate_object_id("wa_")


# Conditions

class TagContainsCondition(CamelModel):
    """Case tags include ``value``."""
    id: str = Field(default_factory=_condition_id)
    type: Literal["TAG_CONTAINS"] = "TAG_CONTAINS"
    value: str


class BenefitTypeCondition(CamelModel):
    """Case benefit type equals ``value``."""
    id: str = Field(default_factory=_condition_id)
    type: Literal["BENEFIT_TYPE"] = "BENEFIT_TYPE"
    value: str


class FieldEmptyCondition(CamelModel):
    """Case field named by ``value`` is blank."""
    id: str = Field(default_factory=_condition_id)
    type: Literal["FIELD_EMPTY"] = "FIELD_EMPTY"
    value: str = Field(..., min_length=1)


class FieldNotEmptyCondition(CamelModel):
    """Case field named by ``value`` is filled in."""
    id: str = Field(default_factory=_condition_id)
    type: Literal["FIELD_NOT_EMPTY"] = "FIELD_NOT_EMPTY"
    value: str = Field(..., min_length=1)


class UrgencyIsCondition(CamelModel):
    """Case urgency equals ``value``."""
    id: str = Field(default_factory=_condition_id)
    type: Literal["URGENCY_IS"] = "URGENCY_IS"
    value: UrgencyLevel


WorkflowCondition = Annotated[
    Union[
        TagContainsCondition,
        BenefitTypeCondition,
        FieldEmptyCondition,
        FieldNotEmptyCondition,
        UrgencyIsCondition,
    ],
    Field(discriminator="type"),
]


# Actions

class AddTaskAction(CamelModel):
    """Append a task whose text is ``payload``."""
    id: str = Field(default_factory=_action_id)
    type: Literal["ADD_TASK"] = "ADD_TASK"
    payload: str = Field(..., min_length=1)


class SetResponsibleAction(CamelModel):
    """Assign the user whose id is ``payload``."""
    id: str = Field(default_factory=_action_id)
    type: Literal["SET_RESPONSIBLE"] = "SET_RESPONSIBLE"
    payload: str = Field(..., min_length=1)


class BlockMoveAction(CamelModel):
    """Veto the move; ``payload`` is the reason shown to the user."""
    id: str = Field(default_factory=_action_id)
    type: Literal["BLOCK_MOVE"] = "BLOCK_MOVE"
    payload: Optional[str] = None


class SetUrgencyAction(CamelModel):
    """Overwrite the case urgency."""
    id: str = Field(default_factory=_action_id)
    type: Literal["SET_URGENCY"] = "SET_URGENCY"
    payload: UrgencyLevel


class AddTagAction(CamelModel):
    """Add a tag if absent."""
    id: str = Field(default_factory=_action_id)
    type: Literal["ADD_TAG"] = "ADD_TAG"
    payload: str = Field(..., min_length=1)


class SendNotificationAction(CamelModel):
    """Queue a notification whose description is ``payload``."""
    id: str = Field(default_factory=_action_id)
    type: Literal["SEND_NOTIFICATION"] = "SEND_NOTIFICATION"
    payload: str = ""


WorkflowAction = Annotated[
    Union[
        AddTaskAction,
        SetResponsibleAction,
        BlockMoveAction,
        SetUrgencyAction,
        AddTagAction,
        SendNotificationAction,
    ],
    Field(discriminator="type"),
]


class WorkflowRule(CamelModel):
    """User-configured automation fired when a case enters a column."""

    id: str = Field(default_factory=lambda: generate_object_id("wr_"), description="Rule identifier")
    name: str = Field(default="Nova Automação Personalizada", description="Rule name")
    is_active: bool = Field(default=True, description="Whether the rule runs")
    trigger: WorkflowTrigger = Field(default=WorkflowTrigger.COLUMN_ENTER, description="Firing event")
    target_column_id: str = Field(..., min_length=1, description="Column whose entry fires the rule")
    conditions: List[WorkflowCondition] = Field(default_factory=list)
    actions: List[WorkflowAction] = Field(default_factory=list)

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        """Validate rule name."""
        if not v.strip():
            raise ValueError('Rule name cannot be empty')
        return v.strip()
