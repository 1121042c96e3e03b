# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Core entity models for the prevflow case tracker.
"""

from typing import List, Optional
from pydantic import Field, field_validator, model_validator
from .base import BaseEntity, CamelModel, generate_object_id
from .enums import (
    ViewType,
    UrgencyLevel,
    AppealOutcome,
    AppealStatus,
    MandadoStatus,
    MandadoReason,
    UserRole,
    NotificationType,
    LogCategory
)
from ..utils.dates import utc_now_iso


class Task(CamelModel):
    """Checklist item attached to a case."""

    id: str = Field(default_factory=lambda: generate_object_id("t_"), description="Task identifier")
    text: str = Field(..., min_length=1, description="Task description")
    completed: bool = Field(default=False, description="Whether the task is done")


class CaseFile(CamelModel):
    """File attached to a case."""

    id: str = Field(default_factory=lambda: generate_object_id("f_"), description="File identifier")
    name: str = Field(..., description="File name")
    type: str = Field(default="", description="MIME type")
    size: int = Field(default=0, ge=0, description="Size in bytes")
    upload_date: Optional[str] = Field(None, description="Upload timestamp")
    url: Optional[str] = Field(None, description="Download URL")
    category: Optional[str] = Field(None, description="Document category")


class CaseHistoryItem(CamelModel):
    """Append-only history entry."""

    id: str = Field(default_factory=lambda: generate_object_id("h_"), description="Entry identifier")
    date: str = Field(default_factory=utc_now_iso, description="Entry timestamp")
    user: str = Field(..., description="Acting user name")
    action: str = Field(..., description="Action label")
    details: Optional[str] = Field(None, description="Human-readable details")


class MandadoSeguranca(CamelModel):
    """Writ of mandamus filed on behalf of a case."""

    id: str = Field(default_factory=lambda: generate_object_id("ms_"), description="Writ identifier")
    npu: str = Field(..., description="Judicial process number")
    filing_date: str = Field(..., description="Filing date")
    status: MandadoStatus = Field(default=MandadoStatus.AGUARDANDO, description="Writ status")
    reason: MandadoReason = Field(default=MandadoReason.DEMORA_ANALISE, description="Grounds")
    notes: Optional[str] = Field(None, description="Free notes")


class Case(BaseEntity):
    """A client matter tracked on the boards."""

    internal_id: str = Field(..., min_length=1, description="Human-readable identifier")
    client_name: str = Field(..., min_length=1, description="Client full name")
    cpf: str = Field(default="", description="Client CPF")
    phone: Optional[str] = Field(None, description="Client phone")
    email: Optional[str] = Field(None, description="Client email")

    view: ViewType = Field(..., description="Board the case lives on")
    column_id: str = Field(..., min_length=1, description="Column within the board")
    benefit_type: Optional[str] = Field(None, description="Benefit type code")
    urgency: UrgencyLevel = Field(default=UrgencyLevel.NORMAL, description="Urgency level")

    responsible_id: str = Field(default="", description="Responsible user ID")
    responsible_name: str = Field(default="", description="Responsible user name")

    created_at: str = Field(default_factory=utc_now_iso, description="Creation timestamp")
    last_update: str = Field(default_factory=utc_now_iso, description="Last update timestamp")
    last_checked_at: Optional[str] = Field(None, description="Last INSS status check")

    # Administrative identifiers
    protocol_number: Optional[str] = None
    protocol_date: Optional[str] = None
    benefit_number: Optional[str] = None
    benefit_date: Optional[str] = None

    # Appeal
    appeal_ordinario_protocol: Optional[str] = None
    appeal_ordinario_date: Optional[str] = None
    appeal_ordinario_status: Optional[AppealStatus] = None
    appeal_especial_protocol: Optional[str] = None
    appeal_especial_date: Optional[str] = None
    appeal_especial_status: Optional[AppealStatus] = None
    appeal_decision_date: Optional[str] = None
    appeal_outcome: Optional[AppealOutcome] = None

    # Judicial
    pericia_date: Optional[str] = None
    pericia_location: Optional[str] = None
    mandados_seguranca: List[MandadoSeguranca] = Field(default_factory=list)

    # Deadlines
    deadline_start: Optional[str] = None
    deadline_end: Optional[str] = None
    dcb_date: Optional[str] = None
    exigency_details: Optional[str] = None

    missing_docs: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    history: List[CaseHistoryItem] = Field(default_factory=list)
    tasks: List[Task] = Field(default_factory=list)
    files: List[CaseFile] = Field(default_factory=list)

    parent_case_id: Optional[str] = Field(None, description="Source case for split/clone")

    @field_validator('client_name', 'internal_id')
    @classmethod
    def validate_not_blank(cls, v):
        """Validate required text fields."""
        if not v.strip():
            raise ValueError('Field cannot be empty')
        return v.strip()

    @model_validator(mode='after')
    def validate_lineage(self):
        """A case cannot be its own parent."""
        if self.parent_case_id and self.parent_case_id == self.id:
            raise ValueError('Case cannot be parent of itself')
        return self

    def has_tag(self, tag: str) -> bool:
        """Check whether the case carries a tag."""
        return tag in self.tags


class User(CamelModel):
    """Office member acting on cases."""

    id: str = Field(..., description="User identifier")
    name: str = Field(..., min_length=1, description="Display name")
    email: Optional[str] = Field(None, description="Email address")
    role: UserRole = Field(default=UserRole.SECRETARY, description="Office role")


class Notification(CamelModel):
    """Notification surfaced by the notification center."""

    id: str = Field(default_factory=lambda: generate_object_id("n_"), description="Notification identifier")
    type: NotificationType = Field(default=NotificationType.INFO, description="Notification kind")
    title: str = Field(..., description="Title")
    description: str = Field(default="", description="Body")
    timestamp: str = Field(default_factory=utc_now_iso, description="Creation timestamp")
    is_read: bool = Field(default=False, description="Read flag")
    case_id: Optional[str] = Field(None, description="Related case")


class SystemLog(CamelModel):
    """Office-wide audit log entry."""

    id: str = Field(default_factory=lambda: generate_object_id("log_"), description="Log identifier")
    date: str = Field(default_factory=utc_now_iso, description="Log timestamp")
    user: str = Field(..., description="Acting user name")
    action: str = Field(..., description="Action label")
    details: str = Field(default="", description="Details")
    category: LogCategory = Field(default=LogCategory.CASE, description="Log category")
