# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Request models for board operations.
"""

from typing import List, Optional
from pydantic import Field, field_validator
from .base import CamelModel
from .enums import AppealOutcome, ConclusionOutcome, ReturnMode


class TransitionFormData(CamelModel):
    """
    Structured data collected before a typed transition is finalized.

    Every field is optional; which ones matter depends on the transition
    type being executed.
    """

    # Protocol / hearing
    protocol_number: Optional[str] = Field(None, description="INSS or judicial protocol")
    protocol_date: Optional[str] = Field(None, description="Protocol filing date")
    pericia_date: Optional[str] = Field(None, description="Hearing/exam date")
    pericia_location: Optional[str] = Field(None, description="Hearing/exam location")

    # Appeals
    appeal_ordinario_protocol: Optional[str] = None
    appeal_ordinario_date: Optional[str] = None
    appeal_especial_protocol: Optional[str] = None
    appeal_especial_date: Optional[str] = None
    appeal_decision_date: Optional[str] = None
    appeal_outcome: Optional[AppealOutcome] = None

    # Deadlines
    deadline_start: Optional[str] = None
    deadline_end: Optional[str] = None
    exigency_details: Optional[str] = None

    # Conclusion
    benefit_number: Optional[str] = None
    benefit_date: Optional[str] = None
    dcb_date: Optional[str] = None
    outcome: Optional[ConclusionOutcome] = None

    # Pendency
    missing_docs: Optional[List[str]] = None

    # Admin return
    return_mode: Optional[ReturnMode] = None

    # Reassignment
    new_responsible_id: Optional[str] = None

    @field_validator('missing_docs')
    @classmethod
    def validate_missing_docs(cls, v):
        """Drop blank entries."""
        if v is None:
            return v
        return [doc.strip() for doc in v if doc and doc.strip()]

    @field_validator('protocol_number', 'benefit_number', 'new_responsible_id')
    @classmethod
    def validate_identifier(cls, v):
        """Normalize identifiers, treating blank input as absent."""
        if v is None:
            return v
        v = v.strip()
        return v or None


class MoveRequest(CamelModel):
    """Request to drop a case on a column or action zone."""

    target_id: str = Field(..., min_length=1, description="Column or action zone identifier")

    @field_validator('target_id')
    @classmethod
    def validate_target(cls, v):
        """Validate target identifier."""
        if not v.strip():
            raise ValueError('Target cannot be empty')
        return v.strip()
