# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Board configuration models: columns, action zones and transition rules.
"""

from typing import Any, Dict, List, Literal, Optional, Union
from pydantic import Field, field_validator
from .base import CamelModel
from .enums import ViewType, TransitionType, UrgencyLevel

WILDCARD = "*"


class ColumnDefinition(CamelModel):
    """A named stage within a board."""

    id: str = Field(..., min_length=1, description="Column identifier")
    title: str = Field(..., min_length=1, description="Column title")


class ActionZone(CamelModel):
    """
    Virtual drop target shared by several boards.

    Dropping a case on a zone redirects the move to ``target_view`` /
    ``target_column_id``. Zones flagged ``clones_case`` create a derived case
    instead of moving the source.
    """

    id: str = Field(..., min_length=1, description="Zone identifier")
    label: str = Field(..., description="Display label")
    sub_label: str = Field(default="", description="Secondary label")
    target_view: ViewType = Field(..., description="Board the zone moves cases to")
    target_column_id: str = Field(..., description="Column the zone moves cases to")
    active_in_views: Union[List[ViewType], Literal["ALL"]] = Field(
        default="ALL", description="Boards showing the zone"
    )
    confirmation_title: str = Field(default="Confirmar Ação", description="Confirmation prompt title")
    confirmation_description: str = Field(
        default="Deseja mover este processo?", description="Confirmation prompt body"
    )
    is_dangerous: bool = Field(default=False, description="Whether the confirmation is highlighted")
    clones_case: bool = Field(default=False, description="Create a derived case instead of moving")
    seed_urgency: Optional[UrgencyLevel] = Field(None, description="Urgency applied on entry")
    seed_judicial_tasks: bool = Field(default=False, description="Append the judicial start checklist")
    seed_responsible_id: Optional[str] = Field(None, description="User assigned as responsible on entry")

    def is_active_in(self, view: str) -> bool:
        """Check whether the zone is shown on the given board."""
        if self.active_in_views == "ALL":
            return True
        return view in self.active_in_views


class TransitionRule(CamelModel):
    """Declarative rule selecting an interstitial data-collection step."""

    from_column: str = Field(..., alias="from", description="Source column or '*'")
    to_column: str = Field(..., alias="to", description="Destination column")
    type: TransitionType = Field(..., description="Transition type to run")

    @field_validator('from_column', 'to_column')
    @classmethod
    def validate_column(cls, v):
        """Validate column identifiers."""
        if not v or not v.strip():
            raise ValueError('Column identifier cannot be empty')
        return v.strip()

    def matches(self, source_column_id: str, target_column_id: str) -> bool:
        """Check whether the rule applies to a move."""
        if self.to_column != target_column_id:
            return False
        return self.from_column == WILDCARD or self.from_column == source_column_id


def column_titles(columns: Dict[str, List[ColumnDefinition]]) -> Dict[str, Any]:
    """Flatten a per-view column table into ``{column_id: title}``."""
    return {column.id: column.title for group in columns.values() for column in group}
