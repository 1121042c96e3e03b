# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Base models with common configuration and identifiers.
"""

from typing import Any, Dict
from pydantic import BaseModel, Field, ConfigDict
from pydantic.alias_generators import to_camel
from bson import ObjectId


def generate_object_id(prefix: str = "") -> str:
    """Generate a new unique identifier, optionally prefixed."""
    return f"{prefix}{ObjectId()}"


class CamelModel(BaseModel):
    """Base model whose wire/storage form uses camelCase keys."""

    model_config = ConfigDict(
        # Wire format is camelCase, attributes are snake_case
        alias_generator=to_camel,
        # Allow population by field name or alias
        populate_by_name=True,
        # Use enum values instead of enum objects
        use_enum_values=True,
        # Validate assignment
        validate_assignment=True
    )

    def to_document(self) -> Dict[str, Any]:
        """Serialize to the camelCase document stored and sent to clients."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class BaseEntity(CamelModel):
    """Base entity with a unique identifier."""

    id: str = Field(default_factory=generate_object_id, description="Unique identifier")
