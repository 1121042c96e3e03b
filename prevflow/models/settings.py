# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Office configuration models.
"""

from typing import Literal, Optional
from pydantic import Field
from .base import CamelModel, generate_object_id
from ..utils.dates import utc_now_iso


class SystemTag(CamelModel):
    """Tag offered by the tag picker."""

    id: str = Field(default_factory=lambda: generate_object_id("tag_"), description="Tag identifier")
    label: str = Field(..., min_length=1, description="Tag label as stored on cases")
    color_bg: str = Field(default="bg-slate-100", description="Background style")
    color_text: str = Field(default="text-slate-700", description="Text style")


class INSSAgency(CamelModel):
    """INSS agency or court where hearings take place."""

    id: str = Field(default_factory=lambda: generate_object_id("aps_"), description="Agency identifier")
    name: str = Field(..., min_length=1, description="Agency name")
    address: str = Field(default="", description="Street address")


class DocumentTemplate(CamelModel):
    """Stored document template; rendering happens client-side."""

    id: str = Field(default_factory=lambda: generate_object_id("tpl_"), description="Template identifier")
    title: str = Field(..., min_length=1, description="Template title")
    category: Literal["PROCURACAO", "CONTRATO", "DECLARACAO", "REQUERIMENTO", "OUTROS"] = "OUTROS"
    content: str = Field(default="", description="Rich text body")
    last_modified: Optional[str] = Field(default_factory=utc_now_iso, description="Last edit timestamp")
