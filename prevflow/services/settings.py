# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Office settings: tags, agencies, team, workflow rules and document templates.

Settings are stored as one MongoDB document per setting (``{id, value}``)
and read through a Redis cache that is invalidated on every write. Without
MongoDB the service keeps settings in memory.
"""

import logging
import threading
from typing import Any, Dict, List, Optional, Type

from opentelemetry import trace
from pydantic import BaseModel, TypeAdapter, ValidationError
from pymongo.errors import PyMongoError

from ..errors import SettingsError
from ..models.entities import User
from ..models.settings import DocumentTemplate, INSSAgency, SystemTag
from ..models.workflow import WorkflowRule
from ..domain.catalog import (
    DEFAULT_INSS_AGENCIES,
    DEFAULT_SYSTEM_TAGS,
    DEFAULT_USERS,
    DEFAULT_WORKFLOW_RULES,
)
from .mongodb import MongoDBService, SETTINGS
from .redis import RedisService

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

TAGS = "tags"
AGENCIES = "agencies"
USERS = "users"
WORKFLOW_RULES = "workflow_rules"
TEMPLATES = "templates"


class SettingsService:
    """Getters and setters for office configuration."""

    def __init__(self, mongodb: Optional[MongoDBService] = None, redis: Optional[RedisService] = None):
        self.mongodb = mongodb
        self.redis = redis
        self._lock = threading.Lock()
        self._memory: Dict[str, Any] = {}
        self._defaults: Dict[str, List[BaseModel]] = {
            TAGS: DEFAULT_SYSTEM_TAGS,
            AGENCIES: DEFAULT_INSS_AGENCIES,
            USERS: DEFAULT_USERS,
            WORKFLOW_RULES: DEFAULT_WORKFLOW_RULES,
            TEMPLATES: [],
        }

    # Raw access

    def _read(self, name: str) -> Optional[Any]:
        """Raw stored value, or None when the setting was never written."""
        if self.mongodb is None:
            with self._lock:
                return self._memory.get(name)

        if self.redis is not None:
            cached = self.redis.get_cached_setting(name)
            if cached is not None:
                return cached["value"]

        try:
            document = self.mongodb.find_one(SETTINGS, name)
        except PyMongoError as e:
            raise SettingsError(f"Failed to load setting {name}: {e}") from e

        if document is None:
            return None
        if self.redis is not None:
            self.redis.cache_setting(name, document.get("value"))
        return document.get("value")

    def _write(self, name: str, value: Any) -> None:
        with tracer.start_as_current_span("settings.write") as span:
            span.set_attribute("settings.name", name)
            if self.mongodb is None:
                with self._lock:
                    self._memory[name] = value
                return

            try:
                self.mongodb.upsert(SETTINGS, name, {"id": name, "value": value})
            except PyMongoError as e:
                span.record_exception(e)
                raise SettingsError(f"Failed to save setting {name}: {e}") from e

            if self.redis is not None:
                self.redis.invalidate_setting(name)

        logger.info(
            "Setting updated",
            extra={"extra_fields": {"setting": name}}
        )

    def _get_models(self, name: str, model: Type[BaseModel]) -> List[Any]:
        raw = self._read(name)
        if raw is None:
            return [item.model_copy(deep=True) for item in self._defaults[name]]
        try:
            return TypeAdapter(List[model]).validate_python(raw)
        except ValidationError as e:
            raise SettingsError(f"Stored setting {name} is invalid: {e}") from e

    def _set_models(self, name: str, items: List[BaseModel]) -> None:
        self._write(name, [item.model_dump(by_alias=True, mode="json") for item in items])

    # Typed accessors

    def get_tags(self) -> List[SystemTag]:
        return self._get_models(TAGS, SystemTag)

    def set_tags(self, tags: List[SystemTag]) -> None:
        self._set_models(TAGS, tags)

    def get_agencies(self) -> List[INSSAgency]:
        return self._get_models(AGENCIES, INSSAgency)

    def set_agencies(self, agencies: List[INSSAgency]) -> None:
        self._set_models(AGENCIES, agencies)

    def get_users(self) -> List[User]:
        return self._get_models(USERS, User)

    def set_users(self, users: List[User]) -> None:
        self._set_models(USERS, users)

    def get_workflow_rules(self) -> List[WorkflowRule]:
        return self._get_models(WORKFLOW_RULES, WorkflowRule)

    def set_workflow_rules(self, rules: List[WorkflowRule]) -> None:
        self._set_models(WORKFLOW_RULES, rules)

    def get_templates(self) -> List[DocumentTemplate]:
        return self._get_models(TEMPLATES, DocumentTemplate)

    def set_templates(self, templates: List[DocumentTemplate]) -> None:
        self._set_models(TEMPLATES, templates)

    def find_user(self, user_id: Optional[str]) -> Optional[User]:
        """Look up a team member by id."""
        if not user_id:
            return None
        for user in self.get_users():
            if user.id == user_id:
                return user
        return None
