# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Pytest configuration and fixtures.
"""

import os
import pytest
from datetime import datetime, timezone
from typing import Any, Callable, List

# Set test environment
os.environ['ENVIRONMENT'] = 'test'
os.environ['OTEL_ENABLED'] = 'false'
os.environ['PREVFLOW_STORE'] = 'memory'
os.environ['MONGODB_DATABASE'] = 'prevflow_test'

from prevflow.domain.catalog import DEFAULT_USERS
from prevflow.models.entities import Case, User
from prevflow.models.enums import ViewType
from prevflow.services.board import BoardService
from prevflow.services.case_store import InMemoryCaseStore
from prevflow.services.settings import SettingsService


@pytest.fixture
def fixed_now() -> datetime:
    """Instant every clock-dependent test runs at."""
    return datetime(2024, 3, 10, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def users() -> List[User]:
    """Office team."""
    return [user.model_copy(deep=True) for user in DEFAULT_USERS]


@pytest.fixture
def actor(users) -> User:
    """User performing moves."""
    return users[0]


@pytest.fixture
def make_case() -> Callable[..., Case]:
    """Factory for cases sitting on the administrative triage column."""
    def _make(**overrides: Any) -> Case:
        data = {
            "id": "c1",
            "internal_id": "2024.001",
            "client_name": "Maria da Silva",
            "cpf": "123.456.789-00",
            "view": ViewType.ADMIN,
            "column_id": "adm_triagem",
            "benefit_type": "B41",
            "responsible_id": "u3",
            "responsible_name": "Secretaria",
            "created_at": "2024-01-02T10:00:00+00:00",
            "last_update": "2024-01-02T10:00:00+00:00",
        }
        data.update(overrides)
        return Case(**data)
    return _make


@pytest.fixture
def sample_case(make_case) -> Case:
    """A fresh administrative case."""
    return make_case()


@pytest.fixture
def store() -> InMemoryCaseStore:
    """Empty in-memory case store."""
    return InMemoryCaseStore()


@pytest.fixture
def settings() -> SettingsService:
    """In-memory settings with the default team and no automation rules."""
    return SettingsService()


@pytest.fixture
def board_service(store, settings, fixed_now) -> BoardService:
    """Board service over the in-memory store with a frozen clock."""
    service = BoardService(store, settings=settings, clock=lambda: fixed_now)
    yield service
    service.close()
