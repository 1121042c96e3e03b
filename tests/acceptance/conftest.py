# SPDX-License-Identifier: Apache-2.0

"""
Acceptance test fixtures: a board service over the in-memory store,
reachable directly and through the HTTP API.
"""

import os
import pytest
from datetime import datetime, timezone

os.environ['ENVIRONMENT'] = 'test'
os.environ['OTEL_ENABLED'] = 'false'
os.environ['PREVFLOW_STORE'] = 'memory'

from prevflow.app import create_app
from prevflow.domain.catalog import DEFAULT_USERS
from prevflow.models.entities import Case
from prevflow.services.board import BoardService
from prevflow.services.case_store import InMemoryCaseStore
from prevflow.services.settings import SettingsService

NOW = datetime(2024, 3, 10, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def store():
    return InMemoryCaseStore()


@pytest.fixture
def settings():
    return SettingsService()


@pytest.fixture
def board(store, settings):
    """Board service with a frozen clock."""
    service = BoardService(store, settings=settings, clock=lambda: NOW)
    yield service
    service.close()


@pytest.fixture
def lawyer():
    return DEFAULT_USERS[0].model_copy(deep=True)


@pytest.fixture
def test_client(board):
    """HTTP client over the same board service."""
    app = create_app(board_service=board)
    app.config['TESTING'] = True
    with app.test_client() as client:
        yield client


@pytest.fixture
def new_case(store):
    """Save and return a case built from keyword overrides."""
    def _create(**overrides):
        data = {
            "id": "c1",
            "internal_id": "2024.001",
            "client_name": "João Pereira",
            "cpf": "987.654.321-00",
            "view": "ADMIN",
            "column_id": "adm_triagem",
            "responsible_id": "u3",
            "responsible_name": "Secretaria",
        }
        data.update(overrides)
        case = Case(**data)
        store.save_case(case)
        return case
    return _create
