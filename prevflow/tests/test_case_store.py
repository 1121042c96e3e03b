# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Unit tests for the case stores.
"""

import pytest
from unittest.mock import MagicMock
from pymongo.errors import OperationFailure

from prevflow.errors import CaseStoreError
from prevflow.models.entities import Notification, SystemLog
from prevflow.services.case_store import (
    InMemoryCaseStore,
    MAX_NOTIFICATIONS,
    MAX_SYSTEM_LOGS,
    MongoCaseStore,
    create_case_store,
)
from prevflow.services.mongodb import CASES, NOTIFICATIONS, SYSTEM_LOGS


class TestInMemoryCaseStore:
    """Test the in-memory store."""

    def test_save_and_get(self, store, sample_case):
        store.save_case(sample_case)

        assert store.get_case("c1").client_name == "Maria da Silva"
        assert store.get_case("ghost") is None

    def test_returns_copies(self, store, sample_case):
        store.save_case(sample_case)
        sample_case.tags.append("Rural")
        store.get_case("c1").tags.append("Complexo")

        assert store.get_case("c1").tags == []

    def test_subscription(self, store, sample_case):
        """Test listeners get the current list immediately and after writes."""
        received = []
        unsubscribe = store.subscribe_to_cases(received.append)

        store.save_case(sample_case)
        unsubscribe()
        store.save_case(sample_case)

        assert [len(cases) for cases in received] == [0, 1]

    def test_notifications_newest_first_and_capped(self, store):
        batch = [
            Notification(title=f"n{i}", timestamp=f"2024-03-10T12:{i:02d}:00+00:00")
            for i in range(MAX_NOTIFICATIONS + 5)
        ]
        store.save_notifications(batch)

        stored = store.get_notifications()
        assert len(stored) == MAX_NOTIFICATIONS
        assert stored[0].title == f"n{MAX_NOTIFICATIONS + 4}"

    def test_logs_capped(self, store):
        for i in range(MAX_SYSTEM_LOGS + 1):
            store.add_log(SystemLog(user="Sistema", action=f"a{i}"))

        logs = store.get_logs()
        assert len(logs) == MAX_SYSTEM_LOGS
        assert logs[0].action == f"a{MAX_SYSTEM_LOGS}"


class TestMongoCaseStore:
    """Test the MongoDB store against a mocked service."""

    @pytest.fixture
    def mongodb(self):
        mongodb = MagicMock()
        mongodb.find_all.return_value = []
        return mongodb

    @pytest.fixture
    def mongo_store(self, mongodb):
        return MongoCaseStore(mongodb)

    def test_save_case_writes_camel_case_document(self, mongo_store, mongodb, sample_case):
        mongo_store.save_case(sample_case)

        collection, doc_id, document = mongodb.upsert.call_args[0]
        assert collection == CASES
        assert doc_id == "c1"
        assert document["clientName"] == "Maria da Silva"
        assert document["columnId"] == "adm_triagem"

    def test_save_failure_raises_store_error(self, mongo_store, mongodb, sample_case):
        mongodb.upsert.side_effect = OperationFailure("not primary")

        with pytest.raises(CaseStoreError) as exc_info:
            mongo_store.save_case(sample_case)

        assert exc_info.value.case_id == "c1"

    def test_get_case(self, mongo_store, mongodb, sample_case):
        mongodb.find_one.return_value = sample_case.to_document()

        assert mongo_store.get_case("c1").internal_id == "2024.001"
        mongodb.find_one.assert_called_once_with(CASES, "c1")

    def test_invalid_document(self, mongo_store, mongodb):
        mongodb.find_one.return_value = {"id": "c1", "clientName": "   "}

        with pytest.raises(CaseStoreError):
            mongo_store.get_case("c1")

    def test_subscribers_refreshed_after_save(self, mongo_store, mongodb, sample_case):
        received = []
        mongo_store.subscribe_to_cases(received.append)
        mongodb.find_all.return_value = [sample_case.to_document()]

        mongo_store.save_case(sample_case)

        assert [len(cases) for cases in received] == [0, 1]

    def test_refresh_failure_does_not_fail_save(self, mongo_store, mongodb, sample_case):
        mongo_store.subscribe_to_cases(lambda cases: None)
        mongodb.find_all.side_effect = OperationFailure("timeout")

        mongo_store.save_case(sample_case)

        mongodb.upsert.assert_called_once()

    def test_notifications_capped(self, mongo_store, mongodb):
        mongo_store.save_notifications([Notification(title="Movimentação")])

        args, kwargs = mongodb.insert_capped.call_args
        assert args[0] == NOTIFICATIONS
        assert args[1][0]["title"] == "Movimentação"
        assert kwargs == {"sort_field": "timestamp", "keep": MAX_NOTIFICATIONS}

    def test_log_capped(self, mongo_store, mongodb):
        mongo_store.add_log(SystemLog(user="Sistema", action="Criação"))

        args, kwargs = mongodb.insert_capped.call_args
        assert args[0] == SYSTEM_LOGS
        assert kwargs["keep"] == MAX_SYSTEM_LOGS

    def test_read_failure(self, mongo_store, mongodb):
        mongodb.find_all.side_effect = OperationFailure("timeout")

        with pytest.raises(CaseStoreError):
            mongo_store.get_notifications()


class TestCreateCaseStore:

    def test_memory(self):
        assert isinstance(create_case_store("memory"), InMemoryCaseStore)

    def test_mongodb(self):
        assert isinstance(create_case_store("mongodb", MagicMock()), MongoCaseStore)

    def test_unknown_backend(self):
        with pytest.raises(ValueError):
            create_case_store("sqlite")
