# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Case store: persistence contract for cases, notifications and the system log.

Two implementations are provided: an in-memory store for tests and local
runs, and a MongoDB store. Both push the full case list to subscribers after
every write so that consumers keep a read cache without polling.
"""

import logging
import threading
from abc import ABC, abstractmethod
from typing import Callable, Dict, List, Optional

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode
from pydantic import ValidationError
from pymongo import DESCENDING
from pymongo.errors import PyMongoError

from ..errors import CaseStoreError
from ..models.entities import Case, Notification, SystemLog
from .mongodb import MongoDBService, CASES, NOTIFICATIONS, SYSTEM_LOGS

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

MAX_NOTIFICATIONS = 50
MAX_SYSTEM_LOGS = 500

CaseListener = Callable[[List[Case]], None]
Unsubscribe = Callable[[], None]


class CaseStore(ABC):
    """Persistence contract consumed by the board service."""

    def __init__(self):
        self._listeners: List[CaseListener] = []
        self._listeners_lock = threading.Lock()

    @abstractmethod
    def save_case(self, case: Case) -> None:
        """Create or replace a case. Raises CaseStoreError on failure."""

    @abstractmethod
    def get_case(self, case_id: str) -> Optional[Case]:
        """Fetch a case by id."""

    @abstractmethod
    def list_cases(self) -> List[Case]:
        """Fetch every case."""

    @abstractmethod
    def save_notifications(self, notifications: List[Notification]) -> None:
        """Store notifications, keeping the most recent ones."""

    @abstractmethod
    def get_notifications(self) -> List[Notification]:
        """Most recent notifications, newest first."""

    @abstractmethod
    def add_log(self, entry: SystemLog) -> None:
        """Append a system log entry, keeping the most recent ones."""

    @abstractmethod
    def get_logs(self) -> List[SystemLog]:
        """Most recent system log entries, newest first."""

    def subscribe_to_cases(self, callback: CaseListener) -> Unsubscribe:
        """
        Register a listener for the case list.

        The listener is called immediately with the current list and again
        after every change.

        Returns:
            Callable removing the listener
        """
        with self._listeners_lock:
            self._listeners.append(callback)
        callback(self.list_cases())

        def unsubscribe() -> None:
            with self._listeners_lock:
                if callback in self._listeners:
                    self._listeners.remove(callback)

        return unsubscribe

    def _publish_cases(self) -> None:
        with self._listeners_lock:
            listeners = list(self._listeners)
        if not listeners:
            return
        try:
            cases = self.list_cases()
        except CaseStoreError as e:
            # The write already succeeded; subscribers catch up on the next change.
            logger.error(
                "Failed to refresh case subscribers",
                extra={"extra_fields": {"error": str(e)}}
            )
            return
        for listener in listeners:
            listener(cases)


class InMemoryCaseStore(CaseStore):
    """Thread-safe in-memory case store."""

    def __init__(self, cases: Optional[List[Case]] = None):
        super().__init__()
        self._lock = threading.RLock()
        self._cases: Dict[str, Case] = {}
        self._notifications: List[Notification] = []
        self._logs: List[SystemLog] = []
        for case in cases or []:
            self._cases[case.id] = case.model_copy(deep=True)

    def save_case(self, case: Case) -> None:
        with self._lock:
            self._cases[case.id] = case.model_copy(deep=True)
        logger.debug(f"Saved case {case.id} in memory")
        self._publish_cases()

    def get_case(self, case_id: str) -> Optional[Case]:
        with self._lock:
            case = self._cases.get(case_id)
            return case.model_copy(deep=True) if case else None

    def list_cases(self) -> List[Case]:
        with self._lock:
            return [case.model_copy(deep=True) for case in self._cases.values()]

    def save_notifications(self, notifications: List[Notification]) -> None:
        with self._lock:
            newest_first = sorted(notifications, key=lambda n: n.timestamp, reverse=True)
            self._notifications = (newest_first + self._notifications)[:MAX_NOTIFICATIONS]

    def get_notifications(self) -> List[Notification]:
        with self._lock:
            return list(self._notifications)

    def add_log(self, entry: SystemLog) -> None:
        with self._lock:
            self._logs = ([entry] + self._logs)[:MAX_SYSTEM_LOGS]

    def get_logs(self) -> List[SystemLog]:
        with self._lock:
            return list(self._logs)


class MongoCaseStore(CaseStore):
    """MongoDB-backed case store; documents use the camelCase wire form."""

    def __init__(self, mongodb: Optional[MongoDBService] = None):
        super().__init__()
        self.mongodb = mongodb or MongoDBService()
        self._watch_stop: Optional[threading.Event] = None
        self._watch_thread: Optional[threading.Thread] = None

    @staticmethod
    def _to_case(document: Dict) -> Case:
        try:
            return Case.model_validate(document)
        except ValidationError as e:
            raise CaseStoreError(f"Stored case is invalid: {e}", case_id=document.get('id')) from e

    def save_case(self, case: Case) -> None:
        with tracer.start_as_current_span("store.save_case") as span:
            span.set_attributes({
                "case.id": case.id,
                "case.view": case.view,
                "case.column_id": case.column_id,
            })
            try:
                self.mongodb.upsert(CASES, case.id, case.to_document())
            except PyMongoError as e:
                span.set_status(Status(StatusCode.ERROR, str(e)))
                span.record_exception(e)
                raise CaseStoreError(f"Failed to save case {case.id}: {e}", case_id=case.id) from e
            span.set_status(Status(StatusCode.OK))
        self._publish_cases()

    def get_case(self, case_id: str) -> Optional[Case]:
        try:
            document = self.mongodb.find_one(CASES, case_id)
        except PyMongoError as e:
            raise CaseStoreError(f"Failed to load case {case_id}: {e}", case_id=case_id) from e
        return self._to_case(document) if document else None

    def list_cases(self) -> List[Case]:
        try:
            documents = self.mongodb.find_all(CASES)
        except PyMongoError as e:
            raise CaseStoreError(f"Failed to list cases: {e}") from e
        return [self._to_case(document) for document in documents]

    def save_notifications(self, notifications: List[Notification]) -> None:
        try:
            self.mongodb.insert_capped(
                NOTIFICATIONS,
                [notification.to_document() for notification in notifications],
                sort_field="timestamp",
                keep=MAX_NOTIFICATIONS,
            )
        except PyMongoError as e:
            raise CaseStoreError(f"Failed to save notifications: {e}") from e

    def get_notifications(self) -> List[Notification]:
        try:
            documents = self.mongodb.find_all(
                NOTIFICATIONS, sort=[("timestamp", DESCENDING)], limit=MAX_NOTIFICATIONS
            )
        except PyMongoError as e:
            raise CaseStoreError(f"Failed to load notifications: {e}") from e
        return [Notification.model_validate(document) for document in documents]

    def add_log(self, entry: SystemLog) -> None:
        try:
            self.mongodb.insert_capped(
                SYSTEM_LOGS, [entry.to_document()], sort_field="date", keep=MAX_SYSTEM_LOGS
            )
        except PyMongoError as e:
            raise CaseStoreError(f"Failed to write system log: {e}") from e

    def get_logs(self) -> List[SystemLog]:
        try:
            documents = self.mongodb.find_all(
                SYSTEM_LOGS, sort=[("date", DESCENDING)], limit=MAX_SYSTEM_LOGS
            )
        except PyMongoError as e:
            raise CaseStoreError(f"Failed to load system logs: {e}") from e
        return [SystemLog.model_validate(document) for document in documents]

    def start_watching(self) -> None:
        """Fan out changes made by other processes through the change stream."""
        if self._watch_thread is not None:
            return
        self._watch_stop = threading.Event()
        self._watch_thread = threading.Thread(
            target=self._watch,
            name="prevflow-case-watch",
            daemon=True,
        )
        self._watch_thread.start()
        logger.info("Case change stream watcher started")

    def stop_watching(self) -> None:
        """Stop the change stream watcher."""
        if self._watch_thread is None:
            return
        self._watch_stop.set()
        self._watch_thread.join(timeout=5)
        self._watch_thread = None
        logger.info("Case change stream watcher stopped")

    def _watch(self) -> None:
        try:
            self.mongodb.watch(CASES, lambda document: self._publish_cases(), self._watch_stop)
        except PyMongoError as e:
            logger.error(
                "Case change stream watcher failed",
                extra={"extra_fields": {"error": str(e)}}
            )


def create_case_store(backend: str = "memory", mongodb: Optional[MongoDBService] = None) -> CaseStore:
    """
    Create a case store for the configured backend.

    Args:
        backend: ``memory`` or ``mongodb``

    Raises:
        ValueError: If the backend is unknown
    """
    if backend == "memory":
        return InMemoryCaseStore()
    if backend == "mongodb":
        return MongoCaseStore(mongodb)
    raise ValueError(f"Unknown case store backend: {backend}")
