# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Services package - Persistence, messaging and the stateful board service.
"""

from .mongodb import MongoDBService, get_mongodb_service, close_mongodb_connection
from .amqp import AMQPService, AMQPConfig, PublishResult, create_amqp_service
from .redis import RedisService
from .case_store import CaseStore, InMemoryCaseStore, MongoCaseStore, create_case_store
from .settings import SettingsService
from .board import BoardService, MoveRequestOutcome, MoveResult, MoveStatus, PendingMove

__all__ = [
    "MongoDBService",
    "get_mongodb_service",
    "close_mongodb_connection",
    "AMQPService",
    "AMQPConfig",
    "PublishResult",
    "create_amqp_service",
    "RedisService",
    "CaseStore",
    "InMemoryCaseStore",
    "MongoCaseStore",
    "create_case_store",
    "SettingsService",
    "BoardService",
    "MoveRequestOutcome",
    "MoveResult",
    "MoveStatus",
    "PendingMove",
]
