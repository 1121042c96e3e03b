# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
MongoDB service layer with connection pooling and document upserts.
"""

import os
import logging
import threading
from typing import Any, Callable, Dict, List, Optional
from pymongo import MongoClient, ASCENDING, DESCENDING
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import ConnectionFailure, PyMongoError, ServerSelectionTimeoutError

logger = logging.getLogger(__name__)

CASES = "cases"
NOTIFICATIONS = "notifications"
SYSTEM_LOGS = "system_logs"
SETTINGS = "settings"


class MongoDBService:
    """MongoDB service with connection pooling."""

    def __init__(self, connection_string: str = None, database_name: str = None):
        """Initialize MongoDB service with connection pooling."""
        self.connection_string = connection_string or os.getenv(
            'MONGODB_URI',
            'mongodb://localhost:27017/prevflow_dev'
        )
        self.database_name = database_name or os.getenv('MONGODB_DATABASE', 'prevflow_dev')
        self._client: Optional[MongoClient] = None
        self._database: Optional[Database] = None

        # Connection pool settings
        self.max_pool_size = int(os.getenv('MONGODB_MAX_POOL_SIZE', '10'))
        self.min_pool_size = int(os.getenv('MONGODB_MIN_POOL_SIZE', '1'))
        self.max_idle_time_ms = int(os.getenv('MONGODB_MAX_IDLE_TIME_MS', '30000'))
        self.server_selection_timeout_ms = int(os.getenv('MONGODB_SERVER_SELECTION_TIMEOUT_MS', '5000'))

        logger.info(f"MongoDB service initialized for database: {self.database_name}")

    @property
    def client(self) -> MongoClient:
        """Get MongoDB client with connection pooling."""
        if self._client is None:
            try:
                self._client = MongoClient(
                    self.connection_string,
                    maxPoolSize=self.max_pool_size,
                    minPoolSize=self.min_pool_size,
                    maxIdleTimeMS=self.max_idle_time_ms,
                    serverSelectionTimeoutMS=self.server_selection_timeout_ms,
                    retryWrites=True,
                    retryReads=True
                )
                # Test connection
                self._client.admin.command('ping')
                logger.info("MongoDB connection established successfully")
            except (ConnectionFailure, ServerSelectionTimeoutError) as e:
                logger.error(f"Failed to connect to MongoDB: {e}")
                raise

        return self._client

    @property
    def database(self) -> Database:
        """Get MongoDB database."""
        if self._database is None:
            self._database = self.client[self.database_name]
        return self._database

    def get_collection(self, collection_name: str) -> Collection:
        """Get MongoDB collection."""
        return self.database[collection_name]

    def close_connection(self) -> None:
        """Close MongoDB connection."""
        if self._client:
            self._client.close()
            self._client = None
            self._database = None
            logger.info("MongoDB connection closed")

    def health_check(self) -> Dict[str, Any]:
        """Check MongoDB connection health."""
        try:
            result = self.client.admin.command('ping')
            server_info = self.client.server_info()

            return {
                'status': 'healthy',
                'ping': result.get('ok') == 1,
                'version': server_info.get('version'),
                'database': self.database_name,
                'connection_pool_size': self.max_pool_size
            }
        except PyMongoError as e:
            logger.error(f"MongoDB health check failed: {e}")
            return {
                'status': 'unhealthy',
                'error': str(e),
                'database': self.database_name
            }

    @staticmethod
    def _strip_internal(document: Optional[Dict]) -> Optional[Dict]:
        if document is not None:
            document.pop('_id', None)
        return document

    def upsert(self, collection: str, doc_id: str, document: Dict) -> None:
        """Replace the document with ``id == doc_id``, inserting it if absent."""
        try:
            self.get_collection(collection).replace_one({'id': doc_id}, document, upsert=True)
            logger.debug(f"Upserted document {doc_id} in {collection}")
        except PyMongoError as e:
            logger.error(f"Failed to upsert document {doc_id} in {collection}: {e}")
            raise

    def find_one(self, collection: str, doc_id: str) -> Optional[Dict]:
        """Find a document by its ``id`` field."""
        try:
            document = self.get_collection(collection).find_one({'id': doc_id})
            if document is None:
                logger.debug(f"Document {doc_id} not found in {collection}")
            return self._strip_internal(document)
        except PyMongoError as e:
            logger.error(f"Failed to find document {doc_id} in {collection}: {e}")
            raise

    def find_all(self, collection: str, filters: Dict = None, sort: List = None,
                 limit: int = 0) -> List[Dict]:
        """Find documents matching ``filters``."""
        try:
            cursor = self.get_collection(collection).find(filters or {})
            if sort:
                cursor = cursor.sort(sort)
            if limit:
                cursor = cursor.limit(limit)
            documents = [self._strip_internal(document) for document in cursor]
            logger.debug(f"Found {len(documents)} documents in {collection}")
            return documents
        except PyMongoError as e:
            logger.error(f"Failed to find documents in {collection}: {e}")
            raise

    def insert_capped(self, collection: str, documents: List[Dict], sort_field: str,
                      keep: int) -> None:
        """
        Insert documents and trim the collection to the newest ``keep``.

        Args:
            collection: Collection name
            documents: Documents to insert
            sort_field: Field ordering documents by recency
            keep: Number of most recent documents to retain
        """
        if not documents:
            return
        try:
            collection_obj = self.get_collection(collection)
            collection_obj.insert_many([dict(document) for document in documents])

            stale = collection_obj.find({}, {'_id': 1}).sort(sort_field, DESCENDING).skip(keep)
            stale_ids = [document['_id'] for document in stale]
            if stale_ids:
                collection_obj.delete_many({'_id': {'$in': stale_ids}})
                logger.debug(f"Trimmed {len(stale_ids)} documents from {collection}")
        except PyMongoError as e:
            logger.error(f"Failed to insert documents in {collection}: {e}")
            raise

    def watch(self, collection: str, callback: Callable[[Dict], None],
              stop_event: threading.Event) -> None:
        """
        Follow a change stream until ``stop_event`` is set.

        ``callback`` receives the full document of every insert, replace or
        update. Requires a replica set.
        """
        try:
            with self.get_collection(collection).watch(full_document='updateLookup') as stream:
                while not stop_event.is_set() and stream.alive:
                    change = stream.try_next()
                    if change is None:
                        continue
                    document = change.get('fullDocument')
                    if document is not None:
                        callback(self._strip_internal(document))
        except PyMongoError as e:
            logger.error(f"Change stream on {collection} stopped: {e}")
            raise

    def create_indexes(self) -> None:
        """Create indexes for the prevflow collections."""
        try:
            logger.info("Creating MongoDB indexes...")

            cases = self.get_collection(CASES)
            cases.create_index("id", unique=True)
            cases.create_index([("view", ASCENDING), ("columnId", ASCENDING)])
            cases.create_index("parentCaseId")
            cases.create_index("deadlineEnd")

            notifications = self.get_collection(NOTIFICATIONS)
            notifications.create_index([("timestamp", DESCENDING)])
            notifications.create_index("caseId")

            system_logs = self.get_collection(SYSTEM_LOGS)
            system_logs.create_index([("date", DESCENDING)])
            system_logs.create_index("category")

            settings = self.get_collection(SETTINGS)
            settings.create_index("id", unique=True)

            logger.info("MongoDB indexes created successfully")

        except PyMongoError as e:
            logger.error(f"Failed to create MongoDB indexes: {e}")
            raise


# Singleton instance for application use
_mongodb_service: Optional[MongoDBService] = None


def get_mongodb_service() -> MongoDBService:
    """Get singleton MongoDB service instance."""
    global _mongodb_service
    if _mongodb_service is None:
        _mongodb_service = MongoDBService()
    return _mongodb_service


def close_mongodb_connection() -> None:
    """Close MongoDB connection (for cleanup)."""
    global _mongodb_service
    if _mongodb_service:
        _mongodb_service.close_connection()
        _mongodb_service = None
