"""
MedWell Backend — Document Store Connector
============================================

What:  Owns the single MongoDB client for the process and hands out the
       database to request handlers.
How:   `MongoConnector` is constructed explicitly, opened in the application
       lifespan and closed on shutdown. Handlers receive the database through
       the `get_database` FastAPI dependency, which reads the connector from
       `app.state`.
Who:   main.py (lifecycle), route handlers (dependency), health route (ping).

Driver:
    PyMongo's native asyncio client (AsyncMongoClient). Each handler awaits a
    single collection call; MongoDB's per-document atomicity is the only
    concurrency control.

Collections:
    users, reminders, prescriptions, medicines, vitalsigns, symptoms,
    activities, sleeps, documents
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Optional, Tuple

from bson import ObjectId
from fastapi import Request
from pymongo import ASCENDING, DESCENDING, AsyncMongoClient
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import PyMongoError

from medwell.config import Settings, settings as default_settings
from medwell.exceptions import DatabaseError

logger = logging.getLogger(__name__)

USERS = "users"
REMINDERS = "reminders"
DOCUMENTS = "documents"

# (collection, keys, unique)
INDEXES: Tuple[Tuple[str, Tuple[Tuple[str, int], ...], bool], ...] = (
    (USERS, (("userId", ASCENDING),), True),
    (REMINDERS, (("userId", ASCENDING), ("dueDate", ASCENDING)), False),
    (DOCUMENTS, (("userId", ASCENDING), ("createdAt", DESCENDING)), False),
)


class MongoConnector:
    """
    Lifecycle wrapper around AsyncMongoClient.

    States:
        constructed → connect() → (database available) → close()

    `connect()` never raises: an unreachable server is logged and the app keeps
    serving, so requests fail individually with a 500 instead of the process
    refusing to start.
    """

    def __init__(self, config: Optional[Settings] = None):
        self.config = config or default_settings
        self.client: Optional[AsyncMongoClient] = None
        self._database: Optional[AsyncDatabase] = None
        self.extra_indexes: list = []

    @property
    def database(self) -> AsyncDatabase:
        if self._database is None:
            raise DatabaseError(context={"db_name": self.config.mongo_db_name})
        return self._database

    def register_indexes(self, specs: Iterable[Tuple[str, Tuple[Tuple[str, int], ...], bool]]) -> None:
        """
        Index specs (e.g. from record resources) created on connect() besides INDEXES.

        Replaces any earlier registration, so a connector reused across app
        lifespans does not accumulate duplicates.
        """
        self.extra_indexes = list(specs)

    async def connect(self) -> None:
        self.client = AsyncMongoClient(
            self.config.mongo_uri,
            serverSelectionTimeoutMS=self.config.mongo_server_selection_timeout_ms,
            tz_aware=True,
        )
        self._database = self.client[self.config.mongo_db_name]

        try:
            await self.client.admin.command("ping")
        except PyMongoError as e:
            logger.error("MongoDB connection error: %s", str(e))
            return

        logger.info("MongoDB connected (database=%s)", self.config.mongo_db_name)
        await self.ensure_indexes()

    async def ensure_indexes(self) -> None:
        for collection, keys, unique in (*INDEXES, *self.extra_indexes):
            try:
                await self.database[collection].create_index(list(keys), unique=unique)
            except PyMongoError as e:
                logger.warning("Could not create index on %s%s: %s", collection, keys, str(e))

    async def ping(self) -> bool:
        try:
            await self.database.command("ping")
            return True
        except (PyMongoError, DatabaseError) as e:
            logger.warning("MongoDB ping failed: %s", str(e))
            return False

    async def close(self) -> None:
        if self.client is not None:
            await self.client.close()
            logger.info("MongoDB connection closed")
        self.client = None
        self._database = None


# ── Dependencies ──────────────────────────────────────────────────────────

def get_connector(request: Request) -> MongoConnector:
    return request.app.state.mongo


def get_database(request: Request) -> AsyncDatabase:
    """
    FastAPI dependency returning the connected database.

    Raises:
        DatabaseError: connector not opened (rendered as 500 by main.py)
    """
    return get_connector(request).database


# ── Document helpers ──────────────────────────────────────────────────────

def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_object_id(value: str) -> Optional[ObjectId]:
    """Returns None for strings that are not 24-hex ObjectIds."""
    if not ObjectId.is_valid(value):
        return None
    return ObjectId(value)


def serialize_document(doc: Any) -> Any:
    """
    Convert a stored document into JSON-ready Python values.

    ObjectId → str; naive datetimes are treated as UTC and made timezone-aware
    so they render with an explicit offset. Nested dicts/lists are converted
    recursively.
    """
    if isinstance(doc, dict):
        return {key: serialize_document(value) for key, value in doc.items()}
    if isinstance(doc, list):
        return [serialize_document(item) for item in doc]
    if isinstance(doc, ObjectId):
        return str(doc)
    if isinstance(doc, datetime) and doc.tzinfo is None:
        return doc.replace(tzinfo=timezone.utc)
    return doc


def invalid_field_names(fields: Dict[str, Any]) -> list:
    """Field names MongoDB would interpret as operators or dotted paths."""
    return [name for name in fields if name.startswith("$") or "." in name]
