from __future__ import annotations

import logging
import re
from contextlib import contextmanager
from typing import Any, Iterator, Mapping

from pymongo import ASCENDING, DESCENDING, TEXT, MongoClient, ReturnDocument
from pymongo.database import Database
from pymongo.errors import ConnectionFailure, PyMongoError

from studynotes_api.domain.entities import DEFAULT_COLOR, DEFAULT_ICON, DEFAULT_SUBJECTS, Note, Subject
from studynotes_api.domain.exceptions import StorageUnavailable
from studynotes_api.domain.validation import (
    new_note_fields,
    new_subject_fields,
    note_changes,
    search_needle,
    subject_changes,
)
from studynotes_api.util import ensure_utc, subject_sort_key, utc_now

logger = logging.getLogger("studynotes.storage")

SUBJECTS = "subjects"
NOTES = "notes"
COUNTERS = "counters"

# Domain attribute -> document field.
_NOTE_FIELD_NAMES = {"title": "title", "content": "content", "subject_id": "subjectId", "tags": "tags"}

_NO_STORAGE_ID = {"_id": False}
_NOTE_ORDER = [("updatedAt", DESCENDING), ("id", DESCENDING)]


def _subject_from_doc(doc: Mapping[str, Any]) -> Subject:
    return Subject(
        id=int(doc["id"]),
        name=doc["name"],
        icon=doc.get("icon") or DEFAULT_ICON,
        color=doc.get("color") or DEFAULT_COLOR,
        created_at=ensure_utc(doc["createdAt"]),
    )


def _note_from_doc(doc: Mapping[str, Any]) -> Note:
    return Note(
        id=int(doc["id"]),
        title=doc["title"],
        content=doc.get("content") or "",
        subject_id=int(doc["subjectId"]),
        tags=list(doc.get("tags") or []),
        created_at=ensure_utc(doc["createdAt"]),
        updated_at=ensure_utc(doc["updatedAt"]),
    )


class MongoRepository:
    """Repository backed by a MongoDB database.

    MongoDB has no integer auto-increment, so ids come from one counter
    document per entity type in the ``counters`` collection, bumped with an
    atomic ``$inc``. A single client is created by :meth:`open` and reused for
    every call until :meth:`close`; calls outside that window raise
    :class:`StorageUnavailable` instead of reconnecting.

    Deleting a subject removes its notes first and the subject second. The two
    steps are not wrapped in a transaction, so an interruption in between can
    leave the subject in place with its notes already gone.
    """

    def __init__(
        self,
        uri: str = "mongodb://localhost:27017",
        database: str = "studynotes",
        *,
        timeout_ms: int = 5000,
        seed_defaults: bool = True,
        client: MongoClient | None = None,
    ) -> None:
        self._uri = uri
        self._database_name = database
        self._timeout_ms = timeout_ms
        self._seed_defaults = seed_defaults
        self._client = client
        self._owns_client = client is None
        self._db: Database | None = None

    def open(self) -> None:
        if self._db is not None:
            return
        try:
            if self._client is None:
                self._client = MongoClient(self._uri, serverSelectionTimeoutMS=self._timeout_ms, tz_aware=True)
            self._client.admin.command("ping")
            self._db = self._client[self._database_name]
            self.ensure_indexes()
        except PyMongoError as e:
            logger.error("storage_connect_failed", extra={"backend": "mongo", "database": self._database_name})
            self.close()
            raise StorageUnavailable("mongodb_unreachable") from e
        logger.info("storage_open", extra={"backend": "mongo", "database": self._database_name})
        if self._seed_defaults:
            self.seed_default_subjects()

    def close(self) -> None:
        self._db = None
        if self._client is not None and self._owns_client:
            self._client.close()
            self._client = None
            logger.info("storage_close", extra={"backend": "mongo", "database": self._database_name})

    @contextmanager
    def _connected(self) -> Iterator[Database]:
        if self._db is None:
            raise StorageUnavailable("mongodb_not_connected")
        try:
            yield self._db
        except ConnectionFailure as e:
            logger.error("storage_unreachable", extra={"backend": "mongo", "error": str(e)})
            raise StorageUnavailable("mongodb_unreachable") from e

    def ensure_indexes(self) -> None:
        with self._connected() as db:
            db[SUBJECTS].create_index([("name", ASCENDING)])
            db[NOTES].create_index([("subjectId", ASCENDING)])
            db[NOTES].create_index([("title", TEXT), ("content", TEXT)])

    def initialize(self) -> None:
        """Create missing collections and counter documents, then indexes."""
        with self._connected() as db:
            existing = set(db.list_collection_names())
            for name in (SUBJECTS, NOTES, COUNTERS):
                if name not in existing:
                    db.create_collection(name)
                    logger.info("collection_create", extra={"collection": name})
            for name in (SUBJECTS, NOTES):
                db[COUNTERS].update_one({"_id": name}, {"$setOnInsert": {"sequence": 0}}, upsert=True)
        self.ensure_indexes()

    def seed_default_subjects(self) -> int:
        with self._connected() as db:
            if db[SUBJECTS].count_documents({}) > 0:
                return 0
        for name, icon, color in DEFAULT_SUBJECTS:
            self.create_subject(name, icon=icon, color=color)
        logger.info("subjects_seeded", extra={"count": len(DEFAULT_SUBJECTS)})
        return len(DEFAULT_SUBJECTS)

    def _next_sequence(self, db: Database, name: str) -> int:
        doc = db[COUNTERS].find_one_and_update(
            {"_id": name},
            {"$inc": {"sequence": 1}},
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        value = (doc or {}).get("sequence")
        if isinstance(value, bool) or not isinstance(value, int) or value < 1:
            logger.warning("sequence_fallback", extra={"counter": name, "value": value})
            return 1
        return value

    def list_subjects(self) -> list[Subject]:
        with self._connected() as db:
            # Ordered client side so both backends share one collation.
            docs = db[SUBJECTS].find({}, _NO_STORAGE_ID)
            return sorted((_subject_from_doc(d) for d in docs), key=subject_sort_key)

    def get_subject(self, subject_id: int) -> Subject | None:
        with self._connected() as db:
            doc = db[SUBJECTS].find_one({"id": subject_id}, _NO_STORAGE_ID)
            return _subject_from_doc(doc) if doc else None

    def create_subject(self, name: str, icon: str | None = None, color: str | None = None) -> Subject:
        fields = new_subject_fields(name, icon, color)
        with self._connected() as db:
            subject = Subject(id=self._next_sequence(db, SUBJECTS), created_at=utc_now(), **fields)
            db[SUBJECTS].insert_one(
                {
                    "id": subject.id,
                    "name": subject.name,
                    "icon": subject.icon,
                    "color": subject.color,
                    "createdAt": subject.created_at,
                }
            )
            return subject

    def update_subject(self, subject_id: int, changes: Mapping[str, Any]) -> Subject | None:
        patch = subject_changes(changes)
        if not patch:
            return self.get_subject(subject_id)
        with self._connected() as db:
            doc = db[SUBJECTS].find_one_and_update(
                {"id": subject_id},
                {"$set": patch},
                projection=_NO_STORAGE_ID,
                return_document=ReturnDocument.AFTER,
            )
            return _subject_from_doc(doc) if doc else None

    def delete_subject(self, subject_id: int) -> bool:
        with self._connected() as db:
            notes = db[NOTES].delete_many({"subjectId": subject_id})
            result = db[SUBJECTS].delete_one({"id": subject_id})
        logger.info(
            "subject_delete_cascade",
            extra={"subject_id": subject_id, "deleted": result.deleted_count, "notes": notes.deleted_count},
        )
        return result.deleted_count > 0

    def list_notes(self) -> list[Note]:
        with self._connected() as db:
            return [_note_from_doc(d) for d in db[NOTES].find({}, _NO_STORAGE_ID).sort(_NOTE_ORDER)]

    def list_notes_by_subject(self, subject_id: int) -> list[Note]:
        with self._connected() as db:
            docs = db[NOTES].find({"subjectId": subject_id}, _NO_STORAGE_ID).sort(_NOTE_ORDER)
            return [_note_from_doc(d) for d in docs]

    def get_note(self, note_id: int) -> Note | None:
        with self._connected() as db:
            doc = db[NOTES].find_one({"id": note_id}, _NO_STORAGE_ID)
            return _note_from_doc(doc) if doc else None

    def create_note(
        self,
        title: str,
        subject_id: int,
        content: str | None = None,
        tags: list[str] | None = None,
    ) -> Note:
        fields = new_note_fields(title, subject_id, content, tags)
        with self._connected() as db:
            now = utc_now()
            note = Note(id=self._next_sequence(db, NOTES), created_at=now, updated_at=now, **fields)
            db[NOTES].insert_one(
                {
                    "id": note.id,
                    "title": note.title,
                    "content": note.content,
                    "subjectId": note.subject_id,
                    "tags": list(note.tags),
                    "createdAt": note.created_at,
                    "updatedAt": note.updated_at,
                }
            )
            return note

    def update_note(self, note_id: int, changes: Mapping[str, Any]) -> Note | None:
        patch = {_NOTE_FIELD_NAMES[k]: v for k, v in note_changes(changes).items()}
        patch["updatedAt"] = utc_now()
        with self._connected() as db:
            doc = db[NOTES].find_one_and_update(
                {"id": note_id},
                {"$set": patch},
                projection=_NO_STORAGE_ID,
                return_document=ReturnDocument.AFTER,
            )
            return _note_from_doc(doc) if doc else None

    def delete_note(self, note_id: int) -> bool:
        with self._connected() as db:
            return db[NOTES].delete_one({"id": note_id}).deleted_count > 0

    def search_notes(self, query: str) -> list[Note]:
        needle = search_needle(query)
        if needle is None:
            return []
        pattern = re.compile(re.escape(needle), re.IGNORECASE)
        with self._connected() as db:
            docs = db[NOTES].find(
                {"$or": [{"title": pattern}, {"content": pattern}, {"tags": pattern}]},
                _NO_STORAGE_ID,
            ).sort(_NOTE_ORDER)
            return [_note_from_doc(d) for d in docs]
