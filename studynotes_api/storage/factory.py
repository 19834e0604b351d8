from __future__ import annotations

from studynotes_api.config import Settings
from studynotes_api.domain.ports import NoteRepository
from studynotes_api.storage.memory import InMemoryRepository
from studynotes_api.storage.mongo import MongoRepository


def build_repository(settings: Settings) -> NoteRepository:
    """Construct, but do not open, the backend named by ``settings``."""
    if settings.storage_backend == "mongo":
        return MongoRepository(
            settings.mongodb_uri,
            settings.mongodb_database,
            timeout_ms=settings.mongodb_timeout_ms,
            seed_defaults=settings.seed_default_subjects,
        )
    if settings.storage_backend == "memory":
        return InMemoryRepository(seed_defaults=settings.seed_default_subjects)
    raise ValueError(f"unknown storage backend: {settings.storage_backend!r}")
