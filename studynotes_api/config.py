from __future__ import annotations

import os
from dataclasses import dataclass

STORAGE_BACKENDS = ("memory", "mongo")


@dataclass(frozen=True)
class Settings:
    storage_backend: str
    mongodb_uri: str
    mongodb_database: str
    mongodb_timeout_ms: int
    seed_default_subjects: bool
    api_debug_log: bool
    log_level: str


def load_settings() -> Settings:
    storage_backend = os.environ.get("STORAGE_BACKEND", "memory").strip().lower()
    if storage_backend not in STORAGE_BACKENDS:
        raise ValueError(f"unknown STORAGE_BACKEND: {storage_backend!r}")
    mongodb_uri = os.environ.get("MONGODB_URI", "mongodb://localhost:27017")
    mongodb_database = os.environ.get("MONGODB_DATABASE", "studynotes")
    mongodb_timeout_ms = int(os.environ.get("MONGODB_TIMEOUT_MS", "5000"))
    seed_default_subjects = os.environ.get("SEED_DEFAULT_SUBJECTS", "true").lower() == "true"
    api_debug_log = os.environ.get("API_DEBUG_LOG", "false").lower() == "true"
    log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
    return Settings(
        storage_backend=storage_backend,
        mongodb_uri=mongodb_uri,
        mongodb_database=mongodb_database,
        mongodb_timeout_ms=mongodb_timeout_ms,
        seed_default_subjects=seed_default_subjects,
        api_debug_log=api_debug_log,
        log_level=log_level,
    )
