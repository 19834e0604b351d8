from __future__ import annotations

from datetime import datetime, timedelta, timezone

import mongomock
import pytest
from fastapi.testclient import TestClient

from studynotes_api.config import Settings
from studynotes_api.dependencies import get_settings
from studynotes_api.storage.memory import InMemoryRepository
from studynotes_api.storage.mongo import MongoRepository


class FakeClock:
    """Hands out strictly increasing, millisecond-aligned UTC timestamps."""

    def __init__(self) -> None:
        self.now = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        self.now += timedelta(milliseconds=1)
        return self.now


@pytest.fixture(autouse=True)
def clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def clock(monkeypatch) -> FakeClock:
    c = FakeClock()
    monkeypatch.setattr("studynotes_api.storage.memory.utc_now", c)
    monkeypatch.setattr("studynotes_api.storage.mongo.utc_now", c)
    return c


@pytest.fixture
def mongo_client():
    return mongomock.MongoClient(tz_aware=True)


@pytest.fixture
def mongo_repo(clock, mongo_client):
    repo = MongoRepository(database="studynotes_test", client=mongo_client)
    repo.open()
    yield repo
    repo.close()


@pytest.fixture
def memory_repo(clock):
    repo = InMemoryRepository()
    repo.open()
    yield repo
    repo.close()


@pytest.fixture(params=["memory", "mongo"])
def repo(request, clock, mongo_client):
    if request.param == "memory":
        r = InMemoryRepository()
    else:
        r = MongoRepository(database="studynotes_test", client=mongo_client)
    r.open()
    yield r
    r.close()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        storage_backend="memory",
        mongodb_uri="mongodb://localhost:27017",
        mongodb_database="studynotes_test",
        mongodb_timeout_ms=100,
        seed_default_subjects=True,
        api_debug_log=False,
        log_level="INFO",
    )


@pytest.fixture
def client(settings, repo):
    from main import create_app

    with TestClient(create_app(settings=settings, repository=repo)) as c:
        yield c
