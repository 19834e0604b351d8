from __future__ import annotations

from studynotes_api.db_init import initialize_database, main


def test_initialize_creates_collections_counters_and_indexes(clock, mongo_client) -> None:
    seeded = initialize_database("mongodb://unused", "init_db", seed=False, client=mongo_client)
    assert seeded == 0

    db = mongo_client["init_db"]
    assert {"subjects", "notes", "counters"} <= set(db.list_collection_names())
    assert db["counters"].find_one({"_id": "subjects"})["sequence"] == 0
    assert db["counters"].find_one({"_id": "notes"})["sequence"] == 0
    assert "title_text_content_text" in db["notes"].index_information()
    assert db["subjects"].count_documents({}) == 0


def test_initialize_seeds_defaults_once(clock, mongo_client) -> None:
    assert initialize_database("mongodb://unused", "init_db", client=mongo_client) == 5
    assert initialize_database("mongodb://unused", "init_db", client=mongo_client) == 0

    db = mongo_client["init_db"]
    ids = sorted(d["id"] for d in db["subjects"].find())
    assert ids == [1, 2, 3, 4, 5]
    assert db["counters"].find_one({"_id": "subjects"})["sequence"] == 5


def test_main_reports_unreachable_server(monkeypatch) -> None:
    monkeypatch.setenv("STORAGE_BACKEND", "mongo")
    rc = main(["--uri", "mongodb://127.0.0.1:1", "--database", "nowhere", "--timeout-ms", "50", "--no-seed"])
    assert rc == 1


def test_main_defaults_come_from_cached_settings(monkeypatch) -> None:
    calls = []

    def fake_initialize(uri, database, *, seed, timeout_ms):
        calls.append((uri, database, seed, timeout_ms))
        return 0

    monkeypatch.setenv("MONGODB_URI", "mongodb://from-env:27017")
    monkeypatch.setenv("MONGODB_DATABASE", "from_env")
    monkeypatch.setattr("studynotes_api.db_init.initialize_database", fake_initialize)
    assert main([]) == 0
    monkeypatch.setenv("MONGODB_DATABASE", "changed")
    assert main(["--no-seed"]) == 0
    assert [c[:3] for c in calls] == [
        ("mongodb://from-env:27017", "from_env", True),
        ("mongodb://from-env:27017", "from_env", False),
    ]
