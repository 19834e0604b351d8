"""Prepare a MongoDB database for the study notes API.

Creates the ``subjects``, ``notes`` and ``counters`` collections when missing,
seeds the counter documents at zero, builds the indexes and, unless
``--no-seed`` is given, inserts the default subjects into an empty database.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional, Sequence

from pymongo import MongoClient

from studynotes_api.dependencies import get_settings
from studynotes_api.domain.exceptions import StorageUnavailable
from studynotes_api.storage.mongo import MongoRepository

logger = logging.getLogger("studynotes.db_init")


def initialize_database(
    uri: str,
    database: str,
    *,
    seed: bool = True,
    timeout_ms: int = 5000,
    client: Optional[MongoClient] = None,
) -> int:
    """Run the setup steps and return the number of subjects seeded."""
    repo = MongoRepository(uri, database, timeout_ms=timeout_ms, seed_defaults=False, client=client)
    repo.open()
    try:
        repo.initialize()
        return repo.seed_default_subjects() if seed else 0
    finally:
        repo.close()


def main(argv: Optional[Sequence[str]] = None) -> int:
    settings = get_settings()
    parser = argparse.ArgumentParser(
        prog="studynotes-init-db",
        description="Create collections, counters and indexes for the study notes API",
    )
    parser.add_argument("--uri", default=settings.mongodb_uri, help="MongoDB connection string")
    parser.add_argument("--database", default=settings.mongodb_database, help="Database name")
    parser.add_argument("--timeout-ms", type=int, default=settings.mongodb_timeout_ms)
    parser.add_argument("--no-seed", action="store_true", help="Do not insert the default subjects")
    args = parser.parse_args(argv)

    logging.basicConfig(level=settings.log_level, format="%(levelname)s %(name)s %(message)s")
    try:
        seeded = initialize_database(args.uri, args.database, seed=not args.no_seed, timeout_ms=args.timeout_ms)
    except StorageUnavailable as e:
        logger.error("database initialization failed: %s", e)
        return 1
    logger.info("database initialization complete (%d subjects seeded)", seeded)
    return 0


if __name__ == "__main__":
    sys.exit(main())
