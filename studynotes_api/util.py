from __future__ import annotations

from datetime import datetime, timezone

from studynotes_api.domain.entities import Note, Subject


def utc_now() -> datetime:
    # MongoDB keeps millisecond precision; both backends hand out the same resolution.
    now = datetime.now(tz=timezone.utc)
    return now.replace(microsecond=now.microsecond - now.microsecond % 1000)


def ensure_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def subject_sort_key(subject: Subject) -> tuple[str, str, int]:
    """Dictionary order: letters compare case-insensitively, lowercase wins a tie.

    Matches an English locale collation for plain names ("art" < "Art" < "Biology"),
    independent of the process locale.
    """
    return (subject.name.casefold(), subject.name.swapcase(), subject.id)


def note_sort_key(note: Note) -> tuple[datetime, int]:
    """Sort with ``reverse=True`` for most recently updated first."""
    return (note.updated_at, note.id)
