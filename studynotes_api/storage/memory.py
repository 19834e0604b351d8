from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Mapping

from studynotes_api.domain.entities import DEFAULT_SUBJECTS, Note, Subject
from studynotes_api.domain.validation import (
    new_note_fields,
    new_subject_fields,
    note_changes,
    search_needle,
    subject_changes,
)
from studynotes_api.util import note_sort_key, subject_sort_key, utc_now

logger = logging.getLogger("studynotes.storage")


def _snapshot(note: Note) -> Note:
    # Note is frozen but its tag list is not; callers get their own copy.
    return replace(note, tags=list(note.tags))


class InMemoryRepository:
    """Process-local repository.

    Ids come from per-instance counters starting at 1 and are never handed out
    twice, even after a delete. There is no locking: callers are expected to
    use one instance from a single flow of control.
    """

    def __init__(self, *, seed_defaults: bool = True) -> None:
        self._subjects: dict[int, Subject] = {}
        self._notes: dict[int, Note] = {}
        self._next_subject_id = 1
        self._next_note_id = 1
        if seed_defaults:
            for name, icon, color in DEFAULT_SUBJECTS:
                self.create_subject(name, icon=icon, color=color)

    def open(self) -> None:
        logger.info("storage_open", extra={"backend": "memory", "subjects": len(self._subjects)})

    def close(self) -> None:
        logger.info("storage_close", extra={"backend": "memory", "subjects": len(self._subjects)})

    def list_subjects(self) -> list[Subject]:
        return sorted(self._subjects.values(), key=subject_sort_key)

    def get_subject(self, subject_id: int) -> Subject | None:
        return self._subjects.get(subject_id)

    def create_subject(self, name: str, icon: str | None = None, color: str | None = None) -> Subject:
        fields = new_subject_fields(name, icon, color)
        subject_id = self._next_subject_id
        self._next_subject_id += 1
        subject = Subject(id=subject_id, created_at=utc_now(), **fields)
        self._subjects[subject_id] = subject
        return subject

    def update_subject(self, subject_id: int, changes: Mapping[str, Any]) -> Subject | None:
        patch = subject_changes(changes)
        subject = self._subjects.get(subject_id)
        if subject is None:
            return None
        updated = replace(subject, **patch)
        self._subjects[subject_id] = updated
        return updated

    def delete_subject(self, subject_id: int) -> bool:
        for note_id in [n.id for n in self._notes.values() if n.subject_id == subject_id]:
            del self._notes[note_id]
        return self._subjects.pop(subject_id, None) is not None

    def list_notes(self) -> list[Note]:
        return [_snapshot(n) for n in sorted(self._notes.values(), key=note_sort_key, reverse=True)]

    def list_notes_by_subject(self, subject_id: int) -> list[Note]:
        items = [n for n in self._notes.values() if n.subject_id == subject_id]
        return [_snapshot(n) for n in sorted(items, key=note_sort_key, reverse=True)]

    def get_note(self, note_id: int) -> Note | None:
        note = self._notes.get(note_id)
        return _snapshot(note) if note else None

    def create_note(
        self,
        title: str,
        subject_id: int,
        content: str | None = None,
        tags: list[str] | None = None,
    ) -> Note:
        fields = new_note_fields(title, subject_id, content, tags)
        note_id = self._next_note_id
        self._next_note_id += 1
        now = utc_now()
        note = Note(id=note_id, created_at=now, updated_at=now, **fields)
        self._notes[note_id] = note
        return _snapshot(note)

    def update_note(self, note_id: int, changes: Mapping[str, Any]) -> Note | None:
        patch = note_changes(changes)
        note = self._notes.get(note_id)
        if note is None:
            return None
        updated = replace(note, **patch, updated_at=max(utc_now(), note.updated_at))
        self._notes[note_id] = updated
        return _snapshot(updated)

    def delete_note(self, note_id: int) -> bool:
        return self._notes.pop(note_id, None) is not None

    def search_notes(self, query: str) -> list[Note]:
        needle = search_needle(query)
        if needle is None:
            return []
        hits = [
            n
            for n in self._notes.values()
            if needle in n.title.lower()
            or needle in n.content.lower()
            or any(needle in tag.lower() for tag in n.tags)
        ]
        return [_snapshot(n) for n in sorted(hits, key=note_sort_key, reverse=True)]
