from __future__ import annotations

from typing import Any, Mapping, Protocol, runtime_checkable

from studynotes_api.domain.entities import Note, Subject


@runtime_checkable
class NoteRepository(Protocol):
    def open(self) -> None:
        ...

    def close(self) -> None:
        ...

    def list_subjects(self) -> list[Subject]:
        ...

    def get_subject(self, subject_id: int) -> Subject | None:
        ...

    def create_subject(self, name: str, icon: str | None = None, color: str | None = None) -> Subject:
        ...

    def update_subject(self, subject_id: int, changes: Mapping[str, Any]) -> Subject | None:
        ...

    def delete_subject(self, subject_id: int) -> bool:
        ...

    def list_notes(self) -> list[Note]:
        ...

    def list_notes_by_subject(self, subject_id: int) -> list[Note]:
        ...

    def get_note(self, note_id: int) -> Note | None:
        ...

    def create_note(
        self,
        title: str,
        subject_id: int,
        content: str | None = None,
        tags: list[str] | None = None,
    ) -> Note:
        ...

    def update_note(self, note_id: int, changes: Mapping[str, Any]) -> Note | None:
        ...

    def delete_note(self, note_id: int) -> bool:
        ...

    def search_notes(self, query: str) -> list[Note]:
        ...
