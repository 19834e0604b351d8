from __future__ import annotations

from typing import Any, Mapping

from studynotes_api.domain.entities import COLOR_PALETTE, DEFAULT_COLOR, DEFAULT_ICON
from studynotes_api.domain.exceptions import ValidationError

SUBJECT_FIELDS = ("name", "icon", "color")
NOTE_FIELDS = ("title", "content", "subject_id", "tags")


def _text_error(field: str, value: Any, *, allow_empty: bool) -> str | None:
    if not isinstance(value, str):
        return f"{field} must be a string"
    if not allow_empty and not value.strip():
        return f"{field} must not be empty"
    return None


def _color_error(value: Any) -> str | None:
    err = _text_error("color", value, allow_empty=False)
    if err:
        return err
    if value not in COLOR_PALETTE:
        return f"color must be one of: {', '.join(COLOR_PALETTE)}"
    return None


def _subject_id_error(value: Any) -> str | None:
    # bool is an int subclass; True is not a subject id.
    if value is None:
        return "subject_id is required"
    if isinstance(value, bool) or not isinstance(value, int):
        return "subject_id must be an integer"
    return None


def _tags_error(value: Any) -> str | None:
    if not isinstance(value, (list, tuple)):
        return "tags must be a list of strings"
    if any(not isinstance(t, str) for t in value):
        return "tags must be a list of strings"
    return None


def _raise_if(errors: list[dict[str, str]], message: str) -> None:
    if errors:
        raise ValidationError(message, errors)


def new_subject_fields(name: Any, icon: Any = None, color: Any = None) -> dict[str, Any]:
    """Validate create input and fill the icon/color defaults."""
    icon = icon or DEFAULT_ICON
    color = color or DEFAULT_COLOR
    errors: list[dict[str, str]] = []
    for field, err in (
        ("name", _text_error("name", name, allow_empty=False)),
        ("icon", _text_error("icon", icon, allow_empty=False)),
        ("color", _color_error(color)),
    ):
        if err:
            errors.append({"field": field, "message": err})
    _raise_if(errors, "invalid_subject")
    return {"name": name, "icon": icon, "color": color}


def new_note_fields(title: Any, subject_id: Any, content: Any = None, tags: Any = None) -> dict[str, Any]:
    """Validate create input and fill the content/tags defaults."""
    content = content or ""
    tags = tags or []
    errors: list[dict[str, str]] = []
    for field, err in (
        ("title", _text_error("title", title, allow_empty=False)),
        ("subject_id", _subject_id_error(subject_id)),
        ("content", _text_error("content", content, allow_empty=True)),
        ("tags", _tags_error(tags)),
    ):
        if err:
            errors.append({"field": field, "message": err})
    _raise_if(errors, "invalid_note")
    return {"title": title, "subject_id": subject_id, "content": content, "tags": list(tags)}


def subject_changes(changes: Mapping[str, Any]) -> dict[str, Any]:
    """Return the patch to apply; ``None`` values mean "keep the current value"."""
    errors: list[dict[str, str]] = []
    out: dict[str, Any] = {}
    for field, value in changes.items():
        if field not in SUBJECT_FIELDS:
            errors.append({"field": field, "message": "unknown field"})
            continue
        if value is None:
            continue
        err = _color_error(value) if field == "color" else _text_error(field, value, allow_empty=False)
        if err:
            errors.append({"field": field, "message": err})
            continue
        out[field] = value
    _raise_if(errors, "invalid_subject")
    return out


def note_changes(changes: Mapping[str, Any]) -> dict[str, Any]:
    errors: list[dict[str, str]] = []
    out: dict[str, Any] = {}
    for field, value in changes.items():
        if field not in NOTE_FIELDS:
            errors.append({"field": field, "message": "unknown field"})
            continue
        if value is None:
            continue
        if field == "subject_id":
            err = _subject_id_error(value)
        elif field == "tags":
            err = _tags_error(value)
            value = list(value) if not err else value
        else:
            err = _text_error(field, value, allow_empty=field == "content")
        if err:
            errors.append({"field": field, "message": err})
            continue
        out[field] = value
    _raise_if(errors, "invalid_note")
    return out


def search_needle(query: str | None) -> str | None:
    """Lowercased search text, or ``None`` when the query should match nothing."""
    if query is None:
        return None
    if not query.strip():
        return None
    return query.lower()
