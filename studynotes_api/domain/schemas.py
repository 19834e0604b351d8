from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _normalize_tags(tags: Optional[list[str]]) -> Optional[list[str]]:
    if tags is None:
        return None
    return [t.strip().lower() for t in tags if t.strip()]


class SubjectOut(ApiModel):
    id: int
    name: str
    icon: str
    color: str
    created_at: datetime


class SubjectWithCountOut(SubjectOut):
    note_count: int = 0


class NoteOut(ApiModel):
    id: int
    title: str
    content: str
    subject_id: int
    tags: list[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class SubjectCreateIn(ApiModel):
    name: str
    icon: Optional[str] = None
    color: Optional[str] = None


class SubjectUpdateIn(ApiModel):
    name: Optional[str] = None
    icon: Optional[str] = None
    color: Optional[str] = None


class NoteCreateIn(ApiModel):
    title: str
    subject_id: int
    content: Optional[str] = None
    tags: Optional[list[str]] = None

    @field_validator("tags")
    @classmethod
    def lowercase_tags(cls, value: Optional[list[str]]) -> Optional[list[str]]:
        return _normalize_tags(value)


class NoteUpdateIn(ApiModel):
    title: Optional[str] = None
    subject_id: Optional[int] = None
    content: Optional[str] = None
    tags: Optional[list[str]] = None

    @field_validator("tags")
    @classmethod
    def lowercase_tags(cls, value: Optional[list[str]]) -> Optional[list[str]]:
        return _normalize_tags(value)


class HealthOut(BaseModel):
    status: str
    message: str = ""

