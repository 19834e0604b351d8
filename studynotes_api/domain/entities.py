from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

DEFAULT_ICON = "fas fa-book"
DEFAULT_COLOR = "gray"

COLOR_PALETTE = ("blue", "green", "purple", "orange", "red", "gray")

# (name, icon, color)
DEFAULT_SUBJECTS = (
    ("Mathematics", "fas fa-calculator", "blue"),
    ("Physics", "fas fa-atom", "green"),
    ("Chemistry", "fas fa-flask", "purple"),
    ("History", "fas fa-landmark", "orange"),
    ("English Literature", "fas fa-book-open", "red"),
)


@dataclass(frozen=True)
class Subject:
    id: int
    name: str
    icon: str
    color: str
    created_at: datetime


@dataclass(frozen=True)
class Note:
    id: int
    title: str
    content: str
    subject_id: int
    created_at: datetime
    updated_at: datetime
    tags: list[str] = field(default_factory=list)
