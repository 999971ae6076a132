from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Literal

NotesMode = Literal["inline", "file"]


class CreateOutcome(Enum):
    """What happened when we asked the host to create the release."""

    CREATED = "created"
    ALREADY_EXISTS = "already_exists"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class ReleaseRequest:
    """Validated publisher inputs. ``name`` doubles as tag and title."""

    name: str
    target: str
    bundle: Path
    prerelease: bool


@dataclass(frozen=True, slots=True)
class ReleaseSummary:
    tag: str
    is_latest: bool


@dataclass(frozen=True, slots=True)
class NotesAttachment:
    mode: NotesMode
    body: str
    size: int  # bytes, UTF-8


@dataclass(frozen=True, slots=True)
class PublishReport:
    name: str
    outcome: CreateOutcome
    bundle_name: str
    baseline: str | None
    commit_count: int
    notes: NotesAttachment
    notes_path: Path
