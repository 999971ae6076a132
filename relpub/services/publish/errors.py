from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

PublishErrorKind = Literal[
    "invalid_input",
    "gh_missing",
    "gh_auth_required",
    "create_failed",
    "upload_failed",
    "list_failed",
    "history_failed",
    "notes_failed",
    "edit_failed",
]


@dataclass(frozen=True, slots=True)
class PublishError:
    kind: PublishErrorKind
    message: str
    hint: str | None = None
    # Status of the external tool that failed, if any.
    returncode: int | None = None
