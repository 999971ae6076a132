from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from relpub.core.config import DEFAULT_NOTES_INLINE_LIMIT
from relpub.core.result import Err, Ok, Result
from relpub.git.repository import Commit
from relpub.services.publish.errors import PublishError
from relpub.services.publish.model import NotesAttachment


def render_line(commit: Commit) -> str:
    return f"{commit.subject} by {commit.author} in {commit.short_sha}"


def render_notes(commits: Iterable[Commit]) -> str:
    """One line per commit, in the order given. No commits, empty document."""
    return "".join(f"{render_line(c)}\n" for c in commits)


def notes_size(text: str) -> int:
    """Size in bytes as GitHub measures the release body."""
    return len(text.encode("utf-8"))


def choose_attachment(
    text: str,
    *,
    placeholder: str,
    limit: int = DEFAULT_NOTES_INLINE_LIMIT,
) -> NotesAttachment:
    """Inline up to ``limit`` bytes inclusive, otherwise attach as a file."""
    size = notes_size(text)
    if size <= limit:
        return NotesAttachment(mode="inline", body=text, size=size)
    return NotesAttachment(mode="file", body=placeholder, size=size)


def write_notes(path: Path, text: str) -> Result[Path, PublishError]:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        # newline="" keeps the byte size identical to what was measured.
        with path.open("w", encoding="utf-8", newline="") as f:
            f.write(text)
    except OSError as e:
        return Err(
            PublishError(
                kind="notes_failed",
                message=f"failed to write release notes: {e}",
                hint=str(path),
            )
        )
    return Ok(path)
