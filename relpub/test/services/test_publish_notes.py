from __future__ import annotations

from pathlib import Path

from relpub.core.result import Err, Ok
from relpub.git.repository import Commit
from relpub.services.publish.notes import (
    choose_attachment,
    notes_size,
    render_line,
    render_notes,
    write_notes,
)

_PLACEHOLDER = "Release notes are attached as release-notes.txt."


def _commit(n: int, subject: str = "Fix things", author: str = "Ada") -> Commit:
    return Commit(sha=f"{n:07x}" + "f" * 33, author=author, subject=subject)


def test_render_line() -> None:
    commit = Commit(sha="abcdef0123456789", author="Grace Hopper", subject="Add compiler")
    assert render_line(commit) == "Add compiler by Grace Hopper in abcdef0"


def test_render_notes_keeps_order_one_line_each() -> None:
    commits = [_commit(3, "third"), _commit(2, "second"), _commit(1, "first")]
    text = render_notes(commits)
    assert text.splitlines() == [
        "third by Ada in 0000003",
        "second by Ada in 0000002",
        "first by Ada in 0000001",
    ]
    assert text.endswith("\n")


def test_render_notes_empty() -> None:
    assert render_notes([]) == ""


def test_notes_size_counts_bytes() -> None:
    assert notes_size("abc") == 3
    assert notes_size("é") == 2


def test_attachment_at_limit_is_inline() -> None:
    text = "x" * 125_000
    attachment = choose_attachment(text, placeholder=_PLACEHOLDER)
    assert attachment.mode == "inline"
    assert attachment.body == text
    assert attachment.size == 125_000


def test_attachment_above_limit_is_file() -> None:
    text = "x" * 125_001
    attachment = choose_attachment(text, placeholder=_PLACEHOLDER)
    assert attachment.mode == "file"
    assert attachment.body == _PLACEHOLDER
    assert attachment.size == 125_001


def test_attachment_limit_is_measured_in_bytes() -> None:
    # 62501 two-byte characters: 62501 chars, 125002 bytes
    attachment = choose_attachment("é" * 62_501, placeholder=_PLACEHOLDER)
    assert attachment.mode == "file"


def test_attachment_custom_limit() -> None:
    assert choose_attachment("abcd", placeholder="p", limit=3).mode == "file"
    assert choose_attachment("abc", placeholder="p", limit=3).mode == "inline"


def test_write_notes_creates_file_with_exact_bytes(tmp_path: Path) -> None:
    path = tmp_path / "out" / "release-notes.txt"
    text = "one by Ada in 0000001\ntwo by Ada in 0000002\n"

    result = write_notes(path, text)
    assert result == Ok(path)
    assert path.read_bytes() == text.encode("utf-8")


def test_write_notes_overwrites_previous_run(tmp_path: Path) -> None:
    path = tmp_path / "release-notes.txt"
    path.write_text("stale notes from an older run\n", encoding="utf-8")

    write_notes(path, "")
    assert path.read_bytes() == b""


def test_write_notes_error(tmp_path: Path) -> None:
    blocker = tmp_path / "file"
    blocker.write_text("", encoding="utf-8")

    result = write_notes(blocker / "release-notes.txt", "x")
    assert isinstance(result, Err)
    assert result.error.kind == "notes_failed"
