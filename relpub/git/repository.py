"""Git repository abstraction.

This module provides the Repository class for the read-only history queries
relpub needs. All operations return Result types.

Usage:
    repo = Repository(Path("/path/to/checkout"))

    match repo.log(target="main", baseline=None):
        case Ok(commits):
            for c in commits:
                print(c.short_sha, c.subject)
        case Err(e):
            print(f"Error: {e.message}")
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from relpub.core.result import Err, Ok, Result
from relpub.platform.process import ProcessError
from relpub.platform.process import run as run_process

_GIT_TIMEOUT_SECONDS = 30.0

SHORT_SHA_LENGTH = 7

# Unit separator: cannot appear in author names or subjects.
_FIELD_SEP = "\x1f"
_LOG_FORMAT = "%H%x1f%an%x1f%s"

__all__ = [
    "Commit",
    "GitError",
    "Repository",
    "SHORT_SHA_LENGTH",
    "commit_range",
]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git subcommand that failed
        message: Error message
        returncode: Process return code
    """

    command: str
    message: str
    returncode: int = 1


@dataclass(frozen=True, slots=True)
class Commit:
    """A single non-merge commit as listed by ``git log``.

    Attributes:
        sha: Full commit hash
        author: Author name
        subject: First line of the commit message
    """

    sha: str
    author: str
    subject: str

    @property
    def short_sha(self) -> str:
        return self.sha[:SHORT_SHA_LENGTH]


def commit_range(target: str, baseline: str | None) -> str:
    """Revision expression for commits in ``target`` but not in ``baseline``.

    Without a baseline this is the whole history reachable from ``target``.
    """
    if baseline:
        return f"{baseline}..{target}"
    return target


class Repository:
    """Git repository abstraction.

    Attributes:
        path: Path to the repository checkout
        timeout: Seconds allowed per git invocation
    """

    def __init__(self, path: Path, *, timeout: float = _GIT_TIMEOUT_SECONDS) -> None:
        self.path = path
        self.timeout = timeout

    def exists(self) -> bool:
        """Check if this is a valid git checkout (worktrees use a .git file)."""
        return (self.path / ".git").exists()

    def log(self, *, target: str, baseline: str | None) -> Result[list[Commit], GitError]:
        """List non-merge commits in ``baseline..target``, newest first.

        Returns:
            Ok(list[Commit]) on success (possibly empty)
            Err(GitError) if git fails, e.g. on an unknown ref
        """
        rev = commit_range(target, baseline)
        result = self._run(["log", "--no-merges", f"--format={_LOG_FORMAT}", rev, "--"])
        match result:
            case Err(e):
                return Err(
                    GitError(
                        command=f"log {rev}",
                        message=e.stderr.strip() or f"git log {rev} failed",
                        returncode=e.returncode,
                    )
                )
            case Ok(stdout):
                return Ok(self._parse_log(stdout))

    def _run(self, args: list[str]) -> Result[str, ProcessError]:
        """Run a git command in this repository."""
        return run_process(
            ["git", "-C", str(self.path), *args], cwd=self.path, timeout=self.timeout
        )

    def _parse_log(self, output: str) -> list[Commit]:
        commits: list[Commit] = []
        # Split on \n only: splitlines() also breaks on other control characters.
        for line in output.split("\n"):
            parts = line.split(_FIELD_SEP, 2)
            if len(parts) != 3 or not parts[0]:
                continue
            sha, author, subject = parts
            commits.append(Commit(sha=sha, author=author, subject=subject))
        return commits
