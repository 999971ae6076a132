"""Git operations used to build release notes.

Usage:
    from relpub.git import Repository

    repo = Repository(Path("."))
    match repo.log(target="main", baseline="v1.2.0"):
        case Ok(commits):
            ...
"""

from relpub.git.repository import (
    Commit,
    GitError,
    Repository,
    commit_range,
)

__all__ = [
    "Commit",
    "GitError",
    "Repository",
    "commit_range",
]
