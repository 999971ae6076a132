"""Typed configuration loading and access.

Settings come from an optional ``relpub.toml`` plus a couple of environment
variables. Everything has a default, so a missing file is not an error.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import TypeVar

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_float, get_int, get_str, get_str_list, get_table

__all__ = [
    "CONFIG_FILENAME",
    "DEFAULT_CONFLICT_MARKERS",
    "DEFAULT_NOTES_FILE",
    "DEFAULT_NOTES_INLINE_LIMIT",
    "Config",
    "ConfigError",
    "NotesConfig",
    "ReleaseConfig",
    "TimeoutsConfig",
    "load_config",
    "load_config_or_default",
    "resolve_token",
]

CONFIG_FILENAME = "relpub.toml"

# GitHub rejects release bodies above 125000 characters.
DEFAULT_NOTES_INLINE_LIMIT = 125_000
DEFAULT_NOTES_FILE = "release-notes.txt"

# `gh release create` on an existing tag fails with HTTP 422 and a
# "tag_name already_exists" validation error.
DEFAULT_CONFLICT_MARKERS = ("already_exists", "already exists")

DEFAULT_RELEASE_LIST_LIMIT = 100

DEFAULT_GH_TIMEOUT_SECONDS = 60.0
DEFAULT_UPLOAD_TIMEOUT_SECONDS = 15 * 60.0
DEFAULT_GIT_TIMEOUT_SECONDS = 30.0

TOKEN_ENV_VARS = ("GH_TOKEN", "GITHUB_TOKEN")
REPO_ENV_VAR = "RELPUB_REPO"


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class ReleaseConfig:
    """Where releases live and how conflicts are recognised."""

    repo: str | None = None  # owner/name; None lets gh infer it from the checkout
    conflict_markers: tuple[str, ...] = DEFAULT_CONFLICT_MARKERS
    list_limit: int = DEFAULT_RELEASE_LIST_LIMIT


@dataclass(frozen=True, slots=True)
class NotesConfig:
    file: str = DEFAULT_NOTES_FILE
    inline_limit: int = DEFAULT_NOTES_INLINE_LIMIT

    @property
    def placeholder(self) -> str:
        """Release body used when the notes are attached as a file."""
        return f"Release notes are attached as {Path(self.file).name}."


@dataclass(frozen=True, slots=True)
class TimeoutsConfig:
    """Per-call timeouts in seconds."""

    gh: float = DEFAULT_GH_TIMEOUT_SECONDS
    upload: float = DEFAULT_UPLOAD_TIMEOUT_SECONDS
    git: float = DEFAULT_GIT_TIMEOUT_SECONDS


N = TypeVar("N", int, float)


def _positive(value: N | None, key: str) -> N | None:
    if value is not None and value <= 0:
        raise ValueError(f"{key} must be positive")
    return value


@dataclass(frozen=True, slots=True)
class Config:
    """Main configuration container."""

    release: ReleaseConfig = field(default_factory=ReleaseConfig)
    notes: NotesConfig = field(default_factory=NotesConfig)
    timeouts: TimeoutsConfig = field(default_factory=TimeoutsConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Config:
        """Create Config from a mapping (parsed TOML)."""
        release: StrDict = get_table(data, "release") or {}
        notes: StrDict = get_table(data, "notes") or {}
        timeouts: StrDict = get_table(data, "timeouts") or {}

        markers = get_str_list(release, "conflict_markers")
        list_limit = _positive(get_int(release, "list_limit"), "release.list_limit")
        limit = _positive(get_int(notes, "inline_limit"), "notes.inline_limit")
        gh = _positive(get_float(timeouts, "gh"), "timeouts.gh")
        upload = _positive(get_float(timeouts, "upload"), "timeouts.upload")
        git = _positive(get_float(timeouts, "git"), "timeouts.git")

        return cls(
            release=ReleaseConfig(
                repo=get_str(release, "repo"),
                conflict_markers=tuple(markers) if markers else DEFAULT_CONFLICT_MARKERS,
                list_limit=list_limit or DEFAULT_RELEASE_LIST_LIMIT,
            ),
            notes=NotesConfig(
                file=get_str(notes, "file") or DEFAULT_NOTES_FILE,
                inline_limit=limit or DEFAULT_NOTES_INLINE_LIMIT,
            ),
            timeouts=TimeoutsConfig(
                gh=gh or DEFAULT_GH_TIMEOUT_SECONDS,
                upload=upload or DEFAULT_UPLOAD_TIMEOUT_SECONDS,
                git=git or DEFAULT_GIT_TIMEOUT_SECONDS,
            ),
        )

    def with_env(self, env: Mapping[str, str]) -> Config:
        """Apply environment overrides (currently only the repository slug)."""
        repo = env.get(REPO_ENV_VAR, "").strip()
        if not repo:
            return self
        return replace(self, release=replace(self.release, repo=repo))


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    import tomllib

    try:
        data_obj: object = tomllib.loads(path.read_bytes().decode("utf-8"))
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))

    data = as_str_dict(data_obj)
    if data is None:
        return Err(ConfigError("Config root must be a TOML table", path=path))
    return Ok(data)


def load_config(path: Path) -> Result[Config, ConfigError]:
    """Load and parse configuration from a TOML file.

    Args:
        path: Path to relpub.toml

    Returns:
        Ok(Config) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(Config.from_dict(result.value))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))


def load_config_or_default(path: Path) -> Result[Config, ConfigError]:
    """Like load_config, but a missing file yields the defaults.

    A file that exists but cannot be parsed is still an error.
    """
    if not path.exists():
        return Ok(Config())
    return load_config(path)


def resolve_token(env: Mapping[str, str] | None = None) -> str | None:
    """Pick the GitHub token for this run, or None to rely on `gh auth`."""
    source = os.environ if env is None else env
    for name in TOKEN_ENV_VARS:
        token = source.get(name, "").strip()
        if token:
            return token
    return None
