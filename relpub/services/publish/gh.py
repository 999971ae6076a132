from __future__ import annotations

import json
import os
import shutil
from collections.abc import Mapping
from pathlib import Path
from time import sleep

from relpub.core.config import (
    DEFAULT_CONFLICT_MARKERS,
    DEFAULT_GH_TIMEOUT_SECONDS,
    DEFAULT_RELEASE_LIST_LIMIT,
    DEFAULT_UPLOAD_TIMEOUT_SECONDS,
    Config,
)
from relpub.core.result import Err, Ok, Result
from relpub.core.structured import as_obj_list, as_str_dict, get_bool, get_str
from relpub.output.console import ConsoleProtocol
from relpub.platform.process import ProcessError
from relpub.platform.process import run as run_process
from relpub.services.publish.errors import PublishError, PublishErrorKind
from relpub.services.publish.model import CreateOutcome, ReleaseSummary

# Idempotent read retry policy
GH_READ_RETRY_ATTEMPTS = 3
GH_READ_RETRY_DELAY_SECONDS = 1.0


def _is_transient_gh_error(error: ProcessError) -> bool:
    text = error.output.lower()
    markers = (
        "timed out",
        "timeout",
        "connection reset",
        "connection refused",
        "temporarily unavailable",
        "service unavailable",
        "bad gateway",
        "gateway timeout",
        "tls handshake timeout",
        "network is unreachable",
        "http 429",
        "http 500",
        "http 502",
        "http 503",
        "http 504",
    )
    if error.returncode == -1 and "timed out" in text:
        return True
    return any(marker in text for marker in markers)


def classify_create_failure(
    error: ProcessError,
    *,
    markers: tuple[str, ...] = DEFAULT_CONFLICT_MARKERS,
) -> Result[CreateOutcome, PublishError]:
    """Decide whether a failed `gh release create` means "already exists".

    gh has no typed error for this case; the HTTP 422 validation message is
    the only signal, so the captured output is searched for the markers.
    """
    text = error.output.lower()
    if any(m.lower() in text for m in markers if m):
        return Ok(CreateOutcome.ALREADY_EXISTS)
    return Err(
        PublishError(
            kind="create_failed",
            message="failed to create release",
            hint=error.output or str(error),
            returncode=error.returncode,
        )
    )


def latest_stable_tag(
    releases: list[ReleaseSummary], *, exclude: str | None = None
) -> str | None:
    """Tag of the newest stable release other than ``exclude``.

    GitHub flags a freshly created stable release as latest, so the release
    being published must be skipped. The release flagged latest wins;
    otherwise the first remaining entry (gh lists newest first).
    """
    others = [r for r in releases if r.tag != exclude]
    for r in others:
        if r.is_latest:
            return r.tag
    return others[0].tag if others else None


def parse_release_list(payload: str) -> Result[list[ReleaseSummary], PublishError]:
    """Parse `gh release list --json tagName,isLatest` output."""
    try:
        obj: object = json.loads(payload or "[]")
    except json.JSONDecodeError as e:
        return Err(
            PublishError(kind="list_failed", message=f"gh release list returned invalid JSON: {e}")
        )

    raw = as_obj_list(obj)
    if raw is None:
        return Err(PublishError(kind="list_failed", message="unexpected release list payload"))

    out: list[ReleaseSummary] = []
    for item in raw:
        d = as_str_dict(item)
        if d is None:
            continue
        tag = get_str(d, "tagName")
        if tag is None:
            continue
        out.append(ReleaseSummary(tag=tag, is_latest=get_bool(d, "isLatest") is True))
    return Ok(out)


def ensure_gh_available() -> Result[None, PublishError]:
    if shutil.which("gh") is None:
        return Err(
            PublishError(
                kind="gh_missing",
                message="gh: missing",
                hint="Install GitHub CLI: https://cli.github.com/",
            )
        )
    return Ok(None)


class GhClient:
    """Release operations on one repository through the GitHub CLI.

    The token is acquired once by the caller and only ever handed to child
    processes through ``GH_TOKEN``. Without a token, gh falls back to its own
    stored login.

    Attributes:
        cwd: Working directory for gh (lets gh infer the repo from the checkout)
        repo: ``owner/name`` passed as ``--repo``, or None
    """

    def __init__(
        self,
        *,
        cwd: Path,
        repo: str | None = None,
        token: str | None = None,
        timeout: float = DEFAULT_GH_TIMEOUT_SECONDS,
        upload_timeout: float = DEFAULT_UPLOAD_TIMEOUT_SECONDS,
        conflict_markers: tuple[str, ...] = DEFAULT_CONFLICT_MARKERS,
        list_limit: int = DEFAULT_RELEASE_LIST_LIMIT,
        console: ConsoleProtocol | None = None,
        base_env: Mapping[str, str] | None = None,
    ) -> None:
        self.cwd = cwd
        self.repo = repo
        self._token = token
        self._timeout = timeout
        self._upload_timeout = upload_timeout
        self._conflict_markers = conflict_markers
        self._list_limit = list_limit
        self._console = console
        self._base_env = base_env

    @classmethod
    def from_config(
        cls,
        config: Config,
        *,
        cwd: Path,
        token: str | None,
        console: ConsoleProtocol | None = None,
    ) -> GhClient:
        return cls(
            cwd=cwd,
            repo=config.release.repo,
            token=token,
            timeout=config.timeouts.gh,
            upload_timeout=config.timeouts.upload,
            conflict_markers=config.release.conflict_markers,
            list_limit=config.release.list_limit,
            console=console,
        )

    def ensure_auth(self) -> Result[None, PublishError]:
        """Check that gh can authenticate (skipped when a token is injected)."""
        if self._token is not None:
            return Ok(None)
        result = run_process(
            ["gh", "auth", "status"], cwd=self.cwd, env=self._env(), timeout=self._timeout
        )
        if isinstance(result, Err):
            return Err(
                PublishError(
                    kind="gh_auth_required",
                    message="gh auth required",
                    hint="Set GH_TOKEN or run: gh auth login",
                )
            )
        return Ok(None)

    def create_release(
        self, *, name: str, target: str, prerelease: bool
    ) -> Result[CreateOutcome, PublishError]:
        cmd = ["gh", "release", "create", name, "--title", name, "--target", target, "--notes", ""]
        if prerelease:
            cmd.append("--prerelease")

        result = self._run(cmd, timeout=self._timeout)
        if isinstance(result, Err):
            return classify_create_failure(result.error, markers=self._conflict_markers)
        return Ok(CreateOutcome.CREATED)

    def upload_asset(self, *, name: str, path: Path) -> Result[None, PublishError]:
        """Upload a file to the release, replacing a same-named asset."""
        result = self._run(
            ["gh", "release", "upload", name, str(path), "--clobber"],
            timeout=self._upload_timeout,
        )
        if isinstance(result, Err):
            return self._fail(result.error, "upload_failed", f"failed to upload {path.name}")
        return Ok(None)

    def list_releases(self) -> Result[list[ReleaseSummary], PublishError]:
        """Published releases only: drafts and prereleases are excluded."""
        cmd = [
            "gh",
            "release",
            "list",
            "--exclude-drafts",
            "--exclude-pre-releases",
            "--json",
            "tagName,isLatest",
            "--limit",
            str(self._list_limit),
        ]
        result = self._run_read(cmd)
        if isinstance(result, Err):
            return self._fail(result.error, "list_failed", "failed to list releases")
        return parse_release_list(result.value)

    def edit_notes(self, *, name: str, text: str) -> Result[None, PublishError]:
        result = self._run(["gh", "release", "edit", name, "--notes", text], timeout=self._timeout)
        if isinstance(result, Err):
            return self._fail(result.error, "edit_failed", f"failed to update notes of {name}")
        return Ok(None)

    def edit_notes_file(self, *, name: str, path: Path) -> Result[None, PublishError]:
        result = self._run(
            ["gh", "release", "edit", name, "--notes-file", str(path)], timeout=self._timeout
        )
        if isinstance(result, Err):
            return self._fail(result.error, "edit_failed", f"failed to update notes of {name}")
        return Ok(None)

    def _env(self) -> dict[str, str]:
        env = dict(os.environ if self._base_env is None else self._base_env)
        env["GH_PROMPT_DISABLED"] = "1"
        if self._token is not None:
            env["GH_TOKEN"] = self._token
        return env

    def _with_repo(self, cmd: list[str]) -> list[str]:
        if self.repo:
            return [*cmd, "--repo", self.repo]
        return cmd

    def _run(self, cmd: list[str], *, timeout: float) -> Result[str, ProcessError]:
        full = self._with_repo(cmd)
        if self._console is not None:
            # Never echo notes text; the command head is enough to follow a CI log.
            self._console.command(full[:4])
        return run_process(full, cwd=self.cwd, env=self._env(), timeout=timeout)

    def _run_read(self, cmd: list[str]) -> Result[str, ProcessError]:
        attempts = max(1, GH_READ_RETRY_ATTEMPTS)
        result = self._run(cmd, timeout=self._timeout)
        for attempt in range(1, attempts):
            if isinstance(result, Ok) or not _is_transient_gh_error(result.error):
                break
            sleep(GH_READ_RETRY_DELAY_SECONDS * attempt)
            result = self._run(cmd, timeout=self._timeout)
        return result

    @staticmethod
    def _fail(error: ProcessError, kind: PublishErrorKind, message: str) -> Err[PublishError]:
        return Err(
            PublishError(
                kind=kind,
                message=message,
                hint=error.output or str(error),
                returncode=error.returncode,
            )
        )
