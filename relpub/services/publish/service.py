"""Release publishing workflow.

The publisher is a straight pipeline of fallible steps:

1. create the release, or detect that it already exists
2. upload the artifact bundle (replacing a same-named asset)
3. find the newest other stable release, used as the notes baseline
4. render the commits since the baseline into a notes file
5. attach the notes inline, or as an asset when they are too large

Each step returns a Result and the first Err stops the run. Nothing is
rolled back: a failure after step 2 leaves the release with the new bundle
and its previous notes, and the console says so.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from relpub.core.config import Config
from relpub.core.result import Err, Ok, Result
from relpub.git.repository import Commit, GitError
from relpub.output.console import ConsoleProtocol, Style
from relpub.services.publish.errors import PublishError
from relpub.services.publish.gh import latest_stable_tag
from relpub.services.publish.model import (
    CreateOutcome,
    NotesAttachment,
    PublishReport,
    ReleaseRequest,
    ReleaseSummary,
)
from relpub.services.publish.notes import choose_attachment, render_notes, write_notes


class ReleaseHost(Protocol):
    """The subset of the hosting platform the publisher needs."""

    def create_release(
        self, *, name: str, target: str, prerelease: bool
    ) -> Result[CreateOutcome, PublishError]: ...

    def upload_asset(self, *, name: str, path: Path) -> Result[None, PublishError]: ...

    def list_releases(self) -> Result[list[ReleaseSummary], PublishError]: ...

    def edit_notes(self, *, name: str, text: str) -> Result[None, PublishError]: ...

    def edit_notes_file(self, *, name: str, path: Path) -> Result[None, PublishError]: ...


class CommitHistory(Protocol):
    def log(self, *, target: str, baseline: str | None) -> Result[list[Commit], GitError]: ...


def _history_error(e: GitError) -> PublishError:
    return PublishError(
        kind="history_failed",
        message=f"git {e.command} failed",
        hint=e.message,
        returncode=e.returncode,
    )


def find_baseline(
    host: ReleaseHost, *, exclude: str | None = None
) -> Result[str | None, PublishError]:
    """Tag of the newest non-draft, non-prerelease release besides ``exclude``, or None."""
    releases = host.list_releases()
    if isinstance(releases, Err):
        return releases
    return Ok(latest_stable_tag(releases.value, exclude=exclude))


def collect_commits(
    history: CommitHistory, *, target: str, baseline: str | None
) -> Result[list[Commit], PublishError]:
    result = history.log(target=target, baseline=baseline)
    if isinstance(result, Err):
        return Err(_history_error(result.error))
    return Ok(result.value)


def preview_notes(
    history: CommitHistory, *, target: str, baseline: str | None
) -> Result[str, PublishError]:
    """Render notes for ``baseline..target`` without touching any release."""
    return collect_commits(history, target=target, baseline=baseline).map(render_notes)


def attach_notes(
    host: ReleaseHost,
    *,
    name: str,
    notes_path: Path,
    attachment: NotesAttachment,
) -> Result[None, PublishError]:
    if attachment.mode == "inline":
        # Passing the file keeps large bodies off the command line.
        return host.edit_notes_file(name=name, path=notes_path)

    edited = host.edit_notes(name=name, text=attachment.body)
    if isinstance(edited, Err):
        return edited
    return host.upload_asset(name=name, path=notes_path)


def _warn_partial(console: ConsoleProtocol, name: str) -> None:
    console.warning(f"release {name} has the new bundle but its notes were not updated")


def publish(
    request: ReleaseRequest,
    *,
    host: ReleaseHost,
    history: CommitHistory,
    config: Config,
    workdir: Path,
    console: ConsoleProtocol,
) -> Result[PublishReport, PublishError]:
    name = request.name

    console.header(f"Release {name}")
    created = host.create_release(name=name, target=request.target, prerelease=request.prerelease)
    if isinstance(created, Err):
        return created
    outcome = created.value
    if outcome is CreateOutcome.ALREADY_EXISTS:
        console.warning(f"release {name} already exists; updating it")
    else:
        kind = "prerelease" if request.prerelease else "release"
        console.success(f"created {kind} {name} at {request.target}")

    uploaded = host.upload_asset(name=name, path=request.bundle)
    if isinstance(uploaded, Err):
        return uploaded
    console.success(f"uploaded {request.bundle.name}")

    baseline = find_baseline(host, exclude=name)
    if isinstance(baseline, Err):
        _warn_partial(console, name)
        return baseline
    if baseline.value is None:
        console.info("no stable release yet; notes cover the full history")
    else:
        console.info(f"notes since {baseline.value}")

    commits = collect_commits(history, target=request.target, baseline=baseline.value)
    if isinstance(commits, Err):
        _warn_partial(console, name)
        return commits

    text = render_notes(commits.value)
    notes_path = workdir / config.notes.file
    written = write_notes(notes_path, text)
    if isinstance(written, Err):
        _warn_partial(console, name)
        return written

    attachment = choose_attachment(
        text, placeholder=config.notes.placeholder, limit=config.notes.inline_limit
    )
    attached = attach_notes(host, name=name, notes_path=notes_path, attachment=attachment)
    if isinstance(attached, Err):
        _warn_partial(console, name)
        return attached

    count = len(commits.value)
    if attachment.mode == "inline":
        console.success(f"notes updated ({count} commits)")
    else:
        console.success(f"notes attached as {notes_path.name} ({count} commits)")
        console.print(f"{attachment.size} bytes > {config.notes.inline_limit}", Style.DIM)

    return Ok(
        PublishReport(
            name=name,
            outcome=outcome,
            bundle_name=request.bundle.name,
            baseline=baseline.value,
            commit_count=count,
            notes=attachment,
            notes_path=notes_path,
        )
    )
