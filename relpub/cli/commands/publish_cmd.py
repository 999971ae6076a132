from __future__ import annotations

from pathlib import Path

import typer

from relpub.cli.commands._helpers import exit_on_error, exit_with_error
from relpub.cli.context import build_context
from relpub.git.repository import Repository
from relpub.services.publish.errors import PublishError
from relpub.services.publish.gh import GhClient, ensure_gh_available
from relpub.services.publish.inputs import validate_request
from relpub.services.publish.service import publish as publish_release


def publish(
    # Positionals default to "" so that missing values reach the validator
    # and exit 1 with a labeled message instead of a usage error.
    name: str = typer.Argument("", help="Release name, used as tag and title.", show_default=False),
    target: str = typer.Argument("", help="Branch or tag to release from.", show_default=False),
    bundle: str = typer.Argument("", help="Prebuilt artifact bundle (zip).", show_default=False),
    prerelease: str = typer.Argument("true", help="Mark the release as a prerelease."),
    repo: str | None = typer.Option(None, "--repo", help="Repository as owner/name."),
    config_path: Path | None = typer.Option(None, "--config", help="Path to relpub.toml."),
    notes_file: str | None = typer.Option(None, "--notes-file", help="Rendered notes file name."),
) -> None:
    """Create or update a release, upload the bundle and refresh its notes."""
    ctx = build_context(config_path=config_path, repo=repo, notes_file=notes_file)

    request = exit_on_error(
        validate_request(
            name=name, target=target, bundle=bundle, prerelease=prerelease, cwd=ctx.cwd
        ),
        ctx.console,
    )

    # git log runs after the bundle upload; fail before touching the release.
    history = Repository(ctx.cwd, timeout=ctx.config.timeouts.git)
    if not history.exists():
        not_a_checkout = PublishError(
            kind="invalid_input",
            message=f"not a git checkout: {ctx.cwd}",
            hint="Run relpub from the repository being released.",
        )
        exit_with_error(not_a_checkout, ctx.console)

    exit_on_error(ensure_gh_available(), ctx.console)
    host = GhClient.from_config(ctx.config, cwd=ctx.cwd, token=ctx.token, console=ctx.console)
    exit_on_error(host.ensure_auth(), ctx.console)

    report = exit_on_error(
        publish_release(
            request,
            host=host,
            history=history,
            config=ctx.config,
            workdir=ctx.cwd,
            console=ctx.console,
        ),
        ctx.console,
    )
    ctx.console.success(f"{report.name} published ({report.outcome})")
