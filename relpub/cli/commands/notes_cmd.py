from __future__ import annotations

from pathlib import Path

import typer

from relpub.cli.commands._helpers import exit_on_error, exit_with_error
from relpub.cli.context import build_context
from relpub.git.repository import Repository
from relpub.services.publish.errors import PublishError
from relpub.services.publish.gh import GhClient, ensure_gh_available
from relpub.services.publish.service import find_baseline, preview_notes


def notes(
    target: str = typer.Argument("", help="Branch or tag to render notes for.", show_default=False),
    since: str | None = typer.Option(
        None, "--since", help="Baseline tag (default: latest stable release)."
    ),
    repo: str | None = typer.Option(None, "--repo", help="Repository as owner/name."),
    config_path: Path | None = typer.Option(None, "--config", help="Path to relpub.toml."),
) -> None:
    """Print the release notes a publish would generate. Changes nothing."""
    ctx = build_context(config_path=config_path, repo=repo)

    target = target.strip()
    if not target:
        missing = PublishError(kind="invalid_input", message="missing target ref")
        exit_with_error(missing, ctx.console)

    baseline = since.strip() if since else None
    if not baseline:
        exit_on_error(ensure_gh_available(), ctx.console)
        host = GhClient.from_config(ctx.config, cwd=ctx.cwd, token=ctx.token)
        baseline = exit_on_error(find_baseline(host), ctx.console)

    history = Repository(ctx.cwd, timeout=ctx.config.timeouts.git)
    text = exit_on_error(preview_notes(history, target=target, baseline=baseline), ctx.console)
    typer.echo(text, nl=False)
