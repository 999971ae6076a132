from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path

import typer

from relpub.core.config import CONFIG_FILENAME, Config, load_config_or_default, resolve_token
from relpub.core.errors import ErrorCode
from relpub.core.result import Err
from relpub.output.console import ConsoleProtocol, RichConsole


@dataclass(frozen=True, slots=True)
class CLIContext:
    cwd: Path
    config: Config
    console: ConsoleProtocol
    # Resolved once per run; handed to the gh client, never persisted.
    token: str | None


def build_context(
    *,
    config_path: Path | None = None,
    repo: str | None = None,
    notes_file: str | None = None,
) -> CLIContext:
    cwd = Path.cwd()
    console = RichConsole()

    path = config_path if config_path is not None else cwd / CONFIG_FILENAME
    loaded = load_config_or_default(path)
    if isinstance(loaded, Err):
        console.error(loaded.error.message)
        raise typer.Exit(code=int(ErrorCode.FAILURE))

    config = loaded.value.with_env(os.environ)
    if repo:
        config = replace(config, release=replace(config.release, repo=repo))
    if notes_file:
        config = replace(config, notes=replace(config.notes, file=notes_file))

    return CLIContext(cwd=cwd, config=config, console=console, token=resolve_token())
