from __future__ import annotations

import typer

from relpub import __version__
from relpub.cli.commands.notes_cmd import notes
from relpub.cli.commands.publish_cmd import publish


app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)


app.command()(publish)
app.command()(notes)


def _show_version(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit(code=0)


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    version: bool = typer.Option(
        False, "--version", help="Show version and exit.", is_eager=True, callback=_show_version
    ),
) -> None:
    """Publish GitHub releases with notes generated from git history."""


def main() -> None:
    app()
