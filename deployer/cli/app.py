from __future__ import annotations

import os

import typer

from deployer import __version__
from deployer.core.config import load_config
from deployer.github.http import RealHttpClient
from deployer.output.console import RichConsole
from deployer.services.publish import run


app = typer.Typer(
    add_completion=False,
    no_args_is_help=False,
    rich_markup_mode="rich",
)


@app.command(
    context_settings={"allow_extra_args": True, "ignore_unknown_options": True},
)
def publish(
    args: list[str] | None = typer.Argument(
        None,
        metavar="[KEY[=VALUE]]...",
        help=(
            "Settings such as [bold]org=acme repo=tool tag=v1.0 title=\"Tool 1.0\" "
            "artifact=build/libs draft[/bold]. Merged over config.properties; "
            "githubdeployer.<key> environment variables win over both."
        ),
        show_default=False,
    ),
    version: bool = typer.Option(False, "--version", help="Show version and exit."),
) -> None:
    """Create a GitHub release and upload the build artifacts to it."""
    if version:
        typer.echo(__version__)
        raise typer.Exit(code=0)

    console = RichConsole()
    config = load_config(None, args or [], os.environ, console=console)
    console.verbose = config.get_or(config.get_bool, "verbose", False)

    code = run(config, http=RealHttpClient(), console=console)
    raise typer.Exit(code=int(code))


def main() -> None:
    app()
