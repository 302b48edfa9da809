"""Add packages command"""

import click
from typing import List

from .._context import AppContext
from .._errors import abort_on_error
from .._params import validate_package_specs
from ...ui.console import console, print_success, progress_status
from ...ui.style import SymbolType


@click.command()
@click.argument(
    "packages", nargs=-1, required=True, callback=validate_package_specs
)
@click.option(
    "--remote",
    "remotes",
    multiple=True,
    metavar="REMOTE",
    help="Remote source such as owner/repo (repeatable)",
)
@click.pass_context
def add(ctx: click.Context, packages: List[str], remotes: List[str]):
    """Add packages to DESCRIPTION and install them

    PACKAGES: One or more package names, optionally pinned as name@version
    """
    app: AppContext = ctx.obj
    with abort_on_error(ctx, "add packages"):
        with progress_status("Installing packages..."):
            result = app.orchestrator.add(packages, remotes)

    console.print()
    for name in result.changed:
        version = result.packages.get(name)
        version_str = f"=={version}" if version else ""
        console.print(
            f"[bold][green]{SymbolType.SUCCESS}[/green] Added [cyan]{name}{version_str}[/cyan][/bold]"
        )
    for remote in remotes:
        console.print(f"[dim]Remote:  [cyan]{remote}[/cyan][/dim]")
    console.print()
    print_success("Packages added")
