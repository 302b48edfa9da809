"""Remove packages command"""

import click
from typing import List

from .._context import AppContext
from .._errors import abort_on_error
from .._params import validate_package_specs
from ...ui.console import console, progress_status
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
    help="Remote source to drop from DESCRIPTION (repeatable)",
)
@click.pass_context
def remove(ctx: click.Context, packages: List[str], remotes: List[str]):
    """Remove packages from DESCRIPTION and prune the library

    PACKAGES: One or more package names to remove
    """
    app: AppContext = ctx.obj
    with abort_on_error(ctx, "remove packages"):
        with progress_status("Removing packages..."):
            result = app.orchestrator.remove(packages, remotes)

    console.print()
    for name in result.changed:
        console.print(
            f"[bold][green]{SymbolType.SUCCESS}[/green] Removed [cyan]{name}[/cyan][/bold]"
        )
    console.print()
