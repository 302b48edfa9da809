"""Update package command"""

import click
from typing import Optional

from .._context import AppContext
from .._errors import abort_on_error
from .._params import validate_package_specs
from ...core.version_utils import compare_versions
from ...ui.console import console, progress_status
from ...ui.style import SymbolType


def format_transition(old: Optional[str], new: Optional[str]) -> str:
    """Describe an old -> new version change"""
    if old is None:
        return f"installed [cyan]{new}[/cyan]"
    if new is None:
        return f"[cyan]{old}[/cyan] {SymbolType.ARROW} [yellow]not installed[/yellow]"

    change = compare_versions(old, new)
    if change == 0:
        return f"[cyan]{new}[/cyan] [dim](already latest)[/dim]"
    label = "upgraded" if change > 0 else "downgraded"
    return f"[cyan]{old}[/cyan] {SymbolType.ARROW} [cyan]{new}[/cyan] [dim]({label})[/dim]"


@click.command()
@click.argument("package", callback=validate_package_specs)
@click.pass_context
def update(ctx: click.Context, package: str):
    """Reinstall a package at its newest allowed version

    PACKAGE: A declared package name
    """
    app: AppContext = ctx.obj
    with abort_on_error(ctx, "update package"):
        with progress_status(f"Updating {package}..."):
            result = app.orchestrator.update(package)

    name = result.changed[0]
    console.print()
    console.print(
        f"[bold][green]{SymbolType.SUCCESS}[/green] Updated [cyan]{name}[/cyan][/bold]: "
        + format_transition(result.previous_version, result.current_version)
    )
    console.print()
