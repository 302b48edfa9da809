"""Version and help commands"""

import click

from .. import __version__
from ..core.version_checker import check_for_updates
from ..ui.console import console


@click.command()
@click.option(
    "--no-check",
    is_flag=True,
    default=False,
    help="Don't look for a newer release",
)
def version(no_check: bool):
    """Show version number"""
    console.print(f"rpak {__version__}")
    if not no_check:
        check_for_updates(__version__)


@click.command(name="help")
@click.pass_context
def help_command(ctx: click.Context):
    """Show usage"""
    click.echo(ctx.parent.get_help() if ctx.parent else ctx.get_help())
