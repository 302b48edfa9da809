"""Command-line interface for R project dependency management"""

import sys
from pathlib import Path

import click
from rich.markup import escape
from rich.panel import Panel

from . import __version__
from .commands import add, help_command, init, install, remove, update, version
from .commands._context import AppContext
from .commands._errors import EXIT_FAILURE
from .core.exceptions import RpakError
from .core.logging import configure_logging
from .ui.console import console, print_error, print_usage_error
from .ui.style import DEFAULT_PANEL


class CliGroup(click.Group):
    """Command group with custom help formatting and exit codes"""

    def format_help(self, ctx, formatter):
        """Format help message with styling"""
        console.print(
            Panel.fit(
                "\n".join(
                    [
                        "[bold blue]Project:[/bold blue]",
                        f"  [cyan]init[/cyan]        [dim]Set up a new project (DESCRIPTION and project library)[/dim]",
                        f"  [cyan]install[/cyan]     [dim]Install declared packages and sync the library[/dim] (default command)",
                        "",
                        "[bold blue]Package Management:[/bold blue]",
                        f"  [cyan]add[/cyan]         [dim]Add packages, pin with[/dim] [cyan]name@version[/cyan] ([cyan]--remote[/cyan]: owner/repo)",
                        f"  [cyan]remove[/cyan]      [dim]Remove packages and prune the library[/dim] ([cyan]--remote[/cyan]: owner/repo) (alias: [cyan]rm[/cyan])",
                        f"  [cyan]update[/cyan]      [dim]Reinstall a package at its newest allowed version[/dim] (alias: [cyan]up[/cyan])",
                        "",
                        "[bold blue]Other:[/bold blue]",
                        f"  [cyan]version[/cyan]     [dim]Show version number[/dim]",
                        f"  [cyan]help[/cyan]        [dim]Show this message[/dim]",
                        "",
                        "[bold blue]Global Options:[/bold blue]",
                        f"  [cyan]-C, --project[/cyan]  [dim]Project directory (default: current directory)[/dim]",
                        f"  [cyan]-v, --verbose[/cyan]  [dim]Show debug logs on stderr[/dim] ([cyan]--log-json[/cyan]: as JSON)",
                        f"  [cyan]--version[/cyan]      [dim]Show version number[/dim] ([cyan]alias: -V[/cyan])",
                    ]
                ),
                title="rpak - dependency manager for R projects",
                title_align=DEFAULT_PANEL.title_align,
                border_style=DEFAULT_PANEL.border_style,
                padding=DEFAULT_PANEL.padding,
            )
        )

    def main(self, args=None, prog_name=None, standalone_mode=True, **extra):
        """Run the CLI; usage errors and failures exit with status 1"""
        try:
            rv = super().main(
                args=args, prog_name=prog_name, standalone_mode=False, **extra
            )
        except click.UsageError as e:
            if not standalone_mode:
                raise
            usage = e.ctx.get_usage() if e.ctx else f"Usage: {prog_name or 'rpak'}"
            print_usage_error(
                f"{usage}\nTry 'rpak help' for help.", e.format_message()
            )
            sys.exit(EXIT_FAILURE)
        except click.ClickException as e:
            if not standalone_mode:
                raise
            e.show()
            sys.exit(EXIT_FAILURE)
        except RpakError as e:
            if not standalone_mode:
                raise
            print_error(escape(str(e)))
            sys.exit(EXIT_FAILURE)
        except click.Abort:
            if not standalone_mode:
                raise
            print_error("Aborted!")
            sys.exit(EXIT_FAILURE)

        if not standalone_mode:
            return rv
        sys.exit(rv if isinstance(rv, int) else 0)


@click.group(cls=CliGroup, invoke_without_command=True)
@click.option(
    "--version",
    "-V",
    is_flag=True,
    help="Show version number",
    is_eager=True,
    expose_value=False,
    callback=lambda ctx, param, value: value
    and (console.print(f"rpak {__version__}") or ctx.exit()),
)
@click.option(
    "-C",
    "--project",
    "project",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Project directory",
)
@click.option("-v", "--verbose", is_flag=True, help="Show debug logs")
@click.option("--log-json", is_flag=True, help="Debug logs as JSON lines")
@click.pass_context
def cli(ctx: click.Context, project: Path, verbose: bool, log_json: bool):
    """rpak - R project dependency manager"""
    configure_logging(verbose=verbose, log_json=log_json)
    if ctx.obj is None:
        ctx.obj = AppContext(project or Path.cwd())

    if ctx.invoked_subcommand is None:
        ctx.invoke(install)


# Register project commands
cli.add_command(init)
cli.add_command(install)

# Register package management commands
cli.add_command(add)
cli.add_command(remove)
cli.add_command(update)

# Register other commands
cli.add_command(version)
cli.add_command(help_command)

# Register command aliases
cli.add_command(remove, name="rm")
cli.add_command(update, name="up")


if __name__ == "__main__":
    cli()
