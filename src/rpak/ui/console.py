"""Console output handling with consistent styling"""

from contextlib import contextmanager
from typing import List, Optional

from rich.console import Console
from rich.text import Text

from .style import StyleType, SymbolType

console = Console(force_terminal=True, color_system="auto")

# Usage text must stay plain on stderr
error_console = Console(stderr=True, no_color=True, highlight=False)


def print_error(message: str):
    """Display error message"""
    console.print(f"{SymbolType.ERROR} {message}", style=StyleType.ERROR())


def print_warning(message: str):
    """Display warning message"""
    console.print(f"{SymbolType.WARNING} {message}", style=StyleType.WARNING())


def print_success(message: str):
    """Display success message"""
    console.print(f"{SymbolType.SUCCESS} {message}", style=StyleType.SUCCESS())


def print_info(message: str):
    """Display info message"""
    console.print(f"{SymbolType.INFO} {message}", style=StyleType.INFO())


def print_usage_error(usage: str, message: Optional[str] = None):
    """Display usage text on stderr, without color"""
    error_console.print(usage, markup=False)
    if message:
        error_console.print(f"\nError: {message}", markup=False)


def print_tips(tips: List[str]):
    """Display a list of hints"""
    for tip in tips:
        text = Text(style=StyleType.DIM())
        text.append("Tip: ")
        text.append_text(Text.from_markup(tip))
        console.print(text)


def print_package_versions(packages: dict):
    """Display 'using <name> version <version>' for each package"""
    for name, version in packages.items():
        if version:
            console.print(
                f"[dim]Using[/dim] [cyan]{name}[/cyan] [dim]version[/dim] [cyan]{version}[/cyan]"
            )
        else:
            print_warning(f"[cyan]{name}[/cyan] is not installed")


@contextmanager
def progress_status(message: str):
    """Show a spinner while a long operation runs"""
    with console.status(f"[bold blue]{message}[/bold blue]") as status:
        yield status
