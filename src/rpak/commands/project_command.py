"""Project setup and synchronization commands"""

import click

from ._context import AppContext
from ._errors import abort_on_error
from ..ui.console import (
    console,
    print_info,
    print_package_versions,
    print_success,
    progress_status,
)


@click.command()
@click.pass_context
def install(ctx: click.Context):
    """Install declared packages and sync the project library"""
    app: AppContext = ctx.obj
    with abort_on_error(ctx, "install packages"):
        with progress_status("Synchronizing project library..."):
            result = app.orchestrator.install()

    print_package_versions(result.packages)
    console.print()
    print_success("Project library is up to date")


@click.command()
@click.pass_context
def init(ctx: click.Context):
    """Set up a new project in the current directory"""
    app: AppContext = ctx.obj
    with abort_on_error(ctx, "initialize project"):
        with progress_status("Initializing project..."):
            result = app.orchestrator.init()

    if result.created_manifest:
        print_info("Created DESCRIPTION")
    if result.created_lock:
        print_info(
            f"Created project library using [cyan]{app.settings.repos}[/cyan]"
        )
    print_package_versions(result.packages)
    console.print()
    print_success("Project initialized")
