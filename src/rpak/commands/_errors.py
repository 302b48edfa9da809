"""Error reporting shared by commands"""

from contextlib import contextmanager

import click
import structlog
from rich.markup import escape

from ..core.exceptions import NotInitializedError, RpakError, UsageError
from ..ui.console import print_error, print_tips

logger = structlog.get_logger(__name__)

EXIT_FAILURE = 1


@contextmanager
def abort_on_error(ctx: click.Context, action: str):
    """
    Report rpak errors and exit with status 1.

    Usage errors are handed to click so they are shown with the usage text.
    """
    try:
        yield
    except UsageError as e:
        raise click.UsageError(str(e), ctx=ctx)
    except NotInitializedError as e:
        print_error(escape(str(e)))
        print_tips(["Run [cyan]rpak init[/cyan] to set up this project"])
        ctx.exit(EXIT_FAILURE)
    except RpakError as e:
        logger.debug("command_failed", action=action, error=str(e))
        print_error(f"Failed to {action}: {escape(str(e))}")
        ctx.exit(EXIT_FAILURE)
