"""Argument checks shared by package commands"""

import click

from ..core.exceptions import UsageError
from ..core.version_utils import parse_package_spec


def validate_package_specs(ctx: click.Context, param: click.Parameter, value):
    """Reject malformed name[@version] tokens before the command runs"""
    tokens = value if isinstance(value, tuple) else (value,)
    for token in tokens:
        try:
            parse_package_spec(token)
        except UsageError as e:
            raise click.BadParameter(str(e), ctx=ctx, param=param)
    return value
