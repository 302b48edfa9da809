"""Command implementations for the rpak CLI"""

from .project_command import init, install
from .package import add, remove, update
from .info_command import version, help_command

__all__ = ["init", "install", "add", "remove", "update", "version", "help_command"]
