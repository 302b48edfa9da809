"""Package management commands"""

from .add_command import add
from .remove_command import remove
from .update_command import update

__all__ = ["add", "remove", "update"]
