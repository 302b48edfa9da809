"""Style definitions for consistent UI appearance"""

from rich.style import Style
from enum import Enum
from dataclasses import dataclass


@dataclass
class PanelConfig:
    """Standard panel configuration"""

    title_align: str = "left"
    border_style: str = "blue"
    padding: tuple = (2, 2)


class StyleType(Enum):
    """Style definitions that can be used directly without .value"""

    # Status styles
    SUCCESS = Style(color="green", bold=True)
    ERROR = Style(color="red", bold=True)
    WARNING = Style(color="yellow")
    INFO = Style(color="blue")

    # Other styles
    DIM = Style(dim=True)

    def __call__(self):
        return self.value


class SymbolType(str, Enum):
    SUCCESS = "✓"
    ERROR = "✗"
    WARNING = "⚠"
    INFO = "ℹ"
    ARROW = "→"

    def __format__(self, format_spec):
        return str(self.value)


# Default configurations
DEFAULT_PANEL = PanelConfig()
