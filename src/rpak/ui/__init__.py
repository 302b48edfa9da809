# UI components for rpak
from .console import console, error_console
from .style import StyleType, SymbolType

__all__ = [
    # Console
    "console",
    "error_console",
    # Style
    "StyleType",
    "SymbolType",
]
