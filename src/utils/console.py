"""
Frontline Console Manager

Provides a singleton Rich Console with the diagnostics theme so every
command renders verdict colors the same way.

Usage:
    from utils.console import get_console
    console = get_console()
    console.print("[success]Connected[/success]")
"""

from rich.console import Console
from rich.theme import Theme
from typing import Optional
import threading

_console: Optional[Console] = None
_lock = threading.Lock()

# Style names double as DiagnosticStatus values
FRONTLINE_THEME = Theme({
    "info": "cyan",
    "success": "green",
    "warning": "yellow",
    "error": "red bold",
    "heading": "bold magenta",
    "highlight": "bold cyan",
    "dim": "dim white",
})

STATUS_ICONS = {
    "success": "✓",   # check mark
    "warning": "!",
    "error": "✗",     # ballot x
}


def get_console(force_terminal: bool = None,
                no_color: bool = None,
                width: int = None) -> Console:
    """
    Get the singleton Console instance.

    Args:
        force_terminal: Force terminal mode (for testing)
        no_color: Disable color output
        width: Override console width
    """
    global _console

    if _console is None:
        with _lock:
            if _console is None:
                _console = Console(
                    theme=FRONTLINE_THEME,
                    force_terminal=force_terminal,
                    no_color=no_color,
                    width=width,
                    highlight=False,
                    markup=True,
                )

    return _console


def reset_console():
    """Reset the console singleton (useful for testing)."""
    global _console
    with _lock:
        _console = None
