"""
Utility modules.
"""

from .logging import LogContext, configure_logging, get_logger, set_level
from .ui import Icons, UIHelper, console, ui

__all__ = [
    "console",
    "ui",
    "Icons",
    "UIHelper",
    # Logging
    "configure_logging",
    "get_logger",
    "set_level",
    "LogContext",
]
