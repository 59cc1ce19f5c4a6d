"""
Rich-enhanced logging configuration.

Provides centralized logging setup with rich console output and an
optional plain-text log file.

.. warning::
    By default, ``configure_logging()`` installs a **global traceback handler**
    via Rich that affects all uncaught exceptions in the process. This suits
    the CLI; set ``rich_tracebacks=False`` when embedding the package.

Usage:
    from namesayer.utils.logging import configure_logging, get_logger

    configure_logging(level="info", console=True, use_rich=True)

    logger = get_logger("recordings")
    logger.info("[green]✓[/green] Captured kiwi")
"""

import logging
import sys
from pathlib import Path
from typing import Any, Literal

from rich.traceback import install as install_rich_traceback

from .ui import console as rich_console
from .ui import get_rich_handler

# All package loggers live under this name
MODULE_LOGGER_NAME = "namesayer"

LogLevel = Literal["debug", "info", "warning", "error", "critical"]

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_configured = False


def _get_log_level(level: LogLevel | str | int) -> int:
    """Convert level string to logging constant."""
    if isinstance(level, int):
        return level

    level_map = {
        "debug": logging.DEBUG,
        "info": logging.INFO,
        "warning": logging.WARNING,
        "error": logging.ERROR,
        "critical": logging.CRITICAL,
    }
    return level_map.get(level.lower(), logging.INFO)


def configure_logging(
    level: LogLevel | str | int = "info",
    console: bool = True,
    file_path: str | Path | None = None,
    file_log_level: LogLevel | str | int | None = None,
    format_string: str | None = None,
    use_rich: bool = True,
    rich_tracebacks: bool = True,
    show_path: bool = False,
    show_time: bool = True,
    markup: bool = True,
) -> logging.Logger:
    """
    Configure logging for the ``namesayer`` package.

    Args:
        level: Log level for console output
        console: Whether to enable console logging
        file_path: Optional file path for file logging
        file_log_level: Log level for file output (defaults to level)
        format_string: Custom format string for plain/file logging
        use_rich: Use rich handler for console output
        rich_tracebacks: Install rich tracebacks process-wide
        show_path: Show file path in console logs
        show_time: Show timestamp in console logs
        markup: Enable rich markup in log messages

    Returns:
        Configured package logger

    Example:
        logger = configure_logging("debug", file_path="logs/namesayer.log")
        logger.info("[green]✓[/green] Catalog loaded")
    """
    global _configured

    log_level = _get_log_level(level)
    file_level = _get_log_level(file_log_level) if file_log_level else log_level

    if use_rich and rich_tracebacks:
        install_rich_traceback(
            console=rich_console,
            show_locals=False,
            width=rich_console.width,
            extra_lines=3,
            theme="monokai",
            word_wrap=True,
        )

    logger = logging.getLogger(MODULE_LOGGER_NAME)
    logger.setLevel(min(log_level, file_level) if file_path else log_level)

    # Remove existing handlers to avoid duplicates
    for handler in logger.handlers[:]:
        handler.close()
        logger.removeHandler(handler)

    if console:
        console_handler: logging.Handler
        if use_rich:
            console_handler = get_rich_handler(
                level=log_level,
                show_time=show_time,
                show_path=show_path,
                rich_tracebacks=rich_tracebacks,
                markup=markup,
                keywords=["capture", "normalise", "playback", "recording", "ffmpeg"],
            )
        else:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setLevel(log_level)
            console_handler.setFormatter(logging.Formatter(format_string or DEFAULT_FORMAT))

        logger.addHandler(console_handler)

    # File handler - always standard formatting for parseable logs
    if file_path:
        file_path = Path(file_path)
        file_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(file_path, encoding="utf-8")
        file_handler.setLevel(file_level)
        file_handler.setFormatter(logging.Formatter(format_string or DEFAULT_FORMAT))
        logger.addHandler(file_handler)

    _configured = True
    return logger


def get_logger(name: str | None = None) -> logging.Logger:
    """
    Get a package logger.

    Args:
        name: Optional sub-logger name (e.g. "recordings.name")

    Returns:
        Logger instance
    """
    if name:
        return logging.getLogger(f"{MODULE_LOGGER_NAME}.{name}")
    return logging.getLogger(MODULE_LOGGER_NAME)


def set_level(level: LogLevel | str | int) -> None:
    """Change the log level for the package logger and its handlers."""
    log_level = _get_log_level(level)
    logger = logging.getLogger(MODULE_LOGGER_NAME)
    logger.setLevel(log_level)
    for handler in logger.handlers:
        handler.setLevel(log_level)


class LogContext:
    """
    Context manager for temporarily changing log level.

    Example:
        with LogContext("debug"):
            name.record(recording).wait()
    """

    def __init__(self, level: LogLevel | str | int):
        self._target_level = _get_log_level(level)
        self._original_level: int | None = None

    def __enter__(self) -> "LogContext":
        logger = logging.getLogger(MODULE_LOGGER_NAME)
        self._original_level = logger.level
        logger.setLevel(self._target_level)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._original_level is not None:
            logging.getLogger(MODULE_LOGGER_NAME).setLevel(self._original_level)


# =============================================================================
# Markup helpers
# =============================================================================


def _resolve(logger: logging.Logger | None, logger_name: str | None) -> logging.Logger:
    if logger is not None:
        return logger
    return logging.getLogger(logger_name) if logger_name else logging.getLogger(MODULE_LOGGER_NAME)


def log_success(
    message: str,
    *args: Any,
    logger_name: str | None = None,
    logger: logging.Logger | None = None,
    **kwargs: Any,
) -> None:
    """Log a success message with green checkmark."""
    _resolve(logger, logger_name).info("[green]✓[/green] %s", message, *args, **kwargs)


def log_error(
    message: str,
    *args: Any,
    logger_name: str | None = None,
    logger: logging.Logger | None = None,
    **kwargs: Any,
) -> None:
    """Log an error message with red X."""
    _resolve(logger, logger_name).error("[red]✗[/red] %s", message, *args, **kwargs)


def log_warning(
    message: str,
    *args: Any,
    logger_name: str | None = None,
    logger: logging.Logger | None = None,
    **kwargs: Any,
) -> None:
    """Log a warning message with yellow warning sign."""
    _resolve(logger, logger_name).warning("[yellow]⚠[/yellow] %s", message, *args, **kwargs)


def log_info(
    message: str,
    *args: Any,
    logger_name: str | None = None,
    logger: logging.Logger | None = None,
    **kwargs: Any,
) -> None:
    """Log an info message with cyan info icon."""
    _resolve(logger, logger_name).info("[cyan]ℹ[/cyan] %s", message, *args, **kwargs)


def log_debug(
    message: str,
    *args: Any,
    logger_name: str | None = None,
    logger: logging.Logger | None = None,
    **kwargs: Any,
) -> None:
    """Log a debug message with dimmed text."""
    _resolve(logger, logger_name).debug("[dim]%s[/dim]", message, *args, **kwargs)


__all__ = [
    "MODULE_LOGGER_NAME",
    "LogContext",
    "configure_logging",
    "get_logger",
    "set_level",
    "log_debug",
    "log_error",
    "log_info",
    "log_success",
    "log_warning",
]
