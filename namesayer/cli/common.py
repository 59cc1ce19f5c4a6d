"""
Common utilities shared across CLI commands.

This module provides:
- Factory functions for the audio toolkit and name catalog
- Name resolution with friendly errors
- Error reporting for the recordings error hierarchy
- Shared console and UI instances
"""

import logging

import typer

from namesayer.audio import AudioToolkit
from namesayer.catalog import NameCatalog
from namesayer.config import get_settings
from namesayer.errors import (
    InvalidNameError,
    NameSayerError,
    ProcessFailureError,
    RecordingBusyError,
    RecordingIOError,
    RecordingNotFoundError,
)
from namesayer.recordings import Name, Recording
from namesayer.utils.ui import Icons, console, ui

__all__ = [
    "console",
    "format_duration",
    "get_catalog",
    "get_toolkit",
    "Icons",
    "logger",
    "report_error",
    "resolve_name",
    "resolve_user_recording",
    "ui",
]

logger = logging.getLogger(__name__)


def get_toolkit() -> AudioToolkit:
    """Get the audio collaborators configured in settings."""
    return AudioToolkit.from_settings(get_settings())


def get_catalog() -> NameCatalog:
    """Get a catalog loaded from the configured recording directories."""
    return NameCatalog(get_settings(), toolkit=get_toolkit()).load()


def resolve_name(catalog: NameCatalog, text: str) -> Name:
    """Look up a name, exiting with a friendly message if it is unknown.

    Raises:
        typer.Exit: If the name is not in the catalog
    """
    try:
        return catalog.get(text)
    except RecordingNotFoundError as e:
        ui.error(f"Unknown name: [bold]{text}[/bold]")
        console.print("[dim]Hint: run 'namesayer names list' to see available names[/dim]")
        raise typer.Exit(1) from e


def resolve_user_recording(name: Name, index: int) -> Recording:
    """Pick a user recording by its 1-based position (newest first).

    Raises:
        typer.Exit: If the index is out of range
    """
    recordings = name.user_recordings
    if not 1 <= index <= len(recordings):
        ui.error(
            f"No user recording #{index} for [bold]{name.name}[/bold]",
            details=f"{len(recordings)} user recordings available",
        )
        raise typer.Exit(1)
    return recordings[index - 1]


def report_error(error: NameSayerError) -> None:
    """Print a recordings error in a form the user can act on."""
    if isinstance(error, RecordingNotFoundError):
        ui.warning("No recordings yet", details=str(error))
    elif isinstance(error, ProcessFailureError):
        details = error.stderr or str(error)
        ui.error(str(error) if error.stderr else "External tool failed", details=details)
        logger.debug(f"Command: {' '.join(error.command)}")
    elif isinstance(error, InvalidNameError):
        ui.error("Invalid name", details=str(error))
    elif isinstance(error, RecordingBusyError):
        ui.warning("Recording busy", details=str(error))
    elif isinstance(error, RecordingIOError):
        ui.error("Recording file problem", details=str(error))
    else:
        ui.error("Error", details=str(error))


def format_duration(seconds: float | None) -> str:
    """Format a clip length like "2.35s", or "N/A"."""
    if seconds is None:
        return "N/A"
    return f"{seconds:.2f}s"
