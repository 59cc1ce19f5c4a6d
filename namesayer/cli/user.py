"""
User recording CLI commands.

Commands for capturing and managing a name's own recordings:
- record: Capture a new recording from the microphone
- list: List user recordings, newest first
- play: Play a user recording
- remove: Delete a user recording
"""

import logging

import typer
from rich.box import ROUNDED

from namesayer.cli.common import (
    Icons,
    console,
    format_duration,
    get_catalog,
    report_error,
    resolve_name,
    resolve_user_recording,
    ui,
)
from namesayer.config import get_settings
from namesayer.errors import NameSayerError, RecordingIOError

logger = logging.getLogger(__name__)

# Create User sub-app
user_app = typer.Typer(help="🎙️ User recordings: capture, list, play, remove")


@user_app.command("record")
def user_record(
    text: str = typer.Argument(..., metavar="NAME", help="Name to record"),
    normalise: bool = typer.Option(True, "--normalise/--no-normalise", help="Normalise and trim after capture"),
):
    """
    Record yourself saying a name.

    Capture stops at the configured time limit. Press Ctrl+C to cancel;
    a cancelled capture is discarded.
    """
    settings = get_settings()
    catalog = get_catalog()
    max_secs = settings.capture.max_recording_secs

    try:
        name = catalog.get_or_create(text)
        recording = name.create_recording_object()
        with ui.spinner(f"{Icons.MIC} Recording {name.name} (max {max_secs:g}s)..."):
            job = name.record(recording)
            try:
                job.wait()
            except KeyboardInterrupt:
                job.cancel()
                ui.warning("Recording cancelled")
                raise typer.Exit(1) from None
        name.add_user_recording(recording)
        ui.success(f"Captured [bold]{name.name}[/bold]", details=str(recording.raw_path))

        if normalise:
            with ui.spinner(f"Normalising {recording.file_name}..."):
                recording.normalise_and_trim_audio_file().wait()
            ui.success("Normalised and trimmed", details=str(recording.trimmed_path), prefix=Icons.SPARKLE)
    except NameSayerError as e:
        report_error(e)
        raise typer.Exit(1) from e


@user_app.command("list")
def user_list(text: str = typer.Argument(..., metavar="NAME", help="Name to list")):
    """List user recordings for a name, newest first."""
    catalog = get_catalog()
    name = resolve_name(catalog, text)

    if not name.user_recordings:
        ui.warning(f"No user recordings for [bold]{name.name}[/bold]")
        return

    table = ui.create_table(title=f"{Icons.USER} {name.name}", box_style=ROUNDED)
    table.add_column("#", justify="right", no_wrap=True)
    table.add_column("Date", no_wrap=True)
    table.add_column("Time", no_wrap=True)
    table.add_column("State", no_wrap=True)
    table.add_column("Length", justify="right", no_wrap=True)
    table.add_column("Path", style="path", overflow="fold")

    for index, recording in enumerate(name.user_recordings, start=1):
        try:
            length = format_duration(recording.get_recording_length())
        except RecordingIOError as e:
            logger.debug(f"No length for {recording.file_name}: {e}")
            length = "N/A"
        table.add_row(
            str(index),
            recording.date,
            recording.time,
            ui.state_badge(recording.state.value),
            length,
            str(recording.path),
        )

    console.print(table)


@user_app.command("play")
def user_play(
    text: str = typer.Argument(..., metavar="NAME", help="Name"),
    index: int = typer.Argument(1, help="Recording number from 'user list' (1 = newest)"),
):
    """Play one of your recordings."""
    catalog = get_catalog()
    name = resolve_name(catalog, text)
    recording = resolve_user_recording(name, index)

    try:
        with ui.spinner(f"Playing {recording.file_name}..."):
            handle = recording.play_recording()
            handle.wait()
        handle.check()
    except NameSayerError as e:
        report_error(e)
        raise typer.Exit(1) from e

    ui.success(f"Played {recording.file_name}")


@user_app.command("remove")
def user_remove(
    text: str = typer.Argument(..., metavar="NAME", help="Name"),
    index: int = typer.Argument(..., help="Recording number from 'user list' (1 = newest)"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
):
    """Delete one of your recordings."""
    catalog = get_catalog()
    name = resolve_name(catalog, text)
    recording = resolve_user_recording(name, index)

    if not yes and not ui.confirm(f"Delete {recording.file_name}?"):
        ui.muted("Nothing deleted")
        raise typer.Exit(0)

    try:
        name.remove_user_recording(recording)
    except NameSayerError as e:
        report_error(e)
        raise typer.Exit(1) from e

    ui.success(f"Removed {recording.file_name}", prefix=Icons.TRASH)
