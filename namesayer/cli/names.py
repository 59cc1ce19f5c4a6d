"""
Name CLI commands.

Commands that work on a name's best database recording:
- list: List names in display order
- show: Show a name and its best recording
- play: Play the best recording
- flag: Flag the best recording as poor quality
- normalise: Normalise and trim the best recording
"""

import json

import typer
from rich.box import ROUNDED

from namesayer.cli.common import Icons, console, format_duration, get_catalog, report_error, resolve_name, ui
from namesayer.errors import NameSayerError, RecordingIOError, RecordingNotFoundError
from namesayer.utils.ui import Panel

# Create Names sub-app
names_app = typer.Typer(help="🔊 Names and their best database recordings")


@names_app.command("list")
def names_list(
    user_only: bool = typer.Option(False, "--user-only", help="Only names with user recordings"),
):
    """List names in sorted order."""
    catalog = get_catalog()
    names = [name for name in catalog if name.user_recordings or not user_only]

    if not names:
        ui.warning("No names found", details=str(catalog.settings.paths.database_dir))
        return

    table = ui.create_table(title=f"{Icons.SPEAKER} Names ({len(names)})", box_style=ROUNDED)
    table.add_column("Name", style="name")
    table.add_column("Database", justify="right")
    table.add_column("User", justify="right")

    for name in names:
        table.add_row(str(name), str(len(name.database_recordings)), str(len(name.user_recordings)))

    console.print(table)


@names_app.command("show")
def names_show(
    text: str = typer.Argument(..., metavar="NAME", help="Name to show"),
    as_json: bool = typer.Option(False, "--json", help="Print as JSON"),
):
    """Show a name and its best recording."""
    catalog = get_catalog()
    name = resolve_name(catalog, text)

    try:
        best = name.get_best_recording()
    except RecordingNotFoundError:
        best = None

    length: float | None = None
    if best is not None:
        try:
            length = best.get_recording_length()
        except RecordingIOError as e:
            ui.warning("Could not read best recording", details=str(e))

    if as_json:
        data = {
            "name": name.name,
            "label": name.display_label,
            "database_recordings": [r.to_info().model_dump(mode="json") for r in name.database_recordings],
            "user_recordings": [r.to_info().model_dump(mode="json") for r in name.user_recordings],
            "best": best.to_info().model_dump(mode="json") if best else None,
            "best_length": length,
        }
        console.print_json(json.dumps(data))
        return

    details = {
        "Label": name.display_label,
        "Database recordings": len(name.database_recordings),
        "User recordings": len(name.user_recordings),
        "Best recording": best.file_name if best else None,
        "Flags": best.bad_recordings if best else None,
        "Length": format_duration(length) if best else None,
    }
    console.print(
        Panel(
            ui.key_value_table(details),
            title=f"{Icons.SPEAKER} {name.name}",
            border_style="cyan",
            box=ROUNDED,
        )
    )

    if len(name.database_recordings) > 1:
        table = ui.create_table(title="Database recordings", columns=["#", "File", "Flags"])
        for index, recording in enumerate(name.database_recordings, start=1):
            marker = f" {Icons.STAR}" if recording is best else ""
            table.add_row(str(index), f"{recording.file_name}{marker}", str(recording.bad_recordings))
        console.print(table)


@names_app.command("play")
def names_play(text: str = typer.Argument(..., metavar="NAME", help="Name to play")):
    """Play the best recording for a name."""
    catalog = get_catalog()
    name = resolve_name(catalog, text)

    try:
        with ui.spinner(f"Playing {name.name}..."):
            handle = name.play_recording()
            handle.wait()
        handle.check()
    except NameSayerError as e:
        report_error(e)
        raise typer.Exit(1) from e

    ui.success(f"Played [bold]{name.name}[/bold]")


@names_app.command("flag")
def names_flag(text: str = typer.Argument(..., metavar="NAME", help="Name whose best recording is poor")):
    """
    Flag the best recording as poor quality.

    The next best recording is used from then on. Flags are saved to the
    configured flags file and apply to later runs too.
    """
    catalog = get_catalog()
    name = resolve_name(catalog, text)

    try:
        flagged = catalog.flag_best_recording(name.name)
    except NameSayerError as e:
        report_error(e)
        raise typer.Exit(1) from e

    ui.success(
        f"Flagged {flagged.file_name}",
        details=f"{flagged.bad_recordings} flags; best is now {name.get_best_recording().file_name}",
        prefix=Icons.FLAG,
    )


@names_app.command("normalise")
def names_normalise(text: str = typer.Argument(..., metavar="NAME", help="Name to normalise")):
    """Normalise and trim the best recording."""
    catalog = get_catalog()
    name = resolve_name(catalog, text)

    try:
        with ui.spinner(f"Normalising {name.name}..."):
            recording = name.normalise_best_recording().wait()
    except NameSayerError as e:
        report_error(e)
        raise typer.Exit(1) from e

    ui.success(f"Normalised [bold]{name.name}[/bold]", details=str(recording.path), prefix=Icons.SPARKLE)
