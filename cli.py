#!/usr/bin/env python3
"""
CLI for the NameSayer pronunciation tool.

This is the main entry point that assembles all subcommands from
the namesayer/cli/ modules.
"""

import logging
from pathlib import Path

import typer
from rich.box import ROUNDED

from namesayer import __version__
from namesayer.cli.common import Icons, console, ui
from namesayer.cli.names import names_app
from namesayer.cli.user import user_app
from namesayer.config import get_settings, reload_settings
from namesayer.utils.logging import configure_logging
from namesayer.utils.ui import Panel

# Create main app
app = typer.Typer(
    name="namesayer",
    help="🎙️ Practise name pronunciation with database and user recordings",
    rich_markup_mode="rich",
)

# Register sub-apps
app.add_typer(names_app, name="names")
app.add_typer(user_app, name="user")

logger = logging.getLogger(__name__)


@app.callback()
def main(
    config: Path | None = typer.Option(None, "--config", "-c", help="Path to config.yaml"),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging"),
):
    """Load settings and set up logging before any command runs."""
    settings = reload_settings(config)
    level = "debug" if debug or settings.debug else settings.logging.level
    configure_logging(level=level, file_path=settings.logging.file, rich_tracebacks=debug or settings.debug)
    logger.debug(f"Settings loaded from {config or 'config.yaml'}")


@app.command("config")
def config_command():
    """Show the active configuration."""
    settings = get_settings()

    ui.header("NameSayer", subtitle=f"v{__version__}", icon=Icons.MIC)

    paths = {
        "Database": settings.paths.database_dir,
        "User recordings": settings.paths.user_recordings_dir,
        "Trimmed": settings.paths.trimmed_dir,
    }
    path_rows = {f"{label}{'' if path.is_dir() else ' (missing)'}": path for label, path in paths.items()}
    console.print(
        Panel(ui.key_value_table(path_rows), title=f"{Icons.FOLDER} Paths", border_style="cyan", box=ROUNDED)
    )

    tools = {
        "Capture": f"{settings.capture.ffmpeg_binary} -f {settings.capture.input_format} -i {settings.capture.input_device}",
        "Max length": f"{settings.capture.max_recording_secs:g}s",
        "Normalise": settings.normalise.ffmpeg_binary,
        "Silence threshold": f"{settings.normalise.silence_threshold_db:g} dB",
        "Loudness target": f"{settings.normalise.target_loudness_lufs:g} LUFS",
        "Player": settings.playback.player_binary,
        "Flags file": str(settings.paths.flags_file),
        "Log level": settings.logging.level,
    }
    console.print(Panel(ui.key_value_table(tools), title=f"{Icons.GEAR} Tools", border_style="cyan", box=ROUNDED))


if __name__ == "__main__":
    app()
