"""
Console output for the NameSayer CLI.

One themed rich console is shared by command output and log records, so
spinners and log lines never fight over the terminal.

Usage:
    from namesayer.utils.ui import Icons, console, ui

    ui.success("Captured [bold]kiwi[/bold]", details=str(path))
    with ui.spinner(f"{Icons.MIC} Recording kiwi..."):
        job.wait()
"""

from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

from rich.box import DOUBLE, ROUNDED, SIMPLE
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.status import Status
from rich.table import Table
from rich.text import Text
from rich.theme import Theme

NAMESAYER_THEME = Theme(
    {
        "success": "bold green",
        "error": "bold red",
        "warning": "bold yellow",
        "muted": "dim white",
        "header": "bold magenta",
        "name": "bold white",
        "path": "blue",
        # One style per RecordingState value
        "state.descriptor_created": "dim",
        "state.capturing": "yellow",
        "state.captured": "green",
        "state.normalised": "bold green",
        "state.deleted": "red",
    }
)

console = Console(theme=NAMESAYER_THEME, highlight=True, emoji=True)


class Icons:
    """Symbols used in command output."""

    SUCCESS = "✓"
    ERROR = "✗"
    WARNING = "⚠"
    STAR = "★"

    MIC = "🎙️"
    SPEAKER = "🔊"
    FLAG = "🚩"
    USER = "👤"
    SPARKLE = "✨"
    TRASH = "🗑️"

    FOLDER = "📁"
    GEAR = "⚙️"


class UIHelper:
    """Status lines, tables and prompts for the CLI commands."""

    def __init__(self, console: Console):
        self.console = console

    def _status(self, style: str, prefix: str, message: str, details: str | None) -> None:
        line = Text(f"{prefix} ", style=style)
        line.append_text(Text.from_markup(message))
        if details:
            # Tool stderr can contain square brackets, so it is never parsed as markup
            line.append(f"\n   {details}", style="muted")
        self.console.print(line)

    def success(self, message: str, details: str | None = None, prefix: str = Icons.SUCCESS) -> None:
        self._status("success", prefix, message, details)

    def error(self, message: str, details: str | None = None, prefix: str = Icons.ERROR) -> None:
        self._status("error", prefix, f"[error]{message}[/error]", details)

    def warning(self, message: str, details: str | None = None, prefix: str = Icons.WARNING) -> None:
        self._status("warning", prefix, message, details)

    def muted(self, message: str) -> None:
        self.console.print(f"[muted]{message}[/muted]")

    def header(self, title: str, subtitle: str | None = None, icon: str | None = None) -> None:
        """Banner shown at the top of the config command."""
        content = Text(f"{icon} {title}" if icon else title, style="header")
        if subtitle:
            content.append(f"\n{subtitle}", style="muted")
        self.console.print(Panel(content, box=DOUBLE, border_style="header", padding=(1, 2)))

    @contextmanager
    def spinner(self, message: str) -> Generator[Status]:
        """Spinner shown while a capture, normalise or playback process runs."""
        with self.console.status(f"[bold cyan]{message}[/bold cyan]", spinner="dots") as status:
            yield status

    def create_table(
        self, title: str | None = None, columns: list[str] | None = None, box_style: Any = ROUNDED
    ) -> Table:
        table = Table(
            title=title, box=box_style, header_style="bold cyan", border_style="dim", row_styles=["", "dim"]
        )
        for column in columns or []:
            table.add_column(column)
        return table

    def key_value_table(self, data: dict[str, Any]) -> Table:
        table = Table(show_header=False, box=SIMPLE, padding=(0, 1))
        table.add_column("Key", style="bold cyan", no_wrap=True)
        table.add_column("Value", style="white")
        for key, value in data.items():
            table.add_row(key, "[dim]N/A[/dim]" if value is None else str(value))
        return table

    def state_badge(self, state: str) -> Text:
        """Badge for a RecordingState value, e.g. "descriptor_created" -> DESCRIPTOR CREATED."""
        return Text(state.replace("_", " ").upper(), style=f"state.{state}")

    def confirm(self, message: str, default: bool = False) -> bool:
        hint = escape("[Y/n]" if default else "[y/N]")
        answer = self.console.input(f"[bold]{message}[/bold] {hint} ").strip().lower()
        if not answer:
            return default
        return answer in ("y", "yes")


def get_rich_handler(
    level: int = 20,
    show_time: bool = True,
    show_path: bool = False,
    rich_tracebacks: bool = True,
    markup: bool = True,
    keywords: list[str] | None = None,
) -> RichHandler:
    """RichHandler bound to the shared console."""
    return RichHandler(
        level=level,
        console=console,
        show_time=show_time,
        show_path=show_path,
        rich_tracebacks=rich_tracebacks,
        markup=markup,
        log_time_format="[%X]",
        keywords=keywords,
    )


ui = UIHelper(console)

__all__ = ["console", "ui", "Icons", "UIHelper", "NAMESAYER_THEME", "get_rich_handler"]
