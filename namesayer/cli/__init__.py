"""
CLI module for NameSayer.

This module contains subcommands organized by domain:
- names: Best-recording playback, flagging, and normalisation
- user: Capture and management of user recordings
"""

from namesayer.cli.common import console, get_catalog, get_toolkit, report_error, resolve_name, ui

__all__ = [
    "console",
    "get_catalog",
    "get_toolkit",
    "report_error",
    "resolve_name",
    "ui",
]
