"""
External audio collaborators: capture, normalise/trim, playback, duration.
"""

from .process import ProcessHandle, spawn
from .tools import (
    AudioToolkit,
    CaptureTool,
    DurationReader,
    FFmpegCapture,
    FFmpegNormaliser,
    FFplayPlayer,
    NormaliseTool,
    PlaybackTool,
    read_duration,
)

__all__ = [
    "ProcessHandle",
    "spawn",
    # Protocols
    "CaptureTool",
    "NormaliseTool",
    "PlaybackTool",
    "DurationReader",
    # Implementations
    "FFmpegCapture",
    "FFmpegNormaliser",
    "FFplayPlayer",
    "read_duration",
    "AudioToolkit",
]
