"""
External audio tools.

The recordings core only depends on the narrow protocols below; the
ffmpeg/ffplay classes are the production implementations and tests swap
in fakes that write deterministic files.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

import soundfile as sf

from ..errors import RecordingIOError
from .process import ProcessHandle, spawn

if TYPE_CHECKING:
    from ..config import CaptureSettings, NormaliseSettings, PlaybackSettings, Settings

logger = logging.getLogger(__name__)


class CaptureTool(Protocol):
    """Runs a duration-limited capture writing to a path."""

    def start(self, target: Path, max_secs: float) -> ProcessHandle: ...


class NormaliseTool(Protocol):
    """Normalises and trims the audio at source, writing destination."""

    def start(self, source: Path, destination: Path) -> ProcessHandle: ...


class PlaybackTool(Protocol):
    """Plays the audio file at a path."""

    def start(self, path: Path) -> ProcessHandle: ...


class DurationReader(Protocol):
    """Reads the playable duration of an audio file in seconds."""

    def __call__(self, path: Path) -> float: ...


class FFmpegCapture:
    """Microphone capture through ffmpeg."""

    def __init__(
        self,
        ffmpeg_binary: str = "ffmpeg",
        input_format: str = "alsa",
        input_device: str = "default",
        sample_rate: int = 44100,
        channels: int = 1,
    ):
        self.ffmpeg_binary = ffmpeg_binary
        self.input_format = input_format
        self.input_device = input_device
        self.sample_rate = sample_rate
        self.channels = channels

    @classmethod
    def from_config(cls, config: "CaptureSettings") -> "FFmpegCapture":
        return cls(
            ffmpeg_binary=config.ffmpeg_binary,
            input_format=config.input_format,
            input_device=config.input_device,
            sample_rate=config.sample_rate,
            channels=config.channels,
        )

    def build_command(self, target: Path, max_secs: float) -> list[str]:
        return [
            self.ffmpeg_binary,
            "-y",
            "-loglevel",
            "error",
            "-f",
            self.input_format,
            "-i",
            self.input_device,
            "-t",
            f"{max_secs:g}",
            "-ar",
            str(self.sample_rate),
            "-ac",
            str(self.channels),
            str(target),
        ]

    def start(self, target: Path, max_secs: float) -> ProcessHandle:
        target.parent.mkdir(parents=True, exist_ok=True)
        return spawn(self.build_command(target, max_secs), "capture")


class FFmpegNormaliser:
    """
    Silence trim plus loudness normalisation through ffmpeg.

    Leading and trailing silence below ``silence_threshold_db`` is removed,
    then EBU R128 loudnorm brings the clip to ``target_loudness_lufs``.
    """

    def __init__(
        self,
        ffmpeg_binary: str = "ffmpeg",
        silence_threshold_db: float = -50.0,
        target_loudness_lufs: float = -16.0,
    ):
        self.ffmpeg_binary = ffmpeg_binary
        self.silence_threshold_db = silence_threshold_db
        self.target_loudness_lufs = target_loudness_lufs

    @classmethod
    def from_config(cls, config: "NormaliseSettings") -> "FFmpegNormaliser":
        return cls(
            ffmpeg_binary=config.ffmpeg_binary,
            silence_threshold_db=config.silence_threshold_db,
            target_loudness_lufs=config.target_loudness_lufs,
        )

    @property
    def audio_filter(self) -> str:
        threshold = f"{self.silence_threshold_db:g}dB"
        return (
            f"silenceremove=start_periods=1:start_threshold={threshold}"
            f":stop_periods=-1:stop_threshold={threshold},"
            f"loudnorm=I={self.target_loudness_lufs:g}"
        )

    def build_command(self, source: Path, destination: Path) -> list[str]:
        return [
            self.ffmpeg_binary,
            "-y",
            "-loglevel",
            "error",
            "-i",
            str(source),
            "-af",
            self.audio_filter,
            str(destination),
        ]

    def start(self, source: Path, destination: Path) -> ProcessHandle:
        destination.parent.mkdir(parents=True, exist_ok=True)
        return spawn(self.build_command(source, destination), "normalise")


class FFplayPlayer:
    """Headless playback through ffplay."""

    def __init__(self, player_binary: str = "ffplay"):
        self.player_binary = player_binary

    @classmethod
    def from_config(cls, config: "PlaybackSettings") -> "FFplayPlayer":
        return cls(player_binary=config.player_binary)

    def build_command(self, path: Path) -> list[str]:
        return [self.player_binary, "-nodisp", "-autoexit", "-loglevel", "error", str(path)]

    def start(self, path: Path) -> ProcessHandle:
        return spawn(self.build_command(path), "playback")


def read_duration(path: Path) -> float:
    """
    Read the duration of an audio file.

    Raises:
        RecordingIOError: If the file is missing or cannot be decoded
    """
    if not path.is_file():
        raise RecordingIOError(f"Recording file not found: {path}", path=path)
    try:
        return float(sf.info(str(path)).duration)
    except (RuntimeError, OSError) as e:
        # soundfile raises LibsndfileError (a RuntimeError) for undecodable files
        raise RecordingIOError(f"Could not read recording {path}: {e}", path=path) from e


@dataclass
class AudioToolkit:
    """The set of external collaborators a recording talks to."""

    capture: CaptureTool = field(default_factory=FFmpegCapture)
    normaliser: NormaliseTool = field(default_factory=FFmpegNormaliser)
    player: PlaybackTool = field(default_factory=FFplayPlayer)
    duration: DurationReader = read_duration

    @classmethod
    def from_settings(cls, settings: "Settings") -> "AudioToolkit":
        return cls(
            capture=FFmpegCapture.from_config(settings.capture),
            normaliser=FFmpegNormaliser.from_config(settings.normalise),
            player=FFplayPlayer.from_config(settings.playback),
        )
