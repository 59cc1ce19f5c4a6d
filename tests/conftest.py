"""Pytest configuration and shared fixtures."""

import subprocess
from collections.abc import Callable
from pathlib import Path

import numpy as np
import pytest
import soundfile as sf

from namesayer.audio import AudioToolkit
from namesayer.config import PathSettings, Settings
from namesayer.errors import ProcessFailureError
from namesayer.recordings import Recording, RecordingSource, RecordingState


def write_wav(path: Path, seconds: float = 0.5, sample_rate: int = 8000) -> Path:
    """Write a short sine tone to path."""
    path.parent.mkdir(parents=True, exist_ok=True)
    t = np.linspace(0, seconds, int(seconds * sample_rate), endpoint=False)
    sf.write(str(path), 0.2 * np.sin(2 * np.pi * 440 * t), sample_rate)
    return path


# ============================================================================
# Fake external processes
# ============================================================================


class FakeHandle:
    """
    Stand-in for ProcessHandle.

    ``on_finish`` runs once when the "process" exits, normally or through
    terminate(). A hanging handle never exits on its own, so wait() with a
    timeout raises TimeoutExpired like the real thing.
    """

    def __init__(
        self,
        command: list[str],
        returncode: int = 0,
        on_finish: Callable[[], None] | None = None,
        hang: bool = False,
        stderr: str = "",
    ):
        self.command = command
        self.description = command[0]
        self.stderr = stderr
        self.hang = hang
        self.terminated = False
        self._final = returncode
        self._on_finish = on_finish
        self._returncode: int | None = None

    @property
    def pid(self) -> int:
        return 4242

    @property
    def running(self) -> bool:
        return self._returncode is None

    @property
    def returncode(self) -> int | None:
        return self._returncode

    def _finish(self, code: int) -> None:
        if self._on_finish is not None:
            self._on_finish()
            self._on_finish = None
        self._returncode = code

    def wait(self, timeout: float | None = None) -> int:
        if self._returncode is None:
            if self.hang:
                raise subprocess.TimeoutExpired(self.command, timeout or 0)
            self._finish(self._final)
        return self._returncode  # type: ignore[return-value]

    def terminate(self, grace: float = 0.0) -> int:
        self.terminated = True
        if self._returncode is None:
            self._finish(-15)
        return self._returncode  # type: ignore[return-value]

    def check(self) -> None:
        if self._returncode:
            raise ProcessFailureError(
                f"{self.description} failed with exit code {self._returncode}",
                command=self.command,
                returncode=self._returncode,
                stderr=self.stderr or None,
            )


class FakeCapture:
    """Capture tool that writes a tone instead of listening to a microphone."""

    def __init__(self, returncode: int = 0, write: bool = True, hang: bool = False, seconds: float = 0.5):
        self.returncode = returncode
        self.write = write
        self.hang = hang
        self.seconds = seconds
        self.calls: list[tuple[Path, float]] = []
        self.handles: list[FakeHandle] = []

    def start(self, target: Path, max_secs: float) -> FakeHandle:
        self.calls.append((target, max_secs))

        def finish() -> None:
            if self.write:
                write_wav(target, seconds=min(self.seconds, max_secs))

        handle = FakeHandle(["fake-capture", str(target)], self.returncode, finish, hang=self.hang)
        self.handles.append(handle)
        return handle


class FakeNormaliser:
    """Normaliser that copies the source audio to the destination."""

    def __init__(self, returncode: int = 0, write: bool = True, hang: bool = False):
        self.returncode = returncode
        self.write = write
        self.hang = hang
        self.calls: list[tuple[Path, Path]] = []
        self.handles: list[FakeHandle] = []

    def start(self, source: Path, destination: Path) -> FakeHandle:
        self.calls.append((source, destination))

        def finish() -> None:
            if self.write:
                destination.parent.mkdir(parents=True, exist_ok=True)
                destination.write_bytes(source.read_bytes())

        handle = FakeHandle(
            ["fake-normalise", str(source), str(destination)],
            self.returncode,
            finish,
            hang=self.hang,
            stderr="" if self.returncode == 0 else "Invalid data found when processing input",
        )
        self.handles.append(handle)
        return handle


class FakePlayer:
    """Player that remembers what it was asked to play."""

    def __init__(self, returncode: int = 0):
        self.returncode = returncode
        self.played: list[Path] = []

    def start(self, path: Path) -> FakeHandle:
        self.played.append(path)
        return FakeHandle(["fake-play", str(path)], self.returncode)


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings with every recording directory under tmp_path."""
    return Settings(
        paths=PathSettings(
            database_dir=tmp_path / "database",
            user_recordings_dir=tmp_path / "user",
            trimmed_dir=tmp_path / "trimmed",
            flags_file=tmp_path / "flags.json",
        )
    )


@pytest.fixture
def capture() -> FakeCapture:
    return FakeCapture()


@pytest.fixture
def normaliser() -> FakeNormaliser:
    return FakeNormaliser()


@pytest.fixture
def player() -> FakePlayer:
    return FakePlayer()


@pytest.fixture
def toolkit(capture: FakeCapture, normaliser: FakeNormaliser, player: FakePlayer) -> AudioToolkit:
    return AudioToolkit(capture=capture, normaliser=normaliser, player=player)


@pytest.fixture
def make_db_recording(settings: Settings, toolkit: AudioToolkit) -> Callable[..., Recording]:
    """Factory for database recordings, optionally backed by a real wav file."""

    def make(name: str = "kiwi", time: str = "10-00-00", bad: int = 0, with_file: bool = False) -> Recording:
        filename = f"se206_01-01-2020_{time}_{name}.wav"
        recording = Recording(
            name=name,
            date="01-01-2020",
            time=time,
            raw_path=settings.paths.database_dir / filename,
            trimmed_path=settings.paths.trimmed_dir / filename,
            source=RecordingSource.DATABASE,
            toolkit=toolkit,
        )
        for _ in range(bad):
            recording.flag_as_bad()
        if with_file:
            write_wav(recording.raw_path)
        assert recording.state is RecordingState.CAPTURED
        return recording

    return make
