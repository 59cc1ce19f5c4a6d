"""Tests for external process handles and the ffmpeg/ffplay collaborators."""

import logging
import subprocess
import sys
from pathlib import Path
from unittest.mock import patch

import pytest
from conftest import write_wav

from namesayer.audio import AudioToolkit, FFmpegCapture, FFmpegNormaliser, FFplayPlayer, read_duration, spawn
from namesayer.config import CaptureSettings, NormaliseSettings, PlaybackSettings, Settings
from namesayer.errors import ProcessFailureError, RecordingIOError


def python_command(code: str) -> list[str]:
    return [sys.executable, "-c", code]


class TestProcessHandle:
    """Test spawn() and ProcessHandle against real child processes."""

    def test_successful_process(self):
        handle = spawn(python_command("pass"), "noop")

        assert handle.wait(timeout=30) == 0
        assert not handle.running
        assert handle.returncode == 0
        handle.check()

    def test_failed_process_raises_on_check(self):
        handle = spawn(python_command("import sys; sys.stderr.write('boom'); sys.exit(3)"), "failing")
        handle.wait(timeout=30)

        with pytest.raises(ProcessFailureError) as exc_info:
            handle.check()

        assert exc_info.value.returncode == 3
        assert exc_info.value.stderr == "boom"
        assert exc_info.value.command[0] == sys.executable

    def test_missing_executable(self):
        with pytest.raises(ProcessFailureError, match="Could not start capture"):
            spawn(["definitely-not-a-real-binary-xyz"], "capture")

    def test_wait_timeout(self):
        handle = spawn(python_command("import time; time.sleep(30)"), "sleeper")
        try:
            with pytest.raises(subprocess.TimeoutExpired):
                handle.wait(timeout=0.1)
            assert handle.running
        finally:
            handle.terminate(grace=5)

    def test_terminate(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="namesayer"):
            handle = spawn(python_command("import time; time.sleep(30)"), "sleeper")
            code = handle.terminate(grace=5)

        assert code != 0
        assert not handle.running
        assert f"Starting sleeper: {sys.executable} -c" in caplog.text
        assert f"Terminating sleeper (pid {handle.pid})" in caplog.text

    def test_terminate_finished_process_is_noop(self):
        handle = spawn(python_command("pass"), "noop")
        handle.wait(timeout=30)
        assert handle.terminate() == 0


class TestFFmpegCapture:
    """Test capture command construction."""

    def test_build_command(self, tmp_path):
        capture = FFmpegCapture(input_format="pulse", input_device="mic", sample_rate=16000, channels=1)
        command = capture.build_command(tmp_path / "kiwi.wav", 5.0)

        assert command[0] == "ffmpeg"
        assert command[command.index("-f") + 1] == "pulse"
        assert command[command.index("-i") + 1] == "mic"
        assert command[command.index("-t") + 1] == "5"
        assert command[command.index("-ar") + 1] == "16000"
        assert command[-1] == str(tmp_path / "kiwi.wav")

    def test_from_config(self):
        capture = FFmpegCapture.from_config(CaptureSettings(ffmpeg_binary="/opt/ffmpeg", input_device="hw:1"))
        assert capture.ffmpeg_binary == "/opt/ffmpeg"
        assert capture.input_device == "hw:1"

    def test_start_creates_directory(self, tmp_path):
        target = tmp_path / "user" / "kiwi.wav"
        capture = FFmpegCapture()

        with patch("namesayer.audio.tools.spawn") as mock_spawn:
            capture.start(target, 5.0)

        assert target.parent.is_dir()
        mock_spawn.assert_called_once_with(capture.build_command(target, 5.0), "capture")


class TestFFmpegNormaliser:
    """Test normalise command construction."""

    def test_audio_filter(self):
        normaliser = FFmpegNormaliser(silence_threshold_db=-40, target_loudness_lufs=-18)
        assert normaliser.audio_filter == (
            "silenceremove=start_periods=1:start_threshold=-40dB"
            ":stop_periods=-1:stop_threshold=-40dB,loudnorm=I=-18"
        )

    def test_build_command(self, tmp_path):
        source, destination = tmp_path / "raw.wav", tmp_path / "trimmed.wav"
        command = FFmpegNormaliser().build_command(source, destination)

        assert command[command.index("-i") + 1] == str(source)
        assert "-af" in command
        assert command[-1] == str(destination)

    def test_from_config(self):
        normaliser = FFmpegNormaliser.from_config(NormaliseSettings(silence_threshold_db=-35.5))
        assert normaliser.silence_threshold_db == -35.5


class TestFFplayPlayer:
    """Test playback command construction."""

    def test_build_command(self):
        command = FFplayPlayer("ffplay").build_command(Path("kiwi.wav"))
        assert command == ["ffplay", "-nodisp", "-autoexit", "-loglevel", "error", "kiwi.wav"]

    def test_from_config(self):
        assert FFplayPlayer.from_config(PlaybackSettings(player_binary="mpv")).player_binary == "mpv"

    def test_missing_player_surfaces_error(self, tmp_path):
        player = FFplayPlayer("definitely-not-a-real-player-xyz")
        with pytest.raises(ProcessFailureError):
            player.start(write_wav(tmp_path / "kiwi.wav"))


class TestReadDuration:
    """Test reading clip durations with soundfile."""

    def test_reads_duration(self, tmp_path):
        path = write_wav(tmp_path / "kiwi.wav", seconds=1.25)
        assert read_duration(path) == pytest.approx(1.25, abs=0.01)

    def test_missing_file(self, tmp_path):
        with pytest.raises(RecordingIOError, match="not found"):
            read_duration(tmp_path / "missing.wav")

    def test_unreadable_file(self, tmp_path):
        path = tmp_path / "broken.wav"
        path.write_bytes(b"RIFF....garbage")
        with pytest.raises(RecordingIOError, match="Could not read"):
            read_duration(path)


def test_toolkit_from_settings():
    settings = Settings(playback=PlaybackSettings(player_binary="mpv"))
    toolkit = AudioToolkit.from_settings(settings)

    assert isinstance(toolkit.capture, FFmpegCapture)
    assert isinstance(toolkit.normaliser, FFmpegNormaliser)
    assert toolkit.player.player_binary == "mpv"
    assert toolkit.duration is read_duration
