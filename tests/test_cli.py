"""Tests for CLI structure and commands.

Commands run against recordings in a temporary directory, with the
external audio tools replaced by fakes.
"""

import logging
import sys
from pathlib import Path
from unittest.mock import patch

import pytest
import yaml
from conftest import FakeCapture, FakeNormaliser, FakePlayer, write_wav
from typer.testing import CliRunner

sys.path.insert(0, str(Path(__file__).parent.parent))
from cli import app, names_app, user_app

from namesayer.audio import AudioToolkit

runner = CliRunner()


@pytest.fixture(autouse=True)
def cleanup_logger():
    yield
    logger = logging.getLogger("namesayer")
    for handler in logger.handlers[:]:
        handler.close()
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    """Recording directories with kiwi x3 and aroha x1 in the database, mere as a user-only name."""
    db = tmp_path / "database"
    for filename in (
        "se206_01-01-2020_10-00-01_kiwi.wav",
        "se206_01-01-2020_10-00-02_kiwi.wav",
        "se206_01-01-2020_10-00-03_kiwi.wav",
        "se206_02-01-2020_11-00-00_aroha.wav",
    ):
        write_wav(db / filename)
    write_wav(tmp_path / "user" / "se206_07-03-2024_08-00-00_mere.wav")
    return tmp_path


@pytest.fixture
def config_file(data_dir: Path) -> Path:
    path = data_dir / "config.yaml"
    path.write_text(
        yaml.safe_dump(
            {
                "paths": {
                    "database_dir": str(data_dir / "database"),
                    "user_recordings_dir": str(data_dir / "user"),
                    "trimmed_dir": str(data_dir / "trimmed"),
                    "flags_file": str(data_dir / "flags.json"),
                },
                "logging": {"level": "warning"},
            }
        )
    )
    return path


@pytest.fixture
def fake_toolkit():
    toolkit = AudioToolkit(capture=FakeCapture(), normaliser=FakeNormaliser(), player=FakePlayer())
    with patch("namesayer.cli.common.get_toolkit", return_value=toolkit):
        yield toolkit


@pytest.fixture
def invoke(config_file, fake_toolkit):
    def run(*args: str, input: str | None = None):
        return runner.invoke(app, ["--config", str(config_file), *args], input=input)

    return run


class TestCLIStructure:
    """Test CLI structure and command registration."""

    def test_main_app_lists_subapps(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "names" in result.output
        assert "user" in result.output
        assert "config" in result.output

    def test_names_help_shows_commands(self):
        result = runner.invoke(names_app, ["--help"])
        assert result.exit_code == 0
        for cmd in ["list", "show", "play", "flag", "normalise"]:
            assert cmd in result.output, f"Command '{cmd}' not found in names --help"

    def test_user_help_shows_commands(self):
        result = runner.invoke(user_app, ["--help"])
        assert result.exit_code == 0
        for cmd in ["record", "list", "play", "remove"]:
            assert cmd in result.output, f"Command '{cmd}' not found in user --help"


class TestNamesCommands:
    """Test the names sub-app."""

    def test_list(self, invoke):
        result = invoke("names", "list")
        assert result.exit_code == 0
        assert "kiwi (3 recordings)" in result.output
        assert "aroha" in result.output
        assert "mere" in result.output

    def test_list_user_only(self, invoke):
        result = invoke("names", "list", "--user-only")
        assert result.exit_code == 0
        assert "mere" in result.output
        assert "aroha" not in result.output

    def test_show_json(self, invoke):
        result = invoke("names", "show", "KIWI", "--json")
        assert result.exit_code == 0
        assert '"label": "kiwi (3 recordings)"' in result.output
        assert '"best_length": 0.5' in result.output

    def test_show(self, invoke):
        result = invoke("names", "show", "kiwi")
        assert result.exit_code == 0
        assert "Database recordings" in result.output

    def test_show_unknown(self, invoke):
        result = invoke("names", "show", "tui")
        assert result.exit_code == 1
        assert "Unknown name" in result.output

    def test_play(self, invoke, fake_toolkit, data_dir):
        result = invoke("names", "play", "kiwi")
        assert result.exit_code == 0
        assert fake_toolkit.player.played == [data_dir / "database" / "se206_01-01-2020_10-00-01_kiwi.wav"]

    def test_play_without_database_recordings(self, invoke, fake_toolkit):
        result = invoke("names", "play", "mere")
        assert result.exit_code == 1
        assert "No recordings yet" in result.output
        assert fake_toolkit.player.played == []

    def test_play_player_failure(self, invoke, fake_toolkit):
        fake_toolkit.player = FakePlayer(returncode=1)
        result = invoke("names", "play", "kiwi")
        assert result.exit_code == 1
        assert "External tool failed" in result.output

    def test_flag(self, invoke):
        result = invoke("names", "flag", "kiwi")
        assert result.exit_code == 0
        assert "Flagged" in result.output
        assert "10-00-02" in result.output

    def test_flag_carries_over_to_next_run(self, invoke, fake_toolkit, data_dir):
        assert invoke("names", "flag", "kiwi").exit_code == 0

        result = invoke("names", "play", "kiwi")

        assert result.exit_code == 0
        assert fake_toolkit.player.played == [data_dir / "database" / "se206_01-01-2020_10-00-02_kiwi.wav"]
        assert (data_dir / "flags.json").is_file()

    def test_normalise(self, invoke, data_dir):
        result = invoke("names", "normalise", "aroha")
        assert result.exit_code == 0
        assert (data_dir / "trimmed" / "se206_02-01-2020_11-00-00_aroha.wav").is_file()


class TestUserCommands:
    """Test the user sub-app."""

    def test_record_captures_and_normalises(self, invoke, data_dir):
        result = invoke("user", "record", "kiwi")

        assert result.exit_code == 0, result.output
        raw = list((data_dir / "user").glob("se206_*_kiwi.wav"))
        assert len(raw) == 1
        assert (data_dir / "trimmed" / raw[0].name).is_file()

    def test_record_new_name(self, invoke, data_dir):
        result = invoke("user", "record", "tui", "--no-normalise")

        assert result.exit_code == 0, result.output
        assert list((data_dir / "user").glob("se206_*_tui.wav"))
        assert not (data_dir / "trimmed").exists()

    @pytest.mark.parametrize("text", ["../../escape", "a/b"])
    def test_record_rejects_path_like_name(self, invoke, fake_toolkit, data_dir, text):
        result = invoke("user", "record", text)

        assert result.exit_code == 1
        assert "Invalid name" in result.output
        assert fake_toolkit.capture.calls == []
        assert not list(data_dir.rglob("*escape*"))

    def test_record_capture_failure(self, invoke, fake_toolkit, data_dir):
        fake_toolkit.capture = FakeCapture(returncode=1, write=False)
        result = invoke("user", "record", "kiwi")

        assert result.exit_code == 1
        assert not list((data_dir / "user").glob("se206_*_kiwi.wav"))

    def test_list(self, invoke):
        invoke("user", "record", "kiwi")
        result = invoke("user", "list", "kiwi")
        assert result.exit_code == 0
        assert "NORMALISED" in result.output

    def test_list_empty(self, invoke):
        result = invoke("user", "list", "aroha")
        assert result.exit_code == 0
        assert "No user recordings" in result.output

    def test_play(self, invoke, fake_toolkit, data_dir):
        result = invoke("user", "play", "mere")
        assert result.exit_code == 0
        assert fake_toolkit.player.played == [data_dir / "user" / "se206_07-03-2024_08-00-00_mere.wav"]

    def test_play_bad_index(self, invoke):
        result = invoke("user", "play", "mere", "2")
        assert result.exit_code == 1
        assert "No user recording #2" in result.output

    def test_remove(self, invoke, data_dir):
        result = invoke("user", "remove", "mere", "1", "--yes")
        assert result.exit_code == 0
        assert not (data_dir / "user" / "se206_07-03-2024_08-00-00_mere.wav").exists()

    def test_remove_declined(self, invoke, data_dir):
        result = invoke("user", "remove", "mere", "1", input="n\n")
        assert result.exit_code == 0
        assert "[y/N]" in result.output
        assert "Nothing deleted" in result.output
        assert (data_dir / "user" / "se206_07-03-2024_08-00-00_mere.wav").exists()


def test_config_command(invoke, data_dir):
    result = invoke("config")
    assert result.exit_code == 0
    assert "Paths" in result.output
    assert "ffplay" in result.output
