"""
Configuration management using pydantic-settings.
Loads from config.yaml, .env, and environment variables.
"""

from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env file at module import
load_dotenv()


class PathSettings(BaseSettings):
    """Directory roots for recordings."""

    model_config = SettingsConfigDict(
        env_prefix="NAMESAYER_PATHS_",
        extra="ignore",
    )

    database_dir: Path = Field(default=Path("./data/database"), description="Pre-supplied name recordings")
    user_recordings_dir: Path = Field(
        default=Path("./data/user_recordings"), description="Raw microphone captures"
    )
    trimmed_dir: Path = Field(default=Path("./data/trimmed"), description="Normalised and trimmed output")
    flags_file: Path = Field(default=Path("./data/flags.json"), description="Saved bad-recording counts")


class CaptureSettings(BaseSettings):
    """Microphone capture settings."""

    model_config = SettingsConfigDict(
        env_prefix="NAMESAYER_CAPTURE_",
        extra="ignore",
    )

    max_recording_secs: float = Field(default=7.0, gt=0, description="Hard cap on capture length")
    grace_secs: float = Field(default=1.0, ge=0, description="Extra time before the capture is terminated")
    ffmpeg_binary: str = Field(default="ffmpeg")
    input_format: str = Field(default="alsa", description="ffmpeg input device format (alsa, pulse, avfoundation)")
    input_device: str = Field(default="default", description="ffmpeg input device name")
    sample_rate: int = Field(default=44100, gt=0)
    channels: int = Field(default=1, ge=1)


class NormaliseSettings(BaseSettings):
    """Normalise/trim settings."""

    model_config = SettingsConfigDict(
        env_prefix="NAMESAYER_NORMALISE_",
        extra="ignore",
    )

    ffmpeg_binary: str = Field(default="ffmpeg")
    silence_threshold_db: float = Field(default=-50.0, description="Leading/trailing silence cut-off (dB)")
    target_loudness_lufs: float = Field(default=-16.0, description="Integrated loudness target (LUFS)")


class PlaybackSettings(BaseSettings):
    """Playback settings."""

    model_config = SettingsConfigDict(
        env_prefix="NAMESAYER_PLAYBACK_",
        extra="ignore",
    )

    player_binary: str = Field(default="ffplay")


class LoggingSettings(BaseSettings):
    """Logging settings."""

    model_config = SettingsConfigDict(
        env_prefix="NAMESAYER_LOG_",
        extra="ignore",
    )

    level: str = Field(default="info")
    file: Path | None = Field(default=None, description="Optional log file")


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    paths: PathSettings = Field(default_factory=PathSettings)
    capture: CaptureSettings = Field(default_factory=CaptureSettings)
    normalise: NormaliseSettings = Field(default_factory=NormaliseSettings)
    playback: PlaybackSettings = Field(default_factory=PlaybackSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    verbose: bool = Field(default=True)
    debug: bool = Field(default=False)

    @classmethod
    def load(cls, config_path: Path | None = None) -> "Settings":
        """Load settings from config.yaml and environment."""
        config_data: dict[str, Any] = {}

        if config_path is None:
            config_path = Path("config.yaml")

        if config_path.exists():
            with open(config_path, encoding="utf-8") as f:
                yaml_content: Any = yaml.safe_load(f)
                yaml_config: dict[str, Any] = yaml_content or {}

            # Map yaml structure to settings
            if "paths" in yaml_config:
                config_data["paths"] = PathSettings(**yaml_config["paths"])  # type: ignore
            if "capture" in yaml_config:
                config_data["capture"] = CaptureSettings(**yaml_config["capture"])  # type: ignore
            if "normalise" in yaml_config:
                config_data["normalise"] = NormaliseSettings(**yaml_config["normalise"])  # type: ignore
            if "playback" in yaml_config:
                config_data["playback"] = PlaybackSettings(**yaml_config["playback"])  # type: ignore
            if "logging" in yaml_config:
                config_data["logging"] = LoggingSettings(**yaml_config["logging"])  # type: ignore
            if "verbose" in yaml_config:
                config_data["verbose"] = yaml_config["verbose"]
            if "debug" in yaml_config:
                config_data["debug"] = yaml_config["debug"]

        return cls(**config_data)  # type: ignore


# Global settings instance (CLI only; the core takes Settings explicitly)
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings


def reload_settings(config_path: Path | None = None) -> Settings:
    """Reload settings from config."""
    global _settings
    _settings = Settings.load(config_path)
    return _settings
