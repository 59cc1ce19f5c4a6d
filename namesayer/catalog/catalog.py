"""
Name catalog.

Holds one Name per distinct name text and feeds each with the database
recordings found on disk, plus any user recordings captured in earlier
sessions. Bad-recording flags are restored from and saved to the flag store.
"""

import logging
from collections.abc import Iterator
from datetime import datetime
from pathlib import Path

from ..audio.tools import AudioToolkit
from ..config import Settings
from ..errors import InvalidNameError, RecordingNotFoundError
from ..recordings import Name, Recording, RecordingSource, RecordingState, parse_filename, validate_name
from ..recordings.naming import FILE_EXTENSION
from ..utils.logging import log_success
from .flags import FlagStore

logger = logging.getLogger(__name__)


def normalize_key(text: str) -> str:
    """Catalog key for a name: whitespace collapsed, case folded."""
    return " ".join(text.split()).casefold()


class NameCatalog:
    """
    Registry of names keyed by normalized text.

    Example:
        catalog = NameCatalog(settings)
        catalog.load()
        for name in catalog:
            print(name)  # "kiwi (3 recordings)"
        catalog.get("Kiwi").play_recording()
    """

    def __init__(self, settings: Settings | None = None, toolkit: AudioToolkit | None = None):
        self.settings = settings or Settings()
        self.toolkit = toolkit or AudioToolkit.from_settings(self.settings)
        self._names: dict[str, Name] = {}
        self.flags = FlagStore(self.settings.paths.flags_file)

    def __len__(self) -> int:
        return len(self._names)

    def __contains__(self, text: object) -> bool:
        return isinstance(text, str) and normalize_key(text) in self._names

    def __iter__(self) -> Iterator[Name]:
        """Iterate names in sorted display order."""
        return iter(self.names())

    def names(self) -> list[Name]:
        return sorted(self._names.values())

    def get(self, text: str) -> Name:
        """
        Look up a name.

        Raises:
            RecordingNotFoundError: If the name is not in the catalog
        """
        try:
            return self._names[normalize_key(text)]
        except KeyError:
            raise RecordingNotFoundError(f"Unknown name: {text}") from None

    def get_or_create(self, text: str) -> Name:
        key = normalize_key(text)
        name = self._names.get(key)
        if name is None:
            name = Name(" ".join(text.split()), settings=self.settings, toolkit=self.toolkit)
            self._names[key] = name
        return name

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    def load(self) -> "NameCatalog":
        """
        Scan the configured directories and populate the catalog.

        Database recordings are added in filename order. User recordings are
        added oldest first so the newest ends up at the front.
        """
        paths = self.settings.paths
        self._names.clear()
        self.flags.load()

        database_count = 0
        for file in self._scan(paths.database_dir):
            recording = self._load_recording(file, RecordingSource.DATABASE)
            if recording is not None:
                self.get_or_create(recording.name).add_database_recording(recording)
                database_count += 1

        user_recordings = [
            recording
            for file in self._scan(paths.user_recordings_dir)
            if (recording := self._load_recording(file, RecordingSource.USER)) is not None
        ]
        user_recordings.sort(key=_timestamp_key)
        for recording in user_recordings:
            self.get_or_create(recording.name).add_user_recording(recording)

        log_success(
            f"Loaded {len(self._names)} names ({database_count} database, {len(user_recordings)} user recordings)",
            logger=logger,
        )
        return self

    def flag_best_recording(self, text: str) -> Recording:
        """
        Flag a name's best database recording and save the new count.

        Returns:
            The recording that was flagged

        Raises:
            RecordingNotFoundError: If the name is unknown or has no database recordings
            RecordingIOError: If the flag store cannot be written
        """
        name = self.get(text)
        recording = name.get_best_recording()
        name.flag_recording()
        self.flags.update(recording)
        self.flags.save()
        return recording

    def _scan(self, directory: Path) -> list[Path]:
        if not directory.is_dir():
            logger.debug(f"Recording directory {directory} does not exist, skipping")
            return []
        return sorted(p for p in directory.iterdir() if p.is_file() and p.suffix.lower() == FILE_EXTENSION)

    def _load_recording(self, file: Path, source: RecordingSource) -> Recording | None:
        parsed = parse_filename(file)
        if parsed is None:
            logger.debug(f"Skipping {file.name}: not a recording filename")
            return None
        try:
            validate_name(parsed.name)
        except InvalidNameError as e:
            logger.warning(f"Skipping {file.name}: {e}")
            return None

        trimmed = self.settings.paths.trimmed_dir / file.name
        state = RecordingState.NORMALISED if trimmed.is_file() else RecordingState.CAPTURED
        return Recording(
            name=parsed.name,
            date=parsed.date,
            time=parsed.time,
            raw_path=file,
            trimmed_path=trimmed,
            source=source,
            toolkit=self.toolkit,
            state=state,
            bad_recordings=self.flags.count(source, file.name),
        )


def _timestamp_key(recording: Recording) -> datetime:
    parsed = parse_filename(recording.raw_path)
    return (parsed.timestamp if parsed else None) or datetime.min

