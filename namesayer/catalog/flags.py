"""
Bad-recording flag store.

Keeps each recording's bad count in a small JSON file so that flags
raised in one session still steer best-recording selection in the next.
"""

import logging
import os
from pathlib import Path

import orjson

from ..errors import RecordingIOError
from ..recordings import Recording, RecordingSource

logger = logging.getLogger(__name__)


def flag_key(source: RecordingSource, file_name: str) -> str:
    """Store key for a recording file, e.g. ``database/se206_01-01-2020_10-00-01_kiwi.wav``."""
    return f"{source.value}/{file_name}"


class FlagStore:
    """
    File-backed map of recording key -> bad count.

    Example:
        store = FlagStore(settings.paths.flags_file)
        store.load()
        store.count(RecordingSource.DATABASE, file_name)  # 0 if never flagged
        store.update(recording)
        store.save()
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._counts: dict[str, int] = {}

    def __len__(self) -> int:
        return len(self._counts)

    def load(self) -> "FlagStore":
        """
        Read counts from disk.

        A missing file means no flags. An unreadable or malformed file is
        logged and treated as empty; the next save replaces it.
        """
        self._counts = {}
        if not self.path.is_file():
            return self

        try:
            with open(self.path, "rb") as f:
                data = orjson.loads(f.read())
        except (orjson.JSONDecodeError, OSError) as e:
            logger.warning(f"Ignoring unreadable flag file {self.path}: {e}")
            return self

        if not isinstance(data, dict):
            logger.warning(f"Ignoring flag file {self.path}: expected an object, got {type(data).__name__}")
            return self

        for key, count in data.items():
            # bool is an int subclass; true/false are not counts
            if isinstance(count, int) and not isinstance(count, bool) and count >= 0:
                self._counts[key] = count
            else:
                logger.debug(f"Skipping flag entry {key!r}: {count!r} is not a count")
        return self

    def count(self, source: RecordingSource, file_name: str) -> int:
        return self._counts.get(flag_key(source, file_name), 0)

    def update(self, recording: Recording) -> None:
        """Take the recording's current bad count into the store."""
        key = flag_key(recording.source, recording.file_name)
        if recording.bad_recordings:
            self._counts[key] = recording.bad_recordings
        else:
            self._counts.pop(key, None)

    def save(self) -> None:
        """
        Write counts to disk atomically.

        Raises:
            RecordingIOError: If the file cannot be written
        """
        temp = self.path.with_name(f".{self.path.name}.tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(temp, "wb") as f:
                f.write(orjson.dumps(self._counts, option=orjson.OPT_INDENT_2 | orjson.OPT_SORT_KEYS))
            os.replace(temp, self.path)
        except OSError as e:
            temp.unlink(missing_ok=True)
            raise RecordingIOError(f"Could not save flags to {self.path}: {e}", path=self.path) from e
        logger.debug(f"Saved {len(self._counts)} flag counts to {self.path}")
