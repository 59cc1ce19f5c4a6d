"""
A single name and its recordings.

Passes commands down to individual recordings and makes sure the best
database recording is always the one played.
"""

import functools
import logging
import threading
from datetime import datetime

from ..audio.process import ProcessHandle
from ..audio.tools import AudioToolkit
from ..config import Settings
from ..errors import InvalidRecordingError, RecordingBusyError, RecordingNotFoundError
from .naming import build_filename, format_timestamp, validate_name
from .recording import Recording, RecordingJob, RecordingSource, RecordingState

logger = logging.getLogger(__name__)


@functools.total_ordering
class Name:
    """
    A name with its database and user recordings.

    Database recordings keep import order. User recordings are kept
    most-recent-first.

    Example:
        name = Name("kiwi", settings=settings)
        recording = name.create_recording_object()
        name.add_user_recording(recording)
        name.record(recording).wait()
        name.normalise_best_recording().wait()
    """

    def __init__(self, name: str, settings: Settings | None = None, toolkit: AudioToolkit | None = None):
        self._name = validate_name(name)
        self.settings = settings or Settings()
        self.toolkit = toolkit or AudioToolkit.from_settings(self.settings)
        self._database_recordings: list[Recording] = []
        self._user_recordings: list[Recording] = []
        self._lock = threading.Lock()
        self._active_capture: RecordingJob | None = None

    # -------------------------------------------------------------------------
    # Identity & display
    # -------------------------------------------------------------------------

    @property
    def name(self) -> str:
        return self._name

    def get_name(self) -> str:
        return self._name

    @property
    def clean_name(self) -> str:
        return self._name

    @property
    def display_label(self) -> str:
        """Name, plus the database recording count when there is more than one."""
        count = len(self._database_recordings)
        if count <= 1:
            return self._name
        return f"{self._name} ({count} recordings)"

    def __str__(self) -> str:
        return self.display_label

    def __repr__(self) -> str:
        return (
            f"Name({self._name!r}, database={len(self._database_recordings)}, "
            f"user={len(self._user_recordings)})"
        )

    def compare_to(self, other: "Name") -> int:
        """Lexicographic comparison of name text (-1, 0, 1)."""
        return (self._name > other._name) - (self._name < other._name)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Name):
            return NotImplemented
        return self._name == other._name

    def __lt__(self, other: "Name") -> bool:
        if not isinstance(other, Name):
            return NotImplemented
        return self._name < other._name

    def __hash__(self) -> int:
        return hash(self._name)

    # -------------------------------------------------------------------------
    # Collections
    # -------------------------------------------------------------------------

    @property
    def database_recordings(self) -> tuple[Recording, ...]:
        return tuple(self._database_recordings)

    @property
    def user_recordings(self) -> tuple[Recording, ...]:
        return tuple(self._user_recordings)

    def add_user_recording(self, recording: Recording) -> None:
        """Insert a user recording at the front (most recent first)."""
        with self._lock:
            self._user_recordings.insert(0, recording)

    def add_database_recording(self, recording: Recording) -> None:
        self._database_recordings.append(recording)

    def get_best_recording(self) -> Recording:
        """
        Database recording with the fewest bad flags.

        Ties go to the earliest-inserted recording.

        Raises:
            RecordingNotFoundError: If there are no database recordings
        """
        if not self._database_recordings:
            raise RecordingNotFoundError(f"No recordings available for {self._name}")

        best = self._database_recordings[0]
        for recording in self._database_recordings[1:]:
            if recording.bad_recordings < best.bad_recordings:
                best = recording
        return best

    # -------------------------------------------------------------------------
    # Delegation to the best recording
    # -------------------------------------------------------------------------

    def play_recording(self) -> ProcessHandle:
        return self.get_best_recording().play_recording()

    def flag_recording(self) -> bool:
        """Flag the best recording as poor quality. Always reports success."""
        recording = self.get_best_recording()
        recording.flag_as_bad()
        logger.info(f"Flagged {recording.file_name} for {self._name}")
        return True

    def get_recording_length(self) -> float:
        return self.get_best_recording().get_recording_length()

    def normalise_best_recording(self) -> RecordingJob:
        return self.get_best_recording().normalise_and_trim_audio_file()

    # -------------------------------------------------------------------------
    # User recording lifecycle
    # -------------------------------------------------------------------------

    def create_recording_object(self, moment: datetime | None = None) -> Recording:
        """
        Create a user recording descriptor stamped with the current date and time.

        The recording is not added to this name and no file is created.

        Args:
            moment: Timestamp to use instead of now

        Returns:
            New Recording in DESCRIPTOR_CREATED state
        """
        date, time = format_timestamp(moment or datetime.now())
        filename = build_filename(self._name, date, time)
        paths = self.settings.paths

        return Recording(
            name=self._name,
            date=date,
            time=time,
            raw_path=paths.user_recordings_dir / filename,
            trimmed_path=paths.trimmed_dir / filename,
            source=RecordingSource.USER,
            toolkit=self.toolkit,
        )

    def record(self, recording: Recording) -> RecordingJob:
        """
        Start a time-limited microphone capture for a recording descriptor.

        Only one capture per name may be in flight.

        Returns:
            RecordingJob to wait on or cancel

        Raises:
            InvalidRecordingError: If the recording is not a user recording of this name
            RecordingBusyError: If another capture for this name is still running
            ProcessFailureError: If the capture tool cannot be started
        """
        if recording.source is not RecordingSource.USER or recording.name != self._name:
            raise InvalidRecordingError(
                f"{recording.file_name} is not a user recording of {self._name}", path=recording.raw_path
            )
        capture = self.settings.capture
        with self._lock:
            active = self._active_capture
            if active is not None and active.recording.state is RecordingState.CAPTURING:
                raise RecordingBusyError(
                    f"A recording for {self._name} is already in progress", path=active.recording.raw_path
                )
            job = recording.start_capture(capture.max_recording_secs, capture.grace_secs)
            self._active_capture = job
        return job

    def remove_user_recording(self, recording: Recording) -> None:
        """
        Remove a user recording and delete its file.

        Recordings that are not in this name's user recordings (database
        recordings included) are left alone. File deletion failures are
        logged and the recording is still removed.

        Raises:
            RecordingBusyError: If the recording is still being captured or normalised
        """
        with self._lock:
            if recording.state is RecordingState.CAPTURING or recording.busy:
                raise RecordingBusyError(
                    f"Cannot delete {recording.file_name} while it is being processed", path=recording.raw_path
                )
            for index, existing in enumerate(self._user_recordings):
                if existing is recording:
                    del self._user_recordings[index]
                    break
            else:
                logger.warning(f"{recording.file_name} is not a user recording of {self._name}, not deleting it")
                return

        recording.delete_files()

    def get_user_recordings(self) -> list[Recording]:
        return list(self._user_recordings)
