"""
A single pronunciation recording.

Lifecycle of a user-captured recording:

    DESCRIPTOR_CREATED -> CAPTURING -> CAPTURED -> NORMALISED -> DELETED

Database recordings are created directly in CAPTURED.
"""

import logging
import os
import subprocess
import threading
import time
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field

from ..audio.process import ProcessHandle
from ..audio.tools import AudioToolkit
from ..errors import NameSayerError, ProcessFailureError, RecordingBusyError, RecordingIOError

logger = logging.getLogger(__name__)


class RecordingSource(str, Enum):
    """Where a recording came from."""

    DATABASE = "database"
    USER = "user"


class RecordingState(str, Enum):
    """Lifecycle state of a recording."""

    DESCRIPTOR_CREATED = "descriptor_created"
    CAPTURING = "capturing"
    CAPTURED = "captured"
    NORMALISED = "normalised"
    DELETED = "deleted"

    @property
    def playable(self) -> bool:
        return self in (RecordingState.CAPTURED, RecordingState.NORMALISED)


class JobKind(str, Enum):
    CAPTURE = "capture"
    NORMALISE = "normalise"


class RecordingInfo(BaseModel):
    """Serializable snapshot of a recording."""

    name: str
    date: str
    time: str
    source: RecordingSource
    state: RecordingState
    path: str = Field(description="Current playable path")
    raw_path: str
    trimmed_path: str
    bad_recordings: int = Field(default=0, ge=0)


class RecordingJob:
    """
    A capture or normalise run in flight for one recording.

    The job owns one external process. ``wait()`` blocks until the process
    exits (or, for captures, until the hard time limit passes) and then
    moves the recording to its next state. ``cancel()`` forcibly stops it.
    """

    def __init__(
        self,
        recording: "Recording",
        handle: ProcessHandle,
        kind: JobKind,
        time_limit: float | None = None,
    ):
        self.recording = recording
        self.handle = handle
        self.kind = kind
        self.time_limit = time_limit
        self._started = time.monotonic()
        self._lock = threading.Lock()
        self._finished = False
        self._cancelled = False
        self._error: NameSayerError | None = None

    @property
    def running(self) -> bool:
        return self.handle.running

    @property
    def done(self) -> bool:
        """True once the recording has been moved out of the in-flight state."""
        return self._finished

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def _remaining(self) -> float | None:
        if self.time_limit is None:
            return None
        return max(0.0, self.time_limit - (time.monotonic() - self._started))

    def wait(self) -> "Recording":
        """
        Wait for the job to finish and settle the recording's state.

        Returns:
            The recording

        Raises:
            ProcessFailureError: If the process failed or produced no audio
        """
        with self._lock:
            if not self._finished:
                truncated = False
                try:
                    returncode = self.handle.wait(timeout=self._remaining())
                except subprocess.TimeoutExpired:
                    logger.warning(
                        f"{self.kind.value.capitalize()} of {self.recording.file_name} hit the "
                        f"{self.time_limit:g}s limit, stopping it"
                    )
                    returncode = self.handle.terminate()
                    truncated = True

                self._finished = True
                try:
                    self.recording._complete_job(self, returncode, truncated=truncated)
                except NameSayerError as e:
                    self._error = e

            if self._error is not None:
                raise self._error
            return self.recording

    def cancel(self) -> None:
        """Terminate the process. A cancelled job discards whatever it wrote."""
        if self._finished:
            return
        self._cancelled = True
        self.handle.terminate()
        self.wait()


class Recording:
    """
    One audio asset for a name, either pre-supplied or user-captured.

    The bad counter is a quality signal. It starts at the stored count
    (0 for a new recording) and only ever grows through ``flag_as_bad``.
    """

    def __init__(
        self,
        name: str,
        date: str,
        time: str,
        raw_path: Path | str,
        trimmed_path: Path | str,
        source: RecordingSource = RecordingSource.USER,
        toolkit: AudioToolkit | None = None,
        state: RecordingState | None = None,
        bad_recordings: int = 0,
    ):
        self.name = name
        self.date = date
        self.time = time
        self.raw_path = Path(raw_path)
        self.trimmed_path = Path(trimmed_path)
        self.source = source
        self.toolkit = toolkit or AudioToolkit()

        if state is None:
            state = RecordingState.CAPTURED if source is RecordingSource.DATABASE else RecordingState.DESCRIPTOR_CREATED
        self._state = state
        if bad_recordings < 0:
            raise ValueError(f"bad_recordings must be >= 0, got {bad_recordings}")
        self._bad_recordings = bad_recordings
        self._lock = threading.Lock()
        self._active_job: RecordingJob | None = None

    def __repr__(self) -> str:
        return f"Recording({self.name!r}, {self.date}, {self.time}, {self.source.value}, {self._state.value})"

    # -------------------------------------------------------------------------
    # Identity & state
    # -------------------------------------------------------------------------

    @property
    def state(self) -> RecordingState:
        return self._state

    @property
    def file_name(self) -> str:
        return self.raw_path.name

    @property
    def path(self) -> Path:
        """Current playable path: the trimmed file once normalised, else the raw file."""
        if self._state is RecordingState.NORMALISED:
            return self.trimmed_path
        return self.raw_path

    def get_path(self) -> Path:
        return self.path

    @property
    def staging_path(self) -> Path:
        """Scratch file a normalise run writes before it replaces the trimmed file."""
        return self.trimmed_path.with_name(f".{self.trimmed_path.stem}.partial{self.trimmed_path.suffix}")

    @property
    def busy(self) -> bool:
        """True while a capture or normalise job has not been settled."""
        job = self._active_job
        return job is not None and not job.done

    @property
    def bad_recordings(self) -> int:
        return self._bad_recordings

    def get_bad_recordings(self) -> int:
        return self._bad_recordings

    def flag_as_bad(self) -> None:
        """Record one more poor-quality report against this recording."""
        with self._lock:
            self._bad_recordings += 1
            count = self._bad_recordings
        logger.debug(f"Flagged {self.file_name} as bad ({count} total)")

    def to_info(self) -> RecordingInfo:
        return RecordingInfo(
            name=self.name,
            date=self.date,
            time=self.time,
            source=self.source,
            state=self._state,
            path=str(self.path),
            raw_path=str(self.raw_path),
            trimmed_path=str(self.trimmed_path),
            bad_recordings=self._bad_recordings,
        )

    # -------------------------------------------------------------------------
    # Playback
    # -------------------------------------------------------------------------

    def _require_playable(self) -> Path:
        if not self._state.playable:
            raise RecordingIOError(
                f"Recording {self.file_name} has no audio yet (state: {self._state.value})",
                path=self.path,
            )
        path = self.path
        if not path.is_file():
            raise RecordingIOError(f"Recording file not found: {path}", path=path)
        return path

    def get_recording_length(self) -> float:
        """
        Duration of the playable file in seconds.

        Raises:
            RecordingIOError: If the file is missing or unreadable
        """
        return self.toolkit.duration(self._require_playable())

    def play_recording(self) -> ProcessHandle:
        """
        Start playback of the current file.

        Returns:
            Handle on the player process

        Raises:
            RecordingIOError: If there is no file to play
            ProcessFailureError: If the player cannot be started
        """
        path = self._require_playable()
        logger.info(f"Playing {path}")
        return self.toolkit.player.start(path)

    # -------------------------------------------------------------------------
    # Capture & normalisation
    # -------------------------------------------------------------------------

    def start_capture(self, max_secs: float, grace_secs: float = 1.0) -> RecordingJob:
        """
        Start capturing microphone audio into the raw path.

        Args:
            max_secs: Capture length passed to the capture tool
            grace_secs: Extra time allowed before the process is terminated

        Returns:
            RecordingJob for the capture

        Raises:
            RecordingBusyError: If the recording is not a fresh descriptor
            ProcessFailureError: If the capture tool cannot be started
        """
        with self._lock:
            if self._state is not RecordingState.DESCRIPTOR_CREATED:
                raise RecordingBusyError(
                    f"Cannot capture {self.file_name} in state {self._state.value}", path=self.raw_path
                )
            self._state = RecordingState.CAPTURING
            try:
                handle = self.toolkit.capture.start(self.raw_path, max_secs)
            except ProcessFailureError:
                self._state = RecordingState.DESCRIPTOR_CREATED
                raise
            job = RecordingJob(self, handle, JobKind.CAPTURE, time_limit=max_secs + grace_secs)
            self._active_job = job

        logger.info(f"Recording {self.file_name} (max {max_secs:g}s)")
        return job

    def normalise_and_trim_audio_file(self) -> RecordingJob:
        """
        Start normalising the raw file into the trimmed path.

        Output goes to a staging file first. The trimmed file is only
        replaced once the run succeeds, so a failed or cancelled run
        leaves any earlier trimmed file and the current state untouched.

        Returns:
            RecordingJob for the normalise run

        Raises:
            RecordingBusyError: If there is no captured audio or another job is running
            ProcessFailureError: If the normalise tool cannot be started
        """
        with self._lock:
            if not self._state.playable:
                raise RecordingBusyError(
                    f"Cannot normalise {self.file_name} in state {self._state.value}", path=self.raw_path
                )
            if self.busy:
                raise RecordingBusyError(f"{self.file_name} is already being processed", path=self.raw_path)
            self.staging_path.unlink(missing_ok=True)
            handle = self.toolkit.normaliser.start(self.raw_path, self.staging_path)
            job = RecordingJob(self, handle, JobKind.NORMALISE)
            self._active_job = job

        logger.debug(f"Normalising {self.raw_path} -> {self.staging_path}")
        return job

    def _complete_job(self, job: RecordingJob, returncode: int, truncated: bool = False) -> None:
        """Settle state after a job's process has exited."""
        with self._lock:
            if job.kind is JobKind.CAPTURE:
                self._complete_capture(job, returncode, truncated)
            else:
                self._complete_normalise(job, returncode)

    def _complete_capture(self, job: RecordingJob, returncode: int, truncated: bool) -> None:
        has_audio = self.raw_path.is_file() and self.raw_path.stat().st_size > 0

        if job.cancelled:
            self.raw_path.unlink(missing_ok=True)
            self._state = RecordingState.DESCRIPTOR_CREATED
            logger.info(f"Capture of {self.file_name} cancelled")
            return

        # A capture stopped at the time limit keeps whatever audio it wrote
        if truncated and has_audio:
            self._state = RecordingState.CAPTURED
            return

        if returncode != 0 or not has_audio:
            self._state = RecordingState.DESCRIPTOR_CREATED
            reason = f"exit code {returncode}" if returncode != 0 else "no audio written"
            raise ProcessFailureError(
                f"Capture of {self.file_name} failed ({reason})",
                command=job.handle.command,
                returncode=returncode,
                stderr=job.handle.stderr.strip() or None,
                path=self.raw_path,
            )

        self._state = RecordingState.CAPTURED
        logger.info(f"Captured {self.raw_path}")

    def _complete_normalise(self, job: RecordingJob, returncode: int) -> None:
        staging = self.staging_path

        if job.cancelled:
            staging.unlink(missing_ok=True)
            logger.info(f"Normalising {self.file_name} cancelled")
            return

        if returncode != 0 or not staging.is_file():
            staging.unlink(missing_ok=True)
            reason = f"exit code {returncode}" if returncode != 0 else "no output written"
            raise ProcessFailureError(
                f"Normalising {self.file_name} failed ({reason})",
                command=job.handle.command,
                returncode=returncode,
                stderr=job.handle.stderr.strip() or None,
                path=self.trimmed_path,
            )

        try:
            os.replace(staging, self.trimmed_path)
        except OSError as e:
            staging.unlink(missing_ok=True)
            raise RecordingIOError(
                f"Could not move normalised audio into {self.trimmed_path}: {e}", path=self.trimmed_path
            ) from e
        self._state = RecordingState.NORMALISED
        logger.info(f"Normalised {self.trimmed_path}")

    # -------------------------------------------------------------------------
    # Deletion
    # -------------------------------------------------------------------------

    def delete_files(self) -> bool:
        """
        Delete the backing files (playable file first, then the other copy).

        Failures are logged, never raised.

        Returns:
            True if the playable file was removed
        """
        primary = self.path
        removed = True
        for target in dict.fromkeys((primary, self.raw_path, self.trimmed_path)):
            try:
                target.unlink()
            except FileNotFoundError:
                if target == primary:
                    logger.warning(f"Could not delete file {target}: not found")
                    removed = False
            except OSError as e:
                logger.warning(f"Could not delete file {target}: {e}")
                if target == primary:
                    removed = False

        with self._lock:
            self._state = RecordingState.DELETED
        return removed
