"""
Exceptions raised by the recordings core and its audio collaborators.
"""

from pathlib import Path


class NameSayerError(Exception):
    """Base exception for NameSayer errors."""

    def __init__(self, message: str, path: Path | str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.path = Path(path) if path is not None else None

    def __str__(self) -> str:
        return self.message


class RecordingNotFoundError(NameSayerError):
    """No recordings available to choose from."""

    pass


class RecordingIOError(NameSayerError):
    """Recording file is missing, unreadable, or could not be removed."""

    pass


class RecordingBusyError(NameSayerError):
    """Operation conflicts with the recording's current lifecycle state."""

    pass


class ProcessFailureError(NameSayerError):
    """External capture/normalise/playback process failed to start or exited non-zero."""

    def __init__(
        self,
        message: str,
        command: list[str] | None = None,
        returncode: int | None = None,
        stderr: str | None = None,
        path: Path | str | None = None,
    ) -> None:
        super().__init__(message, path=path)
        self.command = command or []
        self.returncode = returncode
        self.stderr = stderr


class InvalidNameError(NameSayerError):
    """Name text cannot be used in a recording filename."""

    pass


class InvalidRecordingError(NameSayerError):
    """Recording does not belong to the name it was handed to."""

    pass
