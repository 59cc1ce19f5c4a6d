"""
Recordings core: the Recording entity, the Name that owns recordings,
and the shared filename scheme.
"""

from .name import Name
from .naming import (
    DATE_FORMAT,
    FILENAME_PREFIX,
    TIME_FORMAT,
    ParsedFilename,
    build_filename,
    format_timestamp,
    parse_filename,
    validate_name,
)
from .recording import JobKind, Recording, RecordingInfo, RecordingJob, RecordingSource, RecordingState

__all__ = [
    "Name",
    "Recording",
    "RecordingInfo",
    "RecordingJob",
    "RecordingSource",
    "RecordingState",
    "JobKind",
    # Naming
    "FILENAME_PREFIX",
    "DATE_FORMAT",
    "TIME_FORMAT",
    "ParsedFilename",
    "build_filename",
    "format_timestamp",
    "parse_filename",
    "validate_name",
]
