"""
Recording filename scheme.

Database and user recordings share one layout so both sets interoperate:

    se206_<dd-MM-yyyy>_<HH-mm-ss>_<name>.wav
"""

import os
import re
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from ..errors import InvalidNameError

FILENAME_PREFIX = "se206"
FILE_EXTENSION = ".wav"
DATE_FORMAT = "%d-%m-%Y"
TIME_FORMAT = "%H-%M-%S"

# Database files in the wild use unpadded day/month, so digits are loose here
_FILENAME_RE = re.compile(
    rf"^{FILENAME_PREFIX}_(?P<date>\d{{1,2}}-\d{{1,2}}-\d{{4}})_(?P<time>\d{{1,2}}-\d{{1,2}}-\d{{1,2}})_(?P<name>.+)"
    rf"{re.escape(FILE_EXTENSION)}$",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class ParsedFilename:
    """Components recovered from a recording filename."""

    date: str
    time: str
    name: str

    @property
    def timestamp(self) -> datetime | None:
        """Creation time, or None if the date/time components are not a real instant."""
        try:
            return datetime.strptime(f"{self.date} {self.time}", f"{DATE_FORMAT} {TIME_FORMAT}")
        except ValueError:
            return None


def format_timestamp(moment: datetime) -> tuple[str, str]:
    """Split a moment into the (date, time) strings used in filenames."""
    return moment.strftime(DATE_FORMAT), moment.strftime(TIME_FORMAT)


def validate_name(name: str) -> str:
    """
    Check that name text can be embedded in a recording filename.

    Returns:
        The name unchanged

    Raises:
        InvalidNameError: If the name is blank, is a dot path, or holds a
            path separator or NUL
    """
    if not name.strip():
        raise InvalidNameError("Name must not be blank")
    if name in (".", ".."):
        raise InvalidNameError(f"Name must not be {name!r}")
    forbidden = [sep for sep in ("/", "\\", os.sep, os.altsep, "\0") if sep and sep in name]
    if forbidden:
        raise InvalidNameError(f"Name {name!r} contains a path separator or NUL character")
    return name


def build_filename(name: str, date: str, time: str) -> str:
    """Build the canonical recording filename."""
    return f"{FILENAME_PREFIX}_{date}_{time}_{name}{FILE_EXTENSION}"


def parse_filename(filename: str | Path) -> ParsedFilename | None:
    """
    Parse a recording filename.

    Args:
        filename: Bare filename or path

    Returns:
        ParsedFilename, or None if the name does not follow the scheme
    """
    match = _FILENAME_RE.match(Path(filename).name)
    if not match:
        return None
    return ParsedFilename(date=match["date"], time=match["time"], name=match["name"])
