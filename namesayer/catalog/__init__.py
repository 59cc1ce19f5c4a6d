"""
Name catalog: the registry of names and their recordings.
"""

from .catalog import NameCatalog, normalize_key
from .flags import FlagStore, flag_key

__all__ = ["FlagStore", "NameCatalog", "flag_key", "normalize_key"]
