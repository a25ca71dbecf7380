"""IO module for reading transcripts and writing tiles."""

from .reader import REQUIRED_COLUMNS, MissingColumnsError, read_transcripts
from .writer import TileWriter

__all__ = ["REQUIRED_COLUMNS", "MissingColumnsError", "read_transcripts", "TileWriter"]
