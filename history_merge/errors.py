"""Exception hierarchy for loading, merging, and reconciling history logs."""

from __future__ import annotations


class HistoryMergeError(Exception):
    """Base class for every failure raised by history_merge.

    ``path`` names the file or directory the failure concerns, when known.
    """

    def __init__(self, message: str, path: str | None = None):
        self.path = path
        if path:
            message = f"{path}: {message}"
        super().__init__(message)


class LogIOError(HistoryMergeError):
    """Raised when opening, reading, writing, or listing a path fails."""


class RecordError(HistoryMergeError):
    """Base for record-level parse failures."""


class MalformedRecordError(RecordError):
    """Raised when a record header cannot be parsed."""


class TruncatedRecordError(RecordError):
    """Raised when input ends before a record is complete."""


class StructureMismatchError(HistoryMergeError):
    """Raised when the top-level sources are not both files or both directories."""
