"""Error taxonomy for the merge pipeline.

EmptyInputError and BusyError are raised synchronously when an export is
requested. SourceReadError aborts a job before encoding starts.
EncodeError and PersistError are delivered through the job's terminal
callback (or its future).
"""

import enum


class ClipMergeError(Exception):
    """Base class for every error raised by clipmerge."""


class EmptyInputError(ClipMergeError):
    """No sources to merge."""


class DecodeError(ClipMergeError):
    """The decode collaborator could not read a media file."""


class SourceReadError(ClipMergeError):
    """A source's duration or natural size could not be resolved."""

    def __init__(self, path, reason):
        super().__init__(f"Cannot read source {path}: {reason}")
        self.path = path
        self.reason = reason


class EncodeError(ClipMergeError):
    """The encode operation failed. The underlying error is chained."""

    def __init__(self, reason):
        super().__init__(f"Encoding failed: {reason}")
        self.reason = reason


class PersistFailure(enum.Enum):
    IO_ERROR = "io_error"
    PERMISSION_DENIED = "permission_denied"
    UNKNOWN = "unknown"


class PersistError(ClipMergeError):
    """Writing the finished file to its destination failed."""

    def __init__(self, reason: PersistFailure, detail: str | None = None):
        msg = f"Could not save video ({reason.value})"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)
        self.reason = reason
        self.detail = detail


class BusyError(ClipMergeError):
    """An export was requested while another one is still in flight."""
