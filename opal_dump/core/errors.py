"""Custom exceptions for the OPAL dump extractor."""

from __future__ import annotations

import os
from pathlib import Path


def describe_os_error(error: OSError) -> str:
    """Render an OSError as ``errno:strerror`` for log messages.

    Args:
        error: The underlying I/O error.

    Returns:
        Short reason string, e.g. ``"28:No space left on device"``.
    """
    if error.errno is None:
        return str(error)
    return f"{error.errno}:{error.strerror or os.strerror(error.errno)}"


class OpalDumpError(Exception):
    """Base exception for all dump extractor errors."""

    pass


class SetupError(OpalDumpError):
    """Raised when the dump root or output directory is unusable.

    Setup errors are fatal: the process exits with a failure status.
    """

    def __init__(self, message: str, path: str | Path, reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"{message}: {path} ({reason})")


class ExtractionError(OpalDumpError):
    """Raised when a single dump cannot be extracted.

    Only that dump is abandoned; the drain loop continues with the next one.
    """

    action = "extract platform dump"

    def __init__(self, path: str | Path, reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Failed to {self.action}: {path} ({reason})")

    @classmethod
    def from_os_error(cls, path: str | Path, error: OSError) -> ExtractionError:
        return cls(path, describe_os_error(error))


class DumpReadError(ExtractionError):
    """Raised when the dump payload cannot be read in full."""

    action = "read platform dump"


class DumpWriteError(ExtractionError):
    """Raised when the temporary output file cannot be created or written."""

    action = "write platform dump"


class DumpSyncError(DumpWriteError):
    """Raised when flushing the output file to stable storage fails."""

    action = "sync platform dump"


class DumpRenameError(DumpWriteError):
    """Raised when the temporary file cannot be renamed into place."""

    action = "rename platform dump"

    def __init__(self, path: str | Path, reason: str, final_path: str | Path | None = None) -> None:
        self.final_path = Path(final_path) if final_path is not None else None
        super().__init__(path, reason)


class WatchError(OpalDumpError):
    """Raised when waiting for a new dump fails."""

    def __init__(self, path: str | Path, reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Failed waiting for platform dump: {path} ({reason})")
