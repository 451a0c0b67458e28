"""Core components for the OPAL dump extractor."""

from opal_dump.core.dump_header import INSUFFICIENT_DATA, parse_dump_header
from opal_dump.core.durable_writer import write_dump_file
from opal_dump.core.errors import (
    DumpReadError,
    DumpRenameError,
    DumpSyncError,
    DumpWriteError,
    ExtractionError,
    OpalDumpError,
    SetupError,
    WatchError,
)
from opal_dump.core.models import (
    CleanupFailure,
    DrainSummary,
    DumpHeader,
    ExtractionResult,
    PendingDump,
    RetainedFile,
    RetentionReport,
)
from opal_dump.core.retention import enforce_retention
from opal_dump.core.watch import DirectoryWatcher

__all__ = [
    # Errors
    "OpalDumpError",
    "SetupError",
    "ExtractionError",
    "DumpReadError",
    "DumpWriteError",
    "DumpSyncError",
    "DumpRenameError",
    "WatchError",
    # Models
    "CleanupFailure",
    "DrainSummary",
    "DumpHeader",
    "ExtractionResult",
    "PendingDump",
    "RetainedFile",
    "RetentionReport",
    # Operations
    "INSUFFICIENT_DATA",
    "parse_dump_header",
    "enforce_retention",
    "write_dump_file",
    "DirectoryWatcher",
]
