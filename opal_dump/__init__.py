"""OPAL Dump Extractor - durable extraction and retention of platform dumps."""

__version__ = "0.1.0"

# Re-export core components for convenience
from opal_dump.config import Settings, load_settings
from opal_dump.core import (
    DrainSummary,
    DumpHeader,
    # Errors
    ExtractionError,
    ExtractionResult,
    OpalDumpError,
    SetupError,
    WatchError,
    enforce_retention,
    parse_dump_header,
    write_dump_file,
)
from opal_dump.services import DumpExtractor, acknowledge_dump, process_dump

__all__ = [
    "__version__",
    # Configuration
    "Settings",
    "load_settings",
    # Errors
    "OpalDumpError",
    "SetupError",
    "ExtractionError",
    "WatchError",
    # Models
    "DrainSummary",
    "DumpHeader",
    "ExtractionResult",
    # Operations
    "parse_dump_header",
    "enforce_retention",
    "write_dump_file",
    "process_dump",
    "acknowledge_dump",
    "DumpExtractor",
]
