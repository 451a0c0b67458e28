"""Data model for dump extraction. Pure data, no I/O."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from opal_dump.core.dump_constants import DUMP_TYPE_LEN


def type_code(name: str) -> str:
    """Return the retention group of a dump filename."""
    return name[:DUMP_TYPE_LEN]


@dataclass(frozen=True)
class DumpHeader:
    """Fields parsed from the fixed-offset dump header."""

    prefix_size: int
    suggested_name: str
    complete: bool = True

    @property
    def type_code(self) -> str:
        return type_code(self.suggested_name)


@dataclass(frozen=True)
class PendingDump:
    """One unprocessed dump directory under the dump root."""

    path: Path

    @property
    def name(self) -> str:
        return self.path.name


@dataclass(frozen=True)
class RetainedFile:
    """A file already present in the output directory."""

    name: str
    mtime: float


@dataclass(frozen=True)
class CleanupFailure:
    """A best-effort deletion that did not succeed."""

    path: Path
    reason: str


@dataclass
class RetentionReport:
    """Outcome of one retention pass."""

    duplicate_removed: bool = False
    evicted: list[str] = field(default_factory=list)
    failures: list[CleanupFailure] = field(default_factory=list)


@dataclass
class ExtractionResult:
    """Result of extracting a single dump."""

    dump_dir: Path
    status: str  # "extracted" or "error"
    output_path: Path | None = None
    error: str | None = None
    acknowledged: bool | None = None  # None when acknowledgment is disabled

    @property
    def ok(self) -> bool:
        return self.status == "extracted"


@dataclass
class DrainSummary:
    """Aggregate status of one scan-and-drain cycle.

    Starts as "no dumps found". Each extraction bumps ``extracted``; any
    failure sets ``failed``, which later successes never clear.
    """

    dumps_found: int = 0
    extracted: int = 0
    failed: bool = False
    results: list[ExtractionResult] = field(default_factory=list)

    def record(self, result: ExtractionResult) -> None:
        self.dumps_found += 1
        self.results.append(result)
        if result.ok:
            self.extracted += 1
        else:
            self.failed = True

    @property
    def exit_code(self) -> int:
        return 1 if self.failed else 0
