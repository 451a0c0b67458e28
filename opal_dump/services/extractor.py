"""Scan-and-drain loop and optional wait loop for pending platform dumps.

Lifecycle:
- prepare(): verify the dump root, create the output directory, clear
  orphaned temp files left by a crash
- drain(): process and acknowledge every pending dump once
- run(): drain, then in wait mode block on the dump root and re-drain on
  every wakeup, forever
"""

from __future__ import annotations

import errno
import logging
import os
import time
from collections.abc import Iterator
from pathlib import Path

from opal_dump.config import Settings
from opal_dump.core.dump_constants import OUTPUT_DIR_MODE, TMP_SUFFIX
from opal_dump.core.errors import SetupError, describe_os_error
from opal_dump.core.models import DrainSummary, PendingDump
from opal_dump.core.watch import DirectoryWatcher
from opal_dump.services.dump_processor import acknowledge_dump, process_dump

logger = logging.getLogger(__name__)


class DumpExtractor:
    """Drains pending dumps from the dump root into the output directory.

    A single instance is assumed to own the output directory; nothing
    coordinates concurrent instances.
    """

    def __init__(self, settings: Settings, watcher: DirectoryWatcher | None = None) -> None:
        """Initialize the extractor.

        Args:
            settings: Frozen run configuration.
            watcher: Waits for new dumps in wait mode. Defaults to a
                DirectoryWatcher on the dump root.
        """
        self._settings = settings
        self._dump_root = settings.dump_root
        self._output_dir = settings.output_dir
        self._watcher = watcher or DirectoryWatcher(self._dump_root)

        # Statistics across drain cycles
        self._cycles = 0
        self._dumps_extracted = 0
        self._dumps_failed = 0

    @property
    def dump_root(self) -> Path:
        return self._dump_root

    @property
    def output_dir(self) -> Path:
        return self._output_dir

    def get_stats(self) -> dict[str, int]:
        """Get extraction statistics across all drain cycles."""
        return {
            "cycles": self._cycles,
            "dumps_extracted": self._dumps_extracted,
            "dumps_failed": self._dumps_failed,
        }

    # =========================================================================
    # Setup
    # =========================================================================

    def prepare(self) -> None:
        """Check the dump root and make sure the output directory is usable.

        Raises:
            SetupError: If the dump root is not readable or the output
                directory is missing and cannot be created.
        """
        if not os.access(self._dump_root, os.R_OK):
            reason = "not readable" if self._dump_root.exists() else os.strerror(errno.ENOENT)
            raise SetupError("Error accessing sysfs", self._dump_root, reason)

        if not os.access(self._output_dir, os.W_OK):
            if self._output_dir.exists():
                raise SetupError(
                    "Error accessing output dir", self._output_dir, os.strerror(errno.EACCES)
                )
            try:
                self._output_dir.mkdir(mode=OUTPUT_DIR_MODE)
            except OSError as e:
                raise SetupError(
                    "Error creating output directory", self._output_dir, describe_os_error(e)
                ) from e
            logger.info("Created output directory %s", self._output_dir)

        self.recover_orphans()

    def recover_orphans(self) -> int:
        """Delete temp files left in the output directory by a crashed run.

        Returns:
            Number of temp files removed.
        """
        removed = 0
        try:
            entries = list(os.scandir(self._output_dir))
        except OSError as e:
            logger.warning(
                "Could not scan %s for orphaned temp files (%s)",
                self._output_dir,
                describe_os_error(e),
            )
            return 0

        for entry in entries:
            if not entry.name.endswith(TMP_SUFFIX) or entry.name.startswith("."):
                continue
            try:
                if not entry.is_file(follow_symlinks=False):
                    continue
                os.unlink(entry.path)
                removed += 1
                logger.warning("Deleted orphaned temp file from interrupted write: %s", entry.path)
            except OSError as e:
                logger.warning(
                    "Failed to delete orphaned temp file %s (%s)", entry.path, describe_os_error(e)
                )
        return removed

    # =========================================================================
    # Scan and drain
    # =========================================================================

    def pending_dumps(self) -> Iterator[PendingDump]:
        """Yield dump directories under the dump root in name order.

        Hidden entries and non-directories are skipped. The entry type comes
        from the directory listing, with a stat() fallback when the listing
        does not report it; entries that cannot be stat'ed are skipped.

        Raises:
            SetupError: If the dump root cannot be listed.
        """
        try:
            with os.scandir(self._dump_root) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as e:
            raise SetupError(
                "Error accessing sysfs", self._dump_root, describe_os_error(e)
            ) from e

        for entry in entries:
            if entry.name.startswith("."):
                continue
            try:
                is_dir = entry.is_dir()
            except OSError:
                continue
            if is_dir:
                yield PendingDump(path=Path(entry.path))

    def drain(self) -> DrainSummary:
        """Process every pending dump once.

        Returns:
            DrainSummary: dumps found, dumps extracted and a sticky failure
            flag.

        Raises:
            SetupError: If the dump root cannot be listed.
        """
        summary = DrainSummary()
        for dump in self.pending_dumps():
            result = process_dump(dump.path, self._output_dir, self._settings.max_dumps)
            if self._settings.ack_dumps:
                result.acknowledged = acknowledge_dump(dump.path)
            summary.record(result)

        self._cycles += 1
        self._dumps_extracted += summary.extracted
        self._dumps_failed += summary.dumps_found - summary.extracted

        if summary.dumps_found == 0:
            logger.debug("No platform dumps pending in %s", self._dump_root)
        else:
            logger.info(
                "Drained %d platform dump(s): %d extracted%s",
                summary.dumps_found,
                summary.extracted,
                ", with failures" if summary.failed else "",
            )
        return summary

    # =========================================================================
    # Wait loop
    # =========================================================================

    def run(self) -> DrainSummary:
        """Drain once and, in wait mode, keep draining on every wakeup.

        In wait mode this only returns by raising.

        Returns:
            Summary of the single drain cycle when wait mode is off.

        Raises:
            SetupError: If the dump root cannot be listed.
            WatchError: If waiting on the dump root fails.
        """
        summary = self.drain()
        if not self._settings.wait:
            return summary

        logger.info("Waiting for platform dumps in %s", self._dump_root)
        while True:
            self._watcher.wait()
            started = time.monotonic()
            self.drain()
            logger.debug("Drain cycle %d took %.3fs", self._cycles, time.monotonic() - started)
