"""Per-type retention of extracted dumps in the output directory.

Invoked right before a new dump is written. Files sharing the new dump's
type code (its first 7 characters) are walked newest first; once the running
count reaches ``max_dumps`` every older match is deleted, which leaves room
for exactly one more file. Deletion failures are reported and otherwise
ignored: losing an old dump is never a reason to refuse a new one.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from opal_dump.core.dump_constants import TMP_SUFFIX
from opal_dump.core.errors import describe_os_error
from opal_dump.core.models import CleanupFailure, RetainedFile, RetentionReport, type_code

logger = logging.getLogger(__name__)


def _remove(path: Path, report: RetentionReport) -> bool:
    try:
        path.unlink()
        return True
    except OSError as e:
        reason = describe_os_error(e)
        logger.warning(
            'Could not delete file "%s" (%s) to make room for incoming platform dump. '
            "The new dump will be saved anyways.",
            path,
            reason,
        )
        report.failures.append(CleanupFailure(path=path, reason=reason))
        return False


def remove_duplicate(output_dir: Path, final_name: str, report: RetentionReport) -> None:
    """Delete an existing file carrying exactly the incoming dump's name."""
    path = output_dir / final_name
    if not os.path.lexists(path):
        return
    if _remove(path, report):
        report.duplicate_removed = True
        logger.info("Replaced previously extracted dump %s", path)


def list_retained(output_dir: Path) -> list[RetainedFile]:
    """List finished dump files with their modification times, newest first.

    Hidden entries, in-flight ``.tmp`` files and anything that is not a
    regular file are left out. Entries that vanish or cannot be stat'ed
    while listing are skipped. Equal timestamps keep directory listing order.

    Args:
        output_dir: Output directory to scan.

    Returns:
        Retained files sorted by mtime, newest first.
    """
    files: list[RetainedFile] = []
    with os.scandir(output_dir) as it:
        for entry in it:
            if entry.name.startswith(".") or entry.name.endswith(TMP_SUFFIX):
                continue
            try:
                if not entry.is_file(follow_symlinks=False):
                    continue
                files.append(RetainedFile(name=entry.name, mtime=entry.stat().st_mtime))
            except OSError as e:
                logger.debug("Skipping %s during retention scan: %s", entry.path, e)
    return sorted(files, key=lambda f: f.mtime, reverse=True)


def enforce_retention(output_dir: Path, final_name: str, max_dumps: int) -> RetentionReport:
    """Make room for a new dump named ``final_name``.

    Args:
        output_dir: Output directory holding previously extracted dumps.
        final_name: Name the incoming dump will be written under.
        max_dumps: Maximum number of dumps of one type to keep, counting the
            incoming one.

    Returns:
        RetentionReport listing evictions and best-effort failures. It never
        raises for deletion problems.
    """
    report = RetentionReport()
    remove_duplicate(output_dir, final_name, report)

    try:
        retained = list_retained(output_dir)
    except OSError as e:
        logger.warning("Could not scan %s for old dumps (%s)", output_dir, describe_os_error(e))
        report.failures.append(CleanupFailure(path=output_dir, reason=describe_os_error(e)))
        return report

    wanted = type_code(final_name)
    count = 0
    for retained_file in retained:
        if type_code(retained_file.name) != wanted:
            continue
        count += 1
        if count < max_dumps:
            continue
        if _remove(output_dir / retained_file.name, report):
            report.evicted.append(retained_file.name)
            logger.info("Evicted old platform dump %s", retained_file.name)

    return report
