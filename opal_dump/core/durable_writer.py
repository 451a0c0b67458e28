"""Crash-consistent writes of dump files into the output directory.

Follows the temp file + fsync + rename + directory fsync pattern:

    <output_dir>/<name>.tmp   created exclusively, written, fsynced
    <output_dir>/<name>       appears by atomic rename only

A reader never sees a partial file under the final name. Any failure before
the rename removes the temp file so that re-processing the same dump is not
blocked by a stale exclusive-create collision.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from opal_dump.core.dump_constants import OUTPUT_FILE_MODE, TMP_SUFFIX
from opal_dump.core.errors import (
    DumpRenameError,
    DumpSyncError,
    DumpWriteError,
    describe_os_error,
)

logger = logging.getLogger(__name__)


def temp_path_for(output_dir: Path, final_name: str) -> Path:
    return output_dir / f"{final_name}{TMP_SUFFIX}"


def _discard(tmp_path: Path) -> None:
    try:
        tmp_path.unlink()
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning("Could not remove temporary dump file %s (%s)", tmp_path, describe_os_error(e))


def fsync_directory(directory: Path) -> None:
    """Flush a directory's metadata so a completed rename survives a crash.

    Raises:
        DumpSyncError: If the directory cannot be opened or synced.
    """
    try:
        dir_fd = os.open(directory, os.O_RDONLY | os.O_DIRECTORY)
    except OSError as e:
        raise DumpSyncError.from_os_error(directory, e) from e
    try:
        os.fsync(dir_fd)
    except OSError as e:
        raise DumpSyncError.from_os_error(directory, e) from e
    finally:
        os.close(dir_fd)


def write_dump_file(output_dir: Path, final_name: str, payload: bytes | bytearray) -> Path:
    """Durably write a dump payload under its final name.

    Args:
        output_dir: Directory receiving the dump.
        final_name: Name of the finished file (single path component).
        payload: Full dump contents.

    Returns:
        Path of the finished file.

    Raises:
        DumpWriteError: If the temp file cannot be created or fully written.
        DumpSyncError: If file data or directory metadata cannot be flushed.
        DumpRenameError: If the temp file cannot be renamed into place.
    """
    tmp_path = temp_path_for(output_dir, final_name)
    final_path = output_dir / final_name

    try:
        fd = os.open(tmp_path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, OUTPUT_FILE_MODE)
    except OSError as e:
        raise DumpWriteError.from_os_error(tmp_path, e) from e

    try:
        with os.fdopen(fd, "wb", buffering=0) as f:
            try:
                written = 0
                view = memoryview(payload)
                while written < len(view):
                    n = f.write(view[written:])
                    if not n:
                        break
                    written += n
            except OSError as e:
                raise DumpWriteError.from_os_error(tmp_path, e) from e
            if written != len(payload):
                raise DumpWriteError(
                    tmp_path, f"short write: {written} of {len(payload)} bytes"
                )

            try:
                os.fsync(f.fileno())
            except OSError as e:
                raise DumpSyncError.from_os_error(tmp_path, e) from e
    except DumpWriteError:
        _discard(tmp_path)
        raise
    except OSError as e:
        _discard(tmp_path)
        raise DumpWriteError.from_os_error(tmp_path, e) from e

    try:
        os.rename(tmp_path, final_path)
    except OSError as e:
        _discard(tmp_path)
        raise DumpRenameError(tmp_path, describe_os_error(e), final_path=final_path) from e

    fsync_directory(output_dir)

    logger.debug("Wrote %d bytes to %s", len(payload), final_path)
    return final_path
