"""Blocking wait for new dumps on the dump root directory.

The kernel flags the dump root with an exceptional condition when a dump
is published. The wakeup carries no payload, so callers always re-scan the
whole directory afterwards.
"""

from __future__ import annotations

import logging
import os
import select
from pathlib import Path

from opal_dump.core.errors import WatchError, describe_os_error

logger = logging.getLogger(__name__)


class DirectoryWatcher:
    """Wait on a directory descriptor's exceptional condition, no timeout."""

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def wait(self) -> None:
        """Block until the directory signals.

        Raises:
            WatchError: If the directory cannot be opened or the wait fails.
        """
        try:
            fd = os.open(self._path, os.O_RDONLY | os.O_DIRECTORY)
        except OSError as e:
            raise WatchError(self._path, describe_os_error(e)) from e
        try:
            logger.debug("Waiting for platform dump in %s", self._path)
            select.select([], [], [fd])
        except OSError as e:
            raise WatchError(self._path, describe_os_error(e)) from e
        finally:
            os.close(fd)
