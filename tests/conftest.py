"""Pytest fixtures for OPAL dump extractor tests."""

from __future__ import annotations

import logging
import logging.handlers
import os
from collections.abc import Callable, Generator
from pathlib import Path

import pytest

from opal_dump.config import Settings
from opal_dump.core.dump_constants import (
    DUMP_ACK_FILE,
    DUMP_HDR_FNAME_OFFSET,
    DUMP_HDR_PREFIX_OFFSET,
    DUMP_MAX_FNAME_LEN,
    DUMP_PAYLOAD_FILE,
    DUMP_SYSFS_SUBPATH,
)

# ---------------------------------------------------------------------------
# Payload helpers
# ---------------------------------------------------------------------------


def make_payload(name: bytes, prefix_size: int = 0, body: bytes = b"") -> bytes:
    """Build a dump payload whose header suggests ``name``."""
    header = bytearray(DUMP_HDR_FNAME_OFFSET + DUMP_MAX_FNAME_LEN)
    header[DUMP_HDR_PREFIX_OFFSET : DUMP_HDR_PREFIX_OFFSET + 2] = prefix_size.to_bytes(2, "big")
    field = name[:DUMP_MAX_FNAME_LEN]
    header[DUMP_HDR_FNAME_OFFSET : DUMP_HDR_FNAME_OFFSET + len(field)] = field
    return bytes(header) + body


def add_dump(dump_root: Path, dump_id: str, payload: bytes | None) -> Path:
    """Publish a pending dump directory like firmware does.

    Args:
        dump_root: The fake sysfs dump root.
        dump_id: Directory name of the dump.
        payload: Contents of the ``dump`` file, or None to omit it.

    Returns:
        Path to the dump directory.
    """
    dump_dir = dump_root / dump_id
    dump_dir.mkdir()
    if payload is not None:
        (dump_dir / DUMP_PAYLOAD_FILE).write_bytes(payload)
    (dump_dir / DUMP_ACK_FILE).write_bytes(b"")
    return dump_dir


def set_mtime(path: Path, mtime: float) -> None:
    os.utime(path, (mtime, mtime))


# ---------------------------------------------------------------------------
# Directory fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def sysfs_root(tmp_path: Path) -> Path:
    """Fake sysfs mount point with an empty OPAL dump root."""
    root = tmp_path / "sys"
    (root / DUMP_SYSFS_SUBPATH).mkdir(parents=True)
    return root


@pytest.fixture
def dump_root(sysfs_root: Path) -> Path:
    return sysfs_root / DUMP_SYSFS_SUBPATH


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    out = tmp_path / "dump-out"
    out.mkdir()
    return out


@pytest.fixture
def dump_factory(dump_root: Path) -> Callable[..., Path]:
    """Publish dumps into the fake dump root."""

    def _factory(dump_id: str, name: bytes = b"PLATFRM.0001", body: bytes = b"x" * 64) -> Path:
        return add_dump(dump_root, dump_id, make_payload(name, body=body))

    return _factory


@pytest.fixture
def settings(sysfs_root: Path, output_dir: Path) -> Settings:
    """Settings pointing at the fake sysfs and output directories."""
    return Settings(sysfs_path=sysfs_root, output_dir=output_dir, syslog=False)


@pytest.fixture
def restore_root_logging() -> Generator[None, None, None]:
    """Drop handlers installed by configure_logging and restore the root level.

    Exact type checks leave pytest's own capture handlers alone.
    """
    root = logging.getLogger()
    level = root.level
    yield
    installed = (logging.StreamHandler, logging.handlers.SysLogHandler, logging.NullHandler)
    for handler in root.handlers[:]:
        if type(handler) in installed:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)
