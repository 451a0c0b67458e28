"""Decoder for the fixed-offset OPAL dump header. Pure data, no I/O.

Layout (byte offsets into the raw payload):

    0x16  2 bytes   prefix size, big-endian unsigned
    0x18  48 bytes  suggested filename, NUL padded

A payload too short to hold the whole name field gets the
``platform.dumpid.PARTIAL`` placeholder instead.
"""

from __future__ import annotations

import logging
import os
import struct
from typing import Final, Literal

from opal_dump.core.dump_constants import (
    DUMP_HDR_FNAME_OFFSET,
    DUMP_HDR_PREFIX_OFFSET,
    DUMP_MAX_FNAME_LEN,
    PARTIAL_DUMP_NAME,
)
from opal_dump.core.models import DumpHeader

logger = logging.getLogger(__name__)

_PREFIX_SIZE = struct.Struct(">H")

INSUFFICIENT_DATA: Final = "insufficient-data"
InsufficientData = Literal["insufficient-data"]


def decode_prefix_size(payload: bytes | bytearray | memoryview) -> int | InsufficientData:
    """Read the big-endian prefix size field.

    Args:
        payload: Raw dump bytes.

    Returns:
        The 16-bit prefix size, or INSUFFICIENT_DATA if the payload ends
        before the field does.
    """
    if len(payload) < DUMP_HDR_PREFIX_OFFSET + _PREFIX_SIZE.size:
        return INSUFFICIENT_DATA
    (value,) = _PREFIX_SIZE.unpack_from(payload, DUMP_HDR_PREFIX_OFFSET)
    return int(value)


def decode_name_field(
    payload: bytes | bytearray | memoryview,
    capacity: int = DUMP_MAX_FNAME_LEN,
) -> bytes | InsufficientData:
    """Read the suggested filename field.

    The field is copied up to its first NUL and truncated to ``capacity - 1``
    bytes, so the name plus a terminator fits the 48-byte budget.

    Args:
        payload: Raw dump bytes.
        capacity: Output name capacity in bytes, terminator included.

    Returns:
        The raw name bytes (possibly empty), or INSUFFICIENT_DATA if the
        payload cannot hold the whole 48-byte field.
    """
    if len(payload) < DUMP_HDR_FNAME_OFFSET + DUMP_MAX_FNAME_LEN:
        return INSUFFICIENT_DATA
    field = bytes(payload[DUMP_HDR_FNAME_OFFSET : DUMP_HDR_FNAME_OFFSET + DUMP_MAX_FNAME_LEN])
    field = field.split(b"\x00", 1)[0]
    return field[: capacity - 1]


def is_safe_filename(name: str) -> bool:
    """Check that a name is usable as a single path component."""
    if not name or name in (".", ".."):
        return False
    return "/" not in name and "\x00" not in name


def parse_dump_header(
    payload: bytes | bytearray | memoryview,
    default_prefix_size: int = 0,
) -> DumpHeader:
    """Parse the dump header into a DumpHeader.

    Args:
        payload: Raw dump bytes.
        default_prefix_size: Returned as prefix_size when the payload is too
            short to contain the field.

    Returns:
        DumpHeader whose suggested_name is never empty and always fits the
        48-byte name budget.
    """
    prefix = decode_prefix_size(payload)
    prefix_size = default_prefix_size if prefix == INSUFFICIENT_DATA else prefix

    raw_name = decode_name_field(payload)
    if isinstance(raw_name, str):  # INSUFFICIENT_DATA
        logger.debug("Dump header truncated (%d bytes), using %s", len(payload), PARTIAL_DUMP_NAME)
        return DumpHeader(prefix_size=prefix_size, suggested_name=PARTIAL_DUMP_NAME, complete=False)

    name = os.fsdecode(raw_name)
    if not is_safe_filename(name):
        logger.warning("Dump header names an unusable file %r, using %s", name, PARTIAL_DUMP_NAME)
        return DumpHeader(prefix_size=prefix_size, suggested_name=PARTIAL_DUMP_NAME, complete=False)

    return DumpHeader(prefix_size=prefix_size, suggested_name=name)
