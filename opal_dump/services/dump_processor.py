"""Extraction of a single pending dump and its acknowledgment.

Each dump directory published by firmware looks like:

    <dump root>/<dump id>/
        dump         # raw payload, read-only
        acknowledge  # write-only control file

``process_dump`` copies the payload into the output directory;
``acknowledge_dump`` tells firmware the dump may be released. The two
outcomes are independent: acknowledgment is attempted even when extraction
failed.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from opal_dump.core.dump_constants import DUMP_ACK_FILE, DUMP_ACK_TOKEN, DUMP_PAYLOAD_FILE
from opal_dump.core.dump_header import parse_dump_header
from opal_dump.core.durable_writer import write_dump_file
from opal_dump.core.errors import DumpReadError, ExtractionError, describe_os_error
from opal_dump.core.models import ExtractionResult
from opal_dump.core.retention import enforce_retention

logger = logging.getLogger(__name__)


def read_dump_payload(dump_dir: Path) -> bytearray:
    """Read the full dump payload.

    The buffer is sized from stat() and filled until complete; short reads
    continue into the remaining region.

    Args:
        dump_dir: Pending dump directory.

    Returns:
        The raw payload.

    Raises:
        DumpReadError: If the payload cannot be stat'ed, opened or read, or
            ends before the size stat() reported.
    """
    dump_path = dump_dir / DUMP_PAYLOAD_FILE
    try:
        size = dump_path.stat().st_size
    except OSError as e:
        raise DumpReadError.from_os_error(dump_path, e) from e

    buf = bytearray(size)
    view = memoryview(buf)
    filled = 0
    try:
        with open(dump_path, "rb", buffering=0) as f:
            while filled < size:
                n = f.readinto(view[filled:])
                if not n:
                    raise DumpReadError(
                        dump_path, f"unexpected end of file after {filled} of {size} bytes"
                    )
                filled += n
    except OSError as e:
        raise DumpReadError.from_os_error(dump_path, e) from e
    return buf


def process_dump(dump_dir: Path, output_dir: Path, max_dumps: int) -> ExtractionResult:
    """Extract one pending dump into the output directory.

    1. Read the payload
    2. Parse the header for the suggested filename
    3. Enforce retention for the filename's type code
    4. Durably write the payload under the suggested filename

    Args:
        dump_dir: Pending dump directory.
        output_dir: Directory receiving the dump.
        max_dumps: Retention cap per dump type.

    Returns:
        ExtractionResult; errors are logged and reported, never raised.
    """
    try:
        payload = read_dump_payload(dump_dir)
        header = parse_dump_header(payload)
        logger.debug(
            "Dump %s: %d bytes, name %s, prefix size %d",
            dump_dir.name,
            len(payload),
            header.suggested_name,
            header.prefix_size,
        )

        # Cleanup failures are logged by the retention manager and do not
        # affect this dump's outcome.
        enforce_retention(output_dir, header.suggested_name, max_dumps)

        output_path = write_dump_file(output_dir, header.suggested_name, payload)
    except ExtractionError as e:
        logger.error("%s", e)
        return ExtractionResult(dump_dir=dump_dir, status="error", error=str(e))

    logger.info("New platform dump available. File: %s", output_path)
    return ExtractionResult(dump_dir=dump_dir, status="extracted", output_path=output_path)


def acknowledge_dump(dump_dir: Path) -> bool:
    """Release a dump by writing the ack token to its control file.

    Best effort: failures are logged and reported as False.

    Args:
        dump_dir: Pending dump directory.

    Returns:
        True if the token was written in full.
    """
    ack_path = dump_dir / DUMP_ACK_FILE
    try:
        fd = os.open(ack_path, os.O_WRONLY)
    except OSError as e:
        logger.error("Failed to acknowledge platform dump: %s (%s)", ack_path, describe_os_error(e))
        return False

    try:
        written = os.write(fd, DUMP_ACK_TOKEN)
    except OSError as e:
        logger.error("Failed to acknowledge platform dump: %s (%s)", ack_path, describe_os_error(e))
        return False
    finally:
        os.close(fd)

    if written != len(DUMP_ACK_TOKEN):
        logger.error(
            "Failed to acknowledge platform dump: %s (short write: %d bytes)", ack_path, written
        )
        return False

    logger.debug("Acknowledged platform dump %s", dump_dir.name)
    return True
