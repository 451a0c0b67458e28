"""Dump layout and retention constants (hardcoded, not configurable)."""

from __future__ import annotations

DEFAULT_SYSFS_PATH = "/sys"
DUMP_SYSFS_SUBPATH = "firmware/opal/dump"
DEFAULT_OUTPUT_DIR = "/var/log/dump"

# Retention policy: default maximum dumps of each type
DEFAULT_MAX_DUMPS = 4
DUMP_TYPE_LEN = 7

DUMP_HDR_PREFIX_OFFSET = 0x16  # Prefix size in dump header
DUMP_HDR_FNAME_OFFSET = 0x18  # Suggested filename in dump header
DUMP_MAX_FNAME_LEN = 48  # Including .PARTIAL
PARTIAL_DUMP_NAME = "platform.dumpid.PARTIAL"

DUMP_PAYLOAD_FILE = "dump"
DUMP_ACK_FILE = "acknowledge"
DUMP_ACK_TOKEN = b"ack\n"

TMP_SUFFIX = ".tmp"
OUTPUT_FILE_MODE = 0o440
OUTPUT_DIR_MODE = 0o760
