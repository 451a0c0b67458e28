"""Tests for the fixed-offset dump header decoder."""

from __future__ import annotations

import pytest

from opal_dump.core.dump_constants import (
    DUMP_HDR_FNAME_OFFSET,
    DUMP_MAX_FNAME_LEN,
    PARTIAL_DUMP_NAME,
)
from opal_dump.core.dump_header import (
    INSUFFICIENT_DATA,
    decode_name_field,
    decode_prefix_size,
    is_safe_filename,
    parse_dump_header,
)
from tests.conftest import make_payload

FULL_HEADER_LEN = DUMP_HDR_FNAME_OFFSET + DUMP_MAX_FNAME_LEN


class TestPrefixSize:
    """Tests for the big-endian prefix size field at 0x16."""

    def test_big_endian(self) -> None:
        payload = bytearray(0x18)
        payload[0x16] = 0x01
        payload[0x17] = 0x02
        assert decode_prefix_size(payload) == 0x0102

    def test_too_short(self) -> None:
        assert decode_prefix_size(bytes(0x17)) == INSUFFICIENT_DATA

    def test_default_kept_when_short(self) -> None:
        header = parse_dump_header(bytes(0x17), default_prefix_size=99)
        assert header.prefix_size == 99

    def test_parsed_even_when_name_is_partial(self) -> None:
        payload = bytearray(0x18)
        payload[0x16:0x18] = (512).to_bytes(2, "big")
        header = parse_dump_header(payload, default_prefix_size=7)
        assert header.prefix_size == 512
        assert header.suggested_name == PARTIAL_DUMP_NAME


class TestSuggestedName:
    """Tests for the suggested filename field at 0x18."""

    @pytest.mark.parametrize("length", [0, 1, 0x16, 0x18, FULL_HEADER_LEN - 1])
    def test_short_payload_gets_placeholder(self, length: int) -> None:
        header = parse_dump_header(b"A" * length)
        assert header.suggested_name == PARTIAL_DUMP_NAME
        assert header.complete is False
        assert len(header.suggested_name.encode()) < DUMP_MAX_FNAME_LEN

    def test_exact_length_payload(self) -> None:
        payload = make_payload(b"foo.bar\x00")
        assert len(payload) == FULL_HEADER_LEN
        header = parse_dump_header(payload)
        assert header.suggested_name == "foo.bar"
        assert header.complete is True

    def test_stops_at_first_terminator(self) -> None:
        payload = make_payload(b"PLATFRM.abc\x00junk")
        assert parse_dump_header(payload).suggested_name == "PLATFRM.abc"

    def test_unterminated_field_truncated_to_capacity(self) -> None:
        payload = make_payload(b"B" * DUMP_MAX_FNAME_LEN)
        name = parse_dump_header(payload).suggested_name
        assert name == "B" * (DUMP_MAX_FNAME_LEN - 1)

    def test_bytes_after_field_ignored(self) -> None:
        payload = make_payload(b"SYSDUMP.1", body=b"\xff" * 4096)
        assert parse_dump_header(payload).suggested_name == "SYSDUMP.1"

    def test_decode_name_field_insufficient(self) -> None:
        assert decode_name_field(bytes(FULL_HEADER_LEN - 1)) == INSUFFICIENT_DATA

    def test_decode_name_field_raw(self) -> None:
        assert decode_name_field(make_payload(b"abc")) == b"abc"

    @pytest.mark.parametrize("raw", [b"", b".", b"..", b"../etc/passwd", b"a/b"])
    def test_unusable_name_gets_placeholder(self, raw: bytes) -> None:
        header = parse_dump_header(make_payload(raw))
        assert header.suggested_name == PARTIAL_DUMP_NAME
        assert header.complete is False

    def test_type_code(self) -> None:
        header = parse_dump_header(make_payload(b"PLATFRM.0001.xyz"))
        assert header.type_code == "PLATFRM"


class TestIsSafeFilename:
    """Tests for is_safe_filename."""

    @pytest.mark.parametrize("name", ["foo.bar", PARTIAL_DUMP_NAME, ".hidden"])
    def test_accepts(self, name: str) -> None:
        assert is_safe_filename(name) is True

    @pytest.mark.parametrize("name", ["", ".", "..", "a/b", "a\x00b"])
    def test_rejects(self, name: str) -> None:
        assert is_safe_filename(name) is False
