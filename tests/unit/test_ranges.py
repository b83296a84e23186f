"""
Unit tests for Range header parsing.
"""

import pytest

from mediaserver.errors import RangeNotSatisfiable
from mediaserver.handlers.ranges import ByteRange, parse_range


SIZE = 1000


class TestParseRange:

    def test_no_header(self):
        assert parse_range(None, SIZE) is None
        assert parse_range("", SIZE) is None

    def test_closed_range(self):
        byte_range = parse_range("bytes=100-199", SIZE)

        assert byte_range == ByteRange(start=100, end=199, size=SIZE)
        assert byte_range.length == 100
        assert byte_range.content_range == "bytes 100-199/1000"

    def test_open_ended_range(self):
        byte_range = parse_range("bytes=900-", SIZE)

        assert (byte_range.start, byte_range.end) == (900, 999)
        assert byte_range.length == 100

    def test_whole_file_as_range(self):
        byte_range = parse_range("bytes=0-", SIZE)
        assert byte_range.content_range == "bytes 0-999/1000"

    def test_single_byte(self):
        byte_range = parse_range("bytes=999-999", SIZE)
        assert byte_range.length == 1

    def test_end_past_eof_is_clamped(self):
        byte_range = parse_range("bytes=500-5000", SIZE)

        assert byte_range.end == 999
        assert byte_range.content_range == "bytes 500-999/1000"

    def test_unit_is_case_insensitive(self):
        assert parse_range("Bytes=0-9", SIZE).length == 10

    @pytest.mark.parametrize("header", [
        "bytes=-500",          # suffix ranges are not supported
        "items=0-10",
        "bytes=abc-",
        "bytes 0-10",
        "garbage",
    ])
    def test_unrecognized_header_is_ignored(self, header):
        assert parse_range(header, SIZE) is None

    @pytest.mark.parametrize("header", [
        "bytes=1000-",
        "bytes=1000-1000",
        "bytes=5000-6000",
        "bytes=200-100",
    ])
    def test_unsatisfiable(self, header):
        with pytest.raises(RangeNotSatisfiable) as exc_info:
            parse_range(header, SIZE)

        assert exc_info.value.content_range == "bytes */1000"

    def test_multiple_ranges_are_unsatisfiable(self):
        with pytest.raises(RangeNotSatisfiable):
            parse_range("bytes=0-10,20-30", SIZE)

    def test_any_range_on_empty_file(self):
        with pytest.raises(RangeNotSatisfiable) as exc_info:
            parse_range("bytes=0-", 0)

        assert exc_info.value.content_range == "bytes */0"
