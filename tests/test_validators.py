"""Cache validator and byte range tests."""

import pytest

from media_api.delivery import (
    ByteRange,
    RangeNotSatisfiableError,
    entity_tag,
    http_date,
    is_not_modified,
    parse_range,
    range_applies,
)

ETAG = entity_tag(1_700_000_000_123_456_789, 44)
MTIME = 1_700_000_000.123
LAST_MODIFIED = http_date(MTIME)


def test_entity_tag_is_quoted_and_tracks_changes() -> None:
    """Tags are strong, quoted, and differ when size or time changes."""
    assert ETAG.startswith('"') and ETAG.endswith('"')
    assert entity_tag(1, 44) != entity_tag(1, 45)
    assert entity_tag(1, 44) != entity_tag(2, 44)


def test_http_date_is_gmt() -> None:
    """Dates use the IMF-fixdate form."""
    assert http_date(0) == "Thu, 01 Jan 1970 00:00:00 GMT"


@pytest.mark.parametrize(
    ("headers", "expected"),
    [
        ({}, False),
        ({"if-none-match": ETAG}, True),
        ({"if-none-match": f"W/{ETAG}"}, True),
        ({"if-none-match": f'"other", {ETAG}'}, True),
        ({"if-none-match": "*"}, True),
        ({"if-none-match": '"other"'}, False),
        ({"if-modified-since": LAST_MODIFIED}, True),
        ({"if-modified-since": http_date(MTIME - 60)}, False),
        ({"if-modified-since": "not a date"}, False),
        ({"if-none-match": '"other"', "if-modified-since": LAST_MODIFIED}, False),
    ],
)
def test_is_not_modified(headers: dict[str, str], expected: bool) -> None:
    """Entity tags win over dates and unparseable dates are ignored."""
    assert is_not_modified(headers, ETAG, MTIME) is expected


@pytest.mark.parametrize(
    ("headers", "expected"),
    [
        ({}, True),
        ({"if-range": ETAG}, True),
        ({"if-range": LAST_MODIFIED}, True),
        ({"if-range": '"stale"'}, False),
    ],
)
def test_range_applies(headers: dict[str, str], expected: bool) -> None:
    """A Range is only honored while If-Range still matches."""
    assert range_applies(headers, ETAG, LAST_MODIFIED) is expected


@pytest.mark.parametrize(
    ("header", "expected"),
    [
        ("bytes=0-3", ByteRange(0, 3)),
        ("bytes=10-", ByteRange(10, 43)),
        ("bytes=-4", ByteRange(40, 43)),
        ("bytes=-100", ByteRange(0, 43)),
        ("bytes=40-100", ByteRange(40, 43)),
        ("BYTES = 1 - 2", ByteRange(1, 2)),
    ],
)
def test_parse_single_range(header: str, expected: ByteRange) -> None:
    """Open and suffix ranges are clamped to the file."""
    assert parse_range(header, 44) == expected


@pytest.mark.parametrize("header", [None, "", "bytes=", "bytes=-", "bytes=5-2", "bytes=0-1,4-5", "items=0-3"])
def test_unusable_range_is_ignored(header: str | None) -> None:
    """Malformed, reversed, multi and foreign-unit ranges mean the full file."""
    assert parse_range(header, 44) is None


@pytest.mark.parametrize(("header", "size"), [("bytes=44-", 44), ("bytes=-0", 44), ("bytes=0-", 0)])
def test_unsatisfiable_range(header: str, size: int) -> None:
    """Ranges past the end report the current size."""
    with pytest.raises(RangeNotSatisfiableError) as excinfo:
        parse_range(header, size)

    assert excinfo.value.status_code == 416
    assert excinfo.value.headers == {"Content-Range": f"bytes */{size}"}


def test_byte_range_reports_length_and_content_range() -> None:
    """Inclusive bounds give the length and header value."""
    byte_range = ByteRange(4, 7)
    assert byte_range.length == 4
    assert byte_range.content_range(44) == "bytes 4-7/44"
