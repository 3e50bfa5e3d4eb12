"""Helpers shared by the format parsers."""

from __future__ import annotations

from datetime import datetime
from typing import IO, Optional, Union

from unifeed.core.errors import FormatParseError
from unifeed.core.options import ParseOptions
from unifeed.dates.dateparser import try_parse_date
from unifeed.xml.pullparser import XMLPullParser
from unifeed.xml.tokenizer import tokenize

FeedSource = Union[bytes, str, IO[bytes], IO[str]]


def read_all(source: FeedSource) -> Union[bytes, str]:
    if isinstance(source, (bytes, str)):
        return source
    if isinstance(source, (bytearray, memoryview)):
        return bytes(source)
    data = source.read()
    return data if data is not None else b""


def xml_cursor(source: FeedSource, options: ParseOptions, feed_type: str) -> XMLPullParser:
    strictness = options.strictness
    try:
        tokens = tokenize(read_all(source), strictness)
    except FormatParseError as exc:
        raise FormatParseError(exc.diagnostic, feed_type=feed_type, line=exc.line, column=exc.column) from exc
    return XMLPullParser(tokens, allow_unescaped_markup=strictness.allow_unescaped_markup, feed_type=feed_type)


def parse_feed_date(raw: str, options: ParseOptions) -> Optional[datetime]:
    if not raw or not options.parse_dates:
        return None
    return try_parse_date(raw, lenient=options.strictness.allow_incorrect_date_formats)


def within_limit(count: int, options: ParseOptions) -> bool:
    """True while another item may be appended under max_items (0 is unlimited)."""
    return options.max_items <= 0 or count < options.max_items
