"""Feed format sniffing.

Only a bounded prefix is read. JSON detection looks at the first window only,
so a JSON document longer than DETECT_BUFFER_SIZE bytes is reported as
UNKNOWN unless it happens to be complete within it. The XML probe keeps
reading windows until the root start tag appears or XML_PROBE_LIMIT bytes
have been read.
"""

from __future__ import annotations

import codecs
import enum
import io
import json
from typing import IO, Callable, Optional, Union

from unifeed.core.errors import FormatParseError
from unifeed.xml.tokenizer import StartTag, XMLTokenizer, decode_document, sniff_encoding

DETECT_BUFFER_SIZE = 1024
XML_PROBE_LIMIT = 64 * 1024

_SKIPPABLE = frozenset(b" \t\r\n\xef\xbb\xbf\xfe\xff\x00")

ROOT_TYPES = {"rss": "rss", "rdf": "rss", "feed": "atom"}


class FeedType(str, enum.Enum):
    ATOM = "atom"
    RSS = "rss"
    JSON = "json"
    UNKNOWN = "unknown"


Reader = Callable[[int], bytes]


def _probe_json(window: bytes) -> FeedType:
    try:
        json.loads(window.decode("utf-8"))
    except (ValueError, UnicodeDecodeError):
        return FeedType.UNKNOWN
    return FeedType.JSON


def _root_type(tokenizer: XMLTokenizer) -> Optional[FeedType]:
    for tok in tokenizer.tokens:
        if isinstance(tok, StartTag):
            return FeedType(ROOT_TYPES.get(tok.name.lower(), "unknown"))
    return None


def _probe_xml(window: bytes, read: Reader) -> FeedType:
    encoding, bom = sniff_encoding(window)
    try:
        decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
    except LookupError:
        return FeedType.UNKNOWN
    tokenizer = XMLTokenizer(allow_undeclared_namespaces=True)
    chunk = window[bom:]
    total = len(window)
    first = True
    try:
        while True:
            text = decoder.decode(chunk, final=not chunk)
            if first:
                text = decode_document(text)
                first = False
            if text:
                tokenizer.feed(text)
            root = _root_type(tokenizer)
            if root is not None:
                return root
            if not chunk or total >= XML_PROBE_LIMIT:
                return FeedType.UNKNOWN
            chunk = read(min(DETECT_BUFFER_SIZE, XML_PROBE_LIMIT - total))
            total += len(chunk)
    except FormatParseError:
        # only breakage before the root start tag makes the document unknown
        return _root_type(tokenizer) or FeedType.UNKNOWN


def sniff_feed_type(read: Reader) -> FeedType:
    """Detect the format from a `read(n) -> bytes` callable."""
    window = read(DETECT_BUFFER_SIZE)
    start = next((i for i, b in enumerate(window) if b not in _SKIPPABLE), None)
    if start is None:
        return FeedType.UNKNOWN
    lead = window[start]
    if lead == ord("{"):
        return _probe_json(window[start:])
    if lead == ord("<"):
        return _probe_xml(window, read)
    return FeedType.UNKNOWN


def _bytes_reader(stream: IO) -> Reader:
    def read(n: int) -> bytes:
        data = stream.read(n)
        if isinstance(data, str):
            return data.encode("utf-8")
        return data or b""

    return read


def detect_feed_type(source: Union[bytes, str, IO]) -> FeedType:
    """Detect the format of a document given as bytes, text or a readable stream.

    Seekable streams are rewound to where they started.
    """
    if isinstance(source, str):
        source = source.encode("utf-8")
    if isinstance(source, (bytes, bytearray, memoryview)):
        return sniff_feed_type(_bytes_reader(io.BytesIO(bytes(source))))
    position = source.tell() if source.seekable() else None
    try:
        return sniff_feed_type(_bytes_reader(source))
    finally:
        if position is not None:
            source.seek(position)
