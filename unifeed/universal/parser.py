"""Universal entry point: detect the format, parse it natively, convert it.

Usage:
  from unifeed.universal.parser import Parser
  feed = Parser().parse_url("https://example.com/feed.xml")
"""

from __future__ import annotations

import io
import logging
from typing import IO, Optional, Union

from unifeed.core.errors import DetectionError
from unifeed.core.options import ParseOptions, RequestOptions
from unifeed.fetch.client import fetch_feed
from unifeed.parsers.atom import AtomParser
from unifeed.parsers.jsonfeed import JSONParser
from unifeed.parsers.rss import RSSParser
from unifeed.universal.base import Converter
from unifeed.universal.converter import DEFAULT_ATOM_CONVERTER, DEFAULT_JSON_CONVERTER, DEFAULT_RSS_CONVERTER
from unifeed.universal.detector import FeedType, sniff_feed_type
from unifeed.universal.model import Feed

logger = logging.getLogger(__name__)


class _CapturingReader:
    """Reads from a stream and remembers every byte handed out."""

    def __init__(self, stream: IO):
        self._stream = stream
        self.captured = bytearray()

    def read(self, n: int) -> bytes:
        data = self._stream.read(n)
        if isinstance(data, str):
            data = data.encode("utf-8")
        data = data or b""
        self.captured += data
        return data


class ReplayStream(io.RawIOBase):
    """A captured prefix followed by the rest of the original stream."""

    def __init__(self, prefix: bytes, rest: IO):
        self._prefix = memoryview(bytes(prefix))
        self._offset = 0
        self._rest = rest
        self._pending = b""

    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:
        size = len(buffer)
        if self._offset < len(self._prefix):
            n = min(size, len(self._prefix) - self._offset)
            buffer[:n] = self._prefix[self._offset:self._offset + n]
            self._offset += n
            return n
        if not self._pending:
            data = self._rest.read(size)
            if isinstance(data, str):
                data = data.encode("utf-8")
            self._pending = data or b""
        n = min(size, len(self._pending))
        buffer[:n] = self._pending[:n]
        self._pending = self._pending[n:]
        return n


class Parser:
    """Parses RSS, Atom and JSON Feed documents into the universal `Feed` model.

    Converters may be replaced per instance; the defaults are shared.
    """

    def __init__(
        self,
        rss_converter: Optional[Converter] = None,
        atom_converter: Optional[Converter] = None,
        json_converter: Optional[Converter] = None,
    ):
        self.rss_parser = RSSParser()
        self.atom_parser = AtomParser()
        self.json_parser = JSONParser()
        self._formats = {
            FeedType.RSS: (self.rss_parser, rss_converter or DEFAULT_RSS_CONVERTER),
            FeedType.ATOM: (self.atom_parser, atom_converter or DEFAULT_ATOM_CONVERTER),
            FeedType.JSON: (self.json_parser, json_converter or DEFAULT_JSON_CONVERTER),
        }

    def parse(self, source: Union[bytes, str, IO], options: Optional[ParseOptions] = None) -> Feed:
        if isinstance(source, str):
            return self.parse_string(source, options)
        if isinstance(source, (bytes, bytearray, memoryview)):
            return self.parse_bytes(bytes(source), options)
        reader = _CapturingReader(source)
        feed_type = sniff_feed_type(reader.read)
        return self._parse_as(feed_type, ReplayStream(bytes(reader.captured), source), options)

    def parse_string(self, text: str, options: Optional[ParseOptions] = None) -> Feed:
        feed_type = sniff_feed_type(io.BytesIO(text.encode("utf-8")).read)
        return self._parse_as(feed_type, text, options)

    def parse_bytes(self, data: bytes, options: Optional[ParseOptions] = None) -> Feed:
        feed_type = sniff_feed_type(io.BytesIO(data).read)
        return self._parse_as(feed_type, data, options)

    def parse_url(
        self,
        url: str,
        options: Optional[ParseOptions] = None,
        request_options: Optional[RequestOptions] = None,
    ) -> Feed:
        body = fetch_feed(url, request_options)
        return self.parse_bytes(body, options)

    def _parse_as(self, feed_type: FeedType, document, options: Optional[ParseOptions]) -> Feed:
        options = options or ParseOptions()
        if feed_type not in self._formats:
            logger.warning("failed to detect feed type")
            raise DetectionError()
        parser, converter = self._formats[feed_type]
        native = parser.parse(document, options)
        feed = converter.convert(native, options)
        if options.keep_original_feed:
            feed.original = native
        logger.debug("parsed %s feed %r with %d items", feed_type.value, feed.title, len(feed.items))
        return feed
