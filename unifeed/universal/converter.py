"""Converter dispatch.

The default converters are stateless and built once at import time.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, Optional, Union

from unifeed.core.errors import TypeMismatchError
from unifeed.core.options import ParseOptions
from unifeed.parsers import atom, jsonfeed, rss
from unifeed.universal.base import Converter
from unifeed.universal.convert_atom import AtomConverter
from unifeed.universal.convert_json import JSONConverter
from unifeed.universal.convert_rss import RSSConverter
from unifeed.universal.model import Feed

NativeFeed = Union[rss.Feed, atom.Feed, jsonfeed.Feed]

DEFAULT_RSS_CONVERTER = RSSConverter()
DEFAULT_ATOM_CONVERTER = AtomConverter()
DEFAULT_JSON_CONVERTER = JSONConverter()

CONVERTERS: Mapping[type, Converter] = MappingProxyType(
    {
        rss.Feed: DEFAULT_RSS_CONVERTER,
        atom.Feed: DEFAULT_ATOM_CONVERTER,
        jsonfeed.Feed: DEFAULT_JSON_CONVERTER,
    }
)


def convert(native: NativeFeed, options: Optional[ParseOptions] = None) -> Feed:
    """Convert any native tree with its default converter."""
    converter = CONVERTERS.get(type(native))
    if converter is None:
        raise TypeMismatchError(f"no converter for {type(native).__name__}")
    return converter.convert(native, options)
