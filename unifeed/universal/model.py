"""The universal feed model every native format is converted into."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from unifeed.extensions.dublincore import DublinCoreExtension
from unifeed.extensions.extension import Extensions
from unifeed.extensions.itunes import ITunesFeedExtension, ITunesItemExtension


@dataclass(frozen=True)
class Person:
    name: str = ""
    email: str = ""


@dataclass(frozen=True)
class Image:
    url: str = ""
    title: str = ""


@dataclass(frozen=True)
class Enclosure:
    url: str = ""
    length: str = ""
    type: str = ""


@dataclass
class Item:
    title: str = ""
    description: str = ""
    content: str = ""
    link: str = ""
    links: List[str] = field(default_factory=list)
    updated: str = ""
    updated_parsed: Optional[datetime] = None
    published: str = ""
    published_parsed: Optional[datetime] = None
    authors: List[Person] = field(default_factory=list)
    guid: str = ""
    image: Optional[Image] = None
    categories: List[str] = field(default_factory=list)
    enclosures: List[Enclosure] = field(default_factory=list)
    extensions: Extensions = field(default_factory=dict)
    itunes_ext: Optional[ITunesItemExtension] = None
    dublin_core_ext: Optional[DublinCoreExtension] = None

    def to_dict(self) -> Dict[str, Any]:
        return _jsonable(self)


@dataclass
class Feed:
    title: str = ""
    description: str = ""
    link: str = ""
    feed_link: str = ""
    links: List[str] = field(default_factory=list)
    updated: str = ""
    updated_parsed: Optional[datetime] = None
    published: str = ""
    published_parsed: Optional[datetime] = None
    authors: List[Person] = field(default_factory=list)
    language: str = ""
    image: Optional[Image] = None
    copyright: str = ""
    generator: str = ""
    categories: List[str] = field(default_factory=list)
    items: List[Item] = field(default_factory=list)
    extensions: Extensions = field(default_factory=dict)
    itunes_ext: Optional[ITunesFeedExtension] = None
    dublin_core_ext: Optional[DublinCoreExtension] = None
    feed_type: str = ""
    feed_version: str = ""
    # native tree, only attached when keep_original_feed is set
    original: Any = field(default=None, repr=False, compare=False)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-compatible representation; datetimes become ISO 8601 strings."""
        return _jsonable(self)

    def sorted_items(self) -> List[Item]:
        return sort_items(self.items)


def sort_items(items: List[Item]) -> List[Item]:
    """Order items by published date, oldest first; undated items go last in document order."""
    dated = [i for i in items if i.published_parsed is not None]
    undated = [i for i in items if i.published_parsed is None]
    return sorted(dated, key=lambda i: i.published_parsed) + undated


def _jsonable(value: Any) -> Any:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {
            f.name: _jsonable(getattr(value, f.name))
            for f in dataclasses.fields(value)
            if f.name != "original"
        }
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {str(k): _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return value
