"""JSON Feed 1.0 / 1.1 parser.

The JSON Schema below describes the documented JSON Feed contract. Feeds in the
wild break it routinely (numeric ids, missing titles), so violations are only
logged and the document is read leniently.
"""

from __future__ import annotations

import codecs
import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from jsonschema import Draft202012Validator

from unifeed.core.errors import FormatParseError
from unifeed.core.options import ParseOptions
from unifeed.parsers.base import FeedSource, parse_feed_date, read_all, within_limit

logger = logging.getLogger(__name__)


_AUTHOR_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "name": {"type": "string"},
        "url": {"type": "string"},
        "avatar": {"type": "string"},
    },
    "additionalProperties": True,
}

JSON_FEED_SCHEMA: Dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "required": ["version", "title", "items"],
    "properties": {
        "version": {"type": "string", "minLength": 1},
        "title": {"type": "string"},
        "home_page_url": {"type": "string"},
        "feed_url": {"type": "string"},
        "description": {"type": "string"},
        "user_comment": {"type": "string"},
        "next_url": {"type": "string"},
        "icon": {"type": "string"},
        "favicon": {"type": "string"},
        "author": _AUTHOR_SCHEMA,
        "authors": {"type": "array", "items": _AUTHOR_SCHEMA},
        "language": {"type": "string"},
        "expired": {"type": "boolean"},
        "hubs": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["type", "url"],
                "properties": {"type": {"type": "string"}, "url": {"type": "string"}},
                "additionalProperties": True,
            },
        },
        "items": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["id"],
                "properties": {
                    "id": {"type": ["string", "number"]},
                    "url": {"type": "string"},
                    "external_url": {"type": "string"},
                    "title": {"type": "string"},
                    "content_html": {"type": "string"},
                    "content_text": {"type": "string"},
                    "summary": {"type": "string"},
                    "image": {"type": "string"},
                    "banner_image": {"type": "string"},
                    "date_published": {"type": "string"},
                    "date_modified": {"type": "string"},
                    "author": _AUTHOR_SCHEMA,
                    "authors": {"type": "array", "items": _AUTHOR_SCHEMA},
                    "tags": {"type": "array", "items": {"type": "string"}},
                    "language": {"type": "string"},
                    "attachments": {
                        "type": "array",
                        "items": {
                            "type": "object",
                            "required": ["url", "mime_type"],
                            "properties": {
                                "url": {"type": "string"},
                                "mime_type": {"type": "string"},
                                "title": {"type": "string"},
                                "size_in_bytes": {"type": "number"},
                                "duration_in_seconds": {"type": "number"},
                            },
                            "additionalProperties": True,
                        },
                    },
                },
                "additionalProperties": True,
            },
        },
    },
    "additionalProperties": True,
}


_VALIDATOR = Draft202012Validator(JSON_FEED_SCHEMA)


def validate_json_feed(payload: Any) -> List[str]:
    """Return a list of human-readable contract violations (empty means valid)."""
    errors = []
    for e in sorted(_VALIDATOR.iter_errors(payload), key=lambda x: [str(p) for p in x.path]):
        path = ".".join(str(p) for p in e.path) if e.path else "<root>"
        errors.append(f"{path}: {e.message}")
    return errors


@dataclass
class Author:
    name: str = ""
    url: str = ""
    avatar: str = ""


@dataclass
class Hub:
    type: str = ""
    url: str = ""


@dataclass
class Attachment:
    url: str = ""
    mime_type: str = ""
    title: str = ""
    size_in_bytes: Optional[int] = None
    duration_in_seconds: Optional[int] = None


@dataclass
class Item:
    id: str = ""
    url: str = ""
    external_url: str = ""
    title: str = ""
    content_html: str = ""
    content_text: str = ""
    summary: str = ""
    image: str = ""
    banner_image: str = ""
    date_published: str = ""
    date_published_parsed: Optional[datetime] = None
    date_modified: str = ""
    date_modified_parsed: Optional[datetime] = None
    author: Optional[Author] = None
    authors: List[Author] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)
    attachments: List[Attachment] = field(default_factory=list)
    language: str = ""
    extensions: Dict[str, Any] = field(default_factory=dict)


@dataclass
class Feed:
    version: str = ""
    title: str = ""
    home_page_url: str = ""
    feed_url: str = ""
    description: str = ""
    user_comment: str = ""
    next_url: str = ""
    icon: str = ""
    favicon: str = ""
    author: Optional[Author] = None
    authors: List[Author] = field(default_factory=list)
    language: str = ""
    expired: bool = False
    hubs: List[Hub] = field(default_factory=list)
    items: List[Item] = field(default_factory=list)
    extensions: Dict[str, Any] = field(default_factory=dict)


def _str(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool) or value is None:
        return ""
    if isinstance(value, (int, float)):
        return str(int(value)) if isinstance(value, float) and value.is_integer() else str(value)
    return ""


def _int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    try:
        if isinstance(value, (int, float)):
            return int(value)
        if isinstance(value, str):
            return int(float(value.strip()))
    except (ValueError, OverflowError):
        return None
    return None


def _dicts(value: Any) -> List[Dict[str, Any]]:
    if not isinstance(value, list):
        return []
    return [v for v in value if isinstance(v, dict)]


def _author(value: Any) -> Optional[Author]:
    if not isinstance(value, dict):
        return None
    return Author(name=_str(value.get("name")), url=_str(value.get("url")), avatar=_str(value.get("avatar")))


def _custom(obj: Dict[str, Any]) -> Dict[str, Any]:
    # JSON Feed extensions are top level keys starting with an underscore
    return {k: v for k, v in obj.items() if k.startswith("_")}


class JSONParser:
    feed_type = "json"

    def parse(self, source: FeedSource, options: Optional[ParseOptions] = None) -> Feed:
        options = options or ParseOptions()
        raw = read_all(source)
        if isinstance(raw, bytes) and raw.startswith(codecs.BOM_UTF8):
            raw = raw[len(codecs.BOM_UTF8):]
        elif isinstance(raw, str):
            raw = raw.lstrip("\ufeff")
        try:
            payload = json.loads(raw)
        except (ValueError, UnicodeDecodeError) as exc:
            line = getattr(exc, "lineno", None)
            column = getattr(exc, "colno", None)
            raise FormatParseError(str(exc), feed_type=self.feed_type, line=line, column=column) from exc
        if not isinstance(payload, dict):
            raise FormatParseError("top level value is not an object", feed_type=self.feed_type)

        violations = validate_json_feed(payload)
        if violations:
            logger.debug("json feed contract violations: %s", "; ".join(violations[:10]))

        feed = Feed(
            version=_str(payload.get("version")),
            title=_str(payload.get("title")),
            home_page_url=_str(payload.get("home_page_url")),
            feed_url=_str(payload.get("feed_url")),
            description=_str(payload.get("description")),
            user_comment=_str(payload.get("user_comment")),
            next_url=_str(payload.get("next_url")),
            icon=_str(payload.get("icon")),
            favicon=_str(payload.get("favicon")),
            author=_author(payload.get("author")),
            authors=[a for a in (_author(v) for v in _dicts(payload.get("authors"))) if a],
            language=_str(payload.get("language")),
            expired=payload.get("expired") is True,
            hubs=[Hub(type=_str(h.get("type")), url=_str(h.get("url"))) for h in _dicts(payload.get("hubs"))],
            extensions=_custom(payload) if options.parse_extensions else {},
        )
        for raw_item in _dicts(payload.get("items")):
            if not within_limit(len(feed.items), options):
                break
            feed.items.append(self._parse_item(raw_item, options))
        logger.debug("parsed json feed %r with %d items", feed.version, len(feed.items))
        return feed

    @staticmethod
    def _parse_item(obj: Dict[str, Any], options: ParseOptions) -> Item:
        published = _str(obj.get("date_published"))
        modified = _str(obj.get("date_modified"))
        tags = obj.get("tags")
        return Item(
            id=_str(obj.get("id")),
            url=_str(obj.get("url")),
            external_url=_str(obj.get("external_url")),
            title=_str(obj.get("title")),
            content_html=_str(obj.get("content_html")),
            content_text=_str(obj.get("content_text")),
            summary=_str(obj.get("summary")),
            image=_str(obj.get("image")),
            banner_image=_str(obj.get("banner_image")),
            date_published=published,
            date_published_parsed=parse_feed_date(published, options),
            date_modified=modified,
            date_modified_parsed=parse_feed_date(modified, options),
            author=_author(obj.get("author")),
            authors=[a for a in (_author(v) for v in _dicts(obj.get("authors"))) if a],
            tags=[_str(t) for t in tags if _str(t)] if isinstance(tags, list) else [],
            attachments=[
                Attachment(
                    url=_str(a.get("url")),
                    mime_type=_str(a.get("mime_type")),
                    title=_str(a.get("title")),
                    size_in_bytes=_int(a.get("size_in_bytes")),
                    duration_in_seconds=_int(a.get("duration_in_seconds")),
                )
                for a in _dicts(obj.get("attachments"))
            ],
            language=_str(obj.get("language")),
            extensions=_custom(obj) if options.parse_extensions else {},
        )
