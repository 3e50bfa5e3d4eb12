"""Typed view over the `itunes` extension bucket."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from unifeed.extensions.extension import Extension, Extensions


@dataclass(frozen=True)
class ITunesOwner:
    name: str = ""
    email: str = ""


@dataclass(frozen=True)
class ITunesCategory:
    text: str = ""
    subcategory: Optional["ITunesCategory"] = None


@dataclass(frozen=True)
class ITunesFeedExtension:
    author: str = ""
    block: str = ""
    categories: List[ITunesCategory] = field(default_factory=list)
    explicit: str = ""
    keywords: str = ""
    owner: Optional[ITunesOwner] = None
    subtitle: str = ""
    summary: str = ""
    image: str = ""
    complete: str = ""
    new_feed_url: str = ""
    type: str = ""


@dataclass(frozen=True)
class ITunesItemExtension:
    author: str = ""
    block: str = ""
    duration: str = ""
    explicit: str = ""
    keywords: str = ""
    subtitle: str = ""
    summary: str = ""
    image: str = ""
    is_closed_captioned: str = ""
    episode: str = ""
    season: str = ""
    order: str = ""
    episode_type: str = ""


def _value(bucket: Dict[str, List[Extension]], name: str) -> str:
    nodes = bucket.get(name) or []
    return nodes[0].value if nodes else ""


def _image(bucket: Dict[str, List[Extension]]) -> str:
    nodes = bucket.get("image") or []
    if not nodes:
        return ""
    # <itunes:image href="..."/>; a few feeds put the URL in the text instead
    return nodes[0].attrs.get("href", "") or nodes[0].value


def _category(node: Extension) -> ITunesCategory:
    sub = None
    children = node.children.get("category") or []
    if children:
        sub = _category(children[0])
    return ITunesCategory(text=node.attrs.get("text", ""), subcategory=sub)


def _owner(bucket: Dict[str, List[Extension]]) -> Optional[ITunesOwner]:
    nodes = bucket.get("owner") or []
    if not nodes:
        return None
    children = nodes[0].children
    name = children.get("name") or []
    email = children.get("email") or []
    return ITunesOwner(
        name=name[0].value if name else "",
        email=email[0].value if email else "",
    )


def build_itunes_feed_extension(extensions: Optional[Extensions]) -> Optional[ITunesFeedExtension]:
    bucket = (extensions or {}).get("itunes")
    if not bucket:
        return None
    return ITunesFeedExtension(
        author=_value(bucket, "author"),
        block=_value(bucket, "block"),
        categories=[_category(n) for n in bucket.get("category") or []],
        explicit=_value(bucket, "explicit"),
        keywords=_value(bucket, "keywords"),
        owner=_owner(bucket),
        subtitle=_value(bucket, "subtitle"),
        summary=_value(bucket, "summary"),
        image=_image(bucket),
        complete=_value(bucket, "complete"),
        new_feed_url=_value(bucket, "new-feed-url"),
        type=_value(bucket, "type"),
    )


def build_itunes_item_extension(extensions: Optional[Extensions]) -> Optional[ITunesItemExtension]:
    bucket = (extensions or {}).get("itunes")
    if not bucket:
        return None
    return ITunesItemExtension(
        author=_value(bucket, "author"),
        block=_value(bucket, "block"),
        duration=_value(bucket, "duration"),
        explicit=_value(bucket, "explicit"),
        keywords=_value(bucket, "keywords"),
        subtitle=_value(bucket, "subtitle"),
        summary=_value(bucket, "summary"),
        image=_image(bucket),
        is_closed_captioned=_value(bucket, "isClosedCaptioned"),
        episode=_value(bucket, "episode"),
        season=_value(bucket, "season"),
        order=_value(bucket, "order"),
        episode_type=_value(bucket, "episodeType"),
    )
