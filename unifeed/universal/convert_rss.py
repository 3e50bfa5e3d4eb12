"""RSS native tree -> universal Feed."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from unifeed.core.options import ParseOptions
from unifeed.extensions.extension import Extensions
from unifeed.parsers import rss
from unifeed.universal.base import Converter
from unifeed.universal.model import Enclosure, Feed, Image, Item, Person
from unifeed.universal.person_utils import parse_name_address

ATOM_BUCKETS = ("atom", "atom10", "atom03")


def _person(text: str) -> Person:
    name, email = parse_name_address(text)
    return Person(name=name, email=email)


def _first(values: Optional[List[str]]) -> str:
    return values[0] if values else ""


def _keywords(text: str) -> List[str]:
    return [k.strip() for k in text.split(",") if k.strip()]


def _atom_links(extensions: Extensions) -> List[dict]:
    attrs = []
    for key in ATOM_BUCKETS:
        for link in (extensions or {}).get(key, {}).get("link", []):
            attrs.append(link.attrs)
    return attrs


class RSSConverter(Converter):
    native_type = rss.Feed
    feed_type = "rss"

    def _convert(self, feed: rss.Feed, options: ParseOptions) -> Feed:
        dc = feed.dublin_core_ext
        itunes = feed.itunes_ext
        updated, updated_parsed = self._feed_updated(feed, options)
        return Feed(
            title=feed.title or (dc.first("title") if dc else ""),
            description=feed.description,
            link=feed.link or (itunes.subtitle if itunes else ""),
            feed_link=self._feed_link(feed),
            links=self._feed_links(feed),
            updated=updated,
            updated_parsed=updated_parsed,
            published=feed.pub_date,
            published_parsed=feed.pub_date_parsed,
            authors=self._feed_authors(feed),
            language=feed.language or (dc.first("language") if dc else ""),
            image=self._feed_image(feed),
            copyright=feed.copyright or (dc.first("rights") if dc else ""),
            generator=feed.generator,
            categories=self._feed_categories(feed),
            items=[self._item(i, options) for i in feed.items],
            extensions=feed.extensions,
            itunes_ext=itunes,
            dublin_core_ext=dc,
            feed_type=self.feed_type,
            feed_version=feed.version,
        )

    # -----------------------------
    # Feed level
    # -----------------------------
    @staticmethod
    def _feed_link(feed: rss.Feed) -> str:
        for attrs in _atom_links(feed.extensions):
            if attrs.get("rel") == "self":
                return attrs.get("href", "")
        return ""

    @staticmethod
    def _feed_links(feed: rss.Feed) -> List[str]:
        links = list(feed.links)
        for attrs in _atom_links(feed.extensions):
            if attrs.get("rel", "") in ("", "alternate", "self"):
                links.append(attrs.get("href", ""))
        return links

    def _feed_updated(self, feed: rss.Feed, options: ParseOptions):
        if feed.last_build_date:
            return feed.last_build_date, feed.last_build_date_parsed
        dc_date = _first(feed.dublin_core_ext.date) if feed.dublin_core_ext else ""
        return dc_date, self.parse_secondary_date(dc_date, options)

    @staticmethod
    def _feed_authors(feed: rss.Feed) -> List[Person]:
        dc = feed.dublin_core_ext
        candidates = (
            feed.managing_editor,
            feed.web_master,
            _first(dc.author) if dc else "",
            _first(dc.creator) if dc else "",
            feed.itunes_ext.author if feed.itunes_ext else "",
        )
        for text in candidates:
            if text:
                return [_person(text)]
        return []

    @staticmethod
    def _feed_image(feed: rss.Feed) -> Optional[Image]:
        if feed.image is not None:
            return Image(url=feed.image.url, title=feed.image.title)
        if feed.itunes_ext and feed.itunes_ext.image:
            return Image(url=feed.itunes_ext.image)
        return None

    @staticmethod
    def _feed_categories(feed: rss.Feed) -> List[str]:
        cats = [c.value for c in feed.categories]
        itunes = feed.itunes_ext
        if itunes:
            cats.extend(_keywords(itunes.keywords))
            for c in itunes.categories:
                cats.append(c.text)
                if c.subcategory is not None:
                    cats.append(c.subcategory.text)
        if feed.dublin_core_ext:
            cats.extend(feed.dublin_core_ext.subject)
        return cats

    # -----------------------------
    # Item level
    # -----------------------------
    def _item(self, item: rss.Item, options: ParseOptions) -> Item:
        dc = item.dublin_core_ext
        itunes = item.itunes_ext
        dc_date = _first(dc.date) if dc else ""
        dc_date_parsed: Optional[datetime] = self.parse_secondary_date(dc_date, options)
        categories = [c.value for c in item.categories]
        if itunes:
            categories.extend(_keywords(itunes.keywords))
        if dc:
            categories.extend(dc.subject)
        return Item(
            title=item.title or (dc.first("title") if dc else ""),
            description=item.description or (dc.first("description") if dc else ""),
            content=item.content,
            link=item.link,
            links=list(item.links),
            updated=dc_date,
            updated_parsed=dc_date_parsed,
            published=item.pub_date or dc_date,
            published_parsed=item.pub_date_parsed if item.pub_date_parsed is not None else dc_date_parsed,
            authors=self._item_authors(item),
            guid=item.guid.value if item.guid else "",
            image=Image(url=itunes.image) if itunes and itunes.image else None,
            categories=categories,
            enclosures=[Enclosure(url=e.url, length=e.length, type=e.type) for e in item.enclosures],
            extensions=item.extensions,
            itunes_ext=itunes,
            dublin_core_ext=dc,
        )

    @staticmethod
    def _item_authors(item: rss.Item) -> List[Person]:
        dc = item.dublin_core_ext
        candidates = (
            item.author,
            _first(dc.author) if dc else "",
            _first(dc.creator) if dc else "",
            item.itunes_ext.author if item.itunes_ext else "",
        )
        for text in candidates:
            if text:
                return [_person(text)]
        return []
