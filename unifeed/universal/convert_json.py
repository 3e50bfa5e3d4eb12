"""JSON Feed native tree -> universal Feed."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from unifeed.core.options import ParseOptions
from unifeed.extensions.extension import Extension, Extensions
from unifeed.parsers import jsonfeed
from unifeed.universal.base import Converter
from unifeed.universal.model import Enclosure, Feed, Image, Item, Person
from unifeed.universal.person_utils import parse_name_address


def _people(authors: List[jsonfeed.Author], author: Optional[jsonfeed.Author]) -> List[Person]:
    source = authors or ([author] if author is not None else [])
    people = []
    for a in source:
        name, email = parse_name_address(a.name)
        people.append(Person(name=name, email=email))
    return people


def _links(*urls: str) -> List[str]:
    return [u for u in urls if u]


def _json_nodes(name: str, value: Any) -> List[Extension]:
    if isinstance(value, list):
        return [node for v in value for node in _json_nodes(name, v)]
    if isinstance(value, dict):
        children: Dict[str, List[Extension]] = {}
        for key, child in value.items():
            children.setdefault(key, []).extend(_json_nodes(key, child))
        return [Extension(name=name, children=children)]
    if value is None:
        return [Extension(name=name)]
    if isinstance(value, bool):
        return [Extension(name=name, value="true" if value else "false")]
    return [Extension(name=name, value=str(value))]


def _extensions(custom: Dict[str, Any]) -> Extensions:
    """Map `_name` JSON Feed extension objects onto the namespaced extension shape.

    The bucket is the key without its underscore; members of an object become
    the bucket's elements, a bare value becomes a single element of the same name.
    """
    out: Extensions = {}
    for key, value in custom.items():
        prefix = key.lstrip("_") or key
        if isinstance(value, dict):
            bucket = out.setdefault(prefix, {})
            for name, member in value.items():
                bucket.setdefault(name, []).extend(_json_nodes(name, member))
        else:
            out.setdefault(prefix, {}).setdefault(prefix, []).extend(_json_nodes(prefix, value))
    return out


class JSONConverter(Converter):
    native_type = jsonfeed.Feed
    feed_type = "json"

    def _convert(self, feed: jsonfeed.Feed, options: ParseOptions) -> Feed:
        first = feed.items[0] if feed.items else None
        return Feed(
            title=feed.title,
            description=feed.description,
            link=feed.home_page_url,
            feed_link=feed.feed_url,
            links=_links(feed.home_page_url, feed.feed_url),
            updated=first.date_modified if first else "",
            updated_parsed=first.date_modified_parsed if first else None,
            published=first.date_published if first else "",
            published_parsed=first.date_published_parsed if first else None,
            authors=_people(feed.authors, feed.author),
            language=feed.language,
            image=Image(url=feed.icon) if feed.icon else None,
            items=[self._item(i) for i in feed.items],
            extensions=_extensions(feed.extensions),
            feed_type=self.feed_type,
            feed_version=feed.version,
        )

    @staticmethod
    def _item(item: jsonfeed.Item) -> Item:
        image_url = item.image or item.banner_image
        return Item(
            title=item.title,
            description=item.summary,
            content=item.content_html or item.content_text,
            link=item.url,
            links=_links(item.url, item.external_url),
            updated=item.date_modified,
            updated_parsed=item.date_modified_parsed,
            published=item.date_published,
            published_parsed=item.date_published_parsed,
            authors=_people(item.authors, item.author),
            guid=item.id,
            image=Image(url=image_url) if image_url else None,
            categories=list(item.tags),
            enclosures=[
                Enclosure(
                    url=a.url,
                    type=a.mime_type,
                    length=str(a.duration_in_seconds) if a.duration_in_seconds is not None else "",
                )
                for a in item.attachments
            ],
            extensions=_extensions(item.extensions),
        )
