"""Atom native tree -> universal Feed."""

from __future__ import annotations

from typing import List, Optional

from unifeed.core.options import ParseOptions
from unifeed.parsers import atom
from unifeed.universal.base import Converter
from unifeed.universal.model import Enclosure, Feed, Image, Item, Person


def _first_link(rel: str, links: List[atom.Link]) -> Optional[atom.Link]:
    for link in links:
        if link.rel == rel:
            return link
    return None


def _href(rel: str, links: List[atom.Link]) -> str:
    link = _first_link(rel, links)
    return link.href if link else ""


def _link_list(links: List[atom.Link]) -> List[str]:
    return [l.href for l in links if l.rel in ("", "alternate", "self")]


def _people(persons: List[atom.Person]) -> List[Person]:
    return [Person(name=p.name, email=p.email) for p in persons]


def format_generator(generator: Optional[atom.Generator]) -> str:
    if generator is None:
        return ""
    text = generator.value
    if generator.version:
        text += " v" + generator.version
    if generator.uri:
        text += " " + generator.uri
    return text.strip()


class AtomConverter(Converter):
    native_type = atom.Feed
    feed_type = "atom"

    def _convert(self, feed: atom.Feed, options: ParseOptions) -> Feed:
        return Feed(
            title=feed.title,
            description=feed.subtitle,
            link=_href("alternate", feed.links),
            feed_link=_href("self", feed.links),
            links=_link_list(feed.links),
            updated=feed.updated,
            updated_parsed=feed.updated_parsed,
            authors=_people(feed.authors),
            language=feed.language,
            image=Image(url=feed.logo) if feed.logo else None,
            copyright=feed.rights,
            generator=format_generator(feed.generator),
            categories=[c.term for c in feed.categories],
            items=[self._item(e) for e in feed.entries],
            extensions=feed.extensions,
            feed_type=self.feed_type,
            feed_version=feed.version,
        )

    @staticmethod
    def _item(entry: atom.Entry) -> Item:
        return Item(
            title=entry.title,
            description=entry.summary,
            content=entry.content.value if entry.content else "",
            link=_href("alternate", entry.links),
            links=_link_list(entry.links),
            updated=entry.updated,
            updated_parsed=entry.updated_parsed,
            published=entry.published or entry.updated,
            published_parsed=entry.published_parsed if entry.published_parsed is not None else entry.updated_parsed,
            authors=_people(entry.authors),
            guid=entry.id,
            categories=[c.term for c in entry.categories],
            enclosures=[
                Enclosure(url=l.href, length=l.length, type=l.type) for l in entry.links if l.rel == "enclosure"
            ],
            extensions=entry.extensions,
        )
