"""Atom 1.0 and Atom 0.3 parser producing a native Atom tree."""

from __future__ import annotations

import base64
import binascii
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from unifeed.core.options import ParseOptions
from unifeed.extensions.extension import Extensions, add_extension
from unifeed.extensions.namespaces import XML_NAMESPACE
from unifeed.parsers.base import FeedSource, parse_feed_date, within_limit, xml_cursor
from unifeed.xml.pullparser import XMLPullParser
from unifeed.xml.tokenizer import StartTag

logger = logging.getLogger(__name__)

ATOM10_NAMESPACE = "http://www.w3.org/2005/Atom"
ATOM03_NAMESPACE = "http://purl.org/atom/ns#"

NATIVE_NAMESPACES = frozenset({ATOM10_NAMESPACE, ATOM03_NAMESPACE})

# Atom 0.3 element names and their 1.0 equivalents
ATOM03_ALIASES = {
    "tagline": "subtitle",
    "copyright": "rights",
    "modified": "updated",
    "issued": "published",
    "url": "uri",
}


@dataclass
class Person:
    name: str = ""
    email: str = ""
    uri: str = ""


@dataclass
class Link:
    href: str = ""
    hreflang: str = ""
    rel: str = ""
    type: str = ""
    title: str = ""
    length: str = ""


@dataclass
class Category:
    term: str = ""
    scheme: str = ""
    label: str = ""


@dataclass
class Generator:
    value: str = ""
    uri: str = ""
    version: str = ""


@dataclass
class Content:
    src: str = ""
    type: str = ""
    value: str = ""


@dataclass
class Source:
    title: str = ""
    id: str = ""
    updated: str = ""
    updated_parsed: Optional[datetime] = None
    subtitle: str = ""
    links: List[Link] = field(default_factory=list)
    generator: Optional[Generator] = None
    icon: str = ""
    logo: str = ""
    rights: str = ""
    authors: List[Person] = field(default_factory=list)
    contributors: List[Person] = field(default_factory=list)
    categories: List[Category] = field(default_factory=list)
    extensions: Extensions = field(default_factory=dict)


@dataclass
class Entry:
    title: str = ""
    id: str = ""
    updated: str = ""
    updated_parsed: Optional[datetime] = None
    summary: str = ""
    authors: List[Person] = field(default_factory=list)
    contributors: List[Person] = field(default_factory=list)
    categories: List[Category] = field(default_factory=list)
    links: List[Link] = field(default_factory=list)
    rights: str = ""
    published: str = ""
    published_parsed: Optional[datetime] = None
    source: Optional[Source] = None
    content: Optional[Content] = None
    extensions: Extensions = field(default_factory=dict)


@dataclass
class Feed:
    title: str = ""
    id: str = ""
    updated: str = ""
    updated_parsed: Optional[datetime] = None
    subtitle: str = ""
    links: List[Link] = field(default_factory=list)
    language: str = ""
    generator: Optional[Generator] = None
    icon: str = ""
    logo: str = ""
    rights: str = ""
    contributors: List[Person] = field(default_factory=list)
    authors: List[Person] = field(default_factory=list)
    categories: List[Category] = field(default_factory=list)
    entries: List[Entry] = field(default_factory=list)
    extensions: Extensions = field(default_factory=dict)
    version: str = ""


def _element_name(tok: StartTag) -> str:
    name = tok.name.lower()
    if tok.space == ATOM03_NAMESPACE or tok.space is None:
        return ATOM03_ALIASES.get(name, name)
    return name


class AtomParser:
    feed_type = "atom"

    def parse(self, source: FeedSource, options: Optional[ParseOptions] = None) -> Feed:
        options = options or ParseOptions()
        p = xml_cursor(source, options, self.feed_type)
        root = p.find_root()
        if root.name.lower() != "feed":
            raise p.error(f"expected <feed> root, found <{root.qname}>")
        feed = self._parse_feed(p, root, options)
        logger.debug("parsed atom %s feed with %d entries", feed.version or "?", len(feed.entries))
        return feed

    @staticmethod
    def _is_extension(tok: StartTag) -> bool:
        if tok.space is None:
            return bool(tok.prefix)
        return tok.space not in NATIVE_NAMESPACES

    def _extension_or_custom(self, p: XMLPullParser, tok: StartTag, extensions: Extensions, options: ParseOptions) -> None:
        if not self._is_extension(tok) and not options.strictness.allow_custom_xml_elements:
            raise p.error(f"unexpected element <{tok.qname}>")
        if options.parse_extensions:
            add_extension(extensions, p)
        else:
            p.skip()

    @staticmethod
    def _version(root: StartTag) -> str:
        declared = root.attr("version")
        if declared:
            return declared
        if root.space == ATOM03_NAMESPACE:
            return "0.3"
        return "1.0"

    # -----------------------------
    # Feed
    # -----------------------------
    def _parse_feed(self, p: XMLPullParser, root: StartTag, options: ParseOptions) -> Feed:
        feed = Feed(version=self._version(root))
        for a in root.attrs:
            if a.name == "lang" and a.space == XML_NAMESPACE:
                feed.language = a.value
        extensions: Extensions = {}
        for tok in p.children():
            if self._is_extension(tok):
                self._extension_or_custom(p, tok, extensions, options)
                continue
            name = _element_name(tok)
            if name == "title":
                feed.title = self._parse_text_construct(p, tok)
            elif name == "id":
                feed.id = p.read_text()
            elif name == "updated":
                feed.updated = p.read_text()
                feed.updated_parsed = parse_feed_date(feed.updated, options)
            elif name == "subtitle":
                feed.subtitle = self._parse_text_construct(p, tok)
            elif name == "link":
                feed.links.append(self._parse_link(p, tok))
            elif name == "generator":
                feed.generator = self._parse_generator(p, tok)
            elif name == "icon":
                feed.icon = p.read_text()
            elif name == "logo":
                feed.logo = p.read_text()
            elif name == "rights":
                feed.rights = self._parse_text_construct(p, tok)
            elif name == "contributor":
                feed.contributors.append(self._parse_person(p))
            elif name == "author":
                feed.authors.append(self._parse_person(p))
            elif name == "category":
                feed.categories.append(self._parse_category(p, tok))
            elif name == "entry":
                entry = self._parse_entry(p, options)
                if within_limit(len(feed.entries), options):
                    feed.entries.append(entry)
            elif name == "info":
                # Atom 0.3 human readable feed description
                p.skip()
            else:
                self._extension_or_custom(p, tok, extensions, options)
        feed.extensions = extensions
        return feed

    # -----------------------------
    # Entry
    # -----------------------------
    def _parse_entry(self, p: XMLPullParser, options: ParseOptions) -> Entry:
        entry = Entry()
        created = ""
        extensions: Extensions = {}
        for tok in p.children():
            if self._is_extension(tok):
                self._extension_or_custom(p, tok, extensions, options)
                continue
            name = _element_name(tok)
            if name == "title":
                entry.title = self._parse_text_construct(p, tok)
            elif name == "id":
                entry.id = p.read_text()
            elif name == "updated":
                entry.updated = p.read_text()
                entry.updated_parsed = parse_feed_date(entry.updated, options)
            elif name == "summary":
                entry.summary = self._parse_text_construct(p, tok)
            elif name == "author":
                entry.authors.append(self._parse_person(p))
            elif name == "contributor":
                entry.contributors.append(self._parse_person(p))
            elif name == "category":
                entry.categories.append(self._parse_category(p, tok))
            elif name == "link":
                entry.links.append(self._parse_link(p, tok))
            elif name == "rights":
                entry.rights = self._parse_text_construct(p, tok)
            elif name == "published":
                entry.published = p.read_text()
                entry.published_parsed = parse_feed_date(entry.published, options)
            elif name == "created":
                # Atom 0.3
                created = p.read_text()
            elif name == "source":
                entry.source = self._parse_source(p, options)
            elif name == "content":
                entry.content = self._parse_content(p, tok)
            else:
                self._extension_or_custom(p, tok, extensions, options)
        if not entry.published and created:
            entry.published = created
            entry.published_parsed = parse_feed_date(created, options)
        entry.extensions = extensions
        return entry

    def _parse_source(self, p: XMLPullParser, options: ParseOptions) -> Source:
        source = Source()
        extensions: Extensions = {}
        for tok in p.children():
            if self._is_extension(tok):
                self._extension_or_custom(p, tok, extensions, options)
                continue
            name = _element_name(tok)
            if name == "title":
                source.title = self._parse_text_construct(p, tok)
            elif name == "id":
                source.id = p.read_text()
            elif name == "updated":
                source.updated = p.read_text()
                source.updated_parsed = parse_feed_date(source.updated, options)
            elif name == "subtitle":
                source.subtitle = self._parse_text_construct(p, tok)
            elif name == "link":
                source.links.append(self._parse_link(p, tok))
            elif name == "generator":
                source.generator = self._parse_generator(p, tok)
            elif name == "icon":
                source.icon = p.read_text()
            elif name == "logo":
                source.logo = p.read_text()
            elif name == "rights":
                source.rights = self._parse_text_construct(p, tok)
            elif name == "author":
                source.authors.append(self._parse_person(p))
            elif name == "contributor":
                source.contributors.append(self._parse_person(p))
            elif name == "category":
                source.categories.append(self._parse_category(p, tok))
            else:
                self._extension_or_custom(p, tok, extensions, options)
        source.extensions = extensions
        return source

    # -----------------------------
    # Constructs
    # -----------------------------
    def _parse_text_construct(self, p: XMLPullParser, tok: StartTag) -> str:
        """Text, html and xhtml constructs; Atom 0.3 adds mode="base64" / "xml"."""
        kind = tok.attr("type").lower()
        mode = tok.attr("mode").lower()
        if kind in ("xhtml", "application/xhtml+xml") or mode == "xml":
            return p.read_markup()
        value = p.read_text()
        if mode == "base64":
            try:
                return base64.b64decode(value, validate=False).decode("utf-8", errors="replace")
            except (binascii.Error, ValueError):
                logger.debug("undecodable base64 atom text construct")
        return value

    def _parse_content(self, p: XMLPullParser, tok: StartTag) -> Content:
        src = tok.attr("src")
        kind = tok.attr("type")
        return Content(src=src, type=kind, value=self._parse_text_construct(p, tok))

    @staticmethod
    def _parse_link(p: XMLPullParser, tok: StartTag) -> Link:
        link = Link(
            href=tok.attr("href"),
            hreflang=tok.attr("hreflang"),
            rel=tok.attr("rel"),
            type=tok.attr("type"),
            title=tok.attr("title"),
            length=tok.attr("length"),
        )
        # Atom 0.3 style <link>url</link>
        text = p.read_text()
        if not link.href:
            link.href = text
        return link

    @staticmethod
    def _parse_generator(p: XMLPullParser, tok: StartTag) -> Generator:
        uri = tok.attr("uri") or tok.attr("url")
        version = tok.attr("version")
        return Generator(value=p.read_text(), uri=uri, version=version)

    @staticmethod
    def _parse_category(p: XMLPullParser, tok: StartTag) -> Category:
        category = Category(term=tok.attr("term"), scheme=tok.attr("scheme"), label=tok.attr("label"))
        p.skip()
        return category

    def _parse_person(self, p: XMLPullParser) -> Person:
        person = Person()
        for tok in p.children():
            if self._is_extension(tok):
                p.skip()
                continue
            name = _element_name(tok)
            if name == "name":
                person.name = p.read_text()
            elif name == "email":
                person.email = p.read_text()
            elif name == "uri":
                person.uri = p.read_text()
            else:
                p.skip()
        return person
