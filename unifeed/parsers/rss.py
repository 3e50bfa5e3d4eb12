"""RSS 0.9x / 2.0 and RSS 1.0 (RDF) parser producing a native RSS tree."""

from __future__ import annotations

import logging
from dataclasses import astuple, dataclass, field
from datetime import datetime
from typing import List, Optional

from unifeed.core.options import ParseOptions
from unifeed.extensions.dublincore import DublinCoreExtension, build_dublin_core_extension
from unifeed.extensions.extension import Extensions, add_extension, extension_prefix
from unifeed.extensions.itunes import (
    ITunesFeedExtension,
    ITunesItemExtension,
    build_itunes_feed_extension,
    build_itunes_item_extension,
)
from unifeed.parsers.base import FeedSource, parse_feed_date, within_limit, xml_cursor
from unifeed.xml.pullparser import XMLPullParser
from unifeed.xml.tokenizer import StartTag

logger = logging.getLogger(__name__)

RSS09_NAMESPACES = ("http://my.netscape.com/rdf/simple/0.9/", "http://channel.netscape.com/rdf/simple/0.9/")
RSS10_NAMESPACE = "http://purl.org/rss/1.0/"

NATIVE_NAMESPACES = frozenset({RSS10_NAMESPACE, "http://backend.userland.com/rss2", *RSS09_NAMESPACES})


@dataclass
class Category:
    value: str = ""
    domain: str = ""


@dataclass
class Image:
    url: str = ""
    link: str = ""
    title: str = ""
    width: str = ""
    height: str = ""
    description: str = ""


@dataclass
class TextInput:
    title: str = ""
    description: str = ""
    name: str = ""
    link: str = ""


@dataclass
class Cloud:
    domain: str = ""
    port: str = ""
    path: str = ""
    register_procedure: str = ""
    protocol: str = ""


@dataclass
class Enclosure:
    url: str = ""
    length: str = ""
    type: str = ""


@dataclass
class GUID:
    value: str = ""
    is_perma_link: str = ""


@dataclass
class Source:
    title: str = ""
    url: str = ""


@dataclass
class Item:
    title: str = ""
    description: str = ""
    content: str = ""
    link: str = ""
    links: List[str] = field(default_factory=list)
    author: str = ""
    comments: str = ""
    pub_date: str = ""
    pub_date_parsed: Optional[datetime] = None
    source: Optional[Source] = None
    categories: List[Category] = field(default_factory=list)
    enclosures: List[Enclosure] = field(default_factory=list)
    guid: Optional[GUID] = None
    extensions: Extensions = field(default_factory=dict)
    itunes_ext: Optional[ITunesItemExtension] = None
    dublin_core_ext: Optional[DublinCoreExtension] = None


@dataclass
class Feed:
    title: str = ""
    link: str = ""
    links: List[str] = field(default_factory=list)
    description: str = ""
    language: str = ""
    copyright: str = ""
    managing_editor: str = ""
    web_master: str = ""
    pub_date: str = ""
    pub_date_parsed: Optional[datetime] = None
    last_build_date: str = ""
    last_build_date_parsed: Optional[datetime] = None
    docs: str = ""
    categories: List[Category] = field(default_factory=list)
    generator: str = ""
    ttl: str = ""
    image: Optional[Image] = None
    rating: str = ""
    text_input: Optional[TextInput] = None
    skip_hours: List[str] = field(default_factory=list)
    skip_days: List[str] = field(default_factory=list)
    cloud: Optional[Cloud] = None
    items: List[Item] = field(default_factory=list)
    extensions: Extensions = field(default_factory=dict)
    itunes_ext: Optional[ITunesFeedExtension] = None
    dublin_core_ext: Optional[DublinCoreExtension] = None
    version: str = ""


def _is_empty(node) -> bool:
    return node is None or not any(astuple(node))


class RSSParser:
    feed_type = "rss"

    def parse(self, source: FeedSource, options: Optional[ParseOptions] = None) -> Feed:
        options = options or ParseOptions()
        p = xml_cursor(source, options, self.feed_type)
        root = p.find_root()
        name = root.name.lower()
        if name == "rss":
            feed = self._parse_rss(p, root, options)
        elif name == "rdf":
            feed = self._parse_rdf(p, root, options)
        else:
            raise p.error(f"expected <rss> or <rdf:RDF> root, found <{root.qname}>")
        logger.debug("parsed rss %s feed with %d items", feed.version or "?", len(feed.items))
        return feed

    # -----------------------------
    # Element classification
    # -----------------------------
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

    # -----------------------------
    # Roots
    # -----------------------------
    def _parse_rss(self, p: XMLPullParser, root: StartTag, options: ParseOptions) -> Feed:
        feed: Optional[Feed] = None
        loose_items: List[Item] = []
        for tok in p.children():
            name = tok.name.lower()
            if not self._is_extension(tok) and name == "channel":
                feed = self._parse_channel(p, options)
            elif not self._is_extension(tok) and name == "item":
                item = self._parse_item(p, options)
                if within_limit(len(loose_items), options):
                    loose_items.append(item)
            else:
                p.skip()
        feed = feed or Feed()
        for item in loose_items:
            if within_limit(len(feed.items), options):
                feed.items.append(item)
        feed.version = root.attr("version") or "2.0"
        return feed

    def _parse_rdf(self, p: XMLPullParser, root: StartTag, options: ParseOptions) -> Feed:
        feed: Optional[Feed] = None
        items: List[Item] = []
        image: Optional[Image] = None
        text_input: Optional[TextInput] = None
        for tok in p.children():
            if self._is_extension(tok):
                p.skip()
                continue
            name = tok.name.lower()
            if name == "channel":
                feed = self._parse_channel(p, options)
            elif name == "item":
                item = self._parse_item(p, options)
                if within_limit(len(items), options):
                    items.append(item)
            elif name == "image":
                image = self._parse_image(p)
            elif name == "textinput":
                text_input = self._parse_text_input(p)
            else:
                p.skip()
        feed = feed or Feed()
        for item in items:
            if within_limit(len(feed.items), options):
                feed.items.append(item)
        # channel-level image and textinput are rdf:resource references in RSS 1.0
        if image is not None and _is_empty(feed.image):
            feed.image = image
        if text_input is not None and _is_empty(feed.text_input):
            feed.text_input = text_input
        default_space = root.scope.get("", "")
        feed.version = "0.9" if default_space in RSS09_NAMESPACES else "1.0"
        return feed

    # -----------------------------
    # Channel
    # -----------------------------
    def _parse_channel(self, p: XMLPullParser, options: ParseOptions) -> Feed:
        feed = Feed()
        extensions: Extensions = {}
        for tok in p.children():
            if self._is_extension(tok):
                self._extension_or_custom(p, tok, extensions, options)
                continue
            name = tok.name.lower()
            if name == "title":
                feed.title = p.read_text()
            elif name == "description":
                feed.description = p.read_text()
            elif name == "link":
                link = p.read_text()
                feed.links.append(link)
                feed.link = feed.link or link
            elif name == "language":
                feed.language = p.read_text()
            elif name == "copyright":
                feed.copyright = p.read_text()
            elif name == "managingeditor":
                feed.managing_editor = p.read_text()
            elif name == "webmaster":
                feed.web_master = p.read_text()
            elif name == "pubdate":
                feed.pub_date = p.read_text()
                feed.pub_date_parsed = parse_feed_date(feed.pub_date, options)
            elif name == "lastbuilddate":
                feed.last_build_date = p.read_text()
                feed.last_build_date_parsed = parse_feed_date(feed.last_build_date, options)
            elif name == "docs":
                feed.docs = p.read_text()
            elif name == "category":
                feed.categories.append(self._parse_category(p, tok))
            elif name == "generator":
                feed.generator = p.read_text()
            elif name == "ttl":
                feed.ttl = p.read_text()
            elif name == "image":
                feed.image = self._parse_image(p)
            elif name == "rating":
                feed.rating = p.read_text()
            elif name == "textinput":
                feed.text_input = self._parse_text_input(p)
            elif name == "skiphours":
                feed.skip_hours = self._parse_list(p, "hour")
            elif name == "skipdays":
                feed.skip_days = self._parse_list(p, "day")
            elif name == "cloud":
                feed.cloud = Cloud(
                    domain=tok.attr("domain"),
                    port=tok.attr("port"),
                    path=tok.attr("path"),
                    register_procedure=tok.attr("registerProcedure"),
                    protocol=tok.attr("protocol"),
                )
                p.skip()
            elif name == "item":
                item = self._parse_item(p, options)
                if within_limit(len(feed.items), options):
                    feed.items.append(item)
            elif name == "items":
                # RSS 1.0 rdf:Seq table of contents
                p.skip()
            else:
                self._extension_or_custom(p, tok, extensions, options)
        feed.extensions = extensions
        if extensions:
            feed.itunes_ext = build_itunes_feed_extension(extensions)
            feed.dublin_core_ext = build_dublin_core_extension(extensions)
        return feed

    # -----------------------------
    # Item
    # -----------------------------
    def _parse_item(self, p: XMLPullParser, options: ParseOptions) -> Item:
        item = Item()
        extensions: Extensions = {}
        for tok in p.children():
            if tok.name == "encoded" and extension_prefix(tok) == "content":
                item.content = p.read_text()
                continue
            if self._is_extension(tok):
                self._extension_or_custom(p, tok, extensions, options)
                continue
            name = tok.name.lower()
            if name == "title":
                item.title = p.read_text()
            elif name == "description":
                item.description = p.read_text()
            elif name == "link":
                link = p.read_text()
                item.links.append(link)
                item.link = item.link or link
            elif name == "author":
                item.author = p.read_text()
            elif name == "comments":
                item.comments = p.read_text()
            elif name == "pubdate":
                item.pub_date = p.read_text()
                item.pub_date_parsed = parse_feed_date(item.pub_date, options)
            elif name == "source":
                url = tok.attr("url")
                item.source = Source(title=p.read_text(), url=url)
            elif name == "category":
                item.categories.append(self._parse_category(p, tok))
            elif name == "enclosure":
                item.enclosures.append(
                    Enclosure(url=tok.attr("url"), length=tok.attr("length"), type=tok.attr("type"))
                )
                p.skip()
            elif name == "guid":
                perma = tok.attr("isPermaLink")
                item.guid = GUID(value=p.read_text(), is_perma_link=perma)
            else:
                self._extension_or_custom(p, tok, extensions, options)
        item.extensions = extensions
        if extensions:
            item.itunes_ext = build_itunes_item_extension(extensions)
            item.dublin_core_ext = build_dublin_core_extension(extensions)
        return item

    # -----------------------------
    # Small constructs
    # -----------------------------
    @staticmethod
    def _parse_category(p: XMLPullParser, tok: StartTag) -> Category:
        domain = tok.attr("domain")
        return Category(value=p.read_text(), domain=domain)

    @staticmethod
    def _parse_image(p: XMLPullParser) -> Image:
        image = Image()
        for tok in p.children():
            name = tok.name.lower()
            if name in ("url", "link", "title", "width", "height", "description"):
                setattr(image, name, p.read_text())
            else:
                p.skip()
        return image

    @staticmethod
    def _parse_text_input(p: XMLPullParser) -> TextInput:
        text_input = TextInput()
        for tok in p.children():
            name = tok.name.lower()
            if name in ("title", "description", "name", "link"):
                setattr(text_input, name, p.read_text())
            else:
                p.skip()
        return text_input

    @staticmethod
    def _parse_list(p: XMLPullParser, child: str) -> List[str]:
        values: List[str] = []
        for tok in p.children():
            if tok.name.lower() == child:
                values.append(p.read_text())
            else:
                p.skip()
        return values
