import os
import unittest
from datetime import datetime, timezone

from unifeed.core.errors import TypeMismatchError
from unifeed.core.options import ParseOptions
from unifeed.extensions.extension import Extension
from unifeed.parsers import atom, jsonfeed, rss
from unifeed.parsers.atom import AtomParser
from unifeed.parsers.jsonfeed import JSONParser
from unifeed.parsers.rss import RSSParser
from unifeed.universal.convert_atom import AtomConverter, format_generator
from unifeed.universal.convert_json import JSONConverter
from unifeed.universal.convert_rss import RSSConverter
from unifeed.universal.converter import convert
from unifeed.universal.model import Enclosure, Image, Person


def _fixture(name: str) -> bytes:
    fixture_path = os.path.join(os.path.dirname(__file__), "fixtures", name)
    with open(fixture_path, "rb") as f:
        return f.read()


class TestRSSConverter(unittest.TestCase):
    def setUp(self):
        self.feed = RSSConverter().convert(RSSParser().parse(_fixture("rss2_podcast.xml")))

    def test_feed_fields(self):
        feed = self.feed
        self.assertEqual(feed.feed_type, "rss")
        self.assertEqual(feed.feed_version, "2.0")
        self.assertEqual(feed.link, "https://radio.example.com/")
        self.assertEqual(feed.feed_link, "https://radio.example.com/feed.xml")
        self.assertEqual(feed.links, ["https://radio.example.com/", "https://radio.example.com/feed.xml"])
        self.assertEqual(feed.authors, [Person(name="Dana Reyes", email="editor@example.com")])
        self.assertEqual(feed.updated, "Tue, 05 Mar 2024 09:30:00 GMT")
        self.assertEqual(feed.published_parsed, datetime(2024, 3, 4, 8, tzinfo=timezone.utc))
        self.assertEqual(feed.image, Image(url="https://radio.example.com/cover.png", title="Night Shift Radio"))
        self.assertEqual(feed.copyright, "2024 Night Shift")

    def test_category_precedence(self):
        self.assertEqual(
            self.feed.categories,
            ["Talk", "late", "radio", "Society & Culture", "Documentary", "Insomnia"],
        )

    def test_items(self):
        first, second = self.feed.items
        self.assertEqual(first.content, "<p>Full <b>show notes</b></p>")
        self.assertEqual(first.authors, [Person(name="Sam Ortiz", email="host@example.com")])
        self.assertEqual(first.guid, "ep-2")
        self.assertEqual(first.image, Image(url="https://radio.example.com/ep2.png"))
        self.assertEqual(
            first.enclosures,
            [Enclosure(url="https://cdn.example.com/ep2.mp3", length="2048", type="audio/mpeg")],
        )
        self.assertEqual(first.updated, "")

        # dc:date stands in for the missing pubDate
        self.assertEqual(second.published, "2024-02-26T04:00:00Z")
        self.assertEqual(second.published_parsed, datetime(2024, 2, 26, 4, tzinfo=timezone.utc))
        self.assertEqual(second.updated_parsed, second.published_parsed)
        self.assertEqual(second.authors, [Person(name="Sam Ortiz")])

    def test_categories_native_keywords_then_dublin_core(self):
        doc = (
            b'<rss version="2.0" xmlns:itunes="http://www.itunes.com/dtds/podcast-1.0.dtd" '
            b'xmlns:dc="http://purl.org/dc/elements/1.1/"><channel>'
            b"<category>A</category><itunes:keywords>b,c</itunes:keywords><dc:subject>D</dc:subject>"
            b"</channel></rss>"
        )
        feed = RSSConverter().convert(RSSParser().parse(doc))
        self.assertEqual(feed.categories, ["A", "b", "c", "D"])

    def test_single_enclosure(self):
        doc = b'<rss><channel><item><enclosure url="u" type="t" length="5"/></item></channel></rss>'
        item = RSSConverter().convert(RSSParser().parse(doc)).items[0]
        self.assertEqual(item.enclosures, [Enclosure(url="u", type="t", length="5")])

    def test_first_self_link_wins(self):
        doc = (
            b'<rss xmlns:atom="http://www.w3.org/2005/Atom"><channel>'
            b'<atom:link rel="alternate" href="http://x/page"/>'
            b'<atom:link rel="self" href="http://x/one"/><atom:link rel="self" href="http://x/two"/>'
            b"</channel></rss>"
        )
        self.assertEqual(RSSConverter().convert(RSSParser().parse(doc)).feed_link, "http://x/one")

    def test_rdf_dublin_core_fallbacks(self):
        feed = RSSConverter().convert(RSSParser().parse(_fixture("rss10_rdf.xml")))
        self.assertEqual(feed.feed_version, "1.0")
        self.assertEqual(feed.copyright, "Public domain")
        self.assertEqual(feed.updated_parsed, datetime(2024, 1, 15, 8, tzinfo=timezone.utc))
        self.assertEqual(feed.items[0].authors, [Person(name="A. Cartographer")])
        self.assertEqual(feed.items[0].categories, ["Geography"])
        self.assertEqual(feed.items[1].published_parsed, datetime(2024, 1, 14, 8, tzinfo=timezone.utc))
        self.assertEqual(feed.image, Image(url="http://library.example.com/logo.png", title="Library"))

    def test_secondary_dates_follow_parse_dates(self):
        native = RSSParser().parse(_fixture("rss10_rdf.xml"))
        feed = RSSConverter().convert(native, ParseOptions(parse_dates=False))
        self.assertEqual(feed.updated, "2024-01-15T08:00:00Z")
        self.assertIsNone(feed.updated_parsed)


class TestAtomConverter(unittest.TestCase):
    def setUp(self):
        self.feed = AtomConverter().convert(AtomParser().parse(_fixture("atom10.xml")))

    def test_feed_fields(self):
        feed = self.feed
        self.assertEqual(feed.feed_type, "atom")
        self.assertEqual(feed.description, "Observations &amp; sketches")
        self.assertEqual(feed.link, "https://notes.example.org/")
        self.assertEqual(feed.feed_link, "https://notes.example.org/atom.xml")
        self.assertEqual(
            feed.links,
            [
                "https://notes.example.org/",
                "https://notes.example.org/atom.xml",
                "https://notes.example.org/no-rel",
            ],
        )
        self.assertEqual(feed.generator, "NoteGen v2.1 https://gen.example.org/")
        self.assertEqual(feed.image, Image(url="https://notes.example.org/logo.png"))
        self.assertEqual(feed.copyright, "CC BY 4.0")
        self.assertEqual(feed.authors, [Person(name="Robin Park", email="robin@example.org")])
        self.assertEqual(feed.categories, ["nature"])

    def test_items(self):
        heron, frost = self.feed.items
        self.assertEqual(heron.link, "https://notes.example.org/heron")
        self.assertEqual(heron.guid, "tag:notes.example.org,2024:heron")
        self.assertEqual(
            heron.enclosures,
            [Enclosure(url="https://notes.example.org/heron.jpg", length="52000", type="image/jpeg")],
        )
        self.assertEqual(heron.categories, ["birds"])
        # published falls back to updated
        self.assertEqual(frost.published, "2024-02-20T07:00:00Z")
        self.assertEqual(frost.published_parsed, datetime(2024, 2, 20, 7, tzinfo=timezone.utc))
        self.assertEqual(frost.enclosures, [])

    def test_enclosure_links_only(self):
        doc = (
            b'<feed xmlns="http://www.w3.org/2005/Atom"><entry>'
            b'<link rel="enclosure" href="u" length="5" type="t"/>'
            b'<link rel="alternate" href="v" length="6" type="t"/>'
            b"</entry></feed>"
        )
        item = AtomConverter().convert(AtomParser().parse(doc)).items[0]
        self.assertEqual(item.enclosures, [Enclosure(url="u", type="t", length="5")])

    def test_format_generator(self):
        self.assertEqual(format_generator(None), "")
        self.assertEqual(format_generator(atom.Generator(value="Gen")), "Gen")
        self.assertEqual(format_generator(atom.Generator(value="Gen", version="3")), "Gen v3")


class TestJSONConverter(unittest.TestCase):
    def setUp(self):
        self.feed = JSONConverter().convert(JSONParser().parse(_fixture("jsonfeed11.json")))

    def test_feed_fields(self):
        feed = self.feed
        self.assertEqual(feed.feed_type, "json")
        self.assertEqual(feed.feed_version, "https://jsonfeed.org/version/1.1")
        self.assertEqual(feed.link, "https://bread.example.com/")
        self.assertEqual(feed.feed_link, "https://bread.example.com/feed.json")
        self.assertEqual(feed.links, ["https://bread.example.com/", "https://bread.example.com/feed.json"])
        self.assertEqual(feed.authors, [Person(name="Kit", email="kit@example.com")])
        self.assertEqual(feed.image, Image(url="https://bread.example.com/icon.png"))
        # feed dates come from the first item
        self.assertEqual(feed.updated, "2024-03-03T09:00:00-05:00")
        self.assertEqual(feed.published, "2024-03-02T09:00:00-05:00")

    def test_items(self):
        rye, first = self.feed.items
        self.assertEqual(rye.guid, "2")
        self.assertEqual(rye.content, "<p>Dense.</p>")
        self.assertEqual(rye.links, ["https://bread.example.com/rye", "https://elsewhere.example.com/rye"])
        self.assertEqual(rye.image, Image(url="https://bread.example.com/rye.jpg"))
        self.assertEqual(rye.categories, ["rye", "fail"])
        self.assertEqual(
            rye.enclosures,
            [Enclosure(url="https://bread.example.com/rye.m4a", length="61", type="audio/x-m4a")],
        )
        self.assertEqual(first.content, "Crumb looked fine.")
        self.assertEqual(first.authors, [Person(name="Kit")])
        self.assertIsNone(first.image)

    def test_underscore_extensions_pass_through(self):
        doc = (
            b'{"version": "https://jsonfeed.org/version/1.1", "title": "t",'
            b' "_blue": {"shade": "navy", "tags": ["a", "b"]},'
            b' "items": [{"id": "1", "_flag": true}]}'
        )
        feed = JSONConverter().convert(JSONParser().parse(doc))
        self.assertEqual(feed.extensions["blue"]["shade"], [Extension(name="shade", value="navy")])
        self.assertEqual([e.value for e in feed.extensions["blue"]["tags"]], ["a", "b"])
        self.assertEqual(feed.items[0].extensions, {"flag": {"flag": [Extension(name="flag", value="true")]}})


class TestDispatch(unittest.TestCase):
    def test_wrong_native_type(self):
        with self.assertRaises(TypeMismatchError):
            RSSConverter().convert(atom.Feed())
        with self.assertRaises(TypeError):
            JSONConverter().convert(rss.Feed())

    def test_convert_picks_converter_by_type(self):
        self.assertEqual(convert(jsonfeed.Feed(title="x")).feed_type, "json")
        self.assertEqual(convert(atom.Feed()).feed_type, "atom")
        with self.assertRaises(TypeMismatchError):
            convert(object())

    def test_conversion_is_deterministic(self):
        data = _fixture("rss2_podcast.xml")
        a = RSSConverter().convert(RSSParser().parse(data))
        b = RSSConverter().convert(RSSParser().parse(data))
        self.assertEqual(a, b)
        self.assertEqual(a.to_dict(), b.to_dict())


if __name__ == "__main__":
    unittest.main()
