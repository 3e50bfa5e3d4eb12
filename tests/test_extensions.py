import unittest

from unifeed.core.errors import FormatParseError
from unifeed.core.options import StrictnessOptions
from unifeed.extensions.dublincore import build_dublin_core_extension
from unifeed.extensions.extension import Extension, add_extension, extensions_to_dict, first_value
from unifeed.extensions.itunes import build_itunes_feed_extension, build_itunes_item_extension
from unifeed.extensions.namespaces import CANONICAL_NAMESPACES, DEFAULT_PREFIX, canonical_prefix
from unifeed.xml.pullparser import XMLPullParser
from unifeed.xml.tokenizer import tokenize

ITUNES = "http://www.itunes.com/dtds/podcast-1.0.dtd"


def _capture(doc: bytes, strictness=None):
    """Collect every child of the root element as an extension."""
    p = XMLPullParser(tokenize(doc, strictness))
    p.find_root()
    extensions = {}
    for _ in p.children():
        add_extension(extensions, p)
    return extensions


class TestCanonicalPrefix(unittest.TestCase):
    def test_known_namespace_wins_over_document_prefix(self):
        self.assertEqual(canonical_prefix(ITUNES, {ITUNES: "pod"}), "itunes")

    def test_unknown_namespace_uses_declared_prefix(self):
        self.assertEqual(canonical_prefix("urn:x-custom", {"urn:x-custom": "cx"}), "cx")

    def test_unknown_undeclared_namespace_is_its_own_bucket(self):
        self.assertEqual(canonical_prefix("urn:x-custom"), "urn:x-custom")

    def test_no_namespace_is_default(self):
        self.assertEqual(canonical_prefix(None), DEFAULT_PREFIX)
        self.assertEqual(canonical_prefix(""), DEFAULT_PREFIX)

    def test_table_is_read_only(self):
        with self.assertRaises(TypeError):
            CANONICAL_NAMESPACES["urn:x"] = "x"


class TestExtensionCapture(unittest.TestCase):
    def test_undeclared_prefix_bucketed_under_raw_prefix(self):
        doc = b'<root><foo:bar attr="1">text<baz>x</baz></foo:bar></root>'
        extensions = _capture(doc)
        self.assertEqual(list(extensions), ["foo"])
        bar = extensions["foo"]["bar"][0]
        expected = Extension(
            name="bar",
            value="text",
            attrs={"attr": "1"},
            children={"baz": [Extension(name="baz", value="x")]},
        )
        self.assertEqual(bar, expected)

    def test_undeclared_prefix_is_fatal_when_disallowed(self):
        doc = b'<root><foo:bar attr="1">text<baz>x</baz></foo:bar></root>'
        with self.assertRaises(FormatParseError):
            _capture(doc, StrictnessOptions(allow_undisclosed_xml_namespaces=False))

    def test_repeated_elements_keep_document_order(self):
        doc = (
            b'<root xmlns:x="urn:x-custom"><x:tag>one</x:tag><x:other/><x:tag>two</x:tag></root>'
        )
        extensions = _capture(doc)
        self.assertEqual([e.value for e in extensions["x"]["tag"]], ["one", "two"])
        self.assertEqual(first_value(extensions, "x", "tag"), "one")
        self.assertEqual(first_value(extensions, "x", "missing"), "")

    def test_to_dict_is_plain_data(self):
        extensions = _capture(b'<root xmlns:x="urn:x-custom"><x:tag k="v">one</x:tag></root>')
        self.assertEqual(
            extensions_to_dict(extensions),
            {"x": {"tag": [{"name": "tag", "value": "one", "attrs": {"k": "v"}, "children": {}}]}},
        )


class TestTypedViews(unittest.TestCase):
    def test_itunes_feed_view(self):
        doc = (
            '<channel xmlns:it="http://www.itunes.com/dtds/podcast-1.0.dtd">'
            "<it:author>Dana</it:author>"
            "<it:keywords>a,b</it:keywords>"
            '<it:image href="https://example.com/c.png"/>'
            '<it:category text="Arts"><it:category text="Design"/></it:category>'
            "<it:owner><it:name>Dana</it:name><it:email>d@example.com</it:email></it:owner>"
            "<it:new-feed-url>https://example.com/new</it:new-feed-url>"
            "</channel>"
        ).encode("utf-8")
        view = build_itunes_feed_extension(_capture(doc))
        self.assertEqual(view.author, "Dana")
        self.assertEqual(view.keywords, "a,b")
        self.assertEqual(view.image, "https://example.com/c.png")
        self.assertEqual(view.categories[0].text, "Arts")
        self.assertEqual(view.categories[0].subcategory.text, "Design")
        self.assertEqual(view.owner.email, "d@example.com")
        self.assertEqual(view.new_feed_url, "https://example.com/new")

    def test_itunes_item_view(self):
        doc = (
            '<item xmlns:itunes="http://www.itunes.com/dtds/podcast-1.0.dtd">'
            "<itunes:duration>01:02:03</itunes:duration><itunes:episodeType>full</itunes:episodeType>"
            "</item>"
        ).encode("utf-8")
        view = build_itunes_item_extension(_capture(doc))
        self.assertEqual(view.duration, "01:02:03")
        self.assertEqual(view.episode_type, "full")

    def test_views_absent_without_bucket(self):
        self.assertIsNone(build_itunes_feed_extension({}))
        self.assertIsNone(build_itunes_item_extension(None))
        self.assertIsNone(build_dublin_core_extension({}))

    def test_dublin_core_view(self):
        doc = (
            b'<item xmlns:dc="http://purl.org/dc/elements/1.1/">'
            b"<dc:subject>one</dc:subject><dc:subject>two</dc:subject><dc:date>2024-01-01</dc:date>"
            b"</item>"
        )
        view = build_dublin_core_extension(_capture(doc))
        self.assertEqual(view.subject, ["one", "two"])
        self.assertEqual(view.first("date"), "2024-01-01")
        self.assertEqual(view.first("creator"), "")


if __name__ == "__main__":
    unittest.main()
