import unittest

from unifeed.core.errors import FormatParseError
from unifeed.core.options import StrictnessOptions
from unifeed.xml.pullparser import XMLPullParser
from unifeed.xml.tokenizer import (
    EndTag,
    StartTag,
    Text,
    close_void_elements,
    decode_document,
    escape_unescaped_markup,
    recover_document,
    sniff_encoding,
    strip_invalid_characters,
    tokenize,
)


class TestRepairs(unittest.TestCase):
    def test_recover_closes_intermediate_elements(self):
        self.assertEqual(recover_document("<a><b>text</a>"), "<a><b>text</b></a>")

    def test_recover_closes_mismatched_case(self):
        self.assertEqual(recover_document("<a><B>x</b><c/></a>"), "<a><B>x</B><c/></a>")

    def test_recover_closes_open_elements_at_end(self):
        self.assertEqual(recover_document("<root><item>a"), "<root><item>a</item></root>")

    def test_recover_discards_content_after_root(self):
        self.assertEqual(recover_document("<root/>trailing <junk>"), "<root/>")

    def test_recover_leaves_well_formed_documents_alone(self):
        text = '<?xml version="1.0" encoding="utf-8"?>\n<root><![CDATA[<b>]]></root>'
        self.assertEqual(recover_document(text), text)

    def test_void_elements_self_closed(self):
        self.assertEqual(
            close_void_elements("<root><br>x<br/><img src='a>b'></br></root>"),
            "<root><br/>x<br/><img src='a>b'/></root>",
        )
        self.assertEqual(close_void_elements("<brand>x</brand><![CDATA[<br>]]>"), "<brand>x</brand><![CDATA[<br>]]>")

    def test_escape_bare_ampersand_and_entities(self):
        fixed = escape_unescaped_markup("<t>Fish & Chips &nbsp; &copy; &bogus; &amp; 1 < 2</t>")
        self.assertEqual(fixed, "<t>Fish &amp; Chips &#160; &#169; &amp;bogus; &amp; 1 &lt; 2</t>")

    def test_escape_leaves_cdata_alone(self):
        text = "<t><![CDATA[a & b < c]]></t>"
        self.assertEqual(escape_unescaped_markup(text), text)

    def test_strip_invalid_characters(self):
        self.assertEqual(strip_invalid_characters("<t>a\x01b&#x1;c</t>"), "<t>abc</t>")


class TestDecoding(unittest.TestCase):
    def test_sniff_bom(self):
        self.assertEqual(sniff_encoding(b"\xef\xbb\xbf<rss/>"), ("utf-8", 3))

    def test_declared_encoding_is_honoured_and_rewritten(self):
        data = b'<?xml version="1.0" encoding="ISO-8859-1"?><t>caf\xe9</t>'
        text = decode_document(data)
        self.assertEqual(text, '<?xml version="1.0" encoding="utf-8"?><t>café</t>')

    def test_undecodable_bytes_fail_in_strict_mode(self):
        with self.assertRaises(FormatParseError):
            decode_document(b"<t>\xff\xfe\xfa</t>" + b"\xc3", StrictnessOptions.strict())


class TestTokenize(unittest.TestCase):
    def test_tokens_in_document_order(self):
        tokens = tokenize(b"<root a='1'>hi<child/></root>")
        kinds = [type(t) for t in tokens]
        self.assertEqual(kinds, [StartTag, Text, StartTag, EndTag, EndTag])
        self.assertEqual(tokens[0].attr("a"), "1")
        self.assertEqual(tokens[1].text, "hi")

    def test_namespaces_are_resolved(self):
        tokens = tokenize(b'<root xmlns:dc="http://purl.org/dc/elements/1.1/"><dc:date>x</dc:date></root>')
        date = tokens[1]
        self.assertEqual(date.name, "date")
        self.assertEqual(date.prefix, "dc")
        self.assertEqual(date.space, "http://purl.org/dc/elements/1.1/")

    def test_undeclared_prefix_tolerated(self):
        tokens = tokenize(b"<root><foo:bar>x</foo:bar></root>")
        bar = tokens[1]
        self.assertEqual((bar.name, bar.prefix, bar.space), ("bar", "foo", None))

    def test_undeclared_prefix_rejected_when_strict(self):
        strictness = StrictnessOptions(allow_undisclosed_xml_namespaces=False)
        with self.assertRaises(FormatParseError) as ctx:
            tokenize(b"<root>\n<foo:bar>x</foo:bar></root>", strictness)
        self.assertEqual(ctx.exception.line, 2)

    def test_mismatched_tags_fail_without_auto_close(self):
        with self.assertRaises(FormatParseError) as ctx:
            tokenize(b"<rss><channel></rss>", StrictnessOptions.strict())
        self.assertEqual(ctx.exception.line, 1)

    def test_mismatched_tags_repaired_by_default(self):
        tokens = tokenize(b"<rss><channel></rss>")
        self.assertEqual([t.name for t in tokens if isinstance(t, EndTag)], ["channel", "rss"])


class TestPullParser(unittest.TestCase):
    DOC = b"<description>Hello <b>world</b> &amp; co</description>"

    def test_read_text_serializes_nested_markup(self):
        p = XMLPullParser(tokenize(self.DOC))
        p.find_root()
        self.assertEqual(p.read_text(), "Hello <b>world</b> &amp; co")

    def test_read_text_rejects_markup_when_strict(self):
        p = XMLPullParser(tokenize(self.DOC), allow_unescaped_markup=False)
        p.find_root()
        with self.assertRaises(FormatParseError):
            p.read_text()

    def test_children_and_skip(self):
        p = XMLPullParser(tokenize(b"<r><a><deep>1</deep></a><b>2</b></r>"))
        p.find_root()
        seen = []
        for tok in p.children():
            seen.append(tok.name)
            if tok.name == "a":
                p.skip()
            else:
                self.assertEqual(p.read_text(), "2")
        self.assertEqual(seen, ["a", "b"])

    def test_find_root_on_empty_document(self):
        p = XMLPullParser([])
        with self.assertRaises(FormatParseError):
            p.find_root()


if __name__ == "__main__":
    unittest.main()
