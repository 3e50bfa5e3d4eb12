"""XML tokenizer primitive.

Documents are decoded to text, repaired according to the strictness options
(unclosed and mismatched elements are recovered by lxml), then tokenized by
expat through defusedxml's hardened SAX reader (entity declarations are
refused, external references are never fetched). Namespace processing is done
here rather than by expat so that an undeclared prefix can be tolerated instead
of aborting the whole document.
"""

from __future__ import annotations

import codecs
import re
from dataclasses import dataclass, field
from html.entities import name2codepoint
from typing import Dict, Iterator, List, Optional, Tuple, Union
from xml.sax import SAXParseException
from xml.sax.handler import ContentHandler

from defusedxml import DefusedXmlException
from defusedxml.expatreader import DefusedExpatParser
from lxml import etree

from unifeed.core.errors import FormatParseError
from unifeed.core.options import StrictnessOptions
from unifeed.extensions.namespaces import XML_NAMESPACE


# -----------------------------
# Tokens
# -----------------------------
@dataclass(frozen=True)
class Attr:
    name: str
    value: str
    prefix: str = ""
    space: Optional[str] = None


@dataclass(frozen=True)
class StartTag:
    name: str
    qname: str
    prefix: str = ""
    space: Optional[str] = None
    attrs: Tuple[Attr, ...] = ()
    # prefix -> namespace URI for every declaration in scope ("" is the default namespace)
    scope: Dict[str, str] = field(default_factory=dict)
    line: int = 0
    column: int = 0

    def attr(self, name: str, default: str = "") -> str:
        """Value of the last attribute with this local name."""
        found = default
        for a in self.attrs:
            if a.name == name:
                found = a.value
        return found

    def attr_map(self) -> Dict[str, str]:
        out: Dict[str, str] = {}
        for a in self.attrs:
            out[a.name] = a.value
        return out

    def prefixes_by_space(self) -> Dict[str, str]:
        """Namespace URI -> document prefix, for non-default declarations in scope."""
        out: Dict[str, str] = {}
        for prefix, space in self.scope.items():
            if prefix and space:
                out[space] = prefix
        return out


@dataclass(frozen=True)
class EndTag:
    name: str
    qname: str
    prefix: str = ""
    space: Optional[str] = None


@dataclass(frozen=True)
class Text:
    text: str


Token = Union[StartTag, EndTag, Text]


# -----------------------------
# Decoding
# -----------------------------
_BOMS = (
    (codecs.BOM_UTF8, "utf-8"),
    (codecs.BOM_UTF32_LE, "utf-32-le"),
    (codecs.BOM_UTF32_BE, "utf-32-be"),
    (codecs.BOM_UTF16_LE, "utf-16-le"),
    (codecs.BOM_UTF16_BE, "utf-16-be"),
)

_DECLARED_ENCODING_RE = re.compile(rb"""^\s*<\?xml[^>]*?\bencoding\s*=\s*["']([A-Za-z0-9._:\-]+)["']""")
_DECLARATION_ENCODING_TEXT_RE = re.compile(r"""^(\s*<\?xml[^>]*?\bencoding\s*=\s*)(["'])[^"']*(["'])""")


def sniff_encoding(data: bytes) -> Tuple[str, int]:
    """Return (codec name, BOM length) for a raw document prefix."""
    for bom, name in _BOMS:
        if data.startswith(bom):
            return name, len(bom)
    if data.startswith(b"<\x00?\x00"):
        return "utf-16-le", 0
    if data.startswith(b"\x00<\x00?"):
        return "utf-16-be", 0
    m = _DECLARED_ENCODING_RE.match(data[:1024])
    if m:
        declared = m.group(1).decode("ascii", "replace")
        try:
            name = codecs.lookup(declared).name
        except LookupError:
            return "utf-8", 0
        # us-ascii is a common mislabel for utf-8; utf-8 is a superset anyway
        if name == "ascii":
            return "utf-8", 0
        if name in ("utf-16", "utf-32"):
            # a 16/32-bit declaration without a BOM and without the matching byte pattern is a lie
            return "utf-8", 0
        return name, 0
    return "utf-8", 0


def decode_document(data: Union[bytes, str], strictness: Optional[StrictnessOptions] = None) -> str:
    """Decode raw feed bytes to text.

    The declared encoding is rewritten to utf-8 because the text handed to
    expat is always utf-8 encoded.
    """
    strictness = strictness or StrictnessOptions()
    if isinstance(data, str):
        text = data
    else:
        encoding, skip = sniff_encoding(data)
        try:
            text = data[skip:].decode(encoding)
        except UnicodeDecodeError as exc:
            if not strictness.strip_invalid_characters:
                raise FormatParseError(f"cannot decode document as {encoding}: {exc}") from exc
            text = data[skip:].decode(encoding, errors="ignore")
    text = text.lstrip("\ufeff \t\r\n")
    return _DECLARATION_ENCODING_TEXT_RE.sub(r'\1\2utf-8\3', text, count=1)


# -----------------------------
# Repairs driven by strictness options
# -----------------------------
_PROTECTED_RE = re.compile(
    r"<!\[CDATA\[.*?\]\]>|<!--.*?-->|<\?.*?\?>|<!DOCTYPE(?:[^\[>]|\[.*?\])*>",
    re.DOTALL | re.IGNORECASE,
)
_INVALID_CHARS_RE = re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f\ufffe\uffff]")
_CHAR_REF_RE = re.compile(r"&#(?:([0-9]+)|[xX]([0-9a-fA-F]+));")
_AMPERSAND_RE = re.compile(r"&(#[0-9]+;|#[xX][0-9a-fA-F]+;|[A-Za-z_][A-Za-z0-9_.\-]*;)?")
_BARE_LT_RE = re.compile(r"<(?![A-Za-z_:/!?])")

_XML_ENTITIES = frozenset({"amp", "lt", "gt", "quot", "apos"})

# HTML elements that never carry content and are routinely left unclosed in feeds
VOID_ELEMENTS = frozenset(
    {"area", "base", "basefont", "br", "col", "frame", "hr", "img", "input", "isindex", "param", "wbr"}
)


def _segments(text: str) -> Iterator[Tuple[str, bool]]:
    """Split text into (chunk, protected) pairs; CDATA, comments, PIs and doctype are protected."""
    pos = 0
    for m in _PROTECTED_RE.finditer(text):
        if m.start() > pos:
            yield text[pos:m.start()], False
        yield m.group(0), True
        pos = m.end()
    if pos < len(text):
        yield text[pos:], False


def _is_xml_char(codepoint: int) -> bool:
    return (
        codepoint in (0x9, 0xA, 0xD)
        or 0x20 <= codepoint <= 0xD7FF
        or 0xE000 <= codepoint <= 0xFFFD
        or 0x10000 <= codepoint <= 0x10FFFF
    )


def strip_invalid_characters(text: str) -> str:
    text = _INVALID_CHARS_RE.sub("", text)

    def _ref(m: re.Match) -> str:
        try:
            cp = int(m.group(1)) if m.group(1) else int(m.group(2), 16)
        except ValueError:
            return ""
        return m.group(0) if _is_xml_char(cp) else ""

    return "".join(chunk if protected else _CHAR_REF_RE.sub(_ref, chunk) for chunk, protected in _segments(text))


def _escape_chunk(chunk: str) -> str:
    def _amp(m: re.Match) -> str:
        ref = m.group(1)
        if ref is None:
            return "&amp;"
        if ref.startswith("#"):
            return m.group(0)
        name = ref[:-1]
        if name in _XML_ENTITIES:
            return m.group(0)
        codepoint = name2codepoint.get(name)
        if codepoint is not None:
            return f"&#{codepoint};"
        return "&amp;" + ref

    chunk = _AMPERSAND_RE.sub(_amp, chunk)
    return _BARE_LT_RE.sub("&lt;", chunk)


def escape_unescaped_markup(text: str) -> str:
    """Escape bare '&' and '<' and turn HTML named entities into character references."""
    return "".join(chunk if protected else _escape_chunk(chunk) for chunk, protected in _segments(text))


_VOID_TAG_RE = re.compile(r"""<(/?)([A-Za-z]+)(?=[\s/>])((?:[^>"']|"[^"]*"|'[^']*')*)>""")


def close_void_elements(text: str) -> str:
    """Self-close HTML void elements and drop their end tags."""

    def _fix(m: re.Match) -> str:
        closing, name, rest = m.group(1), m.group(2), m.group(3)
        if name.lower() not in VOID_ELEMENTS:
            return m.group(0)
        if closing:
            return ""
        rest = rest.rstrip()
        return f"<{name}{rest}>" if rest.endswith("/") else f"<{name}{rest}/>"

    return "".join(chunk if protected else _VOID_TAG_RE.sub(_fix, chunk) for chunk, protected in _segments(text))


def _lxml_parser(recover: bool) -> etree.XMLParser:
    return etree.XMLParser(ns_clean=True, recover=recover, collect_ids=False, resolve_entities=False)


def recover_document(text: str) -> str:
    """Close unclosed and mismatched elements with libxml2's recovering parser.

    Well-formed documents are returned untouched, as are documents libxml2
    cannot recover a root element from; expat then reports the error.
    Anything after the root element closes is discarded.
    """
    data = text.encode("utf-8")
    try:
        etree.fromstring(data, parser=_lxml_parser(recover=False))
        return text
    except etree.XMLSyntaxError:
        pass
    try:
        root = etree.fromstring(data, parser=_lxml_parser(recover=True))
    except etree.XMLSyntaxError:
        return text
    if root is None:
        return text
    return etree.tostring(root, encoding="unicode")


def sanitize_document(text: str, strictness: Optional[StrictnessOptions] = None) -> str:
    strictness = strictness or StrictnessOptions()
    if strictness.strip_invalid_characters:
        text = strip_invalid_characters(text)
    if strictness.allow_unescaped_markup:
        text = escape_unescaped_markup(text)
    if strictness.auto_close_tags:
        text = recover_document(close_void_elements(text))
    return text


# -----------------------------
# expat driver
# -----------------------------
def _split_qname(qname: str) -> Tuple[str, str]:
    if ":" in qname:
        prefix, local = qname.split(":", 1)
        return prefix, local
    return "", qname


class _TokenCollector(ContentHandler):
    def __init__(self, allow_undeclared_namespaces: bool):
        super().__init__()
        self.allow_undeclared_namespaces = allow_undeclared_namespaces
        self.tokens: List[Token] = []
        self._text: List[str] = []
        self._scopes: List[Dict[str, str]] = [{"xml": XML_NAMESPACE}]
        self._locator = None

    def setDocumentLocator(self, locator) -> None:
        self._locator = locator

    def _position(self) -> Tuple[int, int]:
        if self._locator is None:
            return 0, 0
        return self._locator.getLineNumber() or 0, self._locator.getColumnNumber() or 0

    def _flush_text(self) -> None:
        if self._text:
            self.tokens.append(Text("".join(self._text)))
            self._text = []

    def _resolve(self, prefix: str, qname: str, scope: Dict[str, str]) -> Optional[str]:
        if prefix in scope:
            return scope[prefix] or None
        if self.allow_undeclared_namespaces:
            return None
        line, column = self._position()
        raise FormatParseError(f"undeclared namespace prefix {prefix!r} on <{qname}>", line=line, column=column)

    def startElement(self, name, attrs) -> None:
        self._flush_text()
        scope = dict(self._scopes[-1])
        plain: List[Tuple[str, str]] = []
        for key, value in attrs.items():
            if key == "xmlns":
                scope[""] = value
            elif key.startswith("xmlns:"):
                scope[key[6:]] = value
            else:
                plain.append((key, value))
        self._scopes.append(scope)

        prefix, local = _split_qname(name)
        space = self._resolve(prefix, name, scope) if prefix else (scope.get("") or None)
        resolved: List[Attr] = []
        for key, value in plain:
            attr_prefix, attr_local = _split_qname(key)
            attr_space = self._resolve(attr_prefix, key, scope) if attr_prefix else None
            resolved.append(Attr(name=attr_local, value=value, prefix=attr_prefix, space=attr_space))
        line, column = self._position()
        self.tokens.append(
            StartTag(
                name=local,
                qname=name,
                prefix=prefix,
                space=space,
                attrs=tuple(resolved),
                scope=scope,
                line=line,
                column=column,
            )
        )

    def endElement(self, name) -> None:
        self._flush_text()
        scope = self._scopes.pop()
        prefix, local = _split_qname(name)
        space = (scope.get(prefix) or None) if prefix else (scope.get("") or None)
        self.tokens.append(EndTag(name=local, qname=name, prefix=prefix, space=space))

    def characters(self, content) -> None:
        self._text.append(content)

    def ignorableWhitespace(self, whitespace) -> None:
        self._text.append(whitespace)

    def endDocument(self) -> None:
        self._flush_text()


class XMLTokenizer:
    """Incremental tokenizer. Feed text, read `tokens`, then `close()`."""

    def __init__(self, *, allow_undeclared_namespaces: bool = True):
        self._collector = _TokenCollector(allow_undeclared_namespaces)
        self._reader = DefusedExpatParser(forbid_dtd=False, forbid_entities=True, forbid_external=False)
        self._reader.setContentHandler(self._collector)
        # the reader doubles as a locator once feeding has started
        self._collector.setDocumentLocator(self._reader)

    @property
    def tokens(self) -> List[Token]:
        return self._collector.tokens

    def feed(self, text: str) -> None:
        self._call(self._reader.feed, text)

    def close(self) -> None:
        self._call(self._reader.close)

    @staticmethod
    def _call(fn, *args) -> None:
        try:
            fn(*args)
        except SAXParseException as exc:
            raise FormatParseError(
                exc.getMessage(), line=exc.getLineNumber(), column=exc.getColumnNumber()
            ) from exc
        except DefusedXmlException as exc:
            raise FormatParseError(str(exc)) from exc


def tokenize(data: Union[bytes, str], strictness: Optional[StrictnessOptions] = None) -> List[Token]:
    """Decode, repair and tokenize a whole XML document."""
    strictness = strictness or StrictnessOptions()
    text = sanitize_document(decode_document(data, strictness), strictness)
    tokenizer = XMLTokenizer(allow_undeclared_namespaces=strictness.allow_undisclosed_xml_namespaces)
    tokenizer.feed(text)
    tokenizer.close()
    return tokenizer.tokens
