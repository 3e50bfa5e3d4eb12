"""Pull-style cursor over tokenizer output.

Format parsers walk the document with `children()`, consuming each child
element fully (`read_text`, `read_markup`, `skip` or a nested walk) before
asking for the next one.
"""

from __future__ import annotations

from typing import Iterator, List, Optional, Tuple, Union
from xml.sax.saxutils import escape, quoteattr

from unifeed.core.errors import FormatParseError
from unifeed.xml.tokenizer import EndTag, StartTag, Text, Token


class XMLPullParser:
    def __init__(self, tokens: List[Token], *, allow_unescaped_markup: bool = True, feed_type: Optional[str] = None):
        self._tokens = tokens
        self._pos = -1
        self.allow_unescaped_markup = allow_unescaped_markup
        self.feed_type = feed_type

    @property
    def current(self) -> Optional[Token]:
        if 0 <= self._pos < len(self._tokens):
            return self._tokens[self._pos]
        return None

    def error(self, message: str) -> FormatParseError:
        tok = self.current
        if isinstance(tok, StartTag) and tok.line:
            return FormatParseError(message, feed_type=self.feed_type, line=tok.line, column=tok.column)
        return FormatParseError(message, feed_type=self.feed_type)

    def next(self) -> Token:
        self._pos += 1
        if self._pos >= len(self._tokens):
            raise FormatParseError("unexpected end of document", feed_type=self.feed_type)
        return self._tokens[self._pos]

    def peek(self) -> Optional[Token]:
        if self._pos + 1 < len(self._tokens):
            return self._tokens[self._pos + 1]
        return None

    def next_tag(self) -> Union[StartTag, EndTag]:
        """Advance to the next start or end tag, ignoring character data."""
        while True:
            tok = self.next()
            if not isinstance(tok, Text):
                return tok

    def find_root(self) -> StartTag:
        while self.peek() is not None:
            tok = self.next()
            if isinstance(tok, StartTag):
                return tok
        raise FormatParseError("document has no root element", feed_type=self.feed_type)

    def expect_start(self) -> StartTag:
        tok = self.current
        if not isinstance(tok, StartTag):
            raise self.error("expected a start tag")
        return tok

    def children(self) -> Iterator[StartTag]:
        """Yield each child start tag of the current element.

        The caller must consume the yielded element before resuming.
        """
        self.expect_start()
        while True:
            tok = self.next_tag()
            if isinstance(tok, EndTag):
                return
            yield tok

    def skip(self) -> None:
        self.expect_start()
        depth = 1
        while depth:
            tok = self.next()
            if isinstance(tok, StartTag):
                depth += 1
            elif isinstance(tok, EndTag):
                depth -= 1

    def read_text(self) -> str:
        """Return the trimmed character content of the current element.

        Nested elements are kept as serialized markup when unescaped markup is
        allowed, otherwise they are a parse error.
        """
        start = self.expect_start()
        parts: List[Tuple[bool, str]] = []
        has_markup = False
        while True:
            tok = self.next()
            if isinstance(tok, EndTag):
                break
            if isinstance(tok, Text):
                parts.append((False, tok.text))
                continue
            if not self.allow_unescaped_markup:
                raise self.error(f"unexpected element <{tok.qname}> inside <{start.qname}>")
            has_markup = True
            parts.append((True, self._serialize_element(tok)))
        if has_markup:
            return "".join(s if markup else escape(s) for markup, s in parts).strip()
        return "".join(s for _, s in parts).strip()

    def read_markup(self) -> str:
        """Serialize the inner content of the current element (Atom xhtml constructs)."""
        self.expect_start()
        out: List[str] = []
        while True:
            tok = self.next()
            if isinstance(tok, EndTag):
                break
            if isinstance(tok, Text):
                out.append(escape(tok.text))
            else:
                out.append(self._serialize_element(tok))
        return "".join(out).strip()

    def _serialize_element(self, start: StartTag) -> str:
        attrs = "".join(
            f" {a.prefix + ':' if a.prefix else ''}{a.name}={quoteattr(a.value)}" for a in start.attrs
        )
        nxt = self.peek()
        if isinstance(nxt, EndTag):
            self.next()
            return f"<{start.qname}{attrs}/>"
        inner = []
        while True:
            tok = self.next()
            if isinstance(tok, EndTag):
                break
            if isinstance(tok, Text):
                inner.append(escape(tok.text))
            else:
                inner.append(self._serialize_element(tok))
        return f"<{start.qname}{attrs}>{''.join(inner)}</{start.qname}>"
