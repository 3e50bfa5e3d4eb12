"""Exception types raised by unifeed.

Only detection and document-level parse failures abort a parse. Field-level
misses (a date that cannot be normalized, a missing author) never raise out of
the public entry points; the field is left empty instead.
"""

from __future__ import annotations

from typing import Optional


class FeedError(Exception):
    """Base class for all unifeed errors."""


class DetectionError(FeedError):
    """The document format could not be determined."""

    def __init__(self, message: str = "failed to detect feed type"):
        super().__init__(message)


class FormatParseError(FeedError):
    """The document is malformed beyond what the configured leniency tolerates.

    `diagnostic` is the underlying tokenizer/decoder message; `line` and
    `column` are filled in when the tokenizer reports a position.
    """

    def __init__(
        self,
        diagnostic: str,
        *,
        feed_type: Optional[str] = None,
        line: Optional[int] = None,
        column: Optional[int] = None,
    ):
        self.diagnostic = diagnostic
        self.feed_type = feed_type
        self.line = line
        self.column = column
        super().__init__(self._format())

    def _format(self) -> str:
        where = ""
        if self.line is not None:
            where = f" (line {self.line}, column {self.column or 0})"
        kind = f"{self.feed_type} " if self.feed_type else ""
        return f"failed to parse {kind}feed: {self.diagnostic}{where}"


class TypeMismatchError(FeedError, TypeError):
    """A converter received a native tree of the wrong format."""


class UnparseableDateError(FeedError, ValueError):
    """A date string matched none of the known layouts."""

    def __init__(self, raw: str):
        self.raw = raw
        super().__init__(f"unparseable date: {raw!r}")


class HTTPError(FeedError):
    """The feed server answered with a non-2xx status."""

    def __init__(self, status_code: int, reason: str = "", url: str = ""):
        self.status_code = status_code
        self.reason = reason
        self.url = url
        super().__init__(f"http error: {status_code} {reason}".strip())
