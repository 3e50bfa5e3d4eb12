"""Base class shared by the native-tree -> universal-model converters."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from unifeed.core.errors import TypeMismatchError
from unifeed.core.options import ParseOptions
from unifeed.dates.dateparser import try_parse_date
from unifeed.universal.model import Feed


class Converter:
    """Maps one native tree type onto `Feed`. Subclasses set `native_type` and `feed_type`."""

    native_type: type = object
    feed_type: str = ""

    def convert(self, native: Any, options: Optional[ParseOptions] = None) -> Feed:
        if not isinstance(native, self.native_type):
            raise TypeMismatchError(
                f"{type(self).__name__} expected {self.native_type.__module__}.{self.native_type.__name__}, "
                f"got {type(native).__name__}"
            )
        return self._convert(native, options or ParseOptions())

    def _convert(self, native: Any, options: ParseOptions) -> Feed:
        raise NotImplementedError

    @staticmethod
    def parse_secondary_date(raw: str, options: ParseOptions) -> Optional[datetime]:
        """Dates that only exist as text in the native tree (dc:date, JSON item dates)."""
        if not raw or not options.parse_dates:
            return None
        return try_parse_date(raw, lenient=options.strictness.allow_incorrect_date_formats)
