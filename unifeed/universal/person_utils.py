"""Split combined author strings ("Name <email>", "email (Name)") into parts."""

from __future__ import annotations

import re
from typing import Tuple

_NAME_ANGLE_EMAIL_RE = re.compile(r"^(.*?)\s*<([^<>@\s]+@[^<>\s]+)>$")
_EMAIL_NAME_RE = re.compile(r"^([^@\s]+@\S+)\s+\(([^@]+)\)$")
_NAME_EMAIL_RE = re.compile(r"^([^@]+)\s+\(([^@()]+@[^)]+)\)$")
_NAME_ONLY_RE = re.compile(r"^([^@()]+)$")
_EMAIL_ONLY_RE = re.compile(r"^([^@()\s]+@[^@()\s]+)$")


def parse_name_address(text: str) -> Tuple[str, str]:
    """Return (name, email); either may be empty."""
    text = (text or "").strip()
    if not text:
        return "", ""
    m = _NAME_ANGLE_EMAIL_RE.match(text)
    if m:
        return m.group(1).strip().strip('"'), m.group(2)
    m = _EMAIL_NAME_RE.match(text)
    if m:
        return m.group(2).strip(), m.group(1)
    m = _NAME_EMAIL_RE.match(text)
    if m:
        return m.group(1).strip(), m.group(2).strip()
    m = _NAME_ONLY_RE.match(text)
    if m:
        return m.group(1).strip(), ""
    m = _EMAIL_ONLY_RE.match(text)
    if m:
        return "", m.group(1)
    return text, ""
