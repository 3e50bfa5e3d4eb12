"""Typed view over the `dc` (Dublin Core elements 1.1) extension bucket."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import List, Optional

from unifeed.extensions.extension import Extensions


@dataclass(frozen=True)
class DublinCoreExtension:
    title: List[str] = field(default_factory=list)
    creator: List[str] = field(default_factory=list)
    author: List[str] = field(default_factory=list)
    subject: List[str] = field(default_factory=list)
    description: List[str] = field(default_factory=list)
    publisher: List[str] = field(default_factory=list)
    contributor: List[str] = field(default_factory=list)
    date: List[str] = field(default_factory=list)
    type: List[str] = field(default_factory=list)
    format: List[str] = field(default_factory=list)
    identifier: List[str] = field(default_factory=list)
    source: List[str] = field(default_factory=list)
    language: List[str] = field(default_factory=list)
    relation: List[str] = field(default_factory=list)
    coverage: List[str] = field(default_factory=list)
    rights: List[str] = field(default_factory=list)

    def first(self, name: str) -> str:
        values = getattr(self, name)
        return values[0] if values else ""


def build_dublin_core_extension(extensions: Optional[Extensions]) -> Optional[DublinCoreExtension]:
    bucket = (extensions or {}).get("dc")
    if not bucket:
        return None
    values = {f.name: [n.value for n in bucket.get(f.name) or []] for f in fields(DublinCoreExtension)}
    return DublinCoreExtension(**values)
