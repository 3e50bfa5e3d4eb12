"""Generic capture of namespaced extension elements.

Extensions are stored as canonical prefix -> element local name -> list of
Extension nodes, in document order.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from unifeed.extensions.namespaces import DEFAULT_PREFIX, canonical_prefix
from unifeed.xml.pullparser import XMLPullParser
from unifeed.xml.tokenizer import EndTag, StartTag, Text


@dataclass(frozen=True)
class Extension:
    name: str
    value: str = ""
    attrs: Dict[str, str] = field(default_factory=dict)
    children: Dict[str, List["Extension"]] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, object]:
        return {
            "name": self.name,
            "value": self.value,
            "attrs": dict(self.attrs),
            "children": {k: [c.to_dict() for c in v] for k, v in self.children.items()},
        }


Extensions = Dict[str, Dict[str, List[Extension]]]


def extension_prefix(start: StartTag) -> str:
    """Bucket prefix for an element.

    An undeclared prefix that was tolerated by the tokenizer has no namespace;
    the raw prefix is used as the bucket then.
    """
    if start.space is None:
        return start.prefix or DEFAULT_PREFIX
    return canonical_prefix(start.space, start.prefixes_by_space())


def parse_extension(p: XMLPullParser) -> Extension:
    """Capture the current element and its subtree, leaving the cursor on its end tag."""
    start = p.expect_start()
    children: Dict[str, List[Extension]] = {}
    text: List[str] = []
    while True:
        tok = p.next()
        if isinstance(tok, EndTag):
            break
        if isinstance(tok, Text):
            text.append(tok.text)
            continue
        child = parse_extension(p)
        children.setdefault(child.name, []).append(child)
    return Extension(name=start.name, value="".join(text).strip(), attrs=start.attr_map(), children=children)


def add_extension(extensions: Extensions, p: XMLPullParser) -> Extension:
    start = p.expect_start()
    ext = parse_extension(p)
    extensions.setdefault(extension_prefix(start), {}).setdefault(ext.name, []).append(ext)
    return ext


def first_value(extensions: Optional[Extensions], prefix: str, name: str) -> str:
    if not extensions:
        return ""
    found = extensions.get(prefix, {}).get(name) or []
    return found[0].value if found else ""


def all_values(extensions: Optional[Extensions], prefix: str, name: str) -> List[str]:
    if not extensions:
        return []
    return [e.value for e in extensions.get(prefix, {}).get(name) or []]


def extensions_to_dict(extensions: Optional[Extensions]) -> Dict[str, object]:
    if not extensions:
        return {}
    return {
        prefix: {name: [e.to_dict() for e in nodes] for name, nodes in by_name.items()}
        for prefix, by_name in extensions.items()
    }
