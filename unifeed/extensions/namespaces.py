"""Canonical prefixes for well-known syndication extension namespaces.

The table wins over whatever prefix a document author picked, so that
`<foo:author xmlns:foo="http://www.itunes.com/dtds/podcast-1.0.dtd">` lands in
the same `itunes` bucket as the usual spelling.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, Optional

DEFAULT_PREFIX = "default"

XML_NAMESPACE = "http://www.w3.org/XML/1998/namespace"

CANONICAL_NAMESPACES: Mapping[str, str] = MappingProxyType(
    {
        "http://webns.net/mvcb/": "admin",
        "http://purl.org/rss/1.0/modules/aggregation/": "ag",
        "http://purl.org/rss/1.0/modules/annotate/": "annotate",
        "http://media.tangent.org/rss/1.0/": "audio",
        "http://backend.userland.com/blogChannelModule": "blogChannel",
        "http://creativecommons.org/ns#license": "cc",
        "http://web.resource.org/cc/": "cc",
        "http://cyber.law.harvard.edu/rss/creativeCommonsRssModule.html": "creativeCommons",
        "http://backend.userland.com/creativeCommonsRssModule": "creativeCommons",
        "http://purl.org/rss/1.0/modules/company": "co",
        "http://purl.org/rss/1.0/modules/content/": "content",
        "http://my.theinfo.org/changed/1.0/rss/": "cp",
        "http://purl.org/dc/elements/1.1/": "dc",
        "http://purl.org/dc/terms/": "dcterms",
        "http://purl.org/rss/1.0/modules/email/": "email",
        "http://purl.org/rss/1.0/modules/event/": "ev",
        "http://rssnamespace.org/feedburner/ext/1.0": "feedburner",
        "http://freshmeat.net/rss/fm/": "fm",
        "http://xmlns.com/foaf/0.1/": "foaf",
        "http://www.w3.org/2003/01/geo/wgs84_pos#": "geo",
        "http://www.georss.org/georss": "georss",
        "http://www.opengis.net/gml": "gml",
        "http://postneo.com/icbm/": "icbm",
        "http://purl.org/rss/1.0/modules/image/": "image",
        "http://www.w3.org/2005/Atom": "atom",
        "http://purl.org/atom/ns#": "atom03",
        "http://www.itunes.com/DTDs/PodCast-1.0.dtd": "itunes",
        "http://www.itunes.com/dtds/podcast-1.0.dtd": "itunes",
        "http://example.com/DTDs/PodCast-1.0.dtd": "itunes",
        "http://purl.org/rss/1.0/modules/link/": "l",
        "http://search.yahoo.com/mrss": "media",
        "http://search.yahoo.com/mrss/": "media",
        "http://madskills.com/public/xml/rss/module/pingback/": "pingback",
        "http://prismstandard.org/namespaces/1.2/basic/": "prism",
        "http://www.w3.org/1999/02/22-rdf-syntax-ns#": "rdf",
        "http://www.w3.org/2000/01/rdf-schema#": "rdfs",
        "http://purl.org/rss/1.0/modules/reference/": "ref",
        "http://purl.org/rss/1.0/modules/richequiv/": "reqv",
        "http://purl.org/rss/1.0/modules/search/": "search",
        "http://purl.org/rss/1.0/modules/slash/": "slash",
        "http://schemas.xmlsoap.org/soap/envelope/": "soap",
        "http://purl.org/rss/1.0/modules/servicestatus/": "ss",
        "http://hacks.benhammersley.com/rss/streaming/": "str",
        "http://purl.org/rss/1.0/modules/subscription/": "sub",
        "http://purl.org/rss/1.0/modules/syndication/": "sy",
        "http://schemas.pocketsoap.com/rss/myDescModule/": "szf",
        "http://purl.org/rss/1.0/modules/taxonomy/": "taxo",
        "http://purl.org/rss/1.0/modules/threading/": "thr",
        "http://purl.org/rss/1.0/modules/textinput/": "ti",
        "http://madskills.com/public/xml/rss/module/trackback/": "trackback",
        "http://wellformedweb.org/commentAPI/": "wfw",
        "http://purl.org/rss/1.0/modules/wiki/": "wiki",
        "http://www.w3.org/1999/xhtml": "xhtml",
        "http://www.w3.org/1999/xlink": "xlink",
        XML_NAMESPACE: "xml",
        "http://podlove.org/simple-chapters": "psc",
        "https://podcastindex.org/namespace/1.0": "podcast",
        "https://github.com/Podcastindex-org/podcast-namespace/blob/main/docs/1.0.md": "podcast",
        "http://www.google.com/schemas/play-podcasts/1.0": "googleplay",
        "http://www.rssboard.org/media-rss": "media",
        "http://a9.com/-/spec/opensearch/1.1/": "opensearch",
        "http://a9.com/-/spec/opensearchrss/1.0/": "opensearch",
        "http://schemas.google.com/g/2005": "gd",
    }
)


def canonical_prefix(space: Optional[str], in_scope: Optional[Mapping[str, str]] = None) -> str:
    """Return the bucket prefix for a namespace URI.

    `in_scope` maps namespace URI -> prefix as declared by the document.
    """
    if not space:
        return DEFAULT_PREFIX
    space = space.strip()
    prefix = CANONICAL_NAMESPACES.get(space)
    if prefix:
        return prefix
    if in_scope:
        declared = in_scope.get(space)
        if declared:
            return declared
    return space
