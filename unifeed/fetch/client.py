"""Thin HTTP fetch collaborator for Parser.parse_url."""

from __future__ import annotations

import base64
import logging
from typing import Dict, Optional

import requests

from unifeed.core.errors import HTTPError
from unifeed.core.options import RequestOptions

logger = logging.getLogger(__name__)


def build_headers(options: RequestOptions) -> Dict[str, str]:
    headers = {"User-Agent": options.user_agent}
    if options.if_none_match:
        headers["If-None-Match"] = options.if_none_match
    if options.if_modified_since:
        headers["If-Modified-Since"] = options.if_modified_since
    if options.proxy_auth and all(options.proxy_auth):
        token = base64.b64encode(":".join(options.proxy_auth).encode("utf-8")).decode("ascii")
        headers["Proxy-Authorization"] = f"Basic {token}"
    return headers


def fetch_feed(url: str, options: Optional[RequestOptions] = None) -> bytes:
    """GET a feed and return the raw body.

    Non-2xx answers (including 304 Not Modified) raise HTTPError; transport
    failures propagate as requests exceptions.
    """
    options = options or RequestOptions()
    proxies = None
    if options.proxy_url:
        proxies = {"http": options.proxy_url, "https": options.proxy_url}
    auth = options.feed_auth if options.feed_auth and all(options.feed_auth) else None

    resp = requests.get(
        url,
        headers=build_headers(options),
        auth=auth,
        proxies=proxies,
        timeout=options.timeout,
    )
    if not 200 <= resp.status_code < 300:
        logger.info("feed fetch %s returned %s", url, resp.status_code)
        raise HTTPError(resp.status_code, resp.reason or "", url)
    return resp.content
