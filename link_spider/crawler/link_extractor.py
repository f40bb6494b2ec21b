"""
Link extraction and URL normalization utilities for LinkSpider.
"""
from __future__ import annotations

import posixpath
from typing import Iterable, List
from urllib.parse import parse_qsl, quote, unquote, urldefrag, urlencode, urljoin, urlparse, urlunparse

from bs4 import BeautifulSoup
from bs4.element import Tag

from link_spider.crawler.protocols import LinkExtractor
from link_spider.errors import ExtractionError
from link_spider.logger import logger

__all__ = ("extract_links", "normalize_url", "same_host_extractor")

_SKIP_SCHEMES = ("mailto:", "javascript:", "tel:", "data:")


def normalize_url(url: str) -> str:
    """
    Canonical form used as the crawl identifier: lower-case scheme and host,
    dot segments collapsed, query sorted, fragment dropped, empty path -> ``/``.
    """
    parsed = urlparse(url)
    path = unquote(parsed.path or "/")
    norm = posixpath.normpath(path)
    if path.endswith("/") and not norm.endswith("/"):
        norm += "/"
    if not norm.startswith("/"):
        norm = "/" + norm
    norm = quote(norm, safe="/:@!$&'()*+,;=-._~")
    qs = sorted(parse_qsl(parsed.query, keep_blank_values=True))
    return urlunparse((parsed.scheme.lower(), parsed.netloc.lower(), norm, "", urlencode(qs), ""))


def extract_links(url: str, content: bytes) -> List[str]:
    """
    Extract HTTP(S) links from the HTML *content* of *url*.

    Links are resolved against *url*, normalized, and returned in document
    order without duplicates.
    """
    try:
        soup = BeautifulSoup(content, "html.parser")
    except Exception as exc:
        raise ExtractionError(url, f"unparseable content: {exc}") from exc

    seen: set[str] = set()
    links: List[str] = []
    for tag in soup.find_all("a", href=True):
        if not isinstance(tag, Tag):
            continue
        href_val = tag.get("href")
        if not isinstance(href_val, str):
            continue
        raw = href_val.strip()
        if not raw or raw.startswith("#") or raw.lower().startswith(_SKIP_SCHEMES):
            continue
        try:
            absolute, _ = urldefrag(urljoin(url, raw))
            if urlparse(absolute).scheme not in ("http", "https"):
                continue
            link = normalize_url(absolute)
        except ValueError as exc:
            logger.debug("Skipping malformed link %r on %s: %s", raw, url, exc)
            continue
        if link not in seen:
            seen.add(link)
            links.append(link)
    return links


def same_host_extractor(extract: LinkExtractor = extract_links) -> LinkExtractor:
    """Wrap *extract* so that only links on the page's own host are followed."""

    def _extract(url: str, content: bytes) -> Iterable[str]:
        host = urlparse(url).netloc.lower()
        return [link for link in extract(url, content) if urlparse(link).netloc == host]

    return _extract
