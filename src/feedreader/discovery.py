"""Feed auto-discovery in HTML pages.

Pages advertise their feeds with ``<link>`` elements such as::

    <link rel="alternate" type="application/rss+xml" title="Blog" href="/feed.xml">
    <link rel="alternate" type="application/atom+xml" href="https://x.com/atom.xml">

:func:`discover_feed_links` finds them, :func:`resolve_link` turns a possibly
relative ``href`` into an absolute URL using the page it was found on.
"""

from __future__ import annotations

import enum
import logging
import re
from dataclasses import dataclass
from typing import Iterator, Optional
from urllib.parse import urlsplit

from lxml import etree

from .exceptions import UnresolvableUrl
from .helpers import decode_html

logger = logging.getLogger(__name__)

_RE_SCHEME = re.compile(r"[A-Za-z][A-Za-z0-9+.-]*")


class HtmlFeedType(str, enum.Enum):
    RSS = "rss"
    ATOM = "atom"


@dataclass(frozen=True)
class HtmlFeedLink:
    title: Optional[str]
    url: Optional[str]
    feed_type: HtmlFeedType


def _feed_type_from_link_type(link_type: str) -> HtmlFeedType:
    link_type = link_type.lower()
    if "application/rss" in link_type:
        return HtmlFeedType.RSS
    if "application/atom" in link_type:
        return HtmlFeedType.ATOM
    raise ValueError(f"The link type '{link_type}' is not a valid feed link!")


def _is_feed_link_type(link_type: Optional[str]) -> bool:
    if not link_type:
        return False
    link_type = link_type.lower()
    return "application/rss" in link_type or "application/atom" in link_type


def _parse_html(html: str | bytes) -> Optional[etree._Element]:
    if isinstance(html, str):
        parser = etree.HTMLParser(encoding="utf-8")
        html = html.encode("utf-8")
    else:
        parser = etree.HTMLParser()
    if not html.strip():
        return None
    try:
        return etree.fromstring(html, parser=parser)
    except etree.XMLSyntaxError as e:
        logger.debug("Could not parse HTML document: %s", e)
        return None


def discover_feed_links(html: str | bytes) -> Iterator[HtmlFeedLink]:
    """Yield every RSS or Atom ``<link>`` advertised by an HTML page.

    Titles and URLs are entity-decoded but URLs are otherwise returned as
    found; pass them to :func:`resolve_link` to make them absolute. The page
    is only parsed once iteration starts.
    """
    doc = _parse_html(html)
    if doc is None:
        return

    for node in doc.iter("link"):
        link_type = node.get("type")
        if not _is_feed_link_type(link_type):
            continue
        link = HtmlFeedLink(
            title=decode_html(node.get("title")),
            url=decode_html(node.get("href")),
            feed_type=_feed_type_from_link_type(decode_html(link_type)),
        )
        logger.debug("Found %s feed link %r", link.feed_type.value, link.url)
        yield link


def get_absolute_url(url: str) -> str:
    """Add the ``http://`` scheme to URLs that have none.

    >>> get_absolute_url("codehollow.com")
    'http://codehollow.com'
    """
    url = url.strip()
    if not url or "://" in url:
        return url
    if url.startswith("//"):
        return "http:" + url
    return "http://" + url


def _has_scheme(url: str) -> bool:
    """Absolute URIs, with or without an authority (``feed:https://...``)."""
    try:
        scheme = urlsplit(url).scheme
    except ValueError:
        return False
    return bool(_RE_SCHEME.fullmatch(scheme))


def _is_absolute_url(url: str) -> bool:
    try:
        parts = urlsplit(url)
    except ValueError:
        return False
    if not parts.scheme or not parts.netloc:
        return False
    return not any(char.isspace() for char in parts.netloc)


def resolve_link(page_url: str, link: HtmlFeedLink) -> HtmlFeedLink:
    """Return ``link`` with an absolute URL, relative to ``page_url``.

    Links that are already absolute are returned unchanged.

    Raises:
        UnresolvableUrl: If no absolute URL can be built.
    """
    url = decode_html(link.url)
    if not url or not url.strip():
        raise UnresolvableUrl(page_url, link.url)
    url = url.strip()

    if url.lower().startswith(("http://", "https://")):
        return link

    title = decode_html(link.title)
    if url.startswith("//"):
        return HtmlFeedLink(title=title, url="http:" + url, feed_type=link.feed_type)

    if _has_scheme(url):
        return HtmlFeedLink(title=title, url=url, feed_type=link.feed_type)

    absolute_page_url = get_absolute_url(page_url or "")
    joined = absolute_page_url.rstrip("/") + "/" + url.lstrip("/")
    if _is_absolute_url(joined):
        return HtmlFeedLink(title=title, url=joined, feed_type=link.feed_type)

    raise UnresolvableUrl(page_url, link.url)
