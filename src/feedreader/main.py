from __future__ import annotations

import codecs
import logging
import re
from typing import TYPE_CHECKING, Callable, Optional

from lxml import etree

from .atom import ATOM_NAMESPACES, parse_atom
from .exceptions import UnrecognizedFormat
from .helpers import NAMESPACES, element_namespace
from .models import BaseFeed, DialectKind, Feed, ParseOptions
from .rss10 import RSS10_NAMESPACE, parse_rss10
from .rss20 import parse_rss20

if TYPE_CHECKING:
    from lxml.etree import _Element

logger = logging.getLogger(__name__)

_RE_DECLARED_ENCODING = re.compile(
    rb'<\?xml[^>]*?encoding\s*=\s*["\']([A-Za-z0-9._-]+)["\']', re.IGNORECASE
)
_RE_TEXT_DECLARED_ENCODING = re.compile(
    r'^(\s*<\?xml[^>]*?encoding\s*=\s*["\'])[A-Za-z0-9._-]+(["\'])', re.IGNORECASE
)
_RE_DOCUMENT_START = re.compile(rb"<\?xml|<rss|<feed|<rdf:rdf", re.IGNORECASE)
_RE_HTML_START = re.compile(rb"<!doctype\s+html|<html", re.IGNORECASE)
_RE_UTF16_DECLARATION = re.compile(
    rb'(<\?xml[^>]*?encoding\s*=\s*["\'])utf-16(?:-le|-be)?(["\'])', re.IGNORECASE
)

_HEADER_SIZE = 2048
_SCAN_SIZE = 8192

# Broken XML declarations: "<?xml?xml version=...", "...?>>" written as "??>"
_HEADER_REPAIRS = (
    (re.compile(rb"<\?xml\?xml\s+", re.IGNORECASE), b"<?xml "),
    (re.compile(rb"\?\?>\s*"), b"?>"),
)
# Unquoted attribute values (rss:version=2.0) and unclosed Atom <link> tags
_BODY_REPAIRS = (
    (re.compile(rb'(\s+[\w:]+)=([^\s>"\']+)'), rb'\1="\2"'),
    (
        re.compile(rb"<link([^>]*[^/])>\s*(?=\n\s*<(?!/link\s*>))", re.MULTILINE),
        rb"<link\1/>",
    ),
)

_BOMS = (
    (codecs.BOM_UTF8, "utf-8"),
    (codecs.BOM_UTF16_LE, "utf-16"),
    (codecs.BOM_UTF16_BE, "utf-16"),
)

# U+2028 and U+2029 are not allowed in XML 1.0
_LINE_SEPARATORS = (b"\xe2\x80\xa8", b"\xe2\x80\xa9")

_RDF_NAMESPACE = NAMESPACES["rdf"]

_DialectParser = Callable[[Optional[str], "_Element", ParseOptions], BaseFeed]

_DIALECT_PARSERS: dict[DialectKind, _DialectParser] = {
    DialectKind.RSS_1_0: parse_rss10,
    DialectKind.RSS_2_0: parse_rss20,
    DialectKind.ATOM: parse_atom,
}


def _declared_encoding(content: bytes) -> str:
    """Encoding given by the byte-order mark or the XML declaration."""
    for bom, encoding in _BOMS:
        if content.startswith(bom):
            return encoding
    match = _RE_DECLARED_ENCODING.search(content, 0, _HEADER_SIZE)
    if match is None:
        return "utf-8"
    return match.group(1).decode("ascii").lower()


def _skip_leading_junk(content: bytes) -> bytes:
    """Drop whatever precedes the XML document; refuse HTML pages."""
    content = content.lstrip()
    if content.startswith(codecs.BOM_UTF8):
        content = content[len(codecs.BOM_UTF8) :]

    if _RE_HTML_START.match(content):
        raise UnrecognizedFormat(
            "Content appears to be HTML, not a valid RSS/Atom feed", root_tag="html"
        )

    start = _RE_DOCUMENT_START.search(content, 0, _SCAN_SIZE)
    if start is not None:
        return content[start.start() :]

    head = content[:_HEADER_SIZE].lower()
    if b"<script>" in head or b"<body>" in head:
        raise UnrecognizedFormat(
            "Content appears to be HTML, not a valid RSS/Atom feed", root_tag="html"
        )
    return content


def _needs_repair(content: bytes, encoding: str) -> bool:
    head = content[:_HEADER_SIZE].lower()
    if b"?xml?xml" in head or b"??>" in head:
        return True
    if b"utf-16" in head and encoding != "utf-16":
        return True
    return b"rss:" in head[:500] and b"xmlns:rss" not in head


def _repair_markup(content: bytes, encoding: str) -> bytes:
    head, body = content[:_HEADER_SIZE], content[_HEADER_SIZE:]
    for pattern, replacement in _HEADER_REPAIRS:
        head = pattern.sub(replacement, head)
    if encoding != "utf-16":
        # the document was transcoded but still claims utf-16
        head = _RE_UTF16_DECLARATION.sub(
            rb"\1" + encoding.encode("ascii") + rb"\2", head
        )

    content = head + body
    for pattern, replacement in _BODY_REPAIRS:
        content = pattern.sub(replacement, content)
    return content


def _prepare_xml_bytes(source: str | bytes) -> bytes:
    if isinstance(source, str):
        # the text is about to be encoded as utf-8, whatever it declares
        source = _RE_TEXT_DECLARED_ENCODING.sub(r"\1utf-8\2", source, count=1)
        source = source.encode("utf-8", errors="replace")

    content = _skip_leading_junk(source)
    if not content.strip():
        raise UnrecognizedFormat("Empty content")

    for separator in _LINE_SEPARATORS:
        content = content.replace(separator, b"\n")

    encoding = _declared_encoding(content)
    if encoding.startswith("utf-16") and b"\x00" not in content[:200]:
        encoding = "utf-8"
    if _needs_repair(content, encoding):
        content = _repair_markup(content, encoding)
    return content


def _decode_document(content: bytes) -> str:
    try:
        return content.decode(_declared_encoding(content))
    except (LookupError, UnicodeDecodeError):
        return content.decode("utf-8", errors="replace")


def _parse_xml_root(xml_content: bytes) -> _Element:
    """Parse strictly first, then once more in lxml's recovery mode."""
    error: Optional[etree.XMLSyntaxError] = None
    for recover in (False, True):
        # lxml parser objects must not be shared between threads
        parser = etree.XMLParser(
            ns_clean=True, recover=recover, collect_ids=False, resolve_entities=False
        )
        try:
            root = etree.fromstring(xml_content, parser=parser)
        except etree.XMLSyntaxError as e:
            logger.debug("XML parsing failed (recover=%s): %s", recover, e)
            error = e
            continue
        error = None
        if root is not None:
            return root

    if error is not None:
        raise UnrecognizedFormat(f"Failed to parse XML content: {error}") from error
    preview = xml_content[:200].decode("utf-8", errors="replace").strip()
    raise UnrecognizedFormat(
        f"Failed to parse XML: content is not an XML document ({preview!r})"
    )


def _root_tag_local(root: _Element) -> str:
    return root.tag.rsplit("}", 1)[-1].lower()


_ERROR_TEXT_TAGS = ("message", "title", "h1", "h2", "h3", "p", "code")


def _error_page_text(root: _Element) -> str:
    """Best guess at the human-readable text of a non-feed document."""
    text = (root.text or "").strip()
    if len(text) >= 5:
        return text
    for tag in _ERROR_TEXT_TAGS:
        element = next(root.iterdescendants(f"{{*}}{tag}"), None)
        if element is not None and element.text and element.text.strip():
            return element.text.strip()
    return " ".join(" ".join(root.itertext()).split())[:300]


_HTML_FRAGMENT = "Received HTML fragment instead of feed"
_SITEMAP = "Received XML sitemap instead of feed (sitemap is for search engines, not a feed)"

_NON_FEED_ROOTS: dict[str, str] = {
    "html": "Received HTML page instead of feed",
    "div": _HTML_FRAGMENT,
    "body": _HTML_FRAGMENT,
    "br": _HTML_FRAGMENT,
    "status": "Feed server returned status message",
    "error": "Feed server returned error",
    "opml": "Received OPML document instead of feed (OPML is an outline format, not a feed)",
    "urlset": _SITEMAP,
    "sitemapindex": _SITEMAP,
}


def _unrecognized_root(root: _Element) -> UnrecognizedFormat:
    description = _NON_FEED_ROOTS.get(_root_tag_local(root))
    if description is None:
        return UnrecognizedFormat(f"Unknown feed type: {root.tag}", root_tag=root.tag)

    detail = _error_page_text(root)
    if len(detail) > 10:
        description = f"{description}: {detail[:150]}"
    return UnrecognizedFormat(description, root_tag=root.tag)


def _declares_rss10(root: _Element) -> bool:
    if RSS10_NAMESPACE in root.nsmap.values():
        return True
    return any(element_namespace(child) == RSS10_NAMESPACE for child in root)


def detect_dialect(root: Optional[_Element]) -> DialectKind:
    """Classify a parsed document by its root element.

    ``<rss>`` is recognized by name alone, whatever its namespace; ``<rdf:RDF>``
    needs the RSS 1.0 namespace and ``<feed>`` needs an Atom namespace.
    """
    if root is None or not isinstance(root.tag, str):
        return DialectKind.UNKNOWN

    root_tag_local = _root_tag_local(root)
    namespace = element_namespace(root)

    if root_tag_local == "rss":
        kind = DialectKind.RSS_2_0
    elif (
        root_tag_local == "rdf"
        and namespace == _RDF_NAMESPACE
        and _declares_rss10(root)
    ):
        kind = DialectKind.RSS_1_0
    elif root_tag_local == "feed" and namespace in ATOM_NAMESPACES:
        kind = DialectKind.ATOM
    else:
        kind = DialectKind.UNKNOWN

    logger.debug("Detected dialect %s for root %s", kind.value, root.tag)
    return kind


def parse_dialect(
    kind: DialectKind,
    raw_text: Optional[str],
    root: _Element,
    *,
    include_content: bool = True,
    include_tags: bool = True,
    include_media: bool = True,
    include_enclosures: bool = True,
) -> BaseFeed:
    """Build the dialect-specific feed for ``root``.

    Raises:
        UnrecognizedFormat: If ``kind`` is unknown or doesn't match ``root``.
        MalformedMandatoryStructure: If the dialect's channel is missing.
    """
    parser = _DIALECT_PARSERS.get(kind)
    if parser is None:
        raise _unrecognized_root(root)

    detected = detect_dialect(root)
    if detected is not kind:
        raise UnrecognizedFormat(
            f"Document root {root.tag} is not a {kind.value} feed", root_tag=root.tag
        )

    options = ParseOptions(
        include_content=include_content,
        include_tags=include_tags,
        include_media=include_media,
        include_enclosures=include_enclosures,
    )
    return parser(raw_text, root, options)


def normalize(dialect_feed: BaseFeed) -> Feed:
    """Project any dialect-specific feed onto the common :class:`Feed` shape."""
    if not isinstance(dialect_feed, BaseFeed):
        raise TypeError(f"Expected a dialect feed, got {type(dialect_feed).__name__}")
    return dialect_feed.to_feed()


def parse_xml(source: str | bytes) -> _Element:
    """Parse feed text into an lxml element tree, repairing common breakage.

    Raises:
        UnrecognizedFormat: If the content is empty, HTML, or not XML at all.
    """
    return _parse_xml_root(_prepare_xml_bytes(source))


def parse(
    source: str | bytes,
    *,
    include_content: bool = True,
    include_tags: bool = True,
    include_media: bool = True,
    include_enclosures: bool = True,
) -> Feed:
    """Parse an RSS 1.0, RSS 2.0 or Atom document.

    Args:
        source: The feed document as text or bytes
        include_content: Include ``content:encoded`` and Atom content bodies
        include_tags: Include feed and entry categories
        include_media: Include media namespace content (media:content/media:thumbnail)
        include_enclosures: Include RSS enclosures

    Returns:
        The normalized :class:`Feed`; ``feed.original`` holds the
        dialect-specific object.

    Raises:
        UnrecognizedFormat: If the document is not a supported feed
        MalformedMandatoryStructure: If the feed lacks its channel
    """
    xml_content = _prepare_xml_bytes(source)
    root = _parse_xml_root(xml_content)
    raw_text = source if isinstance(source, str) else _decode_document(xml_content)

    kind = detect_dialect(root)
    if kind is DialectKind.UNKNOWN:
        raise _unrecognized_root(root)

    dialect_feed = parse_dialect(
        kind,
        raw_text,
        root,
        include_content=include_content,
        include_tags=include_tags,
        include_media=include_media,
        include_enclosures=include_enclosures,
    )
    return normalize(dialect_feed)
