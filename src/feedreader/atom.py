"""Atom 1.0 and Atom 0.3 feeds (root element ``<feed>``)."""

from __future__ import annotations

import datetime
from dataclasses import dataclass, field
from functools import lru_cache
from typing import TYPE_CHECKING, Optional

from lxml import etree

from .helpers import (
    NAMESPACES,
    element_namespace,
    element_text,
    get_attribute,
    get_element,
    get_elements,
    parse_datetime,
    parse_int,
)
from .models import BaseFeed, BaseFeedItem, DialectKind, Feed, FeedItem, ParseOptions

if TYPE_CHECKING:
    from lxml.etree import _Element

ATOM_NAMESPACES = frozenset(
    {
        "http://www.w3.org/2005/Atom",
        "https://www.w3.org/2005/Atom",
        "http://purl.org/atom/ns#",
    }
)
_ATOM_03_NAMESPACE = "http://purl.org/atom/ns#"


@lru_cache(maxsize=4)
def _atom_names(atom_ns: str) -> dict[str, str]:
    """Element names that differ between Atom 1.0 and Atom 0.3."""
    is_atom_03 = atom_ns == _ATOM_03_NAMESPACE
    return {
        "published": "issued" if is_atom_03 else "published",
        "updated": "modified" if is_atom_03 else "updated",
        "pub_fallback": "published" if is_atom_03 else "issued",
        "upd_fallback": "updated" if is_atom_03 else "modified",
        "subtitle": "tagline" if is_atom_03 else "subtitle",
        "rights": "copyright" if is_atom_03 else "rights",
    }


@dataclass
class AtomPerson:
    name: Optional[str] = None
    email: Optional[str] = None
    uri: Optional[str] = None


@dataclass
class AtomLink:
    href: Optional[str] = None
    rel: Optional[str] = None
    type: Optional[str] = None
    hreflang: Optional[str] = None
    title: Optional[str] = None
    length: Optional[int] = None


@dataclass
class AtomCategory:
    term: Optional[str] = None
    scheme: Optional[str] = None
    label: Optional[str] = None


@dataclass
class AtomGenerator:
    name: Optional[str] = None
    uri: Optional[str] = None
    version: Optional[str] = None


@dataclass
class AtomFeedItem(BaseFeedItem):
    id: Optional[str] = None
    summary: Optional[str] = None
    content: Optional[str] = None
    content_type: Optional[str] = None
    published_string: Optional[str] = None
    published: Optional[datetime.datetime] = None
    updated_string: Optional[str] = None
    updated: Optional[datetime.datetime] = None
    authors: list[AtomPerson] = field(default_factory=list)
    contributors: list[AtomPerson] = field(default_factory=list)
    categories: list[AtomCategory] = field(default_factory=list)
    links: list[AtomLink] = field(default_factory=list)
    rights: Optional[str] = None
    language: Optional[str] = None

    @property
    def author(self) -> Optional[AtomPerson]:
        return self.authors[0] if self.authors else None

    def to_feed_item(self) -> FeedItem:
        if self.published_string is not None:
            date_string, date = self.published_string, self.published
        else:
            date_string, date = self.updated_string, self.updated
        author = self.author
        return FeedItem(
            original=self,
            id=self.id or None,
            title=self.title,
            link=self.link,
            description=self.summary,
            content=self.content,
            author=author.name if author is not None else None,
            categories=[c.term for c in self.categories if c.term],
            publishing_date_string=date_string,
            publishing_date=date,
        )


@dataclass
class AtomFeed(BaseFeed):
    id: Optional[str] = None
    subtitle: Optional[str] = None
    updated_string: Optional[str] = None
    updated: Optional[datetime.datetime] = None
    authors: list[AtomPerson] = field(default_factory=list)
    contributors: list[AtomPerson] = field(default_factory=list)
    categories: list[AtomCategory] = field(default_factory=list)
    generator: Optional[AtomGenerator] = None
    icon: Optional[str] = None
    logo: Optional[str] = None
    rights: Optional[str] = None
    links: list[AtomLink] = field(default_factory=list)
    language: Optional[str] = None
    namespace: Optional[str] = None

    @property
    def author(self) -> Optional[AtomPerson]:
        return self.authors[0] if self.authors else None

    def to_feed(self) -> Feed:
        return Feed(
            type=DialectKind.ATOM,
            original=self,
            title=self.title,
            link=self.link,
            description=self.subtitle,
            language=self.language,
            copyright=self.rights,
            image_url=self.logo or self.icon,
            last_updated_date_string=self.updated_string,
            last_updated_date=self.updated,
            items=[item.to_feed_item() for item in self.items],
        )


def _text_construct(element: Optional[_Element]) -> Optional[str]:
    """Value of an Atom text construct (``type`` is text, html or xhtml)."""
    if element is None:
        return None
    if (element.get("type") or "").lower() in {"xhtml", "application/xhtml+xml"}:
        parts = [element.text or ""]
        for child in element:
            parts.append(etree.tostring(child, encoding="unicode", with_tail=True))
        return "".join(parts).strip()
    return element_text(element)


def _parse_person(element: _Element, atom_ns: str) -> AtomPerson:
    def value(name: str) -> Optional[str]:
        return element_text(get_element(element, name, atom_ns))

    uri = value("uri")
    if uri is None:
        # Atom 0.3 calls it url
        uri = value("url")
    return AtomPerson(name=value("name"), email=value("email"), uri=uri)


def _parse_link(element: _Element) -> AtomLink:
    href = element.get("href") or element.get("link")
    return AtomLink(
        href=href.strip() if href else None,
        rel=element.get("rel"),
        type=element.get("type"),
        hreflang=element.get("hreflang"),
        title=element.get("title"),
        length=parse_int(element.get("length")),
    )


def _parse_category(element: _Element) -> AtomCategory:
    return AtomCategory(
        term=element.get("term"),
        scheme=element.get("scheme"),
        label=element.get("label"),
    )


def _parse_generator(element: _Element) -> AtomGenerator:
    return AtomGenerator(
        name=element_text(element),
        uri=element.get("uri") or element.get("url"),
        version=element.get("version"),
    )


def primary_link(links: list[AtomLink]) -> Optional[str]:
    """The ``alternate`` link, wherever it appears among its siblings."""
    for link in links:
        if link.href and link.rel == "alternate" and link.type in (None, "text/html"):
            return link.href
    for link in links:
        if link.href and link.rel in (None, "alternate"):
            return link.href
    return None


def _date_pair(
    element: _Element, atom_ns: str, name: str, fallback: str
) -> tuple[Optional[str], Optional[datetime.datetime]]:
    value = element_text(get_element(element, name, atom_ns))
    if value is None:
        value = element_text(get_element(element, fallback, atom_ns))
    return value, parse_datetime(value)


def _parse_entry(entry: _Element, atom_ns: str, options: ParseOptions) -> AtomFeedItem:
    names = _atom_names(atom_ns)
    links = [_parse_link(link) for link in get_elements(entry, "link", atom_ns)]
    published_string, published = _date_pair(
        entry, atom_ns, names["published"], names["pub_fallback"]
    )
    updated_string, updated = _date_pair(
        entry, atom_ns, names["updated"], names["upd_fallback"]
    )

    content_el = None
    if options.include_content:
        content_el = get_element(entry, "content", atom_ns)

    return AtomFeedItem(
        title=_text_construct(get_element(entry, "title", atom_ns)),
        link=primary_link(links),
        element=entry,
        id=element_text(get_element(entry, "id", atom_ns)),
        summary=_text_construct(get_element(entry, "summary", atom_ns)),
        content=_text_construct(content_el),
        content_type=content_el.get("type") if content_el is not None else None,
        published_string=published_string,
        published=published,
        updated_string=updated_string,
        updated=updated,
        authors=[
            _parse_person(author, atom_ns)
            for author in get_elements(entry, "author", atom_ns)
        ],
        contributors=[
            _parse_person(contributor, atom_ns)
            for contributor in get_elements(entry, "contributor", atom_ns)
        ],
        categories=(
            [
                _parse_category(category)
                for category in get_elements(entry, "category", atom_ns)
            ]
            if options.include_tags
            else []
        ),
        links=links,
        rights=_text_construct(get_element(entry, names["rights"], atom_ns)),
        language=get_attribute(entry, "xml:lang"),
    )


def parse_atom(
    raw_text: Optional[str], root: _Element, options: Optional[ParseOptions] = None
) -> AtomFeed:
    options = options or ParseOptions()
    atom_ns = element_namespace(root) or NAMESPACES["atom"]
    names = _atom_names(atom_ns)
    links = [_parse_link(link) for link in get_elements(root, "link", atom_ns)]
    updated_string, updated = _date_pair(
        root, atom_ns, names["updated"], names["upd_fallback"]
    )
    generator_el = get_element(root, "generator", atom_ns)

    return AtomFeed(
        title=_text_construct(get_element(root, "title", atom_ns)),
        link=primary_link(links),
        items=[
            _parse_entry(entry, atom_ns, options)
            for entry in get_elements(root, "entry", atom_ns)
        ],
        original_document=raw_text,
        id=element_text(get_element(root, "id", atom_ns)),
        subtitle=_text_construct(get_element(root, names["subtitle"], atom_ns)),
        updated_string=updated_string,
        updated=updated,
        authors=[
            _parse_person(author, atom_ns)
            for author in get_elements(root, "author", atom_ns)
        ],
        contributors=[
            _parse_person(contributor, atom_ns)
            for contributor in get_elements(root, "contributor", atom_ns)
        ],
        categories=(
            [
                _parse_category(category)
                for category in get_elements(root, "category", atom_ns)
            ]
            if options.include_tags
            else []
        ),
        generator=_parse_generator(generator_el) if generator_el is not None else None,
        icon=element_text(get_element(root, "icon", atom_ns)),
        logo=element_text(get_element(root, "logo", atom_ns)),
        rights=_text_construct(get_element(root, names["rights"], atom_ns)),
        links=links,
        language=get_attribute(root, "xml:lang"),
        namespace=atom_ns,
    )
