from __future__ import annotations

import datetime
import enum
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Optional

from .helpers import get_attribute, get_elements, get_value, parse_datetime

if TYPE_CHECKING:
    from lxml.etree import _Element


class DialectKind(str, enum.Enum):
    RSS_1_0 = "rss_1.0"
    RSS_2_0 = "rss_2.0"
    ATOM = "atom"
    UNKNOWN = "unknown"


class FeedReaderDict(dict):
    """A dictionary that allows access to its keys as attributes."""

    def __getattr__(self, name: str) -> Any:
        try:
            return self[name]
        except KeyError:
            raise AttributeError(
                f"'FeedReaderDict' object has no attribute '{name}'"
            )

    def __setattr__(self, name: str, value: Any) -> None:
        self[name] = value


def _isoformat(value: Optional[datetime.datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


@dataclass
class FeedItem:
    """Dialect-independent view of a single item or entry."""

    original: BaseFeedItem = field(repr=False)
    id: Optional[str] = None
    title: Optional[str] = None
    link: Optional[str] = None
    description: Optional[str] = None
    content: Optional[str] = None
    author: Optional[str] = None
    categories: list[str] = field(default_factory=list)
    publishing_date_string: Optional[str] = None
    publishing_date: Optional[datetime.datetime] = None

    def to_dict(self) -> FeedReaderDict:
        entry = FeedReaderDict(
            id=self.id,
            title=self.title,
            link=self.link,
            description=self.description,
            published=_isoformat(self.publishing_date),
        )
        if self.content is not None:
            entry["content"] = [{"type": "text/html", "value": self.content}]
        if self.author:
            entry["author"] = self.author
            entry["author_detail"] = {"name": self.author}
            entry["authors"] = [{"name": self.author}]
        if self.categories:
            entry["tags"] = [
                {"term": term, "scheme": None, "label": None}
                for term in self.categories
            ]
        return entry


@dataclass
class Feed:
    """Dialect-independent view of a feed.

    ``original`` is the dialect-specific object this feed was built from; every
    field without a home here is still reachable through it.
    """

    type: DialectKind
    original: BaseFeed = field(repr=False)
    title: Optional[str] = None
    link: Optional[str] = None
    description: Optional[str] = None
    language: Optional[str] = None
    copyright: Optional[str] = None
    image_url: Optional[str] = None
    last_updated_date_string: Optional[str] = None
    last_updated_date: Optional[datetime.datetime] = None
    items: list[FeedItem] = field(default_factory=list)

    def to_dict(self) -> FeedReaderDict:
        """Return a feedparser-style ``{"feed": ..., "entries": [...]}`` dict."""
        feed_info = FeedReaderDict(
            title=self.title,
            link=self.link,
            subtitle=self.description,
            language=self.language,
            rights=self.copyright,
            updated=_isoformat(self.last_updated_date),
        )
        if self.image_url:
            feed_info["image"] = {"href": self.image_url}
        return FeedReaderDict(
            version=self.type.value,
            feed=feed_info,
            entries=[item.to_dict() for item in self.items],
        )


@dataclass
class BaseFeedItem:
    title: Optional[str] = None
    link: Optional[str] = None
    element: Optional[_Element] = field(default=None, repr=False, compare=False)

    def to_feed_item(self) -> FeedItem:
        raise NotImplementedError


@dataclass
class BaseFeed:
    title: Optional[str] = None
    link: Optional[str] = None
    items: list[BaseFeedItem] = field(default_factory=list)
    original_document: Optional[str] = field(default=None, repr=False)

    def to_feed(self) -> Feed:
        raise NotImplementedError


@dataclass
class FeedImage:
    title: Optional[str] = None
    url: Optional[str] = None
    link: Optional[str] = None


@dataclass
class FeedTextInput:
    title: Optional[str] = None
    link: Optional[str] = None
    description: Optional[str] = None
    name: Optional[str] = None


@dataclass
class DublinCore:
    """The Dublin Core ``dc:`` elements of a channel or item."""

    title: Optional[str] = None
    creator: Optional[str] = None
    subject: Optional[str] = None
    description: Optional[str] = None
    publisher: Optional[str] = None
    contributor: Optional[str] = None
    date_string: Optional[str] = None
    date: Optional[datetime.datetime] = None
    type: Optional[str] = None
    format: Optional[str] = None
    identifier: Optional[str] = None
    source: Optional[str] = None
    language: Optional[str] = None
    relation: Optional[str] = None
    coverage: Optional[str] = None
    rights: Optional[str] = None


_DC_FIELDS = (
    "title",
    "creator",
    "subject",
    "description",
    "publisher",
    "contributor",
    "type",
    "format",
    "identifier",
    "source",
    "language",
    "relation",
    "coverage",
    "rights",
)


def parse_image(element: _Element, namespace: Optional[str] = None) -> FeedImage:
    return FeedImage(
        title=get_value(element, "title", namespace),
        url=get_value(element, "url", namespace),
        link=get_value(element, "link", namespace),
    )


def parse_text_input(
    element: _Element, namespace: Optional[str] = None
) -> FeedTextInput:
    return FeedTextInput(
        title=get_value(element, "title", namespace),
        link=get_value(element, "link", namespace),
        description=get_value(element, "description", namespace),
        name=get_value(element, "name", namespace),
    )


def parse_dublin_core(element: _Element) -> Optional[DublinCore]:
    """Collect the ``dc:`` children of ``element``; ``None`` if there are none."""
    values = {name: get_value(element, f"dc:{name}") for name in _DC_FIELDS}
    date_string = get_value(element, "dc:date")
    if date_string is None and all(value is None for value in values.values()):
        return None

    return DublinCore(
        date_string=date_string, date=parse_datetime(date_string), **values
    )


def parse_subjects(element: _Element) -> list[str]:
    return [
        subject.text.strip()
        for subject in get_elements(element, "dc:subject")
        if subject.text and subject.text.strip()
    ]


def rdf_about(element: Optional[_Element]) -> Optional[str]:
    return get_attribute(element, "rdf:about")


@dataclass(frozen=True)
class ParseOptions:
    """Which optional parts of a feed the dialect parsers should read."""

    include_content: bool = True
    include_tags: bool = True
    include_media: bool = True
    include_enclosures: bool = True
