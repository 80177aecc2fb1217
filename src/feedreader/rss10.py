"""RSS 1.0 feeds (RDF Site Summary, root element ``<rdf:RDF>``).

Format reference: http://web.resource.org/rss/1.0/spec

Unlike RSS 2.0, the ``image``, ``textinput`` and ``item`` blocks are siblings
of ``channel`` rather than children of it, and each carries an ``rdf:about``
identifier that is kept exactly as found in the document.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

from .exceptions import MalformedMandatoryStructure
from .helpers import NAMESPACES, get_element, get_elements, get_value
from .models import (
    BaseFeed,
    BaseFeedItem,
    DialectKind,
    DublinCore,
    Feed,
    FeedImage,
    FeedItem,
    FeedTextInput,
    ParseOptions,
    parse_dublin_core,
    parse_image,
    parse_subjects,
    parse_text_input,
    rdf_about,
)

if TYPE_CHECKING:
    from lxml.etree import _Element

RSS10_NAMESPACE = NAMESPACES["rss"]


@dataclass
class Rss10FeedImage(FeedImage):
    about: Optional[str] = None


@dataclass
class Rss10FeedTextInput(FeedTextInput):
    about: Optional[str] = None


@dataclass
class Rss10FeedItem(BaseFeedItem):
    about: Optional[str] = None
    description: Optional[str] = None
    content: Optional[str] = None
    categories: list[str] = field(default_factory=list)
    dc: Optional[DublinCore] = None

    def to_feed_item(self) -> FeedItem:
        dc = self.dc or DublinCore()
        return FeedItem(
            original=self,
            id=self.link or None,
            title=self.title,
            link=self.link,
            description=self.description,
            content=self.content,
            author=dc.creator,
            categories=list(self.categories),
            publishing_date_string=dc.date_string,
            publishing_date=dc.date,
        )


@dataclass
class Rss10Feed(BaseFeed):
    about: Optional[str] = None
    description: Optional[str] = None
    image: Optional[Rss10FeedImage] = None
    text_input: Optional[Rss10FeedTextInput] = None
    dc: Optional[DublinCore] = None

    def to_feed(self) -> Feed:
        dc = self.dc or DublinCore()
        return Feed(
            type=DialectKind.RSS_1_0,
            original=self,
            title=self.title,
            link=self.link,
            description=self.description,
            language=dc.language,
            copyright=dc.rights,
            image_url=self.image.url if self.image is not None else None,
            last_updated_date_string=dc.date_string,
            last_updated_date=dc.date,
            items=[item.to_feed_item() for item in self.items],
        )


def _parse_image(element: _Element) -> Rss10FeedImage:
    image = parse_image(element, RSS10_NAMESPACE)
    return Rss10FeedImage(
        title=image.title, url=image.url, link=image.link, about=rdf_about(element)
    )


def _parse_text_input(element: _Element) -> Rss10FeedTextInput:
    text_input = parse_text_input(element, RSS10_NAMESPACE)
    return Rss10FeedTextInput(
        title=text_input.title,
        link=text_input.link,
        description=text_input.description,
        name=text_input.name,
        about=rdf_about(element),
    )


def _parse_item(item: _Element, options: ParseOptions) -> Rss10FeedItem:
    return Rss10FeedItem(
        title=get_value(item, "title", RSS10_NAMESPACE),
        link=get_value(item, "link", RSS10_NAMESPACE),
        element=item,
        about=rdf_about(item),
        description=get_value(item, "description", RSS10_NAMESPACE),
        content=get_value(item, "content:encoded") if options.include_content else None,
        categories=parse_subjects(item) if options.include_tags else [],
        dc=parse_dublin_core(item),
    )


def parse_rss10(
    raw_text: Optional[str], root: _Element, options: Optional[ParseOptions] = None
) -> Rss10Feed:
    options = options or ParseOptions()
    channel = get_element(root, "channel", RSS10_NAMESPACE)
    if channel is None:
        raise MalformedMandatoryStructure(
            "Invalid RSS 1.0 feed: missing channel element", dialect=DialectKind.RSS_1_0
        )

    # image and textinput are siblings of channel, but some feeds nest them
    image_el = get_element(root, "image", RSS10_NAMESPACE)
    if image_el is None or len(image_el) == 0:
        nested = get_element(channel, "image", RSS10_NAMESPACE)
        if nested is not None and len(nested) > 0:
            image_el = nested
    text_input_el = get_element(root, "textinput", RSS10_NAMESPACE)
    if text_input_el is None or len(text_input_el) == 0:
        nested = get_element(channel, "textinput", RSS10_NAMESPACE)
        if nested is not None and len(nested) > 0:
            text_input_el = nested

    items = get_elements(root, "item", RSS10_NAMESPACE) or get_elements(
        channel, "item", RSS10_NAMESPACE
    )

    return Rss10Feed(
        title=get_value(channel, "title", RSS10_NAMESPACE),
        link=get_value(channel, "link", RSS10_NAMESPACE),
        items=[_parse_item(item, options) for item in items],
        original_document=raw_text,
        about=rdf_about(channel),
        description=get_value(channel, "description", RSS10_NAMESPACE),
        image=_parse_image(image_el) if image_el is not None else None,
        text_input=(
            _parse_text_input(text_input_el) if text_input_el is not None else None
        ),
        dc=parse_dublin_core(channel),
    )
