"""RSS 0.91 / 0.92 / 2.0 feeds (root element ``<rss>``)."""

from __future__ import annotations

import datetime
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

from .exceptions import MalformedMandatoryStructure
from .helpers import (
    NAMESPACES,
    element_text,
    get_element,
    get_elements,
    get_value,
    parse_datetime,
    parse_int,
)
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
    parse_subjects,
    parse_text_input,
)

if TYPE_CHECKING:
    from lxml.etree import _Element

_MEDIA_NS = NAMESPACES["media"]
_MEDIA_CONTENT_TAG = f"{{{_MEDIA_NS}}}content"
_MEDIA_THUMBNAIL_TAG = f"{{{_MEDIA_NS}}}thumbnail"
_MEDIA_TITLE_TAG = f"{{{_MEDIA_NS}}}title"
_MEDIA_TEXT_TAG = f"{{{_MEDIA_NS}}}text"
_MEDIA_DESCRIPTION_TAG = f"{{{_MEDIA_NS}}}description"
_MEDIA_CREDIT_TAG = f"{{{_MEDIA_NS}}}credit"


@dataclass
class Rss20FeedImage(FeedImage):
    width: Optional[int] = None
    height: Optional[int] = None
    description: Optional[str] = None


@dataclass
class Rss20FeedCloud:
    domain: Optional[str] = None
    port: Optional[int] = None
    path: Optional[str] = None
    register_procedure: Optional[str] = None
    protocol: Optional[str] = None


@dataclass
class Rss20Enclosure:
    url: Optional[str] = None
    length: Optional[int] = None
    media_type: Optional[str] = None


@dataclass
class Rss20Source:
    url: Optional[str] = None
    value: Optional[str] = None


@dataclass
class MediaContent:
    url: Optional[str] = None
    type: Optional[str] = None
    medium: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None
    title: Optional[str] = None
    text: Optional[str] = None
    description: Optional[str] = None
    credit: Optional[str] = None
    credit_scheme: Optional[str] = None
    thumbnail_url: Optional[str] = None


@dataclass
class Rss20FeedItem(BaseFeedItem):
    description: Optional[str] = None
    author: Optional[str] = None
    categories: list[str] = field(default_factory=list)
    comments: Optional[str] = None
    enclosures: list[Rss20Enclosure] = field(default_factory=list)
    guid: Optional[str] = None
    guid_is_permalink: Optional[bool] = None
    source: Optional[Rss20Source] = None
    publishing_date_string: Optional[str] = None
    publishing_date: Optional[datetime.datetime] = None
    content: Optional[str] = None
    media: list[MediaContent] = field(default_factory=list)
    dc: Optional[DublinCore] = None

    @property
    def enclosure(self) -> Optional[Rss20Enclosure]:
        return self.enclosures[0] if self.enclosures else None

    def to_feed_item(self) -> FeedItem:
        publishing_date_string = self.publishing_date_string
        publishing_date = self.publishing_date
        if publishing_date_string is None and self.dc is not None:
            publishing_date_string = self.dc.date_string
            publishing_date = self.dc.date

        author = self.author
        if not author and self.dc is not None:
            author = self.dc.creator

        return FeedItem(
            original=self,
            id=self.guid or self.link or None,
            title=self.title,
            link=self.link,
            description=self.description,
            content=self.content,
            author=author,
            categories=list(self.categories),
            publishing_date_string=publishing_date_string,
            publishing_date=publishing_date,
        )


@dataclass
class Rss20Feed(BaseFeed):
    version: Optional[str] = None
    description: Optional[str] = None
    language: Optional[str] = None
    copyright: Optional[str] = None
    managing_editor: Optional[str] = None
    web_master: Optional[str] = None
    publishing_date_string: Optional[str] = None
    publishing_date: Optional[datetime.datetime] = None
    last_build_date_string: Optional[str] = None
    last_build_date: Optional[datetime.datetime] = None
    categories: list[str] = field(default_factory=list)
    generator: Optional[str] = None
    docs: Optional[str] = None
    cloud: Optional[Rss20FeedCloud] = None
    ttl: Optional[int] = None
    image: Optional[Rss20FeedImage] = None
    text_input: Optional[FeedTextInput] = None
    skip_hours: list[str] = field(default_factory=list)
    skip_days: list[str] = field(default_factory=list)
    rating: Optional[str] = None

    def to_feed(self) -> Feed:
        if self.last_build_date_string is not None:
            updated_string = self.last_build_date_string
            updated = self.last_build_date
        else:
            updated_string = self.publishing_date_string
            updated = self.publishing_date
        return Feed(
            type=DialectKind.RSS_2_0,
            original=self,
            title=self.title,
            link=self.link,
            description=self.description,
            language=self.language,
            copyright=self.copyright,
            image_url=self.image.url if self.image is not None else None,
            last_updated_date_string=updated_string,
            last_updated_date=updated,
            items=[item.to_feed_item() for item in self.items],
        )


def _parse_image(element: _Element) -> Rss20FeedImage:
    return Rss20FeedImage(
        title=get_value(element, "title"),
        url=get_value(element, "url"),
        link=get_value(element, "link"),
        width=parse_int(get_value(element, "width")),
        height=parse_int(get_value(element, "height")),
        description=get_value(element, "description"),
    )


def _parse_cloud(element: _Element) -> Rss20FeedCloud:
    return Rss20FeedCloud(
        domain=element.get("domain"),
        port=parse_int(element.get("port")),
        path=element.get("path"),
        register_procedure=element.get("registerProcedure"),
        protocol=element.get("protocol"),
    )


def _parse_enclosure_element(enclosure: _Element) -> Rss20Enclosure:
    url = enclosure.get("url")
    return Rss20Enclosure(
        url=url.strip() if url else url,
        length=parse_int(enclosure.get("length")),
        media_type=enclosure.get("type"),
    )


def _child_text(element: _Element, tag: str) -> Optional[str]:
    child = element.find(tag)
    if child is not None and child.text:
        return child.text.strip()
    return None


def _parse_media_content(item: _Element) -> list[MediaContent]:
    media_contents: list[MediaContent] = []

    for media in item.iter(_MEDIA_CONTENT_TAG):
        parent = media.getparent()
        desc = _child_text(media, _MEDIA_DESCRIPTION_TAG)
        if desc is None and parent is not None:
            desc = _child_text(parent, _MEDIA_DESCRIPTION_TAG)

        credit = media.find(_MEDIA_CREDIT_TAG)
        if credit is None and parent is not None:
            credit = parent.find(_MEDIA_CREDIT_TAG)

        thumbnail = media.find(_MEDIA_THUMBNAIL_TAG)
        media_contents.append(
            MediaContent(
                url=media.get("url"),
                type=media.get("type"),
                medium=media.get("medium"),
                width=parse_int(media.get("width")),
                height=parse_int(media.get("height")),
                title=_child_text(media, _MEDIA_TITLE_TAG),
                text=_child_text(media, _MEDIA_TEXT_TAG),
                description=desc,
                credit=element_text(credit) or None,
                credit_scheme=credit.get("scheme") if credit is not None else None,
                thumbnail_url=(
                    thumbnail.get("url") if thumbnail is not None else None
                ),
            )
        )

    if not media_contents:
        for thumbnail in item.iter(_MEDIA_THUMBNAIL_TAG):
            if thumbnail.get("url") is None:
                continue
            media_contents.append(
                MediaContent(
                    url=thumbnail.get("url"),
                    type="image/jpeg",
                    width=parse_int(thumbnail.get("width")),
                    height=parse_int(thumbnail.get("height")),
                )
            )

    return media_contents


def _text_list(element: Optional[_Element], name: str) -> list[str]:
    return [
        value for value in map(element_text, get_elements(element, name)) if value
    ]


def _categories(element: _Element) -> list[str]:
    return [
        category.text.strip()
        for category in get_elements(element, "category")
        if category.text and category.text.strip()
    ]


def _parse_item(item: _Element, options: ParseOptions) -> Rss20FeedItem:
    guid_el = get_element(item, "guid")
    guid_is_permalink: Optional[bool] = None
    if guid_el is not None:
        permalink = guid_el.get("isPermaLink")
        # isPermaLink defaults to true when the attribute is missing
        guid_is_permalink = permalink is None or permalink.strip().lower() == "true"

    source_el = get_element(item, "source")
    source = None
    if source_el is not None:
        source = Rss20Source(url=source_el.get("url"), value=element_text(source_el))

    publishing_date_string = get_value(item, "pubDate")

    categories: list[str] = []
    if options.include_tags:
        categories = _categories(item) + parse_subjects(item)

    content = None
    if options.include_content:
        content = get_value(item, "content:encoded")

    enclosures: list[Rss20Enclosure] = []
    if options.include_enclosures:
        for enclosure_el in get_elements(item, "enclosure"):
            enclosure = _parse_enclosure_element(enclosure_el)
            if enclosure.url:
                enclosures.append(enclosure)

    media: list[MediaContent] = []
    if options.include_media:
        media = _parse_media_content(item)

    return Rss20FeedItem(
        title=get_value(item, "title"),
        link=get_value(item, "link"),
        element=item,
        description=get_value(item, "description"),
        author=get_value(item, "author"),
        categories=categories,
        comments=get_value(item, "comments"),
        enclosures=enclosures,
        guid=element_text(guid_el),
        guid_is_permalink=guid_is_permalink,
        source=source,
        publishing_date_string=publishing_date_string,
        publishing_date=parse_datetime(publishing_date_string),
        content=content,
        media=media,
        dc=parse_dublin_core(item),
    )


def _find_channel(root: _Element) -> _Element:
    channel = get_element(root, "channel")
    if channel is None:
        # Some feeds put the channel in a namespace of their own
        for child in root:
            if isinstance(child.tag, str) and child.tag.lower().endswith("}channel"):
                return child
        raise MalformedMandatoryStructure(
            "Invalid RSS feed: missing channel element", dialect=DialectKind.RSS_2_0
        )
    return channel


def _find_items(root: _Element, channel: _Element) -> list[_Element]:
    items = get_elements(channel, "item")
    if items:
        return items
    # <channel/> followed by sibling <item> elements
    if len(channel) == 0:
        return get_elements(root, "item")
    return [
        child
        for child in channel
        if isinstance(child.tag, str) and child.tag.lower().endswith("}item")
    ]


def parse_rss20(
    raw_text: Optional[str], root: _Element, options: Optional[ParseOptions] = None
) -> Rss20Feed:
    options = options or ParseOptions()
    channel = _find_channel(root)

    image_el = get_element(channel, "image")
    text_input_el = get_element(channel, "textInput")
    cloud_el = get_element(channel, "cloud")
    publishing_date_string = get_value(channel, "pubDate")
    last_build_date_string = get_value(channel, "lastBuildDate")

    return Rss20Feed(
        title=get_value(channel, "title"),
        link=get_value(channel, "link"),
        items=[_parse_item(item, options) for item in _find_items(root, channel)],
        original_document=raw_text,
        version=root.get("version"),
        description=get_value(channel, "description"),
        language=get_value(channel, "language"),
        copyright=get_value(channel, "copyright"),
        managing_editor=get_value(channel, "managingEditor"),
        web_master=get_value(channel, "webMaster"),
        publishing_date_string=publishing_date_string,
        publishing_date=parse_datetime(publishing_date_string),
        last_build_date_string=last_build_date_string,
        last_build_date=parse_datetime(last_build_date_string),
        categories=_categories(channel) if options.include_tags else [],
        generator=get_value(channel, "generator"),
        docs=get_value(channel, "docs"),
        cloud=_parse_cloud(cloud_el) if cloud_el is not None else None,
        ttl=parse_int(get_value(channel, "ttl")),
        image=_parse_image(image_el) if image_el is not None else None,
        text_input=(
            parse_text_input(text_input_el) if text_input_el is not None else None
        ),
        skip_hours=_text_list(get_element(channel, "skipHours"), "hour"),
        skip_days=_text_list(get_element(channel, "skipDays"), "day"),
        rating=get_value(channel, "rating"),
    )
