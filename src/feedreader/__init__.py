import logging

from .atom import AtomFeed, AtomFeedItem
from .discovery import (
    HtmlFeedLink,
    HtmlFeedType,
    discover_feed_links,
    get_absolute_url,
    resolve_link,
)
from .exceptions import (
    FeedReaderError,
    MalformedMandatoryStructure,
    UnrecognizedFormat,
    UnresolvableUrl,
)
from .helpers import (
    decode_html,
    get_attribute,
    get_element,
    get_elements,
    get_value,
    parse_datetime,
    parse_int,
)
from .main import detect_dialect, normalize, parse, parse_dialect, parse_xml
from .models import (
    BaseFeed,
    BaseFeedItem,
    DialectKind,
    Feed,
    FeedItem,
    FeedReaderDict,
)
from .rss10 import Rss10Feed, Rss10FeedItem
from .rss20 import Rss20Feed, Rss20FeedItem

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "AtomFeed",
    "AtomFeedItem",
    "BaseFeed",
    "BaseFeedItem",
    "DialectKind",
    "Feed",
    "FeedItem",
    "FeedReaderDict",
    "FeedReaderError",
    "HtmlFeedLink",
    "HtmlFeedType",
    "MalformedMandatoryStructure",
    "Rss10Feed",
    "Rss10FeedItem",
    "Rss20Feed",
    "Rss20FeedItem",
    "UnrecognizedFormat",
    "UnresolvableUrl",
    "decode_html",
    "detect_dialect",
    "discover_feed_links",
    "get_absolute_url",
    "get_attribute",
    "get_element",
    "get_elements",
    "get_value",
    "normalize",
    "parse",
    "parse_datetime",
    "parse_dialect",
    "parse_int",
    "parse_xml",
    "resolve_link",
]
