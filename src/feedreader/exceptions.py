from __future__ import annotations

from typing import Optional


class FeedReaderError(ValueError):
    """Base class for all errors raised by feedreader."""


class UnrecognizedFormat(FeedReaderError):
    """The document is not a feed in any supported dialect."""

    def __init__(self, message: str, root_tag: Optional[str] = None) -> None:
        super().__init__(message)
        self.root_tag = root_tag


class MalformedMandatoryStructure(FeedReaderError):
    """The dialect was detected but its required container is missing."""

    def __init__(self, message: str, dialect: Optional[str] = None) -> None:
        super().__init__(message)
        self.dialect = dialect


class UnresolvableUrl(FeedReaderError):
    def __init__(self, page_url: Optional[str], link_url: Optional[str]) -> None:
        super().__init__(
            f"Could not get the absolute url out of {page_url} and {link_url}"
        )
        self.page_url = page_url
        self.link_url = link_url
