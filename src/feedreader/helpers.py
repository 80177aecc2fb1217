"""Lenient scalar parsers and element accessors.

Everything in here degrades to ``None`` instead of raising: a bad date or a
missing child element is an expected outcome when reading real-world feeds.
"""

from __future__ import annotations

import datetime
import html as _html_mod
import logging
import re
from email.utils import parsedate_to_datetime
from functools import lru_cache
from typing import TYPE_CHECKING, Optional

from dateutil import parser as dateutil_parser

if TYPE_CHECKING:
    from lxml.etree import _Element

logger = logging.getLogger(__name__)

_UTC = datetime.timezone.utc

_INT32_MIN = -(2**31)
_INT32_MAX = 2**31 - 1
# ASCII digits only, no "_" separators
_RE_INTEGER = re.compile(r"\s*[+-]?[0-9]+\s*")

NAMESPACES: dict[str, str] = {
    "rdf": "http://www.w3.org/1999/02/22-rdf-syntax-ns#",
    "rss": "http://purl.org/rss/1.0/",
    "dc": "http://purl.org/dc/elements/1.1/",
    "dcterms": "http://purl.org/dc/terms/",
    "content": "http://purl.org/rss/1.0/modules/content/",
    "atom": "http://www.w3.org/2005/Atom",
    "media": "http://search.yahoo.com/mrss/",
    "sy": "http://purl.org/rss/1.0/modules/syndication/",
    "xml": "http://www.w3.org/XML/1998/namespace",
}

# Literal prefixes seen in feeds that forgot to declare their namespaces
_UNDECLARED_PREFIXES = ("rss:", "atom:", "dc:")

_RE_ISO_DATE = re.compile(
    r"(?P<year>\d{4})-(?P<month>\d{2})-(?P<day>\d{2})"
    r"(?:[Tt ](?P<hour>\d{2}):(?P<minute>\d{2})"
    r"(?::(?P<second>\d{2})(?:[.,](?P<fraction>\d+))?)?)?"
    r"\s*(?P<zone>[Zz]|UTC|GMT|[+-]\d{2}(?::?\d{2})?)?$"
)
_RE_RFC822_DATE = re.compile(
    r"(?:[^\W\d]+\.?,\s*)?(?P<day>\d{1,2})\s+(?P<month>[^\W\d]+)\.?\s+(?P<year>\d{4})"
    r"\s+(?P<hour>\d{1,2}):(?P<minute>\d{2})(?::(?P<second>\d{2}))?"
    r"\s*(?P<zone>[+-]\d{4}|[A-Za-z]{1,5})?$"
)

# English month names followed by German, French, Spanish, Italian, Dutch and
# Portuguese spellings that show up in feeds generated with a localized locale.
_MONTH_NAMES: tuple[tuple[str, ...], ...] = (
    ("jan", "january", "januar", "jän", "janv", "janvier", "ene", "enero", "gen",
     "gennaio", "januari", "janeiro"),
    ("feb", "february", "februar", "fév", "fev", "févr", "février", "febrero",
     "febbraio", "februari", "fevereiro"),
    ("mar", "march", "mär", "mrz", "märz", "mars", "marzo", "mrt", "maart", "março"),
    ("apr", "april", "avr", "avril", "abr", "abril", "aprile"),
    ("may", "mai", "mayo", "mag", "maggio", "mei", "maio"),
    ("jun", "june", "juni", "juin", "junio", "giu", "giugno", "junho"),
    ("jul", "july", "juli", "juil", "juillet", "julio", "lug", "luglio", "julho"),
    ("aug", "august", "aoû", "aou", "août", "aout", "ago", "agosto", "augustus"),
    ("sep", "sept", "september", "septembre", "septiembre", "set", "settembre",
     "setembro"),
    ("oct", "october", "okt", "oktober", "octobre", "octubre", "ott", "ottobre",
     "out", "outubro"),
    ("nov", "november", "novembre", "noviembre", "novembro"),
    ("dec", "december", "dez", "dezember", "déc", "décembre", "dic", "diciembre",
     "dicembre", "dezembro"),
)

_MONTH_NUMBERS: dict[str, int] = {
    name: number
    for number, names in enumerate(_MONTH_NAMES, start=1)
    for name in names
}

# Offsets in hours of the zone abbreviations found in feeds
_ZONE_HOURS: dict[str, float] = {
    "UTC": 0, "UT": 0, "GMT": 0, "Z": 0, "WET": 0,
    "WEST": 1, "BST": 1, "CET": 1, "MEZ": 1,
    "CEST": 2, "MESZ": 2, "EET": 2,
    "EEST": 3, "MSK": 3,
    "IST": 5.5,
    "SGT": 8, "AWST": 8,
    "JST": 9, "KST": 9,
    "ACST": 9.5, "ACDT": 10.5,
    "AEST": 10, "AEDT": 11,
    "NZST": 12, "NZDT": 13,
    "HST": -10,
    "AKST": -9, "AKDT": -8,
    "PST": -8, "PDT": -7,
    "MST": -7, "MDT": -6,
    "CST": -6, "CDT": -5,
    "EST": -5, "EDT": -4,
}
_custom_tzinfos: dict[str, int] = {
    name: int(hours * 3600) for name, hours in _ZONE_HOURS.items()
}


class _LocalizedParserInfo(dateutil_parser.parserinfo):
    """dateutil parserinfo that also understands non-English month names."""

    MONTHS = list(_MONTH_NAMES)


_DATEUTIL_PARSER = dateutil_parser.parser(_LocalizedParserInfo())

# Two defaults that differ in every date field; a field dateutil had to take
# from the default shows up as a difference between the two results.
_DATEUTIL_DEFAULTS = (datetime.datetime(1, 1, 1), datetime.datetime(2, 2, 2))


def _as_utc(dt: datetime.datetime) -> Optional[datetime.datetime]:
    """Naive datetimes are taken to be UTC already."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=_UTC)
    try:
        return dt.astimezone(_UTC)
    except (ValueError, OverflowError):
        return None


def _zone_offset(zone: Optional[str]) -> Optional[datetime.timezone]:
    if not zone:
        return _UTC
    if zone[0] in "+-":
        digits = zone[1:].replace(":", "")
        minutes = int(digits[:2]) * 60 + (int(digits[2:4]) if len(digits) > 2 else 0)
        if minutes >= 24 * 60:
            return None
        sign = -1 if zone[0] == "-" else 1
        return datetime.timezone(datetime.timedelta(minutes=sign * minutes))
    seconds = _custom_tzinfos.get(zone.upper())
    if seconds is None:
        return None
    return datetime.timezone(datetime.timedelta(seconds=seconds))


def _is_leap_year(year: int) -> bool:
    return year % 4 == 0 and (year % 100 != 0 or year % 400 == 0)


def _build_datetime(
    year: int,
    month: int,
    day: int,
    hour: int,
    minute: int,
    second: int,
    microsecond: int,
    zone: Optional[str],
) -> Optional[datetime.datetime]:
    tzinfo = _zone_offset(zone)
    if tzinfo is None:
        return None
    # Feb 29 in non-leap years
    if month == 2 and day == 29 and not _is_leap_year(year):
        day = 28
    try:
        date = datetime.date(year, month, day)
    except ValueError:
        return None
    # 24:00 is midnight of the next day
    if hour == 24 and minute == 0 and second == 0:
        date += datetime.timedelta(days=1)
        hour = 0
    try:
        dt = datetime.datetime.combine(
            date, datetime.time(hour, minute, second, microsecond), tzinfo
        )
    except ValueError:
        return None
    return _as_utc(dt)


def _parse_iso(candidate: str) -> Optional[datetime.datetime]:
    match = _RE_ISO_DATE.match(candidate)
    if match is None:
        return None
    fraction = (match["fraction"] or "")[:6].ljust(6, "0")
    return _build_datetime(
        int(match["year"]),
        int(match["month"]),
        int(match["day"]),
        int(match["hour"] or 0),
        int(match["minute"] or 0),
        int(match["second"] or 0),
        int(fraction),
        match["zone"],
    )


def _parse_rfc822(candidate: str) -> Optional[datetime.datetime]:
    match = _RE_RFC822_DATE.match(candidate)
    if match is None:
        return None
    month_name = match["month"].lower()
    month = _MONTH_NUMBERS.get(month_name) or _MONTH_NUMBERS.get(month_name[:3])
    if month is None:
        return None
    return _build_datetime(
        int(match["year"]),
        month,
        int(match["day"]),
        int(match["hour"]),
        int(match["minute"]),
        int(match["second"] or 0),
        0,
        match["zone"],
    )


def _parse_email_date(candidate: str) -> Optional[datetime.datetime]:
    try:
        parsed = parsedate_to_datetime(candidate)
    except (TypeError, ValueError, IndexError):
        return None
    if parsed is None:
        return None
    return _as_utc(parsed)


def _parse_free_form(candidate: str) -> Optional[datetime.datetime]:
    """dateutil as a last resort, refusing dates it had to complete."""
    try:
        first, second = [
            _DATEUTIL_PARSER.parse(candidate, default=default, tzinfos=_custom_tzinfos)
            for default in _DATEUTIL_DEFAULTS
        ]
    except (ValueError, TypeError, OverflowError):
        return None
    if (first.year, first.month, first.day) != (second.year, second.month, second.day):
        return None
    return _as_utc(first)


def _parse_date_candidate(candidate: str) -> Optional[datetime.datetime]:
    return (
        _parse_iso(candidate)
        or _parse_rfc822(candidate)
        or _parse_email_date(candidate)
        or _parse_free_form(candidate)
    )


@lru_cache(maxsize=8192)
def parse_datetime(text: Optional[str]) -> Optional[datetime.datetime]:
    """Parse a date string into a timezone-aware UTC datetime.

    Returns ``None`` for empty or unparsable input. When the first attempt
    fails and the text contains a comma, everything up to and including the
    first comma is dropped and parsing is retried; this gets rid of weekday
    names the parsers don't know (``"Sonntag, 2016-12-18T10:00:00Z"``).
    """
    if not text:
        return None

    candidate = " ".join(text.split())
    if not candidate:
        return None

    dt = _parse_date_candidate(candidate)
    if dt is None and "," in candidate:
        remainder = candidate.split(",", 1)[1].strip()
        if remainder:
            dt = _parse_date_candidate(remainder)

    # datetime.min is never a real publishing date
    if dt is None or dt.year <= 1:
        logger.debug("Dropping unparsable date %r", text)
        return None
    return dt


def parse_int(text: Optional[str]) -> Optional[int]:
    """Parse a 32-bit integer, returning ``None`` for anything else."""
    if text is None:
        return None
    if not _RE_INTEGER.fullmatch(text):
        logger.debug("Dropping non-numeric value %r", text)
        return None
    value = int(text)
    if not _INT32_MIN <= value <= _INT32_MAX:
        logger.debug("Dropping out-of-range integer %r", text)
        return None
    return value


def decode_html(text: Optional[str]) -> Optional[str]:
    if text is None:
        return None
    return _html_mod.unescape(text)


def local_name(tag: str) -> str:
    if "}" in tag:
        return tag.rsplit("}", 1)[1]
    if ":" in tag:
        return tag.split(":", 1)[1]
    return tag


def element_namespace(element: _Element) -> Optional[str]:
    tag = element.tag
    if isinstance(tag, str) and tag.startswith("{"):
        return tag[1:].split("}", 1)[0]
    return None


def _resolve_prefix(element: _Element, prefix: str) -> Optional[str]:
    if prefix == "xml":
        return NAMESPACES["xml"]
    return element.nsmap.get(prefix) or NAMESPACES.get(prefix)


def _candidate_tags(
    element: _Element, name: str, namespace: Optional[str]
) -> list[str]:
    if ":" in name:
        prefix, local = name.split(":", 1)
        ns = _resolve_prefix(element, prefix)
        return [f"{{{ns}}}{local}"] if ns else []
    if namespace:
        return [f"{{{namespace}}}{name}", name]
    return [name]


def _lenient_match(tag: str, wanted: str, namespace: Optional[str]) -> bool:
    """Case-insensitive fallback match, also accepting undeclared prefixes."""
    tag_lower = tag.lower()
    if tag_lower.startswith("{"):
        if ":" in wanted or not namespace:
            return False
        ns, local = tag_lower[1:].split("}", 1)
        return ns == namespace.lower() and local == wanted
    if tag_lower == wanted:
        return True
    if ":" in wanted:
        return False
    return any(tag_lower == prefix + wanted for prefix in _UNDECLARED_PREFIXES)


def get_element(
    element: Optional[_Element], name: str, namespace: Optional[str] = None
) -> Optional[_Element]:
    """Find the first child called ``name``.

    ``name`` is either a local name (``"title"``) or a prefixed name
    (``"dc:creator"``) whose prefix is resolved against the document first and
    the well-known namespaces second. A local name matches children in
    ``namespace`` or in no namespace at all.
    """
    if element is None:
        return None
    for tag in _candidate_tags(element, name, namespace):
        found = element.find(tag)
        if found is not None:
            return found

    wanted = name.lower()
    for child in element:
        if isinstance(child.tag, str) and _lenient_match(child.tag, wanted, namespace):
            return child
    return None


def get_elements(
    element: Optional[_Element], name: str, namespace: Optional[str] = None
) -> list[_Element]:
    if element is None:
        return []
    for tag in _candidate_tags(element, name, namespace):
        found = element.findall(tag)
        if found:
            return found

    wanted = name.lower()
    return [
        child
        for child in element
        if isinstance(child.tag, str) and _lenient_match(child.tag, wanted, namespace)
    ]


def element_text(element: Optional[_Element]) -> Optional[str]:
    """Stripped text of ``element``; ``""`` when present but empty."""
    if element is None:
        return None
    text = element.text
    return text.strip() if text else ""


def get_value(
    element: Optional[_Element], name: str, namespace: Optional[str] = None
) -> Optional[str]:
    return element_text(get_element(element, name, namespace))


def get_attribute(element: Optional[_Element], qualified_name: str) -> Optional[str]:
    """Raw value of an attribute, e.g. ``"href"`` or ``"rdf:about"``."""
    if element is None:
        return None
    if ":" not in qualified_name:
        return element.get(qualified_name)
    prefix, local = qualified_name.split(":", 1)
    ns = _resolve_prefix(element, prefix)
    value = element.get(f"{{{ns}}}{local}") if ns else None
    if value is None:
        value = element.get(qualified_name)
    return value
