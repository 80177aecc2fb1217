import datetime

import pytest
from lxml import etree

from feedreader import (
    decode_html,
    get_attribute,
    get_element,
    get_elements,
    get_value,
    parse_datetime,
    parse_int,
)

UTC = datetime.timezone.utc


@pytest.mark.parametrize(
    "value, expected",
    [
        ("Mon, 01 Jan 2024 00:00:00 GMT", datetime.datetime(2024, 1, 1, tzinfo=UTC)),
        ("Tue, 10 Jun 2003 04:00:00 EST", datetime.datetime(2003, 6, 10, 9, tzinfo=UTC)),
        ("Tue, 10 Jun 2003 04:00:00 +0200", datetime.datetime(2003, 6, 10, 2, tzinfo=UTC)),
        ("2003-12-13T18:30:02Z", datetime.datetime(2003, 12, 13, 18, 30, 2, tzinfo=UTC)),
        ("2003-12-13T18:30:02+01:00", datetime.datetime(2003, 12, 13, 17, 30, 2, tzinfo=UTC)),
        ("2023-02-29T10:00:00Z", datetime.datetime(2023, 2, 28, 10, tzinfo=UTC)),
        ("2024-03-01 24:00:00", datetime.datetime(2024, 3, 2, tzinfo=UTC)),
    ],
)
def test_parse_datetime(value, expected):
    assert parse_datetime(value) == expected


def test_parse_datetime_strips_unknown_weekday():
    parsed = parse_datetime("Do, 22 Dez 2016 17:36:00 +0000")
    assert parsed == datetime.datetime(2016, 12, 22, 17, 36, tzinfo=UTC)
    assert parsed.tzinfo is not None


def test_parse_datetime_retries_after_first_comma():
    parsed = parse_datetime("Sonntag, 2016-12-18T10:00:00Z")
    assert parsed == datetime.datetime(2016, 12, 18, 10, tzinfo=UTC)


def test_parse_datetime_localized_month_name():
    parsed = parse_datetime("22 Dezember 2016 17:36:00 +0100")
    assert parsed == datetime.datetime(2016, 12, 22, 16, 36, tzinfo=UTC)


@pytest.mark.parametrize(
    "value",
    [
        None,
        "",
        "   ",
        "\n\t",
        "definitely not a date",
        "2016",
        "12",
        "May",
        "Mon, 5",
        "0001-01-01T00:00:00Z",
        "Mon, 01 Jan 0001 00:00:00 +0000",
    ],
)
def test_parse_datetime_absent(value):
    assert parse_datetime(value) is None


def test_parse_datetime_naive_is_assumed_utc():
    assert parse_datetime("2020-05-17 08:15:00") == datetime.datetime(
        2020, 5, 17, 8, 15, tzinfo=UTC
    )


@pytest.mark.parametrize(
    "value, expected",
    [
        ("42", 42),
        (" 7 ", 7),
        ("-5", -5),
        ("abc", None),
        ("", None),
        (None, None),
        ("4.5", None),
        ("99999999999", None),
        ("1_000", None),
        ("\u0661\u0662", None),
    ],
)
def test_parse_int(value, expected):
    assert parse_int(value) == expected


def test_decode_html():
    assert decode_html("Tom &amp; Jerry &#8211; &lt;b&gt;") == "Tom & Jerry – <b>"
    assert decode_html(None) is None


ITEM = """<item xmlns:dc="http://purl.org/dc/elements/1.1/"
      xmlns:rdf="http://www.w3.org/1999/02/22-rdf-syntax-ns#"
      xmlns:atom="http://www.w3.org/2005/Atom"
      rdf:about="http://example.com/a?b=1&amp;c=2">
  <atom:link href="http://example.com/self" rel="self"/>
  <title>  Hello  </title>
  <link>http://example.com/item</link>
  <dc:creator>Jane</dc:creator>
  <dc:subject>one</dc:subject>
  <dc:subject>two</dc:subject>
  <empty/>
  <PubDate>Mon, 01 Jan 2024 00:00:00 GMT</PubDate>
</item>"""


@pytest.fixture
def item():
    return etree.fromstring(ITEM)


def test_get_value(item):
    assert get_value(item, "title") == "Hello"
    assert get_value(item, "dc:creator") == "Jane"


def test_get_value_prefers_unnamespaced_child(item):
    assert get_value(item, "link") == "http://example.com/item"


def test_get_value_absent_versus_empty(item):
    assert get_value(item, "missing") is None
    assert get_value(item, "empty") == ""
    assert get_value(None, "title") is None


def test_get_value_ignores_case(item):
    assert get_value(item, "pubDate") == "Mon, 01 Jan 2024 00:00:00 GMT"


def test_get_elements(item):
    subjects = get_elements(item, "dc:subject")
    assert [subject.text for subject in subjects] == ["one", "two"]
    assert get_elements(item, "category") == []
    assert get_elements(None, "category") == []


def test_get_element_with_namespace():
    root = etree.fromstring(
        '<feed xmlns="http://www.w3.org/2005/Atom"><title>T</title></feed>'
    )
    assert get_element(root, "title") is None
    found = get_element(root, "title", "http://www.w3.org/2005/Atom")
    assert found is not None
    assert found.text == "T"


def test_get_attribute(item):
    assert get_attribute(item, "rdf:about") == "http://example.com/a?b=1&c=2"
    assert get_attribute(item, "missing") is None
    assert get_attribute(item, "rdf:resource") is None
    assert get_attribute(None, "rdf:about") is None
