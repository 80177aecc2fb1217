import datetime

from feedreader import Rss20Feed, parse

UTC = datetime.timezone.utc

RSS = """<?xml version="1.0" encoding="utf-8"?>
<rss version="2.0"
     xmlns:atom="http://www.w3.org/2005/Atom"
     xmlns:content="http://purl.org/rss/1.0/modules/content/"
     xmlns:dc="http://purl.org/dc/elements/1.1/"
     xmlns:media="http://search.yahoo.com/mrss/">
  <channel>
    <atom:link href="https://example.com/feed.xml" rel="self" type="application/rss+xml"/>
    <title>Liftoff News</title>
    <link>http://liftoff.msfc.nasa.gov/</link>
    <description>Liftoff to Space Exploration.</description>
    <language>en-us</language>
    <copyright>Copyright 2003, NASA</copyright>
    <pubDate>Tue, 10 Jun 2003 04:00:00 GMT</pubDate>
    <lastBuildDate>Tue, 10 Jun 2003 09:41:01 GMT</lastBuildDate>
    <docs>http://blogs.law.harvard.edu/tech/rss</docs>
    <generator>Weblog Editor 2.0</generator>
    <managingEditor>editor@example.com</managingEditor>
    <webMaster>webmaster@example.com</webMaster>
    <ttl>60</ttl>
    <cloud domain="rpc.sys.com" port="80" path="/RPC2" registerProcedure="pingMe" protocol="soap"/>
    <image>
      <url>http://liftoff.msfc.nasa.gov/logo.png</url>
      <title>Liftoff News</title>
      <link>http://liftoff.msfc.nasa.gov/</link>
      <width>88</width>
      <height>huge</height>
    </image>
    <textInput>
      <title>Search</title>
      <description>Search the archive</description>
      <name>q</name>
      <link>http://liftoff.msfc.nasa.gov/search</link>
    </textInput>
    <skipHours><hour>0</hour><hour>1</hour></skipHours>
    <skipDays><day>Sunday</day></skipDays>
    <item>
      <title>Star City</title>
      <link>http://liftoff.msfc.nasa.gov/news/2003/news-starcity.asp</link>
      <description>How do Americans get ready to work with Russians?</description>
      <content:encoded><![CDATA[<p>Full <b>body</b></p>]]></content:encoded>
      <pubDate>Tue, 03 Jun 2003 09:39:21 GMT</pubDate>
      <guid isPermaLink="false">starcity-559</guid>
      <author>jane@example.com (Jane)</author>
      <category>space</category>
      <category domain="http://example.com/cats">russia</category>
      <comments>http://liftoff.msfc.nasa.gov/comments/559</comments>
      <source url="http://example.com/origin.xml">Origin</source>
      <enclosure url="http://example.com/a.mp3" length="12216320" type="audio/mpeg"/>
      <media:content url="http://example.com/a.jpg" type="image/jpeg" width="640" height="x">
        <media:title>Photo</media:title>
        <media:credit scheme="urn:ebu">NASA</media:credit>
      </media:content>
    </item>
    <item>
      <title>The Engine That Does More</title>
      <link>http://liftoff.msfc.nasa.gov/news/2003/news-VASIMR.asp</link>
      <pubDate>sometime last week</pubDate>
      <dc:creator>Bob</dc:creator>
      <guid>http://liftoff.msfc.nasa.gov/2003/05/27.html#item571</guid>
    </item>
    <item>
      <description>An item with nothing but a description.</description>
    </item>
  </channel>
</rss>
"""


def test_channel_fields():
    feed = parse(RSS)
    rss = feed.original
    assert isinstance(rss, Rss20Feed)
    assert rss.version == "2.0"
    assert rss.title == "Liftoff News"
    assert rss.link == "http://liftoff.msfc.nasa.gov/"
    assert rss.description == "Liftoff to Space Exploration."
    assert rss.language == "en-us"
    assert rss.copyright == "Copyright 2003, NASA"
    assert rss.docs == "http://blogs.law.harvard.edu/tech/rss"
    assert rss.generator == "Weblog Editor 2.0"
    assert rss.managing_editor == "editor@example.com"
    assert rss.web_master == "webmaster@example.com"
    assert rss.ttl == 60
    assert rss.publishing_date == datetime.datetime(2003, 6, 10, 4, tzinfo=UTC)
    assert rss.last_build_date_string == "Tue, 10 Jun 2003 09:41:01 GMT"
    assert rss.skip_hours == ["0", "1"]
    assert rss.skip_days == ["Sunday"]
    assert rss.rating is None


def test_channel_blocks():
    rss = parse(RSS).original
    assert rss.cloud.domain == "rpc.sys.com"
    assert rss.cloud.port == 80
    assert rss.cloud.register_procedure == "pingMe"
    assert rss.image.url == "http://liftoff.msfc.nasa.gov/logo.png"
    assert rss.image.width == 88
    assert rss.image.height is None
    assert rss.text_input.name == "q"
    assert rss.text_input.link == "http://liftoff.msfc.nasa.gov/search"


def test_item_fields():
    item = parse(RSS).original.items[0]
    assert item.title == "Star City"
    assert item.guid == "starcity-559"
    assert item.guid_is_permalink is False
    assert item.author == "jane@example.com (Jane)"
    assert item.categories == ["space", "russia"]
    assert item.comments == "http://liftoff.msfc.nasa.gov/comments/559"
    assert item.source.url == "http://example.com/origin.xml"
    assert item.source.value == "Origin"
    assert item.content == "<p>Full <b>body</b></p>"
    assert item.publishing_date == datetime.datetime(2003, 6, 3, 9, 39, 21, tzinfo=UTC)
    assert item.element is not None


def test_item_enclosure_and_media():
    item = parse(RSS).original.items[0]
    assert item.enclosure.url == "http://example.com/a.mp3"
    assert item.enclosure.length == 12216320
    assert item.enclosure.media_type == "audio/mpeg"
    media = item.media[0]
    assert media.url == "http://example.com/a.jpg"
    assert media.width == 640
    assert media.height is None
    assert media.title == "Photo"
    assert media.credit == "NASA"
    assert media.credit_scheme == "urn:ebu"


def test_unparsable_date_does_not_abort_item():
    feed = parse(RSS)
    item = feed.items[1]
    assert item.publishing_date is None
    assert item.publishing_date_string == "sometime last week"
    assert item.title == "The Engine That Does More"
    assert feed.items[2].description == "An item with nothing but a description."


def test_guid_without_permalink_attribute():
    item = parse(RSS).original.items[1]
    assert item.guid_is_permalink is True


def test_missing_fields_are_none():
    item = parse(RSS).original.items[2]
    assert item.title is None
    assert item.link is None
    assert item.guid is None
    assert item.enclosure is None
    assert item.dc is None


def test_lowercase_element_names():
    xml = (
        '<rss version="0.92"><channel><title>t</title>'
        "<item><title>a</title><pubdate>Tue, 03 Jun 2003 09:39:21 GMT</pubdate></item>"
        "</channel></rss>"
    )
    rss = parse(xml).original
    assert rss.version == "0.92"
    assert rss.items[0].publishing_date_string == "Tue, 03 Jun 2003 09:39:21 GMT"


def test_empty_channel_followed_by_items():
    xml = (
        '<rss version="2.0"><channel/>'
        "<item><title>a</title><pubdate>Tue, 03 Jun 2003 09:39:21 GMT</pubdate></item>"
        "</rss>"
    )
    rss = parse(xml).original
    assert rss.title is None
    assert [item.title for item in rss.items] == ["a"]
    assert rss.items[0].publishing_date == datetime.datetime(
        2003, 6, 3, 9, 39, 21, tzinfo=UTC
    )
