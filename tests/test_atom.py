import datetime

from feedreader import AtomFeed, DialectKind, parse

UTC = datetime.timezone.utc

ATOM = """<?xml version="1.0" encoding="utf-8"?>
<feed xmlns="http://www.w3.org/2005/Atom" xml:lang="en">
  <title type="text">dive into mark</title>
  <subtitle type="html">A &lt;em&gt;lot&lt;/em&gt; of effort went into making this effortless</subtitle>
  <updated>2005-07-31T12:29:29Z</updated>
  <id>tag:example.org,2003:3</id>
  <link rel="self" type="application/atom+xml" href="http://example.org/feed.atom"/>
  <link href="http://example.org/"/>
  <rights>Copyright (c) 2003, Mark Pilgrim</rights>
  <generator uri="http://www.example.com/" version="1.0">Example Toolkit</generator>
  <logo>http://example.org/logo.png</logo>
  <category term="web"/>
  <entry>
    <title>Atom draft-07 snapshot</title>
    <link rel="edit" href="http://example.org/edit/1"/>
    <link rel="alternate" type="text/html" href="http://example.org/2005/04/02/atom"/>
    <link rel="enclosure" type="audio/mpeg" length="1337" href="http://example.org/audio/ph34r_my_podcast.mp3"/>
    <id>tag:example.org,2003:3.2397</id>
    <updated>2005-07-31T12:29:29Z</updated>
    <published>2003-12-13T08:29:29-04:00</published>
    <author>
      <name>Mark Pilgrim</name>
      <uri>http://example.org/</uri>
      <email>f8dy@example.com</email>
    </author>
    <contributor><name>Sam Ruby</name></contributor>
    <contributor><name>Joe Gregorio</name></contributor>
    <category term="atom" scheme="http://example.org/tags" label="Atom"/>
    <summary>Short summary</summary>
    <content type="xhtml" xml:lang="en" xml:base="http://diveintomark.org/">
      <div xmlns="http://www.w3.org/1999/xhtml"><p><i>[Update: The Atom draft is finished.]</i> Hi</p></div>
    </content>
  </entry>
  <entry>
    <title>Only updated</title>
    <link href="http://example.org/2"/>
    <id>tag:example.org,2003:2</id>
    <updated>2005-07-30T10:00:00+02:00</updated>
  </entry>
</feed>
"""

ATOM_03 = """<?xml version="1.0" encoding="utf-8"?>
<feed version="0.3" xmlns="http://purl.org/atom/ns#">
  <title>Old school</title>
  <tagline>Still here</tagline>
  <modified>2004-01-01T10:00:00Z</modified>
  <link rel="alternate" type="text/html" href="http://example.org/"/>
  <entry>
    <title>First</title>
    <link rel="alternate" type="text/html" href="http://example.org/1"/>
    <id>urn:1</id>
    <issued>2003-12-13T18:30:02Z</issued>
    <modified>2003-12-14T18:30:02Z</modified>
    <author><name>Jane</name><url>http://jane.example.org/</url></author>
  </entry>
</feed>
"""


def test_feed_fields():
    feed = parse(ATOM)
    assert feed.type == DialectKind.ATOM
    atom = feed.original
    assert isinstance(atom, AtomFeed)
    assert atom.title == "dive into mark"
    assert atom.link == "http://example.org/"
    assert atom.id == "tag:example.org,2003:3"
    assert atom.subtitle == "A <em>lot</em> of effort went into making this effortless"
    assert atom.language == "en"
    assert atom.rights == "Copyright (c) 2003, Mark Pilgrim"
    assert atom.generator.name == "Example Toolkit"
    assert atom.generator.uri == "http://www.example.com/"
    assert atom.generator.version == "1.0"
    assert [c.term for c in atom.categories] == ["web"]
    assert feed.image_url == "http://example.org/logo.png"
    assert feed.last_updated_date == datetime.datetime(2005, 7, 31, 12, 29, 29, tzinfo=UTC)


def test_entry_fields():
    entry = parse(ATOM).original.items[0]
    assert entry.link == "http://example.org/2005/04/02/atom"
    assert entry.id == "tag:example.org,2003:3.2397"
    assert entry.published == datetime.datetime(2003, 12, 13, 12, 29, 29, tzinfo=UTC)
    assert entry.updated == datetime.datetime(2005, 7, 31, 12, 29, 29, tzinfo=UTC)
    assert entry.author.name == "Mark Pilgrim"
    assert entry.author.email == "f8dy@example.com"
    assert [c.name for c in entry.contributors] == ["Sam Ruby", "Joe Gregorio"]
    assert entry.categories[0].label == "Atom"
    assert entry.summary == "Short summary"
    assert entry.content_type == "xhtml"
    assert "Hi" in entry.content
    assert "<div" in entry.content
    enclosure = [link for link in entry.links if link.rel == "enclosure"][0]
    assert enclosure.length == 1337


def test_normalized_entries():
    feed = parse(ATOM)
    first, second = feed.items
    assert first.id == "tag:example.org,2003:3.2397"
    assert first.author == "Mark Pilgrim"
    assert first.description == "Short summary"
    assert first.categories == ["atom"]
    assert first.publishing_date_string == "2003-12-13T08:29:29-04:00"
    assert second.publishing_date_string == "2005-07-30T10:00:00+02:00"
    assert second.publishing_date == datetime.datetime(2005, 7, 30, 8, tzinfo=UTC)
    assert second.link == "http://example.org/2"
    assert second.author is None


def test_atom_03():
    feed = parse(ATOM_03)
    atom = feed.original
    assert feed.type == DialectKind.ATOM
    assert atom.namespace == "http://purl.org/atom/ns#"
    assert atom.subtitle == "Still here"
    assert atom.link == "http://example.org/"
    assert atom.updated == datetime.datetime(2004, 1, 1, 10, tzinfo=UTC)
    entry = atom.items[0]
    assert entry.published == datetime.datetime(2003, 12, 13, 18, 30, 2, tzinfo=UTC)
    assert entry.updated == datetime.datetime(2003, 12, 14, 18, 30, 2, tzinfo=UTC)
    assert entry.author.uri == "http://jane.example.org/"
    assert feed.items[0].publishing_date_string == "2003-12-13T18:30:02Z"


def test_excluded_content_and_tags():
    atom = parse(ATOM, include_content=False, include_tags=False).original
    assert atom.categories == []
    entry = atom.items[0]
    assert entry.content is None
    assert entry.content_type is None
    assert entry.categories == []
    assert entry.summary == "Short summary"
