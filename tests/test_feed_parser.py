"""
Tests for the feed parser.

Covers:
- Channel metadata extraction (title, language, self URL, image)
- Selector recovery from the channel description
- Items in document order with back-references to their feed
- Empty feeds
- Missing channel and missing description (ParseError)
- Unknown codes in the description (ValidationError)
"""

import logging

import pytest

from magbot.exceptions import ParseError, ValidationError
from magbot.ingestion.feed_parser import parse_description, parse_feed


class TestParseDescription:
    """Tests for parse_description()."""

    def test_single_letter_codes(self):
        assert parse_description("gE MP3") == ("g", "E", "MP3")

    def test_multi_letter_language(self):
        assert parse_description("wAL PDF") == ("w", "AL", "PDF")

    def test_multi_letter_code(self):
        assert parse_description("wpCHS EPUB") == ("wp", "CHS", "EPUB")

    @pytest.mark.parametrize("text", ["WE PDF", "we PDF", "wE", "wE ", "w1E PDF", ""])
    def test_malformed_descriptions(self, text):
        """Descriptions not of the form '<code><LANG> <FORMAT>' are rejected."""
        with pytest.raises(ValidationError):
            parse_description(text)


class TestParseFeed:
    """Tests for parse_feed()."""

    def test_channel_metadata(self, feed_xml):
        """Scalar channel fields, self URL and image URL are extracted."""
        feed = parse_feed(feed_xml(
            title="The Watchtower (PDF)",
            language="ja",
            self_url="http://feeds.example.com/self",
            image_url="http://feeds.example.com/cover.jpg",
        ))

        assert feed.title == "The Watchtower (PDF)"
        assert feed.description == "wE PDF"
        assert feed.language == "ja"
        assert feed.url == "http://feeds.example.com/self"
        assert feed.image_url == "http://feeds.example.com/cover.jpg"

    def test_selector_from_gE_MP3(self, feed_xml):
        feed = parse_feed(feed_xml(description="gE MP3", title="Awake! (MP3)"))

        assert feed.selector.code == "g"
        assert feed.selector.language == "E"
        assert feed.selector.format == "MP3"
        assert feed.magazine_code == "g"
        assert feed.language_code == "E"
        assert feed.format == "MP3"

    def test_selector_from_wAL_PDF(self, feed_xml):
        feed = parse_feed(feed_xml(description="wAL PDF"))

        assert (feed.selector.code, feed.selector.language, feed.selector.format) == (
            "w", "AL", "PDF",
        )

    def test_items_in_document_order(self, feed_xml, watchtower_items):
        """Items keep feed order and reference their feed."""
        feed = parse_feed(feed_xml(items=watchtower_items))

        assert [item.filename for item in feed.items] == [
            "w_E_20121015.pdf",
            "w_E_20120915.pdf",
            "w_E_20120815.pdf",
        ]
        first = feed.items[0]
        assert first.title == "The Watchtower, October 15, 2012"
        assert first.link == watchtower_items[0][1]
        assert first.pub_date == "Mon, 15 Oct 2012 00:00:00 GMT"
        assert all(item.feed is feed for item in feed.items)

    def test_item_format_from_extension(self, feed_xml, watchtower_items):
        feed = parse_feed(feed_xml(items=watchtower_items))
        assert {item.format for item in feed.items} == {"PDF"}

    def test_zero_items_is_not_an_error(self, feed_xml):
        """A channel without items parses to an empty item list."""
        feed = parse_feed(feed_xml(items=[]))
        assert feed.items == []

    def test_accepts_text_input(self, feed_xml):
        feed = parse_feed(feed_xml().decode("utf-8"))
        assert feed.selector.label == "w/E/PDF"

    def test_fixture_feed_is_well_formed(self, feed_xml, watchtower_items, caplog):
        """A publisher-shaped feed parses without warnings and keeps its query string."""
        with caplog.at_level(logging.WARNING, logger="magbot.ingestion.feed_parser"):
            feed = parse_feed(feed_xml(items=watchtower_items))

        assert caplog.records == []
        assert feed.url == "http://feeds.example.com/list?rmn=w&rln=E&rfm=PDF"

    def test_missing_image_is_none(self, feed_xml):
        feed = parse_feed(feed_xml(image_url=None))
        assert feed.image_url is None

    def test_missing_channel_raises(self):
        """An RSS document without a channel element is a ParseError."""
        content = (
            b'<?xml version="1.0"?>\n'
            b'<rss version="2.0">'
            b"<item><title>Orphan</title><link>http://example.com/a.pdf</link></item>"
            b"</rss>"
        )
        with pytest.raises(ParseError, match="no channel"):
            parse_feed(content)

    def test_empty_rss_raises(self):
        with pytest.raises(ParseError):
            parse_feed(b'<?xml version="1.0"?>\n<rss version="2.0"></rss>')

    def test_missing_description_raises(self, feed_xml):
        with pytest.raises(ParseError, match="description"):
            parse_feed(feed_xml(description=None))

    def test_unknown_language_raises_validation_error(self, feed_xml):
        """Codes recovered from the description must be valid."""
        with pytest.raises(ValidationError) as excinfo:
            parse_feed(feed_xml(description="wQQQ PDF"))
        assert excinfo.value.field == "language"

    def test_unknown_format_raises_validation_error(self, feed_xml):
        with pytest.raises(ValidationError) as excinfo:
            parse_feed(feed_xml(description="wE WAV"))
        assert excinfo.value.field == "format"

    def test_unknown_magazine_raises_validation_error(self, feed_xml):
        with pytest.raises(ValidationError) as excinfo:
            parse_feed(feed_xml(description="xE PDF"))
        assert excinfo.value.field == "code"
