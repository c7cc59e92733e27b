"""
Tests for selectors, items and name sanitizing.

Covers:
- Selector validation and normalization against the fixed tables
- Derived selector properties (kind, extension, request format)
- Item filename, format, issue directory and destination derivation
- Title and publish-date sanitizers
"""

from datetime import datetime
from pathlib import Path

import pytest

from magbot.catalog import Kind, format_for_extension
from magbot.exceptions import ValidationError
from magbot.layout import filename_from_url, sanitize_pub_date, sanitize_title
from magbot.models.entities import Feed, Item, Selector


def _make_feed(title: str = "Awake! (MP3)", items=None) -> Feed:
    return Feed(
        title=title,
        description="gE MP3",
        language="en",
        url="http://feeds.example.com/g",
        selector=Selector(code="g", language="E", format="MP3"),
        items=items or [],
    )


class TestSelector:
    """Tests for Selector validation."""

    def test_valid_selector(self):
        selector = Selector(code="w", language="J", format="PDF")
        assert selector.kind == Kind.PUBLICATION
        assert selector.extension == "pdf"
        assert selector.label == "w/J/PDF"

    def test_case_is_normalized(self):
        selector = Selector(code="W", language="al", format="mp3")
        assert (selector.code, selector.language, selector.format) == ("w", "AL", "MP3")
        assert selector.kind == Kind.AUDIO

    def test_request_format_alias(self):
        assert Selector(code="w", language="E", format="AAC").request_format == "M4B"
        assert Selector(code="w", language="E", format="MP3").request_format == "MP3"

    def test_issue_date_in_label(self):
        selector = Selector(code="w", language="E", format="PDF", issue_date="2012-08")
        assert selector.label == "w/E/PDF@2012-08"

    @pytest.mark.parametrize(
        "kwargs, field",
        [
            ({"code": "x", "language": "E", "format": "PDF"}, "code"),
            ({"code": "w", "language": "ZZ", "format": "PDF"}, "language"),
            ({"code": "w", "language": "E", "format": "WAV"}, "format"),
        ],
    )
    def test_unknown_values_raise(self, kwargs, field):
        """Each part must be a member of its table."""
        with pytest.raises(ValidationError) as excinfo:
            Selector(**kwargs)
        assert excinfo.value.field == field

    def test_selector_is_immutable(self):
        selector = Selector(code="w", language="E", format="PDF")
        with pytest.raises(Exception):
            selector.code = "g"


class TestItem:
    """Tests for Item derivations."""

    def test_filename_and_format(self):
        item = Item(title="t", link="http://files.example.com/a/b/g_E_201207.mp3")
        assert item.filename == "g_E_201207.mp3"
        assert item.format == "MP3"

    def test_unknown_extension_has_no_format(self):
        item = Item(title="t", link="http://files.example.com/cover.jpg")
        assert item.format is None

    def test_destination(self):
        """Destination is <root>/<feed dir>/<issue dir>/<filename>."""
        feed = _make_feed()
        item = feed.add_item(Item(
            title="Awake! July 2012",
            link="http://files.example.com/g_E_201207.mp3",
            pub_date="Sun, 01 Jul 2012 00:00:00 GMT",
        ))

        assert item.feed is feed
        assert item.relative_path == Path("Awake MP3") / "Sun 01 Jul 2012" / "g_E_201207.mp3"
        assert item.destination(Path("/srv/audio")) == Path(
            "/srv/audio/Awake MP3/Sun 01 Jul 2012/g_E_201207.mp3"
        )

    def test_feed_constructor_links_items(self):
        item = Item(title="t", link="http://files.example.com/x.mp3")
        feed = _make_feed(items=[item])
        assert item.feed is feed

    def test_published_at(self):
        item = Item(title="t", link="http://x/y.pdf", pub_date="Wed, 15 Aug 2012 00:00:00 GMT")
        assert item.published_at.date() == datetime(2012, 8, 15).date()

    def test_unparseable_published_at_is_none(self):
        item = Item(title="t", link="http://x/y.pdf", pub_date="soon")
        assert item.published_at is None

    def test_to_dict(self):
        feed = _make_feed()
        item = feed.add_item(Item(
            title="Awake!",
            link="http://files.example.com/g_E_201207.mp3",
            pub_date="Sun, 01 Jul 2012 00:00:00 GMT",
        ))
        data = item.to_dict()
        assert data["filename"] == "g_E_201207.mp3"
        assert data["pub_date"].startswith("2012-07-01")
        assert data["path"] == str(Path("Awake MP3") / "Sun 01 Jul 2012" / "g_E_201207.mp3")


class TestSanitizers:
    """Tests for directory name transforms."""

    @pytest.mark.parametrize(
        "title, expected",
        [
            ("Awake! (MP3)", "Awake MP3"),
            ("Réveillez-vous !", "Réveillezvous"),
            ("The Watchtower: Study Edition.", "The Watchtower Study Edition"),
            ("Plain", "Plain"),
        ],
    )
    def test_sanitize_title(self, title, expected):
        assert sanitize_title(title) == expected

    @pytest.mark.parametrize(
        "pub_date, expected",
        [
            ("Wed, 15 Aug 2012 00:00:00 GMT", "Wed 15 Aug 2012"),
            ("Wed, 15 Aug 2012 00:00:00 +0000", "Wed 15 Aug 2012"),
            ("Sat, 1 Sep 2012 7:30 EST", "Sat 1 Sep 2012"),
            ("2012-08-15", "20120815"),
            ("", ""),
        ],
    )
    def test_sanitize_pub_date(self, pub_date, expected):
        assert sanitize_pub_date(pub_date) == expected

    def test_filename_drops_query(self):
        assert filename_from_url("http://x.example.com/a/w_E_20120815.pdf?dl=1") == "w_E_20120815.pdf"

    def test_filename_unquotes(self):
        assert filename_from_url("http://x.example.com/a/my%20file.pdf") == "my file.pdf"

    def test_filename_ignores_encoded_separators(self):
        """Decoding happens before the last segment is taken."""
        assert filename_from_url("http://x.example.com/..%2F..%2F..%2Fescaped.pdf") == "escaped.pdf"
        assert filename_from_url("http://x.example.com/a%2Fb%2Fc.pdf") == "c.pdf"

    @pytest.mark.parametrize(
        "url",
        [
            "http://x.example.com/a%00b.pdf",
            "http://x.example.com/",
            "http://x.example.com/a/..%2F",
            "http://x.example.com/a/%2E%2E",
            "http://x.example.com/a%5C..%5Cb.pdf",
        ],
    )
    def test_unusable_filenames_raise(self, url):
        with pytest.raises(ValidationError) as excinfo:
            filename_from_url(url)
        assert excinfo.value.field == "link"

    def test_reverse_extension_lookup(self):
        assert format_for_extension(".PDF") == "PDF"
        assert format_for_extension("m4b") == "M4B"
        assert format_for_extension(".wav") is None
