"""
Shared test fixtures.

Provides pytest fixtures for common test resources including:
- Temporary directories
- A Configuration pointing at temporary output roots
- A builder for RSS feed documents
"""

import tempfile
from pathlib import Path
from typing import Callable, List, Optional, Tuple
from xml.sax.saxutils import escape, quoteattr

import pytest

from magbot.config import Configuration, Settings


@pytest.fixture
def temp_dir():
    """
    Create temporary directory for test files.

    Yields:
        Path: Temporary directory path
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def test_settings(temp_dir: Path) -> Settings:
    """Settings with config and log files inside the temporary directory."""
    return Settings(
        config_path=temp_dir / "conf" / "config.yaml",
        log_path=temp_dir / "conf" / "magbot.log",
        feed_base_url="http://feeds.example.com/list",
        file_base_url="http://files.example.com/media_magazines",
        request_timeout=5,
        notify=False,
    )


@pytest.fixture
def test_config(temp_dir: Path, test_settings: Settings) -> Configuration:
    """
    Create test configuration with temporary output roots.

    Args:
        temp_dir: Temporary directory fixture

    Returns:
        Configuration: Test configuration
    """
    data = {
        "mags": {
            "w": {"E": ["PDF"]},
            "g": {"E": ["MP3"]},
        },
        "dir": {
            "audio": str(temp_dir / "audio"),
            "pub": str(temp_dir / "pub"),
        },
        "check-interval": 120,
    }
    return Configuration(data=data, settings=test_settings)


ItemSpec = Tuple[str, str, str]  # (title, link, pubDate)


def build_feed_xml(
    description: Optional[str] = "wE PDF",
    title: str = "The Watchtower (PDF)",
    items: Optional[List[ItemSpec]] = None,
    language: str = "en",
    self_url: str = "http://feeds.example.com/list?rmn=w&rln=E&rfm=PDF",
    image_url: Optional[str] = "http://feeds.example.com/w.jpg",
) -> bytes:
    """Build an RSS 2.0 document in the publisher's shape."""
    parts = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        '<rss version="2.0" xmlns:atom="http://www.w3.org/2005/Atom">',
        "<channel>",
        f"<title>{escape(title)}</title>",
    ]
    if description is not None:
        parts.append(f"<description>{escape(description)}</description>")
    parts.append(f"<language>{escape(language)}</language>")
    parts.append(f"<atom:link href={quoteattr(self_url)} rel=\"self\" type=\"application/rss+xml\"/>")
    if image_url:
        parts.append(f"<image><url>{escape(image_url)}</url><title>{escape(title)}</title></image>")
    for item_title, link, pub_date in items or []:
        parts.append(
            "<item>"
            f"<title>{escape(item_title)}</title>"
            f"<link>{escape(link)}</link>"
            f"<pubDate>{escape(pub_date)}</pubDate>"
            "</item>"
        )
    parts.append("</channel>")
    parts.append("</rss>")
    return "\n".join(parts).encode("utf-8")


@pytest.fixture
def feed_xml() -> Callable[..., bytes]:
    """Factory fixture returning ``build_feed_xml``."""
    return build_feed_xml


@pytest.fixture
def watchtower_items() -> List[ItemSpec]:
    """Three issues of a PDF feed, newest first."""
    base = "http://files.example.com/media_magazines"
    return [
        ("The Watchtower, October 15, 2012", f"{base}/w_E_20121015.pdf", "Mon, 15 Oct 2012 00:00:00 GMT"),
        ("The Watchtower, September 15, 2012", f"{base}/w_E_20120915.pdf", "Sat, 15 Sep 2012 00:00:00 GMT"),
        ("The Watchtower, August 15, 2012", f"{base}/w_E_20120815.pdf", "Wed, 15 Aug 2012 00:00:00 GMT"),
    ]
