"""
Ingestion module for feed retrieval, parsing and media downloading.

Provides URL construction, HTTP fetching, feed parsing and idempotent
placement of downloaded files in the output tree.
"""

from magbot.ingestion.feed_parser import parse_feed
from magbot.ingestion.downloader import fetch_and_place, fetch_issue

__all__ = ["parse_feed", "fetch_and_place", "fetch_issue"]
