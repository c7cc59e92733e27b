"""
Magazine feed parsing.

Parses the publisher's RSS listing into a Feed. The channel description
is the only place the magazine, language and format are encoded
(``"wAL PDF"`` means magazine ``w``, language ``AL``, format ``PDF``), so
it is decoded into a validated Selector; everything else is structural
metadata.
"""

import logging
import re
from typing import Any, Optional, Tuple, Union

import feedparser

from magbot.exceptions import ParseError, ValidationError
from magbot.models.entities import Feed, Item, Selector

logger = logging.getLogger(__name__)

DESCRIPTION_PREFIX_RE = re.compile(r"^([a-z]+)([A-Z]+)$")


def parse_description(description: str) -> Tuple[str, str, str]:
    """
    Split a channel description into (magazine code, language, format).

    Args:
        description: Description text, e.g. ``"gE MP3"``

    Returns:
        Tuple of (code, language, format)

    Raises:
        ValidationError: If the description does not follow the pattern

    Example:
        >>> parse_description("wAL PDF")
        ('w', 'AL', 'PDF')
    """
    prefix, _, fmt = description.strip().partition(" ")
    match = DESCRIPTION_PREFIX_RE.match(prefix)
    if not match or not fmt.strip():
        raise ValidationError(
            f"Feed description '{description}' is not '<code><LANGUAGE> <FORMAT>'",
            field="description",
            value=description,
        )
    return match.group(1), match.group(2), fmt.strip()


def _self_url(channel: Any) -> str:
    """Feed URL from the atom self link, else the channel link text."""
    for link in channel.get("links", []):
        if link.get("rel") == "self" and link.get("href"):
            return link["href"]
    return channel.get("link", "")


def _image_url(channel: Any) -> Optional[str]:
    image = channel.get("image")
    if not image:
        return None
    return image.get("href") or None


def parse_feed(content: Union[bytes, str]) -> Feed:
    """
    Parse a feed document into a Feed with its Items.

    Args:
        content: Raw RSS document

    Returns:
        Feed with items in document order (possibly none)

    Raises:
        ParseError: If the document has no RSS channel or no description
        ValidationError: If the description does not decode to a known
            magazine, language and format

    Example:
        >>> feed = parse_feed(fetch(feed_url("w", "E", "PDF")))
        >>> feed.selector.label
        'w/E/PDF'
    """
    parsed = feedparser.parse(content)
    channel = parsed.get("feed", {})
    version = parsed.get("version", "")

    if not channel or not version.startswith("rss"):
        detail = f": {parsed.bozo_exception}" if parsed.get("bozo") else ""
        raise ParseError(f"Feed document has no channel element{detail}")

    if parsed.get("bozo"):
        logger.warning("Feed parsing encountered errors: %s", parsed.bozo_exception)

    description = channel.get("subtitle") or channel.get("description") or ""
    if not description:
        raise ParseError("Feed channel has no description")

    code, language, fmt = parse_description(description)
    selector = Selector(code=code, language=language, format=fmt)

    feed = Feed(
        title=channel.get("title", ""),
        description=description,
        language=channel.get("language", ""),
        url=_self_url(channel),
        selector=selector,
        image_url=_image_url(channel),
    )

    for entry in parsed.get("entries", []):
        feed.add_item(
            Item(
                title=entry.get("title", ""),
                link=entry.get("link", ""),
                pub_date=entry.get("published", ""),
            )
        )

    logger.debug(
        "Parsed feed '%s' (%s) with %d item(s)",
        feed.title,
        selector.label,
        len(feed.items),
    )
    return feed
