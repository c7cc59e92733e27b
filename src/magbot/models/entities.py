"""
Data models for selectors, feeds and feed items.

A Selector is the validated (magazine, language, format) triple that
drives one pass of the sync pipeline. Feed and Item are built per fetch
cycle from a parsed feed document and discarded afterwards; the files
they describe on disk are the only durable state.
"""

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from dateutil import parser as date_parser
from pydantic import BaseModel, field_validator

from magbot import catalog
from magbot.catalog import Kind
from magbot.exceptions import ValidationError
from magbot.layout import (
    filename_from_url,
    sanitize_pub_date,
    sanitize_title,
)


class Selector(BaseModel):
    """
    Selector data model.

    Identifies one magazine listing by magazine code, language and
    format, optionally narrowed to a single issue date. Construction
    fails with ValidationError when any part is not in its table.
    """
    code: str
    language: str
    format: str
    issue_date: Optional[str] = None

    @field_validator("code")
    @classmethod
    def validate_code(cls, v: str) -> str:
        """Require a known magazine code."""
        v = v.strip().lower()
        if v not in catalog.MAGAZINES:
            raise ValidationError(
                f"Unknown magazine code '{v}'",
                field="code",
                value=v,
                suggestion=f"use one of {', '.join(catalog.MAGAZINES)}",
            )
        return v

    @field_validator("language")
    @classmethod
    def validate_language(cls, v: str) -> str:
        """Require a known language code."""
        v = v.strip().upper()
        if v not in catalog.LANGUAGES:
            raise ValidationError(
                f"Unknown language code '{v}'",
                field="language",
                value=v,
            )
        return v

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        """Require a known output format."""
        v = v.strip().upper()
        if v not in catalog.FORMATS:
            raise ValidationError(
                f"Unknown format '{v}'",
                field="format",
                value=v,
                suggestion=f"use one of {', '.join(catalog.FORMATS)}",
            )
        return v

    class Config:
        """Pydantic configuration."""
        frozen = True

    @property
    def kind(self) -> Kind:
        return catalog.kind_of(self.format)

    @property
    def extension(self) -> str:
        return catalog.extension_of(self.format)

    @property
    def request_format(self) -> str:
        return catalog.request_format(self.format)

    @property
    def label(self) -> str:
        """Short display form, e.g. ``w/E/PDF`` or ``w/E/PDF@2012-08``."""
        text = f"{self.code}/{self.language}/{self.format}"
        if self.issue_date:
            text += f"@{self.issue_date}"
        return text


@dataclass
class Item:
    """
    One downloadable entry of a feed.

    Attributes:
        title: Item title from the feed
        link: URL of the media file
        pub_date: Publish date string as found in the feed
        feed: The Feed this item belongs to (not owned)
    """

    title: str
    link: str
    pub_date: str = ""
    feed: Optional["Feed"] = field(default=None, repr=False, compare=False)

    @property
    def filename(self) -> str:
        return filename_from_url(self.link)

    @property
    def format(self) -> Optional[str]:
        """Format inferred from the filename extension, None if unknown."""
        return catalog.format_for_extension(Path(self.filename).suffix)

    @property
    def feed_directory(self) -> str:
        return self.feed.directory_name if self.feed is not None else ""

    @property
    def issue_directory(self) -> str:
        return sanitize_pub_date(self.pub_date)

    @property
    def relative_path(self) -> Path:
        """``<feed-dir>/<issue-dir>/<filename>`` relative to the root."""
        return Path(self.feed_directory) / self.issue_directory / self.filename

    def destination(self, root: Path) -> Path:
        """Absolute destination of this item under ``root``."""
        return Path(root) / self.relative_path

    @property
    def published_at(self) -> Optional[datetime]:
        """Publish date as a datetime, or None if it cannot be parsed."""
        if not self.pub_date:
            return None
        try:
            return date_parser.parse(self.pub_date)
        except (ValueError, OverflowError):
            return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        published = self.published_at
        return {
            "title": self.title,
            "link": self.link,
            "pub_date": published.isoformat() if published else self.pub_date,
            "filename": self.filename,
            "path": str(self.relative_path),
        }


@dataclass
class Feed:
    """
    Parsed representation of one magazine listing.

    Attributes:
        title: Channel title
        description: Channel description, ``"<code><LANG> <FORMAT>"``
        language: Channel language element text
        url: The feed's own URL
        selector: Selector recovered from the description
        image_url: Channel image URL, if any
        items: Items in document order
    """

    title: str
    description: str
    language: str
    url: str
    selector: Selector
    image_url: Optional[str] = None
    items: List[Item] = field(default_factory=list)

    def __post_init__(self) -> None:
        for item in self.items:
            item.feed = self

    def add_item(self, item: Item) -> Item:
        """Attach an item to this feed and return it."""
        item.feed = self
        self.items.append(item)
        return item

    @property
    def magazine_code(self) -> str:
        return self.selector.code

    @property
    def language_code(self) -> str:
        return self.selector.language

    @property
    def format(self) -> str:
        return self.selector.format

    @property
    def directory_name(self) -> str:
        return sanitize_title(self.title)
