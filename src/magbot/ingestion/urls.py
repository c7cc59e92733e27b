"""
Feed and file URL construction, and issue date parsing.

Feed URLs list every available issue of a magazine in one language and
format. File URLs point directly at a single issue and are used when a
specific issue date is requested.
"""

import re
from datetime import date
from typing import Optional, Tuple, Union
from urllib.parse import urlencode

from magbot import catalog
from magbot.catalog import Kind
from magbot.config import FEED_BASE_URL, FILE_BASE_URL
from magbot.exceptions import ValidationError

# Opaque listing option understood by the feed service, per kind
FEED_OPTIONS = {
    Kind.AUDIO: "sFFZRQVNZNT",
    Kind.PUBLICATION: "sFFZRQVNZNP",
}

_YEAR_MONTH_RE = re.compile(r"^(\d{4})-(\d{1,2})$")
_MONTH_YEAR_RE = re.compile(r"^(\d{1,2})/(\d{4})$")
_MONTH_RE = re.compile(r"^(\d{1,2})$")


def _pad_month(month: str) -> str:
    return month if len(month) == 2 else "0" + month


def parse_issue_date(
    value: str,
    today: Optional[date] = None,
) -> Union[Tuple[str, str], str]:
    """
    Parse an issue date into a (year, two-digit month) pair.

    Supported shapes, tried in order:
    - YYYY-M or YYYY-MM (e.g., "2012-9")
    - M/YYYY or MM/YYYY (e.g., "09/2012")
    - M or MM alone, meaning that month of the current year

    Args:
        value: Date string to parse
        today: Reference date for the bare-month shape (default: today)

    Returns:
        (year, month) tuple, or ``value`` unchanged when no shape matches

    Example:
        >>> parse_issue_date("9/2012")
        ('2012', '09')
        >>> parse_issue_date("2012-September")
        '2012-September'
    """
    text = value.strip()

    match = _YEAR_MONTH_RE.match(text)
    if match:
        return match.group(1), _pad_month(match.group(2))

    match = _MONTH_YEAR_RE.match(text)
    if match:
        return match.group(2), _pad_month(match.group(1))

    match = _MONTH_RE.match(text)
    if match:
        year = (today or date.today()).year
        return str(year), _pad_month(match.group(1))

    return value


def feed_url(
    code: str,
    language: str,
    fmt: str,
    base_url: str = FEED_BASE_URL,
) -> str:
    """
    Build the feed listing URL for a magazine, language and format.

    The listing option depends on the format's kind, and formats the
    service does not list directly are requested under their alias.

    Example:
        >>> feed_url("w", "E", "MP3")
        'http://www.jw.org/apps/index.xjp?option=sFFZRQVNZNT&rln=E&rmn=w&rfm=MP3'
    """
    kind = catalog.kind_of(fmt)
    params = {
        "option": FEED_OPTIONS[kind],
        "rln": language,
        "rmn": code,
        "rfm": catalog.request_format(fmt),
    }
    return f"{base_url}?{urlencode(params)}"


def file_url(
    code: str,
    language: str,
    fmt: str,
    issue_date: str,
    base_url: str = FILE_BASE_URL,
    today: Optional[date] = None,
) -> str:
    """
    Build the direct download URL of one issue.

    Composes ``<base>/<code>_<language>_<year><month><day>.<ext>`` where
    ``day`` is the magazine's fixed issue day (possibly empty).

    Raises:
        ConfigError: If the format is not recognized
        ValidationError: If the magazine code or date is not recognized

    Example:
        >>> file_url("w", "J", "PDF", "2012-08")
        'http://download.jw.org/files/media_magazines/w_J_20120815.pdf'
    """
    extension = catalog.extension_of(fmt)
    day = catalog.issue_day(code)

    parsed = parse_issue_date(issue_date, today=today)
    if not isinstance(parsed, tuple):
        raise ValidationError(
            f"Unrecognized issue date '{issue_date}'",
            field="issue_date",
            value=issue_date,
            suggestion="use YYYY-MM, MM/YYYY or MM",
        )
    year, month = parsed

    return f"{base_url.rstrip('/')}/{code}_{language}_{year}{month}{day}.{extension}"
