"""
Directory and file name derivation for downloaded items.

Downloaded files double as the "already fetched" marker, so these
transforms must stay stable: a re-run has to compute exactly the same
directory names to recognize what is already on disk.

Layout:
    <root>/<feed title, punctuation stripped>/<pub date, time and punctuation stripped>/<filename>
"""

import re
import string
from pathlib import PurePosixPath
from urllib.parse import unquote, urlparse

from magbot.exceptions import ValidationError

PUNCTUATION_RE = re.compile(f"[{re.escape(string.punctuation)}]")

# "00:00:00 GMT", "7:30 +0000" ... up to the end of the string
TIME_OF_DAY_RE = re.compile(r"\s*\d{1,2}:\d{2}(?::\d{2})?.*$")


def sanitize_title(title: str) -> str:
    """
    Strip punctuation from a feed title for use as a directory name.

    Example:
        >>> sanitize_title("Awake! (MP3)")
        'Awake MP3'
    """
    return PUNCTUATION_RE.sub("", title).strip()


def sanitize_pub_date(pub_date: str) -> str:
    """
    Strip the time of day and punctuation from an RSS publish date.

    Example:
        >>> sanitize_pub_date("Wed, 15 Aug 2012 00:00:00 GMT")
        'Wed 15 Aug 2012'
    """
    without_time = TIME_OF_DAY_RE.sub("", pub_date)
    return PUNCTUATION_RE.sub("", without_time).strip()


def filename_from_url(url: str) -> str:
    """
    Return the last path segment of a URL, without query or fragment.

    The path is percent-decoded before it is split, so an encoded slash
    can never smuggle a directory into the name.

    Raises:
        ValidationError: If the URL has no usable file name

    Example:
        >>> filename_from_url("http://example.com/files/w_E_20120815.pdf?x=1")
        'w_E_20120815.pdf'
    """
    name = PurePosixPath(unquote(urlparse(url).path)).name
    if name in ("", ".", "..") or "\x00" in name or "\\" in name:
        raise ValidationError(
            f"Link '{url}' does not name a file",
            field="link",
            value=url,
        )
    return name
