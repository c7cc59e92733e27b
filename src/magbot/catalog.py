"""
Fixed lookup tables for magazines, languages and output formats.

These tables are the closed vocabulary every Selector is validated
against. They are module constants and are never mutated at runtime.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

from magbot.exceptions import ConfigError, ValidationError


class Kind(str, Enum):
    """Coarse category of a format, used to pick the output root directory."""
    AUDIO = "audio"
    PUBLICATION = "pub"


@dataclass(frozen=True)
class FormatSpec:
    """
    One entry of the format table.

    Attributes:
        name: Format identifier as used by the publisher (e.g., "MP3")
        kind: Audio or publication
        extension: File extension without the leading dot
    """

    name: str
    kind: Kind
    extension: str


# ---------------------------------------------------------------------------
#  Tables
# ---------------------------------------------------------------------------

MAGAZINES: Dict[str, str] = {
    "g": "Awake!",
    "w": "The Watchtower (Study Edition)",
    "wp": "The Watchtower (Public Edition)",
}

# Day appended to <year><month> in direct file names
ISSUE_DAY: Dict[str, str] = {
    "g": "",
    "w": "15",
    "wp": "01",
}

FORMATS: Dict[str, FormatSpec] = {
    spec.name: spec
    for spec in (
        FormatSpec("MP3", Kind.AUDIO, "mp3"),
        FormatSpec("M4B", Kind.AUDIO, "m4b"),
        FormatSpec("AAC", Kind.AUDIO, "m4a"),
        FormatSpec("PDF", Kind.PUBLICATION, "pdf"),
        FormatSpec("EPUB", Kind.PUBLICATION, "epub"),
        FormatSpec("MOBI", Kind.PUBLICATION, "mobi"),
        FormatSpec("RTF", Kind.PUBLICATION, "rtf"),
        FormatSpec("BRL", Kind.PUBLICATION, "brl"),
    )
}

# The feed service does not list AAC; it is served under the M4B listing.
FORMAT_ALIASES: Dict[str, str] = {
    "AAC": "M4B",
}

LANGUAGES: Dict[str, str] = {
    "AL": "Albanian",
    "AM": "Amharic",
    "A": "Arabic",
    "REA": "Armenian",
    "BL": "Bulgarian",
    "C": "Croatian",
    "B": "Czech",
    "D": "Danish",
    "O": "Dutch",
    "E": "English",
    "ST": "Estonian",
    "FI": "Finnish",
    "F": "French",
    "GE": "Georgian",
    "X": "German",
    "G": "Greek",
    "Q": "Hebrew",
    "H": "Hungarian",
    "IC": "Icelandic",
    "IN": "Indonesian",
    "I": "Italian",
    "J": "Japanese",
    "KO": "Korean",
    "LT": "Latvian",
    "L": "Lithuanian",
    "ML": "Malay",
    "N": "Norwegian",
    "P": "Polish",
    "T": "Portuguese",
    "M": "Romanian",
    "U": "Russian",
    "SB": "Serbian",
    "CHS": "Chinese (Simplified)",
    "CH": "Chinese (Traditional)",
    "V": "Slovak",
    "SV": "Slovenian",
    "S": "Spanish",
    "SW": "Swahili",
    "Z": "Swedish",
    "TG": "Tagalog",
    "SI": "Thai",
    "TK": "Turkish",
    "K": "Ukrainian",
    "VT": "Vietnamese",
}

_EXTENSION_TO_FORMAT: Dict[str, str] = {
    spec.extension: spec.name for spec in FORMATS.values()
}


# ---------------------------------------------------------------------------
#  Lookups
# ---------------------------------------------------------------------------

def format_spec(name: str) -> FormatSpec:
    """
    Look up a format by name.

    Raises:
        ConfigError: If the format is not in the format table
    """
    try:
        return FORMATS[name.upper()]
    except KeyError:
        raise ConfigError(
            f"Unrecognized format '{name}'",
            suggestion=f"use one of {', '.join(FORMATS)}",
        ) from None


def kind_of(name: str) -> Kind:
    """Return the kind (audio/pub) of a format."""
    return format_spec(name).kind


def extension_of(name: str) -> str:
    """Return the file extension of a format."""
    return format_spec(name).extension


def request_format(name: str) -> str:
    """Return the format identifier the feed service expects for ``name``."""
    upper = name.upper()
    return FORMAT_ALIASES.get(upper, upper)


def format_for_extension(extension: str) -> Optional[str]:
    """
    Reverse lookup of a file extension in the format table.

    Args:
        extension: Extension with or without leading dot, any case

    Returns:
        Format name, or None if the extension is unknown
    """
    return _EXTENSION_TO_FORMAT.get(extension.lstrip(".").lower())


def issue_day(code: str) -> str:
    """
    Return the fixed issue day appended to direct file names.

    Raises:
        ValidationError: If the magazine code is unknown
    """
    try:
        return ISSUE_DAY[code]
    except KeyError:
        raise ValidationError(
            f"Unknown magazine code '{code}'",
            field="code",
            value=code,
        ) from None
