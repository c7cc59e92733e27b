"""
magbot

Keeps a local library of magazine issues in sync with the publisher's
feed service. Fetches the feed for each configured magazine, language
and format, and downloads every issue not already on disk.
"""

__version__ = "0.3.0"
__author__ = "magbot contributors"

from magbot.config import Configuration, get_config

__all__ = ["Configuration", "get_config", "__version__"]
