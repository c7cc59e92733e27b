"""
Media file placement.

Downloads feed items and single issues into the output tree:

    <root>/<feed title>/<issue date>/<filename>

Every step is idempotent: directories are created only when missing and
an item whose file already exists is skipped without any network
request, so an interrupted run is resumed by simply running again.
"""

import logging
import os
from pathlib import Path
from typing import Optional

from magbot.config import Configuration
from magbot.exceptions import FilesystemError
from magbot.ingestion import fetcher
from magbot.ingestion.urls import file_url
from magbot.layout import filename_from_url
from magbot.models.entities import Item, Selector

logger = logging.getLogger(__name__)


def ensure_directory(path: Path) -> Path:
    """
    Create ``path`` (and parents) if it does not exist.

    Raises:
        FilesystemError: If the directory cannot be created
    """
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise FilesystemError(f"Cannot create directory {path}: {exc}") from exc
    return path


def _is_within(path: Path, root: Path) -> bool:
    path = Path(os.path.normpath(path))
    root = Path(os.path.normpath(root))
    return root in path.parents


def fetch_and_place(
    item: Item,
    root: Path,
    timeout: float = fetcher.REQUEST_TIMEOUT,
) -> bool:
    """
    Download an item into its place under ``root`` unless already present.

    Args:
        item: Feed item to download
        root: Output root directory for the item's kind
        timeout: Request timeout in seconds

    Returns:
        True if the file was downloaded, False if it was already present

    Raises:
        ValidationError: If the item link does not name a file
        FilesystemError: If the destination falls outside ``root`` or a
            directory or the file cannot be created
        TransportError: If the download fails
    """
    root = Path(root)
    destination = item.destination(root)
    if not _is_within(destination, root):
        raise FilesystemError(f"Refusing to write {destination}: outside {root}")

    ensure_directory(root)
    feed_dir = ensure_directory(root / item.feed_directory)
    ensure_directory(feed_dir / item.issue_directory)

    if destination.exists():
        logger.debug("Already present: %s", destination)
        return False

    logger.info("Downloading %s -> %s", item.link, destination)
    size = fetcher.download(item.link, destination, timeout=timeout)
    logger.info("Saved %s (%.1f MB)", destination, size / 1024 / 1024)
    return True


def fetch_issue(
    selector: Selector,
    config: Configuration,
    root: Optional[Path] = None,
) -> Optional[Path]:
    """
    Download one specific issue straight from the file endpoint.

    The issue is stored as ``<root>/<filename>``; there is no feed to
    derive feed and issue directories from.

    Args:
        selector: Selector with ``issue_date`` set
        config: Active configuration
        root: Output root (default: the configured root for the format)

    Returns:
        Path of the downloaded file, or None if it was already present

    Raises:
        ValidationError: If the selector has no usable issue date
        FilesystemError: If the directory or file cannot be created
        TransportError: If the download fails
    """
    url = file_url(
        selector.code,
        selector.language,
        selector.format,
        selector.issue_date or "",
        base_url=config.settings.file_base_url,
    )
    root = ensure_directory(Path(root) if root else config.root_dir(selector))
    destination = root / filename_from_url(url)

    if destination.exists():
        logger.debug("Already present: %s", destination)
        return None

    logger.info("Downloading %s -> %s", url, destination)
    fetcher.download(url, destination, timeout=config.settings.request_timeout)
    return destination
