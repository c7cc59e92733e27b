"""
Feed watcher: the feed-to-filesystem sync pipeline.

For every selected (magazine, language, format) the watcher fetches the
feed, parses it, works out which items have no file on disk yet and
downloads them. Whether a file exists is the only sync state; there is
no registry of fetched items.

Failures are contained: an error in one selector or one item is logged
and collected in the result, and the run carries on with the rest.

Example:
    >>> from magbot.triggers.feed_watcher import run_sync
    >>> result = run_sync(config, check_only=True)
    >>> for item in result.new_items:
    ...     print(f"New: {item.title}")
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Optional, Sequence

from apscheduler.schedulers.blocking import BlockingScheduler

from magbot.config import Configuration
from magbot.exceptions import MagbotError, ValidationError
from magbot.ingestion import fetcher
from magbot.ingestion.downloader import fetch_and_place, fetch_issue
from magbot.ingestion.feed_parser import parse_feed
from magbot.ingestion.urls import feed_url, file_url
from magbot.layout import filename_from_url
from magbot.models.entities import Feed, Item, Selector
from magbot.triggers import TriggerState

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
#  Data models
# ---------------------------------------------------------------------------

@dataclass
class SelectorResult:
    """
    Outcome of syncing one selector.

    Attributes:
        selector: Selector label (e.g., "w/E/PDF")
        feed_title: Title of the fetched feed, if any
        total_items: Number of items listed in the feed
        new_items: Items with no file on disk at check time
        downloaded: Paths of files downloaded in this run
        errors: Error messages for this selector and its items
    """

    selector: str
    feed_title: str = ""
    total_items: int = 0
    new_items: List[Item] = field(default_factory=list)
    downloaded: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "selector": self.selector,
            "feed_title": self.feed_title,
            "total_items": self.total_items,
            "new_items": [item.to_dict() for item in self.new_items],
            "downloaded": self.downloaded,
            "errors": self.errors,
        }


@dataclass
class SyncResult:
    """
    Result of one sync run over all selected selectors.

    Attributes:
        checked_at: ISO-8601 timestamp of when the run started
        check_only: True if nothing was downloaded
        selectors: Per-selector outcomes in processing order
        errors: Errors not tied to a processed selector (e.g., invalid
            configuration entries)
    """

    checked_at: str = ""
    check_only: bool = False
    selectors: List[SelectorResult] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def new_items(self) -> List[Item]:
        return [item for sel in self.selectors for item in sel.new_items]

    @property
    def downloaded(self) -> List[str]:
        return [path for sel in self.selectors for path in sel.downloaded]

    @property
    def all_errors(self) -> List[str]:
        return self.errors + [err for sel in self.selectors for err in sel.errors]

    @property
    def has_errors(self) -> bool:
        return bool(self.all_errors)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "checked_at": self.checked_at,
            "check_only": self.check_only,
            "selectors": [sel.to_dict() for sel in self.selectors],
            "errors": self.all_errors,
            "new_item_count": len(self.new_items),
            "downloaded_count": len(self.downloaded),
        }

    def to_json(self, indent: int = 2) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)


class NewItems:
    """
    Items of a feed that have no file under ``root``.

    Lazy and restartable: every iteration walks the feed in order and
    tests the filesystem afresh. Items whose link names no usable file
    are left out.
    """

    def __init__(self, feed: Feed, root: Path) -> None:
        self.feed = feed
        self.root = Path(root)

    def __iter__(self) -> Iterator[Item]:
        for item in self.feed.items:
            try:
                destination = item.destination(self.root)
            except ValidationError as exc:
                logger.debug("Skipping %s: %s", item.link, exc)
                continue
            if not destination.exists():
                yield item


# ---------------------------------------------------------------------------
#  Core functions
# ---------------------------------------------------------------------------

def find_new(feed: Feed, root: Path) -> NewItems:
    """
    Return the items of ``feed`` not yet present under ``root``.

    Example:
        >>> pending = list(find_new(feed, Path("~/Documents/magazines").expanduser()))
    """
    return NewItems(feed, root)


def _sync_issue(
    selector: Selector,
    config: Configuration,
    result: SelectorResult,
    check_only: bool,
) -> None:
    url = file_url(
        selector.code,
        selector.language,
        selector.format,
        selector.issue_date or "",
        base_url=config.settings.file_base_url,
    )
    result.total_items = 1
    destination = config.root_dir(selector) / filename_from_url(url)
    if destination.exists():
        return

    result.new_items.append(
        Item(title=destination.name, link=url, pub_date=selector.issue_date or "")
    )
    if check_only:
        return

    path = fetch_issue(selector, config, root=destination.parent)
    if path is not None:
        result.downloaded.append(str(path))


def _sync_feed(
    selector: Selector,
    config: Configuration,
    result: SelectorResult,
    check_only: bool,
) -> None:
    root = config.root_dir(selector)
    url = feed_url(
        selector.code,
        selector.language,
        selector.format,
        base_url=config.settings.feed_base_url,
    )

    feed = parse_feed(fetcher.fetch(url, timeout=config.settings.request_timeout))
    result.feed_title = feed.title
    result.total_items = len(feed.items)

    if (feed.magazine_code, feed.language_code) != (selector.code, selector.language):
        logger.warning(
            "Feed for %s describes itself as %s",
            selector.label,
            feed.selector.label,
        )

    for item in feed.items:
        try:
            item.destination(root)
        except ValidationError as exc:
            logger.error("Rejected item %s: %s", item.link, exc)
            result.errors.append(f"{selector.label}: {exc}")

    result.new_items = list(find_new(feed, root))
    logger.info(
        "%s: %d of %d item(s) new in '%s'",
        selector.label,
        len(result.new_items),
        result.total_items,
        feed.title,
    )
    if check_only:
        return

    for item in result.new_items:
        try:
            if fetch_and_place(item, root, timeout=config.settings.request_timeout):
                result.downloaded.append(str(item.destination(root)))
        except MagbotError as exc:
            logger.error("Failed to fetch %s: %s", item.link, exc)
            result.errors.append(f"{selector.label}: {item.filename}: {exc}")


def sync_selector(
    selector: Selector,
    config: Configuration,
    check_only: bool = False,
) -> SelectorResult:
    """
    Run the pipeline for one selector.

    Selectors with an issue date fetch that single issue from the file
    endpoint; all others go through the feed.

    Args:
        selector: What to sync
        config: Active configuration
        check_only: If True, report new items without downloading

    Returns:
        SelectorResult; errors are recorded in it, never raised
    """
    result = SelectorResult(selector=selector.label)
    try:
        if selector.issue_date:
            _sync_issue(selector, config, result, check_only)
        else:
            _sync_feed(selector, config, result, check_only)
    except MagbotError as exc:
        logger.error("Sync failed for %s: %s", selector.label, exc)
        result.errors.append(f"{selector.label}: {exc}")
    return result


def configured_selectors(config: Configuration, errors: List[str]) -> List[Selector]:
    """
    Build selectors from the configuration, collecting invalid entries.

    Args:
        config: Active configuration
        errors: List that receives one message per invalid entry

    Returns:
        Valid selectors in configuration order
    """
    selectors: List[Selector] = []
    for code, language, fmt in config.selector_specs():
        try:
            selectors.append(Selector(code=code, language=language, format=fmt))
        except MagbotError as exc:
            logger.error("Skipping configured %s/%s/%s: %s", code, language, fmt, exc)
            errors.append(f"{code}/{language}/{fmt}: {exc}")
    return selectors


# ---------------------------------------------------------------------------
#  Main entry points
# ---------------------------------------------------------------------------

def run_sync(
    config: Configuration,
    selectors: Optional[Sequence[Selector]] = None,
    check_only: bool = False,
) -> SyncResult:
    """
    Sync every selector, one after another.

    Args:
        config: Active configuration
        selectors: Selectors to sync (default: all configured ones)
        check_only: If True, report new items without downloading

    Returns:
        SyncResult with per-selector outcomes and all collected errors
    """
    result = SyncResult(
        checked_at=datetime.now().astimezone().isoformat(timespec="seconds"),
        check_only=check_only,
    )

    if selectors is None:
        try:
            selectors = configured_selectors(config, result.errors)
        except MagbotError as exc:
            result.errors.append(str(exc))
            selectors = []

    for selector in selectors:
        result.selectors.append(sync_selector(selector, config, check_only=check_only))

    if result.new_items:
        logger.info(
            "Run complete: %d new item(s), %d downloaded",
            len(result.new_items),
            len(result.downloaded),
        )
    else:
        logger.debug("Run complete: nothing new")

    for err in result.all_errors:
        logger.error("Sync error: %s", err)

    return result


def run_daemon(
    config: Configuration,
    selectors: Optional[Sequence[Selector]] = None,
    check_only: bool = False,
    iterations: Optional[int] = None,
    on_result: Optional[Callable[[SyncResult], None]] = None,
    scheduler: Optional[BlockingScheduler] = None,
) -> TriggerState:
    """
    Re-run the sync every ``check-interval`` seconds.

    The first run starts immediately. Blocks until interrupted or until
    ``iterations`` runs have completed.

    Args:
        config: Active configuration
        selectors: Selectors to sync (default: all configured ones)
        check_only: If True, report new items without downloading
        iterations: Stop after this many runs (default: run forever)
        on_result: Called with each run's SyncResult
        scheduler: Scheduler to run the job on (default: a new
            BlockingScheduler)

    Returns:
        TriggerState after the last run

    Raises:
        ConfigError: If the check interval is invalid
    """
    state = TriggerState(name="feed_watch")
    interval = config.check_interval
    scheduler = scheduler or BlockingScheduler()

    def watch() -> None:
        result = run_sync(config, selectors=selectors, check_only=check_only)
        state.record_run(error="; ".join(result.all_errors) or None)
        state.metadata["downloaded"] = state.metadata.get("downloaded", 0) + len(result.downloaded)
        if on_result is not None:
            on_result(result)
        if iterations is not None and state.run_count >= iterations:
            logger.info("Completed %d run(s), stopping", state.run_count)
            scheduler.shutdown(wait=False)

    scheduler.add_job(
        watch,
        "interval",
        seconds=interval,
        id=state.name,
        next_run_time=datetime.now(),
        max_instances=1,
        coalesce=True,
        misfire_grace_time=600,
    )

    logger.info("Watching feeds every %d second(s)", interval)
    try:
        scheduler.start()
    except (KeyboardInterrupt, SystemExit):
        scheduler.shutdown(wait=False)
        logger.info("Scheduler stopped.")

    return state
