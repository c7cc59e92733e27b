"""
Logging setup, desktop notifications and run summaries.
"""

import logging
import shutil
import subprocess
import sys
from pathlib import Path
from typing import List, Optional

from magbot.triggers.feed_watcher import SyncResult

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
NOTIFY_TIMEOUT = 10  # seconds


def setup_logging(log_path: Optional[Path] = None, verbosity: int = 0) -> None:
    """
    Configure the root logger.

    Console output is WARNING by default, INFO with one ``-v`` and DEBUG
    with two. The log file, when given, always receives INFO and above.

    Args:
        log_path: Append-only log file (None to disable)
        verbosity: Number of ``-v`` flags
    """
    console_level = {0: logging.WARNING, 1: logging.INFO}.get(verbosity, logging.DEBUG)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    handlers: List[logging.Handler] = [console]

    if log_path is not None:
        try:
            log_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_path, mode="a", encoding="utf-8")
            file_handler.setLevel(min(console_level, logging.INFO))
            handlers.append(file_handler)
        except OSError as exc:
            print(f"WARNING: cannot open log file {log_path}: {exc}", file=sys.stderr)

    logging.basicConfig(
        level=min(console_level, logging.INFO),
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )
    # urllib3 logs every connection at DEBUG
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def notify(title: str, message: str) -> bool:
    """
    Show a desktop notification via ``notify-send``.

    Returns:
        True if the notification was sent, False otherwise
    """
    binary = shutil.which("notify-send")
    if binary is None:
        logger.debug("notify-send not available, skipping notification")
        return False

    try:
        completed = subprocess.run(
            [binary, title, message],
            capture_output=True,
            text=True,
            timeout=NOTIFY_TIMEOUT,
        )
    except (OSError, subprocess.TimeoutExpired) as exc:
        logger.warning("Desktop notification failed: %s", exc)
        return False

    if completed.returncode != 0:
        logger.warning("notify-send exited with %d: %s", completed.returncode, completed.stderr.strip())
        return False
    return True


def format_summary(result: SyncResult) -> str:
    """
    Render a human-readable summary of a sync run.

    Example:
        w/E/PDF: Watchtower (2 new of 12)
          + w_E_20121015.pdf
          + w_E_20121101.pdf
    """
    lines: List[str] = []
    for sel in result.selectors:
        header = f"{sel.selector}: {sel.feed_title or '-'} ({len(sel.new_items)} new of {sel.total_items})"
        lines.append(header)
        downloaded = {Path(p).name for p in sel.downloaded}
        for item in sel.new_items:
            published = item.published_at
            when = f" [{published.date().isoformat()}]" if published else ""
            marker = "+" if item.filename in downloaded else "*"
            lines.append(f"  {marker} {item.filename}{when}")

    for err in result.all_errors:
        lines.append(f"ERROR: {err}")

    if not lines:
        lines.append("Nothing to do.")
    return "\n".join(lines)


def notify_result(result: SyncResult) -> bool:
    """Send one notification summarizing a run, if there is anything to say."""
    if result.check_only and result.new_items:
        return notify("magbot", f"{len(result.new_items)} new issue(s) available")
    if result.downloaded:
        names = ", ".join(Path(p).name for p in result.downloaded[:5])
        more = f" and {len(result.downloaded) - 5} more" if len(result.downloaded) > 5 else ""
        return notify("magbot", f"Downloaded {names}{more}")
    if result.has_errors:
        return notify("magbot", f"{len(result.all_errors)} error(s), see log")
    return False
