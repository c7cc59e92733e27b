"""
Command-line interface for magbot.

Usage:
    magbot                       # Download new issues for every configured selector
    magbot w E PDF               # Download new issues of one magazine/language/format
    magbot w E PDF 2012-08       # Download one specific issue
    magbot --check               # Report new issues without downloading
    magbot --daemonize           # Re-run every check-interval seconds
    magbot --list                # Print configured selectors
    magbot --output-json         # JSON output for scripting
    magbot -v / -vv              # More output
"""

import argparse
import sys
from typing import List, Optional

from magbot import catalog
from magbot.config import Configuration, Settings, get_config
from magbot.exceptions import ConfigError, MagbotError
from magbot.models.entities import Selector
from magbot.reporting import format_summary, notify_result, setup_logging
from magbot.triggers.feed_watcher import SyncResult, run_daemon, run_sync


def cmd_list(config: Configuration) -> int:
    """Print configured selectors."""
    specs = config.selector_specs()
    if not specs:
        print("No magazines configured.")
        return 0

    for code, language, fmt in specs:
        magazine = catalog.MAGAZINES.get(code.lower(), "unknown magazine")
        language_name = catalog.LANGUAGES.get(language.upper(), "unknown language")
        print(f"{code:<3} {language:<4} {fmt:<5} {magazine} / {language_name}")
    print(f"\nAudio -> {config.resolve('dir.audio')}")
    print(f"Publications -> {config.resolve('dir.pub')}")
    return 0


def _report(result: SyncResult, args: argparse.Namespace, settings: Settings) -> None:
    if args.output_json:
        print(result.to_json())
    else:
        print(format_summary(result))

    if settings.notify:
        notify_result(result)


def _selector_from_args(values: List[str]) -> Selector:
    code, language, fmt = values[:3]
    issue_date = values[3] if len(values) == 4 else None
    return Selector(code=code, language=language, format=fmt, issue_date=issue_date)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="magbot",
        description="Keep a local library of magazine issues in sync with the publisher's feeds",
    )
    parser.add_argument(
        "selector",
        nargs="*",
        metavar="CODE LANGUAGE FORMAT [DATE]",
        help="Sync one magazine/language/format, optionally one issue "
             "(DATE as YYYY-MM, MM/YYYY or MM)",
    )
    parser.add_argument(
        "-c", "--check",
        action="store_true",
        default=False,
        help="Report new issues without downloading",
    )
    parser.add_argument(
        "-d", "--daemonize",
        action="store_true",
        default=False,
        help="Keep running and re-check every check-interval seconds",
    )
    parser.add_argument(
        "-l", "--list",
        action="store_true",
        default=False,
        help="Print configured magazines and exit",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase output (repeat for debug output)",
    )
    parser.add_argument(
        "--output-json",
        action="store_true",
        default=False,
        help="Output result as JSON",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.selector and len(args.selector) not in (3, 4):
        parser.error("expected CODE LANGUAGE FORMAT [DATE]")

    settings = Settings()
    setup_logging(settings.log_path, args.verbose)

    try:
        config = get_config(settings)
    except ConfigError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 2

    if args.list:
        try:
            return cmd_list(config)
        except ConfigError as exc:
            print(f"ERROR: {exc}", file=sys.stderr)
            return 2

    selectors = None
    if args.selector:
        try:
            selectors = [_selector_from_args(args.selector)]
        except MagbotError as exc:
            print(f"ERROR: {exc}", file=sys.stderr)
            return 2

    if args.daemonize:
        try:
            state = run_daemon(
                config,
                selectors=selectors,
                check_only=args.check,
                on_result=lambda result: _report(result, args, settings),
            )
        except KeyboardInterrupt:
            print("Stopped.")
            return 0
        except ConfigError as exc:
            print(f"ERROR: {exc}", file=sys.stderr)
            return 2
        print("Stopped.")
        return 1 if state.error_count else 0

    result = run_sync(config, selectors=selectors, check_only=args.check)
    _report(result, args, settings)
    return 1 if result.has_errors else 0


if __name__ == "__main__":
    sys.exit(main())
