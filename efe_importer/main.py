"""Command line entrypoint for the EFE importer.

Flow of a normal run:
1) load settings (YAML file, ``EFE_*`` environment overrides)
2) fetch the NewsML feed and build articles
3) download images and write the RSS file (skipped with --dry-run)
"""

from __future__ import annotations

import argparse
import sys

from dotenv import load_dotenv

from .errors import ConfigError
from .orchestrator import Refresher
from .utils.config_loader import load_settings, set_enabled, settings_path_from_env
from .utils.logging import configure_logging, get_logger
from .utils.notices import Notices


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="EFE importer – fetch NewsML articles from the EFE API and write them as an RSS feed"
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to the settings file (YAML); defaults to $EFE_SETTINGS_PATH or config/efe.yaml",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Fetch and process articles without downloading images or writing files",
    )
    parser.add_argument(
        "--format",
        dest="feed_format",
        default="rss",
        choices=["rss", "atom"],
        help="Output document format",
    )
    parser.add_argument(
        "--stdout",
        action="store_true",
        help="Print the generated document to stdout",
    )
    toggle = parser.add_mutually_exclusive_group()
    toggle.add_argument(
        "--enable",
        action="store_true",
        help="Enable fetching from the EFE API (requires client id, secret and product id) and exit",
    )
    toggle.add_argument(
        "--disable",
        action="store_true",
        help="Disable fetching from the EFE API and exit",
    )
    parser.add_argument(
        "--show-notices",
        action="store_true",
        help="Print standing notices from previous runs and exit",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging verbosity",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    load_dotenv(override=False)
    args = parse_args(argv)
    configure_logging(level=args.log_level)
    logger = get_logger("efe.cli")

    settings_path = settings_path_from_env(args.config)
    logger.info("Loading settings from %s", settings_path)
    try:
        store = load_settings(settings_path)
    except ConfigError as exc:
        logger.error("Failed to load settings: %s", exc)
        print(f"error: {exc}", file=sys.stderr)
        return 1

    if args.enable or args.disable:
        try:
            enabled = set_enabled(store, bool(args.enable))
        except ConfigError as exc:
            print(f"error: {exc}", file=sys.stderr)
            return 1
        print(f"Fetching from the EFE API is now {'enabled' if enabled else 'disabled'}.")
        return 0

    if args.show_notices:
        notices = Notices(store).all()
        if not notices:
            print("No notices.")
        for notice in notices:
            print(f"[{notice.type}] {notice.message}")
        return 0

    result = Refresher(store, dry_run=args.dry_run, feed_format=args.feed_format).run()
    if not result.ok:
        print(f"error: {result.error}", file=sys.stderr)
        return 1

    if args.stdout and result.document:
        sys.stdout.write(result.document)
    elif result.output_path:
        print(f"Wrote {len(result.collection)} article(s) to {result.output_path}")
    else:
        print(f"Processed {len(result.collection)} article(s) (dry run; nothing written)")
    return 0


if __name__ == "__main__":  # pragma: no cover - script entrypoint
    raise SystemExit(main())
