"""
Command line entry point.

Examples:
  rmc -s pics earthporn -l 25 -p top-week
  rmc --frontpage --root-only -o ~/Pictures/reddit -c 8
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from tqdm.contrib.logging import logging_redirect_tqdm

from .backend.pipeline.coordinator import Coordinator
from .backend.pipeline.progress import TqdmProgressSink
from .backend.settings.models import (
    DEFAULT_IMAGE_LIMIT,
    DEFAULT_MAX_CONCURRENT_DOWNLOADS,
    DEFAULT_OUTPUT_DIRECTORY,
    DEFAULT_PAGE_TYPE,
    SUPPORTED_PAGE_TYPES,
    ConfigurationError,
    GlobalSettings,
    ScrapeOptions,
)
from .backend.settings.store import SettingsStore


EXIT_OK = 0
EXIT_CONFIG_ERROR = 2

logger = logging.getLogger("rmc")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="rmc",
        description="Download direct image links from subreddit listings.",
    )
    p.add_argument("-s", "--subreddits", nargs="*", default=[], metavar="NAME", help="subreddits to collect from")
    p.add_argument("--frontpage", action="store_true", default=None, help="also collect from the front page")
    p.add_argument("-o", "--output", default=None, help=f"output directory (default {DEFAULT_OUTPUT_DIRECTORY})")
    p.add_argument(
        "-l",
        "--limit",
        type=int,
        default=None,
        help=f"listing entries per feed, at most 100 (default {DEFAULT_IMAGE_LIMIT})",
    )
    p.add_argument(
        "-p",
        "--page-type",
        default=None,
        help=f"listing page: {', '.join(sorted(SUPPORTED_PAGE_TYPES))} (default {DEFAULT_PAGE_TYPE})",
    )
    p.add_argument(
        "-c",
        "--max-concurrent",
        type=int,
        default=None,
        help=f"max concurrent downloads (default {DEFAULT_MAX_CONCURRENT_DOWNLOADS})",
    )
    p.add_argument("--root-only", action="store_true", default=None, help="store every file in the output directory")
    p.add_argument("--config", default=None, help="settings JSON file providing defaults for the options above")
    p.add_argument("--no-progress", action="store_true", help="do not render the progress bar")

    verbosity = p.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="warnings and errors only")
    return p


def configure_logging(*, verbose: bool = False, quiet: bool = False) -> None:
    level = logging.INFO
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def resolve_options(args: argparse.Namespace) -> ScrapeOptions:
    """Stored settings (if any) overridden by explicit flags."""
    settings = SettingsStore(path=Path(args.config)).load() if args.config else GlobalSettings()
    options = settings.to_options(list(args.subreddits or []), front_page=args.frontpage)

    if args.output is not None:
        options.output_directory = args.output
    if args.limit is not None:
        options.image_limit = args.limit
    if args.page_type is not None:
        options.page_type = args.page_type
    if args.max_concurrent is not None:
        options.max_concurrent_downloads = args.max_concurrent
    if args.root_only is not None:
        options.root_folder_only = args.root_only
    return options


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(verbose=args.verbose, quiet=args.quiet)

    try:
        options = resolve_options(args).normalized()
    except ConfigurationError as exc:
        logger.error("%s", exc)
        return EXIT_CONFIG_ERROR

    # The sink prints the one summary line to stdout, with or without a bar.
    sink = TqdmProgressSink(file=sys.stderr, summary_file=sys.stdout, disable=args.no_progress)
    coordinator = Coordinator(options, sink=sink)

    with logging_redirect_tqdm():
        asyncio.run(coordinator.run())

    return EXIT_OK
