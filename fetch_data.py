#fetch_data.py

"""
Main entry point for the workshop data setup utility.
Downloads the embeddings and datasets used by the exercises into the data
directory, then checks that the numerical stack works.
"""
import argparse
import pprint
import sys
from pathlib import Path
from typing import List, Optional

from ghddl_data.acquisition.http_acquirer import HttpFetcher
from ghddl_data.config import SETTINGS, build_targets, load_settings
from ghddl_data.exceptions import ConfigurationMissing
from ghddl_data.health import run_health_checks


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Workshop data setup utility")
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to an optional YAML file overriding the defaults."
    )
    parser.add_argument(
        "--data-dir",
        type=Path,
        help=f"Directory to store data files in. Defaults to ${SETTINGS.DATA_DIR_ENV_VAR}."
    )
    parser.add_argument(
        "--only",
        action="append",
        metavar="TARGET",
        help="Acquire only this target (repeatable), e.g. --only reviews."
    )
    parser.add_argument("--no-health-check", action="store_true", help="Skip the smoke checks.")
    parser.add_argument("--no-progress", action="store_true", help="Hide download progress bars.")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Parses command line arguments, loads settings, and runs every stage."""
    args = parse_args(argv)

    # Configuration problems are reported without a traceback and before any network I/O.
    try:
        settings = load_settings(config_path=args.config, data_dir=args.data_dir)
        targets = build_targets(settings, only=args.only)
    except ConfigurationMissing as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    if args.no_progress:
        settings = settings.model_copy(update={"show_progress": False})

    print("--- Settings Loaded ---")
    pprint.pprint(settings.model_dump(mode="json"))
    print("-" * 50)

    # --- Stage 1: Acquisition ---
    print("--- Stage 1: ACQUISITION ---")
    fetcher = HttpFetcher(
        timeout=settings.timeout,
        chunk_size=settings.chunk_size,
        show_progress=settings.show_progress,
    )
    results = fetcher.run(targets)
    for result in results:
        print(f"  {result['name']:<12} downloaded={result['downloaded']} extracted={result['extracted']}")

    # --- Stage 2: Health check ---
    print("-" * 50)
    print("--- Stage 2: HEALTH CHECK ---")
    if settings.run_health_check and not args.no_health_check:
        run_health_checks()
    else:
        print("Health checks disabled. Skipping.")

    print("\nAll good")
    return 0


if __name__ == "__main__":
    sys.exit(main())
