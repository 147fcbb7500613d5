"""Scrape drop-in activity schedules from facility pages as YAML or JSON.

Standalone CLI script. Fetches each configured facility page with a headless
browser, extracts the activity schedule, marks slots first seen this week
with "*", and prints the combined schedule (or writes it to --outfile).

Run with: python scripts/scrape_schedule.py
JSON:     python scripts/scrape_schedule.py --format json --outfile cache/out.json
Map:      python scripts/scrape_schedule.py --coordinates
Backfill: python scripts/scrape_schedule.py --coordinates-only
Evenings: python scripts/scrape_schedule.py --evenings-and-weekends
Debug:    python scripts/scrape_schedule.py --debug --headed

Facility URLs, the activity keyword and state file paths come from the
environment / .env (DROPIN_CENTRES, DROPIN_ACTIVITY_KEYWORD, ...).

Exit codes:
  0 = success (schedule on stdout, or file written)
  1 = error (message on stderr)
"""

import argparse
import asyncio
import os
import sys

from dotenv import load_dotenv

load_dotenv()

# Add project root to path for src imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from src.dropin_scraper.config import ScraperConfig, get_config  # noqa: E402
from src.dropin_scraper.errors import OutputError  # noqa: E402
from src.dropin_scraper.geocode import Geocoder  # noqa: E402
from src.dropin_scraper.logging import get_logger, setup_logging  # noqa: E402
from src.dropin_scraper.pipeline import (  # noqa: E402
    ScheduleScraper,
    run_coordinates_only,
)
from src.dropin_scraper.session import BrowserFetcher  # noqa: E402
from src.dropin_scraper.storage import (  # noqa: E402
    normalize_format,
    render,
    write_output,
)

log = get_logger("scrape_schedule")


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments using argparse."""
    parser = argparse.ArgumentParser(
        description="Scrape drop-in activity schedules from facility pages.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--coordinates",
        action="store_true",
        help="Fetch coordinates of locations.",
    )
    parser.add_argument(
        "--coordinates-only",
        action="store_true",
        help="Only populate coordinates from the existing schedule without scraping.",
    )
    parser.add_argument(
        "-e",
        "--evenings-and-weekends",
        action="store_true",
        help="Only return schedule of times in the evenings and weekends.",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Log debug information.",
    )
    parser.add_argument(
        "--format",
        type=normalize_format,
        default="yaml",
        help="Output final list in JSON or YAML (default: yaml).",
    )
    parser.add_argument(
        "--outfile",
        type=str,
        default="",
        help="File to write to; if not provided, print to stdout.",
    )
    parser.add_argument(
        "--headed",
        action="store_true",
        help="Launch browser in headed mode (visible window).",
    )
    return parser.parse_args(argv)


def _apply_args(config: ScraperConfig, args: argparse.Namespace) -> ScraperConfig:
    """Return a copy of the config with command-line overrides applied."""
    updates: dict = {}
    if args.evenings_and_weekends:
        updates["evenings_and_weekends"] = True
    if args.debug:
        updates["log_level"] = "DEBUG"
    if args.headed:
        updates["headless"] = False
    return config.model_copy(update=updates)


def _geocoder(config: ScraperConfig) -> Geocoder:
    return Geocoder(
        url=config.nominatim_url,
        user_agent=config.geocoder_user_agent,
        delay_seconds=config.geocode_delay_seconds,
    )


async def main(args: argparse.Namespace, config: ScraperConfig) -> None:
    if args.coordinates_only:
        written = run_coordinates_only(
            config, _geocoder(config), outfile=args.outfile or None, fmt=args.format
        )
        if written is None:
            log.info("all_locations_have_coordinates")
        return

    if not config.centres:
        raise ValueError("No facility URLs configured (DROPIN_CENTRES)")

    geocoder = _geocoder(config) if args.coordinates else None

    async with BrowserFetcher.from_config(config) as fetcher:
        scraper = ScheduleScraper(fetcher.fetch, config, geocoder=geocoder)
        schedule = await scraper.run()

    text = render(schedule, args.format)
    if args.outfile:
        write_output(text, args.outfile)
    else:
        sys.stdout.write(text if text.endswith("\n") else f"{text}\n")


def cli(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    config = _apply_args(get_config(), args)
    setup_logging(json_output=config.log_json, log_level=config.log_level)

    try:
        asyncio.run(main(args, config))
    except OutputError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        log.exception("run_failed", error=str(e))
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(cli())
