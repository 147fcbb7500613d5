"""Scrape all facility pages into one annotated schedule.

ScheduleScraper runs the whole flow for a list of facility URLs:

  fetch page -> extract activity rows -> aggregate per location
  -> merge across facilities -> attach coordinates
  -> first-seen tracking -> mark new slots -> persist state

Facilities are processed one at a time. A facility whose page cannot be
fetched or parsed is logged and skipped; the others still make it into the
schedule.
"""

import time
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from src.dropin_scraper.aggregate import aggregate_rows
from src.dropin_scraper.config import ScraperConfig
from src.dropin_scraper.errors import GeocodeError, ScrapingError, TransientError
from src.dropin_scraper.geocode import CoordinatesCache, Geocoder
from src.dropin_scraper.logging import get_logger
from src.dropin_scraper.models import (
    Coordinates,
    Location,
    schedule_from_output,
    schedule_to_output,
)
from src.dropin_scraper.novelty import build_first_seen, mark_new_slots, recent_keys
from src.dropin_scraper.pages.facility import FacilityPage
from src.dropin_scraper.storage import (
    load_json,
    normalize_format,
    render,
    save_json,
    write_output,
)

logger = get_logger(__name__)

FetchDocument = Callable[[str], Awaitable[str]]


def now_ms() -> int:
    return int(time.time() * 1000)


class ScrapeResult(BaseModel):
    """Locations scraped in one run, plus the facility URLs that failed."""

    locations: dict[str, Location] = Field(default_factory=dict)
    failed: list[str] = Field(default_factory=list)


def _timestamps(data: dict[str, Any]) -> dict[str, int]:
    """Keep only well-formed entries of a loaded first-seen table."""
    return {
        key: value
        for key, value in data.items()
        if isinstance(value, int) and not isinstance(value, bool)
    }


class ScheduleScraper:
    """Builds the combined, annotated schedule for a set of facility pages.

    Args:
        fetch_document: Coroutine returning the HTML of a facility URL.
        config: Scraper configuration.
        geocoder: Looks up missing coordinates; None skips network lookups
            (coordinates known from the previous run are still attached).
        clock: Current time in epoch milliseconds.
    """

    def __init__(
        self,
        fetch_document: FetchDocument,
        config: ScraperConfig,
        geocoder: Geocoder | None = None,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self.fetch_document = fetch_document
        self.config = config
        self.geocoder = geocoder
        self.cache = geocoder.cache if geocoder is not None else CoordinatesCache()
        self.clock = clock

    def extract_document(self, html: str, url: str) -> dict[str, Location]:
        """Locations of one facility page (one per distinct table caption)."""
        page = FacilityPage(html, url)
        rows = page.extract_activity_rows(
            self.config.activity_keyword,
            evenings_and_weekends=self.config.evenings_and_weekends,
        )
        metadata = page.metadata()
        logger.info(
            "facility_parsed",
            url=url,
            location=metadata.name,
            address=metadata.address,
            link=metadata.link,
            rows=len(rows),
        )
        return aggregate_rows(rows, metadata)

    async def scrape(self, urls: list[str]) -> ScrapeResult:
        """Fetch and extract every facility, strictly one after another."""
        result = ScrapeResult()
        logger.info("scrape_started", centres=len(urls))

        for url in urls:
            try:
                html = await self.fetch_document(url)
                logger.debug("document_fetched", url=url, size=len(html))
                locations = self.extract_document(html, url)
            except Exception as e:
                logger.error(
                    "document_failed",
                    url=url,
                    error=str(e),
                    type=type(e).__name__,
                )
                result.failed.append(url)
                continue

            for key, location in locations.items():
                if key in result.locations:
                    logger.warning("duplicate_location_skipped", location=key, url=url)
                    continue
                result.locations[key] = location

        self.attach_coordinates(result.locations)
        logger.info(
            "scrape_finished",
            locations=len(result.locations),
            failed=len(result.failed),
        )
        return result

    def attach_coordinates(self, locations: dict[str, Location]) -> None:
        """Fill in coordinates from the cache, then from the geocoder if enabled.

        An address that cannot be geocoded is logged and left without
        coordinates.
        """
        for name, location in locations.items():
            if location.coordinates is not None or not location.address:
                continue
            coordinates = self.cache.get(location.address)
            if coordinates is None and self.geocoder is not None:
                try:
                    coordinates = self.geocoder.geocode(location.address)
                except (GeocodeError, TransientError) as e:
                    logger.error(
                        "geocode_failed",
                        location=name,
                        address=location.address,
                        error=str(e),
                    )
                    continue
            location.coordinates = coordinates

    def annotate(
        self, locations: dict[str, Location], previous_first_seen: dict[str, int]
    ) -> tuple[dict[str, Location], dict[str, int]]:
        """Rebuild the first-seen table and mark recently added slots.

        Returns:
            (annotated locations, new first-seen table)
        """
        now = self.clock()
        first_seen = build_first_seen(previous_first_seen, locations, now)
        new_keys = recent_keys(first_seen, now, self.config.new_timeslot_ms)
        logger.info("new_slots", count=len(new_keys), tracked=len(first_seen))
        for key in new_keys:
            logger.debug("new_slot", key=key)
        annotated = mark_new_slots(locations, new_keys, self.config.new_marker)
        return annotated, first_seen

    async def run(self, urls: list[str] | None = None) -> dict[str, Any]:
        """Scrape, annotate and persist. Returns the serialized schedule.

        Raises:
            ScrapingError: If no facility could be scraped. Nothing is
                persisted in that case, so the first-seen table survives an
                outage.
        """
        urls = list(self.config.centres if urls is None else urls)

        previous_schedule = schedule_from_output(load_json(self.config.schedule_file))
        self.cache.seed(previous_schedule)

        result = await self.scrape(urls)
        if urls and len(result.failed) == len(urls):
            raise ScrapingError(f"All {len(urls)} facility pages failed")

        previous_first_seen = _timestamps(load_json(self.config.novelty_file))
        annotated, first_seen = self.annotate(result.locations, previous_first_seen)

        save_json(self.config.novelty_file, first_seen)
        output = schedule_to_output(annotated)
        save_json(self.config.schedule_file, output)
        return output


def needs_coordinates(entry: dict[str, Any]) -> bool:
    """True if a persisted location has no usable coordinates ((0, 0) included)."""
    coordinates = entry.get("coordinates")
    if not isinstance(coordinates, dict):
        return True
    lat, lon = coordinates.get("lat"), coordinates.get("lon")
    if not lat or not lon:
        return True
    try:
        return float(lat) == 0 and float(lon) == 0
    except (TypeError, ValueError):
        return True


def populate_coordinates(schedule: dict[str, Any], geocoder: Geocoder) -> bool:
    """Geocode the persisted locations that lack coordinates, in place.

    Only entries missing coordinates are looked up and changed; failures are
    logged and leave the entry untouched.

    Returns:
        True if at least one entry was updated.
    """
    geocoder.cache.seed(schedule_from_output(schedule))

    updated = False
    for name, entry in schedule.items():
        if not isinstance(entry, dict):
            continue
        if not needs_coordinates(entry):
            logger.debug("coordinates_present", location=name)
            continue

        address = entry.get("address") or ""
        logger.info("coordinates_fetching", location=name, address=address)
        try:
            coordinates: Coordinates = geocoder.geocode(address)
        except (GeocodeError, TransientError) as e:
            logger.error("geocode_failed", location=name, address=address, error=str(e))
            continue
        entry["coordinates"] = coordinates.model_dump(mode="json")
        updated = True
    return updated


def run_coordinates_only(
    config: ScraperConfig,
    geocoder: Geocoder,
    *,
    outfile: str | None = None,
    fmt: str = "yaml",
) -> Path | None:
    """Backfill coordinates of the persisted schedule without scraping.

    The result goes to `outfile`, or back to the persisted schedule file.
    A ".json" target is always written as JSON.

    Returns:
        The written path, or None if every location already had coordinates.
    """
    schedule = load_json(config.schedule_file)
    logger.info("schedule_loaded", path=config.schedule_file, locations=len(schedule))

    if not populate_coordinates(schedule, geocoder):
        logger.info("coordinates_complete")
        return None

    target = outfile or config.schedule_file
    fmt = "json" if str(target).endswith(".json") else normalize_format(fmt)
    return write_output(render(schedule, fmt), target)
