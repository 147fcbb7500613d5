"""Merge the activity rows of one facility into per-day location schedules."""

import re

from src.dropin_scraper.days import DEFAULT_DAYS
from src.dropin_scraper.models import (
    ActivityRow,
    Coordinates,
    FacilityMetadata,
    Location,
)
from src.dropin_scraper.times import fix_colon_spacing, sort_ranges

# Words that open a qualifying table caption, e.g. "Drop-in schedule starting
# September 3" or "Schedule until June 21"
CAPTION_PATTERN = re.compile(
    r"\b(starting|until|January|February|March|April|May|June|July|August"
    r"|September|October|November|December)\b",
    re.IGNORECASE,
)


def extract_caption(text: str | None) -> str | None:
    """Keep the qualifying clause of a table caption, or None if it has none."""
    if not text:
        return None
    match = CAPTION_PATTERN.search(text)
    if match is None:
        return None
    caption = " ".join(text[match.start():].split())
    return caption or None


def location_key(name: str, caption: str | None) -> str:
    """Name of the output entry: the facility name plus its caption, if any."""
    return " ".join(part for part in (name, caption) if part)


def location_base_name(key: str) -> str:
    """Facility name with any trailing caption clause removed."""
    match = CAPTION_PATTERN.search(key)
    if match is None:
        return key.strip()
    return key[: match.start()].strip()


def label_range(time_range: str, activity_name: str) -> str:
    return f"{fix_colon_spacing(time_range)} ({activity_name.strip()})"


def aggregate_rows(
    rows: list[ActivityRow],
    metadata: FacilityMetadata,
    existing: dict[str, Location] | None = None,
    coordinates: Coordinates | None = None,
) -> dict[str, Location]:
    """Group activity rows into Location entries, one per facility+caption.

    Entries already present in `existing` are extended, never dropped, so
    rows can be accumulated incrementally. Ranges in a day are ordered
    chronologically, keeping the original order on ties.

    Returns:
        A new mapping; `existing` is not modified.
    """
    locations = {
        key: location.model_copy(deep=True)
        for key, location in (existing or {}).items()
    }

    for row in rows:
        key = location_key(metadata.name, row.caption)
        previous = locations.get(key)
        schedule: dict[str, list[str]] = {}

        for day in DEFAULT_DAYS:
            entries = list(previous.schedule.get(day, [])) if previous else []
            entries.extend(
                label_range(time_range, row.activity_name)
                for time_range in row.day_to_ranges.get(day, [])
            )
            if entries:
                schedule[day] = sort_ranges(entries)

        locations[key] = Location(
            name=key,
            link=metadata.link,
            home=metadata.home,
            address=metadata.address,
            coordinates=coordinates or (previous.coordinates if previous else None),
            schedule=schedule,
        )

    return locations
