"""First-seen tracking of schedule slots across runs.

Each slot is identified by "<facility>|<day>|<time range>", e.g.
"Nepean Sportsplex|Monday|1 - 2:30 pm". The table maps each key to the epoch
millisecond timestamp of the run that first saw it. Slots first seen within
the recency window are marked with a trailing "*" so readers can spot them.

The facility part is the location name without its caption, so a schedule
that moves from "X starting September 3" to "X starting January 6" keeps its
timestamps.
"""

from collections.abc import Iterable

from src.dropin_scraper.aggregate import location_base_name
from src.dropin_scraper.days import DEFAULT_DAYS
from src.dropin_scraper.logging import get_logger
from src.dropin_scraper.models import Location

log = get_logger(__name__)

# One week          day  hr   min  sec  ms
NEW_TIMESLOT_MS = 7 * 24 * 60 * 60 * 1000

KEY_SEPARATOR = "|"


def slot_time(labeled_range: str, marker: str = "*") -> str:
    """Time range of a labeled range: "1 - 2 pm (Pickleball)*" -> "1 - 2 pm"."""
    return labeled_range.removesuffix(marker).split(" (")[0]


def novelty_key(base_name: str, day: str, time_range: str) -> str:
    return KEY_SEPARATOR.join((base_name, day, time_range))


def split_key(key: str) -> tuple[str, str, str] | None:
    parts = key.split(KEY_SEPARATOR)
    if len(parts) != 3:
        return None
    base_name, day, time_range = parts
    return base_name, day, time_range


def novelty_keys(locations: dict[str, Location]) -> list[str]:
    """Every slot key of the current schedule, in schedule order."""
    keys: list[str] = []
    for name, location in locations.items():
        base_name = location_base_name(name)
        for day in DEFAULT_DAYS:
            for entry in location.schedule.get(day, []):
                keys.append(novelty_key(base_name, day, slot_time(entry)))
    return keys


def build_first_seen(
    previous: dict[str, int], locations: dict[str, Location], now_ms: int
) -> dict[str, int]:
    """Rebuild the first-seen table for the current schedule.

    Keys seen before keep their timestamp; new keys get `now_ms`. Keys that
    are no longer in the schedule are dropped, so a slot that disappears and
    comes back later counts as new again.
    """
    table: dict[str, int] = {}
    for key in novelty_keys(locations):
        table[key] = previous.get(key) or now_ms
    return table


def recent_keys(
    table: dict[str, int], now_ms: int, window_ms: int = NEW_TIMESLOT_MS
) -> list[str]:
    """Keys first seen less than `window_ms` ago."""
    return [key for key, first_seen in table.items() if now_ms - first_seen < window_ms]


def mark_new_slots(
    locations: dict[str, Location], keys: Iterable[str], marker: str = "*"
) -> dict[str, Location]:
    """Suffix the labeled ranges of new slots with `marker`.

    A key applies to every location whose name contains the key's facility
    name. The match is a plain substring test so captioned variants of the
    facility ("X starting September 3") are marked too; a facility whose
    name is contained in another facility's name marks both.

    Returns:
        A new mapping; `locations` is not modified.
    """
    marked = {name: location.model_copy(deep=True) for name, location in locations.items()}

    for key in keys:
        parts = split_key(key)
        if parts is None:
            log.debug("novelty_key_malformed", key=key)
            continue
        base_name, day, time_range = parts

        for name, location in marked.items():
            if base_name not in name:
                continue
            entries = location.schedule.get(day)
            if not entries:
                continue
            location.schedule[day] = [
                f"{entry}{marker}"
                if entry.startswith(time_range) and not entry.endswith(marker)
                else entry
                for entry in entries
            ]

    return marked
