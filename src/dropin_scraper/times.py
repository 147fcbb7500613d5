"""Time range tokens from schedule table cells.

A cell such as "9-10:30am, 1 – 2:45 pm" or "Noon-1pm" yields canonical
tokens "9 - 10:30am", "1 - 2:45 pm" and "12 pm - 1pm". Facility pages format
times inconsistently, so anything that does not start with a number is
dropped rather than reported.
"""

import re
from datetime import datetime, time

from src.dropin_scraper.logging import get_logger

log = get_logger(__name__)

# En dash, em dash, minus sign, figure dash, non-breaking hyphen, hyphen
_DASHES = re.compile("[‐‑‒–—−]")
_NOON = re.compile(r"(?:12\s*)?noon")
_HYPHEN = re.compile(r"[^\S\n]*-[^\S\n]*")
_SEPARATORS = re.compile(r"[,\n]+")
_LEADING_INT = re.compile(r"\s*(\d+)")
_COLON = re.compile(r" ?: ?")
_WEEKEND = re.compile(r"sat|sun", re.IGNORECASE)
_MERIDIEM_TIME = re.compile(r"(\d{1,2}(?::\d{2})?)\s*([ap])\.?m")

EVENING_START_HOURS = frozenset({5, 6, 7, 8, 9})


def _leading_int(token: str) -> int | None:
    match = _LEADING_INT.match(token)
    return int(match.group(1)) if match else None


def is_evening_or_weekend(day: str | None, token: str) -> bool:
    """True for any weekend slot, or a weekday slot starting between 5 and 9 pm."""
    if day and _WEEKEND.search(day):
        return True
    if "pm" not in token:
        return False
    # "12 pm" is noon, not evening
    return _leading_int(token) in EVENING_START_HOURS


def parse_time_tokens(
    text: str,
    day: str | None = None,
    *,
    evenings_and_weekends: bool = False,
) -> list[str]:
    """Split raw cell text into canonical time range tokens.

    Args:
        text: Cell text; may hold several comma or newline separated ranges.
        day: Day of the cell's column, used by the evenings/weekends filter.
        evenings_and_weekends: Drop weekday slots that start before 5 pm.

    Returns:
        Tokens in cell order, e.g. ["9 - 10:30am", "1 - 2:45 pm"]. Empty if
        the cell holds no times ("Closed", blank, footnote markers).
    """
    normalized = text.lower()
    normalized = _NOON.sub("12 pm", normalized)
    normalized = _DASHES.sub("-", normalized)
    normalized = _HYPHEN.sub(" - ", normalized)

    tokens = []
    for candidate in _SEPARATORS.split(normalized):
        token = candidate.strip()
        if _leading_int(token) is None:
            if token:
                log.debug("time_token_dropped", token=token)
            continue
        if evenings_and_weekends and not is_evening_or_weekend(day, token):
            continue
        tokens.append(token)
    return tokens


def fix_colon_spacing(token: str) -> str:
    """Fix `2: 45 pm` / `2 : 45 pm` to `2:45 pm`."""
    return _COLON.sub(":", token)


def range_sort_time(labeled_range: str) -> time | None:
    """Clock time used to order ranges within a day.

    Reads the time after the dash up to its am/pm marker ("10:30am" in
    "9 - 10:30am (Pickleball)"), since the closing time is the side that
    always carries the meridiem. Returns None when no such time is present.
    """
    _, dash, rest = labeled_range.partition("-")
    if not dash:
        return None
    match = _MERIDIEM_TIME.search(rest)
    if match is None:
        return None
    clock = f"{match.group(1)} {match.group(2).upper()}M"
    for fmt in ("%I:%M %p", "%I %p"):
        try:
            return datetime.strptime(clock, fmt).time()
        except ValueError:
            continue
    return None


def _sort_key(labeled_range: str) -> tuple[int, time]:
    clock = range_sort_time(labeled_range)
    if clock is None:
        return (1, time.min)
    return (0, clock)


def sort_ranges(labeled_ranges: list[str]) -> list[str]:
    """Stable chronological sort; ranges without a readable time go last."""
    return sorted(labeled_ranges, key=_sort_key)
