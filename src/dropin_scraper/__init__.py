"""Drop-in activity schedule scraper for recreation facility pages.

Extracts the weekly schedule of one activity (pickleball by default) from
each facility's HTML tables, merges them into one schedule per location and
marks time slots that appeared recently.
"""

from src.dropin_scraper.models import ActivityRow, Coordinates, Location
from src.dropin_scraper.pages.facility import FacilityPage
from src.dropin_scraper.pipeline import ScheduleScraper, ScrapeResult

__all__ = [
    "ActivityRow",
    "Coordinates",
    "FacilityPage",
    "Location",
    "ScheduleScraper",
    "ScrapeResult",
]
