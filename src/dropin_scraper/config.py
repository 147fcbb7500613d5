"""Scraper configuration loaded from environment variables.

Command-line flags override individual fields (see scripts/scrape_schedule.py).
"""

from pydantic import Field
from pydantic_settings import BaseSettings

_PLACE_LISTING = "https://ottawa.ca/en/recreation-and-parks/facilities/place-listing"

DEFAULT_CENTRES: list[str] = [
    f"{_PLACE_LISTING}/diane-deans-greenboro-community-centre",
    f"{_PLACE_LISTING}/francois-dupuis-recreation-centre",
    f"{_PLACE_LISTING}/heron-road-community-centre",
    f"{_PLACE_LISTING}/hintonburg-community-centre",
    f"{_PLACE_LISTING}/hunt-club-riverside-park-community-centre",
    f"{_PLACE_LISTING}/minto-recreation-complex-barrhaven",
    f"{_PLACE_LISTING}/nepean-sportsplex",
    f"{_PLACE_LISTING}/overbrook-community-centre",
    f"{_PLACE_LISTING}/pat-clark-community-centre",
    f"{_PLACE_LISTING}/richcraft-recreation-complex-kanata",
    f"{_PLACE_LISTING}/richelieu-vanier-community-centre",
    f"{_PLACE_LISTING}/rideauview-community-centre",
    f"{_PLACE_LISTING}/routhier-community-centre",
    f"{_PLACE_LISTING}/south-fallingbrook-community-centre",
]


class ScraperConfig(BaseSettings):
    """Scraper configuration loaded from environment variables.

    Settings are loaded from environment variables with sensible defaults.
    For local development, create a .env file in the project root.
    """

    # What to scrape
    centres: list[str] = Field(
        default_factory=lambda: list(DEFAULT_CENTRES),
        description="Facility page URLs, scraped in order",
    )
    activity_keyword: str = Field(
        default="Pickleball",
        description="Table rows containing this text are treated as activity rows",
    )
    evenings_and_weekends: bool = Field(
        default=False,
        description="Only keep weekend slots and weekday slots starting 5-9 pm",
    )

    # Persisted state
    novelty_file: str = Field(
        default="cache/date-scraped.json",
        description="First-seen timestamps per location|day|time key",
    )
    schedule_file: str = Field(
        default="cache/schedule.json",
        description="Previous run's schedule (seeds the coordinates cache)",
    )
    new_timeslot_days: int = Field(
        default=7,
        description="Slots first seen within this many days are marked as new",
    )
    new_marker: str = Field(
        default="*",
        description="Suffix appended to slots that are new",
    )

    # Geocoding (Nominatim)
    nominatim_url: str = Field(
        default="https://nominatim.openstreetmap.org/search",
        description="Nominatim search endpoint",
    )
    geocoder_user_agent: str = Field(
        default="PickleballScheduleScraper/0.1",
        description="User-Agent sent to Nominatim (required by its usage policy)",
    )
    geocode_delay_seconds: float = Field(
        default=1.5,
        description="Pause after each Nominatim request (limit is one per second)",
    )

    # Browser settings
    headless: bool = Field(default=True, description="Run Chromium headless")
    user_agent: str = Field(
        default=(
            "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
        ),
        description="User-Agent for facility page requests",
    )
    viewport_width: int = Field(default=1920, description="Browser viewport width")
    viewport_height: int = Field(default=1080, description="Browser viewport height")
    page_timeout_ms: int = Field(
        default=30000,
        description="Navigation timeout for facility pages",
    )
    settle_delay_ms: tuple[int, int] = Field(
        default=(1500, 2000),
        description="Random pause after a page loads, in milliseconds (min, max)",
    )
    between_fetch_delay_ms: tuple[int, int] = Field(
        default=(1500, 4000),
        description="Random pause between two facility fetches (min, max)",
    )

    # Logging
    log_json: bool = Field(
        default=False,
        description="Output logs in JSON format (for production)",
    )
    log_level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    model_config = {
        "env_prefix": "DROPIN_",
        "case_sensitive": False,
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @property
    def new_timeslot_ms(self) -> int:
        return self.new_timeslot_days * 24 * 60 * 60 * 1000


# Singleton pattern
_config: ScraperConfig | None = None


def get_config() -> ScraperConfig:
    """Get the scraper configuration singleton.

    Returns:
        ScraperConfig: Scraper configuration instance
    """
    global _config
    if _config is None:
        _config = ScraperConfig()
    return _config
