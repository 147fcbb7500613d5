"""Facility address geocoding through OpenStreetMap Nominatim.

Nominatim allows one request per second and asks for an identifying
User-Agent. Results are cached by address without its postal code (OSM and
the facility pages often disagree on postal codes), and the cache is seeded
from the coordinates of the previous run's schedule, so most runs make no
requests at all.
"""

import time
from collections.abc import Callable

import requests
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from src.dropin_scraper.errors import GeocodeError, RateLimitError, TransientError
from src.dropin_scraper.logging import get_logger
from src.dropin_scraper.models import Coordinates, Location

logger = get_logger(__name__)


def address_cache_key(address: str) -> str:
    """Address without its trailing postal code ("K2B 5K3" is two tokens)."""
    return " ".join(address.split()[:-2])


class CoordinatesCache:
    """Address -> coordinates cache, owned by one run."""

    def __init__(self) -> None:
        self._entries: dict[str, Coordinates] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, address: str) -> Coordinates | None:
        return self._entries.get(address_cache_key(address))

    def put(self, address: str, coordinates: Coordinates) -> None:
        self._entries[address_cache_key(address)] = coordinates

    def seed(self, locations: dict[str, Location]) -> int:
        """Cache the known coordinates of previously scraped locations.

        Returns:
            Number of locations that contributed coordinates.
        """
        seeded = 0
        for location in locations.values():
            coordinates = location.coordinates
            if coordinates is None or coordinates.is_missing or not location.address:
                continue
            self.put(location.address, coordinates)
            seeded += 1
        logger.debug("coordinates_cache_seeded", locations=seeded)
        return seeded


class Geocoder:
    """Looks up facility coordinates, one cached Nominatim search per address."""

    def __init__(
        self,
        url: str = "https://nominatim.openstreetmap.org/search",
        user_agent: str = "PickleballScheduleScraper/0.1",
        delay_seconds: float = 1.5,
        cache: CoordinatesCache | None = None,
        session: requests.Session | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.url = url
        self.delay_seconds = delay_seconds
        self.cache = cache if cache is not None else CoordinatesCache()
        self.session = session if session is not None else requests.Session()
        self.session.headers.update({"User-Agent": user_agent})
        self._sleep = sleep

    def geocode(self, address: str) -> Coordinates:
        """Return the coordinates of a street address.

        Raises:
            GeocodeError: If Nominatim has no result for the address.
            TransientError: If Nominatim stays unavailable after retries.
        """
        cached = self.cache.get(address)
        if cached is not None:
            logger.debug("geocode_cache_hit", address=address)
            return cached

        query = address_cache_key(address)
        logger.info("geocode_requested", address=address, query=query)
        results = self._search(query)
        if not results:
            raise GeocodeError(address, "no results")

        first = results[0]
        try:
            coordinates = Coordinates(lat=first["lat"], lon=first["lon"])
        except (KeyError, TypeError, ValueError) as e:
            raise GeocodeError(address, f"unexpected result {first!r}") from e

        self.cache.put(address, coordinates)
        logger.info(
            "geocode_resolved",
            address=address,
            lat=coordinates.lat,
            lon=coordinates.lon,
        )
        return coordinates

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=2, min=2, max=30),
        retry=retry_if_exception_type(TransientError),
        reraise=True,
    )
    def _search(self, query: str) -> list[dict]:
        try:
            response = self.session.get(
                self.url,
                params={"q": query, "format": "jsonv2"},
                timeout=30,
            )
        except requests.RequestException as e:
            raise TransientError(f"Nominatim request failed: {e}") from e
        finally:
            # Rate limit is once per second
            self._sleep(self.delay_seconds)

        logger.debug("geocode_response", status=response.status_code, query=query)
        if response.status_code == 429:
            raise RateLimitError("Nominatim rate limit exceeded")
        if response.status_code >= 500:
            raise TransientError(f"Nominatim unavailable: {response.status_code}")
        if response.status_code != 200:
            raise GeocodeError(query, f"HTTP {response.status_code}")

        try:
            return response.json()
        except ValueError as e:
            raise GeocodeError(query, "response is not JSON") from e
