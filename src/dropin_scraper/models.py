"""Pydantic models for schedule data.

All data structures use Pydantic v2 for validation, serialization, and type safety.
"""

from typing import Any

from pydantic import BaseModel, Field, ValidationError

from src.dropin_scraper.days import DEFAULT_DAYS


class Coordinates(BaseModel):
    """Latitude/longitude of a facility. Nominatim returns them as strings."""

    lat: float
    lon: float

    @property
    def is_missing(self) -> bool:
        return self.lat == 0 and self.lon == 0


class ActivityRow(BaseModel):
    """One table row naming the tracked activity.

    day_to_ranges only holds days that have at least one time range, and
    every key is one of `days`.
    """

    days: list[str]  # Day label per table column
    caption: str | None = None  # e.g. "starting September 2024"
    activity_name: str  # e.g. "Pickleball - adult"
    day_to_ranges: dict[str, list[str]] = Field(default_factory=dict)


class FacilityMetadata(BaseModel):
    """Identifying details of a facility page."""

    name: str  # From the page <h1>
    link: str | None = None  # "Reserve" link, if the page has one
    home: str  # The facility page URL
    address: str = ""


class Location(BaseModel):
    """A facility (optionally qualified by a table caption) and its weekly schedule.

    Serialized as a flat mapping: metadata fields first, then one key per day
    holding labeled ranges such as "1 - 2:30 pm (Pickleball)".
    """

    name: str
    link: str | None = None
    home: str = ""
    address: str = ""
    coordinates: Coordinates | None = None
    schedule: dict[str, list[str]] = Field(default_factory=dict)

    def to_output(self) -> dict[str, Any]:
        """Flatten to the published/persisted shape (name is the mapping key)."""
        data = self.model_dump(
            mode="json", exclude={"name", "schedule"}, exclude_none=True
        )
        for day in DEFAULT_DAYS:
            if self.schedule.get(day):
                data[day] = list(self.schedule[day])
        return data

    @classmethod
    def from_output(cls, name: str, data: dict[str, Any]) -> "Location":
        """Rebuild a Location from its flattened form."""
        schedule = {day: list(data[day]) for day in DEFAULT_DAYS if data.get(day)}
        try:
            coordinates = Coordinates.model_validate(data.get("coordinates"))
        except ValidationError:
            coordinates = None
        return cls(
            name=name,
            link=data.get("link"),
            home=data.get("home") or "",
            address=data.get("address") or "",
            coordinates=coordinates,
            schedule=schedule,
        )


def schedule_to_output(locations: dict[str, Location]) -> dict[str, dict[str, Any]]:
    """Serialize a location mapping, preserving insertion order."""
    return {name: location.to_output() for name, location in locations.items()}


def schedule_from_output(data: dict[str, Any]) -> dict[str, Location]:
    """Parse a persisted location mapping. Non-mapping entries are skipped."""
    return {
        name: Location.from_output(name, entry)
        for name, entry in data.items()
        if isinstance(entry, dict)
    }
