"""Shared fixtures: facility page HTML in the ottawa.ca place-listing format."""

import pytest

from src.dropin_scraper.config import ScraperConfig

NEPEAN_URL = (
    "https://ottawa.ca/en/recreation-and-parks/facilities/place-listing/nepean-sportsplex"
)
HINTONBURG_URL = (
    "https://ottawa.ca/en/recreation-and-parks/facilities/place-listing/"
    "hintonburg-community-centre"
)

# Fixed "now" for novelty tests: 2024-10-27T03:33:20Z
NOW_MS = 1_730_000_000_000
DAY_MS = 24 * 60 * 60 * 1000


def schedule_table(header, rows, caption=None, row_headers=True):
    """Build a schedule table.

    header: day labels for <thead> (None for a table without a header row).
    rows: lists of cell strings; the first cell is the activity name and is
        rendered as <th> when row_headers is True.
    """
    parts = ["<table>"]
    if caption is not None:
        parts.append(f"<caption>{caption}</caption>")
    if header is not None:
        corner = "<th></th>" if row_headers else ""
        parts.append(
            "<thead><tr>"
            + corner
            + "".join(f"<th>{label}</th>" for label in header)
            + "</tr></thead>"
        )
    parts.append("<tbody>")
    for row in rows:
        name, *cells = row
        name_cell = f"<th>{name}</th>" if row_headers else f"<td>{name}</td>"
        parts.append(
            "<tr>" + name_cell + "".join(f"<td>{cell}</td>" for cell in cells) + "</tr>"
        )
    parts.append("</tbody></table>")
    return "".join(parts)


def facility_html(
    *tables,
    name="Nepean Sportsplex",
    street="1701 Woodroffe Avenue",
    city="Nepean, ON K2G 1W2",
    reserve="https://reservation.frontdesksuite.ca/rcfs/nepeansportsplex",
):
    """Build a facility page with the given schedule tables."""
    reserve_link = f'<a href="{reserve}">Reserve a spot</a>' if reserve else ""
    return (
        "<html><body>"
        f"<h1> {name} </h1>"
        f"{reserve_link}"
        '<div class="address">'
        f'<a class="address-link address-details">{street} (link is external)</a>'
        f'<div class="address-details">{city}</div>'
        "</div>"
        + "".join(tables)
        + "</body></html>"
    )


@pytest.fixture
def nepean_html():
    """Nepean Sportsplex page with a captioned pickleball table."""
    return facility_html(
        schedule_table(
            ["Monday", "Tuesday", "Saturday"],
            [
                ["Pickleball", "1-2pm", "3-4:30pm", "9–11 am"],
                ["Badminton", "9-10am", "", "Closed"],
                ["Pickleball - adult", "10-11 am, 7-9 pm", "Closed", ""],
            ],
            caption="Drop-in schedule starting September 3, 2024",
        )
    )


@pytest.fixture
def hintonburg_html():
    """Hintonburg page with the activity name in a <td> and no caption."""
    return facility_html(
        schedule_table(
            ["Monday", "Wednesday"],
            [["Pickleball - all ages", "Noon-1pm", "6:30-8 pm"]],
            row_headers=False,
        ),
        name="Hintonburg Community Centre",
        street="1064 Wellington Street West",
        city="Ottawa, ON K1Y 2Y3",
        reserve=None,
    )


@pytest.fixture
def config(tmp_path):
    """Config with state files under a temporary directory."""
    return ScraperConfig(
        centres=[NEPEAN_URL, HINTONBURG_URL],
        novelty_file=str(tmp_path / "cache" / "date-scraped.json"),
        schedule_file=str(tmp_path / "cache" / "schedule.json"),
    )
