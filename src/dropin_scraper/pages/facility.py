"""FacilityPage - extracts activity schedules from a recreation facility page.

Facility pages (ottawa.ca place listings) publish drop-in schedules as plain
HTML tables, one or more per activity group:

  h1 -> facility name
  a (text contains "Reserve") -> online booking link
  .address-link.address-details -> street address
    + .address-details -> city and postal code
  table
    caption -> "Drop-in schedule starting September 3, 2024"
    thead tr -> th per day ("", "Monday", "Tuesday", ...)
    tbody tr -> th (activity name) + td per day ("9-10:30am, 7-9 pm")

Layouts vary between facilities: the day labels may sit in the first body
row, the activity name in a <td>, or the table may have no day labels at all.
Cells that hold no times ("Closed", "n/a") are skipped.
"""

from bs4 import BeautifulSoup, Tag

from src.dropin_scraper.aggregate import extract_caption
from src.dropin_scraper.days import day_for_cell, resolve_days
from src.dropin_scraper.logging import get_logger
from src.dropin_scraper.models import ActivityRow, FacilityMetadata
from src.dropin_scraper.times import parse_time_tokens

log = get_logger(__name__)

_BLOCK_TAGS = ["p", "div", "li"]


def _collapse(text: str) -> str:
    return " ".join(text.split())


def _cell_text(cell: Tag) -> str:
    """Cell text with <br> and block elements turned into line breaks."""
    for br in cell.find_all("br"):
        br.replace_with("\n")
    for block in cell.find_all(_BLOCK_TAGS):
        block.append("\n")
    return cell.get_text()


class FacilityPage:
    """A fetched facility page.

    Extracts the facility's identifying details and every table row that
    names the tracked activity.
    """

    NAME = "h1"
    RESERVE_LINK = 'a:-soup-contains("Reserve")'
    STREET_ADDRESS = ".address-link.address-details"
    CITY_ADDRESS = ".address-link.address-details + .address-details"
    EXTERNAL_LINK_NOTE = " (link is external)"

    def __init__(self, html: str, url: str) -> None:
        self.url = url
        self.soup = BeautifulSoup(html, "html.parser")

    @property
    def name(self) -> str:
        heading = self.soup.select_one(self.NAME)
        return heading.get_text().strip() if heading else ""

    @property
    def link(self) -> str | None:
        anchor = self.soup.select_one(self.RESERVE_LINK)
        if anchor is None:
            return None
        return anchor.get("href") or None

    @property
    def address(self) -> str:
        street = self.soup.select_one(self.STREET_ADDRESS)
        city = self.soup.select_one(self.CITY_ADDRESS)
        street_text = (
            street.get_text().replace(self.EXTERNAL_LINK_NOTE, "").strip()
            if street
            else ""
        )
        city_text = city.get_text().strip() if city else ""
        return _collapse(f"{street_text} {city_text}")

    def metadata(self) -> FacilityMetadata:
        return FacilityMetadata(
            name=self.name,
            link=self.link,
            home=self.url,
            address=self.address,
        )

    def extract_activity_rows(
        self, keyword: str, *, evenings_and_weekends: bool = False
    ) -> list[ActivityRow]:
        """Extract the schedule of every table row mentioning `keyword`.

        Args:
            keyword: Activity text to look for, e.g. "Pickleball" (case-sensitive).
            evenings_and_weekends: Keep only weekend and weekday-evening slots.

        Returns:
            One ActivityRow per matching row that has at least one time range,
            in document order.
        """
        rows: list[ActivityRow] = []
        for tr in self.soup.find_all("tr"):
            if keyword not in tr.get_text():
                continue
            table = tr.find_parent("table")
            if table is None:
                continue

            row = self._extract_row(
                tr, table, evenings_and_weekends=evenings_and_weekends
            )
            if row is None:
                log.debug("activity_row_skipped", url=self.url, reason="no_times")
                continue
            rows.append(row)

        log.info(
            "activity_rows_extracted",
            url=self.url,
            keyword=keyword,
            rows=len(rows),
        )
        return rows

    def _extract_row(
        self, tr: Tag, table: Tag, *, evenings_and_weekends: bool
    ) -> ActivityRow | None:
        days = resolve_days(table)

        caption_tag = table.find("caption")
        caption = extract_caption(caption_tag.get_text() if caption_tag else None)

        cells = tr.find_all("td", recursive=False)
        head_name = _collapse(
            " ".join(th.get_text() for th in tr.find_all("th", recursive=False))
        )
        row_has_header = bool(head_name)
        if row_has_header:
            activity_name = head_name
        elif cells:
            activity_name = _collapse(cells[0].get_text())
        else:
            return None

        day_to_ranges: dict[str, list[str]] = {}
        for index, cell in enumerate(cells):
            day = day_for_cell(days, index, row_has_header)
            if day is None:
                continue
            ranges = parse_time_tokens(
                _cell_text(cell),
                day,
                evenings_and_weekends=evenings_and_weekends,
            )
            if ranges:
                day_to_ranges.setdefault(day, []).extend(ranges)

        if not day_to_ranges:
            return None

        return ActivityRow(
            days=days,
            caption=caption,
            activity_name=activity_name,
            day_to_ranges=day_to_ranges,
        )
