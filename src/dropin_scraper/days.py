"""Day labels for schedule table columns."""

from bs4 import Tag

DEFAULT_DAYS: list[str] = [
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
]


def resolve_days(table: Tag) -> list[str]:
    """Return the day label of each column of a schedule table.

    The <thead> header cells are used when they name Monday, then the cells
    of the first body row. Tables without day labels (single-day tables, for
    instance) fall back to Monday-through-Sunday.
    """
    header = table.select("thead tr th")
    # Markup saved without a browser may lack the implied <tbody>
    first_row = table.select("tbody tr:first-of-type td") or table.select(
        "tr:first-of-type td"
    )

    for cells in (header, first_row):
        if "Monday" in "".join(cell.get_text() for cell in cells):
            labels = [cell.get_text().strip() for cell in cells]
            return [label for label in labels if label]

    return list(DEFAULT_DAYS)


def day_for_cell(days: list[str], cell_index: int, row_has_header: bool) -> str | None:
    """Map the index of a <td> in a row to its day label.

    When the activity name sits in a <th>, the <td> cells line up with the
    day labels. When it sits in the first <td>, every cell is shifted one
    column right, and the name cell itself maps to no day.
    """
    index = cell_index if row_has_header else cell_index - 1
    if 0 <= index < len(days):
        return days[index]
    return None
