"""Tests for time range token parsing and chronological ordering."""

from datetime import time

from src.dropin_scraper.times import (
    fix_colon_spacing,
    is_evening_or_weekend,
    parse_time_tokens,
    range_sort_time,
    sort_ranges,
)


class TestParseTimeTokens:
    def test_unspaced_hyphen_gets_spaces(self):
        """'1-2pm' becomes '1 - 2pm'."""
        assert parse_time_tokens("1-2pm") == ["1 - 2pm"]

    def test_uneven_spacing_is_canonicalized(self):
        """Spacing on either side of the dash ends up as ' - '."""
        assert parse_time_tokens("1 -2pm, 3-  4 pm") == ["1 - 2pm", "3 - 4 pm"]

    def test_noon_becomes_12_pm(self):
        """'noon' is replaced by '12 pm' and never survives."""
        tokens = parse_time_tokens("Noon-1pm\n11 am - noon")
        assert tokens == ["12 pm - 1pm", "11 am - 12 pm"]
        assert all("noon" not in token for token in tokens)

    def test_12_noon_is_not_doubled(self):
        assert parse_time_tokens("12 noon - 1 pm") == ["12 pm - 1 pm"]

    def test_en_dash_and_em_dash_are_hyphens(self):
        assert parse_time_tokens("9–10:30am, 1 — 2:45 pm") == [
            "9 - 10:30am",
            "1 - 2:45 pm",
        ]

    def test_lowercases(self):
        assert parse_time_tokens("7-9 PM") == ["7 - 9 pm"]

    def test_splits_on_commas_and_newline_runs(self):
        """Commas and runs of newlines separate entries."""
        assert parse_time_tokens("9-10am,\n\n1-2pm\n7-9pm") == [
            "9 - 10am",
            "1 - 2pm",
            "7 - 9pm",
        ]

    def test_drops_tokens_without_leading_number(self):
        """Closed cells, notes and footnote markers yield nothing."""
        assert parse_time_tokens("Closed") == []
        assert parse_time_tokens("") == []
        assert parse_time_tokens("*see note, 1-2pm") == ["1 - 2pm"]

    def test_lone_dash_cell_is_empty(self):
        assert parse_time_tokens(" – ") == []


class TestEveningsAndWeekends:
    def test_weekend_keeps_everything(self):
        assert is_evening_or_weekend("Saturday", "9 - 10 am")
        assert is_evening_or_weekend("Sunday", "1 - 2 pm")

    def test_weekday_evening_hours(self):
        assert is_evening_or_weekend("Monday", "5 - 6 pm")
        assert is_evening_or_weekend("Monday", "9 - 10 pm")
        assert not is_evening_or_weekend("Monday", "4 - 5 pm")
        assert not is_evening_or_weekend("Monday", "10 - 11 pm")

    def test_noon_is_not_evening(self):
        """'12 pm' starts at noon even though 12 is not below 5."""
        assert not is_evening_or_weekend("Tuesday", "12 pm - 1 pm")

    def test_morning_is_not_evening(self):
        assert not is_evening_or_weekend("Friday", "7 - 8 am")

    def test_filter_applied_by_parser(self):
        """The parser drops weekday daytime slots when the filter is on."""
        text = "9-10am, 12-1 pm, 5-6 pm, 7:30-9 pm"
        assert parse_time_tokens(text, "Monday", evenings_and_weekends=True) == [
            "5 - 6 pm",
            "7:30 - 9 pm",
        ]
        assert len(parse_time_tokens(text, "Saturday", evenings_and_weekends=True)) == 4

    def test_filter_off_by_default(self):
        assert len(parse_time_tokens("9-10am, 5-6 pm", "Monday")) == 2


class TestSorting:
    def test_sort_time_reads_time_after_dash(self):
        assert range_sort_time("9 - 10:30am (Pickleball)") == time(10, 30)
        assert range_sort_time("1 - 2 pm (Pickleball)") == time(14, 0)
        assert range_sort_time("11 am - 12 pm (Pickleball)") == time(12, 0)

    def test_sort_time_none_without_range(self):
        assert range_sort_time("all day (Pickleball)") is None
        assert range_sort_time("9 - 10 (Pickleball)") is None

    def test_orders_morning_before_afternoon(self):
        """10-11am, 1-2pm, 9-10am sorts to 9-10am, 10-11am, 1-2pm."""
        ranges = ["10 - 11 am (P)", "1 - 2 pm (P)", "9 - 10 am (P)"]
        assert sort_ranges(ranges) == ["9 - 10 am (P)", "10 - 11 am (P)", "1 - 2 pm (P)"]

    def test_ties_keep_insertion_order(self):
        ranges = ["9:30 - 10 am (B)", "9 - 10 am (A)"]
        assert sort_ranges(ranges) == ranges

    def test_unreadable_ranges_go_last(self):
        ranges = ["all day (X)", "1 - 2 pm (P)"]
        assert sort_ranges(ranges) == ["1 - 2 pm (P)", "all day (X)"]


class TestFixColonSpacing:
    def test_removes_spaces_around_colon(self):
        assert fix_colon_spacing("1 - 2 : 45 pm") == "1 - 2:45 pm"
        assert fix_colon_spacing("1 - 2: 45 pm") == "1 - 2:45 pm"

    def test_leaves_clean_times(self):
        assert fix_colon_spacing("1 - 2:45 pm") == "1 - 2:45 pm"
