"""Tests for first-seen tracking and new-slot marking."""

from src.dropin_scraper.models import Location
from src.dropin_scraper.novelty import (
    NEW_TIMESLOT_MS,
    build_first_seen,
    mark_new_slots,
    novelty_keys,
    recent_keys,
    slot_time,
)
from tests.conftest import DAY_MS, NOW_MS

CAPTIONED = "Nepean Sportsplex starting September 3"
KEY_MON = "Nepean Sportsplex|Monday|1 - 2pm"
KEY_SAT = "Nepean Sportsplex|Saturday|9 - 11 am"


def _locations():
    return {
        CAPTIONED: Location(
            name=CAPTIONED,
            schedule={
                "Monday": ["1 - 2pm (Pickleball)", "7 - 9 pm (Pickleball - adult)"],
                "Saturday": ["9 - 11 am (Pickleball)"],
            },
        ),
        "Hintonburg Community Centre": Location(
            name="Hintonburg Community Centre",
            schedule={"Monday": ["1 - 2pm (Pickleball)"]},
        ),
    }


class TestNoveltyKeys:
    def test_keys_strip_caption_and_activity(self):
        assert novelty_keys(_locations()) == [
            KEY_MON,
            "Nepean Sportsplex|Monday|7 - 9 pm",
            KEY_SAT,
            "Hintonburg Community Centre|Monday|1 - 2pm",
        ]

    def test_slot_time_ignores_marker(self):
        assert slot_time("1 - 2 pm (Pickleball)*") == "1 - 2 pm"
        assert slot_time("1 - 2 pm (Pickleball)") == "1 - 2 pm"


class TestBuildFirstSeen:
    def test_new_keys_get_now(self):
        table = build_first_seen({}, _locations(), NOW_MS)
        assert len(table) == 4
        assert set(table.values()) == {NOW_MS}

    def test_known_keys_keep_their_timestamp(self):
        """A key present before keeps its earlier timestamp."""
        earlier = NOW_MS - 30 * DAY_MS
        table = build_first_seen({KEY_MON: earlier}, _locations(), NOW_MS)
        assert table[KEY_MON] == earlier
        assert table[KEY_SAT] == NOW_MS

    def test_vanished_keys_are_dropped(self):
        gone = "Nepean Sportsplex|Sunday|1 - 2pm"
        table = build_first_seen({gone: NOW_MS - DAY_MS}, _locations(), NOW_MS)
        assert gone not in table

    def test_idempotent(self):
        """Feeding the output back in with the same schedule changes nothing."""
        first = build_first_seen({}, _locations(), NOW_MS)
        second = build_first_seen(first, _locations(), NOW_MS + 3 * DAY_MS)
        assert second == first

    def test_reappearing_key_is_new(self):
        first = build_first_seen({KEY_MON: NOW_MS - 30 * DAY_MS}, _locations(), NOW_MS)
        without = {CAPTIONED: Location(name=CAPTIONED, schedule={})}
        second = build_first_seen(first, without, NOW_MS + DAY_MS)
        third = build_first_seen(second, _locations(), NOW_MS + 2 * DAY_MS)
        assert third[KEY_MON] == NOW_MS + 2 * DAY_MS


class TestRecentKeys:
    def test_within_window(self):
        table = {
            "fresh": NOW_MS - DAY_MS,
            "edge": NOW_MS - NEW_TIMESLOT_MS,
            "old": NOW_MS - 30 * DAY_MS,
        }
        assert recent_keys(table, NOW_MS) == ["fresh"]

    def test_new_key_is_recent(self):
        table = build_first_seen({}, _locations(), NOW_MS)
        assert set(recent_keys(table, NOW_MS)) == set(table)

    def test_custom_window(self):
        assert recent_keys({"a": NOW_MS - 2 * DAY_MS}, NOW_MS, window_ms=DAY_MS) == []


class TestMarkNewSlots:
    def test_marks_matching_range(self):
        marked = mark_new_slots(_locations(), [KEY_SAT])
        assert marked[CAPTIONED].schedule["Saturday"] == ["9 - 11 am (Pickleball)*"]
        assert marked[CAPTIONED].schedule["Monday"] == [
            "1 - 2pm (Pickleball)",
            "7 - 9 pm (Pickleball - adult)",
        ]

    def test_does_not_modify_input(self):
        locations = _locations()
        mark_new_slots(locations, [KEY_SAT])
        assert locations[CAPTIONED].schedule["Saturday"] == ["9 - 11 am (Pickleball)"]

    def test_substring_match_covers_caption_variants(self):
        """Every location whose name contains the facility name is marked."""
        locations = _locations()
        other = "Nepean Sportsplex starting January 6"
        locations[other] = Location(
            name=other, schedule={"Monday": ["1 - 2pm (Pickleball)"]}
        )
        marked = mark_new_slots(locations, [KEY_MON])
        assert marked[CAPTIONED].schedule["Monday"][0] == "1 - 2pm (Pickleball)*"
        assert marked[other].schedule["Monday"] == ["1 - 2pm (Pickleball)*"]
        assert marked["Hintonburg Community Centre"].schedule["Monday"] == [
            "1 - 2pm (Pickleball)"
        ]

    def test_marker_added_once(self):
        marked = mark_new_slots(_locations(), [KEY_SAT, KEY_SAT])
        marked = mark_new_slots(marked, [KEY_SAT])
        assert marked[CAPTIONED].schedule["Saturday"] == ["9 - 11 am (Pickleball)*"]

    def test_missing_day_is_ignored(self):
        marked = mark_new_slots(_locations(), ["Nepean Sportsplex|Sunday|1 - 2pm"])
        assert "Sunday" not in marked[CAPTIONED].schedule

    def test_malformed_key_is_ignored(self):
        marked = mark_new_slots(_locations(), ["not-a-key"])
        assert marked[CAPTIONED].schedule == _locations()[CAPTIONED].schedule

    def test_custom_marker(self):
        marked = mark_new_slots(_locations(), [KEY_SAT], marker=" NEW")
        assert marked[CAPTIONED].schedule["Saturday"] == ["9 - 11 am (Pickleball) NEW"]
