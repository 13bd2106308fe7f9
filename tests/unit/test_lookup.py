"""Unit tests for scoring_table_etl.lookup."""

from __future__ import annotations

import json

import pytest

from scoring_table_etl.lookup import (
    EquivalentPerformance,
    PointsLookup,
    ScoringTableReader,
    load_scoring_tables,
)

DATA = {
    "men": {
        "sprints": {
            "100m": [[1400, "9.46"], [1190, "10.00"], [1170, "10.10"]],
        },
        "jumps": {
            "lj": [[1400, "8.95"], [1200, "8.00"], [1000, "7.10"]],
        },
        "long_distance": {
            "marathon": [[1300, "2:02:00"], [1200, "2:05:30"]],
        },
    },
    "women": {
        "combined": {
            "hept": [[1300, "7291"], [1100, "6500"]],
        },
    },
}


@pytest.fixture
def reader():
    return ScoringTableReader(DATA)


# ---------------------------------------------------------------------------
# Structure accessors
# ---------------------------------------------------------------------------

class TestStructure:
    def test_genders(self, reader):
        assert reader.genders() == ["men", "women"]

    def test_categories(self, reader):
        assert reader.categories("men") == ["sprints", "jumps", "long_distance"]

    def test_events(self, reader):
        assert reader.events("men", "jumps") == ["lj"]

    def test_missing_gender(self, reader):
        assert reader.categories("mixed") == []
        assert reader.all_events("mixed") == []

    def test_available_events(self, reader):
        assert reader.available_events("men") == {
            "100m": "sprints",
            "lj": "jumps",
            "marathon": "long_distance",
        }

    def test_find_category(self, reader):
        assert reader.find_category("men", "lj") == "jumps"
        assert reader.find_category("men", "hept") is None

    def test_entries_in_order(self, reader):
        assert reader.entries("men", "100m") == [(1400, "9.46"), (1190, "10.00"), (1170, "10.10")]

    def test_entries_missing_event(self, reader):
        assert reader.entries("women", "100m") == []

    def test_event_data_missing(self, reader):
        assert reader.event_data("men", "sprints", "200m") is None


# ---------------------------------------------------------------------------
# lookup_points
# ---------------------------------------------------------------------------

class TestLookupPoints:
    def test_exact_match(self, reader):
        assert reader.lookup_points("men", "100m", "10.00") == PointsLookup(1190, True, "10.00")

    def test_time_between_rows_takes_lower_score(self, reader):
        assert reader.lookup_points("men", "100m", "10.05") == PointsLookup(1170, False, "10.10")

    def test_time_better_than_table(self, reader):
        assert reader.lookup_points("men", "100m", "9.20") == PointsLookup(1400, False, "9.46")

    def test_time_worse_than_table(self, reader):
        assert reader.lookup_points("men", "100m", "11.00") is None

    def test_distance_between_rows_takes_lower_score(self, reader):
        assert reader.lookup_points("men", "lj", "8.50") == PointsLookup(1200, False, "8.00")

    def test_distance_worse_than_table(self, reader):
        assert reader.lookup_points("men", "lj", "6.00") is None

    def test_hours_minutes_seconds(self, reader):
        assert reader.lookup_points("men", "marathon", "2:03:10").points == 1200

    def test_combined_points_higher_is_better(self, reader):
        assert reader.lookup_points("women", "hept", "7000").points == 1100

    def test_unparseable_mark(self, reader):
        assert reader.lookup_points("men", "100m", "fast") is None

    def test_unknown_event(self, reader):
        assert reader.lookup_points("men", "60m", "6.50") is None


class TestHigherIsBetter:
    @pytest.mark.parametrize("event,expected", [
        ("100m", False),
        ("marathon", False),
        ("lj", True),
        ("dec", True),
        ("unknown", False),
    ])
    def test_by_measurement(self, reader, event, expected):
        assert reader.higher_is_better(event) is expected


# ---------------------------------------------------------------------------
# Equivalents and ranges
# ---------------------------------------------------------------------------

class TestFindEquivalentPerformances:
    def test_closest_mark_per_event(self, reader):
        result = reader.find_equivalent_performances("men", 1200)
        assert result == [
            EquivalentPerformance("lj", "jumps", "8.00", 1200, True),
            EquivalentPerformance("marathon", "long_distance", "2:05:30", 1200, True),
            EquivalentPerformance("100m", "sprints", "10.00", 1190, False),
        ]

    def test_unknown_gender(self, reader):
        assert reader.find_equivalent_performances("mixed", 1200) == []


class TestRanges:
    def test_points_range(self, reader):
        assert reader.points_range("men", "lj") == (1000, 1400)

    def test_performance_range_uses_numeric_order(self, reader):
        assert reader.performance_range("men", "100m") == ("9.46", "10.10")

    def test_ranges_for_missing_event(self, reader):
        assert reader.points_range("men", "200m") is None
        assert reader.performance_range("men", "200m") is None


# ---------------------------------------------------------------------------
# load_scoring_tables
# ---------------------------------------------------------------------------

class TestLoadScoringTables:
    def test_reads_export_once(self, tmp_path):
        path = tmp_path / "tables.min.json"
        path.write_text(json.dumps(DATA))
        first = load_scoring_tables(str(path))
        assert first.entries("men", "lj")[0] == (1400, "8.95")
        assert load_scoring_tables(str(path)) is first
