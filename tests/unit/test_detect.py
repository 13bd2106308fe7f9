"""Unit tests for scoring_table_etl.detect."""

from __future__ import annotations

import logging

import pytest

from scoring_table_etl.detect import (
    POINTS_LEFT,
    POINTS_RIGHT,
    HeaderSpec,
    detect_gender,
    detect_section,
    detect_table_header,
    is_table_end,
    split_event_descriptors,
)
from scoring_table_etl.event_catalog import default_catalog


@pytest.fixture
def keywords():
    return default_catalog().category_keywords


# ---------------------------------------------------------------------------
# detect_gender / detect_section
# ---------------------------------------------------------------------------

class TestDetectGender:
    @pytest.mark.parametrize("line,expected", [
        ("women's sprints", "women"),
        ("femmes - sauts", "women"),
        ("men's throws", "men"),
        ("hommes - lancers", "men"),
        ("mixed relays", "mixed"),
        ("relais mixte", "mixed"),
        ("sprints", None),
    ])
    def test_detects(self, line, expected):
        assert detect_gender(line) == expected

    def test_women_is_not_read_as_men(self):
        assert detect_gender("women") == "women"


class TestDetectSection:
    def test_gender_and_category(self, keywords):
        assert detect_section("MEN - SPRINTS", keywords) == {"gender": "men", "category": "sprints"}

    def test_category_only_is_partial_update(self, keywords):
        assert detect_section("Jumps / Sauts", keywords) == {"category": "jumps"}

    def test_gender_only(self, keywords):
        assert detect_section("Women / Femmes", keywords) == {"gender": "women"}

    def test_demi_fond_wins_over_fond(self, keywords):
        section = detect_section("Hommes - Demi-fond", keywords)
        assert section == {"gender": "men", "category": "middle_distance"}

    def test_fond_alone_is_long_distance(self, keywords):
        assert detect_section("Fond", keywords) == {"category": "long_distance"}

    def test_bilingual_combined(self, keywords):
        assert detect_section("Épreuves combinées", keywords) == {"category": "combined"}

    def test_plain_line_is_none(self, keywords):
        assert detect_section("1400 9.46 19.03", keywords) is None

    def test_first_matching_category_wins(self):
        keywords = [("first", ("relay",)), ("second", ("relay",))]
        assert detect_section("relay", keywords) == {"category": "first"}


# ---------------------------------------------------------------------------
# split_event_descriptors
# ---------------------------------------------------------------------------

class TestSplitEventDescriptors:
    def test_joins_magnitude_and_unit(self):
        assert split_event_descriptors(["35", "km", "W", "LJ"]) == ["35 km W", "LJ"]

    def test_joins_modifier(self):
        assert split_event_descriptors(["200m", "sh", "300m", "sh"]) == ["200m sh", "300m sh"]

    def test_single_tokens_untouched(self):
        assert split_event_descriptors(["100m", "200m"]) == ["100m", "200m"]


# ---------------------------------------------------------------------------
# detect_table_header
# ---------------------------------------------------------------------------

class TestDetectTableHeader:
    def test_points_left(self):
        header = detect_table_header("Points 100m 200m 300m")
        assert header == HeaderSpec(("100m", "200m", "300m"), POINTS_LEFT)

    def test_points_right(self):
        header = detect_table_header("100m 200m LJ Points")
        assert header.points_side == POINTS_RIGHT
        assert header.event_keys == ("100m", "200m", "lj")

    def test_singular_point_token(self):
        assert detect_table_header("Point HJ PV").event_keys == ("hj", "pv")

    def test_multi_token_descriptors(self):
        header = detect_table_header("Points 35 km W 10,000MW mile sh Hept. sh")
        assert header.event_keys == ("35km w", "10,000mW", "1mile sh", "hept sh")

    def test_modifiers_attached(self):
        header = detect_table_header("Points 100mH 60m sh 3000mSC 4x400mix")
        assert header.event_keys == ("100m h", "60m sh", "3000m sc", "4x400mix")

    def test_no_points_word(self):
        assert detect_table_header("100m 200m 300m") is None

    def test_points_word_not_at_edge(self):
        assert detect_table_header("Scoring points are awarded below") is None

    def test_single_column(self):
        assert detect_table_header("Points") is None

    def test_no_event_survives(self):
        assert detect_table_header("Points foo bar") is None

    def test_unrecognized_descriptor_dropped_with_warning(self, caplog):
        with caplog.at_level(logging.WARNING, logger="scoring_table_etl.detect"):
            header = detect_table_header("Points 100m Foo 200m")
        assert header.event_keys == ("100m", "200m")
        assert header.dropped == ("Foo",)
        assert "Foo" in caplog.text


# ---------------------------------------------------------------------------
# is_table_end
# ---------------------------------------------------------------------------

class TestIsTableEnd:
    @pytest.mark.parametrize("line", ["©", "World Athletics", "WorldAthletics", "Page 12", "7"])
    def test_footer_lines(self, line):
        assert is_table_end(line) is True

    @pytest.mark.parametrize("line", ["1400 9.46", "12", "World Athletics Scoring Tables"])
    def test_other_lines(self, line):
        assert is_table_end(line) is False
