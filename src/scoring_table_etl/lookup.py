"""scoring_table_etl.lookup

Read-only accessors over an exported scoring table, for the calculator
collaborators.

Usage:
    from scoring_table_etl.lookup import load_scoring_tables

    reader = load_scoring_tables("public/data/athletics_scoring_tables.min.json")
    reader.entries("men", "100m")          # [(1400, "9.46"), ...]
    reader.lookup_points("men", "100m", "10.00")
"""

from __future__ import annotations

import functools
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from scoring_table_etl.event_catalog import EventCatalog, default_catalog
from scoring_table_etl.export import decode
from scoring_table_etl.normalize import FIELD_EVENT_ABBREVIATIONS, performance_seconds

Pair = tuple[int, str]

# Marks compared within this tolerance count as an exact table hit.
_EXACT_TOLERANCE = 0.005


@dataclass(frozen=True)
class PointsLookup:
    points: int
    exact_match: bool
    closest_performance: str


@dataclass(frozen=True)
class EquivalentPerformance:
    event: str
    category: str
    performance: str
    points: int
    exact_match: bool


class ScoringTableReader:
    """Pure read accessors over {gender: {category: {event: [[points, perf]]}}}."""

    def __init__(self, data: dict[str, Any], catalog: EventCatalog | None = None) -> None:
        self._data = data
        self._catalog = catalog

    @classmethod
    def from_path(cls, path: Path) -> "ScoringTableReader":
        return cls(decode(Path(path).read_text(encoding="utf-8")))

    # -----------------------------------------------------------------------
    # Structure
    # -----------------------------------------------------------------------

    def genders(self) -> list[str]:
        return list(self._data)

    def categories(self, gender: str) -> list[str]:
        return list(self._data.get(gender, {}))

    def events(self, gender: str, category: str) -> list[str]:
        return list(self._data.get(gender, {}).get(category, {}))

    def all_events(self, gender: str) -> list[tuple[str, str]]:
        """[(event, category), ...] across every category of a gender."""
        return [
            (event, category)
            for category in self.categories(gender)
            for event in self.events(gender, category)
        ]

    def available_events(self, gender: str) -> dict[str, str]:
        return {event: category for event, category in self.all_events(gender)}

    def find_category(self, gender: str, event: str) -> str | None:
        for category in self.categories(gender):
            if event in self._data[gender][category]:
                return category
        return None

    def event_data(self, gender: str, category: str, event: str) -> list[Pair] | None:
        pairs = self._data.get(gender, {}).get(category, {}).get(event)
        if pairs is None:
            return None
        return [(int(points), str(perf)) for points, perf in pairs]

    def entries(self, gender: str, event: str) -> list[Pair]:
        """Ordered (points, performance) pairs for an event, [] if absent."""
        category = self.find_category(gender, event)
        if category is None:
            return []
        return self.event_data(gender, category, event) or []

    # -----------------------------------------------------------------------
    # Lookups
    # -----------------------------------------------------------------------

    def higher_is_better(self, event: str) -> bool:
        """Distance and points events score more for larger marks."""
        catalog = self._catalog if self._catalog is not None else default_catalog()
        entry = catalog.get(event)
        if entry is not None:
            return entry.measurement in ("distance", "points")
        return event.lower() in FIELD_EVENT_ABBREVIATIONS

    def lookup_points(self, gender: str, event: str, performance: str) -> PointsLookup | None:
        """Points for a mark; between two table rows the lower score applies.

        A mark better than every row gets the top row; a mark worse than
        every row is off the table and returns None.
        """
        pairs = self.entries(gender, event)
        mark = performance_seconds(performance)
        if not pairs or mark is None:
            return None

        higher_better = self.higher_is_better(event)
        best: Pair | None = None
        for points, perf in pairs:
            value = performance_seconds(perf)
            if value is None:
                continue
            if abs(value - mark) < _EXACT_TOLERANCE:
                return PointsLookup(points, True, perf)
            beats_row = mark > value if higher_better else mark < value
            if beats_row and (best is None or points > best[0]):
                best = (points, perf)

        if best is None:
            return None
        return PointsLookup(best[0], False, best[1])

    def find_equivalent_performances(self, gender: str, points: int) -> list[EquivalentPerformance]:
        """The mark closest to a points value in every event of a gender."""
        equivalents: list[EquivalentPerformance] = []
        for event, category in self.all_events(gender):
            pairs = self.event_data(gender, category, event)
            if not pairs:
                continue
            closest = min(pairs, key=lambda p: abs(p[0] - points))
            equivalents.append(
                EquivalentPerformance(event, category, closest[1], closest[0], closest[0] == points)
            )
        equivalents.sort(key=lambda e: (e.category, e.event))
        return equivalents

    def points_range(self, gender: str, event: str) -> tuple[int, int] | None:
        pairs = self.entries(gender, event)
        if not pairs:
            return None
        points = [p for p, _ in pairs]
        return min(points), max(points)

    def performance_range(self, gender: str, event: str) -> tuple[str, str] | None:
        """(lowest mark, highest mark) as stored strings."""
        marks: list[tuple[float, str]] = []
        for _, perf in self.entries(gender, event):
            value = performance_seconds(perf)
            if value is not None:
                marks.append((value, perf))
        if not marks:
            return None
        return min(marks)[1], max(marks)[1]


@functools.lru_cache(maxsize=None)
def load_scoring_tables(path: str) -> ScoringTableReader:
    """Read an export once per process and reuse the reader."""
    return ScoringTableReader.from_path(Path(path))
