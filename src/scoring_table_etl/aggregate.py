"""scoring_table_etl.aggregate

In-memory scoring table: accumulation during the scan, merge with a prior
export, and the clean-and-sort pass.

Entries live in one flat, insertion-ordered map keyed by
(gender, category, event).  Lists are append-only during the scan; the
dedup / descending-points ordering only holds after clean_and_sort().
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterator

from scoring_table_etl.event_catalog import EventCatalog, resolve_category
from scoring_table_etl.normalize import parse_performance
from scoring_table_etl.row_parse import MAX_POINTS, DataRow
from scoring_table_etl.shared import RunCounters

log = logging.getLogger(__name__)

MIXED_GENDER = "mixed"
MIXED_MARKER = "mix"

TableKey = tuple[str, str, str]


@dataclass(frozen=True)
class ScoringEntry:
    performance: str
    points: int


class ScoringTable:
    """gender -> category -> event -> [ScoringEntry], stored flat."""

    def __init__(self) -> None:
        self._entries: dict[TableKey, list[ScoringEntry]] = {}

    def __len__(self) -> int:
        return sum(len(v) for v in self._entries.values())

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def leaf(self, gender: str, category: str, event: str) -> list[ScoringEntry]:
        """Get-or-create the entry list for one (gender, category, event)."""
        return self._entries.setdefault((gender, category, event), [])

    def add(self, gender: str, category: str, event: str, performance: str, points: int) -> None:
        self.leaf(gender, category, event).append(ScoringEntry(performance, points))

    def get(self, gender: str, category: str, event: str) -> list[ScoringEntry]:
        return list(self._entries.get((gender, category, event), []))

    def items(self) -> Iterator[tuple[TableKey, list[ScoringEntry]]]:
        return iter(self._entries.items())

    # -----------------------------------------------------------------------
    # Merge
    # -----------------------------------------------------------------------

    def merge(self, exported: dict[str, Any]) -> int:
        """Append every entry of a previously exported table.

        Accepts the compact export layout ([points, performance] pairs).
        Entries a table row could not have produced (points outside
        [0, MAX_POINTS], non-numeric performance) are skipped with a warning.
        Returns the number of entries merged.
        """
        merged = 0
        for gender, categories in exported.items():
            if not isinstance(categories, dict):
                log.warning("Merge: gender %r is not a mapping; skipped.", gender)
                continue
            for category, events in categories.items():
                if not isinstance(events, dict):
                    log.warning("Merge: %s/%s is not a mapping; skipped.", gender, category)
                    continue
                for event, pairs in events.items():
                    if not isinstance(pairs, list):
                        log.warning("Merge: %s/%s/%s is not a list; skipped.", gender, category, event)
                        continue
                    for pair in pairs:
                        entry = _entry_from_pair(pair)
                        if entry is None:
                            log.warning(
                                "Merge: malformed entry %r in %s/%s/%s; skipped.",
                                pair, gender, category, event,
                            )
                            continue
                        self.leaf(gender, category, event).append(entry)
                        merged += 1
        return merged

    # -----------------------------------------------------------------------
    # Clean-and-sort
    # -----------------------------------------------------------------------

    def clean_and_sort(self) -> int:
        """Dedup by performance (keep the higher points), sort points desc.

        Safe to re-run on clean data.  Returns the number of entries removed.
        """
        removed = 0
        for key, entries in self._entries.items():
            best: dict[str, ScoringEntry] = {}
            for entry in entries:
                kept = best.get(entry.performance)
                if kept is None or kept.points < entry.points:
                    best[entry.performance] = entry
            removed += len(entries) - len(best)
            self._entries[key] = sorted(best.values(), key=lambda e: e.points, reverse=True)
        return removed

    # -----------------------------------------------------------------------
    # Views
    # -----------------------------------------------------------------------

    def to_nested(self) -> dict[str, dict[str, dict[str, list[ScoringEntry]]]]:
        nested: dict[str, dict[str, dict[str, list[ScoringEntry]]]] = {}
        for (gender, category, event), entries in self._entries.items():
            nested.setdefault(gender, {}).setdefault(category, {})[event] = list(entries)
        return nested

    def statistics(self) -> dict[str, Any]:
        """Event/entry counts per gender and category, plus totals."""
        stats: dict[str, Any] = {"total_events": 0, "total_entries": 0, "by_gender": {}}
        for (gender, category, _event), entries in self._entries.items():
            g = stats["by_gender"].setdefault(gender, {"events": 0, "entries": 0, "categories": {}})
            c = g["categories"].setdefault(category, {"events": 0, "entries": 0})
            c["events"] += 1
            c["entries"] += len(entries)
            g["events"] += 1
            g["entries"] += len(entries)
            stats["total_events"] += 1
            stats["total_entries"] += len(entries)
        return stats


def _entry_from_pair(pair: Any) -> ScoringEntry | None:
    if isinstance(pair, dict):
        pair = [pair.get("points"), pair.get("performance")]
    if not isinstance(pair, (list, tuple)) or len(pair) != 2:
        return None
    points, performance = pair
    if isinstance(points, bool) or not isinstance(points, int) or not isinstance(performance, str):
        return None
    if not 0 <= points <= MAX_POINTS:
        return None
    performance = parse_performance(performance)
    if performance is None:
        return None
    return ScoringEntry(performance, points)


# ---------------------------------------------------------------------------
# Row storage
# ---------------------------------------------------------------------------

def store_data_row(
    table: ScoringTable,
    catalog: EventCatalog,
    gender: str | None,
    section_category: str | None,
    event_keys: tuple[str, ...],
    row: DataRow,
    counters: RunCounters,
) -> int:
    """File each (event, performance) pair of a row; return how many were stored.

    Pairs are skipped silently while no gender section has been seen.  Keys
    containing "mix" always go under the mixed gender.  Unknown keys are kept
    under the section category with a warning.
    """
    stored = 0
    for event, performance in zip(event_keys, row.performances):
        if not performance or not event:
            continue
        if not gender:
            counters.pairs_skipped_no_gender += 1
            continue

        event_gender = MIXED_GENDER if MIXED_MARKER in event else gender
        category, known = resolve_category(catalog, event, section_category)

        if not known and event not in counters.unknown_event_keys:
            counters.unknown_event_keys.append(event)
            _warn(counters, f"Unknown event detected: {event!r} ({gender}, category: {section_category})")

        if category is None:
            counters.pairs_rejected_no_category += 1
            if event not in counters.uncategorized_event_keys:
                counters.uncategorized_event_keys.append(event)
                _warn(counters, f"No category found for event: {event!r} ({gender})")
            continue

        table.add(event_gender, category, event, performance, row.points)
        stored += 1

    counters.entries_stored += stored
    return stored


def _warn(counters: RunCounters, message: str) -> None:
    log.warning(message)
    counters.warnings.append(message)
