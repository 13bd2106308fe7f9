"""scoring_table_etl.table_parser

Line-by-line scan of a flattened scoring-table text dump.

Processing order per non-blank line:
  1.  Section heading?   -> merge gender/category, leave the table
  2.  Column header?     -> replace the active header, enter the table
  3.  (in a table) footer?  -> clear the header, leave the table
  4.  (in a table) data row -> reconstruct, map, store

State lives in an explicit ParserState threaded through process_line, so a
scan can be replayed or tested one line at a time.  Section context carries
across page boundaries; the scan is strictly sequential.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Iterable

from scoring_table_etl.aggregate import ScoringTable, store_data_row
from scoring_table_etl.detect import (
    HeaderSpec,
    detect_section,
    detect_table_header,
    is_table_end,
)
from scoring_table_etl.event_catalog import EventCatalog
from scoring_table_etl.row_parse import parse_row
from scoring_table_etl.shared import RejectWriter, RunCounters

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParserState:
    gender: str | None = None
    category: str | None = None
    header: HeaderSpec | None = None
    in_table: bool = False

    @property
    def points_side(self) -> str | None:
        return self.header.points_side if self.header else None


def process_line(
    state: ParserState,
    raw_line: str,
    table: ScoringTable,
    catalog: EventCatalog,
    counters: RunCounters,
    rejects: RejectWriter | None = None,
    line_no: int = 0,
) -> ParserState:
    """Apply one line to the table and return the next parser state."""
    counters.lines_read += 1
    line = raw_line.strip()
    if not line:
        counters.blank_lines += 1
        return state

    section = detect_section(line, catalog.category_keywords)
    if section:
        counters.section_lines += 1
        return replace(state, in_table=False, **section)

    header = detect_table_header(line)
    if header:
        counters.header_lines += 1
        counters.header_descriptors_dropped += len(header.dropped)
        return replace(state, header=header, in_table=True)

    if not state.in_table or state.header is None:
        counters.lines_outside_table += 1
        return state

    if is_table_end(line):
        counters.tables_ended += 1
        return replace(state, header=None, in_table=False)

    row = parse_row(line, state.header)
    if row is None:
        counters.rows_rejected += 1
        log.debug("Line %d rejected (invalid_points): %r", line_no, line)
        if rejects is not None:
            rejects.write(
                {
                    "line_no": line_no,
                    "line": line,
                    "gender": state.gender or "",
                    "category": state.category or "",
                    "events": " | ".join(state.header.event_keys),
                },
                "invalid_points",
            )
        return state

    counters.rows_parsed += 1
    store_data_row(
        table, catalog, state.gender, state.category,
        state.header.event_keys, row, counters,
    )
    return state


def parse_lines(
    lines: Iterable[str],
    table: ScoringTable,
    catalog: EventCatalog,
    counters: RunCounters,
    rejects: RejectWriter | None = None,
    state: ParserState | None = None,
) -> ParserState:
    """Scan every line in order; return the final parser state."""
    state = state or ParserState()
    for line_no, line in enumerate(lines, start=1):
        state = process_line(state, line, table, catalog, counters, rejects, line_no)
    return state


def parse_text(
    text: str,
    table: ScoringTable,
    catalog: EventCatalog,
    counters: RunCounters,
    rejects: RejectWriter | None = None,
) -> ParserState:
    return parse_lines(text.splitlines(), table, catalog, counters, rejects)
