"""scoring_table_etl.row_parse

Table-body rows: token reconstruction and positional mapping.

A cross-referenced row carries one points value shared by several event
columns.  The text extraction sometimes glues neighbouring cells together
("-5.79-9.50-19.42", "9.5219.03"); reconstruct_tokens splits them back
using the tables' fixed two-digit precision.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from scoring_table_etl.detect import POINTS_LEFT, HeaderSpec
from scoring_table_etl.normalize import (
    PERFORMANCE_LITERAL,
    is_performance_literal,
    parse_performance,
    parse_points,
)

DASH = "-"
MAX_POINTS = 1500

_EMBEDDED_PERFORMANCE_RE = re.compile(PERFORMANCE_LITERAL)


@dataclass(frozen=True)
class DataRow:
    points: int
    performances: tuple[str | None, ...]


def split_glued_token(token: str) -> list[str]:
    """Split one token into performance literals and dash placeholders.

    Characters other than dashes outside the matched literals are dropped.
    A token with no embedded literal is returned unchanged.
    """
    parts: list[str] = []
    last = 0
    for match in _EMBEDDED_PERFORMANCE_RE.finditer(token):
        parts.extend(DASH for ch in token[last:match.start()] if ch == DASH)
        parts.append(match.group())
        last = match.end()
    if not parts:
        return [token]
    parts.extend(DASH for ch in token[last:] if ch == DASH)
    return parts


def reconstruct_tokens(line: str) -> list[str]:
    """Whitespace-split a body line and repair concatenated cells.

    >>> reconstruct_tokens("1190 -5.79-9.50-19.42")
    ['1190', '-', '5.79', '-', '9.50', '-', '19.42']
    """
    tokens: list[str] = []
    for token in line.split():
        if token == "--":
            tokens.extend((DASH, DASH))
        elif token == DASH or is_performance_literal(token):
            tokens.append(token)
        else:
            tokens.extend(split_glued_token(token))
    return tokens


def map_row(tokens: list[str], header: HeaderSpec) -> DataRow | None:
    """Pair reconstructed tokens with the header's events.

    Returns None when the points cell is missing, non-numeric, or outside
    [0, MAX_POINTS].  Positions past the end of the row and dash
    placeholders map to None.
    """
    if not tokens:
        return None

    if header.points_side == POINTS_LEFT:
        points_token, values = tokens[0], tokens[1:]
    else:
        points_token, values = tokens[-1], tokens[:-1]

    points = parse_points(points_token, MAX_POINTS)
    if points is None:
        return None

    performances = tuple(
        parse_performance(values[i]) if i < len(values) else None
        for i in range(len(header.event_keys))
    )
    return DataRow(points, performances)


def parse_row(line: str, header: HeaderSpec) -> DataRow | None:
    return map_row(reconstruct_tokens(line), header)
