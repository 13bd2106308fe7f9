"""scoring_table_etl.detect

Line classifiers for the flattened scoring-table text:

  detect_section       : bilingual gender / category headings
  detect_table_header  : "Points 100m 200m ..." column-header lines
  is_table_end         : page footers that close the active table
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable, Iterable

from scoring_table_etl.normalize import (
    MODIFIER_TOKENS,
    UNIT_TOKENS,
    normalize_event_name,
)

log = logging.getLogger(__name__)

POINTS_LEFT = "left"
POINTS_RIGHT = "right"

_POINTS_TOKEN_RE = re.compile(r"points?", re.IGNORECASE)
_MAGNITUDE_RE = re.compile(r"^\d+(?:\.\d+)?$")
_TABLE_END_RE = re.compile(r"^(?:©|world\s*athletics|page\s*\d+)$", re.IGNORECASE)


# ---------------------------------------------------------------------------
# Section headings
# ---------------------------------------------------------------------------

def detect_gender(line_lower: str) -> str | None:
    """Return 'women', 'men', 'mixed' or None for a lowercased line."""
    if "women" in line_lower or "femmes" in line_lower:
        return "women"
    if "men" in line_lower or "hommes" in line_lower:
        return "men"
    if "mixed" in line_lower or "mixte" in line_lower:
        return "mixed"
    return None


def detect_section(
    line: str,
    category_keywords: Iterable[tuple[str, Iterable[str]]],
) -> dict[str, str] | None:
    """Return a partial section update {gender?, category?} or None.

    category_keywords is ordered; the first category with any keyword
    contained in the line wins.
    """
    line_lower = line.lower()
    update: dict[str, str] = {}

    gender = detect_gender(line_lower)
    if gender:
        update["gender"] = gender

    for category, keywords in category_keywords:
        if any(keyword in line_lower for keyword in keywords):
            update["category"] = category
            break

    return update or None


# ---------------------------------------------------------------------------
# Column headers
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class HeaderSpec:
    """Active table header: event keys in column order and the points side."""

    event_keys: tuple[str, ...]
    points_side: str
    dropped: tuple[str, ...] = ()


def split_event_descriptors(tokens: list[str]) -> list[str]:
    """Reassemble multi-token descriptors such as '35 km W' or '200m sh'."""
    descriptors: list[str] = []
    i = 0
    while i < len(tokens):
        descriptor = tokens[i]
        if (
            i + 1 < len(tokens)
            and _MAGNITUDE_RE.match(descriptor)
            and tokens[i + 1].lower() in UNIT_TOKENS
        ):
            descriptor = f"{descriptor} {tokens[i + 1]}"
            i += 1
        if i + 1 < len(tokens) and tokens[i + 1].lower() in MODIFIER_TOKENS:
            descriptor = f"{descriptor} {tokens[i + 1]}"
            i += 1
        descriptors.append(descriptor)
        i += 1
    return descriptors


def detect_table_header(
    line: str,
    normalize: Callable[[str | None], str | None] = normalize_event_name,
) -> HeaderSpec | None:
    """Return the HeaderSpec for a column-header line, or None.

    The points column must be the first or the last token; prose lines that
    merely mention points are rejected.
    """
    if "point" not in line.lower():
        return None

    columns = line.split()
    if len(columns) < 2:
        return None

    if _POINTS_TOKEN_RE.search(columns[0]):
        points_side = POINTS_LEFT
        event_tokens = columns[1:]
    elif _POINTS_TOKEN_RE.search(columns[-1]):
        points_side = POINTS_RIGHT
        event_tokens = columns[:-1]
    else:
        return None

    event_keys: list[str] = []
    dropped: list[str] = []
    for descriptor in split_event_descriptors(event_tokens):
        key = normalize(descriptor)
        if key:
            event_keys.append(key)
        else:
            dropped.append(descriptor)

    if not event_keys:
        return None
    if dropped:
        log.warning("Header %r: unrecognized event descriptors dropped: %s", line, dropped)
    return HeaderSpec(tuple(event_keys), points_side, tuple(dropped))


# ---------------------------------------------------------------------------
# Table end
# ---------------------------------------------------------------------------

def is_table_end(line: str) -> bool:
    """True for footer lines ('©', 'World Athletics', 'Page 12', bare page digit)."""
    if _TABLE_END_RE.match(line):
        return True
    return len(line) == 1 and line.isdigit()
