"""Normalization functions for scoring-table text ingestion.

All functions accept str | None and return the appropriate type or None.

Event-name normalization is an ordered rule table (EVENT_NAME_RULES): each
rule is a (predicate, transform) pair.  Rewrite rules replace the working
value and fall through; terminal rules return their result immediately.
New unit/modifier spellings are added as rows, not branches.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable

MODIFIER_TOKENS = ("h", "sh", "sc", "w")
UNIT_TOKENS = ("m", "km", "mile", "miles")

FIELD_EVENT_ABBREVIATIONS = ("hj", "pv", "lj", "tj", "sp", "dt", "ht", "jt", "wt")


# ---------------------------------------------------------------------------
# Rule 1: trim
# ---------------------------------------------------------------------------

def trim(value: str | None) -> str | None:
    """Strip leading/trailing whitespace; treat empty string as None."""
    if value is None:
        return None
    v = value.strip()
    return v if v else None


# ---------------------------------------------------------------------------
# Rule 2: normalize_space
# ---------------------------------------------------------------------------

def normalize_space(value: str | None) -> str | None:
    """Collapse internal runs of whitespace to single spaces, then trim."""
    v = trim(value)
    if v is None:
        return None
    return re.sub(r"\s+", " ", v)


# ---------------------------------------------------------------------------
# Event-name rule table
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class EventNameRule:
    """One row of the event-name rule chain."""

    name: str
    predicate: Callable[[str], bool]
    transform: Callable[[str], str]
    terminal: bool = False


def _matches(pattern: str, flags: int = 0) -> Callable[[str], bool]:
    rx = re.compile(pattern, flags)
    return lambda v: rx.search(v) is not None


def _always(_: str) -> bool:
    return True


def _sub(pattern: str, repl: str, flags: int = 0) -> Callable[[str], str]:
    rx = re.compile(pattern, flags)
    return lambda v: rx.sub(repl, v)


def _identity(v: str) -> str:
    return v


_MOD = "|".join(MODIFIER_TOKENS)

_COMMA_WALK = r"^\d{1,2},\d{3}mw$"
_RELAY = rf"^4x\d+m(?:ix)?(?: (?:{_MOD}))?$"
_TRACK = rf"^\d+(?:\.\d+)?(?:m|km|mile)(?: (?:{_MOD}|walk))?$"
_NAMED_ROAD = r"^(?:(?:half[ -]?)?marathon(?: (?:w|walk))?|hm|hmw|marw)$"
_FIELD = rf"^(?:{'|'.join(FIELD_EVENT_ABBREVIATIONS)})$"
_COMBINED_SH = r"^(hept|pent)\.? ?sh$"
_COMBINED = r"^(?:dec|hept|pent)\.?$|^(?:decathlon|heptathlon|pentathlon)$"

EVENT_NAME_RULES: tuple[EventNameRule, ...] = (
    # "5,000mW" / "10,000MW": keep the grouping, fix the marker case only.
    EventNameRule(
        "comma_walk",
        _matches(_COMMA_WALK, re.IGNORECASE),
        _sub(r"mw$", "mW", re.IGNORECASE),
        terminal=True,
    ),
    EventNameRule("lowercase", _always, str.lower),
    EventNameRule("plural_mile", _matches(r"\bmiles\b"), _sub(r"\bmiles\b", "mile")),
    EventNameRule("bare_mile", _matches(rf"^mile(?: (?:{_MOD}))?$"), lambda v: "1" + v),
    EventNameRule(
        "join_unit",
        _matches(r"\d\s+(?:m|km|mile)\b"),
        _sub(r"(\d+(?:\.\d+)?)\s+(m|km|mile)\b", r"\1\2"),
    ),
    # "100mh" -> "100m h"; "4x400mix" never matches since "ix" is not a modifier.
    EventNameRule(
        "split_modifier",
        _matches(rf"\d(?:m|km|mile)(?:{_MOD})\b"),
        _sub(rf"(\d+(?:m|km|mile))(?!ix\b)({_MOD})\b", r"\1 \2"),
    ),
    EventNameRule("relay", _matches(_RELAY), _identity, terminal=True),
    EventNameRule("track", _matches(_TRACK), _identity, terminal=True),
    EventNameRule("named_road", _matches(_NAMED_ROAD), _identity, terminal=True),
    EventNameRule("field", _matches(_FIELD), _identity, terminal=True),
    EventNameRule(
        "combined_short_track",
        _matches(_COMBINED_SH),
        _sub(_COMBINED_SH, r"\1 sh"),
        terminal=True,
    ),
    EventNameRule(
        "combined",
        _matches(_COMBINED),
        lambda v: v.replace(".", ""),
        terminal=True,
    ),
)


def normalize_event_name(
    value: str | None,
    rules: tuple[EventNameRule, ...] = EVENT_NAME_RULES,
) -> str | None:
    """Return the canonical event key for a raw descriptor, or None.

    Idempotent: normalizing a canonical key returns it unchanged.

    >>> normalize_event_name("100mh")
    '100m h'
    >>> normalize_event_name("10,000MW")
    '10,000mW'
    >>> normalize_event_name("mile sh")
    '1mile sh'
    """
    v = normalize_space(value)
    if v is None:
        return None
    for rule in rules:
        if not rule.predicate(v):
            continue
        if rule.terminal:
            return rule.transform(v)
        v = rule.transform(v)
    return None


# ---------------------------------------------------------------------------
# Performance literals
# ---------------------------------------------------------------------------

# digits, optional ":MM" groups, then "." or ":" and exactly two digits.
# The fixed two-digit tail is what splits "9.5219.03" into "9.52" + "19.03".
PERFORMANCE_LITERAL = r"\d+(?::\d{2})*[.:]\d{2}"

_PERFORMANCE_FULL_RE = re.compile(rf"^{PERFORMANCE_LITERAL}$")
_PERFORMANCE_CHARS_RE = re.compile(r"^[0-9:.]+$")
_POINTS_RE = re.compile(r"^[0-9]+$")


def is_performance_literal(value: str | None) -> bool:
    """True for a clean two-decimal mark or time such as '9.46' or '1:23.45'."""
    return bool(value) and _PERFORMANCE_FULL_RE.match(value) is not None


def parse_performance(value: str | None) -> str | None:
    """Return the performance text if it is made only of digits, '.' and ':'."""
    v = trim(value)
    if v is None or v == "-":
        return None
    return v if _PERFORMANCE_CHARS_RE.match(v) else None


def parse_points(value: str | None, max_points: int = 1500) -> int | None:
    """Parse a points cell; None unless it is an integer in [0, max_points]."""
    v = trim(value)
    if v is None or not _POINTS_RE.match(v):
        return None
    points = int(v)
    if points > max_points:
        return None
    return points


def performance_seconds(value: str | None) -> float | None:
    """Convert a stored performance to a float for comparisons.

    'H:MM:SS.ss' and 'M:SS.ss' become seconds; plain marks stay as-is.
    Returns None for anything unparseable.
    """
    v = trim(value)
    if v is None:
        return None
    parts = v.split(":")
    try:
        total = 0.0
        for part in parts:
            total = total * 60 + float(part)
    except ValueError:
        return None
    return total
