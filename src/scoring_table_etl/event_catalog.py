"""scoring_table_etl.event_catalog

YAML-based event catalog for the scoring-table extractor.

Responsibilities:
  - Load and validate the declarative catalog (config/event_catalog.yml)
  - Expand it into the map of every admissible normalized event key
  - Resolve the category of an event key, with section fallback
  - Hash YAML content for traceability in run reports

Usage:
    from scoring_table_etl.event_catalog import default_catalog

    catalog = default_catalog()
    catalog.category_for("100m h")   # -> "sprints"
"""

from __future__ import annotations

import functools
import hashlib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

DEFAULT_CATALOG_PATH = Path(__file__).parent / "config" / "event_catalog.yml"

REQUIRED_YAML_KEYS = frozenset({
    "version",
    "modifiers",
    "category_keywords",
    "track_events",
    "race_walk_events",
    "field_events",
    "combined_events",
    "relay_events",
})

# How a performance is measured, keyed by event type.
MEASUREMENT_BY_TYPE = {
    "track": "time",
    "relay": "time",
    "race_walk": "time",
    "field": "distance",
    "combined": "points",
}


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class CatalogValidationError(ValueError):
    """Raised when the event catalog YAML fails schema validation."""


# ---------------------------------------------------------------------------
# Dataclasses
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class EventCatalogEntry:
    """Metadata for one normalized event key."""

    key: str
    category: str
    type: str
    modifier: str | None = None
    admissible_modifiers: frozenset[str] = frozenset()
    distance: float | None = None
    unit: str | None = None
    name: str | None = None
    genders: tuple[str, ...] = ()

    @property
    def measurement(self) -> str:
        return MEASUREMENT_BY_TYPE[self.type]

    @property
    def is_mixed(self) -> bool:
        return self.modifier is not None and "mix" in self.modifier


@dataclass
class EventCatalog:
    """Parsed, validated catalog: event map plus section keywords."""

    version: str
    yaml_hash: str
    entries: dict[str, EventCatalogEntry]
    category_keywords: list[tuple[str, tuple[str, ...]]]

    def __contains__(self, key: object) -> bool:
        return key in self.entries

    def __len__(self) -> int:
        return len(self.entries)

    def get(self, key: str) -> EventCatalogEntry | None:
        return self.entries.get(key)

    def is_known(self, key: str) -> bool:
        return key in self.entries

    def category_for(self, key: str) -> str | None:
        entry = self.entries.get(key)
        return entry.category if entry else None

    @property
    def categories(self) -> list[str]:
        return [category for category, _ in self.category_keywords]


# ---------------------------------------------------------------------------
# Loader + validator
# ---------------------------------------------------------------------------

def load_catalog(yaml_path: Path) -> EventCatalog:
    """Load, validate, and expand an event catalog YAML file.

    Raises:
        CatalogValidationError: If any required field is missing or invalid.
        FileNotFoundError: If the YAML file does not exist.
    """
    raw = yaml_path.read_text(encoding="utf-8")
    try:
        data: dict[str, Any] = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        raise CatalogValidationError(f"Catalog is not valid YAML: {exc}") from exc
    validate_catalog(data)
    return EventCatalog(
        version=str(data["version"]),
        yaml_hash=hashlib.sha256(raw.encode("utf-8")).hexdigest(),
        entries=build_event_map(data),
        category_keywords=[
            (str(item["category"]), tuple(str(k).lower() for k in item["keywords"]))
            for item in data["category_keywords"]
        ],
    )


@functools.lru_cache(maxsize=None)
def default_catalog() -> EventCatalog:
    """Return the packaged catalog, built once per process."""
    return load_catalog(DEFAULT_CATALOG_PATH)


def validate_catalog(data: Any) -> None:
    """Raise CatalogValidationError if data does not match the catalog schema.

    Validates:
      - Required top-level keys present
      - category_keywords is an ordered list of {category, keywords}
      - every track/walk/relay event has a positive numeric distance and a unit
      - every field/combined event has an abbreviation
    """
    if not isinstance(data, dict):
        raise CatalogValidationError("YAML root must be a mapping.")

    missing_keys = REQUIRED_YAML_KEYS - set(data.keys())
    if missing_keys:
        raise CatalogValidationError(f"Missing required YAML keys: {sorted(missing_keys)}")

    keywords = data.get("category_keywords")
    if not isinstance(keywords, list) or not keywords:
        raise CatalogValidationError("'category_keywords' must be a non-empty list.")
    for item in keywords:
        if not isinstance(item, dict) or "category" not in item or not item.get("keywords"):
            raise CatalogValidationError(
                f"category_keywords entry {item!r} needs 'category' and non-empty 'keywords'."
            )

    if not isinstance(data.get("modifiers") or {}, dict):
        raise CatalogValidationError("'modifiers' must be a mapping.")

    for group in _section_list(data, "track_events"):
        _require_mapping(group, "track_events")
        if "category" not in group:
            raise CatalogValidationError(f"track_events group {group!r} has no 'category'.")
        for event in group.get("events") or []:
            _validate_distance_event(event, "track_events")
    for event in _section_list(data, "race_walk_events"):
        _validate_distance_event(event, "race_walk_events")
    for event in _section_list(data, "relay_events"):
        _validate_distance_event(event, "relay_events")
        if not event.get("name"):
            raise CatalogValidationError(f"relay event {event!r} needs a 'name'.")

    for group in _section_list(data, "field_events"):
        _require_mapping(group, "field_events")
        if "category" not in group:
            raise CatalogValidationError(f"field_events group {group!r} has no 'category'.")
        for event in group.get("events") or []:
            _require_mapping(event, "field_events")
            if not event.get("abbr"):
                raise CatalogValidationError(f"field event {event!r} needs an 'abbr'.")
    for event in _section_list(data, "combined_events"):
        _require_mapping(event, "combined_events")
        if not event.get("abbr"):
            raise CatalogValidationError(f"combined event {event!r} needs an 'abbr'.")


def _section_list(data: dict[str, Any], key: str) -> list[Any]:
    value = data.get(key) or []
    if not isinstance(value, list):
        raise CatalogValidationError(f"'{key}' must be a list.")
    return value


def _require_mapping(value: Any, section: str) -> None:
    if not isinstance(value, dict):
        raise CatalogValidationError(f"{section} entry {value!r} must be a mapping.")


def _validate_distance_event(event: Any, section: str) -> None:
    _require_mapping(event, section)
    distance = event.get("distance")
    try:
        fval = float(distance)
    except (TypeError, ValueError):
        raise CatalogValidationError(
            f"{section} entry {event!r}: distance '{distance}' is not numeric."
        )
    if fval <= 0:
        raise CatalogValidationError(f"{section} entry {event!r}: distance must be > 0.")
    if event.get("unit") not in ("m", "km", "mile"):
        raise CatalogValidationError(
            f"{section} entry {event!r}: unit must be one of m, km, mile."
        )


# ---------------------------------------------------------------------------
# Event map expansion
# ---------------------------------------------------------------------------

def _format_distance(distance: Any) -> str:
    fval = float(distance)
    return str(int(fval)) if fval.is_integer() else str(distance)


def _base_name(event: dict[str, Any]) -> str:
    return f"{_format_distance(event['distance'])}{event['unit']}"


def _admissible(event: dict[str, Any], modifiers: dict[str, str]) -> frozenset[str]:
    flags = {
        "h": event.get("hurdles"),
        "sh": event.get("short_track"),
        "sc": event.get("steeplechase"),
        "mix": event.get("mixed"),
    }
    return frozenset(modifiers.get(m, m) for m, on in flags.items() if on)


def build_event_map(data: dict[str, Any]) -> dict[str, EventCatalogEntry]:
    """Expand validated catalog data into {event_key: EventCatalogEntry}."""
    modifiers = {str(k): str(v) for k, v in (data.get("modifiers") or {}).items()}
    event_map: dict[str, EventCatalogEntry] = {}

    def add(key: str, **kwargs: Any) -> None:
        event_map[key] = EventCatalogEntry(key=key, **kwargs)

    for group in data.get("track_events") or []:
        category = str(group["category"])
        for event in group.get("events") or []:
            base = event.get("name") or _base_name(event)
            common = dict(
                category=category,
                type="track",
                admissible_modifiers=_admissible(event, modifiers),
                distance=float(event["distance"]),
                unit=event["unit"],
            )
            add(base, **common)
            if event.get("hurdles"):
                add(f"{base} h", modifier="h", **common)
            if event.get("short_track"):
                add(f"{base} sh", modifier="sh", **common)
            if event.get("steeplechase"):
                add(f"{base} sc", modifier="sc", **common)

    walk_label = modifiers.get("w", "walk")
    for event in data.get("race_walk_events") or []:
        base = _base_name(event)
        common = dict(
            category="race_walk",
            type="race_walk",
            modifier="w",
            admissible_modifiers=frozenset({walk_label}),
            distance=float(event["distance"]),
            unit=event["unit"],
        )
        add(f"{base} w", **common)
        add(f"{base} walk", **common)
        if event.get("name"):
            add(str(event["name"]), **common)

    for group in data.get("field_events") or []:
        category = str(group["category"])
        for event in group.get("events") or []:
            add(str(event["abbr"]), category=category, type="field", name=event.get("name"))

    for event in data.get("combined_events") or []:
        abbr = str(event["abbr"])
        common = dict(
            category="combined",
            type="combined",
            name=event.get("name"),
            genders=tuple(event.get("genders") or ()),
            admissible_modifiers=_admissible(event, modifiers),
        )
        add(abbr, **common)
        if event.get("name"):
            add(str(event["name"]), **common)
        if event.get("short_track"):
            add(f"{abbr} sh", modifier="sh", **common)

    for event in data.get("relay_events") or []:
        base = str(event["name"])
        common = dict(
            category="relays",
            type="relay",
            admissible_modifiers=_admissible(event, modifiers),
            distance=float(event["distance"]),
            unit=event["unit"],
        )
        add(base, **common)
        if event.get("short_track"):
            add(f"{base} sh", modifier="sh", **common)
        if event.get("mixed"):
            # "4x400m" -> "4x400mix"
            mix_name = base[:-1] + "mix" if base.endswith("m") else base + "mix"
            add(mix_name, modifier="mix", genders=("mixed",), **common)
            if event.get("short_track"):
                add(f"{mix_name} sh", modifier="mix+sh", genders=("mixed",), **common)

    return event_map


# ---------------------------------------------------------------------------
# Category resolution
# ---------------------------------------------------------------------------

def resolve_category(
    catalog: EventCatalog,
    event_key: str,
    section_category: str | None,
) -> tuple[str | None, bool]:
    """Return (category, known) for an event key.

    Unknown keys fall back to the current section's category; the category
    is None when that is unset too.
    """
    if catalog.is_known(event_key):
        return catalog.entries[event_key].category, True
    return section_category, False
