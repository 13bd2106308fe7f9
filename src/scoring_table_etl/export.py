"""scoring_table_etl.export

Serialize a cleaned ScoringTable to the compact nested layout consumed by the
calculator app:

    {gender: {category: {event: [[points, "performance"], ...]}}}

Two encodings are written from the same structure: a readable one (each
[points, performance] pair kept on one line) and a minified one.  Export does
not re-sort or re-validate; clean_and_sort() must already have run.
"""

from __future__ import annotations

import json
import logging
import re
import shutil
from pathlib import Path
from typing import Any

from scoring_table_etl.aggregate import ScoringTable

log = logging.getLogger(__name__)

DEFAULT_OUTPUT_NAME = "athletics_scoring_tables.json"
DEFAULT_PUBLISH_DIR = Path("public") / "data"

# A pair that json.dumps(indent=2) spread over four lines.
_PAIR_RE = re.compile(r'\[\s+(\d+),\s+("(?:[^"\\]|\\.)*")\s+\]')


def to_compact(table: ScoringTable) -> dict[str, Any]:
    """Return the nested dict with [points, performance] pairs."""
    compact: dict[str, Any] = {}
    for (gender, category, event), entries in table.items():
        compact.setdefault(gender, {}).setdefault(category, {})[event] = [
            [entry.points, entry.performance] for entry in entries
        ]
    return compact


def encode_pretty(compact: dict[str, Any]) -> str:
    return _PAIR_RE.sub(r"[\1, \2]", json.dumps(compact, indent=2, ensure_ascii=False))


def encode_minified(compact: dict[str, Any]) -> str:
    return json.dumps(compact, separators=(",", ":"), ensure_ascii=False)


def decode(text: str) -> dict[str, Any]:
    """Parse either encoding back to the compact structure.

    Raises:
        ValueError: If the text is not JSON or its root is not an object.
    """
    data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError("export root must be a JSON object")
    return data


def minified_path_for(output_path: Path) -> Path:
    """'tables.json' -> 'tables.min.json'."""
    if output_path.suffix == ".json":
        return output_path.with_suffix(".min.json")
    return output_path.with_name(output_path.name + ".min.json")


def write_exports(table: ScoringTable, output_path: Path) -> tuple[Path, Path]:
    """Write the pretty and minified encodings; return both paths."""
    compact = to_compact(table)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(encode_pretty(compact), encoding="utf-8")
    minified_path = minified_path_for(output_path)
    minified_path.write_text(encode_minified(compact), encoding="utf-8")
    return output_path, minified_path


def publish_minified(minified_path: Path, publish_dir: Path) -> Path | None:
    """Copy the minified export where the calculator app fetches it.

    Best-effort: failures are logged and None is returned.
    """
    target = publish_dir / minified_path.name
    try:
        publish_dir.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(minified_path, target)
    except OSError as exc:
        log.warning("Could not publish to %s: %s", publish_dir, exc)
        return None
    return target


def load_export(path: Path) -> dict[str, Any] | None:
    """Load a previous export for merging.

    Returns None when the file is absent, or unreadable / invalid (with a
    warning); a bad prior export never stops the run.
    """
    if not path.exists():
        return None
    try:
        return decode(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        log.warning("Could not load existing export %s (%s); merge skipped.", path, exc)
        return None
