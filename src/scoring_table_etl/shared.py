"""scoring_table_etl.shared

Run plumbing shared by the scan loop and the CLI: RejectWriter for lines
that could not be used, RunCounters, and report-writing support.
"""

from __future__ import annotations

import csv
import json
import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

log = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# RejectWriter
# ---------------------------------------------------------------------------

class RejectWriter:
    """Lazy-open CSV writer for rejected rows.

    If the file cannot be opened or written, a warning is logged once and
    later rows are dropped; rejects never stop a run.
    """

    def __init__(self, path: Path) -> None:
        self._path = path
        self._fh = None
        self._writer = None
        self._failed = False

    @property
    def path(self) -> Path:
        return self._path

    @property
    def failed(self) -> bool:
        return self._failed

    @property
    def written(self) -> bool:
        return self._fh is not None and not self._failed

    def write(self, row: dict[str, Any], reason: str) -> None:
        if self._failed:
            return
        out = dict(row)
        out["_reject_reason"] = reason
        try:
            if self._fh is None:
                self._path.parent.mkdir(parents=True, exist_ok=True)
                self._fh = open(self._path, "w", newline="", encoding="utf-8")
                fieldnames = list(row.keys()) + ["_reject_reason"]
                self._writer = csv.DictWriter(
                    self._fh, fieldnames=fieldnames, extrasaction="ignore"
                )
                self._writer.writeheader()
            self._writer.writerow(out)
            self._fh.flush()
        except OSError as exc:
            log.warning("Could not write rejects to %s (%s); further rejects dropped.", self._path, exc)
            self._failed = True

    def close(self) -> None:
        if self._fh:
            self._fh.close()


# ---------------------------------------------------------------------------
# RunCounters
# ---------------------------------------------------------------------------

@dataclass
class RunCounters:
    lines_read: int = 0
    blank_lines: int = 0
    section_lines: int = 0
    header_lines: int = 0
    header_descriptors_dropped: int = 0
    tables_ended: int = 0
    rows_parsed: int = 0
    rows_rejected: int = 0
    lines_outside_table: int = 0
    entries_stored: int = 0
    pairs_skipped_no_gender: int = 0
    pairs_rejected_no_category: int = 0
    entries_merged: int = 0
    duplicates_removed: int = 0
    unknown_event_keys: list[str] = field(default_factory=list)
    uncategorized_event_keys: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


# ---------------------------------------------------------------------------
# Report writer
# ---------------------------------------------------------------------------

def write_run_report(
    run_id: str,
    started_at: str,
    source_paths: dict[str, str],
    counters: RunCounters,
    statistics: dict[str, Any] | None = None,
    reports_dir: Path = Path("./artifacts/reports"),
) -> Path:
    report = {
        "run_id": run_id,
        "started_at": started_at,
        "finished_at": datetime.now(timezone.utc).isoformat(),
        **source_paths,
        "counters": counters.to_dict(),
        "statistics": statistics or {},
    }
    report_path = reports_dir / f"{run_id}.json"
    report_path.parent.mkdir(parents=True, exist_ok=True)
    report_path.write_text(json.dumps(report, indent=2, default=str))
    return report_path
