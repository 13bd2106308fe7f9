"""Unit tests for scoring_table_etl.shared."""

from __future__ import annotations

import csv
import json
import logging

from scoring_table_etl.shared import RejectWriter, RunCounters, write_run_report


class TestRejectWriter:
    def test_no_file_until_first_write(self, tmp_path):
        path = tmp_path / "rejects" / "rows.csv"
        writer = RejectWriter(path)
        writer.close()
        assert not path.exists()

    def test_writes_header_and_reason(self, tmp_path):
        path = tmp_path / "rejects" / "rows.csv"
        writer = RejectWriter(path)
        writer.write({"line_no": 12, "line": "abc 9.46"}, "invalid_points")
        writer.write({"line_no": 13, "line": "xyz"}, "invalid_points")
        writer.close()
        with open(path, newline="", encoding="utf-8") as fh:
            rows = list(csv.DictReader(fh))
        assert [r["line_no"] for r in rows] == ["12", "13"]
        assert rows[0]["_reject_reason"] == "invalid_points"
        assert writer.path == path
        assert writer.written and not writer.failed

    def test_unwritable_path_warns_once(self, tmp_path, caplog):
        blocker = tmp_path / "blocker"
        blocker.write_text("a file, not a directory")
        writer = RejectWriter(blocker / "rows.csv")
        with caplog.at_level(logging.WARNING, logger="scoring_table_etl.shared"):
            writer.write({"line_no": 1, "line": "abc"}, "invalid_points")
            writer.write({"line_no": 2, "line": "xyz"}, "invalid_points")
        writer.close()
        assert writer.failed
        assert not writer.written
        assert caplog.text.count("Could not write rejects") == 1


class TestRunCounters:
    def test_to_dict(self):
        counters = RunCounters(rows_parsed=3)
        counters.unknown_event_keys.append("half marathon")
        d = counters.to_dict()
        assert d["rows_parsed"] == 3
        assert d["unknown_event_keys"] == ["half marathon"]

    def test_lists_not_shared(self):
        a, b = RunCounters(), RunCounters()
        a.warnings.append("x")
        assert b.warnings == []


class TestWriteRunReport:
    def test_report_contents(self, tmp_path):
        counters = RunCounters(lines_read=10)
        path = write_run_report(
            "run-1", "2025-01-01T00:00:00+00:00",
            {"input_path": "in.txt"},
            counters,
            {"total_events": 1},
            tmp_path / "reports",
        )
        assert path == tmp_path / "reports" / "run-1.json"
        report = json.loads(path.read_text())
        assert report["run_id"] == "run-1"
        assert report["input_path"] == "in.txt"
        assert report["counters"]["lines_read"] == 10
        assert report["statistics"] == {"total_events": 1}
        assert "finished_at" in report
