"""scoring_table_etl.extract_scoring_tables

CLI entrypoint: extract a scoring-table text dump into the calculator JSON.

Usage:
    python -m scoring_table_etl.extract_scoring_tables \\
        rawEvidence/World_Athletics_Scoring_Tables_2025.txt \\
        athletics_scoring_tables.json

Usage (merge a second document into an existing export):
    python -m scoring_table_etl.extract_scoring_tables \\
        rawEvidence/field_events.txt athletics_scoring_tables.json --merge

Writes <output>.json (readable) and <output>.min.json (minified), copies the
minified file into --publish-dir, prints a per gender/category summary and
writes a JSON run report under --reports-dir.
"""

from __future__ import annotations

import logging
import sys
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, NoReturn

import click

from scoring_table_etl.aggregate import ScoringTable
from scoring_table_etl.event_catalog import (
    CatalogValidationError,
    EventCatalog,
    default_catalog,
    load_catalog,
)
from scoring_table_etl.export import (
    DEFAULT_OUTPUT_NAME,
    DEFAULT_PUBLISH_DIR,
    load_export,
    publish_minified,
    write_exports,
)
from scoring_table_etl.shared import RejectWriter, RunCounters, write_run_report
from scoring_table_etl.table_parser import parse_text

DEFAULT_INPUT_NAME = "World_Athletics_Scoring_Tables_of_Athletics_2025.txt"

USAGE_HINT = (
    "Usage: scoring-table-extract <input-txt> [output-json] [--merge]\n"
    "Example: scoring-table-extract scoring_tables.txt output.json\n"
    "Example (merge): scoring-table-extract field_events.txt output.json --merge"
)


def format_summary(stats: dict[str, Any]) -> str:
    """Render table statistics as the end-of-run summary block."""
    rule = "=" * 50
    lines = [rule, "EXTRACTION SUMMARY", rule]
    for gender, g in stats["by_gender"].items():
        lines.append("")
        lines.append(f"{gender.upper()}:")
        for category, c in g["categories"].items():
            lines.append(f"  {category:<20} {c['events']} events, {c['entries']:,} entries")
    lines.append("")
    lines.append(rule)
    lines.append(
        f"TOTAL: {stats['total_events']} events with {stats['total_entries']:,} scoring entries"
    )
    lines.append(rule)
    return "\n".join(lines)


def _fatal(run_id: str, message: str, usage: bool = False) -> NoReturn:
    click.echo(f"[{run_id}] FATAL: {message}", err=True)
    if usage:
        click.echo(USAGE_HINT, err=True)
    sys.exit(1)


def _load_catalog(catalog_path: str | None, run_id: str) -> EventCatalog:
    try:
        if catalog_path:
            return load_catalog(Path(catalog_path))
        return default_catalog()
    except (OSError, CatalogValidationError) as exc:
        _fatal(run_id, f"event catalog could not be loaded: {exc}")


@click.command()
@click.argument("input_path", required=False, default=DEFAULT_INPUT_NAME, type=click.Path())
@click.argument("output_path", required=False, default=DEFAULT_OUTPUT_NAME, type=click.Path())
@click.option(
    "--merge", "-m",
    is_flag=True,
    default=False,
    help="Merge with the existing export at OUTPUT_PATH before dedup/sort",
)
@click.option(
    "--publish-dir",
    default=str(DEFAULT_PUBLISH_DIR),
    show_default=True,
    type=click.Path(),
    help="Directory the calculator app fetches the minified file from",
)
@click.option("--no-publish", is_flag=True, default=False, help="Skip copying the minified file")
@click.option("--catalog-path", default=None, type=click.Path(), help="Override the packaged event catalog YAML")
@click.option(
    "--rejects-path",
    default="./artifacts/rejects/scoring_table_rejects.csv",
    show_default=True,
    type=click.Path(),
)
@click.option("--reports-dir", default="./artifacts/reports", show_default=True, type=click.Path())
@click.option("--run-id", default=None, help="Override UUID for log correlation")
@click.option(
    "--log-level",
    default="WARNING",
    show_default=True,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
)
def main(
    input_path: str,
    output_path: str,
    merge: bool,
    publish_dir: str,
    no_publish: bool,
    catalog_path: str | None,
    rejects_path: str,
    reports_dir: str,
    run_id: str | None,
    log_level: str,
) -> None:
    """Extract World Athletics scoring tables from a text dump."""
    logging.basicConfig(
        level=log_level.upper(),
        stream=sys.stderr,
        format="%(levelname)s %(name)s: %(message)s",
    )
    run_id = run_id or str(uuid.uuid4())
    started_at = datetime.now(timezone.utc).isoformat()
    counters = RunCounters()

    click.echo(f"[{run_id}] Starting extraction input={input_path} output={output_path} merge={merge}")

    source = Path(input_path)
    if not source.is_file():
        _fatal(run_id, f"input file not found: {input_path}", usage=True)

    catalog = _load_catalog(catalog_path, run_id)

    try:
        text = source.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        _fatal(run_id, f"input file could not be read: {exc}", usage=True)

    table = ScoringTable()
    rejects = RejectWriter(Path(rejects_path))
    try:
        parse_text(text, table, catalog, counters, rejects)
    finally:
        rejects.close()
    click.echo(
        f"[{run_id}] Scan: {counters.lines_read} lines, {counters.header_lines} headers, "
        f"{counters.rows_parsed} rows parsed, {counters.rows_rejected} rows rejected"
    )
    if rejects.failed:
        counters.warnings.append(f"rejects file {rejects.path} could not be written")
    elif rejects.written:
        click.echo(f"[{run_id}] Rejected rows: {rejects.path}")

    output = Path(output_path)
    if merge:
        prior = load_export(output)
        if prior is not None:
            counters.entries_merged = table.merge(prior)
            click.echo(f"[{run_id}] Merged {counters.entries_merged} entries from {output}")

    counters.duplicates_removed = table.clean_and_sort()

    try:
        pretty_path, minified_path = write_exports(table, output)
    except OSError as exc:
        _fatal(run_id, f"could not write export: {exc}")
    click.echo(f"[{run_id}] Data exported to: {pretty_path}")
    click.echo(f"[{run_id}] Minified version: {minified_path}")

    if not no_publish:
        published = publish_minified(minified_path, Path(publish_dir))
        if published is not None:
            click.echo(f"[{run_id}] Published to: {published}")
        else:
            counters.warnings.append(f"publish to {publish_dir} failed")

    stats = table.statistics()
    click.echo(format_summary(stats))

    try:
        report_path = write_run_report(
            run_id, started_at,
            {
                "input_path": input_path,
                "output_path": output_path,
                "catalog_version": catalog.version,
                "catalog_hash": catalog.yaml_hash,
            },
            counters, stats, Path(reports_dir),
        )
    except OSError as exc:
        click.echo(f"[{run_id}] WARNING: run report could not be written: {exc}", err=True)
        return
    click.echo(f"[{run_id}] Run report: {report_path}")


if __name__ == "__main__":
    main()
