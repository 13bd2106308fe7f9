"""Integration test fixtures.

A small scoring-table text dump in the layout produced by flattening the
World Athletics PDF: bilingual section headings, column headers with the
points column on either side, glued cells and page footers.
"""

from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

SAMPLE_DUMP = textwrap.dedent("""\
    World Athletics Scoring Tables of Athletics
    Edition 2025

    MEN / HOMMES
    Sprints
    Points 100m 200m 300m
    1400 9.46 19.03 30.22
    1399 9.47 19.05 -
    1190 10.00 20.40 -
    abc 10.01 20.42
    Page 3

    Jumps / Sauts
    Points HJ PV LJ TJ
    1400 2.45 6.30 8.95 18.30
    1190 2.22 5.60 8.1017.10
    1000 - 5.00 7.40 -
    ©

    Relays / Relais
    4x100m 4x400m 4x400mix Points
    37.50 2:55.00 3:09.34 1250
    38.00 2:58.00 - 1200

    WOMEN / FEMMES
    Sprints
    Points 100m 200m
    1400 10.40 21.10
    1190 10.9522.30

    Long Distance / Fond
    Points Marathon Half-Marathon Foo
    1200 2:20:00 1:05:00 1.00
""")


@pytest.fixture
def sample_text() -> str:
    return SAMPLE_DUMP


@pytest.fixture
def sample_dump(tmp_path) -> Path:
    path = tmp_path / "scoring_tables.txt"
    path.write_text(SAMPLE_DUMP, encoding="utf-8")
    return path
