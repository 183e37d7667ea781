"""
Shared fixtures for the tabjoin test suite.

Author: Daniel Edge
"""

import pytest

from tabjoin.core.table import Table
from tabjoin.steps.base import RunContext


@pytest.fixture
def write_tab(tmp_path):
    """
    Return a helper that writes rows as a tab-delimited file under tmp_path.

    Usage:
        path = write_tab("main.tbl", [["id", "name"], ["k1", "alpha"]])
    """
    def _write(name, rows):
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8", newline="\n") as f:
            for row in rows:
                f.write("\t".join(row) + "\n")
        return path
    return _write


@pytest.fixture
def write_labels(tmp_path):
    """Return a helper that writes a one-label-per-line file."""
    def _write(labels, name="labels.txt"):
        path = tmp_path / name
        path.write_text("\n".join(labels) + "\n", encoding="utf-8")
        return path
    return _write


@pytest.fixture
def join_left():
    """Left-hand table from the join examples: keys A, B, C with column x."""
    table = Table(["id", "x"])
    table.add_record("A", ["1"])
    table.add_record("B", ["2"])
    table.add_record("C", ["3"])
    return table


@pytest.fixture
def context():
    """Seeded run context."""
    return RunContext.create(seed=12345)
