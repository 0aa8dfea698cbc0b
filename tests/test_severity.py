# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Tests for the severity scale."""

import itertools

import pytest

from copilot_eventlog.severity import LEVELS, Severity, parse_severity, rank


def test_levels_are_ordered():
    """Test the fixed order and ranks of the scale."""
    assert [level.name for level in LEVELS] == ["DEBUG", "INFO", "WARN", "ERROR", "FATAL"]
    assert [rank(level) for level in LEVELS] == [1, 2, 3, 4, 5]


def test_rank_order_matches_position():
    """rank(a) < rank(b) iff a precedes b in the scale."""
    for a, b in itertools.product(LEVELS, repeat=2):
        assert (rank(a) < rank(b)) == (LEVELS.index(a) < LEVELS.index(b))


def test_labels_and_remote_names():
    assert [level.label for level in LEVELS] == ["DBG", "INF", "WRN", "ERR", "FTL"]
    assert Severity.WARN.remote_name == "warning"
    assert Severity.FATAL.remote_name == "fatal"


@pytest.mark.parametrize(
    "value,expected",
    [
        ("debug", Severity.DEBUG),
        ("INFO", Severity.INFO),
        (" warn ", Severity.WARN),
        ("WARNING", Severity.WARN),
        ("critical", Severity.FATAL),
        ("4", Severity.ERROR),
        (5, Severity.FATAL),
        (Severity.INFO, Severity.INFO),
    ],
)
def test_parse_severity(value, expected):
    assert parse_severity(value) is expected


@pytest.mark.parametrize("value", ["verbose", 0, 6, True, None, 2.5])
def test_parse_severity_rejects_invalid(value):
    with pytest.raises(ValueError, match="Invalid severity"):
        parse_severity(value)
