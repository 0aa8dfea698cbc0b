# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Severity scale shared by events, transports and the registry."""

from enum import IntEnum
from typing import Union


class Severity(IntEnum):
    """Fixed, totally ordered severity levels.

    The integer value is the rank used for threshold comparisons.
    """

    DEBUG = 1
    INFO = 2
    WARN = 3
    ERROR = 4
    FATAL = 5

    @property
    def label(self) -> str:
        """Three-letter prefix used by line-oriented transports."""
        return _LABELS[self]

    @property
    def remote_name(self) -> str:
        """Level name understood by the remote sink."""
        return _REMOTE_NAMES[self]


LEVELS: tuple[Severity, ...] = tuple(Severity)

_LABELS = {
    Severity.DEBUG: "DBG",
    Severity.INFO: "INF",
    Severity.WARN: "WRN",
    Severity.ERROR: "ERR",
    Severity.FATAL: "FTL",
}

_REMOTE_NAMES = {
    Severity.DEBUG: "debug",
    Severity.INFO: "info",
    Severity.WARN: "warning",
    Severity.ERROR: "error",
    Severity.FATAL: "fatal",
}

_ALIASES = {
    "WARNING": Severity.WARN,
    "CRITICAL": Severity.FATAL,
}

SeverityLike = Union[Severity, int, str]


def rank(level: SeverityLike) -> int:
    """Return the numeric rank of a severity."""
    return int(parse_severity(level))


def parse_severity(value: SeverityLike) -> Severity:
    """Coerce a severity name, rank or member into a Severity.

    Args:
        value: Severity member, rank (1..5) or case-insensitive name.
            "WARNING" and "CRITICAL" are accepted as aliases.

    Returns:
        Matching Severity

    Raises:
        ValueError: If the value does not name a severity
    """
    if isinstance(value, Severity):
        return value
    if isinstance(value, bool):
        raise ValueError(f"Invalid severity: {value!r}")
    if isinstance(value, int):
        try:
            return Severity(value)
        except ValueError:
            raise ValueError(
                f"Invalid severity rank: {value}. Must be between 1 and {len(LEVELS)}"
            ) from None
    if isinstance(value, str):
        name = value.strip().upper()
        if name in Severity.__members__:
            return Severity[name]
        if name in _ALIASES:
            return _ALIASES[name]
        if name.isdigit():
            return parse_severity(int(name))
    raise ValueError(
        f"Invalid severity: {value!r}. Must be one of {[level.name for level in LEVELS]}"
    )
