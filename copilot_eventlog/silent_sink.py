# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""In-memory remote sink for testing."""

import threading
from typing import Any, Mapping, Optional

from .event import StructuredEvent
from .sentry_transport import RemoteSink
from .severity import SeverityLike, parse_severity


class SilentSink(RemoteSink):
    """Remote sink that stores events in memory without output.

    Useful for testing to verify what a destination received.
    """

    def __init__(self, endpoint: Optional[str] = "memory://"):
        self._endpoint = endpoint
        self.options: dict[str, Any] = {}
        self.events: list[StructuredEvent] = []
        self.flush_calls: list[float] = []
        self._lock = threading.Lock()

    def configure(self, options: Optional[Mapping[str, Any]] = None) -> None:
        self.options = dict(options or {})

    @property
    def endpoint(self) -> Optional[str]:
        return self._endpoint

    def send(self, event: StructuredEvent) -> None:
        with self._lock:
            self.events.append(event)

    def flush(self, timeout: float) -> bool:
        self.flush_calls.append(timeout)
        return True

    def clear(self) -> None:
        """Clear all stored events."""
        with self._lock:
            self.events.clear()

    def get_events(self, level: Optional[SeverityLike] = None) -> list[StructuredEvent]:
        """Get stored events, optionally filtered by severity.

        Args:
            level: Optional severity to filter by

        Returns:
            List of events
        """
        if level is None:
            return list(self.events)
        severity = parse_severity(level)
        return [event for event in self.events if event.severity == severity]

    def has_message(self, message: str, level: Optional[SeverityLike] = None) -> bool:
        """Check if an event containing ``message`` was received.

        Args:
            message: Substring to search for
            level: Optional severity to filter by

        Returns:
            True if found, False otherwise
        """
        return any(message in event.message for event in self.get_events(level))
