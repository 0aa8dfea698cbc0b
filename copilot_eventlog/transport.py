# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Abstract transport interface."""

from abc import ABC, abstractmethod
from typing import Any, Mapping, Optional

from .event import StructuredEvent
from .severity import Severity, SeverityLike, parse_severity


class Transport(ABC):
    """Delivery strategy bound to a destination."""

    @abstractmethod
    def configure(self, options: Optional[Mapping[str, Any]] = None) -> None:
        """Apply transport options after construction.

        Args:
            options: Transport-specific options
        """
        pass

    @abstractmethod
    def receive(self, event: StructuredEvent) -> None:
        """Render or deliver an event, or drop it if below the threshold.

        Args:
            event: The event being broadcast
        """
        pass

    @abstractmethod
    def flush(self, timeout: float) -> bool:
        """Wait for pending deliveries.

        Args:
            timeout: Maximum number of seconds to wait

        Returns:
            True if everything was delivered within the timeout
        """
        pass

    def close(self) -> None:
        """Release resources held by the transport."""
        pass

    @property
    def has_endpoint(self) -> bool:
        """Whether events leave the process somewhere real."""
        return True

    @property
    def is_remote(self) -> bool:
        return False


class LeveledTransport(Transport):
    """Transport with a mutable minimum severity threshold."""

    def __init__(self, min_level: SeverityLike = Severity.DEBUG):
        self.min_level = parse_severity(min_level)

    def set_level(self, level: SeverityLike) -> None:
        self.min_level = parse_severity(level)

    def accepts(self, event: StructuredEvent) -> bool:
        """Return True if the event is at or above the threshold."""
        return event.severity >= self.min_level
