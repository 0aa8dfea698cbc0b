# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Exceptions raised by destination configuration."""


class EventLogError(Exception):
    """Base exception for event log errors."""
    pass


class DuplicateDestinationError(EventLogError):
    """Raised when a destination name is already registered."""

    def __init__(self, name: str):
        super().__init__(f"Destination key already exists: {name}")
        self.name = name


class TransportConfigurationError(EventLogError):
    """Raised when a transport cannot be constructed or configured."""
    pass


class LogFileOpenError(TransportConfigurationError):
    """Raised when a file destination cannot open one of its log files."""

    def __init__(self, path: str, reason: OSError):
        super().__init__(f"Cannot open log file {path}: {reason}")
        self.path = path
        self.reason = reason
