# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Test fixtures for copilot_eventlog."""

from io import StringIO

import pytest

import copilot_eventlog
from copilot_eventlog import (
    Colors,
    DestinationRegistry,
    IOTransport,
    RemoteTransport,
    SilentSink,
)


class ExitRecorder:
    """Stand-in for sys.exit that records the requested status."""

    def __init__(self):
        self.calls: list[int] = []

    def __call__(self, status: int) -> None:
        self.calls.append(status)


@pytest.fixture
def exit_recorder() -> ExitRecorder:
    return ExitRecorder()


@pytest.fixture
def registry(exit_recorder: ExitRecorder) -> DestinationRegistry:
    """Empty registry whose fatal path records the exit instead of exiting."""
    return DestinationRegistry(flush_timeout=0.5, exit_func=exit_recorder)


@pytest.fixture
def make_silent():
    """Factory creating (sink, transport) pairs at a given threshold."""

    def _make(level="DEBUG", endpoint="memory://"):
        sink = SilentSink(endpoint=endpoint)
        return sink, RemoteTransport(sink, min_level=level)

    return _make


@pytest.fixture
def streams():
    """Plain (uncolored) IO transport writing to in-memory streams."""
    stdout, stderr = StringIO(), StringIO()
    transport = IOTransport(stdout=stdout, stderr=stderr, colors=Colors())
    return transport, stdout, stderr


@pytest.fixture
def package_registry(registry: DestinationRegistry):
    """Install ``registry`` as the package-level registry for one test."""
    previous = copilot_eventlog.set_registry(registry)
    yield registry
    copilot_eventlog.set_registry(previous)
