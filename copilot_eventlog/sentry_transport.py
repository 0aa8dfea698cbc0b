# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Remote transport and the Sentry-backed remote sink."""

import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Callable, Mapping, Optional

import sentry_sdk

from .event import StructuredEvent
from .exceptions import TransportConfigurationError
from .severity import Severity, SeverityLike
from .transport import LeveledTransport

logger = logging.getLogger(__name__)


class RemoteSink(ABC):
    """External collaborator responsible for off-process delivery."""

    @abstractmethod
    def configure(self, options: Optional[Mapping[str, Any]] = None) -> None:
        """Configure the sink once, before the first event is sent."""
        pass

    @abstractmethod
    def send(self, event: StructuredEvent) -> None:
        """Deliver (or enqueue) an event."""
        pass

    @abstractmethod
    def flush(self, timeout: float) -> bool:
        """Wait for queued events; return True if drained within timeout."""
        pass

    @property
    def endpoint(self) -> Optional[str]:
        """Where events are delivered, or None when nothing leaves the process."""
        return None

    def close(self) -> None:
        pass


class SentrySink(RemoteSink):
    """Remote sink delivering events through a ``sentry_sdk.Client``.

    The client is created when the sink is configured. Without a DSN the
    client is inert: events are accepted and silently discarded.

    Example:
        >>> sink = SentrySink()
        >>> sink.configure({"dsn": "https://key@sentry.example.com/1"})
        >>> transport = RemoteTransport(sink, min_level="WARN")
    """

    def __init__(self, client_factory: Callable[..., Any] = sentry_sdk.Client):
        self._client_factory = client_factory
        self._client: Any = None
        self.dsn: Optional[str] = None
        self.environment: Optional[str] = None
        self.release: Optional[str] = None

    def configure(self, options: Optional[Mapping[str, Any]] = None) -> None:
        options = dict(options or {})
        self.dsn = options.pop("dsn", None) or None
        self.environment = options.pop("environment", None)
        self.release = options.pop("release", None)
        options.setdefault("default_integrations", False)
        try:
            self._client = self._client_factory(
                dsn=self.dsn,
                environment=self.environment,
                release=self.release,
                **options,
            )
        except Exception as e:
            raise TransportConfigurationError(f"Failed to configure Sentry client: {e}") from e

    @property
    def endpoint(self) -> Optional[str]:
        return self.dsn

    def send(self, event: StructuredEvent) -> None:
        if self._client is None:
            raise RuntimeError("Sentry sink used before configure() was called")
        self._client.capture_event(event.to_sentry_event())

    def flush(self, timeout: float) -> bool:
        if self._client is None or not self.dsn:
            return True
        started = time.monotonic()
        self._client.flush(timeout=timeout)
        return time.monotonic() - started < timeout

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None


class RemoteTransport(LeveledTransport):
    """Transport handing events above its threshold to a remote sink."""

    def __init__(self, sink: RemoteSink, min_level: SeverityLike = Severity.DEBUG):
        super().__init__(min_level)
        self.sink = sink

    def configure(self, options: Optional[Mapping[str, Any]] = None) -> None:
        self.sink.configure(options)

    def receive(self, event: StructuredEvent) -> None:
        if not self.accepts(event):
            return
        self.sink.send(event)

    def flush(self, timeout: float) -> bool:
        return self.sink.flush(timeout)

    def close(self) -> None:
        self.sink.close()

    @property
    def has_endpoint(self) -> bool:
        return bool(self.sink.endpoint)

    @property
    def is_remote(self) -> bool:
        return True


def create_sentry_transport(
    dsn: Optional[str] = None,
    min_level: SeverityLike = Severity.DEBUG,
    environment: Optional[str] = None,
    release: Optional[str] = None,
) -> RemoteTransport:
    """Create and configure a remote transport backed by Sentry.

    Args:
        dsn: Sentry DSN; empty means events are not delivered
        min_level: Minimum severity to deliver
        environment: Sentry environment name
        release: Release identifier attached to events

    Returns:
        Configured RemoteTransport

    Raises:
        TransportConfigurationError: If the Sentry client rejects the options
    """
    transport = RemoteTransport(SentrySink(), min_level=min_level)
    transport.configure({"dsn": dsn, "environment": environment, "release": release})
    return transport
