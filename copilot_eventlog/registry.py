# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Destination registry and event broadcast."""

import logging
import sys
import threading
import time
from typing import Any, Callable, Mapping, NoReturn, Optional, Union

from .event import ExceptionInfo, StructuredEvent
from .exceptions import DuplicateDestinationError, LogFileOpenError
from .io_transport import create_console_transport
from .severity import Severity, SeverityLike, parse_severity
from .stacktrace import capture_stack, filter_frames
from .transport import LeveledTransport, Transport

logger = logging.getLogger(__name__)

FLUSH_TIMEOUT = 2.0
DEFAULT_CONTEXT = "Default Context"
DEFAULT_DESTINATION = "console"

Contexts = Mapping[str, Mapping[str, Any]]


class DestinationRegistry:
    """Named destinations and the broadcast of events to them.

    The mapping is guarded by a lock; transports are always invoked outside
    of it so a slow destination does not hold up structural changes or
    concurrent log calls.

    Args:
        flush_timeout: Seconds ``fatal`` waits for destinations to flush
        exit_func: Called with the exit status after a fatal event
        clock: Monotonic clock used to share the flush deadline
    """

    def __init__(
        self,
        flush_timeout: float = FLUSH_TIMEOUT,
        exit_func: Callable[[int], Any] = sys.exit,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.flush_timeout = flush_timeout
        self._exit = exit_func
        self._clock = clock
        self._destinations: dict[str, Transport] = {}
        self._lock = threading.RLock()

    @classmethod
    def with_console(cls, **kwargs: Any) -> "DestinationRegistry":
        """Create a registry holding the default console destination."""
        registry = cls(**kwargs)
        with registry._lock:
            registry._destinations[DEFAULT_DESTINATION] = create_console_transport(
                min_level=Severity.DEBUG
            )
        return registry

    # ------------------------------------------------------------------
    # Structural operations
    # ------------------------------------------------------------------

    def add_destination(self, name: str, transport: Union[Transport, Any]) -> Transport:
        """Register a destination.

        A log file that cannot be opened while building from configuration
        is reported as a FATAL event and terminates the process.

        Args:
            name: Unique destination name
            transport: A Transport, or an AdapterConfig_Destination to build one from

        Returns:
            The registered transport

        Raises:
            DuplicateDestinationError: If ``name`` is already registered
            TransportConfigurationError: If the transport cannot be built
        """
        with self._lock:
            if name in self._destinations:
                raise DuplicateDestinationError(name)

        if not isinstance(transport, Transport):
            from .config import create_transport

            try:
                transport = create_transport(transport)
            except LogFileOpenError as e:
                self.fatal(
                    e.reason,
                    f"Cannot open log file {e.path}",
                    contexts={DEFAULT_CONTEXT: {"destination": name, "path": e.path}},
                )

        with self._lock:
            if name in self._destinations:
                transport.close()
                raise DuplicateDestinationError(name)
            self._destinations[name] = transport

        announcement = {DEFAULT_CONTEXT: {"destination": name}}
        if transport.is_remote and not transport.has_endpoint:
            self.capture(
                Severity.WARN,
                "Remote client initialized with empty DSN. No events will be delivered remotely.",
                contexts=announcement,
            )
        else:
            self.capture(Severity.INFO, "Log destination added", contexts=announcement)
        return transport

    def remove_destination(self, name: str) -> None:
        """Remove a destination; warn through the registry if it does not exist."""
        announcement = {DEFAULT_CONTEXT: {"destination": name}}
        if name not in self:
            self.capture(Severity.WARN, "Log destination to remove doesn't exist", contexts=announcement)
            return

        self.capture(
            Severity.INFO,
            "About to remove log destination, no events will be delivered",
            contexts=announcement,
        )
        with self._lock:
            transport = self._destinations.pop(name, None)
        if transport is None:
            return
        try:
            transport.flush(self.flush_timeout)
            transport.close()
        except Exception as e:
            logger.error(f"Failed to close log destination {name}: {type(e).__name__}: {e}")

    def set_level(self, name: str, level: SeverityLike) -> None:
        """Change the threshold of a destination.

        Raises:
            ValueError: If ``level`` is not a valid severity
        """
        severity = parse_severity(level)
        transport = self.get(name)
        if transport is None:
            self.capture(
                Severity.WARN,
                "Cannot set log level, log destination doesn't exist.",
                contexts={DEFAULT_CONTEXT: {"destination": name}},
            )
            return

        self.capture(
            Severity.INFO,
            "Changing log level",
            contexts={DEFAULT_CONTEXT: {"destination": name, "level": severity.name}},
        )
        if isinstance(transport, LeveledTransport):
            transport.set_level(severity)
        else:
            logger.warning(f"Destination {name} does not support a minimum level")

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def get(self, name: str) -> Optional[Transport]:
        with self._lock:
            return self._destinations.get(name)

    def names(self) -> list[str]:
        with self._lock:
            return list(self._destinations)

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._destinations

    def __len__(self) -> int:
        with self._lock:
            return len(self._destinations)

    def _snapshot(self) -> list[tuple[str, Transport]]:
        with self._lock:
            return list(self._destinations.items())

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def broadcast(self, event: StructuredEvent) -> None:
        """Hand an event to every registered destination.

        A failure in one destination is logged and does not prevent
        delivery to the others.
        """
        for name, transport in self._snapshot():
            try:
                transport.receive(event)
            except Exception as e:
                logger.error(
                    f"Log destination {name} failed to receive event: {type(e).__name__}: {e}",
                    exc_info=True,
                )

    def capture(
        self,
        severity: SeverityLike,
        message: str,
        error: Optional[BaseException] = None,
        contexts: Optional[Contexts] = None,
    ) -> StructuredEvent:
        """Build a structured event and broadcast it.

        When an error is attached, the call stack is captured here and
        trimmed of the facade's own frames.

        Returns:
            The broadcast event
        """
        exception = None
        if error is not None:
            frames = filter_frames(capture_stack(skip=1))
            exception = ExceptionInfo.from_error(error, frames)

        event = StructuredEvent(
            severity=parse_severity(severity),
            message=message,
            contexts=contexts or {},
            exception=exception,
        )
        self.broadcast(event)
        return event

    def flush(self, timeout: Optional[float] = None) -> bool:
        """Flush every destination within a shared deadline.

        Args:
            timeout: Seconds for all destinations together (default: flush_timeout)

        Returns:
            True if every destination flushed in time
        """
        timeout = self.flush_timeout if timeout is None else timeout
        deadline = self._clock() + timeout
        completed = True
        for name, transport in self._snapshot():
            remaining = max(0.0, deadline - self._clock())
            try:
                if not transport.flush(remaining):
                    logger.warning(f"Log destination {name} did not flush within {timeout}s")
                    completed = False
            except Exception as e:
                logger.error(f"Log destination {name} failed to flush: {type(e).__name__}: {e}")
                completed = False
        return completed

    def fatal(
        self,
        error: Optional[BaseException],
        message: str,
        contexts: Optional[Contexts] = None,
    ) -> NoReturn:
        """Broadcast a FATAL event, then flush and terminate the process.

        The process terminates even if building the event fails.
        """
        try:
            self.capture(Severity.FATAL, message, error=error, contexts=contexts)
        finally:
            self.terminate()

    def terminate(self, status: int = 1) -> NoReturn:
        """Give destinations a bounded chance to flush, then exit."""
        self.flush(self.flush_timeout)
        self._exit(status)
        raise SystemExit(status)

    def close(self) -> None:
        """Flush and close every destination, then empty the registry."""
        self.flush()
        with self._lock:
            destinations = list(self._destinations.items())
            self._destinations.clear()
        for name, transport in destinations:
            try:
                transport.close()
            except Exception as e:
                logger.error(f"Failed to close log destination {name}: {type(e).__name__}: {e}")
