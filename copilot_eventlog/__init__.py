# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Copilot-for-Consensus Event Log.

A structured-event logging facade that fans each log call out to multiple
named destinations. Every destination has its own minimum severity, its own
rendering and its own delivery mechanism (console/file lines or a remote
sink such as Sentry).

A console destination named ``console`` is registered at import time, so
logging works without configuration.

Example:
    >>> import copilot_eventlog as eventlog
    >>> eventlog.info("Service started")
    >>> eventlog.set("user", "alice").warn("Quota at ", 91, "%")
    >>> eventlog.begin("request").set("id", "r-1").group("db").set("table", "archives").info("Query done")
    >>>
    >>> from copilot_eventlog.config import AdapterConfig_Destination, DriverConfig_Destination_File
    >>> eventlog.add_destination(
    ...     "file",
    ...     AdapterConfig_Destination(
    ...         destination_type="file",
    ...         driver=DriverConfig_Destination_File(out_file="/var/log/service.log", level="INFO"),
    ...     ),
    ... )
    >>> eventlog.set_level("console", "WARN")

Message arguments are concatenated with no separator.
"""

from typing import Any, NoReturn, Optional

from .context import ContextBuilder
from .event import StructuredEvent, build_message
from .exceptions import DuplicateDestinationError, EventLogError, LogFileOpenError, TransportConfigurationError
from .io_transport import Colors, IOTransport, create_console_transport, create_file_transport
from .logger import EventLogger, Logger
from .registry import DEFAULT_CONTEXT, FLUSH_TIMEOUT, DestinationRegistry
from .sentry_transport import RemoteSink, RemoteTransport, SentrySink, create_sentry_transport
from .severity import LEVELS, Severity, SeverityLike, parse_severity, rank
from .silent_sink import SilentSink
from .transport import LeveledTransport, Transport

__version__ = "0.1.0"

_registry = DestinationRegistry.with_console()


def get_registry() -> DestinationRegistry:
    """Return the process-wide registry used by the package-level functions."""
    return _registry


def set_registry(registry: DestinationRegistry) -> DestinationRegistry:
    """Replace the process-wide registry and return the previous one."""
    global _registry
    previous = _registry
    _registry = registry
    return previous


def add_destination(name: str, transport: Any) -> Transport:
    """Register a destination from a Transport or an AdapterConfig_Destination."""
    return _registry.add_destination(name, transport)


def remove_destination(name: str) -> None:
    _registry.remove_destination(name)


def set_level(name: str, level: SeverityLike) -> None:
    """Set the minimum severity of a destination."""
    _registry.set_level(name, level)


def flush(timeout: Optional[float] = None) -> bool:
    return _registry.flush(timeout)


def shutdown() -> None:
    """Flush and close every destination of the process-wide registry."""
    _registry.close()


def begin(group_name: str) -> ContextBuilder:
    """Start a context builder whose current group is ``group_name``."""
    return ContextBuilder(group_name)


def set(key: str, value: Any) -> ContextBuilder:  # noqa: A001
    """Start a builder with ``key`` set in the default context group."""
    return ContextBuilder(DEFAULT_CONTEXT).set(key, value)


def debug(*message: Any) -> StructuredEvent:
    return _registry.capture(Severity.DEBUG, build_message(*message))


def info(*message: Any) -> StructuredEvent:
    return _registry.capture(Severity.INFO, build_message(*message))


def warn(*message: Any) -> StructuredEvent:
    return _registry.capture(Severity.WARN, build_message(*message))


warning = warn


def error(err: Optional[BaseException], *message: Any) -> StructuredEvent:
    return _registry.capture(Severity.ERROR, build_message(*message), error=err)


def fatal(err: Optional[BaseException], *message: Any) -> NoReturn:
    """Broadcast a FATAL event, flush every destination and exit with status 1."""
    _registry.fatal(err, build_message(*message))


__all__ = [
    "__version__",
    "Colors",
    "ContextBuilder",
    "DestinationRegistry",
    "DuplicateDestinationError",
    "EventLogError",
    "EventLogger",
    "FLUSH_TIMEOUT",
    "IOTransport",
    "LEVELS",
    "LeveledTransport",
    "LogFileOpenError",
    "Logger",
    "RemoteSink",
    "RemoteTransport",
    "SentrySink",
    "Severity",
    "SilentSink",
    "StructuredEvent",
    "Transport",
    "TransportConfigurationError",
    "add_destination",
    "begin",
    "build_message",
    "create_console_transport",
    "create_file_transport",
    "create_sentry_transport",
    "debug",
    "error",
    "fatal",
    "flush",
    "get_registry",
    "info",
    "parse_severity",
    "rank",
    "remove_destination",
    "set",
    "set_level",
    "set_registry",
    "shutdown",
    "warn",
    "warning",
]
