# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Keyword-argument logger interface backed by a destination registry."""

import sys
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Optional

from .severity import Severity

if TYPE_CHECKING:
    from .registry import DestinationRegistry


class Logger(ABC):
    """Abstract base class for loggers taking structured keyword data."""

    @abstractmethod
    def debug(self, message: str, **kwargs: Any) -> None:
        pass

    @abstractmethod
    def info(self, message: str, **kwargs: Any) -> None:
        pass

    @abstractmethod
    def warning(self, message: str, **kwargs: Any) -> None:
        pass

    @abstractmethod
    def error(self, message: str, **kwargs: Any) -> None:
        pass

    @abstractmethod
    def exception(self, message: str, **kwargs: Any) -> None:
        """Log an error message from inside an exception handler."""
        pass


class EventLogger(Logger):
    """Logger that broadcasts through a destination registry.

    Keyword arguments become a context group named after the logger, so
    ``EventLogger("ingestion").info("Fetched", count=3)`` renders as
    ``Fetched count=3`` on line-oriented destinations.

    Args:
        name: Logger name, used as the context group name
        registry: Registry to broadcast to (default: the package registry)
    """

    def __init__(self, name: str = "copilot", registry: Optional["DestinationRegistry"] = None):
        self.name = name
        self._registry = registry

    @property
    def registry(self) -> "DestinationRegistry":
        if self._registry is None:
            from . import get_registry

            return get_registry()
        return self._registry

    def _log(self, severity: Severity, message: str, **kwargs: Any) -> None:
        error = kwargs.pop("error", None)
        exc_info = kwargs.pop("exc_info", None)
        if exc_info is True:
            error = error or sys.exc_info()[1]
        elif isinstance(exc_info, BaseException):
            error = exc_info
        elif isinstance(exc_info, tuple) and len(exc_info) == 3:
            error = exc_info[1]

        contexts = {self.name: kwargs} if kwargs else None
        self.registry.capture(severity, message, error=error, contexts=contexts)

    def debug(self, message: str, **kwargs: Any) -> None:
        self._log(Severity.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        self._log(Severity.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._log(Severity.WARN, message, **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self._log(Severity.ERROR, message, **kwargs)

    def exception(self, message: str, **kwargs: Any) -> None:
        kwargs.setdefault("exc_info", True)
        self._log(Severity.ERROR, message, **kwargs)
