# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Chainable builder for context groups, ending in a severity call."""

from typing import TYPE_CHECKING, Any, NoReturn, Optional

from .event import StructuredEvent, build_message
from .severity import Severity

if TYPE_CHECKING:
    from .registry import DestinationRegistry


class ContextBuilder:
    """Accumulates named context groups for a single log call.

    Not safe for concurrent use: build one chain and finish it with exactly
    one terminal call.

    Example:
        >>> begin("request").set("id", "r-1").set("attempt", 2).info("Request retried")
    """

    def __init__(self, group_name: str, registry: Optional["DestinationRegistry"] = None):
        self._registry = registry
        self._contexts: dict[str, dict[str, Any]] = {}
        self._current = group_name
        self._contexts.setdefault(group_name, {})

    @property
    def registry(self) -> "DestinationRegistry":
        if self._registry is None:
            from . import get_registry

            return get_registry()
        return self._registry

    @property
    def current_group(self) -> str:
        return self._current

    @property
    def contexts(self) -> dict[str, dict[str, Any]]:
        """Copy of the accumulated groups."""
        return {name: dict(values) for name, values in self._contexts.items()}

    def group(self, group_name: str) -> "ContextBuilder":
        """Switch the current group, creating it if absent."""
        self._current = group_name
        self._contexts.setdefault(group_name, {})
        return self

    def set(self, key: str, value: Any) -> "ContextBuilder":
        """Set a key in the current group (last write wins)."""
        self._contexts[self._current][key] = value
        return self

    def debug(self, *message: Any) -> StructuredEvent:
        return self.registry.capture(Severity.DEBUG, build_message(*message), contexts=self._contexts)

    def info(self, *message: Any) -> StructuredEvent:
        return self.registry.capture(Severity.INFO, build_message(*message), contexts=self._contexts)

    def warn(self, *message: Any) -> StructuredEvent:
        return self.registry.capture(Severity.WARN, build_message(*message), contexts=self._contexts)

    warning = warn

    def error(self, err: Optional[BaseException], *message: Any) -> StructuredEvent:
        return self.registry.capture(
            Severity.ERROR, build_message(*message), error=err, contexts=self._contexts
        )

    def fatal(self, err: Optional[BaseException], *message: Any) -> NoReturn:
        """Broadcast a FATAL event, flush all destinations and exit with status 1."""
        self.registry.fatal(err, build_message(*message), contexts=self._contexts)


def begin(group_name: str, registry: Optional["DestinationRegistry"] = None) -> ContextBuilder:
    """Start a builder whose current group is ``group_name``."""
    return ContextBuilder(group_name, registry=registry)
