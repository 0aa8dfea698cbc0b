# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Structured event built once per terminal log call."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any, Mapping, Optional

from .severity import Severity

LOGGER_NAME = "copilot_eventlog"

# Environment metadata groups; kept on the event but hidden from line output.
RESERVED_CONTEXTS = frozenset({"os", "device", "runtime"})


def build_message(*args: Any) -> str:
    """Concatenate print-style arguments into a message.

    Arguments are converted with ``str()`` and joined with no separator,
    so ``build_message("retry ", 3, "/", 5)`` gives ``"retry 3/5"``.
    """
    return "".join(str(arg) for arg in args)


@dataclass(frozen=True)
class Frame:
    """A single call-stack frame."""

    module: str
    function: str
    abs_path: str
    lineno: int
    context_line: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "module": self.module,
            "function": self.function,
            "abs_path": self.abs_path,
            "lineno": self.lineno,
            "context_line": self.context_line,
        }


@dataclass(frozen=True)
class ExceptionInfo:
    """Error attached to an event, with the call stack captured at log time."""

    type: str
    value: str
    module: Optional[str] = None
    stacktrace: tuple[Frame, ...] = ()

    @classmethod
    def from_error(cls, error: BaseException, frames: tuple[Frame, ...] = ()) -> "ExceptionInfo":
        error_type = type(error)
        return cls(
            type=error_type.__qualname__,
            value=str(error),
            module=error_type.__module__,
            stacktrace=tuple(frames),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "value": self.value,
            "module": self.module,
            "stacktrace": [frame.to_dict() for frame in self.stacktrace],
        }


def _freeze_contexts(
    contexts: Optional[Mapping[str, Mapping[str, Any]]],
) -> Mapping[str, Mapping[str, Any]]:
    if not contexts:
        return MappingProxyType({})
    return MappingProxyType(
        {name: MappingProxyType(dict(values)) for name, values in contexts.items()}
    )


@dataclass(frozen=True)
class StructuredEvent:
    """Immutable record describing one log occurrence.

    Attributes:
        severity: Severity of the call that produced the event
        message: Concatenated message text
        contexts: Read-only mapping of context group name to key/value pairs
        exception: Attached error, if any
        timestamp: Creation time (UTC)
        logger: Identifier of the logging facade
        event_id: Unique identifier, also used as the remote event id
    """

    severity: Severity
    message: str
    contexts: Mapping[str, Mapping[str, Any]] = field(default_factory=dict)
    exception: Optional[ExceptionInfo] = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    logger: str = LOGGER_NAME
    event_id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def __post_init__(self) -> None:
        object.__setattr__(self, "contexts", _freeze_contexts(self.contexts))

    @property
    def has_error(self) -> bool:
        return self.exception is not None

    def to_dict(self) -> dict[str, Any]:
        """Return a plain, JSON-serializable representation of the event."""
        data: dict[str, Any] = {
            "event_id": self.event_id,
            "timestamp": self.timestamp.isoformat().replace("+00:00", "Z"),
            "level": self.severity.name,
            "logger": self.logger,
            "message": self.message,
        }
        if self.contexts:
            data["contexts"] = {name: dict(values) for name, values in self.contexts.items()}
        if self.exception is not None:
            data["exception"] = self.exception.to_dict()
        return data

    def to_sentry_event(self) -> dict[str, Any]:
        """Return the event in the payload shape accepted by the Sentry client."""
        payload: dict[str, Any] = {
            "event_id": self.event_id,
            "timestamp": self.timestamp.isoformat(),
            "level": self.severity.remote_name,
            "logger": self.logger,
            "message": self.message,
        }
        if self.contexts:
            payload["contexts"] = {name: dict(values) for name, values in self.contexts.items()}
        if self.exception is not None:
            payload["exception"] = {
                "values": [
                    {
                        "type": self.exception.type,
                        "value": self.exception.value,
                        "module": self.exception.module,
                        "stacktrace": {
                            "frames": [
                                {
                                    "module": frame.module,
                                    "function": frame.function,
                                    "abs_path": frame.abs_path,
                                    "filename": frame.abs_path,
                                    "lineno": frame.lineno,
                                    "context_line": frame.context_line,
                                    "in_app": True,
                                }
                                for frame in self.exception.stacktrace
                            ]
                        },
                    }
                ]
            }
        return payload
