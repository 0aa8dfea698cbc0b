# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Console and file transport rendering events as text lines."""

import io
import json
import logging
import sys
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional, Sequence, TextIO

from .event import RESERVED_CONTEXTS, Frame, StructuredEvent
from .exceptions import LogFileOpenError
from .severity import Severity, SeverityLike
from .transport import LeveledTransport

logger = logging.getLogger(__name__)

CONSOLE_TIME_FORMAT = "%H:%M:%S"
FILE_TIME_FORMAT = "%Y/%m/%d %H:%M:%S"


def _default_level_colors() -> dict[Severity, str]:
    return {
        Severity.DEBUG: "\033[95m",
        Severity.INFO: "\033[92m",
        Severity.WARN: "\033[93m",
        Severity.ERROR: "\033[31m",
        Severity.FATAL: "\033[91m",
    }


@dataclass
class Colors:
    """ANSI escape sequences used by line rendering.

    Every field defaults to an empty string, which renders plain text.
    """

    reset: str = ""
    time: str = ""
    message: str = ""
    context_key: str = ""
    stack: str = ""
    levels: dict[Severity, str] = field(default_factory=dict)

    @classmethod
    def console(cls) -> "Colors":
        """Default terminal palette."""
        return cls(
            reset="\033[0m",
            time="\033[90m",
            message="\033[37m",
            context_key="\033[36m",
            stack="\033[31m",
            levels=_default_level_colors(),
        )

    def level(self, severity: Severity) -> str:
        return self.levels.get(severity, "")


def _render_value(value: Any) -> str:
    if isinstance(value, str):
        return value
    try:
        return json.dumps(value, ensure_ascii=False, default=str)
    except (TypeError, ValueError):
        return str(value)


def render_contexts(
    contexts: Mapping[str, Mapping[str, Any]],
    colors: Optional[Colors] = None,
) -> str:
    """Render context groups as `` key=value`` pairs, skipping reserved groups."""
    colors = colors or Colors()
    parts = []
    for group_name, values in contexts.items():
        if group_name in RESERVED_CONTEXTS:
            continue
        for key, value in values.items():
            parts.append(f" {colors.context_key}{key}={colors.reset}{_render_value(value)}")
    return "".join(parts)


def render_stacktrace(frames: Sequence[Frame], colors: Optional[Colors] = None) -> str:
    """Render frames as an indented ``Stacktrace:`` block."""
    colors = colors or Colors()
    lines = [f"\n{colors.stack}Stacktrace:"]
    for frame in frames:
        if frame.context_line:
            lines.append(f"\t{frame.abs_path}:{frame.lineno} >>  {frame.context_line.strip()}")
        else:
            lines.append(f"\t{frame.abs_path}:{frame.lineno}")
    return "\n".join(lines)


def render_line(event: StructuredEvent, colors: Optional[Colors] = None) -> str:
    """Render the body of a line-mode log entry (no label or timestamp)."""
    colors = colors or Colors()
    out = io.StringIO()
    out.write(event.message)
    if event.exception is not None:
        out.write(" | ")
        out.write(event.exception.value)
    out.write(render_contexts(event.contexts, colors))
    if event.exception is not None:
        out.write(render_stacktrace(event.exception.stacktrace, colors))
    out.write(colors.reset)
    return out.getvalue()


def render_raw(event: StructuredEvent) -> str:
    """Render the whole event as indented JSON."""
    return json.dumps(event.to_dict(), indent="\t", ensure_ascii=False, default=str)


class IOTransport(LeveledTransport):
    """Transport writing human-readable lines to text streams.

    DEBUG, INFO and WARN go to the standard stream; ERROR and FATAL go to
    the error stream. A ``None`` stream resolves to ``sys.stdout`` or
    ``sys.stderr`` at write time.
    """

    def __init__(
        self,
        stdout: Optional[TextIO] = None,
        stderr: Optional[TextIO] = None,
        min_level: SeverityLike = Severity.DEBUG,
        colors: Optional[Colors] = None,
        raw: bool = False,
        time_format: str = CONSOLE_TIME_FORMAT,
        owned_streams: Sequence[TextIO] = (),
    ):
        super().__init__(min_level)
        self._stdout = stdout
        self._stderr = stderr
        self.colors = colors if colors is not None else Colors()
        self.raw = raw
        self.time_format = time_format
        self._owned_streams = list(owned_streams)
        self._lock = threading.Lock()

    def configure(self, options: Optional[Mapping[str, Any]] = None) -> None:
        if not options:
            return
        if "raw" in options:
            self.raw = bool(options["raw"])
        if "time_format" in options:
            self.time_format = str(options["time_format"])
        if "level" in options and options["level"] is not None:
            self.set_level(options["level"])

    def set_colors(self, colors: Colors) -> None:
        self.colors = colors

    def stream_for(self, severity: Severity) -> TextIO:
        """Return the stream events of the given severity are written to."""
        if severity >= Severity.ERROR:
            return self._stderr if self._stderr is not None else sys.stderr
        return self._stdout if self._stdout is not None else sys.stdout

    def format(self, event: StructuredEvent) -> str:
        """Return the complete line(s) for an event, without trailing newline."""
        body = render_raw(event) if self.raw else render_line(event, self.colors)
        timestamp = event.timestamp.astimezone().strftime(self.time_format)
        colors = self.colors
        return (
            f"{colors.level(event.severity)}{event.severity.label}{colors.reset} "
            f"{colors.time}{timestamp}{colors.reset} "
            f"{colors.message}{body}"
        )

    def receive(self, event: StructuredEvent) -> None:
        if not self.accepts(event):
            return
        line = self.format(event)
        stream = self.stream_for(event.severity)
        with self._lock:
            stream.write(line + "\n")

    def flush(self, timeout: float) -> bool:
        streams = [self.stream_for(Severity.INFO)]
        error_stream = self.stream_for(Severity.ERROR)
        if error_stream is not streams[0]:
            streams.append(error_stream)
        with self._lock:
            for stream in streams:
                if stream.closed:
                    continue
                try:
                    stream.flush()
                except (OSError, ValueError) as e:
                    logger.warning(f"Failed to flush log stream: {e}")
        return True

    def close(self) -> None:
        with self._lock:
            for stream in self._owned_streams:
                if not stream.closed:
                    stream.close()
            self._owned_streams = []


def create_console_transport(
    stdout: Optional[TextIO] = None,
    stderr: Optional[TextIO] = None,
    min_level: SeverityLike = Severity.DEBUG,
    colors: Optional[Colors] = None,
    raw: bool = False,
) -> IOTransport:
    """Create a colored console transport with a time-only line header.

    Args:
        stdout: Stream for DEBUG/INFO/WARN (default: sys.stdout at write time)
        stderr: Stream for ERROR/FATAL (default: sys.stderr at write time)
        min_level: Minimum severity to render
        colors: Palette to use instead of the default terminal colors
        raw: Dump events as indented JSON instead of formatted lines

    Returns:
        Configured IOTransport
    """
    return IOTransport(
        stdout=stdout,
        stderr=stderr,
        min_level=min_level,
        colors=colors if colors is not None else Colors.console(),
        raw=raw,
        time_format=CONSOLE_TIME_FORMAT,
    )


def _open_append(path: Path) -> TextIO:
    path.parent.mkdir(parents=True, exist_ok=True)
    return open(path, "a", encoding="utf-8")


def create_file_transport(
    out_file: str,
    err_file: Optional[str] = None,
    min_level: SeverityLike = Severity.DEBUG,
    raw: bool = False,
) -> IOTransport:
    """Create an uncolored transport appending to log files.

    Both severities share one handle when ``err_file`` is omitted or names
    the same file as ``out_file``.

    Args:
        out_file: File for DEBUG/INFO/WARN lines
        err_file: File for ERROR/FATAL lines
        min_level: Minimum severity to render
        raw: Dump events as indented JSON instead of formatted lines

    Returns:
        Configured IOTransport

    Raises:
        LogFileOpenError: If a file cannot be opened
    """
    out_path = Path(out_file)
    err_path = Path(err_file) if err_file else out_path

    try:
        stdout = _open_append(out_path)
    except OSError as e:
        raise LogFileOpenError(str(out_path), e) from e

    if err_path.resolve() == out_path.resolve():
        stderr = stdout
        owned = [stdout]
    else:
        try:
            stderr = _open_append(err_path)
        except OSError as e:
            stdout.close()
            raise LogFileOpenError(str(err_path), e) from e
        owned = [stdout, stderr]

    return IOTransport(
        stdout=stdout,
        stderr=stderr,
        min_level=min_level,
        colors=Colors(),
        raw=raw,
        time_format=FILE_TIME_FORMAT,
        owned_streams=owned,
    )
