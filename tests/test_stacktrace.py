# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Tests for call-stack capture and trimming."""

from pathlib import Path

from copilot_eventlog.event import Frame
from copilot_eventlog.stacktrace import FACADE_MODULE, capture_stack, filter_frames


def _frame(module: str, lineno: int = 1) -> Frame:
    return Frame(module=module, function="f", abs_path=f"/src/{module}.py", lineno=lineno)


def test_facade_module_is_package_name():
    assert FACADE_MODULE == "copilot_eventlog"


def test_trailing_facade_frames_are_trimmed():
    """Five frames with the two innermost in the facade leave three."""
    frames = [
        _frame("app.main"),
        _frame("app.service"),
        _frame("app.handler"),
        _frame("copilot_eventlog.context"),
        _frame("copilot_eventlog.registry"),
    ]

    filtered = filter_frames(frames)

    assert len(filtered) == 3
    assert filtered[-1].module == "app.handler"


def test_package_module_itself_is_trimmed():
    frames = [_frame("app.main"), _frame("copilot_eventlog")]

    assert [f.module for f in filter_frames(frames)] == ["app.main"]


def test_only_contiguous_tail_is_trimmed():
    frames = [
        _frame("app.main"),
        _frame("copilot_eventlog.registry"),
        _frame("app.callback"),
        _frame("copilot_eventlog.registry"),
    ]

    filtered = filter_frames(frames)

    assert [f.module for f in filtered] == ["app.main", "copilot_eventlog.registry", "app.callback"]


def test_similarly_named_module_is_kept():
    frames = [_frame("app.main"), _frame("copilot_eventlog_extras.plugin")]

    assert len(filter_frames(frames)) == 2


def test_all_facade_frames_keep_outermost():
    frames = [_frame("copilot_eventlog"), _frame("copilot_eventlog.context"), _frame("copilot_eventlog.registry")]

    filtered = filter_frames(frames)

    assert filtered == (frames[0],)


def test_empty_stack():
    assert filter_frames([]) == ()


def test_capture_stack_innermost_frame_is_caller():
    frames = capture_stack()

    innermost = frames[-1]
    assert innermost.function == "test_capture_stack_innermost_frame_is_caller"
    assert Path(innermost.abs_path).name == "test_stacktrace.py"
    assert innermost.context_line == "frames = capture_stack()"
    assert innermost.module == __name__


def test_capture_stack_skip_and_limit():
    def helper():
        return capture_stack(skip=1, limit=2)

    frames = helper()

    assert len(frames) == 2
    assert frames[-1].function == "test_capture_stack_skip_and_limit"
