# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Call-stack capture and trimming of the facade's own frames."""

import linecache
import sys
from typing import Optional, Sequence

from .event import Frame

FACADE_MODULE = __name__.rpartition(".")[0]


def _belongs_to(module: str, package: str) -> bool:
    return module == package or module.startswith(package + ".")


def capture_stack(skip: int = 0, limit: Optional[int] = None) -> tuple[Frame, ...]:
    """Capture the current call stack, oldest frame first.

    Args:
        skip: Number of innermost frames to drop in addition to this function
        limit: Optional maximum number of frames to keep (innermost kept)

    Returns:
        Tuple of frames; the last one is the innermost
    """
    frames: list[Frame] = []
    current = sys._getframe(skip + 1)
    while current is not None:
        code = current.f_code
        lineno = current.f_lineno
        line = linecache.getline(code.co_filename, lineno, current.f_globals).strip()
        frames.append(
            Frame(
                module=current.f_globals.get("__name__", ""),
                function=code.co_name,
                abs_path=code.co_filename,
                lineno=lineno,
                context_line=line or None,
            )
        )
        current = current.f_back
    frames.reverse()
    if limit is not None and len(frames) > limit:
        frames = frames[-limit:]
    return tuple(frames)


def filter_frames(frames: Sequence[Frame], module: str = FACADE_MODULE) -> tuple[Frame, ...]:
    """Trim trailing frames that belong to the logging facade.

    Scans from the innermost frame backward and drops every contiguous frame
    whose module is ``module`` or one of its submodules. The outermost frame
    is always kept, so a stack made only of facade frames keeps one frame.

    Args:
        frames: Frames ordered oldest first
        module: Package name of the facade

    Returns:
        Trimmed frames whose innermost entry is the caller's code
    """
    if not frames:
        return ()
    threshold = len(frames) - 1
    while threshold > 0 and _belongs_to(frames[threshold].module, module):
        threshold -= 1
    return tuple(frames[: threshold + 1])
