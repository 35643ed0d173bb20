# Park - declarative dotfile symlink manager
# Copyright (C) 2025 Istvan Sarandi
# SPDX-License-Identifier: GPL-3.0-or-later

"""
Utility functions for park.

This module contains general-purpose utilities used throughout park,
including debug logging and path manipulation.
"""

from __future__ import annotations

import os
import sys
from collections.abc import Iterator

VERSION = "0.4.0"
PROGRAM_NAME = "park"

# Debug level and test mode are module-level state
_debug_level = 0
_test_mode = False


def set_debug_level(level: int) -> None:
    """Set verbosity level for debug()."""
    global _debug_level
    _debug_level = level


def get_debug_level() -> int:
    """Get current debug level."""
    return _debug_level


def set_test_mode(on_or_off: bool) -> None:
    """Set test mode on or off."""
    global _test_mode
    _test_mode = bool(on_or_off)


def get_test_mode() -> bool:
    """Get current test mode."""
    return _test_mode


def debug(level: int, *args) -> None:
    """
    Log to STDERR based on debug_level setting.

    Verbosity rules:
        0: errors only
        >= 1: print operations: LINK/UNLINK/MKDIR
        >= 2: print planning summaries (skipped targets, problems)
        >= 3: print per-leaf classification trace
        >= 4: debug helper routines

    Supports two calling conventions:
        debug(level, msg)
        debug(level, indent_level, msg)
    """
    if len(args) >= 2 and isinstance(args[0], int):
        indent_level = args[0]
        msg = args[1]
    elif len(args) >= 1:
        indent_level = 0
        msg = args[0]
    else:
        return

    if _debug_level >= level:
        indent = "    " * indent_level
        if _test_mode:
            print(f"# {indent}{msg}")
        else:
            print(f"{indent}{msg}", file=sys.stderr)


def split_segments(path: str) -> list[str]:
    """
    Split a target path into trie segments.

    Empty and '.' segments are dropped. A leading '/' is kept as its own
    segment so that absolute paths survive a round trip through
    join_segments().
    """
    segments = [s for s in path.split("/") if s not in ("", ".")]
    if path.startswith("/"):
        segments.insert(0, "/")
    return segments


def join_segments(segments: list[str]) -> str:
    """Inverse of split_segments()."""
    if not segments:
        return ""
    return os.path.join(*segments)


def same_path(a: str, b: str) -> bool:
    """
    Compare two paths component by component.

    Redundant separators and '.' components are ignored, '..' is not
    resolved and nothing is looked up on disk.
    """
    return split_segments(a) == split_segments(b)


def ancestors(path: str) -> Iterator[str]:
    """
    Yield every proper ancestor of path, nearest first.

    Relative paths stop at their first segment, absolute paths at '/'.
    """
    current = os.path.dirname(path.rstrip("/") or path)
    while current:
        yield current
        parent = os.path.dirname(current)
        if parent == current:
            return
        current = parent


def replace_home(path: str, home: str | None) -> str:
    """Replace the first occurrence of home in path with '~'."""
    if home:
        return path.replace(home, "~", 1)
    return path
