# Park - declarative dotfile symlink manager
# Copyright (C) 2025 Istvan Sarandi
# SPDX-License-Identifier: GPL-3.0-or-later

"""
Directory-tree preview of a park tree.

Renders something like::

    . (~/dotfiles)
    ├── nvim
    │   └── init.lua (~/.config/nvim/init.lua) [READY]
    └── .bashrc      (~/.bashrc)               [DONE]
"""

from __future__ import annotations

import re

from park.tree import Tree
from park.types import Status
from park.util import replace_home, split_segments


class Color:
    """ANSI escape codes for terminal output."""

    RESET = "\033[0m"
    BOLD = "\033[1m"
    ITALIC = "\033[3m"
    REVERSE = "\033[7m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    PURPLE = "\033[35m"
    CYAN = "\033[36m"
    WHITE = "\033[37m"


STATUS_COLORS = {
    Status.UNKNOWN: Color.WHITE,
    Status.DONE: Color.BLUE,
    Status.READY: Color.GREEN,
    Status.MISMATCH: Color.YELLOW,
    Status.UNPARENTED: Color.YELLOW,
    Status.CONFLICT: Color.RED,
    Status.OBSTRUCTED: Color.RED,
}

_ANSI_RE = re.compile(r"\033\[[0-9;]*m")


def visible_len(text: str) -> int:
    """Length of text as shown on a terminal, ignoring escape codes."""
    return len(_ANSI_RE.sub("", text))


def paint(text: str, *styles: str) -> str:
    if not styles:
        return text
    return f"{''.join(styles)}{text}{Color.RESET}"


def align(rows: list[list[str]], padding: int = 1) -> str:
    """
    Align cells into columns like a tab writer.

    Every cell but the last one of a row is padded to the widest cell of
    its column plus padding. The last cell is written as is.
    """
    widths: list[int] = []
    for row in rows:
        for column, cell in enumerate(row[:-1]):
            if column == len(widths):
                widths.append(0)
            widths[column] = max(widths[column], visible_len(cell))

    lines = []
    for row in rows:
        cells = [
            cell + " " * (widths[column] + padding - visible_len(cell))
            for column, cell in enumerate(row[:-1])
        ]
        cells.extend(row[-1:])
        lines.append("".join(cells))
    return "\n".join(lines) + "\n" if lines else ""


class Printer:
    """
    Formats a tree as an indented listing with link paths and statuses.

    Attributes:
        tree: The tree to print, usually analyzed
        colored: Use ANSI colors instead of brackets
        home: Home directory, shown as '~' in paths
    """

    def __init__(self, tree: Tree, colored: bool = False, home: str | None = None):
        self.tree = tree
        self.colored = colored
        self.home = home

    def _style(self, text: str, *styles: str) -> str:
        return paint(text, *styles) if self.colored else text

    def __str__(self) -> str:
        rows: list[list[str]] = []
        indent_blocks: list[bool] = []

        for entry in self.tree:
            level = entry.level
            if level == 0:
                work_dir = replace_home(self.tree.work_dir, self.home)
                if not self.colored:
                    work_dir = f"({work_dir})"
                rows.append([f". {self._style(work_dir, Color.WHITE, Color.ITALIC)}"])
                continue

            del indent_blocks[level - 1 :]
            indent_blocks.append(entry.last_sibling)

            prefix = []
            for depth, is_last in enumerate(indent_blocks):
                if depth == level - 1:
                    guide = "└── " if is_last else "├── "
                else:
                    guide = "    " if is_last else "│   "
                prefix.append(self._style(guide, Color.WHITE))

            name = (split_segments(entry.target_path) or ["/"])[-1]
            if not entry.is_leaf:
                rows.append(["".join(prefix) + name, "", ""])
                continue

            link_path = replace_home(entry.link_path, self.home)
            status = self.tree.status_of(entry)
            if self.colored:
                link_cell = paint(f" {link_path} ", Color.PURPLE, Color.ITALIC)
                status_cell = paint(
                    f" {status.label} ", STATUS_COLORS[status], Color.REVERSE
                )
            else:
                link_cell = f"({link_path})"
                status_cell = f"[{status.label}]"

            rows.append(
                [
                    "".join(prefix) + self._style(name, Color.CYAN, Color.BOLD),
                    link_cell,
                    status_cell,
                ]
            )

        return align(rows)


def format_created(links: list[str], home: str | None = None) -> str:
    """Render the links created by Tree.link(), one per line."""
    return "".join(f"{replace_home(path, home)}\n" for path in links)
