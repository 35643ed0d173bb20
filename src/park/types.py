# Park - declarative dotfile symlink manager
# Copyright (C) 2025 Istvan Sarandi
# SPDX-License-Identifier: GPL-3.0-or-later

"""
Type definitions for park.

This module contains the enums, dataclasses and exceptions that define
the core data structures used throughout park.
"""

from __future__ import annotations

import errno as errno_module
import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class Status(Enum):
    """Filesystem state of a prospective link."""

    UNKNOWN = "unknown"  # not analyzed yet
    READY = "ready"  # can be linked right away
    DONE = "done"  # already linked to the right target
    MISMATCH = "mismatch"  # a symlink exists but points elsewhere
    CONFLICT = "conflict"  # another file occupies the link path
    OBSTRUCTED = "obstructed"  # an ancestor of the link path is not a directory
    UNPARENTED = "unparented"  # the link's parent directory is missing

    @property
    def label(self) -> str:
        return self.name


@dataclass(frozen=True)
class LinkOptions:
    """
    Run-wide linking policy.

    Attributes:
        replace: Replace symlinks that point to another target
        create_dirs: Create missing parent directories of links
    """

    replace: bool = False
    create_dirs: bool = False

    def is_problem(self, status: Status) -> bool:
        """Return True if a leaf in this status blocks linking."""
        match status:
            case Status.CONFLICT | Status.OBSTRUCTED:
                return True
            case Status.MISMATCH:
                return not self.replace
            case Status.UNPARENTED:
                return not self.create_dirs
            case _:
                return False


# =============================================================================
# Configuration model
# =============================================================================


@dataclass(frozen=True)
class Link:
    """Where the symlink of a target gets created."""

    base_dir: Optional[str] = None
    name: Optional[str] = None


@dataclass(frozen=True)
class Tags:
    """
    Constraints that toggle a target on and off.

    Tags in all_of are evaluated conjunctively, tags in any_of disjunctively.
    """

    all_of: tuple[str, ...] = ()
    any_of: tuple[str, ...] = ()


@dataclass(frozen=True)
class Target:
    """Configuration for a single dotfile."""

    link: Link = field(default_factory=Link)
    tags: Tags = field(default_factory=Tags)


@dataclass(frozen=True)
class Config:
    """
    The main configuration for park.

    Attributes:
        base_dir: Default directory links are created in
        tags: Tags that are always active
        work_dir: Directory holding the dotfiles (default: current directory)
        targets: Target path -> Target, in configuration order
    """

    base_dir: str = ""
    tags: tuple[str, ...] = ()
    work_dir: Optional[str] = None
    targets: dict[str, Target] = field(default_factory=dict)

    def resolve_work_dir(self) -> str:
        return self.work_dir if self.work_dir is not None else os.getcwd()


@dataclass
class ParkResult:
    """Result of park.link()."""

    success: bool
    problems: dict[str, Status]
    links: list[str]


# =============================================================================
# Exceptions
# =============================================================================


class ParkError(Exception):
    """Base exception for park errors."""

    def __init__(self, message: str, errno: int = 1):
        super().__init__(message)
        self.message = message
        self.errno = errno


class ParkCLIError(ParkError):
    """Invalid command-line usage; the message is printed as is."""


class ParkConfigError(ParkError):
    """The configuration file cannot be read or is malformed."""


class ParkProgrammingError(ParkError):
    """An internal invariant was violated. This is a bug."""


class ParkInternalError(ParkProgrammingError):
    """A leaf that should have been filtered out reached the linking stage."""

    def __init__(self, link_path: str):
        super().__init__(f"there's an error associated with {link_path!r}")
        self.link_path = link_path


class TreeError(ParkError):
    """The configured targets cannot be arranged into a tree."""


class NotABranchError(TreeError):
    def __init__(self, segment: str, link_path: str):
        super().__init__(
            f"node for link {link_path!r} at segment {segment!r} "
            "cannot be inserted because it is not a branch"
        )
        self.segment = segment
        self.link_path = link_path


class LeafExistsError(TreeError):
    def __init__(self, segment: str, link_path: str):
        super().__init__(
            f"node for link {link_path!r} at segment {segment!r} "
            "already exists as a leaf"
        )
        self.segment = segment
        self.link_path = link_path


class EmptySegmentError(TreeError):
    def __init__(self):
        super().__init__("cannot add empty link path")


class BadFilesError(ParkError):
    """
    One or more links cannot be created with the current link options.

    Every offending link is reported at once, sorted by link path.
    """

    def __init__(self, problems: dict[str, Status]):
        self.problems = dict(sorted(problems.items()))
        lines = [f"found {len(self.problems)} problematic target(s):"]
        for path, status in self.problems.items():
            lines.append(f"\t- {status.label} at {path!r}")
        super().__init__("\n".join(lines))


class ParkIOError(ParkError):
    """A filesystem operation failed."""

    def __init__(self, errno: int | None, path: str, reason: str = ""):
        self.kind = errno_module.errorcode.get(errno or 0, "EIO")
        self.path = path
        message = f"unexpected IO error ({self.kind}) at {path!r}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, errno=errno or 1)

    @classmethod
    def from_os_error(cls, err: OSError, path: str) -> ParkIOError:
        return cls(err.errno, path, err.strerror or "")
