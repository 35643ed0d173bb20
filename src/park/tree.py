# Park - declarative dotfile symlink manager
# Copyright (C) 2025 Istvan Sarandi
# SPDX-License-Identifier: GPL-3.0-or-later

"""
Core park operations - plan, analyze and create dotfile symlinks.

This module provides the public API for analyzing and linking a
configuration, as well as the Tree class that handles parsing, status
classification and execution.
"""

from __future__ import annotations

import errno
import os
from collections.abc import Iterable, Iterator

from park.selector import explain, include, merge_tags
from park.trie import Entry, PathTrie
from park.types import (
    BadFilesError,
    Config,
    LinkOptions,
    ParkInternalError,
    ParkIOError,
    ParkResult,
    Status,
)
from park.util import ancestors, debug, same_path, split_segments

# readlink() errors meaning "there is no symlink here"
_NOT_A_LINK = (errno.EINVAL, errno.ENOENT, errno.ENOTDIR)

# Statuses link() knows how to resolve (DONE needs nothing)
_ACTIONABLE = (Status.READY, Status.MISMATCH, Status.UNPARENTED)


# =============================================================================
# Public API
# =============================================================================


def analyze(
    config: Config,
    tags: Iterable[str] = (),
    names: Iterable[str] = (),
    replace: bool = False,
    create_dirs: bool = False,
) -> Tree:
    """Build the tree for a configuration and classify every link.

    Args:
        config: Parsed configuration
        tags: Runtime tags (the config's default tags are added)
        names: If given, only these target paths are considered
        replace: Treat links pointing elsewhere as replaceable
        create_dirs: Allow creating missing parent directories

    Returns:
        The analyzed Tree
    """
    tree = Tree.parse(
        config, tags, names, LinkOptions(replace=replace, create_dirs=create_dirs)
    )
    tree.analyze()
    return tree


def link(
    config: Config,
    tags: Iterable[str] = (),
    names: Iterable[str] = (),
    replace: bool = False,
    create_dirs: bool = False,
) -> ParkResult:
    """Analyze a configuration and create its links.

    Returns:
        ParkResult with success=False and the problem map if any link is
        blocked (nothing is touched), otherwise the list of created links
    """
    tree = analyze(config, tags, names, replace=replace, create_dirs=create_dirs)
    if tree.problems:
        return ParkResult(success=False, problems=dict(tree.problems), links=[])

    return ParkResult(success=True, problems={}, links=tree.link())


def classify(link_path: str, target_path: str, work_dir: str) -> Status:
    """
    Determine the filesystem status of a single link.

    Pure with respect to the filesystem snapshot: nothing is modified.

    Raises:
        ParkIOError: reading the link failed for a reason other than the
            path not being a symlink
    """
    for ancestor in ancestors(link_path):
        if os.path.lexists(ancestor) and not os.path.isdir(ancestor):
            debug(3, 1, f"{link_path}: ancestor {ancestor} is not a directory")
            return Status.OBSTRUCTED

    try:
        existing = os.readlink(link_path)
    except OSError as e:
        if e.errno not in _NOT_A_LINK:
            raise ParkIOError.from_os_error(e, link_path) from e
    else:
        wanted = os.path.join(work_dir, target_path)
        debug(3, 1, f"{link_path}: existing link => {existing} (want {wanted})")
        return Status.DONE if same_path(existing, wanted) else Status.MISMATCH

    if os.path.exists(link_path):
        return Status.CONFLICT

    parent = os.path.dirname(link_path)
    if not parent or os.path.exists(parent):
        return Status.READY

    return Status.UNPARENTED


# =============================================================================
# Tree
# =============================================================================


class Tree:
    """
    All dotfiles of a configuration, arranged by target path.

    Attributes:
        trie: The path trie; leaves carry link paths and statuses
        work_dir: Directory the symlinks point into
        link_opts: Linking policy deciding which statuses are problems
        problems: link_path -> status for every blocked link, filled by
            analyze()
    """

    def __init__(self, work_dir: str, link_opts: LinkOptions | None = None):
        self.trie = PathTrie()
        self.work_dir = work_dir
        self.link_opts = link_opts or LinkOptions()
        self.problems: dict[str, Status] = {}

    @classmethod
    def parse(
        cls,
        config: Config,
        tags: Iterable[str] = (),
        names: Iterable[str] = (),
        link_opts: LinkOptions | None = None,
    ) -> Tree:
        """Parse a configuration and return a tree based on it.

        Raises:
            TreeError: the targets cannot be arranged into a tree
        """
        tree = cls(config.resolve_work_dir(), link_opts)
        runtime_tags = merge_tags(tags, config.tags)
        names = frozenset(names)
        debug(2, 0, f"work dir is {tree.work_dir}")
        debug(2, 0, f"active tags: {' '.join(sorted(runtime_tags)) or '(none)'}")

        for target_path, target in config.targets.items():
            if not include(target_path, target.tags, runtime_tags, names):
                reason = explain(target_path, target.tags, runtime_tags, names)
                debug(2, 0, f"Skipping {target_path}: {reason}")
                continue

            segments = split_segments(target_path)
            base_dir = target.link.base_dir
            if base_dir is None:
                base_dir = config.base_dir
            link_name = target.link.name or (segments[-1] if segments else "")
            link_path = os.path.join(base_dir, link_name)

            debug(3, 0, f"Adding {target_path} <- {link_path}")
            tree.trie.add(segments, link_path)

        return tree

    def __iter__(self) -> Iterator[Entry]:
        return iter(self.trie)

    def leaves(self) -> Iterator[Entry]:
        return self.trie.leaves()

    def status_of(self, entry: Entry) -> Status:
        return self.trie.status_of(entry)

    def statuses(self) -> dict[str, Status]:
        """Return link_path -> status for every leaf, in traversal order."""
        return {entry.link_path: self.status_of(entry) for entry in self.leaves()}

    def analyze(self) -> None:
        """Classify every link and collect the ones that block linking.

        Every leaf's status is overwritten, so calling this again after the
        filesystem changed refreshes the whole tree.

        Raises:
            ParkIOError: the filesystem could not be inspected
        """
        debug(2, 0, "Analyzing links...")
        self.problems = {}

        for entry in self.leaves():
            status = classify(entry.link_path, entry.target_path, self.work_dir)
            self.trie.set_status(entry, status)
            debug(3, 0, f"{entry.target_path}: {status.label} at {entry.link_path}")

            if self.link_opts.is_problem(status):
                debug(2, 1, f"PROBLEM: {status.label} at {entry.link_path}")
                self.problems[entry.link_path] = status

        debug(2, 0, "Analyzing links... done")

    def link(self) -> list[str]:
        """Create every link the analysis found actionable.

        Nothing is touched if any link is blocked. Otherwise stale links are
        removed and missing parents created first, then the symlinks. An OS
        failure stops the run; links created before it are kept.

        Returns:
            Link paths created by this call, in traversal order

        Raises:
            BadFilesError: some links are blocked with the current options
            ParkInternalError: a blocked or unanalyzed link reached linking
            ParkIOError: a filesystem operation failed
        """
        if self.problems:
            raise BadFilesError(self.problems)

        pending = [
            entry for entry in self.leaves() if self.status_of(entry) != Status.DONE
        ]
        for entry in pending:
            if self.status_of(entry) not in _ACTIONABLE:
                raise ParkInternalError(entry.link_path)

        prepared: list[tuple[str, str]] = []
        for entry in pending:
            self._prepare(entry)
            prepared.append(
                (os.path.join(self.work_dir, entry.target_path), entry.link_path)
            )

        created: list[str] = []
        for source, link_path in prepared:
            debug(1, 0, f"LINK: {link_path} => {source}")
            try:
                os.symlink(source, link_path)
            except OSError as e:
                raise ParkIOError.from_os_error(e, link_path) from e
            created.append(link_path)

        return created

    def _prepare(self, entry: Entry) -> None:
        """Make the link path of an actionable leaf ready for symlinking."""
        link_path = entry.link_path
        match self.status_of(entry):
            case Status.READY:
                pass

            case Status.MISMATCH:
                debug(1, 0, f"UNLINK: {link_path}")
                try:
                    os.unlink(link_path)
                except OSError as e:
                    raise ParkIOError.from_os_error(e, link_path) from e

            case Status.UNPARENTED:
                parent = os.path.dirname(link_path)
                debug(1, 0, f"MKDIR: {parent}")
                try:
                    os.makedirs(parent, exist_ok=True)
                except OSError as e:
                    raise ParkIOError.from_os_error(e, parent) from e

            case _:
                raise ParkInternalError(link_path)
