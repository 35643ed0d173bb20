# Park - declarative dotfile symlink manager
# Copyright (C) 2025 Istvan Sarandi
# SPDX-License-Identifier: GPL-3.0-or-later

"""
Path trie holding the links park manages.

Nodes live in a flat arena and refer to each other by index. Index 0 is
the root, which is always a branch. A branch keeps its children in
insertion order, so traversing the trie yields targets in the order they
were configured, never alphabetically.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from typing import Optional

from park.types import (
    EmptySegmentError,
    LeafExistsError,
    NotABranchError,
    ParkProgrammingError,
    Status,
)
from park.util import join_segments

ROOT = 0


@dataclass(slots=True)
class Node:
    """
    A trie node.

    A node with a link_path is a leaf; otherwise it is a branch whose
    children are (segment, index) pairs in insertion order. The index dict
    maps a segment to the child's arena index for lookups.
    """

    link_path: Optional[str] = None
    status: Status = Status.UNKNOWN
    children: list[tuple[str, int]] = field(default_factory=list)
    index: dict[str, int] = field(default_factory=dict)

    @property
    def is_leaf(self) -> bool:
        return self.link_path is not None


@dataclass(frozen=True, slots=True)
class NodeMetadata:
    """Position of a node inside the trie."""

    level: int  # root is at level 0
    last_sibling: bool


@dataclass(frozen=True, slots=True)
class Entry:
    """
    Iteration element. Holds all relevant data from a node.

    link_path is only set for leaves.
    """

    metadata: NodeMetadata
    target_path: str
    link_path: Optional[str]
    node: int

    @property
    def level(self) -> int:
        return self.metadata.level

    @property
    def last_sibling(self) -> bool:
        return self.metadata.last_sibling

    @property
    def is_leaf(self) -> bool:
        return self.link_path is not None


class PathTrie:
    """Arena-backed trie keyed by target path segments."""

    def __init__(self):
        self.nodes: list[Node] = [Node()]

    def add(self, segments: Sequence[str], link_path: str) -> int:
        """
        Add a leaf for the given segments, creating branches as needed.

        Returns the arena index of the new leaf.

        Raises:
            EmptySegmentError: segments is empty
            NotABranchError: a prefix of segments is already a leaf
            LeafExistsError: the full path is already present
        """
        if not segments:
            raise EmptySegmentError()

        current = ROOT
        last = len(segments) - 1
        for position, segment in enumerate(segments):
            node = self.nodes[current]
            if node.is_leaf:
                raise NotABranchError(segment, link_path)

            child = node.index.get(segment)
            if position == last:
                if child is not None:
                    raise LeafExistsError(segment, link_path)
                return self._attach(current, segment, Node(link_path=link_path))

            if child is None:
                child = self._attach(current, segment, Node())
            current = child

        raise ParkProgrammingError(f"unreachable: add({list(segments)!r})")

    def _attach(self, parent: int, segment: str, node: Node) -> int:
        index = len(self.nodes)
        self.nodes.append(node)
        self.nodes[parent].children.append((segment, index))
        self.nodes[parent].index[segment] = index
        return index

    def __getitem__(self, index: int) -> Node:
        return self.nodes[index]

    def __iter__(self) -> DepthFirstIter:
        return DepthFirstIter(self)

    def __len__(self) -> int:
        """Number of leaves."""
        return sum(1 for node in self.nodes if node.is_leaf)

    def leaves(self) -> Iterator[Entry]:
        """Leaf entries in preorder."""
        return (entry for entry in self if entry.is_leaf)

    def status_of(self, entry: Entry) -> Status:
        return self.nodes[entry.node].status

    def set_status(self, entry: Entry, status: Status) -> None:
        self.nodes[entry.node].status = status


class DepthFirstIter:
    """
    Iterator that visits nodes using preorder traversal.

    Uses an explicit stack instead of recursion. A second stack holds the
    segments leading to the current node and is trimmed to the node's
    level before its own segment is pushed, so nodes need no parent links.
    One-shot: create a new iterator to traverse again.
    """

    def __init__(self, trie: PathTrie, root: int = ROOT):
        self._trie = trie
        self._stack: list[tuple[int, Optional[str], NodeMetadata]] = [
            (root, None, NodeMetadata(level=0, last_sibling=False))
        ]
        self._path_stack: list[str] = []

    def __iter__(self) -> DepthFirstIter:
        return self

    def __next__(self) -> Entry:
        if not self._stack:
            raise StopIteration

        index, segment, metadata = self._stack.pop()

        if metadata.level > 0:
            del self._path_stack[metadata.level - 1 :]
        if segment is not None:
            self._path_stack.append(segment)

        node = self._trie.nodes[index]
        for position, (child_segment, child) in enumerate(reversed(node.children)):
            self._stack.append(
                (
                    child,
                    child_segment,
                    NodeMetadata(level=metadata.level + 1, last_sibling=position == 0),
                )
            )

        return Entry(
            metadata=metadata,
            target_path=join_segments(self._path_stack),
            link_path=node.link_path,
            node=index,
        )
