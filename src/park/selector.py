# Park - declarative dotfile symlink manager
# Copyright (C) 2025 Istvan Sarandi
# SPDX-License-Identifier: GPL-3.0-or-later

"""Tag and name based selection of targets."""

from __future__ import annotations

from collections.abc import Collection, Iterable

from park.types import Tags


def merge_tags(runtime_tags: Iterable[str], default_tags: Iterable[str]) -> frozenset[str]:
    """Merge the configured default tags into the runtime tag set."""
    return frozenset(runtime_tags) | frozenset(default_tags)


def include(
    target_path: str,
    tags: Tags,
    runtime_tags: Collection[str],
    names: Collection[str] = (),
) -> bool:
    """
    Decide whether a target takes part in this run.

    Args:
        target_path: Target path as written in the configuration
        tags: The target's tag constraints
        runtime_tags: Active tags, defaults already merged in
        names: Explicit target names; if non-empty, only these are included

    Returns:
        True if the target is included
    """
    if names and target_path not in names:
        return False

    if tags.all_of and not all(tag in runtime_tags for tag in tags.all_of):
        return False

    if tags.any_of and not any(tag in runtime_tags for tag in tags.any_of):
        return False

    return True


def explain(
    target_path: str,
    tags: Tags,
    runtime_tags: Collection[str],
    names: Collection[str] = (),
) -> str | None:
    """Return why include() rejects a target, or None if it is included."""
    if names and target_path not in names:
        return "not among the requested targets"

    missing = [tag for tag in tags.all_of if tag not in runtime_tags]
    if missing:
        return f"missing required tag(s): {', '.join(missing)}"

    if tags.any_of and not any(tag in runtime_tags for tag in tags.any_of):
        return f"none of the tags present: {', '.join(tags.any_of)}"

    return None
