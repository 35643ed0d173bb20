# Park - declarative dotfile symlink manager
# Copyright (C) 2025 Istvan Sarandi
# SPDX-License-Identifier: GPL-3.0-or-later

"""
park - declarative dotfile symlink manager

Park reads a list of dotfiles (targets) from a TOML configuration,
arranges them into a tree, checks where each symlink should go and
creates the symlinks on request.

Basic usage::

    from park import load_config, analyze, link

    config = load_config("park.toml")

    # Inspect what would happen
    tree = analyze(config, tags=["laptop"])
    print(tree.statuses())

    # Create the links
    result = link(config, tags=["laptop"], create_dirs=True)
    if not result.success:
        print("Problems:", result.problems)

Step by step::

    from park import Tree, LinkOptions

    tree = Tree.parse(config, tags={"laptop"}, link_opts=LinkOptions(replace=True))
    tree.analyze()
    created = tree.link()  # raises BadFilesError if anything is blocked
"""

from park.tree import Tree, analyze, link, classify
from park.config import load_config, parse_config
from park.types import (
    Config,
    Target,
    Link,
    Tags,
    Status,
    LinkOptions,
    ParkResult,
    ParkError,
    ParkConfigError,
    ParkCLIError,
    ParkIOError,
    ParkInternalError,
    ParkProgrammingError,
    TreeError,
    NotABranchError,
    LeafExistsError,
    EmptySegmentError,
    BadFilesError,
)
from park.util import VERSION as __version__

# CLI entry point
from park.cli import main

__all__ = [
    "Tree",
    "analyze",
    "link",
    "classify",
    "load_config",
    "parse_config",
    "Config",
    "Target",
    "Link",
    "Tags",
    "Status",
    "LinkOptions",
    "ParkResult",
    "ParkError",
    "ParkConfigError",
    "ParkCLIError",
    "ParkIOError",
    "ParkInternalError",
    "ParkProgrammingError",
    "TreeError",
    "NotABranchError",
    "LeafExistsError",
    "EmptySegmentError",
    "BadFilesError",
    "__version__",
    "main",
]
