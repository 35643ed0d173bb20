# Park - declarative dotfile symlink manager
# Copyright (C) 2025 Istvan Sarandi
# SPDX-License-Identifier: GPL-3.0-or-later

"""
Command-line interface for park.

This module contains argument parsing, configuration lookup and the main
entry point.
"""

from __future__ import annotations

import argparse
import os
import sys
import traceback
from typing import Sequence

from park.config import load_config
from park.printer import Printer, format_created
from park.tree import Tree
from park.types import (
    BadFilesError,
    Config,
    LinkOptions,
    ParkCLIError,
    ParkError,
    ParkProgrammingError,
)
from park.util import PROGRAM_NAME, VERSION, set_debug_level

DEFAULT_CONFIG = "park.toml"
CONFIG_ENV = "PARK_CONFIG"


def main(argv: Sequence[str] | None = None) -> None:
    """Main entry point for park command."""
    try:
        _main(sys.argv[1:] if argv is None else list(argv))
    except ParkProgrammingError as e:
        print(
            f"\n{PROGRAM_NAME}: INTERNAL ERROR: {e.message}\n{traceback.format_exc()}",
            file=sys.stderr,
        )
        print(
            "This _is_ a bug. Please submit a bug report so we can fix it! :-)",
            file=sys.stderr,
        )
        sys.exit(e.errno)
    except BadFilesError as e:
        print(f"{PROGRAM_NAME}: {e.message}", file=sys.stderr)
        print(
            "Nothing was linked. Fix the paths above, or re-run with "
            "--replace and/or --create-dirs.",
            file=sys.stderr,
        )
        sys.exit(e.errno)
    except ParkCLIError as e:
        print(e.message, file=sys.stderr)
        sys.exit(e.errno)
    except ParkError as e:
        print(f"{PROGRAM_NAME}: ERROR: {e.message}", file=sys.stderr)
        sys.exit(e.errno)
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        sys.exit(130)


def _main(argv: list[str]) -> None:
    """Main implementation (can raise ParkError)."""
    args = build_parser().parse_args(argv)
    set_debug_level(args.verbose)

    config = load_config(resolve_config_path(args.config))
    tags, names = split_filters(args.filters, config)
    link_opts = LinkOptions(replace=args.replace, create_dirs=args.create_dirs)

    tree = Tree.parse(config, tags, names, link_opts)
    tree.analyze()

    home = os.environ.get("HOME")
    if args.link:
        created = tree.link()
        sys.stdout.write(format_created(created, home))
    else:
        colored = use_color(args.color, sys.stdout)
        sys.stdout.write(str(Printer(tree, colored=colored, home=home)))


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message: str):
        raise ParkCLIError(f"{self.format_usage()}{self.prog}: error: {message}", errno=2)


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog=PROGRAM_NAME,
        description="Declarative dotfile symlink manager",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Without --link, a preview of the configured links and their status is
printed. The configuration is read from --config, ${CONFIG_ENV}, or
./{DEFAULT_CONFIG} (in that order); '-' reads standard input.
        """,
    )
    parser.add_argument(
        "filters",
        nargs="*",
        metavar="FILTER",
        help="runtime tag, or target path to restrict the run to",
    )
    parser.add_argument("-c", "--config", help="configuration file ('-' for stdin)")
    parser.add_argument(
        "-l", "--link", action="store_true", help="try to link eligible targets"
    )
    parser.add_argument(
        "-r",
        "--replace",
        action="store_true",
        help="replace symlinks that point somewhere else",
    )
    parser.add_argument(
        "-d",
        "--create-dirs",
        action="store_true",
        help="create missing parent directories of links",
    )
    parser.add_argument(
        "--color",
        choices=("auto", "always", "never"),
        default="auto",
        help="colorize the preview (default: auto)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="increase verbosity (up to 4 times)",
    )
    parser.add_argument(
        "-V", "--version", action="version", version=f"{PROGRAM_NAME} {VERSION}"
    )
    return parser


def resolve_config_path(path: str | None) -> str:
    if path:
        return path
    return os.environ.get(CONFIG_ENV) or DEFAULT_CONFIG


def split_filters(filters: Sequence[str], config: Config) -> tuple[set[str], set[str]]:
    """Split command-line filters into (tags, target names).

    A filter naming a configured target restricts the run to it; any other
    filter is a runtime tag.
    """
    tags: set[str] = set()
    names: set[str] = set()
    for value in filters:
        if value in config.targets:
            names.add(value)
        else:
            tags.add(value)
    return tags, names


def use_color(when: str, stream) -> bool:
    match when:
        case "always":
            return True
        case "never":
            return False
        case _:
            if os.environ.get("NO_COLOR"):
                return False
            return hasattr(stream, "isatty") and stream.isatty()


if __name__ == "__main__":
    main()
