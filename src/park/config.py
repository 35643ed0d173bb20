# Park - declarative dotfile symlink manager
# Copyright (C) 2025 Istvan Sarandi
# SPDX-License-Identifier: GPL-3.0-or-later

"""
Configuration file handling for park.

The configuration is a TOML document::

    base_dir = "~"
    tags = ["linux"]
    work_dir = "~/dotfiles"

    [targets."nvim/init.lua"]
    link.base_dir = "~/.config/nvim"
    tags.any_of = ["desktop", "laptop"]

Paths go through environment variable and tilde expansion.
"""

from __future__ import annotations

import os
import pwd
import re
import sys
import tomllib
from typing import Any

from park.types import Config, Link, ParkConfigError, Tags, Target
from park.util import debug

_TOP_LEVEL_KEYS = {"base_dir", "tags", "work_dir", "targets"}
_TARGET_KEYS = {"link", "tags"}
_LINK_KEYS = {"base_dir", "name"}
_TAGS_KEYS = {"all_of", "any_of"}


def load_config(path: str) -> Config:
    """Read and parse a configuration file; '-' reads standard input."""
    if path == "-":
        debug(2, 0, "Reading configuration from standard input")
        try:
            text = sys.stdin.read()
        except UnicodeDecodeError as e:
            raise ParkConfigError(f"<stdin>: not valid UTF-8: {e}") from e
        except OSError as e:
            raise ParkConfigError(
                f"Could not read standard input ({e.strerror})", errno=e.errno or 1
            ) from e
        return parse_config(text, source="<stdin>")

    debug(2, 0, f"Reading configuration from {path}")
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ParkConfigError(f"{path}: invalid TOML: {e}") from e
    except UnicodeDecodeError as e:
        raise ParkConfigError(f"{path}: not valid UTF-8: {e}") from e
    except OSError as e:
        raise ParkConfigError(
            f"Could not open {path} for reading ({e.strerror})", errno=e.errno or 1
        ) from e

    return config_from_dict(data, source=path)


def parse_config(text: str, source: str = "<string>") -> Config:
    """Parse a TOML configuration document."""
    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as e:
        raise ParkConfigError(f"{source}: invalid TOML: {e}") from e
    return config_from_dict(data, source=source)


def config_from_dict(data: dict[str, Any], source: str = "<config>") -> Config:
    """Build a Config from already-deserialized TOML data."""
    _check_keys(data, _TOP_LEVEL_KEYS, source, "")

    base_dir = _get_str(data, "base_dir", source, "")
    work_dir = _get_str(data, "work_dir", source, "")
    targets_data = data.get("targets", {})
    if not isinstance(targets_data, dict):
        raise ParkConfigError(f"{source}: 'targets' must be a table")

    targets = {
        target_path: _target_from_dict(target_path, target_data, source)
        for target_path, target_data in targets_data.items()
    }

    return Config(
        base_dir=expand_filepath(base_dir, "base_dir") if base_dir else "",
        tags=_get_str_list(data, "tags", source, ""),
        work_dir=expand_filepath(work_dir, "work_dir") if work_dir else None,
        targets=targets,
    )


def _target_from_dict(target_path: str, data: Any, source: str) -> Target:
    where = f"targets.{target_path!r}"
    if not isinstance(data, dict):
        raise ParkConfigError(f"{source}: '{where}' must be a table")
    _check_keys(data, _TARGET_KEYS, source, where)

    link_data = data.get("link", {})
    if not isinstance(link_data, dict):
        raise ParkConfigError(f"{source}: '{where}.link' must be a table")
    _check_keys(link_data, _LINK_KEYS, source, f"{where}.link")

    tags_data = data.get("tags", {})
    if not isinstance(tags_data, dict):
        raise ParkConfigError(f"{source}: '{where}.tags' must be a table")
    _check_keys(tags_data, _TAGS_KEYS, source, f"{where}.tags")

    base_dir = _get_str(link_data, "base_dir", source, f"{where}.link")
    if base_dir is not None:
        base_dir = expand_filepath(base_dir, f"{where}.link.base_dir")

    return Target(
        link=Link(
            base_dir=base_dir,
            name=_get_str(link_data, "name", source, f"{where}.link"),
        ),
        tags=Tags(
            all_of=_get_str_list(tags_data, "all_of", source, f"{where}.tags"),
            any_of=_get_str_list(tags_data, "any_of", source, f"{where}.tags"),
        ),
    )


def _check_keys(data: dict, allowed: set[str], source: str, where: str) -> None:
    for key in data:
        if key not in allowed:
            name = f"{where}.{key}" if where else key
            raise ParkConfigError(f"{source}: unknown key '{name}'")


def _get_str(data: dict, key: str, source: str, where: str) -> str | None:
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        name = f"{where}.{key}" if where else key
        raise ParkConfigError(f"{source}: '{name}' must be a string")
    return value


def _get_str_list(data: dict, key: str, source: str, where: str) -> tuple[str, ...]:
    value = data.get(key, [])
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        name = f"{where}.{key}" if where else key
        raise ParkConfigError(f"{source}: '{name}' must be a list of strings")
    return tuple(value)


# =============================================================================
# Path expansion
# =============================================================================


def expand_filepath(path: str, source: str) -> str:
    """Expand environment variables and tilde in file paths."""
    path = expand_environment_variables(path, source)
    path = expand_tilde_to_homedir(path)
    return path


def expand_environment_variables(path: str, source: str) -> str:
    """Expand environment variables in path.

    Replace non-escaped $VAR and ${VAR} with os.environ[VAR].
    """

    def replace_var(match):
        var = match.group(1)
        try:
            return os.environ[var]
        except KeyError:
            raise ParkConfigError(
                f"{source} references undefined environment variable ${var}; aborting!"
            ) from None

    path = re.sub(r"(?<!\\)\$\{([^}]+)}", replace_var, path)
    path = re.sub(r"(?<!\\)\$(\w+)", replace_var, path)
    path = path.replace("\\$", "$")

    return path


def expand_tilde_to_homedir(path: str) -> str:
    """Expand tilde to user's home directory path."""
    if "\\~" in path:
        return path.replace("\\~", "~")

    if not path.startswith("~"):
        return path

    tilde_part, slash, rest = path.partition("/")
    username = tilde_part.removeprefix("~")

    if username:
        home = get_homedir_from_passwd(username=username)
    else:
        home = os.environ.get("HOME") or get_homedir_from_passwd()

    if not home:
        return path
    return home + slash + rest


def get_homedir_from_passwd(username: str | None = None) -> str | None:
    try:
        if username is not None:
            return pwd.getpwnam(username).pw_dir
        return pwd.getpwuid(os.getuid()).pw_dir
    except KeyError:
        return None
