"""
Pytest configuration for park tests.

Tests run inside a scratch directory holding a dotfiles checkout
(work_dir) and a fake home directory (home_dir) that links go into.
"""

import os

import pytest

from park.types import Config, Link, Tags, Target
from park.util import set_debug_level, set_test_mode


class ParkTestEnv:
    """Test environment with a work directory and a home directory."""

    def __init__(self, tmpdir):
        self.tmpdir = str(tmpdir)
        self.work_dir = os.path.join(self.tmpdir, "dotfiles")
        self.home_dir = os.path.join(self.tmpdir, "home")
        os.makedirs(self.work_dir)
        os.makedirs(self.home_dir)

    def path(self, *parts):
        return os.path.join(self.tmpdir, *parts)

    def home(self, *parts):
        return os.path.join(self.home_dir, *parts)

    def create_file(self, path, content=""):
        """Create a file (path relative to tmpdir), with parents."""
        full_path = self.path(path)
        os.makedirs(os.path.dirname(full_path), exist_ok=True)
        with open(full_path, "w") as f:
            f.write(content)
        return full_path

    def create_dir(self, path):
        full_path = self.path(path)
        os.makedirs(full_path, exist_ok=True)
        return full_path

    def create_link(self, path, dest):
        """Create a symlink at path (relative to tmpdir) pointing to dest."""
        full_path = self.path(path)
        os.makedirs(os.path.dirname(full_path), exist_ok=True)
        os.symlink(dest, full_path)
        return full_path

    def config(self, targets, base_dir=None, tags=()):
        """
        Build a Config rooted in this environment.

        targets: dict mapping target paths to Target (or None for defaults)
        """
        return Config(
            base_dir=self.home_dir if base_dir is None else base_dir,
            tags=tuple(tags),
            work_dir=self.work_dir,
            targets={path: target or Target() for path, target in targets.items()},
        )

    def get_filesystem_state(self):
        """
        Get a snapshot of the home directory.

        Returns a dict mapping relative paths to ('dir',), ('file', content)
        or ('link', destination).
        """
        state = {}
        for root, dirs, files in os.walk(self.home_dir, followlinks=False):
            for name in sorted(dirs) + sorted(files):
                full_path = os.path.join(root, name)
                rel = os.path.relpath(full_path, self.home_dir)
                if os.path.islink(full_path):
                    state[rel] = ("link", os.readlink(full_path))
                elif os.path.isdir(full_path):
                    state[rel] = ("dir",)
                else:
                    with open(full_path) as fh:
                        state[rel] = ("file", fh.read())
        return state


def target(base_dir=None, name=None, all_of=(), any_of=()):
    """Shorthand for building a Target."""
    return Target(
        link=Link(base_dir=base_dir, name=name),
        tags=Tags(all_of=tuple(all_of), any_of=tuple(any_of)),
    )


@pytest.fixture
def park_env(tmp_path, monkeypatch):
    """Scratch environment; the current directory is the work directory."""
    env = ParkTestEnv(tmp_path)
    monkeypatch.chdir(env.work_dir)
    monkeypatch.setenv("HOME", env.home_dir)
    monkeypatch.delenv("PARK_CONFIG", raising=False)
    monkeypatch.delenv("NO_COLOR", raising=False)
    return env


@pytest.fixture(autouse=True)
def reset_debug_state():
    """Keep debug() quiet between tests."""
    yield
    set_debug_level(0)
    set_test_mode(False)
