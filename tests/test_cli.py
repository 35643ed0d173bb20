"""
Tests for the park command-line interface.
"""

import io
import os

import pytest

from park.cli import build_parser, main, resolve_config_path, split_filters, use_color
from park.types import Config, Target
from park.util import VERSION, get_debug_level, set_test_mode


CONFIG = """
base_dir = "~"

[targets.bashrc]
link.name = ".bashrc"

[targets."nvim/init.lua"]
link.base_dir = "~/.config/nvim"
tags.all_of = ["desktop"]
"""


@pytest.fixture
def config_file(park_env):
    park_env.create_file("dotfiles/park.toml", CONFIG)
    return park_env


class FakeTerminal(io.StringIO):
    def isatty(self):
        return True


def run(argv, capsys):
    """Run main() and return (exit code, stdout, stderr)."""
    code = 0
    try:
        main(argv)
    except SystemExit as e:
        code = e.code
    captured = capsys.readouterr()
    return code, captured.out, captured.err


class TestPreview:
    """Tests for running without --link."""

    def test_preview(self, config_file, capsys):
        code, out, err = run(["--color", "never"], capsys)
        assert code == 0
        assert err == ""
        lines = [line.rstrip() for line in out.splitlines()]
        assert lines[0] == f". ({config_file.work_dir})"
        assert lines[1] == "└── bashrc (~/.bashrc) [READY]"
        assert not os.path.lexists(config_file.home(".bashrc"))

    def test_tag_filter_enables_targets(self, config_file, capsys):
        code, out, _ = run(["--color", "never", "desktop"], capsys)
        assert code == 0
        assert "init.lua (~/.config/nvim/init.lua) [UNPARENTED]" in out

    def test_name_filter(self, config_file, capsys):
        code, out, _ = run(["--color", "never", "desktop", "nvim/init.lua"], capsys)
        assert code == 0
        assert "bashrc" not in out
        assert "init.lua" in out

    def test_forced_color(self, config_file, capsys):
        _, out, _ = run(["--color", "always"], capsys)
        assert "\033[" in out

    def test_auto_color_is_off_when_not_a_terminal(self, config_file, capsys):
        _, out, _ = run([], capsys)
        assert "\033[" not in out


class TestLink:
    """Tests for --link."""

    def test_link(self, config_file, capsys):
        code, out, err = run(["--link"], capsys)
        assert code == 0
        assert out == "~/.bashrc\n"
        assert os.readlink(config_file.home(".bashrc")) == os.path.join(
            config_file.work_dir, "bashrc"
        )

    def test_link_twice_is_a_no_op(self, config_file, capsys):
        run(["--link"], capsys)
        code, out, _ = run(["-l"], capsys)
        assert code == 0
        assert out == ""

    def test_problems_abort_the_run(self, config_file, capsys):
        code, out, err = run(["--link", "desktop"], capsys)
        assert code == 1
        assert out == ""
        assert "found 1 problematic target(s):" in err
        assert "UNPARENTED" in err
        assert "Nothing was linked" in err
        assert not os.path.lexists(config_file.home(".bashrc"))

    def test_create_dirs(self, config_file, capsys):
        code, out, _ = run(["-l", "-d", "desktop"], capsys)
        assert code == 0
        assert out == "~/.bashrc\n~/.config/nvim/init.lua\n"

    def test_replace(self, config_file, capsys):
        config_file.create_link("home/.bashrc", "/elsewhere")
        code, _, err = run(["-l"], capsys)
        assert code == 1
        assert "MISMATCH" in err

        code, out, _ = run(["-l", "--replace"], capsys)
        assert code == 0
        assert out == "~/.bashrc\n"

    def test_verbose_logs_operations(self, config_file, capsys):
        code, _, err = run(["-l", "-v"], capsys)
        assert code == 0
        assert f"LINK: {config_file.home('.bashrc')}" in err

    def test_debug_output_in_test_mode(self, config_file, capsys):
        set_test_mode(True)
        code, out, err = run(["-l", "-vv"], capsys)
        assert code == 0
        assert get_debug_level() == 2
        assert f"# LINK: {config_file.home('.bashrc')} => " in out
        assert "# Skipping nvim/init.lua: missing required tag(s): desktop" in out
        assert out.endswith("~/.bashrc\n")
        assert err == ""


class TestErrors:
    def test_missing_config(self, park_env, capsys):
        code, _, err = run([], capsys)
        assert code != 0
        assert err.startswith("park: ERROR: Could not open park.toml for reading")

    def test_tree_error(self, park_env, capsys):
        park_env.create_file("dotfiles/park.toml", '[targets.a]\n[targets."a/b"]\n')
        code, _, err = run([], capsys)
        assert code == 1
        assert "is not a branch" in err

    def test_config_that_is_not_utf8(self, park_env, capsys):
        path = park_env.path("bad.toml")
        with open(path, "wb") as f:
            f.write(b'base_dir = "\xff\xfe"\n')
        code, _, err = run(["-c", path], capsys)
        assert code == 1
        assert err.startswith(f"park: ERROR: {path}: not valid UTF-8")

    def test_bad_option(self, park_env, capsys):
        code, _, err = run(["--no-such-option"], capsys)
        assert code == 2
        assert "unrecognized arguments: --no-such-option" in err

    def test_bad_color_choice(self, park_env, capsys):
        code, _, err = run(["--color", "rainbow"], capsys)
        assert code == 2
        assert "invalid choice" in err

    def test_version(self, park_env, capsys):
        code, out, _ = run(["--version"], capsys)
        assert code == 0
        assert out == f"park {VERSION}\n"


class TestConfigLookup:
    def test_explicit_path_wins(self, monkeypatch):
        monkeypatch.setenv("PARK_CONFIG", "/from/env.toml")
        assert resolve_config_path("given.toml") == "given.toml"

    def test_environment(self, monkeypatch):
        monkeypatch.setenv("PARK_CONFIG", "/from/env.toml")
        assert resolve_config_path(None) == "/from/env.toml"

    def test_default(self, monkeypatch):
        monkeypatch.delenv("PARK_CONFIG", raising=False)
        assert resolve_config_path(None) == "park.toml"

    def test_config_option(self, park_env, capsys):
        path = park_env.create_file("elsewhere.toml", "[targets.foo]\n")
        code, out, _ = run(["-c", path, "--color", "never"], capsys)
        assert code == 0
        assert "foo" in out

    def test_config_from_stdin(self, park_env, capsys, monkeypatch):
        monkeypatch.setattr("sys.stdin", io.StringIO("[targets.foo]\n"))
        code, out, _ = run(["-c", "-", "--link"], capsys)
        assert code == 0
        # base_dir defaults to the current directory
        assert out == "foo\n"
        assert os.path.islink(os.path.join(park_env.work_dir, "foo"))


class TestHelpers:
    def test_split_filters(self):
        config = Config(targets={"foo/bar": Target(), "baz": Target()})
        tags, names = split_filters(["foo/bar", "linux", "baz", "work"], config)
        assert names == {"foo/bar", "baz"}
        assert tags == {"linux", "work"}

    def test_use_color(self, monkeypatch):
        tty = FakeTerminal()
        monkeypatch.delenv("NO_COLOR", raising=False)
        assert use_color("auto", tty)
        assert not use_color("auto", io.StringIO())
        assert use_color("always", io.StringIO())
        assert not use_color("never", tty)

    def test_no_color_environment(self, monkeypatch):
        tty = FakeTerminal()
        monkeypatch.setenv("NO_COLOR", "1")
        assert not use_color("auto", tty)
        assert use_color("always", tty)

    def test_parser_defaults(self):
        args = build_parser().parse_args([])
        assert args.filters == []
        assert not (args.link or args.replace or args.create_dirs)
        assert args.color == "auto"
        assert args.verbose == 0
