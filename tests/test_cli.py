"""Tests for the CLI entry point and startup checks."""

import logging

import pytest

from omni import cli
from omni.errors import MandatoryDependencyMissing
from omni.host import detect_os
from omni.types import OSIdentifier


class TestParser:
    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc:
            cli.build_parser().parse_args(["--version"])
        assert exc.value.code == 0
        assert "omni" in capsys.readouterr().out

    def test_debug_flag(self):
        assert cli.build_parser().parse_args(["--debug"]).debug is True
        assert cli.build_parser().parse_args([]).debug is None


class TestCheckDependencies:
    def test_all_present(self, ctx, host, answers):
        host.installed.update({"fzf", "bat", "shfmt"})
        cli.check_dependencies(ctx)
        assert answers == []

    def test_declined_mandatory_dependency(self, ctx, host, answers):
        host.installed.update({"bat", "shfmt"})
        answers.append(False)
        with pytest.raises(MandatoryDependencyMissing) as exc:
            cli.check_dependencies(ctx)
        assert exc.value.program == "fzf"
        assert str(exc.value) == "fzf is required for this tool to function. Exiting."

    def test_homebrew_required_on_macos(self, ctx, host):
        ctx.os = OSIdentifier.MACOS
        host.installed.update({"fzf", "bat", "shfmt"})
        with pytest.raises(MandatoryDependencyMissing) as exc:
            cli.check_dependencies(ctx)
        assert exc.value.program == "Homebrew"

    def test_fzf_not_required_for_menu_picker(self, ctx, host):
        from dataclasses import replace

        ctx.settings = replace(ctx.settings, picker="menu")
        host.installed.update({"bat", "shfmt"})
        cli.check_dependencies(ctx)

    def test_shfmt_is_optional(self, ctx, host, answers):
        host.installed.update({"fzf", "bat"})
        answers.append(False)
        cli.check_dependencies(ctx)

    def test_accepted_install(self, ctx, host, runner, answers):
        host.installed.update({"bat", "shfmt"})
        answers.append(True)

        def installs(cmd):
            if cmd[:3] == ["sudo", "apt", "install"]:
                host.installed.add("fzf")

        runner.on_run = installs
        cli.check_dependencies(ctx)
        assert ["sudo", "apt", "install", "-y", "fzf"] in runner.calls


class TestRun:
    @pytest.fixture(autouse=True)
    def isolated(self, tmp_path, monkeypatch):
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
        monkeypatch.delenv("OMNI_DEBUG", raising=False)
        yield
        omni_logger = logging.getLogger("omni")
        omni_logger.handlers.clear()
        omni_logger.propagate = True

    def test_unsupported_os_exits_1(self, monkeypatch):
        monkeypatch.setattr("omni.host.detect_os", lambda: OSIdentifier.UNSUPPORTED)
        assert cli.run() == 1

    def test_missing_dependency_exits_1(self, monkeypatch):
        def missing(ctx):
            raise MandatoryDependencyMissing("fzf")

        monkeypatch.setattr("omni.host.detect_os", lambda: OSIdentifier.LINUX)
        monkeypatch.setattr(cli, "check_dependencies", missing)
        assert cli.run() == 1

    def test_session_exit_code(self, monkeypatch):
        monkeypatch.setattr("omni.host.detect_os", lambda: OSIdentifier.LINUX)
        monkeypatch.setattr(cli, "check_dependencies", lambda ctx: None)
        monkeypatch.setattr("omni.session.SessionLoop.run", lambda self: 0)
        assert cli.run() == 0

    def test_debug_log_file(self, monkeypatch, tmp_path):
        monkeypatch.setattr("omni.host.detect_os", lambda: OSIdentifier.LINUX)
        monkeypatch.setattr(cli, "check_dependencies", lambda ctx: None)
        monkeypatch.setattr("omni.session.SessionLoop.run", lambda self: 0)
        cli.run(debug=True)
        assert (tmp_path / "omni" / "debug.log").exists()


def test_main_keyboard_interrupt(monkeypatch):
    def interrupted(debug=None):
        raise KeyboardInterrupt

    monkeypatch.setattr(cli, "run", interrupted)
    monkeypatch.setattr("sys.argv", ["omni"])
    with pytest.raises(SystemExit) as exc:
        cli.main()
    assert exc.value.code == 130


def test_detect_os_is_stable():
    assert detect_os() is detect_os()
