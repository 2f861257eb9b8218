"""Tests for the system maintenance actions."""

from omni.actions import build_registry, system
from omni.dispatcher import Dispatcher
from omni.errors import HandlerFailed, ToolUnavailable
from omni.types import OSIdentifier, Outcome


def _execute(ctx, name, current_os=None):
    return Dispatcher(build_registry(), ctx).execute(name, current_os)


class TestUpdateSystem:
    def test_linux_apt(self, ctx, runner):
        result = _execute(ctx, "Update System")
        assert result.outcome == Outcome.SUCCESS
        assert result.message == "System update completed"
        assert runner.calls == [["sudo", "apt", "update"], ["sudo", "apt", "upgrade", "-y"]]

    def test_linux_pacman(self, ctx, host, runner):
        host.installed = {"pacman"}
        _execute(ctx, "Update System")
        assert runner.calls == [["sudo", "pacman", "-Syu"]]

    def test_linux_no_manager(self, ctx, host):
        host.installed = set()
        result = _execute(ctx, "Update System")
        assert isinstance(result.error, ToolUnavailable)

    def test_macos_shell(self, ctx, runner):
        _execute(ctx, "Update System", OSIdentifier.MACOS)
        assert runner.calls == [["sh", "-c", "brew update && brew upgrade"]]

    def test_failure_reported(self, ctx, runner):
        runner.failing.add(("sudo", "apt", "update"))
        result = _execute(ctx, "Update System")
        assert isinstance(result.error, HandlerFailed)


class TestCleanup:
    def test_clean_trash_linux(self, ctx, runner):
        result = _execute(ctx, "Clean Trash")
        assert result.message == "Trash cleaned"
        assert runner.calls == [["sh", "-c", system.LINUX_TRASH]]

    def test_clean_dns_linux(self, ctx, host, runner):
        host.installed.update({"systemctl", "nscd"})
        runner.outputs[("systemctl", "is-active", "--quiet", "systemd-resolved")] = ""
        result = _execute(ctx, "Clean DNS Cache")
        assert result.message == "DNS cache cleared"
        assert runner.calls == [
            ["sudo", "resolvectl", "flush-caches"],
            ["sudo", "nscd", "-i", "hosts"],
        ]

    def test_clean_dns_macos(self, ctx, runner):
        _execute(ctx, "Clean DNS Cache", OSIdentifier.MACOS)
        assert runner.calls == [["sh", "-c", system.MAC_DNS]]


class TestSystemInfo:
    def test_fastfetch_when_installed(self, ctx, host, runner):
        host.installed.add("fastfetch")
        _execute(ctx, "Show System Info")
        assert runner.calls == [["fastfetch"]]

    def test_summary_when_declined(self, ctx, runner, output):
        runner.outputs[("uptime",)] = " 10:00:00 up 3 days\n"
        result = _execute(ctx, "Show System Info")
        assert result.ok
        assert "Uptime:" in output.getvalue()
        assert ["free", "-h"] in runner.calls
        assert ["df", "-h"] in runner.calls

    def test_fallback_serves_both_platforms(self, ctx):
        action = build_registry().lookup("Show System Info")
        assert action.handlers == {}
        assert action.fallback is system.show_system_info
