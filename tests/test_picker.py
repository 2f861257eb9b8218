"""Tests for the fzf and menu pickers."""

import subprocess
from types import SimpleNamespace

import pytest

from omni import picker as picker_module
from omni.config import Settings
from omni.errors import MandatoryDependencyMissing
from omni.picker import FzfPicker, MenuPicker, make_picker


@pytest.fixture
def fzf_calls(monkeypatch):
    """Replace subprocess.run; tests set ``state.returncode``/``state.stdout``."""
    state = SimpleNamespace(calls=[], returncode=0, stdout="", error=None)

    def fake_run(cmd, **kwargs):
        state.calls.append((cmd, kwargs))
        if state.error is not None:
            raise state.error
        return subprocess.CompletedProcess(cmd, state.returncode, stdout=state.stdout)

    monkeypatch.setattr(picker_module.subprocess, "run", fake_run)
    return state


def _picker(*installed):
    return FzfPicker(Settings(), which=lambda name: f"/usr/bin/{name}" if name in installed else None)


class TestFzfPick:
    def test_selection(self, fzf_calls):
        fzf_calls.stdout = "htop\n"
        result = _picker().pick(["curl", "htop"])
        assert result.selected == "htop"
        assert not result.cancelled

        cmd, kwargs = fzf_calls.calls[0]
        assert cmd[0] == "fzf"
        assert kwargs["input"] == "curl\nhtop\n"

    def test_escape_is_cancel(self, fzf_calls):
        fzf_calls.returncode = 130
        result = _picker().pick(["curl", "htop"])
        assert result.cancelled
        assert result.selected is None

    def test_no_match_is_cancel(self, fzf_calls):
        fzf_calls.returncode = 1
        assert _picker().pick(["curl"]).cancelled

    def test_fzf_error_is_cancel(self, fzf_calls, output):
        fzf_calls.returncode = 2
        assert _picker().pick(["curl"]).cancelled
        assert "fzf failed" in output.getvalue()

    def test_empty_list_never_spawns(self, fzf_calls, output):
        result = _picker().pick([])
        assert result.cancelled
        assert fzf_calls.calls == []
        assert "No items to choose from" in output.getvalue()

    def test_blank_items_count_as_empty(self, fzf_calls):
        assert _picker().pick(["", "  "]).cancelled
        assert fzf_calls.calls == []

    def test_missing_fzf(self, fzf_calls):
        fzf_calls.error = FileNotFoundError("fzf")
        with pytest.raises(MandatoryDependencyMissing):
            _picker().pick(["curl"])


class TestFzfCommand:
    def test_basic_command(self):
        cmd = _picker().build_command(prompt="Select a function: ", header=None, preview=None, height=None)
        assert cmd == ["fzf", "-i", "--prompt=Select a function: ", "--reverse"]

    def test_preview_piped_through_bat(self):
        cmd = _picker("bat").build_command(prompt="> ", header="Ports", preview="port", height="80%")
        assert "--height=80%" in cmd
        assert "--header=Ports" in cmd
        preview = cmd[cmd.index("--preview") + 1]
        assert "-m omni.preview port {}" in preview
        assert "bat --language=yaml --style=numbers --color=always" in preview
        assert "--preview-window=right:60%:wrap" in cmd

    def test_menu_preview_uses_bash_highlighting(self):
        assert "--language=bash" in _picker("bat").preview_command("menu")

    def test_preview_without_bat(self):
        assert "|" not in _picker().preview_command("menu")


class TestMenuPicker:
    def test_empty_list(self):
        assert MenuPicker().pick([]).cancelled

    def test_selection(self, monkeypatch):
        shown = {}

        class FakeMenu:
            def __init__(self, entries, **kwargs):
                shown["entries"] = entries
                shown["kwargs"] = kwargs

            def show(self):
                return 1

        monkeypatch.setattr(picker_module, "TerminalMenu", FakeMenu)
        result = MenuPicker(lambda kind, label: f"{kind}:{label}").pick(["a", "b"], preview="menu")
        assert result.selected == "b"
        assert shown["kwargs"]["preview_command"]("a") == "menu:a"

    def test_quit_is_cancel(self, monkeypatch):
        class FakeMenu:
            def __init__(self, entries, **kwargs):
                pass

            def show(self):
                return None

        monkeypatch.setattr(picker_module, "TerminalMenu", FakeMenu)
        assert MenuPicker().pick(["a"]).cancelled


def test_make_picker_selects_backend():
    assert isinstance(make_picker(Settings()), FzfPicker)
    assert isinstance(make_picker(Settings(picker="menu")), MenuPicker)
