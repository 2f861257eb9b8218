"""Tests for the font actions."""

import json
import zipfile

import pytest

from omni.actions import fonts
from omni.errors import ToolUnavailable
from omni.types import OSIdentifier, Outcome, PickerResult

RELEASE = json.dumps(
    {
        "tag_name": "v3.2.1",
        "assets": [
            {
                "name": "FiraCode.zip",
                "browser_download_url": "https://github.com/ryanoasis/nerd-fonts/releases/download/v3.2.1/FiraCode.zip",
            },
            {
                "name": "FiraCode.tar.xz",
                "browser_download_url": "https://github.com/ryanoasis/nerd-fonts/releases/download/v3.2.1/FiraCode.tar.xz",
            },
            {
                "name": "Hack.zip",
                "browser_download_url": "https://github.com/ryanoasis/nerd-fonts/releases/download/v3.2.1/Hack.zip",
            },
        ],
    }
)


class TestParsing:
    def test_font_families(self):
        output = "DejaVu Sans,DejaVu Sans Condensed\nNoto Sans\nDejaVu Sans\n\n"
        assert fonts.parse_font_families(output) == ["DejaVu Sans", "Noto Sans"]

    def test_nerd_fonts_only_zips(self):
        parsed = fonts.parse_nerd_fonts(RELEASE)
        assert list(parsed) == ["FiraCode", "Hack"]
        assert parsed["Hack"].endswith("/Hack.zip")

    def test_nerd_fonts_bad_payload(self):
        assert fonts.parse_nerd_fonts("<html>rate limited</html>") == {}
        assert fonts.parse_nerd_fonts("[]") == {}

    def test_installed_marker(self):
        listing = "/home/me/.local/share/fonts/HackNerdFont-Regular.ttf: Hack Nerd Font:style=Regular\n"
        assert fonts.font_label("Hack", listing) == "Hack [INSTALLED]"
        assert fonts.font_label("FiraCode", listing) == "FiraCode"
        assert fonts.strip_marker("Hack [INSTALLED]") == "Hack"
        assert fonts.strip_marker("FiraCode") == "FiraCode"


class TestExtract:
    def test_only_font_files_copied(self, tmp_path):
        archive = tmp_path / "font.zip"
        with zipfile.ZipFile(archive, "w") as zf:
            zf.writestr("HackNerdFont-Regular.ttf", b"ttf")
            zf.writestr("nested/HackNerdFont-Bold.OTF", b"otf")
            zf.writestr("README.md", b"readme")
            zf.writestr("LICENSE", b"mit")

        target = tmp_path / "fonts"
        written = fonts.extract_fonts(archive, target)

        assert sorted(p.name for p in written) == ["HackNerdFont-Bold.OTF", "HackNerdFont-Regular.ttf"]
        assert (target / "HackNerdFont-Regular.ttf").read_bytes() == b"ttf"
        assert not (target / "README.md").exists()


class TestFontDir:
    def test_linux(self, ctx, monkeypatch, tmp_path):
        monkeypatch.setenv("HOME", str(tmp_path))
        assert fonts.user_font_dir(ctx) == tmp_path / ".local" / "share" / "fonts"

    def test_macos(self, ctx, monkeypatch, tmp_path):
        monkeypatch.setenv("HOME", str(tmp_path))
        ctx.os = OSIdentifier.MACOS
        assert fonts.user_font_dir(ctx) == tmp_path / "Library" / "Fonts"


class TestInstallFontsMenu:
    @pytest.fixture
    def online(self, host, runner):
        host.installed.update({"curl", "fc-list"})
        runner.outputs[("curl", "-fsSL", fonts.NERD_FONTS_API)] = RELEASE
        runner.outputs[("fc-list",)] = "/fonts/Hack-Regular.ttf: Hack Nerd Font:style=Regular\n"

    def test_lists_fonts_with_status(self, ctx, picker, online):
        result = fonts.install_fonts_menu(ctx)
        assert result.outcome == Outcome.CANCELLED
        items, kwargs = picker.shown[0]
        assert items == ["FiraCode", "Hack [INSTALLED]"]
        assert kwargs["preview"] == "nerd_font"

    def test_reinstall_declined(self, ctx, picker, runner, online):
        picker.results.append(PickerResult.choose("Hack [INSTALLED]"))
        result = fonts.install_fonts_menu(ctx)
        assert result.outcome == Outcome.CANCELLED
        assert result.message == "Installation cancelled."
        assert runner.calls == []

    def test_install_selected_font(self, ctx, picker, runner, host, online, monkeypatch, tmp_path):
        monkeypatch.setenv("HOME", str(tmp_path))
        host.installed.add("fc-cache")
        picker.results.append(PickerResult.choose("FiraCode"))

        def download(cmd):
            if cmd[0] == "curl":
                with zipfile.ZipFile(cmd[-1], "w") as zf:
                    zf.writestr("FiraCodeNerdFont-Regular.ttf", b"ttf")

        runner.on_run = download
        result = fonts.install_fonts_menu(ctx)

        assert result.outcome == Outcome.SUCCESS
        assert result.message == "FiraCode Nerd Font installed successfully!"
        assert (tmp_path / ".local" / "share" / "fonts" / "FiraCodeNerdFont-Regular.ttf").exists()
        assert runner.calls[-1] == ["fc-cache", "-f"]

    def test_offline(self, ctx, host):
        host.installed.add("curl")
        with pytest.raises(ToolUnavailable):
            fonts.install_fonts_menu(ctx)

    def test_no_downloader_declined(self, ctx, answers):
        answers.extend([False, False])
        with pytest.raises(ToolUnavailable):
            fonts.install_fonts_menu(ctx)


class TestPreviews:
    def test_nerd_font_preview_status(self, ctx, runner):
        runner.outputs[("fc-list",)] = "/fonts/Hack-Regular.ttf: Hack Nerd Font:style=Regular\n"
        text = fonts.preview_nerd_font(ctx, "Hack [INSTALLED]")
        assert text.startswith("Nerd Font: Hack")
        assert "Status: installed" in text
        assert "Font file: Hack.zip" in text

    def test_installed_font_preview(self, ctx, runner):
        runner.outputs[("fc-list",)] = (
            "/usr/share/fonts/DejaVuSans.ttf: DejaVu Sans:style=Book\n"
            "/usr/share/fonts/Noto.ttf: Noto Sans:style=Regular\n"
        )
        text = fonts.preview_installed_font(ctx, "DejaVu Sans")
        assert "Path: /usr/share/fonts/DejaVuSans.ttf" in text
        assert "Noto" not in text
