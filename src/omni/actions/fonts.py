"""Font actions: browse installed families and install Nerd Fonts."""

from __future__ import annotations

import json
import logging
import os
import tempfile
import zipfile
from pathlib import Path
from typing import TYPE_CHECKING

from rich.markup import escape

from ..errors import ToolUnavailable
from ..host import LINUX_INSTALL_MANAGERS, detect_package_manager
from ..installer import install_program
from ..interactive.core import console, heading, info, muted, warning
from ..interactive.prompts import ask_install
from ..types import InstallSpec, Result
from .common import LINUX, MAC, browse, head, menu_action, probe

if TYPE_CHECKING:
    from ..context import ActionContext
    from ..types import Action

logger = logging.getLogger(__name__)

NERD_FONTS_API = "https://api.github.com/repos/ryanoasis/nerd-fonts/releases/latest"
NERD_FONTS_REPO = "https://github.com/ryanoasis/nerd-fonts"
INSTALLED_MARKER = " [INSTALLED]"
FONT_EXTENSIONS = (".ttf", ".otf")
MAC_FONT_DIRS = ("~/Library/Fonts", "/Library/Fonts", "/System/Library/Fonts")


def parse_font_families(output: str) -> list[str]:
    """Unique primary family names from ``fc-list : family``."""
    families = {line.split(",", 1)[0].strip() for line in output.splitlines()}
    families.discard("")
    return sorted(families)


def parse_nerd_fonts(payload: str) -> dict[str, str]:
    """Map font name to zip download URL from a GitHub release payload."""
    try:
        release = json.loads(payload)
    except ValueError:
        logger.debug("unparseable release payload")
        return {}
    if not isinstance(release, dict):
        return {}

    fonts = {}
    for asset in release.get("assets", []):
        name = asset.get("name", "")
        url = asset.get("browser_download_url", "")
        if name.endswith(".zip") and url:
            fonts[name[: -len(".zip")]] = url
    return dict(sorted(fonts.items()))


def strip_marker(label: str) -> str:
    if label.endswith(INSTALLED_MARKER):
        return label[: -len(INSTALLED_MARKER)]
    return label


def font_label(name: str, installed_listing: str) -> str:
    """Picker label, marked when ``fc-list`` already knows the font."""
    if installed_listing and name.lower() in installed_listing.lower():
        return name + INSTALLED_MARKER
    return name


def user_font_dir(ctx: "ActionContext") -> Path:
    if ctx.os == MAC:
        return Path.home() / "Library" / "Fonts"
    return Path.home() / ".local" / "share" / "fonts"


def extract_fonts(archive: Path, font_dir: Path) -> list[Path]:
    """Copy every .ttf/.otf in ``archive`` into ``font_dir``."""
    font_dir.mkdir(parents=True, exist_ok=True)
    written = []
    with zipfile.ZipFile(archive) as zf:
        for member in zf.namelist():
            filename = os.path.basename(member)
            if not filename or not filename.lower().endswith(FONT_EXTENSIONS):
                continue
            target = font_dir / filename
            target.write_bytes(zf.read(member))
            written.append(target)
    return written


# -- installed fonts ---------------------------------------------------------


def _list_mac_font_files() -> list[str]:
    names = set()
    for directory in MAC_FONT_DIRS:
        path = Path(os.path.expanduser(directory))
        if not path.is_dir():
            continue
        for entry in path.rglob("*"):
            if entry.suffix.lower() in (".ttf", ".otf", ".ttc"):
                names.add(entry.name)
    return sorted(names)


def _install_fontconfig(ctx: "ActionContext") -> None:
    info("fontconfig not installed. Installing it first...")
    if detect_package_manager(LINUX_INSTALL_MANAGERS, ctx.which) is None:
        raise ToolUnavailable(
            "fc-list", "Cannot install fontconfig automatically. Please install it manually."
        )
    install_program(InstallSpec("fc-list", linux_package="fontconfig"), ctx)


def show_installed_fonts(ctx: "ActionContext") -> None:
    info("Loading installed fonts...")
    if not ctx.which("fc-list"):
        if ctx.os == MAC:
            heading("Installed Fonts (macOS)")
            for name in _list_mac_font_files():
                console.print(escape(name))
            console.print()
            muted("Install fontconfig (brew install fontconfig) for better font listing with fc-list")
            return
        _install_fontconfig(ctx)

    families = parse_font_families(ctx.runner.capture(["fc-list", ":", "family"]).stdout)
    if not families:
        warning("No fonts found")
        return
    browse(
        ctx,
        families,
        prompt="Browse fonts (ESC to exit): ",
        header="Font families installed on your system",
        preview="font",
    )


def preview_installed_font(ctx: "ActionContext", family: str) -> str:
    title = f"Font variants for: {family}"
    lines = [title, "=" * len(title)]
    matches = [
        line for line in probe(ctx, ["fc-list"]).splitlines() if family.lower() in line.lower()
    ]
    for line in matches[:10]:
        path, _, rest = line.partition(":")
        lines.append(f"Family: {rest.strip()}")
        lines.append(f"Path: {path.strip()}")
        lines.append("")
    if not matches:
        lines.append("No variants found")
    return "\n".join(lines)


# -- Nerd Fonts --------------------------------------------------------------


def _fetch(ctx: "ActionContext", url: str) -> str:
    if ctx.which("curl"):
        return ctx.runner.capture(["curl", "-fsSL", url]).stdout
    return ctx.runner.capture(["wget", "-qO-", url]).stdout


def _ensure_downloader(ctx: "ActionContext") -> None:
    if ctx.which("curl") or ctx.which("wget"):
        return
    if ask_install(ctx, "curl", "to fetch the latest Nerd Fonts list from GitHub", "curl"):
        return
    if ask_install(ctx, "wget", "as an alternative to fetch the latest Nerd Fonts list from GitHub", "wget"):
        return
    raise ToolUnavailable("curl", "Neither curl nor wget is available to download fonts")


def fetch_nerd_fonts(ctx: "ActionContext") -> dict[str, str]:
    _ensure_downloader(ctx)
    return parse_nerd_fonts(_fetch(ctx, NERD_FONTS_API))


def _download(ctx: "ActionContext", url: str, dest: Path) -> None:
    if ctx.which("curl"):
        ctx.runner.run(["curl", "-fL", url, "-o", str(dest)])
    else:
        ctx.runner.run(["wget", "-O", str(dest), url])


def install_font(ctx: "ActionContext", name: str, url: str) -> Result:
    """Download a Nerd Font zip and install its font files for the user."""
    display = f"{name} Nerd Font"
    info(f"Installing {display}...")
    font_dir = user_font_dir(ctx)
    with tempfile.TemporaryDirectory(prefix="omni-font-") as tmp:
        archive = Path(tmp) / "font.zip"
        _download(ctx, url, archive)
        written = extract_fonts(archive, font_dir)
    logger.info("installed %d font files for %s into %s", len(written), name, font_dir)

    if ctx.os == LINUX and ctx.which("fc-cache"):
        ctx.runner.run(["fc-cache", "-f"])
    return Result.success(f"{display} installed successfully!")


def install_fonts_menu(ctx: "ActionContext") -> Result:
    info("Fetching latest Nerd Fonts list...")
    fonts = fetch_nerd_fonts(ctx)
    if not fonts:
        raise ToolUnavailable(
            "nerd-fonts", "Could not fetch font list. Please check your internet connection."
        )

    info("Checking font installation status...")
    listing = ctx.runner.capture(["fc-list"]).stdout if ctx.which("fc-list") else ""
    labels = [font_label(name, listing) for name in fonts]

    picked = browse(
        ctx,
        labels,
        prompt="Select a Nerd Font to install (ESC to return): ",
        header="Nerd Fonts (latest release)",
        preview="nerd_font",
    )
    if picked.cancelled or not picked.selected:
        return Result.cancelled()

    name = strip_marker(picked.selected)
    if picked.selected.endswith(INSTALLED_MARKER):
        if not ctx.confirm(f"Font '{name}' is already installed. Reinstall it?", default=False):
            return Result.cancelled("Installation cancelled.")

    url = fonts.get(name)
    if not url:
        raise ToolUnavailable("nerd-fonts", f"Could not find download URL for {name}")
    return install_font(ctx, name, url)


def preview_nerd_font(ctx: "ActionContext", label: str) -> str:
    name = strip_marker(label)
    title = f"Nerd Font: {name}"
    lines = [
        title,
        "=" * len(title),
        f"Repository: {NERD_FONTS_REPO}",
        "License: MIT License",
        "",
        "Nerd Fonts patches developer targeted fonts with a high number of",
        "glyphs (icons) from popular 'iconic fonts'.",
        "",
        "Installation will:",
        "1. Download the font ZIP file",
        f"2. Extract fonts to {user_font_dir(ctx)}",
        "3. Refresh font cache (if available)",
        "",
        f"Font file: {name}.zip",
        "",
    ]
    variants = [
        line for line in probe(ctx, ["fc-list"]).splitlines() if name.lower() in line.lower()
    ]
    if variants:
        lines.append("Status: installed")
        lines.append("Installed variants:")
        lines.append(head("\n".join(variants), 5))
    else:
        lines.append("Status: not installed")
    return "\n".join(lines)


def actions() -> list["Action"]:
    return [
        menu_action(
            "Show Installed Fonts",
            "Browse installed font families and their files.",
            mac=show_installed_fonts,
            linux=show_installed_fonts,
            interactive=True,
            steps={
                MAC: ["fc-list : family | sort -u"],
                LINUX: ["fc-list : family | sort -u"],
            },
        ),
        menu_action(
            "Install Fonts",
            "Install a Nerd Font from the latest GitHub release.",
            mac=install_fonts_menu,
            linux=install_fonts_menu,
            interactive=True,
            steps={
                MAC: [
                    f"curl -s {NERD_FONTS_API}",
                    "curl -L \"$font_url\" -o font.zip",
                    "unzip -q font.zip -d ~/Library/Fonts",
                ],
                LINUX: [
                    f"curl -s {NERD_FONTS_API}",
                    "curl -L \"$font_url\" -o font.zip",
                    "unzip -q font.zip -d ~/.local/share/fonts",
                    "fc-cache -f",
                ],
            },
        ),
    ]
