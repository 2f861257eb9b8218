"""Browse installed programs and packages."""

from __future__ import annotations

import re
from pathlib import Path
from typing import TYPE_CHECKING

from ..errors import ToolUnavailable
from ..host import detect_package_manager
from ..interactive.core import info, muted
from ..interactive.prompts import ask_install
from .common import LINUX, MAC, browse, head, menu_action, probe

if TYPE_CHECKING:
    from ..context import ActionContext
    from ..types import Action

APPLICATIONS_DIR = "/Applications"

HOMEBREW = "Homebrew"
HOMEBREW_CASK = "Homebrew Cask"
APP_STORE = "App Store"
SYSTEM_APP = "System App"

LINUX_QUERY_MANAGERS = ("apt", "dnf", "pacman", "yum")

_LABEL_RE = re.compile(r"^\[([^\]]+)\] (.+)$")


def tag(source: str, names: list[str]) -> list[str]:
    return [f"[{source}] {name}" for name in sorted(names) if name]


def split_label(label: str) -> tuple[str, str]:
    """``"[Homebrew] jq"`` -> ``("Homebrew", "jq")``; untagged labels get ``""``."""
    match = _LABEL_RE.match(label)
    if match:
        return match.group(1), match.group(2)
    return "", label


def parse_mas_list(output: str) -> list[str]:
    """App names from ``mas list`` (``<id>  <name>  (<version>)``)."""
    names = []
    for line in output.splitlines():
        parts = line.strip().split(None, 1)
        if len(parts) < 2:
            continue
        names.append(re.sub(r"\s+\([^)]*\)\s*$", "", parts[1]).strip())
    return names


def parse_linux_packages(manager: str, output: str) -> list[str]:
    """Installed package names for one Linux package manager's listing."""
    names = set()
    lines = output.splitlines()
    if manager == "apt":
        for line in lines:
            if "/" in line and not line.startswith("WARNING"):
                names.add(line.split("/", 1)[0])
    elif manager in ("dnf", "yum"):
        for line in lines[1:]:
            fields = line.split()
            if fields and not line.startswith(("Installed", "Last metadata")):
                names.add(fields[0].rsplit(".", 1)[0])
    elif manager == "pacman":
        for line in lines:
            fields = line.split()
            if fields:
                names.add(fields[0])
    return sorted(names)


_LINUX_LIST_COMMANDS = {
    "apt": ["apt", "list", "--installed"],
    "dnf": ["dnf", "list", "installed"],
    "pacman": ["pacman", "-Q"],
    "yum": ["yum", "list", "installed"],
}

_LINUX_INFO_COMMANDS = {
    "apt": ["apt", "show"],
    "dnf": ["dnf", "info"],
    "pacman": ["pacman", "-Qi"],
    "yum": ["yum", "info"],
}


def _application_names() -> list[str]:
    apps = Path(APPLICATIONS_DIR)
    if not apps.is_dir():
        return []
    return [entry.stem for entry in apps.glob("*.app") if entry.is_dir()]


def list_mac_programs(ctx: "ActionContext") -> list[str]:
    programs: list[str] = []
    if ctx.which("brew"):
        info("Getting Homebrew packages...")
        programs += tag(HOMEBREW, ctx.runner.capture(["brew", "list", "--formula"]).lines())
        info("Getting Homebrew casks...")
        programs += tag(HOMEBREW_CASK, ctx.runner.capture(["brew", "list", "--cask"]).lines())

    if ctx.which("mas") or ask_install(ctx, "mas", "to list App Store applications"):
        info("Getting App Store apps...")
        programs += tag(APP_STORE, parse_mas_list(ctx.runner.capture(["mas", "list"]).stdout))

    info("Getting system applications...")
    programs += tag(SYSTEM_APP, _application_names())
    return programs


def list_linux_packages(ctx: "ActionContext") -> list[str]:
    manager = detect_package_manager(LINUX_QUERY_MANAGERS, ctx.which)
    if manager is None:
        raise ToolUnavailable("package manager", "No supported package manager found")
    info(f"Getting {manager} packages...")
    return parse_linux_packages(manager, ctx.runner.capture(_LINUX_LIST_COMMANDS[manager]).stdout)


def show_installed_programs(ctx: "ActionContext") -> None:
    info("Loading installed programs...")
    if ctx.os == MAC:
        programs = list_mac_programs(ctx)
        prompt, header = "Browse programs (ESC to exit): ", "Installed programs on your macOS system"
    else:
        programs = list_linux_packages(ctx)
        prompt, header = "Browse packages (ESC to exit): ", "Installed packages on your Linux system"

    if not programs:
        muted("No installed programs found")
        return
    browse(ctx, programs, prompt=prompt, header=header, preview="installed_program")


def _plist_value(ctx: "ActionContext", app: str, key: str) -> str:
    plist = f"{APPLICATIONS_DIR}/{app}.app/Contents/Info.plist"
    for line in probe(ctx, ["plutil", "-p", plist]).splitlines():
        if f'"{key}"' in line:
            return line.split("=>", 1)[-1].strip().strip('"')
    return "Unknown"


def _preview_mac(ctx: "ActionContext", source: str, program: str) -> list[str]:
    lines = [f"Program: {program}", f"Type: {source}", "=" * 24]
    if source == HOMEBREW:
        lines.append("Package Manager: Homebrew (Formula)")
        path = ctx.which(program)
        if path:
            lines.append(f"Executable: {path}")
            version = head(probe(ctx, [program, "--version"]), 1)
            lines.append(f"Version: {version or 'Version info not available'}")
        lines += ["", "Package info:", head(probe(ctx, ["brew", "info", program]), 5)]
    elif source == HOMEBREW_CASK:
        lines += [
            "Package Manager: Homebrew (Cask)",
            "",
            "Cask info:",
            head(probe(ctx, ["brew", "info", "--cask", program]), 5),
        ]
    elif source == APP_STORE:
        lines += [
            "Source: Mac App Store",
            f"Location: {APPLICATIONS_DIR}/{program}.app",
            f"Version: {_plist_value(ctx, program, 'CFBundleShortVersionString')}",
        ]
        if ctx.which("mas"):
            entries = [
                line for line in probe(ctx, ["mas", "list"]).splitlines() if program in line
            ]
            if entries:
                app_id = entries[0].split()[0]
                lines += ["", f"App ID: {app_id}", head(probe(ctx, ["mas", "info", app_id]), 8)]
            else:
                lines.append("App info not found in mas list")
        else:
            lines.append("Install mas for detailed App Store info")
    else:
        lines += [
            "Source: System/Manual Installation",
            f"Location: {APPLICATIONS_DIR}/{program}.app",
            f"Version: {_plist_value(ctx, program, 'CFBundleShortVersionString')}",
            f"Bundle ID: {_plist_value(ctx, program, 'CFBundleIdentifier')}",
        ]
    return lines


def preview_installed_program(ctx: "ActionContext", label: str) -> str:
    if ctx.os == MAC:
        source, program = split_label(label)
        return "\n".join(_preview_mac(ctx, source, program))

    lines = [f"Package: {label}", "=" * 24]
    manager = detect_package_manager(LINUX_QUERY_MANAGERS, ctx.which)
    if manager is None:
        lines.append("Package manager info not available")
    else:
        lines.append(head(probe(ctx, [*_LINUX_INFO_COMMANDS[manager], label]), 15))
    return "\n".join(lines)


def actions() -> list["Action"]:
    return [
        menu_action(
            "Show Installed Programs",
            "Browse installed programs grouped by source.",
            mac=show_installed_programs,
            linux=show_installed_programs,
            interactive=True,
            steps={
                MAC: [
                    "brew list --formula",
                    "brew list --cask",
                    "mas list",
                    "ls /Applications",
                ],
                LINUX: ["apt list --installed  # or dnf / pacman -Q / yum"],
            },
        ),
    ]
