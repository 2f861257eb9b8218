"""System maintenance actions: info, updates and cleanup."""

from __future__ import annotations

import platform
from typing import TYPE_CHECKING

from ..errors import ToolUnavailable
from ..host import LINUX_SYSTEM_MANAGERS, detect_package_manager
from ..interactive.core import console, heading, info, subheading
from ..interactive.prompts import ask_install
from .common import LINUX, MAC, menu_action, platform_operation

if TYPE_CHECKING:
    from ..context import ActionContext
    from ..types import Action

_LINUX_UPGRADE_COMMANDS: dict[str, list[list[str]]] = {
    "apt": [["sudo", "apt", "update"], ["sudo", "apt", "upgrade", "-y"]],
    "yum": [["sudo", "yum", "update", "-y"]],
    "dnf": [["sudo", "dnf", "upgrade", "-y"]],
    "pacman": [["sudo", "pacman", "-Syu"]],
}

MAC_TRASH = "sudo rm -rf ~/.Trash/*"
LINUX_TRASH = "sudo rm -rf ~/.local/share/Trash/*"
MAC_LOGS = "sudo log erase --all"
LINUX_LOGS = (
    "sudo journalctl --vacuum-time=7d; "
    "sudo find /var/log -type f -name '*.log' -exec truncate -s 0 {} \\;"
)
MAC_DNS = "sudo dscacheutil -flushcache; sudo killall -HUP mDNSResponder"
MAC_CACHE = f"{MAC_DNS}; rm -rf ~/Library/Caches/*"
LINUX_CACHE = "sudo sync && sudo sysctl -w vm.drop_caches=3; rm -rf ~/.cache/*"


def show_system_info(ctx: "ActionContext") -> None:
    """Show fastfetch output, or a uname/memory/disk summary without it."""
    if ctx.is_installed("fastfetch"):
        heading("System Information")
        console.print()
        ctx.runner.run(["fastfetch"])
        return

    if ask_install(ctx, "fastfetch", "for better system information display", "Fastfetch"):
        ctx.runner.run(["fastfetch"])
        return

    heading("System Information")
    uname = platform.uname()
    uptime = ctx.runner.capture(["uptime"]).stdout.strip()
    for label, value in (
        ("OS", uname.system),
        ("Kernel", uname.release),
        ("Architecture", uname.machine),
        ("Hostname", uname.node),
        ("Uptime", uptime),
    ):
        console.print(f"[blue]{label}:[/blue] {value}")

    subheading("Memory:")
    if ctx.os == MAC:
        memory = ctx.runner.capture(["system_profiler", "SPHardwareDataType"])
        for line in memory.stdout.splitlines():
            if "Memory:" in line:
                console.print(line.strip())
    else:
        ctx.runner.run(["free", "-h"], check=False)

    subheading("Disk usage:")
    ctx.runner.run(["df", "-h"], check=False)


def update_linux_system(ctx: "ActionContext") -> None:
    manager = detect_package_manager(LINUX_SYSTEM_MANAGERS, ctx.which)
    if manager is None:
        raise ToolUnavailable("package manager", "Unsupported package manager")
    for cmd in _LINUX_UPGRADE_COMMANDS[manager]:
        ctx.runner.run(cmd)


def clear_linux_dns_cache(ctx: "ActionContext") -> None:
    """Flush every resolver cache that is running."""
    if ctx.which("systemctl"):
        if ctx.runner.capture(["systemctl", "is-active", "--quiet", "systemd-resolved"]).ok:
            ctx.runner.run(["sudo", "resolvectl", "flush-caches"])
            info("systemd-resolved DNS cache cleared")
        if ctx.runner.capture(["systemctl", "is-active", "--quiet", "NetworkManager"]).ok:
            ctx.runner.run(["sudo", "systemctl", "restart", "NetworkManager"])
            info("NetworkManager restarted")

    if ctx.which("nscd"):
        ctx.runner.run(["sudo", "nscd", "-i", "hosts"])
        info("nscd DNS cache cleared")

    if ctx.which("dnsmasq") and ctx.runner.capture(["pgrep", "dnsmasq"]).ok:
        ctx.runner.run(["sudo", "killall", "-USR1", "dnsmasq"])
        info("dnsmasq cache cleared")


def actions() -> list["Action"]:
    return [
        menu_action(
            "Show System Info",
            "Show system information (fastfetch when available).",
            fallback=show_system_info,
            steps={
                MAC: ["fastfetch || { uname -a; system_profiler SPHardwareDataType; df -h; }"],
                LINUX: ["fastfetch || { uname -a; free -h; df -h; }"],
            },
        ),
        menu_action(
            "Update System",
            "Upgrade all installed packages.",
            mac=platform_operation(
                "Updating system packages", "System update completed", "brew update && brew upgrade"
            ),
            linux=platform_operation(
                "Updating system packages", "System update completed", update_linux_system
            ),
            steps={
                MAC: ["brew update && brew upgrade"],
                LINUX: [
                    "sudo apt update && sudo apt upgrade -y  # or yum / dnf / pacman -Syu",
                ],
            },
        ),
        menu_action(
            "Clean Trash",
            "Empty the user's trash.",
            mac=platform_operation("Cleaning trash", "Trash cleaned", MAC_TRASH),
            linux=platform_operation("Cleaning trash", "Trash cleaned", LINUX_TRASH),
            steps={MAC: [MAC_TRASH], LINUX: [LINUX_TRASH]},
        ),
        menu_action(
            "Clean System Logs",
            "Erase or truncate system logs.",
            mac=platform_operation("Cleaning system logs", "System logs cleaned", MAC_LOGS),
            linux=platform_operation("Cleaning system logs", "System logs cleaned", LINUX_LOGS),
            steps={MAC: [MAC_LOGS], LINUX: LINUX_LOGS.split("; ")},
        ),
        menu_action(
            "Clean Cache",
            "Drop system caches and the user's cache directory.",
            mac=platform_operation("Cleaning system cache", "Cache cleaned", MAC_CACHE),
            linux=platform_operation("Cleaning system cache", "Cache cleaned", LINUX_CACHE),
            steps={MAC: MAC_CACHE.split("; "), LINUX: LINUX_CACHE.split("; ")},
        ),
        menu_action(
            "Clean DNS Cache",
            "Flush the resolver caches.",
            mac=platform_operation("Clearing DNS cache", "DNS cache cleared", MAC_DNS),
            linux=platform_operation("Clearing DNS cache", "DNS cache cleared", clear_linux_dns_cache),
            steps={
                MAC: MAC_DNS.split("; "),
                LINUX: [
                    "sudo resolvectl flush-caches",
                    "sudo systemctl restart NetworkManager",
                    "sudo nscd -i hosts",
                    "sudo killall -USR1 dnsmasq",
                ],
            },
        ),
    ]
