"""Network actions: interfaces, open ports, routing, DNS and speed tests.

The parsers in this module are pure functions over command output so the
interactive handlers stay thin.
"""

from __future__ import annotations

import os
import re
import time
from typing import TYPE_CHECKING, Callable, Sequence

from rich.markup import escape

from ..errors import ToolUnavailable
from ..interactive.core import console, error, heading, info, subheading, success, warning
from ..interactive.prompts import ask_install
from .common import LINUX, MAC, browse, echo, head, menu_action, probe, read_text, section

if TYPE_CHECKING:
    from ..context import ActionContext
    from ..types import Action, OSIdentifier

DNS_TEST_DOMAINS = ("google.com", "cloudflare.com", "github.com")

_IP_LINK_RE = re.compile(r"^\d+:\s+([^:@\s]+)")
_NSLOOKUP_ADDRESS_RE = re.compile(r"^Address:\s+(\S+)", re.MULTILINE)
_PID_RE = re.compile(r"pid=(\d+)")


# -- parsers -----------------------------------------------------------------


def parse_ip_link(output: str) -> list[str]:
    """Interface names from ``ip link show``."""
    names = []
    for line in output.splitlines():
        match = _IP_LINK_RE.match(line)
        if match and match.group(1) not in names:
            names.append(match.group(1))
    return sorted(names)


def parse_proc_net_dev(text: str) -> list[str]:
    """Interface names from ``/proc/net/dev`` (two header lines)."""
    names = []
    for line in text.splitlines()[2:]:
        if ":" in line:
            name = line.split(":", 1)[0].strip()
            if name and name not in names:
                names.append(name)
    return sorted(names)


def parse_ifconfig(output: str) -> list[str]:
    """Interface names from ``ifconfig -a`` (unindented ``name:`` lines)."""
    names = []
    for line in output.splitlines():
        if line and not line[0].isspace() and ":" in line:
            name = line.split(":", 1)[0]
            if name not in names:
                names.append(name)
    return sorted(names)


def _port_number(port: str) -> int:
    return int(port) if port.isdigit() else 1 << 20


def parse_ss_listening(output: str) -> list[str]:
    """Rows of ``port<TAB>pid<TAB>address`` from ``ss -tlnp``, sorted by port."""
    rows = []
    for line in output.splitlines():
        cols = line.split()
        if len(cols) < 4 or cols[0] != "LISTEN":
            continue
        local = cols[3]
        port = local.rsplit(":", 1)[-1]
        address = local.replace("[", "").replace("]", "").replace("::ffff:", "")
        process = " ".join(cols[5:])
        match = _PID_RE.search(process)
        pid = match.group(1) if match else "-"
        row = f"{port}\t{pid}\t{address}"
        if row not in rows:
            rows.append(row)
    return sorted(rows, key=lambda row: (_port_number(row.split("\t")[0]), row))


def _lsof_port(name: str) -> str:
    return name.rsplit(":", 1)[-1]


def parse_lsof_listening(output: str) -> list[str]:
    """Rows of ``command:pid<TAB>address<TAB>command`` from ``lsof -iTCP -sTCP:LISTEN``."""
    rows = []
    for line in output.splitlines()[1:]:
        cols = line.split()
        if len(cols) < 9:
            continue
        command, pid = cols[0], cols[1]
        name = cols[8].split("->", 1)[0]
        row = f"{command}:{pid}\t{name}\t{command}"
        if row not in rows:
            rows.append(row)
    return sorted(rows, key=lambda row: (_port_number(_lsof_port(row.split("\t")[1])), row))


def parse_port_row(row: str, current_os: "OSIdentifier") -> dict[str, str]:
    """Split a picker row back into port, pid, address and command."""
    fields = row.split("\t")
    if current_os == MAC:
        owner = fields[0]
        address = fields[1] if len(fields) > 1 else ""
        command, _, pid = owner.partition(":")
        return {
            "port": _lsof_port(address),
            "pid": pid,
            "address": address,
            "command": fields[2] if len(fields) > 2 else command,
        }
    return {
        "port": fields[0],
        "pid": fields[1] if len(fields) > 1 else "-",
        "address": fields[2] if len(fields) > 2 else "",
        "command": "",
    }


def parse_nslookup_address(output: str) -> str | None:
    """First answer address from ``nslookup`` output.

    The resolver's own ``Address: x.x.x.x#53`` line is skipped.
    """
    for match in _NSLOOKUP_ADDRESS_RE.finditer(output):
        address = match.group(1)
        if "#" not in address:
            return address
    return None


def parse_nameservers(resolv_conf: str) -> list[str]:
    return [
        line.split()[1]
        for line in resolv_conf.splitlines()
        if line.startswith("nameserver") and len(line.split()) > 1
    ]


# -- interfaces --------------------------------------------------------------


def list_interfaces(ctx: "ActionContext") -> list[str]:
    if ctx.os == MAC:
        return parse_ifconfig(ctx.runner.capture(["ifconfig", "-a"]).stdout)
    if ctx.which("ip"):
        return parse_ip_link(ctx.runner.capture(["ip", "link", "show"]).stdout)
    return parse_proc_net_dev(read_text("/proc/net/dev"))


def show_network_interfaces(ctx: "ActionContext") -> None:
    info("Loading network interfaces...")
    interfaces = list_interfaces(ctx)
    if not interfaces:
        warning("No network interfaces found")
        return
    browse(
        ctx,
        interfaces,
        prompt="Browse network interfaces (ESC to exit): ",
        header="Network Interfaces",
        preview="interface",
    )


def preview_interface(ctx: "ActionContext", name: str) -> str:
    name = name.strip()
    parts = [f"Interface: {name}", ""]
    if ctx.os == MAC:
        parts.append(section("Configuration", probe(ctx, ["ifconfig", name])))
        hardware = probe(ctx, ["networksetup", "-listallhardwareports"])
        lines = hardware.splitlines()
        for i, line in enumerate(lines):
            if line.strip() == f"Device: {name}":
                parts.append(section("Hardware Port", "\n".join(lines[max(i - 1, 0) : i + 2])))
                break
        return "\n".join(parts)

    if ctx.which("ip"):
        parts.append(section("Link", probe(ctx, ["ip", "link", "show", name])))
        parts.append(section("Addresses", probe(ctx, ["ip", "addr", "show", name])))
        parts.append(section("Routes", probe(ctx, ["ip", "route", "show", "dev", name])))
    base = f"/sys/class/net/{name}"
    details = [
        f"{label}: {read_text(f'{base}/{attr}') or 'unknown'}"
        for label, attr in (
            ("State", "operstate"),
            ("MAC", "address"),
            ("MTU", "mtu"),
            ("Speed", "speed"),
        )
    ]
    parts.append(section("Details", "\n".join(details)))
    rx = read_text(f"{base}/statistics/rx_bytes")
    tx = read_text(f"{base}/statistics/tx_bytes")
    if rx or tx:
        parts.append(section("Statistics", f"RX bytes: {rx or '0'}\nTX bytes: {tx or '0'}"))
    if os.path.isdir(f"{base}/wireless") and ctx.which("iw"):
        parts.append(section("Wireless", probe(ctx, ["iw", "dev", name, "info"])))
    return "\n".join(parts)


# -- open ports --------------------------------------------------------------


def show_open_ports_linux(ctx: "ActionContext") -> None:
    info("Loading open ports...")
    if ctx.which("ss"):
        rows = parse_ss_listening(ctx.runner.capture(["ss", "-tlnp"]).stdout)
        if not rows:
            warning("No listening ports found")
            return
        browse(
            ctx,
            rows,
            prompt="Browse open ports (ESC to exit): ",
            header="Port\tPID\tAddress",
            preview="port",
        )
    elif ctx.which("netstat"):
        heading("Open Ports (Linux)")
        subheading("TCP Listening Ports:")
        echo(head(ctx.runner.capture(["netstat", "-tlnp"]).stdout, 20))
        subheading("UDP Ports:")
        echo(head(ctx.runner.capture(["netstat", "-ulnp"]).stdout, 10))
    else:
        raise ToolUnavailable("ss", "Neither ss nor netstat is available")


def show_open_ports_mac(ctx: "ActionContext") -> None:
    info("Loading open ports...")
    if ctx.which("lsof"):
        rows = parse_lsof_listening(
            ctx.runner.capture(["lsof", "-nP", "-iTCP", "-sTCP:LISTEN"]).stdout
        )
        if not rows:
            warning("No listening ports found")
            return
        browse(
            ctx,
            rows,
            prompt="Browse open ports (ESC to exit): ",
            header="Process:PID\tAddress\tCommand",
            preview="port",
        )
    else:
        heading("Open Ports (macOS)")
        subheading("TCP Listening Ports:")
        listening = [
            line
            for line in ctx.runner.capture(["netstat", "-an", "-p", "tcp"]).stdout.splitlines()
            if "LISTEN" in line
        ]
        echo("\n".join(listening[:20]))


def preview_port(ctx: "ActionContext", row: str) -> str:
    fields = parse_port_row(row, ctx.os)
    pid = fields["pid"]
    parts = [
        f"Port: {fields['port']}",
        f"Address: {fields['address']}",
        f"PID: {pid}",
    ]
    if fields["command"]:
        parts.append(f"Command: {fields['command']}")
    parts.append("")

    if not pid.isdigit():
        parts.append("Process details unavailable (try running with sudo)")
        return "\n".join(parts)

    details = probe(ctx, ["ps", "-p", pid, "-o", "pid,ppid,user,command"])
    parts.append(section("Process", details or "Process not found"))
    if ctx.os == MAC:
        files = probe(ctx, ["lsof", "-nP", "-p", pid])
        conns = [line for line in files.splitlines() if "TCP" in line or "UDP" in line]
        parts.append(section("Connections", "\n".join(conns[:10])))
    else:
        sockets = probe(ctx, ["ss", "-tunap"])
        conns = [line for line in sockets.splitlines() if f"pid={pid}," in line]
        parts.append(section("Connections", "\n".join(conns[:5])))
    return "\n".join(parts)


# -- routing -----------------------------------------------------------------


def _route_row(line: str) -> None:
    text = escape(line)
    if line.startswith("default"):
        console.print(f"[green]{text}[/green]")
    elif line[:1].isdigit():
        console.print(f"[yellow]{text}[/yellow]")
    else:
        console.print(text)


def _interface_rows(lines: Sequence[str], is_header: Callable[[str], bool]) -> None:
    for line in lines:
        if is_header(line):
            console.print(f"[cyan]{escape(line)}[/cyan]")
        elif "inet " in line:
            console.print(f"  [green]{escape(line.strip())}[/green]")


def show_routing_linux(ctx: "ActionContext") -> None:
    heading("Network Routing Information")
    subheading("Default Route:")
    for line in ctx.runner.capture(["ip", "route", "show", "default"]).lines():
        _route_row(line)

    subheading("Routing Table:")
    for line in ctx.runner.capture(["ip", "route", "show"]).lines()[:20]:
        _route_row(line)

    subheading("Network Interfaces:")
    _interface_rows(
        ctx.runner.capture(["ip", "addr", "show"]).lines(),
        lambda line: line[:1].isdigit(),
    )


def show_routing_mac(ctx: "ActionContext") -> None:
    heading("Network Routing Information")
    subheading("Default Route:")
    for line in ctx.runner.capture(["route", "get", "default"]).lines():
        if "gateway" in line or "interface" in line:
            console.print(f"[green]{escape(line.strip())}[/green]")

    subheading("Routing Table:")
    for line in ctx.runner.capture(["netstat", "-rn"]).lines()[:20]:
        _route_row(line)

    subheading("Network Interfaces:")
    _interface_rows(
        ctx.runner.capture(["ifconfig"]).lines(),
        lambda line: line[:1].isalpha() and ":" in line,
    )


# -- DNS ---------------------------------------------------------------------


def resolve_domain(ctx: "ActionContext", domain: str) -> tuple[str | None, float]:
    """Resolve ``domain`` with nslookup. Returns (address or None, seconds)."""
    started = time.perf_counter()
    result = ctx.runner.capture(["nslookup", domain])
    elapsed = time.perf_counter() - started
    address = parse_nslookup_address(result.stdout) if result.ok else None
    return address, elapsed


def _test_resolution(ctx: "ActionContext") -> None:
    subheading("Testing DNS resolution:")
    timings = []
    for domain in DNS_TEST_DOMAINS:
        address, elapsed = resolve_domain(ctx, domain)
        timings.append((domain, elapsed, address is not None))
        if address:
            success(f"Resolving {domain}: {address}")
        else:
            error(f"Resolving {domain}: failed")

    subheading("DNS response times:")
    for domain, elapsed, resolved in timings:
        status = f"{elapsed:.3f}s" if resolved else "no answer"
        console.print(f"{escape(domain)}: {status}")


def check_dns_linux(ctx: "ActionContext") -> None:
    heading("DNS Configuration Check")
    subheading("Current DNS servers:")
    nameservers = parse_nameservers(read_text("/etc/resolv.conf"))
    if nameservers:
        for server in nameservers:
            console.print(f"  {escape(server)}")
    else:
        warning("No nameservers found in /etc/resolv.conf")

    for tool in ("resolvectl", "systemd-resolve"):
        if ctx.which(tool):
            subheading("Resolver status:")
            echo(head(ctx.runner.capture([tool, "status"]).stdout, 20))
            break

    _test_resolution(ctx)


def check_dns_mac(ctx: "ActionContext") -> None:
    heading("DNS Configuration Check")
    subheading("Current DNS servers:")
    servers = [
        line.strip()
        for line in ctx.runner.capture(["scutil", "--dns"]).stdout.splitlines()
        if re.search(r"nameserver\[\d+\]", line)
    ]
    unique = list(dict.fromkeys(servers))
    if unique:
        echo("\n".join(unique[:10]))
    else:
        warning("No DNS servers reported by scutil")

    for service in ("Wi-Fi", "Ethernet"):
        result = ctx.runner.capture(["networksetup", "-getdnsservers", service])
        if result.ok and result.stdout.strip():
            subheading(f"{service} DNS servers:")
            echo(result.stdout)

    _test_resolution(ctx)


# -- speed test --------------------------------------------------------------


def speed_test(tool: str, install_action: str) -> Callable[["ActionContext"], None]:
    """Handler running ``tool``, offering to install it first."""

    def handler(ctx: "ActionContext") -> None:
        heading("Internet Speed Test")
        if not ctx.is_installed(tool):
            warning(f"{tool} is not installed.")
            if not ask_install(ctx, tool, "to test your internet speed", install_action):
                raise ToolUnavailable(tool, f"Cannot check internet speed without {tool}")
        info("Testing internet speed...")
        warning("This may take a moment...")
        ctx.runner.run([tool])

    return handler


def actions() -> list["Action"]:
    return [
        menu_action(
            "Show Network Interfaces",
            "Browse network interfaces with live details.",
            mac=show_network_interfaces,
            linux=show_network_interfaces,
            interactive=True,
            steps={
                MAC: ["ifconfig -a | fzf --preview 'ifconfig {}'"],
                LINUX: ["ip link show | fzf --preview 'ip addr show {}'"],
            },
        ),
        menu_action(
            "Show Open Ports",
            "Browse listening TCP ports and their owning processes.",
            mac=show_open_ports_mac,
            linux=show_open_ports_linux,
            interactive=True,
            steps={
                MAC: ["lsof -nP -iTCP -sTCP:LISTEN"],
                LINUX: ["ss -tlnp || netstat -tlnp"],
            },
        ),
        menu_action(
            "Show Routing",
            "Show the default route, routing table and interface addresses.",
            mac=show_routing_mac,
            linux=show_routing_linux,
            steps={
                MAC: ["route get default", "netstat -rn", "ifconfig"],
                LINUX: ["ip route show default", "ip route show", "ip addr show"],
            },
        ),
        menu_action(
            "Check DNS",
            "Show DNS servers and test resolution of well-known domains.",
            mac=check_dns_mac,
            linux=check_dns_linux,
            steps={
                MAC: [
                    "scutil --dns | grep 'nameserver\\[[0-9]*\\]'",
                    "networksetup -getdnsservers Wi-Fi",
                    *(f"nslookup {domain}" for domain in DNS_TEST_DOMAINS),
                ],
                LINUX: [
                    "grep nameserver /etc/resolv.conf",
                    "resolvectl status",
                    *(f"nslookup {domain}" for domain in DNS_TEST_DOMAINS),
                ],
            },
        ),
        menu_action(
            "Check Internet Speed",
            "Run a speed test against the nearest server.",
            mac=speed_test("speedtest", "speedtest"),
            linux=speed_test("speedtest-cli", "speedtest-cli"),
            steps={MAC: ["speedtest"], LINUX: ["speedtest-cli"]},
        ),
    ]
