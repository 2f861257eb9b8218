"""Tests for the network actions."""

import pytest

from omni.actions import network
from omni.errors import ToolUnavailable
from omni.types import OSIdentifier

SS_OUTPUT = """\
State  Recv-Q Send-Q Local Address:Port  Peer Address:Port Process
LISTEN 0      4096   127.0.0.53%lo:53    0.0.0.0:*         users:(("systemd-resolve",pid=600,fd=14))
LISTEN 0      128    0.0.0.0:22          0.0.0.0:*         users:(("sshd",pid=812,fd=3))
LISTEN 0      128    [::]:22             [::]:*            users:(("sshd",pid=812,fd=4))
LISTEN 0      511    [::ffff:127.0.0.1]:8080 [::]:*
"""

LSOF_OUTPUT = """\
COMMAND   PID USER   FD   TYPE             DEVICE SIZE/OFF NODE NAME
rapportd  512 me     4u  IPv4 0x1234567890abcdef      0t0  TCP *:49152 (LISTEN)
ControlCe 498 me     9u  IPv4 0x1234567890abcdee      0t0  TCP *:7000 (LISTEN)
"""

IP_LINK_OUTPUT = """\
1: lo: <LOOPBACK,UP,LOWER_UP> mtu 65536 qdisc noqueue state UNKNOWN
    link/loopback 00:00:00:00:00:00 brd 00:00:00:00:00:00
2: enp0s3: <BROADCAST,MULTICAST,UP,LOWER_UP> mtu 1500 qdisc fq_codel state UP
    link/ether 08:00:27:aa:bb:cc brd ff:ff:ff:ff:ff:ff
5: veth12@if4: <BROADCAST,MULTICAST,UP,LOWER_UP> mtu 1500 qdisc noqueue
"""

PROC_NET_DEV = """\
Inter-|   Receive                            |  Transmit
 face |bytes    packets errs drop fifo frame compressed multicast|bytes
    lo: 1234      10    0    0    0     0          0         0     1234
  eth0: 99999    100    0    0    0     0          0         0     5555
"""

IFCONFIG_OUTPUT = """\
lo0: flags=8049<UP,LOOPBACK,RUNNING,MULTICAST> mtu 16384
\tinet 127.0.0.1 netmask 0xff000000
en0: flags=8863<UP,BROADCAST,SMART,RUNNING,SIMPLEX,MULTICAST> mtu 1500
\tether a4:83:e7:00:00:00
"""

NSLOOKUP_OUTPUT = """\
Server:\t\t127.0.0.53
Address:\t127.0.0.53#53

Non-authoritative answer:
Name:\tgoogle.com
Address: 142.250.74.46
"""


class TestParsers:
    def test_ss_rows(self):
        assert network.parse_ss_listening(SS_OUTPUT) == [
            "22\t812\t0.0.0.0:22",
            "22\t812\t:::22",
            "53\t600\t127.0.0.53%lo:53",
            "8080\t-\t127.0.0.1:8080",
        ]

    def test_lsof_rows_sorted_by_port(self):
        assert network.parse_lsof_listening(LSOF_OUTPUT) == [
            "ControlCe:498\t*:7000\tControlCe",
            "rapportd:512\t*:49152\trapportd",
        ]

    def test_ip_link(self):
        assert network.parse_ip_link(IP_LINK_OUTPUT) == ["enp0s3", "lo", "veth12"]

    def test_proc_net_dev(self):
        assert network.parse_proc_net_dev(PROC_NET_DEV) == ["eth0", "lo"]

    def test_ifconfig(self):
        assert network.parse_ifconfig(IFCONFIG_OUTPUT) == ["en0", "lo0"]

    def test_nslookup_skips_server_address(self):
        assert network.parse_nslookup_address(NSLOOKUP_OUTPUT) == "142.250.74.46"

    def test_nslookup_without_answer(self):
        assert network.parse_nslookup_address("** server can't find nope: NXDOMAIN\n") is None

    def test_nameservers(self):
        text = "# generated\nnameserver 1.1.1.1\nsearch lan\nnameserver 8.8.8.8\n"
        assert network.parse_nameservers(text) == ["1.1.1.1", "8.8.8.8"]

    def test_port_row_linux(self):
        fields = network.parse_port_row("22\t812\t0.0.0.0:22", OSIdentifier.LINUX)
        assert fields["port"] == "22"
        assert fields["pid"] == "812"

    def test_port_row_macos(self):
        fields = network.parse_port_row("rapportd:512\t*:49152\trapportd", OSIdentifier.MACOS)
        assert fields == {
            "port": "49152",
            "pid": "512",
            "address": "*:49152",
            "command": "rapportd",
        }


class TestOpenPorts:
    def test_linux_uses_ss_picker(self, ctx, host, runner, picker):
        host.installed.add("ss")
        runner.outputs[("ss", "-tlnp")] = SS_OUTPUT
        network.show_open_ports_linux(ctx)
        items, kwargs = picker.shown[0]
        assert items[0] == "22\t812\t0.0.0.0:22"
        assert kwargs["preview"] == "port"
        assert kwargs["height"] == "80%"

    def test_linux_without_any_tool(self, ctx):
        with pytest.raises(ToolUnavailable):
            network.show_open_ports_linux(ctx)

    def test_macos_uses_lsof(self, ctx, host, runner, picker):
        ctx.os = OSIdentifier.MACOS
        host.installed.add("lsof")
        runner.outputs[("lsof", "-nP", "-iTCP", "-sTCP:LISTEN")] = LSOF_OUTPUT
        network.show_open_ports_mac(ctx)
        items, _ = picker.shown[0]
        assert len(items) == 2


class TestInterfaces:
    def test_linux_with_ip(self, ctx, host, runner, picker):
        host.installed.add("ip")
        runner.outputs[("ip", "link", "show")] = IP_LINK_OUTPUT
        network.show_network_interfaces(ctx)
        items, kwargs = picker.shown[0]
        assert items == ["enp0s3", "lo", "veth12"]
        assert kwargs["preview"] == "interface"

    def test_macos_with_ifconfig(self, ctx, runner, picker):
        ctx.os = OSIdentifier.MACOS
        runner.outputs[("ifconfig", "-a")] = IFCONFIG_OUTPUT
        network.show_network_interfaces(ctx)
        assert picker.shown[0][0] == ["en0", "lo0"]


class TestDns:
    def test_resolution_report(self, ctx, runner, output):
        runner.outputs[("nslookup", "google.com")] = NSLOOKUP_OUTPUT
        network._test_resolution(ctx)
        text = output.getvalue()
        assert "Resolving google.com: 142.250.74.46" in text
        assert "Resolving github.com: failed" in text
        assert "github.com: no answer" in text


class TestSpeedTest:
    def test_runs_installed_tool(self, ctx, host, runner):
        host.installed.add("speedtest-cli")
        network.speed_test("speedtest-cli", "speedtest-cli")(ctx)
        assert runner.calls == [["speedtest-cli"]]

    def test_declined_install(self, ctx, runner, answers):
        answers.append(False)
        with pytest.raises(ToolUnavailable):
            network.speed_test("speedtest-cli", "speedtest-cli")(ctx)
        assert runner.calls == []
