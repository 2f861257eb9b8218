"""Installable programs and the "Install Programs" menu.

Most programs are a plain InstallSpec. The Linux fallbacks below only run
when no package manager is available and are tried in order until one
succeeds.
"""

from __future__ import annotations

import logging
import platform
from pathlib import Path
from typing import TYPE_CHECKING

from ..installer import install_program
from ..interactive.core import info, muted, warning
from ..types import Action, Category, InstallSpec, PackageVariant, Result
from .common import LINUX, MAC, browse, menu_action

if TYPE_CHECKING:
    from ..context import ActionContext

logger = logging.getLogger(__name__)

INSTALL_PROMPT = "Select a program to install (ESC to return): "

HOMEBREW_INSTALL_URL = "https://raw.githubusercontent.com/Homebrew/install/HEAD/install.sh"
HOMEBREW_SHELLENV = 'eval "$(/home/linuxbrew/.linuxbrew/bin/brew shellenv)"'
DOCKER_APP = "/Applications/Docker.app"

_GOARCH = {"x86_64": "amd64", "aarch64": "arm64", "armv7l": "arm"}


# -- Linux fallbacks ---------------------------------------------------------


def fallback_pip(ctx: "ActionContext", package: str) -> None:
    """pip install --user"""
    if ctx.which("pip3"):
        ctx.runner.run(["pip3", "install", "--user", package])
    else:
        ctx.runner.run(["python3", "-m", "pip", "install", "--user", package])


def fallback_fzf_git(ctx: "ActionContext", package: str) -> None:
    """git clone junegunn/fzf into ~/.fzf and run its installer"""
    target = Path.home() / ".fzf"
    ctx.runner.run(["git", "clone", "--depth", "1", "https://github.com/junegunn/fzf.git", str(target)])
    ctx.runner.run([str(target / "install"), "--all"])


def fallback_yazi_cargo(ctx: "ActionContext", package: str) -> None:
    """cargo install --locked yazi-fm yazi-cli"""
    ctx.runner.run(["cargo", "install", "--locked", "yazi-fm", "yazi-cli"])


def fallback_shfmt_go(ctx: "ActionContext", package: str) -> None:
    """go install mvdan.cc/sh/v3/cmd/shfmt@latest"""
    ctx.runner.run(["go", "install", "mvdan.cc/sh/v3/cmd/shfmt@latest"])


def fallback_shfmt_binary(ctx: "ActionContext", package: str) -> None:
    """download the shfmt release binary into /usr/local/bin"""
    arch = _GOARCH.get(platform.machine(), platform.machine())
    url = f"https://github.com/mvdan/sh/releases/latest/download/shfmt_v3.7.0_linux_{arch}"
    ctx.runner.run(["curl", "-fsSL", url, "-o", "/tmp/shfmt"])
    ctx.runner.run(["chmod", "+x", "/tmp/shfmt"])
    ctx.runner.run(["sudo", "mv", "/tmp/shfmt", "/usr/local/bin/shfmt"])


def fallback_docker_script(ctx: "ActionContext", package: str) -> None:
    """get.docker.com convenience script"""
    ctx.runner.shell("curl -fsSL https://get.docker.com | sh")
    ctx.runner.shell('sudo usermod -aG docker "$USER"')
    warning("Please log out and back in for Docker group permissions to take effect")


def fallback_nodesource(ctx: "ActionContext", package: str) -> None:
    """NodeSource LTS repository"""
    ctx.runner.shell("curl -fsSL https://deb.nodesource.com/setup_lts.x | sudo -E bash -")
    ctx.runner.run(["sudo", "apt-get", "install", "-y", "nodejs"])


def fallback_python_apt(ctx: "ActionContext", package: str) -> None:
    """apt-get install python3 python3-pip"""
    ctx.runner.run(["sudo", "apt-get", "update"])
    ctx.runner.run(["sudo", "apt-get", "install", "-y", "python3", "python3-pip"])


def fallback_python_yum(ctx: "ActionContext", package: str) -> None:
    """yum install python3 python3-pip"""
    ctx.runner.run(["sudo", "yum", "install", "-y", "python3", "python3-pip"])


def fallback_fastfetch_ppa(ctx: "ActionContext", package: str) -> None:
    """fastfetch PPA"""
    ctx.runner.run(["sudo", "add-apt-repository", "ppa:zhangsongcui3371/fastfetch", "-y"])
    ctx.runner.run(["sudo", "apt-get", "update"])
    ctx.runner.run(["sudo", "apt-get", "install", "-y", package])


def fallback_fastfetch_github(ctx: "ActionContext", package: str) -> None:
    """fastfetch release tarball from GitHub"""
    url = "https://github.com/fastfetch-cli/fastfetch/releases/latest/download/fastfetch-linux-amd64.tar.gz"
    ctx.runner.shell(
        f"cd /tmp && curl -fsSL {url} | tar -xz && "
        "sudo mv fastfetch-linux-amd64/usr/bin/fastfetch /usr/local/bin/ && "
        "rm -rf fastfetch-linux-amd64"
    )


def fallback_bat_apt(ctx: "ActionContext", package: str) -> None:
    """apt-get install bat, linking batcat to bat"""
    ctx.runner.run(["sudo", "apt-get", "update"])
    ctx.runner.run(["sudo", "apt-get", "install", "-y", package])
    if not ctx.which("bat") and Path("/usr/bin/batcat").exists():
        ctx.runner.run(["sudo", "ln", "-s", "/usr/bin/batcat", "/usr/local/bin/bat"])


def fallback_bat_deb(ctx: "ActionContext", package: str) -> None:
    """bat .deb from GitHub releases"""
    ctx.runner.shell(
        "cd /tmp && curl -fsSL -o bat.deb "
        "https://github.com/sharkdp/bat/releases/latest/download/bat_amd64.deb && "
        "sudo dpkg -i bat.deb && rm -f bat.deb"
    )


# -- special installers ------------------------------------------------------


def install_docker_mac(ctx: "ActionContext") -> Result:
    if Path(DOCKER_APP).is_dir():
        return Result.already_installed(f"Docker Desktop is already installed at {DOCKER_APP}")
    if ctx.is_installed("docker"):
        return Result.already_installed("Docker is already installed and available in PATH")
    return install_program(DOCKER.install, ctx)


def install_homebrew(ctx: "ActionContext") -> Result:
    """Run the upstream install script; on Linux also wire up shellenv."""
    if ctx.is_installed("brew"):
        return Result.already_installed("Homebrew is already installed!")

    info("Installing Homebrew...")
    ctx.runner.shell(f'/bin/bash -c "$(curl -fsSL {HOMEBREW_INSTALL_URL})"')

    if ctx.os == LINUX:
        for rc in (".bashrc", ".zshrc"):
            path = Path.home() / rc
            with open(path, "a") as f:
                f.write(f"\n{HOMEBREW_SHELLENV}\n")
            logger.info("appended brew shellenv to %s", path)
        muted(f"Please restart your shell or run: {HOMEBREW_SHELLENV}")
    return Result.success("Homebrew installation completed!")


# -- catalog -----------------------------------------------------------------


def installable(name: str, spec: InstallSpec, description: str = "") -> Action:
    """Installable action whose macOS and Linux handlers share ``spec``."""

    def handler(ctx: "ActionContext") -> Result:
        return install_program(spec, ctx)

    return Action(
        name=name,
        category=Category.INSTALLABLE,
        handlers={MAC: handler, LINUX: handler},
        description=description,
        install=spec,
    )


DOCKER = Action(
    name="Docker",
    category=Category.INSTALLABLE,
    handlers={
        MAC: install_docker_mac,
        LINUX: lambda ctx: install_program(DOCKER.install, ctx),
    },
    description="Container runtime (Docker Desktop on macOS).",
    install=InstallSpec(
        "docker",
        variant=PackageVariant.CASK,
        linux_fallbacks=(fallback_docker_script,),
    ),
    steps={
        MAC: (f"test -d {DOCKER_APP} || brew install --cask docker",),
    },
)

HOMEBREW = Action(
    name="Homebrew",
    category=Category.INSTALLABLE,
    handlers={MAC: install_homebrew, LINUX: install_homebrew},
    description="The missing package manager for macOS (and Linux).",
    install=InstallSpec("brew"),
    steps={
        MAC: (f'/bin/bash -c "$(curl -fsSL {HOMEBREW_INSTALL_URL})"',),
        LINUX: (
            f'/bin/bash -c "$(curl -fsSL {HOMEBREW_INSTALL_URL})"',
            f"echo '{HOMEBREW_SHELLENV}' >>~/.bashrc",
            f"echo '{HOMEBREW_SHELLENV}' >>~/.zshrc",
        ),
    },
)


def program_actions() -> list[Action]:
    return [
        installable("ncdu", InstallSpec("ncdu"), "Disk usage analyzer with an ncurses UI."),
        installable("htop", InstallSpec("htop"), "Interactive process viewer."),
        installable("FFmpeg", InstallSpec("ffmpeg"), "Audio and video converter."),
        installable("mpv", InstallSpec("mpv"), "Command line media player."),
        installable("ansible", InstallSpec("ansible"), "Agentless automation."),
        installable("go", InstallSpec("go", linux_package="golang"), "The Go toolchain."),
        installable("helm", InstallSpec("helm"), "Kubernetes package manager."),
        installable("duf", InstallSpec("duf"), "Disk usage/free utility."),
        installable("lnav", InstallSpec("lnav"), "Log file navigator."),
        installable(
            "ripgrep",
            InstallSpec("rg", mac_package="ripgrep", linux_package="ripgrep"),
            "Fast recursive grep.",
        ),
        installable("speedtest", InstallSpec("speedtest"), "Ookla speed test CLI."),
        installable(
            "speedtest-cli",
            InstallSpec("speedtest-cli", mac_package="speedtest"),
            "Python speed test CLI.",
        ),
        installable("lazygit", InstallSpec("lazygit"), "Terminal UI for git."),
        installable(
            "yt-dlp",
            InstallSpec("yt-dlp", linux_fallbacks=(fallback_pip,)),
            "Video downloader.",
        ),
        installable(
            "fzf",
            InstallSpec("fzf", linux_fallbacks=(fallback_fzf_git,)),
            "Command line fuzzy finder.",
        ),
        installable(
            "yazi",
            InstallSpec("yazi", linux_fallbacks=(fallback_yazi_cargo,)),
            "Terminal file manager.",
        ),
        installable("nnn", InstallSpec("nnn"), "Minimal terminal file manager."),
        installable(
            "shfmt",
            InstallSpec("shfmt", linux_fallbacks=(fallback_shfmt_go, fallback_shfmt_binary)),
            "Shell script formatter.",
        ),
        DOCKER,
        installable(
            "Node.js",
            InstallSpec("node", linux_package="nodejs", linux_fallbacks=(fallback_nodesource,)),
            "JavaScript runtime.",
        ),
        installable("Newsboat", InstallSpec("newsboat"), "RSS/Atom feed reader."),
        installable(
            "Python",
            InstallSpec(
                "python3",
                mac_package="python",
                linux_fallbacks=(fallback_python_apt, fallback_python_yum),
            ),
            "Python 3 interpreter and pip.",
        ),
        installable(
            "Fastfetch",
            InstallSpec(
                "fastfetch",
                linux_fallbacks=(fallback_fastfetch_ppa, fallback_fastfetch_github),
            ),
            "System information tool.",
        ),
        HOMEBREW,
        installable("Aerc", InstallSpec("aerc"), "Terminal email client."),
        installable(
            "Bat",
            InstallSpec("bat", linux_fallbacks=(fallback_bat_apt, fallback_bat_deb)),
            "cat clone with syntax highlighting.",
        ),
        installable(
            "Neovim",
            InstallSpec("nvim", mac_package="neovim", linux_package="neovim"),
            "Vim-fork text editor.",
        ),
        installable("k9s", InstallSpec("k9s"), "Kubernetes terminal UI."),
        installable("curl", InstallSpec("curl"), "URL transfer tool."),
        installable("wget", InstallSpec("wget"), "Network downloader."),
        installable("Nmap", InstallSpec("nmap"), "Network scanner."),
    ]


# -- Install Programs menu ---------------------------------------------------


def install_programs_menu(ctx: "ActionContext") -> Result:
    """Pick an installable and dispatch it."""
    names = ctx.registry.list_by_category(Category.INSTALLABLE) if ctx.registry else []
    picked = browse(
        ctx,
        names,
        prompt=INSTALL_PROMPT,
        header="Programs",
        preview="program",
    )
    if picked.cancelled or not picked.selected:
        return Result.cancelled()
    return ctx.dispatcher.execute(picked.selected, ctx.os)


def actions() -> list[Action]:
    return [
        menu_action(
            "Install Programs",
            "Pick a program and install it with the native package manager.",
            mac=install_programs_menu,
            linux=install_programs_menu,
            interactive=True,
            steps={
                MAC: ["brew install <program>"],
                LINUX: ["sudo apt install -y <program>  # or dnf / pacman / brew"],
            },
        ),
        *program_actions(),
    ]
