"""
Workstation Setup (Unattended)
------------------------------

Provisions a fresh Debian/Ubuntu workstation:
  • Base packages via apt
  • Zsh as default shell, Oh My Zsh, powerlevel10k and zsh plugins
  • MesloLGS Nerd Fonts for powerlevel10k
  • Dracula theme for Terminator, Terminator as default terminal
  • Neovim built from source (stable) and the LazyVim starter
  • SSH key pair, ~/.ssh/config, ssh-agent and clipboard

Every step is skipped when its target state already holds, so the whole
run can be repeated safely.
"""

import logging
import shutil
import subprocess
from pathlib import Path
from typing import List, Optional
from urllib.parse import quote

from workstation_setup import checks
from workstation_setup.commands import (
    command_exists,
    read_text_file,
    run_command,
    write_text_file,
)
from workstation_setup.config import SetupConfig
from workstation_setup.dotfiles import (
    DRACULA_TERMINATOR_CONFIG,
    enable_plugins,
    ensure_completions_fpath,
    has_terminator_profiles,
    patch_terminator_config,
    set_zsh_theme,
    terminator_config_satisfied,
    zshrc_plugins_configured,
)
from workstation_setup.errors import EnvironmentMismatchError, StepError
from workstation_setup.runner import Step, StepRunner
from workstation_setup.ssh_setup import print_public_key, ssh_steps
from workstation_setup.ui import LOGGER_NAME, print_warning

logger = logging.getLogger(LOGGER_NAME)

PACKAGES: List[str] = [
    "git",
    "curl",
    "wget",
    "ca-certificates",
    "build-essential",
    "pkg-config",
    "libtool",
    "libtool-bin",
    "autoconf",
    "automake",
    "cmake",
    "g++",
    "unzip",
    "gettext",
    "ninja-build",
    "doxygen",
    "zsh",
    "terminator",
    "fonts-powerline",
    "ripgrep",
    "fd-find",
]

OH_MY_ZSH_INSTALLER = (
    "https://raw.githubusercontent.com/ohmyzsh/ohmyzsh/master/tools/install.sh"
)
POWERLEVEL10K_REPO = "https://github.com/romkatv/powerlevel10k.git"
ZSH_PLUGIN_REPOS = {
    "zsh-autosuggestions": "https://github.com/zsh-users/zsh-autosuggestions",
    "zsh-completions": "https://github.com/zsh-users/zsh-completions",
}
FONT_BASE_URL = "https://github.com/romkatv/powerlevel10k-media/raw/master"
FONT_FILES = [
    "MesloLGS NF Regular.ttf",
    "MesloLGS NF Bold.ttf",
    "MesloLGS NF Italic.ttf",
    "MesloLGS NF Bold Italic.ttf",
]
NEOVIM_REPO = "https://github.com/neovim/neovim.git"
LAZYVIM_STARTER_REPO = "https://github.com/LazyVim/starter"
TERMINATOR_BIN = "/usr/bin/terminator"
X_TERMINAL_EMULATOR = "/usr/bin/x-terminal-emulator"


def require_apt() -> None:
    if not command_exists("apt-get"):
        raise EnvironmentMismatchError("This script targets Debian/Ubuntu (apt).")


def clone_repo(url: str, dest: Path, branch: Optional[str] = None) -> None:
    cmd = ["git", "clone", "--depth=1"]
    if branch:
        cmd += ["-b", branch]
    run_command(cmd + [url, dest])


def pull_repo(dest: Path) -> None:
    run_command(["git", "-C", dest, "pull", "--ff-only"])


class WorkstationSetup:
    def __init__(self, config: SetupConfig):
        self.config = config
        self.apt_updated = False
        custom = config.oh_my_zsh_dir / "custom"
        self.p10k_dir = custom / "themes" / "powerlevel10k"
        self.plugin_dirs = {
            name: custom / "plugins" / name for name in ZSH_PLUGIN_REPOS
        }
        self.font_dir = config.home / ".local" / "share" / "fonts"
        self.terminator_config = config.home / ".config" / "terminator" / "config"
        self.neovim_src = config.home / ".local" / "src" / "neovim"
        self.nvim_config = config.home / ".config" / "nvim"

    def sudo(self, cmd: List) -> List:
        return self.config.sudo + cmd

    # ----------------------------------------------------------------
    # Packages & Shell
    # ----------------------------------------------------------------
    def update_apt_once(self) -> None:
        if not self.apt_updated:
            run_command(self.sudo(["apt-get", "update", "-y"]))
            self.apt_updated = True

    def packages_installed(self) -> bool:
        return all(checks.package_installed(pkg) for pkg in PACKAGES)

    def install_packages(self) -> str:
        self.update_apt_once()
        run_command(self.sudo(["apt-get", "install", "-y"] + PACKAGES))
        return "Installed base packages"

    def set_default_shell(self) -> str:
        zsh_path = shutil.which("zsh")
        if not zsh_path:
            raise StepError("zsh not found; cannot change default shell.")
        try:
            run_command(["chsh", "-s", zsh_path, self.config.user])
        except (subprocess.CalledProcessError, FileNotFoundError) as e:
            raise StepError(
                "Could not change shell automatically. "
                f"Change manually with: chsh -s {zsh_path}"
            ) from e
        return f"Default shell set to {zsh_path}"

    def install_oh_my_zsh(self) -> str:
        script = run_command(
            ["curl", "-fsSL", OH_MY_ZSH_INSTALLER], capture_output=True
        ).stdout
        run_command(
            ["sh", "-c", script],
            env={"RUNZSH": "no", "CHSH": "no", "KEEP_ZSHRC": "yes"},
        )
        return "Installed Oh My Zsh"

    # ----------------------------------------------------------------
    # Theme & Plugins
    # ----------------------------------------------------------------
    def install_powerlevel10k(self) -> str:
        clone_repo(POWERLEVEL10K_REPO, self.p10k_dir)
        return "Installed powerlevel10k"

    def zshrc_theme_configured(self) -> bool:
        zshrc = self.config.zshrc
        if not zshrc.is_file():
            return True
        text = read_text_file(zshrc)
        return set_zsh_theme(text) == text

    def configure_zshrc_theme(self) -> str:
        zshrc = self.config.zshrc
        write_text_file(zshrc, set_zsh_theme(read_text_file(zshrc)))
        return "Set ZSH_THEME to powerlevel10k in .zshrc"

    def zsh_plugins_present(self) -> bool:
        return checks.all_exist(self.plugin_dirs.values())

    def install_zsh_plugins(self) -> str:
        installed = []
        for name, dest in self.plugin_dirs.items():
            if not dest.exists():
                clone_repo(ZSH_PLUGIN_REPOS[name], dest)
                installed.append(name)
        return f"Installed {', '.join(installed)}"

    def update_zsh_plugins(self) -> str:
        for dest in [self.p10k_dir] + list(self.plugin_dirs.values()):
            pull_repo(dest)
        return "Pulled theme and plugin updates"

    def zshrc_plugins_configured(self) -> bool:
        zshrc = self.config.zshrc
        if not zshrc.is_file():
            return True
        return zshrc_plugins_configured(read_text_file(zshrc))

    def configure_zshrc_plugins(self) -> str:
        zshrc = self.config.zshrc
        text = enable_plugins(read_text_file(zshrc))
        write_text_file(zshrc, ensure_completions_fpath(text))
        return "Enabled zsh plugins in .zshrc"

    # ----------------------------------------------------------------
    # Fonts & Terminal
    # ----------------------------------------------------------------
    def fonts_present(self) -> bool:
        return checks.all_exist(self.font_dir / name for name in FONT_FILES)

    def install_nerd_fonts(self) -> str:
        self.font_dir.mkdir(parents=True, exist_ok=True)
        downloaded = []
        for name in FONT_FILES:
            dest = self.font_dir / name
            if dest.exists():
                continue
            logger.info(f"Downloading {name}...")
            run_command(["curl", "-fsSL", "-o", dest, f"{FONT_BASE_URL}/{quote(name)}"])
            downloaded.append(name)
        return f"Downloaded {len(downloaded)} font file(s)"

    def refresh_font_cache(self) -> str:
        run_command(["fc-cache", "-f", self.font_dir])
        return "Font cache refreshed"

    def apply_dracula_terminator(self) -> str:
        cfg = self.terminator_config
        cfg.parent.mkdir(parents=True, exist_ok=True)
        if not cfg.is_file() or not has_terminator_profiles(read_text_file(cfg)):
            write_text_file(cfg, DRACULA_TERMINATOR_CONFIG)
            return "Wrote Dracula Terminator config"
        print_warning(
            "Existing Terminator config detected. Updating font and titlebar settings."
        )
        write_text_file(cfg, patch_terminator_config(read_text_file(cfg)))
        return f"Updated {cfg}"

    def make_terminator_default(self) -> str:
        if not command_exists("terminator"):
            raise StepError("Terminator not found; cannot set as default terminal.")
        run_command(
            self.sudo(
                [
                    "update-alternatives",
                    "--install",
                    X_TERMINAL_EMULATOR,
                    "x-terminal-emulator",
                    TERMINATOR_BIN,
                    "50",
                ]
            )
        )
        run_command(
            self.sudo(["update-alternatives", "--set", "x-terminal-emulator", TERMINATOR_BIN])
        )
        return "Terminator set as default x-terminal-emulator"

    # ----------------------------------------------------------------
    # Editor
    # ----------------------------------------------------------------
    def build_neovim_from_source(self) -> str:
        self.neovim_src.parent.mkdir(parents=True, exist_ok=True)
        if not self.neovim_src.is_dir():
            clone_repo(NEOVIM_REPO, self.neovim_src, branch="stable")
        else:
            git = ["git", "-C", self.neovim_src]
            run_command(git + ["fetch", "--depth=1", "origin", "stable"], check=False)
            run_command(git + ["checkout", "stable"], check=False)
            run_command(git + ["pull", "--ff-only"], check=False)
        run_command(["make", "CMAKE_BUILD_TYPE=Release"], cwd=self.neovim_src)
        run_command(self.sudo(["make", "install"]), cwd=self.neovim_src)
        return "Built and installed Neovim (stable)"

    def install_lazyvim(self) -> str:
        clone_repo(LAZYVIM_STARTER_REPO, self.nvim_config)
        shutil.rmtree(self.nvim_config / ".git", ignore_errors=True)
        return "Installed LazyVim starter"

    # ----------------------------------------------------------------
    # Step Table
    # ----------------------------------------------------------------
    def steps(self) -> List[Step]:
        return [
            Step(
                name="Base packages",
                check=self.packages_installed,
                apply=self.install_packages,
                skip_message="Base packages already installed.",
            ),
            Step(
                name="Default shell",
                check=lambda: checks.shell_is(self.config.shell, "zsh"),
                apply=self.set_default_shell,
                required=False,
                verify=False,
                skip_message="Zsh already default shell.",
            ),
            Step(
                name="Oh My Zsh",
                check=self.config.oh_my_zsh_dir.is_dir,
                apply=self.install_oh_my_zsh,
                skip_message="Oh My Zsh already installed.",
            ),
            Step(
                name="powerlevel10k",
                check=self.p10k_dir.is_dir,
                apply=self.install_powerlevel10k,
                skip_message="powerlevel10k already present.",
            ),
            Step(
                name="Zsh theme",
                check=self.zshrc_theme_configured,
                apply=self.configure_zshrc_theme,
                skip_message="ZSH_THEME already configured.",
            ),
            Step(
                name="Zsh plugins",
                check=self.zsh_plugins_present,
                apply=self.install_zsh_plugins,
                skip_message="Zsh plugins already present.",
            ),
            Step(
                name="Theme and plugin updates",
                apply=self.update_zsh_plugins,
                required=False,
            ),
            Step(
                name="Zshrc plugins",
                check=self.zshrc_plugins_configured,
                apply=self.configure_zshrc_plugins,
                skip_message="Zsh plugins already enabled in .zshrc.",
            ),
            Step(
                name="Nerd fonts",
                check=self.fonts_present,
                apply=self.install_nerd_fonts,
                skip_message="MesloLGS NF fonts already present.",
            ),
            Step(
                name="Font cache",
                apply=self.refresh_font_cache,
                required=False,
            ),
            Step(
                name="Terminator config",
                check=lambda: terminator_config_satisfied(self.terminator_config),
                apply=self.apply_dracula_terminator,
                skip_message="Terminator config already themed.",
            ),
            Step(
                name="Default terminal",
                apply=self.make_terminator_default,
                required=False,
            ),
            Step(
                name="Neovim",
                check=lambda: command_exists("nvim"),
                apply=self.build_neovim_from_source,
                verify=False,
                skip_message="Neovim already installed.",
            ),
            Step(
                name="LazyVim",
                check=lambda: checks.dir_not_empty(self.nvim_config),
                apply=self.install_lazyvim,
                required=False,
                skip_message=f"{self.nvim_config} is not empty. Skipping LazyVim starter clone.",
            ),
        ] + ssh_steps(self.config)

    def run(self, runner: StepRunner) -> None:
        require_apt()
        runner.run_all(self.steps())
        print_public_key(self.config)
