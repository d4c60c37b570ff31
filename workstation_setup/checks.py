"""Predicates over filesystem and process state. None of these mutate anything."""

import stat
import subprocess
from pathlib import Path
from typing import Iterable, Optional

from workstation_setup.commands import run_command


def has_mode(path: Path, mode: int) -> bool:
    try:
        return stat.S_IMODE(path.stat().st_mode) == mode
    except FileNotFoundError:
        return False


def dir_with_mode(path: Path, mode: int) -> bool:
    return path.is_dir() and has_mode(path, mode)


def dir_not_empty(path: Path) -> bool:
    return path.is_dir() and any(path.iterdir())


def all_exist(paths: Iterable[Path]) -> bool:
    return all(Path(p).exists() for p in paths)


def package_installed(package: str) -> bool:
    try:
        run_command(["dpkg", "-s", package], capture_output=True)
        return True
    except (subprocess.CalledProcessError, FileNotFoundError):
        return False


def process_running(name: str, user: Optional[str] = None) -> bool:
    cmd = ["pgrep"] + (["-u", user] if user else []) + [name]
    try:
        return run_command(cmd, capture_output=True, check=False).returncode == 0
    except FileNotFoundError:
        return False


def shell_is(shell: str, name: str) -> bool:
    return name in shell

