import subprocess
from typing import List

import pytest

from workstation_setup.config import SetupConfig


@pytest.fixture
def home(tmp_path):
    path = tmp_path / "home"
    path.mkdir()
    return path


@pytest.fixture
def config(home):
    return SetupConfig(
        user="tester",
        hostname="devbox",
        home=home,
        email="test@example.com",
        use_agent=False,
        do_copy=False,
        shell="/bin/bash",
        sudo=["sudo"],
    )


@pytest.fixture
def fake_home(monkeypatch, home):
    """Point Path.home() at the temporary home for CLI-level tests."""
    monkeypatch.setenv("HOME", str(home))
    return home


class CommandRecorder:
    """Stands in for run_command, recording each call and succeeding."""

    def __init__(self, stdout: str = ""):
        self.calls: List[List[str]] = []
        self.kwargs: List[dict] = []
        self.stdout = stdout

    def __call__(self, cmd, **kwargs):
        cmd = [str(c) for c in cmd]
        self.calls.append(cmd)
        self.kwargs.append(kwargs)
        return subprocess.CompletedProcess(cmd, 0, stdout=self.stdout, stderr="")


@pytest.fixture
def recorder():
    return CommandRecorder()
