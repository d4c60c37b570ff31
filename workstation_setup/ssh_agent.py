"""Best-effort agent registration and clipboard copy for the public key."""

import logging
import os
import re
import subprocess
from pathlib import Path
from typing import Dict

from workstation_setup.checks import process_running
from workstation_setup.commands import command_exists, run_command
from workstation_setup.errors import StepError
from workstation_setup.ui import LOGGER_NAME

logger = logging.getLogger(LOGGER_NAME)

_AGENT_VAR = re.compile(r"^(SSH_AUTH_SOCK|SSH_AGENT_PID)=([^;]+);", re.MULTILINE)


def parse_agent_output(output: str) -> Dict[str, str]:
    """Extract the exported variables from ``ssh-agent -s`` output."""
    return dict(_AGENT_VAR.findall(output))


def start_agent() -> Dict[str, str]:
    result = run_command(["ssh-agent", "-s"], capture_output=True)
    variables = parse_agent_output(result.stdout)
    os.environ.update(variables)
    logger.debug(f"Started ssh-agent: {variables}")
    return variables


def key_loaded(public_key: Path) -> bool:
    """True when the agent already holds the key whose public half is given."""
    if not public_key.is_file() or not command_exists("ssh-add"):
        return False
    fields = public_key.read_text().split()
    if len(fields) < 2:
        return False
    result = run_command(["ssh-add", "-L"], capture_output=True, check=False)
    return result.returncode == 0 and fields[1] in result.stdout


def add_key_to_agent(key_file: Path, user: str) -> str:
    if not process_running("ssh-agent", user):
        try:
            start_agent()
        except (subprocess.CalledProcessError, FileNotFoundError) as e:
            logger.debug(f"Could not start ssh-agent: {e}")
    try:
        run_command(["ssh-add", key_file], capture_output=True)
    except (subprocess.CalledProcessError, FileNotFoundError) as e:
        raise StepError("Could not add key to agent (is agent running?)") from e
    return f"Added {key_file} to ssh-agent"


def copy_to_clipboard(public_key: Path) -> str:
    if not command_exists("xclip"):
        raise StepError("xclip not installed; cannot copy to clipboard automatically.")
    run_command(
        ["xclip", "-selection", "clipboard"], input=public_key.read_text()
    )
    return "Public key copied to clipboard."
