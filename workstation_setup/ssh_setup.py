"""
SSH Key Setup
-------------

Ordered steps that leave the user with an ed25519 key pair, a merged
~/.ssh/config, the key loaded into ssh-agent and the public key on the
clipboard. Both the standalone ``ssh-setup`` command and the full machine
setup run this same list.
"""

import os
from typing import List

from workstation_setup.checks import dir_with_mode
from workstation_setup.config import SetupConfig
from workstation_setup.runner import Step, StepRunner
from workstation_setup.ssh_agent import add_key_to_agent, copy_to_clipboard, key_loaded
from workstation_setup.ssh_config import ssh_config_satisfied, write_ssh_config
from workstation_setup.ssh_keys import KeyPair, ensure_key_pair

SSH_DIR_MODE = 0o700
PUBLIC_KEY_BANNER = "----- PUBLIC KEY (add to GitHub/GitLab/Server) -----"


def ensure_ssh_dir(config: SetupConfig) -> str:
    config.ssh_dir.mkdir(parents=True, exist_ok=True)
    os.chmod(config.ssh_dir, SSH_DIR_MODE)
    return f"Prepared {config.ssh_dir}"


def ssh_steps(config: SetupConfig) -> List[Step]:
    pair = KeyPair(config.key_file, config.email)
    steps = [
        Step(
            name="SSH directory",
            check=lambda: dir_with_mode(config.ssh_dir, SSH_DIR_MODE),
            apply=lambda: ensure_ssh_dir(config),
            skip_message=f"{config.ssh_dir} already present",
        ),
        Step(
            name="SSH key pair",
            check=pair.is_complete,
            apply=lambda: ensure_key_pair(pair, force=config.force),
            forceable=True,
            skip_message=(
                f"SSH key already exists: {pair.private_path} "
                "(use --force to overwrite)"
            ),
        ),
        Step(
            name="SSH config",
            check=lambda: ssh_config_satisfied(config.ssh_config_file),
            apply=lambda: write_ssh_config(config.ssh_config_file),
            skip_message=f"{config.ssh_config_file} already configured",
        ),
    ]
    if config.use_agent:
        steps.append(
            Step(
                name="ssh-agent",
                check=lambda: key_loaded(pair.public_path),
                apply=lambda: add_key_to_agent(pair.private_path, config.user),
                required=False,
                verify=False,
                skip_message="Key already loaded in ssh-agent",
            )
        )
    if config.do_copy:
        steps.append(
            Step(
                name="Clipboard",
                apply=lambda: copy_to_clipboard(pair.public_path),
                required=False,
                verify=False,
            )
        )
    return steps


def print_public_key(config: SetupConfig) -> None:
    print(PUBLIC_KEY_BANNER)
    print(KeyPair(config.key_file, config.email).public_key_text(), end="")


def run_ssh_setup(config: SetupConfig, runner: StepRunner) -> None:
    """Run the SSH steps; a failed required step raises StepFailedError."""
    runner.run_all(ssh_steps(config))
    print_public_key(config)
