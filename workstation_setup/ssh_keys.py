"""
SSH Key Pair Management
-----------------------

Generates an ed25519 key pair with ssh-keygen, re-derives a missing public
key from its private key, and keeps both files at the expected modes.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from workstation_setup.checks import has_mode
from workstation_setup.commands import run_command
from workstation_setup.ui import LOGGER_NAME, print_warning

logger = logging.getLogger(LOGGER_NAME)

PRIVATE_KEY_MODE = 0o600
PUBLIC_KEY_MODE = 0o644
KDF_ROUNDS = 100


@dataclass
class KeyPair:
    private_path: Path
    comment: str
    public_path: Path = field(init=False)

    def __post_init__(self) -> None:
        self.private_path = Path(self.private_path)
        self.public_path = self.private_path.with_name(self.private_path.name + ".pub")

    @property
    def has_private(self) -> bool:
        return self.private_path.is_file()

    @property
    def has_public(self) -> bool:
        return self.public_path.is_file()

    def modes_ok(self) -> bool:
        return has_mode(self.private_path, PRIVATE_KEY_MODE) and has_mode(
            self.public_path, PUBLIC_KEY_MODE
        )

    def is_complete(self) -> bool:
        """Both halves present with the expected permissions."""
        return self.has_private and self.has_public and self.modes_ok()

    def public_key_text(self) -> str:
        return self.public_path.read_text()

    def fix_modes(self) -> None:
        os.chmod(self.private_path, PRIVATE_KEY_MODE)
        os.chmod(self.public_path, PUBLIC_KEY_MODE)

    def remove(self) -> None:
        for path in (self.private_path, self.public_path):
            if path.exists():
                path.unlink()

    def generate(self) -> None:
        run_command(
            [
                "ssh-keygen",
                "-t",
                "ed25519",
                "-a",
                str(KDF_ROUNDS),
                "-C",
                self.comment,
                "-f",
                self.private_path,
                "-N",
                "",
                "-q",
            ]
        )
        self.fix_modes()

    def derive_public(self) -> None:
        result = run_command(
            ["ssh-keygen", "-y", "-f", self.private_path], capture_output=True
        )
        self.public_path.write_text(result.stdout)
        os.chmod(self.public_path, PUBLIC_KEY_MODE)


def ensure_key_pair(pair: KeyPair, force: bool = False) -> str:
    """
    Bring the key pair to a complete state, choosing the mutator by which
    parts are present. Returns a description of what was done.
    """
    if force and (pair.has_private or pair.has_public):
        print_warning(f"Overwriting existing key at {pair.private_path}")
        pair.remove()

    if not pair.has_private:
        if pair.has_public:
            # orphaned public key; ssh-keygen refuses to overwrite it
            pair.public_path.unlink()
        logger.info(f"Generating SSH ed25519 key with comment: {pair.comment}")
        pair.generate()
        return f"Generated SSH ed25519 key with comment: {pair.comment}"

    if not pair.has_public:
        logger.info("Public key missing; recreating from private key")
        pair.derive_public()
        os.chmod(pair.private_path, PRIVATE_KEY_MODE)
        return f"Recreated {pair.public_path} from private key"

    pair.fix_modes()
    return f"Fixed permissions on {pair.private_path}"
