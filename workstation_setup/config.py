import getpass
import os
import socket
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional


@dataclass
class SetupConfig:
    """
    Everything a provisioning run needs to know about the current user and
    the requested behavior. Built once at startup and passed to every step.
    """

    user: str
    hostname: str
    home: Path
    email: str = ""
    force: bool = False
    use_agent: bool = True
    do_copy: bool = True
    shell: str = ""
    sudo: List[str] = field(default_factory=list)
    log_file: Optional[Path] = None

    ssh_dir: Path = field(init=False)
    key_file: Path = field(init=False)
    ssh_config_file: Path = field(init=False)

    def __post_init__(self) -> None:
        self.home = Path(self.home)
        if not self.email:
            self.email = f"{self.user}@{self.hostname}"
        self.ssh_dir = self.home / ".ssh"
        self.key_file = self.ssh_dir / "id_ed25519"
        self.ssh_config_file = self.ssh_dir / "config"

    @property
    def zshrc(self) -> Path:
        return self.home / ".zshrc"

    @property
    def oh_my_zsh_dir(self) -> Path:
        return self.home / ".oh-my-zsh"

    @classmethod
    def from_environment(
        cls,
        email: Optional[str] = None,
        force: bool = False,
        use_agent: bool = True,
        do_copy: bool = True,
        log_file: Optional[Path] = None,
    ) -> "SetupConfig":
        """Read user, host and privilege details from the running process."""
        home = Path.home()
        return cls(
            user=getpass.getuser(),
            hostname=socket.gethostname(),
            home=home,
            email=email or "",
            force=force,
            use_agent=use_agent,
            do_copy=do_copy,
            shell=os.environ.get("SHELL", ""),
            sudo=[] if os.geteuid() == 0 else ["sudo"],
            log_file=log_file
            or home / ".local" / "state" / "workstation-setup" / "setup.log",
        )
