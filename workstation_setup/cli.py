"""
Command-line entry points: ``ssh-setup`` and ``workstation-setup``.
"""

import argparse
import signal
import sys
from pathlib import Path
from typing import List, Optional

from workstation_setup.config import SetupConfig
from workstation_setup.errors import SetupError, StepFailedError
from workstation_setup.machine_setup import WorkstationSetup
from workstation_setup.runner import StepRunner
from workstation_setup.ssh_setup import run_ssh_setup
from workstation_setup.ui import (
    console,
    create_header,
    print_error,
    print_success,
    setup_logger,
)

SSH_DESCRIPTION = """\
Generates an ed25519 SSH key (if missing), configures ~/.ssh/config, starts
ssh-agent, adds the key, and prints the public key. Copies to clipboard if
xclip is available unless --no-copy is passed."""


class SetupArgumentParser(argparse.ArgumentParser):
    """Reports bad arguments on stderr, shows the help text and exits 1."""

    def error(self, message: str) -> None:
        if message.startswith("unrecognized arguments: "):
            message = "Unknown option: " + message[len("unrecognized arguments: "):]
        print_error(message)
        self.print_help()
        sys.exit(1)


def add_ssh_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--email",
        metavar="ADDR",
        help='Email/comment for the key. Default: "$USER@$HOSTNAME"',
    )
    parser.add_argument(
        "--force", action="store_true", help="Overwrite existing ~/.ssh/id_ed25519"
    )
    parser.add_argument(
        "--no-agent",
        dest="use_agent",
        action="store_false",
        help="Do not start ssh-agent or add the key",
    )
    parser.add_argument(
        "--no-copy",
        dest="do_copy",
        action="store_false",
        help="Do not copy public key to clipboard",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Echo debug logging to the console"
    )
    parser.add_argument("--log-file", type=Path, help="Write the debug log here")


def ssh_parser() -> argparse.ArgumentParser:
    parser = SetupArgumentParser(prog="ssh-setup", description=SSH_DESCRIPTION)
    add_ssh_arguments(parser)
    return parser


def workstation_parser() -> argparse.ArgumentParser:
    parser = SetupArgumentParser(
        prog="workstation-setup",
        description="Set up a new Ubuntu/Debian PC: zsh, Terminator, Neovim and SSH.",
    )
    add_ssh_arguments(parser)
    parser.add_argument(
        "--no-banner", action="store_true", help="Skip the ASCII art header"
    )
    return parser


def handle_signal(signum: int, frame) -> None:
    print_error(f"Received {signal.Signals(signum).name}. Exiting.")
    sys.exit(130 if signum == signal.SIGINT else 128 + signum)


def _build_config(args: argparse.Namespace) -> SetupConfig:
    config = SetupConfig.from_environment(
        email=args.email,
        force=args.force,
        use_agent=args.use_agent,
        do_copy=args.do_copy,
        log_file=args.log_file,
    )
    setup_logger(config.log_file, verbose=args.verbose)
    return config


def ssh_main(argv: Optional[List[str]] = None) -> int:
    args = ssh_parser().parse_args(argv)
    config = _build_config(args)
    runner = StepRunner(force=config.force)
    try:
        run_ssh_setup(config, runner)
    except StepFailedError:
        return 1
    except SetupError as e:
        print_error(str(e))
        return 1
    return 0


def workstation_main(argv: Optional[List[str]] = None) -> int:
    args = workstation_parser().parse_args(argv)
    config = _build_config(args)
    if not args.no_banner:
        console.print(create_header("Workstation"))
    runner = StepRunner(force=config.force)
    try:
        WorkstationSetup(config).run(runner)
    except StepFailedError:
        return 1
    except SetupError as e:
        print_error(str(e))
        return 1
    finally:
        if runner.results:
            runner.report()

    print_success("All done!")
    console.print("- Restart your terminal (or log out/in) to use zsh as default.")
    console.print(
        "- In Terminator, set font to MesloLGS NF for best powerlevel10k appearance."
    )
    return 0


def run_ssh() -> None:
    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)
    sys.exit(ssh_main())


def run_workstation() -> None:
    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)
    sys.exit(workstation_main())
