import logging
import os
import shutil
import subprocess
from pathlib import Path
from typing import Dict, List, Optional, Union

from workstation_setup.ui import LOGGER_NAME

logger = logging.getLogger(LOGGER_NAME)


def command_exists(cmd: str) -> bool:
    return shutil.which(cmd) is not None


def run_command(
    cmd: List[str],
    capture_output: bool = False,
    check: bool = True,
    input: Optional[str] = None,
    cwd: Optional[Union[str, Path]] = None,
    env: Optional[Dict[str, str]] = None,
) -> subprocess.CompletedProcess:
    """
    Run an external command with no timeout. Raises CalledProcessError on a
    non-zero exit when check is set.
    """
    logger.debug(f"Running command: {' '.join(str(c) for c in cmd)}")
    full_env = None
    if env:
        full_env = os.environ.copy()
        full_env.update(env)
    result = subprocess.run(
        [str(c) for c in cmd],
        capture_output=capture_output,
        text=True,
        check=check,
        input=input,
        cwd=str(cwd) if cwd else None,
        env=full_env,
    )
    if capture_output and result.stderr:
        logger.debug(result.stderr.strip())
    return result


def read_text_file(path: Union[str, Path]) -> str:
    """
    Read a config file the way grep and sed would: line endings untouched
    and bytes that are not valid UTF-8 carried through as surrogates.
    """
    with open(path, encoding="utf-8", errors="surrogateescape", newline="") as f:
        return f.read()


def write_text_file(path: Union[str, Path], text: str) -> None:
    """Write text produced by read_text_file back with its original bytes."""
    with open(
        path, "w", encoding="utf-8", errors="surrogateescape", newline=""
    ) as f:
        f.write(text)
