"""
SSH Config Merger
-----------------

Keeps ~/.ssh/config carrying a wildcard ``Host *`` block with a minimum set
of directives. Detection is by text presence anywhere in the file, not by
parsing the config grammar: the file only ever needs to match one known
template, and presence-based detection makes the merge idempotent.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

from workstation_setup.commands import read_text_file, write_text_file

WILDCARD_HEADER = "Host *"
DIRECTIVE_INDENT = "    "


@dataclass(frozen=True)
class Directive:
    line: str
    # Text whose presence anywhere in the file counts as already configured.
    marker: str


# Checked and inserted in this order; each insert lands directly under the
# header, so a file missing all three ends up with them in reverse order.
REQUIRED_DIRECTIVES: Tuple[Directive, ...] = (
    Directive("AddKeysToAgent yes", "AddKeysToAgent"),
    Directive("IdentityFile ~/.ssh/id_ed25519", "IdentityFile ~/.ssh/id_ed25519"),
    Directive("HashKnownHosts yes", "HashKnownHosts"),
)

DEFAULT_CONFIG = """\
Host *
    AddKeysToAgent yes
    IdentityFile ~/.ssh/id_ed25519
    HashKnownHosts yes
    ServerAliveInterval 60
    ServerAliveCountMax 5

Host github.com
    HostName github.com
    User git
    IdentityFile ~/.ssh/id_ed25519

Host gitlab.com
    HostName gitlab.com
    User git
    IdentityFile ~/.ssh/id_ed25519
"""


def _is_wildcard_header(line: str) -> bool:
    return line.rstrip("\r\n").rstrip() == WILDCARD_HEADER


def missing_directives(
    text: str, required: Tuple[Directive, ...] = REQUIRED_DIRECTIVES
) -> List[Directive]:
    return [d for d in required if d.marker not in text]


def has_wildcard_block(text: str) -> bool:
    return any(_is_wildcard_header(line) for line in text.splitlines())


def merge_ssh_config(
    text: Optional[str], required: Tuple[Directive, ...] = REQUIRED_DIRECTIVES
) -> Tuple[str, List[str]]:
    """
    Return the updated document and the lines that were added.

    ``None`` means no config file exists yet and yields the default document.
    Otherwise every byte of the existing text is preserved; missing
    directives are inserted as the first line of the first ``Host *`` block,
    which is appended to the end of the file when absent.
    """
    if text is None:
        return DEFAULT_CONFIG, [WILDCARD_HEADER] + [d.line for d in required]

    added: List[str] = []
    eol = "\r\n" if "\r\n" in text else "\n"
    if not has_wildcard_block(text):
        if text and not text.endswith("\n"):
            text += eol
        text += f"{eol}{WILDCARD_HEADER}{eol}"
        added.append(WILDCARD_HEADER)

    lines = text.splitlines(keepends=True)
    header_index = next(i for i, line in enumerate(lines) if _is_wildcard_header(line))
    header = lines[header_index]
    if header.endswith("\r\n"):
        eol = "\r\n"
    elif header.endswith("\n"):
        eol = "\n"
    else:
        lines[header_index] += eol

    for directive in required:
        if directive.marker in "".join(lines):
            continue
        lines.insert(header_index + 1, f"{DIRECTIVE_INDENT}{directive.line}{eol}")
        added.append(directive.line)

    return "".join(lines), added


def ssh_config_satisfied(path: Path) -> bool:
    """True when the file exists, needs no merge and is owner read/write only."""
    if not path.is_file():
        return False
    text = read_text_file(path)
    if not has_wildcard_block(text) or missing_directives(text):
        return False
    return (path.stat().st_mode & 0o777) == 0o600


def write_ssh_config(path: Path) -> str:
    """Create or merge the config file at path and tighten its mode."""
    existing = read_text_file(path) if path.is_file() else None
    merged, added = merge_ssh_config(existing)
    if merged != existing:
        write_text_file(path, merged)
    os.chmod(path, 0o600)

    if existing is None:
        return f"Created {path}"
    if added:
        return f"Updated {path} (added: {', '.join(added)})"
    return f"Tightened permissions on {path}"
