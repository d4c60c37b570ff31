"""
Dotfile Edits
-------------

Pure text transforms for ~/.zshrc and the Terminator config. Each one
returns the input unchanged when the setting is already in place, so the
steps built on them are idempotent.
"""

import re
from pathlib import Path
from typing import Dict, Sequence

from workstation_setup.commands import read_text_file

P10K_THEME = 'ZSH_THEME="powerlevel10k/powerlevel10k"'
ZSH_PLUGINS = ("zsh-autosuggestions", "zsh-completions")
COMPLETIONS_FPATH = 'fpath+=("$HOME/.oh-my-zsh/custom/plugins/zsh-completions/src")'
COMPLETIONS_BLOCK = f"\n{COMPLETIONS_FPATH}\nautoload -U compinit && compinit\n"

TERMINATOR_FONT = "MesloLGS NF 12"
TERMINATOR_SETTINGS: Dict[str, str] = {
    "font": TERMINATOR_FONT,
    "use_system_font": "False",
    "show_titlebar": "False",
}

_DRACULA_PALETTE = (
    '"#000000:#ff5555:#50fa7b:#f1fa8c:#bd93f9:#ff79c6:#8be9fd:#bbbbbb:'
    '#44475a:#ff5555:#50fa7b:#f1fa8c:#bd93f9:#ff79c6:#8be9fd:#ffffff"'
)

DRACULA_TERMINATOR_CONFIG = f"""\
[global_config]
[keybindings]
[profiles]
  [[dracula]]
    palette = {_DRACULA_PALETTE}
    background_color = "#282a36"
    background_darkness = 0.95
    background_type = transparent
    cursor_color = "#f8f8f2"
    foreground_color = "#f8f8f2"
    use_system_font = False
    font = {TERMINATOR_FONT}
    scrollbar_position = hidden
    show_titlebar = False
  [[default]]
    use_custom_command = False
    custom_command =
    palette = {_DRACULA_PALETTE}
    background_color = "#282a36"
    foreground_color = "#f8f8f2"
    scrollbar_position = hidden
    show_titlebar = False
    use_system_font = False
    font = {TERMINATOR_FONT}
[layouts]
  [[default]]
    [[[child1]]]
      type = Terminal
      profile = dracula
    [[[window0]]]
      type = Window
      parent = ""
      child = child1
[plugins]
"""


def _append(text: str, block: str) -> str:
    if text and not text.endswith("\n"):
        text += "\n"
    return text + block


# ----------------------------------------------------------------
# ~/.zshrc
# ----------------------------------------------------------------
def set_zsh_theme(text: str, theme_line: str = P10K_THEME) -> str:
    if re.search(rf"^{re.escape(theme_line)}", text, re.MULTILINE):
        return text
    if re.search(r"^ZSH_THEME=", text, re.MULTILINE):
        return re.sub(r"^ZSH_THEME=[^\r\n]*", theme_line, text, flags=re.MULTILINE)
    return _append(text, f"\n{theme_line}\n")


def enable_plugins(text: str, plugins: Sequence[str] = ZSH_PLUGINS) -> str:
    """Add plugins to the Oh My Zsh ``plugins=(...)`` line, creating it if absent."""
    if not re.search(r"^plugins=", text, re.MULTILINE):
        return _append(text, f"\nplugins=(git {' '.join(plugins)})\n")
    for plugin in plugins:
        if plugin in text:
            continue
        text = re.sub(
            r"^plugins=\(([^)]*)\)",
            lambda m: f"plugins=({m.group(1)} {plugin})",
            text,
            flags=re.MULTILINE,
        )
    return text


def ensure_completions_fpath(text: str) -> str:
    if COMPLETIONS_FPATH in text:
        return text
    return _append(text, COMPLETIONS_BLOCK)


def zshrc_plugins_configured(text: str) -> bool:
    return ensure_completions_fpath(enable_plugins(text)) == text


# ----------------------------------------------------------------
# Terminator
# ----------------------------------------------------------------
def has_terminator_profiles(text: str) -> bool:
    return "[profiles]" in text


def patch_terminator_config(
    text: str, settings: Dict[str, str] = TERMINATOR_SETTINGS
) -> str:
    """
    Force each setting to its value wherever it appears; when a setting
    appears nowhere, append it to both the dracula and default profiles.
    """
    for key, value in settings.items():
        pattern = rf"^([ \t]*{re.escape(key)}[ \t]*=[ \t]*).*$"
        if re.search(pattern, text, re.MULTILINE):
            text = re.sub(
                pattern, lambda m: f"{m.group(1)}{value}", text, flags=re.MULTILINE
            )
        else:
            text = _append(
                text,
                f"\n  [[dracula]]\n    {key} = {value}\n"
                f"  [[default]]\n    {key} = {value}\n",
            )
    return text


def terminator_config_satisfied(path: Path) -> bool:
    if not path.is_file():
        return False
    text = read_text_file(path)
    return has_terminator_profiles(text) and patch_terminator_config(text) == text
