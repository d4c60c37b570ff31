"""
Console & Logging Helpers
-------------------------

Nord-themed Rich console, status line printers, the Pyfiglet header panel
and the logger used by every setup step.
"""

import logging
import os
from pathlib import Path
from typing import Iterable, Optional, Union

import pyfiglet
from rich.align import Align
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from rich.theme import Theme

from workstation_setup import APP_NAME, VERSION


# ----------------------------------------------------------------
# Nord-Themed Colors and Theme Setup
# ----------------------------------------------------------------
class NordColors:
    POLAR_NIGHT_3: str = "#434C5E"
    SNOW_STORM_2: str = "#E5E9F0"
    FROST_1: str = "#8FBCBB"
    FROST_2: str = "#88C0D0"
    FROST_3: str = "#81A1C1"
    FROST_4: str = "#5E81AC"
    RED: str = "#BF616A"
    YELLOW: str = "#EBCB8B"
    GREEN: str = "#A3BE8C"


nord_theme = Theme(
    {
        "banner": f"bold {NordColors.FROST_2}",
        "header": f"bold {NordColors.FROST_2}",
        "info": NordColors.FROST_2,
        "warning": NordColors.YELLOW,
        "error": NordColors.RED,
        "debug": NordColors.POLAR_NIGHT_3,
        "success": NordColors.GREEN,
    }
)

console = Console(theme=nord_theme, highlight=False)
err_console = Console(theme=nord_theme, highlight=False, stderr=True)

LOGGER_NAME = "workstation_setup"


# ----------------------------------------------------------------
# Simple Message Printing Helpers
# ----------------------------------------------------------------
def print_message(
    text: str, style: str = NordColors.FROST_2, prefix: str = "•"
) -> None:
    console.print(f"[{style}]{prefix} {escape(text)}[/{style}]", soft_wrap=True)


def print_success(message: str) -> None:
    print_message(message, NordColors.GREEN, "✓")


def print_warning(message: str) -> None:
    print_message(message, NordColors.YELLOW, "⚠")


def print_error(message: str) -> None:
    err_console.print(
        f"[{NordColors.RED}]✗ {escape(message)}[/{NordColors.RED}]", soft_wrap=True
    )


def print_step(message: str) -> None:
    print_message(message, NordColors.FROST_3, "→")


def create_header(title: str) -> Panel:
    """
    Generate an ASCII art header with gradient styling using Pyfiglet.
    Falls back through a few compact fonts until one renders.
    """
    ascii_art = ""
    for font in ("slant", "small", "standard"):
        try:
            ascii_art = pyfiglet.Figlet(font=font, width=80).renderText(title)
        except pyfiglet.FontNotFound:
            continue
        if ascii_art.strip():
            break

    ascii_lines = [line for line in ascii_art.splitlines() if line.strip()]
    colors = [
        NordColors.FROST_1,
        NordColors.FROST_2,
        NordColors.FROST_3,
        NordColors.FROST_4,
    ]
    combined = Text()
    for i, line in enumerate(ascii_lines):
        combined.append(line, style=f"bold {colors[i % len(colors)]}")
        if i < len(ascii_lines) - 1:
            combined.append("\n")
    return Panel(
        Align.center(combined),
        border_style=NordColors.FROST_1,
        padding=(1, 2),
        title=Text(f"{APP_NAME} v{VERSION}", style=f"bold {NordColors.SNOW_STORM_2}"),
        title_align="right",
    )


def print_status_report(results: Iterable, title: str = "Setup Status Report") -> None:
    """Render one row per step result: name, outcome and reason."""
    table = Table(title=title, style="banner")
    table.add_column("Step", style="header")
    table.add_column("Status")
    table.add_column("Message", style="info")
    for result in results:
        color = {
            "applied": "success",
            "skipped": "debug",
            "failed": "error" if result.required else "warning",
        }[result.outcome.value]
        table.add_row(
            result.name,
            f"[{color}]{result.outcome.value.upper()}[/{color}]",
            escape(result.reason or ""),
        )
    console.print(table)


# ----------------------------------------------------------------
# Logger Setup
# ----------------------------------------------------------------
def setup_logger(
    log_file: Optional[Union[str, Path]] = None, verbose: bool = False
) -> logging.Logger:
    """
    Configure the package logger with a Rich console handler and, when a
    path is given, a persistent file handler readable only by the owner.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()

    rich_handler = RichHandler(
        console=err_console,
        rich_tracebacks=True,
        markup=False,
        show_time=False,
        show_path=False,
    )
    rich_handler.setLevel(logging.DEBUG if verbose else logging.WARNING)
    logger.addHandler(rich_handler)

    if log_file is not None:
        log_file = Path(log_file)
        try:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_file)
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(
                logging.Formatter(
                    "[%(asctime)s] [%(levelname)s] %(message)s", "%Y-%m-%d %H:%M:%S"
                )
            )
            logger.addHandler(file_handler)
            os.chmod(str(log_file), 0o600)
        except OSError as e:
            logger.warning(f"Could not set up file logging to {log_file}: {e}")

    return logger
