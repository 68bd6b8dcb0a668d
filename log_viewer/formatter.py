"""Console formatters: plain text and ANSI-colorized."""

from typing import Callable

from log_viewer.models import LogRecord

COLORS = {
    "DEBUG": "\033[36m",    # cyan
    "INFO": "\033[32m",     # green
    "SUCCESS": "\033[92m",  # bright green
    "WARN": "\033[33m",     # yellow
    "WARNING": "\033[33m",  # yellow
    "ERROR": "\033[31m",    # red
}
DIM = "\033[2m"
RESET = "\033[0m"

HISTORY_MARKER = "(history)"


def format_text(record: LogRecord) -> str:
    line = f"#{record.line_number} [{record.timestamp}] [{record.level}] {record.message}"
    if record.is_history:
        line += f" {HISTORY_MARKER}"
    return line


def format_color(record: LogRecord) -> str:
    """Same layout as format_text with the level colored and history dimmed."""
    color = COLORS.get(record.level.upper(), "")
    line = (
        f"{DIM}#{record.line_number}{RESET} [{record.timestamp}] "
        f"[{color}{record.level}{RESET}] {record.message}"
    )
    if record.is_history:
        line += f" {DIM}{HISTORY_MARKER}{RESET}"
    return line


def get_formatter(color: bool = False) -> Callable[[LogRecord], str]:
    return format_color if color else format_text
