"""
Console output and logging setup for ocap-pull.
"""
import logging
import os
import sys
from typing import Optional, TextIO


RED = '\033[0;31m'
GREEN = '\033[0;32m'
YELLOW = '\033[1;33m'
BLUE = '\033[0;34m'
RESET = '\033[0m'


def _use_color(stream: TextIO) -> bool:
    if os.environ.get('NO_COLOR'):
        return False
    isatty = getattr(stream, 'isatty', None)
    return bool(isatty and isatty())


def _emit(tag: str, color: str, text: str, stream: TextIO):
    if _use_color(stream):
        print(f"{color}[{tag}]{RESET} {text}", file=stream)
    else:
        print(f"[{tag}] {text}", file=stream)


class Console:
    """Handles console output with severity-tagged prefixes."""

    @staticmethod
    def info(text: str):
        """Print info message."""
        _emit('INFO', BLUE, text, sys.stdout)

    @staticmethod
    def success(text: str):
        """Print success message."""
        _emit('SUCCESS', GREEN, text, sys.stdout)

    @staticmethod
    def warning(text: str):
        """Print warning message."""
        _emit('WARNING', YELLOW, text, sys.stderr)

    @staticmethod
    def error(text: str):
        """Print error message."""
        _emit('ERROR', RED, text, sys.stderr)

    @staticmethod
    def line(text: str = ""):
        """Print an untagged line."""
        print(text)


def configure_logging(verbose: bool = False, level_name: Optional[str] = None):
    """
    Configure stdlib logging for diagnostic output.

    Console messages are the user-facing channel; loggers carry git command
    lines and HTTP attempts and stay quiet unless asked.

    Args:
        verbose: Force DEBUG level
        level_name: Level name (e.g. "INFO"), used when not verbose
    """
    if verbose:
        level = logging.DEBUG
    else:
        level = logging.getLevelName((level_name or 'WARNING').upper())
        if not isinstance(level, int):
            raise ValueError(f"Unknown log level: {level_name}")

    logging.basicConfig(
        level=level,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
        stream=sys.stderr,
    )
    logging.getLogger('ocap_pull').setLevel(level)
