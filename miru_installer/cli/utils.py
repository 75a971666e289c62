"""
Shared output helpers for the CLI.

Status and warnings go to stdout (suppressed by --quiet); errors always go to
stderr.
"""

import sys
from typing import Optional, TextIO

from miru_installer.installer.installer import StatusReporter

RED = "\033[0;31m"
GREEN = "\033[0;32m"
YELLOW = "\033[1;33m"
NC = "\033[0m"


def _colorize(text: str, color: str, stream: TextIO) -> str:
    """Wrap text in an ANSI color when stream is a terminal."""
    isatty = getattr(stream, "isatty", None)
    if isatty is not None and isatty():
        return f"{color}{text}{NC}"
    return text


def safe_print(message: str, file=None):
    """
    Print message with safe encoding handling for limited consoles.

    Falls back to replacing characters the stream cannot encode.
    """
    stream = file or sys.stdout
    try:
        print(message, file=stream, flush=True)
    except UnicodeEncodeError:
        encoding = getattr(stream, "encoding", None) or "ascii"
        print(
            message.encode(encoding, errors="replace").decode(encoding),
            file=stream,
            flush=True,
        )


def print_error(message: str, details: Optional[str] = None):
    """
    Print error message to stderr in consistent format.

    Args:
        message: Main error message
        details: Optional additional details
    """
    safe_print(f"{_colorize('Error:', RED, sys.stderr)} {message}", file=sys.stderr)
    if details:
        safe_print(f"  {details}", file=sys.stderr)


class ConsoleReporter(StatusReporter):
    """Prints installer progress to stdout unless quiet."""

    def __init__(self, quiet: bool = False, stream: Optional[TextIO] = None):
        self.quiet = quiet
        self.stream = stream

    def status(self, message: str) -> None:
        if self.quiet:
            return
        stream = self.stream or sys.stdout
        safe_print(f"{_colorize('==>', GREEN, stream)} {message}", file=stream)

    def warning(self, message: str) -> None:
        if self.quiet:
            return
        stream = self.stream or sys.stdout
        safe_print(f"{_colorize('Warning:', YELLOW, stream)} {message}", file=stream)


__all__ = ["ConsoleReporter", "print_error", "safe_print"]
