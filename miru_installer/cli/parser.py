"""
miru installer CLI argument parser.

This module implements the command-line interface using argparse:

    miru-install [--version=<v>] [--quiet|-q] [--verbose] [--install-dir DIR] [--config PATH]
"""

import argparse
import logging
import signal
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional

from miru_installer.cli.utils import print_error

logger = logging.getLogger(__name__)

# Signals that should unwind the run (and its workspace cleanup) like Ctrl+C
INTERRUPT_SIGNALS = tuple(
    getattr(signal, name) for name in ("SIGTERM", "SIGHUP") if hasattr(signal, name)
)


def _raise_interrupt(signum, frame):
    raise KeyboardInterrupt(f"Received signal {signum}")


@contextmanager
def interrupt_on_signals() -> Iterator[None]:
    """
    Turn termination signals into KeyboardInterrupt while the block runs.

    This lets `finally` blocks (workspace cleanup) run when the process is
    terminated. Outside the main thread signal handlers cannot be installed
    and the block runs unchanged.
    """
    previous = {}
    try:
        for signum in INTERRUPT_SIGNALS:
            previous[signum] = signal.signal(signum, _raise_interrupt)
    except ValueError:
        logger.debug("Not in main thread, signal handlers not installed")

    try:
        yield
    finally:
        for signum, handler in previous.items():
            signal.signal(signum, handler)


class CLI:
    """miru installer command-line interface."""

    def __init__(self):
        """Initialize CLI with argument parser."""
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """
        Create argument parser.

        Returns:
            Configured ArgumentParser instance
        """
        parser = argparse.ArgumentParser(
            prog="miru-install",
            description="Install or upgrade the miru CLI from GitHub releases",
            epilog=(
                "Environment: INSTALL_DIR, SUDO, MAX_RETRIES, RETRY_DELAY, "
                "DOWNLOAD_TIMEOUT, INPUT_VERSION"
            ),
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )

        parser.add_argument(
            "--version",
            metavar="VERSION",
            help="Version to install, with or without 'v' prefix (default: latest)",
        )
        parser.add_argument(
            "--quiet",
            "-q",
            action="store_true",
            help="Suppress status output (errors are still shown)",
        )
        parser.add_argument(
            "--verbose", "-v", action="store_true", help="Enable debug logging"
        )
        parser.add_argument(
            "--install-dir",
            type=Path,
            metavar="DIR",
            help="Install directory (default: $INSTALL_DIR or /usr/local/bin)",
        )
        parser.add_argument(
            "--config",
            type=Path,
            metavar="PATH",
            help="YAML file with installer settings",
        )

        return parser

    def parse_args(self, args: Optional[List[str]] = None):
        """
        Parse command-line arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Parsed arguments namespace
        """
        return self.parser.parse_args(args)

    def run(self, args: Optional[List[str]] = None) -> int:
        """
        Run CLI with given arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Exit code (0 for success, non-zero for error)
        """
        parsed_args = self.parse_args(args)

        self._configure_logging(parsed_args)

        try:
            with interrupt_on_signals():
                from miru_installer.cli.commands import install

                return install.run(parsed_args)
        except KeyboardInterrupt:
            print_error("Installation interrupted")
            return 130  # Standard exit code for SIGINT
        except Exception as e:
            logger.error(f"Unexpected error: {e}")
            if parsed_args.verbose:
                import traceback

                traceback.print_exc()
            return 1

    def _configure_logging(self, args):
        """
        Configure logging based on verbose/quiet flags.

        Args:
            args: Parsed arguments with verbose/quiet flags
        """
        if args.verbose:
            level = logging.DEBUG
            format_str = "%(levelname)s [%(name)s] %(message)s"
        elif args.quiet:
            level = logging.ERROR
            format_str = "%(levelname)s: %(message)s"
        else:
            level = logging.WARNING
            format_str = "%(message)s"

        logging.basicConfig(
            level=level,
            format=format_str,
            stream=sys.stderr,
            force=True,  # Reconfigure if already configured
        )


def main():
    """Main entry point for CLI."""
    cli = CLI()
    sys.exit(cli.run())


if __name__ == "__main__":
    main()
