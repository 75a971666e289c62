"""
Install command implementation.

Installs (or upgrades) the miru binary from a GitHub release.
"""

import logging
import os

from miru_installer.cli.utils import ConsoleReporter, print_error
from miru_installer.core.config import load_config
from miru_installer.core.exceptions import InstallerError
from miru_installer.installer.installer import ReleaseInstaller

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the install command.

    Args:
        args: Parsed command-line arguments with:
            - version: Version to install (None for latest)
            - quiet / verbose: Output level
            - install_dir: Optional install directory override
            - config: Optional YAML config file

    Returns:
        Exit code (0 for success, 1 for any installer error)
    """
    environ = dict(os.environ)

    # The GitHub Action passes its 'version' input through the environment
    requested = args.version or environ.get("INPUT_VERSION") or None

    try:
        config = load_config(
            environ,
            config_file=args.config,
            install_dir=args.install_dir,
            quiet=args.quiet,
            verbose=args.verbose,
        )
        installer = ReleaseInstaller(config, reporter=ConsoleReporter(config.quiet))
        result = installer.install(requested)
    except InstallerError as e:
        logger.debug("Install failed", exc_info=True)
        print_error(str(e))
        return 1

    logger.debug(f"Install finished: {result.outcome.value} {result.version}")
    return 0
