"""
Entry point for running the installer as a module.

Usage: python -m miru_installer [--version=<v>] [--quiet]
"""

from miru_installer.cli.parser import main

if __name__ == "__main__":
    main()
