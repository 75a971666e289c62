"""
Installer configuration.

Settings are collected once at startup into an InstallerConfig value and passed
to every component. Precedence (lowest to highest):

1. Built-in defaults
2. Optional YAML config file
3. Environment variables (INSTALL_DIR, SUDO, MAX_RETRIES, ...)
4. Command-line overrides
"""

import logging
import os
import platform
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional

import yaml

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)


BINARY_NAME = "miru"
GITHUB_REPO = "mirurobotics/cli"

DEFAULT_INSTALL_DIR = Path("/usr/local/bin")
HOMEBREW_BIN_DIR = Path("/opt/homebrew/bin")
DEFAULT_RELEASE_API_URL = f"https://api.github.com/repos/{GITHUB_REPO}"
DEFAULT_ARTIFACT_BASE_URL = f"https://github.com/{GITHUB_REPO}/releases/download"

# Environment variable -> config field
ENV_VARS = {
    "INSTALL_DIR": "install_dir",
    "SUDO": "sudo",
    "MAX_RETRIES": "max_retries",
    "RETRY_DELAY": "retry_delay",
    "DOWNLOAD_TIMEOUT": "timeout",
    "RELEASE_API_URL": "release_api_url",
    "ARTIFACT_BASE_URL": "artifact_base_url",
}


@dataclass(frozen=True)
class InstallerConfig:
    """
    Configuration for a single installer run.

    Attributes:
        install_dir: Directory the binary is installed into
        sudo: Privilege-escalation prefix for install steps ('' for none)
        max_retries: Attempts per download (>= 1)
        retry_delay: Seconds to wait between attempts
        timeout: Seconds allowed per download attempt
        release_api_url: Base URL of the release API
        artifact_base_url: Base URL release archives are served from
        binary_name: Name of the installed executable
        quiet: Suppress status and warning output
        verbose: Enable debug logging
        environ: Environment snapshot used for PATH and CI checks
    """

    install_dir: Path = DEFAULT_INSTALL_DIR
    sudo: str = ""
    max_retries: int = 3
    retry_delay: float = 2.0
    timeout: float = 60.0
    release_api_url: str = DEFAULT_RELEASE_API_URL
    artifact_base_url: str = DEFAULT_ARTIFACT_BASE_URL
    binary_name: str = BINARY_NAME
    quiet: bool = False
    verbose: bool = False
    environ: Mapping[str, str] = field(default_factory=dict, repr=False)

    @property
    def binary_path(self) -> Path:
        """Full path of the installed executable."""
        return self.install_dir / self.binary_name

    def release_url(self, version: str, filename: str) -> str:
        """Build the download URL for a release asset."""
        return f"{self.artifact_base_url.rstrip('/')}/{version}/{filename}"

    def latest_release_url(self) -> str:
        """Build the release API URL for the latest release."""
        return f"{self.release_api_url.rstrip('/')}/releases/latest"


def load_yaml_config(config_file: Path) -> Dict[str, Any]:
    """
    Load and parse a YAML configuration file.

    Args:
        config_file: Path to YAML configuration file

    Returns:
        Configuration dictionary

    Raises:
        ConfigurationError: If the file is missing, malformed, or not a mapping
    """
    if not config_file.exists():
        raise ConfigurationError(f"Configuration file not found: {config_file}")

    logger.debug(f"Loading configuration from {config_file}")

    try:
        with open(config_file, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {config_file}: {e}")

    config = config or {}
    if not isinstance(config, dict):
        raise ConfigurationError(
            f"Invalid configuration in {config_file}: expected a mapping"
        )

    known = {f.name for f in fields(InstallerConfig)} - {"environ", "binary_name"}
    unknown = sorted(set(config) - known)
    if unknown:
        logger.warning(
            f"Ignoring unknown configuration keys in {config_file}: {', '.join(unknown)}"
        )

    return {k: v for k, v in config.items() if k in known}


def _to_int(name: str, value: Any) -> int:
    try:
        number = int(str(value).strip())
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got: {value!r}")
    if number < 1:
        raise ConfigurationError(f"{name} must be at least 1, got: {number}")
    return number


def _to_float(name: str, value: Any, allow_zero: bool) -> float:
    try:
        number = float(str(value).strip())
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got: {value!r}")
    if number < 0 or (number == 0 and not allow_zero):
        bound = "non-negative" if allow_zero else "positive"
        raise ConfigurationError(f"{name} must be {bound}, got: {number}")
    return number


_CONVERTERS: Dict[str, Callable[[str, Any], Any]] = {
    "install_dir": lambda name, v: Path(str(v)).expanduser(),
    "sudo": lambda name, v: str(v).strip(),
    "max_retries": _to_int,
    "retry_delay": lambda name, v: _to_float(name, v, allow_zero=True),
    "timeout": lambda name, v: _to_float(name, v, allow_zero=False),
    "release_api_url": lambda name, v: str(v).strip(),
    "artifact_base_url": lambda name, v: str(v).strip(),
    "quiet": lambda name, v: bool(v),
    "verbose": lambda name, v: bool(v),
}


def _default_install_dir() -> Path:
    """Default install directory, preferring Homebrew's bin on Apple Silicon."""
    if (
        platform.system() == "Darwin"
        and platform.machine() == "arm64"
        and HOMEBREW_BIN_DIR.is_dir()
    ):
        return HOMEBREW_BIN_DIR
    return DEFAULT_INSTALL_DIR


def load_config(
    environ: Optional[Mapping[str, str]] = None,
    config_file: Optional[Path] = None,
    **overrides: Any,
) -> InstallerConfig:
    """
    Build the configuration for one installer run.

    Args:
        environ: Environment mapping (defaults to os.environ)
        config_file: Optional YAML file with installer settings
        **overrides: Command-line values; None values are ignored

    Returns:
        InstallerConfig

    Raises:
        ConfigurationError: If any value is invalid

    Example:
        >>> config = load_config({"INSTALL_DIR": "/tmp/bin", "MAX_RETRIES": "1"})
        >>> config.binary_path
        PosixPath('/tmp/bin/miru')
    """
    environ = dict(os.environ if environ is None else environ)

    values: Dict[str, Any] = {}
    sources: Dict[str, str] = {}

    if config_file is not None:
        for key, value in load_yaml_config(Path(config_file)).items():
            values[key] = value
            sources[key] = f"{config_file}:{key}"

    for env_name, key in ENV_VARS.items():
        raw = environ.get(env_name)
        if not raw:
            continue
        values[key] = raw
        sources[key] = env_name

    for key, value in overrides.items():
        if value is None:
            continue
        if key not in _CONVERTERS:
            raise TypeError(f"Unknown configuration option: {key}")
        values[key] = value
        sources[key] = f"--{key.replace('_', '-')}"

    converted = {
        key: _CONVERTERS[key](sources[key], value) for key, value in values.items()
    }
    if "install_dir" not in converted:
        converted["install_dir"] = _default_install_dir()

    config = replace(InstallerConfig(environ=environ), **converted)
    logger.debug(f"Loaded configuration: {config}")
    return config


__all__ = [
    "BINARY_NAME",
    "InstallerConfig",
    "load_config",
    "load_yaml_config",
]
