"""
Hash verification for downloaded release artifacts.

This module provides:
- SHA256 file hashing
- Checksum manifest parsing (SHA256SUMS / goreleaser 'checksums.txt' format)
- Artifact verification against a manifest entry, using timing-attack
  resistant comparison
"""

import hashlib
import logging
import secrets
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterator, Optional

from .exceptions import ChecksumMismatchError

logger = logging.getLogger(__name__)

HASH_ALGORITHM = "sha256"
HASH_LENGTH = 64


def compute_file_hash(file_path: Path, algorithm: str = HASH_ALGORITHM) -> str:
    """
    Compute cryptographic hash of file.

    Args:
        file_path: Path to file
        algorithm: Hash algorithm name accepted by hashlib

    Returns:
        Lowercase hex string of hash

    Raises:
        FileNotFoundError: If file doesn't exist
        ValueError: If algorithm is not supported

    Example:
        >>> compute_file_hash(Path('cli_Linux_x86_64.tar.gz'))
        '9f86d081884c7d65...'
    """
    if not file_path.exists():
        raise FileNotFoundError(f"File not found: {file_path}")

    try:
        hasher = hashlib.new(algorithm)
    except ValueError:
        raise ValueError(f"Unsupported hash algorithm: {algorithm}")

    with open(file_path, "rb") as f:
        while chunk := f.read(8192):
            hasher.update(chunk)

    return hasher.hexdigest()


@dataclass
class ChecksumManifest:
    """
    Mapping of artifact filename to expected lowercase hex digest.

    Example:
        >>> manifest = ChecksumManifest.parse("abc123...  cli_Linux_x86_64.tar.gz\\n")
        >>> manifest.get("cli_Linux_x86_64.tar.gz")
        'abc123...'
    """

    entries: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def parse(cls, text: str) -> "ChecksumManifest":
        """
        Parse manifest text.

        Supports formats:
        - hash  filename
        - hash *filename
        - hash filename (with multiple spaces/tabs)

        Blank lines and '#' comments are skipped, as are lines that do not
        split into two fields and filenames that look like paths.
        """
        entries: Dict[str, str] = {}

        for line_num, line in enumerate(text.splitlines(), 1):
            line = line.strip()

            if not line or line.startswith("#"):
                continue

            parts = line.split(maxsplit=1)
            if len(parts) != 2:
                logger.warning(f"Skipping invalid checksum line {line_num}: {line}")
                continue

            hash_value = parts[0].strip().lower()
            filename = parts[1].strip()

            # Remove leading asterisk if present (binary mode indicator)
            if filename.startswith("*"):
                filename = filename[1:].strip()

            if ".." in filename or filename.startswith(("/", "\\")):
                logger.warning(
                    f"Skipping suspicious filename at line {line_num}: {filename}"
                )
                continue

            entries[filename] = hash_value

        return cls(entries)

    @classmethod
    def load(cls, path: Path) -> "ChecksumManifest":
        """Read and parse a manifest file."""
        if not path.exists():
            raise FileNotFoundError(f"Checksum file not found: {path}")
        return cls.parse(path.read_text(encoding="utf-8", errors="replace"))

    def get(self, filename: str) -> Optional[str]:
        """Expected digest for filename, or None if the manifest has no entry."""
        return self.entries.get(filename)

    def __contains__(self, filename: object) -> bool:
        return filename in self.entries

    def __iter__(self) -> Iterator[str]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)


def verify_artifact(
    artifact_path: Path, filename: str, manifest: ChecksumManifest
) -> str:
    """
    Verify a downloaded artifact against its manifest entry.

    Args:
        artifact_path: Downloaded file
        filename: Release filename the artifact was published under
        manifest: Parsed checksum manifest

    Returns:
        The verified digest

    Raises:
        ChecksumMismatchError: If the digest differs or the manifest has no
            entry for filename
        FileNotFoundError: If the artifact doesn't exist
    """
    actual = compute_file_hash(artifact_path).lower()
    expected = manifest.get(filename)

    if expected is None:
        logger.error(f"No checksum entry for {filename} in manifest")
        raise ChecksumMismatchError(filename, None, actual)

    expected = expected.strip().lower()
    if len(expected) != HASH_LENGTH:
        logger.error(
            f"Hash length {len(expected)} doesn't match expected {HASH_LENGTH} "
            f"for {HASH_ALGORITHM}"
        )

    if not _constant_time_compare(actual, expected):
        raise ChecksumMismatchError(filename, expected, actual)

    logger.debug(f"Checksum verified for {filename}: {actual}")
    return actual


def _constant_time_compare(a: str, b: str) -> bool:
    """Compare two strings in constant time to prevent timing attacks."""
    return secrets.compare_digest(a.encode("utf-8"), b.encode("utf-8"))


__all__ = [
    "ChecksumManifest",
    "compute_file_hash",
    "verify_artifact",
]
