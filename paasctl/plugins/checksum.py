"""ChecksumVerifier — content digest of a local artifact vs. the index's digest.

Algorithm: SHA-1, the digest plugin indexes publish in ``binaries[].checksum``.
"""

from __future__ import annotations

import hashlib
import logging
import re
from pathlib import Path

from paasctl.exceptions import DigestMismatchError, InstallIOError

logger = logging.getLogger(__name__)

ALGORITHM = "sha1"
_HEX_LENGTH = hashlib.new(ALGORITHM).digest_size * 2
_HEX_RE = re.compile(rf"^[0-9a-f]{{{_HEX_LENGTH}}}$")
_CHUNK_SIZE = 64 * 1024


class ChecksumVerifier:
    """Verifies artifacts against hex digests (case-insensitive)."""

    def compute(self, path: Path) -> str:
        """Return the lowercase hex digest of *path*.

        Raises:
            InstallIOError: File cannot be read.
        """
        digest = hashlib.new(ALGORITHM)
        try:
            with Path(path).open("rb") as fh:
                for chunk in iter(lambda: fh.read(_CHUNK_SIZE), b""):
                    digest.update(chunk)
        except OSError as exc:
            raise InstallIOError(f"Cannot read '{path}' for checksum: {exc}", path=str(path)) from exc
        return digest.hexdigest()

    def verify(self, path: Path, expected_hex: str) -> bool:
        """Compare *path* against *expected_hex*.

        Returns:
            ``True`` if the digest was compared and matched, ``False`` if
            *expected_hex* is empty and verification was skipped.

        Raises:
            DigestMismatchError: Digest differs, or *expected_hex* is not a
                well-formed SHA-1 hex string.
            InstallIOError: File cannot be read.
        """
        expected = (expected_hex or "").strip().lower()
        if not expected:
            logger.debug("No checksum published for '%s'; skipping verification", path)
            return False

        if not _HEX_RE.match(expected):
            raise DigestMismatchError(
                f"Published checksum '{expected_hex}' is not a valid {ALGORITHM} digest "
                f"({_HEX_LENGTH} hex characters); cannot verify '{Path(path).name}'",
                path=str(path),
                expected=expected_hex,
            )

        actual = self.compute(path)
        if actual != expected:
            raise DigestMismatchError(
                f"Downloaded plugin binary's checksum does not match repo metadata "
                f"(expected {expected}, got {actual})",
                path=str(path),
                expected=expected,
                actual=actual,
            )
        logger.debug("Checksum OK for '%s' (%s)", path, actual)
        return True
