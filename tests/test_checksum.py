"""ChecksumVerifier tests.

Tests cover:
    - compute() matches hashlib SHA-1
    - verify(): match, uppercase digest, empty digest skip
    - verify(): mismatch and malformed digest raise DigestMismatchError
    - unreadable file raises InstallIOError
"""

import hashlib

import pytest

from paasctl.exceptions import DigestMismatchError, InstallIOError
from paasctl.plugins.checksum import ChecksumVerifier


@pytest.fixture
def artifact(tmp_path):
    path = tmp_path / "plugin"
    path.write_bytes(b"plugin-binary" * 1000)
    return path


class TestCompute:
    def test_matches_hashlib(self, artifact):
        assert ChecksumVerifier().compute(artifact) == hashlib.sha1(artifact.read_bytes()).hexdigest()

    def test_missing_file_raises_install_io_error(self, tmp_path):
        with pytest.raises(InstallIOError) as exc_info:
            ChecksumVerifier().compute(tmp_path / "nope")
        assert exc_info.value.path.endswith("nope")


class TestVerify:
    def test_matching_digest_returns_true(self, artifact):
        digest = hashlib.sha1(artifact.read_bytes()).hexdigest()
        assert ChecksumVerifier().verify(artifact, digest) is True

    def test_digest_comparison_is_case_insensitive(self, artifact):
        digest = hashlib.sha1(artifact.read_bytes()).hexdigest().upper()
        assert ChecksumVerifier().verify(artifact, digest) is True

    def test_empty_digest_skips(self, artifact):
        assert ChecksumVerifier().verify(artifact, "") is False

    def test_none_digest_skips(self, artifact):
        assert ChecksumVerifier().verify(artifact, None) is False

    def test_mismatch_raises(self, artifact):
        wrong = "0" * 40
        with pytest.raises(DigestMismatchError) as exc_info:
            ChecksumVerifier().verify(artifact, wrong)
        err = exc_info.value
        assert err.expected == wrong
        assert err.actual == hashlib.sha1(artifact.read_bytes()).hexdigest()
        assert "does not match" in str(err)

    def test_mismatch_leaves_file_alone(self, artifact):
        with pytest.raises(DigestMismatchError):
            ChecksumVerifier().verify(artifact, "f" * 40)
        assert artifact.exists()

    @pytest.mark.parametrize("bad", ["abc", "z" * 40, "0" * 64])
    def test_malformed_digest_is_a_mismatch(self, artifact, bad):
        with pytest.raises(DigestMismatchError):
            ChecksumVerifier().verify(artifact, bad)
