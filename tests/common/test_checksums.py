"""Tests for digest utilities."""

import hashlib

import pytest
from filesplitter.common import UnsupportedDigestError
from filesplitter.common.checksums import (
    DigestAccumulator,
    compute_digest,
    compute_file_digest,
    validate_algorithm,
)


class TestComputeDigest:
    """Tests for compute_digest function."""

    def test_digest_is_deterministic(self):
        """Test that the same bytes always give the same digest."""
        data = b"some block content"

        assert compute_digest(data) == compute_digest(data)

    def test_digest_differs_for_different_content(self):
        """Test that different content gives different digests."""
        assert compute_digest(b"Content A") != compute_digest(b"Content B")

    def test_default_algorithm_is_md5(self):
        """Test that the default digest is a 32-character MD5 hex string."""
        result = compute_digest(b"hello")

        assert result == hashlib.md5(b"hello").hexdigest()
        assert len(result) == 32
        assert all(c in '0123456789abcdef' for c in result)

    def test_empty_input(self):
        """Test that empty input is valid."""
        assert compute_digest(b"") == "d41d8cd98f00b204e9800998ecf8427e"

    def test_other_algorithm(self):
        """Test digest with sha256."""
        result = compute_digest(b"hello", "sha256")

        assert result == hashlib.sha256(b"hello").hexdigest()
        assert len(result) == 64

    def test_unknown_algorithm(self):
        """Test that unknown algorithms are rejected."""
        with pytest.raises(UnsupportedDigestError) as exc_info:
            compute_digest(b"data", "not-a-hash")

        assert exc_info.value.context == {"algorithm": "not-a-hash"}


class TestDigestAccumulator:
    """Tests for streaming digests."""

    def test_matches_digest_of_concatenation(self):
        """Test that streaming over pieces equals hashing the whole buffer."""
        pieces = [b"first", b"", b"second", b"x" * 70000]
        accumulator = DigestAccumulator()

        for piece in pieces:
            accumulator.update(piece)

        assert accumulator.hexdigest() == compute_digest(b"".join(pieces))
        assert accumulator.bytes_seen == sum(len(p) for p in pieces)

    def test_no_updates_equals_empty_digest(self):
        """Test accumulator with no input."""
        assert DigestAccumulator("sha1").hexdigest() == compute_digest(b"", "sha1")


class TestComputeFileDigest:
    """Tests for compute_file_digest function."""

    def test_large_file(self, tmp_path):
        """Test digest of a file larger than the read chunk size."""
        content = bytes(range(256)) * 1024
        large_file = tmp_path / "large.bin"
        large_file.write_bytes(content)

        assert compute_file_digest(large_file) == compute_digest(content)

    def test_empty_file(self, tmp_path):
        """Test digest of an empty file."""
        empty_file = tmp_path / "empty.bin"
        empty_file.write_bytes(b"")

        assert compute_file_digest(empty_file) == compute_digest(b"")

    def test_nonexistent_file(self, tmp_path):
        """Test that a missing file raises OSError."""
        with pytest.raises(OSError):
            compute_file_digest(tmp_path / "does_not_exist.bin")


class TestValidateAlgorithm:
    """Tests for validate_algorithm function."""

    def test_normalizes_case(self):
        assert validate_algorithm("SHA256") == "sha256"

    def test_rejects_variable_length_algorithm(self):
        """Test that SHAKE algorithms (no fixed digest size) are rejected."""
        with pytest.raises(UnsupportedDigestError):
            validate_algorithm("shake_128")
