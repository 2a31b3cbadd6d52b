"""Digest utilities for block and file integrity verification."""

import hashlib
from pathlib import Path

from .errors import UnsupportedDigestError

# Constants for digest calculation
DEFAULT_DIGEST_ALGORITHM = "md5"
DIGEST_CHUNK_SIZE = 65536  # 64 KB chunks


def _new_hasher(algorithm: str):
    """Create a hashlib object, rejecting unknown and variable-length algorithms."""
    try:
        hasher = hashlib.new(algorithm)
    except (ValueError, TypeError) as e:
        raise UnsupportedDigestError(
            f"Unknown digest algorithm: {algorithm}", algorithm=algorithm
        ) from e

    # SHAKE variants report digest_size 0 and need an explicit length
    if hasher.digest_size == 0:
        raise UnsupportedDigestError(
            f"Digest algorithm has no fixed length: {algorithm}", algorithm=algorithm
        )
    return hasher


def validate_algorithm(algorithm: str) -> str:
    """Check that a digest algorithm can be used for part hashing.

    Args:
        algorithm: hashlib algorithm name (e.g. "md5", "sha256")

    Returns:
        The normalized (lowercase) algorithm name

    Raises:
        UnsupportedDigestError: If the algorithm is unknown or variable-length
    """
    normalized = algorithm.lower()
    _new_hasher(normalized)
    return normalized


def compute_digest(data: bytes, algorithm: str = DEFAULT_DIGEST_ALGORITHM) -> str:
    """
    Compute the hex digest of a byte buffer.

    Used for:
    - Per-part digests (block extractor, part file names)
    - Whole-file digest comparisons (verifier)

    Args:
        data: Bytes to hash (empty input is valid)
        algorithm: hashlib algorithm name

    Returns:
        Fixed-length lowercase hex string
    """
    hasher = _new_hasher(algorithm)
    hasher.update(data)
    return hasher.hexdigest()


class DigestAccumulator:
    """Streaming digest over a sequence of buffers.

    Produces the same value as compute_digest() over the concatenation
    of everything passed to update().
    """

    def __init__(self, algorithm: str = DEFAULT_DIGEST_ALGORITHM) -> None:
        self.algorithm = algorithm
        self._hasher = _new_hasher(algorithm)
        self.bytes_seen = 0

    def update(self, data: bytes) -> None:
        self._hasher.update(data)
        self.bytes_seen += len(data)

    def hexdigest(self) -> str:
        return self._hasher.hexdigest()


def compute_file_digest(file_path: Path, algorithm: str = DEFAULT_DIGEST_ALGORITHM) -> str:
    """
    Compute the hex digest of an entire file.

    Reads the file in 64 KB chunks so memory stays bounded for large sources.

    Args:
        file_path: Path to the file
        algorithm: hashlib algorithm name

    Returns:
        Hex digest string, equal to compute_digest() of the file contents

    Raises:
        OSError: If file cannot be read
    """
    accumulator = DigestAccumulator(algorithm)

    with open(file_path, 'rb') as f:
        while chunk := f.read(DIGEST_CHUNK_SIZE):
            accumulator.update(chunk)

    return accumulator.hexdigest()
