"""Verification of a completed split.

Reconstructs the logical byte stream by reading parts in global order
through a streaming digest, and compares it with the whole-file digest
taken before splitting. On mismatch each part is re-hashed against its
own recorded digest to localize the damage.
"""

import logging
from pathlib import Path
from typing import Iterable, List

from filesplitter.common import DigestAccumulator, compute_file_digest
from .errors import IntegrityError
from .models import Part

logger = logging.getLogger(__name__)

READ_CHUNK_SIZE = 1024 * 1024  # 1 MB


def _ordered(parts: Iterable[Part]) -> List[Part]:
    parts = list(parts)
    if any(part.global_order is None for part in parts):
        raise ValueError("Parts must be merged (global_order assigned) before verification")
    return sorted(parts, key=lambda p: p.global_order)


def reconstruct_digest(parts: Iterable[Part], output_dir: Path, algorithm: str = "md5") -> str:
    """Digest the concatenation of all part files in global order.

    Raises:
        IntegrityError: If a part file is missing or unreadable
    """
    accumulator = DigestAccumulator(algorithm)

    for part in _ordered(parts):
        part_path = Path(output_dir) / part.file_name
        try:
            with open(part_path, 'rb') as f:
                while chunk := f.read(READ_CHUNK_SIZE):
                    accumulator.update(chunk)
        except OSError as e:
            raise IntegrityError(
                f"Cannot read part file: {part.file_name}",
                part=part.file_name,
                order=part.global_order,
            ) from e

    return accumulator.hexdigest()


def find_corrupt_parts(parts: Iterable[Part], output_dir: Path, algorithm: str = "md5") -> List[str]:
    """Return names of parts whose content no longer matches their recorded digest.

    Missing or unreadable parts are reported as corrupt.
    """
    corrupt = []
    for part in _ordered(parts):
        part_path = Path(output_dir) / part.file_name
        try:
            actual = compute_file_digest(part_path, algorithm)
        except OSError as e:
            logger.warning(f"Cannot read part: {{'part': {part.file_name!r}, 'error': {str(e)!r}}}")
            corrupt.append(part.file_name)
            continue

        if actual != part.digest:
            logger.warning(
                f"Part digest mismatch: {{'part': {part.file_name!r}, "
                f"'expected': {part.digest!r}, 'actual': {actual!r}}}"
            )
            corrupt.append(part.file_name)
    return corrupt


def verify_split(
    parts: Iterable[Part],
    expected_digest: str,
    output_dir: Path,
    algorithm: str = "md5",
    source_name: str = "",
) -> None:
    """Confirm that the parts reproduce the original file.

    Args:
        parts: Merged parts (global_order assigned)
        expected_digest: Whole-file digest taken before splitting
        output_dir: Directory holding the part files
        algorithm: Digest algorithm used for expected_digest
        source_name: Original file name, for error reporting

    Raises:
        IntegrityError: On digest mismatch or unreadable part. Its context
            lists the parts that fail their own digest check (possibly empty).
    """
    parts = _ordered(parts)
    actual_digest = reconstruct_digest(parts, output_dir, algorithm)

    if actual_digest == expected_digest:
        logger.info(f"Split verified: {{'parts': {len(parts)}, 'digest': {actual_digest!r}}}")
        return

    corrupt_parts = find_corrupt_parts(parts, output_dir, algorithm)
    logger.error(
        f"Split verification failed: {{'source': {source_name!r}, 'expected': {expected_digest!r}, "
        f"'actual': {actual_digest!r}, 'corrupt_parts': {len(corrupt_parts)}}}"
    )
    raise IntegrityError(
        f"Split verification failed for {source_name or 'source file'}",
        source=source_name,
        expected_digest=expected_digest,
        actual_digest=actual_digest,
        corrupt_parts=corrupt_parts,
    )
