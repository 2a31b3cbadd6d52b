"""Pure planning logic for worker byte ranges.

No IO; deterministic mapping from file size and worker count to ranges.
"""

from typing import List

from .models import WorkerRange


def plan_ranges(total_size: int, workers: int) -> List[WorkerRange]:
    """Split [0, total_size) into one contiguous range per worker.

    Every worker gets floor(total_size / workers) bytes; the last worker also
    absorbs the remainder, so the ranges cover the file exactly once.

    Args:
        total_size: Source size in bytes (>= 0)
        workers: Number of workers (>= 1)

    Returns:
        List of WorkerRange ordered by worker_index. For an empty source every
        range has length 0.

    Raises:
        ValueError: If total_size is negative or workers < 1
    """
    if total_size < 0:
        raise ValueError(f"Invalid total_size={total_size}; must be >= 0")
    if workers < 1:
        raise ValueError(f"Invalid workers={workers}; must be >= 1")

    base = total_size // workers
    remainder = total_size % workers

    ranges = []
    for worker_index in range(workers):
        length = base
        if worker_index == workers - 1:
            length += remainder
        ranges.append(
            WorkerRange(
                worker_index=worker_index,
                start_offset=worker_index * base,
                length=length,
            )
        )
    return ranges


def count_blocks(length: int, block_size: int) -> int:
    """Number of blocks a range of `length` bytes yields."""
    if block_size <= 0:
        raise ValueError(f"Invalid block_size={block_size}; must be > 0")
    return (length + block_size - 1) // block_size
