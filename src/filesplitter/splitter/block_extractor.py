"""Block extraction for one worker range.

Each extractor runs on its own thread and owns all of its state:
- its WorkerRange and remaining-byte counter
- a private read handle on the source, positioned at the range start
- the ordered list of parts it has written

Per block:
1. Read min(block_size, remaining) bytes, retrying short reads
2. Digest the block
3. Write it to <base>.<worker>.<block>.<digest>.part
4. Record the Part and decrement remaining
"""

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import BinaryIO, Callable, Optional

from filesplitter.common import compute_digest
from .models import Part, SplitJob, WorkerOutcome, WorkerRange

logger = logging.getLogger(__name__)

PART_SUFFIX = ".part"


class BlockReadStatus(Enum):
    """Outcome of one read attempt inside a worker range."""
    BLOCK = "block"          # bytes obtained; more may remain
    EXHAUSTED = "exhausted"  # range fully consumed (normal termination)
    FAILED = "failed"        # I/O error or source ended early


@dataclass(frozen=True)
class BlockRead:
    status: BlockReadStatus
    data: bytes = b""
    error: Optional[BaseException] = None


class WorkerCancelled(Exception):
    """Worker stopped at a block boundary because the job was cancelled."""
    pass


def part_file_name(base_name: str, worker_index: int, block_index: int, digest: str) -> str:
    """Build the deterministic part file name."""
    return f"{base_name}.{worker_index}.{block_index}.{digest}{PART_SUFFIX}"


def read_exact(handle: BinaryIO, length: int) -> bytes:
    """Read up to `length` bytes, looping over short reads.

    Returns fewer than `length` bytes only when the source reports end of data.

    Raises:
        OSError: If the underlying read fails
    """
    buffer = bytearray()
    while len(buffer) < length:
        chunk = handle.read(length - len(buffer))
        if not chunk:
            break
        buffer += chunk
    return bytes(buffer)


class BlockExtractor:
    """Extracts one worker range into part files."""

    def __init__(
        self,
        job: SplitJob,
        worker_range: WorkerRange,
        cancel_event: Optional[threading.Event] = None,
        on_part_written: Optional[Callable[[Part], None]] = None,
    ):
        """Initialize block extractor.

        Args:
            job: Validated split job
            worker_range: Byte range owned by this worker
            cancel_event: Checked between blocks; when set the worker stops
            on_part_written: Optional callback invoked after each part is written
        """
        self.job = job
        self.worker_range = worker_range
        self.cancel_event = cancel_event
        self.on_part_written = on_part_written

        self.remaining = worker_range.length
        self.next_block_index = 0
        self.outcome = WorkerOutcome(worker_index=worker_range.worker_index)

    @property
    def worker_index(self) -> int:
        return self.worker_range.worker_index

    def read_next_block(self, handle: BinaryIO) -> BlockRead:
        """Read the next block of this range.

        Args:
            handle: Read handle positioned at the next unread byte of the range

        Returns:
            BlockRead with status BLOCK, EXHAUSTED or FAILED
        """
        if self.remaining == 0:
            return BlockRead(BlockReadStatus.EXHAUSTED)

        length = min(self.job.block_size, self.remaining)
        try:
            data = read_exact(handle, length)
        except OSError as e:
            return BlockRead(BlockReadStatus.FAILED, error=e)

        if len(data) != length:
            offset = self.worker_range.end_offset - self.remaining
            return BlockRead(
                BlockReadStatus.FAILED,
                error=EOFError(
                    f"Source ended early at offset {offset + len(data)}: "
                    f"expected {length} bytes, got {len(data)}"
                ),
            )

        return BlockRead(BlockReadStatus.BLOCK, data=data)

    def write_part(self, block_index: int, data: bytes) -> Part:
        """Digest a block and write it to its part file (create or overwrite).

        Raises:
            OSError: If the part file cannot be written
        """
        digest = compute_digest(data, self.job.digest_algorithm)
        file_name = part_file_name(self.job.base_name, self.worker_index, block_index, digest)

        with open(self.job.output_dir / file_name, 'wb') as f:
            f.write(data)

        return Part(
            worker_index=self.worker_index,
            block_index=block_index,
            file_name=file_name,
            digest=digest,
            byte_length=len(data),
        )

    def run(self) -> WorkerOutcome:
        """Extract the whole range.

        Never raises for I/O problems; failures are reported on the returned
        outcome together with the parts written before the failure.
        """
        logger.debug(
            f"Worker {self.worker_index} started: {{'start_offset': {self.worker_range.start_offset}, "
            f"'length': {self.worker_range.length}}}"
        )

        if self.worker_range.length == 0:
            logger.debug(f"Worker {self.worker_index} has an empty range")
            return self.outcome

        try:
            with open(self.job.source_path, 'rb') as handle:
                handle.seek(self.worker_range.start_offset)
                self._extract_blocks(handle)
        except WorkerCancelled:
            self.outcome.cancelled = True
            logger.info(
                f"Worker {self.worker_index} cancelled: {{'last_block_index': {self.outcome.last_block_index}}}"
            )
        except OSError as e:
            self._fail(e)

        return self.outcome

    def _extract_blocks(self, handle: BinaryIO) -> None:
        while True:
            if self.remaining and self.cancel_event is not None and self.cancel_event.is_set():
                raise WorkerCancelled(f"Worker {self.worker_index} cancelled")

            block = self.read_next_block(handle)

            if block.status is BlockReadStatus.EXHAUSTED:
                logger.debug(
                    f"Worker {self.worker_index} range exhausted: {{'parts': {len(self.outcome.parts)}, "
                    f"'bytes': {self.outcome.bytes_written}}}"
                )
                return

            if block.status is BlockReadStatus.FAILED:
                self._fail(block.error)
                return

            part = self.write_part(self.next_block_index, block.data)
            self.outcome.parts.append(part)
            self.outcome.bytes_written += part.byte_length
            self.remaining -= part.byte_length
            self.next_block_index += 1

            if self.on_part_written is not None:
                self.on_part_written(part)

    def _fail(self, error: BaseException) -> None:
        self.outcome.error = error
        logger.error(
            f"Worker {self.worker_index} failed: {{'last_block_index': {self.outcome.last_block_index}, "
            f"'error': {str(error)!r}}}"
        )
