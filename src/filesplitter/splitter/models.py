"""Data model for split jobs."""

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import TYPE_CHECKING, List, Optional

if TYPE_CHECKING:
    from .manifest import Manifest


@dataclass(frozen=True)
class SplitJob:
    """Validated, immutable configuration of one split operation."""
    source_path: Path
    total_size: int
    block_size: int
    workers: int
    output_dir: Path
    verify_integrity: bool
    digest_algorithm: str = "md5"

    @property
    def base_name(self) -> str:
        return self.source_path.name


@dataclass(frozen=True)
class WorkerRange:
    """Contiguous byte range of the source assigned to one worker."""
    worker_index: int
    start_offset: int
    length: int

    @property
    def end_offset(self) -> int:
        return self.start_offset + self.length


@dataclass(frozen=True)
class Part:
    """One written block. global_order stays None until the coordinator merges."""
    worker_index: int
    block_index: int  # 0-based within the worker
    file_name: str
    digest: str
    byte_length: int
    global_order: Optional[int] = None

    def with_order(self, order: int) -> "Part":
        return replace(self, global_order=order)


@dataclass
class WorkerOutcome:
    """Explicit success/failure report from one block extractor."""
    worker_index: int
    parts: List[Part] = field(default_factory=list)
    bytes_written: int = 0
    error: Optional[BaseException] = None
    cancelled: bool = False

    @property
    def succeeded(self) -> bool:
        return self.error is None and not self.cancelled

    @property
    def last_block_index(self) -> Optional[int]:
        """Index of the last block written successfully, None if none."""
        return self.parts[-1].block_index if self.parts else None


@dataclass(frozen=True)
class SplitResult:
    """Outcome of a successful split."""
    job: SplitJob
    parts: List[Part]
    whole_file_digest: Optional[str]
    manifest: "Manifest"
    manifest_path: Optional[Path] = None

    @property
    def part_count(self) -> int:
        return len(self.parts)
