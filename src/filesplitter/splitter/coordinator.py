"""Split coordinator.

Orchestrates a split job:
1. Validate the source and settings, stat the size
2. Optionally digest the whole file
3. Plan one byte range per worker
4. Run one BlockExtractor thread per range
5. Wait for every worker (barrier)
6. Fail the job if any worker failed
7. Merge parts in worker order, then block order, assigning global order
8. Check that the parts add up to the source size
9. Verify the parts against the whole-file digest
10. Build (and write) the manifest
"""

import logging
import os
import threading
from pathlib import Path
from typing import Callable, List, Optional, Union

from filesplitter.common import (
    LogContext,
    UnsupportedDigestError,
    compute_file_digest,
    validate_algorithm,
)
from .block_extractor import BlockExtractor
from .config import DEFAULT_BLOCK_SIZE, SplitterSettings
from .errors import (
    ConfigurationError,
    ExtractionError,
    InconsistentSplitError,
    ManifestError,
    SplitError,
)
from .manifest import build_manifest, write_manifest
from .models import Part, SplitJob, SplitResult, WorkerOutcome, WorkerRange
from .progress import ProgressTracker
from .range_planner import count_blocks, plan_ranges
from .verifier import verify_split

logger = logging.getLogger(__name__)


class FileSplitter:
    """Splits one file into digest-named parts using a fixed pool of worker threads.

    Success is all-or-nothing: if any worker fails, or the parts do not
    reproduce the source, split() raises and no manifest is produced.
    Part files already written are left on disk.
    """

    def __init__(
        self,
        block_size: int = DEFAULT_BLOCK_SIZE,
        workers: int = 1,
        output_dir: Union[str, Path] = ".",
        verify_integrity: bool = True,
        digest_algorithm: str = "md5",
        write_manifest: bool = True,
        fail_fast: bool = True,
        progress_callback: Optional[Callable[[dict], None]] = None,
    ):
        """Initialize file splitter.

        Args:
            block_size: Maximum part size in bytes (> 0)
            workers: Number of parallel workers (>= 1)
            output_dir: Directory for part files and the manifest (created if missing)
            verify_integrity: Digest the source first and verify the parts afterwards
            digest_algorithm: hashlib algorithm for all digests
            write_manifest: Write the manifest file after a successful split
            fail_fast: Cancel other workers at their next block once one fails
            progress_callback: Optional callback receiving progress dicts per part
        """
        self.block_size = block_size
        self.workers = workers
        self.output_dir = Path(output_dir)
        self.verify_integrity = verify_integrity
        self.digest_algorithm = digest_algorithm
        self.write_manifest = write_manifest
        self.fail_fast = fail_fast
        self.progress_callback = progress_callback

        self._cancel_event = threading.Event()

    @classmethod
    def from_settings(cls, settings: SplitterSettings, **overrides) -> "FileSplitter":
        """Create a splitter from the splitter config section."""
        options = {
            "block_size": settings.block_size,
            "workers": settings.workers,
            "output_dir": settings.output_dir,
            "verify_integrity": settings.verify_integrity,
            "digest_algorithm": settings.digest_algorithm,
            "write_manifest": settings.write_manifest,
            "fail_fast": settings.fail_fast,
        }
        options.update(overrides)
        return cls(**options)

    def cancel(self) -> None:
        """Ask running workers to stop at their next block boundary.

        The running split() then fails with ExtractionError.
        """
        logger.warning("Split cancellation requested")
        self._cancel_event.set()

    def prepare_job(self, source: Union[str, Path]) -> SplitJob:
        """Validate settings and source, and create the output directory.

        Raises:
            ConfigurationError: If any setting is invalid or the source is unreadable
        """
        source_path = Path(source)

        if isinstance(self.block_size, bool) or not isinstance(self.block_size, int) or self.block_size <= 0:
            raise ConfigurationError(f"Block size must be a positive integer, got {self.block_size!r}",
                                     block_size=self.block_size)
        if isinstance(self.workers, bool) or not isinstance(self.workers, int) or self.workers < 1:
            raise ConfigurationError(f"Worker count must be at least 1, got {self.workers!r}",
                                     workers=self.workers)

        try:
            algorithm = validate_algorithm(self.digest_algorithm)
        except UnsupportedDigestError as e:
            raise ConfigurationError(e.message, **e.context) from e

        if not source_path.exists():
            raise ConfigurationError(f"File {source_path} not found", source=str(source_path))
        if not source_path.is_file():
            raise ConfigurationError(f"Not a regular file: {source_path}", source=str(source_path))

        try:
            with open(source_path, 'rb'):
                pass
            total_size = source_path.stat().st_size
        except OSError as e:
            raise ConfigurationError(f"Cannot read {source_path}: {e}", source=str(source_path)) from e

        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ConfigurationError(f"Cannot create output directory {self.output_dir}: {e}",
                                     output_dir=str(self.output_dir)) from e
        if not os.access(self.output_dir, os.W_OK):
            raise ConfigurationError(f"Output directory is not writable: {self.output_dir}",
                                     output_dir=str(self.output_dir))

        return SplitJob(
            source_path=source_path,
            total_size=total_size,
            block_size=self.block_size,
            workers=self.workers,
            output_dir=self.output_dir,
            verify_integrity=self.verify_integrity,
            digest_algorithm=algorithm,
        )

    def split(self, source: Union[str, Path]) -> SplitResult:
        """Split a file into parts.

        Args:
            source: Path to the file to split

        Returns:
            SplitResult with the ordered parts, the whole-file digest (None if
            verification is disabled), the manifest and its path if written

        Raises:
            ConfigurationError: Invalid settings or unreadable source
            ExtractionError: A worker failed or was cancelled
            InconsistentSplitError: Part sizes do not add up to the source size
            IntegrityError: Parts do not reproduce the source digest
            ManifestError: The manifest file could not be written
        """
        # A cancel() issued from here on applies to this run
        self._cancel_event.clear()
        job = self.prepare_job(source)

        with LogContext(logger, source=job.base_name) as log_context:
            logger.info(
                f"Starting split: {{'source': {str(job.source_path)!r}, 'size': {job.total_size}, "
                f"'block_size': {job.block_size}, 'workers': {job.workers}, "
                f"'verify': {job.verify_integrity}, 'output_dir': {str(job.output_dir)!r}}}"
            )
            try:
                return self._run_job(job, log_context)
            except SplitError:
                logger.warning(
                    f"Split failed, no manifest written; part files in the output directory are incomplete: "
                    f"{{'output_dir': {str(job.output_dir)!r}}}"
                )
                raise

    def _run_job(self, job: SplitJob, log_context: Optional[LogContext] = None) -> SplitResult:
        whole_file_digest = None
        if job.verify_integrity:
            try:
                whole_file_digest = compute_file_digest(job.source_path, job.digest_algorithm)
            except OSError as e:
                raise ConfigurationError(f"Cannot digest {job.source_path}: {e}",
                                         source=str(job.source_path)) from e
            logger.debug(f"Whole-file digest: {{'digest': {whole_file_digest!r}}}")

        ranges = plan_ranges(job.total_size, job.workers)
        planned_parts = sum(count_blocks(r.length, job.block_size) for r in ranges)
        logger.info(f"Planned ranges: {{'workers': {len(ranges)}, 'parts': {planned_parts}}}")

        outcomes = self._run_workers(job, ranges, log_context)
        self._raise_for_failures(outcomes)

        parts = merge_parts(outcomes)
        check_total_size(parts, job.total_size)

        if whole_file_digest is not None:
            verify_split(parts, whole_file_digest, job.output_dir, job.digest_algorithm, job.base_name)

        manifest = build_manifest(job, parts, whole_file_digest)
        manifest_path = None
        if self.write_manifest:
            try:
                manifest_path = write_manifest(manifest, job.output_dir, job.digest_algorithm)
            except OSError as e:
                raise ManifestError(
                    f"Cannot write manifest to {job.output_dir}: {e}",
                    output_dir=str(job.output_dir),
                    parts=len(parts),
                ) from e

        return SplitResult(
            job=job,
            parts=parts,
            whole_file_digest=whole_file_digest,
            manifest=manifest,
            manifest_path=manifest_path,
        )

    def _run_workers(
        self,
        job: SplitJob,
        ranges: List[WorkerRange],
        log_context: Optional[LogContext] = None,
    ) -> List[WorkerOutcome]:
        """Run one extractor thread per range and wait for all of them.

        Raises:
            ExtractionError: If the job was cancelled before any worker started
        """
        if self._cancel_event.is_set():
            raise ExtractionError(
                "Split cancelled before extraction started",
                worker_index=None,
                block_index=None,
                failures=[],
                cancelled=True,
            )

        tracker = ProgressTracker(total_bytes=job.total_size)

        def on_part_written(part: Part) -> None:
            tracker.advance(part.byte_length)
            if self.progress_callback is not None:
                self.progress_callback(tracker.get_progress())

        extractors = [
            BlockExtractor(job, worker_range, self._cancel_event, on_part_written)
            for worker_range in ranges
        ]
        threads = [
            threading.Thread(
                target=self._worker_main,
                args=(extractor, log_context),
                name=f"split-worker-{extractor.worker_index}",
            )
            for extractor in extractors
        ]

        for thread in threads:
            thread.start()

        # Barrier: no worker result is read before every worker has terminated
        for thread in threads:
            thread.join()

        tracker.log_final_summary()
        return [extractor.outcome for extractor in extractors]

    def _worker_main(self, extractor: BlockExtractor, log_context: Optional[LogContext] = None) -> None:
        if log_context is not None:
            log_context.bind_current_thread()

        try:
            outcome = extractor.run()
        except Exception as e:
            # Unexpected errors must still surface as a failed outcome
            logger.error(f"Worker thread {extractor.worker_index} crashed: {e}", exc_info=True)
            extractor.outcome.error = e
            outcome = extractor.outcome

        if not outcome.succeeded and self.fail_fast and not self._cancel_event.is_set():
            logger.info(f"Worker {extractor.worker_index} failed, cancelling remaining workers")
            self._cancel_event.set()

    def _raise_for_failures(self, outcomes: List[WorkerOutcome]) -> None:
        failed = [outcome for outcome in outcomes if not outcome.succeeded]
        if not failed:
            return

        # Report the first real failure; cancellations are a consequence of it
        errored = [outcome for outcome in failed if outcome.error is not None]
        primary = errored[0] if errored else failed[0]

        if primary.error is not None:
            reason = f"{type(primary.error).__name__}: {primary.error}"
        else:
            reason = "cancelled"

        raise ExtractionError(
            f"Worker {primary.worker_index} failed after block {primary.last_block_index}: {reason}",
            worker_index=primary.worker_index,
            block_index=primary.last_block_index,
            failures=[
                {
                    "worker_index": outcome.worker_index,
                    "block_index": outcome.last_block_index,
                    "cancelled": outcome.cancelled,
                    "error": str(outcome.error) if outcome.error is not None else None,
                }
                for outcome in failed
            ],
        ) from primary.error


def merge_parts(outcomes: List[WorkerOutcome]) -> List[Part]:
    """Merge per-worker part lists into one list with global order 0..N-1.

    Ranges are contiguous and ordered by worker index, so worker order then
    block order is source byte order.
    """
    merged = []
    order = 0
    for outcome in sorted(outcomes, key=lambda o: o.worker_index):
        for part in sorted(outcome.parts, key=lambda p: p.block_index):
            merged.append(part.with_order(order))
            order += 1
    return merged


def check_total_size(parts: List[Part], expected_size: int) -> None:
    """Raise InconsistentSplitError unless the parts add up to expected_size."""
    actual_size = sum(part.byte_length for part in parts)
    if actual_size != expected_size:
        raise InconsistentSplitError(
            f"Parts total {actual_size} bytes, source has {expected_size}",
            expected_size=expected_size,
            actual_size=actual_size,
            parts=len(parts),
        )
