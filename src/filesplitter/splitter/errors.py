"""Split-specific errors."""

from enum import Enum
from typing import Any, List, Optional

from filesplitter.common import FileSplitterError


class SplitStage(str, Enum):
    """Stage of a split job at which a failure surfaced."""

    VALIDATION = "validation"
    EXTRACTION = "extraction"
    VERIFICATION = "verification"
    MANIFEST = "manifest"


class SplitError(FileSplitterError):
    """Split job failed. No manifest is produced for a failed job."""

    stage: SplitStage = SplitStage.EXTRACTION

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message, stage=self.stage.value, **context)


class ConfigurationError(SplitError):
    """Job configuration is invalid or the source cannot be read."""

    stage = SplitStage.VALIDATION


class ExtractionError(SplitError):
    """At least one worker failed to extract its range."""

    stage = SplitStage.EXTRACTION

    @property
    def worker_index(self) -> Optional[int]:
        return self.context.get("worker_index")

    @property
    def block_index(self) -> Optional[int]:
        """Last block the failing worker wrote successfully (None if none)."""
        return self.context.get("block_index")


class IntegrityError(SplitError):
    """Reconstructed content does not match the whole-file digest."""

    stage = SplitStage.VERIFICATION

    @property
    def corrupt_parts(self) -> List[str]:
        return self.context.get("corrupt_parts", [])


class InconsistentSplitError(SplitError):
    """Total bytes across parts differ from the source file size."""

    stage = SplitStage.VERIFICATION


class ManifestError(SplitError):
    """Manifest could not be written after a successful split."""

    stage = SplitStage.MANIFEST
