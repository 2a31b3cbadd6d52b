"""Parallel file splitting with digest verification."""

from .config import FileSplitterConfig, SplitterSettings
from .coordinator import FileSplitter
from .errors import (
    ConfigurationError,
    ExtractionError,
    InconsistentSplitError,
    IntegrityError,
    ManifestError,
    SplitError,
    SplitStage,
)
from .manifest import Manifest, ManifestPart, build_manifest, load_manifest, write_manifest
from .models import Part, SplitJob, SplitResult, WorkerRange
from .range_planner import plan_ranges
from .verifier import verify_split

__all__ = [
    'FileSplitter',
    'FileSplitterConfig',
    'SplitterSettings',
    'SplitError',
    'SplitStage',
    'ConfigurationError',
    'ExtractionError',
    'InconsistentSplitError',
    'IntegrityError',
    'ManifestError',
    'Manifest',
    'ManifestPart',
    'build_manifest',
    'load_manifest',
    'write_manifest',
    'Part',
    'SplitJob',
    'SplitResult',
    'WorkerRange',
    'plan_ranges',
    'verify_split',
]
