"""Manifest building and persistence.

The manifest lists the parts needed to reconstruct the original file, in
order, together with the original name, digest and block size. JSON keys
are camelCase:

    {"originalFileName": ..., "originalFileHash": ..., "blockSize": ...,
     "parts": [{"hash": ..., "fileName": ..., "order": 0}, ...]}
"""

import logging
from pathlib import Path
from typing import Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from filesplitter.common import compute_digest
from .models import Part, SplitJob

logger = logging.getLogger(__name__)

MANIFEST_SUFFIX = ".manifest.json"


class ManifestPart(BaseModel):
    """One entry of the manifest part list."""

    model_config = ConfigDict(
        extra='forbid', frozen=True, alias_generator=to_camel, populate_by_name=True
    )

    hash: str
    file_name: str
    order: int = Field(ge=0)


class Manifest(BaseModel):
    """Read-only description of a completed split."""

    model_config = ConfigDict(
        extra='forbid', frozen=True, alias_generator=to_camel, populate_by_name=True
    )

    original_file_name: str
    original_file_hash: str = Field(
        default="",
        description="Whole-file digest; empty when integrity checking was skipped"
    )
    block_size: int = Field(gt=0)
    parts: List[ManifestPart] = Field(default_factory=list)

    def to_json(self) -> str:
        """Serialize with camelCase keys."""
        return self.model_dump_json(by_alias=True, indent=1)

    @property
    def total_parts(self) -> int:
        return len(self.parts)


def build_manifest(job: SplitJob, parts: Iterable[Part], whole_file_digest: Optional[str]) -> Manifest:
    """Assemble the manifest from merged parts.

    Raises:
        ValueError: If a part has no global_order yet
    """
    entries = []
    for part in parts:
        if part.global_order is None:
            raise ValueError(f"Part {part.file_name} has no global order")
        entries.append(ManifestPart(hash=part.digest, file_name=part.file_name, order=part.global_order))

    return Manifest(
        original_file_name=job.base_name,
        original_file_hash=whole_file_digest or "",
        block_size=job.block_size,
        parts=sorted(entries, key=lambda entry: entry.order),
    )


def manifest_file_name(manifest: Manifest, content: str, algorithm: str = "md5") -> str:
    """<original name>.<digest of the manifest JSON>.manifest.json"""
    digest = compute_digest(content.encode('utf-8'), algorithm)
    return f"{manifest.original_file_name}.{digest}{MANIFEST_SUFFIX}"


def write_manifest(manifest: Manifest, output_dir: Path, algorithm: str = "md5") -> Path:
    """Write the manifest as JSON into output_dir.

    Returns:
        Path of the written manifest file

    Raises:
        OSError: If the file cannot be written
    """
    content = manifest.to_json()
    manifest_path = Path(output_dir) / manifest_file_name(manifest, content, algorithm)
    manifest_path.write_text(content, encoding='utf-8')

    logger.info(f"Manifest written: {{'path': {str(manifest_path)!r}, 'parts': {manifest.total_parts}}}")
    return manifest_path


def load_manifest(manifest_path: Path) -> Manifest:
    """Load a manifest written by write_manifest().

    Raises:
        OSError: If the file cannot be read
        pydantic.ValidationError: If the content is not a valid manifest
    """
    return Manifest.model_validate_json(Path(manifest_path).read_text(encoding='utf-8'))
