"""Configuration schema for the file splitter."""

from pydantic import BaseModel, Field, ConfigDict, field_validator

from filesplitter.common import LoggingConfig, validate_algorithm, UnsupportedDigestError

DEFAULT_BLOCK_SIZE = 512 * 1024  # 512 KiB


class SplitterSettings(BaseModel):
    """Configuration for split jobs."""

    model_config = ConfigDict(extra='forbid')

    block_size: int = Field(
        default=DEFAULT_BLOCK_SIZE,
        gt=0,
        description="Maximum size of one part in bytes"
    )
    workers: int = Field(
        default=1,
        ge=1,
        description="Number of parallel extraction workers (1 = sequential)"
    )
    verify_integrity: bool = Field(
        default=True,
        description="Digest the whole file before splitting and verify the parts afterwards"
    )
    output_dir: str = Field(
        default=".",
        description="Directory to write part files and the manifest to"
    )
    digest_algorithm: str = Field(
        default="md5",
        description="hashlib algorithm used for part and whole-file digests"
    )
    write_manifest: bool = Field(
        default=True,
        description="Write <name>.<digest>.manifest.json after a successful split"
    )
    fail_fast: bool = Field(
        default=True,
        description="Stop remaining workers at their next block once one worker fails"
    )

    @field_validator('digest_algorithm')
    @classmethod
    def check_digest_algorithm(cls, v: str) -> str:
        """Reject algorithms hashlib does not provide with a fixed length."""
        try:
            return validate_algorithm(v)
        except UnsupportedDigestError as e:
            raise ValueError(e.message) from e


class FileSplitterConfig(BaseModel):
    """Root configuration for the file splitter."""

    model_config = ConfigDict(extra='forbid')

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    splitter: SplitterSettings = Field(default_factory=SplitterSettings)
