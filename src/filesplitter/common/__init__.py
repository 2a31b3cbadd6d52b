"""Common utilities for filesplitter packages."""

from .config import ConfigLoader
from .logging import setup_logging, get_logger, LogContext
from .logging_config import LoggingConfig
from .errors import FileSplitterError, UnsupportedDigestError
from .checksums import (
    DEFAULT_DIGEST_ALGORITHM,
    DigestAccumulator,
    compute_digest,
    compute_file_digest,
    validate_algorithm,
)

__all__ = [
    'ConfigLoader',
    'LoggingConfig',
    'setup_logging',
    'get_logger',
    'LogContext',
    'FileSplitterError',
    'UnsupportedDigestError',
    'DEFAULT_DIGEST_ALGORITHM',
    'DigestAccumulator',
    'compute_digest',
    'compute_file_digest',
    'validate_algorithm',
]
