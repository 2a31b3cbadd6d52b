"""CLI command for splitting a file into parts."""

import argparse
import logging
import re
import sys
from pathlib import Path
from typing import List, Optional

from filesplitter.common import ConfigLoader, setup_logging
from .config import FileSplitterConfig
from .coordinator import FileSplitter
from .errors import SplitError

APP_NAME = "filesplitter"

_SIZE_UNITS = {
    "B": 1,
    "K": 1024,
    "KB": 1024,
    "KIB": 1024,
    "M": 1024 ** 2,
    "MB": 1024 ** 2,
    "MIB": 1024 ** 2,
    "G": 1024 ** 3,
    "GB": 1024 ** 3,
    "GIB": 1024 ** 3,
}


def parse_size(value: str) -> int:
    """Convert a size such as ``524288``, ``512K`` or ``5MB`` to bytes.

    Raises:
        argparse.ArgumentTypeError: If the value cannot be parsed or is not positive
    """
    match = re.fullmatch(r"\s*(\d+)\s*([A-Za-z]*)\s*", value)
    if not match:
        raise argparse.ArgumentTypeError(f"Invalid size: {value!r} (use e.g. 524288, 512K, 5MB)")

    number, unit = int(match.group(1)), match.group(2).upper() or "B"
    if unit not in _SIZE_UNITS:
        raise argparse.ArgumentTypeError(f"Unknown size unit: {unit!r}")

    size = number * _SIZE_UNITS[unit]
    if size <= 0:
        raise argparse.ArgumentTypeError(f"Size must be positive: {value!r}")
    return size


def progress_callback(logger: logging.Logger, progress: dict) -> None:
    """Log split progress at debug level."""
    logger.debug(
        f"Split progress: {{'parts': {progress['parts_done']}, 'bytes': {progress['bytes_done']}, "
        f"'percent': {progress['percentage']:.1f}}}"
    )


def split_command(
    config: FileSplitterConfig,
    source: Path,
    block_size_override: Optional[int] = None,
    workers_override: Optional[int] = None,
    output_dir_override: Optional[Path] = None,
    verify_override: Optional[bool] = None,
    write_manifest_override: Optional[bool] = None,
    digest_override: Optional[str] = None,
) -> int:
    """Split a file.

    Args:
        config: Configuration object
        source: File to split
        block_size_override: Optional override for block size
        workers_override: Optional override for worker count
        output_dir_override: Optional override for output directory
        verify_override: Optional override for integrity verification
        write_manifest_override: Optional override for manifest writing
        digest_override: Optional override for digest algorithm

    Returns:
        Exit code (0 for success)
    """
    logger_name = __package__ or __name__
    logger = logging.getLogger(logger_name)

    overrides = {}
    if block_size_override is not None:
        overrides["block_size"] = block_size_override
    if workers_override is not None:
        overrides["workers"] = workers_override
    if output_dir_override is not None:
        overrides["output_dir"] = output_dir_override
    if verify_override is not None:
        overrides["verify_integrity"] = verify_override
    if write_manifest_override is not None:
        overrides["write_manifest"] = write_manifest_override
    if digest_override is not None:
        overrides["digest_algorithm"] = digest_override

    splitter = FileSplitter.from_settings(
        config.splitter,
        progress_callback=lambda progress: progress_callback(logger, progress),
        **overrides,
    )

    try:
        result = splitter.split(source)
    except SplitError as e:
        logger.error(f"Split failed: {{'stage': {e.stage.value!r}, 'error': {e.message!r}, 'context': {e.context}}}")
        return 1
    except Exception as e:
        logger.exception(f"Split failed: {e}")
        return 1

    print(result.manifest.original_file_name)
    for part in result.manifest.parts:
        print(f"  {part.file_name}")

    if result.manifest_path is not None:
        logger.info(f"Manifest: {result.manifest_path}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description="Split a file into digest-named parts and write a manifest"
    )
    parser.add_argument(
        "file",
        type=Path,
        help="File to split"
    )
    parser.add_argument(
        "--block-size",
        type=parse_size,
        help="Part size, e.g. 524288, 512K, 5M (overrides config, default 512K)"
    )
    parser.add_argument(
        "--workers",
        type=int,
        help="Parallel workers (overrides config, default 1)"
    )
    parser.add_argument(
        "--no-check",
        action="store_true",
        help="Skip whole-file digest verification"
    )
    parser.add_argument(
        "--folder",
        type=Path,
        help="Folder for the part files and manifest (overrides config, default current directory)"
    )
    parser.add_argument(
        "--no-manifest",
        action="store_true",
        help="Do not write the manifest file"
    )
    parser.add_argument(
        "--digest",
        help="Digest algorithm, e.g. md5, sha256 (overrides config, default md5)"
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to config file (defaults.toml)"
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (overrides config)"
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the split command."""
    args = build_parser().parse_args(argv)

    loader = ConfigLoader(
        app_name=APP_NAME,
        config_class=FileSplitterConfig
    )
    config = loader.load(defaults_path=args.config)

    level = args.log_level or config.logging.level
    log_file = Path(config.logging.file) if config.logging.file else None
    setup_logging(
        level=level,
        format=config.logging.format,
        log_file=log_file,
        max_file_size_mb=config.logging.max_file_size_mb,
        backup_count=config.logging.backup_count,
    )

    return split_command(
        config=config,
        source=args.file,
        block_size_override=args.block_size,
        workers_override=args.workers,
        output_dir_override=args.folder,
        verify_override=False if args.no_check else None,
        write_manifest_override=False if args.no_manifest else None,
        digest_override=args.digest,
    )


if __name__ == "__main__":
    sys.exit(main())
