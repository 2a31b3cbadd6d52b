"""Shared fixtures for splitter tests."""

import random

import pytest


@pytest.fixture
def make_source(tmp_path):
    """Factory writing a source file with deterministic pseudo-random content."""
    def _make(size: int, name: str = "source.bin", seed: int = 42):
        content = random.Random(seed).randbytes(size)
        path = tmp_path / name
        path.write_bytes(content)
        return path, content
    return _make


@pytest.fixture
def output_dir(tmp_path):
    """Create an output directory for part files."""
    target = tmp_path / "parts"
    target.mkdir()
    return target
