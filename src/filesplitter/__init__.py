"""Parallel file splitter with digest-verified parts and manifests."""

__version__ = "0.1.0"
