"""Publish a GitHub release and attach build artifacts to it."""

__version__ = "0.1.0"
