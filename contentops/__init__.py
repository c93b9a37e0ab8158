"""Content versioning and draft workflow for marketing operations."""

__version__ = "0.1.0"
