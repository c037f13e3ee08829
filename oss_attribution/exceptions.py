"""Custom exceptions for oss-attribution."""

from __future__ import annotations

from pathlib import Path


class AttributionError(Exception):
    """Base exception for all attribution errors."""


class MetadataServiceError(AttributionError):
    """Raised when the dependency-metadata service (license-checker) fails."""


class ScanError(AttributionError):
    """Raised when a single scan root could not be scanned."""

    def __init__(self, root: Path, message: str):
        self.root = root
        super().__init__(f'error scanning directory "{root}": {message}')


class ManifestNotFoundError(AttributionError):
    """Raised when a dependency's installed package.json cannot be located."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"{name}: unable to locate package.json")


class OverrideError(AttributionError):
    """Raised when overrides.json cannot be read or validated."""


class ReportWriteError(AttributionError):
    """Raised when the output files cannot be written."""
