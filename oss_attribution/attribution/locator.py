"""Manifest locator — find a dependency's installed package.json."""

from __future__ import annotations

import asyncio
from pathlib import Path

from oss_attribution.core.config import DEPENDENCY_STORE, PROJECT_MANIFEST
from oss_attribution.exceptions import ManifestNotFoundError


def find_manifest(root: Path, name: str) -> Path:
    """Return the package.json for *name* installed under *root*.

    Tries ``<root>/node_modules/<name>/package.json`` first, then falls back
    to the first (sorted) match of ``**/node_modules/<name>/package.json``,
    which covers packages nested under other dependencies.
    """
    default = root / DEPENDENCY_STORE / name / PROJECT_MANIFEST
    if default.is_file():
        return default

    pattern = f"**/{DEPENDENCY_STORE}/{name}/{PROJECT_MANIFEST}"
    for hit in sorted(root.glob(pattern)):
        if hit.is_file():
            return hit

    raise ManifestNotFoundError(name)


async def locate_manifest(root: Path, name: str) -> Path:
    """Async wrapper around :func:`find_manifest`; the glob walk runs in a thread."""
    return await asyncio.to_thread(find_manifest, root, name)
