"""Shared fixtures for oss-attribution tests — no Node.js needed (faked)."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any

import pytest

from oss_attribution.exceptions import MetadataServiceError


def write_manifest(path: Path, **fields: Any) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(fields))
    return path


def make_project(root: Path, name: str = "my-app", version: str = "1.0.0") -> Path:
    """Create an npm project with an (empty) node_modules directory."""
    write_manifest(root / "package.json", name=name, version=version)
    (root / "node_modules").mkdir(parents=True, exist_ok=True)
    return root


def install_package(root: Path, name: str, version: str = "1.0.0", **fields: Any) -> Path:
    """Install a fake package under ``root/node_modules`` and return its dir."""
    pkg_dir = root / "node_modules" / name
    write_manifest(pkg_dir / "package.json", name=name, version=version, **fields)
    return pkg_dir


def checker_entry(name: str, version: str = "1.0.0", **fields: Any) -> dict[str, Any]:
    """One license-checker result entry in the custom output format."""
    entry: dict[str, Any] = {
        "name": name,
        "version": version,
        "description": "",
        "repository": f"https://github.com/example/{name}",
        "publisher": "",
        "email": "",
        "url": "",
        "licenses": "MIT",
        "licenseFile": "",
        "licenseModified": False,
    }
    entry.update(fields)
    return entry


class FakeMetadataService:
    """In-memory stand-in for license-checker, keyed by scan root."""

    def __init__(
        self,
        results: dict[Path, dict[str, dict[str, Any]]] | None = None,
        errors: dict[Path, Exception] | None = None,
        delays: dict[Path, float] | None = None,
    ) -> None:
        self.results = results or {}
        self.errors = errors or {}
        self.delays = delays or {}
        self.calls: list[Path] = []

    async def check(self, root: Path) -> dict[str, dict[str, Any]]:
        self.calls.append(root)
        if root in self.delays:
            await asyncio.sleep(self.delays[root])
        if root in self.errors:
            raise self.errors[root]
        return {k: dict(v) for k, v in self.results.get(root, {}).items()}


@pytest.fixture
def fake_service_factory():
    return FakeMetadataService


@pytest.fixture
def service_error():
    return MetadataServiceError("corrupted package.json")
