"""Run configuration — built once from CLI arguments and passed explicitly."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_OUTPUT_DIR = "./oss-attribution"

OVERRIDES_FILE = "overrides.json"
HEADER_FILE = "header.txt"
LICENSE_INFOS_FILE = "licenseInfos.json"
ATTRIBUTION_FILE = "attribution.txt"

# Conventional npm layout inside a scan root.
PROJECT_MANIFEST = "package.json"
DEPENDENCY_STORE = "node_modules"


def _default_concurrency() -> int:
    return os.cpu_count() or 1


@dataclass(frozen=True)
class AttributionConfig:
    """Immutable settings for one attribution run."""

    output_dir: Path
    base_dirs: tuple[Path, ...]
    concurrency: int = field(default_factory=_default_concurrency)

    def __post_init__(self) -> None:
        if self.concurrency < 1:
            raise ValueError(f"concurrency must be >= 1, got {self.concurrency}")

    @classmethod
    def from_cli(
        cls,
        output_dir: str | os.PathLike[str],
        base_dirs: list[str] | tuple[str, ...] | None = None,
    ) -> AttributionConfig:
        """Resolve CLI paths to absolute ones; no base dirs means the CWD."""
        roots = base_dirs or [os.getcwd()]
        return cls(
            output_dir=Path(output_dir).resolve(),
            base_dirs=tuple(Path(d).resolve() for d in roots),
        )

    @property
    def overrides_path(self) -> Path:
        return self.output_dir / OVERRIDES_FILE

    @property
    def header_path(self) -> Path:
        return self.output_dir / HEADER_FILE

    @property
    def license_infos_path(self) -> Path:
        return self.output_dir / LICENSE_INFOS_FILE

    @property
    def attribution_path(self) -> Path:
        return self.output_dir / ATTRIBUTION_FILE
