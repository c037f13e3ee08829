"""Directory scanner — validate a scan root and query its dependencies."""

from __future__ import annotations

import asyncio
from pathlib import Path

import structlog

from oss_attribution.attribution.checker import DependencyMetadataService
from oss_attribution.attribution.models import RawDependencyRecord
from oss_attribution.core.config import DEPENDENCY_STORE, PROJECT_MANIFEST
from oss_attribution.exceptions import MetadataServiceError, ScanError

log = structlog.get_logger("oss_attribution.scanner")


async def scan_directory(
    root: Path,
    service: DependencyMetadataService,
) -> dict[str, RawDependencyRecord]:
    """Return ``name@version`` -> record for the production deps of *root*.

    A root that is not an npm project, or has nothing installed, yields an
    empty dict.  Service failures are logged and raised as :class:`ScanError`.
    """
    if not await asyncio.to_thread((root / PROJECT_MANIFEST).is_file):
        log.info("scanner.not_npm_project", directory=str(root))
        return {}

    if not await asyncio.to_thread((root / DEPENDENCY_STORE).is_dir):
        log.warning(
            "scanner.no_node_modules",
            directory=str(root),
            hint='run "npm install" or "yarn install" in that directory first',
        )
        return {}

    try:
        raw = await service.check(root)
    except MetadataServiceError as exc:
        log.error(
            "scanner.failed",
            directory=str(root),
            error=str(exc),
            hint="package.json or node_modules may be corrupted; try reinstalling",
        )
        raise ScanError(root, str(exc)) from exc

    records = {
        key: RawDependencyRecord.from_checker(key, payload, root)
        for key, payload in raw.items()
    }
    log.info("scanner.done", directory=str(root), packages=len(records))
    return records
