"""Aggregator — scan every root, merge, drop the project itself, resolve."""

from __future__ import annotations

import asyncio
import json
import time
from collections.abc import Awaitable, Callable, Iterable
from pathlib import Path
from typing import TypeVar

import structlog

from oss_attribution.attribution.checker import DependencyMetadataService
from oss_attribution.attribution.models import RawDependencyRecord, ResolvedAttribution
from oss_attribution.attribution.resolver import resolve_attribution
from oss_attribution.attribution.scanner import scan_directory
from oss_attribution.core.config import PROJECT_MANIFEST, AttributionConfig
from oss_attribution.exceptions import ScanError

log = structlog.get_logger("oss_attribution.aggregator")

T = TypeVar("T")
R = TypeVar("R")


async def bounded_gather(
    fn: Callable[[T], Awaitable[R]],
    items: Iterable[T],
    concurrency: int,
) -> list[R]:
    """Map *fn* over *items* with at most *concurrency* calls in flight.

    Results keep the order of *items*.  The first exception cancels every
    task still running and is re-raised.
    """
    sem = asyncio.Semaphore(concurrency)

    async def _run_one(item: T) -> R:
        async with sem:
            return await fn(item)

    tasks = [asyncio.ensure_future(_run_one(item)) for item in items]
    if not tasks:
        return []
    try:
        return list(await asyncio.gather(*tasks))
    finally:
        pending = [t for t in tasks if not t.done()]
        for t in pending:
            t.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)


def merge_scans(scans: Iterable[dict[str, RawDependencyRecord]]) -> dict[str, RawDependencyRecord]:
    """Merge per-root results in the given order; later roots win on collision."""
    merged: dict[str, RawDependencyRecord] = {}
    for result in scans:
        merged.update(result)
    return merged


def read_project_identity(root: Path) -> str | None:
    """Return ``name@version`` of the project at *root*, or None if unreadable."""
    try:
        data = json.loads((root / PROJECT_MANIFEST).read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        log.warning("aggregator.no_project_identity", directory=str(root), error=str(exc))
        return None
    if not isinstance(data, dict):
        return None
    return f"{data.get('name')}@{data.get('version')}"


async def scan_roots(
    roots: tuple[Path, ...],
    service: DependencyMetadataService,
) -> dict[str, RawDependencyRecord]:
    """Scan all roots concurrently and merge them in declared order.

    A root whose scan failed contributes nothing; other roots still count.
    """
    if not roots:
        return {}

    log.info("aggregator.scanning", directories=[str(r) for r in roots])
    results = await asyncio.gather(
        *(scan_directory(root, service) for root in roots),
        return_exceptions=True,
    )

    scans: list[dict[str, RawDependencyRecord]] = []
    for root, result in zip(roots, results):
        if isinstance(result, ScanError):
            log.warning("aggregator.root_skipped", directory=str(root), error=str(result))
            continue
        if isinstance(result, BaseException):
            raise result
        scans.append(result)
    return merge_scans(scans)


async def collect_attributions(
    config: AttributionConfig,
    service: DependencyMetadataService,
) -> list[ResolvedAttribution]:
    """Run the full collection pipeline for *config*.

    Raises :class:`~oss_attribution.exceptions.ManifestNotFoundError` if any
    dependency cannot be resolved; one bad dependency fails the whole batch.
    """
    started = time.monotonic()

    merged = await scan_roots(config.base_dirs, service)
    if merged:
        identity = await asyncio.to_thread(read_project_identity, config.base_dirs[0])
        if identity is not None and merged.pop(identity, None) is not None:
            log.debug("aggregator.excluded_project", package=identity)

    records = list(merged.values())
    attributions = await bounded_gather(resolve_attribution, records, config.concurrency)

    log.info(
        "aggregator.done",
        packages=len(attributions),
        duration=round(time.monotonic() - started, 3),
    )
    return attributions
