"""Metadata resolver — derive authors and license text for one dependency."""

from __future__ import annotations

import asyncio
import json
import re
from pathlib import Path
from typing import Any

import structlog

from oss_attribution.attribution.locator import locate_manifest
from oss_attribution.attribution.models import RawDependencyRecord, ResolvedAttribution

log = structlog.get_logger("oss_attribution.resolver")

_LICENSE_NAME_RE = re.compile("license", re.IGNORECASE)


def format_author(author: Any) -> str:
    """Render an npm person field.

    Strings are used verbatim.  Objects become ``name`` plus an optional
    ``<contact>``, where contact is the first of email, homepage, url.
    """
    if isinstance(author, str):
        return author
    if not isinstance(author, dict):
        return ""
    name = author.get("name") or ""
    contact = author.get("email") or author.get("homepage") or author.get("url")
    if contact:
        return f"{name} <{contact}>"
    return name


def _format_people(people: Any) -> str:
    if isinstance(people, (str, dict)):
        people = [people]
    if not isinstance(people, list):
        return ""
    return ", ".join(format_author(p) for p in people)


def resolve_authors(manifest: dict[str, Any]) -> str:
    """Pick authors from author, then contributors, then maintainers."""
    author = manifest.get("author")
    if author:
        rendered = format_author(author)
        if rendered:
            return rendered
    for field in ("contributors", "maintainers"):
        people = manifest.get(field)
        if people:
            rendered = _format_people(people)
            if rendered:
                return rendered
    return ""


def read_license_text(license_file: str | None) -> str:
    """Return the license file's contents if it looks like a LICENSE file.

    Read errors propagate; the caller decides how to degrade.
    """
    if not license_file:
        return ""
    path = Path(license_file)
    if not path.exists() or not _LICENSE_NAME_RE.search(path.name):
        return ""
    return path.read_text(encoding="utf-8", errors="replace")


def _read_manifest(path: Path) -> dict[str, Any]:
    data = json.loads(path.read_text(encoding="utf-8"))
    return data if isinstance(data, dict) else {}


async def resolve_attribution(record: RawDependencyRecord) -> ResolvedAttribution:
    """Resolve one dependency into a :class:`ResolvedAttribution`.

    Raises :class:`~oss_attribution.exceptions.ManifestNotFoundError` when the
    package's manifest cannot be found.  A failed license read degrades the
    result to empty authors and license text instead of raising.
    """
    log.info("resolver.processing", package=record.key)

    manifest_path = await locate_manifest(record.source_root, record.name)
    manifest = await asyncio.to_thread(_read_manifest, manifest_path)

    log.debug("resolver.manifest", package=manifest.get("name", record.name), path=str(manifest_path))

    authors = resolve_authors(manifest)
    try:
        license_text = await asyncio.to_thread(read_license_text, record.license_file)
    except OSError as exc:
        log.warning(
            "resolver.license_read_failed",
            package=record.key,
            license_file=record.license_file,
            error=str(exc),
        )
        authors = ""
        license_text = ""

    return ResolvedAttribution(
        ignore=False,
        name=record.name,
        version=record.version,
        authors=authors,
        url=record.repository,
        license=record.licenses,
        license_text=license_text,
    )
