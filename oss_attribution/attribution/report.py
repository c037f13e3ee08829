"""Report builder — render attribution.txt and persist licenseInfos.json."""

from __future__ import annotations

import json
from collections.abc import Iterable
from pathlib import Path

import structlog

from oss_attribution.attribution.models import LicenseField, ResolvedAttribution
from oss_attribution.core.config import AttributionConfig
from oss_attribution.exceptions import ReportWriteError

log = structlog.get_logger("oss_attribution.report")

BLOCK_SEPARATOR = "\n\n" + "*" * 30 + "\n\n"


def _render_license(value: LicenseField) -> str:
    if isinstance(value, list):
        return ", ".join(value)
    return value or ""


def format_entry(info: ResolvedAttribution) -> str:
    """Render one package block: name, version/url, then license details."""
    version_line = info.version or ""
    if info.url:
        version_line = f"{version_line} <{info.url}>"
    body = info.license_text or (
        f"license: {_render_license(info.license)}\nauthors: {info.authors or ''}"
    )
    return "\n".join([str(info.name), version_line, body])


def select_entries(infos: Iterable[ResolvedAttribution]) -> list[ResolvedAttribution]:
    """Drop ignored or nameless entries and sort case-insensitively by name."""
    kept = [i for i in infos if not i.ignore and i.name is not None]
    return sorted(kept, key=lambda i: str(i.name).lower())


def build_report(infos: Iterable[ResolvedAttribution], header: str | None = None) -> str:
    attribution = BLOCK_SEPARATOR.join(format_entry(i) for i in select_entries(infos))
    if header is not None:
        attribution = f"{header}\n\n{attribution}"
    return attribution


def write_outputs(config: AttributionConfig, infos: dict[str, ResolvedAttribution]) -> Path:
    """Write licenseInfos.json and attribution.txt under ``config.output_dir``.

    Returns the attribution file path.  Any filesystem error is raised as
    :class:`ReportWriteError`.
    """
    try:
        config.output_dir.mkdir(parents=True, exist_ok=True)

        snapshot = {key: info.to_json() for key, info in infos.items()}
        config.license_infos_path.write_text(
            json.dumps(snapshot, indent=2) + "\n", encoding="utf-8"
        )

        header = None
        if config.header_path.exists():
            header = config.header_path.read_text(encoding="utf-8")
            log.info("report.using_header", path=str(config.header_path))

        config.attribution_path.write_text(build_report(infos.values(), header), encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ReportWriteError(f"failed to write attribution files: {e}") from e

    log.info("report.written", path=str(config.attribution_path), packages=len(infos))
    return config.attribution_path
