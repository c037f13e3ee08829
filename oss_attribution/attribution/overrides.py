"""User overrides — overrides.json merged field by field over computed data."""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable
from pathlib import Path

import structlog
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from oss_attribution.attribution.models import ResolvedAttribution
from oss_attribution.exceptions import OverrideError

log = structlog.get_logger("oss_attribution.overrides")


class AttributionOverride(BaseModel):
    """Partial attribution entry; only fields the user sets are applied."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    ignore: bool | None = None
    name: str | None = None
    version: str | None = None
    authors: str | None = None
    url: str | None = None
    license: str | list[str] | None = None
    license_text: str | None = Field(default=None, alias="licenseText")


_OVERRIDES_ADAPTER = TypeAdapter(dict[str, AttributionOverride])


def load_overrides(path: Path) -> dict[str, AttributionOverride]:
    """Parse *path*; a missing file means no overrides."""
    if not path.exists():
        return {}
    try:
        raw = path.read_bytes()
        overrides = _OVERRIDES_ADAPTER.validate_json(raw)
    except (OSError, PydanticValidationError) as e:
        raise OverrideError(f"invalid overrides file {path}: {e}") from e
    log.info("overrides.loaded", path=str(path), packages=sorted(overrides))
    return overrides


def merge_override(
    base: ResolvedAttribution | None,
    override: AttributionOverride,
) -> ResolvedAttribution:
    """Apply the explicitly-set fields of *override* on top of *base*."""
    updates = override.model_dump(exclude_unset=True)
    if base is None:
        return ResolvedAttribution(**updates)
    return dataclasses.replace(base, **updates)


def apply_overrides(
    attributions: Iterable[ResolvedAttribution],
    overrides: dict[str, AttributionOverride],
) -> dict[str, ResolvedAttribution]:
    """Key computed attributions by name and merge *overrides* over them.

    Later entries with the same name replace earlier ones.  Overrides for
    names that were not computed are added as new entries.
    """
    infos: dict[str, ResolvedAttribution] = {}
    for attribution in attributions:
        infos[str(attribution.name)] = attribution

    for name, override in overrides.items():
        infos[name] = merge_override(infos.get(name), override)
    return infos
