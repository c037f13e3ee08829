"""Data models for the attribution engine."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

# license-checker reports either a single SPDX expression or a list of them.
LicenseField = str | list[str] | None


@dataclass(frozen=True)
class RawDependencyRecord:
    """One dependency as reported by the metadata service for a scan root."""

    name: str
    version: str
    source_root: Path
    description: str | None = None
    repository: str | None = None
    publisher: str | None = None
    email: str | None = None
    url: str | None = None
    licenses: LicenseField = None
    license_file: str | None = None
    license_modified: bool = False

    @property
    def key(self) -> str:
        return f"{self.name}@{self.version}"

    @classmethod
    def from_checker(cls, key: str, payload: dict[str, Any], root: Path) -> RawDependencyRecord:
        """Build a record from one license-checker entry.

        Name and version fall back to the ``name@version`` key, splitting on
        the last ``@`` so scoped packages stay intact.
        """
        key_name, _, key_version = key.rpartition("@")
        return cls(
            name=payload.get("name") or key_name,
            version=payload.get("version") or key_version,
            source_root=root,
            description=payload.get("description") or None,
            repository=payload.get("repository") or None,
            publisher=payload.get("publisher") or None,
            email=payload.get("email") or None,
            url=payload.get("url") or None,
            licenses=payload.get("licenses") or None,
            license_file=payload.get("licenseFile") or None,
            license_modified=bool(payload.get("licenseModified", False)),
        )


@dataclass(frozen=True)
class ResolvedAttribution:
    """Final attribution data for one package, as written to licenseInfos.json."""

    name: str | None = None
    version: str | None = None
    authors: str = ""
    url: str | None = None
    license: LicenseField = None
    license_text: str = ""
    ignore: bool = False

    def to_json(self) -> dict[str, Any]:
        return {
            "ignore": self.ignore,
            "name": self.name,
            "version": self.version,
            "authors": self.authors,
            "url": self.url,
            "license": self.license,
            "licenseText": self.license_text,
        }
