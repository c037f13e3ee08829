"""Dependency-metadata service — license-checker wrapper.

The service enumerates a root's resolved production dependencies and returns
a mapping from ``name@version`` to raw metadata dicts.  The default
implementation shells out to the npm ``license-checker`` tool; anything that
satisfies :class:`DependencyMetadataService` can be injected instead.
"""

from __future__ import annotations

import asyncio
import json
import os
import shlex
import tempfile
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

import structlog

from oss_attribution.exceptions import MetadataServiceError

log = structlog.get_logger("oss_attribution.checker")

DEFAULT_CHECKER_COMMAND = "npx --yes license-checker"

# Fields requested from license-checker for every package.
LICENSE_CHECKER_FORMAT: dict[str, Any] = {
    "name": "",
    "version": "",
    "description": "",
    "repository": "",
    "publisher": "",
    "email": "",
    "url": "",
    "licenses": "",
    "licenseFile": "",
    "licenseModified": False,
}


@runtime_checkable
class DependencyMetadataService(Protocol):
    """Interface of the external dependency-metadata lookup."""

    async def check(self, root: Path) -> dict[str, dict[str, Any]]: ...


class LicenseCheckerService:
    """Run ``license-checker --production --json`` for one root at a time."""

    def __init__(self, command: str | None = None) -> None:
        raw = command or os.environ.get("OSS_ATTRIBUTION_LICENSE_CHECKER", DEFAULT_CHECKER_COMMAND)
        self._command = shlex.split(raw)

    @property
    def command(self) -> list[str]:
        return list(self._command)

    async def check(self, root: Path) -> dict[str, dict[str, Any]]:
        with tempfile.TemporaryDirectory(prefix="oss-attribution-") as tmpdir:
            custom_path = Path(tmpdir) / "format.json"
            custom_path.write_text(json.dumps(LICENSE_CHECKER_FORMAT), encoding="utf-8")
            cmd = [
                *self._command,
                "--production",
                "--json",
                "--start",
                str(root),
                "--customPath",
                str(custom_path),
            ]
            stdout = await _run(cmd)

        try:
            data = json.loads(stdout)
        except json.JSONDecodeError as e:
            raise MetadataServiceError(f"license-checker returned invalid JSON: {e}") from e
        if not isinstance(data, dict):
            raise MetadataServiceError(
                f"license-checker returned {type(data).__name__}, expected an object"
            )
        return data


async def _run(cmd: list[str]) -> str:
    """Run a command and return its stdout, raising MetadataServiceError on failure."""
    log.debug("checker.exec", cmd=" ".join(cmd))
    try:
        proc = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except FileNotFoundError as e:
        raise MetadataServiceError(f"command not found: {cmd[0]}") from e
    except OSError as e:
        raise MetadataServiceError(f"cannot run {cmd[0]}: {e}") from e
    stdout, stderr = await proc.communicate()
    if proc.returncode != 0:
        raise MetadataServiceError(
            f"license-checker failed (exit {proc.returncode}): "
            f"{stderr.decode(errors='replace').strip()}"
        )
    return stdout.decode(errors="replace")
