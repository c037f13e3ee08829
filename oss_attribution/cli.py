"""CLI entry point: oss-attribution.

Calculate the npm modules used in a project and generate a third-party
attribution (credits) text.

Examples:
    oss-attribution -o ./tpn                       # write output to ./tpn
    oss-attribution -b ./some/path/to/projectDir   # scan another project
    oss-attribution -o tpn -b ./app -b ./server    # merge several projects
"""

from __future__ import annotations

import asyncio
import sys

import click
import structlog

from oss_attribution.attribution.aggregator import collect_attributions
from oss_attribution.attribution.checker import DependencyMetadataService, LicenseCheckerService
from oss_attribution.attribution.overrides import apply_overrides, load_overrides
from oss_attribution.attribution.report import write_outputs
from oss_attribution.core.config import DEFAULT_OUTPUT_DIR, AttributionConfig
from oss_attribution.core.logging import setup_logging
from oss_attribution.exceptions import AttributionError, OverrideError, ReportWriteError

log = structlog.get_logger("oss_attribution.cli")


def run(config: AttributionConfig, service: DependencyMetadataService) -> int:
    """Execute one attribution run; returns the process exit code."""
    log.info(
        "cli.run",
        output_dir=str(config.output_dir),
        base_dirs=[str(d) for d in config.base_dirs],
        concurrency=config.concurrency,
    )
    try:
        attributions = asyncio.run(collect_attributions(config, service))
    except (AttributionError, OSError, ValueError) as e:
        click.echo(f"Error: {e}", err=True)
        return 1

    try:
        overrides = load_overrides(config.overrides_path)
        infos = apply_overrides(attributions, overrides)
    except OverrideError as e:
        click.echo(f"ERROR processing overrides: {e}", err=True)
        return 1

    try:
        path = write_outputs(config, infos)
    except ReportWriteError as e:
        click.echo(f"ERROR writing attribution file: {e}", err=True)
        return 1

    click.echo(f"Generated attribution for {len(infos)} packages")
    click.echo(f"Attribution written to {path}")
    return 0


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "-o",
    "--outputDir",
    "output_dir",
    default=DEFAULT_OUTPUT_DIR,
    show_default=True,
    help="Output directory for attribution files",
)
@click.option(
    "-b",
    "--baseDir",
    "base_dirs",
    multiple=True,
    help=(
        "Base directory to scan for dependencies; repeat the option for "
        "several (-b app -b server). Default: CWD"
    ),
)
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging")
def main(output_dir: str, base_dirs: tuple[str, ...], verbose: bool) -> None:
    """Calculate the npm modules used in this project and generate a
    third-party attribution (credits) text."""
    setup_logging(verbose)
    config = AttributionConfig.from_cli(output_dir, base_dirs)
    sys.exit(run(config, LicenseCheckerService()))


if __name__ == "__main__":
    main()
