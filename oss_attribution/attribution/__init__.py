"""Attribution engine — collect npm license metadata and render reports."""

from oss_attribution.attribution.aggregator import collect_attributions
from oss_attribution.attribution.models import RawDependencyRecord, ResolvedAttribution
from oss_attribution.attribution.report import build_report, write_outputs

__all__ = [
    "RawDependencyRecord",
    "ResolvedAttribution",
    "build_report",
    "collect_attributions",
    "write_outputs",
]
