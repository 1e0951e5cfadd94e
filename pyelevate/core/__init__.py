"""
Core functionality exports for pyelevate.

Importing from here keeps user-facing imports clean and stable:

    from pyelevate.core import ManifestParser, IndexResolutionClient
"""

from __future__ import annotations

from pyelevate.core.cache import ResponseCache
from pyelevate.core.parser import ManifestParser
from pyelevate.core.index_client import IndexPackageData, IndexResolutionClient
from pyelevate.core.advisory import AdvisoryChecker
from pyelevate.core.popularity import PopularityFetcher
from pyelevate.core.changelog import ChangelogFetcher
from pyelevate.core.dependency_graph import DependencyGraph
from pyelevate.core.simulator import UpgradeSimulator, calculate_risk_level
from pyelevate.core.selection import SortBy
from pyelevate.core.pipeline import AnalysisPipeline, analyze

__all__ = [
    "ResponseCache",
    "ManifestParser",
    "IndexResolutionClient",
    "IndexPackageData",
    "AdvisoryChecker",
    "PopularityFetcher",
    "ChangelogFetcher",
    "DependencyGraph",
    "UpgradeSimulator",
    "calculate_risk_level",
    "SortBy",
    "AnalysisPipeline",
    "analyze",
]
