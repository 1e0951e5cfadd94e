"""
Unified data model exports for pyelevate.

Example:
    >>> from pyelevate.models import PackageRecord, VersionStatus, Conflict
"""

from __future__ import annotations

from pyelevate.models.package import (
    Compatible,
    DependencySource,
    GitSource,
    GreaterEqual,
    IndexSource,
    Less,
    LocalPathSource,
    PackageRecord,
    Pinned,
    Range,
    SecurityState,
    SecurityStatus,
    UnknownSource,
    Unspecified,
    UrlSource,
    VersionConstraint,
    VersionStatus,
)
from pyelevate.models.advisory import SecurityAdvisory, Severity
from pyelevate.models.simulation import RiskLevel, UpgradeSimulation, UpgradeStats
from pyelevate.models.enrichment import Changelog, PopularityData
from pyelevate.models.conflict import Conflict

__all__ = [
    "PackageRecord",
    "VersionStatus",
    "SecurityState",
    "SecurityStatus",
    "DependencySource",
    "IndexSource",
    "GitSource",
    "LocalPathSource",
    "UrlSource",
    "UnknownSource",
    "VersionConstraint",
    "Pinned",
    "GreaterEqual",
    "Less",
    "Range",
    "Compatible",
    "Unspecified",
    "SecurityAdvisory",
    "Severity",
    "Changelog",
    "PopularityData",
    "Conflict",
    "RiskLevel",
    "UpgradeSimulation",
    "UpgradeStats",
]
