"""
Enrichment payload models for pyelevate.

:class:`Changelog` and :class:`PopularityData` are attached to a
:class:`~pyelevate.models.package.PackageRecord` once fetched. Both are
best-effort: their absence only means the data was unavailable.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from pyelevate.models.simulation import RiskLevel
from pyelevate.constants import WEEKS_PER_MONTH


@dataclass
class Changelog:
    """Keyword-derived summary of a release.

    ``breaking_changes``, ``deprecated`` and ``security_fixes`` hold one
    entry per matched keyword. They are heuristics, not a changelog parse.
    """

    version: str
    release_date: str
    changes: List[str] = field(default_factory=list)
    breaking_changes: List[str] = field(default_factory=list)
    deprecated: List[str] = field(default_factory=list)
    security_fixes: List[str] = field(default_factory=list)

    def has_breaking_changes(self) -> bool:
        return bool(self.breaking_changes)

    def risk_level(self) -> RiskLevel:
        """High on any breaking change, medium on any deprecation, else low."""
        if self.breaking_changes:
            return RiskLevel.HIGH
        if self.deprecated:
            return RiskLevel.MEDIUM
        return RiskLevel.LOW


@dataclass
class PopularityData:
    """Recent download statistics.

    Attributes:
        downloads_last_month: ``weekly_downloads * 4``; an approximation.
        weekly_downloads: Sum of ``downloads_trend``.
        downloads_trend: ``(date, count)`` pairs, newest first, at most 7.
        package_rank: Rank among all packages, when known.
    """

    downloads_last_month: int
    weekly_downloads: int
    downloads_trend: List[Tuple[str, int]] = field(default_factory=list)
    package_rank: Optional[int] = None

    @classmethod
    def from_trend(cls, trend: Sequence[Tuple[str, int]]) -> "PopularityData":
        weekly = sum(count for _, count in trend)
        return cls(
            downloads_last_month=weekly * WEEKS_PER_MONTH,
            weekly_downloads=weekly,
            downloads_trend=list(trend),
        )

    def to_json(self) -> Dict[str, Any]:
        return {
            "downloads_last_month": self.downloads_last_month,
            "weekly_downloads": self.weekly_downloads,
            "downloads_trend": [list(point) for point in self.downloads_trend],
            "package_rank": self.package_rank,
        }
