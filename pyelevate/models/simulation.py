"""
Upgrade simulation and statistics models for pyelevate.

Both types are derived snapshots: they are recomputed from the current
record set whenever they are needed and never cached.
"""

from __future__ import annotations

from enum import Enum
from dataclasses import dataclass
from typing import Iterable

from pyelevate.models.package import PackageRecord, VersionStatus


class RiskLevel(Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


@dataclass(frozen=True)
class UpgradeSimulation:
    """Point-in-time risk assessment of the selected upgrade batch.

    Attributes:
        packages_to_upgrade: Number of selected records.
        major_changes: Selected records with a major upgrade pending.
        conflicts_detected: Conflicts over the whole record set.
        security_fixes: Selected records flagged vulnerable.
        risk_level: Aggregate risk of the batch.
    """

    packages_to_upgrade: int
    major_changes: int
    conflicts_detected: int
    security_fixes: int
    risk_level: RiskLevel


@dataclass
class UpgradeStats:
    """Per-status counts over a record set."""

    total: int = 0
    patch_available: int = 0
    minor_available: int = 0
    major_available: int = 0
    up_to_date: int = 0
    errors: int = 0
    vulnerable: int = 0
    conflicts: int = 0

    @classmethod
    def from_records(
        cls,
        records: Iterable[PackageRecord],
        *,
        conflicts: int = 0,
    ) -> "UpgradeStats":
        stats = cls(conflicts=conflicts)
        for record in records:
            stats.total += 1
            if record.status is VersionStatus.PATCH:
                stats.patch_available += 1
            elif record.status is VersionStatus.MINOR:
                stats.minor_available += 1
            elif record.status is VersionStatus.MAJOR:
                stats.major_available += 1
            elif record.status is VersionStatus.UP_TO_DATE:
                stats.up_to_date += 1
            elif record.status is VersionStatus.ERROR:
                stats.errors += 1
            elif record.status is VersionStatus.VULNERABLE:
                stats.vulnerable += 1
        return stats

    @property
    def total_upgradable(self) -> int:
        return self.patch_available + self.minor_available + self.major_available
