"""Upgrade risk scoring for the currently selected packages.

The simulation is a pure function of the record set: it is recomputed on
every call and never stored.
"""

from __future__ import annotations

from typing import List, Sequence

from pyelevate.core.dependency_graph import DependencyGraph
from pyelevate.models.package import PackageRecord, VersionStatus
from pyelevate.models.simulation import RiskLevel, UpgradeSimulation

_REPORT_WIDTH = 40


def calculate_risk_level(
    major_changes: int,
    conflicts: int,
    total: int,
) -> RiskLevel:
    """Aggregate risk of a batch of ``total`` selected upgrades.

    - No selected packages: low.
    - Any major change together with any conflict: critical.
    - Major changes in more than half of the batch: high.
    - Any major change or any conflict: medium.
    - Otherwise low, which includes security-only batches.
    """
    if total == 0:
        return RiskLevel.LOW
    if conflicts > 0 and major_changes > 0:
        return RiskLevel.CRITICAL
    if major_changes > total // 2:
        return RiskLevel.HIGH
    if major_changes > 0 or conflicts > 0:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


class UpgradeSimulator:
    """Scores the selected upgrades and renders a text report."""

    def simulate_upgrade(self, records: Sequence[PackageRecord]) -> UpgradeSimulation:
        selected = [record for record in records if record.selected]

        major_changes = sum(1 for r in selected if r.status is VersionStatus.MAJOR)
        security_fixes = sum(1 for r in selected if r.status is VersionStatus.VULNERABLE)
        # Conflicts span the whole record set, not only the selection
        conflicts = len(DependencyGraph.detect_conflicts(records))

        return UpgradeSimulation(
            packages_to_upgrade=len(selected),
            major_changes=major_changes,
            conflicts_detected=conflicts,
            security_fixes=security_fixes,
            risk_level=calculate_risk_level(major_changes, conflicts, len(selected)),
        )

    def generate_report(self, records: Sequence[PackageRecord]) -> str:
        simulation = self.simulate_upgrade(records)

        title = "UPGRADE SIMULATION REPORT"
        lines: List[str] = [
            "╔" + "═" * _REPORT_WIDTH + "╗",
            "║" + title.center(_REPORT_WIDTH) + "║",
            "╚" + "═" * _REPORT_WIDTH + "╝",
            "",
            f"Packages to upgrade:     {simulation.packages_to_upgrade}",
            f"Major changes:           {simulation.major_changes}",
            f"Conflicts detected:      {simulation.conflicts_detected}",
            f"Security fixes:          {simulation.security_fixes}",
            f"Overall Risk:            {simulation.risk_level.value}",
            "",
        ]
        return "\n".join(lines)
