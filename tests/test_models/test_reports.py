from __future__ import annotations

import pytest

from pyelevate.models import (
    Changelog,
    PackageRecord,
    PopularityData,
    RiskLevel,
    SecurityAdvisory,
    Severity,
    UpgradeStats,
    VersionStatus,
)


@pytest.mark.unit
class TestSeverity:
    """Tests for Severity.from_label."""

    @pytest.mark.parametrize(
        "label,expected",
        [
            ("CRITICAL", Severity.CRITICAL),
            ("high", Severity.HIGH),
            ("Moderate", Severity.LOW),
            (None, Severity.MEDIUM),
        ],
    )
    def test_from_label(self, label: object, expected: Severity) -> None:
        assert Severity.from_label(label) is expected  # type: ignore[arg-type]


@pytest.mark.unit
class TestSecurityAdvisory:
    def test_to_json(self) -> None:
        advisory = SecurityAdvisory(
            id="GHSA-1234",
            title="Remote code execution",
            severity=Severity.HIGH,
            url="https://osv.dev/vulnerability/GHSA-1234",
            affected_versions=["1.0.0"],
            fixed_version="1.0.1",
        )

        assert advisory.to_json() == {
            "id": "GHSA-1234",
            "title": "Remote code execution",
            "severity": "HIGH",
            "affected_versions": ["1.0.0"],
            "fixed_version": "1.0.1",
            "url": "https://osv.dev/vulnerability/GHSA-1234",
        }


@pytest.mark.unit
class TestChangelog:
    """Tests for Changelog risk heuristics."""

    def test_low_without_findings(self) -> None:
        changelog = Changelog(version="1.0.0", release_date="2024-01-01")

        assert changelog.has_breaking_changes() is False
        assert changelog.risk_level() is RiskLevel.LOW

    def test_medium_on_deprecation(self) -> None:
        changelog = Changelog(
            version="1.0.0",
            release_date="2024-01-01",
            deprecated=["Deprecated: deprecated"],
        )

        assert changelog.risk_level() is RiskLevel.MEDIUM

    def test_high_on_breaking_change_wins(self) -> None:
        changelog = Changelog(
            version="1.0.0",
            release_date="2024-01-01",
            breaking_changes=["Detected: removed"],
            deprecated=["Deprecated: legacy"],
        )

        assert changelog.has_breaking_changes() is True
        assert changelog.risk_level() is RiskLevel.HIGH


@pytest.mark.unit
class TestPopularityData:
    """Tests for PopularityData."""

    def test_from_trend_sums_downloads(self) -> None:
        data = PopularityData.from_trend([("2024-01-02", 100), ("2024-01-01", 50)])

        assert data.weekly_downloads == 150
        assert data.downloads_last_month == 600
        assert data.package_rank is None

    def test_from_empty_trend(self) -> None:
        data = PopularityData.from_trend([])

        assert data.weekly_downloads == 0
        assert data.downloads_last_month == 0

    def test_to_json(self) -> None:
        data = PopularityData.from_trend([("2024-01-01", 7)])

        assert data.to_json() == {
            "downloads_last_month": 28,
            "weekly_downloads": 7,
            "downloads_trend": [["2024-01-01", 7]],
            "package_rank": None,
        }


@pytest.mark.unit
class TestUpgradeStats:
    """Tests for UpgradeStats.from_records."""

    def test_counts_by_status(self) -> None:
        records = [
            PackageRecord(name="a", status=VersionStatus.PATCH),
            PackageRecord(name="b", status=VersionStatus.MINOR),
            PackageRecord(name="c", status=VersionStatus.MAJOR),
            PackageRecord(name="d", status=VersionStatus.MAJOR),
            PackageRecord(name="e", status=VersionStatus.UP_TO_DATE),
            PackageRecord(name="f", status=VersionStatus.ERROR),
            PackageRecord(name="g", status=VersionStatus.VULNERABLE),
            PackageRecord(name="h", status=VersionStatus.UNKNOWN),
        ]

        stats = UpgradeStats.from_records(records, conflicts=2)

        assert stats.total == 8
        assert stats.patch_available == 1
        assert stats.minor_available == 1
        assert stats.major_available == 2
        assert stats.up_to_date == 1
        assert stats.errors == 1
        assert stats.vulnerable == 1
        assert stats.conflicts == 2
        assert stats.total_upgradable == 4

    def test_empty(self) -> None:
        stats = UpgradeStats.from_records([])

        assert stats.total == 0
        assert stats.total_upgradable == 0
