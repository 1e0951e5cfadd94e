from __future__ import annotations

import re
from unittest.mock import AsyncMock, MagicMock

import pytest

from pyelevate.core.changelog import (
    ChangelogFetcher,
    build_changelog,
    detect_breaking_changes,
    detect_deprecated,
    detect_security_fixes,
)
from pyelevate.exceptions import PackageIndexError
from pyelevate.models import PackageRecord, RiskLevel, VersionStatus
from pyelevate.utils.http import HTTPClient


@pytest.fixture
def mock_http() -> MagicMock:
    http = MagicMock(spec=HTTPClient)
    http.get_json = AsyncMock()
    return http


@pytest.mark.unit
class TestKeywordDetection:
    """Tests for the keyword heuristics."""

    def test_breaking(self) -> None:
        found = detect_breaking_changes("BREAKING CHANGE: removed the old API")

        assert "Detected: breaking change" in found
        assert "Detected: removed" in found

    def test_deprecated(self) -> None:
        assert detect_deprecated("Option X is deprecated and will be removed") == [
            "Deprecated: deprecated",
            "Deprecated: will be removed",
        ]

    def test_security(self) -> None:
        assert "Security fix: cve" in detect_security_fixes("Fixes CVE-2024-0001")

    def test_no_matches(self) -> None:
        text = "Minor improvements to documentation"

        assert detect_breaking_changes(text) == []
        assert detect_deprecated(text) == []
        assert detect_security_fixes(text) == []


@pytest.mark.unit
class TestBuildChangelog:
    """Tests for build_changelog."""

    def test_uses_summary_and_upload_date(self) -> None:
        changelog = build_changelog(
            "3.0.0",
            {
                "info": {"summary": "Breaking changes everywhere"},
                "urls": [{"upload_time": "2023-09-30T12:00:00"}],
            },
        )

        assert changelog.version == "3.0.0"
        assert changelog.release_date == "2023-09-30"
        assert changelog.changes == ["Breaking changes everywhere"]
        assert changelog.has_breaking_changes()
        assert changelog.risk_level() is RiskLevel.HIGH

    def test_defaults_without_summary_or_files(self) -> None:
        changelog = build_changelog("1.0.0", {"info": {"summary": None}, "urls": []})

        assert changelog.changes == ["No description available"]
        assert re.fullmatch(r"\d{4}-\d{2}-\d{2}", changelog.release_date)
        assert changelog.risk_level() is RiskLevel.LOW


@pytest.mark.unit
class TestChangelogFetcher:
    """Tests for ChangelogFetcher."""

    @pytest.mark.asyncio
    async def test_fetch_uses_release_endpoint(self, mock_http: MagicMock) -> None:
        mock_http.get_json.return_value = {"info": {"summary": "Deprecated old flags"}}
        fetcher = ChangelogFetcher(mock_http)

        changelog = await fetcher.fetch_changelog("flask", "3.0.0")

        assert changelog is not None
        assert changelog.risk_level() is RiskLevel.MEDIUM
        mock_http.get_json.assert_awaited_once_with("https://pypi.org/pypi/flask/3.0.0/json")

    @pytest.mark.asyncio
    async def test_cached_per_release(self, mock_http: MagicMock) -> None:
        mock_http.get_json.return_value = {"info": {"summary": "x"}}
        fetcher = ChangelogFetcher(mock_http)

        await fetcher.fetch_changelog("flask", "3.0.0")
        await fetcher.fetch_changelog("flask", "3.0.0")
        await fetcher.fetch_changelog("flask", "3.0.1")

        assert mock_http.get_json.await_count == 2

    @pytest.mark.asyncio
    async def test_failure_gives_none(self, mock_http: MagicMock) -> None:
        mock_http.get_json.side_effect = PackageIndexError("not found", status_code=404)
        fetcher = ChangelogFetcher(mock_http)

        assert await fetcher.fetch_changelog("flask", "9.9.9") is None

    @pytest.mark.asyncio
    async def test_unexpected_error_degrades_to_none(self, mock_http: MagicMock) -> None:
        async def fake_get_json(url: str) -> dict:
            if "loopy" in url:
                raise RuntimeError("redirect loop")
            return {"info": {"summary": "Bug fixes"}}

        mock_http.get_json.side_effect = fake_get_json
        fetcher = ChangelogFetcher(mock_http)
        broken = PackageRecord(name="loopy", current_version="1.0.0")
        broken.mark_resolved("1.1.0", VersionStatus.MINOR)
        healthy = PackageRecord(name="flask", current_version="2.0.0")
        healthy.mark_resolved("2.0.1", VersionStatus.PATCH)

        await fetcher.update_records([broken, healthy])

        assert broken.changelog is None
        assert healthy.changelog is not None

    @pytest.mark.asyncio
    async def test_update_records_only_resolved(self, mock_http: MagicMock) -> None:
        mock_http.get_json.return_value = {"info": {"summary": "Bug fixes"}}
        fetcher = ChangelogFetcher(mock_http)
        resolved = PackageRecord(name="flask", current_version="2.0.0")
        resolved.mark_resolved("3.0.0", VersionStatus.MAJOR)
        unresolved = PackageRecord(name="click")

        await fetcher.update_records([resolved, unresolved])

        assert resolved.changelog is not None
        assert resolved.changelog.version == "3.0.0"
        assert unresolved.changelog is None
        assert mock_http.get_json.await_count == 1
