"""Release summaries and keyword-based change hints.

:class:`ChangelogFetcher` reads the summary of a specific release from the
package index and flags breaking changes, deprecations and security fixes
by case-insensitive keyword matching. This is a heuristic over one line of
text; false positives and misses are expected.

Outcomes are cached per ``(name, version)``, failures included as ``None``.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Tuple

from pyelevate.core.cache import ResponseCache
from pyelevate.models.enrichment import Changelog
from pyelevate.models.package import PackageRecord
from pyelevate.utils.http import HTTPClient
from pyelevate.utils.logger import get_logger
from pyelevate.exceptions import PyElevateError
from pyelevate.constants import (
    BREAKING_KEYWORDS,
    DEPRECATION_KEYWORDS,
    PYPI_RELEASE_JSON_API,
    SECURITY_KEYWORDS,
)

logger = get_logger("changelog")

_NO_DESCRIPTION = "No description available"


def _match_keywords(text: str, keywords: Sequence[str], label: str) -> List[str]:
    lowered = text.lower()
    return [f"{label}: {keyword}" for keyword in keywords if keyword in lowered]


def detect_breaking_changes(text: str) -> List[str]:
    """One ``"Detected: <keyword>"`` entry per breaking-change keyword found."""
    return _match_keywords(text, BREAKING_KEYWORDS, "Detected")


def detect_deprecated(text: str) -> List[str]:
    return _match_keywords(text, DEPRECATION_KEYWORDS, "Deprecated")


def detect_security_fixes(text: str) -> List[str]:
    return _match_keywords(text, SECURITY_KEYWORDS, "Security fix")


class ChangelogFetcher:
    """Best-effort changelog hints for a package release.

    Args:
        http_client: Shared :class:`HTTPClient`.
        release_url: Endpoint template with ``{package}`` and ``{version}``.
    """

    def __init__(
        self,
        http_client: HTTPClient,
        *,
        release_url: str = PYPI_RELEASE_JSON_API,
    ) -> None:
        self.http_client = http_client
        self.release_url = release_url
        self._cache: ResponseCache[Tuple[str, str], Optional[Changelog]] = (
            ResponseCache("changelog")
        )

    async def fetch_changelog(self, name: str, version: str) -> Optional[Changelog]:
        return await self._cache.get_or_fetch(
            (name, version), lambda: self._fetch(name, version)
        )

    async def update_records(self, records: Sequence[PackageRecord]) -> None:
        """Attach changelog hints for each resolved index record's latest version."""
        eligible = [
            record
            for record in records
            if record.is_index_source and record.latest_version
        ]
        if not eligible:
            return

        results = await asyncio.gather(
            *(self.fetch_changelog(r.name, r.latest_version) for r in eligible)
        )
        for record, changelog in zip(eligible, results):
            record.changelog = changelog

    def clear_cache(self) -> None:
        self._cache.clear()

    async def _fetch(self, name: str, version: str) -> Optional[Changelog]:
        url = self.release_url.format(package=name, version=version)
        try:
            data = await self.http_client.get_json(url)
            return build_changelog(version, data)
        except PyElevateError as exc:
            logger.debug("Changelog lookup failed for %s %s: %s", name, version, exc)
        except Exception as exc:
            logger.debug("Changelog lookup failed for %s %s: %r", name, version, exc)
        return None


def build_changelog(version: str, data: Dict[str, Any]) -> Changelog:
    """Derive a :class:`Changelog` from a release JSON document."""
    info = data.get("info")
    summary = info.get("summary") if isinstance(info, dict) else None
    if not isinstance(summary, str) or not summary:
        summary = _NO_DESCRIPTION

    return Changelog(
        version=version,
        release_date=_release_date(data),
        changes=[summary],
        breaking_changes=detect_breaking_changes(summary),
        deprecated=detect_deprecated(summary),
        security_fixes=detect_security_fixes(summary),
    )


def _release_date(data: Dict[str, Any]) -> str:
    """Upload date of the first release file, else today's UTC date."""
    files = data.get("urls")
    if isinstance(files, list) and files and isinstance(files[0], dict):
        upload_time = files[0].get("upload_time")
        if isinstance(upload_time, str) and len(upload_time) >= 10:
            return upload_time[:10]
    return datetime.now(timezone.utc).strftime("%Y-%m-%d")
