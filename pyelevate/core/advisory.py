"""Vulnerability lookups for declared package versions.

:class:`AdvisoryChecker` queries an OSV-compatible endpoint with
``{package: {name, ecosystem}, version}`` for every index-sourced record
and maps the returned ``vulns`` to :class:`SecurityAdvisory` entries.

Security data is best-effort. A failed lookup leaves the record's
``security_status`` unknown and is retried on the next check; successful
lookups are cached per package name for the checker's lifetime.
"""

from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Optional, Sequence

from pyelevate.core.cache import ResponseCache
from pyelevate.models.advisory import SecurityAdvisory, Severity
from pyelevate.models.package import PackageRecord, SecurityStatus, VersionStatus
from pyelevate.utils.http import HTTPClient
from pyelevate.utils.logger import get_logger
from pyelevate.exceptions import PyElevateError
from pyelevate.constants import OSV_ADVISORY_URL, OSV_ECOSYSTEM, OSV_QUERY_API

logger = get_logger("advisory")

__all__ = ["AdvisoryChecker", "parse_advisories"]


class AdvisoryChecker:
    """Best-effort advisory lookups with a per-name cache.

    Args:
        http_client: Shared :class:`HTTPClient`.
        advisory_url: Query endpoint accepting the OSV request body.
    """

    def __init__(
        self,
        http_client: HTTPClient,
        *,
        advisory_url: str = OSV_QUERY_API,
    ) -> None:
        self.http_client = http_client
        self.advisory_url = advisory_url
        self._cache: ResponseCache[str, List[SecurityAdvisory]] = ResponseCache(
            "advisory"
        )

    async def fetch_advisories(self, name: str, version: str) -> List[SecurityAdvisory]:
        """Return advisories for ``name`` at ``version``.

        Raises:
            NetworkError: The query failed; nothing is cached.
        """
        return await self._cache.get_or_fetch(
            name, lambda: self._query(name, version)
        )

    def get_advisories(self, name: str) -> List[SecurityAdvisory]:
        """Advisories already fetched for ``name``, or an empty list."""
        return list(self._cache.get(name) or [])

    async def check_records(self, records: Sequence[PackageRecord]) -> None:
        """Set ``security_status`` on every index-sourced record.

        Vulnerable records also get ``status = VULNERABLE``.
        """
        eligible = [record for record in records if record.is_index_source]
        if not eligible:
            return

        outcomes = await asyncio.gather(
            *(self.fetch_advisories(r.name, r.current_version) for r in eligible),
            return_exceptions=True,
        )

        for record, outcome in zip(eligible, outcomes):
            if isinstance(outcome, PyElevateError):
                logger.debug("Advisory lookup failed for %s: %s", record.name, outcome)
                record.security_status = SecurityStatus.unknown()
                continue
            if isinstance(outcome, Exception):
                logger.debug("Advisory lookup failed for %s: %r", record.name, outcome)
                record.security_status = SecurityStatus.unknown()
                continue
            if isinstance(outcome, BaseException):
                raise outcome

            if outcome:
                record.security_status = SecurityStatus.vulnerable(len(outcome))
                record.status = VersionStatus.VULNERABLE
                logger.info(
                    "%s %s has %d known advisory(ies)",
                    record.name,
                    record.current_version,
                    len(outcome),
                )
            else:
                record.security_status = SecurityStatus.safe()

    def clear_cache(self) -> None:
        self._cache.clear()

    async def _query(self, name: str, version: str) -> List[SecurityAdvisory]:
        payload = {
            "package": {"name": name, "ecosystem": OSV_ECOSYSTEM},
            "version": version,
        }
        data = await self.http_client.post_json(self.advisory_url, payload)
        return parse_advisories(data)


def parse_advisories(data: Dict[str, Any]) -> List[SecurityAdvisory]:
    """Map an OSV query response to advisories.

    Entries without a string ``id`` and ``summary`` are skipped. A missing
    or non-string ``severity`` counts as medium.

    Example::

        >>> parse_advisories({"vulns": [{"id": "PYSEC-1", "summary": "x"}]})
        [SecurityAdvisory(id='PYSEC-1', title='x', severity=<Severity.MEDIUM: 'MEDIUM'>, ...)]
    """
    vulns = data.get("vulns")
    if not isinstance(vulns, list):
        return []

    advisories: List[SecurityAdvisory] = []
    for item in vulns:
        if not isinstance(item, dict):
            continue

        advisory_id = item.get("id")
        summary = item.get("summary")
        if not isinstance(advisory_id, str) or not isinstance(summary, str):
            continue

        severity: Optional[str] = item.get("severity")
        if not isinstance(severity, str):
            severity = None

        advisories.append(
            SecurityAdvisory(
                id=advisory_id,
                title=summary,
                severity=Severity.from_label(severity),
                url=OSV_ADVISORY_URL.format(id=advisory_id),
            )
        )

    return advisories
