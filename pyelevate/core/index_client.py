"""Latest-version resolution against the package index.

:class:`IndexResolutionClient` looks up every index-sourced record
concurrently, then applies all outcomes to the records in one
single-threaded pass. Lookups share one :class:`ResponseCache`, so each
package name costs at most one request per client lifetime; call
:meth:`IndexResolutionClient.clear_cache` to force re-resolution.

A failing lookup never affects its siblings: the record gets ``error``
set and ``status = ERROR`` while the rest of the batch resolves normally.

Typical usage::

    from pyelevate.utils.http import HTTPClient
    from pyelevate.core.index_client import IndexResolutionClient

    async with HTTPClient() as http:
        client = IndexResolutionClient(http)
        await client.update_records(records)

        for record in records:
            print(record.name, record.latest_version, record.status.label)
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from packaging.utils import canonicalize_name
from packaging.requirements import InvalidRequirement, Requirement

from pyelevate.core.cache import ResponseCache
from pyelevate.models.package import PackageRecord
from pyelevate.utils.http import HTTPClient
from pyelevate.utils.logger import get_logger
from pyelevate.utils.version_utils import compare_versions
from pyelevate.exceptions import PackageIndexError, PyElevateError
from pyelevate.constants import PYPI_JSON_API

logger = get_logger("index_client")

__all__ = ["IndexResolutionClient", "IndexPackageData"]


@dataclass
class IndexPackageData:
    """What the index reported for one package.

    Attributes:
        name: Canonical package name.
        latest_version: ``info.version`` from the index.
        releases: Version strings listed under ``releases``.
        dependencies: Canonical names of the base (non-extra) runtime
            requirements of the latest release.
        summary: One-line project summary, if any.
    """

    name: str
    latest_version: str
    releases: List[str] = field(default_factory=list)
    dependencies: List[str] = field(default_factory=list)
    summary: Optional[str] = None


class IndexResolutionClient:
    """Concurrent, cached resolver of latest package versions.

    Args:
        http_client: Shared :class:`HTTPClient`; it owns timeouts and the
            concurrency bound.
        index_url: JSON endpoint template with a ``{package}`` placeholder.
    """

    def __init__(
        self,
        http_client: HTTPClient,
        *,
        index_url: str = PYPI_JSON_API,
    ) -> None:
        self.http_client = http_client
        self.index_url = index_url
        self._cache: ResponseCache[str, IndexPackageData] = ResponseCache("index")

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    async def fetch_package_data(self, name: str) -> IndexPackageData:
        """Return index data for ``name``, from cache when possible.

        Raises:
            PackageIndexError: The package is unknown or the response is
                missing ``info.version``.
            NetworkError: Transport failure or non-2xx response.
        """
        key = canonicalize_name(name)
        return await self._cache.get_or_fetch(key, lambda: self._fetch(name))

    async def fetch_latest_version(self, name: str) -> str:
        data = await self.fetch_package_data(name)
        return data.latest_version

    def get_cached(self, name: str) -> Optional[IndexPackageData]:
        """Return cached data without touching the network."""
        return self._cache.get(canonicalize_name(name))

    def clear_cache(self) -> None:
        self._cache.clear()

    # ------------------------------------------------------------------
    # Batch resolution
    # ------------------------------------------------------------------

    async def update_records(self, records: Sequence[PackageRecord]) -> None:
        """Resolve every index-sourced record, then apply the outcomes.

        Records with other sources are left untouched. On success a record
        gets ``latest_version``, a fresh classification and the manifest
        packages it depends on; on failure it gets ``error`` and
        ``status = ERROR``.
        """
        eligible = [record for record in records if record.is_index_source]
        if not eligible:
            return

        logger.info("Resolving %d package(s)", len(eligible))
        outcomes = await asyncio.gather(
            *(self.fetch_package_data(record.name) for record in eligible),
            return_exceptions=True,
        )

        by_name: Dict[str, Any] = {
            record.name: outcome for record, outcome in zip(eligible, outcomes)
        }
        manifest_names = {canonicalize_name(r.name): r.name for r in records}

        for record in eligible:
            outcome = by_name[record.name]

            if isinstance(outcome, PyElevateError):
                logger.warning("Failed to resolve %s: %s", record.name, outcome.message)
                record.mark_failed(outcome.message)
                continue
            if isinstance(outcome, Exception):
                logger.warning("Failed to resolve %s: %r", record.name, outcome)
                record.mark_failed(f"Unexpected error: {outcome}")
                continue
            if isinstance(outcome, BaseException):
                raise outcome

            record.mark_resolved(
                outcome.latest_version,
                compare_versions(record.current_version, outcome.latest_version),
            )
            record.dependencies = [
                manifest_names[dep]
                for dep in outcome.dependencies
                if dep in manifest_names and manifest_names[dep] != record.name
            ]

    # ------------------------------------------------------------------
    # Network helpers (private)
    # ------------------------------------------------------------------

    async def _fetch(self, name: str) -> IndexPackageData:
        url = self.index_url.format(package=name)

        try:
            data = await self.http_client.get_json(url)
        except PackageIndexError as exc:
            raise PackageIndexError(
                f"Package '{name}' not found on the package index",
                package_name=name,
                url=url,
                status_code=exc.status_code,
            ) from exc

        return self._parse_package_data(name, data, url)

    @classmethod
    def _parse_package_data(
        cls,
        name: str,
        data: Dict[str, Any],
        url: str,
    ) -> IndexPackageData:
        info = data.get("info")
        if not isinstance(info, dict):
            info = {}

        latest = info.get("version")
        if not isinstance(latest, str) or not latest:
            raise PackageIndexError(
                f"Package index returned no version for '{name}'",
                package_name=name,
                url=url,
            )

        releases = data.get("releases")
        summary = info.get("summary")

        return IndexPackageData(
            name=canonicalize_name(name),
            latest_version=latest,
            releases=list(releases) if isinstance(releases, dict) else [],
            dependencies=cls._extract_dependencies(info),
            summary=summary if isinstance(summary, str) else None,
        )

    @staticmethod
    def _extract_dependencies(info: Dict[str, Any]) -> List[str]:
        """Canonical names of the base requirements in ``requires_dist``.

        Requirements conditional on an extra are skipped; other markers are
        ignored.

        Example::

            >>> IndexResolutionClient._extract_dependencies(
            ...     {"requires_dist": ["Jinja2>=3.0", "pytest; extra == 'test'"]}
            ... )
            ['jinja2']
        """
        names: List[str] = []

        for entry in info.get("requires_dist") or []:
            if not isinstance(entry, str):
                continue
            try:
                requirement = Requirement(entry)
            except InvalidRequirement:
                logger.debug("Ignoring unparseable requirement: %s", entry)
                continue

            if requirement.marker is not None and "extra" in str(requirement.marker):
                continue

            canonical = canonicalize_name(requirement.name)
            if canonical not in names:
                names.append(canonical)

        return names
