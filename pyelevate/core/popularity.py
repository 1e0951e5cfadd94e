"""Download statistics for index packages.

Fetches the recent daily download series from a pypistats-compatible
endpoint. Only the newest seven points are kept; ``weekly_downloads`` is
their sum and ``downloads_last_month`` is four times that.

Every outcome is cached per package name, including failures, which are
cached as ``None`` so an unavailable package is not asked for again.
"""

from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Optional, Sequence, Tuple

from pyelevate.core.cache import ResponseCache
from pyelevate.models.enrichment import PopularityData
from pyelevate.models.package import PackageRecord
from pyelevate.utils.http import HTTPClient
from pyelevate.utils.logger import get_logger
from pyelevate.exceptions import PyElevateError
from pyelevate.constants import POPULARITY_TREND_DAYS, PYPISTATS_RECENT_API

logger = get_logger("popularity")


class PopularityFetcher:
    def __init__(
        self,
        http_client: HTTPClient,
        *,
        popularity_url: str = PYPISTATS_RECENT_API,
    ) -> None:
        self.http_client = http_client
        self.popularity_url = popularity_url
        self._cache: ResponseCache[str, Optional[PopularityData]] = ResponseCache(
            "popularity"
        )

    async def fetch_popularity(self, name: str) -> Optional[PopularityData]:
        """Return download statistics for ``name``, or ``None`` if unavailable."""
        return await self._cache.get_or_fetch(name, lambda: self._fetch(name))

    async def update_records(self, records: Sequence[PackageRecord]) -> None:
        eligible = [record for record in records if record.is_index_source]
        if not eligible:
            return

        results = await asyncio.gather(
            *(self.fetch_popularity(record.name) for record in eligible)
        )
        for record, popularity in zip(eligible, results):
            record.popularity = popularity

    def clear_cache(self) -> None:
        self._cache.clear()

    async def _fetch(self, name: str) -> Optional[PopularityData]:
        url = self.popularity_url.format(package=name)
        try:
            data = await self.http_client.get_json(url)
            return PopularityData.from_trend(parse_trend(data))
        except PyElevateError as exc:
            logger.debug("Popularity lookup failed for %s: %s", name, exc)
        except Exception as exc:
            logger.debug("Popularity lookup failed for %s: %r", name, exc)
        return None


def parse_trend(data: Dict[str, Any]) -> List[Tuple[str, int]]:
    """Extract up to seven ``(date, downloads)`` points, newest first.

    Rows without a string date or a non-negative integer count are dropped.
    """
    rows = data.get("data")
    if not isinstance(rows, list):
        return []

    trend: List[Tuple[str, int]] = []
    for row in rows[:POPULARITY_TREND_DAYS]:
        if not isinstance(row, dict):
            continue
        date = row.get("date")
        count = row.get("downloads")
        if (
            isinstance(date, str)
            and isinstance(count, int)
            and not isinstance(count, bool)
            and count >= 0
        ):
            trend.append((date, count))
    return trend
