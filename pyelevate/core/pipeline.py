"""Phase orchestration for a manifest analysis.

Phases run strictly one after another: resolution, then the enabled
enrichment phases (advisories, popularity, changelogs). Within a phase
every package is looked up concurrently and the results are applied once
all lookups have settled, so a reader never sees a half-applied phase.

Typical usage::

    async with HTTPClient(timeout=config.timeout) as http:
        pipeline = AnalysisPipeline(http, config)
        await pipeline.run(records)
"""

from __future__ import annotations

import asyncio
from typing import List, Sequence

from pyelevate.config import PyElevateConfig
from pyelevate.core.advisory import AdvisoryChecker
from pyelevate.core.changelog import ChangelogFetcher
from pyelevate.core.index_client import IndexResolutionClient
from pyelevate.core.popularity import PopularityFetcher
from pyelevate.models.package import PackageRecord
from pyelevate.utils.http import HTTPClient
from pyelevate.utils.logger import get_logger

logger = get_logger("pipeline")


class AnalysisPipeline:
    """Owns one client per phase, all sharing ``http_client``.

    Args:
        http_client: Transport shared by every phase.
        config: Endpoints and the enrichment phases to run.
    """

    def __init__(self, http_client: HTTPClient, config: PyElevateConfig) -> None:
        self.config = config
        self.index_client = IndexResolutionClient(http_client, index_url=config.index_url)
        self.advisory_checker = AdvisoryChecker(
            http_client, advisory_url=config.advisory_url
        )
        self.popularity_fetcher = PopularityFetcher(
            http_client, popularity_url=config.popularity_url
        )
        self.changelog_fetcher = ChangelogFetcher(http_client)

    async def run(self, records: Sequence[PackageRecord]) -> None:
        await self.index_client.update_records(records)

        if self.config.check_security:
            logger.info("Checking security advisories...")
            await self.advisory_checker.check_records(records)

        if self.config.fetch_popularity:
            logger.info("Fetching download statistics...")
            await self.popularity_fetcher.update_records(records)

        if self.config.fetch_changelog:
            logger.info("Fetching changelog summaries...")
            await self.changelog_fetcher.update_records(records)

    def clear_caches(self) -> None:
        self.index_client.clear_cache()
        self.advisory_checker.clear_cache()
        self.popularity_fetcher.clear_cache()
        self.changelog_fetcher.clear_cache()


async def _analyze_async(
    records: Sequence[PackageRecord],
    config: PyElevateConfig,
) -> None:
    async with HTTPClient(
        timeout=config.timeout,
        max_retries=config.max_retries,
        max_concurrency=config.max_concurrency,
    ) as http:
        await AnalysisPipeline(http, config).run(records)


def analyze(
    records: Sequence[PackageRecord],
    config: PyElevateConfig,
) -> List[PackageRecord]:
    """Run every configured phase on ``records`` and return them."""
    if records:
        asyncio.run(_analyze_async(records, config))
    return list(records)
