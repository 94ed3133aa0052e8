"""
Market Data Aggregator

Runs every side-data source concurrently under one shared timeout.
"""

import asyncio
import logging
from typing import Dict, Optional

from funding_arb.models import MarketDatasets
from funding_arb.sources import SideDataSource

logger = logging.getLogger(__name__)


class MarketDataAggregator:
    """
    Collects side data from all auxiliary providers.

    Sources that finish within the timeout contribute their datasets; the
    rest are cancelled and leave their dataset empty. A failing source never
    fails the aggregation.
    """

    def __init__(self, sources: Dict[str, SideDataSource], timeout: float = 30.0):
        """
        Args:
            sources: Mapping of ``MarketDatasets`` field name to source
            timeout: Ceiling in seconds for all sources combined
        """
        self.sources = sources
        self.timeout = timeout

    async def aggregate(self, timeout: Optional[float] = None) -> MarketDatasets:
        """Fetch all datasets, returning whatever completed in time."""
        timeout = self.timeout if timeout is None else timeout
        datasets = MarketDatasets()

        if not self.sources:
            return datasets

        logger.info(f"Fetching side data from {len(self.sources)} sources: {list(self.sources.keys())}")

        tasks = {
            asyncio.ensure_future(source.fetch()): dataset
            for dataset, source in self.sources.items()
        }

        done, pending = await asyncio.wait(tasks.keys(), timeout=timeout)

        if pending:
            names = sorted(tasks[t] for t in pending)
            logger.warning(
                f"[yellow]Side data fetch timed out after {timeout:g}s, "
                f"proceeding without: {', '.join(names)}[/]"
            )
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)

        for task in done:
            dataset = tasks[task]
            try:
                result = task.result()
            except Exception as e:
                logger.error(f"[{dataset}] Unexpected error fetching side data: {e}")
                continue
            setattr(datasets, dataset, result or {})

        counts = ", ".join(f"{name}: {n}" for name, n in datasets.counts().items())
        logger.info(f"Side data collected - {counts}")

        return datasets
