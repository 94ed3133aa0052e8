"""
Arbitrage Pipeline

Funding rates -> side data aggregation -> per-symbol processing -> ranking.
"""

import logging
from typing import List, Optional

import aiohttp

from funding_arb.config import Config, get_config
from funding_arb.models import ScanResult
from funding_arb.sources import SourceRegistry
from funding_arb.transport import RateLimiterRegistry
from .aggregator import MarketDataAggregator
from .ranker import OpportunityRanker
from .symbol_processor import SymbolProcessor

logger = logging.getLogger(__name__)


class NoFundingDataError(RuntimeError):
    """The funding-rate provider returned no usable records."""


class ArbitragePipeline:
    """
    Runs one complete scan.

    The rate limiter registry must outlive individual scans so that provider
    quotas hold across requests; everything else is per scan.
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        limiters: Optional[RateLimiterRegistry] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self.config = config or get_config()
        self.limiters = limiters or RateLimiterRegistry(
            max_calls=self.config.rate_limit.calls_per_minute,
            window_seconds=self.config.rate_limit.window_seconds,
        )
        self.session = session
        self.processor = SymbolProcessor(self.config.arbitrage)
        self.ranker = OpportunityRanker()

    async def run(self, selected_exchanges: List[str]) -> ScanResult:
        """
        Scan all symbols for funding arbitrage between the selected exchanges.

        Raises:
            NoFundingDataError: if no funding rate records were received
        """
        sources = SourceRegistry.create(self.config, self.limiters, session=self.session)

        try:
            logger.info(f"[bold]Fetching funding rates for {len(selected_exchanges)} exchanges...[/]")
            records = await sources.funding.fetch()

            if not records:
                raise NoFundingDataError("No funding rate data received from CoinGlass API")

            aggregator = MarketDataAggregator(sources.side, timeout=self.config.aggregator.timeout)
            datasets = await aggregator.aggregate()

            opportunities, processed = self.processor.process_all(
                records, selected_exchanges, datasets
            )

            ranked, stats = self.ranker.rank(
                opportunities,
                total_symbols=len(records),
                processed_symbols=processed,
                selected_exchanges=len(selected_exchanges),
                source_counts=datasets.counts(),
            )

            logger.info(
                f"[bold green]Scan complete[/]: {stats.real_opportunities} opportunities "
                f"from {stats.total_symbols} symbols"
            )
            return ScanResult(opportunities=ranked, stats=stats)

        finally:
            await sources.close()
