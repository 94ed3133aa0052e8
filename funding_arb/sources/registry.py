"""Source registry for building the per-request set of market-data sources."""

import logging
from dataclasses import dataclass, field, fields
from typing import Dict, List, Optional, Type

import aiohttp

from funding_arb.config import Config
from funding_arb.models import MarketDatasets
from funding_arb.transport import RateLimiterRegistry, ResilientFetcher
from .base import SideDataSource
from .coingecko import CoinGeckoDerivativesSource
from .coinglass import (
    CoinGlassFundingSource,
    CoinGlassHistorySource,
    CoinGlassMarketSource,
    CoinGlassOpenInterestSource,
)
from .coinlore import CoinLoreSource
from .coinmarketcap import CoinMarketCapSource

logger = logging.getLogger(__name__)


@dataclass
class SourceSet:
    """Sources for one request cycle, sharing one fetcher per provider."""

    funding: CoinGlassFundingSource
    side: Dict[str, SideDataSource] = field(default_factory=dict)
    fetchers: Dict[str, ResilientFetcher] = field(default_factory=dict)

    async def close(self) -> None:
        """Close all provider sessions."""
        for fetcher in self.fetchers.values():
            try:
                await fetcher.close()
            except Exception as e:
                logger.debug(f"Error closing fetcher {fetcher.name}: {e}")


class SourceRegistry:
    """
    Registry of all side-data sources.

    Keys are the ``MarketDatasets`` field each source fills.
    """

    _side_sources: Dict[str, Type[SideDataSource]] = {
        "history": CoinGlassHistorySource,
        "open_interest": CoinGlassOpenInterestSource,
        "coinglass_market": CoinGlassMarketSource,
        "coingecko": CoinGeckoDerivativesSource,
        "coinlore": CoinLoreSource,
        "coinmarketcap": CoinMarketCapSource,
    }

    @classmethod
    def get_dataset_names(cls) -> List[str]:
        """Get list of all registered dataset names."""
        return list(cls._side_sources.keys())

    @classmethod
    def register(cls, dataset: str, source_class: Type[SideDataSource]) -> None:
        """
        Register a side-data source for a dataset.

        Args:
            dataset: ``MarketDatasets`` field name the source fills
            source_class: Source class to register
        """
        if dataset not in {f.name for f in fields(MarketDatasets)}:
            raise ValueError(f"Unknown dataset: {dataset}")
        cls._side_sources[dataset] = source_class

    @classmethod
    def create(
        cls,
        config: Config,
        limiters: RateLimiterRegistry,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> SourceSet:
        """
        Build the funding source and every side-data source.

        Args:
            config: Application configuration
            limiters: Process-wide rate limiters, one per provider
            session: Optional shared HTTP session (mainly for tests)

        Returns:
            SourceSet ready to fetch
        """
        fetchers: Dict[str, ResilientFetcher] = {}

        def fetcher_for(provider: str) -> ResilientFetcher:
            if provider not in fetchers:
                rl = config.rate_limit
                fetchers[provider] = ResilientFetcher(
                    name=provider,
                    limiter=limiters.get(provider),
                    base_delay=rl.base_delay,
                    max_retries=rl.max_retries,
                    timeout=rl.http_timeout,
                    session=session,
                )
            return fetchers[provider]

        funding = CoinGlassFundingSource(fetcher_for(CoinGlassFundingSource.provider), config)

        side = {
            dataset: source_class(fetcher_for(source_class.provider), config)
            for dataset, source_class in cls._side_sources.items()
        }

        return SourceSet(funding=funding, side=side, fetchers=fetchers)
