"""Upstream market-data sources."""

from .base import BaseSource, SideDataSource
from .coinglass import (
    CoinGlassFundingSource,
    CoinGlassOpenInterestSource,
    CoinGlassHistorySource,
    CoinGlassMarketSource,
)
from .coingecko import CoinGeckoDerivativesSource
from .coinlore import CoinLoreSource
from .coinmarketcap import CoinMarketCapSource
from .registry import SourceRegistry, SourceSet

__all__ = [
    "BaseSource",
    "SideDataSource",
    "CoinGlassFundingSource",
    "CoinGlassOpenInterestSource",
    "CoinGlassHistorySource",
    "CoinGlassMarketSource",
    "CoinGeckoDerivativesSource",
    "CoinLoreSource",
    "CoinMarketCapSource",
    "SourceRegistry",
    "SourceSet",
]
