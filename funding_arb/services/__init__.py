"""Services for funding rate arbitrage analysis."""

from .aggregator import MarketDataAggregator
from .symbol_processor import SymbolProcessor
from .ranker import OpportunityRanker
from .pipeline import ArbitragePipeline, NoFundingDataError

__all__ = [
    "MarketDataAggregator",
    "SymbolProcessor",
    "OpportunityRanker",
    "ArbitragePipeline",
    "NoFundingDataError",
]
