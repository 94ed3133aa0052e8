"""Data models for funding rate arbitrage."""

from .funding_rate import (
    FundingQuote,
    FundingSymbol,
    SideDataRecord,
    SourceDataset,
    MarketDatasets,
    DataSources,
    ArbitrageOpportunity,
    RunStatistics,
    ScanResult,
)

__all__ = [
    "FundingQuote",
    "FundingSymbol",
    "SideDataRecord",
    "SourceDataset",
    "MarketDatasets",
    "DataSources",
    "ArbitrageOpportunity",
    "RunStatistics",
    "ScanResult",
]
