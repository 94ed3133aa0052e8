"""Models for funding rate data and arbitrage opportunities."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional


# Provenance labels
SOURCE_COINGLASS = "CoinGlass"
SOURCE_COINGLASS_MARKET = "CoinGlass-Market"
SOURCE_COINGECKO = "CoinGecko"
SOURCE_COINGECKO_DERIVATIVES = "CoinGecko-Derivatives"
SOURCE_COINLORE = "CoinLore"
SOURCE_COINMARKETCAP = "CoinMarketCap"
SOURCE_ESTIMATED = "Estimated"
SOURCE_UNAVAILABLE = "Unavailable"


def _iso(dt: Optional[datetime]) -> Optional[str]:
    return dt.isoformat() + "Z" if dt is not None else None


@dataclass(frozen=True)
class FundingQuote:
    """Funding rate quoted by one exchange for one symbol."""

    exchange: str
    rate: Optional[float]  # Rate as decimal per settlement; None when the exchange has no quote
    interval_hours: int = 8
    next_funding_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "exchange": self.exchange,
            "rate": self.rate,
            "intervalHours": self.interval_hours,
            "nextFundingAt": _iso(self.next_funding_at),
        }


@dataclass
class FundingSymbol:
    """All funding quotes for a symbol, as returned by the funding-rate provider."""

    symbol: str
    quotes: List[FundingQuote] = field(default_factory=list)


@dataclass
class SideDataRecord:
    """
    Auxiliary market data for one symbol from one provider.

    Providers populate different subsets of fields. Missing values are None,
    never zero.
    """

    volume_24h: Optional[float] = None
    derivative_volume_24h: Optional[float] = None
    open_interest_usd: Optional[float] = None
    open_interest_high: Optional[float] = None
    open_interest_low: Optional[float] = None
    open_interest_quantity: Optional[float] = None
    open_interest_change_24h: Optional[float] = None
    market_cap: Optional[float] = None
    price_change_percent_24h: Optional[float] = None
    current_price: Optional[float] = None
    exchange_count: Optional[int] = None
    rank: Optional[int] = None


# Upper-case ticker (or exchange name for exchange-level history) -> record
SourceDataset = Dict[str, SideDataRecord]


@dataclass
class MarketDatasets:
    """Side data collected from every auxiliary provider during one request."""

    open_interest: SourceDataset = field(default_factory=dict)      # CoinGlass OI exchange-list
    history: SourceDataset = field(default_factory=dict)            # CoinGlass history, keyed by exchange
    coinglass_market: SourceDataset = field(default_factory=dict)   # CoinGlass coins-markets
    coingecko: SourceDataset = field(default_factory=dict)
    coinlore: SourceDataset = field(default_factory=dict)
    coinmarketcap: SourceDataset = field(default_factory=dict)

    def counts(self) -> Dict[str, int]:
        """Number of records per dataset."""
        return {
            "openInterest": len(self.open_interest),
            "history": len(self.history),
            "coinglassMarket": len(self.coinglass_market),
            "coingecko": len(self.coingecko),
            "coinlore": len(self.coinlore),
            "coinmarketcap": len(self.coinmarketcap),
        }


@dataclass
class DataSources:
    """Provenance labels for the derived metrics of one opportunity."""

    volume: str
    open_interest: str
    funding_rates: str = SOURCE_COINGLASS
    market_cap: str = SOURCE_UNAVAILABLE
    price_change: str = SOURCE_UNAVAILABLE
    current_price: str = SOURCE_UNAVAILABLE

    def to_dict(self) -> Dict[str, str]:
        return {
            "volume": self.volume,
            "openInterest": self.open_interest,
            "fundingRates": self.funding_rates,
            "marketCap": self.market_cap,
            "priceChange": self.price_change,
            "currentPrice": self.current_price,
        }


@dataclass
class ArbitrageOpportunity:
    """
    Funding rate arbitrage opportunity for one symbol.

    Strategy: Long on the exchange with the lowest funding rate,
              Short on the exchange with the highest funding rate,
              collecting the spread every settlement while price-neutral.

    Volume and open interest splits per exchange are approximations derived
    from market-share estimates unless a provider reported them.
    """

    symbol: str

    exchange_high: str
    rate_high: float
    exchange_low: str
    rate_low: float

    spread: float
    annualized_return: float
    direction: str
    has_arbitrage: bool

    all_rates: List[FundingQuote]

    volume_24h: float
    volume_high: float
    volume_low: float
    open_interest: float
    open_interest_high: float
    open_interest_low: float
    market_cap: Optional[float]
    price_change_24h: Optional[float]
    current_price: Optional[float]

    data_sources: DataSources
    timestamp: datetime = field(default_factory=datetime.utcnow)

    @property
    def available_exchanges(self) -> int:
        return len(self.all_rates)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "symbol": self.symbol,
            "timestamp": _iso(self.timestamp),
            "exchangeHigh": self.exchange_high,
            "exchangeLow": self.exchange_low,
            "rateHigh": self.rate_high,
            "rateLow": self.rate_low,
            "spread": self.spread,
            "annualizedReturn": self.annualized_return,
            "direction": self.direction,
            "hasArbitrage": self.has_arbitrage,
            "availableExchanges": self.available_exchanges,
            "allRates": [q.to_dict() for q in self.all_rates],
            "volume24h": self.volume_24h,
            "volumeHigh": self.volume_high,
            "volumeLow": self.volume_low,
            "openInterest": self.open_interest,
            "openInterestHigh": self.open_interest_high,
            "openInterestLow": self.open_interest_low,
            "marketCap": self.market_cap,
            "priceChange24h": self.price_change_24h,
            "currentPrice": self.current_price,
            "dataSources": self.data_sources.to_dict(),
        }

    def __repr__(self) -> str:
        return (
            f"ArbitrageOpportunity({self.symbol}: "
            f"Long {self.exchange_low} {self.rate_low:+.6f}, "
            f"Short {self.exchange_high} {self.rate_high:+.6f}, "
            f"Spread={self.spread:.6f})"
        )


@dataclass
class RunStatistics:
    """Aggregate counts for one scan."""

    total_symbols: int
    processed_symbols: int
    real_opportunities: int
    selected_exchanges: int
    data_sources: Dict[str, str]
    source_counts: Dict[str, int] = field(default_factory=dict)
    last_updated: datetime = field(default_factory=datetime.utcnow)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalSymbols": self.total_symbols,
            "processedSymbols": self.processed_symbols,
            "realOpportunities": self.real_opportunities,
            "selectedExchanges": self.selected_exchanges,
            "lastUpdated": _iso(self.last_updated),
            "dataSources": dict(self.data_sources),
            "sourceCounts": dict(self.source_counts),
        }


@dataclass
class ScanResult:
    """Ranked opportunities plus the statistics of the scan that produced them."""

    opportunities: List[ArbitrageOpportunity]
    stats: RunStatistics

    def to_dict(self, limit: Optional[int] = None) -> Dict[str, Any]:
        opportunities = self.opportunities if limit is None else self.opportunities[:limit]
        return {
            "opportunities": [o.to_dict() for o in opportunities],
            "stats": self.stats.to_dict(),
        }
