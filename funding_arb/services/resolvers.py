"""
Priority cascades for the market metrics of an opportunity.

Each cascade is an ordered list of named resolvers. The first resolver
returning a value wins and its label becomes the provenance of the metric.
"""

from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Tuple

from funding_arb.config import ArbitrageConfig
from funding_arb.models import MarketDatasets, SideDataRecord
from funding_arb.models.funding_rate import (
    SOURCE_COINGECKO,
    SOURCE_COINGECKO_DERIVATIVES,
    SOURCE_COINGLASS,
    SOURCE_COINGLASS_MARKET,
    SOURCE_COINLORE,
    SOURCE_COINMARKETCAP,
    SOURCE_ESTIMATED,
    SOURCE_UNAVAILABLE,
)


# (more than N quoting exchanges, assumed 24h volume in USD), checked in order
VOLUME_TIERS: Tuple[Tuple[int, float], ...] = (
    (5, 50_000_000),
    (3, 25_000_000),
    (1, 10_000_000),
)
VOLUME_FLOOR = 5_000_000

_EMPTY = SideDataRecord()


@dataclass
class SymbolContext:
    """Everything the resolvers may look at for one symbol."""

    symbol: str
    exchange_count: int
    config: ArbitrageConfig
    coinmarketcap: SideDataRecord = field(default_factory=SideDataRecord)
    coinglass_market: SideDataRecord = field(default_factory=SideDataRecord)
    open_interest: SideDataRecord = field(default_factory=SideDataRecord)
    coingecko: SideDataRecord = field(default_factory=SideDataRecord)
    coinlore: SideDataRecord = field(default_factory=SideDataRecord)

    # Filled in as cascades resolve
    market_cap: Optional[float] = None
    volume_24h: Optional[float] = None

    @classmethod
    def build(
        cls,
        symbol: str,
        exchange_count: int,
        datasets: MarketDatasets,
        config: ArbitrageConfig,
    ) -> "SymbolContext":
        return cls(
            symbol=symbol,
            exchange_count=exchange_count,
            config=config,
            coinmarketcap=datasets.coinmarketcap.get(symbol, _EMPTY),
            coinglass_market=datasets.coinglass_market.get(symbol, _EMPTY),
            open_interest=datasets.open_interest.get(symbol, _EMPTY),
            coingecko=datasets.coingecko.get(symbol, _EMPTY),
            coinlore=datasets.coinlore.get(symbol, _EMPTY),
        )


@dataclass(frozen=True)
class Resolver:
    label: str
    resolve: Callable[[SymbolContext], Optional[float]] = field(repr=False)


def resolve_first(
    resolvers: Sequence[Resolver],
    ctx: SymbolContext,
    default_label: str = SOURCE_UNAVAILABLE,
) -> Tuple[Optional[float], str]:
    """Evaluate resolvers in order and return the first value with its label."""
    for resolver in resolvers:
        value = resolver.resolve(ctx)
        if value is not None:
            return value, resolver.label
    return None, default_label


def estimate_volume(ctx: SymbolContext) -> float:
    """Volume guess from market cap, or from how widely the symbol is listed."""
    if ctx.market_cap:
        return ctx.market_cap * ctx.config.market_cap_volume_ratio
    for min_exchanges, volume in VOLUME_TIERS:
        if ctx.exchange_count > min_exchanges:
            return volume
    return VOLUME_FLOOR


def estimate_open_interest(ctx: SymbolContext) -> Optional[float]:
    if ctx.volume_24h is None:
        return None
    return ctx.volume_24h * ctx.config.oi_volume_ratio


MARKET_CAP_RESOLVERS: List[Resolver] = [
    Resolver(SOURCE_COINGECKO, lambda c: c.coingecko.market_cap),
    Resolver(SOURCE_COINLORE, lambda c: c.coinlore.market_cap),
    Resolver(SOURCE_COINMARKETCAP, lambda c: c.coinmarketcap.market_cap),
]

PRICE_CHANGE_RESOLVERS: List[Resolver] = [
    Resolver(SOURCE_COINGECKO, lambda c: c.coingecko.price_change_percent_24h),
    Resolver(SOURCE_COINLORE, lambda c: c.coinlore.price_change_percent_24h),
    Resolver(SOURCE_COINMARKETCAP, lambda c: c.coinmarketcap.price_change_percent_24h),
]

CURRENT_PRICE_RESOLVERS: List[Resolver] = [
    Resolver(SOURCE_COINGECKO, lambda c: c.coingecko.current_price),
    Resolver(SOURCE_COINLORE, lambda c: c.coinlore.current_price),
    Resolver(SOURCE_COINMARKETCAP, lambda c: c.coinmarketcap.current_price),
]

VOLUME_RESOLVERS: List[Resolver] = [
    Resolver(SOURCE_COINMARKETCAP, lambda c: c.coinmarketcap.volume_24h),
    Resolver(SOURCE_COINGLASS_MARKET, lambda c: c.coinglass_market.volume_24h),
    Resolver(SOURCE_COINGECKO_DERIVATIVES, lambda c: c.coingecko.derivative_volume_24h),
    Resolver(SOURCE_COINGECKO, lambda c: c.coingecko.volume_24h),
    Resolver(SOURCE_COINLORE, lambda c: c.coinlore.volume_24h),
    Resolver(SOURCE_ESTIMATED, estimate_volume),
]

OPEN_INTEREST_RESOLVERS: List[Resolver] = [
    Resolver(SOURCE_COINGLASS_MARKET, lambda c: c.coinglass_market.open_interest_usd),
    Resolver(SOURCE_COINGLASS, lambda c: c.open_interest.open_interest_usd),
    Resolver(SOURCE_COINGECKO, lambda c: c.coingecko.open_interest_usd),
    Resolver(SOURCE_ESTIMATED, estimate_open_interest),
]
