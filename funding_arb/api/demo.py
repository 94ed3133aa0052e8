"""Fixed demonstration payload served when no CoinGlass credential is configured."""

from typing import List

from funding_arb.models import (
    ArbitrageOpportunity,
    DataSources,
    FundingQuote,
    RunStatistics,
    ScanResult,
)


MOCK_LABEL = "Mock Data"
MOCK_FUNDING_LABEL = "Mock Data (CoinGlass API Key Required)"

# symbol, (exchange, rate) quotes, volume, volume high/low, OI, OI high/low, cap, change, price
_DEMO_ROWS = [
    ("BRIC", [("MEXC", 0.0248), ("Gate", 0.0)],
     45_000_000, 27_000_000, 2_250_000, 12_000_000, 7_200_000, 600_000,
     150_000_000, 5.2, 0.85),
    ("FUN", [("Bitunix", 0.0160), ("Gate", 0.0), ("OKX", 0.0080)],
     28_000_000, 8_400_000, 1_400_000, 8_500_000, 2_550_000, 425_000,
     95_000_000, -2.1, 0.0045),
    ("AERGO", [("dYdX", 0.0117), ("Bitget", 0.0)],
     15_000_000, 1_200_000, 900_000, 4_200_000, 336_000, 252_000,
     78_000_000, 1.8, 0.12),
]

DEMO_TOTAL_SYMBOLS = 827


def _demo_opportunity(row) -> ArbitrageOpportunity:
    (symbol, rates, volume, volume_high, volume_low,
     oi, oi_high, oi_low, market_cap, price_change, price) = row

    quotes = sorted(
        (FundingQuote(exchange=name, rate=rate) for name, rate in rates),
        key=lambda q: q.rate,
    )
    low, high = quotes[0], quotes[-1]
    spread = high.rate - low.rate

    return ArbitrageOpportunity(
        symbol=symbol,
        exchange_high=high.exchange,
        rate_high=high.rate,
        exchange_low=low.exchange,
        rate_low=low.rate,
        spread=spread,
        annualized_return=spread * 3 * 365,
        direction=f"Long {low.exchange}, Short {high.exchange}",
        has_arbitrage=True,
        all_rates=quotes,
        volume_24h=volume,
        volume_high=volume_high,
        volume_low=volume_low,
        open_interest=oi,
        open_interest_high=oi_high,
        open_interest_low=oi_low,
        market_cap=market_cap,
        price_change_24h=price_change,
        current_price=price,
        data_sources=DataSources(
            volume=MOCK_LABEL,
            open_interest=MOCK_LABEL,
            funding_rates=MOCK_LABEL,
            market_cap=MOCK_LABEL,
            price_change=MOCK_LABEL,
            current_price=MOCK_LABEL,
        ),
    )


def build_demo_result(selected_exchanges: List[str]) -> ScanResult:
    """Demonstration scan result with the same shape as a live one."""
    opportunities = [_demo_opportunity(row) for row in _DEMO_ROWS]

    stats = RunStatistics(
        total_symbols=DEMO_TOTAL_SYMBOLS,
        processed_symbols=DEMO_TOTAL_SYMBOLS,
        real_opportunities=len(opportunities),
        selected_exchanges=len(selected_exchanges),
        data_sources={
            "fundingRates": MOCK_FUNDING_LABEL,
            "volume": MOCK_LABEL,
            "openInterest": MOCK_LABEL,
            "marketData": MOCK_LABEL,
        },
    )
    return ScanResult(opportunities=opportunities, stats=stats)
