"""Shared fixtures for tests."""

from typing import Iterable, Optional, Tuple

import pytest

from funding_arb.config import (
    AggregatorConfig,
    ArbitrageConfig,
    Config,
    DEFAULT_MARKET_SHARES,
    ProviderConfig,
    RateLimitConfig,
)
from funding_arb.models import FundingQuote, FundingSymbol


def make_record(symbol: str, rates: Iterable[Tuple[str, Optional[float]]]) -> FundingSymbol:
    """FundingSymbol from (exchange, rate) pairs."""
    return FundingSymbol(
        symbol=symbol,
        quotes=[FundingQuote(exchange=name, rate=rate) for name, rate in rates],
    )


class FakeResponse:
    """Minimal stand-in for an aiohttp response context manager."""

    def __init__(self, status: int = 200, payload=None, reason: str = "OK"):
        self.status = status
        self.payload = payload
        self.reason = reason

    async def json(self, content_type=None):
        if isinstance(self.payload, Exception):
            raise self.payload
        return self.payload

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


class FakeSession:
    """Returns queued responses in order; the last one repeats."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []
        self.closed = False

    def get(self, url, headers=None, params=None):
        self.calls.append({"url": url, "headers": headers, "params": params})
        item = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(item, Exception):
            raise item
        return item

    async def close(self):
        self.closed = True


@pytest.fixture()
def arbitrage_config() -> ArbitrageConfig:
    return ArbitrageConfig(
        min_spread=0.0001,
        payments_per_day=3,
        market_shares=dict(DEFAULT_MARKET_SHARES),
        default_market_share=0.05,
        oi_volume_ratio=0.4,
        market_cap_volume_ratio=0.1,
        progress_every=50,
    )


@pytest.fixture()
def config(arbitrage_config: ArbitrageConfig) -> Config:
    """Live-mode configuration with fast pacing."""
    return Config(
        providers=ProviderConfig(
            coinglass_api_key="cg-test-key",
            coinmarketcap_api_key="",
            coinglass_base_url="https://coinglass.test",
            coingecko_base_url="https://coingecko.test",
            coinlore_base_url="https://coinlore.test",
            coinmarketcap_base_url="https://cmc.test",
        ),
        rate_limit=RateLimitConfig(
            calls_per_minute=30,
            window_seconds=60.0,
            target_per_minute=60_000,
            max_retries=3,
            http_timeout=5.0,
        ),
        aggregator=AggregatorConfig(
            timeout=5.0,
            active_symbols=["BTC", "ETH", "SOL"],
            active_symbols_limit=2,
            history_scale_factor=1_000_000,
            history_window_days=7,
        ),
        arbitrage=arbitrage_config,
    )


@pytest.fixture()
def demo_config(config: Config) -> Config:
    """Configuration without a CoinGlass credential."""
    config.providers.coinglass_api_key = ""
    return config
