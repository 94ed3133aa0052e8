"""
CoinGecko public API source.

API Docs: https://docs.coingecko.com/

Endpoints used:
- GET /coins/markets - Spot market data (volume, market cap, price) for the top coins
- GET /derivatives - Derivatives tickers with volume and open interest
"""

import asyncio
from typing import Any, Dict, List

from funding_arb.models import SideDataRecord, SourceDataset
from .base import SideDataSource, normalize_symbol, parse_amount, parse_float


class CoinGeckoDerivativesSource(SideDataSource):
    """General market data merged with derivatives volume and open interest."""

    name = "coingecko"
    display_name = "CoinGecko"
    provider = "coingecko"

    @property
    def base_url(self) -> str:
        return self.config.providers.coingecko_base_url

    async def _fetch(self) -> SourceDataset:
        markets_result, derivatives_result = await asyncio.gather(
            self.fetcher.fetch(
                f"{self.base_url}/coins/markets",
                params={
                    "vs_currency": "usd",
                    "order": "market_cap_desc",
                    "per_page": 250,
                    "page": 1,
                    "sparkline": "false",
                    "price_change_percentage": "24h",
                },
            ),
            self.fetcher.fetch(
                f"{self.base_url}/derivatives",
                params={"include_tickers": "unexpired"},
            ),
        )

        dataset: SourceDataset = {}

        if markets_result.success and isinstance(markets_result.data, list):
            self._merge_markets(dataset, markets_result.data)
        else:
            self._logger.warning(f"{self.display_name}: markets unavailable - {markets_result.error}")

        if derivatives_result.success and isinstance(derivatives_result.data, list):
            self._merge_derivatives(dataset, derivatives_result.data)
        else:
            self._logger.warning(
                f"{self.display_name}: derivatives unavailable - {derivatives_result.error}"
            )

        self._logger.info(
            f"[bold green]{self.display_name}[/]: Fetched market data for {len(dataset)} symbols"
        )
        return dataset

    @staticmethod
    def _merge_markets(dataset: SourceDataset, coins: List[Dict[str, Any]]) -> None:
        # Results are ordered by market cap, so the first coin wins on ticker clashes
        for coin in coins:
            symbol = normalize_symbol(coin.get("symbol"))
            if symbol is None or symbol in dataset:
                continue
            dataset[symbol] = SideDataRecord(
                volume_24h=parse_amount(coin.get("total_volume")),
                market_cap=parse_amount(coin.get("market_cap")),
                price_change_percent_24h=parse_float(coin.get("price_change_percentage_24h")),
                current_price=parse_amount(coin.get("current_price")),
            )

    @staticmethod
    def _merge_derivatives(dataset: SourceDataset, tickers: List[Dict[str, Any]]) -> None:
        """Sum derivatives volume and open interest over every market listing the coin."""
        volumes: Dict[str, float] = {}
        open_interest: Dict[str, float] = {}

        for ticker in tickers:
            symbol = normalize_symbol(ticker.get("index_id") or ticker.get("base"))
            if symbol is None:
                continue

            converted = ticker.get("converted_volume") or {}
            volume = parse_amount(ticker.get("volume_24h")) or parse_amount(converted.get("usd"))
            if volume:
                volumes[symbol] = volumes.get(symbol, 0.0) + volume

            oi = parse_amount(ticker.get("open_interest")) or parse_amount(ticker.get("open_interest_usd"))
            if oi:
                open_interest[symbol] = open_interest.get(symbol, 0.0) + oi

        for symbol in set(volumes) | set(open_interest):
            record = dataset.setdefault(symbol, SideDataRecord())
            record.derivative_volume_24h = volumes.get(symbol)
            record.open_interest_usd = open_interest.get(symbol)
