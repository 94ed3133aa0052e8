"""
CoinGlass v4 API sources.

API Docs: https://docs.coinglass.com/

Endpoints used:
- GET /api/futures/funding-rate/exchange-list - Funding rates per exchange for every symbol
- GET /api/futures/open-interest/exchange-list - Open interest per exchange for one symbol
- GET /api/futures/open-interest/history - Daily open interest series per exchange
- GET /api/futures/volume/history - Daily volume series per exchange
- GET /api/futures/coins-markets - Futures market overview per coin
"""

import time
from typing import Any, Dict, List, Optional

from funding_arb.models import FundingQuote, FundingSymbol, SideDataRecord, SourceDataset
from .base import (
    BaseSource,
    SideDataSource,
    normalize_symbol,
    parse_amount,
    parse_float,
    parse_timestamp,
)


DAY_MS = 24 * 60 * 60 * 1000


class CoinGlassMixin:
    """Shared CoinGlass request helpers."""

    provider = "coinglass"

    @property
    def is_available(self) -> bool:
        return self.config.providers.has_coinglass

    @property
    def base_url(self) -> str:
        return self.config.providers.coinglass_base_url

    def _headers(self) -> Dict[str, str]:
        return {"CG-API-KEY": self.config.providers.coinglass_api_key}

    async def _get_data(self, path: str, params: Optional[Dict[str, Any]] = None) -> Optional[Any]:
        """GET a CoinGlass endpoint and return its ``data`` payload, or None."""
        result = await self.fetcher.fetch(
            f"{self.base_url}{path}",
            headers=self._headers(),
            params=params,
        )
        if not result.success:
            self._logger.warning(f"{self.display_name}: {path} failed - {result.error}")
            return None

        body = result.data
        if not isinstance(body, dict) or str(body.get("code")) != "0":
            msg = body.get("msg") if isinstance(body, dict) else "unexpected payload"
            self._logger.warning(f"{self.display_name}: {path} returned error - {msg}")
            return None

        return body.get("data")


class CoinGlassFundingSource(CoinGlassMixin, BaseSource):
    """Funding rates for every symbol across all listing exchanges."""

    name = "coinglass_funding"
    display_name = "CoinGlass Funding"

    def empty(self) -> List[FundingSymbol]:
        return []

    async def fetch(self) -> List[FundingSymbol]:
        return await super().fetch()

    async def _fetch(self) -> List[FundingSymbol]:
        data = await self._get_data("/api/futures/funding-rate/exchange-list")
        if not data:
            return []

        records = []
        for item in data:
            try:
                record = self._parse_symbol(item)
            except (TypeError, ValueError, AttributeError) as e:
                self._logger.debug(f"Skipping malformed funding entry: {e}")
                continue
            if record is not None:
                records.append(record)

        self._logger.info(
            f"[bold green]{self.display_name}[/]: Fetched funding rates for {len(records)} symbols"
        )
        return records

    def _parse_symbol(self, item: Dict[str, Any]) -> Optional[FundingSymbol]:
        symbol = normalize_symbol(item.get("symbol"))
        if symbol is None:
            return None

        quotes = []
        for entry in item.get("stablecoin_margin_list") or []:
            exchange = entry.get("exchange")
            if not exchange:
                continue
            quotes.append(FundingQuote(
                exchange=exchange,
                rate=parse_float(entry.get("funding_rate")),
                interval_hours=self._parse_interval(entry.get("funding_rate_interval")),
                next_funding_at=parse_timestamp(entry.get("next_funding_time")),
            ))

        return FundingSymbol(symbol=symbol, quotes=quotes)

    @staticmethod
    def _parse_interval(value: Any) -> int:
        """Settlement interval in whole hours, 8 when missing or below one hour."""
        hours = parse_float(value)
        if hours is None or hours < 1:
            return 8
        return int(hours)


class CoinGlassOpenInterestSource(CoinGlassMixin, SideDataSource):
    """Per-exchange open interest for the most active symbols."""

    name = "coinglass_open_interest"
    display_name = "CoinGlass Open Interest"

    async def _fetch(self) -> SourceDataset:
        agg = self.config.aggregator
        symbols = agg.active_symbols[:agg.active_symbols_limit]
        dataset: SourceDataset = {}

        for raw in symbols:
            symbol = normalize_symbol(raw)
            if symbol is None:
                continue
            rows = await self._get_data(
                "/api/futures/open-interest/exchange-list",
                params={"symbol": symbol},
            )
            if not rows:
                continue
            try:
                record = self._parse_rows(rows)
            except (TypeError, ValueError, AttributeError) as e:
                self._logger.debug(f"Failed to parse open interest for {symbol}: {e}")
                continue
            if record is not None:
                dataset[symbol] = record

        self._logger.info(
            f"[bold green]{self.display_name}[/]: Fetched open interest for {len(dataset)} symbols"
        )
        return dataset

    @staticmethod
    def _parse_rows(rows: List[Dict[str, Any]]) -> Optional[SideDataRecord]:
        """Split the aggregate "All" row from per-exchange rows."""
        total = next((r for r in rows if r.get("exchange") == "All"), None)
        if total is None:
            return None

        per_exchange = [r for r in rows if r.get("exchange") != "All"]
        values = [
            v for v in (parse_amount(r.get("open_interest_usd")) for r in per_exchange)
            if v is not None and v > 0
        ]

        return SideDataRecord(
            open_interest_usd=parse_amount(total.get("open_interest_usd")),
            open_interest_high=max(values) if values else None,
            open_interest_low=min(values) if values else None,
            open_interest_quantity=parse_amount(total.get("open_interest_quantity")),
            open_interest_change_24h=parse_float(total.get("open_interest_change_percent_24h")),
            exchange_count=len(per_exchange),
        )


class CoinGlassHistorySource(CoinGlassMixin, SideDataSource):
    """
    Latest daily open interest and volume per exchange.

    The dataset is keyed by exchange name, not by symbol.
    """

    name = "coinglass_history"
    display_name = "CoinGlass History"

    async def _fetch(self) -> SourceDataset:
        agg = self.config.aggregator
        end_time = int(time.time() * 1000) - DAY_MS
        start_time = end_time - agg.history_window_days * DAY_MS
        params = {"interval": "1d", "start_time": start_time, "end_time": end_time}

        dataset: SourceDataset = {}

        oi_points = await self._get_data("/api/futures/open-interest/history", params=params)
        for exchange, value in self._latest_by_exchange(oi_points).items():
            dataset.setdefault(exchange, SideDataRecord()).open_interest_usd = (
                value * agg.history_scale_factor
            )

        volume_points = await self._get_data("/api/futures/volume/history", params=params)
        for exchange, value in self._latest_by_exchange(volume_points).items():
            dataset.setdefault(exchange, SideDataRecord()).volume_24h = (
                value * agg.history_scale_factor
            )

        self._logger.info(
            f"[bold green]{self.display_name}[/]: Processed history for {len(dataset)} exchanges"
        )
        return dataset

    @staticmethod
    def _latest_by_exchange(points: Any) -> Dict[str, float]:
        """Most recent value per exchange from the last point of a series."""
        if not points or not isinstance(points, list):
            return {}

        data_map = points[-1].get("data_map") if isinstance(points[-1], dict) else None
        if not isinstance(data_map, dict):
            return {}

        latest = {}
        for exchange, values in data_map.items():
            if isinstance(values, list) and values:
                value = parse_amount(values[-1])
                if value is not None:
                    latest[exchange] = value
        return latest


class CoinGlassMarketSource(CoinGlassMixin, SideDataSource):
    """Futures market overview (volume, open interest, price) per coin."""

    name = "coinglass_market"
    display_name = "CoinGlass Market"

    async def _fetch(self) -> SourceDataset:
        data = await self._get_data("/api/futures/coins-markets")
        dataset: SourceDataset = {}

        for coin in data or []:
            symbol = normalize_symbol(coin.get("symbol"))
            if symbol is None or symbol in dataset:
                continue
            dataset[symbol] = SideDataRecord(
                volume_24h=parse_amount(coin.get("volume_usd_24h") or coin.get("volume_24h")),
                open_interest_usd=parse_amount(coin.get("open_interest_usd")),
                current_price=parse_amount(coin.get("price") or coin.get("current_price")),
                price_change_percent_24h=parse_float(coin.get("price_change_percent_24h")),
            )

        self._logger.info(
            f"[bold green]{self.display_name}[/]: Fetched market data for {len(dataset)} symbols"
        )
        return dataset
