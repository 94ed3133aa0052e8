"""CoinLore public API source, used as backup market data."""

from funding_arb.models import SideDataRecord, SourceDataset
from .base import SideDataSource, normalize_symbol, parse_amount, parse_float


class CoinLoreSource(SideDataSource):
    """
    CoinLore tickers.

    Endpoints used:
    - GET /tickers/?limit=100 - Top coins with volume, market cap and price
    """

    name = "coinlore"
    display_name = "CoinLore"
    provider = "coinlore"

    async def _fetch(self) -> SourceDataset:
        result = await self.fetcher.fetch(
            f"{self.config.providers.coinlore_base_url}/tickers/",
            params={"limit": 100},
        )
        if not result.success or not isinstance(result.data, dict):
            self._logger.warning(f"{self.display_name}: tickers unavailable - {result.error}")
            return {}

        dataset: SourceDataset = {}
        for coin in result.data.get("data") or []:
            symbol = normalize_symbol(coin.get("symbol"))
            if symbol is None or symbol in dataset:
                continue
            dataset[symbol] = SideDataRecord(
                volume_24h=parse_amount(coin.get("volume24")),
                market_cap=parse_amount(coin.get("market_cap_usd")),
                price_change_percent_24h=parse_float(coin.get("percent_change_24h")),
                current_price=parse_amount(coin.get("price_usd")),
            )

        self._logger.info(
            f"[bold green]{self.display_name}[/]: Fetched market data for {len(dataset)} symbols"
        )
        return dataset
