"""CoinMarketCap Pro API source (premium volume and market cap data)."""

from funding_arb.models import SideDataRecord, SourceDataset
from .base import SideDataSource, normalize_symbol, parse_amount, parse_float


class CoinMarketCapSource(SideDataSource):
    """
    CoinMarketCap latest listings.

    API Docs: https://coinmarketcap.com/api/documentation/v1/

    Endpoints used:
    - GET /cryptocurrency/listings/latest - Top coins by rank with USD quotes
    """

    name = "coinmarketcap"
    display_name = "CoinMarketCap"
    provider = "coinmarketcap"

    @property
    def is_available(self) -> bool:
        return self.config.providers.has_coinmarketcap

    async def _fetch(self) -> SourceDataset:
        providers = self.config.providers
        result = await self.fetcher.fetch(
            f"{providers.coinmarketcap_base_url}/cryptocurrency/listings/latest",
            headers={"X-CMC_PRO_API_KEY": providers.coinmarketcap_api_key},
            params={"limit": 500, "convert": "USD"},
        )
        if not result.success or not isinstance(result.data, dict):
            self._logger.warning(f"{self.display_name}: listings unavailable - {result.error}")
            return {}

        dataset: SourceDataset = {}
        for coin in result.data.get("data") or []:
            symbol = normalize_symbol(coin.get("symbol"))
            quote = (coin.get("quote") or {}).get("USD")
            if symbol is None or not quote or symbol in dataset:
                continue
            dataset[symbol] = SideDataRecord(
                volume_24h=parse_amount(quote.get("volume_24h")),
                market_cap=parse_amount(quote.get("market_cap")),
                price_change_percent_24h=parse_float(quote.get("percent_change_24h")),
                current_price=parse_amount(quote.get("price")),
                rank=coin.get("cmc_rank"),
            )

        self._logger.info(
            f"[bold green]{self.display_name}[/]: Fetched market data for {len(dataset)} symbols"
        )
        return dataset
