"""Tests for funding_arb/services/symbol_processor.py"""

import pytest

from funding_arb.models import FundingSymbol, MarketDatasets, SideDataRecord
from funding_arb.services import SymbolProcessor
from conftest import make_record


SELECTED = ["OKX", "Bybit", "Gate", "Kraken", "MEXC"]


@pytest.fixture()
def processor(arbitrage_config):
    return SymbolProcessor(arbitrage_config)


class TestLegSelection:
    def test_lowest_is_long_highest_is_short(self, processor):
        record = make_record("BTC", [("OKX", 0.0001), ("Bybit", -0.0002), ("Gate", 0.0003)])

        opp = processor.process(record, SELECTED, MarketDatasets())

        assert opp.exchange_low == "Bybit"
        assert opp.rate_low == -0.0002
        assert opp.exchange_high == "Gate"
        assert opp.rate_high == 0.0003
        assert opp.spread == pytest.approx(0.0005)
        assert opp.direction == "Long Bybit, Short Gate"
        assert opp.annualized_return == pytest.approx(0.0005 * 3 * 365)
        assert opp.has_arbitrage

    def test_three_exchange_spread_and_annualized_return(self, processor):
        record = make_record("BTC", [("OKX", 0.001), ("Bybit", 0.015), ("Gate", -0.002)])

        opp = processor.process(record, SELECTED, MarketDatasets())

        assert opp.exchange_low == "Gate"
        assert opp.exchange_high == "Bybit"
        assert opp.spread == pytest.approx(0.017)
        assert opp.annualized_return == pytest.approx(18.615)
        assert opp.direction == "Long Gate, Short Bybit"

    def test_unselected_exchanges_ignored(self, processor):
        record = make_record("ETH", [("OKX", 0.0001), ("Binance", 0.01), ("Bybit", -0.0001)])

        opp = processor.process(record, ["OKX", "Bybit"], MarketDatasets())

        assert opp.spread == pytest.approx(0.0002)
        assert {q.exchange for q in opp.all_rates} == {"OKX", "Bybit"}
        assert opp.available_exchanges == 2

    def test_quotes_without_rate_ignored(self, processor):
        record = make_record("SOL", [("OKX", None), ("Bybit", 0.001)])
        assert processor.process(record, SELECTED, MarketDatasets()) is None

    def test_needs_two_exchanges(self, processor):
        record = make_record("SOL", [("OKX", 0.001), ("Binance", -0.001)])
        assert processor.process(record, ["OKX"], MarketDatasets()) is None

    def test_all_rates_sorted_ascending(self, processor):
        record = make_record("BTC", [("OKX", 0.0004), ("Gate", -0.0001), ("Bybit", 0.0002)])

        opp = processor.process(record, SELECTED, MarketDatasets())

        assert [q.exchange for q in opp.all_rates] == ["Gate", "Bybit", "OKX"]
        rates = [q.rate for q in opp.all_rates]
        assert opp.rate_low == rates[0]
        assert opp.rate_high == rates[-1]

    def test_equal_rates_keep_provider_order(self, processor):
        record = make_record("BTC", [("OKX", 0.001), ("Bybit", 0.001), ("Gate", 0.0)])

        opp = processor.process(record, SELECTED, MarketDatasets())

        assert [q.exchange for q in opp.all_rates] == ["Gate", "OKX", "Bybit"]
        assert opp.exchange_high == "Bybit"


class TestSpreadThreshold:
    def test_below_threshold_dropped(self, processor):
        record = make_record("BTC", [("OKX", 0.00010), ("Bybit", 0.00015)])
        assert processor.process(record, SELECTED, MarketDatasets()) is None

    def test_exactly_threshold_is_not_arbitrage(self, processor):
        record = make_record("BTC", [("OKX", 0.0), ("Bybit", 0.0001)])

        opp = processor.process(record, SELECTED, MarketDatasets())

        assert opp is not None
        assert opp.spread == 0.0001
        assert not opp.has_arbitrage


class TestMarketData:
    def test_estimates_when_no_side_data(self, processor):
        record = make_record("NEW", [("OKX", 0.002), ("Bybit", 0.0)])

        opp = processor.process(record, SELECTED, MarketDatasets())

        # Two quoting exchanges -> 10M tier
        assert opp.volume_24h == 10_000_000
        assert opp.volume_high == 2_500_000   # OKX 25%
        assert opp.volume_low == 2_000_000    # Bybit 20%
        assert opp.open_interest == 4_000_000
        assert opp.open_interest_high == 1_000_000
        assert opp.open_interest_low == 800_000
        assert opp.market_cap is None
        assert opp.data_sources.volume == "Estimated"
        assert opp.data_sources.open_interest == "Estimated"
        assert opp.data_sources.market_cap == "Unavailable"
        assert opp.data_sources.funding_rates == "CoinGlass"

    def test_volume_tiers_follow_exchange_count(self, processor):
        six = make_record("X", [(name, i * 0.001) for i, name in
                                enumerate(["OKX", "Bybit", "Gate", "Kraken", "MEXC", "HTX"])])
        opp = processor.process(six, SELECTED + ["HTX"], MarketDatasets())
        assert opp.volume_24h == 50_000_000

        four = make_record("Y", [(name, i * 0.001) for i, name in
                                 enumerate(["OKX", "Bybit", "Gate", "Kraken"])])
        opp = processor.process(four, SELECTED, MarketDatasets())
        assert opp.volume_24h == 25_000_000

    def test_estimate_uses_market_cap(self, processor):
        datasets = MarketDatasets(coinlore={"ABC": SideDataRecord(market_cap=2e9)})
        record = make_record("ABC", [("OKX", 0.002), ("Bybit", 0.0)])

        opp = processor.process(record, SELECTED, datasets)

        assert opp.market_cap == 2e9
        assert opp.data_sources.market_cap == "CoinLore"
        assert opp.volume_24h == pytest.approx(2e8)
        assert opp.data_sources.volume == "Estimated"

    def test_volume_priority(self, processor):
        datasets = MarketDatasets(
            coinmarketcap={"BTC": SideDataRecord(volume_24h=3e10)},
            coinglass_market={"BTC": SideDataRecord(volume_24h=6e10)},
            coingecko={"BTC": SideDataRecord(volume_24h=2e10, derivative_volume_24h=8e10)},
        )
        record = make_record("BTC", [("OKX", 0.002), ("Bybit", 0.0)])

        opp = processor.process(record, SELECTED, datasets)
        assert opp.volume_24h == 3e10
        assert opp.data_sources.volume == "CoinMarketCap"

        datasets.coinmarketcap = {}
        opp = processor.process(record, SELECTED, datasets)
        assert opp.data_sources.volume == "CoinGlass-Market"

        datasets.coinglass_market = {}
        opp = processor.process(record, SELECTED, datasets)
        assert opp.volume_24h == 8e10
        assert opp.data_sources.volume == "CoinGecko-Derivatives"

    def test_market_data_prefers_coingecko(self, processor):
        datasets = MarketDatasets(
            coingecko={"ETH": SideDataRecord(market_cap=4e11, current_price=3000.0)},
            coinlore={"ETH": SideDataRecord(market_cap=1.0, price_change_percent_24h=-2.0)},
        )
        record = make_record("ETH", [("OKX", 0.002), ("Bybit", 0.0)])

        opp = processor.process(record, SELECTED, datasets)

        assert opp.market_cap == 4e11
        assert opp.data_sources.market_cap == "CoinGecko"
        assert opp.current_price == 3000.0
        assert opp.price_change_24h == -2.0
        assert opp.data_sources.price_change == "CoinLore"

    def test_provider_reported_open_interest_split(self, processor):
        datasets = MarketDatasets(open_interest={
            "BTC": SideDataRecord(
                open_interest_usd=5e10, open_interest_high=9e9, open_interest_low=7e9,
            ),
        })
        record = make_record("BTC", [("OKX", 0.002), ("Bybit", 0.0)])

        opp = processor.process(record, SELECTED, datasets)

        assert opp.open_interest == 5e10
        assert opp.open_interest_high == 9e9
        assert opp.open_interest_low == 7e9
        assert opp.data_sources.open_interest == "CoinGlass"

    def test_unknown_exchange_uses_default_share(self, processor):
        record = make_record("ZZZ", [("Vertex", 0.002), ("OKX", 0.0)])

        opp = processor.process(record, ["Vertex", "OKX"], MarketDatasets())

        assert opp.volume_high == 500_000   # 5% default
        assert opp.volume_low == 2_500_000


class TestFailures:
    def test_processing_error_returns_none(self, processor):
        record = make_record("BTC", [("OKX", 0.002), ("Bybit", 0.0)])
        assert processor.process(record, SELECTED, None) is None

    def test_process_all_keeps_order_and_counts(self, processor):
        records = [
            make_record("AAA", [("OKX", 0.001), ("Bybit", 0.0)]),
            FundingSymbol(symbol="BAD", quotes=None),
            make_record("BBB", [("OKX", 0.0)]),
            make_record("CCC", [("OKX", 0.003), ("Bybit", 0.0)]),
        ]

        opportunities, processed = processor.process_all(records, SELECTED, MarketDatasets())

        assert [o.symbol for o in opportunities] == ["AAA", "CCC"]
        assert processed == 3
