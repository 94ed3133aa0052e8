"""
Symbol Processor

Turns the funding quotes of one symbol plus the fused side data into an
arbitrage opportunity.
"""

import logging
from typing import Iterable, List, Optional, Sequence, Tuple

from funding_arb.config import ArbitrageConfig
from funding_arb.models import (
    ArbitrageOpportunity,
    DataSources,
    FundingSymbol,
    MarketDatasets,
)
from funding_arb.models.funding_rate import SOURCE_COINGLASS
from .resolvers import (
    CURRENT_PRICE_RESOLVERS,
    MARKET_CAP_RESOLVERS,
    OPEN_INTEREST_RESOLVERS,
    PRICE_CHANGE_RESOLVERS,
    VOLUME_RESOLVERS,
    SymbolContext,
    resolve_first,
)

logger = logging.getLogger(__name__)


class SymbolProcessor:
    """
    Finds the widest funding spread for a symbol across selected exchanges.

    Strategy:
    - Keep quotes from selected exchanges that have a rate
    - Lowest rate is the long leg, highest rate is the short leg
    - Resolve volume, open interest and market data through priority cascades
    - Split aggregate volume/open interest across the two legs by market share
    """

    def __init__(self, config: Optional[ArbitrageConfig] = None):
        self.config = config or ArbitrageConfig()

    def process(
        self,
        record: FundingSymbol,
        selected_exchanges: Iterable[str],
        datasets: MarketDatasets,
    ) -> Optional[ArbitrageOpportunity]:
        """
        Build the opportunity for one symbol.

        Returns None when fewer than two selected exchanges quote the symbol,
        when the spread is below the noise threshold, or when processing fails.
        """
        try:
            return self._process(record, frozenset(selected_exchanges), datasets)
        except Exception as e:
            logger.error(f"Error processing symbol {getattr(record, 'symbol', '?')}: {e}")
            return None

    def process_all(
        self,
        records: Sequence[FundingSymbol],
        selected_exchanges: Iterable[str],
        datasets: MarketDatasets,
    ) -> Tuple[List[ArbitrageOpportunity], int]:
        """
        Process every symbol in order.

        Returns:
            Opportunities in discovery order and the number of symbols
            processed without error
        """
        selected = frozenset(selected_exchanges)
        logger.info(
            f"Processing funding rate data for {len(records)} symbols "
            f"across {len(selected)} selected exchanges"
        )

        opportunities: List[ArbitrageOpportunity] = []
        processed = 0

        for index, record in enumerate(records, start=1):
            try:
                opportunity = self._process(record, selected, datasets)
                processed += 1
            except Exception as e:
                logger.error(f"Error processing symbol {getattr(record, 'symbol', '?')}: {e}")
                opportunity = None

            if opportunity is not None:
                opportunities.append(opportunity)
                logger.debug(
                    f"Found arbitrage for {opportunity.symbol}: {opportunity.spread * 100:.4f}% "
                    f"between {opportunity.exchange_low} and {opportunity.exchange_high}"
                )

            if self.config.progress_every and index % self.config.progress_every == 0:
                logger.info(
                    f"[dim]Processed {index}/{len(records)} symbols, "
                    f"found {len(opportunities)} opportunities[/]"
                )

        logger.info(
            f"Processing complete: {len(opportunities)} opportunities from {processed} symbols"
        )
        return opportunities, processed

    def _process(
        self,
        record: FundingSymbol,
        selected: frozenset,
        datasets: MarketDatasets,
    ) -> Optional[ArbitrageOpportunity]:
        cfg = self.config
        symbol = record.symbol

        quotes = [
            q for q in record.quotes
            if q.rate is not None and q.exchange in selected
        ]
        if len(quotes) < 2:
            return None

        # Stable sort: equal rates keep provider order
        ordered = sorted(quotes, key=lambda q: q.rate)
        low, high = ordered[0], ordered[-1]

        rate_diff = high.rate - low.rate
        spread = abs(rate_diff)
        if spread < cfg.min_spread:
            return None

        ctx = SymbolContext.build(symbol, len(quotes), datasets, cfg)

        market_cap, market_cap_source = resolve_first(MARKET_CAP_RESOLVERS, ctx)
        price_change, price_change_source = resolve_first(PRICE_CHANGE_RESOLVERS, ctx)
        current_price, current_price_source = resolve_first(CURRENT_PRICE_RESOLVERS, ctx)
        ctx.market_cap = market_cap

        volume, volume_source = resolve_first(VOLUME_RESOLVERS, ctx)
        ctx.volume_24h = volume

        open_interest, oi_source = resolve_first(OPEN_INTEREST_RESOLVERS, ctx)

        high_share = cfg.share_for(high.exchange)
        low_share = cfg.share_for(low.exchange)

        oi_high = ctx.open_interest.open_interest_high or open_interest * high_share
        oi_low = ctx.open_interest.open_interest_low or open_interest * low_share

        if rate_diff > 0:
            direction = f"Long {low.exchange}, Short {high.exchange}"
        else:
            direction = f"Long {high.exchange}, Short {low.exchange}"

        return ArbitrageOpportunity(
            symbol=symbol,
            exchange_high=high.exchange,
            rate_high=high.rate,
            exchange_low=low.exchange,
            rate_low=low.rate,
            spread=spread,
            annualized_return=spread * cfg.annualization_factor,
            direction=direction,
            has_arbitrage=spread > cfg.min_spread,
            all_rates=ordered,
            volume_24h=volume,
            volume_high=round(volume * high_share),
            volume_low=round(volume * low_share),
            open_interest=round(open_interest),
            open_interest_high=round(oi_high),
            open_interest_low=round(oi_low),
            market_cap=market_cap,
            price_change_24h=price_change,
            current_price=current_price,
            data_sources=DataSources(
                volume=volume_source,
                open_interest=oi_source,
                funding_rates=SOURCE_COINGLASS,
                market_cap=market_cap_source,
                price_change=price_change_source,
                current_price=current_price_source,
            ),
        )
