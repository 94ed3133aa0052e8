"""Ranking of arbitrage opportunities and scan statistics."""

from typing import Dict, Iterable, List, Optional, Tuple

from funding_arb.models import ArbitrageOpportunity, RunStatistics


FUNDING_RATES_SOURCE = "CoinGlass v4 API"


def _summarize(labels: Iterable[str]) -> str:
    """Join distinct labels in order of first appearance."""
    seen: List[str] = []
    for label in labels:
        if label not in seen:
            seen.append(label)
    return " + ".join(seen) if seen else "N/A"


class OpportunityRanker:
    """Orders qualifying opportunities by spread, widest first."""

    def rank(
        self,
        opportunities: List[ArbitrageOpportunity],
        total_symbols: int,
        processed_symbols: int,
        selected_exchanges: int,
        source_counts: Optional[Dict[str, int]] = None,
    ) -> Tuple[List[ArbitrageOpportunity], RunStatistics]:
        """
        Rank opportunities and compute run statistics.

        Sorting is stable, so equal spreads keep their discovery order.
        Nothing is truncated here.
        """
        qualifying = [o for o in opportunities if o.has_arbitrage]
        ranked = sorted(qualifying, key=lambda o: o.spread, reverse=True)

        stats = RunStatistics(
            total_symbols=total_symbols,
            processed_symbols=processed_symbols,
            real_opportunities=len(ranked),
            selected_exchanges=selected_exchanges,
            data_sources={
                "fundingRates": FUNDING_RATES_SOURCE,
                "volume": _summarize(o.data_sources.volume for o in ranked),
                "openInterest": _summarize(o.data_sources.open_interest for o in ranked),
                "marketData": _summarize(o.data_sources.market_cap for o in ranked),
            },
            source_counts=dict(source_counts or {}),
        )

        return ranked, stats
