"""
Funding Arbitrage Scanner - Main Entry Point

This module provides CLI interface for scanning cross-exchange funding rate
arbitrage opportunities, or serving them over HTTP.

Usage:
    # Scan all known exchanges
    python -m funding_arb.main

    # Scan specific exchanges
    python -m funding_arb.main --exchanges OKX Bybit Gate

    # Show only top N opportunities
    python -m funding_arb.main --top 20

    # List known exchanges
    python -m funding_arb.main --list-exchanges

    # Serve GET /funding-arbitrage
    python -m funding_arb.main --serve --port 8080
"""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from dotenv import load_dotenv
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from funding_arb.api import build_demo_result, parse_exchanges, run_server
from funding_arb.config import KNOWN_EXCHANGES, get_config, reload_config
from funding_arb.models import ArbitrageOpportunity, ScanResult
from funding_arb.services import ArbitragePipeline, NoFundingDataError
from funding_arb.utils import get_logger, setup_logger


console = Console()


def format_rate(rate: Optional[float]) -> str:
    """Format a decimal funding rate as percent."""
    if rate is None:
        return "N/A"
    return f"{rate * 100:+.4f}%"


def format_price(price: Optional[float]) -> str:
    """
    Format price with appropriate precision.

    Shows significant digits based on price magnitude:
    - >= 10000: no decimals ($12,345)
    - >= 1000: 1 decimal ($1,234.5)
    - >= 100: 2 decimals ($123.45)
    - >= 1: 3-4 decimals ($1.2345, $12.345)
    - < 1: up to 8 decimals ($0.00001234)
    """
    if price is None or price == 0:
        return "N/A"

    abs_price = abs(price)

    if abs_price >= 10000:
        return f"${price:,.0f}"
    elif abs_price >= 1000:
        return f"${price:,.1f}"
    elif abs_price >= 100:
        return f"${price:,.2f}"
    elif abs_price >= 10:
        return f"${price:,.3f}"
    elif abs_price >= 1:
        return f"${price:,.4f}"
    elif abs_price >= 0.01:
        return f"${price:.4f}"
    elif abs_price >= 0.0001:
        return f"${price:.6f}"
    else:
        return f"${price:.8f}"


def format_volume(volume: Optional[float]) -> str:
    """Format volume in human-readable format."""
    if volume is None or volume == 0:
        return "N/A"

    if volume >= 1_000_000_000:
        return f"${volume / 1_000_000_000:.1f}B"
    elif volume >= 1_000_000:
        return f"${volume / 1_000_000:.1f}M"
    elif volume >= 1_000:
        return f"${volume / 1_000:.0f}K"
    else:
        return f"${volume:.0f}"


def create_parser() -> argparse.ArgumentParser:
    """Create command line argument parser."""
    parser = argparse.ArgumentParser(
        description="Find cross-exchange funding rate arbitrage opportunities",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s                          # Scan all known exchanges
  %(prog)s -e OKX Kraken            # Only compare OKX and Kraken
  %(prog)s --top 20                 # Show top 20 opportunities
  %(prog)s --list-exchanges         # List all known exchanges
  %(prog)s --serve --port 8080      # Serve GET /funding-arbitrage
  %(prog)s -v                       # Verbose output for debugging
        """
    )

    parser.add_argument(
        "-e", "--exchanges",
        nargs="+",
        metavar="EXCHANGE",
        help="Exchanges to compare (default: all known)",
    )

    parser.add_argument(
        "--top",
        type=int,
        default=10,
        metavar="N",
        help="Number of top opportunities to display (default: 10)",
    )

    parser.add_argument(
        "--list-exchanges",
        action="store_true",
        help="List all known exchanges and exit",
    )

    parser.add_argument(
        "--serve",
        action="store_true",
        help="Run the HTTP server instead of a one-shot scan",
    )

    parser.add_argument(
        "--host",
        type=str,
        help="HTTP server host (default: SERVER_HOST or 0.0.0.0)",
    )

    parser.add_argument(
        "--port",
        type=int,
        help="HTTP server port (default: SERVER_PORT or 8080)",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output for debugging",
    )

    return parser


def list_exchanges() -> None:
    """Display list of known exchanges with their market share estimate."""
    config = get_config()
    table = Table(title="Known Exchanges", show_header=True, header_style="bold cyan")
    table.add_column("Name", style="cyan")
    table.add_column("Est. Market Share", justify="right", style="green")

    for name in KNOWN_EXCHANGES:
        table.add_row(name, f"{config.arbitrage.share_for(name) * 100:.0f}%")

    console.print(table)
    console.print(f"\n[dim]Total: {len(KNOWN_EXCHANGES)} exchanges[/]")


def display_opportunities(
    result: ScanResult,
    top_n: int = 10,
    verbose: bool = False,
) -> None:
    """Display ranked opportunities in a formatted table."""
    stats = result.stats
    opportunities = result.opportunities

    summary = Panel(
        f"[bold]Found {stats.real_opportunities} arbitrage opportunities[/] "
        f"from {stats.processed_symbols}/{stats.total_symbols} symbols "
        f"across {stats.selected_exchanges} exchanges\n"
        f"Funding rates: {stats.data_sources.get('fundingRates')} | "
        f"Volume: {stats.data_sources.get('volume')} | "
        f"Open interest: {stats.data_sources.get('openInterest')}",
        title="Arbitrage Analysis",
        border_style="green",
    )
    console.print(summary)

    if not opportunities:
        console.print("[yellow]No arbitrage opportunities found.[/]")
        return

    top_opportunities: List[ArbitrageOpportunity] = opportunities[:top_n]

    table = Table(
        title=f"Top {len(top_opportunities)} Funding Rate Arbitrage Opportunities",
        show_header=True,
        header_style="bold magenta",
    )
    table.add_column("Symbol", style="cyan", min_width=8)
    table.add_column("Long", style="green", min_width=12)
    table.add_column("Short", style="red", min_width=12)
    table.add_column("Spread", justify="right", style="bold yellow")
    table.add_column("Annual", justify="right", style="yellow")
    table.add_column("Volume 24h", justify="right")
    table.add_column("Open Interest", justify="right")
    table.add_column("Price", justify="right", style="dim")

    for opp in top_opportunities:
        table.add_row(
            opp.symbol,
            f"{opp.exchange_low}\n{format_rate(opp.rate_low)}",
            f"{opp.exchange_high}\n{format_rate(opp.rate_high)}",
            f"{opp.spread * 100:.4f}%",
            f"{opp.annualized_return * 100:.1f}%",
            f"{format_volume(opp.volume_24h)}\n[dim]{opp.data_sources.volume}[/]",
            f"{format_volume(opp.open_interest)}\n[dim]{opp.data_sources.open_interest}[/]",
            format_price(opp.current_price),
        )

    console.print(table)

    console.print("\n[dim]Strategy: Long on the lower funding exchange, Short on the higher one[/]")
    console.print("[dim]Per-exchange volume/OI splits are market-share estimates[/]")

    if verbose:
        top = opportunities[0]
        console.print(f"\n[bold]Top Opportunity Details ({top.symbol}):[/]")
        console.print(f"  {top.direction}")
        for quote in top.all_rates:
            console.print(f"    {quote.exchange}: {format_rate(quote.rate)} every {quote.interval_hours}h")
        console.print(f"  Volume: {format_volume(top.volume_high)} / {format_volume(top.volume_low)} (short / long leg)")
        console.print(
            f"  Open interest: {format_volume(top.open_interest_high)} / "
            f"{format_volume(top.open_interest_low)} (short / long leg)"
        )


async def scan(exchanges: List[str]) -> ScanResult:
    """Run one scan, or return the demonstration result when not configured."""
    config = get_config()
    if not config.providers.has_coinglass:
        get_logger().warning("[yellow]COINGLASS_API_KEY not configured, showing demonstration data[/]")
        return build_demo_result(exchanges)

    pipeline = ArbitragePipeline(config)
    return await pipeline.run(exchanges)


async def main_async(args: argparse.Namespace) -> int:
    """Async main function."""
    logger = get_logger()

    selected = parse_exchanges(",".join(args.exchanges) if args.exchanges else None)
    if args.verbose:
        logger.info(f"[dim]Exchanges: {', '.join(selected)}[/]")

    try:
        result = await scan(selected)
    except NoFundingDataError as e:
        logger.error(f"[red]{e}[/]")
        return 1

    display_opportunities(result, top_n=args.top, verbose=args.verbose)
    return 0


def main() -> int:
    """Main entry point."""
    load_dotenv()
    config = reload_config()

    parser = create_parser()
    args = parser.parse_args()

    log_level = logging.DEBUG if args.verbose or config.debug else getattr(
        logging, config.log_level.upper(), logging.INFO
    )
    setup_logger(level=log_level)

    if args.list_exchanges:
        list_exchanges()
        return 0

    if args.serve:
        if args.host:
            config.server.host = args.host
        if args.port:
            config.server.port = args.port
        get_logger().info(
            f"[bold]Serving on http://{config.server.host}:{config.server.port}/funding-arbitrage[/]"
        )
        run_server(config)
        return 0

    try:
        return asyncio.run(main_async(args))
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/]")
        return 130


if __name__ == "__main__":
    sys.exit(main())
