"""Cross-exchange funding rate arbitrage scanner."""

__version__ = "1.0.0"
