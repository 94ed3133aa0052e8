#!/usr/bin/env python3
"""
Quick start script for the HTTP server.

Usage:
    python run_server.py

Environment variables:
    COINGLASS_API_KEY - CoinGlass v4 API key (demonstration data without it)
    COINMARKETCAP_API_KEY - Optional CoinMarketCap Pro API key
    SERVER_HOST / SERVER_PORT - Bind address (default 0.0.0.0:8080)
"""

import sys

from funding_arb.main import main

if __name__ == "__main__":
    sys.argv.insert(1, "--serve")
    sys.exit(main())
