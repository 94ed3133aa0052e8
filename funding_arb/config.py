"""
Centralized configuration for the funding arbitrage scanner.

All constants, thresholds, and settings are defined here.
Values can be overridden via environment variables.
"""

import os
from dataclasses import dataclass, field
from typing import Dict, List, Optional


def _env_bool(key: str, default: bool = False) -> bool:
    """Get boolean from environment variable."""
    val = os.getenv(key, str(default)).lower()
    return val in ("true", "1", "yes", "on")


def _env_int(key: str, default: int) -> int:
    """Get integer from environment variable."""
    try:
        return int(os.getenv(key, str(default)))
    except ValueError:
        return default


def _env_float(key: str, default: float) -> float:
    """Get float from environment variable."""
    try:
        return float(os.getenv(key, str(default)))
    except ValueError:
        return default


def _env_list(key: str, default: Optional[List[str]] = None) -> List[str]:
    """Get comma-separated list from environment variable."""
    val = os.getenv(key, "")
    if not val:
        return list(default or [])
    return [item.strip() for item in val.split(",") if item.strip()]


def _env_shares(key: str, default: Dict[str, float]) -> Dict[str, float]:
    """
    Get exchange market shares from environment variable.

    Format: "OKX=0.25,Bybit=0.2". Entries override the defaults,
    malformed entries are ignored.
    """
    shares = dict(default)
    for item in _env_list(key):
        name, sep, value = item.partition("=")
        if not sep:
            continue
        try:
            shares[name.strip()] = float(value)
        except ValueError:
            continue
    return shares


# Exchanges quoted by the funding-rate provider that can be selected
KNOWN_EXCHANGES: List[str] = [
    "OKX", "dYdX", "Bybit", "Vertex", "Bitget", "CoinEx",
    "Bitfinex", "Kraken", "HTX", "BingX", "Gate", "Crypto.com",
    "Coinbase", "Hyperliquid", "Bitunix", "MEXC", "WhiteBIT",
]

# Approximate share of derivatives volume per exchange.
# These are rough estimates used to split aggregate figures, not reported data.
DEFAULT_MARKET_SHARES: Dict[str, float] = {
    "OKX": 0.25,
    "Bybit": 0.20,
    "dYdX": 0.12,
    "Bitget": 0.10,
    "Gate": 0.08,
    "Kraken": 0.06,
    "HTX": 0.06,
    "Crypto.com": 0.05,
    "CoinEx": 0.03,
    "BingX": 0.03,
    "MEXC": 0.02,
    "Hyperliquid": 0.02,
}

# Symbols with per-exchange open interest on CoinGlass, most liquid first
DEFAULT_ACTIVE_SYMBOLS: List[str] = [
    "BTC", "ETH", "SOL", "XRP", "DOGE", "HYPE", "SUI", "ADA", "FARTCOIN", "BNB",
    "AAVE", "UNI", "LINK", "LTC", "AVAX", "DOT", "ENA", "WIF", "TRUMP", "ONDO",
    "TRX", "BCH", "HBAR", "NEAR", "VIRTUAL", "WLD", "TAO", "TON", "TIA", "FIL",
    "APE", "CRV", "OP", "ARB", "SPX", "LDO", "APT", "XLM", "ETC", "POPCAT",
]


@dataclass
class ProviderConfig:
    """Upstream market-data provider credentials and endpoints."""
    coinglass_api_key: str = field(default_factory=lambda: os.getenv("COINGLASS_API_KEY", ""))
    coinmarketcap_api_key: str = field(default_factory=lambda: os.getenv("COINMARKETCAP_API_KEY", ""))

    coinglass_base_url: str = field(default_factory=lambda: os.getenv(
        "COINGLASS_BASE_URL",
        "https://open-api-v4.coinglass.com"
    ))
    coingecko_base_url: str = field(default_factory=lambda: os.getenv(
        "COINGECKO_BASE_URL",
        "https://api.coingecko.com/api/v3"
    ))
    coinlore_base_url: str = field(default_factory=lambda: os.getenv(
        "COINLORE_BASE_URL",
        "https://api.coinlore.net/api"
    ))
    coinmarketcap_base_url: str = field(default_factory=lambda: os.getenv(
        "COINMARKETCAP_BASE_URL",
        "https://pro-api.coinmarketcap.com/v1"
    ))

    @property
    def has_coinglass(self) -> bool:
        return bool(self.coinglass_api_key)

    @property
    def has_coinmarketcap(self) -> bool:
        return bool(self.coinmarketcap_api_key)


@dataclass
class RateLimitConfig:
    """Outbound request pacing and retry configuration."""
    # Published provider quota
    calls_per_minute: int = field(default_factory=lambda: _env_int("RATE_LIMIT_PER_MINUTE", 30))
    window_seconds: float = field(default_factory=lambda: _env_float("RATE_LIMIT_WINDOW", 60.0))

    # Pacing target, kept below the quota to absorb jitter
    target_per_minute: int = field(default_factory=lambda: _env_int("RATE_LIMIT_TARGET_PER_MINUTE", 25))

    max_retries: int = field(default_factory=lambda: _env_int("FETCH_MAX_RETRIES", 3))
    http_timeout: float = field(default_factory=lambda: _env_float("HTTP_TIMEOUT", 30.0))

    @property
    def base_delay(self) -> float:
        """Seconds to wait between calls to stay at the target rate."""
        return 60.0 / max(1, self.target_per_minute)


@dataclass
class AggregatorConfig:
    """Side-data aggregation configuration."""
    # Wall-clock ceiling for all side-data fetching combined
    timeout: float = field(default_factory=lambda: _env_float("AGGREGATE_TIMEOUT", 30.0))

    active_symbols: List[str] = field(default_factory=lambda: _env_list(
        "ACTIVE_SYMBOLS", DEFAULT_ACTIVE_SYMBOLS
    ))
    # Only the first N active symbols get a per-symbol open interest call
    active_symbols_limit: int = field(default_factory=lambda: _env_int("ACTIVE_SYMBOLS_LIMIT", 10))

    # Historical endpoint values are reported in millions (unverified against provider docs)
    history_scale_factor: float = field(default_factory=lambda: _env_float("HISTORY_SCALE_FACTOR", 1_000_000))
    history_window_days: int = field(default_factory=lambda: _env_int("HISTORY_WINDOW_DAYS", 7))


@dataclass
class ArbitrageConfig:
    """Arbitrage computation configuration."""
    # Spreads below this are treated as noise (0.0001 = 1 basis point)
    min_spread: float = field(default_factory=lambda: _env_float("ARB_MIN_SPREAD", 0.0001))

    # Funding is typically paid 3 times per day (8h intervals)
    payments_per_day: int = field(default_factory=lambda: _env_int("FUNDING_PAYMENTS_PER_DAY", 3))

    market_shares: Dict[str, float] = field(default_factory=lambda: _env_shares(
        "MARKET_SHARES", DEFAULT_MARKET_SHARES
    ))
    default_market_share: float = field(default_factory=lambda: _env_float("DEFAULT_MARKET_SHARE", 0.05))

    # Heuristic ratios used when no provider reports a figure
    oi_volume_ratio: float = field(default_factory=lambda: _env_float("OI_VOLUME_RATIO", 0.4))
    market_cap_volume_ratio: float = field(default_factory=lambda: _env_float("MARKET_CAP_VOLUME_RATIO", 0.1))

    progress_every: int = field(default_factory=lambda: _env_int("ARB_PROGRESS_EVERY", 50))

    @property
    def annualization_factor(self) -> float:
        """Factor to convert a per-settlement spread to an annual return."""
        return self.payments_per_day * 365

    def share_for(self, exchange: str) -> float:
        """Approximate market share for an exchange."""
        return self.market_shares.get(exchange, self.default_market_share)


@dataclass
class ServerConfig:
    """HTTP server configuration."""
    host: str = field(default_factory=lambda: os.getenv("SERVER_HOST", "0.0.0.0"))
    port: int = field(default_factory=lambda: _env_int("SERVER_PORT", 8080))


@dataclass
class Config:
    """Main configuration class."""
    providers: ProviderConfig = field(default_factory=ProviderConfig)
    rate_limit: RateLimitConfig = field(default_factory=RateLimitConfig)
    aggregator: AggregatorConfig = field(default_factory=AggregatorConfig)
    arbitrage: ArbitrageConfig = field(default_factory=ArbitrageConfig)
    server: ServerConfig = field(default_factory=ServerConfig)

    # Debug mode
    debug: bool = field(default_factory=lambda: _env_bool("DEBUG", False))

    # Log level
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))


# Global config instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get or create global config instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config


def reload_config() -> Config:
    """Reload configuration from environment."""
    global _config
    _config = Config()
    return _config
