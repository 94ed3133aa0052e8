"""Base class for upstream market-data sources."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Optional

from funding_arb.config import Config
from funding_arb.models import SourceDataset
from funding_arb.transport import ResilientFetcher
from funding_arb.utils import get_logger


def parse_float(value: Any) -> Optional[float]:
    """Parse a numeric field, keeping zero. Returns None when absent or invalid."""
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def parse_amount(value: Any) -> Optional[float]:
    """Parse a size/volume field where zero means the provider has no figure."""
    parsed = parse_float(value)
    return parsed or None


def parse_timestamp(ts: Any) -> Optional[datetime]:
    """Parse timestamp from various formats to naive UTC datetime."""
    if ts is None:
        return None

    try:
        if isinstance(ts, (int, float)):
            # Check if milliseconds or seconds
            if ts > 10000000000:
                return datetime.utcfromtimestamp(ts / 1000)
            return datetime.utcfromtimestamp(ts)
        elif isinstance(ts, str):
            return datetime.fromisoformat(ts.replace("Z", "+00:00")).replace(tzinfo=None)
    except (ValueError, TypeError, OverflowError, OSError):
        pass

    return None


def normalize_symbol(symbol: Any) -> Optional[str]:
    """Normalize a ticker to the upper-case keyspace shared by all sources."""
    if not isinstance(symbol, str):
        return None
    symbol = symbol.strip().upper()
    return symbol or None


class BaseSource(ABC):
    """
    Abstract base class for all market-data sources.

    ``fetch()`` is the uniform failure boundary: a source that is not
    configured or whose ``_fetch()`` raises returns an empty result instead
    of propagating the error.
    """

    name: str = "base"
    display_name: str = "Base Source"
    # Rate limiter / fetcher key shared by all sources of one provider
    provider: str = "base"

    def __init__(self, fetcher: ResilientFetcher, config: Config):
        self.fetcher = fetcher
        self.config = config
        self._logger = get_logger()

    @property
    def is_available(self) -> bool:
        """Check if the source is properly configured."""
        return True

    def empty(self) -> Any:
        """Result returned when the source has no data."""
        return {}

    async def fetch(self) -> Any:
        """Fetch and normalize data, degrading to an empty result on any failure."""
        if not self.is_available:
            self._logger.warning(
                f"[yellow]{self.display_name}[/]: credential not configured, skipping"
            )
            return self.empty()

        try:
            return await self._fetch()
        except Exception as e:
            self._logger.error(f"[bold red]{self.display_name}[/]: Error - {e}")
            return self.empty()

    @abstractmethod
    async def _fetch(self) -> Any:
        """Provider-specific fetch and normalization."""
        pass

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name}>"


class SideDataSource(BaseSource):
    """Source producing a per-symbol ``SourceDataset``."""

    async def fetch(self) -> SourceDataset:
        return await super().fetch()

    @abstractmethod
    async def _fetch(self) -> SourceDataset:
        pass
