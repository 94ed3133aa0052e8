"""HTTP request handling for the funding arbitrage endpoint."""

import logging
from typing import List, Optional

from aiohttp import web

from funding_arb.config import KNOWN_EXCHANGES, Config
from funding_arb.services import ArbitragePipeline, NoFundingDataError
from .demo import build_demo_result

logger = logging.getLogger(__name__)


GENERIC_ERROR = "Failed to fetch arbitrage data. Please try again."


def parse_exchanges(param: Optional[str], known: List[str] = KNOWN_EXCHANGES) -> List[str]:
    """
    Select exchanges from a comma-separated query value.

    Names are matched case-insensitively against the known exchanges and
    returned in canonical spelling; unknown names are dropped. An absent or
    fully filtered parameter selects every known exchange.
    """
    if not param:
        return list(known)

    canonical = {name.lower(): name for name in known}
    selected: List[str] = []
    for raw in param.split(","):
        name = canonical.get(raw.strip().lower())
        if name and name not in selected:
            selected.append(name)

    return selected or list(known)


def parse_limit(param: Optional[str]) -> Optional[int]:
    """Positive integer ``limit`` or None."""
    if not param:
        return None
    try:
        limit = int(param)
    except ValueError:
        return None
    return limit if limit > 0 else None


class RequestHandler:
    """
    Handlers for ``GET /funding-arbitrage`` and ``GET /health``.

    Holds the pipeline (and through it the process-wide rate limiters);
    no other state is kept between requests.
    """

    def __init__(self, config: Config, pipeline: ArbitragePipeline):
        self.config = config
        self.pipeline = pipeline

    async def funding_arbitrage(self, request: web.Request) -> web.Response:
        logger.info("Funding arbitrage requested")

        try:
            selected = parse_exchanges(request.query.get("exchanges"))
            limit = parse_limit(request.query.get("limit"))

            if not self.config.providers.has_coinglass:
                logger.warning(
                    "[yellow]COINGLASS_API_KEY not configured, returning demonstration data[/]"
                )
                return web.json_response(build_demo_result(selected).to_dict(limit))

            result = await self.pipeline.run(selected)
            return web.json_response(result.to_dict(limit))

        except NoFundingDataError as e:
            logger.error(f"[bold red]No funding data[/]: {e}")
            return self._error(e)
        except Exception as e:
            logger.exception(f"Error in funding arbitrage request: {e}")
            return self._error(e)

    async def health(self, request: web.Request) -> web.Response:
        providers = self.config.providers
        return web.json_response({
            "status": "ok",
            "mode": "live" if providers.has_coinglass else "demo",
            "providers": {
                "coinglass": providers.has_coinglass,
                "coinmarketcap": providers.has_coinmarketcap,
            },
        })

    @staticmethod
    def _error(exc: Exception) -> web.Response:
        return web.json_response(
            {"error": GENERIC_ERROR, "details": str(exc)},
            status=500,
        )
