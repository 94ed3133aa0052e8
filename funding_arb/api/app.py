"""aiohttp application factory."""

from typing import Optional

from aiohttp import web

from funding_arb.config import Config, get_config
from funding_arb.services import ArbitragePipeline
from funding_arb.transport import RateLimiterRegistry
from .handler import RequestHandler


CONFIG_KEY = web.AppKey("config", Config)
PIPELINE_KEY = web.AppKey("pipeline", ArbitragePipeline)


def create_app(
    config: Optional[Config] = None,
    pipeline: Optional[ArbitragePipeline] = None,
) -> web.Application:
    """
    Build the web application.

    The pipeline, and with it the provider rate limiters, is created once
    here and shared by every request.
    """
    config = config or get_config()
    if pipeline is None:
        limiters = RateLimiterRegistry(
            max_calls=config.rate_limit.calls_per_minute,
            window_seconds=config.rate_limit.window_seconds,
        )
        pipeline = ArbitragePipeline(config, limiters)

    handler = RequestHandler(config, pipeline)

    app = web.Application()
    app[CONFIG_KEY] = config
    app[PIPELINE_KEY] = pipeline
    app.router.add_get("/funding-arbitrage", handler.funding_arbitrage)
    app.router.add_get("/health", handler.health)
    return app


def run_server(config: Optional[Config] = None) -> None:
    """Run the HTTP server until interrupted."""
    config = config or get_config()
    app = create_app(config)
    web.run_app(app, host=config.server.host, port=config.server.port, print=None)
