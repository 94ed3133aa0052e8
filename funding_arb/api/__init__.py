"""HTTP interface."""

from .app import create_app, run_server
from .handler import RequestHandler, parse_exchanges
from .demo import build_demo_result

__all__ = ["create_app", "run_server", "RequestHandler", "parse_exchanges", "build_demo_result"]
