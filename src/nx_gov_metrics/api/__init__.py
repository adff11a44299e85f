"""
API server module for the canister metrics exporter.

Provides HTTP endpoints for:
- /metrics - Prometheus text exposition of the canister gauges
- /health - Health check endpoint
"""

from .server import ApiServer, ApiServerConfig

__all__ = [
    "ApiServer",
    "ApiServerConfig",
]
