"""Metrics endpoint handler."""

from __future__ import annotations

from collections.abc import Callable

from aiohttp import web

from nx_gov_metrics.metrics import CounterReader, HttpResponse, build_metrics_response

READER_KEY = web.AppKey("reader_getter", Callable[[], CounterReader])
"""Application key holding the callable that returns the counter reader."""


def to_web_response(response: HttpResponse) -> web.Response:
    """
    Convert a transport-neutral response into an aiohttp response.

    Content-Length is dropped: aiohttp derives it from the body, and the two
    always agree.
    """
    headers = {name: value for name, value in response.headers if name != "Content-Length"}
    return web.Response(status=response.status_code, headers=headers, body=response.body)


async def handle(request: web.Request) -> web.Response:
    """
    Handle metrics request.

    Response: Prometheus text format (text/plain; version=0.0.4)

    Status Codes:
        200 OK: Metrics returned.
        500 Internal Server Error: Metrics could not be encoded.
    """
    reader = request.app[READER_KEY]()
    return to_web_response(build_metrics_response(reader))
