"""API route definitions."""

from collections.abc import Awaitable, Callable

from aiohttp import web

from .endpoints import attestations, health, metrics

ROUTES: dict[tuple[str, str], Callable[[web.Request], Awaitable[web.Response]]] = {
    ("POST", "/oracle/v0/attestations"): attestations.handle_submit,
    ("GET", "/oracle/v0/attestations/price_value"): attestations.handle_price_values,
    ("GET", "/oracle/v0/attestations/price_interval"): attestations.handle_price_intervals,
    ("GET", "/oracle/v0/attestations/aggregate_price_interval"): attestations.handle_aggregates,
    ("GET", "/oracle/v0/health"): health.handle,
    ("GET", "/metrics"): metrics.handle,
}
"""All API routes, keyed by (method, path)."""
