"""API endpoint specifications."""

from . import attestations, health, metrics

__all__ = [
    "attestations",
    "health",
    "metrics",
]
