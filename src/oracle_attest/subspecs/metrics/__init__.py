"""
Metrics module for observability.

Provides counters and histograms for tracking submissions and aggregation.
Exposes metrics in Prometheus text format.
"""

from .registry import (
    REGISTRY,
    aggregate_merges,
    claims_persisted,
    generate_metrics,
    signature_verification_time,
    submissions_received,
    submissions_rejected,
)

__all__ = [
    "REGISTRY",
    "aggregate_merges",
    "claims_persisted",
    "generate_metrics",
    "signature_verification_time",
    "submissions_received",
    "submissions_rejected",
]
