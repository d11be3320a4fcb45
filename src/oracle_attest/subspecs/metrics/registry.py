"""
Metric registry using prometheus_client.

Provides pre-defined metrics for the attestation service.
Exposes metrics in Prometheus text format via the /metrics endpoint.
"""

from __future__ import annotations

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

# Create a dedicated registry for oracle metrics.
#
# Using a dedicated registry avoids pollution from default Python process metrics.
REGISTRY = CollectorRegistry()

# -----------------------------------------------------------------------------
# Submissions
# -----------------------------------------------------------------------------

submissions_received = Counter(
    "oracle_submissions_received_total",
    "Oracle messages received",
    registry=REGISTRY,
)

submissions_rejected = Counter(
    "oracle_submissions_rejected_total",
    "Oracle messages rejected, by rejection kind",
    ["kind"],
    registry=REGISTRY,
)

claims_persisted = Counter(
    "oracle_claims_persisted_total",
    "Claims stored as attestation rows, by claim type",
    ["claim"],
    registry=REGISTRY,
)

# -----------------------------------------------------------------------------
# Aggregation
# -----------------------------------------------------------------------------

aggregate_merges = Counter(
    "oracle_aggregate_merges_total",
    "Signatures folded into aggregate buckets",
    registry=REGISTRY,
)

signature_verification_time = Histogram(
    "oracle_signature_verification_seconds",
    "Single signature verification duration",
    buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
    registry=REGISTRY,
)


def generate_metrics() -> bytes:
    """
    Generate Prometheus metrics output.

    Returns:
        Prometheus text format output as bytes.
    """
    return generate_latest(REGISTRY)
