"""
The container types for the price oracle attestation service.

Signed claims use the fixed-layout encoding so their digests are
deterministic. Stored rows are plain pydantic models.
"""

from .messages import (
    IntervalInclusionMessage,
    OracleMessage,
    Price,
    PriceValueMessage,
    SignedIntervalInclusionMessage,
    SignedPriceValueMessage,
)
from .records import (
    AggregateKey,
    AggregatePriceIntervalEntry,
    PriceIntervalEntry,
    PriceValueEntry,
)

__all__ = [
    "AggregateKey",
    "AggregatePriceIntervalEntry",
    "IntervalInclusionMessage",
    "OracleMessage",
    "Price",
    "PriceIntervalEntry",
    "PriceValueEntry",
    "PriceValueMessage",
    "SignedIntervalInclusionMessage",
    "SignedPriceValueMessage",
]
