"""
Stored attestation rows and the aggregate bucket key.

Rows are projections of what the repository holds. Keys and signatures stay
as the hex strings that were persisted, so a corrupted aggregate can still be
listed and reported instead of failing the whole listing.
"""

from __future__ import annotations

from dataclasses import dataclass

from oracle_attest.types import StrictBaseModel

from .messages import IntervalInclusionMessage


class PriceValueEntry(StrictBaseModel):
    """One accepted price value claim. Append-only."""

    validator_public_key: str
    value: int
    slot_number: int
    signature: str


class PriceIntervalEntry(StrictBaseModel):
    """One accepted interval inclusion claim. Append-only."""

    validator_public_key: str
    value: int
    slot_number: int
    signature: str
    interval_size: int


class AggregatePriceIntervalEntry(StrictBaseModel):
    """The stored state of one aggregate bucket."""

    value: int
    slot_number: int
    aggregate_signature: str
    interval_size: int
    num_validators: int


@dataclass(frozen=True, slots=True)
class AggregateKey:
    """Identity of an aggregate bucket: every claim with these three fields shares it."""

    value: int
    slot_number: int
    interval_size: int

    @classmethod
    def from_message(cls, message: IntervalInclusionMessage) -> AggregateKey:
        """The bucket an interval claim folds into."""
        return cls(
            value=int(message.value),
            slot_number=int(message.slot_number),
            interval_size=int(message.interval_size),
        )
