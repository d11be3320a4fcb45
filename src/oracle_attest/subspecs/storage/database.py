"""
Abstract repository interface for attestation storage.

Defines the Protocol that all repository implementations must follow.
Uses structural subtyping for flexibility.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from oracle_attest.subspecs.containers import (
        AggregateKey,
        AggregatePriceIntervalEntry,
        PriceIntervalEntry,
        PriceValueEntry,
    )


class StorageError(Exception):
    """
    Raised when the storage backend fails to read or write.

    Never retried by the repository; callers decide what to do.
    """


class Database(Protocol):
    """
    Protocol for attestation storage.

    All repository implementations must provide these methods.
    Uses structural subtyping - any class with matching methods satisfies the protocol.

    Implementations must be callable from worker threads: the attestation
    pipeline runs every call through `asyncio.to_thread`.

    Storage Organization
    --------------------
    - Value attestations: append-only rows
    - Interval attestations: append-only rows
    - Aggregate buckets: one row per (value, slot_number, interval_size)
    """

    # -------------------------------------------------------------------------
    # Attestation Rows
    # -------------------------------------------------------------------------

    def insert_value_attestation(self, entry: PriceValueEntry) -> None:
        """
        Append one accepted price value claim.

        Raises:
            StorageError: If the write fails.
        """
        ...

    def insert_interval_attestation(self, entry: PriceIntervalEntry) -> None:
        """
        Append one accepted interval inclusion claim.

        Raises:
            StorageError: If the write fails.
        """
        ...

    # -------------------------------------------------------------------------
    # Aggregate Buckets
    # -------------------------------------------------------------------------

    def get_aggregate_bucket(self, key: AggregateKey) -> AggregatePriceIntervalEntry | None:
        """
        Point lookup of one bucket.

        Returns:
            The stored row exactly as persisted, or None if the key is absent.

        Raises:
            StorageError: If the read fails.
        """
        ...

    def upsert_aggregate_bucket(self, entry: AggregatePriceIntervalEntry) -> None:
        """
        Insert the bucket or replace its count and aggregate.

        The bucket identity is taken from the entry's key fields.

        Raises:
            StorageError: If the write fails.
        """
        ...

    # -------------------------------------------------------------------------
    # Listings
    # -------------------------------------------------------------------------

    def get_price_value_attestations(self) -> list[PriceValueEntry]:
        """All value attestation rows in insertion order."""
        ...

    def get_price_interval_attestations(self) -> list[PriceIntervalEntry]:
        """All interval attestation rows in insertion order."""
        ...

    def get_aggregate_price_interval_attestations(self) -> list[AggregatePriceIntervalEntry]:
        """All aggregate buckets in creation order."""
        ...

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def close(self) -> None:
        """Close database connection and release resources."""
        ...
