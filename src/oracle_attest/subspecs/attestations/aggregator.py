"""
Aggregate bucket store.

Each distinct interval claim (value, slot_number, interval_size) owns one
bucket holding a validator count and the BLS sum of every signature merged
into it. A merge is a read-modify-write against the repository:

    read bucket -> absent:  count = 1,     aggregate = identity + signature
                -> present: count = n + 1, aggregate = stored + signature
    upsert bucket

Buckets only ever grow. The store keeps no copy between calls; every merge
starts from what the repository currently holds.

Buckets do not record who contributed. Merging the same validator's signature
twice counts it twice.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import TypeVar

from oracle_attest.subspecs import metrics
from oracle_attest.subspecs.bls import AggregateSignature, BLSSignature, SignatureDecodeError
from oracle_attest.subspecs.containers import AggregateKey, AggregatePriceIntervalEntry
from oracle_attest.subspecs.storage import Database, StorageError

from .errors import InvalidSignatureError, MalformedStoredSignatureError, StorageFailureError

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def call_repository(fn: Callable[..., T], *args: object) -> T:
    """
    Run one repository call on a worker thread.

    Raises:
        StorageFailureError: If the repository raises StorageError.
    """
    try:
        return await asyncio.to_thread(fn, *args)
    except StorageError as exc:
        raise StorageFailureError(f"Storage operation failed: {exc}") from exc


@dataclass(slots=True)
class AggregateBucket:
    """Decoded state of one bucket."""

    key: AggregateKey
    """Bucket identity."""

    num_validators: int
    """Number of merges applied so far."""

    aggregate_signature: AggregateSignature
    """Group sum of every merged signature."""

    def to_entry(self) -> AggregatePriceIntervalEntry:
        """Storage projection of this bucket."""
        return AggregatePriceIntervalEntry(
            value=self.key.value,
            slot_number=self.key.slot_number,
            aggregate_signature=self.aggregate_signature.serialize().hex(),
            interval_size=self.key.interval_size,
            num_validators=self.num_validators,
        )


class KeyedLocks:
    """
    One asyncio lock per bucket key, created on demand.

    A lock is dropped again once nobody holds or waits for it, so the table
    only ever contains keys with merges in flight. Waiters on one key are
    served in arrival order; different keys never contend.
    """

    def __init__(self) -> None:
        self._locks: dict[AggregateKey, asyncio.Lock] = {}
        self._users: dict[AggregateKey, int] = {}

    @asynccontextmanager
    async def hold(self, key: AggregateKey) -> AsyncIterator[None]:
        """Hold the lock for `key` for the duration of the block."""
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._users[key] = self._users.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[key] -= 1
            if self._users[key] == 0:
                del self._users[key]
                del self._locks[key]

    def __len__(self) -> int:
        return len(self._locks)


@dataclass(slots=True)
class AggregateBucketStore:
    """
    Folds validated interval signatures into their aggregate buckets.

    Merges on the same key are serialized in arrival order, so no contribution
    is lost to an interleaved read-modify-write. Merges on different keys run
    independently.
    """

    database: Database
    """Repository holding the buckets."""

    _locks: KeyedLocks = field(default_factory=KeyedLocks)
    """Per-key merge locks."""

    async def get(self, key: AggregateKey) -> AggregateBucket | None:
        """
        Read and decode the bucket for `key`.

        Returns:
            The bucket, or None if no signature was ever merged for `key`.

        Raises:
            MalformedStoredSignatureError: If the stored aggregate does not decode.
            StorageFailureError: If the repository read fails.
        """
        entry = await call_repository(self.database.get_aggregate_bucket, key)
        if entry is None:
            return None

        # Subgroup checks are CPU work; keep them off the event loop.
        try:
            aggregate = await asyncio.to_thread(AggregateSignature.from_hex, entry.aggregate_signature)
        except SignatureDecodeError as exc:
            logger.error("Stored aggregate for %s is malformed: %s", key, exc)
            raise MalformedStoredSignatureError(
                f"Stored aggregate signature for {key} is malformed: {exc}"
            ) from exc

        return AggregateBucket(
            key=key,
            num_validators=entry.num_validators,
            aggregate_signature=aggregate,
        )

    async def merge(self, key: AggregateKey, signature: BLSSignature) -> AggregateBucket:
        """
        Fold `signature` into the bucket for `key`, creating the bucket if needed.

        The caller is responsible for having verified `signature` over the
        digest of the claim that `key` identifies.

        Returns:
            The bucket as written back.

        Raises:
            InvalidSignatureError: If `signature` is not a valid G2 point.
            MalformedStoredSignatureError: If the stored aggregate does not decode.
            StorageFailureError: If the repository read or write fails.
        """
        async with self._locks.hold(key):
            current = await self.get(key)
            if current is None:
                aggregate = AggregateSignature.infinity()
                num_validators = 1
            else:
                aggregate = current.aggregate_signature
                num_validators = current.num_validators + 1

            try:
                await asyncio.to_thread(aggregate.add_assign, signature)
            except SignatureDecodeError as exc:
                raise InvalidSignatureError("aggregate input") from exc

            bucket = AggregateBucket(
                key=key,
                num_validators=num_validators,
                aggregate_signature=aggregate,
            )
            await call_repository(self.database.upsert_aggregate_bucket, bucket.to_entry())

        metrics.aggregate_merges.inc()
        logger.debug("Merged signature into %s, num_validators=%d", key, num_validators)
        return bucket
