"""Tests for the aggregate bucket store."""

from __future__ import annotations

import asyncio

import pytest

from oracle_attest.subspecs import metrics
from oracle_attest.subspecs.attestations import (
    AggregateBucketStore,
    InvalidSignatureError,
    KeyedLocks,
    MalformedStoredSignatureError,
    RejectionKind,
    StorageFailureError,
)
from oracle_attest.subspecs.bls import AggregateSignature, BLSSignature, KeyPair
from oracle_attest.subspecs.containers import (
    AggregateKey,
    AggregatePriceIntervalEntry,
    IntervalInclusionMessage,
)
from oracle_attest.subspecs.digest import message_digest
from tests.oracle_attest.helpers import FailingDatabase, InMemoryDatabase, SlowDatabase


def _plant(db: InMemoryDatabase, key: AggregateKey, aggregate_hex: str, count: int = 1) -> None:
    db.upsert_aggregate_bucket(
        AggregatePriceIntervalEntry(
            value=key.value,
            slot_number=key.slot_number,
            aggregate_signature=aggregate_hex,
            interval_size=key.interval_size,
            num_validators=count,
        )
    )


class TestMerge:
    """Tests for the read-modify-write merge."""

    def test_get_absent_returns_none(
        self, memory_db: InMemoryDatabase, interval_key: AggregateKey
    ) -> None:
        """A key nobody merged into has no bucket."""
        store = AggregateBucketStore(memory_db)
        assert asyncio.run(store.get(interval_key)) is None

    def test_first_merge_creates_bucket(
        self,
        memory_db: InMemoryDatabase,
        interval_key: AggregateKey,
        signature_a: BLSSignature,
    ) -> None:
        """The first merge gives count 1 and the input signature."""
        store = AggregateBucketStore(memory_db)
        bucket = asyncio.run(store.merge(interval_key, signature_a))

        assert bucket.num_validators == 1
        assert bucket.aggregate_signature.serialize() == signature_a

        stored = memory_db.buckets[interval_key]
        assert stored.num_validators == 1
        assert stored.aggregate_signature == signature_a.hex()

    def test_two_validators(
        self,
        memory_db: InMemoryDatabase,
        interval_key: AggregateKey,
        interval_claim: IntervalInclusionMessage,
        keypair_a: KeyPair,
        keypair_b: KeyPair,
        signature_a: BLSSignature,
        signature_b: BLSSignature,
    ) -> None:
        """A then B on (100, 5, 10) gives count 2 and s_A + s_B."""
        store = AggregateBucketStore(memory_db)

        async def run_test() -> None:
            await store.merge(interval_key, signature_a)
            await store.merge(interval_key, signature_b)

        asyncio.run(run_test())

        bucket = asyncio.run(store.get(interval_key))
        assert bucket is not None
        assert bucket.num_validators == 2
        assert bucket.aggregate_signature.verify(
            [keypair_a.public_key, keypair_b.public_key],
            bytes(message_digest(interval_claim)),
        )

    def test_keys_are_independent(
        self,
        memory_db: InMemoryDatabase,
        interval_key: AggregateKey,
        signature_a: BLSSignature,
    ) -> None:
        """Merging into one key leaves every other key absent."""
        store = AggregateBucketStore(memory_db)
        other = AggregateKey(value=101, slot_number=5, interval_size=10)

        asyncio.run(store.merge(interval_key, signature_a))

        assert asyncio.run(store.get(other)) is None

    def test_duplicate_contribution_double_counts(
        self,
        memory_db: InMemoryDatabase,
        interval_key: AggregateKey,
        signature_a: BLSSignature,
    ) -> None:
        """The bucket does not track contributors; a repeat counts twice."""
        store = AggregateBucketStore(memory_db)

        async def run_test() -> None:
            await store.merge(interval_key, signature_a)
            await store.merge(interval_key, signature_a)

        asyncio.run(run_test())

        expected = AggregateSignature.infinity()
        expected.add_assign(signature_a)
        expected.add_assign(signature_a)

        assert memory_db.buckets[interval_key].num_validators == 2
        assert memory_db.buckets[interval_key].aggregate_signature == expected.serialize().hex()

    def test_merge_increments_metric(
        self,
        memory_db: InMemoryDatabase,
        interval_key: AggregateKey,
        signature_a: BLSSignature,
    ) -> None:
        """Every merge is counted."""
        store = AggregateBucketStore(memory_db)
        before = metrics.aggregate_merges._value.get()
        asyncio.run(store.merge(interval_key, signature_a))
        assert metrics.aggregate_merges._value.get() == before + 1

    def test_non_point_signature_rejected(
        self, memory_db: InMemoryDatabase, interval_key: AggregateKey
    ) -> None:
        """A signature that is not a G2 point is an invalid signature, nothing is written."""
        store = AggregateBucketStore(memory_db)
        with pytest.raises(InvalidSignatureError):
            asyncio.run(store.merge(interval_key, BLSSignature(b"\x00" * 96)))
        assert interval_key not in memory_db.buckets


class TestConcurrency:
    """Tests for per-key serialization."""

    def test_concurrent_merges_lose_no_update(
        self,
        interval_key: AggregateKey,
        interval_claim: IntervalInclusionMessage,
        keypair_a: KeyPair,
        keypair_b: KeyPair,
        keypair_c: KeyPair,
        signature_a: BLSSignature,
        signature_b: BLSSignature,
        signature_c: BLSSignature,
    ) -> None:
        """Merges racing on one key all land, even with slow storage."""
        db = SlowDatabase(delay=0.05)
        store = AggregateBucketStore(db)

        async def run_test() -> None:
            await asyncio.gather(
                store.merge(interval_key, signature_a),
                store.merge(interval_key, signature_b),
                store.merge(interval_key, signature_c),
            )

        asyncio.run(run_test())

        stored = db.buckets[interval_key]
        assert stored.num_validators == 3
        aggregate = AggregateSignature.from_hex(stored.aggregate_signature)
        assert aggregate.verify(
            [keypair_a.public_key, keypair_b.public_key, keypair_c.public_key],
            bytes(message_digest(interval_claim)),
        )

    def test_lock_table_is_emptied(
        self, memory_db: InMemoryDatabase, interval_key: AggregateKey, signature_a: BLSSignature
    ) -> None:
        """Idle keys hold no lock."""
        store = AggregateBucketStore(memory_db)
        asyncio.run(store.merge(interval_key, signature_a))
        assert len(store._locks) == 0


class TestKeyedLocks:
    """Tests for the per-key lock table."""

    def test_same_key_is_exclusive(self) -> None:
        """Holders of one key run one at a time, in arrival order."""
        locks = KeyedLocks()
        key = AggregateKey(1, 2, 3)
        events: list[str] = []

        async def worker(name: str) -> None:
            async with locks.hold(key):
                events.append(f"{name}-in")
                await asyncio.sleep(0.01)
                events.append(f"{name}-out")

        async def run_test() -> None:
            await asyncio.gather(worker("a"), worker("b"))

        asyncio.run(run_test())
        assert events == ["a-in", "a-out", "b-in", "b-out"]
        assert len(locks) == 0

    def test_different_keys_do_not_block(self) -> None:
        """A holder of one key never waits on another key."""
        locks = KeyedLocks()

        async def run_test() -> None:
            async with locks.hold(AggregateKey(1, 2, 3)):
                await asyncio.wait_for(_enter(locks, AggregateKey(4, 5, 6)), timeout=1.0)
                assert len(locks) == 1

        asyncio.run(run_test())
        assert len(locks) == 0


async def _enter(locks: KeyedLocks, key: AggregateKey) -> None:
    async with locks.hold(key):
        pass


class TestFailures:
    """Tests for distinct failure kinds."""

    @pytest.mark.parametrize(
        "stored",
        [
            "not-hex",
            "00" * 95,
            "00" * 96,
        ],
    )
    def test_malformed_stored_aggregate(
        self, memory_db: InMemoryDatabase, interval_key: AggregateKey, stored: str
    ) -> None:
        """A stored aggregate that does not decode is a data-integrity error, not absence."""
        _plant(memory_db, interval_key, stored)
        store = AggregateBucketStore(memory_db)

        with pytest.raises(MalformedStoredSignatureError) as exc_info:
            asyncio.run(store.get(interval_key))
        assert exc_info.value.kind is RejectionKind.MALFORMED_STORED_SIGNATURE

    def test_malformed_stored_aggregate_blocks_merge(
        self,
        memory_db: InMemoryDatabase,
        interval_key: AggregateKey,
        signature_a: BLSSignature,
    ) -> None:
        """A merge into a corrupt bucket fails and leaves the row untouched."""
        _plant(memory_db, interval_key, "zz", count=4)
        store = AggregateBucketStore(memory_db)

        with pytest.raises(MalformedStoredSignatureError):
            asyncio.run(store.merge(interval_key, signature_a))
        assert memory_db.buckets[interval_key].num_validators == 4
        assert memory_db.buckets[interval_key].aggregate_signature == "zz"

    def test_read_failure(self, interval_key: AggregateKey, signature_a: BLSSignature) -> None:
        """A failed bucket read surfaces as a storage failure."""
        db = FailingDatabase(fail_on=frozenset({"get_aggregate_bucket"}))
        store = AggregateBucketStore(db)

        with pytest.raises(StorageFailureError) as exc_info:
            asyncio.run(store.merge(interval_key, signature_a))
        assert exc_info.value.kind is RejectionKind.STORAGE_FAILURE

    def test_write_failure(self, interval_key: AggregateKey, signature_a: BLSSignature) -> None:
        """A failed upsert surfaces as a storage failure and is not retried."""
        db = FailingDatabase(fail_on=frozenset({"upsert_aggregate_bucket"}))
        store = AggregateBucketStore(db)

        with pytest.raises(StorageFailureError):
            asyncio.run(store.merge(interval_key, signature_a))
        assert db.calls["upsert_aggregate_bucket"] == 1
        assert interval_key not in db.buckets
