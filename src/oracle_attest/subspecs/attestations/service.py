"""
Attestation service.

Turns one validator submission into stored rows and bucket merges.

How It Works
------------
1. Verify the value claim. A failure rejects the whole submission.
2. Verify every interval claim concurrently on the verification pool.
   The first failing index rejects the whole submission.
3. Persist the value row.
4. For each interval claim in order: persist its row, then merge its
   signature into the bucket for (value, slot_number, interval_size).

Nothing is written until every signature has verified. Once persistence
starts it is per claim: a storage failure in step 3 or 4 leaves the claims
already written in place and is reported to the caller without rollback.
"""

from __future__ import annotations

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

from oracle_attest.subspecs import metrics
from oracle_attest.subspecs.bls import BLSPublicKey, BLSSignature
from oracle_attest.subspecs.containers import (
    AggregateKey,
    AggregatePriceIntervalEntry,
    OracleMessage,
    PriceIntervalEntry,
    PriceValueEntry,
    SignedIntervalInclusionMessage,
)
from oracle_attest.subspecs.storage import Database
from oracle_attest.types import Container

from .aggregator import AggregateBucketStore, call_repository
from .errors import AttestationError, InvalidSignatureError
from .validation import validate_message

logger = logging.getLogger(__name__)


def _timed_validate(public_key: BLSPublicKey, message: Container, signature: BLSSignature) -> bool:
    with metrics.signature_verification_time.time():
        return validate_message(public_key, message, signature)


@dataclass(slots=True)
class AttestationService:
    """
    Validates submissions and applies them to the repository.

    Owns the verification pool and the bucket store. One instance serves
    every request of a running process.
    """

    database: Database
    """Repository for rows and buckets."""

    verify_workers: int = 4
    """Size of the verification thread pool."""

    _executor: ThreadPoolExecutor = field(init=False)
    """Pool running pairing checks off the event loop."""

    _buckets: AggregateBucketStore = field(init=False)
    """Bucket store sharing the repository."""

    def __post_init__(self) -> None:
        if self.verify_workers < 1:
            raise ValueError(f"verify_workers must be at least 1, got {self.verify_workers}")
        self._executor = ThreadPoolExecutor(
            max_workers=self.verify_workers,
            thread_name_prefix="oracle-verify",
        )
        self._buckets = AggregateBucketStore(self.database)

    @property
    def buckets(self) -> AggregateBucketStore:
        """The aggregate bucket store."""
        return self._buckets

    # -------------------------------------------------------------------------
    # Submission
    # -------------------------------------------------------------------------

    async def submit(self, message: OracleMessage) -> None:
        """
        Verify and apply one submission.

        Raises:
            InvalidSignatureError: If any claim fails verification. Nothing is written.
            MalformedStoredSignatureError: If a target bucket holds an undecodable aggregate.
            StorageFailureError: If a repository call fails.
        """
        metrics.submissions_received.inc()
        public_key = message.validator_public_key
        try:
            await self._verify(message)
            await self._persist(message)
        except InvalidSignatureError as exc:
            metrics.submissions_rejected.labels(kind=exc.kind.value).inc()
            logger.warning("Rejected submission from %s: %s", public_key.hex()[:16], exc.message)
            raise
        except AttestationError as exc:
            metrics.submissions_rejected.labels(kind=exc.kind.value).inc()
            logger.error("Failed to apply submission from %s: %s", public_key.hex()[:16], exc.message)
            raise

        logger.info(
            "Accepted submission from %s: slot=%d value=%d intervals=%d",
            public_key.hex()[:16],
            int(message.value_message.message.slot_number),
            int(message.value_message.message.price.value),
            len(message.interval_inclusion_messages),
        )

    async def _verify(self, message: OracleMessage) -> None:
        loop = asyncio.get_running_loop()
        public_key = message.validator_public_key

        value = message.value_message
        if not await loop.run_in_executor(
            self._executor, _timed_validate, public_key, value.message, value.signature
        ):
            raise InvalidSignatureError("value")

        results = await asyncio.gather(
            *(
                loop.run_in_executor(
                    self._executor, _timed_validate, public_key, signed.message, signed.signature
                )
                for signed in message.interval_inclusion_messages
            )
        )
        for index, ok in enumerate(results):
            if not ok:
                raise InvalidSignatureError(f"interval[{index}]")

    async def _persist(self, message: OracleMessage) -> None:
        public_key_hex = message.validator_public_key.hex()

        value = message.value_message
        await call_repository(
            self.database.insert_value_attestation,
            PriceValueEntry(
                validator_public_key=public_key_hex,
                value=int(value.message.price.value),
                slot_number=int(value.message.slot_number),
                signature=value.signature.hex(),
            ),
        )
        metrics.claims_persisted.labels(claim="value").inc()

        for signed in message.interval_inclusion_messages:
            await self._persist_interval(public_key_hex, signed)

    async def _persist_interval(
        self, public_key_hex: str, signed: SignedIntervalInclusionMessage
    ) -> None:
        claim = signed.message
        await call_repository(
            self.database.insert_interval_attestation,
            PriceIntervalEntry(
                validator_public_key=public_key_hex,
                value=int(claim.value),
                slot_number=int(claim.slot_number),
                signature=signed.signature.hex(),
                interval_size=int(claim.interval_size),
            ),
        )
        metrics.claims_persisted.labels(claim="interval").inc()
        await self._buckets.merge(AggregateKey.from_message(claim), signed.signature)

    # -------------------------------------------------------------------------
    # Listings
    # -------------------------------------------------------------------------

    async def price_value_attestations(self) -> list[PriceValueEntry]:
        """All value rows in insertion order."""
        return await call_repository(self.database.get_price_value_attestations)

    async def price_interval_attestations(self) -> list[PriceIntervalEntry]:
        """All interval rows in insertion order."""
        return await call_repository(self.database.get_price_interval_attestations)

    async def aggregate_price_interval_attestations(self) -> list[AggregatePriceIntervalEntry]:
        """All buckets in creation order, aggregates as stored."""
        return await call_repository(self.database.get_aggregate_price_interval_attestations)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def close(self) -> None:
        """Shut down the verification pool. The repository is left open."""
        self._executor.shutdown(wait=True)

