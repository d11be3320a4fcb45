"""
Oracle message containers.

A validator reports two kinds of claims:

- A price value claim: "my price was X at slot S."
- Interval inclusion claims: "the price stayed at V for N slots ending at S."

Each claim is signed on its own, over the digest of its fixed-layout encoding,
and the claims of one report travel together in an `OracleMessage`.
"""

from __future__ import annotations

from collections.abc import Sequence

from pydantic import Field

from oracle_attest.subspecs.bls import BLSPublicKey, BLSSignature, KeyPair
from oracle_attest.subspecs.digest import message_digest
from oracle_attest.types import Container, StrictBaseModel, Uint64


class Price(Container):
    """A reported price."""

    value: Uint64
    """Price in the feed's smallest unit."""


class PriceValueMessage(Container):
    """Claim that a validator observed `price` at `slot_number`."""

    price: Price
    """The observed price."""

    slot_number: Uint64
    """Slot at which the price was observed."""


class IntervalInclusionMessage(Container):
    """Claim that the price stayed at `value` for `interval_size` slots ending at `slot_number`."""

    value: Uint64
    """The price that held across the interval."""

    interval_size: Uint64
    """Number of slots in the interval."""

    slot_number: Uint64
    """Last slot of the interval."""


class SignedPriceValueMessage(StrictBaseModel):
    """A price value claim bundled with its signature."""

    message: PriceValueMessage
    signature: BLSSignature

    @classmethod
    def create(cls, keypair: KeyPair, message: PriceValueMessage) -> SignedPriceValueMessage:
        """Sign `message` with `keypair`."""
        return cls(message=message, signature=keypair.sign(bytes(message_digest(message))))


class SignedIntervalInclusionMessage(StrictBaseModel):
    """An interval inclusion claim bundled with its signature."""

    message: IntervalInclusionMessage
    signature: BLSSignature

    @classmethod
    def create(
        cls, keypair: KeyPair, message: IntervalInclusionMessage
    ) -> SignedIntervalInclusionMessage:
        """Sign `message` with `keypair`."""
        return cls(message=message, signature=keypair.sign(bytes(message_digest(message))))


class OracleMessage(StrictBaseModel):
    """One validator's report: a value claim plus any number of interval claims."""

    value_message: SignedPriceValueMessage
    """The signed price value claim."""

    interval_inclusion_messages: list[SignedIntervalInclusionMessage] = Field(
        default_factory=list
    )
    """Signed interval claims, processed in order."""

    validator_public_key: BLSPublicKey
    """Key every signature in the report must verify against."""

    @classmethod
    def create(
        cls,
        keypair: KeyPair,
        value_message: PriceValueMessage,
        interval_messages: Sequence[IntervalInclusionMessage] = (),
    ) -> OracleMessage:
        """
        Build a fully signed report for `keypair`.

        This is the validator side of the protocol. The aggregator only verifies.
        """
        return cls(
            value_message=SignedPriceValueMessage.create(keypair, value_message),
            interval_inclusion_messages=[
                SignedIntervalInclusionMessage.create(keypair, m) for m in interval_messages
            ],
            validator_public_key=keypair.public_key,
        )
