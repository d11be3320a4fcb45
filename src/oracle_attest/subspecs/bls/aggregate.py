"""
Running BLS aggregate signatures.

An aggregate is the G2 group sum of individual signatures over the same
message. It starts at the identity (the point at infinity) and absorbs one
signature at a time, so it can be persisted between additions and resumed
later from its compressed encoding.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

from py_ecc.bls import G2ProofOfPossession
from py_ecc.bls.g2_primitives import G2_to_signature, signature_to_G2, subgroup_check
from py_ecc.optimized_bls12_381 import Z2, add
from typing_extensions import Self

from .containers import BLSPublicKey, BLSSignature

if TYPE_CHECKING:
    from py_ecc.fields import optimized_bls12_381_FQ2 as FQ2
    from py_ecc.typing import Optimized_Point3D

    # Projective G2 point as used by py_ecc's optimized curve arithmetic.
    G2Point = Optimized_Point3D[FQ2]


class SignatureDecodeError(ValueError):
    """Raised when bytes do not encode a valid G2 subgroup point."""


def decode_signature_point(data: bytes) -> G2Point:
    """
    Decode a compressed signature into a G2 point, checking subgroup membership.

    Raises:
        SignatureDecodeError: If the bytes have the wrong length, bad flags,
            an x-coordinate off the curve, or a point outside the subgroup.
    """
    if len(data) != BLSSignature.LENGTH:
        raise SignatureDecodeError(
            f"signature must be {BLSSignature.LENGTH} bytes, got {len(data)}"
        )
    try:
        point = signature_to_G2(data)
    except (ValueError, AssertionError) as exc:
        raise SignatureDecodeError(f"not a G2 point: {exc}") from exc
    if not subgroup_check(point):
        raise SignatureDecodeError("point is not in the G2 subgroup")
    return point


class AggregateSignature:
    """A mutable running sum of BLS signatures."""

    __slots__ = ("_point",)

    def __init__(self, point: G2Point = Z2) -> None:
        self._point = point

    @classmethod
    def infinity(cls) -> Self:
        """The group identity: an aggregate of zero signatures."""
        return cls(Z2)

    @classmethod
    def deserialize(cls, data: bytes) -> Self:
        """
        Resume an aggregate from its compressed encoding.

        Raises:
            SignatureDecodeError: If the encoding is not a valid subgroup point.
        """
        return cls(decode_signature_point(data))

    @classmethod
    def from_hex(cls, text: str) -> Self:
        """
        Resume an aggregate from a hex string, with or without a '0x' prefix.

        Raises:
            SignatureDecodeError: If the text is not hex or not a valid point.
        """
        try:
            data = bytes.fromhex(text.removeprefix("0x"))
        except ValueError as exc:
            raise SignatureDecodeError(f"not a hex string: {exc}") from exc
        return cls.deserialize(data)

    def add_assign(self, signature: BLSSignature) -> None:
        """
        Fold one signature into the aggregate.

        Raises:
            SignatureDecodeError: If the signature is not a valid subgroup point.
        """
        self._point = add(self._point, decode_signature_point(bytes(signature)))

    def serialize(self) -> BLSSignature:
        """Compressed encoding of the current sum."""
        return BLSSignature(G2_to_signature(self._point))

    def verify(self, public_keys: Sequence[BLSPublicKey], message: bytes) -> bool:
        """Check the aggregate against every signer's key over one shared message."""
        if not public_keys:
            return False
        return G2ProofOfPossession.FastAggregateVerify(
            [bytes(pk) for pk in public_keys], message, bytes(self.serialize())
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AggregateSignature):
            return NotImplemented
        return self.serialize() == other.serialize()

    def __repr__(self) -> str:
        return f"AggregateSignature({self.serialize().hex()})"
