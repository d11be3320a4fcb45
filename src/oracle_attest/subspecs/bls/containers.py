"""BLS public key and signature containers."""

from __future__ import annotations

from py_ecc.bls import G2ProofOfPossession

from oracle_attest.types import Bytes48, Bytes96


class BLSPublicKey(Bytes48):
    """Compressed BLS12-381 G1 point identifying a validator."""


class BLSSignature(Bytes96):
    """Compressed BLS12-381 G2 point: a signature over a 32-byte digest."""

    def verify(self, public_key: BLSPublicKey, message: bytes) -> bool:
        """
        Verify the signature with the proof-of-possession ciphersuite.

        Keys or signatures that do not decode to valid subgroup points verify
        as False; a negative answer is final, never transient.
        """
        return G2ProofOfPossession.Verify(bytes(public_key), message, bytes(self))
