"""
Rejection kinds for the attestation pipeline.

Every failure the pipeline reports carries one `RejectionKind`. The HTTP layer
may collapse kinds into coarse status codes; the pipeline never does.
"""

from __future__ import annotations

from enum import Enum
from typing import ClassVar


class RejectionKind(str, Enum):
    """Why a submission or merge was not applied."""

    INVALID_SIGNATURE = "invalid_signature"
    """A signature does not match its claim. Definitional, never transient."""

    MALFORMED_STORED_SIGNATURE = "malformed_stored_signature"
    """A persisted aggregate no longer decodes. Data-integrity fault."""

    STORAGE_FAILURE = "storage_failure"
    """The repository failed to read or write."""


class AttestationError(Exception):
    """
    Base exception for all attestation pipeline failures.

    Attributes:
        kind: Which of the rejection kinds occurred.
        message: Human-readable error description.
    """

    kind: ClassVar[RejectionKind]

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r})"


class InvalidSignatureError(AttestationError):
    """
    Raised when a claim's signature does not verify.

    Attributes:
        claim: Which claim failed ("value" or "interval[<index>]").
    """

    kind = RejectionKind.INVALID_SIGNATURE

    def __init__(self, claim: str) -> None:
        self.claim = claim
        super().__init__(f"Invalid signature on {claim} claim")


class MalformedStoredSignatureError(AttestationError):
    """Raised when a stored aggregate signature cannot be decoded."""

    kind = RejectionKind.MALFORMED_STORED_SIGNATURE


class StorageFailureError(AttestationError):
    """Raised when a repository read or write fails."""

    kind = RejectionKind.STORAGE_FAILURE
