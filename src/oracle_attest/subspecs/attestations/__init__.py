"""
Attestation pipeline: claim validation, bucket aggregation and the submission service.
"""

from .aggregator import AggregateBucket, AggregateBucketStore, KeyedLocks, call_repository
from .errors import (
    AttestationError,
    InvalidSignatureError,
    MalformedStoredSignatureError,
    RejectionKind,
    StorageFailureError,
)
from .service import AttestationService
from .validation import sign_message, validate_message

__all__ = [
    "AggregateBucket",
    "AggregateBucketStore",
    "AttestationError",
    "AttestationService",
    "InvalidSignatureError",
    "KeyedLocks",
    "MalformedStoredSignatureError",
    "RejectionKind",
    "StorageFailureError",
    "call_repository",
    "sign_message",
    "validate_message",
]
