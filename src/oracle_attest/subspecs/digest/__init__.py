"""Deterministic message digests that signatures are computed over."""

from .hash import message_digest

__all__ = [
    "message_digest",
]
