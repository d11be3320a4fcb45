"""Subspecifications for the price oracle attestation service."""

from .api import ApiServer, ApiServerConfig, OracleApiClient, OracleApiError
from .attestations import AttestationService

__all__ = [
    "ApiServer",
    "ApiServerConfig",
    "AttestationService",
    "OracleApiClient",
    "OracleApiError",
]
