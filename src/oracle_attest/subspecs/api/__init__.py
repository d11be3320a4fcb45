"""
API server and client for the attestation service.

Provides HTTP endpoints for:
- /oracle/v0/attestations - Submit signed oracle messages, list stored rows
- /oracle/v0/health - Health check endpoint
- /metrics - Prometheus metrics endpoint
"""

from .client import OracleApiClient, OracleApiError
from .server import ApiServer, ApiServerConfig, create_app

__all__ = [
    "ApiServer",
    "ApiServerConfig",
    "OracleApiClient",
    "OracleApiError",
    "create_app",
]
