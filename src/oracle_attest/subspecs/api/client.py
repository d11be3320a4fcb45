"""
HTTP client for the attestation API.

Validators use it to submit signed oracle messages; price-feed readers use it
to pull the stored rows and aggregate buckets.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from oracle_attest.subspecs.containers import (
    AggregatePriceIntervalEntry,
    OracleMessage,
    PriceIntervalEntry,
    PriceValueEntry,
)

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0
"""HTTP request timeout in seconds. Submissions wait on pairing checks."""

ATTESTATIONS_ENDPOINT = "/oracle/v0/attestations"
"""Submission endpoint; listings live under it."""

HEALTH_ENDPOINT = "/oracle/v0/health"
"""Health check endpoint."""


class OracleApiError(Exception):
    """
    Error talking to the attestation API.

    Attributes:
        status_code: HTTP status, or None if no response arrived.
        kind: Error kind reported by the server, or None if it sent none.
    """

    def __init__(self, message: str, status_code: int | None = None, kind: str | None = None):
        self.status_code = status_code
        self.kind = kind
        super().__init__(message)


class OracleApiClient:
    """Async client bound to one API base URL."""

    def __init__(self, base_url: str, timeout: float = DEFAULT_TIMEOUT) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        url = f"{self.base_url}{path}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.request(method, url, **kwargs)
                response.raise_for_status()
                return response
        except httpx.RequestError as exc:
            raise OracleApiError(f"Network error while connecting to {url}: {exc}") from exc
        except httpx.HTTPStatusError as exc:
            kind = None
            try:
                kind = exc.response.json().get("error")
            except ValueError:
                pass
            raise OracleApiError(
                f"HTTP error {exc.response.status_code}: {exc.response.text[:200]}",
                status_code=exc.response.status_code,
                kind=kind,
            ) from exc

    async def submit(self, message: OracleMessage) -> None:
        """
        Submit one signed oracle message.

        Raises:
            OracleApiError: If the server rejects the message or cannot be reached.
        """
        await self._request("POST", ATTESTATIONS_ENDPOINT, json=message.model_dump(mode="json"))
        logger.debug(
            "Submitted message for slot %d to %s",
            message.value_message.message.slot_number,
            self.base_url,
        )

    async def get_price_value_attestations(self) -> list[PriceValueEntry]:
        """Fetch every stored value attestation."""
        response = await self._request("GET", f"{ATTESTATIONS_ENDPOINT}/price_value")
        return [PriceValueEntry.model_validate(row) for row in response.json()]

    async def get_price_interval_attestations(self) -> list[PriceIntervalEntry]:
        """Fetch every stored interval attestation."""
        response = await self._request("GET", f"{ATTESTATIONS_ENDPOINT}/price_interval")
        return [PriceIntervalEntry.model_validate(row) for row in response.json()]

    async def get_aggregate_price_interval_attestations(self) -> list[AggregatePriceIntervalEntry]:
        """Fetch every aggregate bucket."""
        response = await self._request("GET", f"{ATTESTATIONS_ENDPOINT}/aggregate_price_interval")
        return [AggregatePriceIntervalEntry.model_validate(row) for row in response.json()]

    async def health(self) -> dict[str, str]:
        """Fetch the health status document."""
        response = await self._request("GET", HEALTH_ENDPOINT)
        return response.json()
