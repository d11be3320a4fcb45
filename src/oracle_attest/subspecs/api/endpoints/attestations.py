"""Attestation endpoint handlers."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Final

from aiohttp import web
from pydantic import ValidationError

from oracle_attest.subspecs.attestations import AttestationError, AttestationService, RejectionKind
from oracle_attest.subspecs.containers import OracleMessage
from oracle_attest.types import StrictBaseModel

logger = logging.getLogger(__name__)

SERVICE_KEY: Final = web.AppKey("service", AttestationService)
"""Application slot holding the attestation service."""

MALFORMED_REQUEST: Final = "malformed_request"
"""Error kind for bodies that do not parse as a submission."""

STATUS_BY_KIND: Final[dict[RejectionKind, int]] = {
    RejectionKind.INVALID_SIGNATURE: 400,
    RejectionKind.MALFORMED_STORED_SIGNATURE: 500,
    RejectionKind.STORAGE_FAILURE: 500,
}
"""HTTP status returned for each rejection kind."""


def _error(kind: str, detail: str, status: int) -> web.Response:
    return web.json_response({"error": kind, "detail": detail}, status=status)


def _rows(rows: Sequence[StrictBaseModel]) -> web.Response:
    return web.json_response([row.model_dump(mode="json") for row in rows])


async def handle_submit(request: web.Request) -> web.Response:
    """
    Handle an oracle message submission.

    Request: JSON OracleMessage with a signed value claim, a list of signed
    interval claims and the validator public key. Keys and signatures are hex
    strings with or without a '0x' prefix.

    Response: empty body on success, otherwise {"error": <kind>, "detail": <text>}.

    Status Codes:
        200 OK: Every claim verified and was stored.
        400 Bad Request: Malformed body or invalid signature.
        500 Internal Server Error: Storage failure or malformed stored aggregate.
    """
    service = request.app[SERVICE_KEY]

    body = await request.read()
    try:
        message = OracleMessage.model_validate_json(body)
    except ValidationError as e:
        logger.debug("Malformed submission: %s", e)
        return _error(MALFORMED_REQUEST, str(e), 400)

    try:
        await service.submit(message)
    except AttestationError as e:
        return _error(e.kind.value, e.message, STATUS_BY_KIND[e.kind])

    return web.Response(status=200)


async def handle_price_values(request: web.Request) -> web.Response:
    """
    Handle the value attestation listing.

    Response: JSON array of {validator_public_key, value, slot_number, signature}.

    Status Codes:
        200 OK: Rows returned in insertion order.
        500 Internal Server Error: Storage failure.
    """
    service = request.app[SERVICE_KEY]
    try:
        rows = await service.price_value_attestations()
    except AttestationError as e:
        return _error(e.kind.value, e.message, STATUS_BY_KIND[e.kind])
    return _rows(rows)


async def handle_price_intervals(request: web.Request) -> web.Response:
    """
    Handle the interval attestation listing.

    Response: JSON array of
    {validator_public_key, value, slot_number, signature, interval_size}.

    Status Codes:
        200 OK: Rows returned in insertion order.
        500 Internal Server Error: Storage failure.
    """
    service = request.app[SERVICE_KEY]
    try:
        rows = await service.price_interval_attestations()
    except AttestationError as e:
        return _error(e.kind.value, e.message, STATUS_BY_KIND[e.kind])
    return _rows(rows)


async def handle_aggregates(request: web.Request) -> web.Response:
    """
    Handle the aggregate bucket listing.

    Response: JSON array of
    {value, slot_number, aggregate_signature, interval_size, num_validators}.

    Status Codes:
        200 OK: Buckets returned in creation order.
        500 Internal Server Error: Storage failure.
    """
    service = request.app[SERVICE_KEY]
    try:
        rows = await service.aggregate_price_interval_attestations()
    except AttestationError as e:
        return _error(e.kind.value, e.message, STATUS_BY_KIND[e.kind])
    return _rows(rows)
