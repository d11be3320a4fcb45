"""Tests for the attestation API server."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from oracle_attest.subspecs.api import ApiServer, ApiServerConfig
from oracle_attest.subspecs.api.routes import ROUTES
from oracle_attest.subspecs.attestations import AttestationService
from oracle_attest.subspecs.bls import KeyPair
from oracle_attest.subspecs.containers import OracleMessage
from tests.oracle_attest.helpers import FailingDatabase, InMemoryDatabase, make_oracle_message


@pytest.fixture(scope="module")
def submission(keypair_a: KeyPair) -> OracleMessage:
    """Validator A with one interval claim on (100, 5, 10)."""
    return make_oracle_message(keypair_a, value=100, slot_number=5, intervals=[(100, 10, 5)])


def _serve(port: int, db: InMemoryDatabase) -> tuple[ApiServer, AttestationService]:
    service = AttestationService(db, verify_workers=1)
    return ApiServer(config=ApiServerConfig(host="127.0.0.1", port=port), service=service), service


class TestApiServerConfiguration:
    """Tests for API server configuration behavior."""

    def test_default_config_uses_standard_port(self) -> None:
        """Default configuration uses port 5053 and binds to all interfaces."""
        config = ApiServerConfig()

        assert config.host == "0.0.0.0"
        assert config.port == 5053

    def test_routes_table(self) -> None:
        """Every endpoint is registered under its method."""
        assert set(ROUTES) == {
            ("POST", "/oracle/v0/attestations"),
            ("GET", "/oracle/v0/attestations/price_value"),
            ("GET", "/oracle/v0/attestations/price_interval"),
            ("GET", "/oracle/v0/attestations/aggregate_price_interval"),
            ("GET", "/oracle/v0/health"),
            ("GET", "/metrics"),
        }


class TestHealthEndpoint:
    """Tests for the /oracle/v0/health endpoint behavior."""

    def test_returns_healthy_status_json(self) -> None:
        """Health endpoint returns JSON with healthy status."""

        async def run_test() -> None:
            server, service = _serve(15053, InMemoryDatabase())
            await server.start()

            try:
                async with httpx.AsyncClient() as client:
                    response = await client.get("http://127.0.0.1:15053/oracle/v0/health")

                    assert response.status_code == 200
                    assert response.json() == {
                        "status": "healthy",
                        "service": "oracle-attest-api",
                    }

            finally:
                server.stop()
                await asyncio.sleep(0.1)
                service.close()

        asyncio.run(run_test())


class TestSubmitEndpoint:
    """Tests for POST /oracle/v0/attestations."""

    def test_accepts_valid_submission(self, submission: OracleMessage) -> None:
        """A valid submission returns 200 with an empty body and is listed afterwards."""
        # A bucket holding one contribution stores exactly that signature.
        signature_hex = submission.interval_inclusion_messages[0].signature.hex()

        async def run_test() -> None:
            db = InMemoryDatabase()
            server, service = _serve(15054, db)
            await server.start()

            try:
                async with httpx.AsyncClient(timeout=60.0) as client:
                    base = "http://127.0.0.1:15054/oracle/v0/attestations"
                    response = await client.post(base, content=submission.model_dump_json())
                    assert response.status_code == 200
                    assert response.content == b""

                    values = (await client.get(f"{base}/price_value")).json()
                    assert len(values) == 1
                    assert values[0]["value"] == 100
                    assert values[0]["slot_number"] == 5

                    intervals = (await client.get(f"{base}/price_interval")).json()
                    assert intervals[0]["interval_size"] == 10

                    buckets = (await client.get(f"{base}/aggregate_price_interval")).json()
                    assert buckets == [
                        {
                            "value": 100,
                            "slot_number": 5,
                            "aggregate_signature": signature_hex,
                            "interval_size": 10,
                            "num_validators": 1,
                        }
                    ]

            finally:
                server.stop()
                await asyncio.sleep(0.1)
                service.close()

        asyncio.run(run_test())

    def test_malformed_body_is_400(self) -> None:
        """Bodies that do not parse are rejected before any verification."""

        async def run_test() -> None:
            server, service = _serve(15055, InMemoryDatabase())
            await server.start()

            try:
                async with httpx.AsyncClient() as client:
                    response = await client.post(
                        "http://127.0.0.1:15055/oracle/v0/attestations",
                        content=b'{"value_message": 1}',
                    )
                    assert response.status_code == 400
                    assert response.json()["error"] == "malformed_request"

            finally:
                server.stop()
                await asyncio.sleep(0.1)
                service.close()

        asyncio.run(run_test())

    def test_invalid_signature_is_400(self, submission: OracleMessage, keypair_b: KeyPair) -> None:
        """A submission under the wrong key reports invalid_signature."""
        forged = submission.model_copy(update={"validator_public_key": keypair_b.public_key})

        async def run_test() -> None:
            db = InMemoryDatabase()
            server, service = _serve(15056, db)
            await server.start()

            try:
                async with httpx.AsyncClient(timeout=60.0) as client:
                    response = await client.post(
                        "http://127.0.0.1:15056/oracle/v0/attestations",
                        content=forged.model_dump_json(),
                    )
                    assert response.status_code == 400
                    assert response.json()["error"] == "invalid_signature"
                    assert db.values == []

            finally:
                server.stop()
                await asyncio.sleep(0.1)
                service.close()

        asyncio.run(run_test())

    def test_storage_failure_is_500(self, submission: OracleMessage) -> None:
        """Storage faults stay distinguishable from signature faults."""

        async def run_test() -> None:
            db = FailingDatabase(fail_on=frozenset({"insert_value_attestation"}))
            server, service = _serve(15057, db)
            await server.start()

            try:
                async with httpx.AsyncClient(timeout=60.0) as client:
                    response = await client.post(
                        "http://127.0.0.1:15057/oracle/v0/attestations",
                        content=submission.model_dump_json(),
                    )
                    assert response.status_code == 500
                    assert response.json()["error"] == "storage_failure"

            finally:
                server.stop()
                await asyncio.sleep(0.1)
                service.close()

        asyncio.run(run_test())


class TestListingEndpoints:
    """Tests for the read-only listings."""

    def test_empty_listings(self) -> None:
        """A fresh service lists nothing."""

        async def run_test() -> None:
            server, service = _serve(15058, InMemoryDatabase())
            await server.start()

            try:
                async with httpx.AsyncClient() as client:
                    base = "http://127.0.0.1:15058/oracle/v0/attestations"
                    for suffix in ("price_value", "price_interval", "aggregate_price_interval"):
                        response = await client.get(f"{base}/{suffix}")
                        assert response.status_code == 200
                        assert response.json() == []

            finally:
                server.stop()
                await asyncio.sleep(0.1)
                service.close()

        asyncio.run(run_test())

    def test_listing_storage_failure_is_500(self) -> None:
        """A failing read is reported with its kind."""

        async def run_test() -> None:
            db = FailingDatabase(fail_on=frozenset({"get_price_value_attestations"}))
            server, service = _serve(15059, db)
            await server.start()

            try:
                async with httpx.AsyncClient() as client:
                    response = await client.get(
                        "http://127.0.0.1:15059/oracle/v0/attestations/price_value"
                    )
                    assert response.status_code == 500
                    assert response.json()["error"] == "storage_failure"

            finally:
                server.stop()
                await asyncio.sleep(0.1)
                service.close()

        asyncio.run(run_test())


class TestMetricsEndpoint:
    """Tests for the /metrics endpoint."""

    def test_exposes_oracle_metrics(self) -> None:
        """Metrics are served in Prometheus text format."""

        async def run_test() -> None:
            server, service = _serve(15060, InMemoryDatabase())
            await server.start()

            try:
                async with httpx.AsyncClient() as client:
                    response = await client.get("http://127.0.0.1:15060/metrics")
                    assert response.status_code == 200
                    assert response.headers["content-type"].startswith("text/plain")
                    assert "oracle_submissions_received_total" in response.text

            finally:
                server.stop()
                await asyncio.sleep(0.1)
                service.close()

        asyncio.run(run_test())
