"""
Tests for the HTTP API.
"""
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from dagateway.api.app import build_app, create_app
from dagateway.core.config import GatewayConfig
from dagateway.core.da.errors import DecodeError, EnvelopeCorruptionError, NetworkError
from dagateway.services.da import DaService
from dagateway.services.health import HealthCheckService


@pytest.fixture
def api(memory_client, metrics):
    """Create a test client backed by the in-memory DA client."""
    app = create_app(DaService(memory_client, metrics), HealthCheckService(memory_client))
    return TestClient(app)


@pytest.fixture
def failing_service():
    return MagicMock(spec=DaService)


@pytest.fixture
def failing_api(failing_service, memory_client):
    return TestClient(create_app(failing_service, HealthCheckService(memory_client)))


def test_dispatch_and_fetch(api, metrics):
    response = api.post("/da/dispatch", json={"batch_number": 1, "data": "68656c6c6f"})
    assert response.status_code == 200
    blob_id = response.json()["blob_id"]
    assert len(blob_id) == 80

    response = api.get(f"/da/inclusion/{blob_id}")
    assert response.status_code == 200
    assert response.json() == {"data": "68656c6c6f"}
    assert metrics.value("da_dispatched_blobs_total") == 1.0


@pytest.mark.parametrize("data", ["xyz", "de ad", "abc"])
def test_dispatch_invalid_hex(api, data):
    response = api.post("/da/dispatch", json={"batch_number": 1, "data": data})

    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid data format, must be a hex string"


def test_dispatch_invalid_body(api):
    response = api.post("/da/dispatch", json={"data": "00"})

    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid JSON body"


def test_dispatch_too_large(api):
    response = api.post("/da/dispatch", json={"batch_number": 1, "data": "00" * 2048})

    assert response.status_code == 500
    assert response.json()["retriable"] is False


def test_unknown_blob_id(api):
    response = api.get("/da/inclusion/deadbeef")
    assert response.status_code == 404


def test_retriable_error(failing_api, failing_service):
    failing_service.get_inclusion_data.side_effect = NetworkError("node timed out")

    response = failing_api.get("/da/inclusion/" + "00" * 40)

    assert response.status_code == 503
    body = response.json()
    assert body["retriable"] is True
    assert "retriable data availability client error" in body["detail"]


def test_decode_error(failing_api, failing_service):
    failing_service.get_inclusion_data.side_effect = DecodeError("bad id")

    response = failing_api.get("/da/inclusion/zz")

    assert response.status_code == 400
    assert response.json()["retriable"] is False


def test_envelope_corruption(failing_api, failing_service):
    failing_service.get_inclusion_data.side_effect = EnvelopeCorruptionError("dangling leaf")

    response = failing_api.get("/da/inclusion/" + "00" * 40)

    assert response.status_code == 500
    assert response.json()["retriable"] is False


def test_dispatch_retriable_error(failing_api, failing_service):
    failing_service.dispatch_blob.side_effect = NetworkError("submit failed")

    response = failing_api.post("/da/dispatch", json={"batch_number": 2, "data": "00"})

    assert response.status_code == 503
    assert response.json()["retriable"] is True


def test_health(api):
    response = api.get("/health")

    assert response.status_code == 200
    assert response.json() == {
        "da": {"status": True, "message": "Data availability is healthy"}
    }


def test_build_app_from_config(metrics):
    app = build_app(GatewayConfig(), metrics)

    assert app.state.metrics is metrics
    client = TestClient(app)
    blob_id = client.post("/da/dispatch", json={"batch_number": 1, "data": "abcd"}).json()["blob_id"]
    assert client.get(f"/da/inclusion/{blob_id}").json() == {"data": "abcd"}
