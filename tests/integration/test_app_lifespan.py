"""
Integration tests for the application factory.

Runs the real lifespan with the console event sink, so no database
connection is required.
"""

import logging

import pytest
from fastapi.testclient import TestClient

from src.adapters.events.console import LoggingEventSink
from src.adapters.ledger.clock import BlockClock
from src.api.main import app
from src.domain.registrar import RegistrarService


@pytest.fixture
def client() -> TestClient:
    """Create test client with lifespan startup and shutdown."""
    with TestClient(app) as test_client:
        yield test_client


class TestLifespan:
    """Tests for startup wiring."""

    def test_registrar_wired_on_startup(self, client: TestClient) -> None:
        assert isinstance(app.state.registrar, RegistrarService)
        assert isinstance(app.state.clock, BlockClock)
        assert app.state.pool is None

    def test_console_sink_by_default(self, client: TestClient) -> None:
        assert isinstance(app.state.registrar._event_sink, LoggingEventSink)

    def test_fee_destinations_default_to_admin(self, client: TestClient) -> None:
        fees = app.state.registrar.get_fee_config()
        admin = app.state.registrar.config.admin
        assert fees.fee_recipient == admin
        assert fees.protocol_treasury == admin


class TestHealthEndpoint:
    """Tests for GET /health."""

    def test_health_without_database(self, client: TestClient) -> None:
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}


class TestRegisterThroughApp:
    """Smoke test of a registration through the fully wired app."""

    def test_register_logs_event(self, client: TestClient, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO):
            response = client.post("/v1/names", json={"label": "smoke-test"}, headers={"X-Account": "wallet_1"})

        assert response.status_code == 201
        assert response.json()["full_name"].startswith("smoke-test.")
        assert "[EVENT] NameRegistered" in caplog.text
