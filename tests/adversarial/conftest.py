"""
Shared fixtures for adversarial tests.

Provides a fully wired app whose clock is advanced manually.
"""

from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient

from src.adapters.ledger.memory import ManualClock
from src.api.dependencies import get_clock
from src.api.main import app

# Module-level marker for all adversarial tests
pytestmark = pytest.mark.adversarial


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def client(clock: ManualClock) -> Generator[TestClient, None, None]:
    """Create test client with a fresh registrar and a manual clock."""
    app.dependency_overrides[get_clock] = lambda: clock
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()
