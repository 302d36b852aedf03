"""
Pytest fixtures for API tests.
"""
import pytest
from fastapi.testclient import TestClient

from api_gateway.main import create_app


@pytest.fixture
def app():
    """Fresh application per test, so state and overrides never leak."""
    return create_app()


@pytest.fixture
def client(app):
    """Test client with the application lifespan running."""
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
