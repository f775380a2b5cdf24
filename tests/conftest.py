import pytest
from fastapi.testclient import TestClient

from digipin_service import processing
from digipin_service.main import app


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


@pytest.fixture(autouse=True)
def reset_column_aliases():
    processing.column_aliases_cache = None
    yield
    processing.column_aliases_cache = None
