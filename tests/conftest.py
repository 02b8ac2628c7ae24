import pytest
from fastapi.testclient import TestClient

from medlist.api.routes_parse import get_vision_client
from medlist.main import app

from tests.fakes import FakeVisionClient


@pytest.fixture
def fake_client():
    return FakeVisionClient()


@pytest.fixture
def api(fake_client):
    app.dependency_overrides[get_vision_client] = lambda: fake_client
    # no `with`: lifespan would build the real provider client
    yield TestClient(app)
    app.dependency_overrides.clear()
