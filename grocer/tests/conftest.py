import pytest
from fastapi.testclient import TestClient

from grocer.api import deps
from grocer.api.api_run import app
from grocer.infra.Geocoding_Client import GeocodingClient
from grocer.infra.Local_Storage import LocalStorage
from grocer.tests.fake_backend import FakeBackend


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def storage(tmp_path):
    return LocalStorage(tmp_path / "device")


@pytest.fixture
def api(backend, storage, monkeypatch):
    """TestClient wired to the fake remote store, a temp storage dir and no geocoder."""
    monkeypatch.setattr(deps, "build_client", backend.client_factory)
    app.dependency_overrides[deps.get_storage] = lambda: storage
    app.dependency_overrides[deps.get_geocoder] = lambda: GeocodingClient(api_key="")
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()
