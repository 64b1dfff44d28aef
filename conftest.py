import os
import tempfile

# keep test runs off the default SQLite file and the repo's ./logs directory
os.environ.setdefault("STORE_BACKEND", "memory")
os.environ.setdefault("LOG_PATH", os.path.join(tempfile.gettempdir(), "traveldesk-tests", "api.log"))

import pytest
from fastapi.testclient import TestClient

from config import Settings
from database import create_session_factory
from main import create_app
from services.itinerary_store import InMemoryItineraryStore, SqlItineraryStore
from services.library_store import InMemoryLibraryStore, SqlLibraryStore


@pytest.fixture
def client():
    app = create_app(Settings(store_backend="memory"))
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def sql_client(tmp_path):
    app = create_app(Settings(store_backend="sql", database_url=f"sqlite:///{tmp_path / 'api.db'}"))
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture(params=["memory", "sql"])
def itinerary_store(request, tmp_path):
    if request.param == "memory":
        return InMemoryItineraryStore()
    return SqlItineraryStore(create_session_factory(f"sqlite:///{tmp_path / 'itineraries.db'}"))


@pytest.fixture(params=["memory", "sql"])
def library_store(request, tmp_path):
    if request.param == "memory":
        return InMemoryLibraryStore()
    return SqlLibraryStore(create_session_factory(f"sqlite:///{tmp_path / 'library.db'}"))
