"""Store construction and FastAPI dependencies.

Stores are built once per application by build_stores() and kept on
app.state; routes receive them through get_itinerary_store/get_library_store.
"""
from typing import Tuple

from fastapi import Request

from config import Settings
from database import create_session_factory
from services.itinerary_store import InMemoryItineraryStore, ItineraryStore, SqlItineraryStore
from services.library_store import InMemoryLibraryStore, LibraryStore, SqlLibraryStore


def build_stores(settings: Settings) -> Tuple[ItineraryStore, LibraryStore]:
    backend = settings.store_backend.lower()
    if backend == "memory":
        return InMemoryItineraryStore(), InMemoryLibraryStore()
    if backend == "sql":
        session_factory = create_session_factory(settings.database_url, timeout=settings.database_timeout_seconds)
        return SqlItineraryStore(session_factory), SqlLibraryStore(session_factory)
    raise ValueError(f"Unknown STORE_BACKEND {settings.store_backend!r} (expected 'sql' or 'memory')")


def get_itinerary_store(request: Request) -> ItineraryStore:
    return request.app.state.itinerary_store


def get_library_store(request: Request) -> LibraryStore:
    return request.app.state.library_store
