from typing import List, Optional
from fastapi import APIRouter, Depends, status

from schemas import LibraryItemWrite, LibraryItemUpdate, LibraryItemRead, LibraryStatsRead
from services.library_store import LibraryStore, summarize_stats
from services.library_converter import library_item_to_event, preview_summary, validate_for_itinerary
from dependencies import get_library_store
from utils.http_errors import store_errors

router = APIRouter(prefix="/library", tags=["Library"])

NOT_FOUND = "Item not found"


@router.get("/", response_model=List[LibraryItemRead], response_model_exclude_none=True)
def list_items(
    category: Optional[str] = None,
    search: Optional[str] = None,
    sort: Optional[str] = "-created_at",
    store: LibraryStore = Depends(get_library_store),
):
    with store_errors("Failed to fetch items"):
        return store.list(category=category, search=search, sort=sort)


@router.post("/", response_model=LibraryItemRead, response_model_exclude_none=True,
             status_code=status.HTTP_201_CREATED)
def create_item(payload: LibraryItemWrite, store: LibraryStore = Depends(get_library_store)):
    # Empty strings are stripped by the store, so optional fields stay absent
    with store_errors("Failed to create item"):
        return store.create(payload.model_dump())


@router.get("/stats", response_model=LibraryStatsRead)
def get_stats(store: LibraryStore = Depends(get_library_store)):
    with store_errors("Failed to fetch library stats"):
        return summarize_stats(store.stats())


@router.get("/{item_id}", response_model=LibraryItemRead, response_model_exclude_none=True)
def get_item(item_id: str, store: LibraryStore = Depends(get_library_store)):
    with store_errors("Failed to fetch item", NOT_FOUND):
        return store.get(item_id)


@router.put("/{item_id}", response_model=LibraryItemRead, response_model_exclude_none=True)
def update_item(item_id: str, payload: LibraryItemUpdate, store: LibraryStore = Depends(get_library_store)):
    with store_errors("Failed to update item", NOT_FOUND):
        return store.update(item_id, {**payload.model_dump(exclude_unset=True), **(payload.model_extra or {})})


@router.delete("/{item_id}")
def delete_item(item_id: str, store: LibraryStore = Depends(get_library_store)):
    with store_errors("Failed to delete item", NOT_FOUND):
        store.delete(item_id)
    return {"message": "Item deleted"}


@router.get("/{item_id}/event")
def preview_item_as_event(item_id: str, time: Optional[str] = None, store: LibraryStore = Depends(get_library_store)):
    """Show the itinerary event a library item would become, with any blocking issues."""
    with store_errors("Failed to fetch item", NOT_FOUND):
        item = store.get(item_id)
    return {
        "event": library_item_to_event(item, time=time).model_dump(),
        "summary": preview_summary(item),
        "issues": validate_for_itinerary(item),
    }
