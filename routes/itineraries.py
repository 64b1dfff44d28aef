from typing import List, Optional
from fastapi import APIRouter, Depends, Response, status

from schemas import ItineraryWrite, ItineraryUpdate, ItineraryRead, ItineraryDocument
from services.itinerary_store import ItineraryStore
from services.itinerary_renderer import render_itinerary, build_pdf
from dependencies import get_itinerary_store
from utils.http_errors import store_errors

router = APIRouter(prefix="/itineraries", tags=["Itineraries"])

NOT_FOUND = "Itinerary not found"


@router.get("/", response_model=List[ItineraryRead])
def list_itineraries(sort: Optional[str] = "-created_at", store: ItineraryStore = Depends(get_itinerary_store)):
    with store_errors("Failed to fetch itineraries"):
        return store.list(sort=sort)


@router.post("/", response_model=ItineraryRead, status_code=status.HTTP_201_CREATED)
def create_itinerary(payload: ItineraryWrite, store: ItineraryStore = Depends(get_itinerary_store)):
    with store_errors("Failed to create itinerary"):
        return store.create(payload.model_dump())


@router.get("/{itinerary_id}", response_model=ItineraryRead)
def get_itinerary(itinerary_id: str, store: ItineraryStore = Depends(get_itinerary_store)):
    with store_errors("Failed to fetch itinerary", NOT_FOUND):
        return store.get(itinerary_id)


@router.put("/{itinerary_id}", response_model=ItineraryRead)
def update_itinerary(itinerary_id: str, payload: ItineraryUpdate, store: ItineraryStore = Depends(get_itinerary_store)):
    # Only fields present in the body are merged into the stored itinerary
    with store_errors("Failed to update itinerary", NOT_FOUND):
        return store.update(itinerary_id, {**payload.model_dump(exclude_unset=True), **(payload.model_extra or {})})


@router.delete("/{itinerary_id}")
def delete_itinerary(itinerary_id: str, store: ItineraryStore = Depends(get_itinerary_store)):
    with store_errors("Failed to delete itinerary", NOT_FOUND):
        store.delete(itinerary_id)
    return {"message": "Itinerary deleted successfully"}


@router.get("/{itinerary_id}/document", response_model=ItineraryDocument)
def get_itinerary_document(itinerary_id: str, store: ItineraryStore = Depends(get_itinerary_store)):
    with store_errors("Failed to render itinerary", NOT_FOUND):
        return render_itinerary(store.get(itinerary_id))


@router.get("/{itinerary_id}/pdf")
def download_itinerary_pdf(itinerary_id: str, store: ItineraryStore = Depends(get_itinerary_store)):
    with store_errors("Failed to render itinerary", NOT_FOUND):
        itinerary = store.get(itinerary_id)
        content = build_pdf(render_itinerary(itinerary))
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="itinerary-{itinerary.id}.pdf"'},
    )
