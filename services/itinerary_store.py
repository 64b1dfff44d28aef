"""Itinerary Record Store: identifier-keyed CRUD over itinerary documents."""
from abc import ABC, abstractmethod
from typing import List, Optional

from models.Itinerary import Itinerary
from schemas import ItineraryRead, ItineraryWrite
from services.records import MemoryRecordStore, SqlRecordStore

SORTABLE = ("title", "country", "day_count", "night_count", "status", "total_price", "created_at", "updated_at")


class ItineraryStore(ABC):
    """
    get/update/delete raise NotFound for unknown ids and InvalidArgument for
    malformed ids or payloads. The SQL implementation raises StoreUnavailable
    when the database cannot be reached.
    """

    @abstractmethod
    def get(self, itinerary_id: str) -> ItineraryRead: ...

    @abstractmethod
    def create(self, data: dict) -> ItineraryRead: ...

    @abstractmethod
    def update(self, itinerary_id: str, patch: dict) -> ItineraryRead: ...

    @abstractmethod
    def delete(self, itinerary_id: str) -> bool: ...

    @abstractmethod
    def list(self, sort: Optional[str] = None) -> List[ItineraryRead]: ...


class InMemoryItineraryStore(MemoryRecordStore, ItineraryStore):
    entity = "Itinerary"
    write_schema = ItineraryWrite
    read_schema = ItineraryRead
    sortable = SORTABLE

    def list(self, sort: Optional[str] = None) -> List[ItineraryRead]:
        return self._list(sort=sort)


class SqlItineraryStore(SqlRecordStore, ItineraryStore):
    entity = "Itinerary"
    model = Itinerary
    write_schema = ItineraryWrite
    read_schema = ItineraryRead
    sortable = SORTABLE

    def list(self, sort: Optional[str] = None) -> List[ItineraryRead]:
        with self._session("list") as db:
            rows = self._ordered(db.query(Itinerary), sort).all()
            return [ItineraryRead.model_validate(row) for row in rows]
