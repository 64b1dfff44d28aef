"""Library Item Store: reusable catalog items plus per-category statistics."""
from abc import ABC, abstractmethod
from collections import Counter
from collections.abc import Mapping
from typing import Dict, List, Optional

from sqlalchemy import func, or_

from models.LibraryItem import LibraryItem
from schemas import LibraryItemRead, LibraryItemWrite, LibraryStatsRead
from services.records import MemoryRecordStore, SqlRecordStore

SORTABLE = ("title", "category", "sub_category", "city", "country", "base_price", "created_at", "updated_at")

# category name -> key of the fixed stats response
STATS_KEYS = {
    "Activity": "activities",
    "Lodging": "hotels",
    "Flight": "flights",
    "Transportation": "transportation",
    "Cruise": "cruises",
    "Info": "info",
}


def strip_empty(data):
    """Drop top-level fields that are None or "" so optional fields stay absent."""
    if not isinstance(data, Mapping):
        return data
    return {k: v for k, v in data.items() if v is not None and v != ""}


def summarize_stats(stats: Dict[str, int]) -> LibraryStatsRead:
    """Project raw category counts onto the fixed response shape, defaulting to zero."""
    summary = {key: stats.get(category, 0) for category, key in STATS_KEYS.items()}
    return LibraryStatsRead(total=sum(stats.values()), **summary)


class LibraryStore(ABC):
    @abstractmethod
    def get(self, item_id: str) -> LibraryItemRead: ...

    @abstractmethod
    def create(self, data: dict) -> LibraryItemRead: ...

    @abstractmethod
    def update(self, item_id: str, patch: dict) -> LibraryItemRead: ...

    @abstractmethod
    def delete(self, item_id: str) -> bool: ...

    @abstractmethod
    def list(
        self,
        category: Optional[str] = None,
        search: Optional[str] = None,
        sort: Optional[str] = None,
    ) -> List[LibraryItemRead]: ...

    @abstractmethod
    def stats(self) -> Dict[str, int]:
        """Item count per category; categories without items are left out."""


class InMemoryLibraryStore(MemoryRecordStore, LibraryStore):
    entity = "Library item"
    write_schema = LibraryItemWrite
    read_schema = LibraryItemRead
    sortable = SORTABLE

    def create(self, data):
        return super().create(strip_empty(data))

    def list(self, category=None, search=None, sort=None):
        records = list(self._records.values())
        if category:
            records = [r for r in records if r.get("category") == category]
        if search:
            needle = search.lower()
            records = [
                r for r in records
                if needle in (r.get("title") or "").lower()
                or needle in (r.get("description") or "").lower()
            ]
        return self._list(records, sort=sort)

    def stats(self):
        return dict(Counter(r["category"] for r in self._records.values() if r.get("category")))


class SqlLibraryStore(SqlRecordStore, LibraryStore):
    entity = "Library item"
    model = LibraryItem
    write_schema = LibraryItemWrite
    read_schema = LibraryItemRead
    sortable = SORTABLE

    def create(self, data):
        return super().create(strip_empty(data))

    def list(self, category=None, search=None, sort=None):
        with self._session("list") as db:
            query = db.query(LibraryItem)
            if category:
                query = query.filter(LibraryItem.category == category)
            if search:
                query = query.filter(or_(
                    LibraryItem.title.icontains(search, autoescape=True),
                    LibraryItem.description.icontains(search, autoescape=True),
                ))
            rows = self._ordered(query, sort).all()
            return [LibraryItemRead.model_validate(row) for row in rows]

    def stats(self):
        with self._session("stats") as db:
            rows = (
                db.query(LibraryItem.category, func.count(LibraryItem.pk))
                .group_by(LibraryItem.category)
                .all()
            )
            return {category: count for category, count in rows if category}
