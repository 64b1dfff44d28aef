"""
Itinerary editing layer.

An ItineraryBuilder owns a local working copy of one itinerary. Edits touch
only that copy; nothing reaches the store until save().
"""
import logging
from typing import Any, Optional

from schemas import ItineraryDay, ItineraryDraft, ItineraryEvent, LibraryItemRead, Meals, parse_number
from services.itinerary_store import ItineraryStore
from services.library_converter import library_item_to_event

logger = logging.getLogger("traveldesk.builder")

NUMERIC_EVENT_FIELDS = ("duration", "price", "rating")
MEAL_NAMES = ("breakfast", "lunch", "dinner")
_META_FIELDS = {"id", "created_at", "updated_at"}


def _check(items: list, index: int, allow_end: bool = False) -> int:
    # negative indices are rejected rather than counted from the end
    limit = len(items) + 1 if allow_end else len(items)
    if not 0 <= index < limit:
        raise IndexError(f"position {index} out of range")
    return index


def _move(items: list, source: int, target: int) -> None:
    _check(items, source)
    _check(items, target)
    items.insert(target, items.pop(source))


class ItineraryBuilder:
    def __init__(self, store: ItineraryStore):
        self.store = store
        self.draft: Optional[ItineraryDraft] = None

    # ---------- lifecycle ----------
    def load(self, itinerary_id: Optional[str] = None) -> ItineraryDraft:
        """Seed the working copy from the store, or start an empty itinerary."""
        if itinerary_id is None:
            self.draft = ItineraryDraft()
        else:
            record = self.store.get(itinerary_id)
            self.draft = ItineraryDraft.model_validate(record.model_dump())
        return self.draft

    def save(self) -> ItineraryDraft:
        """Create or update the record; the stored result replaces the working copy."""
        draft = self._require()
        payload = draft.model_dump(exclude=_META_FIELDS)
        if draft.id is None:
            record = self.store.create(payload)
            logger.info("Saved new itinerary %s", record.id)
        else:
            record = self.store.update(draft.id, payload)
            logger.info("Saved itinerary %s", record.id)
        self.draft = ItineraryDraft.model_validate(record.model_dump())
        return self.draft

    def discard(self) -> None:
        self.draft = None

    @property
    def is_loaded(self) -> bool:
        return self.draft is not None

    def _require(self) -> ItineraryDraft:
        if self.draft is None:
            raise RuntimeError("No itinerary loaded")
        return self.draft

    def _day(self, day_index: int) -> ItineraryDay:
        days = self._require().days
        return days[_check(days, day_index)]

    def _event(self, day_index: int, event_index: int) -> ItineraryEvent:
        events = self._day(day_index).events
        return events[_check(events, event_index)]

    # ---------- top-level fields ----------
    def set_field(self, name: str, value: Any) -> None:
        draft = self._require()
        if name in _META_FIELDS:
            raise ValueError(f"{name} is assigned by the store")
        if name in ItineraryDraft.model_fields:
            # re-validate so e.g. days given as dicts become ItineraryDay objects
            data = draft.model_dump()
            data[name] = value
            self.draft = ItineraryDraft.model_validate(data)
        else:
            draft.extra_fields[name] = value

    def set_section(self, key: str, text: str) -> None:
        self._require().additional_sections[key] = text

    # ---------- days ----------
    def add_day(self, position: Optional[int] = None) -> ItineraryDay:
        days = self._require().days
        day = ItineraryDay()
        if position is None:
            days.append(day)
        else:
            days.insert(_check(days, position, allow_end=True), day)
        return day

    def remove_day(self, day_index: int) -> ItineraryDay:
        days = self._require().days
        return days.pop(_check(days, day_index))

    def move_day(self, source: int, target: int) -> None:
        _move(self._require().days, source, target)

    # ---------- events ----------
    def add_event(self, day_index: int, event: Any = None, position: Optional[int] = None) -> ItineraryEvent:
        if event is None:
            event = ItineraryEvent()
        elif not isinstance(event, ItineraryEvent):
            event = ItineraryEvent.model_validate(event)
        events = self._day(day_index).events
        if position is None:
            events.append(event)
        else:
            events.insert(_check(events, position, allow_end=True), event)
        return event

    def add_library_item(self, day_index: int, item: LibraryItemRead, time: Optional[str] = None) -> ItineraryEvent:
        return self.add_event(day_index, library_item_to_event(item, time=time))

    def remove_event(self, day_index: int, event_index: int) -> ItineraryEvent:
        events = self._day(day_index).events
        return events.pop(_check(events, event_index))

    def move_event(self, day_index: int, source: int, target: int) -> None:
        _move(self._day(day_index).events, source, target)

    def update_event(self, day_index: int, event_index: int, **fields: Any) -> ItineraryEvent:
        events = self._day(day_index).events
        data = events[_check(events, event_index)].model_dump()
        data.update(fields)
        events[event_index] = ItineraryEvent.model_validate(data)
        return events[event_index]

    def set_event_number(self, day_index: int, event_index: int, field: str, text: Any) -> float:
        """
        Set duration, price or rating from user input.

        Empty input means 0. Input that is not a finite number is ignored and
        the previous value is kept.
        """
        if field not in NUMERIC_EVENT_FIELDS:
            raise ValueError(f"{field} is not a numeric event field")
        event = self._event(day_index, event_index)
        if text is None or str(text).strip() == "":
            number = 0.0
        else:
            number = parse_number(text)
            if number is None:
                logger.debug("Ignoring non-numeric %s input %r", field, text)
                return getattr(event, field)
        setattr(event, field, number)
        return number

    def toggle_meal(self, day_index: int, meal: str) -> Meals:
        if meal not in MEAL_NAMES:
            raise ValueError(f"Unknown meal {meal!r}")
        day = self._day(day_index)
        if day.meals is None:
            day.meals = Meals()
        setattr(day.meals, meal, not getattr(day.meals, meal))
        return day.meals
