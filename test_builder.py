"""
Tests for ItineraryBuilder, the local editing layer over an itinerary store.
"""
from datetime import datetime, timezone

import pytest

from database import create_session_factory
from schemas import LibraryItemRead
from services.errors import NotFound
from services.itinerary_builder import ItineraryBuilder
from services.itinerary_store import InMemoryItineraryStore, SqlItineraryStore


# ============================================================================
# Helpers
# ============================================================================

def _make_builder(**itinerary):
    store = InMemoryItineraryStore()
    builder = ItineraryBuilder(store)
    if itinerary:
        record = store.create(itinerary)
        builder.load(record.id)
    else:
        builder.load()
    return builder, store


def _make_day_with_events(builder, *titles):
    builder.add_day()
    for title in titles:
        builder.add_event(0, {"title": title, "price": 10})


def _make_library_item(**overrides) -> LibraryItemRead:
    now = datetime.now(timezone.utc)
    data = {
        "id": "f" * 32,
        "title": "Hotel Mar",
        "category": "Lodging",
        "city": "Lagos",
        "country": "Portugal",
        "base_price": 120.0,
        "created_at": now,
        "updated_at": now,
    }
    data.update(overrides)
    return LibraryItemRead(**data)


# ============================================================================
# Lifecycle
# ============================================================================

class TestBuilderLifecycle:
    def test_load_without_id_starts_empty(self):
        builder, _ = _make_builder()
        assert builder.is_loaded
        assert builder.draft.id is None
        assert builder.draft.days == []

    def test_load_existing(self):
        builder, store = _make_builder(title="Lisbon", days=[{"title": "Arrival"}])
        assert builder.draft.title == "Lisbon"
        assert builder.draft.days[0].title == "Arrival"

    def test_load_unknown_id(self):
        store = InMemoryItineraryStore()
        with pytest.raises(NotFound):
            ItineraryBuilder(store).load("0" * 32)

    def test_first_save_creates(self):
        builder, store = _make_builder()
        builder.set_field("title", "Porto weekend")
        saved = builder.save()
        assert saved.id is not None
        assert store.get(saved.id).title == "Porto weekend"
        assert builder.draft.created_at is not None

    def test_second_save_updates_same_record(self):
        builder, store = _make_builder()
        builder.set_field("title", "Porto weekend")
        first = builder.save()
        builder.set_field("night_count", 2)
        second = builder.save()
        assert second.id == first.id
        assert second.updated_at > first.updated_at
        assert len(store.list()) == 1
        assert store.get(first.id).night_count == 2

    def test_edits_stay_local_until_save(self):
        builder, store = _make_builder(title="Lisbon")
        builder.set_field("title", "Lisbon and Sintra")
        assert store.get(builder.draft.id).title == "Lisbon"

    def test_discard(self):
        builder, store = _make_builder(title="Lisbon")
        record_id = builder.draft.id
        builder.set_field("title", "Changed")
        builder.discard()
        assert not builder.is_loaded
        assert store.get(record_id).title == "Lisbon"

    def test_editing_before_load_fails(self):
        builder = ItineraryBuilder(InMemoryItineraryStore())
        with pytest.raises(RuntimeError):
            builder.add_day()
        with pytest.raises(RuntimeError):
            builder.save()


# ============================================================================
# Fields and structure
# ============================================================================

class TestBuilderEditing:
    def test_set_field_validates_nested_values(self):
        builder, _ = _make_builder()
        builder.set_field("days", [{"title": "Arrival", "events": [{"title": "Check-in"}]}])
        assert builder.draft.days[0].events[0].title == "Check-in"

    def test_unknown_field_goes_to_extra_fields(self):
        builder, _ = _make_builder()
        builder.set_field("agency_code", "KX-12")
        assert builder.draft.extra_fields == {"agency_code": "KX-12"}

    def test_store_assigned_fields_are_read_only(self):
        builder, _ = _make_builder()
        with pytest.raises(ValueError):
            builder.set_field("id", "abc")

    def test_set_section(self):
        builder, _ = _make_builder()
        builder.set_section("terms", "Deposit required")
        assert builder.draft.additional_sections == {"terms": "Deposit required"}

    def test_add_remove_and_move_days(self):
        builder, _ = _make_builder()
        for title in ("A", "B", "C"):
            builder.add_day().title = title
        builder.move_day(0, 2)
        assert [d.title for d in builder.draft.days] == ["B", "C", "A"]
        removed = builder.remove_day(1)
        assert removed.title == "C"
        builder.add_day(position=0).title = "Z"
        assert [d.title for d in builder.draft.days] == ["Z", "B", "A"]

    def test_move_out_of_range(self):
        builder, _ = _make_builder()
        builder.add_day()
        with pytest.raises(IndexError):
            builder.move_day(0, 3)

    def test_add_and_move_events(self):
        builder, _ = _make_builder()
        _make_day_with_events(builder, "Breakfast", "Museum", "Dinner")
        builder.move_event(0, 2, 0)
        assert [e.title for e in builder.draft.days[0].events] == ["Dinner", "Breakfast", "Museum"]
        builder.remove_event(0, 1)
        assert [e.title for e in builder.draft.days[0].events] == ["Dinner", "Museum"]

    def test_events_get_distinct_ids(self):
        builder, _ = _make_builder()
        _make_day_with_events(builder, "One", "Two")
        ids = {e.id for e in builder.draft.days[0].events}
        assert len(ids) == 2

    @pytest.mark.parametrize("action", [
        lambda b: b.remove_day(-1),
        lambda b: b.remove_event(0, -1),
        lambda b: b.move_day(-1, 0),
        lambda b: b.move_event(0, -1, 0),
        lambda b: b.update_event(0, -1, title="x"),
        lambda b: b.set_event_number(-1, 0, "price", "5"),
        lambda b: b.toggle_meal(-1, "lunch"),
    ])
    def test_negative_indices_are_rejected(self, action):
        builder, _ = _make_builder()
        _make_day_with_events(builder, "Museum", "Dinner")
        builder.add_day()
        with pytest.raises(IndexError):
            action(builder)
        assert len(builder.draft.days) == 2
        assert [e.title for e in builder.draft.days[0].events] == ["Museum", "Dinner"]

    def test_insert_position_may_be_the_end(self):
        builder, _ = _make_builder()
        builder.add_day()
        builder.add_day(position=1).title = "Last"
        assert builder.draft.days[1].title == "Last"
        with pytest.raises(IndexError):
            builder.add_day(position=5)

    def test_update_event(self):
        builder, _ = _make_builder()
        _make_day_with_events(builder, "Museum")
        event = builder.update_event(0, 0, time="10:30", location="Belém")
        assert event.time == "10:30"
        assert builder.draft.days[0].events[0].location == "Belém"
        assert event.title == "Museum"


# ============================================================================
# Numeric input
# ============================================================================

class TestSetEventNumber:
    def test_valid_number(self):
        builder, _ = _make_builder()
        _make_day_with_events(builder, "Museum")
        assert builder.set_event_number(0, 0, "price", "12.5") == 12.5
        assert builder.draft.days[0].events[0].price == 12.5

    def test_empty_input_means_zero(self):
        builder, _ = _make_builder()
        _make_day_with_events(builder, "Museum")
        assert builder.set_event_number(0, 0, "price", "") == 0
        assert builder.draft.days[0].events[0].price == 0

    @pytest.mark.parametrize("text", ["abc", "nan", "inf", "1,5"])
    def test_invalid_input_keeps_previous_value(self, text):
        builder, _ = _make_builder()
        _make_day_with_events(builder, "Museum")
        assert builder.set_event_number(0, 0, "price", text) == 10
        assert builder.draft.days[0].events[0].price == 10

    def test_unknown_numeric_field(self):
        builder, _ = _make_builder()
        _make_day_with_events(builder, "Museum")
        with pytest.raises(ValueError):
            builder.set_event_number(0, 0, "title", "3")

    def test_datetime_event_field_saves_on_sql_store(self, tmp_path):
        store = SqlItineraryStore(create_session_factory(f"sqlite:///{tmp_path / 'builder.db'}"))
        builder = ItineraryBuilder(store)
        builder.load()
        builder.set_field("title", "Ferries")
        _make_day_with_events(builder, "Ferry")
        start = datetime(2026, 6, 1, 7, 45, tzinfo=timezone.utc)
        builder.update_event(0, 0, start=start)
        saved = builder.save()
        assert store.get(saved.id).days[0].events[0].start == start.isoformat()

    def test_saved_numbers_survive_round_trip(self):
        builder, store = _make_builder()
        builder.set_field("title", "Museums")
        _make_day_with_events(builder, "Museum")
        builder.set_event_number(0, 0, "rating", "4.5")
        saved = builder.save()
        assert store.get(saved.id).days[0].events[0].rating == 4.5


# ============================================================================
# Meals and library items
# ============================================================================

class TestMealsAndLibrary:
    def test_first_toggle_creates_meals(self):
        builder, _ = _make_builder()
        builder.add_day()
        assert builder.draft.days[0].meals is None
        meals = builder.toggle_meal(0, "lunch")
        assert (meals.breakfast, meals.lunch, meals.dinner) == (False, True, False)

    def test_toggle_twice_restores(self):
        builder, _ = _make_builder()
        builder.add_day()
        builder.toggle_meal(0, "dinner")
        assert builder.toggle_meal(0, "dinner").dinner is False

    def test_unknown_meal(self):
        builder, _ = _make_builder()
        builder.add_day()
        with pytest.raises(ValueError):
            builder.toggle_meal(0, "brunch")

    def test_add_library_item_copies_content(self):
        builder, _ = _make_builder()
        builder.add_day()
        item = _make_library_item()
        event = builder.add_library_item(0, item)
        assert builder.draft.days[0].events == [event]
        assert event.library_item_id == item.id
        assert event.category == "hotel"
        assert event.price == 120.0
        assert event.time == "14:00"
