"""
Tests for the library stores and the stats summary.

TestLibraryStore runs against both implementations through the
parametrized `library_store` fixture in conftest.py.
"""
from datetime import datetime, timezone

import pytest

from services.errors import InvalidArgument, NotFound
from services.library_store import STATS_KEYS, strip_empty, summarize_stats


# ============================================================================
# Helpers
# ============================================================================

def _make_item(**overrides) -> dict:
    data = {
        "title": "Sunset kayak tour",
        "category": "Activity",
        "sub_category": "Water sports",
        "description": "Two hours along the coast",
        "city": "Lagos",
        "country": "Portugal",
        "labels": "outdoor, family",
        "base_price": 45.0,
        "currency": "EUR",
    }
    data.update(overrides)
    return data


# ============================================================================
# Store behaviour (memory and SQL)
# ============================================================================

class TestLibraryStore:
    def test_create_then_get(self, library_store):
        created = library_store.create(_make_item())
        assert library_store.get(created.id) == created
        assert created.title == "Sunset kayak tour"
        assert created.base_price == 45.0

    def test_empty_values_are_stripped_on_create(self, library_store):
        """Optional fields sent as "" or null stay absent"""
        created = library_store.create(_make_item(description="", notes=None, city=""))
        assert created.description is None
        assert created.notes is None
        assert created.city is None

    def test_currency_defaults_to_usd(self, library_store):
        created = library_store.create({"title": "Airport pickup", "category": "Transportation"})
        assert created.currency == "USD"
        assert created.multimedia == []

    def test_missing_category_is_invalid(self, library_store):
        with pytest.raises(InvalidArgument):
            library_store.create({"title": "No category"})

    def test_unknown_keys_are_kept_in_extra_fields(self, library_store):
        created = library_store.create(_make_item(checkin="15:00", breakfast=True))
        assert created.extra_fields == {"checkin": "15:00", "breakfast": True}

    def test_datetime_extra_value_is_stored_as_iso_text(self, library_store):
        """The SQL and in-memory stores agree on values that have no JSON type"""
        when = datetime(2026, 7, 1, 18, 0, tzinfo=timezone.utc)
        created = library_store.create(_make_item(when=when))
        assert created.extra_fields == {"when": when.isoformat()}
        assert library_store.get(created.id).extra_fields == {"when": when.isoformat()}

    def test_unencodable_extra_value_is_invalid(self, library_store):
        with pytest.raises(InvalidArgument):
            library_store.create(_make_item(handle=object()))

    def test_update(self, library_store):
        created = library_store.create(_make_item())
        updated = library_store.update(created.id, {"base_price": 50, "notes": "Bring a towel"})
        assert updated.base_price == 50
        assert updated.notes == "Bring a towel"
        assert updated.title == created.title
        assert updated.updated_at > created.updated_at

    def test_delete(self, library_store):
        created = library_store.create(_make_item())
        library_store.delete(created.id)
        with pytest.raises(NotFound):
            library_store.get(created.id)

    def test_malformed_id(self, library_store):
        with pytest.raises(InvalidArgument):
            library_store.get("42")

    def test_list_filters_by_category(self, library_store):
        library_store.create(_make_item())
        library_store.create(_make_item(title="Hotel Mar", category="Lodging"))
        items = library_store.list(category="Lodging")
        assert [i.title for i in items] == ["Hotel Mar"]

    def test_list_search_matches_title_and_description(self, library_store):
        library_store.create(_make_item(title="Sunset kayak tour", description="Coastal caves"))
        library_store.create(_make_item(title="Wine tasting", description="Douro valley SUNSET views"))
        library_store.create(_make_item(title="Museum pass", description="Lisbon museums"))
        found = library_store.list(search="sunset")
        assert sorted(i.title for i in found) == ["Sunset kayak tour", "Wine tasting"]

    def test_list_search_treats_wildcards_literally(self, library_store):
        library_store.create(_make_item(title="100% fun"))
        library_store.create(_make_item(title="Boat trip"))
        assert [i.title for i in library_store.list(search="%")] == ["100% fun"]

    def test_list_sorted_by_price(self, library_store):
        for title, price in (("B", 30), ("A", 10), ("C", 20)):
            library_store.create(_make_item(title=title, base_price=price))
        assert [i.title for i in library_store.list(sort="base_price")] == ["A", "C", "B"]

    def test_stats_counts_per_category(self, library_store):
        library_store.create(_make_item())
        library_store.create(_make_item(title="Cooking class"))
        library_store.create(_make_item(title="Hotel Mar", category="Lodging"))
        assert library_store.stats() == {"Activity": 2, "Lodging": 1}

    def test_stats_on_empty_store(self, library_store):
        assert library_store.stats() == {}


# ============================================================================
# Helpers shared by both stores
# ============================================================================

class TestSummarizeStats:
    def test_fixed_shape_with_zero_defaults(self):
        summary = summarize_stats({"Activity": 2, "Lodging": 1})
        assert summary.model_dump() == {
            "total": 3,
            "activities": 2,
            "hotels": 1,
            "flights": 0,
            "transportation": 0,
            "cruises": 0,
            "info": 0,
        }

    def test_unmapped_categories_count_towards_total_only(self):
        summary = summarize_stats({"Flight": 1, "Visa": 4})
        assert summary.flights == 1
        assert summary.total == 5

    def test_every_stats_key_is_a_summary_field(self):
        summary = summarize_stats({}).model_dump()
        assert set(STATS_KEYS.values()) | {"total"} == set(summary)


class TestStripEmpty:
    def test_keeps_falsy_values_other_than_none_and_empty_string(self):
        assert strip_empty({"a": 0, "b": False, "c": [], "d": "", "e": None}) == {"a": 0, "b": False, "c": []}

    def test_non_mapping_passes_through(self):
        assert strip_empty(None) is None
