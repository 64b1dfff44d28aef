"""Copy library items into itinerary events."""
from typing import Any, Dict, List, Optional

from schemas import ItineraryEvent, LibraryItemRead, Meals

CATEGORY_MAPPING = {
    "flight": "flight",
    "hotel": "hotel",
    "activity": "activity",
    "transfer": "transfer",
    "meal": "meal",
    "restaurant": "meal",
    "dining": "meal",
    "transport": "transfer",
    "transportation": "transfer",
    "accommodation": "hotel",
    "lodging": "hotel",
    "sightseeing": "activity",
    "tour": "activity",
    "experience": "activity",
}

DEFAULT_TIMES = {
    "flight": "08:00",
    "hotel": "14:00",
    "activity": "10:00",
    "transfer": "09:00",
    "meal": "19:00",
}


def _flag(value: Any) -> bool:
    return value is True or value == "true"


def event_category(library_category: Optional[str]) -> str:
    return CATEGORY_MAPPING.get((library_category or "").lower(), "activity")


def build_location(item: LibraryItemRead) -> str:
    return ", ".join(part for part in (item.city, item.country) if part)


def build_description(item: LibraryItemRead) -> str:
    description = item.notes or f"{item.title} from library"
    if item.sub_category:
        description += f" ({item.sub_category})"
    if item.labels:
        description += f"\n\nLabels: {item.labels}"
    extra = ", ".join(f"{k}: {v}" for k, v in item.extra_fields.items() if v)
    if extra:
        description += f"\n\nAdditional Info: {extra}"
    return description


def extract_highlights(item: LibraryItemRead) -> List[str]:
    highlights = []
    if item.labels:
        highlights.extend(label.strip() for label in item.labels.split(","))
    if item.variants:
        highlights.append(item.variants)
    highlights.extend(item.transfer_options or [])
    return [h for h in highlights if h]


def _category_fields(category: str, item: LibraryItemRead) -> Dict[str, Any]:
    extra = item.extra_fields
    if category == "flight":
        return {
            "from_city": extra.get("departure") or "Enter departure city",
            "to_city": item.city or extra.get("arrival") or "Enter destination city",
            "main_point": item.notes or f"Flight: {item.title}",
        }
    if category == "hotel":
        try:
            nights = int(extra.get("nights") or 1)
        except (TypeError, ValueError):
            nights = 1
        return {
            "check_in": extra.get("checkin") or "14:00",
            "check_out": extra.get("checkout") or "12:00",
            "nights": nights,
            "meals": Meals(
                breakfast=_flag(extra.get("breakfast")),
                lunch=_flag(extra.get("lunch")),
                dinner=_flag(extra.get("dinner")),
            ).model_dump(),
        }
    if category == "transfer":
        return {
            "from_city": extra.get("fromLocation") or "Pick-up location",
            "to_city": extra.get("toLocation") or item.city or "Drop-off location",
        }
    if category == "activity" and extra.get("includesMeals"):
        # activities can include meals too
        return {
            "meals": Meals(
                breakfast=extra.get("breakfast") is True,
                lunch=extra.get("lunch") is True,
                dinner=extra.get("dinner") is True,
            ).model_dump(),
        }
    if category == "meal":
        return {"main_point": f"{item.title} dining experience"}
    return {}


def library_item_to_event(item: LibraryItemRead, time: Optional[str] = None) -> ItineraryEvent:
    """
    Build an itinerary event from a library item.

    The event holds a copy of the item's content; later edits to the item do
    not reach the itinerary. `library_item_id` records where it came from.
    """
    category = event_category(item.category)
    return ItineraryEvent(
        category=category,
        title=item.title,
        description=build_description(item),
        time=time or DEFAULT_TIMES.get(category, "09:00"),
        location=build_location(item) or None,
        price=item.base_price or 0,
        library_item_id=item.id,
        component_source="my-library",
        highlights=extract_highlights(item),
        images=list(item.multimedia),
        **_category_fields(category, item),
    )


def preview_summary(item: LibraryItemRead) -> str:
    price = f"{item.currency} {item.base_price:g}" if item.base_price else "Price on request"
    return " • ".join(part for part in (item.title, build_location(item), price) if part)


def validate_for_itinerary(item: LibraryItemRead) -> List[str]:
    issues = []
    if not (item.title or "").strip():
        issues.append("Title is required")
    if not (item.category or "").strip():
        issues.append("Category is required")
    category = (item.category or "").lower()
    if category == "flight" and not item.city:
        issues.append("Destination city is required for flights")
    if category in ("hotel", "lodging") and not item.city:
        issues.append("Location is required for hotels")
    return issues
