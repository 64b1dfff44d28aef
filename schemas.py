# schemas.py (Pydantic v2)
import math
from uuid import uuid4
from datetime import datetime, time, timezone
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def parse_number(value: Any) -> Optional[float]:
    """Return `value` as a finite float, or None if it does not parse as one."""
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite hands back naive datetimes
    if isinstance(value, datetime) and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


# ---------- Itinerary days & events ----------
class Meals(BaseModel):
    breakfast: bool = False
    lunch: bool = False
    dinner: bool = False


class ItineraryEvent(BaseModel):
    id: str = Field(default_factory=lambda: uuid4().hex)
    category: str = "activity"  # flight, hotel, activity, transfer, meal, ...
    title: str = ""
    description: str = ""
    time: Optional[str] = None  # free text, e.g. "09:00" or "Morning"
    location: Optional[str] = None
    duration: float = 0
    price: float = 0
    rating: float = 0
    library_item_id: Optional[str] = None
    component_source: Optional[str] = None  # manual, my-library, global-library, ...
    highlights: List[str] = []
    images: List[str] = []

    model_config = ConfigDict(extra="allow")

    @field_validator("duration", "price", "rating", mode="before")
    @classmethod
    def _number_or_zero(cls, value):
        number = parse_number(value)
        return 0 if number is None else number

    @field_validator("time", mode="before")
    @classmethod
    def _time_as_text(cls, value):
        if isinstance(value, (time, datetime)):
            return value.strftime("%H:%M")
        return value


class ItineraryDay(BaseModel):
    title: Optional[str] = None
    date: Optional[str] = None
    description: Optional[str] = None
    events: List[ItineraryEvent] = []
    meals: Optional[Meals] = None

    model_config = ConfigDict(extra="allow")


# ---------- Itineraries ----------
ItineraryStatus = Literal["draft", "published", "archived"]


class GalleryItem(BaseModel):
    id: str = Field(default_factory=lambda: uuid4().hex)
    url: str
    type: Literal["image", "video"] = "image"
    caption: Optional[str] = None
    alt_text: Optional[str] = None
    file_name: str = ""
    uploaded_at: Optional[datetime] = None


class Branding(BaseModel):
    header_logo: Optional[str] = None  # image URL
    header_text: Optional[str] = None
    footer_logo: Optional[str] = None
    footer_text: Optional[str] = None
    primary_color: Optional[str] = None  # "#RRGGBB"
    secondary_color: Optional[str] = None


class ItineraryBase(BaseModel):
    title: str = ""
    product_id: Optional[str] = None
    description: str = ""
    country: str = ""
    destination: Optional[str] = None
    day_count: int = Field(0, ge=0)
    night_count: int = Field(0, ge=0)
    highlights: List[str] = []
    days: List[ItineraryDay] = []
    additional_sections: Dict[str, str] = {}  # terms, visas, inclusions, exclusions, notes, ...
    status: ItineraryStatus = "draft"
    total_price: float = Field(0, ge=0)
    currency: str = "USD"
    created_by: Optional[str] = None
    images: List[str] = []
    gallery: List[GalleryItem] = []
    branding: Optional[Branding] = None
    extra_fields: Dict[str, Any] = {}


class ItineraryWrite(ItineraryBase):
    """Payload for creating an itinerary. Unknown keys end up in extra_fields."""
    title: str = Field(..., min_length=1)

    model_config = ConfigDict(extra="allow")


class ItineraryUpdate(BaseModel):
    """Partial update for itineraries"""
    title: Optional[str] = None
    product_id: Optional[str] = None
    description: Optional[str] = None
    country: Optional[str] = None
    destination: Optional[str] = None
    day_count: Optional[int] = None
    night_count: Optional[int] = None
    highlights: Optional[List[str]] = None
    days: Optional[List[ItineraryDay]] = None
    additional_sections: Optional[Dict[str, str]] = None
    status: Optional[ItineraryStatus] = None
    total_price: Optional[float] = None
    currency: Optional[str] = None
    created_by: Optional[str] = None
    images: Optional[List[str]] = None
    gallery: Optional[List[GalleryItem]] = None
    branding: Optional[Branding] = None
    extra_fields: Optional[Dict[str, Any]] = None

    model_config = ConfigDict(extra="allow")


class ItineraryRead(ItineraryBase):
    id: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_validator("created_at", "updated_at")
    @classmethod
    def _utc(cls, value):
        return _as_utc(value)


class ItineraryDraft(ItineraryBase):
    """Editable working copy; id and timestamps are unset until first save"""
    id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ---------- Library ----------
class LibraryItemBase(BaseModel):
    title: str
    category: str  # Activity, Lodging, Flight, Transportation, Cruise, Info, ...
    sub_category: Optional[str] = None
    description: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    dates: Optional[List[str]] = None
    labels: Optional[str] = None
    notes: Optional[str] = None
    transfer_options: Optional[List[str]] = None
    variants: Optional[str] = None
    base_price: Optional[float] = None
    currency: str = "USD"
    available_from: Optional[datetime] = None
    available_until: Optional[datetime] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    multimedia: List[str] = []
    extra_fields: Dict[str, Any] = {}


class LibraryItemWrite(LibraryItemBase):
    title: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1)

    model_config = ConfigDict(extra="allow")


class LibraryItemUpdate(BaseModel):
    """Partial update for library items"""
    title: Optional[str] = None
    category: Optional[str] = None
    sub_category: Optional[str] = None
    description: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    dates: Optional[List[str]] = None
    labels: Optional[str] = None
    notes: Optional[str] = None
    transfer_options: Optional[List[str]] = None
    variants: Optional[str] = None
    base_price: Optional[float] = None
    currency: Optional[str] = None
    available_from: Optional[datetime] = None
    available_until: Optional[datetime] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    multimedia: Optional[List[str]] = None
    extra_fields: Optional[Dict[str, Any]] = None

    model_config = ConfigDict(extra="allow")


class LibraryItemRead(LibraryItemBase):
    id: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_validator("created_at", "updated_at", "available_from", "available_until")
    @classmethod
    def _utc(cls, value):
        return _as_utc(value)


class LibraryStatsRead(BaseModel):
    total: int = 0
    activities: int = 0
    hotels: int = 0
    flights: int = 0
    transportation: int = 0
    cruises: int = 0
    info: int = 0


# ---------- Rendered documents ----------
class DocumentElement(BaseModel):
    style: str  # title, text, heading, highlight, day_header, event_title, meal, branding
    text: str


class DocumentSection(BaseModel):
    kind: str  # header, highlights, day, event, meals, additional, branding_header, branding_footer
    day: Optional[int] = None  # 1-based day number for day/event/meals sections
    elements: List[DocumentElement] = []


class ItineraryDocument(BaseModel):
    title: str
    primary_color: Optional[str] = None
    secondary_color: Optional[str] = None
    sections: List[DocumentSection] = []
