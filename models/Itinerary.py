from sqlalchemy import Column, Integer, String, Text, Float, DateTime, JSON
from database import Base

class Itinerary(Base):
    __tablename__ = "itineraries"

    pk = Column(Integer, primary_key=True, autoincrement=True)  # insertion order
    id = Column(String(32), unique=True, index=True, nullable=False)
    title = Column(String(200), nullable=False)
    product_id = Column(String(100), nullable=True, index=True)
    description = Column(Text, nullable=False, default="")
    country = Column(String(100), nullable=False, default="")
    destination = Column(String(200), nullable=True)
    day_count = Column(Integer, nullable=False, default=0)
    night_count = Column(Integer, nullable=False, default=0)
    status = Column(String(20), nullable=False, default="draft")  # draft, published, archived
    total_price = Column(Float, nullable=False, default=0)
    currency = Column(String(10), nullable=False, default="USD")
    created_by = Column(String(150), nullable=True)

    # Day-by-day structure is owned by the itinerary, kept as one document
    highlights = Column(JSON, nullable=False, default=list)
    days = Column(JSON, nullable=False, default=list)
    additional_sections = Column(JSON, nullable=False, default=dict)
    images = Column(JSON, nullable=False, default=list)
    gallery = Column(JSON, nullable=False, default=list)  # image/video items with captions
    branding = Column(JSON, nullable=True)  # header/footer logo and text, colours
    extra_fields = Column(JSON, nullable=False, default=dict)

    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)
