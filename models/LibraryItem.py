from sqlalchemy import Column, Integer, String, Text, Float, DateTime, JSON
from database import Base

class LibraryItem(Base):
    __tablename__ = "library_items"

    pk = Column(Integer, primary_key=True, autoincrement=True)  # insertion order
    id = Column(String(32), unique=True, index=True, nullable=False)
    title = Column(String(200), nullable=False)
    category = Column(String(50), nullable=False, index=True)  # Activity, Lodging, Flight, ...
    sub_category = Column(String(100), nullable=True)
    description = Column(Text, nullable=True)

    # Location
    city = Column(String(100), nullable=True)
    country = Column(String(100), nullable=True)

    labels = Column(String(250), nullable=True)  # comma separated
    notes = Column(Text, nullable=True)
    dates = Column(JSON, nullable=True)
    transfer_options = Column(JSON, nullable=True)
    variants = Column(String(250), nullable=True)

    # Pricing and availability
    base_price = Column(Float, nullable=True)
    currency = Column(String(10), nullable=False, default="USD")
    available_from = Column(DateTime(timezone=True), nullable=True)
    available_until = Column(DateTime(timezone=True), nullable=True)
    start_date = Column(String(40), nullable=True)  # display only
    end_date = Column(String(40), nullable=True)

    multimedia = Column(JSON, nullable=False, default=list)  # media URLs
    extra_fields = Column(JSON, nullable=False, default=dict)

    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)
