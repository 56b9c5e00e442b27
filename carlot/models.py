# carlot/models.py
"""SQLAlchemy ORM models for persisted entities.

`Listing` is the car for sale; `Review`, `Complaint` and `ContactSettings`
are independent records with no cross-entity invariants.
"""
import enum
import uuid

from sqlalchemy import Column, Integer, Text, Numeric, Boolean, TIMESTAMP, JSON, func, Index
from sqlalchemy.dialects.postgresql import JSONB
from .db import Base

# JSONB on postgres, plain JSON everywhere else (sqlite in tests)
JSONList = JSON().with_variant(JSONB(), "postgresql")


class CarCondition(str, enum.Enum):
    NEW = "New"
    USED_EXCELLENT = "Used - Excellent"
    USED_GOOD = "Used - Good"
    USED_FAIR = "Used - Fair"


def _new_id():
    return uuid.uuid4().hex


class Listing(Base):
    __tablename__ = "listings"
    id = Column(Text, primary_key=True, default=_new_id)
    make = Column(Text, nullable=False, index=True)
    model = Column(Text, nullable=False)
    year = Column(Integer, nullable=False)
    price = Column(Numeric(12, 2, asdecimal=False), nullable=False)
    mileage = Column(Integer, nullable=False, default=0)
    condition = Column(Text, nullable=False)
    features = Column(JSONList, nullable=False, default=list)
    images = Column(JSONList, nullable=False, default=list)
    description = Column(Text, nullable=False)
    is_sold = Column(Boolean, nullable=False, default=False)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now())

Index("idx_listings_price", Listing.price)
Index("idx_listings_created_at", Listing.created_at)


class Review(Base):
    __tablename__ = "reviews"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(Text, nullable=False)
    email = Column(Text)
    occupation = Column(Text)
    rating = Column(Integer, nullable=False)
    comment = Column(Text, nullable=False)
    car_id = Column(Text)
    car_make = Column(Text)
    car_model = Column(Text)
    is_testimonial = Column(Boolean, nullable=False, default=False)
    submitted_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now())


class Complaint(Base):
    __tablename__ = "complaints"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(Text)
    email = Column(Text)
    details = Column(Text, nullable=False)
    is_resolved = Column(Boolean, nullable=False, default=False)
    submitted_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now())


class ContactSettings(Base):
    """Singleton row (id=1) holding the dealership's public contact details."""
    __tablename__ = "contact_settings"
    id = Column(Integer, primary_key=True, default=1)
    whatsapp_number = Column(Text)
    messenger_id = Column(Text)
    facebook_page_link = Column(Text)
    updated_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now())
