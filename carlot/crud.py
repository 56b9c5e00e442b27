# carlot/crud.py
"""CRUD operations over the relational store.

Listings, reviews, complaints and the contact-settings singleton. Functions
take an open `Session`, commit their own writes and return ORM objects (or
`None`/`False` when the target row does not exist); raising is left to the
callers.
"""
from sqlalchemy import or_, String, cast
from sqlalchemy.orm import Session
from typing import Dict, Any, List, Optional

from .models import Listing, Review, Complaint, ContactSettings

SETTINGS_ID = 1


# listings

def create_listing(db: Session, data: Dict[str, Any]) -> Listing:
    obj = Listing(**data)
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj

def get_listing(db: Session, listing_id: str) -> Optional[Listing]:
    return db.get(Listing, listing_id)

def list_listings(db: Session, skip: int = 0, limit: int = 50, filters: Dict = None):
    q = db.query(Listing)
    if filters:
        if filters.get("make"):
            q = q.filter(Listing.make == filters["make"])
        if filters.get("condition"):
            q = q.filter(Listing.condition == filters["condition"])
        if filters.get("min_price") is not None:
            q = q.filter(Listing.price >= filters["min_price"])
        if filters.get("max_price") is not None:
            q = q.filter(Listing.price <= filters["max_price"])
        if filters.get("sold") is not None:
            q = q.filter(Listing.is_sold == filters["sold"])
        if filters.get("search"):
            term = f"%{filters['search']}%"
            q = q.filter(or_(
                Listing.make.ilike(term),
                Listing.model.ilike(term),
                Listing.description.ilike(term),
                cast(Listing.features, String).ilike(term),
            ))
    total = q.count()
    items = q.order_by(Listing.created_at.desc(), Listing.id).offset(skip).limit(limit).all()
    return {"total": total, "items": items}

def all_listing_images(db: Session) -> List[str]:
    urls = []
    for (images,) in db.query(Listing.images).all():
        urls.extend(images or [])
    return urls

def update_listing(db: Session, listing_id: str, updates: Dict[str, Any]) -> Optional[Listing]:
    obj = db.get(Listing, listing_id)
    if not obj:
        return None
    for k, v in updates.items():
        setattr(obj, k, v)
    db.commit()
    db.refresh(obj)
    return obj

def delete_listing(db: Session, listing_id: str) -> bool:
    obj = db.get(Listing, listing_id)
    if not obj:
        return False
    db.delete(obj)
    db.commit()
    return True


# reviews

def create_review(db: Session, data: Dict[str, Any]) -> Review:
    obj = Review(**data, is_testimonial=False)
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj

def list_reviews(db: Session, testimonials_only: bool = True) -> List[Review]:
    q = db.query(Review)
    if testimonials_only:
        q = q.filter(Review.is_testimonial.is_(True))
    return q.order_by(Review.submitted_at.desc(), Review.id.desc()).all()

def set_review_testimonial(db: Session, review_id: int, value: bool) -> Optional[Review]:
    obj = db.get(Review, review_id)
    if not obj:
        return None
    obj.is_testimonial = value
    db.commit()
    db.refresh(obj)
    return obj

def delete_review(db: Session, review_id: int) -> bool:
    obj = db.get(Review, review_id)
    if not obj:
        return False
    db.delete(obj)
    db.commit()
    return True


# complaints

def create_complaint(db: Session, data: Dict[str, Any]) -> Complaint:
    obj = Complaint(**data, is_resolved=False)
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj

def list_complaints(db: Session) -> List[Complaint]:
    return db.query(Complaint).order_by(Complaint.submitted_at.desc(), Complaint.id.desc()).all()

def set_complaint_resolved(db: Session, complaint_id: int, value: bool) -> Optional[Complaint]:
    obj = db.get(Complaint, complaint_id)
    if not obj:
        return None
    obj.is_resolved = value
    db.commit()
    db.refresh(obj)
    return obj


# contact settings

def get_settings(db: Session) -> Optional[ContactSettings]:
    return db.get(ContactSettings, SETTINGS_ID)

def upsert_settings(db: Session, updates: Dict[str, Any]) -> ContactSettings:
    """Merge `updates` into the singleton row, creating it on first write."""
    obj = db.get(ContactSettings, SETTINGS_ID)
    if obj is None:
        obj = ContactSettings(id=SETTINGS_ID)
        db.add(obj)
    for k, v in updates.items():
        setattr(obj, k, v)
    db.commit()
    db.refresh(obj)
    return obj
