# carlot/schemas.py
from datetime import datetime
from typing import List, Optional, Union

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel

from .models import CarCondition


class CamelModel(BaseModel):
    """JSON is camelCase on the wire; snake_case names are accepted too."""
    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


def _max_year():
    return datetime.now().year + 1


# listings

class ListingBase(CamelModel):
    make: str = Field(..., min_length=1, max_length=255)
    model: str = Field(..., min_length=1, max_length=255)
    year: int
    price: float = Field(..., ge=0)
    mileage: int = Field(0, ge=0)
    condition: CarCondition
    features: List[str] = []
    images: List[str] = []
    description: str = Field(..., min_length=1, max_length=2000)
    is_sold: bool = False

    @field_validator("year")
    @classmethod
    def year_in_range(cls, v):
        if v < 1900 or v > _max_year():
            raise ValueError(f"year must be between 1900 and {_max_year()}")
        return v

    @field_validator("make", "model", "description")
    @classmethod
    def not_blank(cls, v):
        if not v.strip():
            raise ValueError("must not be blank")
        return v.strip()


class ListingCreate(ListingBase):
    pass


class ListingUpdate(ListingBase):
    pass


class ListingOut(CamelModel):
    id: str
    make: str
    model: str
    year: int
    price: float
    mileage: int
    condition: CarCondition
    features: List[str]
    images: List[str]
    description: str
    is_sold: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ListingDeleted(CamelModel):
    status: str = "deleted"
    id: str
    deleted_images: List[str] = []
    warnings: List[str] = []


# images

class ImageUploaded(CamelModel):
    url: str
    path: str


class ImageDelete(CamelModel):
    url_to_delete: str = Field(..., min_length=1)


class DraftImageDelete(CamelModel):
    images: List[str]
    index: int


class DraftImages(CamelModel):
    images: List[str]


# generated text

class AdCopyRequest(CamelModel):
    make: str
    model: str
    year: int
    mileage: float = 0
    condition: str
    features: Union[List[str], str] = []
    price: float


class AdCopyOut(CamelModel):
    ad_copy: str


class LoginNotificationRequest(CamelModel):
    admin_email: str = Field(..., pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    login_timestamp: datetime


class LoginNotificationOut(CamelModel):
    email_subject: str
    email_body: str


class FacebookGenerateRequest(CamelModel):
    car: AdCopyRequest


class FacebookGenerated(CamelModel):
    post_text: str


class FacebookPostRequest(CamelModel):
    post_text: str = ""
    images: List[str] = []


class FacebookPosted(CamelModel):
    success: bool
    post_id: str


# reviews & complaints

class ReviewCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: Optional[str] = None
    occupation: Optional[str] = None
    rating: int = Field(..., ge=1, le=5)
    comment: str = Field(..., min_length=1, max_length=5000)
    car_id: Optional[str] = None
    car_make: Optional[str] = None
    car_model: Optional[str] = None


class ReviewPublic(CamelModel):
    """A review as shown on the public site; contact details are left out."""
    id: int
    name: str
    occupation: Optional[str] = None
    rating: int
    comment: str
    car_id: Optional[str] = None
    car_make: Optional[str] = None
    car_model: Optional[str] = None
    is_testimonial: bool
    submitted_at: Optional[datetime] = None


class ReviewOut(ReviewPublic):
    email: Optional[str] = None


class ReviewStatus(CamelModel):
    is_testimonial: bool


class ComplaintCreate(CamelModel):
    name: Optional[str] = None
    email: Optional[str] = None
    details: str = Field(..., min_length=1, max_length=5000)


class ComplaintOut(ComplaintCreate):
    id: int
    is_resolved: bool
    submitted_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ComplaintStatus(CamelModel):
    is_resolved: bool


# contact settings

class SettingsUpdate(CamelModel):
    whatsapp_number: Optional[str] = None
    messenger_id: Optional[str] = None
    facebook_page_link: Optional[str] = None


class SettingsOut(CamelModel):
    whatsapp_number: str = ""
    messenger_id: str = ""
    facebook_page_link: str = ""
    updated_at: Optional[datetime] = None


class ReconcileOut(CamelModel):
    orphans: List[str]
    deleted: bool = False
