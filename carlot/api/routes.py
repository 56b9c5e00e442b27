# carlot/api/routes.py
import time
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Header, Query, UploadFile
from sqlalchemy.orm import Session

from .. import crud, schemas, services, config
from ..auth import authenticate
from ..db import get_db
from ..errors import NotFoundError, ValidationError
from ..facebook import FacebookPublisher
from ..image_paths import resolve_path, is_storage_url
from ..models import CarCondition
from ..reconcile import sweep_orphans
from ..storage import ObjectStorage
from ..textgen import TextGenerator, generate_ad_copy, generate_login_notification
from ..utils import logger, safe_filename
from .deps import get_storage, get_text_generator, get_facebook_publisher, require_admin

router = APIRouter()

@router.get("/health")
def health():
    return {"status": "ok"}


# listings

@router.get("/listings", response_model=List[schemas.ListingOut])
def listings(
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    make: Optional[str] = Query(None),
    condition: Optional[CarCondition] = Query(None),
    min_price: Optional[float] = Query(None, alias="minPrice"),
    max_price: Optional[float] = Query(None, alias="maxPrice"),
    q: Optional[str] = Query(None),
    sold: Optional[bool] = Query(None),
    db: Session = Depends(get_db)
):
    filters = {
        "make": make,
        "condition": condition.value if condition else None,
        "min_price": min_price,
        "max_price": max_price,
        "search": q,
        "sold": sold,
    }
    res = crud.list_listings(db, skip=skip, limit=limit, filters=filters)
    return res["items"]


@router.post("/listings/ad-copy", response_model=schemas.AdCopyOut)
def ad_copy(
    payload: schemas.AdCopyRequest,
    generator: TextGenerator = Depends(get_text_generator),
    _admin: dict = Depends(require_admin),
):
    return generate_ad_copy(payload.model_dump(), generator)


@router.post("/listings", response_model=schemas.ListingOut, status_code=201)
def create_listing(payload: schemas.ListingCreate, db: Session = Depends(get_db), _admin: dict = Depends(require_admin)):
    fields = payload.model_dump(exclude={"images"})
    return services.create_listing(db, fields, payload.images)


@router.get("/listings/{listing_id}", response_model=schemas.ListingOut)
def get_listing(listing_id: str, db: Session = Depends(get_db)):
    obj = crud.get_listing(db, listing_id)
    if not obj:
        raise NotFoundError("Car not found")
    return obj


@router.put("/listings/{listing_id}", response_model=schemas.ListingOut)
def update_listing(
    listing_id: str,
    payload: schemas.ListingUpdate,
    db: Session = Depends(get_db),
    _admin: dict = Depends(require_admin),
):
    fields = payload.model_dump(exclude={"images"})
    return services.update_listing(db, listing_id, fields, payload.images)


@router.delete("/listings/{listing_id}", response_model=schemas.ListingDeleted)
def delete_listing(
    listing_id: str,
    db: Session = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
    _admin: dict = Depends(require_admin),
):
    outcome = services.delete_listing(db, listing_id, storage)
    return schemas.ListingDeleted(id=outcome.listing_id, deleted_images=outcome.deleted_paths, warnings=outcome.warnings)


# images

@router.post("/images", response_model=schemas.ImageUploaded, status_code=201)
def upload_image(
    file: UploadFile = File(...),
    storage: ObjectStorage = Depends(get_storage),
    _admin: dict = Depends(require_admin),
):
    content_type = file.content_type or ""
    if not content_type.startswith("image/"):
        raise ValidationError("Invalid file type. Only images are allowed.")
    data = file.file.read(config.MAX_IMAGE_BYTES + 1)
    if not data:
        raise ValidationError("No file provided.")
    if len(data) > config.MAX_IMAGE_BYTES:
        raise ValidationError(f"Image exceeds {config.MAX_IMAGE_BYTES} bytes.")
    path = f"{config.UPLOAD_PREFIX}/{int(time.time() * 1000)}-{safe_filename(file.filename)}"
    url = storage.upload(path, data, content_type)
    logger.info("Uploaded image %s (%d bytes)", path, len(data))
    return {"url": url, "path": path}


@router.delete("/images")
def delete_image(
    payload: schemas.ImageDelete,
    storage: ObjectStorage = Depends(get_storage),
    _admin: dict = Depends(require_admin),
):
    if not is_storage_url(payload.url_to_delete):
        raise ValidationError("URL does not point into image storage.")
    path = resolve_path(payload.url_to_delete)
    if path is None:
        raise ValidationError("Could not parse storage path from URL.")
    storage.delete(path)
    logger.info("Deleted image %s", path)
    return {"status": "deleted", "path": path}


@router.post("/images/draft-delete", response_model=schemas.DraftImages)
def delete_draft_image(
    payload: schemas.DraftImageDelete,
    storage: ObjectStorage = Depends(get_storage),
    _admin: dict = Depends(require_admin),
):
    return {"images": services.delete_image(payload.images, payload.index, storage)}


# contact settings

def _settings_out(obj) -> schemas.SettingsOut:
    if obj is None:
        return schemas.SettingsOut()
    return schemas.SettingsOut(
        whatsapp_number=obj.whatsapp_number or "",
        messenger_id=obj.messenger_id or "",
        facebook_page_link=obj.facebook_page_link or "",
        updated_at=obj.updated_at,
    )


@router.get("/settings", response_model=schemas.SettingsOut)
def read_settings(db: Session = Depends(get_db)):
    return _settings_out(crud.get_settings(db))


@router.post("/settings", response_model=schemas.SettingsOut)
def write_settings(payload: schemas.SettingsUpdate, db: Session = Depends(get_db), _admin: dict = Depends(require_admin)):
    updates = payload.model_dump(exclude_unset=True)
    if not updates:
        raise ValidationError("At least one setting must be provided.")
    obj = crud.upsert_settings(db, updates)
    logger.info("Updated contact settings: %s", ", ".join(sorted(updates)))
    return _settings_out(obj)


# reviews

@router.post("/reviews", response_model=schemas.ReviewOut, status_code=201)
def create_review(payload: schemas.ReviewCreate, db: Session = Depends(get_db)):
    return crud.create_review(db, payload.model_dump())


@router.get("/reviews")
def list_reviews(
    all: bool = Query(False),
    db: Session = Depends(get_db),
    authorization: Optional[str] = Header(None),
):
    # testimonials are public without emails; the full list is admin only
    if all:
        authenticate(authorization)
    out = schemas.ReviewOut if all else schemas.ReviewPublic
    rows = crud.list_reviews(db, testimonials_only=not all)
    return [out.model_validate(r).model_dump(by_alias=True, mode="json") for r in rows]


@router.put("/reviews/{review_id}", response_model=schemas.ReviewOut)
def update_review(
    review_id: int,
    payload: schemas.ReviewStatus,
    db: Session = Depends(get_db),
    _admin: dict = Depends(require_admin),
):
    obj = crud.set_review_testimonial(db, review_id, payload.is_testimonial)
    if not obj:
        raise NotFoundError("Review not found")
    return obj


@router.delete("/reviews/{review_id}")
def delete_review(review_id: int, db: Session = Depends(get_db), _admin: dict = Depends(require_admin)):
    if not crud.delete_review(db, review_id):
        raise NotFoundError("Review not found")
    return {"status": "deleted"}


# complaints

@router.post("/complaints", response_model=schemas.ComplaintOut, status_code=201)
def create_complaint(payload: schemas.ComplaintCreate, db: Session = Depends(get_db)):
    return crud.create_complaint(db, payload.model_dump())


@router.get("/complaints", response_model=List[schemas.ComplaintOut])
def list_complaints(db: Session = Depends(get_db), _admin: dict = Depends(require_admin)):
    return crud.list_complaints(db)


@router.put("/complaints/{complaint_id}", response_model=schemas.ComplaintOut)
def update_complaint(
    complaint_id: int,
    payload: schemas.ComplaintStatus,
    db: Session = Depends(get_db),
    _admin: dict = Depends(require_admin),
):
    obj = crud.set_complaint_resolved(db, complaint_id, payload.is_resolved)
    if not obj:
        raise NotFoundError("Complaint not found")
    return obj


# facebook

@router.post("/facebook/generate-post", response_model=schemas.FacebookGenerated)
def facebook_generate_post(
    payload: schemas.FacebookGenerateRequest,
    generator: TextGenerator = Depends(get_text_generator),
    _admin: dict = Depends(require_admin),
):
    result = generate_ad_copy(payload.car.model_dump(), generator)
    return {"post_text": result["adCopy"]}


@router.post("/facebook/posts", response_model=schemas.FacebookPosted)
def facebook_post(
    payload: schemas.FacebookPostRequest,
    publisher: FacebookPublisher = Depends(get_facebook_publisher),
    _admin: dict = Depends(require_admin),
):
    post_id = publisher.publish(payload.post_text, payload.images)
    return {"success": True, "post_id": post_id}


# admin

@router.post("/admin/login-notification", response_model=schemas.LoginNotificationOut)
def login_notification(
    payload: schemas.LoginNotificationRequest,
    generator: TextGenerator = Depends(get_text_generator),
    _admin: dict = Depends(require_admin),
):
    return generate_login_notification(payload.admin_email, payload.login_timestamp, generator)


@router.post("/admin/reconcile", response_model=schemas.ReconcileOut)
def reconcile(
    db: Session = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
    _admin: dict = Depends(require_admin),
):
    return {"orphans": sweep_orphans(db, storage, delete=False), "deleted": False}
