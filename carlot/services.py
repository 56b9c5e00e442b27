# carlot/services.py
"""Listing lifecycle: keep listing rows and their stored images consistent.

Holds no state of its own; each call coordinates the repository (`crud`) and
an `ObjectStorage` within a single request.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from . import crud, config
from .errors import ValidationError, NotFoundError, DependencyError
from .image_paths import resolve_path, is_storage_url
from .models import Listing
from .storage import ObjectStorage
from .utils import logger, clean_strings


@dataclass
class DeleteOutcome:
    listing_id: str
    deleted_paths: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


def normalize_images(image_urls) -> List[str]:
    images = clean_strings(image_urls)
    if not images:
        raise ValidationError("At least one image URL is required.")
    if len(images) > config.MAX_IMAGES:
        raise ValidationError(f"Maximum {config.MAX_IMAGES} image URLs allowed.")
    return images


def _prepare(fields: Dict[str, Any], image_urls) -> Dict[str, Any]:
    data = dict(fields)
    data.pop("id", None)
    data.pop("created_at", None)
    data.pop("updated_at", None)
    data["images"] = normalize_images(image_urls)
    data["features"] = clean_strings(data.get("features"))
    if hasattr(data.get("condition"), "value"):
        data["condition"] = data["condition"].value
    return data


def create_listing(db: Session, fields: Dict[str, Any], image_urls) -> Listing:
    data = _prepare(fields, image_urls)
    try:
        obj = crud.create_listing(db, data)
    except SQLAlchemyError as e:
        db.rollback()
        raise DependencyError(f"Failed to create listing: {e}") from e
    logger.info("Created listing %s (%s %s, %d images)", obj.id, obj.make, obj.model, len(obj.images))
    return obj


def update_listing(db: Session, listing_id: str, fields: Dict[str, Any], image_urls) -> Listing:
    data = _prepare(fields, image_urls)
    try:
        obj = crud.update_listing(db, listing_id, data)
    except SQLAlchemyError as e:
        db.rollback()
        raise DependencyError(f"Failed to update listing {listing_id}: {e}") from e
    if obj is None:
        raise NotFoundError(f"Listing {listing_id} not found")
    logger.info("Updated listing %s", listing_id)
    return obj


def delete_image(draft_images: List[str], index: int, storage: ObjectStorage) -> List[str]:
    """Remove one image from an unsaved draft, deleting its stored object first.

    The draft is returned as a new list; on storage failure the error
    propagates and the caller's draft is left as it was.
    """
    if index < 0 or index >= len(draft_images):
        raise ValidationError(f"Image index {index} out of range")
    url = draft_images[index]
    remaining = draft_images[:index] + draft_images[index + 1:]
    if not is_storage_url(url):
        return remaining
    path = resolve_path(url)
    if path is None:
        logger.warning("Could not resolve storage path for %s; keeping it in the draft", url)
        raise ValidationError(f"Could not determine storage path for image: {url}")
    storage.delete(path)
    logger.info("Deleted draft image %s", path)
    return remaining


def delete_listing(db: Session, listing_id: str, storage: ObjectStorage) -> DeleteOutcome:
    """Delete the listing's stored images (best effort), then the listing row.

    Storage cleanup failures are reported as warnings on the outcome and do not
    stop the row delete: an orphaned file is preferred over a listing that can
    never be removed.
    """
    try:
        obj = crud.get_listing(db, listing_id)
    except SQLAlchemyError as e:
        db.rollback()
        raise DependencyError(f"Failed to read listing {listing_id}: {e}") from e
    if obj is None:
        raise NotFoundError(f"Listing {listing_id} not found")

    outcome = DeleteOutcome(listing_id=listing_id)
    paths = []
    for url in obj.images or []:
        if not is_storage_url(url):
            continue
        path = resolve_path(url)
        if path is None:
            msg = f"Could not parse storage path from image URL: {url}"
            logger.warning(msg)
            outcome.warnings.append(msg)
            continue
        paths.append(path)

    if paths:
        try:
            outcome.deleted_paths = storage.delete_many(paths)
        except DependencyError as e:
            msg = f"Image cleanup failed for listing {listing_id}: {e}"
            logger.warning(msg)
            outcome.warnings.append(msg)

    try:
        deleted = crud.delete_listing(db, listing_id)
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Failed to delete listing %s", listing_id)
        raise DependencyError(f"Failed to delete listing {listing_id}: {e}") from e
    if not deleted:
        # removed by a concurrent request after the read above
        raise NotFoundError(f"Listing {listing_id} not found")
    logger.info("Deleted listing %s (%d images removed)", listing_id, len(outcome.deleted_paths))
    return outcome
