# carlot/reconcile.py
"""Find stored images that no listing references any more."""
from typing import List

from sqlalchemy.orm import Session

from . import crud, config
from .image_paths import resolve_path, is_storage_url
from .storage import ObjectStorage
from .utils import logger


def referenced_paths(db: Session) -> set:
    paths = set()
    for url in crud.all_listing_images(db):
        if is_storage_url(url):
            path = resolve_path(url)
            if path:
                paths.add(path)
    return paths


def find_orphans(db: Session, storage: ObjectStorage, prefix: str = None) -> List[str]:
    prefix = config.UPLOAD_PREFIX if prefix is None else prefix
    stored = storage.list_paths(prefix)
    used = referenced_paths(db)
    return [p for p in stored if p not in used]


def sweep_orphans(db: Session, storage: ObjectStorage, delete: bool = False) -> List[str]:
    """Report orphans, and delete them when `delete` is set.

    An upload whose listing has not been saved yet also looks like an
    orphan, so deletion is opt-in.
    """
    orphans = find_orphans(db, storage)
    if not orphans:
        logger.info("Orphan sweep: storage is clean")
        return []
    logger.warning("Orphan sweep: %d unreferenced objects: %s", len(orphans), ", ".join(orphans[:20]))
    if delete:
        storage.delete_many(orphans)
        logger.info("Orphan sweep: deleted %d objects", len(orphans))
    return orphans
