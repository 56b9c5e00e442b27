# carlot/api/deps.py
from functools import lru_cache
from typing import Optional

from fastapi import Header

from ..auth import authenticate
from ..facebook import FacebookPublisher
from ..storage import ObjectStorage, build_storage
from ..textgen import TextGenerator


@lru_cache(maxsize=1)
def get_storage() -> ObjectStorage:
    return build_storage()


def get_text_generator() -> TextGenerator:
    return TextGenerator()


def get_facebook_publisher() -> FacebookPublisher:
    return FacebookPublisher()


def require_admin(authorization: Optional[str] = Header(None)) -> dict:
    return authenticate(authorization)
