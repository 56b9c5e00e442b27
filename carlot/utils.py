# carlot/utils.py
"""Shared helpers: logging setup and small normalization utilities."""
import os
import re
import logging
from typing import Iterable, List

from .config import LOG_LEVEL


def get_logger(name=__name__):
    level = (LOG_LEVEL or "INFO").upper()
    logging.basicConfig(
        format="%(asctime)s | %(levelname)-7s | %(name)s | %(message)s",
        level=getattr(logging, level, logging.INFO)
    )
    return logging.getLogger(name)

logger = get_logger("carlot")


def clean_strings(values: Iterable[str] | None) -> List[str]:
    """Strip every entry and drop blank ones, keeping order."""
    if not values:
        return []
    out = []
    for v in values:
        if v is None:
            continue
        s = str(v).strip()
        if s:
            out.append(s)
    return out


_unsafe_chars = re.compile(r"[^a-zA-Z0-9._-]")

def safe_filename(name: str) -> str:
    base = os.path.basename(name or "").strip()
    return _unsafe_chars.sub("_", base) or "image"
