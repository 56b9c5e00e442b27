# carlot/image_paths.py
"""Map public image URLs back to object-storage paths.

Resolution runs an ordered list of pure matchers; the first one returning a
path wins. A `None` result means "not ours to delete": callers skip the URL and
log a warning, they never abort on it.
"""
from typing import Callable, List, Optional
from urllib.parse import unquote, urlsplit

from .config import STORAGE_BUCKET, STORAGE_PUBLIC_URL, SUPABASE_URL

PUBLIC_OBJECT_SEGMENT = "/object/public/"

Matcher = Callable[[str], Optional[str]]


def _strip(path: str) -> Optional[str]:
    path = path.split("?", 1)[0].split("#", 1)[0].lstrip("/")
    return path or None


def _clean(path: str) -> Optional[str]:
    # only paths cut out of a full URL are percent-decoded
    path = _strip(path)
    return unquote(path) if path else None


def _after(url: str, segment: str) -> Optional[str]:
    pos = url.find(segment)
    if pos < 0:
        return None
    return _clean(url[pos + len(segment):])


def bucket_segment(url: str, bucket: str = None) -> Optional[str]:
    return _after(url, f"/{bucket or STORAGE_BUCKET}/")


def public_object_segment(url: str) -> Optional[str]:
    return _after(url, PUBLIC_OBJECT_SEGMENT)


def bare_path(url: str) -> Optional[str]:
    """An already-resolved path (no scheme, no host) resolves to itself, undecoded."""
    parts = urlsplit(url)
    if parts.scheme or parts.netloc or url.startswith("//"):
        return None
    path = _strip(url)
    if path and "." in path.rsplit("/", 1)[-1]:
        return path
    return None


def filename_fallback(url: str) -> Optional[str]:
    tail = _clean(urlsplit(url).path.rsplit("/", 1)[-1])
    if tail and "." in tail:
        return tail
    return None


MATCHERS: List[Matcher] = [
    bucket_segment,
    public_object_segment,
    bare_path,
    filename_fallback,
]


def resolve_path(url: str) -> Optional[str]:
    if not url or not url.strip():
        return None
    url = url.strip()
    for matcher in MATCHERS:
        path = matcher(url)
        if path:
            return path
    return None


def _storage_hosts() -> set:
    hosts = set()
    for base in (STORAGE_PUBLIC_URL, SUPABASE_URL):
        if base:
            hosts.add(urlsplit(base).netloc.lower())
    return hosts


def is_storage_url(url: str) -> bool:
    """True when `url` points into our bucket rather than at an external image host."""
    if not url or not url.strip():
        return False
    url = url.strip()
    if f"/{STORAGE_BUCKET}/" in url or PUBLIC_OBJECT_SEGMENT in url:
        return True
    parts = urlsplit(url)
    if not parts.scheme and not parts.netloc:
        return bare_path(url) is not None
    return parts.netloc.lower() in _storage_hosts()
