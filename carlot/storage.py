# carlot/storage.py
"""Object storage adapters for listing images.

`SupabaseStorage` talks to the Supabase Storage REST API; `LocalStorage` keeps
files on disk for development. Both raise `DependencyError` on failure and
never retry.
"""
from __future__ import annotations

import os
from typing import Any, Iterable, List
from urllib.parse import quote

import requests

from . import config
from .errors import DependencyError
from .utils import logger


class ObjectStorage:
    name = "unknown"
    bucket = config.STORAGE_BUCKET

    def upload(self, path: str, data: bytes, content_type: str) -> str:
        raise NotImplementedError

    def delete(self, path: str) -> None:
        self.delete_many([path])

    def delete_many(self, paths: Iterable[str]) -> List[str]:
        raise NotImplementedError

    def exists(self, path: str) -> bool:
        raise NotImplementedError

    def list_paths(self, prefix: str = "") -> List[str]:
        raise NotImplementedError

    def public_url(self, path: str) -> str:
        raise NotImplementedError


class SupabaseStorage(ObjectStorage):
    name = "supabase"

    def __init__(self, *, url: str | None = None, service_key: str | None = None, bucket: str | None = None,
                 public_base: str | None = None, timeout: float | None = None, session=None):
        resolved = str(url or config.SUPABASE_URL or "").strip().rstrip("/")
        if not resolved:
            raise DependencyError("SUPABASE_URL is not configured")
        key = str(service_key if service_key is not None else config.SUPABASE_SERVICE_ROLE_KEY).strip()
        if not key:
            raise DependencyError("SUPABASE_SERVICE_ROLE_KEY is not configured")
        self.base = f"{resolved}/storage/v1"
        self.bucket = bucket or config.STORAGE_BUCKET
        self.public_base = (public_base or config.STORAGE_PUBLIC_URL or f"{self.base}/object/public").rstrip("/")
        self.timeout = float(timeout if timeout is not None else config.STORAGE_TIMEOUT_SECONDS)
        self.session = session or requests.Session()
        self.session.headers.update({"Authorization": f"Bearer {key}", "apikey": key})

    def _request(self, method: str, path: str, *, ok_codes=(200, 201), **kwargs) -> Any:
        url = f"{self.base}{path}"
        try:
            response = self.session.request(method=method, url=url, timeout=self.timeout, **kwargs)
        except requests.Timeout as exc:
            raise DependencyError("storage request timed out") from exc
        except requests.RequestException as exc:
            raise DependencyError(f"storage request failed: {exc}") from exc
        if int(response.status_code) not in ok_codes:
            raise DependencyError(f"storage error {response.status_code}: {response.text[:300]}")
        return response

    @staticmethod
    def _quoted(path: str) -> str:
        return quote(path.lstrip("/"), safe="/")

    def upload(self, path: str, data: bytes, content_type: str) -> str:
        self._request(
            "POST",
            f"/object/{self.bucket}/{self._quoted(path)}",
            data=data,
            headers={"Content-Type": content_type, "x-upsert": "false"},
        )
        return self.public_url(path)

    def delete_many(self, paths: Iterable[str]) -> List[str]:
        paths = [p for p in paths if p]
        if not paths:
            return []
        self._request("DELETE", f"/object/{self.bucket}", json={"prefixes": paths})
        return paths

    def exists(self, path: str) -> bool:
        response = self._request("GET", f"/object/info/{self.bucket}/{self._quoted(path)}", ok_codes=(200, 400, 404))
        return int(response.status_code) == 200

    def list_paths(self, prefix: str = "") -> List[str]:
        prefix = prefix.strip("/")
        out, offset, page = [], 0, 1000
        while True:
            response = self._request(
                "POST",
                f"/object/list/{self.bucket}",
                json={"prefix": prefix, "limit": page, "offset": offset},
            )
            rows = response.json() or []
            for row in rows:
                # folders come back without an id
                if row.get("id") is None:
                    continue
                name = row.get("name") or ""
                out.append(f"{prefix}/{name}" if prefix else name)
            if len(rows) < page:
                return out
            offset += page

    def public_url(self, path: str) -> str:
        return f"{self.public_base}/{self.bucket}/{self._quoted(path)}"


class LocalStorage(ObjectStorage):
    """Files under `<root>/<bucket>/`, served by the app at `/uploads/<bucket>/`."""
    name = "local"

    def __init__(self, root: str | None = None, *, bucket: str | None = None, public_base: str | None = None):
        self.bucket = bucket or config.STORAGE_BUCKET
        self.root = os.path.abspath(root or config.LOCAL_STORAGE_DIR)
        self.public_base = (public_base if public_base is not None else config.STORAGE_PUBLIC_URL).rstrip("/")
        os.makedirs(os.path.join(self.root, self.bucket), exist_ok=True)

    def _abs(self, path: str) -> str:
        bucket_dir = os.path.join(self.root, self.bucket)
        full = os.path.abspath(os.path.join(bucket_dir, path.lstrip("/")))
        if not full.startswith(bucket_dir + os.sep):
            raise DependencyError(f"path escapes storage root: {path}")
        return full

    def upload(self, path: str, data: bytes, content_type: str) -> str:
        full = self._abs(path)
        try:
            os.makedirs(os.path.dirname(full), exist_ok=True)
            with open(full, "wb") as fh:
                fh.write(data)
        except OSError as exc:
            raise DependencyError(f"storage write failed: {exc}") from exc
        return self.public_url(path)

    def delete_many(self, paths: Iterable[str]) -> List[str]:
        deleted = []
        for p in paths:
            full = self._abs(p)
            try:
                os.remove(full)
            except FileNotFoundError:
                logger.debug("Local object already gone: %s", p)
            except OSError as exc:
                raise DependencyError(f"storage delete failed for {p}: {exc}") from exc
            deleted.append(p)
        return deleted

    def exists(self, path: str) -> bool:
        return os.path.isfile(self._abs(path))

    def list_paths(self, prefix: str = "") -> List[str]:
        bucket_dir = os.path.join(self.root, self.bucket)
        start = os.path.join(bucket_dir, prefix.strip("/")) if prefix else bucket_dir
        out = []
        for dirpath, _dirs, files in os.walk(start):
            for fname in files:
                rel = os.path.relpath(os.path.join(dirpath, fname), bucket_dir)
                out.append(rel.replace(os.sep, "/"))
        return sorted(out)

    def public_url(self, path: str) -> str:
        return f"{self.public_base}/uploads/{self.bucket}/{path.lstrip('/')}"


def build_storage() -> ObjectStorage:
    provider = config.STORAGE_PROVIDER
    if provider == "local":
        return LocalStorage()
    if provider == "supabase":
        return SupabaseStorage()
    raise DependencyError(f"unknown STORAGE_PROVIDER: {provider}")
