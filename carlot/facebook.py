# carlot/facebook.py
"""Publish a listing to the dealership's Facebook page through the Graph API."""
from __future__ import annotations

from typing import List

import requests

from . import config
from .errors import DependencyError, ValidationError
from .utils import logger


class FacebookPublisher:
    def __init__(self, *, page_id: str | None = None, access_token: str | None = None,
                 graph_url: str | None = None, timeout: float | None = None, session=None):
        self.page_id = str(page_id if page_id is not None else config.FACEBOOK_PAGE_ID).strip()
        self.access_token = str(access_token if access_token is not None else config.FACEBOOK_PAGE_ACCESS_TOKEN).strip()
        self.graph_url = (graph_url or config.FACEBOOK_GRAPH_URL).rstrip("/")
        self.timeout = float(timeout if timeout is not None else config.FACEBOOK_TIMEOUT_SECONDS)
        self.session = session or requests.Session()

    def _post(self, edge: str, body: dict) -> dict:
        url = f"{self.graph_url}/{self.page_id}/{edge}"
        try:
            response = self.session.request(
                method="POST", url=url, json=body, timeout=self.timeout,
                params={"access_token": self.access_token},
            )
        except requests.RequestException as exc:
            raise DependencyError(f"Facebook request failed: {exc}") from exc
        try:
            data = response.json()
        except ValueError:
            data = {}
        if int(response.status_code) >= 400 or not data.get("id"):
            message = (data.get("error") or {}).get("message") or f"Facebook error {response.status_code}"
            raise DependencyError(message)
        return data

    def publish(self, post_text: str, images: List[str]) -> str:
        if not self.page_id or not self.access_token:
            raise DependencyError("Facebook Page credentials not set.")
        if not post_text or not post_text.strip():
            raise ValidationError("Missing postText.")
        # photos are uploaded unpublished, then attached to a single feed post
        attached = []
        for url in images:
            photo = self._post("photos", {"url": url, "published": False})
            attached.append({"media_fbid": photo["id"]})
        body = {"message": post_text}
        if attached:
            body["attached_media"] = attached
        post = self._post("feed", body)
        logger.info("Published Facebook post %s with %d photos", post["id"], len(attached))
        return post["id"]
