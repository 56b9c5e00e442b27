# carlot/textgen.py
"""Generated text for listings: ad copy and admin login notifications.

A thin client over the Gemini `generateContent` REST endpoint. One call per
request, no retry; any failure surfaces as `DependencyError`.
"""
from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Dict

import requests

from . import config
from .errors import DependencyError
from .utils import logger

API_ROOT = "https://generativelanguage.googleapis.com/v1beta"

AD_COPY_PROMPT = """You are an expert copywriter specializing in writing compelling ad copy for cars.

Given the following details about a car, generate an ad copy that is likely to attract potential buyers. The ad copy should be concise, engaging, and highlight the key features and benefits of the car.

Make: {make}
Model: {model}
Year: {year}
Mileage: {mileage}
Condition: {condition}
Features: {features}
Price: {price}
"""

LOGIN_NOTIFICATION_PROMPT = """You are a security notification system.
Given the admin's email address and a login timestamp, generate a concise subject and body for a login notification email.

Admin Email: {admin_email}
Login Timestamp: {login_timestamp}

The email body should inform the admin about a new login to their account, include the login timestamp formatted as "YYYY-MM-DD HH:MM:SS UTC", and advise them to contact support immediately if they do not recognize this activity.
Respond with a JSON object with the keys "emailSubject" and "emailBody" only.
"""


class TextGenerator:
    def __init__(self, *, api_key: str | None = None, model: str | None = None,
                 timeout: float | None = None, session=None):
        self.api_key = str(api_key if api_key is not None else config.GEMINI_API_KEY).strip()
        self.model = model or config.GEMINI_MODEL
        self.timeout = float(timeout if timeout is not None else config.TEXTGEN_TIMEOUT_SECONDS)
        self.session = session or requests.Session()

    def complete(self, prompt: str, *, json_output: bool = False) -> str:
        if not self.api_key:
            raise DependencyError("GEMINI_API_KEY is not configured")
        body: Dict[str, Any] = {"contents": [{"role": "user", "parts": [{"text": prompt}]}]}
        if json_output:
            body["generationConfig"] = {"responseMimeType": "application/json"}
        url = f"{API_ROOT}/models/{self.model}:generateContent"
        try:
            response = self.session.request(
                method="POST", url=url, json=body, timeout=self.timeout,
                headers={"x-goog-api-key": self.api_key},
            )
        except requests.RequestException as exc:
            raise DependencyError(f"text generation request failed: {exc}") from exc
        if int(response.status_code) != 200:
            raise DependencyError(f"text generation error {response.status_code}: {response.text[:300]}")
        try:
            payload = response.json()
            parts = payload["candidates"][0]["content"]["parts"]
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise DependencyError("text generation returned no candidates") from exc
        text = "".join(p.get("text", "") for p in parts).strip()
        if not text:
            raise DependencyError("text generation returned an empty response")
        return text


def _features_text(features) -> str:
    if isinstance(features, str):
        return features.strip() or "Standard"
    items = [str(f).strip() for f in features or [] if str(f).strip()]
    return ", ".join(items) or "Standard"


def generate_ad_copy(attributes: Dict[str, Any], generator: TextGenerator | None = None) -> Dict[str, str]:
    generator = generator or TextGenerator()
    prompt = AD_COPY_PROMPT.format(
        make=attributes.get("make", ""),
        model=attributes.get("model", ""),
        year=attributes.get("year", ""),
        mileage=attributes.get("mileage", ""),
        condition=attributes.get("condition", ""),
        features=_features_text(attributes.get("features")),
        price=attributes.get("price", ""),
    )
    ad_copy = generator.complete(prompt)
    logger.info("Generated ad copy for %s %s", attributes.get("make"), attributes.get("model"))
    return {"adCopy": ad_copy}


def generate_login_notification(admin_email: str, login_timestamp: datetime,
                                generator: TextGenerator | None = None) -> Dict[str, str]:
    generator = generator or TextGenerator()
    if login_timestamp.tzinfo is None:
        login_timestamp = login_timestamp.replace(tzinfo=timezone.utc)
    prompt = LOGIN_NOTIFICATION_PROMPT.format(
        admin_email=admin_email,
        login_timestamp=login_timestamp.astimezone(timezone.utc).isoformat(),
    )
    raw = generator.complete(prompt, json_output=True)
    try:
        data = json.loads(raw)
        return {"emailSubject": str(data["emailSubject"]), "emailBody": str(data["emailBody"])}
    except (ValueError, KeyError, TypeError) as exc:
        raise DependencyError("login notification response was not valid JSON") from exc
