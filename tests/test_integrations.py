# tests/test_integrations.py
from datetime import datetime

import jwt
import pytest

from carlot import auth
from carlot.errors import AuthError, DependencyError, ValidationError
from carlot.facebook import FacebookPublisher
from carlot.reconcile import find_orphans, sweep_orphans
from carlot import crud
from carlot.textgen import TextGenerator, generate_ad_copy, generate_login_notification
from fakes import FakeResponse, FakeSession


def _candidate(text):
    return FakeResponse(200, {"candidates": [{"content": {"parts": [{"text": text}]}}]})


def test_ad_copy_joins_features_and_uses_api_key_header():
    gen = TextGenerator(api_key="key", model="gemini-test", session=FakeSession(_candidate("  Shiny!  ")))
    out = generate_ad_copy({"make": "Audi", "model": "A4", "year": 2020, "mileage": 1,
                            "condition": "Used - Good", "features": ["Leather", " ", "Navigation"], "price": 1}, gen)
    assert out == {"adCopy": "Shiny!"}
    req = gen.session.requests[0]
    assert req["url"].endswith("/models/gemini-test:generateContent")
    assert req["headers"]["x-goog-api-key"] == "key"
    assert "Features: Leather, Navigation" in req["json"]["contents"][0]["parts"][0]["text"]


def test_text_generation_failures():
    with pytest.raises(DependencyError):
        TextGenerator(api_key="", session=FakeSession()).complete("hi")
    with pytest.raises(DependencyError):
        TextGenerator(api_key="k", session=FakeSession(FakeResponse(200, {"candidates": []}))).complete("hi")
    with pytest.raises(DependencyError):
        TextGenerator(api_key="k", session=FakeSession(FakeResponse(403, text="denied"))).complete("hi")


def test_login_notification_requires_json():
    gen = TextGenerator(api_key="k", session=FakeSession(_candidate("not json")))
    with pytest.raises(DependencyError):
        generate_login_notification("a@b.co", datetime(2024, 5, 1, 10, 0), gen)


def test_facebook_publish_attaches_unpublished_photos():
    session = FakeSession(FakeResponse(200, {"id": "ph1"}), FakeResponse(200, {"id": "ph2"}),
                          FakeResponse(200, {"id": "post1"}))
    fb = FacebookPublisher(page_id="page", access_token="tok", graph_url="https://graph.test", session=session)
    assert fb.publish("New arrival", ["https://x/1.jpg", "https://x/2.jpg"]) == "post1"
    photo, _, feed = session.requests
    assert photo["url"] == "https://graph.test/page/photos"
    assert photo["json"] == {"url": "https://x/1.jpg", "published": False}
    assert feed["json"]["attached_media"] == [{"media_fbid": "ph1"}, {"media_fbid": "ph2"}]


def test_facebook_errors():
    with pytest.raises(DependencyError):
        FacebookPublisher(page_id="", access_token="", session=FakeSession()).publish("hi", [])
    with pytest.raises(ValidationError):
        FacebookPublisher(page_id="p", access_token="t", session=FakeSession()).publish("  ", [])
    bad = FakeSession(FakeResponse(400, {"error": {"message": "Invalid image"}}))
    with pytest.raises(DependencyError, match="Invalid image"):
        FacebookPublisher(page_id="p", access_token="t", session=bad).publish("hi", ["https://x/1.jpg"])


def test_authenticate():
    secret = auth.config.AUTH_JWT_SECRET
    claims = auth.authenticate("Bearer " + jwt.encode({"sub": "u1"}, secret, algorithm="HS256"))
    assert claims["sub"] == "u1"
    with pytest.raises(AuthError) as missing:
        auth.authenticate(None)
    assert missing.value.status_code == 401
    with pytest.raises(AuthError) as malformed:
        auth.authenticate("Token abc")
    assert malformed.value.status_code == 401
    with pytest.raises(AuthError) as invalid:
        auth.authenticate("Bearer not-a-jwt")
    assert invalid.value.status_code == 403


def test_sweep_orphans(db, storage):
    storage.objects.update({"car-images/keep.png": b"1", "car-images/old.png": b"2", "elsewhere/x.png": b"3"})
    crud.create_listing(db, {
        "make": "Kia", "model": "Rio", "year": 2018, "price": 9000, "mileage": 70000,
        "condition": "Used - Fair", "features": [], "description": "Cheap runabout",
        "images": ["https://storage/bucket/car-images/keep.png", "https://cdn.example.com/y.jpg"],
    })
    assert find_orphans(db, storage) == ["car-images/old.png"]
    assert sweep_orphans(db, storage) == ["car-images/old.png"]
    assert storage.exists("car-images/old.png")
    sweep_orphans(db, storage, delete=True)
    assert not storage.exists("car-images/old.png")
    assert storage.exists("car-images/keep.png")
    assert storage.exists("elsewhere/x.png")
