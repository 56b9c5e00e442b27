# tests/test_storage.py
import pytest
import requests

from carlot.errors import DependencyError
from carlot.storage import SupabaseStorage, LocalStorage
from fakes import FakeResponse, FakeSession


def _supabase(*responses):
    return SupabaseStorage(url="https://abc.supabase.co", service_key="svc", bucket="car-images",
                           public_base="https://abc.supabase.co/storage/v1/object/public",
                           session=FakeSession(*responses))


def test_supabase_upload_returns_public_url():
    storage = _supabase(FakeResponse(200, {"Key": "car-images/cars/1-a.png"}))
    url = storage.upload("cars/1-a.png", b"data", "image/png")
    assert url == "https://abc.supabase.co/storage/v1/object/public/car-images/cars/1-a.png"
    req = storage.session.requests[0]
    assert req["method"] == "POST"
    assert req["url"] == "https://abc.supabase.co/storage/v1/object/car-images/cars/1-a.png"
    assert req["headers"]["Content-Type"] == "image/png"
    assert storage.session.headers["Authorization"] == "Bearer svc"


def test_supabase_bulk_delete_is_one_call():
    storage = _supabase(FakeResponse(200, []))
    assert storage.delete_many(["cars/a.png", "cars/b.png"]) == ["cars/a.png", "cars/b.png"]
    assert len(storage.session.requests) == 1
    req = storage.session.requests[0]
    assert req["method"] == "DELETE"
    assert req["json"] == {"prefixes": ["cars/a.png", "cars/b.png"]}
    assert storage.delete_many([]) == []


def test_supabase_errors_become_dependency_errors():
    storage = _supabase(FakeResponse(500, text="internal"), requests.ConnectionError("refused"))
    with pytest.raises(DependencyError):
        storage.delete_many(["cars/a.png"])
    with pytest.raises(DependencyError):
        storage.upload("cars/a.png", b"x", "image/png")


def test_supabase_exists_and_list():
    storage = _supabase(
        FakeResponse(200, {"name": "cars/a.png"}),
        FakeResponse(400, text="not found"),
        FakeResponse(200, [{"name": "a.png", "id": "1"}, {"name": "sub", "id": None}]),
    )
    assert storage.exists("cars/a.png") is True
    assert storage.exists("cars/missing.png") is False
    assert storage.list_paths("cars") == ["cars/a.png"]


def test_supabase_requires_configuration():
    with pytest.raises(DependencyError):
        SupabaseStorage(url="", service_key="svc")
    with pytest.raises(DependencyError):
        SupabaseStorage(url="https://abc.supabase.co", service_key="")


def test_local_storage_roundtrip(tmp_path):
    storage = LocalStorage(str(tmp_path), bucket="car-images", public_base="http://localhost:8000")
    url = storage.upload("cars/a.png", b"img", "image/png")
    assert url == "http://localhost:8000/uploads/car-images/cars/a.png"
    assert storage.exists("cars/a.png")
    assert storage.list_paths("cars") == ["cars/a.png"]
    assert storage.delete_many(["cars/a.png", "cars/gone.png"]) == ["cars/a.png", "cars/gone.png"]
    assert not storage.exists("cars/a.png")


def test_local_storage_rejects_escaping_paths(tmp_path):
    storage = LocalStorage(str(tmp_path), bucket="car-images", public_base="")
    with pytest.raises(DependencyError):
        storage.upload("../../etc/passwd", b"x", "image/png")
