# tests/conftest.py
import os

# configuration is read at import time, so it has to be in place first
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["AUTH_JWT_SECRET"] = "carlot-test-secret-0123456789abcdef"
os.environ["AUTH_JWKS_URL"] = ""
os.environ["STORAGE_BUCKET"] = "bucket"
os.environ["STORAGE_PUBLIC_URL"] = "https://storage"
os.environ["MAX_IMAGES"] = "5"
os.environ["ORPHAN_SWEEP_MINUTES"] = "0"

import jwt
import pytest
from fastapi.testclient import TestClient

from carlot.db import Base, engine, SessionLocal
from fakes import FakeStorage


@pytest.fixture()
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    yield session
    session.close()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def storage():
    return FakeStorage()


@pytest.fixture()
def client(db, storage):
    from carlot.main import app
    from carlot.api.deps import get_storage

    app.dependency_overrides[get_storage] = lambda: storage
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def admin_headers():
    token = jwt.encode({"sub": "admin"}, os.environ["AUTH_JWT_SECRET"], algorithm="HS256")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def car_fields():
    return {
        "make": "Toyota",
        "model": "Camry",
        "year": 2022,
        "price": 25000,
        "mileage": 15000,
        "condition": "New",
        "features": ["Sunroof"],
        "description": "Great car",
    }
