import os
import tempfile

# Must be set before main/uploads are imported
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="digitalsitepro-uploads-"))
os.environ.pop("DATABASE_URL", None)
os.environ.pop("DATABASE_URI", None)

import mongomock
import pytest
from fastapi.testclient import TestClient

from database import get_db
from main import app


@pytest.fixture
def db():
    return mongomock.MongoClient()["digitalsitepro"]


@pytest.fixture
def client(db):
    app.dependency_overrides[get_db] = lambda: db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def admin(db):
    db["users"].insert_one({"name": "Ada", "email": "admin@example.com", "role": "admin"})
    return "admin@example.com"


@pytest.fixture
def member(db):
    db["users"].insert_one({"name": "Bob", "email": "bob@example.com", "phoneNumber": "555-0100"})
    return "bob@example.com"
