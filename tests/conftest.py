"""Shared fixtures. The environment must point at a scratch directory
before anything from `signage` is imported."""

import os
import tempfile

os.environ["SIGNAGE_DATA_DIR"] = tempfile.mkdtemp()
os.environ["SIGNAGE_DB_PATH"] = os.path.join(os.environ["SIGNAGE_DATA_DIR"], "test.db")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlmodel import Session, SQLModel  # noqa: E402

from signage.database import engine  # noqa: E402
from signage.main import app  # noqa: E402
from tests.helpers import create_admin  # noqa: E402


@pytest.fixture(autouse=True)
def fresh_db():
    SQLModel.metadata.drop_all(engine)
    SQLModel.metadata.create_all(engine)
    yield


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def session():
    with Session(engine) as s:
        yield s


@pytest.fixture
def admin(client):
    return create_admin(client)
