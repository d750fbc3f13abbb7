"""
Shared pytest fixtures.

Provides:
    - _fresh_schema: drop + recreate all tables around every test (autouse)
    - db: SQLAlchemy session bound to the in-memory engine
    - client: FastAPI TestClient
"""

import os

os.environ.setdefault("APP_ENV", "testing")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from pjtboard import models  # noqa: E402,F401
from pjtboard.db import Base, SessionLocal, engine  # noqa: E402


@pytest.fixture(autouse=True)
def _fresh_schema():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    with SessionLocal() as session:
        yield session


@pytest.fixture
def client():
    from pjtboard.main import app

    with TestClient(app) as c:
        yield c
