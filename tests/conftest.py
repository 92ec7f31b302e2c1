"""Pytest fixtures for testing"""

import os
import tempfile

# Settings are read at import time
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SCHEDULER_ENABLED"] = "false"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="woyu-uploads-")

import pytest
from datetime import date, timedelta
from typing import Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from woyu_finance.api.main import create_app
from woyu_finance.infrastructure.database.models import Base
from woyu_finance.infrastructure.database.session import get_db


# Test database: one shared in-memory connection
engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db: Session) -> TestClient:
    """Create FastAPI test client with test database"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)


@pytest.fixture
def today() -> date:
    return date.today()


@pytest.fixture
def project(client: TestClient) -> dict:
    response = client.post("/api/payment/projects", json={"projectName": "浯島文旅"})
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def make_item(client: TestClient, project: dict, today: date):
    """Factory creating payment items through the API"""

    def _make(total="1000", start=None, end=None, **fields) -> dict:
        body = {
            "itemName": fields.pop("item_name", "水電工程"),
            "totalAmount": total,
            "startDate": (start or today + timedelta(days=10)).isoformat(),
            "projectId": project["id"],
            **fields,
        }
        if end is not None:
            body["endDate"] = end.isoformat()
        response = client.post("/api/payment/items", json=body)
        assert response.status_code == 201, response.text
        return response.json()

    return _make


@pytest.fixture
def session_factory():
    """Session factory for code that owns its session (scheduled jobs)"""
    return TestingSessionLocal
