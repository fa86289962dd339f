import os
import sys
import tempfile
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1] / "backend"
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Settings are read at import time
_DB_DIR = tempfile.mkdtemp(prefix="mock-interview-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_DB_DIR, 'test.db')}"
os.environ["SECRET_KEY"] = "test-secret-key"

from fastapi.testclient import TestClient

from core.registry import SessionRegistry
from database.db import SessionLocal, reset_db
from gateway.handler import ws_handler
from main import app
from models.user import User
from routes.interview import get_evaluation_oracle
from utils.security import create_access_token, hash_password

from fakes import FakeEvaluationOracle, FakeQuestionOracle


@pytest.fixture(autouse=True)
def fresh_db():
    reset_db()
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def user(db):
    user = User(
        email="candidate@example.com",
        hashed_password=hash_password("secret-password"),
        full_name="Test Candidate",
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def token(user):
    return create_access_token(data={"sub": user.id})


@pytest.fixture
def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def question_oracle():
    return FakeQuestionOracle()


@pytest.fixture
def evaluation_oracle():
    return FakeEvaluationOracle()


@pytest.fixture
def client(monkeypatch, question_oracle, evaluation_oracle):
    monkeypatch.setattr(ws_handler, "registry", SessionRegistry())
    monkeypatch.setattr(ws_handler, "active_connections", {})
    monkeypatch.setattr(ws_handler, "connection_sessions", {})
    monkeypatch.setattr(ws_handler, "question_oracle", question_oracle)
    monkeypatch.setattr(ws_handler, "evaluation_oracle", evaluation_oracle)
    app.dependency_overrides[get_evaluation_oracle] = lambda: evaluation_oracle
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
