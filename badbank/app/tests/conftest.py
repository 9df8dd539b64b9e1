import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel

from ..core.config import Settings, get_settings
from ..core import db as db_module
from ..core.db import create_engine_for_url, get_session, init_db, set_engine
from ..core.locks import UserLocks
from ..main import app
from ..models import SignupRequest
from ..services import AuthService


@pytest.fixture
def settings() -> Settings:
    return Settings(
        jwt_secret="test-secret",
        password_hash_iterations=1000,
        max_retries=3,
        retry_backoff_seconds=0.001,
        lock_timeout_seconds=5.0,
    )


@pytest.fixture
def engine(tmp_path):
    test_db = tmp_path / "test.db"
    engine = create_engine_for_url(f"sqlite:///{test_db}")
    SQLModel.metadata.drop_all(engine)
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def locks() -> UserLocks:
    return UserLocks()


@pytest.fixture
def user_id(session, settings):
    auth = AuthService(session, settings=settings)
    user = auth.signup(
        SignupRequest(username="alice", email="alice@example.com", password="s3cret")
    )
    return user.id


@pytest.fixture
def client(engine, settings) -> TestClient:
    original_engine = db_module.engine
    set_engine(engine)

    def _get_session_override():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = _get_session_override
    app.dependency_overrides[get_settings] = lambda: settings
    init_db()

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
    set_engine(original_engine)
