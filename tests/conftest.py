"""Test configuration and fixtures."""
import os
import tempfile

# Settings are cached on first use, so the environment must be set before app imports
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("LOGS_DIR", tempfile.mkdtemp(prefix="knowledge_share_logs_"))
os.environ.setdefault("PASSWORD_HASH_ITERATIONS", "1000")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine, event  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.core.db import get_db_session  # noqa: E402
from app.core.security import create_access_token, hash_password  # noqa: E402
from app.main import app  # noqa: E402
from app.models.schema import Article, Base, User  # noqa: E402
from app.services.text_processing import MockTextProcessor  # noqa: E402


@pytest.fixture
def test_db():
    """Create a test database."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session(test_db):
    """Create a test database session."""
    TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_db)
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(db_session):
    """Create a test client with database override."""

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db_session] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def processor():
    return MockTextProcessor()


@pytest.fixture
def make_user(db_session):
    """Factory creating persisted users with a known password."""
    counter = {"n": 0}

    def _make_user(password: str = "s3cret-pass", **overrides) -> User:
        counter["n"] += 1
        n = counter["n"]
        user = User(
            username=overrides.pop("username", f"writer{n}"),
            email=overrides.pop("email", f"writer{n}@example.com"),
            password_hash=hash_password(password),
            **overrides,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make_user


@pytest.fixture
def user(make_user):
    return make_user()


@pytest.fixture
def auth_headers(user):
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest.fixture
def make_article(db_session):
    """Factory creating persisted articles owned by the given user."""

    def _make_article(author: User, **fields) -> Article:
        values = {
            "title": "Scaling Postgres",
            "category": "Backend",
            "content": "<p>Connection pools matter.</p>",
            "tags": "postgres,databases",
            "short_summary": "Connection pools matter.",
        }
        values.update(fields)
        article = Article(user_id=author.id, **values)
        db_session.add(article)
        db_session.commit()
        db_session.refresh(article)
        return article

    return _make_article
