"""Pytest configuration and fixtures."""

import os
import tempfile

# Point the app at test resources before anything from src reads settings
TEST_UPLOAD_DIR = tempfile.mkdtemp(prefix="blog-uploads-")
os.environ.setdefault("UPLOAD_DIR", TEST_UPLOAD_DIR)

# Use test database - PostgreSQL in Docker, SQLite locally
if os.getenv("DATABASE_URL", "").startswith("postgresql"):
    # Running in Docker - use PostgreSQL test database
    SQLALCHEMY_DATABASE_URL = os.environ["DATABASE_URL"].rsplit("/", 1)[0] + "/blog_test"
else:
    # Running locally - use SQLite
    SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"
os.environ["DATABASE_URL"] = SQLALCHEMY_DATABASE_URL

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from src.database import Base, get_db  # noqa: E402
from src.main import app  # noqa: E402

# Smallest valid PNG, good enough for upload tests
PNG_BYTES = bytes.fromhex(
    "89504e470d0a1a0a0000000d4948445200000001000000010806000000"
    "1f15c4890000000d49444154789c6360000002000001e221bc330000000049454e44ae426082"
)


class AuthHeaders(dict):
    """Dict subclass that also stores the registered user's details."""

    def __init__(
        self,
        *args,
        user_id: int | None = None,
        email: str | None = None,
        password: str | None = None,
        name: str | None = None,
        **kwargs,
    ):
        super().__init__(*args, **kwargs)
        self.user_id = user_id
        self.email = email
        self.password = password
        self.name = name


connect_args = {"check_same_thread": False} if "sqlite" in SQLALCHEMY_DATABASE_URL else {}
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args=connect_args)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="session", autouse=True)
def setup_test_database():
    """Create test database schema once at the start of the test session."""
    if "postgresql" in SQLALCHEMY_DATABASE_URL:
        from sqlalchemy_utils import create_database, database_exists

        if not database_exists(SQLALCHEMY_DATABASE_URL):
            create_database(SQLALCHEMY_DATABASE_URL)

    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture(scope="function", autouse=True)
def db():
    """Create a fresh database session for each test with cleanup."""
    session = TestingSessionLocal()

    yield session

    # Clean up all data after test
    session.rollback()
    for table in reversed(Base.metadata.sorted_tables):
        session.execute(table.delete())
    session.commit()
    session.close()


@pytest.fixture(scope="function")
def client(db):
    """Create a test client with database override."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def png_bytes():
    """Bytes of a tiny valid PNG image."""
    return PNG_BYTES


def register_and_login(client, name: str, email: str, password: str) -> AuthHeaders:
    """Register a user, log in and return bearer headers."""
    response = client.post(
        "/api/users/register",
        json={"name": name, "email": email, "password": password, "password2": password},
    )
    assert response.status_code == 201

    response = client.post("/api/users/login", json={"email": email, "password": password})
    assert response.status_code == 200
    data = response.json()

    return AuthHeaders(
        {"Authorization": f"Bearer {data['token']}"},
        user_id=data["id"],
        email=email,
        password=password,
        name=name,
    )


@pytest.fixture
def auth_headers(client):
    """Create a user and return auth headers with user info."""
    return register_and_login(client, "Ann", "ann@example.com", "secret1")


@pytest.fixture
def other_auth_headers(client):
    """A second, unrelated user."""
    return register_and_login(client, "Bob", "bob@example.com", "secret2")


@pytest.fixture
def create_post(client):
    """Factory that creates a post through the API and returns its JSON."""

    def _create_post(headers, **fields):
        data = {
            "title": "Title",
            "category": "Business",
            "description": "a description longer than twelve chars",
        }
        data.update(fields)
        response = client.post(
            "/api/posts",
            headers=headers,
            data=data,
            files={"thumbnail": ("cover.png", PNG_BYTES, "image/png")},
        )
        assert response.status_code == 201, response.text
        return response.json()

    return _create_post
