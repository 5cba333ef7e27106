import os

os.environ["ENV"] = "test"
os.environ.setdefault("TEST_DATABASE_URL", "sqlite://")

from typing import Dict  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

import plaza.models  # noqa: E402,F401
from plaza.auth.identity import Identity, get_identity_resolver  # noqa: E402
from plaza.db import Base, SessionLocal, engine, get_db  # noqa: E402
from plaza.exceptions import AuthenticationError  # noqa: E402
from plaza.main import create_app  # noqa: E402

pytest_plugins = [
    "tests.fixtures.profile_fixtures",
    "tests.fixtures.listing_fixtures",
    "tests.fixtures.thread_fixtures",
]


class FakeIdentityResolver:
    """Maps known tokens to identities without calling the auth provider."""

    def __init__(self) -> None:
        self.tokens: Dict[str, str] = {}

    def add(self, token: str, identity_id: str) -> str:
        self.tokens[token] = identity_id
        return token

    def resolve(self, token) -> Identity:
        if not isinstance(token, str) or not token.strip():
            raise AuthenticationError("Missing token")
        if token not in self.tokens:
            raise AuthenticationError("Auth failed")
        return Identity(id=self.tokens[token])


@pytest.fixture(scope="function")
def db():
    """Fresh schema per test on the shared in-memory SQLite connection."""
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def resolver():
    return FakeIdentityResolver()


@pytest.fixture
def client(db, resolver):
    """Client with db and identity resolver overridden."""
    app = create_app(testing=True)

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_identity_resolver] = lambda: resolver
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def login(resolver, faker):
    """Register a token for identity_id (random if omitted) and return the token."""

    def _login(identity_id: str | None = None) -> str:
        identity_id = identity_id or faker.uuid4()
        return resolver.add(f"token-{identity_id}", identity_id)

    return _login
