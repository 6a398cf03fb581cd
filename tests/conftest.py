from typing import Generator

import pytest

from hifood import config
from hifood.identity import VerifiedIdentity, register
from hifood.errors import InvalidProviderToken
from hifood.main import app
from hifood.deps import get_facebook_verifier, get_google_verifier, get_store
from hifood.store import JsonStore, USERS


class FakeVerifier:
    """Stands in for a provider: maps known tokens to identities, rejects the rest."""

    def __init__(self, identities=None, error=None):
        self.identities = identities or {}
        self.error = error
        self.calls = []

    async def verify(self, token):
        self.calls.append(token)
        if self.error is not None:
            raise self.error
        if token not in self.identities:
            raise InvalidProviderToken()
        return self.identities[token]


@pytest.fixture(autouse=True)
def restore_config():
    saved = config.state
    yield
    config.state = saved


@pytest.fixture(scope="function")
def store(tmp_path) -> Generator:
    data_dir = str(tmp_path / "data")
    config.update(data_dir=data_dir, qr_dir=str(tmp_path / "img_qr"))
    s = JsonStore(data_dir)
    s.ensure_files()
    yield s


@pytest.fixture
def google_verifier():
    return FakeVerifier({"google-ok": VerifiedIdentity(email="gina@example.com", name="Gina")})


@pytest.fixture
def facebook_verifier():
    return FakeVerifier({"fb-ok": VerifiedIdentity(email="gina@example.com", name="Gina FB")})


@pytest.fixture(scope="function")
def client(store, google_verifier, facebook_verifier):
    # Share the test's store and swap the providers for fakes
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_google_verifier] = lambda: google_verifier
    app.dependency_overrides[get_facebook_verifier] = lambda: facebook_verifier
    from fastapi.testclient import TestClient
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(store):
    def _make(email, password="secret", role="user", name=None, phone=None):
        user = register(store, name or email.split("@")[0], email, password, phone=phone)
        if role != "user":
            def promote(record):
                record["role"] = role
                return record
            user = store.collection(USERS).update(user["id"], promote)
        return user
    return _make


@pytest.fixture
def login_as(client, make_user):
    """Create a user with ``role`` and return Authorization headers for a fresh session."""
    def _login(role="user", email=None, password="secret"):
        email = email or f"{role}@example.com"
        make_user(email, password=password, role=role)
        r = client.post("/api/login", json={"email": email, "password": password})
        assert r.status_code == 200
        token = r.cookies.get("hi_food_session")
        client.cookies.clear()
        return {"Authorization": f"Bearer {token}"}
    return _login
