import pytest

from hifood import identity
from hifood.errors import DuplicateEmail, InvalidCredentials, InvalidInput
from hifood.identity import VerifiedIdentity
from hifood.sessions import resolve_session
from hifood.store import SESSIONS, USERS


def test_register_then_login_resolves_to_user(store):
    user = identity.register(store, "Lan", "lan@example.com", "pw123", phone="0900")
    assert user["role"] == "user"
    assert user["passwordHash"] and user["passwordHash"] != "pw123"
    # registration does not log in
    assert store.load(SESSIONS) == []

    found = identity.authenticate_password(store, "pw123", email="lan@example.com")
    token = identity.login(store, found)
    assert resolve_session(store, token)["userId"] == user["id"]


def test_register_duplicate_email(store):
    identity.register(store, "Lan", "lan@example.com", "pw")
    with pytest.raises(DuplicateEmail):
        identity.register(store, "Other", "lan@example.com", "pw2")
    assert len(store.load(USERS)) == 1


@pytest.mark.parametrize("name,email,password", [
    ("", "a@example.com", "pw"),
    ("A", None, "pw"),
    ("A", "a@example.com", ""),
])
def test_register_missing_fields(store, name, email, password):
    with pytest.raises(InvalidInput):
        identity.register(store, name, email, password)


def test_login_by_phone_and_wrong_password(store):
    identity.register(store, "Lan", "lan@example.com", "pw", phone="0900")
    assert identity.authenticate_password(store, "pw", phone="0900")["email"] == "lan@example.com"
    with pytest.raises(InvalidCredentials):
        identity.authenticate_password(store, "wrong", email="lan@example.com")
    with pytest.raises(InvalidCredentials):
        identity.authenticate_password(store, "pw")


def test_federated_user_cannot_use_password_path(store):
    identity.find_or_create_federated(store, VerifiedIdentity("fed@example.com", "Fed"))
    with pytest.raises(InvalidCredentials):
        identity.authenticate_password(store, "", email="fed@example.com")
    with pytest.raises(InvalidCredentials):
        identity.authenticate_password(store, "anything", email="fed@example.com")


def test_legacy_plaintext_password_upgraded_on_login(store):
    store.save(USERS, [{"id": "u1", "name": "Old", "email": "old@example.com", "phone": "", "password": "plain"}])
    user = identity.authenticate_password(store, "plain", email="old@example.com")
    assert user["id"] == "u1"
    stored = store.load(USERS)[0]
    assert "password" not in stored
    assert stored["passwordHash"].startswith("$pbkdf2-sha256$")
    # still works with the new hash
    assert identity.authenticate_password(store, "plain", email="old@example.com")["id"] == "u1"


def test_legacy_empty_password_never_matches(store):
    store.save(USERS, [{"id": "u1", "name": "G", "email": "g@example.com", "phone": "", "password": ""}])
    with pytest.raises(InvalidCredentials):
        identity.authenticate_password(store, "", email="g@example.com")


# -------------------- HTTP --------------------

def test_register_login_me_logout_flow(client):
    r = client.post("/api/register", json={"name": "Lan", "email": "lan@example.com", "password": "pw"})
    assert r.status_code == 200
    assert "message" in r.json()

    r = client.get("/api/me")
    assert r.json() == {"user": None}

    r = client.post("/api/login", json={"email": "lan@example.com", "password": "pw"})
    assert r.status_code == 200
    body = r.json()
    assert body["user"]["email"] == "lan@example.com"
    assert "passwordHash" not in body["user"]
    assert "hi_food_session" in r.cookies

    me = client.get("/api/me").json()["user"]
    assert me["name"] == "Lan"
    assert me["role"] == "user"

    r = client.post("/api/logout")
    assert r.status_code == 200
    client.cookies.clear()
    assert client.get("/api/me").json() == {"user": None}


def test_logout_destroys_session_server_side(client, store):
    client.post("/api/register", json={"name": "Lan", "email": "lan@example.com", "password": "pw"})
    token = client.post("/api/login", json={"email": "lan@example.com", "password": "pw"}).cookies["hi_food_session"]
    client.cookies.clear()
    client.post("/api/logout", headers={"Authorization": f"Bearer {token}"})
    assert resolve_session(store, token) is None


def test_register_errors(client):
    r = client.post("/api/register", json={"name": "Lan"})
    assert r.status_code == 400
    client.post("/api/register", json={"name": "Lan", "email": "lan@example.com", "password": "pw"})
    r = client.post("/api/register", json={"name": "Lan2", "email": "lan@example.com", "password": "pw"})
    assert r.status_code == 409


def test_login_invalid_credentials(client):
    r = client.post("/api/login", json={"email": "nobody@example.com", "password": "pw"})
    assert r.status_code == 401
    assert "detail" in r.json()


def test_auth_endpoints_without_body(client):
    r = client.post("/api/register")
    assert r.status_code == 400
    assert "detail" in r.json()
    assert client.post("/api/login").status_code == 401
    assert client.post("/api/login-google").status_code == 400
    assert client.post("/api/login-facebook").status_code == 400


def test_numeric_phone_is_stored_as_text(client, store):
    r = client.post(
        "/api/register",
        json={"name": "Hoa", "email": "hoa@example.com", "phone": 912345678, "password": "pw"},
    )
    assert r.status_code == 200
    user = store.collection(USERS).find(lambda u: u["email"] == "hoa@example.com")
    assert user["phone"] == "912345678"

    r = client.post("/api/login", json={"phone": 912345678, "password": "pw"})
    assert r.status_code == 200
    assert r.json()["user"]["email"] == "hoa@example.com"


def test_google_login_find_or_create(client, store, google_verifier):
    r = client.post("/api/login-google", json={"idToken": "google-ok"})
    assert r.status_code == 200
    assert r.json()["user"]["email"] == "gina@example.com"
    assert "hi_food_session" in r.cookies
    client.cookies.clear()

    client.post("/api/login-google", json={"idToken": "google-ok"})
    users = store.load(USERS)
    assert len(users) == 1
    assert users[0]["passwordHash"] == ""
    assert len(store.load(SESSIONS)) == 2


def test_federated_login_attaches_to_registered_email(client, store):
    client.post("/api/register", json={"name": "Gina", "email": "gina@example.com", "password": "pw"})
    registered_id = store.load(USERS)[0]["id"]

    r1 = client.post("/api/login-facebook", json={"accessToken": "fb-ok"})
    r2 = client.post("/api/login-google", json={"idToken": "google-ok"})
    assert r1.json()["user"]["id"] == registered_id
    assert r2.json()["user"]["id"] == registered_id
    assert len(store.load(USERS)) == 1


def test_provider_logins_require_token(client, google_verifier):
    assert client.post("/api/login-google", json={}).status_code == 400
    assert client.post("/api/login-facebook", json={}).status_code == 400
    assert google_verifier.calls == []


def test_facebook_invalid_token_is_401(client):
    r = client.post("/api/login-facebook", json={"accessToken": "bad"})
    assert r.status_code == 401


def test_provider_outage_is_500(client, facebook_verifier):
    from hifood.errors import ProviderUnavailable
    facebook_verifier.error = ProviderUnavailable("Facebook OAuth error")
    r = client.post("/api/login-facebook", json={"accessToken": "fb-ok"})
    assert r.status_code == 500
    assert r.json()["detail"] == "Facebook OAuth error"
