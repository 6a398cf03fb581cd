from typing import NamedTuple, Optional

from . import policy
from .errors import DuplicateEmail, InvalidCredentials, InvalidInput
from .logger import get_logger
from .security import hash_password, needs_rehash, verify_legacy_plaintext, verify_password
from .sessions import create_session
from .store import JsonStore, USERS
from .utils import new_id, now_ms

_logger = get_logger(__name__)


class VerifiedIdentity(NamedTuple):
    email: str
    name: str


def public_user(user: dict) -> dict:
    return {"id": user["id"], "name": user.get("name"), "email": user.get("email")}


def profile(user: dict) -> dict:
    return {
        "id": user["id"],
        "name": user.get("name"),
        "email": user.get("email"),
        "phone": user.get("phone", ""),
        "role": user.get("role") or policy.USER,
        "createdAt": user.get("createdAt"),
    }


def get_user_by_email(store: JsonStore, email: str) -> Optional[dict]:
    return store.collection(USERS).find(lambda u: u.get("email") == email)


def register(store: JsonStore, name: str, email: str, password: str, phone: Optional[str] = None) -> dict:
    """Create a password user. No session is created; the caller logs in separately."""
    if not name or not email or not password:
        raise InvalidInput("name, email and password are required")
    users = store.collection(USERS)
    with store.lock(USERS):
        if get_user_by_email(store, email):
            raise DuplicateEmail(email)
        user = {
            "id": new_id(),
            "name": name,
            "email": email,
            "phone": phone or "",
            "passwordHash": hash_password(password),
            "role": policy.USER,
            "createdAt": now_ms(),
        }
        users.append(user)
    _logger.info(f"Registered user {user['id']} <{email}>")
    return user


def _password_matches(store: JsonStore, user: dict, password: str) -> bool:
    hashed = user.get("passwordHash")
    if hashed:
        if not verify_password(password, hashed):
            return False
        if needs_rehash(hashed):
            _set_password_hash(store, user["id"], password)
        return True
    # legacy record still holding a plaintext password; upgrade it on success
    if verify_legacy_plaintext(password, user.get("password") or ""):
        _set_password_hash(store, user["id"], password)
        return True
    return False


def _set_password_hash(store: JsonStore, user_id: str, password: str):
    def mutate(record):
        record.pop("password", None)
        record["passwordHash"] = hash_password(password)
        return record

    store.collection(USERS).update(user_id, mutate)


def authenticate_password(store: JsonStore, password: str, email: Optional[str] = None,
                          phone: Optional[str] = None) -> dict:
    """Match an email (tried first) or phone against the stored password.

    Users created by federated login have no password and never match here.
    """
    if not password:
        raise InvalidCredentials()
    users = store.collection(USERS).list()
    for field, value in (("email", email), ("phone", phone)):
        if not value:
            continue
        for user in users:
            if user.get(field) == value and _password_matches(store, user, password):
                return user
    raise InvalidCredentials()


def find_or_create_federated(store: JsonStore, identity: VerifiedIdentity) -> dict:
    users = store.collection(USERS)
    with store.lock(USERS):
        user = get_user_by_email(store, identity.email)
        if user is not None:
            return user
        user = {
            "id": new_id(),
            "name": identity.name,
            "email": identity.email,
            "phone": "",
            "passwordHash": "",
            "role": policy.USER,
            "createdAt": now_ms(),
        }
        users.append(user)
    _logger.info(f"Created federated user {user['id']} <{identity.email}>")
    return user


def login(store: JsonStore, user: dict) -> str:
    token = create_session(store, user["id"])
    _logger.info(f"User {user['id']} logged in")
    return token
