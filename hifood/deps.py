"""FastAPI dependencies: store access, session resolution and role gates."""
from functools import lru_cache
from typing import Optional

from fastapi import Depends, Request

from . import config
from .errors import Forbidden, Unauthenticated
from .policy import Policy
from .providers import FacebookTokenVerifier, GoogleTokenVerifier
from .sessions import SESSION_COOKIE, resolve_session
from .store import JsonStore, USERS


@lru_cache()
def _store_for(data_dir: str) -> JsonStore:
    store = JsonStore(data_dir)
    store.ensure_files()
    return store


def get_store() -> JsonStore:
    return _store_for(config.state.data_dir)


def session_token(request: Request) -> Optional[str]:
    """Session token from the cookie, falling back to an Authorization bearer header."""
    token = request.cookies.get(SESSION_COOKIE)
    if token:
        return token
    auth = request.headers.get("authorization")
    if auth and auth.lower().startswith("bearer "):
        return auth.split(None, 1)[1].strip()
    return None


def current_session(request: Request, store: JsonStore = Depends(get_store)) -> Optional[dict]:
    return resolve_session(store, session_token(request))


def require_authenticated(session: Optional[dict] = Depends(current_session)) -> str:
    if session is None:
        raise Unauthenticated()
    return session["userId"]


def require_role(operation: str):
    """Dependency factory: the session's user must hold ``operation`` in the policy table.

    The user record is re-read on every request so role changes apply
    without logging in again.
    """

    def dependency(user_id: str = Depends(require_authenticated), store: JsonStore = Depends(get_store)) -> str:
        user = store.collection(USERS).get(user_id)
        if user is None or not Policy.allows(user.get("role"), operation):
            raise Forbidden()
        return user_id

    return dependency


@lru_cache()
def _google_verifier(client_id: str) -> GoogleTokenVerifier:
    return GoogleTokenVerifier(client_id)


def get_google_verifier() -> GoogleTokenVerifier:
    return _google_verifier(config.state.google_client_id)


def get_facebook_verifier() -> FacebookTokenVerifier:
    return FacebookTokenVerifier()
