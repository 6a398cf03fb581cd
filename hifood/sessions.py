from typing import Optional

from . import config
from .errors import NotFound
from .security import new_session_token
from .store import JsonStore, SESSIONS, USERS
from .utils import now_ms

SESSION_COOKIE = "hi_food_session"


def _sessions(store: JsonStore):
    return store.collection(SESSIONS, key="token")


def create_session(store: JsonStore, user_id: str) -> str:
    if store.collection(USERS).get(user_id) is None:
        raise NotFound("user", user_id)
    token = new_session_token()
    _sessions(store).append({"token": token, "userId": user_id, "createdAt": now_ms()})
    return token


def is_expired(session: dict, ttl: Optional[int] = None, now: Optional[int] = None) -> bool:
    if ttl is None:
        return False
    now = now_ms() if now is None else now
    created = session.get("createdAt") or 0
    return now - created > ttl * 1000


def resolve_session(store: JsonStore, token: Optional[str]) -> Optional[dict]:
    if not token:
        return None
    session = _sessions(store).get(token)
    if session is None or is_expired(session, config.session_ttl()):
        return None
    return session


def destroy_session(store: JsonStore, token: Optional[str]) -> int:
    if not token:
        return 0
    return _sessions(store).remove_where(lambda s: s.get("token") == token)
