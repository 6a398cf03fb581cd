"""Runtime configuration for the app (toggleable during tests/runtime)."""
import os
from typing import NamedTuple, Optional


class ConfigState(NamedTuple):
    data_dir: str
    qr_dir: str
    strict_transitions: bool
    session_ttl: Optional[int]
    google_client_id: str
    cookie_secure: bool


DEFAULT_GOOGLE_CLIENT_ID = "682461443893-2gkivmft3c9ft10bh4tmcfriu684rpgc.apps.googleusercontent.com"

# Default: permissive status updates, sessions never expire
state = ConfigState(
    data_dir="data",
    qr_dir="img_qr",
    strict_transitions=False,
    session_ttl=None,
    google_client_id=DEFAULT_GOOGLE_CLIENT_ID,
    cookie_secure=False,
)


def _truthy(value: Optional[str]) -> bool:
    return (value or "").lower() in ("1", "true", "yes", "on")


def load_from_env():
    global state
    ttl = os.getenv("SESSION_TTL_SECONDS")
    state = ConfigState(
        data_dir=os.getenv("HIFOOD_DATA_DIR", "data"),
        qr_dir=os.getenv("HIFOOD_QR_DIR", "img_qr"),
        strict_transitions=_truthy(os.getenv("STRICT_TRANSITIONS")),
        session_ttl=int(ttl) if ttl else None,
        google_client_id=os.getenv("GOOGLE_CLIENT_ID", DEFAULT_GOOGLE_CLIENT_ID),
        cookie_secure=_truthy(os.getenv("COOKIE_SECURE")),
    )


def update(**changes):
    global state
    state = state._replace(**changes)


def set_strict_transitions(value: bool):
    update(strict_transitions=bool(value))


def is_strict_transitions() -> bool:
    return state.strict_transitions


def session_ttl() -> Optional[int]:
    return state.session_ttl
