import secrets
import uuid

from passlib.context import CryptContext

# Use pbkdf2_sha256 as default to avoid bcrypt 72-byte limitation in some envs
pwd_context = CryptContext(schemes=["pbkdf2_sha256", "bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    if not plain or not hashed:
        return False
    try:
        return pwd_context.verify(plain, hashed)
    except ValueError:
        # not a hash passlib recognises
        return False


def needs_rehash(hashed: str) -> bool:
    return pwd_context.needs_update(hashed)


def verify_legacy_plaintext(plain: str, stored: str) -> bool:
    if not plain or not stored:
        return False
    return secrets.compare_digest(plain.encode("utf-8"), stored.encode("utf-8"))


def new_session_token() -> str:
    # uuid4 carries 122 random bits
    return str(uuid.uuid4())
