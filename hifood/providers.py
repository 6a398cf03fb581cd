"""Federated identity verifiers.

Each verifier turns a provider-issued token into a ``VerifiedIdentity`` or
raises. They are injected into the login endpoints through FastAPI
dependencies so tests can substitute fakes.
"""
import httpx
import jwt
from starlette.concurrency import run_in_threadpool

from .errors import InvalidInput, InvalidProviderToken, ProviderUnavailable
from .identity import VerifiedIdentity
from .logger import get_logger

_logger = get_logger(__name__)

GOOGLE_CERTS_URL = "https://www.googleapis.com/oauth2/v3/certs"
GOOGLE_ISSUERS = ("accounts.google.com", "https://accounts.google.com")

FACEBOOK_ME_URL = "https://graph.facebook.com/me"

HTTP_TIMEOUT = 10.0


class GoogleTokenVerifier:
    """Verifies Google ID tokens (RS256 JWTs) against Google's published keys."""

    def __init__(self, client_id: str, certs_url: str = GOOGLE_CERTS_URL):
        self.client_id = client_id
        self.jwks_client = jwt.PyJWKClient(certs_url, timeout=int(HTTP_TIMEOUT))

    def _decode(self, id_token: str) -> dict:
        signing_key = self.jwks_client.get_signing_key_from_jwt(id_token)
        payload = jwt.decode(
            id_token,
            signing_key.key,
            algorithms=["RS256"],
            audience=self.client_id,
        )
        if payload.get("iss") not in GOOGLE_ISSUERS:
            raise jwt.InvalidIssuerError("unexpected issuer")
        return payload

    async def verify(self, id_token: str) -> VerifiedIdentity:
        # key fetch and signature check are blocking; keep them off the event loop
        try:
            payload = await run_in_threadpool(self._decode, id_token)
        except jwt.PyJWTError as e:
            _logger.warning(f"Google token verification failed: {e}")
            raise ProviderUnavailable("Google OAuth error") from e

        email = payload.get("email")
        if not email:
            raise InvalidInput("Google token carries no email")
        name = payload.get("name") or email.split("@")[0] or "Google User"
        return VerifiedIdentity(email=email, name=name)


class FacebookTokenVerifier:
    """Resolves a Facebook access token through the Graph API ``me`` endpoint."""

    def __init__(self, me_url: str = FACEBOOK_ME_URL, transport: httpx.AsyncBaseTransport | None = None):
        self.me_url = me_url
        self.transport = transport

    async def verify(self, access_token: str) -> VerifiedIdentity:
        params = {"fields": "id,name,email", "access_token": access_token}
        try:
            async with httpx.AsyncClient(timeout=HTTP_TIMEOUT, transport=self.transport) as client:
                resp = await client.get(self.me_url, params=params)
        except httpx.HTTPError as e:
            _logger.warning(f"Facebook Graph API unreachable: {e}")
            raise ProviderUnavailable("Facebook OAuth error") from e

        if not resp.is_success:
            raise InvalidProviderToken("invalid Facebook token")
        try:
            info = resp.json()
        except ValueError as e:
            raise ProviderUnavailable("Facebook OAuth error") from e

        email = info.get("email") or f"{info.get('id')}@facebook.local"
        name = info.get("name") or "Facebook User"
        return VerifiedIdentity(email=email, name=name)
