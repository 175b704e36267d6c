# src/core/security.py
"""
Clerk session verification.

The browser sends the Clerk session JWT either as a Bearer token or in the
`__session` cookie. Tokens are checked against Clerk's JWKS; the `sub` claim
is the user id. Any verified user is fully authorized.
"""

import time

import httpx
import jwt
from fastapi import Depends, Request

from src.config import Settings, log
from src.core.errors import Unauthorized

SESSION_COOKIE_NAME = "__session"


def _extract_token(request: Request) -> str | None:
    auth = request.headers.get("Authorization")
    if auth and auth.startswith("Bearer "):
        return auth[7:]
    return request.cookies.get(SESSION_COOKIE_NAME)


class ClerkAuthGate:
    def __init__(self, settings: Settings, transport: httpx.AsyncBaseTransport | None = None):
        self.settings = settings
        self._transport = transport
        self._jwks: dict | None = None
        self._jwks_fetched_at: float = 0

    async def _fetch_jwks(self) -> dict:
        headers = {}
        if self.settings.CLERK_SECRET_KEY:
            headers["Authorization"] = f"Bearer {self.settings.CLERK_SECRET_KEY}"
        async with httpx.AsyncClient(timeout=5, transport=self._transport) as client:
            response = await client.get(self.settings.CLERK_JWKS_URL, headers=headers)
            response.raise_for_status()
            return response.json()

    async def _get_jwks(self, force_refresh: bool = False) -> dict:
        now = time.monotonic()
        age = now - self._jwks_fetched_at
        # Forced refreshes (unknown kid) happen at most once per JWKS_MIN_REFRESH_INTERVAL.
        forced = force_refresh and age >= self.settings.JWKS_MIN_REFRESH_INTERVAL
        if self._jwks is None or forced or age > self.settings.JWKS_CACHE_TTL:
            self._jwks = await self._fetch_jwks()
            self._jwks_fetched_at = now
        return self._jwks

    async def _signing_key(self, token: str) -> jwt.PyJWK:
        kid = jwt.get_unverified_header(token).get("kid")
        for force_refresh in (False, True):
            jwk_set = jwt.PyJWKSet.from_dict(await self._get_jwks(force_refresh=force_refresh))
            for key in jwk_set.keys:
                if key.key_id == kid:
                    return key
        raise jwt.InvalidKeyError(f"No matching key found for kid={kid}")

    async def resolve(self, request: Request) -> str | None:
        """Returns the Clerk user id for a verified session, None otherwise."""
        token = _extract_token(request)
        if not token:
            return None

        try:
            signing_key = await self._signing_key(token)
            payload = jwt.decode(
                token,
                signing_key.key,
                algorithms=["RS256"],
                leeway=5,
                options={"require": ["exp", "sub"], "verify_aud": False},
            )
        except jwt.PyJWTError as e:
            log.warning(f"Rejected Clerk session token: {e}")
            return None
        except (httpx.HTTPError, ValueError) as e:
            log.error(f"Failed to fetch JWKS from Clerk: {e}")
            return None

        authorized_parties = self.settings.CLERK_AUTHORIZED_PARTIES
        if authorized_parties and payload.get("azp") not in authorized_parties:
            log.warning(f"Rejected Clerk session token from unexpected party: {payload.get('azp')}")
            return None

        return payload.get("sub") or None


async def resolve_identity(request: Request) -> str | None:
    return await request.app.state.auth_gate.resolve(request)


async def get_current_user_id(user_id: str | None = Depends(resolve_identity)) -> str:
    if not user_id:
        raise Unauthorized("Unauthorized: sign in to chat with the Scribe.")
    return user_id
