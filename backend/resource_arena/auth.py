"""Caller identity from identity-provider session tokens.

The identity provider issues JWTs; we only verify them and read the
subject. No Authorization header means an anonymous caller.
"""
import asyncio
import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

import jwt
from fastapi import Header, HTTPException

from resource_arena.config import settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CallerIdentity:
    user_id: str
    username: Optional[str] = None


@lru_cache(maxsize=1)
def _jwks_client(url: str) -> jwt.PyJWKClient:
    return jwt.PyJWKClient(url)


async def decode_session_token(token: str) -> dict:
    """Verify a session token and return its claims. Raises jwt.InvalidTokenError."""
    options = {"require": ["sub"]}
    kwargs = {}
    if settings.AUTH_AUDIENCE:
        kwargs["audience"] = settings.AUTH_AUDIENCE
    else:
        options["verify_aud"] = False
    if settings.AUTH_ISSUER:
        kwargs["issuer"] = settings.AUTH_ISSUER

    if settings.AUTH_JWKS_URL:
        # PyJWKClient fetches the key set over blocking HTTP on a cache miss
        jwks = _jwks_client(settings.AUTH_JWKS_URL)
        signing_key = await asyncio.to_thread(jwks.get_signing_key_from_jwt, token)
        return jwt.decode(token, signing_key.key, algorithms=["RS256"], options=options, **kwargs)
    if settings.AUTH_JWT_SECRET:
        return jwt.decode(token, settings.AUTH_JWT_SECRET, algorithms=["HS256"], options=options, **kwargs)
    raise jwt.InvalidTokenError("No token verification key configured")


async def get_caller(authorization: Optional[str] = Header(None)) -> Optional[CallerIdentity]:
    """FastAPI dependency: the authenticated caller, or None if anonymous."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        raise HTTPException(status_code=401, detail="Invalid authorization header")
    try:
        claims = await decode_session_token(token.strip())
    except jwt.PyJWTError as e:
        logger.info("Rejected session token: %s", e)
        raise HTTPException(status_code=401, detail="Invalid session token")
    return CallerIdentity(
        user_id=str(claims["sub"]),
        username=claims.get("username") or claims.get("name"),
    )


async def require_caller(authorization: Optional[str] = Header(None)) -> CallerIdentity:
    caller = await get_caller(authorization)
    if caller is None:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return caller
