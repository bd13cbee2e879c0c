"""OIDC bearer-token authentication.

Provides:
- verify_token(): Validates a JWT against the issuer's JWKS and returns the subject
- get_current_user(): FastAPI dependency resolving the subject to a users row
"""

from __future__ import annotations

import os
import threading
import time
from dataclasses import dataclass
from typing import Any

import jwt
import requests
from fastapi import HTTPException, Request

# JWKS cache with TTL
_jwks_cache: dict[str, Any] | None = None
_jwks_cache_time: float = 0
_jwks_cache_lock = threading.Lock()
_JWKS_CACHE_TTL = 600  # 10 minutes

ROLE_CUSTOMER = "customer"
ROLE_HOTEL_ADMIN = "hotel_admin"
ROLE_ADMIN = "admin"


@dataclass
class CurrentUser:
    """Authenticated user context.

    hotel_id is set for hotel_admin users and scopes them to one hotel.
    """

    id: str
    external_subject: str
    email: str | None
    name: str | None
    role: str = ROLE_CUSTOMER
    hotel_id: int | None = None


def _get_settings() -> dict[str, Any]:
    """Load OIDC settings from environment."""
    raw = os.environ.get("OIDC_AUTHORIZED_PARTIES", "")
    authorized_parties = [p.strip() for p in raw.split(",") if p.strip()] or None

    return {
        "issuer": os.environ.get("OIDC_ISSUER"),
        "audience": os.environ.get("OIDC_AUDIENCE"),
        "jwks_url": os.environ.get("OIDC_JWKS_URL"),
        "authorized_parties": authorized_parties,
    }


def _fetch_jwks(jwks_url: str) -> dict[str, Any]:
    """Fetch JWKS from URL."""
    resp = requests.get(jwks_url, timeout=10)
    resp.raise_for_status()
    return resp.json()


def _get_jwks(jwks_url: str, force_refresh: bool = False) -> dict[str, Any]:
    """Get JWKS with caching."""
    global _jwks_cache, _jwks_cache_time

    with _jwks_cache_lock:
        now = time.time()
        fresh = _jwks_cache is not None and (now - _jwks_cache_time) < _JWKS_CACHE_TTL
        if fresh and not force_refresh:
            return _jwks_cache

        try:
            _jwks_cache = _fetch_jwks(jwks_url)
        except requests.RequestException:
            raise HTTPException(status_code=503, detail="Auth temporarily unavailable")
        _jwks_cache_time = now
        return _jwks_cache


def _find_key(jwks_url: str, kid: str, force_refresh: bool = False) -> dict[str, Any] | None:
    """Find signing key by kid, refetching the JWKS once on a miss."""
    for refresh in (force_refresh, True):
        for key in _get_jwks(jwks_url, force_refresh=refresh).get("keys", []):
            if key.get("kid") == kid:
                return key
        if refresh:
            break
    return None


def _decode(token: str, key_data: dict[str, Any], settings: dict[str, Any]) -> dict[str, Any]:
    try:
        public_key = jwt.algorithms.RSAAlgorithm.from_jwk(key_data)
    except (ValueError, jwt.exceptions.InvalidKeyError):
        raise HTTPException(status_code=401, detail="Invalid token")

    return jwt.decode(
        token,
        public_key,
        algorithms=["RS256"],
        issuer=settings["issuer"],
        audience=settings["audience"],
        options={"require": ["exp", "iss", "aud", "sub"]},
    )


def verify_token(token: str) -> str:
    """Verify JWT and return subject claim.

    Args:
        token: JWT token string.

    Returns:
        Subject claim (sub) from the token.

    Raises:
        HTTPException: 401 if token is invalid, 503 if the JWKS is unreachable.
    """
    settings = _get_settings()
    jwks_url = settings["jwks_url"]

    if not settings["issuer"] or not settings["audience"] or not jwks_url:
        raise HTTPException(status_code=401, detail="OIDC not configured")

    try:
        kid = jwt.get_unverified_header(token).get("kid")
    except jwt.exceptions.DecodeError:
        raise HTTPException(status_code=401, detail="Invalid token")

    if not kid:
        raise HTTPException(status_code=401, detail="Invalid token")

    key_data = _find_key(jwks_url, kid)
    if key_data is None:
        raise HTTPException(status_code=401, detail="Invalid token")

    try:
        try:
            payload = _decode(token, key_data, settings)
        except jwt.InvalidSignatureError:
            # Key may have rotated under the same kid
            key_data = _find_key(jwks_url, kid, force_refresh=True)
            if key_data is None:
                raise HTTPException(status_code=401, detail="Invalid token")
            payload = _decode(token, key_data, settings)
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token expired")
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=401, detail="Invalid token")

    authorized_parties = settings["authorized_parties"]
    if authorized_parties and "azp" in payload:
        if payload["azp"] not in authorized_parties:
            raise HTTPException(status_code=401, detail="Invalid token")

    sub = payload.get("sub")
    if not sub:
        raise HTTPException(status_code=401, detail="Invalid token")

    return sub


def _extract_bearer_token(request: Request) -> str:
    """Extract Bearer token from Authorization header.

    Raises:
        HTTPException: 401 if header missing or malformed.
    """
    auth_header = request.headers.get("Authorization")
    if not auth_header:
        raise HTTPException(status_code=401, detail="Missing authorization header")

    parts = auth_header.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise HTTPException(status_code=401, detail="Invalid authorization header")

    return parts[1]


def _get_user_from_db(external_subject: str) -> CurrentUser | None:
    """Lookup an active user by external_subject.

    Args:
        external_subject: OIDC sub claim.

    Returns:
        CurrentUser if found, None otherwise.
    """
    from hotelmgmt.infra.db import txn

    with txn() as cur:
        cur.execute(
            """
            SELECT id, external_subject, email, name, role, hotel_id
            FROM users
            WHERE external_subject = %s AND is_active
            """,
            (external_subject,),
        )
        row = cur.fetchone()
        if row is None:
            return None
        return CurrentUser(
            id=str(row[0]),
            external_subject=row[1],
            email=row[2],
            name=row[3],
            role=row[4],
            hotel_id=row[5],
        )


def get_current_user(request: Request) -> CurrentUser:
    """FastAPI dependency: get authenticated user.

    Extracts JWT from Authorization header, validates it,
    and resolves the user from the database.

    Raises:
        HTTPException: 401 if token invalid/missing, 403 if user not found.
    """
    token = _extract_bearer_token(request)
    sub = verify_token(token)

    user = _get_user_from_db(sub)
    if user is None:
        raise HTTPException(status_code=403, detail="User not found")

    return user

