# Auth gate: token issuance at login and bearer verification for protected routes.
# Tokens are self-contained JWTs; the only server-side state is the revocation list.

import threading
from typing import Dict, Optional

import jwt
import pendulum
from fastapi import Request
from sqlalchemy.orm import Session

import crud
from errors import UnauthorizedError
from logging_config import get_logger
from schemas import LoginRequest, TokenResponse
from utils.security import (
    TokenIdentity,
    create_access_token,
    decode_access_token,
    generate_salt,
    hash_password,
    verify_password,
)

logger = get_logger("storefront.auth")

INVALID_CREDENTIALS = "Invalid credentials"

# Compared against on a lookup miss so both failure paths do the same work
_DUMMY_SALT = generate_salt()
_DUMMY_HASH = hash_password("not-a-real-password", _DUMMY_SALT)


# Token ids invalidated by logout, each held in memory until its own expiry
class TokenRevocationList:

    def __init__(self):
        self._revoked: Dict[str, pendulum.DateTime] = {}
        self._lock = threading.Lock()

    def revoke(self, identity: TokenIdentity) -> None:
        now = pendulum.now("UTC")
        with self._lock:
            self._purge(now)
            self._revoked[identity.jti] = identity.expires_at

    def is_revoked(self, jti: str) -> bool:
        with self._lock:
            expires_at = self._revoked.get(jti)
            if expires_at is None:
                return False
            if expires_at <= pendulum.now("UTC"):
                del self._revoked[jti]
                return False
            return True

    def __len__(self) -> int:
        with self._lock:
            return len(self._revoked)

    # Caller holds the lock
    def _purge(self, now: pendulum.DateTime) -> None:
        for jti in [j for j, exp in self._revoked.items() if exp <= now]:
            del self._revoked[jti]


def login(db: Session, credentials: LoginRequest) -> TokenResponse:
    user = crud.get_user_by_login(db, credentials.username)
    if user is None:
        verify_password(credentials.password, _DUMMY_SALT, _DUMMY_HASH)
        logger.info("Login failed", reason="unknown_user")
        raise UnauthorizedError(INVALID_CREDENTIALS)

    if not verify_password(credentials.password, user.salt, user.password_hash):
        logger.info("Login failed", reason="bad_password", user_id=user.id)
        raise UnauthorizedError(INVALID_CREDENTIALS)

    token, expires_at = create_access_token(user.id, user.username)
    logger.info("Login succeeded", user_id=user.id)
    return TokenResponse(access_token=token, expires_at=expires_at.to_iso8601_string())


def _bearer_token(request: Request) -> Optional[str]:
    header = request.headers.get("Authorization")
    if header is None:
        return None
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise UnauthorizedError("Malformed authorization header")
    return token.strip()


def _authenticate(request: Request, token: str) -> TokenIdentity:
    try:
        identity = decode_access_token(token)
    except jwt.ExpiredSignatureError:
        logger.info("Token rejected", reason="expired", path=request.url.path)
        raise UnauthorizedError("Token has expired")
    except jwt.InvalidTokenError as exc:
        logger.info("Token rejected", reason="invalid", path=request.url.path, error=str(exc))
        raise UnauthorizedError("Invalid token")

    revocations: TokenRevocationList = request.app.state.revoked_tokens
    if revocations.is_revoked(identity.jti):
        logger.info("Token rejected", reason="revoked", path=request.url.path)
        raise UnauthorizedError("Token has been revoked")

    request.state.identity = identity
    return identity


# Dependency for routes that require a valid bearer token
def verify_token(request: Request) -> TokenIdentity:
    token = _bearer_token(request)
    if token is None:
        raise UnauthorizedError("Not authenticated")
    return _authenticate(request, token)


# Dependency for routes where a token is accepted but not required
def optional_identity(request: Request) -> Optional[TokenIdentity]:
    token = _bearer_token(request)
    if token is None:
        return None
    return _authenticate(request, token)


# Always an acknowledgement; only a still-valid token is put on the revocation list
def logout(request: Request) -> None:
    try:
        identity = optional_identity(request)
    except UnauthorizedError as exc:
        logger.info("Logout with unusable token", reason=exc.message)
        return
    if identity is None:
        return
    request.app.state.revoked_tokens.revoke(identity)
    logger.info("Token revoked", user_id=identity.user_id)
