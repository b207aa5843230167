import os
import hmac
import hashlib
import uuid
from dataclasses import dataclass

import jwt
import pendulum

from config import SECRET_KEY, TOKEN_ALGORITHM, TOKEN_EXPIRE_MINUTES

# Generates a 16-byte cryptographic salt as a hexadecimal string
def generate_salt() -> str:
    return os.urandom(16).hex()

# Returns an HMAC-SHA256 hash of the password using the provided salt
def hash_password(password: str, salt: str) -> str:
    return hmac.new(salt.encode(), password.encode(), hashlib.sha256).hexdigest()

# Constant-time comparison of a candidate password against a stored hash
def verify_password(password: str, salt: str, stored_hash: str) -> bool:
    return hmac.compare_digest(hash_password(password, salt), stored_hash)


# Identity decoded from a verified session token
@dataclass(frozen=True)
class TokenIdentity:
    user_id: int
    username: str
    jti: str
    expires_at: pendulum.DateTime


# Issues a signed session token for the given user
def create_access_token(user_id: int, username: str,
                        expires_minutes: int = TOKEN_EXPIRE_MINUTES,
                        secret: str = SECRET_KEY) -> tuple[str, pendulum.DateTime]:
    issued_at = pendulum.now("UTC")
    expires_at = issued_at.add(minutes=expires_minutes)
    claims = {
        "sub": str(user_id),
        "username": username,
        "iat": int(issued_at.timestamp()),
        "exp": int(expires_at.timestamp()),
        "jti": uuid.uuid4().hex,
    }
    token = jwt.encode(claims, secret, algorithm=TOKEN_ALGORITHM)
    return token, expires_at


# Verifies signature and expiry; raises jwt.InvalidTokenError on any failure
def decode_access_token(token: str, secret: str = SECRET_KEY) -> TokenIdentity:
    claims = jwt.decode(
        token,
        secret,
        algorithms=[TOKEN_ALGORITHM],
        options={"require": ["sub", "exp", "jti"]},
    )
    try:
        user_id = int(claims["sub"])
    except (TypeError, ValueError) as exc:
        raise jwt.InvalidTokenError("Malformed subject claim") from exc
    return TokenIdentity(
        user_id=user_id,
        username=claims.get("username", ""),
        jti=claims["jti"],
        expires_at=pendulum.from_timestamp(claims["exp"], tz="UTC"),
    )
