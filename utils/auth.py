"""
JWT helpers for bearer authentication

Tokens are HS256 JWTs whose ``sub`` claim is the user ID.
"""

from datetime import datetime, timedelta, timezone
from typing import Mapping, Optional

from jose import ExpiredSignatureError, JWTError, jwt

from config.settings import JWT_SECRET, JWT_ALGORITHM, ACCESS_TOKEN_EXPIRE_MINUTES
from utils.errors import AuthenticationError


def create_access_token(user_id: str, expires_delta: Optional[timedelta] = None,
                        secret: str = JWT_SECRET) -> str:
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    payload = {
        "sub": str(user_id),
        "iat": now,
        "exp": expire,
        "token_type": "access",
    }
    return jwt.encode(payload, secret, algorithm=JWT_ALGORITHM)


def get_bearer_token(headers: Mapping[str, str]) -> str:
    """Extract the token from an ``Authorization: Bearer <token>`` header"""
    auth_header = headers.get("authorization") or headers.get("Authorization")
    if not auth_header:
        raise AuthenticationError("Couldn't find JWT")

    scheme, _, token = auth_header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthenticationError("Malformed authorization header")
    return token.strip()


def validate_jwt(token: str, secret: str = JWT_SECRET) -> str:
    """
    Decode an access token and return its subject

    Raises:
        AuthenticationError: invalid signature, expired, or missing subject
    """
    try:
        payload = jwt.decode(token, secret, algorithms=[JWT_ALGORITHM])
    except ExpiredSignatureError as e:
        raise AuthenticationError("Token has expired") from e
    except JWTError as e:
        raise AuthenticationError("Couldn't validate JWT") from e

    subject = payload.get("sub")
    if not subject:
        raise AuthenticationError("Token has no subject")
    return str(subject)
