"""Bearer-token identity resolution.

Credentials are issued by the separate identity service. This module only
verifies them and turns the payload into an ``AuthUser``.
"""
from datetime import datetime, timedelta, timezone
from typing import NamedTuple, Optional

import jwt
from fastapi import Depends, HTTPException, Request

from convention_voting.core import config

BEARER_PREFIX = "Bearer "


class AuthUser(NamedTuple):
    user_id: str
    is_admin: bool = False
    is_watcher: bool = False

    @property
    def is_voter(self) -> bool:
        # Admins and watchers never vote
        return not (self.is_admin or self.is_watcher)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create a JWT access token (tests and tooling only)."""
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=config.settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, config.settings.SECRET_KEY, algorithm=config.settings.ALGORITHM)


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        return None
    token = authorization[len(BEARER_PREFIX):].strip()
    return token or None


def decode_access_token(token: str) -> AuthUser:
    """Decode a bearer token into an AuthUser or raise 401."""
    try:
        payload = jwt.decode(token, config.settings.SECRET_KEY, algorithms=[config.settings.ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token expired")
    except jwt.PyJWTError:
        raise HTTPException(status_code=401, detail="Invalid token")

    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(status_code=401, detail="Invalid token")

    return AuthUser(
        user_id=str(user_id),
        is_admin=bool(payload.get("is_admin", False)),
        is_watcher=bool(payload.get("is_watcher", False)),
    )


def get_current_user(request: Request) -> AuthUser:
    """Resolve the Authorization header to an AuthUser.

    The resolved user is also stored on ``request.state.user`` so the activity
    middleware can record the request after the response is produced.
    """
    token = extract_bearer_token(request.headers.get("Authorization"))
    if token is None:
        raise HTTPException(status_code=401, detail="Authentication required")

    user = decode_access_token(token)
    request.state.user = user
    return user


def require_admin(user: AuthUser = Depends(get_current_user)) -> AuthUser:
    if not user.is_admin:
        raise HTTPException(status_code=403, detail="Admin privileges required")
    return user


def require_watcher(user: AuthUser = Depends(get_current_user)) -> AuthUser:
    if not user.is_watcher:
        raise HTTPException(status_code=403, detail="Watcher privileges required")
    return user


def require_voter(user: AuthUser = Depends(get_current_user)) -> AuthUser:
    if not user.is_voter:
        raise HTTPException(status_code=403, detail="Voting privileges required")
    return user
