"""
Bearer token authentication

Shoppers present an HS256 JWT whose subject is their user id.
Missing, malformed or expired tokens are answered with 401.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ..config import settings

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def create_access_token(
    user_id: str,
    secret: Optional[str] = None,
    algorithm: Optional[str] = None,
    expires_in: Optional[timedelta] = None,
) -> str:
    """Issue a signed token for a user"""
    now = datetime.now(timezone.utc)
    expires_in = expires_in or timedelta(minutes=settings.token_expire_minutes)
    payload = {
        "sub": user_id,
        "iat": int(now.timestamp()),
        "exp": int((now + expires_in).timestamp()),
    }
    return jwt.encode(
        payload,
        secret or settings.jwt_secret,
        algorithm=algorithm or settings.jwt_algorithm,
    )


def decode_access_token(token: str) -> str:
    """Verify a token and return its user id"""
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token expired, please log in again")
    except jwt.InvalidTokenError as e:
        logger.warning(f"Rejected bearer token: {e}")
        raise HTTPException(status_code=401, detail="Invalid token")

    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(status_code=401, detail="Invalid token")
    return user_id


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> str:
    """Dependency resolving the authenticated user id"""
    if credentials is None or not credentials.credentials:
        raise HTTPException(status_code=401, detail="No token, authorization denied")
    return decode_access_token(credentials.credentials)
