"""
projecthub/auth_context.py

Authentication primitives for FastAPI dependency injection.

Contains:
- AuthContext: immutable caller identity handed to the project core
- require_auth_context: FastAPI dependency for auth enforcement
- create_access_token / verify_token: JWT helpers
- hash_password / verify_password

The project core only ever sees AuthContext; it never reads tokens.
"""

from __future__ import annotations

import hashlib
import sqlite3
from datetime import datetime, timedelta
from typing import Optional

import jwt
from fastapi import Depends, HTTPException
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pydantic import BaseModel, ConfigDict

from projecthub.config import SECRET_KEY, ALGORITHM, ACCESS_TOKEN_MINUTES, IS_DEV
from projecthub.db import db_session
from projecthub.store import find_user_by_id

# Security scheme for HTTPBearer
security = HTTPBearer()


def hash_password(password: str) -> str:
    return hashlib.sha256(password.encode()).hexdigest()


def verify_password(password: str, password_hash: str) -> bool:
    return hash_password(password) == password_hash


def create_access_token(data: dict, minutes: Optional[int] = None) -> str:
    payload = dict(data)
    payload["exp"] = datetime.utcnow() + timedelta(minutes=minutes or ACCESS_TOKEN_MINUTES)
    return jwt.encode(payload, SECRET_KEY, algorithm=ALGORITHM)


# ---------------------------------------------------------
# JWT Token Verification
# ---------------------------------------------------------
def verify_token(token: str) -> dict:
    """
    Verify JWT access token and return decoded payload.

    Raises:
        HTTPException(401): If token is expired or invalid
    """
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
        return payload
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token expired")
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=401, detail="Invalid token")


# ---------------------------------------------------------
# AuthContext
# ---------------------------------------------------------
class AuthContext(BaseModel):
    """
    Caller identity derived from the JWT token and the users table.
    The users table is the source of truth; token claims other than `sub`
    are not trusted.
    """
    model_config = ConfigDict(frozen=True)

    user_id: str
    email: str
    first_name: str
    last_name: str
    avatar: Optional[str] = None


def require_auth_context(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    conn: sqlite3.Connection = Depends(db_session),
) -> AuthContext:
    """
    Auth dependency for protected routes.

    Raises:
        HTTPException(401): If token is invalid, expired, or user not found
    """
    payload = verify_token(credentials.credentials)
    user_id = payload.get("sub")

    if not user_id:
        print("[AUTH] Missing user_id in token payload")
        raise HTTPException(status_code=401, detail="Invalid token payload")

    user = find_user_by_id(conn, user_id)
    if user is None:
        print(f"[AUTH] User not found: user_id={user_id}")
        raise HTTPException(status_code=401, detail="User not found")

    ctx = AuthContext(
        user_id=user.id,
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        avatar=user.avatar,
    )

    if IS_DEV:
        print(f"[AUTH] Authenticated: user_id={ctx.user_id}, email={ctx.email}")

    return ctx
