"""
projecthub/routes_auth.py

Registration, login and caller profile endpoints.

The canonical users table is written here only; the project core reads
it through store.find_user_by_email when enrolling members.
"""

from __future__ import annotations

import sqlite3

from fastapi import APIRouter, Depends, HTTPException, Query

from projecthub.auth_context import (
    AuthContext,
    create_access_token,
    hash_password,
    require_auth_context,
    verify_password,
)
from projecthub.config import IS_DEV
from projecthub.db import db_session, transaction
from projecthub.responses import envelope
from projecthub.schemas import LoginRequest, ProfileResponse, RegisterRequest, TokenResponse
from projecthub.store import find_user_by_email, get_password_hash, insert_user, search_users

router = APIRouter(tags=["auth"])


def _token_response(user) -> TokenResponse:
    access_token = create_access_token({"sub": user.id, "email": user.email})
    return TokenResponse(
        access_token=access_token,
        user={
            "id": user.id,
            "email": user.email,
            "first_name": user.first_name,
            "last_name": user.last_name,
            "avatar": user.avatar,
        },
    )


@router.post("/auth/register", response_model=TokenResponse, status_code=201)
def register(req: RegisterRequest, conn: sqlite3.Connection = Depends(db_session)):
    try:
        with transaction(conn) as cur:
            user = insert_user(
                cur,
                email=req.email,
                password_hash=hash_password(req.password),
                first_name=req.first_name,
                last_name=req.last_name,
                avatar=req.avatar,
            )
    except sqlite3.IntegrityError as e:
        print(f"[REGISTER] IntegrityError caught: {e}, email={req.email!r}")
        raise HTTPException(status_code=400, detail="Email already registered")

    if IS_DEV:
        print(f"[REGISTER] User created with id={user.id}")
    return _token_response(user)


@router.post("/auth/login", response_model=TokenResponse)
def login(req: LoginRequest, conn: sqlite3.Connection = Depends(db_session)):
    password_hash = get_password_hash(conn, req.email)
    if password_hash is None or not verify_password(req.password, password_hash):
        print(f"[LOGIN] Rejected credentials for email={req.email!r}")
        raise HTTPException(status_code=401, detail="Invalid credentials")

    user = find_user_by_email(conn, req.email)
    return _token_response(user)


@router.get("/me")
def get_profile(ctx: AuthContext = Depends(require_auth_context)):
    profile = ProfileResponse(
        id=ctx.user_id,
        email=ctx.email,
        first_name=ctx.first_name,
        last_name=ctx.last_name,
        avatar=ctx.avatar,
    )
    return envelope(200, profile)


@router.get("/me/search")
def search_user(
    q: str = Query(..., min_length=1, max_length=200, description="Email or name fragment"),
    limit: int = Query(20, ge=1, le=100),
    ctx: AuthContext = Depends(require_auth_context),
    conn: sqlite3.Connection = Depends(db_session),
):
    users = search_users(conn, q, limit, exclude_email=ctx.email)
    return envelope(200, [
        ProfileResponse(
            id=u.id,
            email=u.email,
            first_name=u.first_name,
            last_name=u.last_name,
            avatar=u.avatar,
        )
        for u in users
    ])
