"""
Shared pytest fixtures.

DATABASE_PATH must point at a throwaway database BEFORE projecthub is
imported, because config/db resolve the path at import time.
"""

import os
import tempfile

TEST_DB_PATH = tempfile.mktemp(suffix=".db")
os.environ["DATABASE_PATH"] = TEST_DB_PATH

import pytest

from projecthub.auth_context import AuthContext, hash_password
from projecthub.db import get_db, init_db, transaction
from projecthub.store import insert_user


@pytest.fixture(autouse=True)
def clean_db():
    init_db()
    conn = get_db()
    for table in ("tasks", "members", "projects", "users"):
        conn.execute(f"DELETE FROM {table}")
    conn.commit()
    conn.close()
    yield


@pytest.fixture
def conn():
    c = get_db()
    yield c
    c.close()


@pytest.fixture
def make_user(conn):
    """Insert a user and return the AuthContext the HTTP layer would build."""
    def _make(email, first_name="Test", last_name="User", avatar=None):
        with transaction(conn) as cur:
            user = insert_user(cur, email, hash_password("secret123"), first_name, last_name, avatar)
        return AuthContext(
            user_id=user.id,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            avatar=user.avatar,
        )
    return _make
