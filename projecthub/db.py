"""
projecthub/db.py

SQLite storage layer for the ProjectHub backend.

Collections:
- users:    canonical identity records (owned by the auth endpoints)
- projects: project documents; `members` and `tasks` hold JSON-encoded
            ordered lists of member / task ids (relation lists)
- members:  per-project membership snapshots
- tasks:    project tasks consumed by the report generator

Every multi-row write goes through transaction() so that a failure in a
later statement rolls back the earlier ones.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path as FsPath
from typing import Generator, Iterator

from projecthub.config import DATABASE_PATH, IS_DEV

# Database path (absolute DATABASE_PATH values are kept as-is)
DB_PATH = str(FsPath(__file__).resolve().parent / DATABASE_PATH)


def get_db() -> sqlite3.Connection:
    """
    Create and return a SQLite connection with Row factory.
    Callers own the connection and must close it.
    """
    conn = sqlite3.connect(DB_PATH, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    return conn


def db_session() -> Iterator[sqlite3.Connection]:
    """FastAPI dependency: one connection per request, closed afterwards."""
    conn = get_db()
    try:
        yield conn
    finally:
        conn.close()


@contextmanager
def transaction(conn: sqlite3.Connection) -> Generator[sqlite3.Cursor, None, None]:
    """
    Unit of work over a single connection.

    Commits when the block exits normally and rolls back every statement
    issued inside the block when it raises. The exception is re-raised.
    """
    cur = conn.cursor()
    try:
        yield cur
    except Exception:
        conn.rollback()
        if IS_DEV:
            print("[DB] Transaction rolled back")
        raise
    else:
        conn.commit()


def init_db() -> None:
    conn = get_db()
    cur = conn.cursor()

    cur.execute(
        """
        CREATE TABLE IF NOT EXISTS users (
            id TEXT PRIMARY KEY,
            email TEXT UNIQUE NOT NULL,
            password_hash TEXT NOT NULL,
            first_name TEXT NOT NULL,
            last_name TEXT NOT NULL,
            avatar TEXT,
            created_at TEXT NOT NULL
        )
        """
    )

    cur.execute(
        """
        CREATE TABLE IF NOT EXISTS projects (
            id TEXT PRIMARY KEY,
            title TEXT NOT NULL,
            url TEXT UNIQUE NOT NULL,
            description TEXT,
            members TEXT NOT NULL DEFAULT '[]',
            tasks TEXT NOT NULL DEFAULT '[]',
            version INTEGER NOT NULL DEFAULT 1,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        )
        """
    )

    # project_id is not a foreign key: deleting a project leaves its
    # member and task rows in place.
    cur.execute(
        """
        CREATE TABLE IF NOT EXISTS members (
            id TEXT PRIMARY KEY,
            project_id TEXT NOT NULL,
            email TEXT NOT NULL,
            full_name TEXT NOT NULL,
            avatar TEXT,
            role TEXT NOT NULL,
            created_at TEXT NOT NULL,
            UNIQUE (project_id, email)
        )
        """
    )

    cur.execute(
        """
        CREATE TABLE IF NOT EXISTS tasks (
            id TEXT PRIMARY KEY,
            project_id TEXT NOT NULL,
            title TEXT NOT NULL,
            type TEXT NOT NULL,
            status TEXT NOT NULL,
            reporter TEXT NOT NULL,
            assignees TEXT NOT NULL DEFAULT '[]',
            created_at TEXT NOT NULL
        )
        """
    )

    cur.execute("CREATE INDEX IF NOT EXISTS idx_members_email ON members(email)")
    cur.execute("CREATE INDEX IF NOT EXISTS idx_tasks_project_id ON tasks(project_id)")

    conn.commit()
    conn.close()
    print(f"[DB] Using SQLite ({DB_PATH})")
