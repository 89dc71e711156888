"""
projecthub/store.py

Row-level access to the users / projects / members / tasks tables.

Reads accept a connection, writes accept the cursor handed out by
db.transaction() so several writes commit or roll back together.
Relation lists (projects.members, projects.tasks) are JSON arrays of ids.
"""

from __future__ import annotations

import json
import sqlite3
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from projecthub.errors import ConflictError
from projecthub.models import Member, Project, Task, User

# Columns a project update may touch; relation lists are excluded
PROJECT_MUTABLE_FIELDS = ("title", "url", "description")


def new_id() -> str:
    return uuid.uuid4().hex


def now_iso() -> str:
    return datetime.utcnow().isoformat()


# ---------------------------------------------------------
# Row conversion
# ---------------------------------------------------------
def _id_list(raw: Optional[str]) -> List[str]:
    if not raw:
        return []
    return [str(x) for x in json.loads(raw)]


def user_from_row(row: sqlite3.Row) -> User:
    return User(
        id=row["id"],
        email=row["email"],
        first_name=row["first_name"],
        last_name=row["last_name"],
        avatar=row["avatar"],
        created_at=row["created_at"],
    )


def member_from_row(row: sqlite3.Row) -> Member:
    return Member(
        id=row["id"],
        project_id=row["project_id"],
        email=row["email"],
        full_name=row["full_name"],
        avatar=row["avatar"],
        role=row["role"],
        created_at=row["created_at"],
    )


def task_from_row(row: sqlite3.Row) -> Task:
    return Task(
        id=row["id"],
        project_id=row["project_id"],
        title=row["title"],
        type=row["type"],
        status=row["status"],
        reporter=row["reporter"],
        assignees=_id_list(row["assignees"]),
        created_at=row["created_at"],
    )


def project_from_row(row: sqlite3.Row) -> Project:
    return Project(
        id=row["id"],
        title=row["title"],
        url=row["url"],
        description=row["description"],
        members=_id_list(row["members"]),
        tasks=_id_list(row["tasks"]),
        version=row["version"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


# ---------------------------------------------------------
# Users
# ---------------------------------------------------------
def insert_user(
    cur: sqlite3.Cursor,
    email: str,
    password_hash: str,
    first_name: str,
    last_name: str,
    avatar: Optional[str] = None,
) -> User:
    """Insert a user. Raises sqlite3.IntegrityError on a duplicate email."""
    user = User(
        id=new_id(),
        email=email,
        first_name=first_name,
        last_name=last_name,
        avatar=avatar,
        created_at=now_iso(),
    )
    cur.execute(
        """
        INSERT INTO users (id, email, password_hash, first_name, last_name, avatar, created_at)
        VALUES (?, ?, ?, ?, ?, ?, ?)
        """,
        (user.id, user.email, password_hash, user.first_name, user.last_name,
         user.avatar, user.created_at.isoformat()),
    )
    return user


def find_user_by_email(conn: sqlite3.Connection, email: str) -> Optional[User]:
    row = conn.execute("SELECT * FROM users WHERE email = ?", (email,)).fetchone()
    return user_from_row(row) if row else None


def find_user_by_id(conn: sqlite3.Connection, user_id: str) -> Optional[User]:
    row = conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
    return user_from_row(row) if row else None


def get_password_hash(conn: sqlite3.Connection, email: str) -> Optional[str]:
    row = conn.execute("SELECT password_hash FROM users WHERE email = ?", (email,)).fetchone()
    return row["password_hash"] if row else None


def _like_pattern(q: str) -> str:
    escaped = q.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def search_users(
    conn: sqlite3.Connection,
    q: str,
    limit: int = 20,
    exclude_email: Optional[str] = None,
) -> List[User]:
    """Users whose email or name contains q literally (% and _ are not wildcards)."""
    pattern = _like_pattern(q)
    rows = conn.execute(
        r"""
        SELECT * FROM users
        WHERE (email LIKE ? ESCAPE '\'
               OR first_name LIKE ? ESCAPE '\'
               OR last_name LIKE ? ESCAPE '\')
          AND email != ?
        ORDER BY email
        LIMIT ?
        """,
        (pattern, pattern, pattern, exclude_email or "", limit),
    ).fetchall()
    return [user_from_row(r) for r in rows]


# ---------------------------------------------------------
# Members
# ---------------------------------------------------------
def insert_member(cur: sqlite3.Cursor, member: Member) -> None:
    """Insert a member snapshot. Raises sqlite3.IntegrityError on (project_id, email) reuse."""
    cur.execute(
        """
        INSERT INTO members (id, project_id, email, full_name, avatar, role, created_at)
        VALUES (?, ?, ?, ?, ?, ?, ?)
        """,
        (member.id, member.project_id, member.email, member.full_name,
         member.avatar, member.role, member.created_at.isoformat()),
    )


def _fetch_by_ids(conn: sqlite3.Connection, table: str, ids: Sequence[str]) -> Dict[str, sqlite3.Row]:
    if not ids:
        return {}
    placeholders = ",".join("?" for _ in ids)
    rows = conn.execute(
        f"SELECT * FROM {table} WHERE id IN ({placeholders})", tuple(ids)
    ).fetchall()
    return {row["id"]: row for row in rows}


def _in_relation_order(ids: Sequence[str], found: Dict[str, sqlite3.Row]) -> List[sqlite3.Row]:
    # Left-join semantics: dangling ids are dropped, repeated ids resolve once
    seen = set()
    ordered = []
    for item_id in ids:
        if item_id in found and item_id not in seen:
            seen.add(item_id)
            ordered.append(found[item_id])
    return ordered


def get_members(conn: sqlite3.Connection, ids: Sequence[str]) -> List[Member]:
    found = _fetch_by_ids(conn, "members", ids)
    return [member_from_row(r) for r in _in_relation_order(ids, found)]


def count_members(conn: sqlite3.Connection, project_id: Optional[str] = None) -> int:
    if project_id is None:
        row = conn.execute("SELECT COUNT(*) AS n FROM members").fetchone()
    else:
        row = conn.execute(
            "SELECT COUNT(*) AS n FROM members WHERE project_id = ?", (project_id,)
        ).fetchone()
    return row["n"]


# ---------------------------------------------------------
# Tasks
# ---------------------------------------------------------
def insert_task(cur: sqlite3.Cursor, task: Task) -> None:
    cur.execute(
        """
        INSERT INTO tasks (id, project_id, title, type, status, reporter, assignees, created_at)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        """,
        (task.id, task.project_id, task.title, task.type, task.status,
         task.reporter, json.dumps(task.assignees), task.created_at.isoformat()),
    )


def get_tasks(conn: sqlite3.Connection, ids: Sequence[str]) -> List[Task]:
    found = _fetch_by_ids(conn, "tasks", ids)
    return [task_from_row(r) for r in _in_relation_order(ids, found)]


def count_tasks(conn: sqlite3.Connection) -> int:
    return conn.execute("SELECT COUNT(*) AS n FROM tasks").fetchone()["n"]


# ---------------------------------------------------------
# Projects
# ---------------------------------------------------------
def insert_project(cur: sqlite3.Cursor, project: Project) -> None:
    """Insert a project document. Raises sqlite3.IntegrityError on a duplicate url."""
    cur.execute(
        """
        INSERT INTO projects (id, title, url, description, members, tasks, version, created_at, updated_at)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
        (project.id, project.title, project.url, project.description,
         json.dumps(project.members), json.dumps(project.tasks), project.version,
         project.created_at.isoformat(), project.updated_at.isoformat()),
    )


def get_project(
    conn: sqlite3.Connection,
    project_id: Optional[str] = None,
    slug: Optional[str] = None,
) -> Optional[Project]:
    """Exact match on id, or on url when slug is given."""
    if project_id is not None:
        row = conn.execute("SELECT * FROM projects WHERE id = ?", (project_id,)).fetchone()
    elif slug is not None:
        row = conn.execute("SELECT * FROM projects WHERE url = ?", (slug,)).fetchone()
    else:
        raise ValueError("project_id or slug is required")
    return project_from_row(row) if row else None


def project_ids_for_email(conn: sqlite3.Connection, email: str) -> List[str]:
    """Ids of live projects that have a member row with this email."""
    rows = conn.execute(
        """
        SELECT p.id FROM projects p
        JOIN members m ON m.project_id = p.id
        WHERE m.email = ?
        ORDER BY p.created_at
        """,
        (email,),
    ).fetchall()
    return [r["id"] for r in rows]


def append_to_relation(
    cur: sqlite3.Cursor,
    project: Project,
    relation: str,
    item_id: str,
) -> int:
    """
    Append an id to a project's relation list with a version check.

    The write only applies when the stored version still equals
    project.version; otherwise another request changed the project after it
    was read and ConflictError is raised.

    Returns:
        The new project version
    """
    if relation not in ("members", "tasks"):
        raise ValueError(f"Unknown relation: {relation}")

    items = list(getattr(project, relation)) + [item_id]
    cur.execute(
        f"""
        UPDATE projects
        SET {relation} = ?, version = version + 1, updated_at = ?
        WHERE id = ? AND version = ?
        """,
        (json.dumps(items), now_iso(), project.id, project.version),
    )
    if cur.rowcount == 0:
        print(f"[PROJECTS] Stale write rejected: project_id={project.id}, version={project.version}")
        raise ConflictError("Project was modified by another request, please retry!")
    return project.version + 1


def update_project_fields(
    cur: sqlite3.Cursor,
    project: Project,
    fields: Dict[str, Any],
) -> int:
    """
    Merge the supplied fields into the project row.

    Only PROJECT_MUTABLE_FIELDS are written; members/tasks are never touched.
    Raises ConflictError on a version mismatch.
    """
    changes = {k: v for k, v in fields.items() if k in PROJECT_MUTABLE_FIELDS}
    assignments = ", ".join(f"{k} = ?" for k in changes)
    if assignments:
        assignments += ", "
    cur.execute(
        f"""
        UPDATE projects
        SET {assignments}version = version + 1, updated_at = ?
        WHERE id = ? AND version = ?
        """,
        (*changes.values(), now_iso(), project.id, project.version),
    )
    if cur.rowcount == 0:
        print(f"[PROJECTS] Stale write rejected: project_id={project.id}, version={project.version}")
        raise ConflictError("Project was modified by another request, please retry!")
    return project.version + 1


def delete_project(cur: sqlite3.Cursor, project_id: str) -> int:
    """Delete the project row only; member and task rows stay."""
    cur.execute("DELETE FROM projects WHERE id = ?", (project_id,))
    return cur.rowcount
