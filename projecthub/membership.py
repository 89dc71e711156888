"""
projecthub/membership.py

Membership Mutator: enrolls users into projects.

Order of checks (each failure aborts before any write):
1. project exists               -> NotFoundError
2. actor is an Administrator    -> ForbiddenError
3. target user exists           -> NotFoundError
4. target is not yet a member   -> ConflictError

The member insert and the relation append run in one transaction. The
UNIQUE(project_id, email) constraint and the project version check turn a
concurrent duplicate add into ConflictError instead of a second member.
"""

from __future__ import annotations

import sqlite3

from projecthub.aggregator import as_project, load_project
from projecthub.auth_context import AuthContext
from projecthub.authz import require_administrator
from projecthub.config import IS_DEV
from projecthub.db import transaction
from projecthub.errors import ConflictError, NotFoundError
from projecthub.models import Member, User
from projecthub.schemas import AddMemberRequest
from projecthub.store import (
    append_to_relation,
    find_user_by_email,
    insert_member,
    new_id,
    now_iso,
)

ALREADY_MEMBER = "User is already a member of the project!"


def snapshot_member(user: User, project_id: str, role: str) -> Member:
    """Copy the user's profile into a new member record."""
    return Member(
        id=new_id(),
        project_id=project_id,
        email=user.email,
        full_name=user.full_name,
        avatar=user.avatar,
        role=role,
        created_at=now_iso(),
    )


def add_member(
    conn: sqlite3.Connection,
    actor: AuthContext,
    project_id: str,
    request: AddMemberRequest,
) -> Member:
    view = load_project(conn, project_id=project_id)
    require_administrator(view.members, actor.email)

    account = find_user_by_email(conn, request.email)
    if account is None:
        raise NotFoundError("User not found!")

    if any(m.email == account.email for m in view.members):
        raise ConflictError(ALREADY_MEMBER)

    member = snapshot_member(account, view.id, request.role.value)
    try:
        with transaction(conn) as cur:
            insert_member(cur, member)
            append_to_relation(cur, as_project(view), "members", member.id)
    except sqlite3.IntegrityError:
        print(f"[MEMBERS] Concurrent duplicate rejected: project_id={view.id}, email={account.email}")
        raise ConflictError(ALREADY_MEMBER)

    if IS_DEV:
        print(f"[MEMBERS] Added member_id={member.id}, project_id={view.id}, role={member.role}")
    return member
