"""
projecthub/routes_projects.py

Project endpoints. All routes require authentication; mutations are
gated by the Administrator check inside the project core.

- POST   /projects                          create (caller becomes Administrator)
- GET    /projects                          projects the caller belongs to
- GET    /projects/{slug}                   aggregated view (members + tasks)
- GET    /projects/{slug}/report            member attribution + charts
- PATCH  /projects/{project_id}             partial update (Administrator)
- DELETE /projects/{project_id}             delete (Administrator)
- POST   /projects/{project_id}/members     add member (Administrator)
- POST   /projects/{project_id}/tasks       add task (any member)
"""

from __future__ import annotations

import sqlite3

from fastapi import APIRouter, Depends, Path

from projecthub.auth_context import AuthContext, require_auth_context
from projecthub.db import db_session
from projecthub.membership import add_member
from projecthub.projects import (
    create_project,
    list_projects,
    project_detail,
    remove_project,
    update_project,
)
from projecthub.reports import report_project
from projecthub.responses import envelope
from projecthub.schemas import AddMemberRequest, ProjectCreateRequest, ProjectUpdateRequest, TaskCreateRequest
from projecthub.tasks import add_task

router = APIRouter(
    prefix="/projects",
    tags=["projects"],
)


@router.post("")
def create(
    request: ProjectCreateRequest,
    ctx: AuthContext = Depends(require_auth_context),
    conn: sqlite3.Connection = Depends(db_session),
):
    return envelope(201, create_project(conn, ctx, request))


@router.get("")
def find_all(
    ctx: AuthContext = Depends(require_auth_context),
    conn: sqlite3.Connection = Depends(db_session),
):
    return envelope(200, list_projects(conn, ctx))


@router.get("/{slug}")
def find_detail(
    slug: str = Path(..., min_length=1, max_length=100),
    ctx: AuthContext = Depends(require_auth_context),
    conn: sqlite3.Connection = Depends(db_session),
):
    return envelope(200, project_detail(conn, slug))


@router.get("/{slug}/report")
def report(
    slug: str = Path(..., min_length=1, max_length=100),
    ctx: AuthContext = Depends(require_auth_context),
    conn: sqlite3.Connection = Depends(db_session),
):
    return envelope(200, report_project(conn, slug))


@router.patch("/{project_id}")
def update(
    request: ProjectUpdateRequest,
    project_id: str = Path(...),
    ctx: AuthContext = Depends(require_auth_context),
    conn: sqlite3.Connection = Depends(db_session),
):
    update_project(conn, ctx, project_id, request)
    return envelope(200, "Updated project successfully!")


@router.delete("/{project_id}")
def remove(
    project_id: str = Path(...),
    ctx: AuthContext = Depends(require_auth_context),
    conn: sqlite3.Connection = Depends(db_session),
):
    remove_project(conn, ctx, project_id)
    return envelope(200, "Deleted project successfully!")


@router.post("/{project_id}/members")
def create_member(
    request: AddMemberRequest,
    project_id: str = Path(...),
    ctx: AuthContext = Depends(require_auth_context),
    conn: sqlite3.Connection = Depends(db_session),
):
    member = add_member(conn, ctx, project_id, request)
    return envelope(201, {"message": "Member added successfully!", "new_member": member.model_dump(mode="json")})


@router.post("/{project_id}/tasks")
def create_project_task(
    request: TaskCreateRequest,
    project_id: str = Path(...),
    ctx: AuthContext = Depends(require_auth_context),
    conn: sqlite3.Connection = Depends(db_session),
):
    return envelope(201, add_task(conn, ctx, project_id, request))
