"""
projecthub/projects.py

Project lifecycle: create, list, detail, update, remove.

Mutations follow the same gate: resolve project with joined members
(NotFoundError), then the Administrator check (ForbiddenError), then the
write. Update merges only the supplied fields and never touches the
member/task relations. Remove deletes the project document only.
"""

from __future__ import annotations

import sqlite3
from typing import List

from projecthub.aggregator import as_project, hydrate, load_project
from projecthub.auth_context import AuthContext
from projecthub.authz import ADMIN_ROLE, project_manager, require_administrator
from projecthub.config import IS_DEV
from projecthub.db import transaction
from projecthub.errors import ConflictError
from projecthub.models import Member, Project, ProjectView
from projecthub.schemas import ProjectCreateRequest, ProjectSummary, ProjectUpdateRequest
from projecthub.store import (
    delete_project,
    get_project,
    insert_member,
    insert_project,
    new_id,
    now_iso,
    project_ids_for_email,
    update_project_fields,
)

URL_TAKEN = "Project url is already taken!"


def create_project(
    conn: sqlite3.Connection,
    author: AuthContext,
    request: ProjectCreateRequest,
) -> Project:
    """
    Create a project with the author enrolled as its Administrator.

    The member snapshot and the project document are written in one
    transaction, so a project never exists without its creator.

    Raises:
        ConflictError: If the url slug is already used by another project
    """
    now = now_iso()
    project_id = new_id()
    creator = Member(
        id=new_id(),
        project_id=project_id,
        email=author.email,
        full_name=f"{author.first_name} {author.last_name}",
        avatar=author.avatar,
        role=ADMIN_ROLE,
        created_at=now,
    )
    project = Project(
        id=project_id,
        title=request.title,
        url=request.url,
        description=request.description,
        members=[creator.id],
        tasks=[],
        version=1,
        created_at=now,
        updated_at=now,
    )

    try:
        with transaction(conn) as cur:
            insert_member(cur, creator)
            insert_project(cur, project)
    except sqlite3.IntegrityError:
        raise ConflictError(URL_TAKEN)

    if IS_DEV:
        print(f"[PROJECTS] Created project_id={project.id}, url={project.url}, author={author.email}")
    return project


def list_projects(conn: sqlite3.Connection, actor: AuthContext) -> List[ProjectSummary]:
    """Projects the actor belongs to, with counts and the project manager."""
    summaries = []
    for project_id in dict.fromkeys(project_ids_for_email(conn, actor.email)):
        project = get_project(conn, project_id=project_id)
        if project is None:
            continue
        view = hydrate(conn, project)
        # The member row must also be referenced by the relation list
        if not any(m.email == actor.email for m in view.members):
            continue
        summaries.append(
            ProjectSummary(
                id=view.id,
                title=view.title,
                url=view.url,
                description=view.description,
                members=len(view.members),
                tasks=len(view.task_ids),
                pm=project_manager(view.members),
            )
        )
    return summaries


def project_detail(conn: sqlite3.Connection, slug: str) -> ProjectView:
    return load_project(conn, slug=slug, include_tasks=True)


def update_project(
    conn: sqlite3.Connection,
    actor: AuthContext,
    project_id: str,
    request: ProjectUpdateRequest,
) -> ProjectView:
    view = load_project(conn, project_id=project_id)
    require_administrator(view.members, actor.email)

    fields = request.model_dump(exclude_unset=True)
    try:
        with transaction(conn) as cur:
            update_project_fields(cur, as_project(view), fields)
    except sqlite3.IntegrityError:
        raise ConflictError(URL_TAKEN)

    if IS_DEV:
        print(f"[PROJECTS] Updated project_id={view.id}, fields={sorted(fields)}")
    return load_project(conn, project_id=project_id)


def remove_project(conn: sqlite3.Connection, actor: AuthContext, project_id: str) -> None:
    view = load_project(conn, project_id=project_id)
    require_administrator(view.members, actor.email)

    with transaction(conn) as cur:
        delete_project(cur, view.id)

    print(f"[PROJECTS] Deleted project_id={view.id}, actor={actor.email}")
