"""
projecthub/aggregator.py

Project Aggregator: loads a project document and hydrates its relation
lists into full member / task records.

The join performs no filtering beyond the project match. Hydrated lists
follow relation-list order; ids that no longer resolve are dropped.
"""

from __future__ import annotations

import sqlite3
from typing import Optional

from projecthub.config import IS_DEV
from projecthub.errors import NotFoundError
from projecthub.models import Project, ProjectView
from projecthub.store import get_members, get_project, get_tasks


def hydrate(conn: sqlite3.Connection, project: Project, include_tasks: bool = False) -> ProjectView:
    members = get_members(conn, project.members)
    tasks = get_tasks(conn, project.tasks) if include_tasks else []
    return ProjectView(
        id=project.id,
        title=project.title,
        url=project.url,
        description=project.description,
        members=members,
        tasks=tasks,
        member_ids=project.members,
        task_ids=project.tasks,
        version=project.version,
        created_at=project.created_at,
        updated_at=project.updated_at,
    )


def load_project(
    conn: sqlite3.Connection,
    project_id: Optional[str] = None,
    slug: Optional[str] = None,
    include_tasks: bool = False,
) -> ProjectView:
    """
    Resolve a project by id (exact) or by slug (exact match on url).

    Args:
        conn: Database connection
        project_id: Project identifier
        slug: Project url slug, used when project_id is None
        include_tasks: Also hydrate the task relation

    Returns:
        ProjectView with members (and optionally tasks) resolved

    Raises:
        NotFoundError: If no project matches
    """
    project = get_project(conn, project_id=project_id, slug=slug)
    if project is None:
        if IS_DEV:
            print(f"[PROJECTS] Project lookup missed: id={project_id}, slug={slug}")
        raise NotFoundError("Project not found!")
    return hydrate(conn, project, include_tasks=include_tasks)


def as_project(view: ProjectView) -> Project:
    """Project document with the relation lists the view was loaded from."""
    return Project(
        id=view.id,
        title=view.title,
        url=view.url,
        description=view.description,
        members=view.member_ids,
        tasks=view.task_ids,
        version=view.version,
        created_at=view.created_at,
        updated_at=view.updated_at,
    )
