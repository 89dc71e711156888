"""
projecthub/tasks.py

Minimal task feed: attaches tasks to a project so reports have data.
Task editing and comments live outside this service.
"""

from __future__ import annotations

import sqlite3
from typing import List, Optional

from projecthub.aggregator import as_project, load_project
from projecthub.auth_context import AuthContext
from projecthub.config import IS_DEV
from projecthub.db import transaction
from projecthub.errors import ForbiddenError, NotFoundError
from projecthub.models import Task, TaskStatus, TaskType
from projecthub.schemas import TaskCreateRequest
from projecthub.store import append_to_relation, insert_task, new_id, now_iso


def create_task(
    conn: sqlite3.Connection,
    project_id: str,
    title: str,
    reporter: str,
    assignees: Optional[List[str]] = None,
    type: str = TaskType.task.value,
    status: str = TaskStatus.backlog.value,
) -> Task:
    """
    Insert a task and append it to the project's task relation.

    reporter and assignees are member ids.

    Raises:
        NotFoundError: If the project does not exist
        ConflictError: If the project changed while the task was written
    """
    view = load_project(conn, project_id=project_id)
    task = Task(
        id=new_id(),
        project_id=view.id,
        title=title,
        type=type,
        status=status,
        reporter=reporter,
        assignees=list(assignees or []),
        created_at=now_iso(),
    )
    with transaction(conn) as cur:
        insert_task(cur, task)
        append_to_relation(cur, as_project(view), "tasks", task.id)
    return task


def add_task(
    conn: sqlite3.Connection,
    actor: AuthContext,
    project_id: str,
    request: TaskCreateRequest,
) -> Task:
    """
    Create a task reported by the calling member.

    Any member may add tasks; assignees must be members of the same project.

    Raises:
        NotFoundError: If the project or an assignee does not exist
        ForbiddenError: If the actor is not a member of the project
    """
    view = load_project(conn, project_id=project_id)
    reporter = next((m for m in view.members if m.email == actor.email), None)
    if reporter is None:
        print(f"[TASKS] Non-member task create denied: actor={actor.email}, project_id={view.id}")
        raise ForbiddenError("You are not a member of this project!")

    member_ids = {m.id for m in view.members}
    if any(a not in member_ids for a in request.assignees):
        raise NotFoundError("Assignee is not a member of the project!")

    task = create_task(
        conn,
        view.id,
        request.title,
        reporter=reporter.id,
        assignees=list(dict.fromkeys(request.assignees)),
        type=request.type.value,
        status=request.status.value,
    )
    if IS_DEV:
        print(f"[TASKS] Created task_id={task.id}, project_id={view.id}, reporter={reporter.id}")
    return task
