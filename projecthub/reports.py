"""
projecthub/reports.py

Report Generator: per-member task attribution and distribution charts.

Per-member counts scan the full task list once per member
(O(members x tasks)); projects are small enough that no index is built.

Chart arrays have a fixed order read positionally by the charting client:
    status = [Backlog, Develop, Process, Done]
    type   = [Task, Story, Bug]
Tasks whose status or type is outside these buckets are left out of the
corresponding array rather than counted as "other".
"""

from __future__ import annotations

import sqlite3
from typing import Iterable, List

from projecthub.aggregator import load_project
from projecthub.config import IS_DEV
from projecthub.models import ProjectView, Task, TaskStatus, TaskType
from projecthub.schemas import ChartData, MemberReport, ProjectReport

STATUS_ORDER = (
    TaskStatus.backlog.value,
    TaskStatus.develop.value,
    TaskStatus.process.value,
    TaskStatus.done.value,
)
TYPE_ORDER = (
    TaskType.task.value,
    TaskType.story.value,
    TaskType.bug.value,
)


def _bucket_counts(values: Iterable[str], order: tuple) -> List[int]:
    counts = [0] * len(order)
    for value in values:
        if value in order:
            counts[order.index(value)] += 1
    return counts


def chart_data(tasks: List[Task]) -> ChartData:
    return ChartData(
        status=_bucket_counts((t.status for t in tasks), STATUS_ORDER),
        type=_bucket_counts((t.type for t in tasks), TYPE_ORDER),
    )


def build_report(view: ProjectView) -> ProjectReport:
    """
    Compute the report for an aggregated project view.

    Args:
        view: Project with members and tasks hydrated

    Returns:
        ProjectReport: one entry per member with totalReport (tasks the
        member reported) and assignee (tasks the member is assigned to),
        plus the status/type chart arrays.
    """
    entries = []
    for member in view.members:
        total_report = sum(1 for task in view.tasks if task.reporter == member.id)
        assignee = sum(1 for task in view.tasks if member.id in task.assignees)
        entries.append(
            MemberReport(
                **member.model_dump(),
                total_report=total_report,
                assignee=assignee,
            )
        )

    return ProjectReport(members=entries, chart=chart_data(view.tasks))


def report_project(conn: sqlite3.Connection, slug: str) -> ProjectReport:
    view = load_project(conn, slug=slug, include_tasks=True)
    report = build_report(view)
    if IS_DEV:
        print(f"[REPORT] project={view.url}, members={len(view.members)}, tasks={len(view.tasks)}")
    return report
