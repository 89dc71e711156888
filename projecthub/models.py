from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


# Enums
class MemberRole(str, Enum):
    administrator = "Administrator"
    member = "Member"


class TaskType(str, Enum):
    bug = "Bug"
    story = "Story"
    task = "Task"


class TaskStatus(str, Enum):
    backlog = "Backlog"
    develop = "Develop"
    process = "Process"
    done = "Done"


# Models
class User(BaseModel):
    id: str
    email: str
    first_name: str
    last_name: str
    avatar: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class Member(BaseModel):
    """
    Project-scoped snapshot of a User taken when the member is enrolled.

    The name and avatar are copied once and never re-synced with the user
    record. Members are never updated in place.
    """
    model_config = ConfigDict(frozen=True)

    id: str
    project_id: str
    email: str
    full_name: str
    avatar: Optional[str] = None
    role: str = MemberRole.member.value
    created_at: datetime = Field(default_factory=datetime.utcnow)


class Task(BaseModel):
    # type/status are plain strings: rows written by other tools may carry
    # values outside TaskType/TaskStatus
    id: str
    project_id: str
    title: str
    type: str
    status: str
    reporter: str
    assignees: List[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=datetime.utcnow)


class Project(BaseModel):
    id: str
    title: str
    url: str
    description: Optional[str] = None
    members: List[str] = Field(default_factory=list)
    tasks: List[str] = Field(default_factory=list)
    version: int = 1
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class ProjectView(BaseModel):
    """Project with its relation lists hydrated into full records."""
    id: str
    title: str
    url: str
    description: Optional[str] = None
    members: List[Member] = Field(default_factory=list)
    tasks: List[Task] = Field(default_factory=list)
    member_ids: List[str] = Field(default_factory=list)
    task_ids: List[str] = Field(default_factory=list)
    version: int = 1
    created_at: datetime
    updated_at: datetime
