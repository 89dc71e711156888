"""
projecthub/schemas.py

Pydantic request/response schemas for the HTTP layer.
All inputs are trimmed and length-limited before reaching the core.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from projecthub.models import Member, MemberRole, TaskStatus, TaskType

SLUG_PATTERN = r"^[a-z0-9]+(?:-[a-z0-9]+)*$"


def _strip(v):
    if isinstance(v, str):
        return v.strip()
    return v


# ========================================================================
# AUTH SCHEMAS
# ========================================================================

class RegisterRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=254)
    password: str = Field(..., min_length=6, max_length=128)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    avatar: Optional[str] = Field(None, max_length=500)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        """Trim and lower-case email."""
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("first_name", "last_name", mode="before")
    @classmethod
    def trim_names(cls, v):
        return _strip(v)


class LoginRequest(BaseModel):
    email: str
    password: str

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: Dict[str, Any]


class ProfileResponse(BaseModel):
    id: str
    email: str
    first_name: str
    last_name: str
    avatar: Optional[str] = None


# ========================================================================
# PROJECT SCHEMAS
# ========================================================================

class ProjectCreateRequest(BaseModel):
    """Request schema for creating a project. url is the lookup slug."""
    title: str = Field(..., min_length=1, max_length=200)
    url: str = Field(..., min_length=1, max_length=100, pattern=SLUG_PATTERN)
    description: Optional[str] = Field(None, max_length=2000)

    @field_validator("title", "url", mode="before")
    @classmethod
    def trim(cls, v):
        return _strip(v)


class ProjectUpdateRequest(BaseModel):
    """
    Partial update: only fields present in the request body are applied.
    title and url may be omitted but not set to null.
    """
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    url: Optional[str] = Field(None, min_length=1, max_length=100, pattern=SLUG_PATTERN)
    description: Optional[str] = Field(None, max_length=2000)

    @field_validator("title", "url", mode="before")
    @classmethod
    def reject_null(cls, v):
        if v is None:
            raise ValueError("must not be null")
        return _strip(v)


class AddMemberRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=254)
    role: MemberRole = MemberRole.member

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v


class ProjectSummary(BaseModel):
    """Project list entry: relation lists reduced to counts."""
    id: str
    title: str
    url: str
    description: Optional[str] = None
    members: int
    tasks: int
    pm: Optional[Member] = None


class TaskCreateRequest(BaseModel):
    """Task attached to a project; the caller becomes its reporter."""
    title: str = Field(..., min_length=1, max_length=200)
    type: TaskType = TaskType.task
    status: TaskStatus = TaskStatus.backlog
    assignees: List[str] = Field(default_factory=list, max_length=50, description="Member ids")

    @field_validator("title", mode="before")
    @classmethod
    def trim(cls, v):
        return _strip(v)


# ========================================================================
# REPORT SCHEMAS
# ========================================================================

class MemberReport(BaseModel):
    # totalReport / assignee are the key names the charting client reads
    model_config = ConfigDict(populate_by_name=True)

    id: str
    project_id: str
    email: str
    full_name: str
    avatar: Optional[str] = None
    role: str
    created_at: datetime
    total_report: int = Field(0, alias="totalReport")
    assignee: int = 0


class ChartData(BaseModel):
    status: List[int]  # [Backlog, Develop, Process, Done]
    type: List[int]  # [Task, Story, Bug]


class ProjectReport(BaseModel):
    members: List[MemberReport]
    chart: ChartData


# ========================================================================
# ENVELOPE
# ========================================================================

class ApiResponse(BaseModel):
    status_code: int
    data: Any = None
