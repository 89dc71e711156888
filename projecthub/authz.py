"""
projecthub/authz.py

Project-level authorization derived from membership records.

Only members with the "Administrator" role may update or delete a project
or enroll new members. The check runs over an already-loaded member list:
pure Python logic - no FastAPI imports, no database access.
"""

from __future__ import annotations

from typing import Iterable

from projecthub.errors import ForbiddenError
from projecthub.models import Member, MemberRole

ADMIN_ROLE = MemberRole.administrator.value


def is_authorized(members: Iterable[Member], actor_email: str) -> bool:
    """
    Check whether the actor may perform administrative project mutations.

    Args:
        members: Resolved member records of the project
        actor_email: Email of the authenticated caller

    Returns:
        True if a member with the actor's email holds the Administrator role.
        False for any other role or when the actor is not a member.
    """
    return any(
        member.email == actor_email and member.role == ADMIN_ROLE
        for member in members
    )


def require_administrator(members: Iterable[Member], actor_email: str) -> None:
    """
    Raise ForbiddenError unless the actor administers the project.

    Raises:
        ForbiddenError: If is_authorized() is False
    """
    if not is_authorized(members, actor_email):
        print(f"[AUTHZ] Administrator check denied: actor={actor_email}")
        raise ForbiddenError("You do not have permission to edit this project!")


def project_manager(members: Iterable[Member]):
    """Return the first Administrator member, or None."""
    return next((m for m in members if m.role == ADMIN_ROLE), None)
