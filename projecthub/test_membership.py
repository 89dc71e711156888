"""
Tests for enrolling members into projects.

Covers:
1. Administrator adds a member; duplicate add is a conflict
2. Non-administrators are rejected before any write
3. Unknown projects / users
4. Both writes roll back together
5. Concurrent duplicate adds and stale relation lists

Run: pytest projecthub/test_membership.py -v
"""

import sqlite3

import pytest

from projecthub import membership
from projecthub.aggregator import as_project, load_project
from projecthub.db import transaction
from projecthub.errors import ConflictError, ForbiddenError, NotFoundError
from projecthub.membership import add_member, snapshot_member
from projecthub.models import MemberRole
from projecthub.projects import create_project
from projecthub.schemas import AddMemberRequest, ProjectCreateRequest
from projecthub.store import append_to_relation, count_members, find_user_by_email, insert_member


@pytest.fixture
def team(conn, make_user):
    """Project with members [A (Administrator), B (Member)] plus an outsider C."""
    a = make_user("a@test.com", "Alice", "Admin", avatar="a.png")
    b = make_user("b@test.com", "Bob", "Builder")
    c = make_user("c@test.com", "Carol", "Coder", avatar="c.png")
    project = create_project(conn, a, ProjectCreateRequest(title="Team", url="team"))
    add_member(conn, a, project.id, AddMemberRequest(email=b.email))
    return {"a": a, "b": b, "c": c, "project_id": project.id}


def test_admin_adds_member(conn, team):
    member = add_member(conn, team["a"], team["project_id"], AddMemberRequest(email="c@test.com"))

    view = load_project(conn, project_id=team["project_id"])
    assert len(view.members) == 3
    assert view.members[-1].id == member.id
    assert member.full_name == "Carol Coder"
    assert member.avatar == "c.png"
    assert member.role == "Member"


def test_duplicate_add_conflicts(conn, team):
    request = AddMemberRequest(email="c@test.com")
    add_member(conn, team["a"], team["project_id"], request)

    with pytest.raises(ConflictError) as exc:
        add_member(conn, team["a"], team["project_id"], request)
    assert "already a member" in exc.value.detail

    view = load_project(conn, project_id=team["project_id"])
    assert len(view.members) == 3


def test_requested_role_is_kept(conn, team, make_user):
    member = add_member(
        conn, team["a"], team["project_id"],
        AddMemberRequest(email="c@test.com", role=MemberRole.administrator),
    )
    assert member.role == "Administrator"

    # The new administrator can enroll others
    make_user("d@test.com", "Dan", "Dev")
    add_member(conn, team["c"], team["project_id"], AddMemberRequest(email="d@test.com"))
    assert len(load_project(conn, project_id=team["project_id"]).members) == 4


def test_non_admin_is_forbidden_before_write(conn, team):
    before = count_members(conn)

    with pytest.raises(ForbiddenError):
        add_member(conn, team["b"], team["project_id"], AddMemberRequest(email="c@test.com"))

    assert count_members(conn) == before
    assert len(load_project(conn, project_id=team["project_id"]).members) == 2


def test_outsider_is_forbidden(conn, team):
    with pytest.raises(ForbiddenError):
        add_member(conn, team["c"], team["project_id"], AddMemberRequest(email="c@test.com"))


def test_unknown_project(conn, team):
    with pytest.raises(NotFoundError) as exc:
        add_member(conn, team["a"], "missing", AddMemberRequest(email="c@test.com"))
    assert exc.value.detail == "Project not found!"


def test_unknown_user(conn, team):
    before = count_members(conn)
    with pytest.raises(NotFoundError) as exc:
        add_member(conn, team["a"], team["project_id"], AddMemberRequest(email="nobody@test.com"))
    assert exc.value.detail == "User not found!"
    assert count_members(conn) == before


def test_forbidden_checked_before_user_lookup(conn, team):
    # Non-admin asking for an unknown user gets 403, not 404
    with pytest.raises(ForbiddenError):
        add_member(conn, team["b"], team["project_id"], AddMemberRequest(email="nobody@test.com"))


def test_failed_append_rolls_back_member_insert(conn, team, monkeypatch):
    def broken_append(*args, **kwargs):
        raise RuntimeError("disk full")

    monkeypatch.setattr(membership, "append_to_relation", broken_append)
    before = count_members(conn)

    with pytest.raises(RuntimeError):
        add_member(conn, team["a"], team["project_id"], AddMemberRequest(email="c@test.com"))

    assert count_members(conn) == before


def test_concurrent_duplicate_add_conflicts(conn, team, monkeypatch):
    # Both requests read the project before either wrote
    stale_view = load_project(conn, project_id=team["project_id"])
    add_member(conn, team["a"], team["project_id"], AddMemberRequest(email="c@test.com"))

    monkeypatch.setattr(membership, "load_project", lambda *args, **kwargs: stale_view)
    with pytest.raises(ConflictError):
        add_member(conn, team["a"], team["project_id"], AddMemberRequest(email="c@test.com"))

    assert count_members(conn, team["project_id"]) == 3
    monkeypatch.undo()
    assert len(load_project(conn, project_id=team["project_id"]).members) == 3


def test_stale_relation_list_is_rejected(conn, team):
    stale = as_project(load_project(conn, project_id=team["project_id"]))
    add_member(conn, team["a"], team["project_id"], AddMemberRequest(email="c@test.com"))

    with pytest.raises(ConflictError):
        with transaction(conn) as cur:
            append_to_relation(cur, stale, "members", "bogus-id")

    view = load_project(conn, project_id=team["project_id"])
    assert "bogus-id" not in view.member_ids
    assert len(view.members) == 3


def test_store_enforces_one_member_per_project_and_email(conn, team):
    user = find_user_by_email(conn, "b@test.com")
    duplicate = snapshot_member(user, team["project_id"], "Member")
    with pytest.raises(sqlite3.IntegrityError):
        with transaction(conn) as cur:
            insert_member(cur, duplicate)


def test_member_snapshot_is_not_resynced(conn, team):
    conn.execute("UPDATE users SET first_name = 'Robert' WHERE email = 'b@test.com'")
    conn.commit()

    view = load_project(conn, project_id=team["project_id"])
    bob = next(m for m in view.members if m.email == "b@test.com")
    assert bob.full_name == "Bob Builder"
