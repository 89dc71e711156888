"""
Tests for project lifecycle and aggregation.

Run: pytest projecthub/test_projects.py -v
"""

import json

import pytest

from projecthub.aggregator import load_project
from projecthub.errors import ConflictError, ForbiddenError, NotFoundError
from projecthub.membership import add_member
from projecthub.projects import (
    create_project,
    list_projects,
    project_detail,
    remove_project,
    update_project,
)
from projecthub.schemas import AddMemberRequest, ProjectCreateRequest, ProjectUpdateRequest
from projecthub.store import count_members, count_tasks, get_project
from projecthub.tasks import create_task


@pytest.fixture
def setup_project(conn, make_user):
    admin = make_user("admin@test.com", "Ada", "Lovelace", avatar="ada.png")
    dev = make_user("dev@test.com", "Dev", "Eloper")
    project = create_project(
        conn, admin,
        ProjectCreateRequest(title="Apollo", url="apollo", description="Moon"),
    )
    add_member(conn, admin, project.id, AddMemberRequest(email=dev.email))
    return {"admin": admin, "dev": dev, "project": project}


class TestCreate:

    def test_slug_round_trip(self, conn, make_user):
        author = make_user("author@test.com", "Grace", "Hopper", avatar="g.png")
        create_project(conn, author, ProjectCreateRequest(title="Cobol", url="cobol"))

        view = project_detail(conn, "cobol")
        assert len(view.members) == 1
        assert len(view.tasks) == 0
        creator = view.members[0]
        assert creator.email == "author@test.com"
        assert creator.role == "Administrator"
        assert creator.full_name == "Grace Hopper"
        assert creator.avatar == "g.png"

    def test_duplicate_slug_conflicts_without_orphan_member(self, conn, make_user):
        author = make_user("author@test.com")
        create_project(conn, author, ProjectCreateRequest(title="One", url="same"))
        before = count_members(conn)

        with pytest.raises(ConflictError):
            create_project(conn, author, ProjectCreateRequest(title="Two", url="same"))

        assert count_members(conn) == before

    def test_lookup_misses(self, conn):
        with pytest.raises(NotFoundError):
            project_detail(conn, "nope")
        with pytest.raises(NotFoundError):
            load_project(conn, project_id="nope")


class TestAggregation:

    def test_members_follow_relation_order(self, conn, setup_project):
        view = load_project(conn, project_id=setup_project["project"].id)
        assert [m.email for m in view.members] == ["admin@test.com", "dev@test.com"]
        assert view.tasks == []

    def test_tasks_only_when_requested(self, conn, setup_project):
        project = setup_project["project"]
        create_task(conn, project.id, "Launch", reporter=project.members[0])

        assert load_project(conn, project_id=project.id).tasks == []
        assert len(load_project(conn, project_id=project.id, include_tasks=True).tasks) == 1

    def test_dangling_and_repeated_ids(self, conn, setup_project):
        project = setup_project["project"]
        view = load_project(conn, project_id=project.id)
        ids = view.member_ids + ["missing", view.member_ids[0]]
        conn.execute("UPDATE projects SET members = ? WHERE id = ?", (json.dumps(ids), project.id))
        conn.commit()

        view = load_project(conn, project_id=project.id)
        assert [m.email for m in view.members] == ["admin@test.com", "dev@test.com"]


class TestUpdate:

    def test_admin_partial_update(self, conn, setup_project):
        project = setup_project["project"]
        update_project(conn, setup_project["admin"], project.id, ProjectUpdateRequest(title="Apollo 11"))

        view = load_project(conn, project_id=project.id)
        assert view.title == "Apollo 11"
        assert view.url == "apollo"
        assert view.description == "Moon"
        assert len(view.members) == 2

    def test_update_does_not_touch_relations(self, conn, setup_project):
        project = setup_project["project"]
        before = load_project(conn, project_id=project.id)
        update_project(conn, setup_project["admin"], project.id, ProjectUpdateRequest(description=None))

        after = load_project(conn, project_id=project.id)
        assert after.description is None
        assert after.member_ids == before.member_ids
        assert after.task_ids == before.task_ids

    def test_non_admin_update_forbidden(self, conn, setup_project):
        project = setup_project["project"]
        with pytest.raises(ForbiddenError):
            update_project(conn, setup_project["dev"], project.id, ProjectUpdateRequest(title="Hacked"))
        assert load_project(conn, project_id=project.id).title == "Apollo"

    def test_update_missing_project(self, conn, setup_project):
        with pytest.raises(NotFoundError):
            update_project(conn, setup_project["admin"], "missing", ProjectUpdateRequest(title="X"))

    def test_update_to_taken_slug_conflicts(self, conn, setup_project):
        admin = setup_project["admin"]
        create_project(conn, admin, ProjectCreateRequest(title="Gemini", url="gemini"))
        with pytest.raises(ConflictError):
            update_project(conn, admin, setup_project["project"].id, ProjectUpdateRequest(url="gemini"))


class TestRemove:

    def test_non_admin_remove_forbidden(self, conn, setup_project):
        project = setup_project["project"]
        with pytest.raises(ForbiddenError):
            remove_project(conn, setup_project["dev"], project.id)
        assert get_project(conn, project_id=project.id) is not None

    def test_admin_remove_keeps_members_and_tasks(self, conn, setup_project):
        project = setup_project["project"]
        create_task(conn, project.id, "Launch", reporter=project.members[0])
        members_before = count_members(conn)

        remove_project(conn, setup_project["admin"], project.id)

        assert get_project(conn, project_id=project.id) is None
        assert count_members(conn) == members_before
        assert count_tasks(conn) == 1

    def test_remove_missing_project(self, conn, setup_project):
        with pytest.raises(NotFoundError):
            remove_project(conn, setup_project["admin"], "missing")


class TestList:

    def test_lists_only_projects_the_caller_belongs_to(self, conn, setup_project, make_user):
        outsider = make_user("out@test.com")
        create_project(conn, outsider, ProjectCreateRequest(title="Private", url="private"))

        summaries = list_projects(conn, setup_project["dev"])
        assert [s.url for s in summaries] == ["apollo"]
        summary = summaries[0]
        assert summary.members == 2
        assert summary.tasks == 0
        assert summary.pm.email == "admin@test.com"

    def test_deleted_projects_are_not_listed(self, conn, setup_project):
        remove_project(conn, setup_project["admin"], setup_project["project"].id)
        assert list_projects(conn, setup_project["dev"]) == []
