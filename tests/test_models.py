"""
Tests for document mapping and badge milestones.
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError as PydanticValidationError

from hivemind.domains.badges import badges_for_gain
from hivemind.domains.models import DEFAULT_TASK_POINTS, Badge, Project, Task, User


def test_project_load_normalises_legacy_documents() -> None:
    """Bare like counts load as no likers; the leader never appears in the team."""
    p = Project.model_validate(
        {
            "id": 7,
            "name": "Old",
            "leaderId": "lead",
            "likes": 12,
            "teamMembers": [{"userId": "lead", "role": "Leader"}, {"userId": "bob", "role": "Dev"}],
        }
    )
    assert p.id == "7"
    assert p.likes == [] and p.like_count == 0
    assert [m.user_id for m in p.team_members] == ["bob"]
    assert p.member_ids() == ["lead", "bob"]
    assert p.is_public is True


def test_project_dump_writes_like_count() -> None:
    p = Project.model_validate({"id": "p", "name": "P", "leaderId": "a", "likes": ["u1", "u2", "u1"]})
    doc = p.model_dump(by_alias=True)
    assert doc["likes"] == ["u1", "u2"]
    assert doc["likeCount"] == 2
    assert doc["leaderId"] == "a"


def test_task_defaults() -> None:
    t = Task.model_validate({"id": "t", "projectId": "p", "title": "T", "assignedTo": "u", "deadline": ""})
    assert t.deadline is None
    assert t.status == "pending" and not t.is_completed
    assert Task.model_validate(t.model_dump(by_alias=True)) == t


def test_user_public_document_hides_hash() -> None:
    u = User(id="1", email="a@b.co", name="A", password_hash="pbkdf2:...")
    assert "passwordHash" in u.model_dump(by_alias=True)
    assert "passwordHash" not in u.public_document()


def test_badges_for_gain() -> None:
    assert [b.id for b in badges_for_gain(90, 110, [], "now")] == ["points-100"]
    assert [b.id for b in badges_for_gain(0, 1000, [], "now")] == ["points-100", "points-500", "points-1000"]
    assert badges_for_gain(100, 150, [], "now") == []
    held = [Badge(id="points-500", name="Hive Builder")]
    assert [b.id for b in badges_for_gain(450, 550, held, "now")] == []


def test_documents_use_camel_case_aliases() -> None:
    """Models accept either spelling on input and always write camelCase."""
    by_field = Task(id="t", project_id="p", title="T", assigned_to="u")
    by_alias = Task.model_validate({"id": "t", "projectId": "p", "title": "T", "assignedTo": "u"})
    assert by_field == by_alias
    doc = by_field.model_dump(by_alias=True)
    assert {"projectId", "assignedTo", "extensionRequests", "completedDate"} <= set(doc)
    assert "project_id" not in doc


def test_user_email_is_validated() -> None:
    with pytest.raises(PydanticValidationError):
        User.model_validate({"id": "1", "email": "not-an-email", "name": "A"})


def test_task_without_points_loads_default() -> None:
    """Stored tasks that predate the points field carry the default value."""
    t = Task.model_validate({"id": "t", "projectId": "p", "title": "T", "assignedTo": "u"})
    assert t.points == DEFAULT_TASK_POINTS == 10
    t = Task.model_validate({"id": "t", "projectId": "p", "title": "T", "assignedTo": "u", "points": None})
    assert t.points == 10
