"""
Project and task lifecycle rules as pure transition functions.

Each function takes the current entity values plus operation arguments and returns
new entity values. Inputs are never mutated and nothing here touches storage, so
every rule can be exercised without a store round-trip. Preconditions raise the
domain errors from `hivemind.domains.errors`.
"""

from __future__ import annotations

import math
from typing import Any, Iterable

from hivemind.domains.badges import badges_for_gain
from hivemind.domains.errors import InvalidState, NotFound, Unauthorized, ValidationError
from hivemind.domains.models import (
    APPROVED,
    COMPLETED,
    CONTRIBUTOR_ROLE,
    IN_PROGRESS,
    PENDING,
    PLANNING,
    PROJECT_STATUSES,
    REJECTED,
    Comment,
    ContributionRequest,
    ExtensionRequest,
    Project,
    Task,
    TeamMember,
    User,
    new_id,
    to_iso,
    utc_now,
)

_EDITABLE_PROJECT_FIELDS = ("name", "description", "github_link", "tags", "is_public")


def _stamp(now: str | None) -> str:
    return now or to_iso(utc_now())


def _clean_tags(tags: Iterable[str] | str | None) -> list[str]:
    if isinstance(tags, str):
        tags = [tags]
    out: list[str] = []
    for t in tags or []:
        t = str(t).strip()
        if t and t not in out:
            out.append(t)
    return out


def require_leader(project: Project, user_id: str) -> None:
    if project.leader_id != user_id:
        raise Unauthorized(f"Only the project leader can do this (project {project.id})")


def require_assignee(task: Task, user_id: str) -> None:
    if task.assigned_to != user_id:
        raise Unauthorized(f"Task {task.id} is not assigned to {user_id}")


# --- Progress and status ---

def compute_progress(tasks: Iterable[Task]) -> int:
    """Percentage of completed tasks, rounded half-up. No tasks means 0."""
    tasks = list(tasks)
    total = len(tasks)
    if total == 0:
        return 0
    done = sum(1 for t in tasks if t.status == COMPLETED)
    return int(math.floor(100 * done / total + 0.5))


def apply_progress(project: Project, tasks: Iterable[Task], now: str | None = None) -> Project:
    """
    Recompute progress from the project's tasks and apply implicit status moves.

    Reaching 100 completes the project; a planning project with any progress moves
    to in-progress. A manually completed project is not reopened by this function.
    """
    progress = compute_progress(tasks)
    status = project.status
    completed_date = project.completed_date
    if progress >= 100 and status != COMPLETED:
        status = COMPLETED
        completed_date = _stamp(now)
    elif progress > 0 and status == PLANNING:
        status = IN_PROGRESS
    return project.model_copy(update=dict(progress=progress, status=status, completed_date=completed_date))


def set_project_status(
    project: Project,
    acting_user_id: str,
    status: str,
    now: str | None = None,
) -> Project:
    require_leader(project, acting_user_id)
    if status not in PROJECT_STATUSES:
        raise ValidationError(f"Unknown project status: {status!r}")
    if status == COMPLETED:
        completed_date = project.completed_date if project.status == COMPLETED else _stamp(now)
    else:
        completed_date = None
    return project.model_copy(update=dict(status=status, completed_date=completed_date))


# --- Creation ---

def new_project(
    leader_id: str,
    name: str,
    description: str = "",
    github_link: str = "",
    tags: Iterable[str] | str | None = None,
    is_public: bool = True,
    team_members: Iterable[TeamMember] | None = None,
    now: str | None = None,
    project_id: str | None = None,
) -> Project:
    """Build a fresh project led by `leader_id`. The leader is kept out of the team list."""
    name = (name or "").strip()
    if not name:
        raise ValidationError("Project name is required")
    if not leader_id:
        raise ValidationError("A project needs a leader")
    members: list[TeamMember] = []
    seen = {leader_id}
    for m in team_members or []:
        if m.user_id in seen:
            continue
        seen.add(m.user_id)
        members.append(TeamMember(user_id=m.user_id, role=(m.role or "").strip() or CONTRIBUTOR_ROLE))
    return Project(
        id=project_id or new_id(),
        name=name,
        leader_id=leader_id,
        description=(description or "").strip(),
        github_link=(github_link or "").strip(),
        team_members=members,
        status=PLANNING,
        progress=0,
        created_date=_stamp(now),
        completed_date=None,
        tags=_clean_tags(tags),
        is_public=bool(is_public),
    )


def edit_project(project: Project, acting_user_id: str, **fields: Any) -> Project:
    require_leader(project, acting_user_id)
    unknown = set(fields) - set(_EDITABLE_PROJECT_FIELDS)
    if unknown:
        raise ValidationError(f"Cannot edit project fields: {', '.join(sorted(unknown))}")
    changes: dict[str, Any] = {}
    if "name" in fields:
        name = (fields["name"] or "").strip()
        if not name:
            raise ValidationError("Project name is required")
        changes["name"] = name
    if "description" in fields:
        changes["description"] = (fields["description"] or "").strip()
    if "github_link" in fields:
        changes["github_link"] = (fields["github_link"] or "").strip()
    if "tags" in fields:
        changes["tags"] = _clean_tags(fields["tags"])
    if "is_public" in fields:
        changes["is_public"] = bool(fields["is_public"])
    return project.model_copy(update=changes)


def new_task(
    project: Project,
    acting_user_id: str,
    title: str,
    assigned_to: str,
    points: int,
    description: str = "",
    deadline: str | None = None,
    now: str | None = None,
    task_id: str | None = None,
) -> Task:
    require_leader(project, acting_user_id)
    title = (title or "").strip()
    if not title:
        raise ValidationError("Task title is required")
    if isinstance(points, bool) or not isinstance(points, int) or points <= 0:
        raise ValidationError(f"Task points must be a positive integer, got {points!r}")
    if not project.is_member(assigned_to):
        raise ValidationError(f"{assigned_to} is not a member of project {project.id}")
    return Task(
        id=task_id or new_id(),
        project_id=project.id,
        title=title,
        assigned_to=assigned_to,
        description=(description or "").strip(),
        status=PENDING,
        deadline=deadline or None,
        created_date=_stamp(now),
        completed_date=None,
        points=points,
        extension_requests=[],
    )


# --- Task completion ---

def start_task(task: Task, acting_user_id: str) -> Task:
    require_assignee(task, acting_user_id)
    if task.status != PENDING:
        raise InvalidState(f"Task {task.id} is {task.status}, only pending tasks can be started")
    return task.model_copy(update=dict(status=IN_PROGRESS))


def complete_task(task: Task, acting_user_id: str, now: str | None = None) -> Task:
    if task.status == COMPLETED:
        raise InvalidState(f"Task {task.id} is already completed")
    require_assignee(task, acting_user_id)
    return task.model_copy(update=dict(status=COMPLETED, completed_date=_stamp(now)))


def award_points(user: User, points: int, now: str | None = None) -> User:
    """Credit points and attach any milestone badges the new total reaches. Zero credits nothing."""
    if points < 0:
        raise ValidationError(f"Awarded points cannot be negative, got {points}")
    total = user.points + points
    earned = badges_for_gain(user.points, total, user.badges, _stamp(now))
    return user.model_copy(update=dict(points=total, badges=list(user.badges) + earned))


# --- Extension requests ---

def request_extension(
    task: Task,
    requester_id: str,
    new_deadline: str,
    reason: str = "",
    now: str | None = None,
    request_id: str | None = None,
) -> Task:
    require_assignee(task, requester_id)
    if task.status == COMPLETED:
        raise InvalidState(f"Task {task.id} is completed; its deadline is final")
    new_deadline = (new_deadline or "").strip()
    if not new_deadline:
        raise ValidationError("A new deadline is required")
    req = ExtensionRequest(
        id=request_id or new_id(),
        new_deadline=new_deadline,
        reason=(reason or "").strip(),
        status=PENDING,
        requested_date=_stamp(now),
        requested_by=requester_id,
    )
    return task.model_copy(update=dict(extension_requests=list(task.extension_requests) + [req]))


def decide_extension(
    task: Task,
    project: Project,
    request_id: str,
    acting_user_id: str,
    approve: bool,
) -> Task:
    """Approve or reject one pending extension request; other requests are untouched."""
    require_leader(project, acting_user_id)
    target = next((r for r in task.extension_requests if r.id == request_id), None)
    if target is None:
        raise NotFound("Extension request", request_id)
    if target.status != PENDING:
        raise InvalidState(f"Extension request {request_id} is already {target.status}")
    decided = target.model_copy(update=dict(status=APPROVED if approve else REJECTED))
    requests_ = [decided if r.id == request_id else r for r in task.extension_requests]
    deadline = decided.new_deadline if approve else task.deadline
    return task.model_copy(update=dict(extension_requests=requests_, deadline=deadline))


# --- Contribution requests ---

def request_contribution(
    project: Project,
    requester_id: str,
    message: str,
    now: str | None = None,
    request_id: str | None = None,
) -> Project:
    if project.is_member(requester_id):
        raise InvalidState(f"{requester_id} is already on project {project.id}")
    if any(r.user_id == requester_id and r.status == PENDING for r in project.contribution_requests):
        raise InvalidState(f"{requester_id} already has a pending request on project {project.id}")
    message = (message or "").strip()
    if not message:
        raise ValidationError("A message to the project leader is required")
    req = ContributionRequest(
        id=request_id or new_id(),
        user_id=requester_id,
        message=message,
        status=PENDING,
        created_date=_stamp(now),
    )
    return project.model_copy(update=dict(contribution_requests=list(project.contribution_requests) + [req]))


def decide_contribution(
    project: Project,
    request_id: str,
    acting_user_id: str,
    approve: bool,
) -> Project:
    """Approve (adding the requester as a Contributor) or reject a pending request."""
    require_leader(project, acting_user_id)
    target = next((r for r in project.contribution_requests if r.id == request_id), None)
    if target is None:
        raise NotFound("Contribution request", request_id)
    if target.status != PENDING:
        raise InvalidState(f"Contribution request {request_id} is already {target.status}")
    decided = target.model_copy(update=dict(status=APPROVED if approve else REJECTED))
    requests_ = [decided if r.id == request_id else r for r in project.contribution_requests]
    members = list(project.team_members)
    if approve and not project.is_member(target.user_id):
        members.append(TeamMember(user_id=target.user_id, role=CONTRIBUTOR_ROLE))
    return project.model_copy(update=dict(contribution_requests=requests_, team_members=members))


# --- Community: likes and comments ---

def set_like(project: Project, user_id: str, liked: bool) -> Project:
    if liked:
        likes = list(project.likes)
        if user_id not in likes:
            likes.append(user_id)
    else:
        likes = [uid for uid in project.likes if uid != user_id]
    return project.model_copy(update=dict(likes=likes))


def toggle_like(project: Project, user_id: str) -> Project:
    return set_like(project, user_id, user_id not in project.likes)


def add_comment(
    project: Project,
    user_id: str,
    content: str,
    now: str | None = None,
    comment_id: str | None = None,
) -> Project:
    content = (content or "").strip()
    if not content:
        raise ValidationError("Comment cannot be empty")
    comment = Comment(
        id=comment_id or new_id(),
        user_id=user_id,
        content=content,
        created_date=_stamp(now),
    )
    return project.model_copy(update=dict(comments=list(project.comments) + [comment]))
