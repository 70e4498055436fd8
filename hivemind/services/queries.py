"""
Read models for dashboards, profiles and the community feed.

Nothing here writes to the store.
"""

from __future__ import annotations

from typing import Any

from hivemind.domains.models import (
    COMPLETED,
    LEADER_ROLE,
    PENDING,
    ContributionRequest,
    ExtensionRequest,
    Project,
    Task,
    TeamMember,
    User,
)
from hivemind.infrastructure.data.store import PROJECTS, TASKS, USERS, DataStore


class ProjectQueries:
    def __init__(self, store: DataStore) -> None:
        self._store = store

    def _projects(self) -> list[Project]:
        return [Project.model_validate(d) for d in self._store.list_all(PROJECTS)]

    def projects_for_user(self, user_id: str) -> list[Project]:
        """Projects the user leads or belongs to."""
        return [p for p in self._projects() if p.is_member(user_id)]

    def led_projects(self, user_id: str) -> list[Project]:
        return [p for p in self._projects() if p.leader_id == user_id]

    def collaborating_projects(self, user_id: str) -> list[Project]:
        return [
            p
            for p in self._projects()
            if p.leader_id != user_id and any(m.user_id == user_id for m in p.team_members)
        ]

    def public_projects(self) -> list[Project]:
        return [p for p in self._projects() if p.is_public]

    @staticmethod
    def filter_projects(projects: list[Project], query: str) -> list[Project]:
        """Projects whose name, description or any tag contains `query` (case-insensitive)."""
        q = (query or "").strip().lower()
        if not q:
            return list(projects)
        return [
            p
            for p in projects
            if q in p.name.lower()
            or q in p.description.lower()
            or any(q in t.lower() for t in p.tags)
        ]

    def search_community(self, query: str) -> list[Project]:
        """Search the public feed only."""
        return self.filter_projects(self.public_projects(), query)

    def search_user_projects(self, user_id: str, query: str) -> list[Project]:
        """Search the projects a user leads or collaborates on, private ones included."""
        return self.filter_projects(self.projects_for_user(user_id), query)

    def tasks_for_project(self, project_id: str) -> list[Task]:
        return [Task.model_validate(d) for d in self._store.find_by(TASKS, projectId=project_id)]

    def tasks_for_user(self, user_id: str) -> list[Task]:
        return [Task.model_validate(d) for d in self._store.find_by(TASKS, assignedTo=user_id)]

    @staticmethod
    def pending_contributions(project: Project) -> list[ContributionRequest]:
        return [r for r in project.contribution_requests if r.status == PENDING]

    @staticmethod
    def pending_extensions(task: Task) -> list[ExtensionRequest]:
        return [r for r in task.extension_requests if r.status == PENDING]

    @staticmethod
    def has_pending_request(project: Project, user_id: str) -> bool:
        return any(r.user_id == user_id and r.status == PENDING for r in project.contribution_requests)

    @staticmethod
    def team_roster(project: Project) -> list[TeamMember]:
        """Leader first (as "Project Leader"), then team members in join order."""
        return [TeamMember(user_id=project.leader_id, role=LEADER_ROLE)] + list(project.team_members)

    def users_by_id(self) -> dict[str, User]:
        return {u.id: u for u in (User.model_validate(d) for d in self._store.list_all(USERS))}

    def dashboard(self, user_id: str) -> dict[str, Any]:
        """Headline numbers for a user's dashboard."""
        doc = self._store.get_by_id(USERS, user_id)
        user = User.model_validate(doc) if doc else None
        tasks = self.tasks_for_user(user_id)
        projects = self.projects_for_user(user_id)
        return {
            "points": user.points if user else 0,
            "badges": len(user.badges) if user else 0,
            "active_tasks": sum(1 for t in tasks if t.status != COMPLETED),
            "completed_tasks": sum(1 for t in tasks if t.status == COMPLETED),
            "active_projects": sum(1 for p in projects if p.status != COMPLETED),
            "completed_projects": sum(1 for p in projects if p.status == COMPLETED),
        }
