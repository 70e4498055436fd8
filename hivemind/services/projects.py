"""
Domain service: project and task lifecycle against a DataStore.

Every operation reads the entities it needs, checks all preconditions through the
pure rules in `hivemind.domains.lifecycle`, and only then writes. Mutations are
serialised per entity id, so concurrent completions crediting one user or
concurrent likes on one project do not lose updates within a process.

The acting user is always passed in explicitly; this service never consults the
session.
"""

from __future__ import annotations

import functools
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Iterable, TypeVar

from hivemind.domains import lifecycle
from hivemind.domains.errors import HiveMindError, NotFound, StorageError
from hivemind.domains.models import Project, Task, TeamMember, User, to_iso, utc_now
from hivemind.infrastructure.data.store import PROJECTS, TASKS, USERS, DataStore
from hivemind.services.locks import KeyedLocks
from hivemind.utils.config import default_task_points
from hivemind.utils.logger import get_logger

logger = get_logger()

F = TypeVar("F", bound=Callable[..., Any])


def _logged(op: str) -> Callable[[F], F]:
    """Log rejected preconditions as warnings; storage errors are logged by the stores."""

    def decorator(fn: F) -> F:
        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return fn(*args, **kwargs)
            except StorageError:
                raise
            except HiveMindError as e:
                logger.warning("%s rejected: %s: %s", op, type(e).__name__, e)
                raise

        return wrapper  # type: ignore[return-value]

    return decorator


@dataclass
class TaskCompletion:
    """Entities written by a task completion, in write order."""

    task: Task
    user: User
    project: Project


class ProjectService:
    def __init__(
        self,
        store: DataStore,
        locks: KeyedLocks | None = None,
        clock: Callable[[], datetime] | None = None,
        default_points: int | None = None,
    ) -> None:
        self._store = store
        self._locks = locks or KeyedLocks()
        self._clock = clock or utc_now
        self._default_points = default_points if default_points is not None else default_task_points()

    @property
    def store(self) -> DataStore:
        return self._store

    def _now(self) -> str:
        return to_iso(self._clock())

    # --- Loading and saving ---

    def get_user(self, user_id: str) -> User:
        doc = self._store.get_by_id(USERS, user_id) if user_id else None
        if doc is None:
            raise NotFound("User", user_id)
        return User.model_validate(doc)

    def get_project(self, project_id: str) -> Project:
        doc = self._store.get_by_id(PROJECTS, project_id) if project_id else None
        if doc is None:
            raise NotFound("Project", project_id)
        return Project.model_validate(doc)

    def get_task(self, task_id: str) -> Task:
        doc = self._store.get_by_id(TASKS, task_id) if task_id else None
        if doc is None:
            raise NotFound("Task", task_id)
        return Task.model_validate(doc)

    def project_tasks(self, project_id: str) -> list[Task]:
        return [Task.model_validate(d) for d in self._store.find_by(TASKS, projectId=project_id)]

    def _save_user(self, user: User) -> User:
        return User.model_validate(self._store.upsert(USERS, user.model_dump(by_alias=True)))

    def _save_project(self, project: Project) -> Project:
        return Project.model_validate(self._store.upsert(PROJECTS, project.model_dump(by_alias=True)))

    def _save_task(self, task: Task) -> Task:
        return Task.model_validate(self._store.upsert(TASKS, task.model_dump(by_alias=True)))

    # --- Projects ---

    @_logged("create_project")
    def create_project(
        self,
        leader_id: str,
        name: str,
        description: str = "",
        github_link: str = "",
        tags: Iterable[str] | str | None = None,
        is_public: bool = True,
        team_members: Iterable[TeamMember] | None = None,
    ) -> Project:
        self.get_user(leader_id)
        members = list(team_members or [])
        for m in members:
            if m.user_id != leader_id:
                self.get_user(m.user_id)
        project = lifecycle.new_project(
            leader_id,
            name,
            description=description,
            github_link=github_link,
            tags=tags,
            is_public=is_public,
            team_members=members,
            now=self._now(),
        )
        saved = self._save_project(project)
        logger.info("Project %s (%s) created by %s", saved.id, saved.name, leader_id)
        return saved

    @_logged("update_project")
    def update_project(self, project_id: str, acting_user_id: str, **fields: Any) -> Project:
        with self._locks.hold((PROJECTS, project_id)):
            project = self.get_project(project_id)
            updated = lifecycle.edit_project(project, acting_user_id, **fields)
            saved = self._save_project(updated)
        logger.info("Project %s updated (%s)", project_id, ", ".join(sorted(fields)))
        return saved

    @_logged("update_project_status")
    def update_project_status(self, project_id: str, acting_user_id: str, status: str) -> Project:
        with self._locks.hold((PROJECTS, project_id)):
            project = self.get_project(project_id)
            updated = lifecycle.set_project_status(project, acting_user_id, status, now=self._now())
            saved = self._save_project(updated)
        logger.info("Project %s status %s -> %s", project_id, project.status, saved.status)
        return saved

    @_logged("delete_project")
    def delete_project(self, project_id: str, acting_user_id: str) -> None:
        with self._locks.hold((PROJECTS, project_id)):
            project = self.get_project(project_id)
            lifecycle.require_leader(project, acting_user_id)
            tasks = self.project_tasks(project_id)
            for t in tasks:
                self._store.delete(TASKS, t.id)
            self._store.delete(PROJECTS, project_id)
        logger.info("Project %s deleted with %d tasks", project_id, len(tasks))

    # --- Tasks ---

    @_logged("create_task")
    def create_task(
        self,
        project_id: str,
        acting_user_id: str,
        title: str,
        assigned_to: str,
        points: int | None = None,
        description: str = "",
        deadline: str | None = None,
    ) -> Task:
        with self._locks.hold((PROJECTS, project_id)):
            project = self.get_project(project_id)
            task = lifecycle.new_task(
                project,
                acting_user_id,
                title,
                assigned_to,
                points=self._default_points if points is None else points,
                description=description,
                deadline=deadline,
                now=self._now(),
            )
            self.get_user(assigned_to)
            saved = self._save_task(task)
            tasks = self.project_tasks(project_id)
            if not any(t.id == saved.id for t in tasks):
                tasks.append(saved)
            # A new open task lowers progress; a completed project keeps its status.
            self._save_project(lifecycle.apply_progress(project, tasks, now=self._now()))
        logger.info("Task %s created on project %s for %s (%d points)", saved.id, project_id, assigned_to, saved.points)
        return saved

    @_logged("delete_task")
    def delete_task(self, task_id: str, acting_user_id: str) -> Project:
        task = self.get_task(task_id)
        with self._locks.hold((TASKS, task_id), (PROJECTS, task.project_id)):
            task = self.get_task(task_id)
            project = self.get_project(task.project_id)
            lifecycle.require_leader(project, acting_user_id)
            self._store.delete(TASKS, task_id)
            remaining = [t for t in self.project_tasks(project.id) if t.id != task_id]
            saved = self._save_project(lifecycle.apply_progress(project, remaining, now=self._now()))
        logger.info("Task %s deleted; project %s now at %d%%", task_id, project.id, saved.progress)
        return saved

    @_logged("start_task")
    def start_task(self, task_id: str, acting_user_id: str) -> Task:
        with self._locks.hold((TASKS, task_id)):
            task = self.get_task(task_id)
            saved = self._save_task(lifecycle.start_task(task, acting_user_id))
        logger.info("Task %s started by %s", task_id, acting_user_id)
        return saved

    @_logged("complete_task")
    def complete_task(self, task_id: str, acting_user_id: str) -> TaskCompletion:
        """
        Complete a task, credit its points to the assignee and recompute progress.

        Writes task, then user, then project. The writes are not transactional: if
        a later write fails, the earlier ones stay committed and the error is
        re-raised after logging which entities were written.
        """
        task = self.get_task(task_id)
        keys = ((TASKS, task.id), (USERS, task.assigned_to), (PROJECTS, task.project_id))
        with self._locks.hold(*keys):
            task = self.get_task(task_id)
            now = self._now()
            done = lifecycle.complete_task(task, acting_user_id, now=now)
            user = lifecycle.award_points(self.get_user(task.assigned_to), task.points, now=now)
            project = self.get_project(task.project_id)
            tasks = [done if t.id == done.id else t for t in self.project_tasks(project.id)]
            if not any(t.id == done.id for t in tasks):
                tasks.append(done)
            project = lifecycle.apply_progress(project, tasks, now=now)

            written: list[str] = []
            try:
                saved_task = self._save_task(done)
                written.append(f"task {saved_task.id}")
                saved_user = self._save_user(user)
                written.append(f"user {saved_user.id}")
                saved_project = self._save_project(project)
            except StorageError:
                logger.error(
                    "complete_task %s interrupted; already written: %s",
                    task_id,
                    ", ".join(written) or "nothing",
                )
                raise
        logger.info(
            "Task %s completed by %s: +%d points (total %d), project %s at %d%%",
            task_id,
            acting_user_id,
            task.points,
            saved_user.points,
            saved_project.id,
            saved_project.progress,
        )
        return TaskCompletion(task=saved_task, user=saved_user, project=saved_project)

    # --- Extension requests ---

    @_logged("request_extension")
    def request_extension(self, task_id: str, requester_id: str, new_deadline: str, reason: str = "") -> Task:
        with self._locks.hold((TASKS, task_id)):
            task = self.get_task(task_id)
            updated = lifecycle.request_extension(task, requester_id, new_deadline, reason, now=self._now())
            saved = self._save_task(updated)
        logger.info("Extension to %s requested on task %s by %s", new_deadline, task_id, requester_id)
        return saved

    def _decide_extension(self, task_id: str, request_id: str, acting_user_id: str, approve: bool) -> Task:
        with self._locks.hold((TASKS, task_id)):
            task = self.get_task(task_id)
            project = self.get_project(task.project_id)
            updated = lifecycle.decide_extension(task, project, request_id, acting_user_id, approve)
            saved = self._save_task(updated)
        logger.info(
            "Extension request %s on task %s %s (deadline %s)",
            request_id,
            task_id,
            "approved" if approve else "rejected",
            saved.deadline,
        )
        return saved

    @_logged("approve_extension")
    def approve_extension(self, task_id: str, request_id: str, acting_user_id: str) -> Task:
        return self._decide_extension(task_id, request_id, acting_user_id, approve=True)

    @_logged("reject_extension")
    def reject_extension(self, task_id: str, request_id: str, acting_user_id: str) -> Task:
        return self._decide_extension(task_id, request_id, acting_user_id, approve=False)

    # --- Contribution requests ---

    @_logged("request_contribution")
    def request_contribution(self, project_id: str, requester_id: str, message: str) -> Project:
        self.get_user(requester_id)
        with self._locks.hold((PROJECTS, project_id)):
            project = self.get_project(project_id)
            updated = lifecycle.request_contribution(project, requester_id, message, now=self._now())
            saved = self._save_project(updated)
        logger.info("Contribution requested on project %s by %s", project_id, requester_id)
        return saved

    def _decide_contribution(self, project_id: str, request_id: str, acting_user_id: str, approve: bool) -> Project:
        with self._locks.hold((PROJECTS, project_id)):
            project = self.get_project(project_id)
            updated = lifecycle.decide_contribution(project, request_id, acting_user_id, approve)
            saved = self._save_project(updated)
        logger.info(
            "Contribution request %s on project %s %s",
            request_id,
            project_id,
            "approved" if approve else "rejected",
        )
        return saved

    @_logged("approve_contribution")
    def approve_contribution(self, project_id: str, request_id: str, acting_user_id: str) -> Project:
        return self._decide_contribution(project_id, request_id, acting_user_id, approve=True)

    @_logged("reject_contribution")
    def reject_contribution(self, project_id: str, request_id: str, acting_user_id: str) -> Project:
        return self._decide_contribution(project_id, request_id, acting_user_id, approve=False)

    # --- Community ---

    def _apply_like(self, project_id: str, user_id: str, change: Callable[[Project], Project]) -> Project:
        self.get_user(user_id)
        with self._locks.hold((PROJECTS, project_id)):
            project = self.get_project(project_id)
            saved = self._save_project(change(project))
        logger.info("Project %s likes by %s: %d total", project_id, user_id, saved.like_count)
        return saved

    @_logged("toggle_like")
    def toggle_like(self, project_id: str, user_id: str) -> Project:
        return self._apply_like(project_id, user_id, lambda p: lifecycle.toggle_like(p, user_id))

    @_logged("like_project")
    def like_project(self, project_id: str, user_id: str) -> Project:
        return self._apply_like(project_id, user_id, lambda p: lifecycle.set_like(p, user_id, True))

    @_logged("unlike_project")
    def unlike_project(self, project_id: str, user_id: str) -> Project:
        return self._apply_like(project_id, user_id, lambda p: lifecycle.set_like(p, user_id, False))

    @_logged("add_comment")
    def add_comment(self, project_id: str, user_id: str, content: str) -> Project:
        self.get_user(user_id)
        with self._locks.hold((PROJECTS, project_id)):
            project = self.get_project(project_id)
            saved = self._save_project(lifecycle.add_comment(project, user_id, content, now=self._now()))
        logger.info("Comment added to project %s by %s", project_id, user_id)
        return saved
