"""
Entity models and their JSON document mapping.

Each pydantic model maps one stored document. Documents use camelCase keys
(``leaderId``, ``teamMembers`` ...) so the same files can be shared with the
json-server API; code uses the snake_case field names. Load with
``Model.model_validate(doc)`` and write with ``model.model_dump(by_alias=True)``.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, List, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    computed_field,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

PLANNING = "planning"
IN_PROGRESS = "in-progress"
COMPLETED = "completed"
PENDING = "pending"
APPROVED = "approved"
REJECTED = "rejected"

PROJECT_STATUSES = (PLANNING, IN_PROGRESS, COMPLETED)
TASK_STATUSES = (PENDING, IN_PROGRESS, COMPLETED)
REQUEST_STATUSES = (PENDING, APPROVED, REJECTED)

CONTRIBUTOR_ROLE = "Contributor"
LEADER_ROLE = "Project Leader"
DEFAULT_TASK_POINTS = 10


def new_id() -> str:
    return uuid.uuid4().hex


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_iso(value: datetime) -> str:
    return value.isoformat()


def _empty_if_none(v: Any) -> Any:
    return "" if v is None else v


def _list_or_empty(v: Any) -> Any:
    return v if isinstance(v, list) else []


class Document(BaseModel):
    """Stored entity: camelCase aliases on the wire, numeric ids read as strings."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        coerce_numbers_to_str=True,
        extra="ignore",
    )


class Badge(Document):
    id: str
    name: str
    description: str = ""
    icon: str = ""
    earned_date: Optional[str] = None

    blank_none = field_validator("description", "icon", mode="before")(_empty_if_none)


class User(Document):
    """A registered user. Only the password hash is ever stored."""

    id: str
    email: EmailStr
    name: str
    password_hash: str = ""
    bio: str = ""
    avatar: str = ""
    points: int = Field(0, ge=0)
    badges: List[Badge] = Field(default_factory=list)
    joined_date: Optional[str] = None

    blank_none = field_validator("password_hash", "bio", "avatar", mode="before")(_empty_if_none)
    coerce_lists = field_validator("badges", mode="before")(_list_or_empty)

    @field_validator("points", mode="before")
    @classmethod
    def points_default(cls, v: Any) -> Any:
        return 0 if v is None else v

    def public_document(self) -> dict[str, Any]:
        """Document without the credential, for display surfaces."""
        return self.model_dump(by_alias=True, exclude={"password_hash"})


class TeamMember(Document):
    user_id: str
    role: str = CONTRIBUTOR_ROLE

    blank_none = field_validator("role", mode="before")(_empty_if_none)


class Comment(Document):
    id: str
    user_id: str
    content: str
    created_date: Optional[str] = None


class ContributionRequest(Document):
    id: str
    user_id: str
    message: str = ""
    status: str = PENDING
    created_date: Optional[str] = None


class ExtensionRequest(Document):
    id: str
    new_deadline: str
    reason: str = ""
    status: str = PENDING
    requested_date: Optional[str] = None
    requested_by: Optional[str] = None

    blank_none = field_validator("reason", mode="before")(_empty_if_none)


class Project(Document):
    """
    A collaborative project.

    ``likes`` is the set of liker ids kept in insertion order; ``likeCount`` is
    always derived from it. ``team_members`` never contains the leader.
    """

    id: str
    name: str
    leader_id: str
    description: str = ""
    github_link: str = ""
    team_members: List[TeamMember] = Field(default_factory=list)
    status: str = PLANNING
    progress: int = Field(0, ge=0, le=100)
    created_date: Optional[str] = None
    completed_date: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    is_public: bool = True
    likes: List[str] = Field(default_factory=list)
    comments: List[Comment] = Field(default_factory=list)
    contribution_requests: List[ContributionRequest] = Field(default_factory=list)

    blank_none = field_validator("description", "github_link", mode="before")(_empty_if_none)
    coerce_lists = field_validator("team_members", "tags", "comments", "contribution_requests", mode="before")(
        _list_or_empty
    )

    @field_validator("likes", mode="before")
    @classmethod
    def dedupe_likes(cls, v: Any) -> list[str]:
        # Older documents stored a bare like count; those likes cannot be
        # attributed to anyone, so they load as an empty liker set.
        out: list[str] = []
        for uid in _list_or_empty(v):
            if str(uid) not in out:
                out.append(str(uid))
        return out

    @field_validator("progress", mode="before")
    @classmethod
    def progress_default(cls, v: Any) -> Any:
        return 0 if v is None else v

    @model_validator(mode="after")
    def leader_not_in_team(self) -> Project:
        self.team_members = [m for m in self.team_members if m.user_id != self.leader_id]
        return self

    @computed_field(alias="likeCount")
    @property
    def like_count(self) -> int:
        return len(self.likes)

    def member_ids(self) -> list[str]:
        """Leader first, then team members in join order."""
        return [self.leader_id] + [m.user_id for m in self.team_members]

    def is_member(self, user_id: str) -> bool:
        return user_id in self.member_ids()


class Task(Document):
    id: str
    project_id: str
    title: str
    assigned_to: str
    description: str = ""
    status: str = PENDING
    deadline: Optional[str] = None
    created_date: Optional[str] = None
    completed_date: Optional[str] = None
    points: int = Field(DEFAULT_TASK_POINTS, ge=0)
    extension_requests: List[ExtensionRequest] = Field(default_factory=list)

    blank_none = field_validator("description", mode="before")(_empty_if_none)
    coerce_lists = field_validator("extension_requests", mode="before")(_list_or_empty)

    @field_validator("points", mode="before")
    @classmethod
    def points_default(cls, v: Any) -> Any:
        return DEFAULT_TASK_POINTS if v is None else v

    @field_validator("deadline", mode="before")
    @classmethod
    def blank_deadline(cls, v: Any) -> Any:
        return v or None

    @property
    def is_completed(self) -> bool:
        return self.status == COMPLETED
