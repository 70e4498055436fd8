"""
Demo data for an empty store: one leader with a project and a few tasks, so a
fresh install has something to show on the dashboard and community feed.
"""

from __future__ import annotations

from datetime import timedelta

from hivemind.domains.models import (
    COMPLETED,
    IN_PROGRESS,
    PENDING,
    Badge,
    Project,
    Task,
    User,
    to_iso,
    utc_now,
)
from hivemind.infrastructure.data.store import PROJECTS, TASKS, USERS, DataStore
from hivemind.utils.logger import get_logger
from hivemind.utils.passwords import hash_password

logger = get_logger()

DEMO_EMAIL = "demo@hivemind.com"
DEMO_PASSWORD = "demo123"


def initialize_demo_data(store: DataStore) -> bool:
    """Seed demo documents when the store has no users. Returns True if it seeded."""
    if store.list_all(USERS):
        logger.info("Store already has users; skipping demo data")
        return False

    now = utc_now()
    stamp = to_iso(now)
    user = User(
        id="1",
        email=DEMO_EMAIL,
        name="Demo User",
        password_hash=hash_password(DEMO_PASSWORD),
        bio="Passionate project leader and team player",
        points=1250,
        badges=[
            Badge(id="b1", name="Team Leader", description="Led 5 successful projects", icon="👑", earned_date=stamp),
            Badge(id="b2", name="Collaborator", description="Worked on 10+ projects", icon="🤝", earned_date=stamp),
        ],
        joined_date=to_iso(now - timedelta(days=90)),
    )
    project = Project(
        id="p1",
        name="HiveMind Website",
        leader_id=user.id,
        description="Landing page and docs for the HiveMind community",
        github_link="https://github.com/hivemind/website",
        status=IN_PROGRESS,
        progress=33,
        created_date=to_iso(now - timedelta(days=30)),
        tags=["web", "design"],
        is_public=True,
    )
    tasks = [
        Task(id="t1", project_id=project.id, title="Draft the landing page copy", assigned_to=user.id,
             status=COMPLETED, created_date=project.created_date, completed_date=stamp, points=20),
        Task(id="t2", project_id=project.id, title="Build the feature grid", assigned_to=user.id,
             status=IN_PROGRESS, created_date=project.created_date, points=30,
             deadline=(now + timedelta(days=7)).date().isoformat()),
        Task(id="t3", project_id=project.id, title="Write the contribution guide", assigned_to=user.id,
             status=PENDING, created_date=project.created_date, points=10),
    ]

    store.upsert(USERS, user.model_dump(by_alias=True))
    store.upsert(PROJECTS, project.model_dump(by_alias=True))
    for t in tasks:
        store.upsert(TASKS, t.model_dump(by_alias=True))
    logger.info("Seeded demo data: 1 user, 1 project, %d tasks", len(tasks))
    return True
