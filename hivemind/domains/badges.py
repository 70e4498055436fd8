"""
Point milestones and the badges they award.

A badge is awarded once, when a point gain carries a user's total from below a
threshold to at or above it. Badge ids are stable so a badge is never duplicated.
"""

from __future__ import annotations

from hivemind.domains.models import Badge

# (threshold, id, name, description, icon)
MILESTONES: list[tuple[int, str, str, str, str]] = [
    (100, "points-100", "Rising Star", "Earned 100 points from completed tasks", "⭐"),
    (500, "points-500", "Hive Builder", "Earned 500 points from completed tasks", "🐝"),
    (1000, "points-1000", "Hive Mind", "Earned 1000 points from completed tasks", "🧠"),
]


def badges_for_gain(
    before: int,
    after: int,
    held: list[Badge],
    earned_date: str,
) -> list[Badge]:
    """Return the new badges earned by moving from `before` to `after` points."""
    owned = {b.id for b in held}
    out: list[Badge] = []
    for threshold, badge_id, name, description, icon in MILESTONES:
        if badge_id in owned:
            continue
        if before < threshold <= after:
            out.append(
                Badge(
                    id=badge_id,
                    name=name,
                    description=description,
                    icon=icon,
                    earned_date=earned_date,
                )
            )
    return out
