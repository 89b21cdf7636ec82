"""Roadmap statistics: completion rollups, hour totals, ETA, milestones."""

from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone
from typing import Any

from skillpath.roadmap.planner import ActiveCurriculum, AssignmentSnapshot

DEFAULT_MODULE_HOURS = 3
DEFAULT_WEEKLY_HOURS = 5

# (minimum completion percentage, type, title)
MILESTONES: list[tuple[int, str, str]] = [
    (25, "quarter_complete", "Quarter Complete"),
    (50, "half_complete", "Halfway There"),
    (75, "three_quarters", "Almost Done"),
    (100, "roadmap_complete", "Roadmap Complete"),
]


def empty_stats() -> dict[str, Any]:
    return {
        "has_roadmap": False,
        "total_modules": 0,
        "completed_modules": 0,
        "completion_percentage": 0,
        "total_hours": 0,
        "completed_hours": 0,
        "remaining_hours": 0,
        "estimated_weeks": 0,
        "estimated_completion_date": None,
        "next_module": None,
        "achievements": [],
    }


def calculate_achievements(completed_modules: int, completion_percentage: int) -> list[dict[str, str]]:
    achievements = []
    if completed_modules >= 1:
        achievements.append({"type": "first_module", "title": "First Steps"})
    for threshold, kind, title in MILESTONES:
        if completion_percentage >= threshold:
            achievements.append({"type": kind, "title": title})
    return achievements


def compute_stats(
    curriculum: ActiveCurriculum | None,
    weekly_hours: float = DEFAULT_WEEKLY_HOURS,
    now: datetime | None = None,
    default_module_hours: float = DEFAULT_MODULE_HOURS,
) -> dict[str, Any]:
    """Aggregate a curriculum snapshot. Returns the no-roadmap shape for None."""
    if curriculum is None:
        return empty_stats()

    now = now or datetime.now(timezone.utc)
    assignments = curriculum.assignments
    total = len(assignments)
    completed = sum(1 for a in assignments if a.is_completed)
    percentage = math.floor(completed * 100 / total + 0.5) if total else 0

    def hours(a: AssignmentSnapshot) -> float:
        return a.estimated_hours or default_module_hours

    total_hours = sum(hours(a) for a in assignments)
    completed_hours = sum(hours(a) for a in assignments if a.is_completed)
    remaining_hours = total_hours - completed_hours

    weeks = math.ceil(remaining_hours / weekly_hours) if weekly_hours > 0 else 0
    next_module = next((a for a in assignments if not a.is_completed), None)

    return {
        "has_roadmap": True,
        "title": curriculum.name,
        "total_modules": total,
        "completed_modules": completed,
        "completion_percentage": percentage,
        "total_hours": total_hours,
        "completed_hours": completed_hours,
        "remaining_hours": remaining_hours,
        "weekly_hours": weekly_hours,
        "estimated_weeks": weeks,
        "estimated_completion_date": now + timedelta(weeks=weeks),
        "next_module": (
            {
                "module_id": next_module.module_id,
                "name": next_module.name,
                "sequence_order": next_module.sequence_order,
            }
            if next_module
            else None
        ),
        "achievements": calculate_achievements(completed, percentage),
        "created_at": curriculum.created_at,
        "last_updated": curriculum.updated_at,
    }
