"""Stats aggregator tests. Pure."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from skillpath.roadmap.planner import ActiveCurriculum, AssignmentSnapshot
from skillpath.roadmap.stats import calculate_achievements, compute_stats

NOW = datetime(2026, 10, 17, 12, 0, tzinfo=timezone.utc)


def _curriculum(*modules: tuple[str, float | None, bool]) -> ActiveCurriculum:
    return ActiveCurriculum(
        path_id="p",
        user_id="u",
        name="Data Path",
        assignments=tuple(
            AssignmentSnapshot(
                module_id=f"m{index}",
                name=name,
                sequence_order=index,
                estimated_hours=hours,
                is_completed=done,
            )
            for index, (name, hours, done) in enumerate(modules, start=1)
        ),
    )


class TestNoRoadmap:
    def test_well_formed_empty_result(self):
        stats = compute_stats(None, now=NOW)
        assert stats["has_roadmap"] is False
        assert stats["total_modules"] == 0
        assert stats["completed_modules"] == 0
        assert stats["completion_percentage"] == 0
        assert stats["estimated_completion_date"] is None
        assert stats["achievements"] == []


class TestRollups:
    def test_counts_hours_and_eta(self):
        stats = compute_stats(
            _curriculum(("Pandas", 4, True), ("NumPy", None, False), ("Plotting", 8, False)),
            weekly_hours=5,
            now=NOW,
        )
        assert stats["has_roadmap"] is True
        assert stats["title"] == "Data Path"
        assert stats["total_modules"] == 3
        assert stats["completed_modules"] == 1
        assert stats["completion_percentage"] == 33
        assert stats["total_hours"] == 15
        assert stats["completed_hours"] == 4
        assert stats["remaining_hours"] == 11
        assert stats["estimated_weeks"] == 3
        assert stats["estimated_completion_date"] == NOW + timedelta(weeks=3)
        assert stats["next_module"] == {"module_id": "m2", "name": "NumPy", "sequence_order": 2}

    def test_completed_roadmap_eta_is_now(self):
        stats = compute_stats(_curriculum(("Only", 2, True)), weekly_hours=5, now=NOW)
        assert stats["completion_percentage"] == 100
        assert stats["estimated_weeks"] == 0
        assert stats["estimated_completion_date"] == NOW
        assert stats["next_module"] is None

    def test_percentage_rounds(self):
        stats = compute_stats(_curriculum(("a", 1, True), ("b", 1, True), ("c", 1, False)), now=NOW)
        assert stats["completion_percentage"] == 67

    def test_percentage_rounds_halves_up(self):
        eighths = [(str(i), 1, i < 1) for i in range(8)]
        assert compute_stats(_curriculum(*eighths), now=NOW)["completion_percentage"] == 13
        eighths = [(str(i), 1, i < 5) for i in range(8)]
        assert compute_stats(_curriculum(*eighths), now=NOW)["completion_percentage"] == 63

    def test_path_without_modules(self):
        stats = compute_stats(_curriculum(), now=NOW)
        assert stats["has_roadmap"] is True
        assert stats["completion_percentage"] == 0
        assert stats["estimated_weeks"] == 0


class TestAchievements:
    def test_none_before_first_completion(self):
        assert calculate_achievements(0, 0) == []

    def test_milestones_accumulate(self):
        kinds = [a["type"] for a in calculate_achievements(2, 50)]
        assert kinds == ["first_module", "quarter_complete", "half_complete"]

    def test_full_completion(self):
        kinds = [a["type"] for a in calculate_achievements(4, 100)]
        assert kinds[-1] == "roadmap_complete"
        assert len(kinds) == 5
