"""Reconciliation planner tests. Pure: no store involved."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from skillpath.catalog.drafts import Curriculum, ExistingRef, ModuleDraft
from skillpath.roadmap.planner import (
    ActiveCurriculum,
    AssignmentSnapshot,
    CarriedProgress,
    Intent,
    OutcomeStatus,
    plan_reconciliation,
)

DONE_AT = datetime(2026, 3, 1, tzinfo=timezone.utc)


def _ids() -> dict[str, str]:
    return {name: str(uuid.uuid4()) for name in ("A", "B", "C")}


def _current(ids: dict[str, str], completed: set[str] = frozenset()) -> ActiveCurriculum:
    return ActiveCurriculum(
        path_id="path-1",
        user_id="user-1",
        name="Path",
        assignments=tuple(
            AssignmentSnapshot(
                module_id=ids[name],
                name=name,
                sequence_order=index,
                is_completed=name in completed,
                completion_date=DONE_AT if name in completed else None,
            )
            for index, name in enumerate(("A", "B", "C"), start=1)
        ),
    )


def _target(*drafts: ModuleDraft, title: str | None = None) -> Curriculum:
    return Curriculum(title=title, modules=drafts)


class TestIncrementalAdd:
    def test_appends_after_current_max(self):
        ids = _ids()
        plan = plan_reconciliation(_current(ids), _target(ModuleDraft(name="D")), Intent.INCREMENTAL_ADD)

        assert plan.start_sequence == 4
        assert [step.draft.name for step in plan.steps] == ["D"]
        assert plan.archive_module_ids == ()
        assert plan.kept_module_ids == frozenset(ids.values())

    def test_existing_names_are_skipped_case_insensitively(self):
        plan = plan_reconciliation(
            _current(_ids()),
            _target(ModuleDraft(name="  a "), ModuleDraft(name="D")),
            Intent.INCREMENTAL_ADD,
        )
        assert [s.draft.name for s in plan.steps] == ["D"]
        assert [(o.name, o.status) for o in plan.skipped] == [("a", OutcomeStatus.SKIPPED)]

    def test_reference_to_active_module_is_skipped(self):
        ids = _ids()
        draft = ModuleDraft(ref=ExistingRef(module_id=ids["B"]), name="Renamed B")
        plan = plan_reconciliation(_current(ids), _target(draft), Intent.INCREMENTAL_ADD)
        assert plan.steps == ()
        assert plan.skipped[0].module_id == ids["B"]

    def test_repeated_name_within_target_is_skipped(self):
        plan = plan_reconciliation(
            _current(_ids()),
            _target(ModuleDraft(name="D"), ModuleDraft(name="d")),
            Intent.INCREMENTAL_ADD,
        )
        assert len(plan.steps) == 1
        assert plan.skipped[0].position == 1

    def test_same_target_twice_plans_nothing_new(self):
        ids = _ids()
        first = plan_reconciliation(_current(ids), _target(ModuleDraft(name="D")), Intent.INCREMENTAL_ADD)
        after = ActiveCurriculum(
            path_id="path-1",
            user_id="user-1",
            name="Path",
            assignments=_current(ids).assignments
            + (AssignmentSnapshot(module_id=str(uuid.uuid4()), name="D", sequence_order=first.start_sequence),),
        )
        second = plan_reconciliation(after, _target(ModuleDraft(name="D")), Intent.INCREMENTAL_ADD)
        assert second.steps == ()

    def test_empty_path_starts_at_one(self):
        empty = ActiveCurriculum(path_id="p", user_id="u", name="Empty")
        plan = plan_reconciliation(empty, _target(ModuleDraft(name="D")), Intent.INCREMENTAL_ADD)
        assert plan.start_sequence == 1


class TestFullReplace:
    def test_reference_carries_progress_and_name_does_not(self):
        ids = _ids()
        current = _current(ids, completed={"A"})
        plan = plan_reconciliation(
            current,
            _target(ModuleDraft(ref=ExistingRef(module_id=ids["A"]), name="A"), ModuleDraft(name="New")),
            Intent.FULL_REPLACE,
        )

        assert plan.start_sequence == 1
        assert set(plan.archive_module_ids) == set(ids.values())
        carried, fresh = plan.steps
        assert carried.carry_module_id == ids["A"]
        assert carried.carried == CarriedProgress(is_completed=True, completion_date=DONE_AT)
        assert carried.carried.progress_percentage == 100
        assert fresh.is_carry is False
        assert fresh.carried is None

    def test_carried_ids_are_reserved_for_the_plan(self):
        ids = _ids()
        plan = plan_reconciliation(
            _current(ids, completed={"A"}),
            _target(ModuleDraft(name="A"), ModuleDraft(ref=ExistingRef(module_id=ids["A"]), name="A")),
            Intent.FULL_REPLACE,
        )
        assert plan.carried_module_ids == frozenset({ids["A"]})
        assert plan.steps[0].is_carry is False

    def test_name_match_with_completed_module_starts_at_zero(self):
        ids = _ids()
        plan = plan_reconciliation(_current(ids, completed={"A"}), _target(ModuleDraft(name="A")), Intent.FULL_REPLACE)
        assert plan.steps[0].is_carry is False

    def test_reference_to_unknown_module_is_resolved(self):
        ref = ExistingRef(module_id=str(uuid.uuid4()))
        plan = plan_reconciliation(_current(_ids()), _target(ModuleDraft(ref=ref, name="X")), Intent.FULL_REPLACE)
        assert plan.steps[0].is_carry is False

    def test_supplied_carried_progress_takes_precedence(self):
        ids = _ids()
        restored_id = str(uuid.uuid4())
        carried = {restored_id: CarriedProgress(is_completed=True, completion_date=DONE_AT)}
        plan = plan_reconciliation(
            _current(ids),
            _target(ModuleDraft(ref=ExistingRef(module_id=restored_id), name="Gone")),
            Intent.FULL_REPLACE,
            carried_progress=carried,
        )
        assert plan.steps[0].carry_module_id == restored_id
        assert plan.steps[0].carried.is_completed is True

    def test_title_and_description_pass_through(self):
        plan = plan_reconciliation(
            _current(_ids()),
            Curriculum(title="New title", description="New description"),
            Intent.FULL_REPLACE,
        )
        assert plan.title == "New title"
        assert plan.description == "New description"
        assert plan.steps == ()

    def test_intent_accepts_plain_strings(self):
        plan = plan_reconciliation(_current(_ids()), _target(), "full_replace")
        assert plan.intent is Intent.FULL_REPLACE
