"""Reconciliation planner.

Pure function over explicit snapshots: given the user's active curriculum, a
target curriculum and an intent, decide which drafts are carried, which are
resolved against the catalog, which are skipped, and what gets archived. The
applier in :mod:`skillpath.roadmap.reconciler` is the only code that touches
the store.
"""

from __future__ import annotations

import enum
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from skillpath.catalog.drafts import Curriculum, ExistingRef, ModuleDraft, normalize_title


class Intent(str, enum.Enum):
    INCREMENTAL_ADD = "incremental_add"
    FULL_REPLACE = "full_replace"


class OutcomeStatus(str, enum.Enum):
    CREATED = "created"
    REUSED = "reused"
    CARRIED = "carried"
    SKIPPED = "skipped"
    FAILED = "failed"


# ---------------------------------------------------------------------------
# Snapshots
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AssignmentSnapshot:
    """One active module placement as loaded from the store."""

    module_id: str
    name: str
    sequence_order: int
    is_completed: bool = False
    completion_date: datetime | None = None
    progress_percentage: int = 0
    started_at: datetime | None = None
    description: str | None = None
    difficulty: str = "beginner"
    estimated_hours: float | None = None
    skills: tuple[str, ...] = ()
    prerequisites: tuple[str, ...] = ()
    resources: tuple[dict[str, Any], ...] = ()
    tasks: tuple[dict[str, Any], ...] = ()

    @property
    def name_key(self) -> str:
        return normalize_title(self.name)


@dataclass(frozen=True)
class ActiveCurriculum:
    """A user's active learning path and its ordered active assignments."""

    path_id: str
    user_id: str
    name: str
    description: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    assignments: tuple[AssignmentSnapshot, ...] = ()

    @property
    def max_sequence(self) -> int:
        return max((a.sequence_order for a in self.assignments), default=0)


@dataclass(frozen=True)
class CarriedProgress:
    """Completion state copied onto a reused module."""

    is_completed: bool = False
    completion_date: datetime | None = None

    @property
    def progress_percentage(self) -> int:
        return 100 if self.is_completed else 0


# ---------------------------------------------------------------------------
# Plan
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PlanStep:
    """A target draft that will be placed in the path.

    ``carry_module_id`` is set when the draft reuses a module that was active
    (or supplied with carried progress) and keeps its completion state.
    Otherwise the draft is resolved through the catalog and starts at zero.
    """

    position: int
    draft: ModuleDraft
    carry_module_id: str | None = None
    carried: CarriedProgress | None = None

    @property
    def is_carry(self) -> bool:
        return self.carry_module_id is not None


@dataclass(frozen=True)
class EntryOutcome:
    """What happened to one target draft."""

    position: int
    name: str
    status: OutcomeStatus
    module_id: str | None = None
    sequence_order: int | None = None
    reason: str | None = None


@dataclass(frozen=True)
class ReconciliationPlan:
    intent: Intent
    path_id: str
    start_sequence: int
    steps: tuple[PlanStep, ...] = ()
    skipped: tuple[EntryOutcome, ...] = ()
    archive_module_ids: tuple[str, ...] = ()
    kept_module_ids: frozenset[str] = field(default_factory=frozenset)
    # placed by carry steps; unreferenced drafts resolving onto these are skipped
    carried_module_ids: frozenset[str] = field(default_factory=frozenset)
    title: str | None = None
    description: str | None = None


def plan_reconciliation(
    current: ActiveCurriculum,
    target: Curriculum,
    intent: Intent,
    carried_progress: Mapping[str, CarriedProgress] | None = None,
) -> ReconciliationPlan:
    """Diff ``target`` against ``current`` under ``intent``.

    ``carried_progress`` supplies completion state for module ids that are not
    (or no longer) active, e.g. when reapplying a backup. It takes precedence
    over the active set for the ids it names.
    """
    intent = Intent(intent)
    if intent is Intent.INCREMENTAL_ADD:
        return _plan_incremental(current, target)
    return _plan_full_replace(current, target, carried_progress or {})


def _plan_incremental(current: ActiveCurriculum, target: Curriculum) -> ReconciliationPlan:
    active_ids = {a.module_id for a in current.assignments}
    seen_names = {a.name_key for a in current.assignments}

    steps: list[PlanStep] = []
    skipped: list[EntryOutcome] = []
    for position, draft in enumerate(target.modules):
        ref = draft.ref
        if isinstance(ref, ExistingRef) and ref.module_id in active_ids:
            skipped.append(_skip(position, draft, "already in path", ref.module_id))
        elif draft.name_key in seen_names:
            skipped.append(_skip(position, draft, "already in path"))
        else:
            seen_names.add(draft.name_key)
            steps.append(PlanStep(position=position, draft=draft))

    return ReconciliationPlan(
        intent=Intent.INCREMENTAL_ADD,
        path_id=current.path_id,
        start_sequence=current.max_sequence + 1,
        steps=tuple(steps),
        skipped=tuple(skipped),
        kept_module_ids=frozenset(active_ids),
        title=target.title,
        description=target.description,
    )


def _plan_full_replace(
    current: ActiveCurriculum,
    target: Curriculum,
    carried_progress: Mapping[str, CarriedProgress],
) -> ReconciliationPlan:
    previous = {
        a.module_id: CarriedProgress(is_completed=a.is_completed, completion_date=a.completion_date)
        for a in current.assignments
    }
    previous.update(carried_progress)

    steps: list[PlanStep] = []
    for position, draft in enumerate(target.modules):
        ref = draft.ref
        if isinstance(ref, ExistingRef) and ref.module_id in previous:
            steps.append(
                PlanStep(
                    position=position,
                    draft=draft,
                    carry_module_id=ref.module_id,
                    carried=previous[ref.module_id],
                )
            )
        else:
            # Name matches never carry completion, even onto the same catalog module.
            steps.append(PlanStep(position=position, draft=draft))

    return ReconciliationPlan(
        intent=Intent.FULL_REPLACE,
        path_id=current.path_id,
        start_sequence=1,
        steps=tuple(steps),
        archive_module_ids=tuple(a.module_id for a in current.assignments),
        carried_module_ids=frozenset(step.carry_module_id for step in steps if step.is_carry),
        title=target.title,
        description=target.description,
    )


def _skip(position: int, draft: ModuleDraft, reason: str, module_id: str | None = None) -> EntryOutcome:
    return EntryOutcome(
        position=position,
        name=draft.name,
        status=OutcomeStatus.SKIPPED,
        module_id=module_id,
        reason=reason,
    )
