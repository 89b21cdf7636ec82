"""Roadmap engine exceptions."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from skillpath.roadmap.backup import RestoreOutcome


class RoadmapError(Exception):
    """Base class for roadmap engine failures."""


class PathNotFoundError(RoadmapError):
    """Raised when an operation needs an active learning path and the user has none."""

    def __init__(self, user_id: str) -> None:
        super().__init__(f"No active learning path for user {user_id}")
        self.user_id = user_id


class AssignmentNotFoundError(RoadmapError):
    """Raised when a module is not part of the user's active path."""

    def __init__(self, user_id: str, module_id: str) -> None:
        super().__init__(f"Module {module_id} is not in the active learning path")
        self.user_id = user_id
        self.module_id = module_id


class RoadmapModificationError(RoadmapError):
    """A guarded reconciliation failed; carries what the restore attempt achieved."""

    def __init__(self, message: str, restore: RestoreOutcome | None = None) -> None:
        super().__init__(message)
        self.restore = restore

    @property
    def restored(self) -> bool:
        return self.restore is not None and self.restore.restored
