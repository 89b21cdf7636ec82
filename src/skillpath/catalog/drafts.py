"""Boundary adapter for loosely-structured curriculum drafts.

Upstream generation emits modules, resources and tasks with several alternate
field spellings (``module_name`` / ``name`` / ``title`` ...), optional phases,
and ids that may or may not point at real catalog rows. Everything is
normalized here, once, into frozen canonical models. Code past this boundary
never sniffs raw field names or id formats again.

Missing optional fields are defaulted; a draft is never rejected for them.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable, Mapping
from typing import Annotated, Any, ClassVar, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from skillpath.catalog.difficulty import normalize_difficulty


def normalize_title(title: str) -> str:
    """Identity key for catalog matching: case-folded, trimmed, single-spaced."""
    return " ".join(title.split()).casefold()


def _first(data: Mapping[str, Any], keys: Iterable[str]) -> Any:
    """Return the first non-empty value among ``keys``; blank values fall through."""
    for key in keys:
        value = data.get(key)
        if isinstance(value, str):
            value = value.strip()
        if value is None or (isinstance(value, (str, list, tuple, dict)) and not value):
            continue
        return value
    return None


def _as_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if number != number or number < 0:  # NaN or negative
        return None
    return number


def _as_text_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    if isinstance(value, Iterable) and not isinstance(value, Mapping):
        return [str(item).strip() for item in value if item is not None and str(item).strip()]
    return []


# ---------------------------------------------------------------------------
# Tagged module reference
# ---------------------------------------------------------------------------


class NoRef(BaseModel):
    """The draft carries no module id at all."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["none"] = "none"


class NewDraft(BaseModel):
    """The draft carries an id that cannot be a catalog id (e.g. a position index)."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["new"] = "new"
    placeholder: str


class ExistingRef(BaseModel):
    """The draft points at a catalog module by a syntactically valid id."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["existing"] = "existing"
    module_id: str


ModuleRef = Annotated[NoRef | NewDraft | ExistingRef, Field(discriminator="kind")]


def classify_reference(raw: Any) -> NoRef | NewDraft | ExistingRef:
    """Decide what a raw ``module_id`` value means."""
    if raw is None or isinstance(raw, bool):
        return NoRef()
    text = str(raw).strip()
    if not text:
        return NoRef()
    try:
        parsed = uuid.UUID(text)
    except ValueError:
        return NewDraft(placeholder=text)
    # uuid.UUID also accepts braces, urn: prefixes and bare hex
    if str(parsed) != text.lower():
        return NewDraft(placeholder=text)
    return ExistingRef(module_id=str(parsed))


# ---------------------------------------------------------------------------
# Drafts
# ---------------------------------------------------------------------------


class _Draft(BaseModel):
    """Coalesces alternate spellings into canonical field names before validation."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    aliases: ClassVar[dict[str, tuple[str, ...]]] = {}
    numeric: ClassVar[tuple[str, ...]] = ()

    @model_validator(mode="before")
    @classmethod
    def _coalesce(cls, data: Any) -> Any:
        if isinstance(data, str):
            data = {"title": data, "name": data}
        if not isinstance(data, Mapping):
            return data
        canonical: dict[str, Any] = {}
        for field, keys in cls.aliases.items():
            value = _first(data, keys)
            if field in cls.numeric:
                value = _as_number(value)
            if value is not None:
                canonical[field] = value
        return cls._shape(canonical)

    @classmethod
    def _shape(cls, canonical: dict[str, Any]) -> dict[str, Any]:
        return canonical


class ResourceDraft(_Draft):
    aliases: ClassVar[dict[str, tuple[str, ...]]] = {
        "title": ("resource_title", "title", "name"),
        "type": ("resource_type", "type"),
        "url": ("url", "link"),
        "description": ("description", "resource_description"),
        "estimated_minutes": ("estimated_time_minutes", "estimated_minutes", "duration_minutes"),
    }
    numeric: ClassVar[tuple[str, ...]] = ("estimated_minutes",)

    title: str = "Untitled Resource"
    type: str = "article"
    url: str | None = None
    description: str = ""
    estimated_minutes: int = 30

    @field_validator("title", "type", "description", mode="before")
    @classmethod
    def _strip(cls, value: Any) -> str:
        return str(value).strip()

    @field_validator("type")
    @classmethod
    def _lower_type(cls, value: str) -> str:
        return value.lower() or "article"

    @field_validator("estimated_minutes", mode="before")
    @classmethod
    def _round_minutes(cls, value: float) -> int:
        return round(value)


class TaskDraft(_Draft):
    aliases: ClassVar[dict[str, tuple[str, ...]]] = {
        "title": ("task_title", "title", "name"),
        "description": ("task_description", "description"),
        "type": ("task_type", "type"),
        "estimated_minutes": ("estimated_time_minutes", "estimated_minutes", "duration_minutes"),
        "instructions": ("instructions",),
        "solution_url": ("solution_url",),
    }
    numeric: ClassVar[tuple[str, ...]] = ("estimated_minutes",)

    title: str = "Untitled Task"
    description: str = "Complete this task"
    type: str = "practice"
    estimated_minutes: int = 45
    instructions: str = ""
    solution_url: str = ""

    @field_validator("title", "description", "type", "instructions", "solution_url", mode="before")
    @classmethod
    def _strip(cls, value: Any) -> str:
        return str(value).strip()

    @field_validator("type")
    @classmethod
    def _lower_type(cls, value: str) -> str:
        return value.lower() or "practice"

    @field_validator("estimated_minutes", mode="before")
    @classmethod
    def _round_minutes(cls, value: float) -> int:
        return round(value)


def _content_drafts(model: type[_Draft], raw: Any) -> list[_Draft]:
    if not isinstance(raw, Iterable) or isinstance(raw, (str, Mapping)):
        return []
    return [model.model_validate(item) for item in raw if isinstance(item, (model, Mapping, str))]


class ModuleDraft(_Draft):
    aliases: ClassVar[dict[str, tuple[str, ...]]] = {
        "ref": ("ref", "module_id", "id"),
        "name": ("module_name", "name", "title"),
        "description": ("module_description", "description"),
        "difficulty": ("difficulty", "difficulty_level", "level"),
        "estimated_hours": ("estimated_hours", "estimated_completion_time_hours", "hours"),
        "skills": ("skills_covered", "skills"),
        "prerequisites": ("prerequisites",),
        "resources": ("resources",),
        "tasks": ("tasks",),
    }
    numeric: ClassVar[tuple[str, ...]] = ("estimated_hours",)

    ref: ModuleRef = Field(default_factory=NoRef)
    name: str = "Untitled Module"
    description: str | None = None
    difficulty: str = "beginner"
    estimated_hours: float | None = None
    skills: tuple[str, ...] = ()
    prerequisites: tuple[str, ...] = ()
    resources: tuple[ResourceDraft, ...] = ()
    tasks: tuple[TaskDraft, ...] = ()

    @classmethod
    def _shape(cls, canonical: dict[str, Any]) -> dict[str, Any]:
        ref = canonical.get("ref")
        if not isinstance(ref, (NoRef, NewDraft, ExistingRef)):
            canonical["ref"] = classify_reference(ref)
        if "difficulty" in canonical:
            canonical["difficulty"] = normalize_difficulty(canonical["difficulty"])
        canonical["skills"] = tuple(_as_text_list(canonical.get("skills")))
        canonical["prerequisites"] = tuple(_as_text_list(canonical.get("prerequisites")))
        canonical["resources"] = tuple(_content_drafts(ResourceDraft, canonical.get("resources")))
        canonical["tasks"] = tuple(_content_drafts(TaskDraft, canonical.get("tasks")))
        return canonical

    @field_validator("name", mode="before")
    @classmethod
    def _strip_name(cls, value: Any) -> str:
        return " ".join(str(value).split())

    @property
    def name_key(self) -> str:
        return normalize_title(self.name)


class Curriculum(BaseModel):
    """Ordered target curriculum with optional path metadata."""

    model_config = ConfigDict(frozen=True)

    title: str | None = None
    description: str | None = None
    modules: tuple[ModuleDraft, ...] = ()


def parse_module(raw: Mapping[str, Any] | ModuleDraft, position: int | None = None) -> ModuleDraft:
    """Normalize one module draft. ``position`` (1-based) names unnamed modules."""
    if isinstance(raw, ModuleDraft):
        return raw
    if position is not None and _first(raw, ModuleDraft.aliases["name"]) is None:
        raw = {**raw, "name": f"Module {position}"}
    return ModuleDraft.model_validate(raw)


def parse_curriculum(raw: Mapping[str, Any] | Curriculum) -> Curriculum:
    """Normalize an upstream curriculum payload.

    Modules come from a flat ``modules`` list or are flattened, in order, from
    ``phases[].modules``.
    """
    if isinstance(raw, Curriculum):
        return raw

    module_items: list[Any] = []
    if isinstance(raw.get("modules"), list):
        module_items = raw["modules"]
    elif isinstance(raw.get("phases"), list):
        for phase in raw["phases"]:
            if isinstance(phase, Mapping) and isinstance(phase.get("modules"), list):
                module_items.extend(phase["modules"])

    modules = tuple(
        parse_module(item, position=index)
        for index, item in enumerate(
            (item for item in module_items if isinstance(item, Mapping)), start=1
        )
    )
    title = _first(raw, ("roadmap_title", "path_name", "title"))
    description = _first(raw, ("description", "path_description"))
    return Curriculum(
        title=str(title).strip() if title is not None else None,
        description=str(description).strip() if description is not None else None,
        modules=modules,
    )
