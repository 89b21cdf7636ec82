"""Content identity resolver tests against a real store."""

from __future__ import annotations

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from skillpath.catalog.drafts import ModuleDraft, ResourceDraft, TaskDraft
from skillpath.catalog.resolver import ContentResolver
from skillpath.db.models import Module, Resource, Task


async def _usage(db: AsyncSession, model, entity_id: str) -> int:  # noqa: ANN001
    result = await db.execute(select(model.usage_count).where(model.id == entity_id))
    return result.scalar_one()


async def _count(db: AsyncSession, model) -> int:  # noqa: ANN001
    result = await db.execute(select(func.count()).select_from(model))
    return result.scalar_one()


@pytest.mark.asyncio
class TestResolveModule:
    async def test_creates_with_usage_count_one(self, db_session):
        resolver = ContentResolver(db_session)
        module_id = await resolver.resolve("module", ModuleDraft(name="Intro to Python", difficulty="hard"))

        module = await db_session.get(Module, module_id)
        assert module.usage_count == 1
        assert module.difficulty == "advanced"
        assert module.name_key == "intro to python"
        assert module.description == "Learn Intro to Python"
        assert module.estimated_hours == 3

    async def test_case_and_whitespace_variants_dedup(self, db_session):
        resolver = ContentResolver(db_session)
        first = await resolver.resolve("module", ModuleDraft(name="Intro to Python"))
        second = await resolver.resolve("module", ModuleDraft(name="  intro   TO python "))

        assert first == second
        assert await _usage(db_session, Module, first) == 2
        assert await _count(db_session, Module) == 1

    async def test_resolution_reports_created_then_reused(self, db_session):
        resolver = ContentResolver(db_session)
        created = await resolver.resolve_entity("module", ModuleDraft(name="Git"))
        reused = await resolver.resolve_entity("module", ModuleDraft(name="git"))
        assert created.created is True
        assert reused.created is False
        assert reused.entity_id == created.entity_id

    async def test_default_hours_are_configurable(self, db_session):
        resolver = ContentResolver(db_session, default_module_hours=8)
        module_id = await resolver.resolve("module", ModuleDraft(name="Kubernetes"))
        assert (await db_session.get(Module, module_id)).estimated_hours == 8

    async def test_kind_mismatch_raises(self, db_session):
        with pytest.raises(TypeError):
            await ContentResolver(db_session).resolve("task", ModuleDraft(name="Wrong"))


@pytest.mark.asyncio
class TestResolveResource:
    async def test_placeholder_url_is_synthesized(self, db_session):
        resolver = ContentResolver(db_session)
        resource_id = await resolver.resolve("resource", ResourceDraft(title="Python basics", url="#"))
        resource = await db_session.get(Resource, resource_id)
        assert resource.url == "https://docs.python.org/3/"

    async def test_same_title_different_real_url_is_a_new_resource(self, db_session):
        resolver = ContentResolver(db_session)
        a = await resolver.resolve("resource", ResourceDraft(title="Guide", url="https://a.example.org/guide"))
        b = await resolver.resolve("resource", ResourceDraft(title="guide", url="https://b.example.org/guide"))
        c = await resolver.resolve("resource", ResourceDraft(title="GUIDE", url="https://a.example.org/guide"))

        assert a != b
        assert c == a
        assert await _usage(db_session, Resource, a) == 2

    async def test_title_match_without_real_url_reuses(self, db_session):
        resolver = ContentResolver(db_session)
        a = await resolver.resolve("resource", ResourceDraft(title="Cheat sheet", url="https://c.example.org"))
        b = await resolver.resolve("resource", ResourceDraft(title="cheat sheet"))
        assert a == b


@pytest.mark.asyncio
class TestResolveTask:
    async def test_dedup_by_title(self, db_session):
        resolver = ContentResolver(db_session)
        a = await resolver.resolve("task", TaskDraft(title="Build a CLI"))
        b = await resolver.resolve("task", TaskDraft(title="build  a cli"))
        assert a == b
        assert await _usage(db_session, Task, a) == 2
        task = await db_session.get(Task, a)
        assert task.type == "practice"
        assert task.estimated_minutes == 45
