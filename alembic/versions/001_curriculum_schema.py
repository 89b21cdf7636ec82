"""Curriculum schema.

Creates learning_paths, module_assignments, the shared catalog (modules,
resources, tasks) with their link tables, and roadmap_backups.

Revision ID: 001_curriculum_schema
Revises:
Create Date: 2026-10-17
"""

from collections.abc import Sequence

from alembic import op

revision: str = "001_curriculum_schema"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    # --- Learning Paths ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS learning_paths (
            id VARCHAR(36) PRIMARY KEY,
            user_id VARCHAR(64) NOT NULL,
            name VARCHAR(255) NOT NULL,
            description TEXT,
            status VARCHAR(16) NOT NULL DEFAULT 'active',
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS idx_learning_paths_user_status
        ON learning_paths(user_id, status)
    """)

    # --- Catalog: Modules ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS modules (
            id VARCHAR(36) PRIMARY KEY,
            name VARCHAR(255) NOT NULL,
            name_key VARCHAR(255) NOT NULL,
            description TEXT,
            difficulty VARCHAR(16) NOT NULL DEFAULT 'beginner',
            estimated_hours DOUBLE PRECISION NOT NULL DEFAULT 3,
            skills JSONB NOT NULL DEFAULT '[]',
            prerequisites JSONB NOT NULL DEFAULT '[]',
            usage_count INTEGER NOT NULL DEFAULT 1,
            created_by_ai BOOLEAN NOT NULL DEFAULT true,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("CREATE INDEX IF NOT EXISTS ix_modules_name_key ON modules(name_key)")

    # --- Catalog: Resources ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS resources (
            id VARCHAR(36) PRIMARY KEY,
            title VARCHAR(500) NOT NULL,
            title_key VARCHAR(500) NOT NULL,
            type VARCHAR(32) NOT NULL DEFAULT 'article',
            url TEXT,
            description TEXT,
            estimated_minutes INTEGER NOT NULL DEFAULT 30,
            usage_count INTEGER NOT NULL DEFAULT 1,
            created_by_ai BOOLEAN NOT NULL DEFAULT true,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("CREATE INDEX IF NOT EXISTS ix_resources_title_key ON resources(title_key)")

    # --- Catalog: Tasks ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS tasks (
            id VARCHAR(36) PRIMARY KEY,
            title VARCHAR(500) NOT NULL,
            title_key VARCHAR(500) NOT NULL,
            description TEXT,
            type VARCHAR(32) NOT NULL DEFAULT 'practice',
            estimated_minutes INTEGER NOT NULL DEFAULT 45,
            instructions TEXT,
            solution_url TEXT,
            usage_count INTEGER NOT NULL DEFAULT 1,
            created_by_ai BOOLEAN NOT NULL DEFAULT true,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("CREATE INDEX IF NOT EXISTS ix_tasks_title_key ON tasks(title_key)")

    # --- Module Assignments ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS module_assignments (
            id VARCHAR(36) PRIMARY KEY,
            user_id VARCHAR(64) NOT NULL,
            path_id VARCHAR(36) NOT NULL REFERENCES learning_paths(id) ON DELETE CASCADE,
            module_id VARCHAR(36) NOT NULL REFERENCES modules(id),
            sequence_order INTEGER NOT NULL,
            is_completed BOOLEAN NOT NULL DEFAULT false,
            completion_date TIMESTAMPTZ,
            progress_percentage INTEGER NOT NULL DEFAULT 0,
            status VARCHAR(16) NOT NULL DEFAULT 'active',
            started_at TIMESTAMPTZ,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_assignment_user_path_module UNIQUE (user_id, path_id, module_id)
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS idx_assignments_path_status
        ON module_assignments(path_id, status, sequence_order)
    """)

    # --- Links ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS module_resources (
            module_id VARCHAR(36) NOT NULL REFERENCES modules(id) ON DELETE CASCADE,
            resource_id VARCHAR(36) NOT NULL REFERENCES resources(id) ON DELETE CASCADE,
            sequence_order INTEGER NOT NULL,
            is_required BOOLEAN NOT NULL DEFAULT true,
            PRIMARY KEY (module_id, resource_id)
        )
    """)
    op.execute("""
        CREATE TABLE IF NOT EXISTS module_tasks (
            module_id VARCHAR(36) NOT NULL REFERENCES modules(id) ON DELETE CASCADE,
            task_id VARCHAR(36) NOT NULL REFERENCES tasks(id) ON DELETE CASCADE,
            sequence_order INTEGER NOT NULL,
            is_required BOOLEAN NOT NULL DEFAULT true,
            PRIMARY KEY (module_id, task_id)
        )
    """)

    # --- Backups ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS roadmap_backups (
            id VARCHAR(36) PRIMARY KEY,
            user_id VARCHAR(64) NOT NULL,
            backup_type VARCHAR(32) NOT NULL DEFAULT 'pre_modification',
            payload JSONB NOT NULL,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS idx_roadmap_backups_user
        ON roadmap_backups(user_id, created_at)
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS roadmap_backups CASCADE")
    op.execute("DROP TABLE IF EXISTS module_tasks CASCADE")
    op.execute("DROP TABLE IF EXISTS module_resources CASCADE")
    op.execute("DROP TABLE IF EXISTS module_assignments CASCADE")
    op.execute("DROP TABLE IF EXISTS tasks CASCADE")
    op.execute("DROP TABLE IF EXISTS resources CASCADE")
    op.execute("DROP TABLE IF EXISTS modules CASCADE")
    op.execute("DROP TABLE IF EXISTS learning_paths CASCADE")
