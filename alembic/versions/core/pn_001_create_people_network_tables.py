"""create_people_network_tables

Revision ID: core_001
Revises:
Create Date: 2026-10-18 00:00:00.000000

"""

from __future__ import annotations

from alembic import op

# revision identifiers, used by Alembic.
revision = "core_001"
down_revision = None
branch_labels = ("core",)
depends_on = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE IF NOT EXISTS person (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            name TEXT NOT NULL CHECK (btrim(name) <> ''),
            context TEXT,
            source TEXT NOT NULL DEFAULT 'manual'
                CHECK (source IN ('manual', 'contacts')),
            created_at TIMESTAMPTZ NOT NULL DEFAULT now()
        )
    """)

    op.execute("""
        CREATE TABLE IF NOT EXISTS group_context (
            group_id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            group_name TEXT NOT NULL,
            color TEXT NOT NULL DEFAULT '#9e9e9e',
            created_at TIMESTAMPTZ NOT NULL DEFAULT now()
        )
    """)

    op.execute("""
        CREATE TABLE IF NOT EXISTS interaction (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            date DATE NOT NULL UNIQUE,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now()
        )
    """)

    op.execute("""
        CREATE TABLE IF NOT EXISTS interaction_person (
            interaction_id UUID NOT NULL REFERENCES interaction(id) ON DELETE CASCADE,
            person_id UUID NOT NULL REFERENCES person(id) ON DELETE CASCADE,
            PRIMARY KEY (interaction_id, person_id)
        )
    """)

    op.execute("""
        CREATE INDEX IF NOT EXISTS idx_interaction_person_person_id
        ON interaction_person (person_id)
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS idx_person_lower_name
        ON person (lower(name))
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS idx_group_context_lower_name
        ON group_context (lower(group_name))
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS interaction_person")
    op.execute("DROP TABLE IF EXISTS interaction")
    op.execute("DROP TABLE IF EXISTS group_context")
    op.execute("DROP TABLE IF EXISTS person")
