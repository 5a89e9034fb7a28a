"""002: create users table

Rows are provisioned by the identity provider; this service reads executors
and stamps last_assigned_at for least-recently-assigned routing.

Revision ID: 002
Revises: 001
Create Date: 2026-10-18
"""
from typing import Sequence, Union

from alembic import op

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE users (
            id                UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            username          VARCHAR(64)     NOT NULL,
            role              VARCHAR(20)     NOT NULL,
            agency_id         VARCHAR(64),
            is_active         BOOLEAN         NOT NULL DEFAULT TRUE,
            last_assigned_at  TIMESTAMPTZ,
            created_at        TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at        TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_users_username UNIQUE (username),
            CONSTRAINT ck_users_role CHECK (role IN (
                'super_admin', 'director', 'delegate', 'accounting',
                'cashier', 'auditor', 'executor'
            ))
        );
    """)
    op.execute("""
        CREATE INDEX idx_users_executor_rotation
            ON users (last_assigned_at NULLS FIRST, created_at)
            WHERE role = 'executor' AND is_active;
    """)
    op.execute("""
        CREATE TRIGGER trg_users_updated_at
            BEFORE UPDATE ON users
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS users CASCADE;")
