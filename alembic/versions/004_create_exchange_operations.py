"""004: create exchange_operations table (append-only)

currency/amount are NULL for replenishments spanning several currencies;
the per-currency figures are then in payload.

Revision ID: 004
Revises: 003
Create Date: 2026-10-18
"""
from typing import Sequence, Union

from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE exchange_operations (
            id              BIGSERIAL       PRIMARY KEY,
            operation_type  VARCHAR(30)     NOT NULL,
            owner           VARCHAR(64)     NOT NULL,
            currency        VARCHAR(3),
            amount          NUMERIC(20, 2),
            rate            NUMERIC(18, 2),
            commission      NUMERIC(20, 2),
            motif           VARCHAR(500),
            payload         JSONB           NOT NULL DEFAULT '{}'::jsonb,
            created_by      VARCHAR(128)    NOT NULL,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_exchange_operations_type CHECK (operation_type IN (
                'PURCHASE', 'SALE', 'CESSION', 'REPLENISHMENT', 'MANUAL_ADJUSTMENT'
            )),
            CONSTRAINT ck_exchange_operations_commission CHECK (
                commission IS NULL OR commission >= 0
            )
        );
    """)
    op.execute(
        "CREATE INDEX idx_exchange_operations_owner ON exchange_operations (owner, id DESC);"
    )
    op.execute(
        "CREATE INDEX idx_exchange_operations_type ON exchange_operations (operation_type, id DESC);"
    )
    op.execute("""
        CREATE TRIGGER trg_exchange_operations_append_only
            BEFORE UPDATE OR DELETE ON exchange_operations
            FOR EACH ROW EXECUTE FUNCTION fn_reject_mutation();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS exchange_operations CASCADE;")
