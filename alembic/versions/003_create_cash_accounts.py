"""003: create cash_accounts table

One row per (owner, currency); owner is 'HEAD_OFFICE' or an agency id.

Revision ID: 003
Revises: 002
Create Date: 2026-10-18
"""
from typing import Sequence, Union

from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE cash_accounts (
            id                  SERIAL          PRIMARY KEY,
            owner               VARCHAR(64)     NOT NULL,
            currency            VARCHAR(3)      NOT NULL,
            balance             NUMERIC(20, 2)  NOT NULL DEFAULT 0,
            last_rate           NUMERIC(18, 2),
            last_manual_motif   VARCHAR(500),
            updated_by          VARCHAR(128)    NOT NULL,
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_cash_accounts_owner_currency UNIQUE (owner, currency),
            CONSTRAINT ck_cash_accounts_currency CHECK (currency IN ('XAF', 'USD', 'EUR', 'GBP')),
            CONSTRAINT ck_cash_accounts_balance_non_negative CHECK (balance >= 0),
            CONSTRAINT ck_cash_accounts_rate_positive CHECK (last_rate IS NULL OR last_rate > 0)
        );
    """)
    op.execute("""
        CREATE TRIGGER trg_cash_accounts_updated_at
            BEFORE UPDATE ON cash_accounts
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS cash_accounts CASCADE;")
