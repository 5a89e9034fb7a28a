"""005: create reference_rates table

Revision ID: 005
Revises: 004
Create Date: 2026-10-18
"""
from typing import Sequence, Union

from alembic import op

revision: str = "005"
down_revision: Union[str, None] = "004"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE reference_rates (
            currency        VARCHAR(3)      PRIMARY KEY,
            reference_rate  NUMERIC(18, 2)  NOT NULL,
            buy_rate        NUMERIC(18, 2),
            sell_rate       NUMERIC(18, 2),
            updated_by      VARCHAR(128)    NOT NULL,
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_reference_rates_currency CHECK (currency IN ('USD', 'EUR', 'GBP')),
            CONSTRAINT ck_reference_rates_positive CHECK (
                reference_rate > 0
                AND (buy_rate IS NULL OR buy_rate > 0)
                AND (sell_rate IS NULL OR sell_rate > 0)
            )
        );
    """)
    op.execute("""
        CREATE TRIGGER trg_reference_rates_updated_at
            BEFORE UPDATE ON reference_rates
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS reference_rates CASCADE;")
