"""006: create transfer_requests table

Revision ID: 006
Revises: 005
Create Date: 2026-10-18
"""
from typing import Sequence, Union

from alembic import op

revision: str = "006"
down_revision: Union[str, None] = "005"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE transfer_requests (
            id                  VARCHAR(64)     PRIMARY KEY,
            amount              NUMERIC(20, 2)  NOT NULL,
            currency            VARCHAR(3)      NOT NULL,
            description         TEXT,
            beneficiary         VARCHAR(200),
            details             JSONB           NOT NULL DEFAULT '{}'::jsonb,
            status              VARCHAR(20)     NOT NULL DEFAULT 'pending',
            reference_currency  VARCHAR(3)      NOT NULL,
            reference_rate      NUMERIC(18, 2),
            local_amount        NUMERIC(20, 2),
            real_amount         NUMERIC(20, 2),
            commission          NUMERIC(20, 2),
            audited_by          VARCHAR(128),
            audited_at          TIMESTAMPTZ,
            rejection_reason    VARCHAR(500),
            executor_id         VARCHAR(64),
            executed_at         TIMESTAMPTZ,
            receipt_ref         VARCHAR(200),
            executor_comment    VARCHAR(500),
            completed_at        TIMESTAMPTZ,
            created_by          VARCHAR(64)     NOT NULL,
            created_by_name     VARCHAR(128),
            agency_id           VARCHAR(64),
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_transfer_requests_amount CHECK (amount > 0),
            CONSTRAINT ck_transfer_requests_currency CHECK (currency IN ('XAF', 'USD', 'EUR', 'GBP')),
            CONSTRAINT ck_transfer_requests_status CHECK (status IN (
                'pending', 'validated', 'rejected', 'executed', 'completed'
            )),
            CONSTRAINT ck_transfer_requests_commission CHECK (
                commission IS NULL OR commission >= 0
            )
        );
    """)
    op.execute("CREATE INDEX idx_transfer_requests_status ON transfer_requests (status, id DESC);")
    op.execute(
        "CREATE INDEX idx_transfer_requests_executor ON transfer_requests (executor_id, id DESC);"
    )
    op.execute(
        "CREATE INDEX idx_transfer_requests_agency ON transfer_requests (agency_id, id DESC);"
    )
    op.execute("""
        CREATE TRIGGER trg_transfer_requests_updated_at
            BEFORE UPDATE ON transfer_requests
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS transfer_requests CASCADE;")
