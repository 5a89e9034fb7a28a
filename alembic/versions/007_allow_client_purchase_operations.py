"""007: allow CLIENT_PURCHASE in exchange_operations.operation_type

Revision ID: 007
Revises: 006
Create Date: 2026-10-18
"""
from typing import Sequence, Union

from alembic import op

revision: str = "007"
down_revision: Union[str, None] = "006"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute(
        "ALTER TABLE exchange_operations DROP CONSTRAINT ck_exchange_operations_type;"
    )
    op.execute("""
        ALTER TABLE exchange_operations ADD CONSTRAINT ck_exchange_operations_type
            CHECK (operation_type IN (
                'PURCHASE', 'SALE', 'CLIENT_PURCHASE', 'CESSION', 'REPLENISHMENT',
                'MANUAL_ADJUSTMENT'
            ));
    """)


def downgrade() -> None:
    op.execute(
        "ALTER TABLE exchange_operations DROP CONSTRAINT ck_exchange_operations_type;"
    )
    op.execute("""
        ALTER TABLE exchange_operations ADD CONSTRAINT ck_exchange_operations_type
            CHECK (operation_type IN (
                'PURCHASE', 'SALE', 'CESSION', 'REPLENISHMENT', 'MANUAL_ADJUSTMENT'
            ));
    """)
