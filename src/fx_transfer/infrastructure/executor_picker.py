"""Least-recently-assigned executor selection over the users table.

The chosen row is locked with SKIP LOCKED so two concurrent audits never
claim the same executor slot, then stamped with the assignment time inside
the caller's transaction.
"""

from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.fx_common.enums import Role
from src.fx_gateway.user.db_models import UserModel


class ExecutorPicker:
    async def pick(self, db: AsyncSession, now: datetime) -> str | None:
        stmt = (
            select(UserModel.id)
            .where(UserModel.role == Role.EXECUTOR.value, UserModel.is_active.is_(True))
            .order_by(UserModel.last_assigned_at.asc().nulls_first(), UserModel.created_at.asc())
            .limit(1)
            .with_for_update(skip_locked=True)
        )
        executor_id = (await db.execute(stmt)).scalar_one_or_none()
        if executor_id is None:
            return None
        await db.execute(
            update(UserModel)
            .where(UserModel.id == executor_id)
            .values(last_assigned_at=now, updated_at=now)
        )
        return str(executor_id)
