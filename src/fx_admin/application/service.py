"""Admin application service."""

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from src.fx_admin.domain.ledger_checks import currency_totals, verify_ledger
from src.fx_gateway.auth.capabilities import Caller, Capability, require


class AdminService:
    async def verify_ledger(self, db: AsyncSession, caller: Caller) -> dict[str, Any]:
        require(caller, Capability.VERIFY_LEDGER)
        violations = await verify_ledger(db)
        totals = await currency_totals(db)
        return {
            "ok": len(violations) == 0,
            "violations": violations,
            "totals": {currency: str(total) for currency, total in totals.items()},
        }
