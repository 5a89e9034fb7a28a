"""Role → capability table, consulted once at each service boundary.

Roles are a closed enum (fx_common.enums.Role). Every gated operation names
exactly one Capability; `require()` is the only place a role is compared.
"""

from dataclasses import dataclass
from enum import Enum

from src.fx_common.enums import HEAD_OFFICE, Role
from src.fx_common.errors import UnauthorizedError


class Capability(str, Enum):
    VIEW_CASH = "VIEW_CASH"
    PURCHASE_CURRENCY = "PURCHASE_CURRENCY"
    SELL_CURRENCY = "SELL_CURRENCY"
    CEDE_CURRENCY = "CEDE_CURRENCY"
    REPLENISH_AGENCIES = "REPLENISH_AGENCIES"
    ADJUST_BALANCE = "ADJUST_BALANCE"
    MANAGE_RATES = "MANAGE_RATES"
    CREATE_TRANSFER = "CREATE_TRANSFER"
    AUDIT_TRANSFER = "AUDIT_TRANSFER"
    EXECUTE_TRANSFER = "EXECUTE_TRANSFER"
    COMPLETE_TRANSFER = "COMPLETE_TRANSFER"
    VIEW_TRANSFERS = "VIEW_TRANSFERS"
    PURGE_TRANSFERS = "PURGE_TRANSFERS"
    VERIFY_LEDGER = "VERIFY_LEDGER"


_HEAD_OFFICE_ROLES = frozenset({Role.SUPER_ADMIN, Role.DIRECTOR})
_SUPERVISING_ROLES = frozenset({Role.SUPER_ADMIN, Role.DIRECTOR, Role.DELEGATE})

ROLE_CAPABILITIES: dict[Capability, frozenset[Role]] = {
    Capability.VIEW_CASH: frozenset(
        {
            Role.SUPER_ADMIN,
            Role.DIRECTOR,
            Role.DELEGATE,
            Role.ACCOUNTING,
            Role.CASHIER,
            Role.AUDITOR,
        }
    ),
    Capability.PURCHASE_CURRENCY: _HEAD_OFFICE_ROLES,
    Capability.SELL_CURRENCY: _HEAD_OFFICE_ROLES | {Role.CASHIER},
    Capability.CEDE_CURRENCY: _HEAD_OFFICE_ROLES | {Role.ACCOUNTING},
    Capability.REPLENISH_AGENCIES: _HEAD_OFFICE_ROLES,
    Capability.ADJUST_BALANCE: _HEAD_OFFICE_ROLES,
    Capability.MANAGE_RATES: _HEAD_OFFICE_ROLES | {Role.ACCOUNTING},
    Capability.CREATE_TRANSFER: _SUPERVISING_ROLES | {Role.CASHIER},
    Capability.AUDIT_TRANSFER: frozenset({Role.AUDITOR}),
    Capability.EXECUTE_TRANSFER: frozenset({Role.EXECUTOR}),
    Capability.COMPLETE_TRANSFER: _SUPERVISING_ROLES | {Role.CASHIER},
    Capability.VIEW_TRANSFERS: frozenset(Role),
    Capability.PURGE_TRANSFERS: frozenset({Role.SUPER_ADMIN}),
    Capability.VERIFY_LEDGER: frozenset({Role.SUPER_ADMIN, Role.AUDITOR}),
}


@dataclass(frozen=True)
class Caller:
    """Identity supplied by the identity provider for every call."""

    user_id: str
    name: str
    role: Role
    agency_id: str | None = None

    @property
    def is_supervisor(self) -> bool:
        return self.role in _SUPERVISING_ROLES

    @property
    def is_head_office(self) -> bool:
        return self.role in _HEAD_OFFICE_ROLES


def can(caller: Caller, capability: Capability) -> bool:
    return caller.role in ROLE_CAPABILITIES[capability]


def require(caller: Caller, capability: Capability) -> None:
    if not can(caller, capability):
        raise UnauthorizedError(
            f"Role {caller.role.value} lacks capability {capability.value}"
        )


def resolve_owner(caller: Caller, requested_owner: str | None) -> str:
    """Pick the cash-account owner a caller may act on or read.

    Agency-bound callers are pinned to their own agency; head-office level
    callers default to the head office and may name any agency.
    """
    if caller.agency_id and not caller.is_head_office:
        if requested_owner not in (None, caller.agency_id):
            raise UnauthorizedError(
                f"Caller of agency {caller.agency_id} cannot act on {requested_owner}"
            )
        return caller.agency_id
    return requested_owner or HEAD_OFFICE
