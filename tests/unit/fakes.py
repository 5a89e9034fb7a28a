"""In-memory fakes conforming to the repository Protocols, plus caller helpers."""

from dataclasses import replace
from datetime import UTC, datetime
from decimal import Decimal

from src.fx_common.enums import ExchangeOperationType, Role, TransferStatus
from src.fx_common.errors import InsufficientFundsError
from src.fx_gateway.auth.capabilities import Caller
from src.fx_ledger.domain.models import (
    BalanceAdjustment,
    CashAccount,
    ExchangeOperation,
    NewExchangeOperation,
)
from src.fx_transfer.domain.models import AuditOutcome, TransferRequest

ZERO = Decimal("0.00")


class FakeCashAccountRepository:
    """Dict-backed CashAccountRepositoryProtocol with the same guards as the SQL."""

    def __init__(self) -> None:
        self.accounts: dict[tuple[str, str], CashAccount] = {}
        self.operations: list[ExchangeOperation] = []

    def seed(
        self, owner: str, currency: str, balance: str, last_rate: str | None = None
    ) -> None:
        self.accounts[(owner, currency)] = CashAccount(
            owner=owner,
            currency=currency,
            balance=Decimal(balance),
            last_rate=Decimal(last_rate) if last_rate else None,
        )

    def balance(self, owner: str, currency: str) -> Decimal:
        account = self.accounts.get((owner, currency))
        return account.balance if account else ZERO

    def total(self, currency: str) -> Decimal:
        return sum(
            (a.balance for (_, c), a in self.accounts.items() if c == currency), ZERO
        )

    async def get_account(self, db, owner, currency):
        account = self.accounts.get((owner, currency))
        return replace(account) if account else None

    async def list_accounts(self, db, owner):
        return [replace(a) for (o, _), a in sorted(self.accounts.items()) if o == owner]

    async def credit(self, db, owner, currency, amount, actor, last_rate=None):
        account = self.accounts.setdefault(
            (owner, currency), CashAccount(owner=owner, currency=currency, balance=ZERO)
        )
        account.balance += amount
        if last_rate is not None:
            account.last_rate = last_rate
        account.updated_by = actor
        return replace(account)

    async def debit(self, db, owner, currency, amount, actor):
        account = self.accounts.setdefault(
            (owner, currency), CashAccount(owner=owner, currency=currency, balance=ZERO)
        )
        if account.balance < amount:
            raise InsufficientFundsError(owner, currency, amount, account.balance)
        account.balance -= amount
        account.updated_by = actor
        return replace(account)

    async def set_balance(self, db, owner, currency, new_balance, motif, actor):
        account = self.accounts.setdefault(
            (owner, currency), CashAccount(owner=owner, currency=currency, balance=ZERO)
        )
        previous = account.balance
        account.balance = new_balance
        account.last_manual_motif = motif
        account.updated_by = actor
        return BalanceAdjustment(account=replace(account), previous_balance=previous)

    async def record_operation(self, db, op: NewExchangeOperation):
        operation = ExchangeOperation(
            id=len(self.operations) + 1,
            operation_type=op.operation_type,
            owner=op.owner,
            currency=op.currency,
            amount=op.amount,
            created_by=op.created_by,
            rate=op.rate,
            commission=op.commission,
            motif=op.motif,
            payload=dict(op.payload),
            created_at=datetime.now(UTC),
        )
        self.operations.append(operation)
        return operation

    async def list_operations(self, db, owner, cursor_id, limit, operation_type):
        ops = [
            op
            for op in reversed(self.operations)
            if (owner is None or op.owner == owner)
            and (cursor_id is None or op.id < cursor_id)
            and (operation_type is None or op.operation_type == operation_type)
        ]
        return ops[:limit]

    async def sum_sale_commissions(self, db, owner):
        totals: dict[str, Decimal] = {}
        for op in self.operations:
            if op.operation_type != ExchangeOperationType.SALE.value:
                continue
            if owner is not None and op.owner != owner:
                continue
            totals[op.currency] = totals.get(op.currency, ZERO) + (op.commission or ZERO)
        return totals


class FakeTransferRepository:
    """Dict-backed TransferRepositoryProtocol honouring the status guards."""

    def __init__(self) -> None:
        self.requests: dict[str, TransferRequest] = {}

    def _guarded(self, transfer_id: str, expected: TransferStatus) -> TransferRequest | None:
        request = self.requests.get(transfer_id)
        if request is None or request.status != expected.value:
            return None
        return request

    async def insert(self, db, request):
        stored = replace(request, created_at=datetime.now(UTC))
        self.requests[request.id] = stored
        return replace(stored)

    async def get(self, db, transfer_id):
        request = self.requests.get(transfer_id)
        return replace(request) if request else None

    async def record_audit(self, db, transfer_id, outcome: AuditOutcome, executor_id, auditor):
        request = self._guarded(transfer_id, TransferStatus.PENDING)
        if request is None:
            return None
        request.status = outcome.status.value
        request.local_amount = outcome.local_amount
        request.reference_rate = outcome.reference_rate
        request.real_amount = outcome.real_amount
        request.commission = outcome.commission
        request.executor_id = executor_id
        request.audited_by = auditor
        return replace(request)

    async def reject(self, db, transfer_id, reason, auditor):
        request = self._guarded(transfer_id, TransferStatus.PENDING)
        if request is None:
            return None
        request.status = TransferStatus.REJECTED.value
        request.rejection_reason = reason
        request.audited_by = auditor
        return replace(request)

    async def mark_executed(self, db, transfer_id, executor_id, receipt_ref, comment):
        request = self._guarded(transfer_id, TransferStatus.VALIDATED)
        if request is None or request.executor_id != executor_id:
            return None
        request.status = TransferStatus.EXECUTED.value
        request.receipt_ref = receipt_ref
        request.executor_comment = comment
        request.executed_at = datetime.now(UTC)
        return replace(request)

    async def mark_completed(self, db, transfer_id):
        request = self._guarded(transfer_id, TransferStatus.EXECUTED)
        if request is None:
            return None
        request.status = TransferStatus.COMPLETED.value
        request.completed_at = datetime.now(UTC)
        return replace(request)

    async def list_requests(
        self, db, status, created_by, executor_id, agency_id, cursor_id, limit
    ):
        items = [
            replace(r)
            for r in sorted(self.requests.values(), key=lambda r: r.id, reverse=True)
            if (status is None or r.status == status)
            and (created_by is None or r.created_by == created_by)
            and (executor_id is None or r.executor_id == executor_id)
            and (agency_id is None or r.agency_id == agency_id)
            and (cursor_id is None or r.id < cursor_id)
        ]
        return items[:limit]

    async def purge(self, db, status):
        doomed = [k for k, r in self.requests.items() if status is None or r.status == status]
        for key in doomed:
            del self.requests[key]
        return len(doomed)


class FakeExecutorPicker:
    """Round-robins over a fixed executor list, least recently assigned first."""

    def __init__(self, executor_ids: list[str]) -> None:
        self._queue = list(executor_ids)
        self.assignments: list[str] = []

    async def pick(self, db, now):
        if not self._queue:
            return None
        chosen = self._queue.pop(0)
        self._queue.append(chosen)
        self.assignments.append(chosen)
        return chosen


def make_caller(
    role: Role, user_id: str | None = None, agency_id: str | None = None
) -> Caller:
    uid = user_id or f"{role.value}-1"
    return Caller(user_id=uid, name=uid, role=role, agency_id=agency_id)
