"""ExchangeApplicationService: purchase, sale, client purchase, cession and replenishment.

Each operation is composed of several ledger legs plus one ExchangeOperation
record, all inside a single transaction: the service commits once at the end
and rolls back on any failure, so no leg ever lands without the others.
"""

import logging
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from src.fx_common.enums import (
    HEAD_OFFICE,
    LOCAL_CURRENCY,
    Currency,
    ExchangeOperationType,
    NotificationEvent,
)
from src.fx_common.errors import (
    InsufficientFundsError,
    InvalidAmountError,
    InvalidCurrencyError,
)
from src.fx_common.money import (
    ZERO,
    parse_currency,
    parse_foreign_currency,
    require_non_negative,
    require_positive,
    round_rate,
    to_money,
)
from src.fx_common.pagination import cursor_decode_int, cursor_encode
from src.fx_exchange.application.schemas import (
    CessionRequest,
    CessionResponse,
    ClientIdentity,
    ClientPurchaseRequest,
    ClientPurchaseResponse,
    CommissionsResponse,
    ExpenseInput,
    OperationListResponse,
    OperationResponse,
    PurchaseRequest,
    PurchaseResponse,
    ReplenishmentRequest,
    ReplenishmentResponse,
    SaleRequest,
    SaleResponse,
)
from src.fx_exchange.domain.commission import calc_commission
from src.fx_exchange.domain.pricing import Expense, quote_purchase
from src.fx_gateway.auth.capabilities import Caller, Capability, require, resolve_owner
from src.fx_ledger.domain.engine import LedgerEngine
from src.fx_ledger.domain.models import ExchangeOperation, NewExchangeOperation
from src.fx_notify.sink import NotificationSink, notify

logger = logging.getLogger(__name__)

_EXPENSE_LABELS = ("transport", "local_market", "note_exchange")


def _client_payload(client: ClientIdentity) -> dict[str, str | None]:
    return {
        "client_id_type": client.id_type,
        "client_id_type_label": client.id_type_label,
        "client_id_number": client.id_number,
        "client_phone": client.phone,
    }


def _reporting_scope(caller: Caller, owner: str | None) -> str | None:
    """None means every owner; agency-bound callers only ever see their agency."""
    if caller.agency_id and not caller.is_head_office:
        return resolve_owner(caller, owner)
    return owner


class ExchangeApplicationService:
    def __init__(
        self,
        engine: LedgerEngine | None = None,
        sink: NotificationSink | None = None,
    ) -> None:
        self._engine = engine or LedgerEngine()
        self._sink = sink

    # ------------------------------------------------------------------
    # Purchase (head office buys foreign currency)
    # ------------------------------------------------------------------

    async def purchase(
        self, db: AsyncSession, caller: Caller, req: PurchaseRequest
    ) -> PurchaseResponse:
        require(caller, Capability.PURCHASE_CURRENCY)
        source = parse_currency(req.source_currency)
        target = parse_foreign_currency(req.target_currency)
        if source == target:
            raise InvalidCurrencyError(
                target.value, [c.value for c in Currency if c != source]
            )
        source_amount = require_positive(req.source_amount, "source amount")
        quoted_rate = require_positive(req.quoted_rate, "quoted rate")
        expenses = self._collect_expenses(req, target)
        quote = quote_purchase(source, source_amount, target, quoted_rate, expenses)

        try:
            await self._engine.debit(db, HEAD_OFFICE, source.value, source_amount, caller.name)
            await self._engine.credit(
                db,
                HEAD_OFFICE,
                target.value,
                quote.gross_foreign_amount,
                caller.name,
                last_rate=quote.real_rate if source == LOCAL_CURRENCY else None,
            )
            for expense in expenses:
                await self._engine.debit(
                    db, HEAD_OFFICE, expense.currency.value, expense.amount, caller.name
                )
            operation = await self._engine.repo.record_operation(
                db,
                NewExchangeOperation(
                    operation_type=ExchangeOperationType.PURCHASE.value,
                    owner=HEAD_OFFICE,
                    currency=target.value,
                    amount=quote.available_foreign_amount,
                    created_by=caller.name,
                    rate=quote.real_rate,
                    commission=ZERO,
                    motif=req.motif,
                    payload={
                        "source_currency": source.value,
                        "source_amount": source_amount,
                        "quoted_rate": quoted_rate,
                        "gross_foreign_amount": quote.gross_foreign_amount,
                        "total_expenses_foreign": quote.total_expenses_foreign,
                        "available_foreign_amount": quote.available_foreign_amount,
                        "real_rate": quote.real_rate,
                        "expenses": [
                            {"label": e.label, "amount": e.amount, "currency": e.currency.value}
                            for e in expenses
                        ],
                    },
                ),
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(
            "purchase %s %s -> %s %s at real rate %s (op %s)",
            source_amount,
            source.value,
            quote.available_foreign_amount,
            target.value,
            quote.real_rate,
            operation.id,
        )
        await self._notify(operation)
        return PurchaseResponse(
            operation_id=operation.id,
            source_currency=source.value,
            source_amount=source_amount,
            target_currency=target.value,
            quoted_rate=quoted_rate,
            gross_foreign_amount=quote.gross_foreign_amount,
            total_expenses_foreign=quote.total_expenses_foreign,
            available_foreign_amount=quote.available_foreign_amount,
            real_rate=quote.real_rate,
        )

    @staticmethod
    def _collect_expenses(req: PurchaseRequest, target: Currency) -> list[Expense]:
        expenses: list[Expense] = []
        for label in _EXPENSE_LABELS:
            item: ExpenseInput = getattr(req, label)
            amount = require_non_negative(item.amount, f"{label} expense")
            if amount == ZERO:
                continue
            currency = parse_currency(item.currency) if item.currency else target
            expenses.append(Expense(label=label, amount=amount, currency=currency))
        return expenses

    # ------------------------------------------------------------------
    # Sale (foreign currency sold to a client)
    # ------------------------------------------------------------------

    async def sale(self, db: AsyncSession, caller: Caller, req: SaleRequest) -> SaleResponse:
        require(caller, Capability.SELL_CURRENCY)
        owner = resolve_owner(caller, req.owner)
        currency = parse_foreign_currency(req.currency)
        amount = require_positive(req.amount)
        day_rate = require_positive(req.day_rate, "day rate")
        received = require_positive(req.received_amount, "received amount")

        try:
            purchase_rate = await self._purchase_rate(db, owner, currency, day_rate)
            commission = calc_commission(received, amount, purchase_rate)
            await self._engine.debit(db, owner, currency.value, amount, caller.name)
            await self._engine.credit(db, owner, LOCAL_CURRENCY.value, received, caller.name)
            operation = await self._engine.repo.record_operation(
                db,
                NewExchangeOperation(
                    operation_type=ExchangeOperationType.SALE.value,
                    owner=owner,
                    currency=currency.value,
                    amount=amount,
                    created_by=caller.name,
                    rate=day_rate,
                    commission=commission,
                    motif=req.motif,
                    payload={
                        "received_amount": received,
                        "day_rate": day_rate,
                        "purchase_rate": purchase_rate,
                        "beneficiary": req.beneficiary,
                        **_client_payload(req.client),
                    },
                ),
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(
            "sale %s %s by %s for %s XAF, commission %s (op %s)",
            amount,
            currency.value,
            owner,
            received,
            commission,
            operation.id,
        )
        await self._notify(operation)
        return SaleResponse(
            operation_id=operation.id,
            owner=owner,
            currency=currency.value,
            amount=amount,
            day_rate=day_rate,
            received_amount=received,
            purchase_rate=purchase_rate,
            commission=commission,
        )

    async def _purchase_rate(
        self, db: AsyncSession, owner: str, currency: Currency, day_rate: Decimal
    ) -> Decimal:
        """Last applied purchase rate of the account, then of the head office, then the day rate."""
        owners = [owner] if owner == HEAD_OFFICE else [owner, HEAD_OFFICE]
        for candidate in owners:
            account = await self._engine.repo.get_account(db, candidate, currency.value)
            if account is not None and account.last_rate:
                return round_rate(account.last_rate)
        return round_rate(day_rate)

    # ------------------------------------------------------------------
    # Client purchase (agency buys foreign notes from a client)
    # ------------------------------------------------------------------

    async def client_purchase(
        self, db: AsyncSession, caller: Caller, req: ClientPurchaseRequest
    ) -> ClientPurchaseResponse:
        require(caller, Capability.SELL_CURRENCY)
        owner = resolve_owner(caller, req.owner)
        currency = parse_foreign_currency(req.currency)
        amount = require_positive(req.amount)
        rate = require_positive(req.rate, "rate")
        paid = require_positive(req.paid_amount, "paid amount")

        try:
            local = await self._engine.debit(db, owner, LOCAL_CURRENCY.value, paid, caller.name)
            foreign = await self._engine.credit(db, owner, currency.value, amount, caller.name)
            operation = await self._engine.repo.record_operation(
                db,
                NewExchangeOperation(
                    operation_type=ExchangeOperationType.CLIENT_PURCHASE.value,
                    owner=owner,
                    currency=currency.value,
                    amount=amount,
                    created_by=caller.name,
                    rate=rate,
                    commission=ZERO,
                    motif=req.motif,
                    payload={
                        "paid_amount": paid,
                        "client_name": req.client_name,
                        **_client_payload(req.client),
                    },
                ),
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(
            "client purchase of %s %s by %s for %s XAF (op %s)",
            amount,
            currency.value,
            owner,
            paid,
            operation.id,
        )
        await self._notify(operation)
        return ClientPurchaseResponse(
            operation_id=operation.id,
            owner=owner,
            currency=currency.value,
            amount=amount,
            rate=rate,
            paid_amount=paid,
            local_balance=local.balance,
            foreign_balance=foreign.balance,
        )

    # ------------------------------------------------------------------
    # Cession (same-currency move between two accounts)
    # ------------------------------------------------------------------

    async def cession(
        self, db: AsyncSession, caller: Caller, req: CessionRequest
    ) -> CessionResponse:
        require(caller, Capability.CEDE_CURRENCY)
        from_owner = resolve_owner(caller, req.from_owner)
        currency = parse_currency(req.currency)
        amount = require_positive(req.amount)

        try:
            source, destination = await self._engine.transfer(
                db, from_owner, req.to_owner, currency.value, amount, caller.name
            )
            operation = await self._engine.repo.record_operation(
                db,
                NewExchangeOperation(
                    operation_type=ExchangeOperationType.CESSION.value,
                    owner=from_owner,
                    currency=currency.value,
                    amount=amount,
                    created_by=caller.name,
                    commission=ZERO,
                    motif=req.motif,
                    payload={"from_owner": from_owner, "to_owner": req.to_owner},
                ),
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        await self._notify(operation)
        return CessionResponse(
            operation_id=operation.id,
            from_owner=from_owner,
            to_owner=req.to_owner,
            currency=currency.value,
            amount=amount,
            from_balance=source.balance,
            to_balance=destination.balance,
        )

    # ------------------------------------------------------------------
    # Replenishment (head office -> N agencies, all or nothing)
    # ------------------------------------------------------------------

    async def replenish(
        self, db: AsyncSession, caller: Caller, req: ReplenishmentRequest
    ) -> ReplenishmentResponse:
        require(caller, Capability.REPLENISH_AGENCIES)
        lines: list[tuple[str, Currency, Decimal]] = []
        for line in req.lines:
            if line.agency_id == HEAD_OFFICE:
                raise InvalidAmountError("the head office cannot replenish itself")
            currency = parse_currency(line.currency)
            amount = require_non_negative(line.amount, f"{currency.value} amount")
            if amount > ZERO:
                lines.append((line.agency_id, currency, amount))
        if not lines:
            raise InvalidAmountError("replenishment carries no positive amount")

        totals: dict[Currency, Decimal] = {}
        for _, currency, amount in lines:
            totals[currency] = totals.get(currency, ZERO) + amount

        try:
            # Every currency total is checked before the first leg is applied.
            rates: dict[Currency, Decimal | None] = {}
            for currency, total in totals.items():
                account = await self._engine.repo.get_account(db, HEAD_OFFICE, currency.value)
                available = account.balance if account else ZERO
                if available < total:
                    raise InsufficientFundsError(HEAD_OFFICE, currency.value, total, available)
                rates[currency] = account.last_rate if currency != LOCAL_CURRENCY else None

            head_office_balances: dict[str, Decimal] = {}
            for currency, total in totals.items():
                account = await self._engine.debit(
                    db, HEAD_OFFICE, currency.value, total, caller.name
                )
                head_office_balances[currency.value] = account.balance
            for agency_id, currency, amount in lines:
                await self._engine.credit(
                    db, agency_id, currency.value, amount, caller.name, last_rate=rates[currency]
                )

            single = next(iter(totals)) if len(totals) == 1 else None
            operation = await self._engine.repo.record_operation(
                db,
                NewExchangeOperation(
                    operation_type=ExchangeOperationType.REPLENISHMENT.value,
                    owner=HEAD_OFFICE,
                    currency=single.value if single else None,
                    amount=totals[single] if single else None,
                    created_by=caller.name,
                    commission=ZERO,
                    motif=req.motif,
                    payload={
                        "lines": [
                            {"agency_id": a, "currency": c.value, "amount": m}
                            for a, c, m in lines
                        ],
                        "totals": {c.value: t for c, t in totals.items()},
                        "rates": {c.value: r for c, r in rates.items() if r is not None},
                    },
                ),
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(
            "replenishment of %d agency lines by %s (op %s)", len(lines), caller.name, operation.id
        )
        await self._notify(operation)
        return ReplenishmentResponse(
            operation_id=operation.id,
            totals={c.value: t for c, t in totals.items()},
            lines_applied=len(lines),
            head_office_balances=head_office_balances,
        )

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    async def list_operations(
        self,
        db: AsyncSession,
        caller: Caller,
        owner: str | None,
        cursor: str | None,
        limit: int,
        operation_type: ExchangeOperationType | None,
    ) -> OperationListResponse:
        require(caller, Capability.VIEW_CASH)
        scope = _reporting_scope(caller, owner)
        cursor_id = cursor_decode_int(cursor)
        # Fetch limit+1 to detect a further page without a COUNT(*) query
        operations = await self._engine.repo.list_operations(
            db,
            scope,
            cursor_id,
            limit + 1,
            operation_type.value if operation_type else None,
        )
        page = operations[:limit]
        has_more = len(operations) > limit
        return OperationListResponse(
            items=[OperationResponse.from_domain(op) for op in page],
            next_cursor=cursor_encode(page[-1].id) if has_more and page else None,
            has_more=has_more,
        )

    async def commissions_generated(
        self, db: AsyncSession, caller: Caller, owner: str | None
    ) -> CommissionsResponse:
        require(caller, Capability.VIEW_CASH)
        scope = _reporting_scope(caller, owner)
        sums = await self._engine.repo.sum_sale_commissions(db, scope)
        commissions = {
            c.value: to_money(sums.get(c.value, ZERO))
            for c in Currency
            if c != LOCAL_CURRENCY
        }
        return CommissionsResponse(
            owner=scope,
            commissions=commissions,
            total_local=to_money(sum(commissions.values(), ZERO)),
        )

    async def _notify(self, operation: ExchangeOperation) -> None:
        await notify(
            self._sink,
            NotificationEvent.EXCHANGE_RECORDED,
            OperationResponse.from_domain(operation).model_dump(mode="json"),
        )
