"""Global enums: must match DB CHECK constraints exactly."""

from enum import Enum

HEAD_OFFICE = "HEAD_OFFICE"


class Currency(str, Enum):
    XAF = "XAF"
    USD = "USD"
    EUR = "EUR"
    GBP = "GBP"


LOCAL_CURRENCY = Currency.XAF
FOREIGN_CURRENCIES: tuple[Currency, ...] = (Currency.USD, Currency.EUR, Currency.GBP)


class Role(str, Enum):
    SUPER_ADMIN = "super_admin"
    DIRECTOR = "director"
    DELEGATE = "delegate"
    ACCOUNTING = "accounting"
    CASHIER = "cashier"
    AUDITOR = "auditor"
    EXECUTOR = "executor"


class ExchangeOperationType(str, Enum):
    PURCHASE = "PURCHASE"
    SALE = "SALE"
    CLIENT_PURCHASE = "CLIENT_PURCHASE"
    CESSION = "CESSION"
    REPLENISHMENT = "REPLENISHMENT"
    MANUAL_ADJUSTMENT = "MANUAL_ADJUSTMENT"


class TransferStatus(str, Enum):
    PENDING = "pending"
    VALIDATED = "validated"
    REJECTED = "rejected"
    EXECUTED = "executed"
    COMPLETED = "completed"


class NotificationEvent(str, Enum):
    TRANSFER_CREATED = "transfer.created"
    TRANSFER_VALIDATED = "transfer.validated"
    TRANSFER_REJECTED = "transfer.rejected"
    TRANSFER_EXECUTED = "transfer.executed"
    TRANSFER_COMPLETED = "transfer.completed"
    BALANCE_ADJUSTED = "cash.balance_adjusted"
    EXCHANGE_RECORDED = "cash.exchange_recorded"
