"""Unified error codes and custom exceptions.

Every caller-facing failure carries a stable numeric ``code``, a stable
``kind`` string and a human-readable ``message``.

Error code ranges:
  1xxx: Auth/Caller
  2xxx: Cash ledger
  3xxx: Transfer workflow
  4xxx: Rates
  9xxx: System
"""

from decimal import Decimal


class AppError(Exception):
    """Base application error."""

    kind: str = "INTERNAL"

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


# --- 1xxx: Auth/Caller ---

class UnauthorizedError(AppError):
    kind = "UNAUTHORIZED"

    def __init__(self, detail: str = "Caller is not allowed to perform this operation") -> None:
        super().__init__(1001, detail, 403)


class InvalidCredentialsError(AppError):
    kind = "UNAUTHORIZED"

    def __init__(self) -> None:
        super().__init__(1002, "Invalid or expired token", 401)


# --- 2xxx: Cash ledger ---

class InvalidAmountError(AppError):
    kind = "INVALID_AMOUNT"

    def __init__(self, detail: str) -> None:
        super().__init__(2001, f"Invalid amount: {detail}", 422)


class InvalidCurrencyError(AppError):
    kind = "INVALID_CURRENCY"

    def __init__(self, currency: str, allowed: list[str] | None = None) -> None:
        message = f"Unsupported currency: {currency}"
        if allowed:
            message += f" (allowed: {', '.join(allowed)})"
        super().__init__(2002, message, 422)


class InsufficientFundsError(AppError):
    kind = "INSUFFICIENT_FUNDS"

    def __init__(
        self, owner: str, currency: str, required: Decimal, available: Decimal
    ) -> None:
        self.owner = owner
        self.currency = currency
        self.required = required
        self.available = available
        super().__init__(
            2003,
            f"Insufficient {currency} funds on {owner}: "
            f"required {required}, available {available}",
            422,
        )


# --- 3xxx: Transfer workflow ---

class TransferNotFoundError(AppError):
    kind = "NOT_FOUND"

    def __init__(self, transfer_id: str) -> None:
        super().__init__(3001, f"Transfer request not found: {transfer_id}", 404)


class InvalidStateTransitionError(AppError):
    kind = "INVALID_STATE_TRANSITION"

    def __init__(self, transfer_id: str, status: str, action: str) -> None:
        self.status = status
        super().__init__(
            3002,
            f"Transfer {transfer_id} in status {status} cannot be {action}",
            409,
        )


class NoExecutorAvailableError(AppError):
    kind = "NOT_FOUND"

    def __init__(self) -> None:
        super().__init__(3003, "No active executor available for assignment", 404)


# --- 4xxx: Rates ---

class RateNotFoundError(AppError):
    kind = "NOT_FOUND"

    def __init__(self, currency: str) -> None:
        super().__init__(4001, f"No reference rate configured for {currency}", 404)


# --- 9xxx: System ---

class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)
