"""Commission calculation: shared by currency sales and transfer audits."""

from decimal import Decimal

from src.fx_common.money import ZERO, to_money


def calc_commission(
    local_received: Decimal, foreign_confirmed: Decimal, reference_rate: Decimal
) -> Decimal:
    """max(0, local_received - foreign_confirmed x reference_rate), 2 dp half-up.

    60,000 XAF for 100 USD at 600 -> 0.00; 61,000 XAF -> 1,000.00.
    """
    residual = to_money(local_received - foreign_confirmed * reference_rate)
    return residual if residual > ZERO else ZERO
