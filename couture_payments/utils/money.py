# couture_payments/utils/money.py

from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Iterable, Union

from couture_payments.config import MONEY_QUANTUM

MoneyInput = Union[Decimal, int, float, str]

ZERO = Decimal("0.00")


def to_money(value: MoneyInput) -> Decimal:
    """Converts to a Decimal rounded half-up to the currency quantum."""
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, float):
        amount = Decimal(str(value)) # Decimal(0.1) would keep the binary error
    elif isinstance(value, (int, str)) and not isinstance(value, bool):
        try:
            amount = Decimal(value)
        except InvalidOperation as e:
            raise ValueError(f"Invalid money amount: {value!r}") from e
    else:
        raise TypeError(f"Unsupported money type: {type(value).__name__}")
    return amount.quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP)

def sum_money(values: Iterable[MoneyInput]) -> Decimal:
    total = ZERO
    for v in values:
        total += to_money(v)
    return to_money(total)

def split_amount(total: MoneyInput, parts: int) -> Decimal:
    if parts <= 0:
        return to_money(total)
    return to_money(to_money(total) / Decimal(parts))
