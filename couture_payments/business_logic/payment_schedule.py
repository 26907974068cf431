# couture_payments/business_logic/payment_schedule.py
"""
Installment schedule calculations for custom orders.

Every function here is pure: schedules are lists of InstallmentEntity and are
never mutated in place, a changed installment is replaced by a copy. "Today"
is always passed in by the caller so results do not depend on the wall clock.
"""

from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import List, Optional, Sequence

from couture_payments.business_logic.entities.installment_entity import InstallmentEntity
from couture_payments.business_logic.errors import InstallmentNotFoundError
from couture_payments.constants import (
    InstallmentStatus, PaymentMethod, DEFAULT_ADVANCE_METHOD, INSTALLMENT_ID_PREFIX
)
from couture_payments.utils.date_utils import add_months, days_between
from couture_payments.utils.money import MoneyInput, to_money, sum_money, split_amount
import logging

logger = logging.getLogger(__name__)


def installment_id_for(sequence: int) -> str:
    return f"{INSTALLMENT_ID_PREFIX}{sequence}"

def generate_schedule(start_date: Optional[date],
                      total_amount: MoneyInput,
                      advance_money: MoneyInput,
                      payment_months: int,
                      today: Optional[date] = None) -> List[InstallmentEntity]:
    """
    Builds the installment plan of an order.

    The advance is the first payment and is carved out of total_amount:
    remaining = total - advance is spread evenly over the other
    payment_months - 1 months, or over all payment_months when there is no
    advance. The advance installment is born PAID since it is collected when the
    order is created. Later installments fall one calendar month apart,
    starting a month after the base date when there is an advance and on the
    base date itself otherwise.

    A contract with no value or no months has no obligations: an empty list
    is returned rather than an error.
    """
    schedule: List[InstallmentEntity] = []
    total = to_money(total_amount)
    advance = to_money(advance_money)

    if total <= 0 or payment_months <= 0:
        logger.debug(f"No schedule generated (total={total}, months={payment_months}).")
        return schedule

    remaining = total - advance
    base_date = start_date if start_date is not None else (today if today is not None else date.today())
    has_advance = advance > 0

    monthly_count = payment_months - 1 if has_advance else payment_months
    # Spread over the installments actually emitted so the plan sums to the total
    monthly_amount = split_amount(remaining, monthly_count) if monthly_count > 1 else remaining

    if has_advance:
        schedule.append(InstallmentEntity(
            id=installment_id_for(1),
            due_date=base_date,
            amount=advance,
            status=InstallmentStatus.PAID,
            position=0,
            paid_date=base_date,
            paid_amount=advance,
            method=DEFAULT_ADVANCE_METHOD,
        ))

    first_offset = 1 if has_advance else 0

    for i in range(monthly_count):
        position = len(schedule)
        schedule.append(InstallmentEntity(
            id=installment_id_for(position + 1),
            due_date=add_months(base_date, first_offset + i),
            amount=monthly_amount,
            status=InstallmentStatus.PENDING,
            position=position,
        ))

    logger.debug(f"Generated {len(schedule)} installments from {base_date} "
                 f"(total={total}, advance={advance}, monthly={monthly_amount}).")
    return schedule

def refresh_statuses(schedule: Sequence[InstallmentEntity], today: date) -> List[InstallmentEntity]:
    """Derives PENDING/OVERDUE from due dates; PAID installments are left alone."""
    refreshed = []
    for installment in schedule:
        if installment.is_paid:
            refreshed.append(installment)
            continue
        expected = InstallmentStatus.OVERDUE if installment.due_date < today else InstallmentStatus.PENDING
        if installment.status != expected:
            installment = replace(installment, status=expected)
        refreshed.append(installment)
    return refreshed

def record_payment(schedule: Sequence[InstallmentEntity],
                   installment_id: str,
                   amount: MoneyInput,
                   method: PaymentMethod,
                   paid_date: date,
                   notes: Optional[str] = None) -> List[InstallmentEntity]:
    """
    Marks one installment as paid with whatever amount was received.

    Over- and under-payments are recorded verbatim; checking the amount is
    the caller's job (see OrderPaymentManager.validate_payment).
    Raises InstallmentNotFoundError if no installment has that id.
    """
    updated = []
    found = False
    for installment in schedule:
        if installment.id == installment_id:
            installment = replace(
                installment,
                status=InstallmentStatus.PAID,
                paid_date=paid_date,
                paid_amount=to_money(amount),
                method=method,
                notes=notes,
            )
            found = True
        updated.append(installment)

    if not found:
        raise InstallmentNotFoundError(installment_id)
    return updated

# --- Aggregates ---

def total_paid(schedule: Sequence[InstallmentEntity]) -> Decimal:
    return sum_money(
        inst.paid_amount if inst.paid_amount is not None else inst.amount
        for inst in schedule if inst.is_paid
    )

def total_remaining(schedule: Sequence[InstallmentEntity]) -> Decimal:
    # Original due amounts; a partially paid installment counts as settled
    return sum_money(inst.amount for inst in schedule if not inst.is_paid)

def unpaid_installments(schedule: Sequence[InstallmentEntity]) -> List[InstallmentEntity]:
    return [inst for inst in schedule if not inst.is_paid]

def next_due(schedule: Sequence[InstallmentEntity]) -> Optional[InstallmentEntity]:
    """Earliest unpaid installment; on equal due dates the first in schedule order wins."""
    earliest = None
    for inst in schedule:
        if inst.is_paid:
            continue
        if earliest is None or inst.due_date < earliest.due_date:
            earliest = inst
    return earliest

def overdue_list(schedule: Sequence[InstallmentEntity]) -> List[InstallmentEntity]:
    return [inst for inst in schedule if inst.status == InstallmentStatus.OVERDUE]

def days_overdue(due_date: date, today: date) -> int:
    return max(0, days_between(due_date, today))

def is_fully_paid(schedule: Sequence[InstallmentEntity]) -> bool:
    return bool(schedule) and all(inst.is_paid for inst in schedule)

def has_paid_installments(schedule: Sequence[InstallmentEntity]) -> bool:
    return any(inst.is_paid for inst in schedule)

def find_installment(schedule: Sequence[InstallmentEntity], installment_id: str) -> Optional[InstallmentEntity]:
    for inst in schedule:
        if inst.id == installment_id:
            return inst
    return None

