# couture_payments/business_logic/entities/installment_entity.py
from dataclasses import dataclass, field
from typing import Optional
from datetime import date
from decimal import Decimal
from .base_entity import BaseEntity
from couture_payments.constants import InstallmentStatus, PaymentMethod

@dataclass
class InstallmentEntity(BaseEntity):
    """One scheduled payment obligation of an order.

    ``amount`` is what was originally due and never changes after generation;
    ``paid_amount`` may differ from it (partial payments are recorded as-is).
    """
    # "installment-N", unique within the owning order only
    id: Optional[str] = field(default=None, kw_only=True)

    due_date: date
    amount: Decimal
    status: InstallmentStatus = field(default=InstallmentStatus.PENDING)
    order_id: Optional[int] = field(default=None) # Foreign Key to OrderEntity
    position: int = field(default=0)

    paid_date: Optional[date] = field(default=None)
    paid_amount: Optional[Decimal] = field(default=None)
    method: Optional[PaymentMethod] = field(default=None)
    notes: Optional[str] = field(default=None)

    @property
    def is_paid(self) -> bool:
        return self.status == InstallmentStatus.PAID
