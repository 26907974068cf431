# couture_payments/business_logic/entities/payment_entity.py
from dataclasses import dataclass, field
from typing import Optional
from datetime import date, datetime
from decimal import Decimal
from .base_entity import BaseEntity
from couture_payments.constants import PaymentMethod

@dataclass
class PaymentEntity(BaseEntity):
    """Journal row for a payment received against an order."""
    order_id: int
    amount: Decimal
    method: PaymentMethod
    paid_date: date
    installment_id: Optional[str] = field(default=None) # NULL once the installment is gone
    notes: Optional[str] = field(default=None)
    created_at: Optional[datetime] = field(default=None)
