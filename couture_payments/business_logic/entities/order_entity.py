# couture_payments/business_logic/entities/order_entity.py
from dataclasses import dataclass, field
from typing import Optional, List
from datetime import date, datetime
from decimal import Decimal
from .base_entity import BaseEntity, NOT_PERSISTED
from .installment_entity import InstallmentEntity
from couture_payments.constants import OrderStatus

@dataclass
class OrderEntity(BaseEntity):
    client_name: str
    phone_number: str
    total_amount: Decimal # Full contract value; the advance is part of it
    status: OrderStatus
    advance_money: Decimal = field(default=Decimal("0.00"))
    payment_months: int = field(default=1)

    start_date: Optional[date] = field(default=None) # Anchors installment due dates
    finish_date: Optional[date] = field(default=None)
    actual_delivery_date: Optional[date] = field(default=None)
    description: Optional[str] = field(default=None) # Ordered items, one per line
    category_id: Optional[str] = field(default=None)
    invoice_reference: Optional[str] = field(default=None)
    created_at: Optional[datetime] = field(default=None)
    updated_at: Optional[datetime] = field(default=None)

    payment_schedule: List[InstallmentEntity] = field(default_factory=list, metadata=NOT_PERSISTED) # Populated by the managers
