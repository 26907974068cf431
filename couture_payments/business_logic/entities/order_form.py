# couture_payments/business_logic/entities/order_form.py
from dataclasses import dataclass, field
from typing import Optional, List
from datetime import date
from decimal import Decimal

@dataclass
class OrderForm:
    """Input collected by the admin panel when a custom order is created."""
    client_name: str
    phone_number: str
    total_amount: Decimal
    items: List[str] = field(default_factory=list)
    advance_money: Decimal = field(default=Decimal("0.00"))
    payment_months: int = field(default=1)
    start_date: Optional[date] = field(default=None)
    finish_date: Optional[date] = field(default=None)
    category_id: Optional[str] = field(default=None)
