# couture_payments/business_logic/entities/payment_reports.py
from dataclasses import dataclass, field
from typing import Optional, List
from decimal import Decimal
from .order_entity import OrderEntity
from .installment_entity import InstallmentEntity

@dataclass
class PaymentReceipt:
    order: OrderEntity
    installment: InstallmentEntity # As recorded, status PAID
    amount_paid: Decimal
    total_paid: Decimal
    remaining_balance: Decimal # total_amount - total_paid, may be negative
    remaining_installments: int
    auto_delivered: bool = False
    warnings: List[str] = field(default_factory=list)

@dataclass
class BalanceReport:
    order: OrderEntity
    total_paid: Decimal
    remaining_balance: Decimal
    unpaid_installments: int

    @property
    def fully_paid(self) -> bool:
        return self.remaining_balance <= 0

@dataclass
class DeletionReport:
    order_id: int
    has_paid_installments: bool
    total_paid: Decimal
    deleted: bool = False

@dataclass
class OverdueSummary:
    order: OrderEntity
    overdue_installments: List[InstallmentEntity]
    total_overdue: Decimal
    oldest_overdue: Optional[InstallmentEntity]
    days_late: int
