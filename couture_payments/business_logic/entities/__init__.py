# couture_payments/business_logic/entities/__init__.py
from .base_entity import BaseEntity
from .installment_entity import InstallmentEntity
from .order_entity import OrderEntity
from .order_form import OrderForm
from .payment_entity import PaymentEntity
from .payment_reports import PaymentReceipt, BalanceReport, DeletionReport, OverdueSummary
__all__ = [
    "BaseEntity", "InstallmentEntity", "OrderEntity", "OrderForm", "PaymentEntity",
    "PaymentReceipt", "BalanceReport", "DeletionReport", "OverdueSummary",
]
