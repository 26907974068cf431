# couture_payments/constants.py

from enum import Enum

# General
DATE_FORMAT = "%Y-%m-%d"
INSTALLMENT_ID_PREFIX = "installment-"

class InstallmentStatus(Enum):
    PENDING = "pending"
    OVERDUE = "overdue"
    PAID = "paid"

class OrderStatus(Enum):
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    DELIVERED = "delivered"

class PaymentMethod(Enum):
    CASH = "cash"
    CARD = "card"
    CHECK = "check"
    TRANSFER = "transfer"
    MOBILE = "mobile"

# Method recorded for the advance collected when the order is created
DEFAULT_ADVANCE_METHOD = PaymentMethod.CASH
