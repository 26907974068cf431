# couture_payments/business_logic/__init__.py
from .order_payment_manager import OrderPaymentManager
from .order_manager import OrderManager
