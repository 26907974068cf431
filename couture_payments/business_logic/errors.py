# couture_payments/business_logic/errors.py
"""Named failures raised by the order and payment managers.

They all derive from ``ValueError``: each one describes bad input from the
operator rather than a transient fault, so none of them is retried.
"""


class PaymentError(ValueError):
    pass

class InvalidAmountError(PaymentError):
    def __init__(self, amount):
        super().__init__(f"Payment amount must be greater than zero (got {amount}).")
        self.amount = amount

class AlreadyPaidError(PaymentError):
    def __init__(self, installment_id):
        super().__init__(f"Installment {installment_id} has already been paid.")
        self.installment_id = installment_id

class AmountExceedsInstallmentError(PaymentError):
    def __init__(self, installment_id, amount, due_amount):
        super().__init__(
            f"Payment of {amount} exceeds the {due_amount} due on installment {installment_id}."
        )
        self.installment_id = installment_id
        self.amount = amount
        self.due_amount = due_amount

class InstallmentNotFoundError(PaymentError):
    def __init__(self, installment_id, order_id=None):
        where = f" in order {order_id}" if order_id is not None else ""
        super().__init__(f"Installment {installment_id} not found{where}.")
        self.installment_id = installment_id
        self.order_id = order_id

class OrderNotFoundError(PaymentError):
    def __init__(self, order_id):
        super().__init__(f"Order {order_id} not found.")
        self.order_id = order_id

class OrderFullyPaidError(PaymentError):
    def __init__(self, order_id):
        super().__init__(f"Order {order_id} has no unpaid installments.")
        self.order_id = order_id

class InvalidOrderError(ValueError):
    pass
