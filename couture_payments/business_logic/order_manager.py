# couture_payments/business_logic/order_manager.py

from typing import Optional, List, TYPE_CHECKING
from datetime import date, datetime, timedelta

from couture_payments.business_logic.entities.order_entity import OrderEntity
from couture_payments.business_logic.entities.order_form import OrderForm
from couture_payments.business_logic.entities.payment_entity import PaymentEntity
from couture_payments.business_logic.entities.payment_reports import BalanceReport, DeletionReport
from couture_payments.business_logic.errors import InvalidOrderError, OrderNotFoundError
from couture_payments.business_logic.order_payment_manager import OrderPaymentManager
from couture_payments.business_logic import payment_schedule
from couture_payments.config import UPCOMING_WINDOW_DAYS
from couture_payments.constants import OrderStatus
from couture_payments.utils.money import to_money
import logging

if TYPE_CHECKING: # This block is only for type checkers
    from couture_payments.data_access.orders_repository import OrdersRepository
    from couture_payments.data_access.installments_repository import InstallmentsRepository
    from couture_payments.data_access.payments_repository import PaymentsRepository

logger = logging.getLogger(__name__)

class OrderManager:
    def __init__(self,
                 orders_repository: 'OrdersRepository',
                 installments_repository: 'InstallmentsRepository',
                 payments_repository: 'PaymentsRepository',
                 payment_manager: OrderPaymentManager):

        if orders_repository is None: raise ValueError("orders_repository cannot be None")
        if installments_repository is None: raise ValueError("installments_repository cannot be None")
        if payments_repository is None: raise ValueError("payments_repository cannot be None")
        if payment_manager is None: raise ValueError("payment_manager cannot be None")

        self.orders_repository = orders_repository
        self.installments_repository = installments_repository
        self.payments_repository = payments_repository
        self.payment_manager = payment_manager
        logger.info("OrderManager initialized.")

    def _validate_form(self, form: OrderForm) -> None:
        if not form.client_name or not form.phone_number:
            raise InvalidOrderError("Client name and phone number are required.")
        if not any(item and item.strip() for item in form.items):
            raise InvalidOrderError("At least one item with a description is required.")
        if form.finish_date is None:
            raise InvalidOrderError("A finish date is required.")
        if form.payment_months < 1:
            raise InvalidOrderError("The number of payment months must be at least 1.")

        total = to_money(form.total_amount)
        advance = to_money(form.advance_money)
        if total < 0 or advance < 0:
            raise InvalidOrderError("Total amount and advance cannot be negative.")
        if advance > total:
            raise InvalidOrderError(f"The advance ({advance}) cannot exceed the total amount ({total}).")

    def create_order(self, form: OrderForm, today: date) -> OrderEntity:
        """
        Creates an order and generates its payment schedule, once and for all.
        The advance, if any, is journaled as the first payment.
        """
        logger.info(f"Attempting to create order for client '{form.client_name}'.")
        self._validate_form(form)

        total = to_money(form.total_amount)
        advance = to_money(form.advance_money)
        if total <= 0:
            logger.warning(f"Order for '{form.client_name}' has no total amount; it will carry no installments.")

        # An order starting today is already being worked on
        status = OrderStatus.IN_PROGRESS if form.start_date == today else OrderStatus.PENDING
        now = datetime.now().replace(microsecond=0)

        order = OrderEntity(
            client_name=form.client_name.strip(),
            phone_number=form.phone_number.strip(),
            total_amount=total,
            status=status,
            advance_money=advance,
            payment_months=form.payment_months,
            start_date=form.start_date,
            finish_date=form.finish_date,
            description="\n".join(item.strip() for item in form.items if item and item.strip()),
            category_id=form.category_id,
            created_at=now,
            updated_at=now,
        )
        schedule = payment_schedule.generate_schedule(
            form.start_date, total, advance, form.payment_months, today=today
        )

        created_order = None
        try:
            created_order = self.orders_repository.add(order)
            created_order.invoice_reference = f"INV-{created_order.id:06d}"
            self.orders_repository.update(created_order)
            created_order.payment_schedule = self.installments_repository.save_schedule(created_order.id, schedule)

            for installment in created_order.payment_schedule:
                if installment.is_paid:
                    self.payments_repository.add(PaymentEntity(
                        order_id=created_order.id,
                        installment_id=installment.id,
                        amount=installment.paid_amount,
                        method=installment.method,
                        paid_date=installment.paid_date,
                        notes="Advance collected at order creation",
                        created_at=now,
                    ))
        except Exception as e:
            logger.error(f"Error creating order for client '{form.client_name}': {e}", exc_info=True)
            if created_order and created_order.id:
                self.orders_repository.delete(created_order.id) # installments and payments cascade
                logger.info(f"Rolled back creation of order ID {created_order.id}.")
            raise

        logger.info(f"Order ID {created_order.id} created with {len(schedule)} installment(s), "
                    f"total {total}, advance {advance}, status {status.value}.")
        return created_order

    def get_order(self, order_id: int, today: date) -> OrderEntity:
        return self.payment_manager.get_order(order_id, today)

    def get_orders_by_status(self, status: OrderStatus) -> List[OrderEntity]:
        return self.orders_repository.get_by_status(status)

    def get_upcoming_orders(self, today: date, days: Optional[int] = None) -> List[OrderEntity]:
        """Pending orders whose start date falls within the next few days."""
        window = UPCOMING_WINDOW_DAYS if days is None else days
        return self.orders_repository.get_starting_between(
            OrderStatus.PENDING, today, today + timedelta(days=window)
        )

    def _set_status(self, order: OrderEntity, status: OrderStatus) -> OrderEntity:
        order.status = status
        order.updated_at = datetime.now().replace(microsecond=0)
        self.orders_repository.update(order)
        logger.info(f"Order ID {order.id} status set to {status.value}.")
        return order

    def start_processing(self, order_id: int, today: date) -> OrderEntity:
        order = self.get_order(order_id, today)
        if order.status != OrderStatus.PENDING:
            raise InvalidOrderError(f"Only pending orders can be started (order {order_id} is {order.status.value}).")
        return self._set_status(order, OrderStatus.IN_PROGRESS)

    def mark_delivered(self, order_id: int, today: date) -> BalanceReport:
        """
        Marks the order delivered by hand, whatever its balance. The returned
        report carries the outstanding amount so the caller can flag it.
        """
        order = self.get_order(order_id, today)
        paid = self.payment_manager.order_total_paid(order)
        report = BalanceReport(
            order=order,
            total_paid=paid,
            remaining_balance=to_money(order.total_amount - paid),
            unpaid_installments=len(payment_schedule.unpaid_installments(order.payment_schedule)),
        )
        if report.remaining_balance > 0:
            logger.warning(f"Order ID {order_id} delivered with {report.remaining_balance} still unpaid "
                           f"({report.unpaid_installments} installment(s)).")
        if order.status != OrderStatus.DELIVERED:
            order.actual_delivery_date = today
            self._set_status(order, OrderStatus.DELIVERED)
        return report

    def delete_order(self, order_id: int) -> DeletionReport:
        report = self.payment_manager.inspect_deletion(order_id)
        if report.has_paid_installments:
            logger.warning(f"Deleting order ID {order_id} with {report.total_paid} in recorded payments.")
        report.deleted = self.orders_repository.delete(order_id)
        if not report.deleted:
            raise OrderNotFoundError(order_id)
        logger.info(f"Order ID {order_id} and its installments deleted.")
        return report
