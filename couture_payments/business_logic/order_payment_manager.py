# couture_payments/business_logic/order_payment_manager.py

from typing import Optional, List, TYPE_CHECKING
from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal

from couture_payments.business_logic.entities.order_entity import OrderEntity
from couture_payments.business_logic.entities.installment_entity import InstallmentEntity
from couture_payments.business_logic.entities.payment_entity import PaymentEntity
from couture_payments.business_logic.entities.payment_reports import (
    PaymentReceipt, DeletionReport, OverdueSummary
)
from couture_payments.business_logic.errors import (
    InvalidAmountError, AlreadyPaidError, AmountExceedsInstallmentError,
    InstallmentNotFoundError, OrderNotFoundError, OrderFullyPaidError
)
from couture_payments.business_logic import payment_schedule
from couture_payments.constants import OrderStatus, PaymentMethod
from couture_payments.utils.money import MoneyInput, to_money, sum_money
import logging

if TYPE_CHECKING: # This block is only for type checkers
    from couture_payments.data_access.orders_repository import OrdersRepository
    from couture_payments.data_access.installments_repository import InstallmentsRepository
    from couture_payments.data_access.payments_repository import PaymentsRepository

logger = logging.getLogger(__name__)

class OrderPaymentManager:
    """
    Applies payments to an order's installment plan and keeps the order
    status consistent with what has been paid.

    The manager does not serialize concurrent calls: the caller must make sure
    only one payment per order is being recorded at a time.
    """

    def __init__(self,
                 orders_repository: 'OrdersRepository',
                 installments_repository: 'InstallmentsRepository',
                 payments_repository: 'PaymentsRepository'):

        if orders_repository is None: raise ValueError("orders_repository cannot be None")
        if installments_repository is None: raise ValueError("installments_repository cannot be None")
        if payments_repository is None: raise ValueError("payments_repository cannot be None")

        self.orders_repository = orders_repository
        self.installments_repository = installments_repository
        self.payments_repository = payments_repository
        logger.info("OrderPaymentManager initialized.")

    # --- Loading ---

    def get_order(self, order_id: int, today: date) -> OrderEntity:
        """Loads an order with its schedule attached and overdue flags refreshed for today."""
        order = self.orders_repository.get_by_id(order_id)
        if order is None:
            logger.warning(f"Order ID {order_id} not found.")
            raise OrderNotFoundError(order_id)
        schedule = self.installments_repository.get_by_order_id(order_id)
        order.payment_schedule = payment_schedule.refresh_statuses(schedule, today)
        return order

    # --- Validation ---

    def validate_payment(self, installment: InstallmentEntity, amount: MoneyInput) -> Decimal:
        """Raises the matching PaymentError if the amount cannot be applied; returns it as money."""
        amount = to_money(amount)
        if amount <= 0:
            logger.warning(f"Rejected payment of {amount} on installment {installment.id}: not positive.")
            raise InvalidAmountError(amount)
        if installment.is_paid:
            logger.warning(f"Rejected payment on installment {installment.id}: already paid on {installment.paid_date}.")
            raise AlreadyPaidError(installment.id)
        if amount > installment.amount:
            logger.warning(f"Rejected payment of {amount} on installment {installment.id}: only {installment.amount} due.")
            raise AmountExceedsInstallmentError(installment.id, amount, installment.amount)
        return amount

    def payment_warnings(self, installment: InstallmentEntity, amount: Decimal,
                         paid_date: date, today: date) -> List[str]:
        """Non-blocking remarks the operator should see alongside the receipt."""
        warnings = []
        if paid_date > today:
            warnings.append(f"Payment date {paid_date.isoformat()} is in the future.")
        if amount < installment.amount:
            shortfall = to_money(installment.amount - amount)
            warnings.append(
                f"Partial payment: {amount} of {installment.amount} received, {shortfall} short on {installment.id}."
            )
        return warnings

    # --- Installment selection ---

    def select_installment(self, order_id: int, today: date,
                           installment_id: Optional[str] = None) -> InstallmentEntity:
        """
        Picks the installment a payment goes to: the one asked for, or the
        earliest unpaid one when none is given.
        """
        order = self.get_order(order_id, today)
        installment = self._resolve_target(order, installment_id)
        if installment.is_paid:
            raise AlreadyPaidError(installment.id)
        return installment

    def _resolve_target(self, order: OrderEntity, installment_id: Optional[str]) -> InstallmentEntity:
        schedule = order.payment_schedule
        if installment_id is None:
            earliest = payment_schedule.next_due(schedule)
            if earliest is None:
                raise OrderFullyPaidError(order.id)
            return earliest

        installment = payment_schedule.find_installment(schedule, installment_id)
        if installment is None:
            raise InstallmentNotFoundError(installment_id, order.id)
        return installment

    def get_next_due(self, order_id: int, today: date) -> Optional[InstallmentEntity]:
        return payment_schedule.next_due(self.get_order(order_id, today).payment_schedule)

    def get_overdue_installments(self, order_id: int, today: date) -> List[InstallmentEntity]:
        return payment_schedule.overdue_list(self.get_order(order_id, today).payment_schedule)

    # --- Status derivation ---

    def derive_order_status(self, order: OrderEntity, schedule: List[InstallmentEntity]) -> OrderStatus:
        """DELIVERED once the contract is paid in full or every installment is settled; never reverts."""
        if order.status == OrderStatus.DELIVERED:
            return order.status
        paid = payment_schedule.total_paid(schedule)
        fully_paid = order.total_amount > 0 and paid >= order.total_amount
        if fully_paid or payment_schedule.is_fully_paid(schedule):
            return OrderStatus.DELIVERED
        return order.status

    # --- Recording ---

    def record_order_payment(self,
                             order_id: int,
                             amount: MoneyInput,
                             method: PaymentMethod,
                             paid_date: date,
                             today: date,
                             installment_id: Optional[str] = None,
                             notes: Optional[str] = None) -> PaymentReceipt:
        """
        Validates and records a payment, then writes the whole schedule, the
        journal row and, once the order is fully paid, its delivered status in
        a single transaction.
        """
        method = PaymentMethod(method)
        order = self.get_order(order_id, today)
        installment = self._resolve_target(order, installment_id)
        amount = self.validate_payment(installment, amount)
        warnings = self.payment_warnings(installment, amount, paid_date, today)
        for warning in warnings:
            logger.warning(f"Order ID {order_id}: {warning}")

        notes = notes or None
        updated_schedule = payment_schedule.record_payment(
            order.payment_schedule, installment.id, amount, method, paid_date, notes
        )
        now = datetime.now().replace(microsecond=0)

        statements, saved_schedule = self.installments_repository.schedule_statements(order_id, updated_schedule)
        statements.append(self.payments_repository.insert_statement(PaymentEntity(
            order_id=order_id,
            installment_id=installment.id,
            amount=amount,
            method=method,
            paid_date=paid_date,
            notes=notes,
            created_at=now,
        )))

        new_status = self.derive_order_status(order, saved_schedule)
        auto_delivered = new_status != order.status
        order = replace(order, payment_schedule=saved_schedule)
        if auto_delivered:
            order = replace(order, status=new_status, actual_delivery_date=today, updated_at=now)
            statements.append(self.orders_repository.update_statement(order))

        try:
            self.installments_repository.db_manager.execute_many(statements)
        except Exception as e:
            logger.error(f"Error recording payment of {amount} on order ID {order_id}, installment {installment.id}: {e}", exc_info=True)
            raise

        logger.info(f"Payment of {amount} ({method.value}) recorded on order ID {order_id}, installment {installment.id}.")
        if auto_delivered:
            logger.info(f"Order ID {order_id} fully paid; status changed to {new_status.value}.")

        paid = payment_schedule.total_paid(saved_schedule)
        return PaymentReceipt(
            order=order,
            installment=payment_schedule.find_installment(saved_schedule, installment.id),
            amount_paid=amount,
            total_paid=paid,
            remaining_balance=to_money(order.total_amount - paid),
            remaining_installments=len(payment_schedule.unpaid_installments(saved_schedule)),
            auto_delivered=auto_delivered,
            warnings=warnings,
        )

    # --- Reporting ---

    def inspect_deletion(self, order_id: int) -> DeletionReport:
        """Tells the caller whether payments were recorded on the order; never blocks deletion."""
        if self.orders_repository.get_by_id(order_id) is None:
            raise OrderNotFoundError(order_id)
        schedule = self.installments_repository.get_by_order_id(order_id)
        return DeletionReport(
            order_id=order_id,
            has_paid_installments=payment_schedule.has_paid_installments(schedule),
            total_paid=payment_schedule.total_paid(schedule),
        )

    def get_overdue_summaries(self, today: date) -> List[OverdueSummary]:
        summaries = []
        for order in self.orders_repository.get_all(order_by="id ASC"):
            schedule = payment_schedule.refresh_statuses(
                self.installments_repository.get_by_order_id(order.id), today
            )
            overdue = payment_schedule.overdue_list(schedule)
            if not overdue:
                continue
            order.payment_schedule = schedule
            oldest = overdue[0]
            summaries.append(OverdueSummary(
                order=order,
                overdue_installments=overdue,
                total_overdue=sum_money(inst.amount for inst in overdue),
                oldest_overdue=oldest,
                days_late=payment_schedule.days_overdue(oldest.due_date, today),
            ))
        logger.debug(f"{len(summaries)} order(s) with overdue installments as of {today}.")
        return summaries

    def order_total_paid(self, order: OrderEntity) -> Decimal:
        """Paid so far; an order without a schedule counts its advance as paid."""
        if order.payment_schedule:
            return payment_schedule.total_paid(order.payment_schedule)
        return to_money(order.advance_money)

    def get_unpaid_orders(self, today: date) -> List[OrderEntity]:
        unpaid = []
        for order in self.orders_repository.get_all(order_by="created_at DESC, id DESC"):
            order.payment_schedule = payment_schedule.refresh_statuses(
                self.installments_repository.get_by_order_id(order.id), today
            )
            if self.order_total_paid(order) < order.total_amount:
                unpaid.append(order)
        return unpaid
