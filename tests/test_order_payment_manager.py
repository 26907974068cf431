import pytest
import sqlite3
from datetime import date
from decimal import Decimal
from unittest.mock import MagicMock

from couture_payments.business_logic.order_payment_manager import OrderPaymentManager
from couture_payments.business_logic.entities.order_entity import OrderEntity
from couture_payments.business_logic import payment_schedule as ps
from couture_payments.business_logic.errors import (
    PaymentError, InvalidAmountError, AlreadyPaidError, AmountExceedsInstallmentError,
    InstallmentNotFoundError, OrderNotFoundError, OrderFullyPaidError,
)
from couture_payments.constants import InstallmentStatus, OrderStatus, PaymentMethod


class TestRecordOrderPayment:
    # ------------------------------------------------------------------
    # SUCCESS
    # ------------------------------------------------------------------
    def test_defaults_to_earliest_unpaid_installment(self, payment_manager, advance_order, today):
        receipt = payment_manager.record_order_payment(
            advance_order.id, Decimal("1000"), PaymentMethod.CARD, today, today
        )

        assert receipt.installment.id == "installment-2"
        assert receipt.installment.status == InstallmentStatus.PAID
        assert receipt.installment.method == PaymentMethod.CARD
        assert receipt.amount_paid == Decimal("1000")
        assert receipt.total_paid == Decimal("2000")
        assert receipt.remaining_balance == Decimal("3000")
        assert receipt.remaining_installments == 3
        assert receipt.auto_delivered is False
        assert receipt.warnings == []

    def test_payment_is_persisted_and_journaled(self, app, payment_manager, advance_order, today):
        payment_manager.record_order_payment(
            advance_order.id, 1000, PaymentMethod.CHECK, today, today,
            installment_id="installment-4", notes="chèque n°118",
        )

        reloaded = payment_manager.get_order(advance_order.id, today)
        inst = ps.find_installment(reloaded.payment_schedule, "installment-4")
        assert inst.status == InstallmentStatus.PAID
        assert inst.notes == "chèque n°118"
        assert len(reloaded.payment_schedule) == 5

        journal = app.payment_manager.payments_repository.get_by_order_id(advance_order.id)
        assert [p.installment_id for p in journal] == ["installment-1", "installment-4"]
        assert journal[1].amount == Decimal("1000")
        assert journal[1].method == PaymentMethod.CHECK

    def test_auto_delivers_after_last_payment_only(self, payment_manager, two_part_order, today):
        first = payment_manager.record_order_payment(
            two_part_order.id, 500, PaymentMethod.CASH, today, today, installment_id="installment-1"
        )
        assert first.auto_delivered is False
        assert payment_manager.get_order(two_part_order.id, today).status == OrderStatus.PENDING

        second = payment_manager.record_order_payment(
            two_part_order.id, 500, PaymentMethod.CASH, today, today, installment_id="installment-2"
        )
        assert second.auto_delivered is True
        assert second.order.status == OrderStatus.DELIVERED
        assert second.remaining_installments == 0
        assert payment_manager.get_order(two_part_order.id, today).status == OrderStatus.DELIVERED

    def test_underpaid_schedule_still_delivers_once_every_installment_is_settled(
            self, payment_manager, two_part_order, today):
        payment_manager.record_order_payment(two_part_order.id, 500, PaymentMethod.CASH, today, today)
        receipt = payment_manager.record_order_payment(two_part_order.id, 200, PaymentMethod.CASH, today, today)

        assert receipt.total_paid == Decimal("700")
        assert receipt.remaining_balance == Decimal("300")
        assert receipt.auto_delivered is True

    def test_warns_about_partial_and_future_payments(self, payment_manager, two_part_order, today):
        receipt = payment_manager.record_order_payment(
            two_part_order.id, 350, PaymentMethod.MOBILE, date(2024, 4, 1), today
        )

        assert len(receipt.warnings) == 2
        assert "future" in receipt.warnings[0]
        assert "Partial payment" in receipt.warnings[1]
        assert "150.00" in receipt.warnings[1]

    # ------------------------------------------------------------------
    # REJECTIONS
    # ------------------------------------------------------------------
    @pytest.mark.parametrize("amount", [0, -10, "0.00"])
    def test_rejects_non_positive_amount(self, payment_manager, two_part_order, today, amount):
        with pytest.raises(InvalidAmountError):
            payment_manager.record_order_payment(two_part_order.id, amount, PaymentMethod.CASH, today, today)

    def test_rejects_second_payment_on_paid_installment(self, payment_manager, two_part_order, today):
        payment_manager.record_order_payment(
            two_part_order.id, 500, PaymentMethod.CASH, today, today, installment_id="installment-1"
        )
        with pytest.raises(AlreadyPaidError):
            payment_manager.record_order_payment(
                two_part_order.id, 500, PaymentMethod.CASH, today, today, installment_id="installment-1"
            )

    def test_rejects_overpayment(self, payment_manager, two_part_order, today):
        with pytest.raises(AmountExceedsInstallmentError) as exc_info:
            payment_manager.record_order_payment(
                two_part_order.id, 600, PaymentMethod.CASH, today, today, installment_id="installment-2"
            )
        assert exc_info.value.due_amount == Decimal("500")

        untouched = payment_manager.get_order(two_part_order.id, today)
        assert ps.total_paid(untouched.payment_schedule) == Decimal("0")

    def test_amount_is_checked_before_paid_status(self, payment_manager, advance_order, today):
        with pytest.raises(InvalidAmountError):
            payment_manager.record_order_payment(
                advance_order.id, 0, PaymentMethod.CASH, today, today, installment_id="installment-1"
            )

    def test_unknown_installment(self, payment_manager, two_part_order, today):
        with pytest.raises(InstallmentNotFoundError):
            payment_manager.record_order_payment(
                two_part_order.id, 100, PaymentMethod.CASH, today, today, installment_id="installment-7"
            )

    def test_unknown_order(self, payment_manager, today):
        with pytest.raises(OrderNotFoundError):
            payment_manager.record_order_payment(999, 100, PaymentMethod.CASH, today, today)

    def test_fully_paid_order(self, payment_manager, two_part_order, today):
        payment_manager.record_order_payment(two_part_order.id, 500, PaymentMethod.CASH, today, today)
        payment_manager.record_order_payment(two_part_order.id, 500, PaymentMethod.CASH, today, today)

        with pytest.raises(OrderFullyPaidError):
            payment_manager.record_order_payment(two_part_order.id, 500, PaymentMethod.CASH, today, today)

    def test_failures_are_value_errors(self):
        for error_cls in (InvalidAmountError, AlreadyPaidError, InstallmentNotFoundError, OrderNotFoundError):
            assert issubclass(error_cls, PaymentError)
            assert issubclass(error_cls, ValueError)


class TestStatusAndQueries:
    def test_get_order_refreshes_overdue_flags(self, payment_manager, advance_order, today):
        order = payment_manager.get_order(advance_order.id, today)

        assert [i.status for i in order.payment_schedule] == [
            InstallmentStatus.PAID, InstallmentStatus.OVERDUE, InstallmentStatus.OVERDUE,
            InstallmentStatus.PENDING, InstallmentStatus.PENDING,
        ]

    def test_next_due_and_overdue(self, payment_manager, advance_order, today):
        assert payment_manager.get_next_due(advance_order.id, today).id == "installment-2"
        overdue = payment_manager.get_overdue_installments(advance_order.id, today)
        assert [i.id for i in overdue] == ["installment-2", "installment-3"]

    def test_select_installment(self, payment_manager, advance_order, today):
        order_id = advance_order.id

        assert payment_manager.select_installment(order_id, today).id == "installment-2"
        assert payment_manager.select_installment(order_id, today, "installment-5").id == "installment-5"
        with pytest.raises(AlreadyPaidError):
            payment_manager.select_installment(order_id, today, "installment-1")
        with pytest.raises(InstallmentNotFoundError):
            payment_manager.select_installment(order_id, today, "installment-6")
        with pytest.raises(OrderNotFoundError):
            payment_manager.select_installment(999, today)

    def test_select_installment_refreshes_for_today(self, payment_manager, advance_order):
        early = payment_manager.select_installment(advance_order.id, date(2024, 1, 15))
        late = payment_manager.select_installment(advance_order.id, date(2024, 2, 15))

        assert early.status == InstallmentStatus.PENDING
        assert late.status == InstallmentStatus.OVERDUE

    def test_select_installment_on_fully_paid_order(self, payment_manager, two_part_order, today):
        payment_manager.record_order_payment(two_part_order.id, 500, PaymentMethod.CASH, today, today)
        payment_manager.record_order_payment(two_part_order.id, 500, PaymentMethod.CASH, today, today)

        with pytest.raises(OrderFullyPaidError):
            payment_manager.select_installment(two_part_order.id, today)

    def test_derive_status_never_leaves_delivered(self, payment_manager, advance_order, today):
        order = payment_manager.get_order(advance_order.id, today)
        order.status = OrderStatus.DELIVERED

        assert payment_manager.derive_order_status(order, order.payment_schedule) == OrderStatus.DELIVERED

    def test_derive_status_without_schedule_keeps_status(self, payment_manager):
        order = OrderEntity(client_name="x", phone_number="y", total_amount=Decimal("0"),
                            status=OrderStatus.IN_PROGRESS)
        assert payment_manager.derive_order_status(order, []) == OrderStatus.IN_PROGRESS

    def test_overdue_summaries(self, payment_manager, advance_order, two_part_order, today):
        payment_manager.record_order_payment(two_part_order.id, 500, PaymentMethod.CASH, today, today)
        payment_manager.record_order_payment(two_part_order.id, 500, PaymentMethod.CASH, today, today)

        summaries = payment_manager.get_overdue_summaries(today)

        assert len(summaries) == 1
        summary = summaries[0]
        assert summary.order.id == advance_order.id
        assert summary.total_overdue == Decimal("2000")
        assert summary.oldest_overdue.id == "installment-2"
        assert summary.days_late == 43

    def test_unpaid_orders(self, payment_manager, advance_order, two_part_order, today):
        payment_manager.record_order_payment(two_part_order.id, 500, PaymentMethod.CASH, today, today)
        payment_manager.record_order_payment(two_part_order.id, 500, PaymentMethod.CASH, today, today)

        unpaid = payment_manager.get_unpaid_orders(today)

        assert [o.id for o in unpaid] == [advance_order.id]

    def test_inspect_deletion_reports_payments(self, payment_manager, advance_order, two_part_order):
        with_advance = payment_manager.inspect_deletion(advance_order.id)
        assert with_advance.has_paid_installments is True
        assert with_advance.total_paid == Decimal("1000")
        assert with_advance.deleted is False

        untouched = payment_manager.inspect_deletion(two_part_order.id)
        assert untouched.has_paid_installments is False
        assert untouched.total_paid == Decimal("0")


class TestAtomicRecording:
    """A payment is stored whole or not at all."""

    @staticmethod
    def _broken_statement(*args, **kwargs):
        return "INSERT INTO no_such_table (x) VALUES (?)", (1,)

    def test_failed_journal_write_leaves_schedule_untouched(
            self, monkeypatch, payment_manager, advance_order, today):
        monkeypatch.setattr(payment_manager.payments_repository, "insert_statement", self._broken_statement)

        with pytest.raises(sqlite3.OperationalError):
            payment_manager.record_order_payment(advance_order.id, 1000, PaymentMethod.CASH, today, today)

        order = payment_manager.get_order(advance_order.id, today)
        assert ps.find_installment(order.payment_schedule, "installment-2").status == InstallmentStatus.OVERDUE
        assert ps.total_paid(order.payment_schedule) == Decimal("1000")
        assert len(payment_manager.payments_repository.get_by_order_id(advance_order.id)) == 1

    def test_failed_delivery_write_can_be_retried(self, monkeypatch, payment_manager, two_part_order, today):
        payment_manager.record_order_payment(two_part_order.id, 500, PaymentMethod.CASH, today, today)
        monkeypatch.setattr(payment_manager.orders_repository, "update_statement", self._broken_statement)

        with pytest.raises(sqlite3.OperationalError):
            payment_manager.record_order_payment(two_part_order.id, 500, PaymentMethod.CASH, today, today)

        order = payment_manager.get_order(two_part_order.id, today)
        assert [i.status for i in order.payment_schedule] == [InstallmentStatus.PAID, InstallmentStatus.OVERDUE]
        assert order.status == OrderStatus.PENDING
        assert len(payment_manager.payments_repository.get_by_order_id(two_part_order.id)) == 1

        monkeypatch.undo()
        receipt = payment_manager.record_order_payment(two_part_order.id, 500, PaymentMethod.CASH, today, today)

        assert receipt.auto_delivered is True
        assert payment_manager.get_order(two_part_order.id, today).status == OrderStatus.DELIVERED

    def test_auto_delivery_sets_delivery_date(self, payment_manager, two_part_order, today):
        payment_manager.record_order_payment(two_part_order.id, 500, PaymentMethod.CASH, today, today)
        receipt = payment_manager.record_order_payment(two_part_order.id, 500, PaymentMethod.CASH, today, today)

        assert receipt.order.actual_delivery_date == today
        assert payment_manager.get_order(two_part_order.id, today).actual_delivery_date == today

    def test_method_given_as_text(self, payment_manager, two_part_order, today):
        receipt = payment_manager.record_order_payment(two_part_order.id, 500, "cash", today, today)

        assert receipt.installment.method is PaymentMethod.CASH
        journal = payment_manager.payments_repository.get_by_order_id(two_part_order.id)
        assert journal[0].method is PaymentMethod.CASH

    def test_unknown_method_is_rejected_before_writing(self, payment_manager, two_part_order, today):
        with pytest.raises(ValueError):
            payment_manager.record_order_payment(two_part_order.id, 500, "bitcoin", today, today)

        assert payment_manager.payments_repository.get_by_order_id(two_part_order.id) == []


class TestWithMockedRepositories:
    @pytest.fixture
    def repos(self):
        schedule = ps.generate_schedule(date(2024, 1, 1), Decimal("1000"), Decimal("500"), 2)
        order = OrderEntity(id=7, client_name="Nadia", phone_number="0600000000",
                            total_amount=Decimal("1000"), status=OrderStatus.IN_PROGRESS,
                            advance_money=Decimal("500"), payment_months=2)
        orders = MagicMock()
        orders.get_by_id.return_value = order
        orders.update_statement.return_value = ("UPDATE custom_orders", ())
        installments = MagicMock()
        installments.get_by_order_id.return_value = schedule
        installments.schedule_statements.side_effect = lambda order_id, s: (
            [("INSERT OR REPLACE INTO custom_order_installments", ())] * len(s), list(s)
        )
        payments = MagicMock()
        payments.insert_statement.return_value = ("INSERT INTO custom_order_payments", ())
        return orders, installments, payments

    def test_requires_collaborators(self, repos):
        orders, installments, payments = repos
        with pytest.raises(ValueError):
            OrderPaymentManager(None, installments, payments)

    def test_writes_schedule_journal_and_order_together(self, repos):
        orders, installments, payments = repos
        manager = OrderPaymentManager(orders, installments, payments)

        receipt = manager.record_order_payment(7, 500, PaymentMethod.TRANSFER,
                                               date(2024, 2, 1), date(2024, 2, 1))

        order_id, saved = installments.schedule_statements.call_args[0]
        assert order_id == 7
        assert [i.status for i in saved] == [InstallmentStatus.PAID, InstallmentStatus.PAID]
        assert payments.insert_statement.call_args[0][0].method is PaymentMethod.TRANSFER
        delivered = orders.update_statement.call_args[0][0]
        assert delivered.status == OrderStatus.DELIVERED
        assert delivered.actual_delivery_date == date(2024, 2, 1)

        installments.db_manager.execute_many.assert_called_once()
        statements = installments.db_manager.execute_many.call_args[0][0]
        assert len(statements) == 4
        orders.update.assert_not_called()
        payments.add.assert_not_called()
        assert receipt.auto_delivered is True

    def test_persistence_failure_propagates(self, repos):
        orders, installments, payments = repos
        installments.db_manager.execute_many.side_effect = RuntimeError("disk full")
        manager = OrderPaymentManager(orders, installments, payments)

        with pytest.raises(RuntimeError):
            manager.record_order_payment(7, 500, PaymentMethod.CASH, date(2024, 2, 1), date(2024, 2, 1))
        installments.db_manager.execute_many.assert_called_once()
