import pytest
from datetime import date
from decimal import Decimal

from couture_payments.main_app import build_managers
from couture_payments.business_logic.entities.order_form import OrderForm


TODAY = date(2024, 3, 15)


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def app(tmp_path):
    """Managers wired to a fresh SQLite file."""
    return build_managers(str(tmp_path / "couture.db"))


@pytest.fixture
def order_manager(app):
    return app.order_manager


@pytest.fixture
def payment_manager(app):
    return app.payment_manager


@pytest.fixture
def make_form():
    def _make_form(**overrides):
        data = dict(
            client_name="Salma Bennani",
            phone_number="0612345678",
            total_amount=Decimal("5000"),
            items=["Caftan brodé, taille 40"],
            advance_money=Decimal("1000"),
            payment_months=5,
            start_date=date(2024, 1, 1),
            finish_date=date(2024, 6, 1),
        )
        data.update(overrides)
        return OrderForm(**data)
    return _make_form


@pytest.fixture
def advance_order(order_manager, make_form, today):
    """5000 contract, 1000 advance, 5 months from 2024-01-01."""
    return order_manager.create_order(make_form(), today)


@pytest.fixture
def two_part_order(order_manager, make_form, today):
    """1000 contract split in two installments of 500."""
    return order_manager.create_order(
        make_form(total_amount=Decimal("1000"), advance_money=Decimal("0"), payment_months=2),
        today,
    )
