# couture_payments/main_app.py
import os
import sys
import logging
import logging.config
from dataclasses import dataclass
from datetime import date
from typing import Optional

# --- Configuration and Constants ---
from couture_payments.config import DATABASE_PATH, LOGGING_CONFIG, LOGS_DIR, DEFAULT_CURRENCY

# --- Data Access Layer (DAL) ---
from couture_payments.data_access.database_manager import DatabaseManager
from couture_payments.data_access.orders_repository import OrdersRepository
from couture_payments.data_access.installments_repository import InstallmentsRepository
from couture_payments.data_access.payments_repository import PaymentsRepository

# --- Business Logic Layer (BLL) ---
from couture_payments.business_logic.order_payment_manager import OrderPaymentManager
from couture_payments.business_logic.order_manager import OrderManager

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    db_manager: DatabaseManager
    order_manager: OrderManager
    payment_manager: OrderPaymentManager


def setup_logging(config: Optional[dict] = None) -> None:
    if not os.path.exists(LOGS_DIR):
        os.makedirs(LOGS_DIR)
    logging.config.dictConfig(config or LOGGING_CONFIG)

def build_managers(db_path: Optional[str] = None) -> AppContext:
    """Wires the database, repositories and managers, creating tables if needed."""
    logger.info("Initializing Database Manager and creating tables...")
    db_manager = DatabaseManager(db_path or DATABASE_PATH)
    db_manager.create_tables()

    orders_repository = OrdersRepository(db_manager)
    installments_repository = InstallmentsRepository(db_manager)
    payments_repository = PaymentsRepository(db_manager)

    payment_manager = OrderPaymentManager(orders_repository, installments_repository, payments_repository)
    order_manager = OrderManager(orders_repository, installments_repository, payments_repository, payment_manager)
    return AppContext(db_manager=db_manager, order_manager=order_manager, payment_manager=payment_manager)

def main(argv=None) -> int:
    """Prints the overdue installments of every order as of today."""
    setup_logging()
    argv = sys.argv[1:] if argv is None else argv
    try:
        context = build_managers(argv[0] if argv else None)
    except Exception as e:
        logger.error(f"FATAL: Could not initialize database: {e}", exc_info=True)
        return 1

    today = date.today()
    summaries = context.payment_manager.get_overdue_summaries(today)
    if not summaries:
        print(f"No overdue payments as of {today.isoformat()}.")
        return 0

    print(f"Overdue payments as of {today.isoformat()} ({len(summaries)} order(s)):")
    for summary in summaries:
        order = summary.order
        print(f"  #{order.id} {order.client_name} ({order.phone_number}): "
              f"{summary.total_overdue} {DEFAULT_CURRENCY} overdue over "
              f"{len(summary.overdue_installments)} installment(s), oldest {summary.days_late} day(s) late")
    return 0

if __name__ == "__main__":
    sys.exit(main())
