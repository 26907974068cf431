# couture_payments/data_access/database_manager.py

import os
import sqlite3
import logging
from couture_payments.config import DATABASE_PATH
from couture_payments.constants import InstallmentStatus, OrderStatus, PaymentMethod

logger = logging.getLogger(__name__)


def _enum_values(enum_cls) -> str:
    return ', '.join(f"'{member.value}'" for member in enum_cls)


class DatabaseManager:
    def __init__(self, db_path=DATABASE_PATH):
        self.db_path = db_path
        self.conn = None

    def __enter__(self):
        try:
            self.conn = sqlite3.connect(self.db_path)
            self.conn.row_factory = sqlite3.Row # Access columns by name
            self.conn.execute("PRAGMA foreign_keys = ON;") # Enforce foreign key constraints
            logger.debug(f"Database connection established to {self.db_path}")
            return self.conn
        except sqlite3.Error as e:
            logger.error(f"Error connecting to database {self.db_path}: {e}")
            raise

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.conn:
            if exc_type is not None:
                self.conn.rollback()
            self.conn.close()
            self.conn = None
            logger.debug("Database connection closed.")

    def execute_query(self, query, params=None):
        try:
            with self as conn:
                cursor = conn.cursor()
                cursor.execute(query, params or ())
                conn.commit()
                return cursor
        except sqlite3.Error as e:
            logger.error(f"Query execution failed: {query} with params {params} - {e}")
            raise

    def execute_many(self, statements):
        """Runs (query, params) pairs in a single transaction: all of them or none."""
        try:
            with self as conn:
                cursor = conn.cursor()
                for query, params in statements:
                    cursor.execute(query, params or ())
                conn.commit()
                return cursor
        except sqlite3.Error as e:
            logger.error(f"Transaction of {len(statements)} statement(s) failed and was rolled back - {e}")
            raise

    def fetch_one(self, query, params=None):
        try:
            with self as conn:
                cursor = conn.cursor()
                cursor.execute(query, params or ())
                return cursor.fetchone()
        except sqlite3.Error as e:
            logger.error(f"Fetch one failed: {query} with params {params} - {e}")
            raise

    def fetch_all(self, query, params=None):
        try:
            with self as conn:
                cursor = conn.cursor()
                cursor.execute(query, params or ())
                return cursor.fetchall()
        except sqlite3.Error as e:
            logger.error(f"Fetch all failed: {query} with params {params} - {e}")
            raise

    def create_tables(self):
        db_dir = os.path.dirname(os.path.abspath(self.db_path))
        if not os.path.exists(db_dir):
            os.makedirs(db_dir)

        queries = [
            """
            CREATE TABLE IF NOT EXISTS custom_orders (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                client_name TEXT NOT NULL,
                phone_number TEXT NOT NULL,
                total_amount TEXT NOT NULL, -- Decimal stored as text, exact
                status TEXT NOT NULL CHECK(status IN ({})),
                advance_money TEXT NOT NULL DEFAULT '0.00',
                payment_months INTEGER NOT NULL DEFAULT 1,
                start_date TEXT,
                finish_date TEXT,
                actual_delivery_date TEXT,
                description TEXT,
                category_id TEXT,
                invoice_reference TEXT,
                created_at TEXT,
                updated_at TEXT
            );
            """.format(_enum_values(OrderStatus)),
            """
            CREATE TABLE IF NOT EXISTS custom_order_installments (
                id TEXT NOT NULL, -- installment-N, unique per order
                order_id INTEGER NOT NULL,
                due_date TEXT NOT NULL,
                amount TEXT NOT NULL,
                status TEXT NOT NULL DEFAULT 'pending' CHECK(status IN ({})),
                position INTEGER NOT NULL DEFAULT 0,
                paid_date TEXT,
                paid_amount TEXT,
                method TEXT CHECK(method IN ({})),
                notes TEXT,
                PRIMARY KEY (order_id, id),
                FOREIGN KEY (order_id) REFERENCES custom_orders(id) ON DELETE CASCADE
            );
            """.format(_enum_values(InstallmentStatus), _enum_values(PaymentMethod)),
            """
            CREATE TABLE IF NOT EXISTS custom_order_payments (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                order_id INTEGER NOT NULL,
                installment_id TEXT,
                amount TEXT NOT NULL,
                method TEXT NOT NULL CHECK(method IN ({})),
                paid_date TEXT NOT NULL,
                notes TEXT,
                created_at TEXT,
                FOREIGN KEY (order_id) REFERENCES custom_orders(id) ON DELETE CASCADE
            );
            """.format(_enum_values(PaymentMethod)),
            """
            CREATE INDEX IF NOT EXISTS custom_order_installments_order_id_due_date_idx
                ON custom_order_installments (order_id, due_date);
            """,
            """
            CREATE INDEX IF NOT EXISTS custom_order_payments_order_id_idx
                ON custom_order_payments (order_id, paid_date);
            """,
        ]

        try:
            with self as conn:
                cursor = conn.cursor()
                logger.info(f"Attempting to execute {len(queries)} schema SQL statement(s).")
                for query_sql in queries:
                    cursor.execute(query_sql)
                conn.commit()
                logger.info("Database tables checked/created successfully.")
        except sqlite3.Error as e:
            logger.error(f"Failed to create database tables: {e}", exc_info=True)
            raise
