# couture_payments/data_access/__init__.py

from .database_manager import DatabaseManager
from .base_repository import BaseRepository

from .orders_repository import OrdersRepository
from .installments_repository import InstallmentsRepository
from .payments_repository import PaymentsRepository

