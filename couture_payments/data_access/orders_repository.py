# couture_payments/data_access/orders_repository.py

from typing import List
from datetime import date

from couture_payments.data_access.base_repository import BaseRepository
from couture_payments.data_access.database_manager import DatabaseManager
from couture_payments.business_logic.entities.order_entity import OrderEntity
from couture_payments.constants import OrderStatus
import logging

logger = logging.getLogger(__name__)

class OrdersRepository(BaseRepository[OrderEntity]):
    def __init__(self, db_manager: DatabaseManager):
        super().__init__(db_manager=db_manager,
                         model_type=OrderEntity,
                         table_name="custom_orders")

    def get_by_status(self, status: OrderStatus) -> List[OrderEntity]:
        return self.find_by_criteria({"status": status}, order_by="created_at DESC, id DESC")

    def get_starting_between(self, status: OrderStatus, start: date, end: date) -> List[OrderEntity]:
        return self.find_by_criteria(
            {"status": status, "start_date": ("BETWEEN", (start, end))},
            order_by="start_date ASC",
        )
