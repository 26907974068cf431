# couture_payments/data_access/payments_repository.py

from typing import List

from couture_payments.data_access.base_repository import BaseRepository
from couture_payments.data_access.database_manager import DatabaseManager
from couture_payments.business_logic.entities.payment_entity import PaymentEntity
import logging

logger = logging.getLogger(__name__)

class PaymentsRepository(BaseRepository[PaymentEntity]):
    def __init__(self, db_manager: DatabaseManager):
        super().__init__(db_manager=db_manager,
                         model_type=PaymentEntity,
                         table_name="custom_order_payments")

    def get_by_order_id(self, order_id: int) -> List[PaymentEntity]:
        return self.find_by_criteria({"order_id": order_id}, order_by="paid_date ASC, id ASC")

    def get_by_installment(self, order_id: int, installment_id: str) -> List[PaymentEntity]:
        return self.find_by_criteria(
            {"order_id": order_id, "installment_id": installment_id},
            order_by="paid_date ASC, id ASC",
        )
