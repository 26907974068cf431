# couture_payments/data_access/installments_repository.py

from typing import List, Optional, Sequence, Tuple
from dataclasses import replace

from couture_payments.data_access.base_repository import BaseRepository
from couture_payments.data_access.database_manager import DatabaseManager
from couture_payments.business_logic.entities.installment_entity import InstallmentEntity
import logging

logger = logging.getLogger(__name__)

_COMPOSITE_KEY_MESSAGE = ("Installments are keyed by (order_id, installment_id); "
                          "use get_installment() and save_schedule().")

class InstallmentsRepository(BaseRepository[InstallmentEntity]):
    """Installments are keyed by (order_id, id); an id alone is only unique within its order."""

    def __init__(self, db_manager: DatabaseManager):
        super().__init__(db_manager=db_manager,
                         model_type=InstallmentEntity,
                         table_name="custom_order_installments")

    # An id such as "installment-1" exists in every order, so id-only access is refused
    def get_by_id(self, entity_id):
        raise ValueError(_COMPOSITE_KEY_MESSAGE)

    def add(self, entity: InstallmentEntity):
        raise ValueError(_COMPOSITE_KEY_MESSAGE)

    def update(self, entity: InstallmentEntity):
        raise ValueError(_COMPOSITE_KEY_MESSAGE)

    def delete(self, entity_id):
        raise ValueError(_COMPOSITE_KEY_MESSAGE)

    def get_installment(self, order_id: int, installment_id: str) -> Optional[InstallmentEntity]:
        query = f"SELECT * FROM {self._table_name} WHERE order_id = ? AND id = ?"
        row = self.db_manager.fetch_one(query, (order_id, installment_id))
        return self._entity_from_row(dict(row)) if row else None

    def get_by_order_id(self, order_id: int) -> List[InstallmentEntity]:
        query = f"SELECT * FROM {self._table_name} WHERE order_id = ? ORDER BY position ASC"
        rows = self.db_manager.fetch_all(query, (order_id,))
        return [self._entity_from_row(dict(row)) for row in rows if row]

    def schedule_statements(self, order_id: int,
                            schedule: Sequence[InstallmentEntity]) -> Tuple[list, List[InstallmentEntity]]:
        """
        Upsert statements for the whole schedule, plus the installments as they
        will be stored (order_id and position filled in). Nothing is written.
        """
        statements = []
        saved = []
        for position, installment in enumerate(schedule):
            if not installment.id:
                raise ValueError(f"Installment at position {position} of order {order_id} has no id.")
            installment = replace(installment, order_id=order_id, position=position)
            statements.append(self._insert_statement(self._entity_to_dict_for_db(installment), upsert=True))
            saved.append(installment)
        return statements, saved

    def save_schedule(self, order_id: int, schedule: Sequence[InstallmentEntity]) -> List[InstallmentEntity]:
        """Upserts the whole schedule by id in one transaction."""
        statements, saved = self.schedule_statements(order_id, schedule)
        if statements:
            self.db_manager.execute_many(statements)
        logger.info(f"Saved {len(saved)} installment(s) for order ID {order_id}.")
        return saved
