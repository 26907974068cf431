# couture_payments/data_access/base_repository.py

from typing import Generic, TypeVar, Type, List, Optional, Dict, Any, TYPE_CHECKING, Union

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from dataclasses import fields, MISSING
import logging

from couture_payments.data_access.database_manager import DatabaseManager
from couture_payments.utils.date_utils import to_date

if TYPE_CHECKING:
    from couture_payments.business_logic.entities.base_entity import BaseEntity

logger = logging.getLogger(__name__)

T = TypeVar('T', bound='BaseEntity')


class BaseRepository(Generic[T]):
    def __init__(self, db_manager: DatabaseManager, model_type: Type[T], table_name: str):
        self.db_manager = db_manager
        self.model_type = model_type
        self._table_name = table_name
        # Fields flagged NOT_PERSISTED (e.g. attached child lists) have no column
        self._db_columns = [f.name for f in fields(model_type) if f.init and f.metadata.get("persist", True)]
        logger.debug(f"BaseRepository for {self._table_name} initialized. Columns: {self._db_columns}")

    def get_by_id(self, entity_id: int) -> Optional[T]:
        query = f"SELECT * FROM {self._table_name} WHERE id = ?"
        row = self.db_manager.fetch_one(query, (entity_id,))
        return self._entity_from_row(dict(row)) if row else None

    def get_all(self, order_by: Optional[str] = None) -> List[T]:
        query = f"SELECT * FROM {self._table_name}"
        if order_by:
            query += f" ORDER BY {order_by}"
        rows = self.db_manager.fetch_all(query)
        return [self._entity_from_row(dict(row)) for row in rows]

    def _entity_to_dict_for_db(self, entity: T) -> Dict[str, Any]:
        """Maps the entity's column fields to values sqlite can store."""
        data_to_persist = {}
        for col in self._db_columns:
            v = getattr(entity, col, None)
            processed_v = v
            if isinstance(v, Decimal): processed_v = str(v) # TEXT keeps money exact
            elif isinstance(v, Enum): processed_v = v.value
            elif isinstance(v, bool): processed_v = 1 if v else 0
            elif isinstance(v, datetime): processed_v = v.isoformat(sep=" ", timespec="seconds")
            elif isinstance(v, date): processed_v = v.isoformat()
            data_to_persist[col] = processed_v
        return data_to_persist

    def _insert_statement(self, fields_to_insert: Dict[str, Any], upsert: bool = False):
        columns = ', '.join(fields_to_insert.keys())
        placeholders = ', '.join(['?'] * len(fields_to_insert))
        verb = "INSERT OR REPLACE" if upsert else "INSERT"
        query = f"{verb} INTO {self._table_name} ({columns}) VALUES ({placeholders})"
        return query, tuple(fields_to_insert.values())

    def insert_statement(self, entity: T):
        """(query, params) inserting the entity; id is left to AUTOINCREMENT."""
        fields_to_insert = self._entity_to_dict_for_db(entity)
        fields_to_insert.pop('id', None)
        return self._insert_statement(fields_to_insert)

    def update_statement(self, entity: T):
        """(query, params) updating every column of the entity by id."""
        if getattr(entity, 'id', None) is None:
            raise ValueError(f"Entity of type {type(entity).__name__} must have an ID to be updated.")
        fields_to_update = self._entity_to_dict_for_db(entity)
        fields_to_update.pop('id', None) # id goes in the WHERE clause, not SET
        set_clause = ', '.join([f"{key} = ?" for key in fields_to_update.keys()])
        query = f"UPDATE {self._table_name} SET {set_clause} WHERE id = ?"
        return query, tuple(fields_to_update.values()) + (entity.id,)

    def add(self, entity: T) -> T:
        logger.debug(f"BaseRepository.add: Type {type(entity).__name__} to table '{self._table_name}'.")

        query, values_tuple = self.insert_statement(entity)
        logger.debug(f"BaseRepository.add: Query: {query}, Values: {values_tuple}")

        try:
            cursor = self.db_manager.execute_query(query, values_tuple)
        except Exception as e:
            logger.error(f"Error during INSERT into {self._table_name}: {e}", exc_info=True)
            raise
        entity.id = cursor.lastrowid
        logger.debug(f"BaseRepository.add: Entity ID set to {entity.id} after insert.")
        return entity

    def update(self, entity: T) -> T:
        query, values_tuple = self.update_statement(entity)
        entity_id = entity.id

        logger.debug(f"BaseRepository.update: Query: {query}, Values: {values_tuple}")
        try:
            self.db_manager.execute_query(query, values_tuple)
        except Exception as e:
            logger.error(f"Error during UPDATE for entity ID {entity_id} in table {self._table_name}: {e}", exc_info=True)
            raise
        logger.info(f"BaseRepository.update: Entity ID {entity_id} in table {self._table_name} updated.")
        return entity

    def delete(self, entity_id: int) -> bool:
        query = f"DELETE FROM {self._table_name} WHERE id = ?"
        try:
            cursor = self.db_manager.execute_query(query, (entity_id,))
        except Exception as e:
            logger.error(f"Error during DELETE of ID {entity_id} from {self._table_name}: {e}", exc_info=True)
            raise
        return cursor.rowcount > 0

    def find_by_criteria(self, criteria: Dict[str, Any], order_by: Optional[str] = None) -> List[T]:
        """
        Finds entities matching every criterion. A value may be a plain value
        (equality) or an (operator, value) tuple such as ('>=', date) or
        ('BETWEEN', (low, high)).
        """
        if not criteria:
            return self.get_all(order_by=order_by)

        conditions = []
        params = []
        for key, value in criteria.items():
            if isinstance(value, tuple) and len(value) == 2:
                operator, val = value
                if str(operator).upper() == 'BETWEEN' and isinstance(val, (list, tuple)) and len(val) == 2:
                    conditions.append(f"{key} BETWEEN ? AND ?")
                    params.extend(self._to_db_value(v) for v in val)
                else:
                    conditions.append(f"{key} {operator} ?")
                    params.append(self._to_db_value(val))
            else:
                conditions.append(f"{key} = ?")
                params.append(self._to_db_value(value))

        query = f"SELECT * FROM {self._table_name} WHERE " + " AND ".join(conditions)
        if order_by:
            query += f" ORDER BY {order_by}"

        logger.debug(f"BaseRepository.find_by_criteria: Query: {query}, Values: {tuple(params)}")
        rows = self.db_manager.fetch_all(query, tuple(params))
        return [self._entity_from_row(dict(row)) for row in rows]

    @staticmethod
    def _to_db_value(value: Any) -> Any:
        if isinstance(value, Enum): return value.value
        if isinstance(value, Decimal): return str(value)
        if isinstance(value, (datetime, date)): return value.isoformat()
        return value

    def _entity_from_row(self, row: Dict[str, Any]) -> T:
        """Builds the dataclass from a row, converting enums, decimals and dates."""
        entity_data = {}

        for f in fields(self.model_type):
            if not f.init or f.name not in self._db_columns:
                continue

            field_name = f.name
            field_type = f.type
            value_from_db = row.get(field_name)

            if value_from_db is None:
                if f.default is MISSING and f.default_factory is MISSING:
                    is_optional = getattr(field_type, '__origin__', None) is Union and type(None) in getattr(field_type, '__args__', [])
                    if not is_optional:
                        raise ValueError(
                            f"Database integrity error: NULL value found for required field '{field_name}' "
                            f"in table '{self._table_name}' for row: {row}"
                        )
                continue

            actual_type = field_type
            if getattr(field_type, '__origin__', None) is Union:
                possible_types = [arg for arg in getattr(field_type, '__args__', []) if arg is not type(None)]
                if possible_types:
                    actual_type = possible_types[0]

            try:
                if isinstance(actual_type, type) and issubclass(actual_type, Enum):
                    entity_data[field_name] = actual_type(value_from_db)
                elif actual_type == Decimal:
                    entity_data[field_name] = Decimal(str(value_from_db))
                elif actual_type == datetime and isinstance(value_from_db, str):
                    entity_data[field_name] = datetime.fromisoformat(value_from_db)
                elif actual_type == date and isinstance(value_from_db, str):
                    entity_data[field_name] = to_date(value_from_db)
                elif actual_type == bool and isinstance(value_from_db, int):
                    entity_data[field_name] = bool(value_from_db)
                else:
                    entity_data[field_name] = value_from_db
            except (ValueError, TypeError) as e:
                logger.error(f"Type conversion failed for field '{field_name}' with value '{value_from_db}' "
                             f"in table '{self._table_name}': {e}")
                raise

        return self.model_type(**entity_data)
