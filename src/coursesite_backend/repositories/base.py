"""
Base repository pattern implementation.

This module provides the base class every entity repository derives from.
Repositories own all SQL issued by the domain layer: single-row lookup by
primary key, ordered lookup by foreign key, insert returning the generated
id, and update by primary key.
"""

from typing import TypeVar, Generic, List, Optional, Dict, Any, Type
from sqlalchemy import delete, inspect, update
from sqlalchemy.orm import Session
from sqlalchemy.orm.attributes import set_committed_value
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

# Type variable for generic entity type
T = TypeVar('T')


class RepositoryError(Exception):
    """Base exception for repository operations."""
    pass


class NotFoundError(RepositoryError):
    """Exception raised when entity is not found."""
    
    def __init__(self, entity_type: str, entity_id: Any):
        super().__init__(f"{entity_type} with id {entity_id} not found")
        self.entity_type = entity_type
        self.entity_id = entity_id


class DuplicateError(RepositoryError):
    """Exception raised when attempting to create duplicate entity."""
    
    def __init__(self, entity_type: str, criteria: Dict[str, Any]):
        super().__init__(f"{entity_type} already exists with criteria: {criteria}")
        self.entity_type = entity_type
        self.criteria = criteria


class BaseRepository(Generic[T]):
    """
    Base repository providing common database operations.
    
    Writes commit immediately unless the session is inside an atomic
    scope (``db.info["atomic"]``), in which case they are only flushed and
    the scope owner commits or rolls back the whole sequence.
    """
    
    def __init__(self, db: Session, model: Type[T]):
        """
        Initialize repository with database session and model class.
        
        Args:
            db: SQLAlchemy database session
            model: SQLAlchemy model class
        """
        self.db = db
        self.model = model
    
    def get_by_id(self, entity_id: Any) -> T:
        """
        Get entity by primary key.
        
        Raises:
            NotFoundError: If entity not found
        """
        entity = self.get_by_id_optional(entity_id)
        if entity is None:
            raise NotFoundError(self.model.__name__, entity_id)
        return entity
    
    def get_by_id_optional(self, entity_id: Any) -> Optional[T]:
        """Get entity by primary key, returning None if not found."""
        if entity_id is None:
            return None
        return self.db.get(self.model, entity_id)
    
    def list_by(self, order_by: Any = None, **filters) -> List[T]:
        """
        List entities matching equality filters.
        
        Args:
            order_by: Column expression (or list of them) to sort by
            **filters: Column name / value pairs
            
        Returns:
            List of entities
        """
        query = self.db.query(self.model)
        
        for key, value in filters.items():
            query = query.filter(getattr(self.model, key) == value)
        
        if order_by is not None:
            if isinstance(order_by, (list, tuple)):
                query = query.order_by(*order_by)
            else:
                query = query.order_by(order_by)
        
        return query.all()
    
    def find_one_by(self, **criteria) -> Optional[T]:
        """Find single entity by criteria."""
        query = self.db.query(self.model)
        
        for key, value in criteria.items():
            query = query.filter(getattr(self.model, key) == value)
        
        return query.first()
    
    def exists(self, **criteria) -> bool:
        return self.find_one_by(**criteria) is not None
    
    def insert(self, **values) -> T:
        """
        Insert a new row and return it with its generated key populated.
        
        Raises:
            DuplicateError: If the row violates a unique constraint
            RepositoryError: If database operation fails
        """
        entity = self.model(**values)
        try:
            self.db.add(entity)
            self.db.flush()
            self._commit()
            return entity
        except IntegrityError as e:
            self._rollback()
            raise DuplicateError(self.model.__name__, values) from e
        except SQLAlchemyError as e:
            self._rollback()
            raise RepositoryError(f"Failed to create {self.model.__name__}: {str(e)}") from e
    
    def update(self, entity: T, **values) -> T:
        """
        Update a single row by primary key.
        
        The in-memory entity is only touched after the statement succeeded,
        so a failed update leaves it exactly as it was.
        
        Raises:
            RepositoryError: If update fails
        """
        if not values:
            return entity
        
        try:
            self.db.execute(
                update(self.model)
                .where(*self._primary_key_clause(entity))
                .values(**values)
                .execution_options(synchronize_session=False)
            )
            self._commit()
        except SQLAlchemyError as e:
            self._rollback()
            raise RepositoryError(f"Failed to update {self.model.__name__}: {str(e)}") from e
        
        for key, value in values.items():
            set_committed_value(entity, key, value)
        return entity
    
    def delete(self, entity: T) -> None:
        """
        Delete a single row.
        
        Raises:
            RepositoryError: If deletion fails
        """
        try:
            self.db.delete(entity)
            self.db.flush()
            self._commit()
        except SQLAlchemyError as e:
            self._rollback()
            raise RepositoryError(f"Failed to delete {self.model.__name__}: {str(e)}") from e
    
    def delete_where(self, **criteria) -> int:
        """
        Delete every row matching criteria, returning the number removed.
        
        Matching instances held by the session are removed from it as well.
        """
        statement = delete(self.model)
        for key, value in criteria.items():
            statement = statement.where(getattr(self.model, key) == value)
        
        try:
            result = self.db.execute(statement.execution_options(synchronize_session="evaluate"))
            self._commit()
            return result.rowcount
        except SQLAlchemyError as e:
            self._rollback()
            raise RepositoryError(f"Failed to delete {self.model.__name__}: {str(e)}") from e
    
    def _primary_key_clause(self, entity: T) -> list:
        mapper = inspect(self.model)
        return [
            column == getattr(entity, mapper.get_property_by_column(column).key)
            for column in mapper.primary_key
        ]
    
    def _atomic(self) -> bool:
        return bool(self.db.info.get("atomic"))
    
    def _commit(self) -> None:
        if self._atomic():
            self.db.flush()
        else:
            self.db.commit()
    
    def _rollback(self) -> None:
        # inside an atomic scope the owner rolls back the whole sequence
        if not self._atomic():
            self.db.rollback()
