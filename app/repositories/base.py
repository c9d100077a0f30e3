"""Base repository class with common CRUD operations."""

import logging
from abc import ABC
from datetime import datetime, timezone
from typing import Generic, TypeVar, Type, Optional, Any
from sqlalchemy.orm import Session
from sqlalchemy.orm.util import identity_key
from sqlalchemy.exc import SQLAlchemyError

from app.db.base_class import Base

ModelType = TypeVar("ModelType", bound=Base)
CreateSchemaType = TypeVar("CreateSchemaType")
UpdateSchemaType = TypeVar("UpdateSchemaType")


def contains_pattern(value: str) -> str:
    """Build a LIKE pattern matching ``value`` literally anywhere in the column."""
    escaped = value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class BaseRepository(Generic[ModelType], ABC):
    """Base repository class providing common CRUD operations.

    Provides:
    - Standard CRUD operations (Create, Read, Update, Delete)
    - Soft delete support for models with AuditMixin
    - Structured logging for data operations

    Repositories only flush; committing is the job of
    ``BaseService.run_in_transaction``.
    """

    def __init__(self, db: Session, model: Type[ModelType], correlation_id: Optional[str] = None):
        """Initialize repository with database session and model type.

        Args:
            db: SQLAlchemy database session
            model: SQLAlchemy model class
            correlation_id: Optional request correlation ID for logging
        """
        self.db = db
        self.model = model
        self.correlation_id = correlation_id
        self.logger = logging.getLogger(self.__class__.__name__)

    def create(self, obj_in: CreateSchemaType, **kwargs: Any) -> ModelType:
        """Create a new record in the database.

        Args:
            obj_in: Pydantic model or dict with creation data
            **kwargs: Additional fields to set on the model

        Returns:
            Created model instance

        Raises:
            SQLAlchemyError: On database operation failure
        """
        try:
            if hasattr(obj_in, 'model_dump'):
                obj_data = obj_in.model_dump(exclude_unset=True)
            else:
                obj_data = dict(obj_in)

            obj_data.update(kwargs)
            db_obj = self.model(**obj_data)

            self.db.add(db_obj)
            self.db.flush()
            self.db.refresh(db_obj)

            self._log_operation("create", model=self.model.__name__, id=getattr(db_obj, 'id', None))
            return db_obj

        except SQLAlchemyError as e:
            self.logger.error(
                f"Failed to create {self.model.__name__}",
                extra={
                    "correlation_id": self.correlation_id,
                    "repository": self.__class__.__name__,
                    "error": str(e)
                }
            )
            raise

    def get_by_id(self, id: int, include_deleted: bool = False) -> Optional[ModelType]:
        """Get a record by ID.

        Args:
            id: Record ID
            include_deleted: Whether to include soft-deleted records

        Returns:
            Model instance or None if not found
        """
        query = self.db.query(self.model).filter(self.model.id == id)

        if not include_deleted and hasattr(self.model, 'is_deleted'):
            query = query.filter(self.model.is_deleted == False)

        result = query.first()
        self._log_operation("get_by_id", model=self.model.__name__, id=id, found=result is not None)
        return result

    def update(self, id: int, obj_in: UpdateSchemaType, **kwargs: Any) -> Optional[ModelType]:
        """Update a record by ID.

        Args:
            id: Record ID
            obj_in: Pydantic model or dict with update data
            **kwargs: Additional fields to update

        Returns:
            Updated model instance or None if not found

        Raises:
            SQLAlchemyError: On database operation failure
        """
        try:
            db_obj = self.get_by_id(id)
            if not db_obj:
                return None

            if hasattr(obj_in, 'model_dump'):
                update_data = obj_in.model_dump(exclude_unset=True)
            else:
                update_data = dict(obj_in)

            update_data.update(kwargs)

            for field, value in update_data.items():
                if hasattr(db_obj, field):
                    setattr(db_obj, field, value)

            self.db.flush()
            self.db.refresh(db_obj)

            self._log_operation("update", model=self.model.__name__, id=id, fields=list(update_data.keys()))
            return db_obj

        except SQLAlchemyError as e:
            self.logger.error(
                f"Failed to update {self.model.__name__} with id {id}",
                extra={
                    "correlation_id": self.correlation_id,
                    "repository": self.__class__.__name__,
                    "error": str(e)
                }
            )
            raise

    def delete(self, id: int, soft_delete: bool = True) -> bool:
        """Delete a record by ID.

        Hard deletes go through ``Session.delete`` so ORM cascades on the
        model's relationships are honoured.

        Args:
            id: Record ID
            soft_delete: Whether to perform soft delete (if model supports it)

        Returns:
            True if deleted, False if not found

        Raises:
            SQLAlchemyError: On database operation failure
        """
        try:
            db_obj = self.get_by_id(id)
            if not db_obj:
                return False

            if soft_delete and hasattr(db_obj, 'is_deleted'):
                db_obj.is_deleted = True
                if hasattr(db_obj, 'deleted_at'):
                    db_obj.deleted_at = datetime.now(timezone.utc)
                self.db.flush()
            else:
                self.db.delete(db_obj)
                self.db.flush()

            self._log_operation("delete", model=self.model.__name__, id=id, soft=soft_delete)
            return True

        except SQLAlchemyError as e:
            self.logger.error(
                f"Failed to delete {self.model.__name__} with id {id}",
                extra={
                    "correlation_id": self.correlation_id,
                    "repository": self.__class__.__name__,
                    "error": str(e)
                }
            )
            raise

    def _expire_cached(self, id: int) -> None:
        """Expire a cached instance after a bulk UPDATE bypassed the identity map.

        The next attribute access reloads the row from the database.
        """
        cached = self.db.identity_map.get(identity_key(self.model, id))
        if cached is not None:
            self.db.expire(cached)

    def _log_operation(self, operation: str, **kwargs: Any) -> None:
        """Log repository operation with structured fields.

        Args:
            operation: Name of the operation being performed
            **kwargs: Additional fields to include in log
        """
        log_data = {
            "correlation_id": self.correlation_id,
            "repository": self.__class__.__name__,
            "operation": operation,
            **kwargs
        }
        self.logger.info(f"Repository operation: {operation}", extra=log_data)
