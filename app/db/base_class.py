# In app/db/base_class.py
from sqlalchemy import Column, Boolean, DateTime, MetaData
from sqlalchemy.sql import func
from sqlalchemy.orm import declarative_base

# Deterministic constraint names so SQLite batch migrations can drop them
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

Base = declarative_base(metadata=MetaData(naming_convention=NAMING_CONVENTION))


class AuditMixin:
    """Soft-delete flag and audit timestamps shared by the dispatch tables.

    Jobs, assignments, parts and photos are removed with hard deletes; the
    flag is honoured by every repository query so rows can also be retired
    without losing history.
    """
    is_deleted = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
    deleted_at = Column(DateTime(timezone=True), nullable=True)
