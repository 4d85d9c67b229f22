"""
SQLAlchemy Record Store
Declarative base, record store adapter, validators and sessions
"""
from datamapper.infrastructure.database.base_model import Base, RecordMixin
from datamapper.infrastructure.database.session import DatabaseSessionFactory
from datamapper.infrastructure.database.sqlalchemy_store import (
    SQLAlchemyRecord,
    SQLAlchemyRecordStore,
    SQLAlchemyScope,
)
from datamapper.infrastructure.database.validators import Uniqueness

__all__ = [
    "Base",
    "DatabaseSessionFactory",
    "RecordMixin",
    "SQLAlchemyRecord",
    "SQLAlchemyRecordStore",
    "SQLAlchemyScope",
    "Uniqueness",
]
