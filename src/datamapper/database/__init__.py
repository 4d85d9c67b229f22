"""
Mapper Layer
Record store contract, mappers and the repository registry
"""
from datamapper.database.record_store import IncludeStrategy, Record, RecordStore, Scope
from datamapper.database.base_mapper import Mapper
from datamapper.database.base_repository import Repository

__all__ = [
    "IncludeStrategy",
    "Mapper",
    "Record",
    "RecordStore",
    "Repository",
    "Scope",
]
