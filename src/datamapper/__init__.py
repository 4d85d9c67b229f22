"""
datamapper: plain entities persisted through mappers over SQLAlchemy records.
"""
from datamapper.database import IncludeStrategy, Mapper, Repository
from datamapper.domain import (
    Attribute,
    AttributeContainer,
    BaseEntity,
    Entity,
    Length,
    Presence,
    ValidatedEntity,
    convert,
)
from datamapper.exceptions import (
    DataMapperError,
    EntityInvalid,
    MassAssignmentError,
    RecordNotDeleted,
    RecordNotFound,
    RecordNotSaved,
    UnknownAttributeType,
)

__version__ = "0.1.0"

__all__ = [
    "Attribute",
    "AttributeContainer",
    "BaseEntity",
    "DataMapperError",
    "Entity",
    "EntityInvalid",
    "IncludeStrategy",
    "Length",
    "MassAssignmentError",
    "Mapper",
    "Presence",
    "RecordNotDeleted",
    "RecordNotFound",
    "RecordNotSaved",
    "Repository",
    "UnknownAttributeType",
    "ValidatedEntity",
    "convert",
]
