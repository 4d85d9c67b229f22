"""
Domain Layer
Plain entities, typed attributes and validation; no persistence dependencies
"""
from datamapper.domain.attributes import (
    Attribute,
    AttributeContainer,
    AttributeDeclaration,
    normalize_key,
)
from datamapper.domain.base_entity import BaseEntity
from datamapper.domain.convert import convert
from datamapper.domain.entity import Entity
from datamapper.domain.validation import Errors, Length, Presence, ValidatedEntity, Validator

__all__ = [
    "Attribute",
    "AttributeContainer",
    "AttributeDeclaration",
    "BaseEntity",
    "Entity",
    "Errors",
    "Length",
    "Presence",
    "ValidatedEntity",
    "Validator",
    "convert",
    "normalize_key",
]
