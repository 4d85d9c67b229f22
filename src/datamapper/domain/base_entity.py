"""
Base Entity Contract for Domain Layer
Attribute storage, persistence state, mapper errors and identity equality
"""
from __future__ import annotations

from typing import Any, ClassVar, Iterable, Mapping, Optional

from datamapper.domain.attributes import (
    AttributeContainer,
    AttributeDeclaration,
    normalize_key,
    resolve_declarations,
)
from datamapper.domain.convert import convert


class BaseEntity:
    """
    Base class for entities handled by a Mapper.

    Entities are defined by their identity (id), not their attributes.
    Two entities are equal if they are of the same class and share a
    non-null id; an entity without an id is only equal to itself.

    The id, persisted flag and mapper errors are set by the Mapper. Typed
    attributes are declared with ``Attribute`` descriptors on subclasses.
    """

    __attribute_declarations__: ClassVar[tuple[AttributeDeclaration, ...]] = ()

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        cls.__attribute_declarations__ = resolve_declarations(cls)

    def __init__(self, attributes: Optional[Mapping[Any, Any]] = None, **kwargs: Any) -> None:
        """
        Initialize an entity, optionally seeded with attributes.

        Args:
            attributes: Mapping of attribute name -> value
            **kwargs: More attributes, applied after ``attributes``
        """
        self._attributes = AttributeContainer()
        self._persisted = False
        self._mapper_errors: list[tuple[str, str]] = []
        if attributes:
            self.assign_attributes(attributes)
        if kwargs:
            self.assign_attributes(kwargs)

    # ------------------------------------------------------------------
    # Declarations
    # ------------------------------------------------------------------
    @classmethod
    def attribute_declarations(cls) -> tuple[AttributeDeclaration, ...]:
        return cls.__attribute_declarations__

    @classmethod
    def column_names(cls) -> list[str]:
        """Declared attribute names, ancestors first, without duplicates."""
        return [declaration.name for declaration in cls.__attribute_declarations__]

    @classmethod
    def attribute_type(cls, name: str) -> Optional[type]:
        for declaration in cls.__attribute_declarations__:
            if declaration.name == name:
                return declaration.type
        return None

    @classmethod
    def is_declared(cls, name: str) -> bool:
        return any(declaration.name == name for declaration in cls.__attribute_declarations__)

    # ------------------------------------------------------------------
    # Attributes
    # ------------------------------------------------------------------
    @property
    def id(self) -> Any:
        return self._attributes.get("id")

    @id.setter
    def id(self, value: Any) -> None:
        self._attributes["id"] = value

    @property
    def attributes(self) -> AttributeContainer:
        return self._attributes

    @attributes.setter
    def attributes(self, values: Mapping[Any, Any]) -> None:
        self.assign_attributes(values)

    def assign_attributes(self, values: Mapping[Any, Any]) -> None:
        """
        Merge ``values`` into the entity.

        Declared names (and ``id``) go through their accessors so type
        conversion and subclass overrides apply; other names are stored as-is.
        """
        for key, value in values.items():
            name = normalize_key(key)
            if name == "id" or self.is_declared(name):
                setattr(self, name, value)
            else:
                self._attributes[name] = value

    def read_attribute(self, name: str) -> Any:
        return self._attributes.get(name)

    def write_attribute(self, name: str, value: Any) -> None:
        self._attributes[name] = convert(value, self.attribute_type(name))

    # ------------------------------------------------------------------
    # Persistence state
    # ------------------------------------------------------------------
    @property
    def persisted(self) -> bool:
        return self._persisted

    def mark_as_persisted(self) -> None:
        self._persisted = True

    def mark_as_not_persisted(self) -> None:
        self._persisted = False

    # ------------------------------------------------------------------
    # Validity
    # ------------------------------------------------------------------
    @property
    def mapper_errors(self) -> list[tuple[str, str]]:
        return list(self._mapper_errors)

    @mapper_errors.setter
    def mapper_errors(self, errors: Iterable[tuple[Any, str]]) -> None:
        self._mapper_errors = [(normalize_key(field), message) for field, message in errors]

    def is_valid(self) -> bool:
        return not self._mapper_errors

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------
    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if type(other) is not type(self):
            return False
        return self.id is not None and self.id == other.id  # type: ignore[attr-defined]

    def __hash__(self) -> int:
        if self.id is None:
            return object.__hash__(self)
        return hash((type(self), self.id))

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(id={self.id!r}, attributes={self._attributes.to_mapping()!r})"
