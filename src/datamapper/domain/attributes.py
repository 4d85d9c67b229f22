"""
Entity attribute storage and typed attribute declarations.

Declarations are class-body descriptors::

    class Task(Entity):
        title = Attribute()
        due_at = Attribute(datetime)

Each entity class resolves its own immutable tuple of declarations when it
is created, merging ancestor declarations (ancestors first) with its own.
"""
from __future__ import annotations

from collections.abc import Iterator, Mapping, MutableMapping
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from datamapper.domain.base_entity import BaseEntity


def normalize_key(key: Any) -> str:
    """Canonical attribute name for ``key`` (text, Enum member or other)."""
    if isinstance(key, Enum):
        return key.value if isinstance(key.value, str) else key.name
    if isinstance(key, str):
        return key.strip()
    return str(key)


class AttributeContainer(MutableMapping[str, Any]):
    """
    Attribute name -> value storage for an entity.

    Pure storage: keys are normalized, values are kept as given.
    """

    __slots__ = ("_data",)

    def __init__(self, initial: Optional[Mapping[Any, Any]] = None) -> None:
        self._data: dict[str, Any] = {}
        if initial:
            self.replace_all(initial)

    def __getitem__(self, key: Any) -> Any:
        return self._data[normalize_key(key)]

    def __setitem__(self, key: Any, value: Any) -> None:
        self._data[normalize_key(key)] = value

    def __delitem__(self, key: Any) -> None:
        del self._data[normalize_key(key)]

    def __contains__(self, key: object) -> bool:
        return normalize_key(key) in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"AttributeContainer({self._data!r})"

    def set(self, key: Any, value: Any) -> None:
        self[key] = value

    def replace_all(self, mapping: Mapping[Any, Any]) -> None:
        """Merge ``mapping`` into the container; later values win."""
        for key, value in mapping.items():
            self[key] = value

    def to_mapping(self) -> dict[str, Any]:
        """Return a copy of the stored attributes."""
        return dict(self._data)


@dataclass(frozen=True)
class AttributeDeclaration:
    name: str
    type: Optional[type] = None


class Attribute:
    """
    Declares an entity attribute, optionally typed (``int`` or ``datetime``).

    Reads and writes go through the owning entity's ``read_attribute`` and
    ``write_attribute``, so values live in its AttributeContainer.
    """

    def __init__(self, attribute_type: Optional[type] = None) -> None:
        self.type = attribute_type
        self.name: str = ""

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name

    def __get__(self, instance: Optional["BaseEntity"], owner: Optional[type] = None) -> Any:
        if instance is None:
            return self
        return instance.read_attribute(self.name)

    def __set__(self, instance: "BaseEntity", value: Any) -> None:
        instance.write_attribute(self.name, value)

    def __repr__(self) -> str:
        type_name = getattr(self.type, "__name__", None)
        return f"Attribute({self.name!r}, type={type_name})"


def resolve_declarations(cls: type) -> tuple[AttributeDeclaration, ...]:
    """
    Merge the Attribute descriptors declared on ``cls`` and its ancestors.

    A name declared again further down the hierarchy keeps its original
    position but takes the more specific type. Names shadowed by a plain
    property in a subclass stay declared.
    """
    merged: dict[str, AttributeDeclaration] = {}
    for klass in reversed(cls.__mro__):
        for name, value in vars(klass).items():
            if isinstance(value, Attribute):
                merged[name] = AttributeDeclaration(name, value.type)
    return tuple(merged.values())


__all__ = [
    "Attribute",
    "AttributeContainer",
    "AttributeDeclaration",
    "normalize_key",
    "resolve_declarations",
]
