"""
Record Store Interface (Protocol)
Contract the Mapper consumes; implemented by the SQLAlchemy adapter
"""
from __future__ import annotations

from enum import Enum
from typing import Any, Iterable, Mapping, Optional, Protocol, Sequence, runtime_checkable


class IncludeStrategy(str, Enum):
    """How eager-load hints are applied to a query scope."""

    SELECTIN = "selectin"  # one extra query per relationship
    JOINED = "joined"
    SUBQUERY = "subquery"


@runtime_checkable
class Record(Protocol):
    """A store-owned row, new or persisted."""

    @property
    def id(self) -> Any: ...

    @property
    def attributes(self) -> dict[str, Any]:
        """Current attribute values, staged values included."""
        ...

    @property
    def errors(self) -> list[tuple[str, str]]:
        """Validation errors from the last ``is_valid`` call, in order."""
        ...

    def assign_attributes(self, values: Mapping[str, Any]) -> None:
        """
        Stage attribute values.

        Raises:
            MassAssignmentError: protected or unknown keys under a strict sanitizer
        """
        ...

    def is_valid(self) -> bool: ...

    def is_new_record(self) -> bool: ...

    def save(self) -> None:
        """
        Persist staged values.

        Raises:
            RecordNotSaved: the underlying write failed
        """
        ...

    def delete(self) -> None: ...


class Scope(Protocol):
    """A query over one record type, with eager-load options applied."""

    def all(self) -> Sequence[Record]: ...

    def order_by_id(self) -> "Scope": ...

    def first(self) -> Optional[Record]: ...

    def last(self) -> Optional[Record]: ...

    def count(self) -> int: ...

    def delete_all(self) -> int: ...

    def find(self, id_value: Any) -> Record:
        """
        Raises:
            RecordNotFound: no row with that id
        """
        ...

    def find_by_id(self, id_value: Any) -> Optional[Record]: ...


class RecordStore(Protocol):
    """Factory and finder for the records of one record type."""

    def new_record(self) -> Record: ...

    def wrap(self, row: Any) -> Record:
        """Record for a store-native row, e.g. an eager-loaded association."""
        ...

    def find(self, id_value: Any) -> Record: ...

    def find_by_id(self, id_value: Any) -> Optional[Record]: ...

    def query_scope(
        self,
        includes: Iterable[str] = (),
        strategy: IncludeStrategy = IncludeStrategy.SELECTIN,
    ) -> Scope: ...

    def protected_attributes(self) -> frozenset[str]: ...


__all__ = ["IncludeStrategy", "Record", "RecordStore", "Scope"]
