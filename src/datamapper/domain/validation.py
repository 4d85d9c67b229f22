"""
Domain-level validation for entities.

Validators are small objects bound to one field. They are shared by
entities (``ValidatedEntity.validators``) and records
(``__validators__`` on SQLAlchemy models).
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator, Sized
from typing import Any, ClassVar, Optional

from datamapper.domain.base_entity import BaseEntity


class Errors:
    """Field -> messages collection, in insertion order."""

    def __init__(self) -> None:
        self._messages: dict[str, list[str]] = {}

    def add(self, field: str, message: str) -> None:
        messages = self._messages.setdefault(field, [])
        if message not in messages:
            messages.append(message)

    def __getitem__(self, field: str) -> list[str]:
        return list(self._messages.get(field, []))

    def __contains__(self, field: object) -> bool:
        return field in self._messages

    def __iter__(self) -> Iterator[tuple[str, str]]:
        for field, messages in self._messages.items():
            for message in messages:
                yield field, message

    def __len__(self) -> int:
        return sum(len(messages) for messages in self._messages.values())

    def __bool__(self) -> bool:
        return bool(self._messages)

    def discard(self, field: str, message: str) -> None:
        messages = self._messages.get(field)
        if messages and message in messages:
            messages.remove(message)
            if not messages:
                del self._messages[field]

    def clear(self) -> None:
        self._messages.clear()

    def full_messages(self) -> list[str]:
        return [f"{field} {message}" for field, message in self]

    def __repr__(self) -> str:
        return f"Errors({self._messages!r})"


class Validator(ABC):
    """Checks one field; returns an error message or None."""

    default_message: ClassVar[str] = "is invalid"

    def __init__(self, field: str, *, message: Optional[str] = None) -> None:
        self.field = field
        self.message = message or self.default_message

    @abstractmethod
    def validate(self, target: Any, value: Any) -> Optional[str]:
        """
        Validate ``value`` read from ``target``.

        Returns:
            The error message, or None when the value is acceptable
        """
        ...

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.field!r})"


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, Sized):
        return len(value) == 0
    return False


class Presence(Validator):
    default_message = "can't be blank"

    def validate(self, target: Any, value: Any) -> Optional[str]:
        return self.message if is_blank(value) else None


class Length(Validator):
    def __init__(
        self,
        field: str,
        *,
        minimum: Optional[int] = None,
        maximum: Optional[int] = None,
        allow_none: bool = False,
        message: Optional[str] = None,
    ) -> None:
        super().__init__(field, message=message)
        self.minimum = minimum
        self.maximum = maximum
        self.allow_none = allow_none
        self._custom_message = message

    def validate(self, target: Any, value: Any) -> Optional[str]:
        if value is None:
            return None if self.allow_none else (self._custom_message or "can't be blank")
        size = len(value) if isinstance(value, Sized) else len(str(value))
        if self.minimum is not None and size < self.minimum:
            return self._custom_message or f"is too short (minimum is {self.minimum} characters)"
        if self.maximum is not None and size > self.maximum:
            return self._custom_message or f"is too long (maximum is {self.maximum} characters)"
        return None


class ValidatedEntity(BaseEntity):
    """
    Entity with its own validation on top of the mapper errors.

    Declare ``validators`` on the class and/or override ``validate`` to add
    messages to ``self.errors``. Mapper errors are merged into ``errors``.
    """

    validators: ClassVar[tuple[Validator, ...]] = ()

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        self.errors = Errors()
        super().__init__(*args, **kwargs)

    @BaseEntity.mapper_errors.setter
    def mapper_errors(self, errors: Any) -> None:
        for field, message in self.mapper_errors:
            self.errors.discard(field, message)
        BaseEntity.mapper_errors.fset(self, errors)  # type: ignore[attr-defined]
        for field, message in self.mapper_errors:
            self.errors.add(field, message)

    def validate(self) -> None:
        """Hook for custom rules; add messages with ``self.errors.add``."""

    def is_valid(self) -> bool:
        self.errors.clear()
        for validator in type(self).validators:
            message = validator.validate(self, getattr(self, validator.field, None))
            if message:
                self.errors.add(validator.field, message)
        self.validate()
        for field, message in self.mapper_errors:
            self.errors.add(field, message)
        return not self.errors


__all__ = [
    "Errors",
    "Length",
    "Presence",
    "ValidatedEntity",
    "Validator",
    "is_blank",
]
