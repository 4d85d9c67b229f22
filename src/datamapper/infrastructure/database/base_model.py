"""
SQLAlchemy Declarative Base
Record models inherit from RecordMixin and Base
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, ClassVar, Optional

from sqlalchemy import DateTime, Integer
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

if TYPE_CHECKING:
    from datamapper.domain.validation import Validator


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Project-wide SQLAlchemy declarative base."""


class RecordMixin:
    """
    Common columns and record-layer options for mapper-backed models.

    Provides:
    - id (integer, autoincrement primary key)
    - created_at / updated_at (maintained by the record on save)

    Options (class attributes):
    - __validators__: validators run by ``SQLAlchemyRecord.is_valid``
    - __protected_attributes__: names the mapper never copies onto the record
    - __mass_assignment_sanitizer__: "logger" or "strict"; None uses settings
    """

    __validators__: ClassVar[tuple["Validator", ...]] = ()
    __protected_attributes__: ClassVar[frozenset[str]] = frozenset()
    __mass_assignment_sanitizer__: ClassVar[Optional[str]] = None

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    created_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=True,
    )

    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(id={self.id})>"
