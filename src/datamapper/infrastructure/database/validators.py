"""
Record validators that need the database.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Any, Iterable, Optional

from sqlalchemy import func, select

from datamapper.domain.validation import Validator

if TYPE_CHECKING:
    from datamapper.infrastructure.database.sqlalchemy_store import SQLAlchemyRecord


class Uniqueness(Validator):
    """No other row may hold the same value (optionally within ``scope`` columns)."""

    default_message = "has already been taken"

    def __init__(
        self,
        field: str,
        *,
        allow_none: bool = False,
        scope: Iterable[str] = (),
        message: Optional[str] = None,
    ) -> None:
        super().__init__(field, message=message)
        self.allow_none = allow_none
        self.scope = tuple(scope)

    def validate(self, target: "SQLAlchemyRecord", value: Any) -> Optional[str]:
        if value is None and self.allow_none:
            return None

        model_class = target.model_class
        stmt = (
            select(func.count())
            .select_from(model_class)
            .where(getattr(model_class, self.field) == value)
        )
        for column in self.scope:
            stmt = stmt.where(getattr(model_class, column) == target.read_attribute(column))
        if not target.is_new_record():
            stmt = stmt.where(getattr(model_class, target.store.primary_key) != target.id)

        with target.session.no_autoflush:
            taken = target.session.scalar(stmt) or 0
        return self.message if taken else None


__all__ = ["Uniqueness"]
