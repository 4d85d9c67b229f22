"""
SQLAlchemy implementation of the record store contract.

Attribute assignments are staged on the SQLAlchemyRecord wrapper and only
applied to the ORM instance by ``save()``; a record that fails validation
never dirties the session.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Sequence, Type

from sqlalchemy import Select, delete, func, select
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Load, Session, joinedload, selectinload, subqueryload

from datamapper.config import get_settings
from datamapper.database.record_store import IncludeStrategy
from datamapper.exceptions import MassAssignmentError, RecordNotDeleted, RecordNotFound, RecordNotSaved
from datamapper.infrastructure.observability.logger import get_logger

logger = get_logger(__name__)

LOADERS: Dict[IncludeStrategy, Callable[..., Load]] = {
    IncludeStrategy.SELECTIN: selectinload,
    IncludeStrategy.JOINED: joinedload,
    IncludeStrategy.SUBQUERY: subqueryload,
}


class SQLAlchemyRecord:
    """
    A model instance plus the attribute values staged for its next save.

    Unknown attribute lookups fall through to the model, so hooks can read
    relationships directly (``record.projects``).
    """

    def __init__(self, store: "SQLAlchemyRecordStore", model: Any) -> None:
        self.store = store
        self.model = model
        self._staged: dict[str, Any] = {}
        self._errors: list[tuple[str, str]] = []

    def __getattr__(self, name: str) -> Any:
        model = self.__dict__.get("model")
        if model is None or name.startswith("_"):
            raise AttributeError(name)
        return getattr(model, name)

    def __repr__(self) -> str:
        return f"<SQLAlchemyRecord {self.model!r} staged={sorted(self._staged)}>"

    @property
    def session(self) -> Session:
        return self.store.session

    @property
    def model_class(self) -> Type[Any]:
        return type(self.model)

    @property
    def id(self) -> Any:
        return getattr(self.model, self.store.primary_key)

    @property
    def attributes(self) -> dict[str, Any]:
        values = {key: getattr(self.model, key) for key in self.store.column_keys}
        values.update(self._staged)
        return values

    @property
    def errors(self) -> list[tuple[str, str]]:
        return list(self._errors)

    def read_attribute(self, name: str) -> Any:
        if name in self._staged:
            return self._staged[name]
        return getattr(self.model, name)

    def assign_attributes(self, values: Mapping[str, Any]) -> None:
        protected = self.store.protected_attributes()
        columns = self.store.column_keys
        accepted: dict[str, Any] = {}
        rejected: list[str] = []

        for key, value in values.items():
            name = str(key)
            if name == self.store.primary_key:
                continue
            if name in protected or name not in columns:
                rejected.append(name)
                continue
            accepted[name] = value

        if rejected:
            if self.store.sanitizer == "strict":
                raise MassAssignmentError(self.store.model_name, rejected)
            logger.warning(
                "Dropped protected or unknown attributes",
                model=self.store.model_name,
                attributes=rejected,
            )
        self._staged.update(accepted)

    def is_valid(self) -> bool:
        self._errors = []
        for validator in getattr(self.model_class, "__validators__", ()):
            message = validator.validate(self, self.read_attribute(validator.field))
            if message:
                self._errors.append((validator.field, message))
        return not self._errors

    def is_new_record(self) -> bool:
        return sa_inspect(self.model).key is None

    def save(self) -> None:
        creating = self.is_new_record()
        for name, value in self._staged.items():
            setattr(self.model, name, value)
        self._touch_timestamps(creating)

        try:
            if creating:
                self.session.add(self.model)
            self.session.flush()
        except SQLAlchemyError as e:
            logger.error("Failed to save record", model=self.store.model_name, error=str(e))
            raise RecordNotSaved(
                f"Failed to save {self.store.model_name}: {e}",
                details={"model": self.store.model_name},
            ) from e

        self._staged.clear()
        logger.debug("Record saved", model=self.store.model_name, id=self.id, created=creating)

    def delete(self) -> None:
        id_value = self.id
        try:
            self.session.delete(self.model)
            self.session.flush()
        except SQLAlchemyError as e:
            logger.error("Failed to delete record", model=self.store.model_name, id=id_value, error=str(e))
            raise RecordNotDeleted(
                f"Failed to delete {self.store.model_name} with id={id_value!r}: {e}",
                details={"model": self.store.model_name, "id": id_value},
            ) from e
        logger.debug("Record deleted", model=self.store.model_name, id=id_value)

    def _touch_timestamps(self, creating: bool) -> None:
        now = datetime.now(timezone.utc)
        columns = self.store.column_keys
        if creating and "created_at" in columns and getattr(self.model, "created_at") is None:
            self.model.created_at = now
        if "updated_at" in columns:
            self.model.updated_at = now


class SQLAlchemyScope:
    """Query over one model class with loader options; immutable."""

    def __init__(
        self,
        store: "SQLAlchemyRecordStore",
        options: Sequence[Load] = (),
        ordered: bool = False,
    ) -> None:
        self.store = store
        self.options = tuple(options)
        self.ordered = ordered

    @property
    def _pk_column(self) -> Any:
        return getattr(self.store.record_class, self.store.primary_key)

    def _select(self) -> Select:
        stmt = select(self.store.record_class).options(*self.options)
        if self.ordered:
            stmt = stmt.order_by(self._pk_column.asc())
        return stmt

    def _one(self, stmt: Select) -> Optional[SQLAlchemyRecord]:
        model = self.store.session.scalars(stmt).unique().first()
        return self.store.wrap(model) if model is not None else None

    def all(self) -> list[SQLAlchemyRecord]:
        models = self.store.session.scalars(self._select()).unique().all()
        return [self.store.wrap(model) for model in models]

    def order_by_id(self) -> "SQLAlchemyScope":
        return SQLAlchemyScope(self.store, self.options, ordered=True)

    def first(self) -> Optional[SQLAlchemyRecord]:
        stmt = select(self.store.record_class).options(*self.options)
        return self._one(stmt.order_by(self._pk_column.asc()).limit(1))

    def last(self) -> Optional[SQLAlchemyRecord]:
        stmt = select(self.store.record_class).options(*self.options)
        return self._one(stmt.order_by(self._pk_column.desc()).limit(1))

    def count(self) -> int:
        stmt = select(func.count()).select_from(self.store.record_class)
        return self.store.session.scalar(stmt) or 0

    def delete_all(self) -> int:
        result = self.store.session.execute(delete(self.store.record_class))
        logger.debug("Deleted all records", model=self.store.model_name, count=result.rowcount)
        return result.rowcount

    def find(self, id_value: Any) -> SQLAlchemyRecord:
        record = self.find_by_id(id_value)
        if record is None:
            raise RecordNotFound(self.store.model_name, id_value)
        return record

    def find_by_id(self, id_value: Any) -> Optional[SQLAlchemyRecord]:
        coerced = self.store.coerce_id(id_value)
        if coerced is None:
            return None
        return self._one(self._select().where(self._pk_column == coerced))


class SQLAlchemyRecordStore:
    """
    Record store for one declarative model class, bound to a Session.

    The mass-assignment sanitizer is, in order of precedence: the
    ``sanitizer`` argument, the model's ``__mass_assignment_sanitizer__``,
    then ``Settings.mass_assignment_sanitizer``.
    """

    def __init__(self, session: Session, record_class: Type[Any], *, sanitizer: Optional[str] = None) -> None:
        self.session = session
        self.record_class = record_class
        self.sanitizer = (
            sanitizer
            or getattr(record_class, "__mass_assignment_sanitizer__", None)
            or get_settings().mass_assignment_sanitizer
        )

        mapper = sa_inspect(record_class)
        if len(mapper.primary_key) != 1:
            raise ValueError(f"{record_class.__name__} must have a single-column primary key")
        self._pk_column = mapper.primary_key[0]
        self.primary_key: str = mapper.get_property_by_column(self._pk_column).key
        self.column_keys: frozenset[str] = frozenset(attr.key for attr in mapper.column_attrs)

    @property
    def model_name(self) -> str:
        return self.record_class.__name__

    def wrap(self, model: Any) -> SQLAlchemyRecord:
        if type(model) is self.record_class:
            return SQLAlchemyRecord(self, model)
        # Associated rows get a store of their own model class
        return SQLAlchemyRecordStore(self.session, type(model), sanitizer=self.sanitizer).wrap(model)

    def new_record(self) -> SQLAlchemyRecord:
        return self.wrap(self.record_class())

    def find(self, id_value: Any) -> SQLAlchemyRecord:
        return self.query_scope().find(id_value)

    def find_by_id(self, id_value: Any) -> Optional[SQLAlchemyRecord]:
        return self.query_scope().find_by_id(id_value)

    def query_scope(
        self,
        includes: Iterable[str] = (),
        strategy: IncludeStrategy = IncludeStrategy.SELECTIN,
    ) -> SQLAlchemyScope:
        loader = LOADERS[IncludeStrategy(strategy)]
        return SQLAlchemyScope(self, [self._load_option(loader, path) for path in includes])

    def protected_attributes(self) -> frozenset[str]:
        return frozenset(getattr(self.record_class, "__protected_attributes__", ()))

    def coerce_id(self, id_value: Any) -> Any:
        """Convert text ids to the primary key's Python type; None when impossible."""
        if not isinstance(id_value, str):
            return id_value
        try:
            python_type = self._pk_column.type.python_type
        except NotImplementedError:
            return id_value
        try:
            return python_type(id_value.strip())
        except (TypeError, ValueError):
            return None

    def _load_option(self, loader: Callable[..., Load], path: str) -> Load:
        """Build a loader option for ``"projects"`` or a dotted ``"projects.tasks"`` path."""
        owner = self.record_class
        option: Optional[Load] = None
        for name in path.split("."):
            attribute = getattr(owner, name)
            option = loader(attribute) if option is None else getattr(option, loader.__name__)(attribute)
            owner = attribute.property.mapper.class_
        if option is None:
            raise ValueError(f"Empty include path for {self.model_name}")
        return option


__all__ = ["SQLAlchemyRecord", "SQLAlchemyRecordStore", "SQLAlchemyScope", "LOADERS"]
