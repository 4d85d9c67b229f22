"""
Base mapper: create/read/update/delete of plain entities through a record store.

A concrete mapper names its entity and record classes and may override
the hooks::

    class ProjectMapper(Mapper[Project]):
        entity_class = Project
        record_class = ProjectRecord
        default_includes = ("tasks",)

        def after_find(self, entity, record):
            entity.tasks = self._entities_for(record.tasks, Task)
"""
from __future__ import annotations

from typing import Any, Callable, ClassVar, Generic, Iterable, Optional, TypeVar, Union

from sqlalchemy.orm import Session

from datamapper.config import get_settings
from datamapper.database.record_store import IncludeStrategy, Record, RecordStore, Scope
from datamapper.domain.base_entity import BaseEntity
from datamapper.exceptions import EntityInvalid
from datamapper.infrastructure.database.sqlalchemy_store import SQLAlchemyRecordStore
from datamapper.infrastructure.observability.logger import get_logger, mapper_context

logger = get_logger(__name__)

TEntity = TypeVar("TEntity", bound=BaseEntity)
TResult = TypeVar("TResult")


class Mapper(Generic[TEntity]):
    """
    Maps entities of ``entity_class`` onto records of ``record_class``.

    Entities never alias records: reads build new entity instances and
    writes copy attributes onto the record. Validation errors from the
    record are copied onto ``entity.mapper_errors``.

    Attributes:
        entity_class: Entity type built by reads
        record_class: SQLAlchemy model backing the default record store
        default_includes: Relationships eager-loaded by every read
        include_strategy: How includes are loaded; None uses settings
        repository: Back-reference set by Repository.build
    """

    entity_class: ClassVar[type]
    record_class: ClassVar[Any]
    default_includes: ClassVar[tuple[str, ...]] = ()
    include_strategy: ClassVar[Optional[IncludeStrategy]] = None

    def __init__(self, session: Optional[Session] = None, *, record_store: Optional[RecordStore] = None) -> None:
        if record_store is None:
            if session is None:
                raise ValueError(f"{type(self).__name__} needs a session or a record_store")
            record_store = self.build_record_store(session)
        self.record_store: RecordStore = record_store
        self.repository: Any = None

    def build_record_store(self, session: Session) -> RecordStore:
        """Override to back the mapper with another store."""
        return SQLAlchemyRecordStore(session, self.record_class)

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------
    def create(self, entity: TEntity) -> Union[Any, bool]:
        """
        Persist a new entity.

        Returns:
            The new id, or False when the entity is invalid
        """
        record = self.record_store.new_record()
        return self._with_save_hooks(entity, record, self._insert)

    def create_or_raise(self, entity: TEntity) -> Any:
        """
        Like ``create`` but raises instead of returning False.

        Raises:
            EntityInvalid: the entity (or its record) did not validate
        """
        result = self.create(entity)
        if result is False:
            raise EntityInvalid(entity)
        return result

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------
    def find(self, id_value: Any) -> TEntity:
        """
        Raises:
            RecordNotFound: no record with that id
        """
        return self._entity_for(self.query_scope().find(id_value))  # type: ignore[return-value]

    def find_by_id(self, id_value: Any) -> Optional[TEntity]:
        if id_value is None:
            return None
        return self._entity_for(self.query_scope().find_by_id(id_value))

    def all(self) -> list[TEntity]:
        return self._entities_for(self.query_scope().all())

    def first(self) -> Optional[TEntity]:
        return self._entity_for(self.query_scope().order_by_id().first())

    def last(self) -> Optional[TEntity]:
        return self._entity_for(self.query_scope().order_by_id().last())

    def reload(self, entity: TEntity) -> TEntity:
        return self.find(entity.id)

    def count(self) -> int:
        return self.query_scope().count()

    # ------------------------------------------------------------------
    # Update
    # ------------------------------------------------------------------
    def update(self, entity: TEntity) -> bool:
        """
        Save changes to a persisted entity.

        Returns:
            True on success, False when the entity is invalid

        Raises:
            RecordNotFound: the entity has no id or its record is gone
        """
        record = self._record_for(entity)
        return self._with_save_hooks(entity, record, self._save_existing)

    def update_or_raise(self, entity: TEntity) -> bool:
        """
        Raises:
            EntityInvalid: the entity (or its record) did not validate
        """
        if not self.update(entity):
            raise EntityInvalid(entity)
        return True

    # ------------------------------------------------------------------
    # Delete
    # ------------------------------------------------------------------
    def delete(self, entity: TEntity) -> None:
        self.delete_by_id(entity.id)
        entity.mark_as_not_persisted()

    def delete_by_id(self, id_value: Any) -> None:
        self.query_scope().find(id_value).delete()
        logger.debug("Entity deleted", mapper=type(self).__name__, id=id_value)

    def delete_all(self) -> None:
        self.query_scope().delete_all()

    # ------------------------------------------------------------------
    # Query scope
    # ------------------------------------------------------------------
    def query_scope(self) -> Scope:
        """Scope used by every query; override to customize."""
        return self.record_store.query_scope(self.included_associations(), self._include_strategy())

    def included_associations(self) -> tuple[str, ...]:
        return tuple(self.default_includes)

    def _include_strategy(self) -> IncludeStrategy:
        if self.include_strategy is not None:
            return IncludeStrategy(self.include_strategy)
        return IncludeStrategy(get_settings().include_strategy)

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------
    def _with_save_hooks(
        self,
        entity: TEntity,
        record: Record,
        save: Callable[[TEntity, Record], TResult],
    ) -> TResult:
        creating = record.is_new_record()
        with mapper_context(mapper=type(self).__name__, entity=type(entity).__name__):
            self.before_save(entity, record)
            result = save(entity, record)

            if result is not False:
                self.after_save(entity, record)
                if creating:
                    self.after_create(entity, record)

        return result

    def _insert(self, entity: TEntity, record: Record) -> Union[Any, bool]:
        self._copy_attributes_to_record(record, entity)
        self._validate_record_and_copy_errors_to_entity(record, entity)

        if not entity.is_valid():
            self._log_rejected(entity)
            return False

        record.save()
        entity.mark_as_persisted()
        entity.id = record.id
        logger.debug("Entity created", id=entity.id)
        return entity.id

    def _save_existing(self, entity: TEntity, record: Record) -> bool:
        self._copy_attributes_to_record(record, entity)
        self._validate_record_and_copy_errors_to_entity(record, entity)

        if not entity.is_valid():
            self._log_rejected(entity)
            return False

        record.save()
        logger.debug("Entity updated", id=entity.id)
        return True

    def _log_rejected(self, entity: TEntity) -> None:
        logger.info("Entity rejected by validation", id=entity.id, mapper_errors=entity.mapper_errors)

    def _copy_attributes_to_record(self, record: Record, entity: TEntity) -> None:
        protected = self.record_store.protected_attributes()
        record.assign_attributes(
            {name: value for name, value in entity.attributes.items() if name not in protected}
        )

    def _copy_attributes_to_entity(self, record: Record, entity: BaseEntity) -> None:
        entity.attributes = dict(record.attributes)

    def _validate_record_and_copy_errors_to_entity(self, record: Record, entity: TEntity) -> None:
        record.is_valid()
        entity.mapper_errors = record.errors

    def _record_for(self, entity: TEntity) -> Record:
        return self.query_scope().find(entity.id)

    def _entities_for(self, records: Iterable[Any], entity_class: Optional[type] = None) -> list[Any]:
        return [self._entity_for(record, entity_class) for record in records]

    def _entity_for(self, record: Optional[Any], entity_class: Optional[type] = None) -> Optional[Any]:
        """
        Build a fresh entity from ``record``.

        ``after_find`` runs only for this mapper's own entity class, not for
        associated entities built by hooks.
        """
        if record is None:
            return None
        if not isinstance(record, Record):
            record = self.record_store.wrap(record)

        klass = entity_class or self.entity_class
        entity = klass()
        entity.id = record.id
        entity.mark_as_persisted()
        self._copy_attributes_to_entity(record, entity)

        if klass is self.entity_class:
            self.after_find(entity, record)

        return entity

    # ------------------------------------------------------------------
    # Hooks
    # ------------------------------------------------------------------
    def after_find(self, entity: TEntity, record: Any) -> None:
        """Called with each entity built by a read, e.g. to copy eager-loaded data."""

    def before_save(self, entity: TEntity, record: Record) -> None:
        """Called before attributes are copied on create and update."""

    def after_save(self, entity: TEntity, record: Record) -> None:
        """Called after a successful create or update."""

    def after_create(self, entity: TEntity, record: Record) -> None:
        """Called after a successful create, following ``after_save``."""


__all__ = ["Mapper"]
