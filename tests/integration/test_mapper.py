import uuid

import pytest

from datamapper import EntityInvalid, MassAssignmentError, RecordNotFound
from datamapper.infrastructure.database import SQLAlchemyRecordStore
from sample_app import Project, ProjectMapper, ProjectRecord, Token, TokenMapper


class RecordingProjectMapper(ProjectMapper):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.calls = []

    def before_save(self, entity, record):
        self.calls.append(("before_save", entity, record))

    def after_save(self, entity, record):
        self.calls.append(("after_save", entity, record))

    def after_create(self, entity, record):
        self.calls.append(("after_create", entity, record))

    def after_find(self, entity, record):
        self.calls.append(("after_find", entity, record))

    def hooks(self):
        return [name for name, _, _ in self.calls]


def invalid(entity):
    entity.is_valid = lambda: False
    return entity


def test_repository_can_be_set(mapper):
    mapper.repository = "repository"
    assert mapper.repository == "repository"


# ---- create -----------------------------------------------------------------
def test_create_sets_sequential_ids(mapper, build_valid_entity):
    first = build_valid_entity()
    assert first.id is None
    mapper.create(first)
    assert first.id > 0

    second = build_valid_entity()
    mapper.create(second)
    assert second.id == first.id + 1


def test_create_marks_persisted_and_returns_the_id(mapper, build_valid_entity):
    entity = build_valid_entity()
    assert not entity.persisted
    id_value = mapper.create(entity)
    assert entity.persisted
    assert isinstance(id_value, int)
    assert id_value == entity.id


def test_create_does_not_store_by_reference(mapper, build_valid_entity):
    entity = build_valid_entity()
    mapper.create(entity)
    assert mapper.last() is not entity
    assert mapper.last().attributes["name"] == "test"


def test_create_validates_the_entity(mapper):
    assert mapper.create(invalid(Project())) is False
    assert mapper.count() == 0


def test_create_calls_save_hooks_with_entity_and_record(session, build_valid_entity):
    mapper = RecordingProjectMapper(session)
    entity = build_valid_entity()
    mapper.create(entity)

    assert mapper.hooks() == ["before_save", "after_save", "after_create"]
    records = {id(record) for _, _, record in mapper.calls}
    assert len(records) == 1
    assert all(hook_entity is entity for _, hook_entity, _ in mapper.calls)


def test_failed_create_skips_after_hooks(session):
    mapper = RecordingProjectMapper(session)
    mapper.create(invalid(Project()))
    assert mapper.hooks() == ["before_save"]


def test_create_skips_protected_attributes(mapper, build_entity):
    entity = build_entity(visible=True, name="Joe")
    mapper.create(entity)

    stored = mapper.find(entity.id)
    assert stored.attributes["visible"] is None
    assert stored.attributes["name"] == "Joe"


def test_strict_records_reject_protected_attributes(mapper, build_entity, monkeypatch):
    monkeypatch.setattr(
        mapper,
        "_copy_attributes_to_record",
        lambda record, entity: record.assign_attributes(dict(entity.attributes)),
    )
    with pytest.raises(MassAssignmentError) as excinfo:
        mapper.create(build_entity(visible=True, name="Joe"))
    assert excinfo.value.attributes == ["visible"]
    assert mapper.count() == 0


def test_strict_records_reject_unknown_attributes(mapper, build_entity):
    with pytest.raises(MassAssignmentError):
        mapper.create(build_entity(name="Joe", nickname="jo"))


def test_logger_sanitizer_drops_unknown_attributes(session, build_entity):
    mapper = ProjectMapper(record_store=SQLAlchemyRecordStore(session, ProjectRecord, sanitizer="logger"))
    entity = build_entity(name="Joe", nickname="jo")
    assert mapper.create(entity)
    assert "nickname" not in mapper.find(entity.id).attributes


def test_record_errors_are_copied_to_the_entity(mapper, build_entity):
    old_entity = build_entity(email="joe@example.com")
    mapper.create(old_entity)
    assert old_entity.mapper_errors == []

    new_entity = build_entity(email="joe@example.com")
    assert mapper.create(new_entity) is False
    assert new_entity.mapper_errors == [("email", "has already been taken")]
    assert not new_entity.persisted


def test_create_can_be_retried_after_errors(mapper, build_entity):
    mapper.create(build_entity(email="joe@example.com"))

    new_entity = build_entity(email="joe@example.com")
    mapper.create(new_entity)
    assert new_entity.mapper_errors == [("email", "has already been taken")]

    new_entity.attributes = {"email": "something.else@example.com"}
    mapper.create(new_entity)
    assert new_entity.is_valid()
    assert new_entity.persisted


def test_create_or_raise(mapper, build_valid_entity):
    entity = build_valid_entity()
    mapper.create_or_raise(entity)
    assert entity.persisted

    with pytest.raises(EntityInvalid):
        mapper.create_or_raise(invalid(Project()))


# ---- find -------------------------------------------------------------------
def test_find_returns_a_matching_entity(mapper, build_valid_entity):
    entity = build_valid_entity()
    mapper.create(entity)

    found = mapper.find(entity.id)
    assert isinstance(found, Project)
    assert found.id == entity.id
    assert found.attributes["name"] == "test"
    assert found.persisted


def test_find_supports_string_ids(mapper, build_valid_entity):
    entity = build_valid_entity()
    mapper.create(entity)
    assert mapper.find(str(entity.id)).id == entity.id
    assert mapper.find_by_id(f" {entity.id} ").id == entity.id


def test_find_returns_new_instances(mapper, build_valid_entity):
    entity = build_valid_entity()
    mapper.create(entity)
    assert mapper.find(entity.id) is not entity
    assert mapper.find(entity.id) is not mapper.find(entity.id)
    assert mapper.find(entity.id) == entity


def test_find_calls_after_find(session, build_valid_entity):
    mapper = RecordingProjectMapper(session)
    entity = build_valid_entity()
    mapper.create(entity)
    mapper.calls.clear()

    found = mapper.find(entity.id)
    assert mapper.hooks() == ["after_find"]
    assert mapper.calls[0][1] is found


def test_find_raises_when_missing(mapper):
    with pytest.raises(RecordNotFound):
        mapper.find(-1)
    with pytest.raises(LookupError):
        mapper.find("garbage")


def test_find_by_id(mapper, build_valid_entity):
    entity = build_valid_entity()
    mapper.create(entity)
    found = mapper.find_by_id(entity.id)
    assert found.attributes["name"] == "test"
    assert found is not mapper.find_by_id(entity.id)


def test_find_by_id_returns_none_when_missing(mapper):
    assert mapper.find_by_id(-1) is None
    assert mapper.find_by_id(None) is None
    assert mapper.find_by_id("garbage") is None


# ---- all / first / last / reload / count ------------------------------------
def test_all(mapper, build_valid_entity):
    first, second = build_valid_entity(), build_valid_entity()
    mapper.create(first)
    mapper.create(second)

    entities = mapper.all()
    assert {entity.id for entity in entities} == {first.id, second.id}
    assert all(isinstance(entity, Project) for entity in entities)
    assert mapper.all()[0] is not mapper.all()[0]


def test_first_and_last(mapper, build_valid_entity):
    assert mapper.first() is None
    assert mapper.last() is None

    first, last = build_valid_entity(), build_valid_entity()
    mapper.create(first)
    mapper.create(last)
    assert mapper.first().id == first.id
    assert mapper.last().id == last.id
    assert mapper.first() is not mapper.first()


def test_reload(mapper, build_entity):
    entity = build_entity(email="foo@example.com")
    mapper.create(entity)
    entity.attributes["email"] = "test@example.com"

    reloaded = mapper.reload(entity)
    assert reloaded is not entity
    assert reloaded.attributes["email"] == "foo@example.com"


def test_count(mapper, build_valid_entity):
    mapper.create(build_valid_entity())
    mapper.create(build_valid_entity())
    assert mapper.count() == 2


# ---- update -----------------------------------------------------------------
def test_update(mapper, build_valid_entity):
    entity = build_valid_entity()
    mapper.create(entity)

    entity.attributes = {"name": "Updated"}
    assert mapper.last().attributes["name"] == "test"

    assert mapper.update(entity) is True
    assert mapper.last().id == entity.id
    assert mapper.last().attributes["name"] == "Updated"


def test_invalid_update_leaves_the_row_unchanged(mapper, build_valid_entity):
    entity = build_valid_entity()
    mapper.create(entity)

    entity.attributes = {"name": "Changed"}
    assert mapper.update(invalid(entity)) is False
    assert mapper.last().attributes["name"] == "test"


def test_update_hooks(session, build_valid_entity):
    mapper = RecordingProjectMapper(session)
    entity = build_valid_entity()
    mapper.create(entity)
    mapper.calls.clear()

    mapper.update(entity)
    assert mapper.hooks() == ["before_save", "after_save"]


def test_update_copies_record_errors(mapper, build_entity):
    mapper.create(build_entity(email="joe@example.com"))
    entity = build_entity(name="other")
    mapper.create(entity)

    entity.attributes = {"email": "joe@example.com"}
    assert mapper.update(entity) is False
    assert entity.mapper_errors == [("email", "has already been taken")]

    entity.attributes = {"email": "jane@example.com"}
    assert mapper.update(entity) is True
    assert entity.mapper_errors == []


def test_update_keeps_own_unique_value(mapper, build_entity):
    entity = build_entity(email="joe@example.com")
    mapper.create(entity)
    entity.attributes = {"name": "Joe"}
    assert mapper.update(entity) is True


def test_update_without_id_raises(mapper, build_valid_entity):
    with pytest.raises(RecordNotFound):
        mapper.update(build_valid_entity())


def test_update_of_deleted_entity_raises(mapper, build_valid_entity):
    entity = build_valid_entity()
    mapper.create(entity)
    mapper.delete_all()
    with pytest.raises(RecordNotFound):
        mapper.update(entity)


def test_update_skips_protected_attributes(mapper, build_entity):
    entity = build_entity(name="Joe")
    mapper.create(entity)

    entity.attributes = {"visible": True, "name": "Joey"}
    mapper.update(entity)
    stored = mapper.find(entity.id)
    assert stored.attributes["visible"] is None
    assert stored.attributes["name"] == "Joey"


def test_update_or_raise(mapper, build_valid_entity):
    entity = build_valid_entity()
    mapper.create(entity)
    assert mapper.update_or_raise(entity) is True

    with pytest.raises(EntityInvalid):
        mapper.update_or_raise(invalid(entity))


# ---- delete -----------------------------------------------------------------
def test_delete(mapper, build_valid_entity):
    entity = build_valid_entity()
    mapper.create(entity)
    mapper.delete(entity)

    assert not entity.persisted
    assert mapper.find_by_id(entity.id) is None
    assert mapper.count() == 0


def test_delete_without_a_row_raises(mapper, build_valid_entity):
    with pytest.raises(RecordNotFound):
        mapper.delete(build_valid_entity())

    entity = build_valid_entity()
    entity.id = -1
    with pytest.raises(RecordNotFound):
        mapper.delete(entity)


def test_delete_by_id(mapper, build_valid_entity):
    entity = build_valid_entity()
    mapper.create(entity)
    mapper.delete_by_id(entity.id)
    assert mapper.count() == 0


def test_delete_all(mapper, build_valid_entity):
    mapper.create(build_valid_entity())
    mapper.create(build_valid_entity())
    mapper.delete_all()
    assert mapper.count() == 0
    assert mapper.all() == []


# ---- opaque primary keys ----------------------------------------------------
def test_uuid_primary_keys_reach_the_entity(session):
    mapper = TokenMapper(session)
    token = Token(label="api")

    token_id = mapper.create_or_raise(token)
    assert isinstance(token_id, uuid.UUID)
    assert token.id == token_id
    assert token.persisted

    found = mapper.find(str(token_id))
    assert found == token
    assert found.id == token_id
    assert found.label == "api"

    token.label = "web"
    assert mapper.update(token) is True
    assert mapper.find_by_id(token_id).label == "web"
