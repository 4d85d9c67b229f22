import pytest

from datamapper.infrastructure.database import DatabaseSessionFactory
from sample_app import Project, ProjectMapper


@pytest.fixture
def database():
    factory = DatabaseSessionFactory("sqlite+pysqlite:///:memory:")
    factory.create_all()
    yield factory
    factory.dispose()


@pytest.fixture
def session(database):
    session = database.create_session()
    yield session
    session.rollback()
    session.close()


@pytest.fixture
def mapper(session):
    return ProjectMapper(session)


@pytest.fixture
def build_entity():
    def _build(**attributes):
        entity = Project()
        entity.attributes = attributes
        return entity
    return _build


@pytest.fixture
def build_valid_entity(build_entity):
    def _build():
        return build_entity(name="test")
    return _build
