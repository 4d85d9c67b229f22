import pytest

from datamapper import Repository


class ProjectMapper:
    repository = None

    def __init__(self):
        self.emptied = False

    def delete_all(self):
        self.emptied = True


class BrokenMapper(ProjectMapper):
    def delete_all(self):
        raise RuntimeError("boom")


def test_build_exposes_mappers_by_name():
    mapper = ProjectMapper()
    repository = Repository.build(projects=mapper)
    assert isinstance(repository, Repository)
    assert repository.projects is mapper
    assert repository["projects"] is mapper
    assert "projects" in repository
    assert repository.names() == ["projects"]


def test_build_accepts_a_mapping():
    mapper = ProjectMapper()
    repository = Repository.build({"projects": mapper})
    assert repository.projects is mapper
    assert len(repository) == 1


def test_mappers_are_memoized():
    repository = Repository.build(projects=ProjectMapper())
    assert repository.projects is repository.projects


def test_mappers_reference_their_repository():
    mapper = ProjectMapper()
    repository = Repository.build(projects=mapper)
    assert mapper.repository is repository


def test_repositories_do_not_share_mappers():
    first, second = ProjectMapper(), ProjectMapper()
    repository1 = Repository.build(projects=first)
    repository2 = Repository.build(projects=second)
    assert repository1.projects is first
    assert repository2.projects is second


def test_unknown_mapper_is_an_attribute_error():
    repository = Repository.build(projects=ProjectMapper())
    with pytest.raises(AttributeError):
        repository.users


@pytest.mark.parametrize("name", ["delete_all", "not an identifier", "build"])
def test_invalid_names_are_rejected(name):
    with pytest.raises(ValueError):
        Repository.build({name: ProjectMapper()})


def test_delete_all_empties_every_mapper():
    projects, users = ProjectMapper(), ProjectMapper()
    repository = Repository.build(projects=projects, users=users)
    repository.delete_all()
    assert projects.emptied and users.emptied
    assert [name for name, _ in repository] == ["projects", "users"]


def test_delete_all_stops_at_first_failure():
    users = ProjectMapper()
    repository = Repository.build(projects=BrokenMapper(), users=users)
    with pytest.raises(RuntimeError):
        repository.delete_all()
    assert not users.emptied
