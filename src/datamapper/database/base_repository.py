"""
Repository: a named registry of mappers.

    repository = Repository.build(projects=ProjectMapper(session), users=UserMapper(session))
    repository.projects.find(1)
"""
from __future__ import annotations

from typing import Any, Iterator, Mapping, Optional

from datamapper.domain.attributes import normalize_key
from datamapper.infrastructure.observability.logger import get_logger

logger = get_logger(__name__)


class Repository:
    """
    Mappers exposed by name, each holding a back-reference to this registry.

    Built once per application context. Repositories never share mappers
    or state with each other.
    """

    def __init__(self) -> None:
        self._mappers: dict[str, Any] = {}

    @classmethod
    def build(cls, mappers: Optional[Mapping[Any, Any]] = None, **named: Any) -> "Repository":
        """
        Build a repository from ``name -> mapper`` pairs.

        Raises:
            ValueError: a name is not an identifier or shadows a Repository attribute
        """
        repository = cls()
        for name, mapper in {**dict(mappers or {}), **named}.items():
            repository._register(normalize_key(name), mapper)
        return repository

    def _register(self, name: str, mapper: Any) -> None:
        if not name.isidentifier() or hasattr(type(self), name):
            raise ValueError(f"Invalid mapper name for a repository: {name!r}")
        mapper.repository = self
        self._mappers[name] = mapper

    def __getattr__(self, name: str) -> Any:
        mappers = self.__dict__.get("_mappers", {})
        try:
            return mappers[name]
        except KeyError:
            raise AttributeError(f"{type(self).__name__} has no mapper named {name!r}") from None

    def __getitem__(self, name: Any) -> Any:
        return self._mappers[normalize_key(name)]

    def __contains__(self, name: object) -> bool:
        return normalize_key(name) in self._mappers

    def __iter__(self) -> Iterator[tuple[str, Any]]:
        return iter(list(self._mappers.items()))

    def __len__(self) -> int:
        return len(self._mappers)

    def names(self) -> list[str]:
        return list(self._mappers)

    def delete_all(self) -> None:
        """Call ``delete_all`` on every mapper; stops at the first failure."""
        for name, mapper in self._mappers.items():
            mapper.delete_all()
            logger.debug("Mapper emptied", mapper=name)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({', '.join(self._mappers)})"


__all__ = ["Repository"]
